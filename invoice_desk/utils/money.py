from __future__ import annotations

import re
from datetime import datetime, timedelta
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any, Optional

_BARE_DATE = re.compile(r"^(\d{4})-(\d{2})-(\d{2})$")

_CURRENCY_SYMBOLS = {
    "IDR": "Rp",
    "USD": "$",
    "EUR": "€",
    "SGD": "S$",
}

# currencies displayed without fraction digits
_ZERO_DECIMAL = {"IDR", "JPY", "KRW", "VND"}


# ---------- Numbers ---------- #

def to_number(value: Any) -> Decimal:
    """
    Server decimals often arrive as strings ("25000.00").
    Returns Decimal(0) for None, booleans, garbage, NaN and infinities.
    """
    if value is None or isinstance(value, bool):
        return Decimal(0)
    if isinstance(value, Decimal):
        n = value
    elif isinstance(value, (int, float)):
        try:
            n = Decimal(str(value))
        except InvalidOperation:
            return Decimal(0)
    elif isinstance(value, str):
        s = value.strip()
        if not s:
            return Decimal(0)
        try:
            n = Decimal(s)
        except InvalidOperation:
            return Decimal(0)
    else:
        return Decimal(0)
    return n if n.is_finite() else Decimal(0)


# ---------- Dates ---------- #

def parse_date_safe(value: Any) -> Optional[datetime]:
    """
    Parse a server date into a naive local datetime.

    A bare "YYYY-MM-DD" is built from its own components at local midnight:
    a generic ISO parser would read it as UTC midnight and shift the day
    backward west of UTC. Anything else goes through fromisoformat; aware
    values are converted to local time. Returns None when unparsable.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.astimezone().replace(tzinfo=None) if value.tzinfo else value

    s = str(value).strip()
    if not s:
        return None

    m = _BARE_DATE.match(s)
    if m:
        y, mo, d = (int(x) for x in m.groups())
        try:
            return datetime(y, mo or 1, d or 1)
        except ValueError:
            return None

    if s.endswith(("Z", "z")):
        s = s[:-1] + "+00:00"
    try:
        dt = datetime.fromisoformat(s)
    except ValueError:
        return None
    if dt.tzinfo is not None:
        dt = dt.astimezone().replace(tzinfo=None)
    return dt


def today_start(now: Optional[datetime] = None) -> datetime:
    now = now or datetime.now()
    return datetime(now.year, now.month, now.day)


def add_days(dt: datetime, days: int) -> datetime:
    return dt + timedelta(days=days)


# ---------- Formats ---------- #

def _group(digits: str, sep: str) -> str:
    out = []
    while len(digits) > 3:
        out.insert(0, digits[-3:])
        digits = digits[:-3]
    out.insert(0, digits)
    return sep.join(out)


def format_money(amount: Any, currency_code: str = "IDR") -> str:
    """Display only. IDR follows id-ID grouping: 'Rp 25.000'."""
    code = (currency_code or "IDR").upper()
    n = to_number(amount)
    negative = n < 0
    n = abs(n)

    if code in _ZERO_DECIMAL:
        whole = str(n.quantize(Decimal(1), rounding=ROUND_HALF_UP))
        body = _group(whole, ".")
    else:
        q = str(n.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))
        whole, frac = q.split(".")
        body = f"{_group(whole, ',')}.{frac}"

    symbol = _CURRENCY_SYMBOLS.get(code, code)
    sign = "-" if negative else ""
    return f"{sign}{symbol} {body}"
