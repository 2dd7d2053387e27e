from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Iterable, Optional

from invoice_desk.errors import PaymentExceedsRemaining
from invoice_desk.utils.money import format_money, to_number


def _amount_of(p: Any) -> Any:
    if isinstance(p, dict):
        return p.get("amount")
    return getattr(p, "amount", None)


@dataclass(frozen=True)
class PaymentSummary:
    total: Decimal
    total_paid: Decimal
    remaining: Decimal
    # amount paid beyond the total; remaining is clamped at 0 for display
    overpaid: Decimal

    @property
    def is_settled(self) -> bool:
        return self.remaining == 0


def total_paid(payments: Iterable[Any]) -> Decimal:
    return sum((to_number(_amount_of(p)) for p in payments), Decimal(0))


def summarize(total: Any, payments: Iterable[Any]) -> PaymentSummary:
    """
    Always computed from the full payment list as fetched; callers re-fetch
    after adding or deleting a payment instead of adjusting these figures.
    """
    t = to_number(total)
    paid = total_paid(payments)
    diff = t - paid
    return PaymentSummary(
        total=t,
        total_paid=paid,
        remaining=max(diff, Decimal(0)),
        overpaid=max(-diff, Decimal(0)),
    )


def check_payment_amount(amount: Any, max_amount: Optional[Any], currency: str = "IDR") -> None:
    """
    Advisory guard before submitting a payment. `max_amount=None` means
    no known limit. Server-side validation stays authoritative.
    """
    if max_amount is None:
        return
    limit = to_number(max_amount)
    if to_number(amount) > limit:
        raise PaymentExceedsRemaining(
            f"Amount exceeds the remaining balance. Maximum: {format_money(limit, currency)}",
            max_amount=limit,
        )
