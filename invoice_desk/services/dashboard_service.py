from __future__ import annotations

import logging
from datetime import datetime
from typing import Iterable, List, Optional

from invoice_desk.config import Settings, get_settings
from invoice_desk.models.dashboard import DashboardInvoice, DashboardSummary
from invoice_desk.services.lifecycle import is_open
from invoice_desk.storage.api import ApiClient, unwrap_data
from invoice_desk.utils.money import add_days, parse_date_safe, today_start

logger = logging.getLogger(__name__)


# ---------- Fallback derivation ---------- #

def derive_overdue_count(server_value: int, invoices: Iterable, now: Optional[datetime] = None) -> int:
    """
    Open invoices whose due date is before the start of today (local).
    Returns the larger of the server figure and the local one.
    """
    start = today_start(now)
    computed = 0
    for inv in invoices:
        if not is_open(inv.status):
            continue
        due = parse_date_safe(inv.due_date)
        if due is None:
            continue
        if due < start:
            computed += 1
    return max(int(server_value or 0), computed)


def derive_due_soon(invoices: Iterable, days: int = 7, now: Optional[datetime] = None) -> List:
    """Open invoices due within [today, today + days], earliest first."""
    start = today_start(now)
    end = add_days(start, days)
    hits = []
    for inv in invoices:
        if not is_open(inv.status):
            continue
        due = parse_date_safe(inv.due_date)
        if due is None:
            continue
        if start <= due <= end:
            hits.append((due, inv))
    hits.sort(key=lambda pair: pair[0])
    return [inv for _, inv in hits]


def apply_fallback(summary: DashboardSummary, days: int = 7, now: Optional[datetime] = None) -> DashboardSummary:
    """
    Fill in overdue count / due-soon list from `recent_invoices` when the
    server figures are missing or look stale. Returns a new summary.
    """
    recent: List[DashboardInvoice] = summary.recent_invoices
    if not recent:
        return summary

    overdue = derive_overdue_count(summary.kpis.overdue_count, recent, now)
    due_soon = summary.due_soon_invoices or derive_due_soon(recent, days, now)

    if overdue != summary.kpis.overdue_count:
        logger.info("Overdue count corrected locally: server=%s local=%s", summary.kpis.overdue_count, overdue)

    kpis = summary.kpis.model_copy(update={"overdue_count": overdue})
    return summary.model_copy(update={"kpis": kpis, "due_soon_invoices": due_soon})


# ---------- Service ---------- #

class DashboardService:
    def __init__(self, api: ApiClient, settings: Optional[Settings] = None):
        self.api = api
        self.settings = settings or get_settings()

    def fetch_raw(self, limit: Optional[int] = None, due_soon_days: Optional[int] = None, month_offset: int = 0) -> DashboardSummary:
        body = self.api.get(
            "/dashboard/summary",
            params={
                "limit": self.settings.recent_limit if limit is None else limit,
                "dueSoonDays": self.settings.due_soon_days if due_soon_days is None else due_soon_days,
                "monthOffset": month_offset,
            },
        )
        return DashboardSummary.model_validate(unwrap_data(body) or {})

    def summary(
        self,
        limit: Optional[int] = None,
        due_soon_days: Optional[int] = None,
        month_offset: int = 0,
        now: Optional[datetime] = None,
    ) -> DashboardSummary:
        days = self.settings.due_soon_days if due_soon_days is None else due_soon_days
        raw = self.fetch_raw(limit, days, month_offset)
        if not self.settings.dashboard_fallback:
            return raw
        return apply_fallback(raw, days, now)
