from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import Field, field_validator

from invoice_desk.utils.money import parse_date_safe
from .common import ApiModel, Money
from .client import ClientRef
from .invoice import UNKNOWN_STATUS, normalize_status
from .payment import InvoiceRef


class Kpis(ApiModel):
    total_outstanding: Money = Decimal(0)
    total_paid_this_month: Money = Decimal(0)
    invoices_this_month: int = 0
    overdue_count: int = 0

    @field_validator("invoices_this_month", "overdue_count", mode="before")
    @classmethod
    def _count(cls, v):
        try:
            return max(0, int(float(v or 0)))
        except (TypeError, ValueError):
            return 0


class DashboardInvoice(ApiModel):
    id: str
    invoice_number: Optional[str] = None
    status: str = UNKNOWN_STATUS
    total: Money = Decimal(0)
    due_date: Optional[str] = None
    client: Optional[ClientRef] = None

    @field_validator("status", mode="before")
    @classmethod
    def _status_upper(cls, v):
        return normalize_status(v)

    @property
    def due_at(self) -> Optional[datetime]:
        return parse_date_safe(self.due_date)


class DashboardPayment(ApiModel):
    id: str
    amount: Money = Decimal(0)
    paid_at: Optional[str] = None
    invoice: Optional[InvoiceRef] = None


class DashboardSummary(ApiModel):
    kpis: Kpis = Field(default_factory=Kpis)
    recent_invoices: List[DashboardInvoice] = Field(default_factory=list)
    recent_payments: List[DashboardPayment] = Field(default_factory=list)
    due_soon_invoices: List[DashboardInvoice] = Field(default_factory=list)

    @field_validator("kpis", mode="before")
    @classmethod
    def _kpis(cls, v):
        return v or {}

    @field_validator("recent_invoices", "recent_payments", "due_soon_invoices", mode="before")
    @classmethod
    def _lists(cls, v):
        return v if isinstance(v, list) else []

    @property
    def has_any(self) -> bool:
        return bool(self.recent_invoices or self.recent_payments or self.due_soon_invoices)
