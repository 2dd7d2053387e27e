from __future__ import annotations

import re
from decimal import Decimal
from typing import Literal, Optional

from pydantic import field_validator

from .common import ApiModel, Money, TimeStamped, parse_number

PaymentMethod = Literal["TRANSFER", "CASH", "EWALLET", "OTHER"]

_PAID_AT = re.compile(r"^\d{4}-\d{2}-\d{2}$")


class InvoiceRef(ApiModel):
    id: Optional[str] = None
    invoice_number: Optional[str] = None


class Payment(TimeStamped):
    id: str
    invoice_id: Optional[str] = None
    user_id: Optional[str] = None
    amount: Money = Decimal(0)
    paid_at: Optional[str] = None
    method: Optional[str] = None
    notes: Optional[str] = None

    invoice: Optional[InvoiceRef] = None

    @property
    def paid_on(self) -> str:
        return str(self.paid_at or "")[:10]


class PaymentDraft(ApiModel):
    invoice_id: str
    amount: Money
    paid_at: str
    method: PaymentMethod = "TRANSFER"
    notes: Optional[str] = None

    @field_validator("invoice_id", mode="before")
    @classmethod
    def _invoice_required(cls, v):
        v = (v or "").strip() if isinstance(v, str) else v
        if not v:
            raise ValueError("invoiceId is required")
        return v

    @field_validator("amount", mode="before")
    @classmethod
    def _amount_number(cls, v):
        # "." is the decimal point: "25.000" reads as 25; "1,500" is rejected
        return parse_number(v, "Amount must be a number")

    @field_validator("amount")
    @classmethod
    def _amount_positive(cls, v: Decimal) -> Decimal:
        if v <= 0:
            raise ValueError("Amount must be greater than 0")
        return v

    @field_validator("paid_at", mode="before")
    @classmethod
    def _paid_at_format(cls, v):
        s = str(v or "").strip()
        if not _PAID_AT.match(s):
            raise ValueError("paidAt must be YYYY-MM-DD")
        return s

    @field_validator("method", mode="before")
    @classmethod
    def _method_default(cls, v):
        return str(v).strip().upper() if v else "TRANSFER"

    @field_validator("notes", mode="before")
    @classmethod
    def _notes_trim(cls, v):
        if isinstance(v, str):
            return v.strip() or None
        return v
