from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import List, Literal, Optional

from pydantic import Field, field_validator, model_validator

from invoice_desk.errors import ValidationFailed
from invoice_desk.utils.money import parse_date_safe, to_number
from .common import ApiModel, Money, TimeStamped
from .client import ClientRef
from .payment import Payment
from .product import Product

InvoiceStatus = Literal["DRAFT", "SENT", "PENDING", "PAID", "OVERDUE", "CANCELLED"]

INVOICE_STATUSES = ("DRAFT", "SENT", "PENDING", "PAID", "OVERDUE", "CANCELLED")

# missing status from the server; no action is allowed on it
UNKNOWN_STATUS = "UNKNOWN"


def normalize_status(value) -> str:
    s = str(value or "").strip().upper()
    return s or UNKNOWN_STATUS


class InvoiceItem(ApiModel):
    id: Optional[str] = None
    item_name: str = ""
    description: Optional[str] = None
    quantity: Money = Decimal(1)
    unit_price: Money = Decimal(0)
    line_total: Optional[Money] = None
    product_id: Optional[str] = None  # lookup only, used to prefill

    @field_validator("quantity")
    @classmethod
    def _qty_min(cls, v: Decimal) -> Decimal:
        if v < 1:
            raise ValueError("Quantity must be at least 1")
        return v

    @field_validator("unit_price")
    @classmethod
    def _price_min(cls, v: Decimal) -> Decimal:
        if v < 0:
            raise ValueError("Unit price must be 0 or more")
        return v

    @field_validator("product_id", mode="before")
    @classmethod
    def _blank_product(cls, v):
        return v or None

    def computed_total(self) -> Decimal:
        if self.line_total is not None:
            return self.line_total
        return self.quantity * self.unit_price

    @classmethod
    def from_product(cls, product: Product, quantity=1) -> "InvoiceItem":
        return cls(
            item_name=product.name,
            description=product.description,
            quantity=quantity,
            unit_price=product.unit_price,
            product_id=product.id,
        )


class Invoice(TimeStamped):
    id: str
    client_id: Optional[str] = None
    invoice_number: Optional[str] = None
    issue_date: Optional[str] = None
    due_date: Optional[str] = None
    payment_terms: Optional[str] = None
    currency: str = "IDR"
    status: str = UNKNOWN_STATUS
    subtotal: Money = Decimal(0)
    tax_amount: Money = Decimal(0)
    discount_amount: Money = Decimal(0)
    total: Money = Decimal(0)
    notes: Optional[str] = None

    client: Optional[ClientRef] = None
    items: List[InvoiceItem] = Field(default_factory=list)
    payments: Optional[List[Payment]] = None

    @field_validator("status", mode="before")
    @classmethod
    def _status_upper(cls, v):
        return normalize_status(v)

    @field_validator("currency", mode="before")
    @classmethod
    def _currency_default(cls, v):
        return v or "IDR"

    @field_validator("total")
    @classmethod
    def _total_floor(cls, v: Decimal) -> Decimal:
        if v < 0:
            raise ValueError("Invoice total cannot be negative")
        return v

    @property
    def due_at(self) -> Optional[datetime]:
        return parse_date_safe(self.due_date)

    @property
    def client_name(self) -> Optional[str]:
        return self.client.name if self.client else None


class InvoiceDraft(ApiModel):
    """Create/update payload. Validated before any request goes out."""

    client_id: Optional[str] = None
    invoice_number: Optional[str] = None
    issue_date: Optional[date] = None
    due_date: Optional[date] = None
    payment_terms: Optional[str] = None
    currency: Optional[str] = None
    tax_amount: Optional[Money] = None
    discount_amount: Optional[Money] = None
    notes: Optional[str] = None
    items: Optional[List[InvoiceItem]] = None

    @field_validator(
        "client_id", "invoice_number", "payment_terms", "currency", "notes",
        "issue_date", "due_date", mode="before",
    )
    @classmethod
    def _blank_to_none(cls, v):
        if isinstance(v, str):
            v = v.strip()
            return v or None
        return v

    @field_validator("tax_amount", "discount_amount")
    @classmethod
    def _non_negative(cls, v: Optional[Decimal]) -> Optional[Decimal]:
        if v is not None and v < 0:
            raise ValueError("Amount must be 0 or more")
        return v

    @model_validator(mode="after")
    def _due_after_issue(self):
        if self.issue_date and self.due_date and self.due_date < self.issue_date:
            raise ValueError("Due date cannot be before issue date")
        return self

    def check_create(self) -> "InvoiceDraft":
        if not self.client_id:
            raise ValidationFailed("Client is required", field="clientId")
        if not self.issue_date:
            raise ValidationFailed("Issue date is required", field="issueDate")
        if not self.due_date:
            raise ValidationFailed("Due date is required", field="dueDate")
        if not self.items:
            raise ValidationFailed("At least 1 item is required", field="items")
        return self

    def subtotal(self) -> Decimal:
        return sum((it.quantity * it.unit_price for it in self.items or []), Decimal(0))

    def expected_total(self) -> Decimal:
        """Local figure for display; the server total stays authoritative."""
        total = self.subtotal() + to_number(self.tax_amount) - to_number(self.discount_amount)
        return max(total, Decimal(0))

    def to_create_payload(self):
        payload = self.to_payload()
        payload.setdefault("currency", "IDR")
        payload.setdefault("taxAmount", 0)
        payload.setdefault("discountAmount", 0)
        return payload
