from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Literal, Optional

from pydantic import Field, field_serializer, field_validator, model_validator

from invoice_desk.utils.money import parse_date_safe
from .common import ApiModel, TimeStamped
from .client import ClientRef
from .payment import InvoiceRef

Frequency = Literal["DAILY", "WEEKLY", "MONTHLY", "YEARLY"]


def _utc_iso(dt: datetime) -> str:
    # naive values are local time
    return dt.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")


class RecurringRule(TimeStamped):
    id: str
    user_id: Optional[str] = None
    client_id: Optional[str] = None
    template_invoice_id: Optional[str] = None
    frequency: Frequency = "MONTHLY"
    interval: int = 1
    start_at: Optional[str] = None
    end_at: Optional[str] = None
    next_run_at: Optional[str] = None
    is_active: bool = True

    client: Optional[ClientRef] = None
    template_invoice: Optional[InvoiceRef] = None

    @field_validator("frequency", mode="before")
    @classmethod
    def _freq_upper(cls, v):
        return str(v or "MONTHLY").upper()


class RecurringDraft(ApiModel):
    client_id: str
    template_invoice_id: str
    frequency: Frequency = "MONTHLY"
    interval: int = Field(default=1, ge=1)
    start_at: datetime
    end_at: Optional[datetime] = None
    is_active: bool = True

    @field_validator("client_id", mode="before")
    @classmethod
    def _client_required(cls, v):
        if not (v or "").strip():
            raise ValueError("Client is required")
        return v.strip()

    @field_validator("template_invoice_id", mode="before")
    @classmethod
    def _template_required(cls, v):
        if not (v or "").strip():
            raise ValueError("Template invoice is required")
        return v.strip()

    @field_validator("start_at", "end_at", mode="before")
    @classmethod
    def _dates(cls, v):
        if v in (None, ""):
            return None
        # a bare date means local midnight of that day
        if isinstance(v, date) and not isinstance(v, datetime):
            return datetime(v.year, v.month, v.day)
        if isinstance(v, str):
            dt = parse_date_safe(v)
            if dt is None:
                raise ValueError("Invalid date")
            return dt
        return v

    @field_validator("start_at", "end_at")
    @classmethod
    def _local_naive(cls, v):
        if v is not None and v.tzinfo is not None:
            return v.astimezone().replace(tzinfo=None)
        return v

    @field_validator("frequency", mode="before")
    @classmethod
    def _freq_upper(cls, v):
        return str(v or "MONTHLY").upper()

    @field_serializer("start_at", "end_at", when_used="json-unless-none")
    def _ser_dates(self, v: datetime) -> str:
        return _utc_iso(v)

    @model_validator(mode="after")
    def _end_after_start(self):
        if self.end_at and self.end_at < self.start_at:
            raise ValueError("End date cannot be before start date")
        return self


class RecurringUpdate(ApiModel):
    frequency: Optional[Frequency] = None
    interval: Optional[int] = Field(default=None, ge=1)
    end_at: Optional[datetime] = None
    is_active: Optional[bool] = None

    @field_serializer("end_at", when_used="json-unless-none")
    def _ser_end(self, v: datetime) -> str:
        return _utc_iso(v)
