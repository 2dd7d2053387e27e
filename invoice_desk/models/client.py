from __future__ import annotations

from typing import Optional

from pydantic import EmailStr, field_validator

from .common import ApiModel, TimeStamped


class ClientRef(ApiModel):
    """Client as embedded in invoices, payments and recurring rules."""
    id: Optional[str] = None
    name: Optional[str] = None
    email: Optional[str] = None


class Client(TimeStamped):
    id: str
    name: str
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    payment_preference: Optional[str] = None
    notes: Optional[str] = None


class ClientDraft(ApiModel):
    name: str
    email: Optional[EmailStr] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    payment_preference: Optional[str] = None
    notes: Optional[str] = None

    @field_validator("name", mode="before")
    @classmethod
    def _name_required(cls, v):
        v = (v or "").strip()
        if not v:
            raise ValueError("Name is required")
        return v

    @field_validator("email", "phone", "address", "payment_preference", "notes", mode="before")
    @classmethod
    def _blank_to_none(cls, v):
        if isinstance(v, str):
            return v.strip() or None
        return v
