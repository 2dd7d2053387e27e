from __future__ import annotations

from typing import Optional

from pydantic import EmailStr, Field, field_validator

from .common import ApiModel


class Credentials(ApiModel):
    email: EmailStr
    password: str = Field(min_length=1)


class Registration(ApiModel):
    email: EmailStr
    password: str = Field(min_length=6)
    full_name: Optional[str] = None

    @field_validator("full_name", mode="before")
    @classmethod
    def _blank_name(cls, v):
        if isinstance(v, str):
            return v.strip() or None
        return v


class LoginResult(ApiModel):
    access_token: str
    id: Optional[str] = None
    email: Optional[str] = None
