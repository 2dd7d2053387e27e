from __future__ import annotations

from typing import Optional

from .common import ApiModel, TimeStamped


class UserProfile(TimeStamped):
    user_id: Optional[str] = None
    full_name: Optional[str] = None
    phone: Optional[str] = None
    company_name: Optional[str] = None
    company_address: Optional[str] = None
    avatar_url: Optional[str] = None


class ProfileUpdate(ApiModel):
    full_name: Optional[str] = None
    company_name: Optional[str] = None
    address: Optional[str] = None
