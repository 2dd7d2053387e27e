from __future__ import annotations

import mimetypes
import os
from pathlib import Path
from typing import Any, Dict, Mapping, Union

from invoice_desk.models.common import parse_input
from invoice_desk.models.profile import ProfileUpdate, UserProfile
from invoice_desk.storage.api import ApiClient, unwrap_data


class ProfileService:
    def __init__(self, api: ApiClient):
        self.api = api

    def get_profile(self) -> UserProfile:
        return UserProfile.model_validate(self.api.get_one("/profile") or {})

    def update_profile(
        self,
        data: Union[ProfileUpdate, Mapping[str, Any]],
        avatar: Union[str, os.PathLike, None] = None,
    ) -> UserProfile:
        """Multipart PATCH: text fields plus an optional avatar image."""
        changes = parse_input(ProfileUpdate, data)
        # (None, value) parts keep the request multipart even without a file
        parts: Dict[str, Any] = {k: (None, str(v)) for k, v in changes.to_payload().items()}

        if avatar is None:
            body = self.api.request("PATCH", "/profile", files=parts)
        else:
            path = Path(avatar)
            mime = mimetypes.guess_type(path.name)[0] or "application/octet-stream"
            with path.open("rb") as fh:
                parts["avatar"] = (path.name, fh, mime)
                body = self.api.request("PATCH", "/profile", files=parts)
        return UserProfile.model_validate(unwrap_data(body) or {})
