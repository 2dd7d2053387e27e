from __future__ import annotations

import logging
from urllib.parse import quote
from typing import Any, Mapping, Optional, Union

from invoice_desk.errors import TransportError
from invoice_desk.models.auth import Credentials, LoginResult, Registration
from invoice_desk.models.common import parse_input
from invoice_desk.storage.api import ApiClient, extract_message, unwrap_data

logger = logging.getLogger(__name__)


class AuthService:
    """Login / register / e-mail verification. Public endpoints, no token sent."""

    def __init__(self, api: ApiClient):
        self.api = api

    @property
    def session(self):
        return self.api.session

    def login(self, email: str, password: str) -> LoginResult:
        creds = parse_input(Credentials, {"email": email, "password": password})
        body = self.api.post("/auth/login", json=creds.model_dump(mode="json"), auth=False)
        data = unwrap_data(body)
        if not isinstance(data, Mapping) or not data.get("accessToken"):
            # some deployments keep the token at the top level
            data = body if isinstance(body, Mapping) else {}
        if not data.get("accessToken"):
            raise TransportError("Login response did not include an access token.")
        result = LoginResult.model_validate(data)
        self.session.sign_in(result.access_token)
        logger.info("Logged in as %s", result.email or creds.email)
        return result

    def register(self, data: Union[Registration, Mapping[str, Any]]) -> Optional[str]:
        reg = parse_input(Registration, data)
        body = self.api.post("/auth/register", json=reg.to_payload(), auth=False)
        return extract_message(body) or "Registration successful. Check your e-mail to verify your account."

    def verify_email(self, token: str) -> Optional[str]:
        body = self.api.get(f"/auth/verify-email/{quote(token, safe='')}", auth=False)
        return extract_message(body) or "E-mail verified."

    def logout(self) -> None:
        self.session.sign_out()
