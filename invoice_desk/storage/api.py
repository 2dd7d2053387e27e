from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping, Optional

import requests
from pydantic import BaseModel, Field

from invoice_desk.config import get_settings
from invoice_desk.errors import ApiError, AuthenticationRequired, TransportError
from invoice_desk.storage.session import AuthSession

logger = logging.getLogger(__name__)


# ---------------- Envelope ---------------- #

def extract_message(body: Any) -> Optional[str]:
    if not isinstance(body, Mapping):
        return None
    msg = body.get("message")
    if isinstance(msg, list):
        parts = [str(m) for m in msg if m not in (None, "")]
        return ", ".join(parts) or None
    if msg in (None, ""):
        return None
    return str(msg)


def unwrap_data(body: Any) -> Any:
    """Single-object responses: `{message, data: {...}}` or the object itself."""
    if isinstance(body, Mapping) and "data" in body and body["data"] is not None:
        return body["data"]
    return body


class ListEnvelope(BaseModel):
    """
    The one place list responses get normalized. Accepted shapes:
    a bare list, `data`, `data.data`, `data.items`, `items`.
    """

    items: List[Dict[str, Any]] = Field(default_factory=list)
    meta: Optional[Dict[str, Any]] = None
    message: Optional[str] = None

    @classmethod
    def from_body(cls, body: Any) -> "ListEnvelope":
        items: List[Any] = []
        meta = None
        if isinstance(body, list):
            items = body
        elif isinstance(body, Mapping):
            data = body.get("data")
            if isinstance(data, list):
                items = data
            elif isinstance(data, Mapping) and isinstance(data.get("data"), list):
                items = data["data"]
                meta = data.get("meta")
            elif isinstance(data, Mapping) and isinstance(data.get("items"), list):
                items = data["items"]
                meta = data.get("meta")
            elif isinstance(body.get("items"), list):
                items = body["items"]
            meta = body.get("meta") if isinstance(body.get("meta"), Mapping) else meta
        return cls(
            items=[it for it in items if isinstance(it, Mapping)],
            meta=meta if isinstance(meta, Mapping) else None,
            message=extract_message(body),
        )


# ---------------- Client ---------------- #

def _clean_params(params: Optional[Mapping[str, Any]]) -> Optional[Dict[str, Any]]:
    if not params:
        return None
    out: Dict[str, Any] = {}
    for k, v in params.items():
        if v is None or v == "":
            continue
        if isinstance(v, bool):
            v = "true" if v else "false"
        out[k] = v
    return out or None


class ApiClient:
    """
    Thin wrapper around requests.Session for the invoicing REST API.
    Adds the bearer token, maps failures onto the error taxonomy and
    never retries.
    """

    def __init__(
        self,
        session: AuthSession,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        http: Optional[requests.Session] = None,
    ):
        settings = get_settings()
        self.session = session
        self.base_url = (base_url or settings.api_base_url).rstrip("/")
        self.timeout = timeout if timeout is not None else settings.request_timeout
        self.http = http or requests.Session()

    def _url(self, path: str) -> str:
        return f"{self.base_url}/{path.lstrip('/')}"

    @staticmethod
    def _decode(resp: requests.Response) -> Any:
        if resp.status_code == 204 or not resp.content:
            return None
        try:
            return resp.json()
        except ValueError:
            return None

    def request(
        self,
        method: str,
        path: str,
        *,
        params: Optional[Mapping[str, Any]] = None,
        json: Any = None,
        data: Optional[Mapping[str, Any]] = None,
        files: Optional[Mapping[str, Any]] = None,
        auth: bool = True,
    ) -> Any:
        headers = {"Accept": "application/json"}
        if auth:
            # no token: fail before touching the network
            headers["Authorization"] = f"Bearer {self.session.require_token()}"

        try:
            resp = self.http.request(
                method,
                self._url(path),
                params=_clean_params(params),
                json=json,
                data=data,
                files=files,
                headers=headers,
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            logger.warning("%s %s failed: %s", method, path, e)
            raise TransportError() from e

        logger.debug("%s %s -> %s", method, path, resp.status_code)
        body = self._decode(resp)

        if resp.status_code == 401 and auth:
            self.session.expire()
            raise AuthenticationRequired(extract_message(body) or "Session expired. Please log in again.")

        if resp.status_code >= 400:
            message = extract_message(body) or f"Request failed with status {resp.status_code}"
            logger.warning("%s %s rejected (%s): %s", method, path, resp.status_code, message)
            raise ApiError(message, resp.status_code, body)

        return body

    # ---------------- helpers ---------------- #

    def get(self, path: str, params: Optional[Mapping[str, Any]] = None, **kw) -> Any:
        return self.request("GET", path, params=params, **kw)

    def post(self, path: str, json: Any = None, **kw) -> Any:
        return self.request("POST", path, json=json, **kw)

    def patch(self, path: str, json: Any = None, **kw) -> Any:
        return self.request("PATCH", path, json=json, **kw)

    def delete(self, path: str, **kw) -> Any:
        return self.request("DELETE", path, **kw)

    def get_list(self, path: str, params: Optional[Mapping[str, Any]] = None) -> ListEnvelope:
        return ListEnvelope.from_body(self.get(path, params=params))

    def get_one(self, path: str, params: Optional[Mapping[str, Any]] = None) -> Any:
        return unwrap_data(self.get(path, params=params))
