from __future__ import annotations

import json
import logging
import os
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional, Union

from invoice_desk.errors import AuthenticationRequired

logger = logging.getLogger(__name__)

TOKEN_KEY = "accessToken"
LEGACY_TOKEN_KEYS = ("token",)


class TokenStore:
    """
    Bearer token persisted in a small JSON file under TOKEN_KEY.
    Older files written under "token" are still read.
    """

    def __init__(self, path: Union[str, os.PathLike]):
        self.path = Path(path)
        self._lock = threading.Lock()

    def _read(self) -> Dict[str, Any]:
        try:
            with self.path.open("r", encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError:
            return {}
        except json.JSONDecodeError:
            logger.warning("Unreadable session file %s, ignoring it", self.path)
            return {}
        return data if isinstance(data, dict) else {}

    def _write(self, data: Dict[str, Any]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with self.path.open("w", encoding="utf-8") as f:
            json.dump(data, f, ensure_ascii=False, indent=2)

    def load(self) -> Optional[str]:
        with self._lock:
            data = self._read()
        for key in (TOKEN_KEY, *LEGACY_TOKEN_KEYS):
            val = data.get(key)
            if isinstance(val, str) and val.strip():
                return val.strip()
        return None

    def save(self, token: str) -> None:
        with self._lock:
            data = self._read()
            for key in LEGACY_TOKEN_KEYS:
                data.pop(key, None)
            data[TOKEN_KEY] = token
            self._write(data)

    def clear(self) -> None:
        with self._lock:
            data = self._read()
            if not any(k in data for k in (TOKEN_KEY, *LEGACY_TOKEN_KEYS)):
                return
            for key in (TOKEN_KEY, *LEGACY_TOKEN_KEYS):
                data.pop(key, None)
            self._write(data)


class MemoryTokenStore(TokenStore):
    """Non-persistent store, for scripts and tests."""

    def __init__(self, token: Optional[str] = None):
        # the path is never read or written
        super().__init__(os.devnull)
        self._token = token

    def load(self) -> Optional[str]:
        return self._token

    def save(self, token: str) -> None:
        self._token = token

    def clear(self) -> None:
        self._token = None


# ---------------- Session state ---------------- #

@dataclass(frozen=True)
class Anonymous:
    reason: Optional[str] = None


@dataclass(frozen=True)
class Authenticated:
    token: str

    def __repr__(self) -> str:
        return "Authenticated(token=***)"


SessionState = Union[Anonymous, Authenticated]


class AuthSession:
    """
    Explicit auth state handed to the API client.
    Anything that needs the token asks the session; a 401 moves it back
    to Anonymous and wipes the stored token.
    """

    def __init__(self, store: TokenStore):
        self.store = store
        token = store.load()
        self._state: SessionState = Authenticated(token) if token else Anonymous()

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def is_authenticated(self) -> bool:
        return isinstance(self._state, Authenticated)

    def require_token(self) -> str:
        if isinstance(self._state, Authenticated):
            return self._state.token
        raise AuthenticationRequired(self._state.reason or "Please log in first.")

    def sign_in(self, token: str) -> None:
        self.store.save(token)
        self._state = Authenticated(token)

    def sign_out(self) -> None:
        self.store.clear()
        self._state = Anonymous()

    def expire(self, reason: str = "Session expired. Please log in again.") -> None:
        logger.warning("Session rejected by server, clearing stored token")
        self.store.clear()
        self._state = Anonymous(reason)
