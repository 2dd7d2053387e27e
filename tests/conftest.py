import json
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import pytest

from invoice_desk.config import Settings
from invoice_desk.desk import InvoiceDesk
from invoice_desk.storage.session import MemoryTokenStore

BASE_URL = "http://api.test"
TOKEN = "tok-123"


class FakeResponse:
    def __init__(self, status_code: int = 200, body: Any = None):
        self.status_code = status_code
        self._body = body
        self.content = b"" if body is None else json.dumps(body).encode("utf-8")

    def json(self):
        if self._body is None:
            raise ValueError("no body")
        return self._body


@dataclass
class Call:
    method: str
    path: str
    params: Optional[Dict[str, Any]]
    json: Any
    files: Any
    headers: Dict[str, str] = field(default_factory=dict)


class FakeHttp:
    """Stands in for requests.Session: canned responses keyed by (method, path)."""

    def __init__(self):
        self.routes: Dict[tuple, Any] = {}
        self.calls: List[Call] = []

    def add(self, method: str, path: str, body: Any = None, status: int = 200):
        self.routes[(method.upper(), path)] = (status, body)

    def fail(self, method: str, path: str, exc: Exception):
        self.routes[(method.upper(), path)] = exc

    def request(self, method, url, params=None, json=None, data=None, files=None, headers=None, timeout=None):
        path = url[len(BASE_URL):]
        self.calls.append(Call(method, path, params, json, files, dict(headers or {})))
        route = self.routes.get((method, path))
        if route is None:
            return FakeResponse(404, {"message": f"No route {method} {path}"})
        if isinstance(route, Exception):
            raise route
        status, body = route
        return FakeResponse(status, body)

    def calls_to(self, method: str, path: str) -> List[Call]:
        return [c for c in self.calls if c.method == method and c.path == path]


@pytest.fixture
def settings(tmp_path):
    return Settings(api_base_url=BASE_URL, token_file=tmp_path / "session.json")


@pytest.fixture
def http():
    return FakeHttp()


@pytest.fixture
def store():
    return MemoryTokenStore(TOKEN)


@pytest.fixture
def desk(settings, store, http):
    return InvoiceDesk(settings=settings, store=store, http=http)


def invoice_row(**over):
    row = {
        "id": "inv-1",
        "clientId": "cli-1",
        "invoiceNumber": "INV-0001",
        "issueDate": "2024-03-01",
        "dueDate": "2024-03-15",
        "currency": "IDR",
        "status": "SENT",
        "subtotal": "100000.00",
        "taxAmount": "0.00",
        "discountAmount": "0.00",
        "total": "100000.00",
        "client": {"id": "cli-1", "name": "PT Maju"},
        "items": [
            {"itemName": "Design", "quantity": "1", "unitPrice": "100000.00", "lineTotal": "100000.00"}
        ],
    }
    row.update(over)
    return row


def payment_row(pid, amount, **over):
    row = {
        "id": pid,
        "invoiceId": "inv-1",
        "amount": str(amount),
        "paidAt": "2024-03-05T00:00:00.000Z",
        "method": "TRANSFER",
    }
    row.update(over)
    return row
