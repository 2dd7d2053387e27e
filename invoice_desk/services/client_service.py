from __future__ import annotations

from typing import Any, Mapping, Optional, Union

from invoice_desk.models.client import Client, ClientDraft
from invoice_desk.models.common import parse_input
from invoice_desk.storage.api import ApiClient
from invoice_desk.storage.rest_repo import Page, RestRepository


class ClientService:
    def __init__(self, api: ApiClient):
        self.repo = RestRepository(api, "clients", Client, entity_name="client")

    def list_clients(self, q: Optional[str] = None, page: Optional[int] = None, limit: Optional[int] = None) -> Page[Client]:
        return self.repo.list_page({"q": (q or "").strip(), "page": page, "limit": limit})

    def get_by_id(self, client_id: str) -> Client:
        return self.repo.get_by_id(client_id)

    def add_client(self, data: Union[ClientDraft, Mapping[str, Any]]) -> Client:
        draft = parse_input(ClientDraft, data)
        return self.repo.add(draft)

    def update_client(self, client_id: str, data: Union[ClientDraft, Mapping[str, Any]]) -> Client:
        draft = parse_input(ClientDraft, data)
        return self.repo.update(client_id, draft)
