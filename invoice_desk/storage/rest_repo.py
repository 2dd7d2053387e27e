from __future__ import annotations

import logging
from typing import Any, Dict, Generic, List, Mapping, Optional, Type, TypeVar, Union

from pydantic import BaseModel, ValidationError

from invoice_desk.errors import TransportError
from invoice_desk.storage.api import ApiClient, ListEnvelope, extract_message, unwrap_data

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=BaseModel)


class Page(Generic[T]):
    def __init__(self, items: List[T], meta: Optional[Dict[str, Any]] = None, message: Optional[str] = None):
        self.items = items
        self.meta = meta
        self.message = message

    def __iter__(self):
        return iter(self.items)

    def __len__(self) -> int:
        return len(self.items)


class RestRepository(Generic[T]):
    """
    CRUD over one REST resource (`/clients`, `/invoices`, ...).
    - Hydrates JSON rows into `model`; malformed rows are skipped, not fatal
    - Payloads may be pydantic models or plain mappings
    """

    def __init__(self, api: ApiClient, resource: str, model: Type[T], entity_name: str = "entity"):
        self.api = api
        self.resource = "/" + resource.strip("/")
        self.model = model
        self.entity_name = entity_name

    # ---------------- Helpers ---------------- #

    def path(self, *parts: str) -> str:
        return "/".join([self.resource, *(str(p).strip("/") for p in parts)])

    @staticmethod
    def _to_payload(item: Union[BaseModel, Mapping[str, Any]]) -> Dict[str, Any]:
        if hasattr(item, "to_payload"):
            return item.to_payload()
        if isinstance(item, BaseModel):
            return item.model_dump(mode="json", by_alias=True, exclude_none=True)
        return dict(item)

    def hydrate(self, row: Any) -> T:
        try:
            return self.model.model_validate(row)
        except ValidationError as e:
            logger.warning("Unexpected %s payload from %s: %s", self.entity_name, self.resource, e)
            raise TransportError("Unexpected response from the server.") from e

    def hydrate_list(self, rows: List[Dict[str, Any]]) -> List[T]:
        out: List[T] = []
        for d in rows:
            try:
                out.append(self.model.model_validate(d))
            except ValidationError as e:
                logger.warning("Skipping malformed %s row %s: %s", self.entity_name, d.get("id"), e.error_count())
                continue
        return out

    # ---------------- CRUD ---------------- #

    def list_page(self, params: Optional[Mapping[str, Any]] = None) -> Page[T]:
        env: ListEnvelope = self.api.get_list(self.resource, params=params)
        return Page(self.hydrate_list(env.items), env.meta, env.message)

    def list_all(self, params: Optional[Mapping[str, Any]] = None) -> List[T]:
        return self.list_page(params).items

    def get_by_id(self, obj_id: str) -> T:
        return self.hydrate(self.api.get_one(self.path(obj_id)))

    def add(self, item: Union[BaseModel, Mapping[str, Any]]) -> T:
        body = self.api.post(self.resource, json=self._to_payload(item))
        return self.hydrate(unwrap_data(body))

    def update(self, obj_id: str, item: Union[BaseModel, Mapping[str, Any]]) -> T:
        body = self.api.patch(self.path(obj_id), json=self._to_payload(item))
        return self.hydrate(unwrap_data(body))

    def delete(self, obj_id: str) -> Optional[str]:
        """Returns the server's message, if any."""
        body = self.api.delete(self.path(obj_id))
        return extract_message(body)
