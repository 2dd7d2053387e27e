from __future__ import annotations

from typing import Any, List, Mapping, Optional, Union

from invoice_desk.models.common import parse_input
from invoice_desk.models.payment import Payment, PaymentDraft
from invoice_desk.storage.api import ApiClient, extract_message
from invoice_desk.storage.rest_repo import RestRepository


class PaymentService:
    def __init__(self, api: ApiClient, page_limit: int = 50):
        self.api = api
        self.page_limit = page_limit
        self.repo = RestRepository(api, "payments", Payment, entity_name="payment")

    def list_payments(self, invoice_id: Optional[str] = None, page: int = 1, limit: Optional[int] = None) -> List[Payment]:
        return self.repo.list_all({"invoiceId": invoice_id, "page": page, "limit": limit or self.page_limit})

    def list_by_invoice(self, invoice_id: str) -> List[Payment]:
        return self.list_payments(invoice_id=invoice_id)

    def validate(self, data: Union[PaymentDraft, Mapping[str, Any]]) -> PaymentDraft:
        return parse_input(PaymentDraft, data)

    def add_payment(self, data: Union[PaymentDraft, Mapping[str, Any]]) -> Optional[str]:
        """Returns the server's confirmation message."""
        draft = self.validate(data)
        body = self.api.post("/payments", json=draft.to_payload())
        return extract_message(body)

    def delete_payment(self, payment_id: str) -> Optional[str]:
        return self.repo.delete(payment_id)
