# invoice_desk/services/invoice_service.py
from __future__ import annotations

import logging
from datetime import date
from typing import Any, Dict, Mapping, Optional, Union

from invoice_desk.models.common import parse_input
from invoice_desk.models.invoice import Invoice, InvoiceDraft, normalize_status
from invoice_desk.services.lifecycle import ensure_allowed
from invoice_desk.storage.api import ApiClient, extract_message, unwrap_data
from invoice_desk.storage.rest_repo import Page, RestRepository

logger = logging.getLogger(__name__)


def _day(v: Union[str, date, None]) -> Optional[str]:
    if isinstance(v, date):
        return v.isoformat()
    return v or None


class InvoiceService:
    """
    Invoices are created and numbered server-side and never deleted here.
    Mutations are gated on the current status before any request goes out.
    """

    def __init__(self, api: ApiClient):
        self.api = api
        self.repo = RestRepository(api, "invoices", Invoice, entity_name="invoice")

    # ----------- list / get -----------
    def list_invoices(
        self,
        q: Optional[str] = None,
        status: Optional[str] = None,
        client_id: Optional[str] = None,
        date_from: Union[str, date, None] = None,
        date_to: Union[str, date, None] = None,
        page: Optional[int] = None,
        limit: Optional[int] = None,
    ) -> Page[Invoice]:
        params: Dict[str, Any] = {
            "q": (q or "").strip(),
            "status": normalize_status(status) if status and status.upper() != "ALL" else None,
            "clientId": client_id,
            "dateFrom": _day(date_from),
            "dateTo": _day(date_to),
            "page": page,
            "limit": limit,
        }
        return self.repo.list_page(params)

    def list_by_client(self, client_id: str, limit: Optional[int] = None) -> Page[Invoice]:
        return self.list_invoices(client_id=client_id, limit=limit)

    def get_by_id(self, invoice_id: str) -> Invoice:
        return self.repo.get_by_id(invoice_id)

    # ----------- create / edit -----------
    def add_invoice(self, data: Union[InvoiceDraft, Mapping[str, Any]]) -> Invoice:
        draft = parse_input(InvoiceDraft, data).check_create()
        body = self.api.post("/invoices", json=draft.to_create_payload())
        inv = self.repo.hydrate(unwrap_data(body))
        expected = draft.expected_total()
        if inv.total != expected:
            # tax/discount rules live server-side; just note the drift
            logger.info("Invoice %s total %s differs from local estimate %s", inv.id, inv.total, expected)
        return inv

    def update_invoice(self, invoice: Invoice, data: Union[InvoiceDraft, Mapping[str, Any]]) -> Invoice:
        ensure_allowed("edit", invoice.status)
        draft = parse_input(InvoiceDraft, data)
        return self.repo.update(invoice.id, draft)

    # ----------- lifecycle -----------
    def send(self, invoice: Invoice) -> tuple[Invoice, Optional[str]]:
        """Emails the invoice to the client; server moves it to SENT."""
        ensure_allowed("send", invoice.status)
        body = self.api.post(self.repo.path(invoice.id, "send"), json={})
        return self._after_action(invoice, body)

    def cancel(self, invoice: Invoice) -> tuple[Invoice, Optional[str]]:
        ensure_allowed("cancel", invoice.status)
        body = self.api.patch(self.repo.path(invoice.id, "cancel"), json={})
        return self._after_action(invoice, body)

    def _after_action(self, invoice: Invoice, body: Any) -> tuple[Invoice, Optional[str]]:
        # the action response is not always the full invoice: re-read it
        message = extract_message(body)
        return self.get_by_id(invoice.id), message
