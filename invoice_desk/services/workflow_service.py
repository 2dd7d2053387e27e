from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Any, Callable, Dict, List, Optional, Tuple

from invoice_desk.config import get_settings
from invoice_desk.errors import AuthenticationRequired
from invoice_desk.models.client import Client
from invoice_desk.models.invoice import Invoice
from invoice_desk.models.payment import Payment
from invoice_desk.models.product import Category, Product
from invoice_desk.services.catalog_service import CatalogService
from invoice_desk.services.client_service import ClientService
from invoice_desk.services.invoice_service import InvoiceService
from invoice_desk.services.lifecycle import allowed_actions, ensure_allowed
from invoice_desk.services.payment_service import PaymentService
from invoice_desk.services.reconciliation import PaymentSummary, check_payment_amount, summarize
from invoice_desk.storage.api import ApiClient

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class InvoiceDetail:
    invoice: Invoice
    payments: List[Payment]
    summary: PaymentSummary
    actions: List[str]

    @property
    def max_payment(self) -> Decimal:
        return self.summary.remaining

    def allows(self, action: str) -> bool:
        return action in self.actions


class WorkflowService:
    """
    Screen-level operations over several resources.
    - Parallel loads fail as a whole: no partial data is handed back
    - Every mutation is status-gated, then followed by a fresh read
    """

    def __init__(self, api: ApiClient, max_workers: Optional[int] = None):
        self.invoices = InvoiceService(api)
        self.payments = PaymentService(api)
        self.catalog = CatalogService(api)
        self.clients = ClientService(api)
        self.max_workers = max_workers or get_settings().max_workers

    # ---------- parallel loads ---------- #

    def _gather(self, calls: Dict[str, Callable[[], Any]]) -> Dict[str, Any]:
        with ThreadPoolExecutor(max_workers=min(self.max_workers, len(calls))) as pool:
            futures = {name: pool.submit(fn) for name, fn in calls.items()}
            results: Dict[str, Any] = {}
            errors: List[BaseException] = []
            for name, fut in futures.items():
                try:
                    results[name] = fut.result()
                except Exception as e:
                    logger.warning("Parallel load '%s' failed: %s", name, e)
                    errors.append(e)
        if errors:
            # a 401 wins: the caller has to go back to login either way
            for e in errors:
                if isinstance(e, AuthenticationRequired):
                    raise e
            raise errors[0]
        return results

    # ---------- screens ---------- #

    def invoice_detail(self, invoice_id: str) -> InvoiceDetail:
        res = self._gather({
            "invoice": lambda: self.invoices.get_by_id(invoice_id),
            "payments": lambda: self.payments.list_by_invoice(invoice_id),
        })
        return self._detail(res["invoice"], res["payments"])

    @staticmethod
    def _detail(invoice: Invoice, payments: List[Payment]) -> InvoiceDetail:
        return InvoiceDetail(
            invoice=invoice,
            payments=payments,
            summary=summarize(invoice.total, payments),
            actions=allowed_actions(invoice.status),
        )

    def invoice_form_lists(self, limit: int = 100) -> Tuple[List[Client], List[Product]]:
        res = self._gather({
            "clients": lambda: self.clients.list_clients(page=1, limit=limit).items,
            "products": lambda: self.catalog.list_products(include_deleted=False, page=1, limit=limit).items,
        })
        return res["clients"], res["products"]

    def client_detail(self, client_id: str) -> Tuple[Client, List[Invoice]]:
        res = self._gather({
            "client": lambda: self.clients.get_by_id(client_id),
            "invoices": lambda: self.invoices.list_by_client(client_id).items,
        })
        return res["client"], res["invoices"]

    def product_screen(self, q: Optional[str] = None, category_id: Optional[str] = None,
                       include_deleted: bool = False) -> Tuple[List[Product], List[Category]]:
        res = self._gather({
            "products": lambda: self.catalog.list_products(q=q, category_id=category_id,
                                                           include_deleted=include_deleted).items,
            "categories": lambda: self.catalog.list_categories(page=1, limit=200).items,
        })
        return res["products"], res["categories"]

    # ---------- mutations ---------- #

    def send_invoice(self, detail: InvoiceDetail) -> Tuple[InvoiceDetail, Optional[str]]:
        _, message = self.invoices.send(detail.invoice)
        return self.invoice_detail(detail.invoice.id), message

    def cancel_invoice(self, detail: InvoiceDetail) -> Tuple[InvoiceDetail, Optional[str]]:
        _, message = self.invoices.cancel(detail.invoice)
        return self.invoice_detail(detail.invoice.id), message

    def record_payment(
        self,
        detail: InvoiceDetail,
        amount: Any,
        paid_at: Any = None,
        method: Optional[str] = "TRANSFER",
        notes: Optional[str] = None,
    ) -> Tuple[InvoiceDetail, Optional[str]]:
        inv = detail.invoice
        ensure_allowed("record_payment", inv.status)
        draft = self.payments.validate({
            "invoice_id": inv.id,
            "amount": amount,
            "paid_at": paid_at or date.today().isoformat(),
            "method": method,
            "notes": notes,
        })
        check_payment_amount(draft.amount, detail.max_payment, inv.currency)

        message = self.payments.add_payment(draft)
        # the server may have flipped the invoice to PAID
        return self.invoice_detail(inv.id), message

    def delete_payment(self, detail: InvoiceDetail, payment_id: str) -> Tuple[InvoiceDetail, Optional[str]]:
        message = self.payments.delete_payment(payment_id)
        return self.invoice_detail(detail.invoice.id), message
