from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Generic, Optional, TypeVar

import requests

from invoice_desk.config import Settings, get_settings
from invoice_desk.errors import AuthenticationRequired, InvoiceDeskError, user_message
from invoice_desk.services.auth_service import AuthService
from invoice_desk.services.catalog_service import CatalogService
from invoice_desk.services.client_service import ClientService
from invoice_desk.services.dashboard_service import DashboardService
from invoice_desk.services.invoice_service import InvoiceService
from invoice_desk.services.payment_service import PaymentService
from invoice_desk.services.profile_service import ProfileService
from invoice_desk.services.recurring_service import RecurringService
from invoice_desk.services.workflow_service import WorkflowService
from invoice_desk.storage.api import ApiClient
from invoice_desk.storage.session import AuthSession, TokenStore

logger = logging.getLogger(__name__)

R = TypeVar("R")


@dataclass(frozen=True)
class Outcome(Generic[R]):
    value: Optional[R] = None
    error: Optional[str] = None
    # set when the UI should send the user back to the login screen
    redirect_to: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class InvoiceDesk:
    """Wires session, API client and services from settings."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        store: Optional[TokenStore] = None,
        http: Optional[requests.Session] = None,
    ):
        self.settings = settings or get_settings()
        self.session = AuthSession(store or TokenStore(self.settings.token_file))
        self.api = ApiClient(
            self.session,
            base_url=self.settings.api_base_url,
            timeout=self.settings.request_timeout,
            http=http,
        )

        self.auth = AuthService(self.api)
        self.clients = ClientService(self.api)
        self.catalog = CatalogService(self.api)
        self.invoices = InvoiceService(self.api)
        self.payments = PaymentService(self.api)
        self.recurring = RecurringService(self.api)
        self.dashboard = DashboardService(self.api, self.settings)
        self.profile = ProfileService(self.api)
        self.workflow = WorkflowService(self.api, max_workers=self.settings.max_workers)

    def attempt(self, fn: Callable[..., R], *args: Any, **kwargs: Any) -> Outcome[R]:
        """
        Operation boundary: runs `fn` and turns any failure into a message.
        Nothing is retried.
        """
        try:
            return Outcome(value=fn(*args, **kwargs))
        except AuthenticationRequired as e:
            return Outcome(error=e.message, redirect_to=e.redirect_to)
        except InvoiceDeskError as e:
            return Outcome(error=e.message)
        except Exception as e:
            logger.exception("Unexpected error in %s", getattr(fn, "__name__", fn))
            return Outcome(error=user_message(e))
