from __future__ import annotations

from typing import Any, Mapping, Optional, Union

from invoice_desk.models.common import parse_input
from invoice_desk.models.recurring import RecurringDraft, RecurringRule, RecurringUpdate
from invoice_desk.storage.api import ApiClient, extract_message
from invoice_desk.storage.rest_repo import Page, RestRepository


class RecurringService:
    """
    Recurring invoice rules. Generation itself runs on the server; this only
    creates rules, toggles them, and asks for a run.
    """

    def __init__(self, api: ApiClient):
        self.api = api
        self.repo = RestRepository(api, "recurring", RecurringRule, entity_name="recurring rule")

    def list_rules(self, active: Optional[bool] = None, page: Optional[int] = None, limit: Optional[int] = None) -> Page[RecurringRule]:
        return self.repo.list_page({"active": active, "page": page, "limit": limit})

    def add_rule(self, data: Union[RecurringDraft, Mapping[str, Any]]) -> RecurringRule:
        draft = parse_input(RecurringDraft, data)
        return self.repo.add(draft)

    def update_rule(self, rule_id: str, data: Union[RecurringUpdate, Mapping[str, Any]]) -> RecurringRule:
        changes = parse_input(RecurringUpdate, data)
        return self.repo.update(rule_id, changes)

    def set_active(self, rule: RecurringRule, active: bool) -> RecurringRule:
        return self.update_rule(rule.id, RecurringUpdate(is_active=active))

    def toggle(self, rule: RecurringRule) -> RecurringRule:
        return self.set_active(rule, not rule.is_active)

    def run(self, rule_id: Optional[str] = None) -> Optional[str]:
        """Runs one rule now, or every due rule when no id is given."""
        body = self.api.post(self.repo.path("run"), json={"id": rule_id} if rule_id else {})
        return extract_message(body)
