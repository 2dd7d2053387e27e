import pytest
import requests

from invoice_desk.errors import ApiError, AuthenticationRequired, TransportError
from invoice_desk.storage.api import ListEnvelope, extract_message, unwrap_data

from conftest import TOKEN

ROWS = [{"id": "a", "name": "A"}, {"id": "b", "name": "B"}]


@pytest.mark.parametrize(
    "body",
    [
        ROWS,
        {"data": ROWS},
        {"message": "ok", "data": {"data": ROWS, "meta": {"page": 1}}},
        {"data": {"items": ROWS}},
        {"items": ROWS, "meta": {"page": 1}},
    ],
)
def test_every_list_shape_normalizes(body):
    env = ListEnvelope.from_body(body)
    assert [r["id"] for r in env.items] == ["a", "b"]


def test_unknown_shapes_give_empty_list():
    assert ListEnvelope.from_body({"message": "nothing"}).items == []
    assert ListEnvelope.from_body(None).items == []
    assert ListEnvelope.from_body({"data": {"rows": ROWS}}).items == []


def test_meta_is_kept():
    assert ListEnvelope.from_body({"data": {"data": ROWS, "meta": {"total": 2}}}).meta == {"total": 2}


def test_unwrap_and_message():
    assert unwrap_data({"message": "ok", "data": {"id": "x"}}) == {"id": "x"}
    assert unwrap_data({"id": "x"}) == {"id": "x"}
    assert extract_message({"message": ["name should not be empty", "email must be an email"]}) == (
        "name should not be empty, email must be an email"
    )
    assert extract_message([1, 2]) is None


def test_bearer_header_sent(desk, http):
    http.add("GET", "/clients", {"data": ROWS})
    desk.clients.list_clients()
    assert http.calls[0].headers["Authorization"] == f"Bearer {TOKEN}"


def test_401_clears_token_and_asks_for_login(desk, http, store):
    http.add("GET", "/clients", {"message": "Unauthorized"}, status=401)
    with pytest.raises(AuthenticationRequired) as exc:
        desk.clients.list_clients()
    assert exc.value.redirect_to == "/login"
    assert store.load() is None
    assert not desk.session.is_authenticated

    # no token left: the next call never reaches the network
    with pytest.raises(AuthenticationRequired):
        desk.clients.list_clients()
    assert len(http.calls) == 1


def test_server_message_shown_verbatim(desk, http):
    http.add("POST", "/payments", {"message": "Invoice sudah lunas"}, status=400)
    with pytest.raises(ApiError) as exc:
        desk.payments.add_payment({"invoiceId": "inv-1", "amount": 10, "paidAt": "2024-03-05"})
    assert exc.value.message == "Invoice sudah lunas"
    assert exc.value.status_code == 400


def test_error_without_message(desk, http):
    http.add("GET", "/invoices/inv-9", None, status=500)
    with pytest.raises(ApiError, match="status 500"):
        desk.invoices.get_by_id("inv-9")


def test_transport_errors_are_generic(desk, http):
    http.fail("GET", "/clients", requests.ConnectionError("boom"))
    with pytest.raises(TransportError) as exc:
        desk.clients.list_clients()
    assert "boom" not in exc.value.message


def test_none_and_blank_params_dropped(desk, http):
    http.add("GET", "/invoices", {"data": []})
    desk.invoices.list_invoices(q="  ", status="ALL", page=1, limit=10)
    assert http.calls[0].params == {"page": 1, "limit": 10}


def test_malformed_rows_are_skipped(desk, http):
    http.add("GET", "/clients", {"data": [{"id": "a", "name": "A"}, {"name": "no id"}]})
    page = desk.clients.list_clients()
    assert [c.id for c in page] == ["a"]
