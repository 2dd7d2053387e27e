from datetime import datetime, timedelta

from invoice_desk.models.dashboard import DashboardInvoice, DashboardSummary
from invoice_desk.services.dashboard_service import apply_fallback, derive_due_soon, derive_overdue_count

NOW = datetime(2024, 3, 15, 9, 30)


def _day(offset):
    return (NOW + timedelta(days=offset)).date().isoformat()


def inv(iid, due, status="SENT"):
    return DashboardInvoice(id=iid, invoice_number=iid.upper(), status=status, total="1000", due_date=due)


def test_sent_due_yesterday_counts_over_server_zero():
    assert derive_overdue_count(0, [inv("a", _day(-1))], now=NOW) == 1


def test_due_today_is_not_overdue():
    assert derive_overdue_count(0, [inv("a", _day(0))], now=NOW) == 0


def test_closed_and_undated_invoices_are_ignored():
    rows = [
        inv("paid", _day(-3), "PAID"),
        inv("cancelled", _day(-3), "cancelled"),
        inv("nodate", None),
        inv("garbage", "soon"),
    ]
    assert derive_overdue_count(0, rows, now=NOW) == 0


def test_server_value_wins_when_larger():
    assert derive_overdue_count(4, [inv("a", _day(-1))], now=NOW) == 4


def test_due_soon_window_and_order():
    rows = [inv("ten", _day(10)), inv("five", _day(5)), inv("three", _day(3))]
    hits = derive_due_soon(rows, days=7, now=NOW)
    assert [h.id for h in hits] == ["three", "five"]


def test_due_soon_bounds_inclusive():
    rows = [inv("today", _day(0)), inv("edge", _day(7)), inv("past", _day(-1)), inv("paid", _day(1), "PAID")]
    assert [h.id for h in derive_due_soon(rows, days=7, now=NOW)] == ["today", "edge"]


def test_fallback_keeps_server_due_soon_list():
    summary = DashboardSummary.model_validate({
        "kpis": {"overdueCount": 0},
        "recentInvoices": [inv("late", _day(-2)).model_dump(by_alias=True), inv("soon", _day(2)).model_dump(by_alias=True)],
        "dueSoonInvoices": [{"id": "srv", "invoiceNumber": "SRV", "dueDate": _day(6)}],
    })
    out = apply_fallback(summary, days=7, now=NOW)
    assert out.kpis.overdue_count == 1
    assert [i.id for i in out.due_soon_invoices] == ["srv"]
    # original untouched
    assert summary.kpis.overdue_count == 0


def test_fallback_derives_due_soon_when_server_list_empty():
    summary = DashboardSummary.model_validate({
        "kpis": {"overdueCount": "0"},
        "recentInvoices": [
            {"id": "b", "status": "SENT", "dueDate": _day(5), "total": "10"},
            {"id": "a", "status": "DRAFT", "dueDate": _day(3), "total": "10"},
        ],
        "dueSoonInvoices": [],
    })
    out = apply_fallback(summary, now=NOW)
    assert [i.id for i in out.due_soon_invoices] == ["a", "b"]


def test_service_unwraps_envelope_and_applies_fallback(desk, http):
    yesterday = (datetime.now() - timedelta(days=1)).date().isoformat()
    http.add("GET", "/dashboard/summary", {
        "message": "ok",
        "data": {
            "kpis": {"totalOutstanding": "150000.00", "overdueCount": 0, "invoicesThisMonth": 3},
            "recentInvoices": [{"id": "x", "status": "SENT", "dueDate": yesterday, "total": "150000.00"}],
            "recentPayments": [],
            "dueSoonInvoices": [],
        },
    })
    out = desk.dashboard.summary()
    assert out.kpis.overdue_count == 1
    assert out.kpis.total_outstanding == 150000
    call = http.calls_to("GET", "/dashboard/summary")[0]
    assert call.params == {"limit": 5, "dueSoonDays": 7, "monthOffset": 0}


def test_service_can_skip_fallback(desk, http):
    desk.dashboard.settings = desk.settings.model_copy(update={"dashboard_fallback": False})
    http.add("GET", "/dashboard/summary", {"data": {
        "kpis": {"overdueCount": 0},
        "recentInvoices": [{"id": "x", "status": "SENT", "dueDate": "2000-01-01"}],
    }})
    assert desk.dashboard.summary().kpis.overdue_count == 0


def test_zero_day_window_is_respected(desk, http):
    http.add("GET", "/dashboard/summary", {"data": {
        "kpis": {"overdueCount": 0},
        "recentInvoices": [
            {"id": "today", "status": "SENT", "dueDate": _day(0)},
            {"id": "tomorrow", "status": "SENT", "dueDate": _day(1)},
        ],
    }})
    out = desk.dashboard.summary(due_soon_days=0, limit=0, now=NOW)
    assert [i.id for i in out.due_soon_invoices] == ["today"]
    assert http.calls[0].params == {"limit": 0, "dueSoonDays": 0, "monthOffset": 0}


def test_missing_status_is_not_counted_as_open():
    rows = [inv("blank", _day(-2), ""), inv("odd", _day(-2), "archived")]
    assert derive_overdue_count(0, rows, now=NOW) == 0
    assert derive_due_soon([inv("blank", _day(1), None)], now=NOW) == []
