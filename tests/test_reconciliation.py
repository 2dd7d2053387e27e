from decimal import Decimal

import pytest

from invoice_desk.errors import PaymentExceedsRemaining, ValidationFailed
from invoice_desk.models.payment import Payment
from invoice_desk.services.reconciliation import check_payment_amount, summarize, total_paid


def test_remaining_after_two_payments():
    s = summarize(100000, [{"amount": 30000}, {"amount": "20000"}])
    assert s.total_paid == 50000
    assert s.remaining == 50000
    assert s.overpaid == 0
    assert not s.is_settled


def test_payment_above_remaining_is_rejected_with_maximum():
    s = summarize("100000.00", [{"amount": 30000}, {"amount": 20000}])
    with pytest.raises(PaymentExceedsRemaining) as exc:
        check_payment_amount(60000, s.remaining)
    assert exc.value.max_amount == 50000
    assert "50.000" in exc.value.message
    assert exc.value.field == "amount"
    assert isinstance(exc.value, ValidationFailed)


def test_payment_equal_to_remaining_passes():
    check_payment_amount(50000, Decimal(50000))


def test_no_limit_means_no_check():
    check_payment_amount(10 ** 9, None)


def test_overpayment_is_clamped_but_reported():
    s = summarize(100, [{"amount": 80}, {"amount": 50}])
    assert s.remaining == 0
    assert s.overpaid == 30
    assert s.is_settled


def test_garbage_amounts_count_as_zero():
    assert total_paid([{"amount": None}, {"amount": "x"}, {"amount": "10.5"}]) == Decimal("10.5")


def test_works_with_models():
    payments = [Payment(id="p1", amount="25000"), Payment(id="p2", amount=25000)]
    assert summarize("50000", payments).remaining == 0


@pytest.mark.parametrize(
    "amounts",
    [[], [1], [100000], [99999, 1], [12.5, 7.25], [200000]],
)
def test_remaining_is_total_minus_paid_floored(amounts):
    s = summarize(100000, [{"amount": a} for a in amounts])
    expected = max(Decimal(100000) - sum(Decimal(str(a)) for a in amounts), Decimal(0))
    assert s.remaining == expected
    assert s.remaining >= 0
