from datetime import date
from decimal import Decimal

import pytest

from fees.models import FeeDefinition
from fees.services import (
    FeeNotPayable,
    format_amount,
    get_payable_fee,
    list_fees,
    list_payable_fees,
    set_fee_status,
)

pytestmark = pytest.mark.django_db


@pytest.mark.parametrize(
    "amount, currency, expected",
    [
        (Decimal("50000"), "NGN", "₦50,000.00"),
        (Decimal("1234.5"), "NGN", "₦1,234.50"),
        (Decimal("20"), "GHS", "GH₵20.00"),
        (Decimal("99.99"), "XOF", "XOF 99.99"),
    ],
)
def test_format_amount(amount, currency, expected):
    assert format_amount(amount, currency) == expected


def test_catalog_listing(fee):
    exam = FeeDefinition.objects.create(name="Exam Fee", amount=Decimal("7500"), due_date=date(2025, 12, 1))
    levy = FeeDefinition.objects.create(
        name="Old Levy", amount=Decimal("100"), due_date=date(2025, 1, 1), status="inactive"
    )
    assert list_fees() == [levy, exam, fee]
    assert list_payable_fees() == [exam, fee]


def test_empty_catalog(db):
    assert list_payable_fees() == []


def test_get_payable_fee(fee):
    assert get_payable_fee(str(fee.pk)) == fee
    with pytest.raises(FeeNotPayable):
        get_payable_fee(None)
    with pytest.raises(FeeNotPayable):
        get_payable_fee(fee.pk + 100)
    set_fee_status(fee, FeeDefinition.STATUS_INACTIVE)
    with pytest.raises(FeeNotPayable):
        get_payable_fee(fee.pk)


def test_set_fee_status_rejects_unknown(fee):
    with pytest.raises(ValueError):
        set_fee_status(fee, "archived")
