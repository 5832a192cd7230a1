from datetime import date, datetime

import pytest

from nykapital.config import _parse_rates
from nykapital.domain.errors import ValidationError
from nykapital.domain.helpers import dates
from nykapital.domain.helpers.validation import require_positive
from nykapital.domain.locks import active_lock_count, entity_lock
from nykapital.domain.rates import FixedRateProvider, convert_to_dkk


def test_parse_end_of_bare_date():
    assert dates.parse_end("2025-03-31") == datetime(2025, 3, 31, 23, 59, 59, 999999)
    assert dates.parse_end(date(2025, 3, 31)).hour == 23
    assert dates.parse_end("2025-03-31T12:00:00") == datetime(2025, 3, 31, 12, 0)
    assert dates.parse_end(None) is None


def test_parse_date_range_order():
    with pytest.raises(ValidationError):
        dates.parse_date_range("2025-02-02", "2025-02-01")
    start, end = dates.parse_date_range("2025-02-01", "2025-02-01")
    assert start < end


def test_trailing_months_cross_year_boundary():
    assert dates.trailing_months(datetime(2025, 2, 10), 4) == [
        (2024, 11), (2024, 12), (2025, 1), (2025, 2),
    ]


def test_quarter_helpers():
    assert dates.quarter_months(4) == (10, 12)
    assert dates.quarter_of(datetime(2025, 3, 31)) == 1
    assert dates.in_quarter(datetime(2025, 10, 1), 2025, 4)
    assert not dates.in_quarter(datetime(2024, 10, 1), 2025, 4)


def test_rate_provider_skips_unknown_currency():
    provider = FixedRateProvider({"dkk": 1, "EUR": 7.5})
    assert convert_to_dkk(10, "eur", provider) == 75
    assert convert_to_dkk(10, "USD", provider) is None


def test_parse_rates_setting():
    assert _parse_rates("DKK=1, eur=7.45") == {"DKK": 1.0, "EUR": 7.45}
    with pytest.raises(RuntimeError):
        _parse_rates("EUR")


@pytest.mark.parametrize("amount", [0.001, 0.004, "0.0049", -0.001])
def test_require_positive_rejects_amounts_rounding_to_zero(amount):
    with pytest.raises(ValidationError):
        require_positive(amount)


def test_require_positive_rounds_to_ore():
    assert require_positive("12.344") == 12.34
    assert require_positive(0.006) == 0.01


def test_entity_locks_are_released_from_registry():
    before = active_lock_count()
    with entity_lock("account", "a-1"):
        with entity_lock("account", "a-1"):
            assert active_lock_count() == before + 1
        with entity_lock("invoice", "i-1"):
            assert active_lock_count() == before + 2
    assert active_lock_count() == before


def test_entity_lock_released_after_error():
    before = active_lock_count()
    with pytest.raises(ValidationError):
        with entity_lock("invoice", "i-2"):
            raise ValidationError("boom")
    assert active_lock_count() == before
