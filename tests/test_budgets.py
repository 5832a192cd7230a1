import pytest

from nykapital.domain.errors import ConflictError, NotFoundError, ValidationError
from nykapital.domain.services.budget_service import (
    budget_percentage,
    budget_performance,
    budget_status,
    create_budget,
    delete_budget,
    list_budgets,
    update_budget,
)
from nykapital.domain.services.payment_service import open_account, receive_payment, send_payment


@pytest.fixture()
def account(scope, clock):
    clock.set(2025, 5, 1, 8, 0)
    account = open_account(scope)
    receive_payment(scope, account.id, 50000, counterparty="Kunde A/S", category="sales")
    return account


def test_marketing_budget_in_danger_zone(scope, clock, account):
    budget = create_budget(scope, "marketing", 5000)

    clock.set(2025, 5, 28, 12, 0)
    send_payment(scope, account.id, "Tidligere kampagne", "", 999, category="marketing")
    clock.set(2025, 6, 3, 12, 0)
    send_payment(scope, account.id, "Google Ads", "", 3000, category="marketing")
    clock.set(2025, 6, 30, 23, 59)
    send_payment(scope, account.id, "Facebook Ads", "", 1600, category="marketing")
    send_payment(scope, account.id, "Husleje", "", 12000, category="rent")

    report = budget_performance(scope, month=6, year=2025)

    assert report["month"] == 6
    assert report["year"] == 2025
    assert report["performance"] == [
        {
            "budget_id": budget.id,
            "category": "marketing",
            "budget_amount": 5000,
            "spent": 4600,
            "remaining": 400,
            "percentage": 92.0,
            "status": "danger",
        }
    ]
    assert report["total_budget"] == 5000
    assert report["total_spent"] == 16600


def test_performance_defaults_to_current_month(scope, clock, account):
    create_budget(scope, "software", 1000)
    clock.set(2025, 5, 10, 9, 0)
    send_payment(scope, account.id, "SaaS", "", 1000, category="software")

    report = budget_performance(scope)

    assert (report["month"], report["year"]) == (5, 2025)
    row = report["performance"][0]
    assert row["percentage"] == 100.0
    assert row["status"] == "over"
    assert row["remaining"] == 0


def test_performance_rejects_bad_month(scope):
    with pytest.raises(ValidationError):
        budget_performance(scope, month=0, year=2025)
    with pytest.raises(ValidationError):
        budget_performance(scope, month=13, year=2025)


@pytest.mark.parametrize(
    "percentage, expected",
    [(0, "good"), (79.9, "good"), (80, "warning"), (89.9, "warning"), (90, "danger"), (100, "over"), (150, "over")],
)
def test_budget_status_thresholds(percentage, expected):
    assert budget_status(percentage) == expected


def test_budget_percentage_rounding():
    assert budget_percentage(4600, 5000) == 92.0
    assert budget_percentage(1, 3) == 33.3
    assert budget_percentage(1, 8) == 12.5
    assert budget_percentage(100, 0) == 0.0


def test_duplicate_category_conflicts(scope):
    create_budget(scope, "travel", 2000)
    with pytest.raises(ConflictError):
        create_budget(scope, "travel", 3000)
    assert len(list_budgets(scope)) == 1


def test_same_category_for_different_users(scope, other_scope):
    create_budget(scope, "travel", 2000)
    create_budget(other_scope, "travel", 3000)
    assert [b.amount for b in list_budgets(other_scope)] == [3000]


@pytest.mark.parametrize("category, amount", [("", 100), ("lottery", 100), ("travel", 0)])
def test_create_validates_input(scope, category, amount):
    with pytest.raises(ValidationError):
        create_budget(scope, category, amount)


def test_update_and_delete(scope, other_scope):
    budget = create_budget(scope, "office", 1500)
    assert update_budget(scope, budget.id, 1750).amount == 1750
    with pytest.raises(ValidationError):
        update_budget(scope, budget.id, -5)
    with pytest.raises(NotFoundError):
        delete_budget(other_scope, budget.id)

    delete_budget(scope, budget.id)
    assert list_budgets(scope) == []
    with pytest.raises(NotFoundError):
        update_budget(scope, budget.id, 10)


def test_budget_amount_rounding_to_zero_is_rejected(scope):
    with pytest.raises(ValidationError):
        create_budget(scope, "insurance", 0.001)
    budget = create_budget(scope, "insurance", 800)
    with pytest.raises(ValidationError):
        update_budget(scope, budget.id, 0.004)
    assert [b.amount for b in list_budgets(scope)] == [800]
