import logging
import math
from typing import Any, Dict, List, Optional

from nykapital.data.base import unit_of_work
from nykapital.data.repositories.budget_repository import (
    budget_exists_for_category,
    budget_to_domain,
    create_budget as repo_create_budget,
    delete_budget_row,
)
from nykapital.data.repositories.scope import LedgerScope
from nykapital.domain.errors import ConflictError, ValidationError
from nykapital.domain.helpers import dates
from nykapital.domain.helpers.aggregation import (
    round_money,
    sum_expenses_by_category,
)
from nykapital.domain.helpers.validation import parse_category, require_positive
from nykapital.domain.models import Budget

logger = logging.getLogger(__name__)


def list_budgets(scope: LedgerScope) -> List[Budget]:
    return scope.budgets()


def create_budget(scope: LedgerScope, category: str, amount: float) -> Budget:
    category_enum = parse_category(category)
    if category_enum is None:
        raise ValidationError("Category is required")
    amount = require_positive(amount, "Budget amount")
    with unit_of_work(scope.db):
        if budget_exists_for_category(scope.db, scope.user_id, category_enum):
            raise ConflictError("Budget for this category already exists")
        budget = repo_create_budget(
            scope.db, scope.user_id, category_enum, amount, dates.now()
        )
    logger.info("Created %s budget of %.2f for user %s", category_enum.value, amount, scope.user_id)
    return budget


def update_budget(scope: LedgerScope, budget_id: str, amount: Optional[float]) -> Budget:
    with unit_of_work(scope.db):
        budget_orm = scope.budget_row(budget_id)
        if amount is not None:
            budget_orm.amount = require_positive(amount, "Budget amount")
            budget_orm.updated_at = dates.now()
        scope.db.flush()
        budget = budget_to_domain(budget_orm)
    return budget


def delete_budget(scope: LedgerScope, budget_id: str) -> None:
    with unit_of_work(scope.db):
        delete_budget_row(scope.db, scope.budget_row(budget_id))


def budget_status(percentage: float) -> str:
    if percentage >= 100:
        return "over"
    if percentage >= 90:
        return "danger"
    if percentage >= 80:
        return "warning"
    return "good"


def budget_percentage(spent: float, amount: float) -> float:
    """
    Share of the budget spent, one decimal place, halves rounded up.
    Zero budgets report 0.
    """
    if amount <= 0:
        return 0.0
    return math.floor(spent / amount * 1000 + 0.5) / 10


def budget_performance(
    scope: LedgerScope, month: Optional[int] = None, year: Optional[int] = None
) -> Dict[str, Any]:
    """
    Budget vs actual spending for one calendar month (1-12), default the current one.
    """
    now = dates.now()
    target_month = dates.validate_month(month) if month is not None else now.month
    target_year = dates.validate_year(year) if year is not None else now.year

    start, next_start = dates.month_bounds(target_year, target_month)
    month_transactions = [
        t
        for t in scope.transactions(start_date=start)
        if t.created_at < next_start
    ]
    spending = sum_expenses_by_category(month_transactions)

    budgets = scope.budgets()
    performance = []
    for budget in budgets:
        spent = spending.get(budget.category.value, 0.0)
        percentage = budget_percentage(spent, budget.amount)
        performance.append(
            {
                "budget_id": budget.id,
                "category": budget.category.value,
                "budget_amount": budget.amount,
                "spent": spent,
                "remaining": round_money(budget.amount - spent),
                "percentage": percentage,
                "status": budget_status(percentage),
            }
        )

    return {
        "month": target_month,
        "year": target_year,
        "performance": performance,
        "total_budget": round_money(sum(b.amount for b in budgets)),
        "total_spent": round_money(sum(spending.values())),
    }
