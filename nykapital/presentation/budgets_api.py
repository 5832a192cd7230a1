from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel

from nykapital.data.repositories.scope import LedgerScope
from nykapital.domain.models import Budget
from nykapital.domain.services.budget_service import (
    budget_performance,
    create_budget,
    delete_budget,
    list_budgets,
    update_budget,
)
from nykapital.presentation.dependencies import get_scope


class BudgetResponse(BaseModel):
    id: str
    category: str
    amount: float
    period: str
    created_at: datetime
    updated_at: datetime

    @staticmethod
    def from_domain(b: Budget) -> "BudgetResponse":
        return BudgetResponse(
            id=b.id,
            category=b.category.value,
            amount=b.amount,
            period=b.period,
            created_at=b.created_at,
            updated_at=b.updated_at,
        )


class BudgetPerformanceItem(BaseModel):
    budget_id: str
    category: str
    budget_amount: float
    spent: float
    remaining: float
    percentage: float
    status: str


class BudgetPerformanceResponse(BaseModel):
    month: int
    year: int
    performance: List[BudgetPerformanceItem]
    total_budget: float
    total_spent: float


class CreateBudgetRequest(BaseModel):
    category: str
    amount: float


class UpdateBudgetRequest(BaseModel):
    amount: Optional[float] = None


router = APIRouter(prefix="/api/budgets", tags=["budgets"])


@router.get("", response_model=List[BudgetResponse])
def get_budgets_endpoint(scope: LedgerScope = Depends(get_scope)):
    return [BudgetResponse.from_domain(b) for b in list_budgets(scope)]


@router.post("", response_model=BudgetResponse, status_code=201)
def create_budget_endpoint(req: CreateBudgetRequest, scope: LedgerScope = Depends(get_scope)):
    return BudgetResponse.from_domain(create_budget(scope, req.category, req.amount))


@router.get("/performance", response_model=BudgetPerformanceResponse)
def get_budget_performance_endpoint(
    scope: LedgerScope = Depends(get_scope),
    month: Optional[int] = Query(
        None,
        ge=1,
        le=12,
        description="Calendar month 1-12 (January is 1, not 0 as in JavaScript getMonth()); "
        "defaults to the current month. The response echoes the same 1-based month.",
    ),
    year: Optional[int] = None,
):
    return budget_performance(scope, month=month, year=year)


@router.put("/{budget_id}", response_model=BudgetResponse)
def update_budget_endpoint(
    budget_id: str, req: UpdateBudgetRequest, scope: LedgerScope = Depends(get_scope)
):
    return BudgetResponse.from_domain(update_budget(scope, budget_id, req.amount))


@router.delete("/{budget_id}")
def delete_budget_endpoint(budget_id: str, scope: LedgerScope = Depends(get_scope)):
    delete_budget(scope, budget_id)
    return {"deleted": True}
