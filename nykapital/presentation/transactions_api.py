from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from nykapital.data.repositories.scope import LedgerScope
from nykapital.domain.services.transaction_service import (
    export_filename,
    get_transactions_csv_stream,
    list_account_transactions,
    list_transactions,
)
from nykapital.presentation.accounts_api import TransactionResponse
from nykapital.presentation.dependencies import get_scope

router = APIRouter(prefix="/api/transactions", tags=["transactions"])


class TransactionFilters:
    def __init__(
        self,
        start_date: Optional[str] = Query(None, description="ISO date or datetime"),
        end_date: Optional[str] = Query(None, description="Inclusive; a bare date covers the whole day"),
        account_id: Optional[str] = None,
        category: Optional[str] = None,
        search: Optional[str] = Query(None, description="Matches counterparty, description or reference"),
        min_amount: Optional[float] = Query(None, ge=0),
        max_amount: Optional[float] = Query(None, ge=0),
    ):
        self.start_date = start_date
        self.end_date = end_date
        self.account_id = account_id
        self.category = category
        self.search = search
        self.min_amount = min_amount
        self.max_amount = max_amount

    def apply(self, scope: LedgerScope):
        return list_transactions(
            scope,
            start_date=self.start_date,
            end_date=self.end_date,
            account_id=self.account_id,
            category=self.category,
            search=self.search,
            min_amount=self.min_amount,
            max_amount=self.max_amount,
        )


@router.get("", response_model=List[TransactionResponse])
def get_transactions_endpoint(
    filters: TransactionFilters = Depends(), scope: LedgerScope = Depends(get_scope)
):
    return [TransactionResponse.from_domain(t) for t in filters.apply(scope)]


@router.get("/export/csv")
def export_transactions_csv(
    filters: TransactionFilters = Depends(), scope: LedgerScope = Depends(get_scope)
):
    return get_transactions_csv_stream(filters.apply(scope), export_filename())


@router.get("/account/{account_id}", response_model=List[TransactionResponse])
def get_account_transactions_endpoint(
    account_id: str, scope: LedgerScope = Depends(get_scope)
):
    return [
        TransactionResponse.from_domain(t)
        for t in list_account_transactions(scope, account_id)
    ]
