from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from nykapital.data.repositories.scope import LedgerScope
from nykapital.domain.models import Account, Transaction
from nykapital.domain.services.payment_service import (
    get_account,
    list_accounts,
    open_account,
    receive_payment,
)
from nykapital.presentation.dependencies import get_scope


class AccountResponse(BaseModel):
    id: str
    account_number: str
    balance: float
    currency: str
    type: str
    status: str
    created_at: datetime

    @staticmethod
    def from_domain(a: Account) -> "AccountResponse":
        return AccountResponse(
            id=a.id,
            account_number=a.account_number,
            balance=a.balance,
            currency=a.currency.value,
            type=a.type.value,
            status=a.status.value,
            created_at=a.created_at,
        )


class TransactionResponse(BaseModel):
    id: str
    account_id: str
    type: str
    amount: float
    currency: str
    description: str
    counterparty: str
    reference: str = ""
    category: Optional[str] = None
    status: str
    created_at: datetime
    completed_at: Optional[datetime] = None

    @staticmethod
    def from_domain(t: Transaction) -> "TransactionResponse":
        return TransactionResponse(
            id=t.id,
            account_id=t.account_id,
            type=t.type.value,
            amount=t.amount,
            currency=t.currency,
            description=t.description,
            counterparty=t.counterparty,
            reference=t.reference or "",
            category=t.category.value if t.category else None,
            status=t.status.value,
            created_at=t.created_at,
            completed_at=t.completed_at,
        )


class OpenAccountRequest(BaseModel):
    currency: str = "DKK"
    type: str = "business"


class ReceiveRequest(BaseModel):
    amount: float
    description: str = ""
    counterparty: str = ""
    reference: str = ""
    category: Optional[str] = None


router = APIRouter(prefix="/api/accounts", tags=["accounts"])


@router.get("", response_model=List[AccountResponse])
def get_accounts_endpoint(scope: LedgerScope = Depends(get_scope)):
    return [AccountResponse.from_domain(a) for a in list_accounts(scope)]


@router.post("", response_model=AccountResponse, status_code=201)
def open_account_endpoint(req: OpenAccountRequest, scope: LedgerScope = Depends(get_scope)):
    return AccountResponse.from_domain(open_account(scope, req.currency, req.type))


@router.get("/{account_id}", response_model=AccountResponse)
def get_account_endpoint(account_id: str, scope: LedgerScope = Depends(get_scope)):
    return AccountResponse.from_domain(get_account(scope, account_id))


@router.post("/{account_id}/receipts", response_model=TransactionResponse, status_code=201)
def receive_payment_endpoint(
    account_id: str, req: ReceiveRequest, scope: LedgerScope = Depends(get_scope)
):
    transaction = receive_payment(
        scope,
        account_id,
        req.amount,
        description=req.description,
        counterparty=req.counterparty,
        reference=req.reference,
        category=req.category,
    )
    return TransactionResponse.from_domain(transaction)
