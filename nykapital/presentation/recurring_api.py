from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from nykapital.data.repositories.scope import LedgerScope
from nykapital.domain.models import RecurringPayment
from nykapital.domain.services.recurring_service import (
    create_recurring_payment,
    delete_recurring_payment,
    get_recurring_payment,
    list_recurring_payments,
    update_recurring_status,
)
from nykapital.presentation.dependencies import get_scope


class RecurringPaymentResponse(BaseModel):
    id: str
    account_id: str
    recipient_name: str
    recipient_account: str
    amount: float
    currency: str
    description: str
    reference: str
    category: Optional[str] = None
    frequency: str
    start_date: datetime
    end_date: Optional[datetime] = None
    next_payment_date: datetime
    status: str
    last_payment_id: Optional[str] = None
    created_at: datetime

    @staticmethod
    def from_domain(r: RecurringPayment) -> "RecurringPaymentResponse":
        return RecurringPaymentResponse(
            id=r.id,
            account_id=r.account_id,
            recipient_name=r.recipient_name,
            recipient_account=r.recipient_account,
            amount=r.amount,
            currency=r.currency,
            description=r.description,
            reference=r.reference,
            category=r.category.value if r.category else None,
            frequency=r.frequency.value,
            start_date=r.start_date,
            end_date=r.end_date,
            next_payment_date=r.next_payment_date,
            status=r.status.value,
            last_payment_id=r.last_payment_id,
            created_at=r.created_at,
        )


class RecurringPaymentRequest(BaseModel):
    account_id: str
    recipient_name: str
    recipient_account: str = ""
    amount: float
    currency: Optional[str] = None
    description: str = ""
    reference: str = ""
    category: Optional[str] = None
    frequency: str
    start_date: str
    end_date: Optional[str] = None


class RecurringStatusRequest(BaseModel):
    status: str


router = APIRouter(prefix="/api/recurring-payments", tags=["recurring-payments"])


@router.get("", response_model=List[RecurringPaymentResponse])
def get_recurring_payments_endpoint(scope: LedgerScope = Depends(get_scope)):
    return [RecurringPaymentResponse.from_domain(r) for r in list_recurring_payments(scope)]


@router.post("", response_model=RecurringPaymentResponse, status_code=201)
def create_recurring_payment_endpoint(
    req: RecurringPaymentRequest, scope: LedgerScope = Depends(get_scope)
):
    recurring = create_recurring_payment(
        scope,
        req.account_id,
        req.recipient_name,
        req.recipient_account,
        req.amount,
        req.frequency,
        req.start_date,
        currency=req.currency,
        description=req.description,
        reference=req.reference,
        category=req.category,
        end_date=req.end_date,
    )
    return RecurringPaymentResponse.from_domain(recurring)


@router.get("/{recurring_id}", response_model=RecurringPaymentResponse)
def get_recurring_payment_endpoint(recurring_id: str, scope: LedgerScope = Depends(get_scope)):
    return RecurringPaymentResponse.from_domain(get_recurring_payment(scope, recurring_id))


@router.patch("/{recurring_id}", response_model=RecurringPaymentResponse)
def update_recurring_status_endpoint(
    recurring_id: str,
    req: RecurringStatusRequest,
    scope: LedgerScope = Depends(get_scope),
):
    return RecurringPaymentResponse.from_domain(
        update_recurring_status(scope, recurring_id, req.status)
    )


@router.delete("/{recurring_id}")
def delete_recurring_payment_endpoint(
    recurring_id: str, scope: LedgerScope = Depends(get_scope)
):
    delete_recurring_payment(scope, recurring_id)
    return {"deleted": True}
