from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from nykapital.data.repositories.scope import LedgerScope
from nykapital.domain.models import Payment
from nykapital.domain.services.payment_service import list_payments, send_payment
from nykapital.presentation.dependencies import get_scope


class PaymentResponse(BaseModel):
    id: str
    account_id: str
    recipient_name: str
    recipient_account: str
    amount: float
    currency: str
    description: str
    reference: str
    category: Optional[str] = None
    status: str
    scheduled_for: Optional[datetime] = None
    transaction_id: Optional[str] = None
    created_at: datetime

    @staticmethod
    def from_domain(p: Payment) -> "PaymentResponse":
        return PaymentResponse(
            id=p.id,
            account_id=p.account_id,
            recipient_name=p.recipient_name,
            recipient_account=p.recipient_account,
            amount=p.amount,
            currency=p.currency,
            description=p.description,
            reference=p.reference,
            category=p.category.value if p.category else None,
            status=p.status.value,
            scheduled_for=p.scheduled_for,
            transaction_id=p.transaction_id,
            created_at=p.created_at,
        )


class SendPaymentRequest(BaseModel):
    account_id: str
    recipient_name: str
    recipient_account: str = ""
    amount: float
    currency: Optional[str] = None
    description: str = ""
    reference: str = ""
    category: Optional[str] = None
    scheduled_for: Optional[datetime] = None


router = APIRouter(prefix="/api/payments", tags=["payments"])


@router.get("", response_model=List[PaymentResponse])
def get_all_payments_endpoint(scope: LedgerScope = Depends(get_scope)):
    return [PaymentResponse.from_domain(p) for p in list_payments(scope)]


@router.post("", response_model=PaymentResponse, status_code=201)
def send_payment_endpoint(req: SendPaymentRequest, scope: LedgerScope = Depends(get_scope)):
    payment = send_payment(
        scope,
        req.account_id,
        req.recipient_name,
        req.recipient_account,
        req.amount,
        currency=req.currency,
        description=req.description,
        reference=req.reference,
        category=req.category,
        scheduled_for=req.scheduled_for,
    )
    return PaymentResponse.from_domain(payment)
