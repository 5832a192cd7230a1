from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from nykapital.data.repositories.scope import LedgerScope
from nykapital.domain.models import Invoice
from nykapital.domain.services.invoice_service import (
    create_invoice,
    get_invoice,
    list_invoices,
    record_payment,
    set_status,
)
from nykapital.presentation.dependencies import get_scope


class InvoiceItemModel(BaseModel):
    description: str = ""
    quantity: float
    unit_price: float
    total: Optional[float] = None


class InvoicePaymentModel(BaseModel):
    id: str
    amount: float
    date: datetime
    method: str
    reference: str = ""


class InvoiceResponse(BaseModel):
    id: str
    invoice_number: str
    customer_name: str
    customer_email: str
    customer_cvr: Optional[str] = None
    items: List[InvoiceItemModel]
    subtotal: float
    tax: float
    total: float
    amount_paid: float
    remaining: float
    currency: str
    status: str
    payments: List[InvoicePaymentModel]
    due_date: datetime
    paid_at: Optional[datetime] = None
    created_at: datetime

    @staticmethod
    def from_domain(inv: Invoice) -> "InvoiceResponse":
        return InvoiceResponse(
            id=inv.id,
            invoice_number=inv.invoice_number,
            customer_name=inv.customer_name,
            customer_email=inv.customer_email,
            customer_cvr=inv.customer_cvr,
            items=[
                InvoiceItemModel(
                    description=item.description,
                    quantity=item.quantity,
                    unit_price=item.unit_price,
                    total=item.total,
                )
                for item in inv.items
            ],
            subtotal=inv.subtotal,
            tax=inv.tax,
            total=inv.total,
            amount_paid=inv.amount_paid,
            remaining=inv.remaining,
            currency=inv.currency,
            status=inv.status.value,
            payments=[
                InvoicePaymentModel(
                    id=p.id,
                    amount=p.amount,
                    date=p.date,
                    method=p.method,
                    reference=p.reference,
                )
                for p in inv.payments
            ],
            due_date=inv.due_date,
            paid_at=inv.paid_at,
            created_at=inv.created_at,
        )


class CreateInvoiceRequest(BaseModel):
    customer_name: str
    customer_email: str
    customer_cvr: Optional[str] = None
    items: List[InvoiceItemModel]
    currency: Optional[str] = None
    due_date: str


class InvoiceStatusRequest(BaseModel):
    status: str


class InvoicePaymentRequest(BaseModel):
    amount: float
    method: Optional[str] = None
    reference: Optional[str] = None


router = APIRouter(prefix="/api/invoices", tags=["invoices"])


@router.get("", response_model=List[InvoiceResponse])
def get_invoices_endpoint(scope: LedgerScope = Depends(get_scope)):
    return [InvoiceResponse.from_domain(inv) for inv in list_invoices(scope)]


@router.post("", response_model=InvoiceResponse, status_code=201)
def create_invoice_endpoint(req: CreateInvoiceRequest, scope: LedgerScope = Depends(get_scope)):
    invoice = create_invoice(
        scope,
        req.customer_name,
        req.customer_email,
        req.items,
        req.due_date,
        customer_cvr=req.customer_cvr,
        currency=req.currency,
    )
    return InvoiceResponse.from_domain(invoice)


@router.get("/{invoice_id}", response_model=InvoiceResponse)
def get_invoice_endpoint(invoice_id: str, scope: LedgerScope = Depends(get_scope)):
    return InvoiceResponse.from_domain(get_invoice(scope, invoice_id))


@router.patch("/{invoice_id}", response_model=InvoiceResponse)
def update_invoice_status_endpoint(
    invoice_id: str, req: InvoiceStatusRequest, scope: LedgerScope = Depends(get_scope)
):
    return InvoiceResponse.from_domain(set_status(scope, invoice_id, req.status))


@router.post("/{invoice_id}/payments", response_model=InvoiceResponse)
def record_invoice_payment_endpoint(
    invoice_id: str, req: InvoicePaymentRequest, scope: LedgerScope = Depends(get_scope)
):
    invoice = record_payment(
        scope, invoice_id, req.amount, method=req.method, reference=req.reference
    )
    return InvoiceResponse.from_domain(invoice)
