import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from nykapital.config import settings
from nykapital.data.base import create_tables
from nykapital.domain.errors import (
    ConflictError,
    FinanceError,
    InsufficientFundsError,
    NotFoundError,
    OverpaymentError,
    StorageError,
    ValidationError,
)
from nykapital.presentation.accounts_api import router as accounts_router
from nykapital.presentation.analytics_api import router as analytics_router
from nykapital.presentation.budgets_api import router as budgets_router
from nykapital.presentation.invoices_api import router as invoices_router
from nykapital.presentation.payments_api import router as payments_router
from nykapital.presentation.recurring_api import router as recurring_router
from nykapital.presentation.tax_api import router as tax_router
from nykapital.presentation.transactions_api import router as transactions_router
from nykapital.presentation.user_api import router as auth_router

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

ERROR_STATUS_CODES = [
    (ValidationError, 400),
    (NotFoundError, 404),
    (InsufficientFundsError, 400),
    (OverpaymentError, 400),
    (ConflictError, 409),
    (StorageError, 500),
]

app = FastAPI(title="NyKapital Finans API", version="1.0.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(FinanceError)
async def finance_error_handler(request: Request, exc: FinanceError):
    status_code = 500
    for error_cls, code in ERROR_STATUS_CODES:
        if isinstance(exc, error_cls):
            status_code = code
            break
    if status_code < 500:
        logger.warning("%s %s rejected: %s", request.method, request.url.path, exc.message)
    else:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
        if isinstance(exc, StorageError):
            return JSONResponse(status_code=status_code, content={"detail": "Storage failure"})
    return JSONResponse(
        status_code=status_code, content={"detail": exc.message, **exc.context()}
    )


app.include_router(auth_router)
app.include_router(accounts_router)
app.include_router(transactions_router)
app.include_router(payments_router)
app.include_router(recurring_router)
app.include_router(invoices_router)
app.include_router(budgets_router)
app.include_router(analytics_router)
app.include_router(tax_router)


@app.get("/health")
def health():
    return {"status": "ok"}


# Ensure tables exist at startup
create_tables()
