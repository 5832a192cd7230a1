from typing import Any, Dict

from fastapi import APIRouter, Depends, Query

from nykapital.data.repositories.scope import LedgerScope
from nykapital.domain.services.tax_service import annual_summary, moms_report
from nykapital.presentation.dependencies import get_scope

router = APIRouter(prefix="/api/tax", tags=["tax"])


@router.get("/moms", response_model=Dict[str, Any])
def get_moms_report_endpoint(
    quarter: int = Query(..., description="1-4"),
    year: int = Query(...),
    scope: LedgerScope = Depends(get_scope),
):
    return moms_report(scope, quarter, year)


@router.get("/annual-summary", response_model=Dict[str, Any])
def get_annual_summary_endpoint(year: int, scope: LedgerScope = Depends(get_scope)):
    return annual_summary(scope, year)
