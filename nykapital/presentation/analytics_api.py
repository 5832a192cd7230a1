from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Query

from nykapital.data.repositories.scope import LedgerScope
from nykapital.domain.services.analytics_service import get_analytics
from nykapital.presentation.dependencies import get_scope

router = APIRouter(prefix="/api/analytics", tags=["analytics"])


@router.get("", response_model=Dict[str, Any])
def get_analytics_endpoint(
    scope: LedgerScope = Depends(get_scope),
    start_date: Optional[str] = Query(None, description="ISO date or datetime"),
    end_date: Optional[str] = Query(None, description="Inclusive; a bare date covers the whole day"),
):
    return get_analytics(scope, start_date=start_date, end_date=end_date)
