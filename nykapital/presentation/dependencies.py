from fastapi import Depends
from sqlalchemy.orm import Session

from nykapital.data.base import get_db
from nykapital.data.repositories.scope import LedgerScope
from nykapital.domain.models import User
from nykapital.domain.services.auth_service import get_current_user


def get_scope(
    db: Session = Depends(get_db), current_user: User = Depends(get_current_user)
) -> LedgerScope:
    return LedgerScope(db, current_user.id)
