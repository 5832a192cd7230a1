from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import OAuth2PasswordRequestForm
from pydantic import BaseModel
from sqlalchemy.orm import Session

from nykapital.data.base import get_db
from nykapital.domain.models import User
from nykapital.domain.services.auth_service import (
    authenticate_user,
    create_access_token,
    get_current_user,
    register_user,
)

router = APIRouter(prefix="/api/auth", tags=["auth"])


class UserCreateRequest(BaseModel):
    email: str
    password: str
    name: str = ""
    company_name: str = ""
    cvr: str = ""


class UserResponse(BaseModel):
    id: int
    email: str
    name: str
    company_name: str
    cvr: str
    created_at: Optional[datetime] = None

    @staticmethod
    def from_domain(u: User) -> "UserResponse":
        return UserResponse(
            id=u.id,
            email=u.email,
            name=u.name,
            company_name=u.company_name,
            cvr=u.cvr,
            created_at=u.created_at,
        )


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"


@router.post("/register", response_model=UserResponse, status_code=201)
def register_user_endpoint(req: UserCreateRequest, db: Session = Depends(get_db)):
    user = register_user(
        db,
        req.email,
        req.password,
        name=req.name,
        company_name=req.company_name,
        cvr=req.cvr,
    )
    return UserResponse.from_domain(user)


@router.post("/token", response_model=TokenResponse)
def login_for_access_token(
    form_data: OAuth2PasswordRequestForm = Depends(), db: Session = Depends(get_db)
):
    # The OAuth2 form calls it "username"; here it carries the email.
    user = authenticate_user(db, form_data.username, form_data.password)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect email or password",
            headers={"WWW-Authenticate": "Bearer"},
        )
    access_token = create_access_token(data={"sub": str(user.id)})
    return TokenResponse(access_token=access_token)


@router.get("/me", response_model=UserResponse)
def read_users_me(current_user: User = Depends(get_current_user)):
    return UserResponse.from_domain(current_user)
