"""POST /api/auth/register, POST /api/auth/login, GET /api/auth/me"""

import logging
from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.orm import Session

from finquest.api.v1.schemas import AuthOut, Envelope, LoginRequest, RegisterRequest, UserOut
from finquest.api.dependencies import get_current_user, get_request_id
from finquest.domain.exceptions import DuplicateUserError
from finquest.infrastructure.database.models import User
from finquest.infrastructure.database.repositories import UserRepository
from finquest.infrastructure.database.session import get_db
from finquest.infrastructure.security import check_password, hash_password, issue_token

router = APIRouter()


@router.post("/auth/register", response_model=Envelope[AuthOut], status_code=201)
def register(body: RegisterRequest, request: Request, db: Session = Depends(get_db)):
    """Create an account and return an access token"""
    user_repo = UserRepository(db)

    try:
        user_repo.ensure_available(mobile=body.mobile, email=body.email)
    except DuplicateUserError as e:
        raise HTTPException(status_code=400, detail=str(e))

    user = user_repo.create_user(
        name=body.name,
        mobile=body.mobile,
        email=body.email,
        password_hash=hash_password(body.password),
    )
    db.commit()

    logging.info("User registered", extra={"request_id": get_request_id(request), "user_id": str(user.id)})

    return Envelope(
        message="User registered successfully",
        data=AuthOut(user=UserOut.from_user(user), token=issue_token(str(user.id), user.mobile)),
    )


@router.post("/auth/login", response_model=Envelope[AuthOut])
def login(body: LoginRequest, request: Request, db: Session = Depends(get_db)):
    """Authenticate by mobile number or email"""
    user = UserRepository(db).find_by_identifier(body.identifier)

    if user is None or not check_password(body.password, user.password_hash):
        logging.warning("Login rejected", extra={"request_id": get_request_id(request)})
        raise HTTPException(status_code=401, detail="Invalid credentials")

    return Envelope(
        message="Login successful",
        data=AuthOut(user=UserOut.from_user(user), token=issue_token(str(user.id), user.mobile)),
    )


@router.get("/auth/me", response_model=Envelope[UserOut])
def me(user: User = Depends(get_current_user)):
    return Envelope(data=UserOut.from_user(user))
