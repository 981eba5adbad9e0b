"""Profile, coin balance, quiz completion and account deletion"""

import logging
from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.orm import Session

from finquest.api.v1.schemas import (
    CoinsOut,
    CompleteQuizRequest,
    Envelope,
    UpdateCoinsRequest,
    UpdateProfileRequest,
    UserOut,
)
from finquest.api.dependencies import get_current_user, get_request_id
from finquest.domain.exceptions import DuplicateUserError
from finquest.infrastructure.database.models import User
from finquest.infrastructure.database.repositories import UserRepository
from finquest.infrastructure.database.session import get_db

router = APIRouter()


@router.get("/users/profile", response_model=Envelope[UserOut])
def get_profile(user: User = Depends(get_current_user)):
    return Envelope(data=UserOut.from_user(user))


@router.put("/users/profile", response_model=Envelope[UserOut])
def update_profile(
    body: UpdateProfileRequest,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Update only the fields present in the request body"""
    user_repo = UserRepository(db)
    changes = body.model_dump(exclude_unset=True)

    try:
        user_repo.ensure_available(email=changes.get("email"), exclude_id=user.id)
    except DuplicateUserError as e:
        raise HTTPException(status_code=400, detail=str(e))

    user_repo.update_fields(user, changes)
    db.commit()

    return Envelope(message="Profile updated successfully", data=UserOut.from_user(user))


@router.post("/users/update-coins", response_model=Envelope[CoinsOut])
def update_coins(
    body: UpdateCoinsRequest,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    UserRepository(db).update_fields(user, {"coins": body.coins})
    db.commit()
    return Envelope(message="Coins updated successfully", data=CoinsOut(coins=user.coins))


@router.post("/users/complete-quiz", response_model=Envelope[UserOut])
def complete_quiz(
    body: CompleteQuizRequest,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Record the onboarding quiz result: coins, level, completed flag"""
    UserRepository(db).update_fields(
        user,
        {"coins": body.coins, "level": body.level, "completed_quiz": True},
    )
    db.commit()
    return Envelope(message="Quiz completed successfully", data=UserOut.from_user(user))


@router.delete("/users/account", response_model=Envelope[None])
def delete_account(
    request: Request,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    user_id = str(user.id)
    UserRepository(db).delete(user)
    db.commit()

    logging.info("Account deleted", extra={"request_id": get_request_id(request), "user_id": user_id})
    return Envelope(message="Account deleted successfully", data=None)
