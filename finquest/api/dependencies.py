"""Dependency injection for FastAPI endpoints"""

import uuid
from datetime import datetime
from typing import Optional
from fastapi import Depends, HTTPException, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session
from finquest.domain.exceptions import AuthenticationError
from finquest.domain.goal_store import GoalStore
from finquest.infrastructure.clients.payment_gateway import PaymentGatewayClient
from finquest.infrastructure.database.models import User
from finquest.infrastructure.database.repositories import UserRepository
from finquest.infrastructure.database.session import get_db
from finquest.infrastructure.database.storage import DatabaseStorage
from finquest.infrastructure.security import decode_token

bearer_scheme = HTTPBearer(auto_error=False)


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_now() -> datetime:
    """Local wall-clock time; goal weeks end on local Sunday night"""
    return datetime.now()


def get_payment_client() -> PaymentGatewayClient:
    """Provide payment gateway client instance"""
    return PaymentGatewayClient()


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> User:
    """Resolve the bearer token to a user or reject with 401"""
    if credentials is None or not credentials.credentials:
        raise HTTPException(status_code=401, detail="Access denied. No token provided.")

    try:
        user_id = uuid.UUID(decode_token(credentials.credentials))
    except (AuthenticationError, ValueError):
        raise HTTPException(status_code=401, detail="Invalid or expired token")

    user = UserRepository(db).get_by_id(user_id)
    if user is None:
        raise HTTPException(status_code=401, detail="User no longer exists")
    return user


def get_goal_store(
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> GoalStore:
    """Goal store persisted in the current user's blobs"""
    return GoalStore(DatabaseStorage(db, user.id))
