"""Recorded expenses and payment history: create, list, analytics, detail"""

import uuid
from datetime import datetime
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from finquest.api.v1.schemas import (
    AnalyticsOut,
    Category,
    CreateTransactionRequest,
    Envelope,
    PaginationOut,
    PaymentMethod,
    Period,
    TransactionListOut,
    TransactionOut,
    TransactionStatus,
)
from finquest.api.dependencies import get_current_user, get_now
from finquest.config import settings
from finquest.domain.analytics import spending_breakdown
from finquest.infrastructure.database.models import User
from finquest.infrastructure.database.repositories import TransactionFilters, TransactionRepository
from finquest.infrastructure.database.session import get_db
from finquest.utils.date_utils import period_start

router = APIRouter()


@router.post("/transactions", response_model=Envelope[TransactionOut], status_code=201)
def create_transaction(
    body: CreateTransactionRequest,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Record an expense paid outside the gateway (cash, external UPI, ...)"""
    transaction = TransactionRepository(db).create(
        user.id,
        amount=body.amount,
        currency=settings.currency,
        status="completed",
        description=body.description,
        category=body.category,
        merchant=body.merchant,
        payment_method=body.payment_method,
        notes=body.notes,
    )
    db.commit()
    db.refresh(transaction)

    return Envelope(message="Transaction recorded successfully", data=TransactionOut.from_row(transaction))


@router.get("/transactions", response_model=Envelope[TransactionListOut])
def list_transactions(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    category: Optional[Category] = None,
    status: Optional[TransactionStatus] = None,
    payment_method: Optional[PaymentMethod] = None,
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Newest-first history with optional filters"""
    filters = TransactionFilters(
        category=category,
        status=status,
        payment_method=payment_method,
        start_date=start_date,
        end_date=end_date,
    )
    items, pagination = TransactionRepository(db).list_for_user(user.id, page, limit, filters)

    return Envelope(
        data=TransactionListOut(
            transactions=[TransactionOut.from_row(item) for item in items],
            pagination=PaginationOut(**pagination.__dict__),
        )
    )


@router.get("/transactions/analytics", response_model=Envelope[AnalyticsOut])
def get_analytics(
    period: Period = "month",
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    now: datetime = Depends(get_now),
):
    """Completed spend per category for the week, month or year to date"""
    transactions = TransactionRepository(db).list_completed_between(user.id, period_start(now, period), now)
    summary = spending_breakdown(transactions, period)
    return Envelope(data=AnalyticsOut.model_validate(summary, from_attributes=True))


@router.get("/transactions/{transaction_id}", response_model=Envelope[TransactionOut])
def get_transaction(
    transaction_id: str,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    try:
        transaction_uuid = uuid.UUID(transaction_id)
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid transaction ID")

    transaction = TransactionRepository(db).get_for_user(transaction_uuid, user.id)
    if not transaction:
        raise HTTPException(status_code=404, detail="Transaction not found")

    return Envelope(data=TransactionOut.from_row(transaction))
