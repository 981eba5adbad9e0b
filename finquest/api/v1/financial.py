"""GET /api/financial/money-management - monthly budget view from real transactions"""

from datetime import datetime
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from finquest.api.v1.schemas import CategorySpendOut, Envelope, MoneyManagementOut
from finquest.api.dependencies import get_current_user, get_now
from finquest.domain.analytics import category_spending, level_multiplier
from finquest.infrastructure.database.models import User
from finquest.infrastructure.database.repositories import TransactionRepository
from finquest.infrastructure.database.session import get_db
from finquest.utils.date_utils import month_bounds

BASE_MONTHLY_INCOME = 30_000
INCOME_PER_COIN = 50

router = APIRouter()


def estimated_monthly_income(user: User) -> int:
    """Income estimate from coins and level until income becomes user-configurable"""
    return round((BASE_MONTHLY_INCOME + user.coins * INCOME_PER_COIN) * level_multiplier(user.level))


@router.get("/financial/money-management", response_model=Envelope[MoneyManagementOut])
def get_money_management(
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    now: datetime = Depends(get_now),
):
    """
    Category spending for the current calendar month.

    Only completed transactions count; limits scale with the user's level.
    """
    start, end = month_bounds(now)
    transactions = TransactionRepository(db).list_completed_between(user.id, start, end)

    categories = category_spending(transactions, user.level)
    monthly_income = estimated_monthly_income(user)
    total_spent = sum(t.amount for t in transactions)

    return Envelope(
        data=MoneyManagementOut(
            monthly_income=monthly_income,
            categories=[CategorySpendOut(**c.to_dict()) for c in categories],
            total_spent=total_spent,
            remaining_money=monthly_income - total_spent,
            spending_percentage=round(total_spent / monthly_income * 100) if monthly_income > 0 else 0,
            transaction_count=len(transactions),
            last_transaction=transactions[0].created_at if transactions else None,
        )
    )
