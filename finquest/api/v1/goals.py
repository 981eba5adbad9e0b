"""Weekly spending goals: create, list, delete, category sync and settlement"""

import logging
from datetime import datetime
from typing import List
from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.orm import Session

from finquest.api.v1.schemas import (
    CategoriesOut,
    CategoriesRequest,
    CategorySpendOut,
    CreateGoalOut,
    CreateGoalRequest,
    Envelope,
    GoalOut,
    SettleOut,
    SettlementOut,
)
from finquest.api.dependencies import get_current_user, get_goal_store, get_now, get_request_id
from finquest.config import settings
from finquest.domain.analytics import category_spending
from finquest.domain.category_feed import CategorySpendFeed
from finquest.domain.exceptions import GoalNotFoundError
from finquest.domain.goal_store import GoalStore
from finquest.domain.models import CategorySpend, Goal
from finquest.infrastructure.database.models import User
from finquest.infrastructure.database.repositories import TransactionRepository, UserRepository
from finquest.infrastructure.database.session import get_db
from finquest.infrastructure.observability.logging import log_settlement
from finquest.infrastructure.observability.metrics import record_coins, record_settlement
from finquest.utils.date_utils import month_bounds

router = APIRouter()


def _goal_out(goal: Goal) -> GoalOut:
    return GoalOut.model_validate(goal, from_attributes=True)


def _publish(store: GoalStore, categories: list) -> CategoriesOut:
    """Publish a snapshot with the store subscribed only for the duration of the call"""
    feed = CategorySpendFeed(store.storage)
    with store.follow(feed):
        total = feed.publish(categories)
    return CategoriesOut(
        categories=[CategorySpendOut(**c.to_dict()) for c in categories],
        total_spent=total,
        goals=[_goal_out(goal) for goal in store.load_goals()],
    )


@router.get("/goals", response_model=Envelope[List[GoalOut]])
def list_goals(store: GoalStore = Depends(get_goal_store)):
    return Envelope(data=[_goal_out(goal) for goal in store.load_goals()])


@router.post("/goals", response_model=Envelope[CreateGoalOut], status_code=201)
def create_goal(
    body: CreateGoalRequest,
    user: User = Depends(get_current_user),
    store: GoalStore = Depends(get_goal_store),
    db: Session = Depends(get_db),
    now: datetime = Depends(get_now),
):
    """Create a goal for the current week; setting a goal earns a fixed bonus"""
    goal = store.create(body.name, body.weekly_limit, now)

    bonus = settings.goal_creation_bonus
    UserRepository(db).update_fields(user, {"coins": user.coins + bonus})
    db.commit()
    record_coins("goal_created", bonus)

    return Envelope(
        message=f"Goal \"{goal.name}\" created successfully",
        data=CreateGoalOut(goal=_goal_out(goal), coins=user.coins),
    )


@router.delete("/goals/{goal_id}", response_model=Envelope[None])
def delete_goal(
    goal_id: str,
    store: GoalStore = Depends(get_goal_store),
    db: Session = Depends(get_db),
):
    try:
        store.delete(goal_id)
    except GoalNotFoundError:
        raise HTTPException(status_code=404, detail="Goal not found")
    db.commit()
    return Envelope(message="Goal deleted", data=None)


@router.get("/goals/categories", response_model=Envelope[CategoriesOut])
def get_categories(store: GoalStore = Depends(get_goal_store)):
    categories = CategorySpendFeed(store.storage).snapshot()
    return Envelope(
        data=CategoriesOut(
            categories=[CategorySpendOut(**c.to_dict()) for c in categories],
            total_spent=sum(c.spent for c in categories),
            goals=[_goal_out(goal) for goal in store.load_goals()],
        )
    )


@router.put("/goals/categories", response_model=Envelope[CategoriesOut])
def put_categories(
    body: CategoriesRequest,
    store: GoalStore = Depends(get_goal_store),
    db: Session = Depends(get_db),
):
    """Replace the category snapshot; active goals pick up the new total"""
    categories = [CategorySpend(name=c.name, spent=c.spent, limit=c.limit) for c in body.categories]
    result = _publish(store, categories)
    db.commit()
    return Envelope(data=result)


@router.post("/goals/sync", response_model=Envelope[CategoriesOut])
def sync_from_transactions(
    user: User = Depends(get_current_user),
    store: GoalStore = Depends(get_goal_store),
    db: Session = Depends(get_db),
    now: datetime = Depends(get_now),
):
    """Rebuild the category snapshot from this month's completed transactions"""
    start, end = month_bounds(now)
    transactions = TransactionRepository(db).list_completed_between(user.id, start, end)
    result = _publish(store, category_spending(transactions, user.level))
    db.commit()
    return Envelope(data=result)


@router.post("/goals/settle", response_model=Envelope[SettleOut])
def settle_goals(
    request: Request,
    user: User = Depends(get_current_user),
    store: GoalStore = Depends(get_goal_store),
    db: Session = Depends(get_db),
    now: datetime = Depends(get_now),
):
    """
    Finalize every goal whose week has ended and apply its coins.

    The user row is locked first so concurrent settle calls for the same user
    serialize and each goal's reward or penalty lands once.
    """
    request_id = get_request_id(request)
    locked_user = UserRepository(db).get_by_id(user.id, for_update=True)

    balance = locked_user.coins
    results = []
    for settlement in store.settle(now):
        before = balance
        balance = settlement.apply(balance)
        outcome = settlement.goal.status

        record_settlement(outcome, settlement.coins)
        log_settlement(request_id, str(user.id), settlement.goal.id, outcome, settlement.coins, balance)
        results.append(
            SettlementOut(goal=_goal_out(settlement.goal), action=settlement.action, coins_delta=balance - before)
        )

    if results:
        UserRepository(db).update_fields(locked_user, {"coins": balance})
        db.commit()
        logging.info(
            "Goals settled",
            extra={"request_id": request_id, "user_id": str(user.id), "settled": len(results)},
        )

    return Envelope(data=SettleOut(settlements=results, coins=balance))
