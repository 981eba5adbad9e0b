"""Weekly goal lifecycle - creation, spending sync and one-time settlement"""

import uuid
from dataclasses import replace
from datetime import datetime
from typing import List
from finquest.domain.models import Goal, Settlement
from finquest.utils.date_utils import week_end


def create_goal(name: str, weekly_limit: int, current_spending: float, now: datetime) -> Goal:
    """
    Create an active goal running until the end of the current week.

    Reward is 1 coin per 100 currency units of limit; the penalty is half that.
    """
    if weekly_limit <= 0:
        raise ValueError("Weekly limit must be positive")

    return Goal(
        id=uuid.uuid4().hex,
        name=name,
        weekly_limit=weekly_limit,
        current_spending=current_spending,
        start_date=now,
        end_date=week_end(now),
        status="active",
        coins_reward=weekly_limit // 100,
        coins_penalty=weekly_limit // 200,
    )


def evaluate(goal: Goal, now: datetime) -> Settlement:
    """
    Settle a goal whose week has ended.

    Pure function: returns the resulting goal plus the coin instruction.
    Goals that are already finalized, or whose week is still running, come
    back unchanged with a no-op instruction, so repeated evaluation is safe.
    """
    if not goal.is_active or now <= goal.end_date:
        return Settlement(goal=goal, action="none")

    if goal.current_spending <= goal.weekly_limit:
        return Settlement(
            goal=replace(goal, status="achieved"),
            action="reward",
            coins=goal.coins_reward,
        )

    return Settlement(
        goal=replace(goal, status="failed"),
        action="penalty",
        coins=goal.coins_penalty,
    )


def sync_spending(goals: List[Goal], total_spent: float) -> List[Goal]:
    """Refresh current spending on active goals; finalized goals are frozen"""
    return [goal.with_spending(total_spent) if goal.is_active else goal for goal in goals]
