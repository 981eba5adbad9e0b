"""Goal list persistence and lifecycle operations over an injected storage port"""

import json
import logging
from datetime import datetime
from typing import List
from finquest.domain.category_feed import CategorySpendFeed, Subscription, load_blob_list
from finquest.domain.exceptions import GoalNotFoundError
from finquest.domain.goals import create_goal, evaluate, sync_spending
from finquest.domain.models import Goal, Settlement
from finquest.domain.ports import GOALS_KEY, StoragePort

logger = logging.getLogger(__name__)


class GoalStore:
    """
    Weekly goals for one user.

    All state lives behind the storage port; the store itself only decodes,
    applies the pure goal functions, and writes back when something changed.
    """

    def __init__(self, storage: StoragePort):
        self.storage = storage

    def load_goals(self) -> List[Goal]:
        goals = []
        for item in load_blob_list(self.storage, GOALS_KEY):
            try:
                goals.append(Goal.from_dict(item))
            except (KeyError, TypeError, ValueError):
                logger.warning("Skipping malformed goal entry", extra={"entry": repr(item)})
        return goals

    def save_goals(self, goals: List[Goal]) -> None:
        self.storage.write(GOALS_KEY, json.dumps([goal.to_dict() for goal in goals]))

    def create(self, name: str, weekly_limit: int, now: datetime) -> Goal:
        """Add a goal, snapshotting current spending from the category totals"""
        goal = create_goal(name, weekly_limit, CategorySpendFeed(self.storage).total(), now)
        self.save_goals(self.load_goals() + [goal])
        return goal

    def delete(self, goal_id: str) -> None:
        goals = self.load_goals()
        remaining = [goal for goal in goals if goal.id != goal_id]
        if len(remaining) == len(goals):
            raise GoalNotFoundError(f"Goal {goal_id} not found")
        self.save_goals(remaining)

    def sync(self, total_spent: float) -> List[Goal]:
        """Push a new spend total into active goals; no write when nothing changed"""
        goals = self.load_goals()
        updated = sync_spending(goals, total_spent)
        if updated != goals:
            self.save_goals(updated)
        return updated

    def settle(self, now: datetime) -> List[Settlement]:
        """
        Evaluate every goal and persist finalized ones.

        Returns only the settlements that changed a goal, so callers apply each
        coin instruction exactly once.
        """
        goals = self.load_goals()
        results = [evaluate(goal, now) for goal in goals]
        settled = [result for result in results if not result.is_noop]
        if settled:
            self.save_goals([result.goal for result in results])
        return settled

    def follow(self, feed: CategorySpendFeed) -> Subscription:
        """Keep active goals in step with the feed until the subscription is cancelled"""
        return feed.subscribe(self.sync)
