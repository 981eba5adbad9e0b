"""Domain models - pure Python dataclasses representing business entities"""

from dataclasses import dataclass, field, asdict, replace
from datetime import datetime
from typing import Any, Dict, List, Optional


@dataclass(frozen=True)
class Goal:
    """Weekly spending cap that settles into a coin reward or penalty"""

    id: str
    name: str
    weekly_limit: int
    current_spending: float
    start_date: datetime
    end_date: datetime
    status: str  # "active", "achieved" or "failed"
    coins_reward: int
    coins_penalty: int

    @property
    def is_active(self) -> bool:
        return self.status == "active"

    def with_spending(self, total: float) -> "Goal":
        return replace(self, current_spending=total)

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["start_date"] = self.start_date.isoformat()
        data["end_date"] = self.end_date.isoformat()
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Goal":
        return cls(
            id=str(data["id"]),
            name=data["name"],
            weekly_limit=int(data["weekly_limit"]),
            current_spending=float(data["current_spending"]),
            start_date=datetime.fromisoformat(data["start_date"]),
            end_date=datetime.fromisoformat(data["end_date"]),
            status=data["status"],
            coins_reward=int(data["coins_reward"]),
            coins_penalty=int(data["coins_penalty"]),
        )


@dataclass(frozen=True)
class Settlement:
    """
    Outcome of evaluating a goal: the resulting goal plus the coin adjustment
    the caller must apply to the user's balance.
    """

    goal: Goal
    action: str  # "none", "reward" or "penalty"
    coins: int = 0

    @property
    def is_noop(self) -> bool:
        return self.action == "none"

    def debit_for(self, balance: int) -> int:
        """Coins actually removed from a balance by a penalty (never overdraws)"""
        if self.action != "penalty":
            return 0
        return min(self.coins, max(balance, 0))

    def apply(self, balance: int) -> int:
        """Return the balance after this settlement"""
        if self.action == "reward":
            return balance + self.coins
        if self.action == "penalty":
            return balance - self.debit_for(balance)
        return balance


@dataclass(frozen=True)
class CategorySpend:
    """Spend total for one budget category"""

    name: str
    spent: float
    limit: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CategorySpend":
        limit = data.get("limit")
        return cls(
            name=str(data["name"]),
            spent=float(data.get("spent", 0)),
            limit=float(limit) if limit is not None else None,
        )


@dataclass
class Debt:
    """Outstanding debt used by the payoff simulator"""

    name: str
    amount: float
    interest_rate: float  # Annual percentage, 20.0 == 20%
    min_payment: float


@dataclass
class PayoffResult:
    """Output of a debt payoff simulation"""

    months: int
    total_interest: float
    payoff_order: List[str] = field(default_factory=list)


@dataclass
class CategoryBreakdown:
    """Aggregated spending for one category within a period"""

    category: str
    amount: float
    count: int
    average: int
    percentage: int


@dataclass
class SpendingSummary:
    """Spending analytics for a period"""

    period: str
    total_spent: float
    transaction_count: int
    category_breakdown: List[CategoryBreakdown]


@dataclass
class GatewayResult:
    """Tagged result of a payment gateway call - failures are values, not exceptions"""

    success: bool
    data: Optional[Dict[str, Any]] = None
    error: Optional[str] = None
