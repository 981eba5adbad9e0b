"""Spending analytics over recorded transactions"""

from collections import defaultdict
from typing import Dict, Iterable, List, Protocol
from finquest.domain.models import CategoryBreakdown, CategorySpend, SpendingSummary

# Monthly budget per category before the level multiplier
CATEGORY_LIMITS: Dict[str, int] = {
    "food": 12000,
    "entertainment": 5000,
    "travel": 6000,
    "shopping": 8000,
    "savings": 10000,
    "insurance": 3000,
    "emergency": 5000,
    "misc": 4000,
    "bills": 5000,
    "healthcare": 3000,
    "education": 4000,
    "transport": 2000,
    "utilities": 3000,
    "subscriptions": 2000,
}

CATEGORIES = tuple(CATEGORY_LIMITS)

LEVEL_MULTIPLIERS: Dict[str, float] = {
    "Beginner": 1.0,
    "Intermediate": 1.3,
    "Advanced": 1.6,
    "Expert": 2.0,
}


class SpendRecord(Protocol):
    category: str
    amount: float


def level_multiplier(level: str) -> float:
    return LEVEL_MULTIPLIERS.get(level, 1.0)


def spending_breakdown(transactions: Iterable[SpendRecord], period: str) -> SpendingSummary:
    """Group spend by category, largest category first"""
    totals: Dict[str, float] = defaultdict(float)
    counts: Dict[str, int] = defaultdict(int)
    for txn in transactions:
        totals[txn.category] += txn.amount
        counts[txn.category] += 1

    total_spent = sum(totals.values())
    breakdown = [
        CategoryBreakdown(
            category=category,
            amount=amount,
            count=counts[category],
            average=round(amount / counts[category]),
            percentage=round(amount / total_spent * 100) if total_spent > 0 else 0,
        )
        for category, amount in sorted(totals.items(), key=lambda item: item[1], reverse=True)
    ]

    return SpendingSummary(
        period=period,
        total_spent=total_spent,
        transaction_count=sum(counts.values()),
        category_breakdown=breakdown,
    )


def category_spending(transactions: Iterable[SpendRecord], level: str) -> List[CategorySpend]:
    """One entry per known category with limits scaled to the user's level"""
    spent: Dict[str, float] = {category: 0.0 for category in CATEGORIES}
    for txn in transactions:
        if txn.category in spent:
            spent[txn.category] += txn.amount

    multiplier = level_multiplier(level)
    return [
        CategorySpend(
            name=category,
            spent=round(spent[category]),
            limit=round(limit * multiplier),
        )
        for category, limit in CATEGORY_LIMITS.items()
    ]
