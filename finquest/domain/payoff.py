"""Debt payoff simulation for the Debt Destroyer mini-game"""

from typing import List
from finquest.domain.models import Debt, PayoffResult

MAX_MONTHS = 120  # Safety cap when payments never outrun interest

STRATEGIES = ("snowball", "avalanche")


def prioritize(debts: List[Debt], strategy: str) -> List[Debt]:
    """
    Order debts by repayment priority.

    - snowball: smallest outstanding amount first
    - avalanche: highest interest rate first
    """
    if strategy == "snowball":
        return sorted(debts, key=lambda d: d.amount)
    if strategy == "avalanche":
        return sorted(debts, key=lambda d: d.interest_rate, reverse=True)
    raise ValueError(f"Unknown payoff strategy: {strategy}")


def simulate(debts: List[Debt], extra_monthly_payment: float, strategy: str) -> PayoffResult:
    """
    Simulate month-by-month repayment until every debt is cleared.

    Each month:
    1. Order debts by strategy
    2. Accrue rate/12 interest on every debt
    3. Pay the minimum on every debt
    4. Put the extra payment on the first priority debt still owing
    5. Drop debts at or below zero

    Input debts are not mutated.
    """
    working = [Debt(d.name, d.amount, d.interest_rate, d.min_payment) for d in debts]
    months = 0
    total_interest = 0.0
    payoff_order: List[str] = []

    while working and months < MAX_MONTHS:
        months += 1
        working = prioritize(working, strategy)

        for debt in working:
            interest = debt.amount * debt.interest_rate / 100 / 12
            total_interest += interest
            debt.amount += interest

        for debt in working:
            debt.amount = max(0.0, debt.amount - debt.min_payment)

        if extra_monthly_payment > 0:
            target = next((d for d in working if d.amount > 0), None)
            if target is not None:
                target.amount -= min(extra_monthly_payment, target.amount)

        payoff_order.extend(d.name for d in working if d.amount <= 0)
        working = [d for d in working if d.amount > 0]

    return PayoffResult(
        months=months,
        total_interest=round(total_interest, 2),
        payoff_order=payoff_order,
    )
