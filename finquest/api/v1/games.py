"""POST /api/games/debt-destroyer - payoff strategy mini-game"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from finquest.api.v1.schemas import DebtDestroyerRequest, Envelope, PayoffOut
from finquest.api.dependencies import get_current_user
from finquest.domain.models import Debt
from finquest.domain.payoff import simulate
from finquest.infrastructure.database.models import User
from finquest.infrastructure.database.repositories import UserRepository
from finquest.infrastructure.database.session import get_db
from finquest.infrastructure.observability.metrics import record_coins

# Avalanche minimizes interest, so it pays better
STRATEGY_REWARDS = {"avalanche": 200, "snowball": 150}

router = APIRouter()


@router.post("/games/debt-destroyer", response_model=Envelope[PayoffOut])
def play_debt_destroyer(
    body: DebtDestroyerRequest,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Simulate the chosen strategy and credit the strategy reward"""
    debts = [Debt(d.name, d.amount, d.interest_rate, d.min_payment) for d in body.debts]
    result = simulate(debts, body.extra_payment, body.strategy)

    coins_earned = STRATEGY_REWARDS[body.strategy]
    UserRepository(db).update_fields(user, {"coins": user.coins + coins_earned})
    db.commit()
    record_coins("debt_destroyer", coins_earned)

    return Envelope(
        message=f"Strategy applied! +{coins_earned} coins",
        data=PayoffOut(
            strategy=body.strategy,
            months=result.months,
            total_interest=result.total_interest,
            payoff_order=result.payoff_order,
            coins_earned=coins_earned,
            coins=user.coins,
        ),
    )
