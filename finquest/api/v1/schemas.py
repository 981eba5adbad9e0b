"""Pydantic schemas for API request/response validation"""

from datetime import datetime
from typing import Any, Dict, Generic, List, Literal, Optional, TypeVar
from pydantic import BaseModel, ConfigDict, Field, field_validator

T = TypeVar("T")

Category = Literal[
    "food", "entertainment", "travel", "shopping", "savings",
    "insurance", "emergency", "misc", "bills", "healthcare",
    "education", "transport", "utilities", "subscriptions",
]
PaymentMethod = Literal["cash", "upi", "card", "netbanking", "wallet", "emi", "other"]
GatewayPaymentMethod = Literal["upi", "card", "netbanking", "wallet", "emi"]
TransactionStatus = Literal["pending", "completed", "failed", "cancelled"]
Level = Literal["Beginner", "Intermediate", "Advanced", "Expert"]
Period = Literal["week", "month", "year"]
Strategy = Literal["snowball", "avalanche"]

MOBILE_PATTERN = r"^[0-9]{10}$"
EMAIL_PATTERN = r"^\w+([.-]?\w+)*@\w+([.-]?\w+)*(\.\w{2,3})+$"


class Envelope(BaseModel, Generic[T]):
    """Success wrapper shared by every endpoint"""

    success: bool = True
    message: Optional[str] = None
    data: T


# --- Auth & users ---

class RegisterRequest(BaseModel):
    """Request body for POST /api/auth/register"""

    name: str = Field(..., min_length=2, max_length=50)
    mobile: str = Field(..., pattern=MOBILE_PATTERN, description="10-digit mobile number")
    email: str = Field(..., pattern=EMAIL_PATTERN)
    password: str = Field(..., min_length=6)


class LoginRequest(BaseModel):
    """Request body for POST /api/auth/login"""

    identifier: str = Field(..., min_length=1, description="Mobile number or email")
    password: str = Field(..., min_length=1)


class UpdateProfileRequest(BaseModel):
    """Request body for PUT /api/users/profile - only supplied fields change"""

    model_config = ConfigDict(extra="forbid")

    name: Optional[str] = Field(None, min_length=2, max_length=50)
    email: Optional[str] = Field(None, pattern=EMAIL_PATTERN)
    coins: Optional[int] = Field(None, ge=0)
    level: Optional[Level] = None
    completed_quiz: Optional[bool] = None

    @field_validator("name", "email", "coins", "level", "completed_quiz")
    @classmethod
    def reject_null(cls, value):
        # Omit a field to leave it unchanged; null would clear a required column
        if value is None:
            raise ValueError("must not be null")
        return value


class UpdateCoinsRequest(BaseModel):
    coins: int = Field(..., ge=0)


class CompleteQuizRequest(BaseModel):
    coins: int = Field(..., ge=0)
    level: Level


class UserOut(BaseModel):
    id: str
    name: str
    mobile: str
    email: str
    coins: int
    level: str
    completed_quiz: bool

    @classmethod
    def from_user(cls, user: Any) -> "UserOut":
        return cls(
            id=str(user.id),
            name=user.name,
            mobile=user.mobile,
            email=user.email,
            coins=user.coins,
            level=user.level,
            completed_quiz=user.completed_quiz,
        )


class AuthOut(BaseModel):
    user: UserOut
    token: str


class CoinsOut(BaseModel):
    coins: int


# --- Transactions ---

class PaymentMetadata(BaseModel):
    """Method-specific details supplied by the checkout form"""

    upi_id: Optional[str] = None
    bank_name: Optional[str] = None
    card_last4: Optional[str] = Field(None, pattern=r"^[0-9]{4}$")
    card_type: Optional[str] = None
    wallet_name: Optional[str] = None


class CreateTransactionRequest(BaseModel):
    """Request body for POST /api/transactions (manually recorded expense)"""

    amount: float = Field(..., ge=0)
    description: str = Field(..., min_length=1, max_length=500)
    category: Category
    merchant: Optional[str] = Field(None, max_length=100)
    payment_method: Optional[PaymentMethod] = None
    notes: Optional[str] = Field(None, max_length=200)


class TransactionOut(BaseModel):
    id: str
    order_id: Optional[str] = None
    payment_id: Optional[str] = None
    amount: float
    currency: str
    status: str
    description: str
    category: str
    merchant: Optional[str] = None
    payment_method: Optional[str] = None
    payment_metadata: Optional[Dict[str, Any]] = None
    notes: Optional[str] = None
    created_at: Optional[datetime] = None

    @classmethod
    def from_row(cls, row: Any) -> "TransactionOut":
        return cls.model_validate({**{c: getattr(row, c) for c in cls.model_fields}, "id": str(row.id)})


class PaginationOut(BaseModel):
    current: int
    pages: int
    total: int
    has_next: bool
    has_prev: bool


class TransactionListOut(BaseModel):
    transactions: List[TransactionOut]
    pagination: PaginationOut


class CategoryBreakdownOut(BaseModel):
    category: str
    amount: float
    count: int
    average: int
    percentage: int


class AnalyticsOut(BaseModel):
    period: str
    total_spent: float
    transaction_count: int
    category_breakdown: List[CategoryBreakdownOut]


class CategorySpendOut(BaseModel):
    name: str
    spent: float
    limit: Optional[float] = None


class MoneyManagementOut(BaseModel):
    monthly_income: int
    categories: List[CategorySpendOut]
    total_spent: float
    remaining_money: float
    spending_percentage: int
    transaction_count: int
    last_transaction: Optional[datetime] = None


# --- Payments ---

class CreateOrderRequest(BaseModel):
    """Request body for POST /api/payments/orders"""

    amount: float = Field(..., gt=0, description="Amount in major currency units")
    description: str = Field(..., min_length=1, max_length=500)
    category: Category
    merchant: str = Field(..., min_length=1, max_length=100)
    payment_method: GatewayPaymentMethod
    metadata: Optional[PaymentMetadata] = None
    notes: Optional[str] = Field(None, max_length=200)


class OrderOut(BaseModel):
    order_id: str
    transaction_id: str
    amount: int  # Minor units, as the checkout widget expects
    currency: str
    key_id: str


class VerifyPaymentRequest(BaseModel):
    """Gateway callback fields forwarded by the checkout widget"""

    order_id: str = Field(..., min_length=1)
    payment_id: str = Field(..., min_length=1)
    signature: str = Field(..., min_length=1)


class RefundRequest(BaseModel):
    amount: Optional[float] = Field(None, gt=0)
    notes: Optional[Dict[str, str]] = None


# --- Goals ---

class CreateGoalRequest(BaseModel):
    """Request body for POST /api/goals"""

    name: str = Field(..., min_length=1, max_length=100)
    weekly_limit: int = Field(..., gt=0)


class GoalOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    weekly_limit: int
    current_spending: float
    start_date: datetime
    end_date: datetime
    status: str
    coins_reward: int
    coins_penalty: int


class CreateGoalOut(BaseModel):
    goal: GoalOut
    coins: int


class CategorySpendIn(BaseModel):
    name: str = Field(..., min_length=1, max_length=50)
    spent: float = Field(..., ge=0)
    limit: Optional[float] = Field(None, ge=0)


class CategoriesRequest(BaseModel):
    """Request body for PUT /api/goals/categories"""

    categories: List[CategorySpendIn]


class CategoriesOut(BaseModel):
    categories: List[CategorySpendOut]
    total_spent: float
    goals: List[GoalOut]


class SettlementOut(BaseModel):
    goal: GoalOut
    action: str
    coins_delta: int


class SettleOut(BaseModel):
    settlements: List[SettlementOut]
    coins: int


# --- Games ---

class DebtIn(BaseModel):
    name: str = Field(..., min_length=1, max_length=50)
    amount: float = Field(..., gt=0)
    interest_rate: float = Field(..., ge=0, description="Annual rate in percent")
    min_payment: float = Field(..., ge=0)


class DebtDestroyerRequest(BaseModel):
    """Request body for POST /api/games/debt-destroyer"""

    debts: List[DebtIn] = Field(..., min_length=1)
    extra_payment: float = Field(..., ge=0)
    strategy: Strategy


class PayoffOut(BaseModel):
    strategy: str
    months: int
    total_interest: float
    payoff_order: List[str]
    coins_earned: int
    coins: int
