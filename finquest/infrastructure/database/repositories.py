"""Data access layer for users and transactions"""

import math
import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple
from sqlalchemy import or_
from sqlalchemy.orm import Session
from finquest.domain.exceptions import DuplicateUserError
from finquest.infrastructure.database.models import User, Transaction


@dataclass
class TransactionFilters:
    """Optional filters for transaction listing"""

    category: Optional[str] = None
    status: Optional[str] = None
    payment_method: Optional[str] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None


@dataclass
class Pagination:
    current: int
    pages: int
    total: int
    has_next: bool
    has_prev: bool


class UserRepository:
    """Repository for user accounts"""

    def __init__(self, db: Session):
        self.db = db

    def create_user(self, name: str, mobile: str, email: str, password_hash: str) -> User:
        db_user = User(
            name=name,
            mobile=mobile,
            email=email.lower(),
            password_hash=password_hash,
            coins=0,
            level="Beginner",
            completed_quiz=False,
        )
        self.db.add(db_user)
        self.db.flush()
        return db_user

    def get_by_id(self, user_id: uuid.UUID, for_update: bool = False) -> Optional[User]:
        """Fetch a user; for_update takes a row lock where the database supports it"""
        query = self.db.query(User).filter(User.id == user_id)
        if for_update:
            query = query.with_for_update().populate_existing()
        return query.first()

    def find_by_identifier(self, identifier: str) -> Optional[User]:
        """Look up by mobile number or email"""
        return (
            self.db.query(User)
            .filter(or_(User.mobile == identifier, User.email == identifier.lower()))
            .first()
        )

    def ensure_available(
        self,
        mobile: Optional[str] = None,
        email: Optional[str] = None,
        exclude_id: Optional[uuid.UUID] = None,
    ) -> None:
        """
        Check that neither identifier belongs to another account.

        Raises:
            DuplicateUserError: Naming the identifier that is already taken
        """
        if mobile:
            query = self.db.query(User).filter(User.mobile == mobile)
            if exclude_id is not None:
                query = query.filter(User.id != exclude_id)
            if query.first():
                raise DuplicateUserError("User with this mobile number already exists")
        if email:
            query = self.db.query(User).filter(User.email == email.lower())
            if exclude_id is not None:
                query = query.filter(User.id != exclude_id)
            if query.first():
                raise DuplicateUserError("User with this email already exists")

    def update_fields(self, user: User, changes: Dict[str, Any]) -> User:
        for name, value in changes.items():
            setattr(user, name, value.lower() if name == "email" else value)
        self.db.flush()
        return user

    def delete(self, user: User) -> None:
        self.db.delete(user)
        self.db.flush()


class TransactionRepository:
    """Repository for payments and recorded expenses"""

    def __init__(self, db: Session):
        self.db = db

    def create(self, user_id: uuid.UUID, **fields: Any) -> Transaction:
        db_transaction = Transaction(user_id=user_id, **fields)
        self.db.add(db_transaction)
        self.db.flush()  # Get ID without committing
        return db_transaction

    def get_for_user(self, transaction_id: uuid.UUID, user_id: uuid.UUID) -> Optional[Transaction]:
        return (
            self.db.query(Transaction)
            .filter(Transaction.id == transaction_id, Transaction.user_id == user_id)
            .first()
        )

    def get_by_order_id(self, order_id: str, user_id: uuid.UUID) -> Optional[Transaction]:
        return (
            self.db.query(Transaction)
            .filter(Transaction.order_id == order_id, Transaction.user_id == user_id)
            .first()
        )

    def list_for_user(
        self,
        user_id: uuid.UUID,
        page: int = 1,
        limit: int = 20,
        filters: Optional[TransactionFilters] = None,
    ) -> Tuple[List[Transaction], Pagination]:
        """Newest first, paginated"""
        filters = filters or TransactionFilters()
        query = self.db.query(Transaction).filter(Transaction.user_id == user_id)

        if filters.category:
            query = query.filter(Transaction.category == filters.category)
        if filters.status:
            query = query.filter(Transaction.status == filters.status)
        if filters.payment_method:
            query = query.filter(Transaction.payment_method == filters.payment_method)
        if filters.start_date:
            query = query.filter(Transaction.created_at >= filters.start_date)
        if filters.end_date:
            query = query.filter(Transaction.created_at <= filters.end_date)

        total = query.count()
        items = (
            query.order_by(Transaction.created_at.desc())
            .offset((page - 1) * limit)
            .limit(limit)
            .all()
        )
        pages = math.ceil(total / limit)

        return items, Pagination(
            current=page,
            pages=pages,
            total=total,
            has_next=page < pages,
            has_prev=page > 1,
        )

    def list_completed_between(self, user_id: uuid.UUID, start: datetime, end: datetime) -> List[Transaction]:
        return (
            self.db.query(Transaction)
            .filter(
                Transaction.user_id == user_id,
                Transaction.status == "completed",
                Transaction.created_at >= start,
                Transaction.created_at <= end,
            )
            .order_by(Transaction.created_at.desc())
            .all()
        )

    def mark_completed(self, transaction: Transaction, payment_id: str, signature: str) -> Transaction:
        transaction.payment_id = payment_id
        transaction.signature = signature
        transaction.status = "completed"
        self.db.flush()
        return transaction

    def mark_failed(self, transaction: Transaction) -> Transaction:
        transaction.status = "failed"
        self.db.flush()
        return transaction

    def get_by_payment_id(self, payment_id: str, user_id: Optional[uuid.UUID] = None) -> Optional[Transaction]:
        """Look up by gateway payment id, optionally scoped to one user"""
        query = self.db.query(Transaction).filter(Transaction.payment_id == payment_id)
        if user_id is not None:
            query = query.filter(Transaction.user_id == user_id)
        return query.first()

    def record_refund(self, transaction: Transaction, amount: float) -> float:
        """Add to the refunded total kept in payment_metadata; returns the new total"""
        metadata = dict(transaction.payment_metadata or {})
        refunded = round(metadata.get("refunded_amount", 0) + amount, 2)
        metadata["refunded_amount"] = refunded
        # Reassign so the JSON column is flagged dirty
        transaction.payment_metadata = metadata
        if refunded >= transaction.amount:
            transaction.status = "cancelled"
        self.db.flush()
        return refunded
