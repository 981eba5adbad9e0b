"""SQLAlchemy ORM models for users, transactions and per-user stored blobs"""

import uuid
from datetime import datetime
from sqlalchemy import Column, String, Boolean, Float, DateTime, Integer, ForeignKey, Text, JSON, Index, UniqueConstraint
from sqlalchemy.types import Uuid
from sqlalchemy.orm import declarative_base, relationship
from sqlalchemy.sql import func

Base = declarative_base()


class User(Base):
    """Registered player with a coin balance"""

    __tablename__ = "app_user"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String(50), nullable=False)
    mobile = Column(String(10), nullable=False, unique=True, index=True)
    email = Column(Text, nullable=False, unique=True, index=True)
    password_hash = Column(Text, nullable=False)
    coins = Column(Integer, nullable=False, default=0)
    level = Column(Text, nullable=False, default="Beginner")
    completed_quiz = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=datetime.now, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    transactions = relationship("Transaction", back_populates="user", cascade="all, delete-orphan")
    blobs = relationship("StoredBlob", back_populates="owner", cascade="all, delete-orphan")


class Transaction(Base):
    """Payment or recorded expense; status follows the gateway callback"""

    __tablename__ = "payment_transaction"
    __table_args__ = (
        Index("ix_transaction_user_created", "user_id", "created_at"),
        Index("ix_transaction_user_category", "user_id", "category"),
    )

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid(as_uuid=True), ForeignKey("app_user.id", ondelete="CASCADE"), nullable=False, index=True)
    order_id = Column(Text, nullable=True, index=True)
    payment_id = Column(Text, nullable=True, unique=True)
    signature = Column(Text, nullable=True)
    amount = Column(Float, nullable=False)
    currency = Column(String(3), nullable=False, default="INR")
    status = Column(Text, nullable=False, default="pending", index=True)
    description = Column(String(500), nullable=False)
    category = Column(Text, nullable=False)
    merchant = Column(String(100), nullable=True)
    payment_method = Column(Text, nullable=True, index=True)
    payment_metadata = Column(JSON, nullable=True)
    notes = Column(String(200), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=datetime.now, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    user = relationship("User", back_populates="transactions")


class StoredBlob(Base):
    """Keyed JSON blob owned by a user (goal list, category snapshot)"""

    __tablename__ = "stored_blob"
    __table_args__ = (UniqueConstraint("owner_id", "key", name="uq_stored_blob_owner_key"),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    owner_id = Column(Uuid(as_uuid=True), ForeignKey("app_user.id", ondelete="CASCADE"), nullable=False)
    key = Column(Text, nullable=False)
    value = Column(Text, nullable=False)
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    owner = relationship("User", back_populates="blobs")
