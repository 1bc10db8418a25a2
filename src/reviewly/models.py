"""
SQLAlchemy ORM models for the Reviewly API.
"""

from __future__ import annotations

import json
from datetime import datetime
from decimal import Decimal

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    func,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.ext.hybrid import hybrid_property
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship
from sqlalchemy.types import TypeDecorator

from .constants import REVIEW_CATEGORIES, WEEKS_PER_YEAR, Gender, Roles, WeekState
from .security import decrypt_string, encrypt_string, hash_password, verify_password


class JSONBType(TypeDecorator):
    """
    Custom type that provides JSONB support for PostgreSQL
    and falls back to TEXT with JSON serialization for SQLite.

    This allows tests to run with SQLite while production uses PostgreSQL JSONB.
    """

    impl = Text
    cache_ok = True

    def load_dialect_impl(self, dialect):
        if dialect.name == "postgresql":
            return dialect.type_descriptor(JSONB())
        return dialect.type_descriptor(Text())

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        if dialect.name == "postgresql":
            return value
        return json.dumps(value)

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        if dialect.name == "postgresql":
            return value
        if isinstance(value, str):
            return json.loads(value)
        return value

    @property
    def python_type(self):
        return object


JSONB_TYPE = JSONBType()


def default_week_states() -> list[str]:
    return [WeekState.NEUTRAL.value] * WEEKS_PER_YEAR


class Base(DeclarativeBase):
    """Declarative base for all ORM models."""


class StaffMember(Base):
    """A waiter or waitress that customers can rate."""

    __tablename__ = "reviewly_staff"
    __table_args__ = (Index("ix_staff_active", "is_active"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    photo_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    employee_code: Mapped[str] = mapped_column(String(16), unique=True, nullable=False)
    gender: Mapped[str] = mapped_column(String(16), nullable=False, default=Gender.MESERA.value)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, server_default=func.now(), onupdate=func.now(), nullable=False
    )

    reviews: Mapped[list[Review]] = relationship(
        "Review", back_populates="staff", cascade="all, delete-orphan", passive_deletes=True
    )


class Review(Base):
    """
    One visitor's rating of one staff member.

    ``rating`` is the mean of the five category scores and is only ever
    written by the review service together with the scores.
    """

    __tablename__ = "reviewly_reviews"
    __table_args__ = (
        Index("ix_review_staff_created", "staff_id", "created_at"),
        Index("ix_review_rating", "rating"),
        Index("ix_review_ip_created", "ip_address", "created_at"),
        *(
            CheckConstraint(f"{category} >= 1 AND {category} <= 5", name=f"check_{category}_range")
            for category in REVIEW_CATEGORIES
        ),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    staff_id: Mapped[int] = mapped_column(
        ForeignKey("reviewly_staff.id", ondelete="CASCADE"), nullable=False
    )
    attentiveness: Mapped[int] = mapped_column(Integer, nullable=False)
    cleanliness: Mapped[int] = mapped_column(Integer, nullable=False)
    speed: Mapped[int] = mapped_column(Integer, nullable=False)
    menu_knowledge: Mapped[int] = mapped_column(Integer, nullable=False)
    presentation: Mapped[int] = mapped_column(Integer, nullable=False)
    rating: Mapped[Decimal] = mapped_column(Numeric(3, 1), nullable=False)
    attentiveness_comment: Mapped[str | None] = mapped_column(String(300), nullable=True)
    cleanliness_comment: Mapped[str | None] = mapped_column(String(300), nullable=True)
    speed_comment: Mapped[str | None] = mapped_column(String(300), nullable=True)
    menu_knowledge_comment: Mapped[str | None] = mapped_column(String(300), nullable=True)
    presentation_comment: Mapped[str | None] = mapped_column(String(300), nullable=True)
    comment: Mapped[str | None] = mapped_column(String(500), nullable=True)
    customer_name: Mapped[str | None] = mapped_column(String(100), nullable=True)
    ip_address: Mapped[str] = mapped_column(String(64), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, server_default=func.now(), onupdate=func.now(), nullable=False
    )

    staff: Mapped[StaffMember] = relationship("StaffMember", back_populates="reviews")

    @property
    def scores(self) -> dict[str, int]:
        return {category: getattr(self, category) for category in REVIEW_CATEGORIES}

    @property
    def category_comments(self) -> dict[str, str]:
        comments = {}
        for category in REVIEW_CATEGORIES:
            value = getattr(self, f"{category}_comment")
            if value:
                comments[category] = value
        return comments


class Customer(Base):
    """Loyalty record tracking weekly visits; unrelated to review authors."""

    __tablename__ = "reviewly_customers"
    __table_args__ = (
        Index("ix_customer_name", "name"),
        Index("ix_customer_created_at", "created_at"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(120), nullable=False)
    document_encrypted: Mapped[str | None] = mapped_column(Text, nullable=True)
    phone_encrypted: Mapped[str | None] = mapped_column(Text, nullable=True)
    email_encrypted: Mapped[str | None] = mapped_column(Text, nullable=True)
    week_states: Mapped[list[str]] = mapped_column(
        JSONB_TYPE, nullable=False, default=default_week_states
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime, server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, server_default=func.now(), onupdate=func.now(), nullable=False
    )

    @hybrid_property
    def document(self) -> str | None:
        return decrypt_string(self.document_encrypted)

    @document.setter
    def document(self, value: str | None) -> None:
        self.document_encrypted = encrypt_string(value) if value else None

    @hybrid_property
    def phone(self) -> str | None:
        return decrypt_string(self.phone_encrypted)

    @phone.setter
    def phone(self, value: str | None) -> None:
        self.phone_encrypted = encrypt_string(value) if value else None

    @hybrid_property
    def email(self) -> str | None:
        return decrypt_string(self.email_encrypted)

    @email.setter
    def email(self, value: str | None) -> None:
        self.email_encrypted = encrypt_string(value) if value else None

    def set_week_state(self, week_index: int, state: str) -> None:
        """Replace one week marker; the list is reassigned so the change is tracked."""
        states = list(self.week_states or default_week_states())
        states[week_index] = state
        self.week_states = states


class AdminAccount(Base):
    """Dashboard user. Only the password hash is stored."""

    __tablename__ = "reviewly_accounts"
    __table_args__ = (Index("ix_account_role_active", "role", "is_active"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    username: Mapped[str] = mapped_column(String(50), unique=True, nullable=False)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    password_hash: Mapped[str] = mapped_column(String(128), nullable=False)
    role: Mapped[str] = mapped_column(String(16), nullable=False, default=Roles.MANAGER.value)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, server_default=func.now(), onupdate=func.now(), nullable=False
    )

    def set_password(self, password: str) -> None:
        self.password_hash = hash_password(password)

    def verify_password(self, password: str) -> bool:
        return verify_password(password, self.password_hash)
