"""User model backing sign-in and record ownership."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import ClassVar, Optional

from sqlalchemy.orm import relationship
from sqlmodel import Field, Relationship, SQLModel


class User(SQLModel, table=True):
    """Account owning expenses and budgets."""

    __tablename__: ClassVar[str] = "user"

    id: Optional[int] = Field(default=None, primary_key=True)
    username: str = Field(nullable=False, unique=True, index=True, max_length=64)
    password_hash: str = Field(nullable=False, max_length=255)
    display_name: str = Field(default="", max_length=128)
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        nullable=False,
    )
    last_login: Optional[datetime] = Field(default=None)

    expenses = Relationship(
        back_populates="user",
        sa_relationship=relationship("Expense", back_populates="user"),
    )
    budgets = Relationship(
        back_populates="user",
        sa_relationship=relationship("Budget", back_populates="user"),
    )
