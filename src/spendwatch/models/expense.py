"""SQLModel definition for recorded expenses."""

from __future__ import annotations

from datetime import date
from typing import TYPE_CHECKING, ClassVar, Optional

from sqlalchemy.orm import relationship
from sqlmodel import Field, Relationship, SQLModel

if TYPE_CHECKING:  # pragma: no cover - import guard for circular dependency
    from .user import User


class Expense(SQLModel, table=True):
    """A single spend entered through the expense form."""

    __tablename__: ClassVar[str] = "expense"

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="user.id", nullable=False, index=True)
    title: str = Field(nullable=False, max_length=255)
    amount: float = Field(nullable=False, description="Positive magnitude, currency-agnostic")
    category: str = Field(nullable=False, max_length=32, index=True)
    occurred_on: date = Field(nullable=False, index=True)

    user: "User" = Relationship(sa_relationship=relationship("User", back_populates="expenses"))
