"""Expense entry form state, validation and submission."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Callable, Optional

from ..constants.categories import ExpenseCategory
from ..domain.repositories import ExpenseRepository
from ..errors import SpendWatchError, UnexpectedError, ValidationError
from ..logging_config import get_logger
from ..models.expense import Expense
from .auth import AuthSession
from .validation import parse_positive_amount, require_text

logger = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class ExpenseInput:
    """Validated field values ready to be stored."""

    title: str
    amount: Decimal
    category: ExpenseCategory
    occurred_on: date


class ExpenseEntryForm:
    """Collects one expense and stores it for the signed-in identity.

    Failed submissions keep every field so the user can correct and retry.
    A successful submission clears the fields and closes the form.
    """

    def __init__(
        self,
        *,
        auth: AuthSession,
        repository: ExpenseRepository,
        today: Callable[[], date] = date.today,
    ) -> None:
        self.auth = auth
        self.repository = repository
        self._today = today
        self.is_open = False
        self.title = ""
        self.amount = ""
        self.category = ""
        self.occurred_on: Optional[date] = today()

    def open(self) -> None:
        self.is_open = True

    def close(self) -> None:
        self.is_open = False

    def reset(self) -> None:
        self.title = ""
        self.amount = ""
        self.category = ""
        self.occurred_on = self._today()

    def validate(self) -> ExpenseInput:
        """Check every field and return the parsed values."""
        title = require_text(self.title, field="title", label="Title")
        amount = parse_positive_amount(self.amount)
        category_text = require_text(self.category, field="category", label="Category")
        try:
            category = ExpenseCategory.parse(category_text)
        except ValueError:
            raise ValidationError(
                f"Unknown category: {category_text}", field="category"
            ) from None
        if self.occurred_on is None:
            raise ValidationError("Date is required", field="occurred_on")
        return ExpenseInput(
            title=title, amount=amount, category=category, occurred_on=self.occurred_on
        )

    def submit(self) -> Expense:
        """Validate and insert one expense owned by the current identity.

        Raises:
            AuthError: nobody is signed in
            ValidationError: a field is empty or the amount is not positive
            BackendError: the store rejected the insert
            UnexpectedError: anything else went wrong
        """
        identity = self.auth.require_identity()
        data = self.validate()
        try:
            expense = self.repository.create(
                Expense(
                    user_id=identity.user_id,
                    title=data.title,
                    amount=float(data.amount),
                    category=data.category.value,
                    occurred_on=data.occurred_on,
                ),
                user_id=identity.user_id,
            )
        except SpendWatchError:
            raise
        except Exception as exc:
            logger.exception("Unexpected error adding expense")
            raise UnexpectedError() from exc

        logger.info(
            "Expense submitted",
            extra={"user_id": identity.user_id, "category": data.category.value},
        )
        self.reset()
        self.close()
        return expense
