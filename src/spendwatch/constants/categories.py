"""
Fixed expense categories offered by the expense form and stored on each row.
"""

from __future__ import annotations

from enum import Enum


class ExpenseCategory(str, Enum):
    FOOD = "Food"
    TRANSPORTATION = "Transportation"
    ENTERTAINMENT = "Entertainment"
    SHOPPING = "Shopping"
    BILLS = "Bills"
    HEALTH = "Health"
    EDUCATION = "Education"
    OTHERS = "Others"

    @classmethod
    def parse(cls, value: str) -> "ExpenseCategory":
        """Match a category by its display value, case-insensitively."""

        needle = (value or "").strip().lower()
        for member in cls:
            if member.value.lower() == needle:
                return member
        raise ValueError(f"Unknown category: {value!r}")


# Dropdown order
EXPENSE_CATEGORIES = [member.value for member in ExpenseCategory]
