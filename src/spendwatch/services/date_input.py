"""A date field fed by two input channels.

The budget form lets the user either type a date (``DD/MM/YYYY``) or pick one
from a calendar. Both channels *propose* a date to one canonical value:

* a calendar selection always wins and rewrites the text;
* typed text replaces the value only when it parses, otherwise the field is
  flagged invalid and ``resolve()`` refuses to hand out the old value.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Optional

from ..errors import ValidationError

DEFAULT_FORMAT = "%d/%m/%Y"
DEFAULT_HINT = "DD/MM/YYYY"


class DualDateInput:
    """Canonical date value with a text adapter and a calendar adapter."""

    def __init__(
        self,
        *,
        field: str,
        label: str,
        value: Optional[date] = None,
        fmt: str = DEFAULT_FORMAT,
        hint: str = DEFAULT_HINT,
        first_date: Optional[date] = None,
        last_date: Optional[date] = None,
    ) -> None:
        self.field = field
        self.label = label
        self.fmt = fmt
        self.hint = hint
        self.first_date = first_date
        self.last_date = last_date
        self.value: Optional[date] = None
        self.text = ""
        self.error: Optional[str] = None
        self.reset(value)

    def reset(self, value: Optional[date] = None) -> None:
        self.value = value
        self.text = self.format(value) if value else ""
        self.error = None

    def format(self, value: date) -> str:
        return value.strftime(self.fmt)

    def parse(self, text: str) -> Optional[date]:
        try:
            return datetime.strptime(text.strip(), self.fmt).date()
        except ValueError:
            return None

    def propose_text(self, text: str) -> bool:
        """Take typed text; return True when it moved the canonical value."""
        self.text = text or ""
        if not self.text.strip():
            self.error = None
            return False
        parsed = self.parse(self.text)
        if parsed is None:
            self.error = f"Use {self.hint}"
            return False
        self.value = parsed
        self.error = None
        return True

    def propose_selection(self, selected: date | datetime | None) -> bool:
        """Take a calendar pick; return True when it moved the canonical value."""
        if selected is None:
            return False
        if isinstance(selected, datetime):
            selected = selected.date()
        if not self.in_bounds(selected):
            return False
        self.value = selected
        self.text = self.format(selected)
        self.error = None
        return True

    def in_bounds(self, candidate: date) -> bool:
        if self.first_date is not None and candidate < self.first_date:
            return False
        if self.last_date is not None and candidate > self.last_date:
            return False
        return True

    @property
    def is_consistent(self) -> bool:
        """True when the visible text and the canonical value agree."""
        if self.value is None:
            return not self.text.strip()
        return self.parse(self.text) == self.value

    def resolve(self) -> date:
        """Return the canonical date or raise when the field is empty or invalid."""
        if not self.text.strip() or self.value is None:
            raise ValidationError(f"{self.label} is required", field=self.field)
        if not self.is_consistent:
            raise ValidationError(
                f"{self.label} is not a valid date ({self.text.strip()!r})", field=self.field
            )
        return self.value
