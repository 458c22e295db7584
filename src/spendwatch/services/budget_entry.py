"""Budget entry form: amount plus a start/end window with dual date inputs."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Callable, Optional

from ..config import BaseConfig
from ..domain.repositories import BudgetRepository
from ..errors import SpendWatchError, UnexpectedError, ValidationError
from ..logging_config import get_logger
from ..models.budget import Budget
from .auth import AuthSession
from .date_input import DualDateInput
from .validation import parse_positive_amount

logger = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class BudgetInput:
    amount: Decimal
    start_date: date
    end_date: date


class BudgetEntryForm:
    """Collects a budget window and inserts it as the new active budget.

    Earlier budgets are never touched here; the dashboard treats the newest
    row as active.
    """

    def __init__(
        self,
        *,
        auth: AuthSession,
        repository: BudgetRepository,
        config: Optional[BaseConfig] = None,
        today: Callable[[], date] = date.today,
    ) -> None:
        self.auth = auth
        self.repository = repository
        self._today = today
        cfg = config or BaseConfig
        fmt = cfg.DATE_INPUT_FORMAT
        hint = cfg.DATE_INPUT_HINT
        first_date = cfg.CALENDAR_FIRST_DATE
        last_date = cfg.calendar_last_date()
        self.is_open = False
        self.amount = ""
        self.start = DualDateInput(
            field="start_date",
            label="Start date",
            fmt=fmt,
            hint=hint,
            first_date=first_date,
            last_date=last_date,
        )
        self.end = DualDateInput(
            field="end_date",
            label="End date",
            fmt=fmt,
            hint=hint,
            first_date=first_date,
            last_date=last_date,
        )
        self.reset()

    def open(self) -> None:
        self.is_open = True

    def close(self) -> None:
        self.is_open = False

    def reset(self) -> None:
        today = self._today()
        self.amount = ""
        self.start.reset(today)
        self.end.reset(today)
        self._sync_end_bound()

    def set_start_text(self, text: str) -> bool:
        changed = self.start.propose_text(text)
        self._sync_end_bound()
        return changed

    def select_start(self, selected) -> bool:
        changed = self.start.propose_selection(selected)
        self._sync_end_bound()
        return changed

    def set_end_text(self, text: str) -> bool:
        return self.end.propose_text(text)

    def select_end(self, selected) -> bool:
        return self.end.propose_selection(selected)

    def _sync_end_bound(self) -> None:
        # The end calendar never offers days before the chosen start
        if self.start.value is not None:
            self.end.first_date = self.start.value

    def validate(self) -> BudgetInput:
        amount = parse_positive_amount(self.amount, label="Budget amount")
        start_date = self.start.resolve()
        end_date = self.end.resolve()
        if start_date > end_date:
            raise ValidationError("Start date cannot be after end date", field="end_date")
        return BudgetInput(amount=amount, start_date=start_date, end_date=end_date)

    def submit(self) -> Budget:
        """Validate and insert a budget for the current identity.

        Raises:
            AuthError: nobody is signed in
            ValidationError: bad amount, unparsable date or start after end
            BackendError: the store rejected the insert
            UnexpectedError: anything else went wrong
        """
        identity = self.auth.require_identity()
        data = self.validate()
        try:
            budget = self.repository.create(
                Budget(
                    user_id=identity.user_id,
                    amount=float(data.amount),
                    start_date=data.start_date,
                    end_date=data.end_date,
                ),
                user_id=identity.user_id,
            )
        except SpendWatchError:
            raise
        except Exception as exc:
            logger.exception("Unexpected error setting budget")
            raise UnexpectedError() from exc

        logger.info(
            "Budget submitted",
            extra={
                "user_id": identity.user_id,
                "start_date": data.start_date.isoformat(),
                "end_date": data.end_date.isoformat(),
            },
        )
        self.reset()
        self.close()
        return budget
