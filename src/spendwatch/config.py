"""Application configuration objects and helpers."""

from __future__ import annotations

import os
from datetime import date
from pathlib import Path
from typing import Any

from dotenv import load_dotenv

load_dotenv()


def _env_bool(name: str, default: bool = False) -> bool:
    """Interpret environment variable values as booleans."""

    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


class BaseConfig:
    """Base configuration shared across environments."""

    APP_NAME = "SpendWatch"
    DB_FILENAME = "spendwatch.db"
    SQLITE_PRAGMAS = {"foreign_keys": "on"}

    # Dashboard rules
    BUDGET_ALERT_THRESHOLD = 0.8
    AVERAGE_DAILY_DAYS = 30

    # Budget form date channels
    DATE_INPUT_FORMAT = "%d/%m/%Y"
    DATE_INPUT_HINT = "DD/MM/YYYY"
    CALENDAR_FIRST_DATE = date(2023, 1, 1)

    def __init__(self) -> None:
        self.DATA_DIR = self._resolve_data_dir()
        self.DEV_MODE = _env_bool("SPENDWATCH_DEV_MODE", default=True)
        self.DATABASE_URL = os.getenv("SPENDWATCH_DATABASE_URL", self._build_sqlite_url())
        self.CURRENCY_SYMBOL = os.getenv("SPENDWATCH_CURRENCY_SYMBOL", "₹")

    @staticmethod
    def calendar_last_date() -> date:
        """Last date offered by calendar pickers (end of next year)."""

        return date(date.today().year + 1, 12, 31)

    def _resolve_data_dir(self) -> Path:
        """Return the directory where the SQLite file and logs live."""

        data_root = os.getenv("SPENDWATCH_DATA_DIR", "instance")
        base_path = Path(data_root).expanduser()
        try:
            path = base_path.resolve()
            path.mkdir(parents=True, exist_ok=True)
            return path
        except PermissionError:
            # Protected install locations fall back to user-local storage.
            fallback_path = Path.home() / f".{self.APP_NAME.lower()}"
            fallback_path.mkdir(parents=True, exist_ok=True)
            return fallback_path.resolve()

    def _build_sqlite_url(self) -> str:
        """Construct the default SQLite URL inside the data directory."""

        db_path = self.DATA_DIR / self.DB_FILENAME
        return f"sqlite:///{db_path}"

    def sqlalchemy_engine_options(self) -> dict[str, Any]:
        """Expose engine kwargs for SQLModel to consume."""

        connect_args: dict[str, Any] = {}
        if self.DATABASE_URL.startswith("sqlite"):
            # flet runs event handlers on worker threads
            connect_args["check_same_thread"] = False
        return {"connect_args": connect_args}
