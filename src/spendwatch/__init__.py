"""SpendWatch personal expense tracker."""

from __future__ import annotations

from .config import BaseConfig

__all__ = ["BaseConfig"]

__version__ = "0.1.0"
