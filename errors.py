"""
errors.py – exception types shared by the player modules.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class ErrorCategory(str, Enum):
    CONFIG = "config"
    RUNTIME = "runtime"


DEFAULT_EXIT_CODES: dict[ErrorCategory, int] = {
    ErrorCategory.RUNTIME: 1,
    ErrorCategory.CONFIG: 2,
}


@dataclass
class PlayerError(Exception):
    """Base exception carrying a category and a process exit code."""

    message: str
    category: ErrorCategory = ErrorCategory.RUNTIME
    exit_code: int | None = None

    def __post_init__(self) -> None:
        super().__init__(self.message)
        if self.exit_code is None:
            self.exit_code = DEFAULT_EXIT_CODES.get(self.category, 1)

    def label(self) -> str:
        return {
            ErrorCategory.CONFIG: "Configuration error",
            ErrorCategory.RUNTIME: "Runtime error",
        }.get(self.category, "Error")


class ConfigurationError(PlayerError):
    """The sequence or a bundle cannot be played as configured."""

    def __init__(self, message: str, *, exit_code: int | None = None) -> None:
        super().__init__(
            message,
            category=ErrorCategory.CONFIG,
            exit_code=exit_code,
        )
