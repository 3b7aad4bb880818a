"""Colored sync logger — ANSI-colored console logging for content synchronization.

Provides a SyncLogger with color-coded output per sync stage, making it
easy to follow an optimistic mutation from dispatch to settlement.

Color scheme:
    🟢 Green   — Create / Confirm
    🟡 Yellow  — Update
    🟣 Magenta — Delete
    🔵 Blue    — Channel notifications
    🟠 Cyan    — Backstop refetch
    🔴 Red     — Rollback / Errors
"""

import logging
import time
from contextlib import contextmanager
from typing import Any


# ── ANSI Color Codes ─────────────────────────────────────────────────

class _Colors:
    """ANSI escape codes for terminal colors."""

    RESET = "\033[0m"
    BOLD = "\033[1m"
    DIM = "\033[2m"

    RED = "\033[91m"
    GREEN = "\033[92m"
    YELLOW = "\033[93m"
    BLUE = "\033[94m"
    MAGENTA = "\033[95m"
    CYAN = "\033[96m"
    GRAY = "\033[90m"


# ── Sync Stage Definitions ───────────────────────────────────────────

class SyncStage:
    """Predefined sync stages with colors and icons."""

    CREATE = ("CREATE", _Colors.GREEN, "➕")
    UPDATE = ("UPDATE", _Colors.YELLOW, "✏️")
    DELETE = ("DELETE", _Colors.MAGENTA, "🗑️")
    NOTIFY = ("NOTIFY", _Colors.BLUE, "📡")
    REFETCH = ("REFETCH", _Colors.CYAN, "🔄")
    CONFIRM = ("CONFIRM", _Colors.GREEN, "✅")
    ROLLBACK = ("ROLLBACK", _Colors.RED, "↩️")
    ERROR = ("ERROR", _Colors.RED, "❌")


def _format_details(kwargs: dict[str, Any], color: str) -> str:
    details = " | ".join(f"{k}={v}" for k, v in kwargs.items())
    return f" {color}({details}){_Colors.RESET}"


# ── SyncLogger ───────────────────────────────────────────────────────

class SyncLogger:
    """Color-coded logger for the content synchronizer.

    Usage:
        log = SyncLogger("ContentSync")
        log.step_start(SyncStage.CREATE, "Optimistic create", temp_key="temp-...")
        log.step_complete(SyncStage.CONFIRM, "Server assigned id 42")
    """

    def __init__(self, component_name: str):
        self._logger = logging.getLogger(component_name)
        self._component = component_name

    def step_start(self, stage: tuple[str, str, str], message: str, **kwargs: Any) -> None:
        """Log the start of a sync step with its stage color."""
        label, color, icon = stage
        formatted = (
            f"{color}{_Colors.BOLD}{icon} [{label}]{_Colors.RESET} "
            f"{color}{message}{_Colors.RESET}"
        )
        if kwargs:
            formatted += _format_details(kwargs, _Colors.GRAY)
        self._logger.info(formatted)

    def step_complete(self, stage: tuple[str, str, str], message: str, **kwargs: Any) -> None:
        """Log the successful completion of a sync step."""
        label, color, icon = stage
        formatted = (
            f"{color}{icon} [{label}]{_Colors.RESET} "
            f"{_Colors.GREEN}✓ {message}{_Colors.RESET}"
        )
        if kwargs:
            formatted += _format_details(kwargs, _Colors.GRAY)
        self._logger.info(formatted)

    def step_error(self, stage: tuple[str, str, str], message: str, error: Exception | None = None) -> None:
        """Log a sync step error in red."""
        label, _, icon = stage
        formatted = (
            f"{_Colors.RED}{_Colors.BOLD}{icon} [{label}]{_Colors.RESET} "
            f"{_Colors.RED}{message}{_Colors.RESET}"
        )
        if error:
            formatted += f" {_Colors.DIM}→ {type(error).__name__}: {error}{_Colors.RESET}"
        self._logger.error(formatted)

    def detail(self, message: str, **kwargs: Any) -> None:
        """Log additional detail at debug level (gray/dimmed)."""
        formatted = f"   {_Colors.GRAY}├─ {message}{_Colors.RESET}"
        if kwargs:
            formatted += _format_details(kwargs, _Colors.DIM)
        self._logger.debug(formatted)

    @contextmanager
    def timed_step(self, stage: tuple[str, str, str], message: str, **kwargs: Any):
        """Context manager that logs start/end with elapsed time.

        Usage:
            with log.timed_step(SyncStage.REFETCH, "Refetching projects"):
                records = await api.list("projects")
        """
        self.step_start(stage, message, **kwargs)
        start = time.perf_counter()
        try:
            yield
        except Exception as e:
            elapsed = time.perf_counter() - start
            self.step_error(stage, f"{message} — failed after {elapsed:.2f}s", error=e)
            raise
        else:
            elapsed = time.perf_counter() - start
            self.step_complete(stage, f"{message} — {elapsed:.2f}s", **kwargs)
