#!/usr/bin/env python3
"""
ErrorHandler - Centralized error routing for the ring engine and the UI

Input mistakes and storage problems must read differently to the user:
    TIME_VALIDATION -> "invalid time"
    VAULT_WRITE     -> "could not save entry"
    VAULT_READ      -> "could not load archive"
Errors are logged to file, de-duplicated over a short window, and queued
as alert lines for the live display to pick up.
"""

import logging
from collections import Counter, deque
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any, Deque, Dict, List, Optional, Union

from rich.markup import escape


class ErrorSeverity(Enum):
    """How loudly an error is surfaced"""
    CRITICAL_STOP = "critical_stop"       # Stop the app, archive may be unsafe
    HIGH_DEGRADE = "high_degrade"         # Feature broken (e.g. saving), keep running
    MEDIUM_ALERT = "medium_alert"         # Shown in the alerts panel
    LOW_DEBUG = "low_debug"               # Only shown with --debug


class ErrorCategory(Enum):
    """Error categories, one per thing the user can tell apart"""
    TIME_VALIDATION = "time_validation"   # Out-of-range hour/minute/date/ring
    VAULT_READ = "vault_read"             # Archive missing/corrupt/unreadable
    VAULT_WRITE = "vault_write"           # Archive could not be saved
    UI_RENDERING = "ui"                   # Drawing the scene
    UI_INPUT = "ui_input"                 # Key decoding / unknown keys
    CONFIGURATION = "config"              # Bad environment settings
    GENERAL = "general"                   # Uncategorized errors


# What the user sees in front of the message
USER_LABELS = {
    ErrorCategory.TIME_VALIDATION: "invalid time",
    ErrorCategory.VAULT_READ: "could not load archive",
    ErrorCategory.VAULT_WRITE: "could not save entry",
    ErrorCategory.UI_RENDERING: "display problem",
    ErrorCategory.UI_INPUT: "input problem",
    ErrorCategory.CONFIGURATION: "bad configuration",
    ErrorCategory.GENERAL: "error",
}

CATEGORY_ICONS = {
    ErrorCategory.TIME_VALIDATION: "⏱",
    ErrorCategory.VAULT_READ: "📂",
    ErrorCategory.VAULT_WRITE: "💾",
    ErrorCategory.UI_RENDERING: "🖥",
    ErrorCategory.UI_INPUT: "⌨",
    ErrorCategory.CONFIGURATION: "⚙",
}

SEVERITY_STYLES = {
    ErrorSeverity.CRITICAL_STOP: "bold red",
    ErrorSeverity.HIGH_DEGRADE: "red",
    ErrorSeverity.MEDIUM_ALERT: "yellow",
    ErrorSeverity.LOW_DEBUG: "dim yellow",
}

LOG_FORMAT = '%(asctime)s - %(levelname)s - %(message)s'

MAX_DETAIL = 100
HISTORY_SIZE = 100


def configure_file_logging(log_file: Optional[Union[str, Path]], level: str = "INFO") -> logging.Logger:
    """
    Attach a file handler to the package logger.

    The terminal is owned by the live display, so nothing goes to stderr.
    Calling twice does not stack handlers.
    """
    package_logger = logging.getLogger("plantacerium")
    package_logger.setLevel(getattr(logging, str(level).upper(), logging.INFO))
    package_logger.propagate = False
    if log_file and not any(isinstance(h, logging.FileHandler) for h in package_logger.handlers):
        path = Path(log_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        handler = logging.FileHandler(path, encoding="utf-8")
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        package_logger.addHandler(handler)
    if not package_logger.handlers:
        package_logger.addHandler(logging.NullHandler())
    return package_logger


@dataclass(frozen=True)
class ErrorRecord:
    """One handled error, kept for the summary"""
    when: datetime
    category: ErrorCategory
    severity: ErrorSeverity
    error_type: str
    detail: str
    operation: str = ""


class ErrorHandler:
    """Centralized error handling to replace scattered try/except blocks"""

    def __init__(self, debug_mode: bool = False, suppress_duplicate_seconds: float = 2.0):
        self.debug_mode = debug_mode
        self.suppress_duplicate_seconds = suppress_duplicate_seconds

        self.seen = Counter()          # (category, type) -> times raised
        self.suppressed = Counter()    # (category, type) -> times hidden, all time
        self._pending_suppressed = Counter()
        self._last_shown: Dict[tuple, datetime] = {}
        self.history: Deque[ErrorRecord] = deque(maxlen=HISTORY_SIZE)

        self._critical: List[str] = []
        self._alerts: List[str] = []

        self.logger = logging.getLogger("plantacerium.errors")

    def handle_error(self,
                     error: Exception,
                     category: ErrorCategory,
                     severity: ErrorSeverity,
                     context: str = "",
                     operation: str = "") -> bool:
        """
        Record, log and route one error.

        Returns:
            bool: True if the caller may carry on, False if it should re-raise
        """
        key = (category, type(error).__name__)
        now = datetime.now()
        self.seen[key] += 1
        carry_on = severity is not ErrorSeverity.CRITICAL_STOP

        last = self._last_shown.get(key)
        if (last is not None and self.suppress_duplicate_seconds > 0
                and (now - last).total_seconds() < self.suppress_duplicate_seconds):
            self.suppressed[key] += 1
            self._pending_suppressed[key] += 1
            return carry_on
        self._last_shown[key] = now

        line = self.describe(error, category, context, operation)
        self._queue_alert(line, category, severity)
        self.history.append(ErrorRecord(now, category, severity, key[1], str(error), operation))

        level = logging.WARNING
        if severity in (ErrorSeverity.CRITICAL_STOP, ErrorSeverity.HIGH_DEGRADE):
            level = logging.ERROR
        self.logger.log(level, "%s: %s", category.value, line, exc_info=self.debug_mode)
        return carry_on

    def describe(self, error: Exception, category: ErrorCategory,
                 context: str = "", operation: str = "") -> str:
        """'<label> - [context: ]detail', with repeat and suppression counters"""
        detail = str(error)
        if len(detail) > MAX_DETAIL:
            detail = detail[:MAX_DETAIL] + "..."
        if context:
            detail = f"{context}: {detail}"
        if operation and self.debug_mode:
            detail = f"During {operation} - {detail}"

        key = (category, type(error).__name__)
        parts = [f"{USER_LABELS.get(category, 'error')} - {detail}"]
        if self.seen[key] > 1:
            parts.append(f"(#{self.seen[key]})")
        hidden = self._pending_suppressed.pop(key, 0)
        if hidden:
            parts.append(f"[+{hidden} suppressed]")
        return " ".join(parts)

    def _queue_alert(self, line: str, category: ErrorCategory, severity: ErrorSeverity):
        if severity is ErrorSeverity.LOW_DEBUG and not self.debug_mode:
            return
        style = SEVERITY_STYLES[severity]
        markup = f"[{style}]{CATEGORY_ICONS.get(category, '⚠')} {escape(line)}[/{style}]"
        target = self._critical if severity is ErrorSeverity.CRITICAL_STOP else self._alerts
        target.append(markup)

    def get_alerts_for_ui(self, max_alerts: int = 4, clear_after: bool = True) -> List[str]:
        """Critical alerts first, then the rest; newest kept when over max_alerts"""
        alerts = (self._critical + self._alerts)[-max_alerts:]
        if clear_after:
            self._critical.clear()
            self._alerts.clear()
        return alerts

    def peek_alerts_for_ui(self, max_alerts: int = 4) -> List[str]:
        return self.get_alerts_for_ui(max_alerts, clear_after=False)

    def get_error_summary(self) -> Dict[str, Any]:
        return {
            'total_errors': sum(self.seen.values()),
            'suppressed_count': sum(self.suppressed.values()),
            'recent_error_count': len(self.history),
            'categories_with_errors': sorted({record.category.value for record in self.history}),
            'most_common_errors': [(f"{category.value}_{name}", count)
                                   for (category, name), count in self.seen.most_common(5)],
        }

    def create_context_manager(self, category: ErrorCategory, severity: ErrorSeverity,
                               operation: str = "", context: str = ""):
        """Wrap a risky block; errors go through handle_error"""
        return ErrorContext(self, category, severity, operation, context)


class ErrorContext:
    """Context manager for handling errors in specific operations"""

    def __init__(self, error_handler: ErrorHandler, category: ErrorCategory,
                 severity: ErrorSeverity, operation: str = "", context: str = ""):
        self.error_handler = error_handler
        self.category = category
        self.severity = severity
        self.operation = operation
        self.context = context
        self.error: Optional[BaseException] = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        # KeyboardInterrupt and SystemExit pass through
        if exc_type is None or not issubclass(exc_type, Exception):
            return False
        self.error = exc_val
        return self.error_handler.handle_error(exc_val, self.category, self.severity,
                                               context=self.context, operation=self.operation)
