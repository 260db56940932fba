#!/usr/bin/env python3
"""
Tests for ErrorHandler - routing, labels, suppression, logging setup
"""

import logging

import pytest

from plantacerium.core.error_handler import (
    LOG_FORMAT,
    ErrorCategory,
    ErrorHandler,
    ErrorSeverity,
    configure_file_logging,
)
from plantacerium.core.errors import TemporalValidationError, VaultWriteError


class TestRouting:

    def test_labels_distinguish_input_from_storage(self, error_handler):
        """HAPPY PATH: the user can tell a bad time from a failed save."""
        error_handler.handle_error(TemporalValidationError("hour 25"),
                                   ErrorCategory.TIME_VALIDATION, ErrorSeverity.MEDIUM_ALERT)
        error_handler.handle_error(VaultWriteError("disk full"),
                                   ErrorCategory.VAULT_WRITE, ErrorSeverity.HIGH_DEGRADE)
        first, second = error_handler.get_alerts_for_ui()
        assert "invalid time - hour 25" in first
        assert "could not save entry - disk full" in second

    def test_critical_returns_false(self, error_handler):
        assert error_handler.handle_error(RuntimeError("x"), ErrorCategory.GENERAL,
                                          ErrorSeverity.CRITICAL_STOP) is False
        assert error_handler.handle_error(RuntimeError("y"), ErrorCategory.GENERAL,
                                          ErrorSeverity.MEDIUM_ALERT) is True

    def test_low_debug_hidden_unless_debug_mode(self):
        quiet = ErrorHandler(debug_mode=False, suppress_duplicate_seconds=0)
        quiet.handle_error(KeyError("k"), ErrorCategory.UI_INPUT, ErrorSeverity.LOW_DEBUG)
        assert quiet.get_alerts_for_ui() == []

        loud = ErrorHandler(debug_mode=True, suppress_duplicate_seconds=0)
        loud.handle_error(KeyError("k"), ErrorCategory.UI_INPUT, ErrorSeverity.LOW_DEBUG)
        assert len(loud.get_alerts_for_ui()) == 1

    def test_get_alerts_clears_but_peek_does_not(self, error_handler):
        error_handler.handle_error(ValueError("v"), ErrorCategory.GENERAL, ErrorSeverity.MEDIUM_ALERT)
        assert len(error_handler.peek_alerts_for_ui()) == 1
        assert len(error_handler.get_alerts_for_ui()) == 1
        assert error_handler.get_alerts_for_ui() == []

    def test_context_prefix(self, error_handler):
        error_handler.handle_error(VaultWriteError("denied"), ErrorCategory.VAULT_WRITE,
                                   ErrorSeverity.HIGH_DEGRADE, context="2024-03-15-14-30")
        assert "2024-03-15-14-30: denied" in error_handler.get_alerts_for_ui()[0]


class TestSuppression:

    def test_repeats_suppressed_within_window(self):
        """EDGE: holding a bad key down does not flood the alert panel."""
        handler = ErrorHandler(suppress_duplicate_seconds=60)
        for _ in range(5):
            handler.handle_error(TemporalValidationError("bad"), ErrorCategory.TIME_VALIDATION,
                                 ErrorSeverity.MEDIUM_ALERT)
        assert len(handler.get_alerts_for_ui()) == 1
        summary = handler.get_error_summary()
        assert summary['total_errors'] == 5
        assert summary['suppressed_count'] == 4

    def test_summary_categories(self, error_handler):
        error_handler.handle_error(VaultWriteError("a"), ErrorCategory.VAULT_WRITE, ErrorSeverity.HIGH_DEGRADE)
        assert error_handler.get_error_summary()['categories_with_errors'] == ['vault_write']


class TestContextManager:

    def test_swallows_and_records(self, error_handler):
        with error_handler.create_context_manager(ErrorCategory.UI_RENDERING,
                                                  ErrorSeverity.MEDIUM_ALERT, operation="render") as ctx:
            raise ValueError("bad glyph")
        assert isinstance(ctx.error, ValueError)
        assert "display problem" in error_handler.get_alerts_for_ui()[0]

    def test_critical_propagates(self, error_handler):
        with pytest.raises(RuntimeError):
            with error_handler.create_context_manager(ErrorCategory.GENERAL, ErrorSeverity.CRITICAL_STOP):
                raise RuntimeError("stop")

    def test_keyboard_interrupt_not_swallowed(self, error_handler):
        with pytest.raises(KeyboardInterrupt):
            with error_handler.create_context_manager(ErrorCategory.UI_INPUT, ErrorSeverity.MEDIUM_ALERT):
                raise KeyboardInterrupt


class TestFileLogging:

    @pytest.fixture(autouse=True)
    def clean_package_logger(self):
        package_logger = logging.getLogger("plantacerium")
        saved = (list(package_logger.handlers), package_logger.level, package_logger.propagate)
        package_logger.handlers = []
        yield
        for handler in package_logger.handlers:
            handler.close()
        package_logger.handlers, package_logger.level, package_logger.propagate = saved

    def test_writes_formatted_lines(self, tmp_path):
        log_file = tmp_path / "logs" / "chronos.log"
        package_logger = configure_file_logging(log_file, "INFO")
        logging.getLogger("plantacerium.vault.note_vault").info("Vault loaded: 3 entries")
        for handler in package_logger.handlers:
            handler.flush()
        line = log_file.read_text().strip()
        assert line.endswith(" - INFO - Vault loaded: 3 entries")
        assert LOG_FORMAT.startswith('%(asctime)s')

    def test_no_duplicate_handlers(self, tmp_path):
        configure_file_logging(tmp_path / "a.log")
        package_logger = configure_file_logging(tmp_path / "a.log")
        assert len(package_logger.handlers) == 1

    def test_empty_path_disables_file(self):
        package_logger = configure_file_logging("", "DEBUG")
        assert all(isinstance(h, logging.NullHandler) for h in package_logger.handlers)
        assert package_logger.level == logging.DEBUG
