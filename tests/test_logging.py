"""Tests for structured log formatting and owner masking."""

import logging
import sys
from unittest.mock import MagicMock, patch

from kota.core.logging import (
    StructuredFormatter,
    _configured_level,
    log_with_context,
    mask_email,
)
from kota.core.schemas_entities import EntityKind
from kota.core.schemas_intents import IntentOperation


def _record(msg="Committed", **attrs) -> logging.LogRecord:
    record = logging.LogRecord("kota.test", logging.INFO, __file__, 1, msg, None, None)
    for key, value in attrs.items():
        setattr(record, key, value)
    return record


class TestMaskEmail:
    def test_keeps_first_letter_and_domain(self):
        assert mask_email("pat@example.com") == "p***@example.com"

    def test_value_without_at_sign(self):
        assert mask_email("local-user") == "l***"

    def test_empty(self):
        assert mask_email("") == ""


class TestStructuredFormatter:
    def test_owner_is_masked(self):
        line = StructuredFormatter().format(_record(owner="pat@example.com"))

        assert "owner=p***@example.com" in line
        assert "pat@example.com" not in line
        assert "message=Committed" in line

    def test_enum_fields_print_their_value(self):
        line = StructuredFormatter().format(
            _record(entity_kind=EntityKind.BILL, operation=IntentOperation.DELETE, record_id="b1")
        )

        assert "entity_kind=bill" in line
        assert "operation=delete" in line
        assert "record_id=b1" in line

    def test_missing_context_fields_are_left_out(self):
        line = StructuredFormatter().format(_record())

        assert "owner=" not in line
        assert "record_id=" not in line

    def test_extra_data_is_appended(self):
        line = StructuredFormatter().format(_record(extra_data={"removed": 3}))

        assert line.endswith("removed=3")

    def test_exception_adds_error_field(self):
        try:
            raise ValueError("insert failed")
        except ValueError:
            record = _record(exc_info=sys.exc_info())

        line = StructuredFormatter().format(record)

        assert "error=ValueError: insert failed" in line


class TestLogWithContext:
    def test_splits_context_fields_from_extra_data(self):
        logger = MagicMock()

        log_with_context(
            logger, logging.INFO, "Cleared", owner="pat@example.com", removed=2
        )

        logger.log.assert_called_once_with(
            logging.INFO,
            "Cleared",
            extra={"owner": "pat@example.com", "extra_data": {"removed": 2}},
        )


class TestConfiguredLevel:
    def _settings(self, env="prod", level=None):
        settings = MagicMock()
        settings.KOTA_ENV = env
        settings.LOG_LEVEL = level
        return settings

    def test_log_level_override(self):
        with patch("kota.core.config.get_settings", return_value=self._settings(level="warning")):
            assert _configured_level() == logging.WARNING

    def test_unknown_override_falls_back_to_info(self):
        with patch("kota.core.config.get_settings", return_value=self._settings(level="LOUD")):
            assert _configured_level() == logging.INFO

    def test_debug_in_dev(self):
        with patch("kota.core.config.get_settings", return_value=self._settings(env="dev")):
            assert _configured_level() == logging.DEBUG

    def test_info_elsewhere(self):
        with patch("kota.core.config.get_settings", return_value=self._settings()):
            assert _configured_level() == logging.INFO
