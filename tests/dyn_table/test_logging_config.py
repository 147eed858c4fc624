from __future__ import annotations

import logging

from pythonjsonlogger import jsonlogger

from dyn_table.logging_config import configure_logging


def test_json_is_the_default_format(monkeypatch):
    monkeypatch.delenv("DYN_TABLE_LOG_FORMAT", raising=False)

    configure_logging(level=logging.DEBUG)

    root = logging.getLogger()
    assert root.level == logging.DEBUG
    assert len(root.handlers) == 1
    assert isinstance(root.handlers[0].formatter, jsonlogger.JsonFormatter)


def test_plain_format_from_env(monkeypatch):
    monkeypatch.setenv("DYN_TABLE_LOG_FORMAT", "plain")

    configure_logging(level="warning")

    root = logging.getLogger()
    assert root.level == logging.WARNING
    assert not isinstance(root.handlers[0].formatter, jsonlogger.JsonFormatter)


def test_unknown_level_name_falls_back_to_info():
    configure_logging(level="loud", force_format="plain")

    assert logging.getLogger().level == logging.INFO
