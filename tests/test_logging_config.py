import logging

import pytest

from delve.logging_config import configure_logging, level_for_verbosity


@pytest.mark.parametrize(
    "verbosity, expected",
    [(0, logging.WARNING), (1, logging.INFO), (2, logging.DEBUG), (5, logging.DEBUG)],
)
def test_level_for_verbosity(verbosity, expected):
    assert level_for_verbosity(verbosity) == expected


def test_env_level_wins_over_flag(monkeypatch):
    monkeypatch.setenv("DELVE_LOG_LEVEL", "error")
    assert configure_logging(2) == logging.ERROR


def test_unknown_env_level_keeps_flag(monkeypatch):
    monkeypatch.setenv("DELVE_LOG_LEVEL", "chatty")
    assert configure_logging(1) == logging.INFO
