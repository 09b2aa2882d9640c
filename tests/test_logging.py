from __future__ import annotations

import logging

import pytest

from impact_dashboard.logging import configure_logging


def test_configure_logging_sets_package_and_quiet_levels() -> None:
    configure_logging("debug")

    assert logging.getLogger("impact_dashboard").level == logging.DEBUG
    assert logging.getLogger("matplotlib").level == logging.WARNING

    configure_logging("error")

    assert logging.getLogger("impact_dashboard").level == logging.ERROR
    assert logging.getLogger("urllib3").level == logging.ERROR


def test_configure_logging_rejects_unknown_level() -> None:
    with pytest.raises(ValueError, match="Unknown log level"):
        configure_logging("chatty")
