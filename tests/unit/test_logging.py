"""Tests for logging setup."""

import pytest
from loguru import logger

from admin_wallet.utils.logging import setup_logging
from tests.fakes import make_settings


@pytest.fixture(autouse=True)
def reset_sinks():
    yield
    logger.remove()


def test_file_sink(tmp_path):
    log_file = tmp_path / "wallet.log"
    setup_logging(make_settings(log_level="debug", log_file=str(log_file)))

    logger.debug("wallet debug line")
    logger.remove()  # closes and flushes the file sink

    assert "wallet debug line" in log_file.read_text(encoding="utf-8")


def test_level_filters(tmp_path):
    log_file = tmp_path / "wallet.log"
    setup_logging(make_settings(log_level="WARNING", log_file=str(log_file)))

    logger.info("hidden line")
    logger.warning("visible line")
    logger.remove()

    content = log_file.read_text(encoding="utf-8")
    assert "visible line" in content
    assert "hidden line" not in content
