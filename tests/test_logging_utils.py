"""Tests for the logging setup helper."""

import logging

import pytest

from robot_arm_sim.utils.logging_utils import LOG_FORMAT, setup_logging


def test_global_level(restore_root_logger):
    setup_logging({"level": "DEBUG"})
    assert restore_root_logger.level == logging.DEBUG
    assert restore_root_logger.handlers[0].formatter._fmt == LOG_FORMAT
    assert logging.getLogger("asyncio").level == logging.WARNING


def test_service_level_overrides_global(restore_root_logger):
    setup_logging({"level": "INFO", "run_arm": {"level": "warning"}}, service_name="run_arm")
    assert restore_root_logger.level == logging.WARNING


def test_file_output(restore_root_logger, tmp_path):
    log_file = tmp_path / "sim.log"
    setup_logging({"level": "INFO", "file_output": str(log_file)})
    logging.getLogger("robot_arm_sim.test").info("hello")
    for handler in restore_root_logger.handlers:
        handler.flush()
    assert "hello" in log_file.read_text()


def test_unknown_level_raises(restore_root_logger):
    with pytest.raises(ValueError):
        setup_logging({"level": "LOUD"})
