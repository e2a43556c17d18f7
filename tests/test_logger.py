import logging

import pytest

from notiapp_backend.core.logger import (
    get_logger,
    parse_size,
    reset_logging,
    setup_logging,
)


@pytest.mark.parametrize(
    "value, expected",
    [("512", 512), ("2KB", 2048), ("10mb", 10 * 1024**2), ("1GB", 1024**3), (64, 64)],
)
def test_parse_size(value, expected):
    assert parse_size(value) == expected


def test_setup_logging_writes_main_and_error_logs(tmp_path):
    manager = setup_logging()
    logger = get_logger("notiapp_backend.logger_test")
    logger.info("routine message")
    logger.error("broken message")

    logs_dir = tmp_path / "logs"
    main_log = (logs_dir / "notiapp_backend.log").read_text(encoding="utf-8")
    error_log = (logs_dir / "error.log").read_text(encoding="utf-8")
    assert "routine message" in main_log
    assert "broken message" in main_log
    assert "broken message" in error_log
    assert "routine message" not in error_log
    assert logging.getLogger().level == logging.DEBUG

    handlers = list(manager.handlers)
    assert len(handlers) == 3
    reset_logging()
    root_handlers = logging.getLogger().handlers
    assert not any(handler in root_handlers for handler in handlers)


def test_setup_logging_twice_does_not_duplicate_handlers():
    first = setup_logging()
    second = setup_logging()
    assert first is second
    root_handlers = logging.getLogger().handlers
    assert sum(handler in root_handlers for handler in second.handlers) == 3
    assert len(second.handlers) == 3
