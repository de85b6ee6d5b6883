import logging
from pathlib import Path

import pytest

from lightbucket_relay import constants
from lightbucket_relay.logging import (
    ThumbnailRedactionFilter,
    configure_logging,
    notifications_log_path,
)
from lightbucket_relay.notifications import LoggingNotifier


@pytest.fixture
def restore_logging():
    root = logging.getLogger()
    notify_logger = logging.getLogger(constants.NOTIFY_LOGGER)
    saved_handlers, saved_level = list(root.handlers), root.level
    yield
    for logger in (root, notify_logger):
        for handler in list(logger.handlers):
            logger.removeHandler(handler)
            handler.close()
    for handler in saved_handlers:
        root.addHandler(handler)
    root.setLevel(saved_level)


def make_record(msg, *args) -> logging.LogRecord:
    return logging.LogRecord(
        "lightbucket_relay.adapters.lightbucket", logging.DEBUG, __file__, 1, msg, args, None
    )


def test_redaction_filter_shortens_thumbnail() -> None:
    thumbnail = "QUJD" * 500
    record = make_record(
        "%s: Making API request to %s with payload: %s",
        "relay",
        "http://lightbucket.test/api/image_capture_complete",
        '{"image": {"filter_name": "Ha", "thumbnail": "%s"}}' % thumbnail,
    )

    assert ThumbnailRedactionFilter().filter(record) is True

    message = record.getMessage()
    assert thumbnail not in message
    assert '"thumbnail": "<base64, 2000 chars>"' in message
    assert '"filter_name": "Ha"' in message
    assert message.startswith("relay: Making API request to http://lightbucket.test")


def test_redaction_filter_leaves_other_records_untouched() -> None:
    record = make_record("%s: API request failed with status %s", "relay", 500)

    assert ThumbnailRedactionFilter().filter(record) is True

    assert record.args == ("relay", 500)
    assert record.getMessage() == "relay: API request failed with status 500"


def test_empty_thumbnail_is_not_redacted() -> None:
    record = make_record('{"thumbnail": ""}')

    ThumbnailRedactionFilter().filter(record)

    assert record.getMessage() == '{"thumbnail": ""}'


def test_configure_logging_writes_redacted_file(tmp_path: Path, restore_logging) -> None:
    log_path = tmp_path / "logs" / "relay.log"
    configure_logging("DEBUG", log_path=log_path)

    logging.getLogger("lightbucket_relay.adapters.lightbucket").debug(
        "payload: %s", '{"thumbnail": "%s"}' % ("A" * 128)
    )
    for handler in logging.getLogger().handlers:
        handler.flush()

    content = log_path.read_text(encoding="utf-8")
    assert '"thumbnail": "<base64, 128 chars>"' in content
    assert "A" * 128 not in content


def test_notifications_get_their_own_log(tmp_path: Path, restore_logging) -> None:
    log_path = tmp_path / "relay.log"
    configure_logging("DEBUG", log_path=log_path)
    notifier = LoggingNotifier()

    notifier.warn("API request failed with status 500")
    notifier.error("Request timed out after 30s")
    notifier.trace("API request successful.")
    for logger in (logging.getLogger(), logging.getLogger(constants.NOTIFY_LOGGER)):
        for handler in logger.handlers:
            handler.flush()

    notifications = notifications_log_path(log_path)
    assert notifications == tmp_path / "relay-notifications.log"
    lines = notifications.read_text(encoding="utf-8").splitlines()
    assert len(lines) == 2
    assert lines[0].endswith("| WARNING | API request failed with status 500")
    assert lines[1].endswith("| ERROR | Request timed out after 30s")

    # Notifications still reach the main log, traces included
    main_log = log_path.read_text(encoding="utf-8")
    assert "API request successful." in main_log
    assert "Request timed out after 30s" in main_log


def test_reconfiguring_does_not_duplicate_notification_handlers(
    tmp_path: Path, restore_logging
) -> None:
    log_path = tmp_path / "relay.log"
    configure_logging("INFO", log_path=log_path)
    configure_logging("INFO", log_path=log_path)

    assert len(logging.getLogger(constants.NOTIFY_LOGGER).handlers) == 1


def test_network_loggers_quieted_by_default(restore_logging) -> None:
    configure_logging("DEBUG")

    assert logging.getLogger("aiohttp.client").level == logging.WARNING
    assert logging.getLogger("PIL").level == logging.WARNING
