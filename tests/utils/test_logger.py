import asyncio
import logging
import sys

from peechi.util.logger import (
    AlertQueueHandler,
    ColorFormatter,
    attach_alert_handler,
    detach_alert_handler,
    get_log_filepath,
    get_logger,
    handle_exception,
    setup_logger,
    should_use_color,
)


class DummyStream:
    def __init__(self):
        self.written = []

    def write(self, msg):
        self.written.append(msg)

    def isatty(self):
        return True


def test_get_logger_returns_logger():
    logger = get_logger("test_logger")
    assert isinstance(logger, logging.Logger)
    assert logger.propagate is False
    assert any(isinstance(h, logging.Handler) for h in logger.handlers)


def test_setup_logger_idempotent():
    logger1 = setup_logger("test_logger_idem")
    handler_count = len(logger1.handlers)
    logger2 = setup_logger("test_logger_idem")
    assert logger1 is logger2
    assert len(logger2.handlers) == handler_count


def test_color_formatter_applies_color():
    formatter = ColorFormatter("%(levelname)s %(message)s")
    record = logging.LogRecord("test", logging.ERROR, "", 0, "error occurred", None, None)
    formatted = formatter.format(record)
    assert "\033[31m" in formatted and "error occurred" in formatted


def test_should_use_color_true(monkeypatch):
    monkeypatch.setattr("sys.stderr", DummyStream())
    assert should_use_color() is True


def test_get_log_filepath_is_stable():
    assert get_log_filepath() == get_log_filepath()
    assert get_log_filepath().parent.exists()


def test_handle_exception_logs_error(caplog):
    class DummyException(Exception):
        pass

    with caplog.at_level(logging.ERROR):
        try:
            raise DummyException("fail")
        except DummyException as exc:
            handle_exception(DummyException, exc, exc.__traceback__)
    assert any("Uncaught exception" in r.message for r in caplog.records)


class TestAlertQueueHandler:
    def test_queues_errors_only(self):
        queue = asyncio.Queue()
        logger = get_logger("test_alert_levels")
        handler = AlertQueueHandler(queue)
        logger.addHandler(handler)
        try:
            logger.info("just saying")
            logger.warning("careful")
            logger.error("broken %s", "thing")
            logger.critical("on fire")
        finally:
            logger.removeHandler(handler)

        records = [queue.get_nowait() for _ in range(queue.qsize())]
        assert [r.message for r in records] == ["broken thing", "on fire"]

    def test_full_queue_drops_records(self):
        queue = asyncio.Queue(maxsize=1)
        handler = AlertQueueHandler(queue)
        for i in range(3):
            handler.handle(logging.LogRecord("x", logging.ERROR, "", 0, f"error {i}", None, None))

        assert queue.qsize() == 1
        assert queue.get_nowait().getMessage() == "error 0"

    def test_renders_traceback_text(self):
        queue = asyncio.Queue()
        handler = AlertQueueHandler(queue)
        try:
            raise RuntimeError("kaboom")
        except RuntimeError:
            record = logging.LogRecord("x", logging.ERROR, "", 0, "failed", None, sys.exc_info())
        handler.handle(record)

        assert "RuntimeError: kaboom" in queue.get_nowait().exc_text


def test_attach_and_detach_alert_handler():
    existing = get_logger("test_alert_existing")
    handler = AlertQueueHandler(asyncio.Queue())

    attach_alert_handler(handler)
    try:
        created_later = get_logger("test_alert_created_later")
        assert handler in existing.handlers
        assert handler in created_later.handlers
        assert handler in logging.getLogger().handlers
    finally:
        detach_alert_handler(handler)

    assert handler not in existing.handlers
    assert handler not in created_later.handlers
    assert handler not in logging.getLogger().handlers


async def test_alert_handler_hands_worker_thread_records_to_its_loop():
    queue = asyncio.Queue()
    handler = AlertQueueHandler(queue)
    assert handler.loop is asyncio.get_running_loop()

    record = logging.LogRecord("x", logging.ERROR, "", 0, "from a worker", None, None)
    await asyncio.to_thread(handler.handle, record)

    forwarded = await asyncio.wait_for(queue.get(), timeout=1)
    assert forwarded.getMessage() == "from a worker"
