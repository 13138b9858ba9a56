import asyncio
import logging
from logging.handlers import RotatingFileHandler
import sys
from pathlib import Path
from datetime import datetime
from prompt_toolkit import print_formatted_text
from prompt_toolkit.formatted_text import ANSI

# -------------------- Configuration --------------------
LOGS_DIR: Path = (Path(__file__).parents[3] / "logs").resolve()
LOGS_DIR.mkdir(parents=True, exist_ok=True)

LOG_FORMAT: str = "[%(asctime)s] [%(levelname)s] [%(name)s:%(funcName)s:%(lineno)d] %(message)s"
DATE_FORMAT: str = "%Y-%m-%d %H-%M-%S"

LOG_COLORS = {
    "DEBUG": "\033[36m",      # Cyan
    "INFO": "\033[32m",       # Green
    "WARNING": "\033[33m",    # Yellow
    "ERROR": "\033[31m",      # Red
    "CRITICAL": "\033[38;5;88m",  # Dark Red (ANSI 256-color)
}
RESET_COLOR = "\033[0m"

# Shared log file path for the session (initialized on first use)
LOG_FILEPATH: Path | None = None

# Loggers created through get_logger(); alert handlers are attached to all of them
_CONFIGURED_LOGGERS: dict[str, logging.Logger] = {}
_ALERT_HANDLERS: list[logging.Handler] = []


# -------------------- Formatters --------------------
class ColorFormatter(logging.Formatter):
    """
    Log formatter that wraps each message in an ANSI color chosen by level.

    DEBUG is cyan, INFO green, WARNING yellow, ERROR red and CRITICAL dark red.
    """

    def format(self, record: logging.LogRecord) -> str:
        color = LOG_COLORS.get(record.levelname, "")
        message = super().format(record)
        return f"{color}{message}{RESET_COLOR}" if color else message


class PromptToolkitHandler(logging.Handler):
    """
    Logging handler that prints through prompt_toolkit.

    Using print_formatted_text keeps ANSI colors intact on every platform and
    avoids garbling an active prompt.
    """

    def __init__(self, formatter: logging.Formatter | None = None):
        super().__init__()
        if formatter:
            self.setFormatter(formatter)

    def emit(self, record: logging.LogRecord) -> None:
        try:
            msg = self.format(record)
            print_formatted_text(ANSI(msg))
        except Exception:
            self.handleError(record)


class AlertQueueHandler(logging.Handler):
    """
    Logging handler that hands ERROR and CRITICAL records to an asyncio queue.

    The handler knows nothing about Discord. A consumer (see
    :class:`peechi.alerts.alert_forwarder.AlertForwarder`) drains the queue and
    decides where the alert goes. Records emitted while the queue is full are
    dropped; the console and file handlers still receive them.

    ``asyncio.Queue`` is not thread-safe, so records logged from worker threads
    (``asyncio.to_thread``, aiosqlite) are handed to the owning loop with
    ``call_soon_threadsafe``.

    Args:
        queue: Queue receiving the raw ``logging.LogRecord`` objects.
        level: Minimum level forwarded (defaults to ERROR).
        loop: Loop that owns ``queue``. Defaults to the running loop, if any.
    """

    def __init__(
        self,
        queue: asyncio.Queue,
        level: int = logging.ERROR,
        loop: asyncio.AbstractEventLoop | None = None,
    ):
        super().__init__(level=level)
        self.queue = queue
        if loop is None:
            try:
                loop = asyncio.get_running_loop()
            except RuntimeError:
                loop = None
        self.loop = loop

    def _put(self, record: logging.LogRecord) -> None:
        try:
            self.queue.put_nowait(record)
        except asyncio.QueueFull:
            pass

    def _on_owner_loop(self) -> bool:
        try:
            return asyncio.get_running_loop() is self.loop
        except RuntimeError:
            return False

    def emit(self, record: logging.LogRecord) -> None:
        try:
            # Render the message now; args may not survive until the consumer runs.
            record.message = record.getMessage()
            if record.exc_info and not record.exc_text:
                record.exc_text = plain_formatter.formatException(record.exc_info)
            if self.loop is None or self._on_owner_loop():
                self._put(record)
            elif not self.loop.is_closed():
                self.loop.call_soon_threadsafe(self._put, record)
        except Exception:
            self.handleError(record)


plain_formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)


def should_use_color() -> bool:
    """
    Determine if the current environment supports colorized terminal output.

    Returns:
        bool: True if stderr is attached to a TTY, False otherwise.
    """
    try:
        return sys.stderr.isatty()
    except Exception:
        return False


color_formatter = ColorFormatter(LOG_FORMAT, datefmt=DATE_FORMAT) if should_use_color() else plain_formatter


# -------------------- Logger Setup --------------------

def get_log_filepath() -> Path:
    """
    Get or create the log file path for the current session.

    All loggers share one file per session. A log file from today that was
    touched within the last 60 seconds is reused so quick restarts append to
    the same file.

    Returns:
        Path: Path to the log file used by every logger in this session.
    """
    global LOG_FILEPATH

    if LOG_FILEPATH is None:
        today_prefix = datetime.now().strftime("%Y-%m-%d")
        existing_logs = sorted(LOGS_DIR.glob(f"{today_prefix}*.log"), key=lambda p: p.stat().st_mtime, reverse=True)

        if existing_logs and datetime.now().timestamp() - existing_logs[0].stat().st_mtime < 60:
            LOG_FILEPATH = existing_logs[0]
        else:
            LOG_FILEPATH = LOGS_DIR / (datetime.now().strftime(DATE_FORMAT) + ".log")

    return LOG_FILEPATH


def setup_logger(logger_name: str) -> logging.Logger:
    """Configure and return a logger with console and rotating file handlers.

    Parameters
    ----------
    logger_name:
        Name of the logger to configure.

    Returns
    -------
    logging.Logger
        Configured logger instance.
    """
    logger = logging.getLogger(logger_name)

    if logger.handlers:
        return logger

    base_level = logging.DEBUG
    logger.setLevel(base_level)
    logger.propagate = False

    console_handler = PromptToolkitHandler(formatter=color_formatter)
    console_handler.setLevel(base_level)
    logger.addHandler(console_handler)

    file_handler = RotatingFileHandler(
        get_log_filepath(),
        maxBytes=10 * 1024 * 1024,
        backupCount=5,
        encoding="utf-8"
    )
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(plain_formatter)
    logger.addHandler(file_handler)

    for alert_handler in _ALERT_HANDLERS:
        logger.addHandler(alert_handler)

    _CONFIGURED_LOGGERS[logger_name] = logger
    return logger


def get_logger(logger_name: str) -> logging.Logger:
    """Retrieve a logger configured for Peechi, creating it if necessary.

    Parameters
    ----------
    logger_name:
        Name of the logger requested by the caller.

    Returns
    -------
    logging.Logger
        Logger instance ready for use.
    """
    return setup_logger(logger_name)


def attach_alert_handler(handler: logging.Handler) -> None:
    """Attach ``handler`` to every Peechi logger, current and future.

    Loggers do not propagate, so the handler is added to each one directly as
    well as to the root logger (which receives records from
    :func:`handle_exception`).
    """
    if handler not in _ALERT_HANDLERS:
        _ALERT_HANDLERS.append(handler)
    for logger in _CONFIGURED_LOGGERS.values():
        if handler not in logger.handlers:
            logger.addHandler(handler)
    logging.getLogger().addHandler(handler)


def detach_alert_handler(handler: logging.Handler) -> None:
    """Remove an alert handler previously added with :func:`attach_alert_handler`."""
    if handler in _ALERT_HANDLERS:
        _ALERT_HANDLERS.remove(handler)
    for logger in _CONFIGURED_LOGGERS.values():
        if handler in logger.handlers:
            logger.removeHandler(handler)
    logging.getLogger().removeHandler(handler)


# -------------------- Exception Handling --------------------
def handle_exception(exception_type, exception_instance, exception_traceback) -> None:
    """
    Global exception hook that logs uncaught exceptions.

    KeyboardInterrupt is passed to the default hook so Ctrl+C still terminates
    the process normally.
    """
    if issubclass(exception_type, KeyboardInterrupt):
        sys.__excepthook__(exception_type, exception_instance, exception_traceback)
    else:
        logging.error("Uncaught exception", exc_info=(exception_type, exception_instance, exception_traceback))


# -------------------- Suppress Noisy Libraries --------------------
NOISY_LOGGERS = [
    "discord", "discord.gateway", "discord.client", "discord.http",
    "websockets", "aiohttp", "aiosqlite", "asyncio",
]

for noisy_logger in NOISY_LOGGERS:
    lg = logging.getLogger(noisy_logger)
    lg.setLevel(logging.ERROR)
    lg.propagate = False
    lg.handlers = []


sys.excepthook = handle_exception
