import logging
from logging.handlers import RotatingFileHandler
import os
from typing import Any, Optional

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_MAX_BYTES = 5 * 1024 * 1024
LOG_BACKUP_COUNT = 3

# Log records flagged with this attribute describe errors the simulator returns
# on purpose (declines, tok_429/tok_500 faults) and never reach Sentry.
SIMULATED_FLAG = "simulated"

# Track if Sentry has been initialized (global singleton)
_sentry_initialized = False


def drop_simulated_events(event: dict, hint: dict) -> Optional[dict]:
    """
    Sentry ``before_send`` hook discarding events raised from simulated errors.

    Args:
        event (dict): The Sentry event about to be sent.
        hint (dict): Sentry hint; carries ``log_record`` for logging events.

    Returns:
        dict | None: The event, or None to drop it.
    """
    record = hint.get("log_record")
    if record is not None and getattr(record, SIMULATED_FLAG, False):
        return None
    return event


def simulated(**extra: Any) -> dict[str, Any]:
    """``extra`` mapping marking a log call as describing a simulated error."""
    return {"extra": {SIMULATED_FLAG: True, **extra}}


def init_sentry(
    dsn: str,
    environment: str = "development",
    traces_sample_rate: float = 1.0,
    release: Optional[str] = None,
) -> bool:
    """
    Initialize Sentry SDK globally (should be called once at application startup).

    Errors the simulator produces deliberately are filtered out by
    ``drop_simulated_events``.

    Args:
        dsn (str): Sentry DSN for error tracking.
        environment (str): Sentry environment name (development/production).
        traces_sample_rate (float): Performance monitoring sample rate (0.0 to 1.0).
        release (str, optional): Release name, e.g. ``"paysim@1.0.0"``.

    Returns:
        bool: True if Sentry was initialized, False if already initialized,
            no DSN was given, or the SDK is not available.
    """
    global _sentry_initialized

    if _sentry_initialized or not dsn:
        return False

    try:
        import sentry_sdk
        from sentry_sdk.integrations.asyncio import AsyncioIntegration
        from sentry_sdk.integrations.logging import LoggingIntegration
    except ImportError:
        return False

    sentry_sdk.init(
        dsn=dsn,
        environment=environment,
        release=release,
        traces_sample_rate=traces_sample_rate,
        before_send=drop_simulated_events,
        integrations=[
            # info and above as breadcrumbs, errors as events
            LoggingIntegration(level=logging.INFO, event_level=logging.ERROR),
            AsyncioIntegration(),
        ],
    )
    _sentry_initialized = True
    return True


def _file_handler(log_file: str, level: int) -> logging.Handler:
    log_dir = os.path.dirname(log_file)
    if log_dir:
        os.makedirs(log_dir, exist_ok=True)
    handler = RotatingFileHandler(
        log_file,
        maxBytes=LOG_MAX_BYTES,
        backupCount=LOG_BACKUP_COUNT,
        encoding="utf-8",
    )
    handler.setLevel(level)
    return handler


def setup_logger(
    name: str,
    log_file: str,
    level: int = logging.INFO,
    sentry_tag: Optional[str] = None,
    console: bool = True,
) -> logging.Logger:
    """
    Sets up a component logger writing to a rotating file and, optionally, the console.

    Each simulator component (store, charges, webhooks, ...) gets its own logger
    and log file so delivery failures and declines can be followed separately.
    Calling it again for the same name returns the existing logger untouched.

    Args:
        name (str): The name of the logger.
        log_file (str): The file path where the log messages will be written.
        level (int, optional): The logging level. Defaults to logging.INFO.
        sentry_tag (str, optional): Tag to identify this component in Sentry.
        console (bool, optional): Also log to stderr. Defaults to True.

    Returns:
        logging.Logger: The configured logger instance.
    """
    if sentry_tag and _sentry_initialized:
        import sentry_sdk

        sentry_sdk.set_tag("component", sentry_tag)

    logger = logging.getLogger(name)
    logger.setLevel(level)
    if logger.handlers:
        return logger

    formatter = logging.Formatter(LOG_FORMAT)
    handlers = [_file_handler(log_file, level)]
    if console:
        console_handler = logging.StreamHandler()
        console_handler.setLevel(level)
        handlers.append(console_handler)

    for handler in handlers:
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    return logger
