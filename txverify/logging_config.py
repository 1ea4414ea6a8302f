"""Logging helpers for txverify.

Every module gets its logger through :func:`get_logger` so that all records
live under the ``txverify`` namespace and share one handler.
"""

import logging
import sys

LOGGER_NAMESPACE = "txverify"
LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """Attach a stderr handler to the txverify namespace (idempotent)."""
    root = logging.getLogger(LOGGER_NAMESPACE)
    root.setLevel(level.upper())
    if not root.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root.addHandler(handler)


def get_logger(name: str) -> logging.Logger:
    """Return a logger under the txverify namespace."""
    if name != LOGGER_NAMESPACE and not name.startswith(f"{LOGGER_NAMESPACE}."):
        name = f"{LOGGER_NAMESPACE}.{name}"
    return logging.getLogger(name)


_verdict_logger = get_logger("txverify.verdicts")


def log_verification(
    transaction_id: str,
    currency: str,
    outcome: str,
    status: str,
    confirmations: int,
    caller_id: str | None = None,
) -> None:
    """Log a single verification verdict."""
    _verdict_logger.info(
        f"Verification: tx={transaction_id} currency={currency} outcome={outcome} "
        f"status={status} confirmations={confirmations} caller={caller_id or '-'}"
    )


def log_auth_event(event: str, caller_id: str | None = None, detail: str | None = None) -> None:
    """Log an authentication event (never includes credentials)."""
    logger = get_logger("txverify.auth")
    message = f"Auth {event}: caller={caller_id or '-'}"
    if detail:
        message += f" detail={detail}"
    if event == "success":
        logger.debug(message)
    else:
        logger.warning(message)
