"""Standard library logging for the idlink API.

Route handlers and uvicorn log through `logging`; domain services log through
logfire. Identity records carry personal identifiers, so every record passing
through the root handler has email addresses, phone numbers and JWTs masked.
"""

import logging
import re
import sys

from idlink.config import Settings

_EMAIL = re.compile(r"[\w.+-]+@[\w-]+(\.[\w-]+)+")
_PHONE = re.compile(r"\+\d{8,15}")
_JWT = re.compile(r"eyJ[\w-]+\.[\w-]+\.[\w-]+")

# Libraries whose INFO output is per-request noise
_QUIET_LOGGERS = ("httpx", "httpcore", "asyncpg", "sqlalchemy.engine")


def mask_identifiers(message: str) -> str:
    """Replace emails, E.164 numbers and session tokens in a log message."""
    message = _JWT.sub("<token>", message)
    message = _EMAIL.sub("<email>", message)
    return _PHONE.sub("<phone>", message)


class IdentifierRedactingFilter(logging.Filter):
    """Mask personal identifiers in the formatted log message."""

    def filter(self, record: logging.LogRecord) -> bool:
        masked = mask_identifiers(record.getMessage())
        record.msg, record.args = masked, None
        return True


def setup_logging(settings: Settings) -> None:
    """Configure root logging for the API process.

    Args:
        settings: Application settings
    """
    level = logging.DEBUG if settings.debug else logging.INFO

    handler = logging.StreamHandler(sys.stdout)
    handler.addFilter(IdentifierRedactingFilter())
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        handlers=[handler],
        force=True,
    )

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
    logging.getLogger("idlink").setLevel(level)

    logging.getLogger(__name__).info(
        f"Logging configured: environment={settings.environment}, "
        f"level={logging.getLevelName(level)}"
    )
