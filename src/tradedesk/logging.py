"""Log setup for the API server and the CLI.

Every handler carries a :class:`SecretFilter`. ccxt echoes request headers
and signed query strings at DEBUG, so API keys, secrets and signatures are
masked before a record is written anywhere.
"""

from __future__ import annotations

import logging
import logging.handlers
import os
import re
from pathlib import Path

LOG_FILE = "tradedesk.log"
LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"
MASK = "***"

_SECRET_FIELDS = (
    r"api[-_]?key|secret|password|passphrase|private[-_]?key|signature|"
    r"x-mbx-apikey|ok-access-(?:key|sign|passphrase)|cb-access-(?:key|sign)|api-sign"
)
_SECRET_PATTERN = re.compile(
    rf"(?P<field>['\"]?(?:{_SECRET_FIELDS})['\"]?\s*[:=]\s*['\"]?)(?P<value>[^'\"\s,&}}]+)",
    re.IGNORECASE,
)


def redact(text: str) -> str:
    """Replace the value of every credential-looking field in ``text``."""
    return _SECRET_PATTERN.sub(lambda m: m.group("field") + MASK, text)


class SecretFilter(logging.Filter):
    """Masks credentials in the formatted message of each record."""

    def filter(self, record: logging.LogRecord) -> bool:
        message = record.getMessage()
        masked = redact(message)
        if masked != message:
            record.msg = masked
            record.args = None
        return True


def configure_logging(log_dir: Path | None = None) -> None:
    """Configure console logging and, when ``log_dir`` is given, a rotating file log."""
    level_name = os.environ.get("TRADEDESK_LOG_LEVEL", "INFO").upper()
    level = getattr(logging, level_name, logging.INFO)

    formatter = logging.Formatter(LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")
    secrets = SecretFilter()

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if log_dir:
        log_dir = Path(log_dir)
        log_dir.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.handlers.RotatingFileHandler(
            log_dir / LOG_FILE,
            maxBytes=10 * 1024 * 1024,
            backupCount=5,
        ))

    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)
        handler.addFilter(secrets)
        root_logger.addHandler(handler)

    # ccxt logs every request at DEBUG
    if level > logging.DEBUG:
        logging.getLogger("ccxt").setLevel(logging.WARNING)
