"""Error taxonomy and classification of exchange failures."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum

from ccxt.base.errors import (
    ArgumentsRequired,
    AuthenticationError,
    NetworkError,
    NotSupported,
)

logger = logging.getLogger(__name__)


class ErrorCode(str, Enum):
    UNSUPPORTED_EXCHANGE = "UNSUPPORTED_EXCHANGE"
    INVALID_CREDENTIALS = "INVALID_CREDENTIALS"
    CONNECTION_ERROR = "CONNECTION_ERROR"
    EXCHANGE_CONFIG_ERROR = "EXCHANGE_CONFIG_ERROR"
    EXCHANGE_ERROR = "EXCHANGE_ERROR"
    UNKNOWN_ERROR = "UNKNOWN_ERROR"
    INVALID_STATE = "INVALID_STATE"


class TradedeskError(Exception):
    """Base class for errors raised by tradedesk itself."""

    code: ErrorCode = ErrorCode.EXCHANGE_ERROR
    status: int = 500


class UnsupportedExchangeError(TradedeskError):
    code = ErrorCode.UNSUPPORTED_EXCHANGE
    status = 400

    def __init__(self, exchange: str):
        super().__init__(f"Unsupported exchange: {exchange}")
        self.exchange = exchange


class ExchangeConfigError(TradedeskError):
    code = ErrorCode.EXCHANGE_CONFIG_ERROR
    status = 400


class StakingFeedError(TradedeskError):
    code = ErrorCode.CONNECTION_ERROR
    status = 503


class PriceServiceError(TradedeskError):
    code = ErrorCode.CONNECTION_ERROR
    status = 503


class BotStateError(TradedeskError):
    """A bot was asked to move to the status it already has."""

    code = ErrorCode.INVALID_STATE
    status = 400


@dataclass(frozen=True, slots=True)
class ClassifiedError:
    code: ErrorCode
    message: str
    status: int

    def to_dict(self) -> dict[str, str]:
        return {"code": self.code.value, "message": self.message}


_CREDENTIAL_HINTS = ("key", "signature", "auth")
_CONNECTION_HINTS = ("timeout", "network")


def classify_exchange_error(error: BaseException) -> ClassifiedError:
    """Map an exception raised while talking to an exchange onto an ``ErrorCode``.

    ccxt's exception hierarchy is checked first. Errors outside it fall back
    to matching hints in the message text, which is only good enough for a
    user-facing hint.
    """
    if not isinstance(error, Exception):
        return ClassifiedError(ErrorCode.UNKNOWN_ERROR, "An unknown error occurred", 500)

    message = str(error)

    if isinstance(error, TradedeskError):
        return ClassifiedError(error.code, message, error.status)
    if isinstance(error, AuthenticationError):
        return ClassifiedError(ErrorCode.INVALID_CREDENTIALS, message, 401)
    if isinstance(error, NetworkError):
        return ClassifiedError(ErrorCode.CONNECTION_ERROR, message, 503)
    if isinstance(error, (ArgumentsRequired, NotSupported)):
        return ClassifiedError(ErrorCode.EXCHANGE_CONFIG_ERROR, message, 400)

    lowered = message.lower()
    if any(hint in lowered for hint in _CREDENTIAL_HINTS):
        return ClassifiedError(ErrorCode.INVALID_CREDENTIALS, message, 401)
    if any(hint in lowered for hint in _CONNECTION_HINTS):
        return ClassifiedError(ErrorCode.CONNECTION_ERROR, message, 503)

    logger.debug("Unclassified exchange error %s: %s", type(error).__name__, message)
    return ClassifiedError(ErrorCode.EXCHANGE_ERROR, message, 500)
