"""Tests for exchange error classification."""

import ccxt

from tradedesk.errors import (
    ErrorCode,
    ExchangeConfigError,
    UnsupportedExchangeError,
    classify_exchange_error,
)


class TestClassifyExchangeError:
    """Tests for classify_exchange_error."""

    def test_authentication_error(self):
        result = classify_exchange_error(ccxt.AuthenticationError("binance invalid"))
        assert result.code == ErrorCode.INVALID_CREDENTIALS
        assert result.status == 401

    def test_permission_denied_is_credentials(self):
        result = classify_exchange_error(ccxt.PermissionDenied("no rights"))
        assert result.code == ErrorCode.INVALID_CREDENTIALS

    def test_network_errors(self):
        for error in (ccxt.NetworkError("down"), ccxt.RequestTimeout("slow"), ccxt.ExchangeNotAvailable("503")):
            result = classify_exchange_error(error)
            assert result.code == ErrorCode.CONNECTION_ERROR
            assert result.status == 503

    def test_config_errors(self):
        result = classify_exchange_error(ccxt.ArgumentsRequired("requires walletAddress"))
        assert result.code == ErrorCode.EXCHANGE_CONFIG_ERROR
        assert result.status == 400

        result = classify_exchange_error(ExchangeConfigError("missing wallet"))
        assert result.code == ErrorCode.EXCHANGE_CONFIG_ERROR

    def test_unsupported_exchange(self):
        result = classify_exchange_error(UnsupportedExchangeError("nope"))
        assert result.code == ErrorCode.UNSUPPORTED_EXCHANGE
        assert result.status == 400
        assert "nope" in result.message

    def test_message_fallback_credentials(self):
        for message in ("Invalid API-key", "bad signature", "Unauthorized"):
            result = classify_exchange_error(RuntimeError(message))
            assert result.code == ErrorCode.INVALID_CREDENTIALS, message

    def test_message_fallback_connection(self):
        for message in ("Request Timeout", "network unreachable"):
            result = classify_exchange_error(RuntimeError(message))
            assert result.code == ErrorCode.CONNECTION_ERROR, message

    def test_generic_exchange_error(self):
        result = classify_exchange_error(ccxt.InsufficientFunds("not enough"))
        assert result.code == ErrorCode.EXCHANGE_ERROR
        assert result.status == 500
        assert result.to_dict() == {"code": "EXCHANGE_ERROR", "message": "not enough"}

    def test_non_exception(self):
        result = classify_exchange_error(KeyboardInterrupt())
        assert result.code == ErrorCode.UNKNOWN_ERROR
