"""Tests for log setup and credential masking."""

import logging

import pytest

from tradedesk.logging import LOG_FILE, SecretFilter, configure_logging, redact


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    level = root.level
    ccxt_level = logging.getLogger("ccxt").level
    yield root
    logging.getLogger("ccxt").setLevel(ccxt_level)
    for handler in root.handlers[:]:
        if any(isinstance(f, SecretFilter) for f in handler.filters):
            root.removeHandler(handler)
            handler.close()
    root.setLevel(level)


class TestRedact:
    """Tests for redact."""

    def test_masks_exchange_headers(self):
        text = "GET /api/v3/account {'X-MBX-APIKEY': 'abc123', 'Content-Type': 'application/json'}"

        masked = redact(text)

        assert "abc123" not in masked
        assert "'X-MBX-APIKEY': '***'" in masked
        assert "application/json" in masked

    def test_masks_signed_query_string(self):
        masked = redact("timestamp=1700000000&signature=deadbeef&recvWindow=5000")

        assert masked == "timestamp=1700000000&signature=***&recvWindow=5000"

    def test_masks_ccxt_credential_fields(self):
        masked = redact('{"apiKey": "k-1", "secret": "s-1", "privateKey": "0xfeed"}')

        for value in ("k-1", "s-1", "0xfeed"):
            assert value not in masked

    def test_plain_text_untouched(self):
        text = "Fetched 12 balances for binance connection c-1"
        assert redact(text) == text


class TestSecretFilter:
    """Tests for SecretFilter."""

    def test_masks_formatted_arguments(self):
        record = logging.LogRecord(
            "ccxt.base.exchange", logging.DEBUG, __file__, 1,
            "request headers %s", ({"X-MBX-APIKEY": "abc123"},), None,
        )

        assert SecretFilter().filter(record) is True
        assert record.getMessage() == "request headers {'X-MBX-APIKEY': '***'}"

    def test_leaves_clean_record_alone(self):
        record = logging.LogRecord("tradedesk", logging.INFO, __file__, 1, "user %s", ("u-1",), None)

        SecretFilter().filter(record)

        assert record.args == ("u-1",)
        assert record.getMessage() == "user u-1"


class TestConfigureLogging:
    """Tests for configure_logging."""

    def test_file_log_is_masked(self, tmp_path, monkeypatch, restore_root_logger):
        monkeypatch.setenv("TRADEDESK_LOG_LEVEL", "DEBUG")

        configure_logging(tmp_path / "logs")
        logging.getLogger("tradedesk.exchanges").debug("headers %s", {"apiKey": "k-123"})
        for handler in restore_root_logger.handlers:
            handler.flush()

        content = (tmp_path / "logs" / LOG_FILE).read_text(encoding="utf-8")
        assert "k-123" not in content
        assert "'apiKey': '***'" in content

    def test_repeated_setup_replaces_handlers(self, restore_root_logger):
        configure_logging()
        configure_logging()

        assert len(restore_root_logger.handlers) == 1
        assert any(isinstance(f, SecretFilter) for f in restore_root_logger.handlers[0].filters)
