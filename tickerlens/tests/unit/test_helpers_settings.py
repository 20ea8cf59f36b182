"""
TICKERLENS - Unit Tests for Helpers & Settings
"""
import pytest

from tickerlens.config.settings import AppSettings, StreamSettings, load_settings
from tickerlens.utils.helpers import new_id, pct_change, to_yahoo_symbol


class TestHelpers:
    @pytest.mark.parametrize("symbol,expected", [
        ("BINANCE:BTCUSDT", "BTC-USD"),
        ("COINBASE:ETHUSD", "ETH-USD"),
        ("AAPL", "AAPL"),
        ("OANDA:EURGBP", "OANDA:EURGBP"),
    ])
    def test_to_yahoo_symbol(self, symbol, expected):
        assert to_yahoo_symbol(symbol) == expected

    def test_pct_change(self):
        assert pct_change(100.0, 110.0) == pytest.approx(10.0)
        assert pct_change(0.0, 5.0) == 0.0

    def test_new_id(self):
        ident = new_id("rsi")
        assert ident.startswith("rsi_")
        assert len(ident) == len("rsi_") + 8


class TestSettings:
    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("TICKERLENS_RETENTION_SECONDS", raising=False)
        settings = AppSettings()
        assert settings.stream.retention_seconds == 3600
        assert settings.stream.min_price_delta == 0.01
        assert settings.data.request_timeout_seconds == 5.0

    def test_environment_overrides_defaults(self, monkeypatch):
        monkeypatch.setenv("TICKERLENS_RETENTION_SECONDS", "600")
        monkeypatch.setenv("TICKERLENS_DEFAULT_SYMBOL", "MSFT")
        stream = StreamSettings()
        assert stream.retention_seconds == 600
        assert stream.default_symbol == "MSFT"

    def test_explicit_overrides_win(self, monkeypatch):
        monkeypatch.setenv("TICKERLENS_RETENTION_SECONDS", "600")
        settings = load_settings(port=9000, stream={"retention_seconds": 60})
        assert settings.port == 9000
        assert settings.stream.retention_seconds == 60

    def test_instance_override(self):
        settings = load_settings(stream=StreamSettings(min_price_delta=0.5))
        assert settings.stream.min_price_delta == 0.5
