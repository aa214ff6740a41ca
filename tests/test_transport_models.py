"""
Tests for the signal transport payloads.

Tests cover:
- Building payloads from engine decisions
- camelCase serialization
- Validation of signal values and ranges
"""

import json

import pytest
from pydantic import ValidationError

from src.strategy.signal_engine import SignalEngine
from src.transport.models import SignalPayload, SignalsResponse, TechnicalIndicatorsPayload


@pytest.fixture
def decision(make_snapshot, rising_prices):
    snapshot = make_snapshot(rising_prices, change_24h=3.2, volume=2e9)
    return SignalEngine().compute_signal("BTC", snapshot)


def _payload_data(**overrides):
    data = {
        "symbol": "BTC",
        "signal": "HOLD",
        "confidence": 50.0,
        "trend": "neutral",
        "strength": 0.0,
        "entryPrice": None,
        "exitPrice": None,
        "stopLoss": 98.0,
        "takeProfit": 102.0,
        "riskReward": "1.00",
        "analysis": "🟡 HOLD SIGNAL: BTC in consolidation phase",
    }
    data.update(overrides)
    return data


class TestSignalPayload:
    """Tests for SignalPayload."""

    def test_from_decision(self, decision):
        payload = SignalPayload.from_decision(decision)

        assert payload.symbol == "BTC"
        assert payload.signal == "BUY"
        assert payload.confidence == decision.confidence
        assert payload.stop_loss == decision.stop_loss
        assert payload.technical_indicators.bollinger_upper == decision.technical_indicators["bollingerUpper"]

    def test_to_json_uses_camel_case(self, decision):
        data = json.loads(SignalPayload.from_decision(decision).to_json())

        assert "entryPrice" in data
        assert "stopLoss" in data
        assert "riskReward" in data
        assert "bollingerUpper" in data["technicalIndicators"]
        assert data["exitPrice"] is None

    def test_populate_by_name(self):
        payload = SignalPayload(
            symbol="ETH",
            signal="SELL",
            confidence=70,
            trend="bearish",
            strength=12.5,
            stop_loss=105.0,
            take_profit=90.0,
            risk_reward="2.00",
            analysis="",
        )

        assert payload.take_profit == 90.0
        assert payload.technical_indicators is None

    @pytest.mark.parametrize(
        "overrides",
        [
            {"signal": "STRONG_BUY"},
            {"trend": "sideways"},
            {"confidence": 20},
            {"confidence": 99},
            {"strength": 101},
        ],
    )
    def test_rejects_invalid_values(self, overrides):
        with pytest.raises(ValidationError):
            SignalPayload.model_validate(_payload_data(**overrides))


def test_technical_indicators_defaults():
    indicators = TechnicalIndicatorsPayload(
        volatility="0.00", momentum="0.00", support="0.00", resistance="0.00"
    )

    assert indicators.rsi == "N/A"
    assert indicators.model_dump(by_alias=True)["bollingerLower"] == "N/A"


def test_signals_response(decision):
    response = SignalsResponse(
        signals=[SignalPayload.from_decision(decision)],
        timestamp=1700000000000,
    )

    data = json.loads(response.model_dump_json(by_alias=True))

    assert data["success"] is True
    assert data["message"] is None
    assert data["signals"][0]["takeProfit"] == pytest.approx(decision.take_profit)
