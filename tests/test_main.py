"""
Tests for the command line entry point.

Tests cover:
- Text and JSON output
- Symbol filtering
- Error handling for bad input files
"""

import json

import pytest
from unittest.mock import patch

from config.settings import Settings
from src.main import load_snapshots, main
from src.market.models import InvalidSnapshotError


@pytest.fixture
def snapshot_file(tmp_path):
    """JSON file with a rising BTC snapshot and a flat EURUSD one."""
    history = [
        {"price": 45000.0 - i * 100.0, "timestamp": 1700000000000 - i * 60000}
        for i in range(30)
    ]
    data = [
        {
            "symbol": "BTC",
            "assetType": "crypto",
            "price": 45000.0,
            "change24h": 3.2,
            "volume": 2e9,
            "priceHistory": history,
        },
        {"symbol": "EURUSD", "price": 1.08},
    ]
    path = tmp_path / "market.json"
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


@pytest.fixture(autouse=True)
def quiet_cli():
    """Use default settings and keep the test logging configuration."""
    with patch("src.main.get_settings", return_value=Settings(_env_file=None)):
        with patch("src.main.setup_logging"):
            yield


class TestMain:
    """Tests for main()."""

    def test_text_output(self, snapshot_file, capsys):
        result = main([str(snapshot_file)])

        out = capsys.readouterr().out
        assert result == 0
        assert "BTC:" in out
        assert "EURUSD: HOLD" in out

    def test_json_output(self, snapshot_file, capsys):
        result = main([str(snapshot_file), "--json"])

        data = json.loads(capsys.readouterr().out)
        assert result == 0
        assert data["success"] is True
        assert [s["symbol"] for s in data["signals"]] == ["BTC", "EURUSD"]
        assert "stopLoss" in data["signals"][0]
        assert data["signals"][1]["technicalIndicators"]["rsi"] == "N/A"

    def test_symbol_filter(self, snapshot_file, capsys):
        result = main([str(snapshot_file), "--symbol", "EURUSD", "--json"])

        data = json.loads(capsys.readouterr().out)
        assert result == 0
        assert [s["symbol"] for s in data["signals"]] == ["EURUSD"]

    def test_unknown_symbol(self, snapshot_file, capsys):
        result = main([str(snapshot_file), "--symbol", "DOGE"])

        assert result == 1
        assert "[ERROR] Symbol not found: DOGE" in capsys.readouterr().err

    def test_missing_file(self, tmp_path, capsys):
        result = main([str(tmp_path / "missing.json")])

        assert result == 1
        assert "[ERROR]" in capsys.readouterr().err

    def test_invalid_json(self, tmp_path, capsys):
        path = tmp_path / "bad.json"
        path.write_text("{not json", encoding="utf-8")

        assert main([str(path)]) == 1
        assert "Invalid JSON" in capsys.readouterr().err

    def test_empty_input_json_message(self, tmp_path, capsys):
        path = tmp_path / "empty.json"
        path.write_text("[]", encoding="utf-8")

        result = main([str(path), "--json"])

        data = json.loads(capsys.readouterr().out)
        assert result == 0
        assert data["signals"] == []
        assert data["message"] == "No market data available"

    def test_empty_input_text_message(self, tmp_path, capsys):
        path = tmp_path / "empty.json"
        path.write_text("[]", encoding="utf-8")

        assert main([str(path)]) == 0
        assert "[INFO] No market data available" in capsys.readouterr().out

    def test_json_output_has_no_message(self, snapshot_file, capsys):
        main([str(snapshot_file), "--json"])

        assert json.loads(capsys.readouterr().out)["message"] is None

    def test_infinite_price_for_symbol(self, tmp_path, capsys):
        path = tmp_path / "inf.json"
        path.write_text('{"symbol": "BTC", "price": Infinity}', encoding="utf-8")

        result = main([str(path), "--symbol", "BTC"])

        assert result == 0
        assert "BTC: HOLD" in capsys.readouterr().out

    def test_invalid_snapshot(self, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text(json.dumps({"symbol": "BTC", "price": -1}), encoding="utf-8")

        assert main([str(path)]) == 1


class TestLoadSnapshots:
    """Tests for load_snapshots."""

    def test_single_object(self, tmp_path):
        path = tmp_path / "one.json"
        path.write_text(json.dumps({"symbol": "BTC", "price": 100}), encoding="utf-8")

        snapshots = load_snapshots(path)

        assert [s.symbol for s in snapshots] == ["BTC"]

    @pytest.mark.parametrize("content", ["42", "[1, 2]", '"BTC"'])
    def test_rejects_wrong_shape(self, tmp_path, content):
        path = tmp_path / "shape.json"
        path.write_text(content, encoding="utf-8")

        with pytest.raises(InvalidSnapshotError):
            load_snapshots(path)
