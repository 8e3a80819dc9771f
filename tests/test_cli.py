"""Tests for CLI commands."""

import json
import logging
from unittest.mock import patch

import pandas as pd
import pytest
from typer.testing import CliRunner

from signal_validation.cli import app

runner = CliRunner()


@pytest.fixture
def mock_stock_data():
    """Sixty days of steadily rising prices."""
    dates = pd.date_range(start='2024-01-01', periods=60, freq='D')
    closes = [100.0 + i for i in range(60)]
    data = {
        'Open': closes,
        'High': [c + 1 for c in closes],
        'Low': [c - 1 for c in closes],
        'Close': closes,
        'Volume': [1000000] * 60
    }
    return pd.DataFrame(data, index=dates)


@pytest.fixture
def csv_file(tmp_path, mock_stock_data):
    file_path = tmp_path / "asset.csv"
    mock_stock_data.to_csv(file_path)
    return file_path


def test_version():
    result = runner.invoke(app, ["--version"])
    assert result.exit_code == 0
    assert "Signal Validation v0.1.0" in result.stdout


def test_no_command_shows_help():
    result = runner.invoke(app, [])
    assert result.exit_code == 0
    assert "validate" in result.stdout


def test_presets_command():
    result = runner.invoke(app, ["presets"])
    assert result.exit_code == 0
    assert "SmartBot" in result.stdout
    assert "UltraConservative" in result.stdout


def test_validate_json(csv_file):
    """JSON output is keyed by symbol."""
    result = runner.invoke(
        app, ["validate", str(csv_file), "--preset", "EmaBot", "--confidence", "95", "--json"]
    )
    assert result.exit_code == 0

    data = json.loads(result.stdout)
    assert list(data) == ["ASSET"]
    assert data["ASSET"]["max_score"] == 100
    assert data["ASSET"]["decision"]["action"] in ("BUY", "HOLD")
    assert 50 <= data["ASSET"]["confidence"] <= 95


def test_validate_table(csv_file):
    result = runner.invoke(app, ["validate", str(csv_file)])
    assert result.exit_code == 0
    assert "ASSET" in result.stdout
    assert "Decision:" in result.stdout


def test_validate_unknown_preset(csv_file):
    result = runner.invoke(app, ["validate", str(csv_file), "--preset", "NoSuchBot"])
    assert result.exit_code == 1
    assert "Unknown preset" in result.stdout


def test_validate_invalid_action(csv_file):
    result = runner.invoke(
        app, ["validate", str(csv_file), "--action", "SHORT", "--confidence", "80"]
    )
    assert result.exit_code == 1


def test_validate_action_without_confidence(csv_file):
    """An action alone is reported as ignored, not silently dropped."""
    result = runner.invoke(app, ["validate", str(csv_file), "--action", "SELL"])

    assert result.exit_code == 0
    assert "--action SELL ignored" in result.stdout
    assert "Decision:" in result.stdout


@patch('signal_validation.data.get_yf_ticker')
def test_validate_ticker(mock_get_ticker, mock_stock_data):
    """Tickers are downloaded through yfinance."""
    mock_get_ticker.return_value.history.return_value = mock_stock_data

    result = runner.invoke(app, ["validate", "aapl", "--json"])

    assert result.exit_code == 0
    assert "AAPL" in json.loads(result.stdout)
    mock_get_ticker.assert_called_once_with("aapl")


@patch('signal_validation.data.get_yf_ticker')
def test_validate_download_failure(mock_get_ticker):
    mock_get_ticker.return_value.history.return_value = pd.DataFrame()

    result = runner.invoke(app, ["validate", "XYZ"])

    assert result.exit_code == 1


def test_trend_command(csv_file):
    result = runner.invoke(app, ["trend", str(csv_file)])
    assert result.exit_code == 0
    assert "Market condition" in result.stdout


@patch('signal_validation.cli.set_console_level')
def test_verbose_lowers_console_level(mock_set_level):
    result = runner.invoke(app, ["--verbose", "presets"])
    assert result.exit_code == 0
    mock_set_level.assert_called_once_with(logging.INFO)
