"""Tests for price history loading."""

from unittest.mock import MagicMock, patch

import numpy as np
import pandas as pd
import pytest

from signal_validation.data import (
    compute_price_change_percent,
    download_price_history,
    get_yf_ticker,
    load_price_history,
    load_snapshot,
    normalize_columns,
    snapshot_from_frame,
)
from signal_validation.exceptions import MarketDataError


@pytest.fixture
def price_frame():
    """Five daily bars with a couple of gaps."""
    dates = pd.date_range(start='2024-01-01', periods=5, freq='D')
    return pd.DataFrame({
        'Open': [100.0, 101.0, 102.0, 103.0, 104.0],
        'High': [101.0, np.nan, 103.0, 104.0, 105.0],
        'Low': [99.0, 100.0, 101.0, 102.0, 103.0],
        'Close': [100.5, 101.5, 102.5, 103.5, 105.57],
        'Volume': [1000, 1100, np.nan, 1300, 1400],
    }, index=dates)


def test_normalize_columns():
    df = pd.DataFrame({'close': [1.0], 'VOLUME': [2.0], 'other': [3.0]})
    normalized = normalize_columns(df)

    assert list(normalized.columns) == ['Close', 'Volume', 'other']
    assert list(df.columns) == ['close', 'VOLUME', 'other']


def test_compute_price_change_percent(price_frame):
    assert compute_price_change_percent(price_frame) == pytest.approx(2.0)
    assert compute_price_change_percent(price_frame.iloc[:1]) is None
    assert compute_price_change_percent(pd.DataFrame({'Close': [0.0, 1.0]})) is None
    assert compute_price_change_percent(pd.DataFrame({'Open': [1.0, 2.0]})) is None


def test_snapshot_from_frame(price_frame):
    """Gaps in volume become zero and gaps in highs fall back to the close."""
    snapshot = snapshot_from_frame(price_frame, symbol="TEST")

    assert snapshot.symbol == "TEST"
    assert snapshot.closes == (100.5, 101.5, 102.5, 103.5, 105.57)
    assert snapshot.current_price == 105.57
    assert snapshot.volumes[2] == 0.0
    assert snapshot.highs[1] == 101.5
    assert snapshot.lows == (99.0, 100.0, 101.0, 102.0, 103.0)
    assert snapshot.price_change_percent == pytest.approx(2.0)


def test_snapshot_from_frame_overrides(price_frame):
    snapshot = snapshot_from_frame(price_frame, price_change_percent=-1.0, current_price=104.0)

    assert snapshot.price_change_percent == -1.0
    assert snapshot.current_price == 104.0


def test_snapshot_from_frame_close_only():
    snapshot = snapshot_from_frame(pd.DataFrame({'close': [1.0, 2.0, np.nan]}))

    assert snapshot.closes == (1.0, 2.0)
    assert snapshot.volumes is None
    assert snapshot.highs is None


def test_snapshot_from_frame_invalid():
    with pytest.raises(MarketDataError, match="Missing required columns"):
        snapshot_from_frame(pd.DataFrame({'Open': [1.0]}), symbol="BAD")
    with pytest.raises(MarketDataError, match="No price data"):
        snapshot_from_frame(pd.DataFrame({'Close': [np.nan]}))


def test_load_price_history(tmp_path, price_frame):
    """CSV files are read with a date index, oldest first."""
    file_path = tmp_path / "test.csv"
    price_frame.iloc[::-1].to_csv(file_path)

    df = load_price_history(file_path)

    assert isinstance(df.index, pd.DatetimeIndex)
    assert df.index.is_monotonic_increasing
    assert df['Close'].iloc[-1] == pytest.approx(105.57)


def test_load_price_history_missing_file(tmp_path):
    with pytest.raises(MarketDataError):
        load_price_history(tmp_path / "missing.csv")


@patch('signal_validation.data.get_yf_ticker')
def test_download_price_history(mock_get_ticker, price_frame):
    mock_ticker = MagicMock()
    mock_ticker.history.return_value = price_frame
    mock_get_ticker.return_value = mock_ticker

    df = download_price_history("AAPL", lookback_days=30)

    assert df is price_frame
    mock_get_ticker.assert_called_once_with("AAPL")
    mock_ticker.history.assert_called_once_with(period="30d", interval="1d")


@patch('signal_validation.data.get_yf_ticker')
def test_download_price_history_empty(mock_get_ticker):
    mock_get_ticker.return_value.history.return_value = pd.DataFrame()

    with pytest.raises(MarketDataError, match="No data downloaded for XYZ"):
        download_price_history("XYZ")


@patch('signal_validation.data.yf.Ticker')
def test_get_yf_ticker_is_cached(mock_ticker_class):
    get_yf_ticker.cache_clear()
    try:
        first = get_yf_ticker("CACHED")
        second = get_yf_ticker("CACHED")
    finally:
        get_yf_ticker.cache_clear()

    assert first is second
    mock_ticker_class.assert_called_once_with("CACHED")


def test_load_snapshot_from_file(tmp_path, price_frame):
    """A CSV path is named after its file stem."""
    file_path = tmp_path / "asml.csv"
    price_frame.to_csv(file_path)

    snapshot = load_snapshot(str(file_path))

    assert snapshot.symbol == "ASML"
    assert len(snapshot.closes) == 5


@patch('signal_validation.data.get_yf_ticker')
def test_load_snapshot_from_ticker(mock_get_ticker, price_frame):
    mock_get_ticker.return_value.history.return_value = price_frame

    snapshot = load_snapshot("msft", lookback_days=10)

    assert snapshot.symbol == "MSFT"
    mock_get_ticker.return_value.history.assert_called_once_with(period="10d", interval="1d")
