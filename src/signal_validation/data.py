"""Price history loading and conversion to market snapshots."""

import logging
from functools import lru_cache
from pathlib import Path
from typing import Optional, Union

import pandas as pd
import yfinance as yf

from signal_validation.config import LOOKBACK_DAYS, OPTIONAL_COLUMNS, REQUIRED_COLUMNS
from signal_validation.exceptions import MarketDataError
from signal_validation.models import MarketSnapshot

logger = logging.getLogger(__name__)


@lru_cache(maxsize=500)
def get_yf_ticker(ticker: str) -> yf.Ticker:
    """Get a cached Ticker object for the given symbol."""
    return yf.Ticker(ticker)


def normalize_columns(df: pd.DataFrame) -> pd.DataFrame:
    """Return a copy with OHLCV columns in title case (e.g. 'close' -> 'Close')."""
    known = {col.lower(): col for col in REQUIRED_COLUMNS + OPTIONAL_COLUMNS}
    renamed = {
        col: known[str(col).lower()]
        for col in df.columns
        if str(col).lower() in known
    }
    return df.rename(columns=renamed)


def compute_price_change_percent(df: pd.DataFrame) -> Optional[float]:
    """Percent change of the last close versus the previous bar's close."""
    df = normalize_columns(df)
    if 'Close' not in df.columns:
        return None
    closes = df['Close'].dropna()
    if len(closes) < 2 or closes.iloc[-2] == 0:
        return None
    return float((closes.iloc[-1] - closes.iloc[-2]) / closes.iloc[-2] * 100)


def snapshot_from_frame(
    df: pd.DataFrame,
    symbol: str = "",
    price_change_percent: Optional[float] = None,
    current_price: Optional[float] = None
) -> MarketSnapshot:
    """Convert an OHLCV DataFrame into a MarketSnapshot.

    Args:
        df: DataFrame ordered oldest to newest with at least a Close column
        symbol: Ticker symbol
        price_change_percent: 24h percent change; computed from the last two
            closes when omitted
        current_price: Latest price; defaults to the last close

    Returns:
        MarketSnapshot built from the frame

    Raises:
        MarketDataError: If the frame is empty or has no Close column
    """
    df = normalize_columns(df)
    missing = [col for col in REQUIRED_COLUMNS if col not in df.columns]
    if missing:
        raise MarketDataError(f"Missing required columns for {symbol or 'frame'}: {missing}")

    df = df.dropna(subset=['Close'])
    if df.empty:
        raise MarketDataError(f"No price data available for {symbol or 'frame'}")

    if price_change_percent is None:
        price_change_percent = compute_price_change_percent(df)

    def optional(column: str):
        if column not in df.columns:
            return None
        return df[column].fillna(0.0 if column == 'Volume' else df['Close']).tolist()

    return MarketSnapshot(
        closes=df['Close'].tolist(),
        volumes=optional('Volume'),
        highs=optional('High'),
        lows=optional('Low'),
        current_price=current_price,
        price_change_percent=price_change_percent,
        symbol=symbol,
    )


def load_price_history(file_path: Union[str, Path]) -> pd.DataFrame:
    """Read an OHLCV CSV file indexed by date.

    Raises:
        MarketDataError: If the file cannot be read
    """
    file_path = Path(file_path)
    try:
        df = pd.read_csv(file_path, parse_dates=True, index_col=0)
    except (OSError, ValueError, pd.errors.ParserError) as e:
        raise MarketDataError(f"Error reading price history from {file_path}: {e}") from e
    return df.sort_index()


def download_price_history(
    ticker: str,
    lookback_days: int = LOOKBACK_DAYS,
    interval: str = "1d"
) -> pd.DataFrame:
    """Download recent OHLCV history from Yahoo Finance.

    Raises:
        MarketDataError: If no data is returned
    """
    logger.info(f"Downloading {lookback_days} days of {interval} data for {ticker}")
    df = get_yf_ticker(ticker).history(period=f"{lookback_days}d", interval=interval)
    if df is None or df.empty:
        raise MarketDataError(f"No data downloaded for {ticker}")
    return df


def load_snapshot(source: str, lookback_days: int = LOOKBACK_DAYS) -> MarketSnapshot:
    """Build a snapshot from a CSV path, or from a ticker when no such file exists."""
    path = Path(source)
    if path.is_file():
        return snapshot_from_frame(load_price_history(path), symbol=path.stem.upper())
    return snapshot_from_frame(download_price_history(source, lookback_days), symbol=source.upper())
