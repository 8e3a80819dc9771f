"""Technical indicator calculations.

All functions here are pure and never raise on short input: insufficient data
yields a documented neutral value.
"""

import logging
from typing import List, Sequence

import numpy as np

from signal_validation.config import (
    DEFAULT_VOLATILITY,
    MAX_VOLATILITY,
    RSI_NEUTRAL,
    RSI_PERIOD,
    SR_LOOKBACK,
    SR_MERGE_TOLERANCE,
    SR_STRENGTH_PER_TOUCH,
)
from signal_validation.models import LevelKind, TechnicalLevel

logger = logging.getLogger(__name__)


def ema(series: Sequence[float], period: int) -> float:
    """Calculate the exponential moving average of a series.

    The average is seeded with the simple mean of the first `period` values.

    Args:
        series: Prices ordered oldest to newest
        period: EMA period

    Returns:
        The final EMA value. When the series is shorter than `period` the last
        element is returned instead (0.0 for an empty series).
    """
    prices = np.asarray(series, dtype=float)
    if prices.size == 0:
        return 0.0
    if period < 1 or prices.size < period:
        return float(prices[-1])

    multiplier = 2 / (period + 1)
    value = prices[:period].mean()
    for price in prices[period:]:
        value = price * multiplier + value * (1 - multiplier)
    return float(value)


def rsi(series: Sequence[float], period: int = RSI_PERIOD) -> float:
    """Calculate the Relative Strength Index over the last `period` deltas.

    Args:
        series: Prices ordered oldest to newest
        period: Number of deltas averaged

    Returns:
        RSI in [0, 100]; 100 when there were no losses, 50 with fewer than
        `period + 1` prices.
    """
    prices = np.asarray(series, dtype=float)
    if period < 1 or prices.size < period + 1:
        return RSI_NEUTRAL

    deltas = np.diff(prices)[-period:]
    avg_gain = deltas[deltas > 0].sum() / period
    avg_loss = -deltas[deltas < 0].sum() / period

    if avg_loss == 0:
        return 100.0
    rs = avg_gain / avg_loss
    return float(100 - 100 / (1 + rs))


def historical_volatility(series: Sequence[float]) -> float:
    """Mean absolute bar-to-bar percent return, clamped to [0, 5].

    Returns 1.0 when fewer than two prices (or no finite return) are available.
    """
    prices = np.asarray(series, dtype=float)
    if prices.size < 2:
        return DEFAULT_VOLATILITY

    previous = prices[:-1]
    with np.errstate(divide='ignore', invalid='ignore'):
        returns = np.abs((prices[1:] - previous) / previous) * 100
    returns = returns[np.isfinite(returns)]
    if returns.size == 0:
        return DEFAULT_VOLATILITY

    return float(np.clip(returns.mean(), 0.0, MAX_VOLATILITY))


def returns_volatility(series: Sequence[float]) -> float:
    """Population standard deviation of bar-to-bar returns, in percent.

    Unlike historical_volatility this is not clamped. Non-finite returns are
    skipped; 0.0 when fewer than two prices (or no finite return) are available.
    """
    prices = np.asarray(series, dtype=float)
    if prices.size < 2:
        return 0.0

    previous = prices[:-1]
    with np.errstate(divide='ignore', invalid='ignore'):
        returns = (prices[1:] - previous) / previous
    returns = returns[np.isfinite(returns)]
    if returns.size == 0:
        return 0.0

    return float(returns.std() * 100)


def _merge_candidate(groups: List[List[float]], price: float, tolerance: float) -> None:
    # Each group is [price_sum, touches].
    for group in groups:
        if abs(group[0] / group[1] - price) <= tolerance:
            group[0] += price
            group[1] += 1
            return
    groups.append([price, 1])


def find_support_resistance(
    highs: Sequence[float],
    lows: Sequence[float],
    current_price: float,
    lookback: int = SR_LOOKBACK
) -> List[TechnicalLevel]:
    """Find support and resistance levels from local extrema.

    Interior local minima of the lows below the current price become support
    candidates and interior local maxima of the highs above it become resistance
    candidates. Candidates of the same kind within 1% of the current price of
    each other are merged into a single level whose touch count grows.

    Args:
        highs: Bar highs ordered oldest to newest
        lows: Bar lows ordered oldest to newest
        current_price: Reference price
        lookback: Number of most recent bars to scan

    Returns:
        Levels sorted by distance to the current price, nearest first
    """
    size = min(len(highs), len(lows))
    if lookback > 0:
        size = min(size, lookback)
    if size < 3:
        return []

    high_values = np.asarray(highs, dtype=float)[-size:]
    low_values = np.asarray(lows, dtype=float)[-size:]
    tolerance = abs(current_price) * SR_MERGE_TOLERANCE

    supports: List[List[float]] = []
    resistances: List[List[float]] = []
    for i in range(1, size - 1):
        low = low_values[i]
        if low <= low_values[i - 1] and low <= low_values[i + 1] and low < current_price:
            _merge_candidate(supports, float(low), tolerance)

        high = high_values[i]
        if high >= high_values[i - 1] and high >= high_values[i + 1] and high > current_price:
            _merge_candidate(resistances, float(high), tolerance)

    levels = []
    for kind, groups in ((LevelKind.SUPPORT, supports), (LevelKind.RESISTANCE, resistances)):
        for price_sum, touches in groups:
            touches = int(touches)
            levels.append(TechnicalLevel(
                price=price_sum / touches,
                kind=kind,
                touches=touches,
                strength=min(1.0, touches * SR_STRENGTH_PER_TOUCH),
            ))

    levels.sort(key=lambda level: (abs(level.price - current_price), level.kind.value))
    logger.debug(f"Found {len(levels)} support/resistance levels around {current_price}")
    return levels
