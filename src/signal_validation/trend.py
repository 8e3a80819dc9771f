"""Multi-horizon EMA trend analysis."""

import logging
from typing import Optional, Sequence, Tuple

import numpy as np

from signal_validation import indicators
from signal_validation.config import (
    DEFAULT_VOLUME_STRENGTH,
    EMA_HORIZONS,
    MARKET_CONDITION_CONFIDENCE,
    MODERATE_UPTREND,
    MOMENTUM_MULTIPLIER,
    MOMENTUM_WINDOW,
    OVERALL_STRENGTH_WEIGHTS,
    RSI_NEUTRAL,
    RSI_PERIOD,
    STRONG_UPTREND,
    TREND_STRENGTH_MULTIPLIER,
    TREND_STRENGTH_WEIGHTS,
    VOLUME_STRENGTH_MULTIPLIER,
    VOLUME_STRENGTH_RECENT,
    VOLUME_STRENGTH_WINDOW,
)
from signal_validation.models import (
    HorizonTrend,
    MarketCondition,
    MarketConditionType,
    MarketSnapshot,
    Trend,
    TrendAnalysis,
)

logger = logging.getLogger(__name__)


def classify_trend(current: float, fast: float, slow: float) -> Trend:
    """Classify a horizon as UP, DOWN or SIDEWAYS from three ordered values."""
    if current > fast > slow:
        return Trend.UP
    if current < fast < slow:
        return Trend.DOWN
    return Trend.SIDEWAYS


def trend_strength(current: float, fast: float, slow: float) -> float:
    """Blend EMA separation and price distance into a 0-100 strength."""
    fast_slow = abs(fast - slow) / slow * 100 if slow else 0.0
    current_fast = abs(current - fast) / fast * 100 if fast else 0.0
    strength = (
        fast_slow * TREND_STRENGTH_WEIGHTS['fast_slow']
        + current_fast * TREND_STRENGTH_WEIGHTS['current_fast']
    )
    return min(100.0, strength * TREND_STRENGTH_MULTIPLIER)


def price_momentum(prices: Sequence[float], window: int = MOMENTUM_WINDOW) -> float:
    """Compare the last `window` prices with the `window` before them.

    Returns:
        50 + percent change * 5, clamped to [0, 100]; 50 without enough data
    """
    values = np.asarray(prices, dtype=float)
    if values.size < window * 2:
        return 50.0

    recent = values[-window:].mean()
    previous = values[-window * 2:-window].mean()
    if previous == 0:
        return 50.0

    change = (recent - previous) / previous * 100
    return float(np.clip(50 + change * MOMENTUM_MULTIPLIER, 0, 100))


def volume_strength(volumes: Optional[Sequence[float]]) -> float:
    """Recent volume relative to the 20-bar average, scaled to 0-100."""
    if volumes is None or len(volumes) < VOLUME_STRENGTH_WINDOW:
        return DEFAULT_VOLUME_STRENGTH

    values = np.asarray(volumes, dtype=float)
    recent = values[-VOLUME_STRENGTH_RECENT:].mean()
    average = values[-VOLUME_STRENGTH_WINDOW:].mean()
    if average <= 0:
        return DEFAULT_VOLUME_STRENGTH

    return float(np.clip(recent / average * VOLUME_STRENGTH_MULTIPLIER, 0, 100))


def normalize_rsi(rsi: float) -> float:
    """Re-center RSI so that 50 maps to 50 and either extreme maps to 100."""
    return min(100.0, RSI_NEUTRAL + abs(rsi - RSI_NEUTRAL) * 2)


class TrendAnalyzer:
    """Combines EMA pairs at several horizons into a trend analysis.

    Simple interface:
        analyze(snapshot) -> TrendAnalysis
        get_market_condition(analysis) -> MarketCondition
    """

    def __init__(
        self,
        short_periods: Tuple[int, int] = EMA_HORIZONS['short'],
        medium_periods: Tuple[int, int] = EMA_HORIZONS['medium'],
        long_period: int = EMA_HORIZONS['long'],
        rsi_period: int = RSI_PERIOD
    ):
        self.short_periods = short_periods
        self.medium_periods = medium_periods
        self.long_period = long_period
        self.rsi_period = rsi_period

    def analyze(self, snapshot: MarketSnapshot) -> TrendAnalysis:
        """Analyze one snapshot at every horizon.

        Args:
            snapshot: Market snapshot to analyze

        Returns:
            TrendAnalysis with per-horizon readings and blended scores
        """
        prices = snapshot.closes
        current = snapshot.current_price

        fast_short, slow_short = (indicators.ema(prices, p) for p in self.short_periods)
        fast_medium, slow_medium = (indicators.ema(prices, p) for p in self.medium_periods)
        long_ema = indicators.ema(prices, self.long_period)

        short_term = HorizonTrend(
            fast=fast_short,
            slow=slow_short,
            trend=classify_trend(current, fast_short, slow_short),
            strength=trend_strength(current, fast_short, slow_short),
        )
        # The medium horizon is anchored on the slow short-term EMA.
        medium_term = HorizonTrend(
            fast=fast_medium,
            slow=slow_medium,
            trend=classify_trend(slow_short, fast_medium, slow_medium),
            strength=trend_strength(slow_short, fast_medium, slow_medium),
        )
        if current > long_ema:
            long_trend = Trend.UP
        elif current < long_ema:
            long_trend = Trend.DOWN
        else:
            long_trend = Trend.SIDEWAYS
        long_term = HorizonTrend(
            fast=long_ema,
            slow=long_ema,
            trend=long_trend,
            strength=trend_strength(current, long_ema, long_ema),
        )

        momentum = price_momentum(prices)
        rsi_value = indicators.rsi(prices, self.rsi_period)
        vol_strength = volume_strength(snapshot.volumes)

        overall = (
            short_term.strength * OVERALL_STRENGTH_WEIGHTS['short']
            + medium_term.strength * OVERALL_STRENGTH_WEIGHTS['medium']
            + momentum * OVERALL_STRENGTH_WEIGHTS['momentum']
            + normalize_rsi(rsi_value) * OVERALL_STRENGTH_WEIGHTS['rsi']
            + vol_strength * OVERALL_STRENGTH_WEIGHTS['volume']
        )

        analysis = TrendAnalysis(
            short_term=short_term,
            medium_term=medium_term,
            long_term=long_term,
            momentum=momentum,
            rsi=rsi_value,
            volume_strength=vol_strength,
            overall_strength=overall,
        )
        logger.debug(
            f"Trend {snapshot.symbol or 'snapshot'}: short={short_term.trend.value} "
            f"medium={medium_term.trend.value} long={long_trend.value} strength={overall:.1f}"
        )
        return analysis

    def is_strong_uptrend(self, analysis: TrendAnalysis) -> bool:
        """All horizons up with strong momentum and a healthy RSI."""
        return (
            analysis.short_term.trend == Trend.UP
            and analysis.medium_term.trend == Trend.UP
            and analysis.long_term.trend == Trend.UP
            and analysis.momentum > STRONG_UPTREND['min_momentum']
            and analysis.overall_strength > STRONG_UPTREND['min_strength']
            and STRONG_UPTREND['rsi_min'] < analysis.rsi < STRONG_UPTREND['rsi_max']
        )

    def is_moderate_uptrend(self, analysis: TrendAnalysis) -> bool:
        """Short horizon up, confirmed by the medium or long horizon."""
        return (
            analysis.short_term.trend == Trend.UP
            and (analysis.medium_term.trend == Trend.UP or analysis.long_term.trend == Trend.UP)
            and analysis.momentum > MODERATE_UPTREND['min_momentum']
            and analysis.overall_strength > MODERATE_UPTREND['min_strength']
        )

    def get_market_condition(self, analysis: TrendAnalysis) -> MarketCondition:
        """Map the uptrend predicates and a bearish check to a market condition."""
        if self.is_strong_uptrend(analysis):
            return MarketCondition(
                MarketConditionType.BULL_MARKET, MARKET_CONDITION_CONFIDENCE['strong_bull']
            )
        if self.is_moderate_uptrend(analysis):
            return MarketCondition(
                MarketConditionType.BULL_MARKET, MARKET_CONDITION_CONFIDENCE['moderate_bull']
            )
        if analysis.short_term.trend == Trend.DOWN and analysis.medium_term.trend == Trend.DOWN:
            return MarketCondition(
                MarketConditionType.BEAR_MARKET, MARKET_CONDITION_CONFIDENCE['bear']
            )
        return MarketCondition(MarketConditionType.SIDEWAYS, MARKET_CONDITION_CONFIDENCE['sideways'])
