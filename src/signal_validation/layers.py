"""Validation layers and the registry that names them.

Every layer is a pure function ``layer(snapshot, candidate=None, **params)``
returning a LayerResult with a 0-100 score. Weights are applied later by the
aggregator; a layer only knows its own scale.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

import numpy as np

from signal_validation import indicators
from signal_validation.config import (
    EMA_MIN_SEPARATION,
    LAYER_PASS_SCORE,
    RSI_OVERBOUGHT,
    RSI_OVERSOLD,
    SR_LOOKBACK,
    VOLATILITY_MIN_BARS,
    VOLUME_AVERAGE_BARS,
    VOLUME_RECENT_BARS,
)
from signal_validation.models import Decision, LayerResult, MarketSnapshot

logger = logging.getLogger(__name__)

LayerFunction = Callable[..., LayerResult]


def _result(score: float, reason: str) -> LayerResult:
    return LayerResult(is_valid=score >= LAYER_PASS_SCORE, score=score, reason=reason)


def ema_layer(
    snapshot: MarketSnapshot,
    candidate: Optional[Decision] = None,
    fast_period: int = 12,
    slow_period: int = 26,
    min_separation: float = EMA_MIN_SEPARATION
) -> LayerResult:
    """Score EMA alignment, price position and EMA separation."""
    prices = snapshot.closes
    if len(prices) < slow_period:
        return _result(0, "Insufficient data for EMA")

    fast = indicators.ema(prices, fast_period)
    slow = indicators.ema(prices, slow_period)
    current = snapshot.current_price

    score = 0
    details = []
    if fast > slow:
        score += 40
        details.append("fast EMA above slow EMA")
    if current > fast and current > slow:
        score += 40
        details.append("price above both EMAs")
    if slow and abs(fast - slow) / slow > min_separation:
        score += 20
        details.append("adequate EMA separation")

    return _result(score, ", ".join(details) or "Unfavourable EMA conditions")


def rsi_layer(
    snapshot: MarketSnapshot,
    candidate: Optional[Decision] = None,
    period: int = 14,
    oversold: float = RSI_OVERSOLD,
    overbought: float = RSI_OVERBOUGHT
) -> LayerResult:
    """Favour neutral RSI, accept oversold, penalize overbought."""
    if len(snapshot.closes) < period + 1:
        return _result(0, "Insufficient data for RSI")

    value = indicators.rsi(snapshot.closes, period)
    if oversold <= value <= overbought:
        return _result(100, f"RSI in neutral zone ({value:.1f})")
    if value < oversold:
        return _result(80, f"RSI oversold ({value:.1f}) - opportunity")
    return _result(20, f"RSI overbought ({value:.1f}) - high risk")


def volume_layer(
    snapshot: MarketSnapshot,
    candidate: Optional[Decision] = None,
    multiplier: float = 1.2
) -> LayerResult:
    """Compare the last 3 volumes with the 20-bar average."""
    volumes = snapshot.volumes
    if volumes is None or len(volumes) < VOLUME_AVERAGE_BARS:
        return _result(0, "Insufficient volume data")

    values = np.asarray(volumes, dtype=float)
    recent = values[-VOLUME_RECENT_BARS:].mean()
    average = values[-VOLUME_AVERAGE_BARS:].mean()
    if average <= 0:
        return _result(0, "Average volume is zero")

    ratio = recent / average
    if ratio >= multiplier * 1.5:
        return _result(100, f"Very high volume ({ratio:.1f}x)")
    if ratio >= multiplier:
        return _result(80, f"Adequate volume ({ratio:.1f}x)")
    return _result(40, f"Low volume ({ratio:.1f}x)")


def support_resistance_layer(
    snapshot: MarketSnapshot,
    candidate: Optional[Decision] = None,
    tolerance: float = 0.01,
    lookback: int = SR_LOOKBACK
) -> LayerResult:
    """Score how close the price sits to the nearest support/resistance level."""
    current = snapshot.current_price
    levels = indicators.find_support_resistance(
        snapshot.price_highs, snapshot.price_lows, current, lookback
    )
    if not levels or current <= 0:
        return _result(0, "No support/resistance level detected")

    nearest = levels[0]
    distance = abs(current - nearest.price) / current
    if distance <= tolerance / 2:
        score = 100
    elif distance <= tolerance:
        score = 80
    elif distance <= tolerance * 2:
        score = 60
    else:
        score = 30

    reason = (
        f"{nearest.kind.value.capitalize()} at {distance * 100:.2f}% "
        f"({nearest.touches} touches)"
    )
    return _result(score, reason)


def momentum_layer(
    snapshot: MarketSnapshot,
    candidate: Optional[Decision] = None,
    min_momentum: float = 0.01
) -> LayerResult:
    """Score the absolute 24h price change against a minimum momentum."""
    if snapshot.price_change_percent is None:
        return LayerResult(is_valid=False, score=50, reason="Momentum data unavailable")

    change = abs(snapshot.price_change_percent) / 100
    if change >= min_momentum * 2:
        return _result(100, f"Strong momentum ({change * 100:.2f}%)")
    if change >= min_momentum:
        return _result(80, f"Adequate momentum ({change * 100:.2f}%)")
    return _result(40, f"Weak momentum ({change * 100:.2f}%)")


def volatility_layer(
    snapshot: MarketSnapshot,
    candidate: Optional[Decision] = None,
    min_vol: float = 0.5,
    max_vol: float = 5.0
) -> LayerResult:
    """Favour return volatility inside the [min_vol, max_vol] band."""
    if len(snapshot.closes) < VOLATILITY_MIN_BARS:
        return LayerResult(is_valid=False, score=50, reason="Insufficient data for volatility")

    volatility = indicators.returns_volatility(snapshot.closes)
    if min_vol <= volatility <= max_vol:
        return _result(100, f"Ideal volatility ({volatility:.1f}%)")
    if volatility < min_vol:
        return _result(60, f"Low volatility ({volatility:.1f}%)")
    return _result(40, f"High volatility ({volatility:.1f}%)")


def confidence_layer(
    snapshot: MarketSnapshot,
    candidate: Optional[Decision] = None,
    min_confidence: float = 70
) -> LayerResult:
    """Gate an upstream candidate decision on its confidence."""
    if candidate is None or not candidate.confidence:
        return _result(0, "Confidence not available")

    confidence = candidate.confidence
    if confidence >= min_confidence + 20:
        return _result(100, f"Very high confidence ({confidence:g}%)")
    if confidence >= min_confidence + 10:
        return _result(80, f"High confidence ({confidence:g}%)")
    if confidence >= min_confidence:
        return _result(60, f"Adequate confidence ({confidence:g}%)")
    return _result(20, f"Low confidence ({confidence:g}%)")


@dataclass(frozen=True)
class LayerSpec:
    """A registered layer: display name, function and default parameters."""
    name: str
    function: LayerFunction
    defaults: Dict[str, Any] = field(default_factory=dict)


class LayerRegistry:
    """Registry for validation layers."""

    def __init__(self):
        """Initialize the registry with the built-in layers."""
        self._layers: Dict[str, LayerSpec] = {}

        self.register('ema', 'EMA', ema_layer, {'fast_period': 12, 'slow_period': 26})
        self.register('rsi', 'RSI', rsi_layer, {'period': 14})
        self.register('volume', 'Volume', volume_layer, {'multiplier': 1.2})
        self.register(
            'support_resistance', 'Support/Resistance', support_resistance_layer,
            {'tolerance': 0.01}
        )
        self.register('momentum', 'Momentum', momentum_layer, {'min_momentum': 0.01})
        self.register('volatility', 'Volatility', volatility_layer, {'min_vol': 0.5, 'max_vol': 5.0})
        self.register('confidence', 'Confidence', confidence_layer, {'min_confidence': 70})

    def register(
        self,
        key: str,
        name: str,
        function: LayerFunction,
        defaults: Optional[Dict[str, Any]] = None
    ) -> None:
        """Register a layer function.

        Args:
            key: Key used in configurations and presets
            name: Human-readable name used in reasons and warnings
            function: Layer function
            defaults: Default keyword parameters
        """
        if key in self._layers:
            logger.warning(f"Overwriting existing layer registration for '{key}'")
        self._layers[key] = LayerSpec(name=name, function=function, defaults=dict(defaults or {}))

    def get(self, key: str) -> LayerSpec:
        """Get a registered layer.

        Raises:
            KeyError: If the layer is not registered
        """
        if key not in self._layers:
            raise KeyError(f"Layer '{key}' is not registered")
        return self._layers[key]

    def list_layers(self) -> List[str]:
        """List registered layer keys in registration order."""
        return list(self._layers)

    def run(
        self,
        key: str,
        snapshot: MarketSnapshot,
        candidate: Optional[Decision] = None,
        **params
    ) -> LayerResult:
        """Run one layer with its defaults overridden by `params`."""
        spec = self.get(key)
        merged = {**spec.defaults, **params}
        return spec.function(snapshot, candidate=candidate, **merged)


# Create global registry instance
registry = LayerRegistry()
