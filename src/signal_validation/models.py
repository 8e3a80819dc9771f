"""Core data models for signal validation.

Every value here is created fresh for one evaluation and discarded once the
caller has read the outcome. Nothing is persisted.
"""

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Dict, List, Optional, Sequence, Tuple

from signal_validation.exceptions import SnapshotError


class Action(Enum):
    BUY = "BUY"
    SELL = "SELL"
    HOLD = "HOLD"


class Trend(Enum):
    UP = "UP"
    DOWN = "DOWN"
    SIDEWAYS = "SIDEWAYS"


class RiskLevel(Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"


class LevelKind(Enum):
    SUPPORT = "support"
    RESISTANCE = "resistance"


class MarketConditionType(Enum):
    BULL_MARKET = "BULL_MARKET"
    BEAR_MARKET = "BEAR_MARKET"
    SIDEWAYS = "SIDEWAYS"


class Recommendation(Enum):
    STRONG_BUY = "STRONG_BUY"
    BUY = "BUY"
    HOLD = "HOLD"
    SELL = "SELL"
    STRONG_SELL = "STRONG_SELL"


def _as_floats(values: Optional[Sequence[float]]) -> Optional[Tuple[float, ...]]:
    if values is None:
        return None
    return tuple(float(v) for v in values)


@dataclass(frozen=True)
class MarketSnapshot:
    """Price/volume history for one asset at one point in time.

    Args:
        closes: Close prices ordered oldest to newest
        volumes: Optional volumes, one per close
        highs: Optional bar highs, one per close
        lows: Optional bar lows, one per close
        current_price: Latest traded price (defaults to the last close)
        price_change_percent: Optional 24h percent change
        symbol: Optional ticker symbol, used only for messages

    Raises:
        SnapshotError: If closes are empty or an optional series has a different length
    """
    closes: Tuple[float, ...]
    volumes: Optional[Tuple[float, ...]] = None
    highs: Optional[Tuple[float, ...]] = None
    lows: Optional[Tuple[float, ...]] = None
    current_price: Optional[float] = None
    price_change_percent: Optional[float] = None
    symbol: str = ""

    def __post_init__(self):
        closes = _as_floats(self.closes)
        if not closes:
            raise SnapshotError("Market snapshot requires at least one close price")
        object.__setattr__(self, 'closes', closes)

        for name in ('volumes', 'highs', 'lows'):
            series = _as_floats(getattr(self, name))
            if series is not None and len(series) != len(closes):
                raise SnapshotError(
                    f"Length of {name} ({len(series)}) does not match closes ({len(closes)})"
                )
            object.__setattr__(self, name, series)

        if self.current_price is None:
            object.__setattr__(self, 'current_price', closes[-1])
        else:
            object.__setattr__(self, 'current_price', float(self.current_price))
        if self.price_change_percent is not None:
            object.__setattr__(self, 'price_change_percent', float(self.price_change_percent))

    @property
    def price_highs(self) -> Tuple[float, ...]:
        """Highs when present, otherwise the closes."""
        return self.highs if self.highs is not None else self.closes

    @property
    def price_lows(self) -> Tuple[float, ...]:
        """Lows when present, otherwise the closes."""
        return self.lows if self.lows is not None else self.closes


@dataclass(frozen=True)
class TechnicalLevel:
    """A detected support or resistance price."""
    price: float
    kind: LevelKind
    touches: int = 1
    strength: float = 0.0


@dataclass(frozen=True)
class HorizonTrend:
    """Trend reading of one EMA horizon."""
    fast: float
    slow: float
    trend: Trend
    strength: float


@dataclass(frozen=True)
class TrendReading:
    trend: Trend
    strength: float
    momentum: float
    rsi: float


@dataclass(frozen=True)
class TrendAnalysis:
    """Multi-horizon EMA analysis of one snapshot."""
    short_term: HorizonTrend
    medium_term: HorizonTrend
    long_term: HorizonTrend
    momentum: float
    rsi: float
    volume_strength: float
    overall_strength: float

    @property
    def reading(self) -> TrendReading:
        """Collapse the three horizons into a single reading."""
        short = self.short_term.trend
        if short == Trend.UP and Trend.UP in (self.medium_term.trend, self.long_term.trend):
            trend = Trend.UP
        elif short == Trend.DOWN and Trend.DOWN in (self.medium_term.trend, self.long_term.trend):
            trend = Trend.DOWN
        else:
            trend = Trend.SIDEWAYS
        return TrendReading(
            trend=trend,
            strength=self.overall_strength,
            momentum=self.momentum,
            rsi=self.rsi,
        )


@dataclass(frozen=True)
class MarketCondition:
    type: MarketConditionType
    confidence: float


@dataclass(frozen=True)
class LayerResult:
    """Atomic output of one validation layer."""
    is_valid: bool
    score: float
    reason: str


@dataclass(frozen=True)
class Decision:
    """A trade decision, either an upstream candidate or the engine's verdict."""
    action: Action
    confidence: float
    reason: str = ""
    risk_level: Optional[RiskLevel] = None
    validation_score: Optional[float] = None
    active_layers: Tuple[str, ...] = ()

    def with_validation(
        self,
        confidence: float,
        validation_score: float,
        risk_level: RiskLevel,
        active_layers: Sequence[str]
    ) -> 'Decision':
        """Return a copy carrying validation results."""
        return replace(
            self,
            confidence=confidence,
            validation_score=validation_score,
            risk_level=risk_level,
            active_layers=tuple(active_layers),
        )


@dataclass
class ValidationOutcome:
    """Aggregate of all layer results for one evaluation."""
    total_score: float
    max_score: float
    score_percentage: float
    is_valid: bool
    confidence: float
    risk_level: RiskLevel
    active_layers: List[str] = field(default_factory=list)
    reasons: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    layer_scores: Dict[str, float] = field(default_factory=dict)


@dataclass(frozen=True)
class AIAnalysis:
    """Output of an external AI analysis collaborator.

    Args:
        confidence: 0-100
        action: Suggested action
        sentiment: -100 to 100
        technical_signals: 0-100
    """
    confidence: float
    action: Action
    sentiment: float = 0.0
    technical_signals: float = 0.0


@dataclass(frozen=True)
class SmartScore:
    ema_score: float
    ai_score: float
    volume_score: float
    momentum_score: float
    final_score: float
    confidence: float
    recommendation: Recommendation
