"""Tests for value types."""

import dataclasses

import pytest

from signal_validation.exceptions import SignalValidationError, SnapshotError
from signal_validation.models import (
    Action,
    Decision,
    HorizonTrend,
    MarketSnapshot,
    RiskLevel,
    Trend,
    TrendAnalysis,
)


def test_snapshot_defaults():
    """Current price defaults to the last close and series become float tuples."""
    snapshot = MarketSnapshot(closes=[1, 2, 3], volumes=[10, 20, 30])

    assert snapshot.closes == (1.0, 2.0, 3.0)
    assert snapshot.volumes == (10.0, 20.0, 30.0)
    assert snapshot.current_price == 3.0
    assert snapshot.price_change_percent is None
    assert snapshot.symbol == ""


def test_snapshot_explicit_price():
    snapshot = MarketSnapshot(closes=[1.0, 2.0], current_price=2.5, price_change_percent=1)

    assert snapshot.current_price == 2.5
    assert snapshot.price_change_percent == 1.0


def test_snapshot_requires_closes():
    with pytest.raises(SnapshotError):
        MarketSnapshot(closes=[])


def test_snapshot_length_mismatch():
    """Optional series must match the closes in length."""
    with pytest.raises(SnapshotError, match="volumes"):
        MarketSnapshot(closes=[1.0, 2.0], volumes=[1.0])
    with pytest.raises(SnapshotError, match="highs"):
        MarketSnapshot(closes=[1.0, 2.0], highs=[1.0, 2.0, 3.0])


def test_snapshot_error_hierarchy():
    """Snapshot errors are both library errors and ValueErrors."""
    assert issubclass(SnapshotError, SignalValidationError)
    assert issubclass(SnapshotError, ValueError)


def test_snapshot_price_extremes_fallback():
    """Highs and lows fall back to the closes."""
    plain = MarketSnapshot(closes=[1.0, 2.0])
    full = MarketSnapshot(closes=[1.0, 2.0], highs=[1.5, 2.5], lows=[0.5, 1.5])

    assert plain.price_highs == plain.closes
    assert plain.price_lows == plain.closes
    assert full.price_highs == (1.5, 2.5)
    assert full.price_lows == (0.5, 1.5)


def test_snapshot_is_immutable():
    snapshot = MarketSnapshot(closes=[1.0])
    with pytest.raises(dataclasses.FrozenInstanceError):
        snapshot.current_price = 5.0


def test_decision_with_validation():
    """Validation results are copied onto a new decision."""
    candidate = Decision(action=Action.BUY, confidence=70, reason="signal")
    validated = candidate.with_validation(
        confidence=88, validation_score=44.0, risk_level=RiskLevel.LOW, active_layers=['EMA']
    )

    assert validated.action == Action.BUY
    assert validated.reason == "signal"
    assert validated.confidence == 88
    assert validated.active_layers == ('EMA',)
    assert candidate.confidence == 70


@pytest.mark.parametrize("short, medium, long, expected", [
    (Trend.UP, Trend.UP, Trend.DOWN, Trend.UP),
    (Trend.UP, Trend.SIDEWAYS, Trend.UP, Trend.UP),
    (Trend.UP, Trend.DOWN, Trend.SIDEWAYS, Trend.SIDEWAYS),
    (Trend.DOWN, Trend.DOWN, Trend.UP, Trend.DOWN),
    (Trend.DOWN, Trend.UP, Trend.UP, Trend.SIDEWAYS),
    (Trend.SIDEWAYS, Trend.UP, Trend.UP, Trend.SIDEWAYS),
])
def test_trend_reading(short, medium, long, expected):
    """The short horizon needs confirmation from medium or long."""
    def horizon(trend):
        return HorizonTrend(fast=1.0, slow=1.0, trend=trend, strength=10.0)

    analysis = TrendAnalysis(
        short_term=horizon(short),
        medium_term=horizon(medium),
        long_term=horizon(long),
        momentum=55.0,
        rsi=45.0,
        volume_strength=60.0,
        overall_strength=33.0,
    )
    reading = analysis.reading

    assert reading.trend == expected
    assert reading.strength == 33.0
    assert reading.momentum == 55.0
    assert reading.rsi == 45.0
