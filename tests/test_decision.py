"""Tests for turning validation outcomes into decisions."""

import pytest

from signal_validation.decision import decide, merge_outcome
from signal_validation.models import Action, Decision, RiskLevel, ValidationOutcome
from signal_validation.validation import NO_LAYERS_WARNING


@pytest.fixture
def approved():
    return ValidationOutcome(
        total_score=35.0,
        max_score=40.0,
        score_percentage=87.5,
        is_valid=True,
        confidence=87.5,
        risk_level=RiskLevel.LOW,
        active_layers=['EMA', 'RSI'],
        reasons=['EMA: ok (20.0/25)', 'RSI: ok (15.0/15)'],
    )


@pytest.fixture
def rejected():
    return ValidationOutcome(
        total_score=20.0,
        max_score=40.0,
        score_percentage=50.0,
        is_valid=False,
        confidence=50.0,
        risk_level=RiskLevel.HIGH,
        warnings=['EMA: Unfavourable EMA conditions (0.0/25)'],
    )


def test_decide_approved_without_candidate(approved):
    """An approved outcome without a candidate is a BUY."""
    decision = decide(approved)

    assert decision.action == Action.BUY
    assert decision.confidence == 87.5
    assert decision.risk_level == RiskLevel.LOW
    assert decision.validation_score == 35.0
    assert decision.active_layers == ('EMA', 'RSI')
    assert decision.reason == "Approved by 2 layers (87.5%, risk LOW)"


def test_decide_approved_keeps_candidate_action(approved):
    """Approval keeps the candidate's action, a holding candidate becomes BUY."""
    sell = decide(approved, Decision(action=Action.SELL, confidence=70))
    hold = decide(approved, Decision(action=Action.HOLD, confidence=70))

    assert sell.action == Action.SELL
    assert sell.confidence == 87.5
    assert hold.action == Action.BUY


def test_decide_rejected(rejected):
    """A rejected outcome always holds."""
    decision = decide(rejected, Decision(action=Action.BUY, confidence=90))

    assert decision.action == Action.HOLD
    assert decision.confidence == 50.0
    assert decision.risk_level == RiskLevel.HIGH
    assert decision.reason == "Rejected: score 50.0% (20.0/40)"
    assert decision.active_layers == ()


def test_decide_without_layers():
    """With nothing evaluated the reason lists the warnings."""
    outcome = ValidationOutcome(
        total_score=0.0,
        max_score=0.0,
        score_percentage=0.0,
        is_valid=False,
        confidence=50.0,
        risk_level=RiskLevel.HIGH,
        warnings=[NO_LAYERS_WARNING],
    )
    decision = decide(outcome)

    assert decision.action == Action.HOLD
    assert decision.reason == f"Rejected: {NO_LAYERS_WARNING}"


def test_merge_outcome(approved):
    """Merging keeps action and reason but takes validation results."""
    candidate = Decision(action=Action.SELL, confidence=72, reason="AI says sell")
    merged = merge_outcome(candidate, approved)

    assert merged.action == Action.SELL
    assert merged.reason == "AI says sell"
    assert merged.confidence == 87.5
    assert merged.validation_score == 35.0
    assert merged.risk_level == RiskLevel.LOW
    assert merged.active_layers == ('EMA', 'RSI')
    assert candidate.confidence == 72
    assert candidate.risk_level is None
