"""Turn validation outcomes into trade decisions."""

import logging
from typing import Optional

from signal_validation.models import Action, Decision, ValidationOutcome

logger = logging.getLogger(__name__)


def decide(outcome: ValidationOutcome, candidate: Optional[Decision] = None) -> Decision:
    """Produce the engine's decision from a validation outcome.

    Args:
        outcome: Aggregated validation outcome
        candidate: Optional upstream decision whose action is approved or vetoed

    Returns:
        The candidate's action (BUY when there is none, or it holds) when the
        outcome is valid, HOLD otherwise. Confidence is the outcome's confidence.
    """
    if outcome.is_valid:
        action = Action.BUY
        if candidate is not None and candidate.action != Action.HOLD:
            action = candidate.action
        reason = (
            f"Approved by {len(outcome.active_layers)} layers "
            f"({outcome.score_percentage:.1f}%, risk {outcome.risk_level.value})"
        )
    else:
        action = Action.HOLD
        if outcome.max_score == 0:
            reason = "Rejected: " + "; ".join(outcome.warnings)
        else:
            reason = (
                f"Rejected: score {outcome.score_percentage:.1f}% "
                f"({outcome.total_score:.1f}/{outcome.max_score:g})"
            )

    decision = Decision(
        action=action,
        confidence=outcome.confidence,
        reason=reason,
        risk_level=outcome.risk_level,
        validation_score=outcome.total_score,
        active_layers=tuple(outcome.active_layers),
    )
    logger.debug(f"Decision: {decision.action.value} ({decision.confidence:.1f}%) - {reason}")
    return decision


def merge_outcome(candidate: Decision, outcome: ValidationOutcome) -> Decision:
    """Return the candidate with confidence and risk taken from the outcome."""
    return candidate.with_validation(
        confidence=outcome.confidence,
        validation_score=outcome.total_score,
        risk_level=outcome.risk_level,
        active_layers=outcome.active_layers,
    )
