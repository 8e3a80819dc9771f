"""Outcome formatting for logs, JSON and the terminal."""

import json
import logging
from typing import Any, Dict, Optional

from rich.console import Console
from rich.table import Table

from signal_validation.config import PRESETS
from signal_validation.models import Decision, MarketCondition, TrendAnalysis, ValidationOutcome

logger = logging.getLogger(__name__)


def format_summary(outcome: ValidationOutcome) -> str:
    """Plain-text summary of an outcome, suitable for logging."""
    status = "APPROVED" if outcome.is_valid else "REJECTED"
    lines = [
        f"{status}: score {outcome.total_score:.1f}/{outcome.max_score:g} "
        f"({outcome.score_percentage:.1f}%), confidence {outcome.confidence:.0f}%, "
        f"risk {outcome.risk_level.value}"
    ]
    lines.extend(f"  + {reason}" for reason in outcome.reasons)
    lines.extend(f"  - {warning}" for warning in outcome.warnings)
    return "\n".join(lines)


def outcome_to_dict(outcome: ValidationOutcome, decision: Optional[Decision] = None) -> Dict[str, Any]:
    """Convert an outcome (and optional decision) to a JSON-serializable dict."""
    data = {
        'is_valid': outcome.is_valid,
        'total_score': round(outcome.total_score, 2),
        'max_score': outcome.max_score,
        'score_percentage': round(outcome.score_percentage, 2),
        'confidence': round(outcome.confidence, 2),
        'risk_level': outcome.risk_level.value,
        'active_layers': list(outcome.active_layers),
        'layer_scores': {k: round(v, 2) for k, v in outcome.layer_scores.items()},
        'reasons': list(outcome.reasons),
        'warnings': list(outcome.warnings),
    }
    if decision is not None:
        data['decision'] = {
            'action': decision.action.value,
            'confidence': round(decision.confidence, 2),
            'reason': decision.reason,
        }
    return data


def outcome_to_json(outcome: ValidationOutcome, decision: Optional[Decision] = None) -> str:
    return json.dumps(outcome_to_dict(outcome, decision), indent=2)


def render_outcome(
    console: Console,
    symbol: str,
    outcome: ValidationOutcome,
    decision: Optional[Decision] = None
) -> None:
    """Print a layer-by-layer table and the final verdict."""
    table = Table(title=f"Signal validation: {symbol}")
    table.add_column("Layer", style="cyan")
    table.add_column("Status")
    table.add_column("Detail")

    for reason in outcome.reasons:
        name, _, detail = reason.partition(": ")
        table.add_row(name, "[green]pass[/green]", detail)
    for warning in outcome.warnings:
        name, _, detail = warning.partition(": ")
        table.add_row(name, "[red]fail[/red]", detail)
    console.print(table)

    color = "green" if outcome.is_valid else "red"
    console.print(
        f"[bold {color}]{'Approved' if outcome.is_valid else 'Rejected'}[/bold {color}] "
        f"{outcome.score_percentage:.1f}% | confidence {outcome.confidence:.0f}% | "
        f"risk {outcome.risk_level.value}"
    )
    if decision is not None:
        console.print(f"[bold]Decision:[/bold] {decision.action.value} - {decision.reason}")


def render_trend(
    console: Console,
    symbol: str,
    analysis: TrendAnalysis,
    condition: MarketCondition
) -> None:
    """Print the per-horizon trend table and market condition."""
    table = Table(title=f"Trend analysis: {symbol}")
    table.add_column("Horizon", style="cyan")
    table.add_column("Fast EMA", justify="right")
    table.add_column("Slow EMA", justify="right")
    table.add_column("Trend")
    table.add_column("Strength", justify="right")
    for label, horizon in (
        ("short", analysis.short_term),
        ("medium", analysis.medium_term),
        ("long", analysis.long_term),
    ):
        table.add_row(
            label, f"{horizon.fast:.2f}", f"{horizon.slow:.2f}",
            horizon.trend.value, f"{horizon.strength:.1f}"
        )
    console.print(table)
    console.print(
        f"Momentum {analysis.momentum:.1f} | RSI {analysis.rsi:.1f} | "
        f"Volume strength {analysis.volume_strength:.1f} | Overall {analysis.overall_strength:.1f}"
    )
    console.print(f"[bold]Market condition:[/bold] {condition.type.value} ({condition.confidence:g}%)")


def render_presets(console: Console) -> None:
    """Print every preset with its layers and weights."""
    table = Table(title="Validation presets")
    table.add_column("Preset", style="cyan")
    table.add_column("Layers")
    table.add_column("Total weight", justify="right")
    for name, layers in PRESETS.items():
        description = ", ".join(
            f"{layer}({weight})" for layer, weight, _ in layers
        )
        table.add_row(name, description, str(sum(weight for _, weight, _ in layers)))
    console.print(table)
