"""Command-line interface functionality."""

import json
import logging
from typing import List, Optional

import typer
from rich.console import Console

from signal_validation import __version__
from signal_validation.config import DEFAULT_PRESET, LOOKBACK_DAYS, PRESETS
from signal_validation.data import load_snapshot
from signal_validation.decision import decide
from signal_validation.exceptions import SignalValidationError
from signal_validation.models import Action, Decision
from signal_validation.output import (
    format_summary,
    outcome_to_dict,
    render_outcome,
    render_presets,
    render_trend,
)
from signal_validation.trend import TrendAnalyzer
from signal_validation.utils import set_console_level, setup_logging
from signal_validation.validation import ValidationConfig, validate as run_validation

# Set up logging
setup_logging()
logger = logging.getLogger("signal_validation")
console = Console()

app = typer.Typer(
    name="signal-validation",
    help="Validate trade signals with weighted technical layers.",
    add_completion=False,
)


def version_callback(value: bool):
    """Print version and exit."""
    if value:
        console.print(f"[bold blue]Signal Validation v{__version__}[/bold blue]")
        raise typer.Exit()


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    version: bool = typer.Option(
        None,
        "--version",
        "-v",
        help="Show version and exit.",
        callback=version_callback,
        is_eager=True,
    ),
    verbose: bool = typer.Option(False, "--verbose", help="Show info logs in the terminal."),
):
    """Signal Validation - multi-factor technical validation of trade signals."""
    if verbose:
        set_console_level(logging.INFO)
    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())
        raise typer.Exit()


def _parse_candidate(action: Optional[str], confidence: Optional[float]) -> Optional[Decision]:
    if confidence is None:
        if action is not None:
            logger.warning(f"--action {action} ignored without --confidence")
            console.print(f"[yellow]--action {action} ignored: pass --confidence to validate a candidate.[/yellow]")
        return None
    try:
        parsed = Action((action or "BUY").upper())
    except ValueError:
        console.print(f"[red]Invalid action '{action}'. Use BUY, SELL or HOLD.[/red]")
        raise typer.Exit(1)
    return Decision(action=parsed, confidence=confidence, reason="Command-line candidate")


@app.command()
def validate(
    sources: List[str] = typer.Argument(..., help="Tickers or paths to OHLCV CSV files"),
    preset: str = typer.Option(DEFAULT_PRESET, help=f"Preset to use ({', '.join(PRESETS)})"),
    action: Optional[str] = typer.Option(None, help="Candidate action (BUY, SELL or HOLD)"),
    confidence: Optional[float] = typer.Option(None, help="Candidate confidence (0-100)"),
    lookback_days: int = typer.Option(LOOKBACK_DAYS, help="Days of history to download"),
    json_output: bool = typer.Option(False, "--json", help="Print results as JSON"),
):
    """Validate one or more symbols against a preset."""
    try:
        config = ValidationConfig.from_preset(preset)
    except KeyError as e:
        console.print(f"[red]{e.args[0]}[/red]")
        raise typer.Exit(1)

    candidate = _parse_candidate(action, confidence)
    results = {}
    for source in sources:
        try:
            snapshot = load_snapshot(source, lookback_days)
        except SignalValidationError as e:
            logger.error(f"Error loading {source}: {e}")
            console.print(f"[red]Error loading {source}: {e}[/red]")
            raise typer.Exit(1)

        outcome = run_validation(snapshot, config, candidate)
        decision = decide(outcome, candidate)
        logger.info(f"{snapshot.symbol}\n{format_summary(outcome)}")

        if json_output:
            results[snapshot.symbol] = outcome_to_dict(outcome, decision)
        else:
            render_outcome(console, snapshot.symbol, outcome, decision)

    if json_output:
        typer.echo(json.dumps(results, indent=2))


@app.command()
def trend(
    source: str = typer.Argument(..., help="Ticker or path to an OHLCV CSV file"),
    lookback_days: int = typer.Option(LOOKBACK_DAYS, help="Days of history to download"),
):
    """Show the multi-horizon EMA trend analysis for a symbol."""
    try:
        snapshot = load_snapshot(source, lookback_days)
    except SignalValidationError as e:
        console.print(f"[red]Error loading {source}: {e}[/red]")
        raise typer.Exit(1)

    analyzer = TrendAnalyzer()
    analysis = analyzer.analyze(snapshot)
    render_trend(console, snapshot.symbol, analysis, analyzer.get_market_condition(analysis))


@app.command()
def presets():
    """List the available validation presets."""
    render_presets(console)


if __name__ == "__main__":
    app()
