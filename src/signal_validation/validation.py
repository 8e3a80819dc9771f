"""
Weighted multi-layer signal validation.

This module assembles validation layers with explicit weights and aggregates
their scores into a single ValidationOutcome:
- LayerConfig / ValidationConfig describe which layers run and how much each counts
- Named presets turn into a ValidationConfig from static data in config.PRESETS
- validate() runs a configuration against one MarketSnapshot

A failing layer never aborts an evaluation. It is recorded as a warning and
contributes nothing. A misconfigured set of layers is rejected outright.
"""

import logging
from dataclasses import dataclass, field, replace
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from signal_validation import config as settings
from signal_validation.layers import LayerRegistry, registry as default_registry
from signal_validation.models import Decision, MarketSnapshot, RiskLevel, ValidationOutcome

logger = logging.getLogger(__name__)

NO_LAYERS_WARNING = "no validation layers configured"


@dataclass(frozen=True)
class LayerConfig:
    """One configured layer: registry key, weight and parameters."""
    layer: str
    weight: float
    params: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class ValidationConfig:
    """Immutable set of weighted layers plus the aggregation thresholds."""
    layers: Tuple[LayerConfig, ...] = ()
    approval_threshold: float = settings.MIN_APPROVAL_SCORE
    low_risk_threshold: float = settings.LOW_RISK_THRESHOLD
    medium_risk_threshold: float = settings.MEDIUM_RISK_THRESHOLD
    min_confidence: float = settings.MIN_CONFIDENCE
    max_confidence: float = settings.MAX_CONFIDENCE

    def with_layer(self, layer: str, weight: float, **params) -> 'ValidationConfig':
        """Return a new configuration with one more layer appended."""
        return replace(self, layers=self.layers + (LayerConfig(layer, weight, params),))

    @classmethod
    def from_preset(cls, name: str, **overrides) -> 'ValidationConfig':
        """Build a configuration from a named preset.

        Args:
            name: Preset name (see config.PRESETS)
            **overrides: Threshold fields to override

        Raises:
            KeyError: If the preset does not exist
        """
        if name not in settings.PRESETS:
            raise KeyError(
                f"Unknown preset '{name}'. Available presets: {', '.join(settings.PRESETS)}"
            )
        layers = tuple(
            LayerConfig(layer, weight, dict(params))
            for layer, weight, params in settings.PRESETS[name]
        )
        return cls(layers=layers, **overrides)


def _rejected_outcome(config: ValidationConfig, warnings: List[str]) -> ValidationOutcome:
    return ValidationOutcome(
        total_score=0.0,
        max_score=0.0,
        score_percentage=0.0,
        is_valid=False,
        confidence=config.min_confidence,
        risk_level=RiskLevel.HIGH,
        warnings=warnings,
    )


def _score_keys(layers: Sequence[LayerConfig]) -> List[str]:
    """Key each configured layer; repeated layers get '#2', '#3', ... suffixes."""
    seen: Dict[str, int] = {}
    keys = []
    for layer_config in layers:
        count = seen.get(layer_config.layer, 0) + 1
        seen[layer_config.layer] = count
        keys.append(layer_config.layer if count == 1 else f"{layer_config.layer}#{count}")
    return keys


def risk_level_for(score_percentage: float, config: ValidationConfig) -> RiskLevel:
    """Map a score percentage to a risk tier."""
    if score_percentage >= config.low_risk_threshold:
        return RiskLevel.LOW
    if score_percentage >= config.medium_risk_threshold:
        return RiskLevel.MEDIUM
    return RiskLevel.HIGH


def validate(
    snapshot: MarketSnapshot,
    config: ValidationConfig,
    candidate: Optional[Decision] = None,
    layer_registry: Optional[LayerRegistry] = None
) -> ValidationOutcome:
    """Run every configured layer against a snapshot and aggregate the scores.

    Each layer contributes (score / 100) * weight. The outcome is valid when the
    total reaches the approval threshold as a percentage of the summed weights.
    A configuration with no layers, or with any weight <= 0, is rejected without
    running a layer; `layer_scores` is keyed by layer, with repeats suffixed "#2", "#3".

    Args:
        snapshot: Market snapshot to evaluate
        config: Layers, weights and thresholds
        candidate: Optional upstream decision, used by the confidence gate
        layer_registry: Registry to resolve layer keys (defaults to the global one)

    Returns:
        ValidationOutcome for this evaluation
    """
    layer_registry = layer_registry or default_registry
    label = snapshot.symbol or 'snapshot'

    if not config.layers:
        logger.warning(f"Validation of {label} rejected: {NO_LAYERS_WARNING}")
        return _rejected_outcome(config, [NO_LAYERS_WARNING])

    invalid_weights = [
        f"{layer_config.layer}: invalid weight, must be positive (got {layer_config.weight:g})"
        for layer_config in config.layers
        if layer_config.weight <= 0
    ]
    if invalid_weights:
        logger.warning(f"Validation of {label} rejected: {'; '.join(invalid_weights)}")
        return _rejected_outcome(config, invalid_weights)

    total_score = 0.0
    max_score = 0.0
    reasons: List[str] = []
    warnings: List[str] = []
    active_layers: List[str] = []
    layer_scores: Dict[str, float] = {}

    for score_key, layer_config in zip(_score_keys(config.layers), config.layers):
        weight = layer_config.weight
        max_score += weight
        try:
            spec = layer_registry.get(layer_config.layer)
            name = spec.name
            result = layer_registry.run(
                layer_config.layer, snapshot, candidate=candidate, **layer_config.params
            )
        except Exception as e:
            logger.exception(f"Validation layer '{layer_config.layer}' failed")
            warnings.append(f"{layer_config.layer}: validation error - {e}")
            layer_scores[score_key] = 0.0
            continue

        contribution = (result.score / 100) * weight
        total_score += contribution
        layer_scores[score_key] = contribution

        message = f"{name}: {result.reason} ({contribution:.1f}/{weight:g})"
        if result.is_valid:
            reasons.append(message)
            active_layers.append(name)
        else:
            warnings.append(message)

    score_percentage = total_score / max_score * 100
    confidence = min(config.max_confidence, max(config.min_confidence, score_percentage))

    outcome = ValidationOutcome(
        total_score=total_score,
        max_score=max_score,
        score_percentage=score_percentage,
        is_valid=score_percentage >= config.approval_threshold,
        confidence=confidence,
        risk_level=risk_level_for(score_percentage, config),
        active_layers=active_layers,
        reasons=reasons,
        warnings=warnings,
        layer_scores=layer_scores,
    )
    logger.info(
        f"Validated {label}: {score_percentage:.1f}% "
        f"({'approved' if outcome.is_valid else 'rejected'}, risk {outcome.risk_level.value})"
    )
    return outcome


def validate_many(
    snapshots: Iterable[MarketSnapshot],
    config: ValidationConfig,
    candidates: Optional[Dict[str, Decision]] = None
) -> Dict[str, ValidationOutcome]:
    """Validate several snapshots independently, keyed by symbol.

    Args:
        snapshots: Snapshots to evaluate; symbols should be unique
        config: Configuration shared by every evaluation
        candidates: Optional upstream decisions keyed by symbol

    Returns:
        Dict mapping symbol to its ValidationOutcome
    """
    candidates = candidates or {}
    outcomes = {}
    for index, snapshot in enumerate(snapshots):
        key = snapshot.symbol or str(index)
        outcomes[key] = validate(snapshot, config, candidates.get(snapshot.symbol))
    return outcomes


class ValidationBuilder:
    """Accumulates weighted layers and validates snapshots against them.

    Every ``with_*`` method returns a new builder; the receiver is never modified.
    """

    def __init__(self, config: Optional[ValidationConfig] = None):
        self.config = config or ValidationConfig()

    @classmethod
    def from_preset(cls, name: str) -> 'ValidationBuilder':
        return cls(ValidationConfig.from_preset(name))

    def with_layer(self, layer: str, weight: float, **params) -> 'ValidationBuilder':
        return ValidationBuilder(self.config.with_layer(layer, weight, **params))

    def with_ema(self, fast_period: int = 12, slow_period: int = 26, weight: float = 20) -> 'ValidationBuilder':
        return self.with_layer('ema', weight, fast_period=fast_period, slow_period=slow_period)

    def with_rsi(self, period: int = 14, weight: float = 15) -> 'ValidationBuilder':
        return self.with_layer('rsi', weight, period=period)

    def with_volume(self, multiplier: float = 1.2, weight: float = 15) -> 'ValidationBuilder':
        return self.with_layer('volume', weight, multiplier=multiplier)

    def with_support_resistance(self, tolerance: float = 0.01, weight: float = 20) -> 'ValidationBuilder':
        return self.with_layer('support_resistance', weight, tolerance=tolerance)

    def with_momentum(self, min_momentum: float = 0.01, weight: float = 10) -> 'ValidationBuilder':
        return self.with_layer('momentum', weight, min_momentum=min_momentum)

    def with_volatility(self, min_vol: float = 0.5, max_vol: float = 5.0, weight: float = 10) -> 'ValidationBuilder':
        return self.with_layer('volatility', weight, min_vol=min_vol, max_vol=max_vol)

    def with_confidence(self, min_confidence: float = 70, weight: float = 10) -> 'ValidationBuilder':
        return self.with_layer('confidence', weight, min_confidence=min_confidence)

    def validate(
        self,
        snapshot: MarketSnapshot,
        candidate: Optional[Decision] = None
    ) -> ValidationOutcome:
        """Validate one snapshot with the accumulated configuration."""
        return validate(snapshot, self.config, candidate)
