"""Smart scoring: blend trend analysis with an external AI analysis."""

import logging
from typing import Optional

import numpy as np

from signal_validation import indicators
from signal_validation.config import (
    ADAPTIVE_THRESHOLDS,
    BUY_THRESHOLD,
    HIGH_CONFIDENCE,
    MAX_CONFIDENCE,
    MEDIUM_CONFIDENCE,
    MIN_CONFIDENCE,
    MOMENTUM_WINDOW,
    SMART_SCORE_WEIGHTS,
)
from signal_validation.models import (
    Action,
    AIAnalysis,
    MarketConditionType,
    MarketSnapshot,
    Recommendation,
    SmartScore,
)
from signal_validation.trend import TrendAnalyzer

logger = logging.getLogger(__name__)


def _clamp(value: float, low: float = 0.0, high: float = 100.0) -> float:
    return float(min(high, max(low, value)))


class SmartScorer:
    """Weighted EMA, AI, volume and momentum score with a recommendation."""

    def __init__(self, analyzer: Optional[TrendAnalyzer] = None):
        self.analyzer = analyzer or TrendAnalyzer()

    def score(self, snapshot: MarketSnapshot, ai_analysis: AIAnalysis) -> SmartScore:
        """Score a snapshot against an AI analysis.

        Args:
            snapshot: Market snapshot
            ai_analysis: External AI analysis of the same asset

        Returns:
            SmartScore with component scores, final score and recommendation
        """
        ema_score = self.ema_score(snapshot)
        ai_score = self.ai_score(ai_analysis)
        volume_score = self.volume_score(snapshot)
        momentum_score = self.momentum_score(snapshot)

        final_score = (
            ema_score * SMART_SCORE_WEIGHTS['ema']
            + ai_score * SMART_SCORE_WEIGHTS['ai']
            + volume_score * SMART_SCORE_WEIGHTS['volume']
            + momentum_score * SMART_SCORE_WEIGHTS['momentum']
        )
        confidence = self.adjusted_confidence(final_score, ai_analysis.confidence)
        recommendation = self.recommendation(final_score, ai_analysis.action)

        logger.debug(
            f"Smart score {snapshot.symbol or 'snapshot'}: ema={ema_score:.1f} ai={ai_score:.1f} "
            f"volume={volume_score:.1f} momentum={momentum_score:.1f} final={final_score:.1f}"
        )
        return SmartScore(
            ema_score=ema_score,
            ai_score=ai_score,
            volume_score=volume_score,
            momentum_score=momentum_score,
            final_score=final_score,
            confidence=confidence,
            recommendation=recommendation,
        )

    def ema_score(self, snapshot: MarketSnapshot) -> float:
        analysis = self.analyzer.analyze(snapshot)
        score = analysis.overall_strength

        if self.analyzer.is_strong_uptrend(analysis):
            score += 15
        elif self.analyzer.is_moderate_uptrend(analysis):
            score += 8

        if 30 < analysis.rsi < 70:
            score += 5
        elif analysis.rsi > 80 or analysis.rsi < 20:
            score -= 10

        return _clamp(score)

    @staticmethod
    def ai_score(ai_analysis: AIAnalysis) -> float:
        score = ai_analysis.confidence
        if ai_analysis.sentiment > 50:
            score += (ai_analysis.sentiment - 50) * 0.3
        elif ai_analysis.sentiment < -50:
            score -= abs(ai_analysis.sentiment + 50) * 0.3
        score += ai_analysis.technical_signals * 0.2
        return _clamp(score)

    @staticmethod
    def volume_score(snapshot: MarketSnapshot) -> float:
        volumes = snapshot.volumes
        if volumes is None or len(volumes) < 20:
            return 60.0

        values = np.asarray(volumes, dtype=float)
        average = values[-20:].mean()
        if average <= 0:
            return 60.0
        ratio = values[-5:].mean() / average

        if ratio > 1.5:
            return float(HIGH_CONFIDENCE)
        if ratio > 1.2:
            return 75.0
        if ratio > 0.8:
            return 60.0
        if ratio > 0.5:
            return 40.0
        return 25.0

    @staticmethod
    def momentum_score(snapshot: MarketSnapshot) -> float:
        prices = np.asarray(snapshot.closes, dtype=float)
        if prices.size < MOMENTUM_WINDOW * 2:
            return 50.0

        recent = prices[-MOMENTUM_WINDOW:]
        previous = prices[-MOMENTUM_WINDOW * 2:-MOMENTUM_WINDOW]
        if previous.mean() == 0:
            return 50.0

        change = (recent.mean() - previous.mean()) / previous.mean() * 100
        score = 50 + change * 10

        volatility = indicators.historical_volatility(recent)
        if volatility > 5:
            score -= 15
        elif volatility < 2:
            score += 10

        return _clamp(score)

    @staticmethod
    def adjusted_confidence(final_score: float, ai_confidence: float) -> float:
        confidence = final_score * 0.6 + ai_confidence * 0.4
        if final_score > MEDIUM_CONFIDENCE:
            confidence += 5
        if final_score > HIGH_CONFIDENCE:
            confidence += 5
        if final_score < 40:
            confidence -= 10
        return _clamp(confidence, MIN_CONFIDENCE, MAX_CONFIDENCE)

    @staticmethod
    def recommendation(final_score: float, ai_action: Action) -> Recommendation:
        if ai_action == Action.BUY:
            if final_score >= HIGH_CONFIDENCE:
                return Recommendation.STRONG_BUY
            if final_score >= BUY_THRESHOLD:
                return Recommendation.BUY
        elif ai_action == Action.SELL:
            if final_score >= HIGH_CONFIDENCE:
                return Recommendation.STRONG_SELL
            if final_score >= BUY_THRESHOLD:
                return Recommendation.SELL
        return Recommendation.HOLD


def adaptive_threshold(condition: MarketConditionType) -> float:
    """Minimum smart score required to act in a given market condition."""
    return float(ADAPTIVE_THRESHOLDS.get(condition.value, ADAPTIVE_THRESHOLDS['SIDEWAYS']))
