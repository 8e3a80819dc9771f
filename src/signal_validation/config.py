"""Configuration settings for the signal validation engine."""

from pathlib import Path

# Logging
LOGS_DIR = Path("logs")
LOG_FILE = "signal_validation.log"
LOG_MAX_BYTES = 10 * 1024 * 1024  # 10MB
LOG_BACKUP_COUNT = 5
# Third-party loggers kept at WARNING
QUIET_LOGGERS = ["yfinance", "urllib3", "peewee"]

# Market data parameters
LOOKBACK_DAYS = 300
REQUIRED_COLUMNS = ["Close"]
OPTIONAL_COLUMNS = ["High", "Low", "Open", "Volume"]

# Indicator defaults
RSI_PERIOD = 14
RSI_NEUTRAL = 50.0
DEFAULT_VOLATILITY = 1.0      # Returned when fewer than two prices exist
MAX_VOLATILITY = 5.0          # Percent, upper clamp for historical volatility
SR_LOOKBACK = 50              # Bars scanned for support/resistance extrema
SR_MERGE_TOLERANCE = 0.01     # Fraction of current price used to merge nearby levels
SR_STRENGTH_PER_TOUCH = 0.2

# Trend analysis
EMA_HORIZONS = {
    'short': (12, 26),
    'medium': (50, 100),
    'long': 200,
}
TREND_STRENGTH_WEIGHTS = {
    'fast_slow': 0.6,
    'current_fast': 0.4,
}
TREND_STRENGTH_MULTIPLIER = 10
MOMENTUM_WINDOW = 7           # Bars in each half of the momentum comparison
MOMENTUM_MULTIPLIER = 5
VOLUME_STRENGTH_RECENT = 5
VOLUME_STRENGTH_WINDOW = 20
VOLUME_STRENGTH_MULTIPLIER = 50
DEFAULT_VOLUME_STRENGTH = 60.0
OVERALL_STRENGTH_WEIGHTS = {
    'short': 0.30,
    'medium': 0.25,
    'momentum': 0.20,
    'rsi': 0.15,
    'volume': 0.10,
}

# Uptrend predicates
STRONG_UPTREND = {
    'min_momentum': 60,
    'min_strength': 75,
    'rsi_min': 30,
    'rsi_max': 80,
}
MODERATE_UPTREND = {
    'min_momentum': 40,
    'min_strength': 60,
}

# Confidence attached to each market condition
MARKET_CONDITION_CONFIDENCE = {
    'strong_bull': 80,
    'moderate_bull': 70,
    'bear': 80,
    'sideways': 60,
}

# Validation thresholds (percent of the maximum weighted score)
MIN_APPROVAL_SCORE = 60.0
LOW_RISK_THRESHOLD = 80.0
MEDIUM_RISK_THRESHOLD = 65.0
MIN_CONFIDENCE = 50.0
MAX_CONFIDENCE = 95.0
LAYER_PASS_SCORE = 60         # A single layer is valid at or above this score

# Layer thresholds
RSI_OVERSOLD = 25
RSI_OVERBOUGHT = 75
EMA_MIN_SEPARATION = 0.005
VOLUME_RECENT_BARS = 3
VOLUME_AVERAGE_BARS = 20
VOLATILITY_MIN_BARS = 20

# Named presets: layer key, weight, parameters.
PRESETS = {
    'EmaBot': [
        ('ema', 25, {'fast_period': 12, 'slow_period': 26}),
        ('rsi', 20, {'period': 14}),
        ('volume', 20, {'multiplier': 1.2}),
        ('momentum', 15, {'min_momentum': 0.01}),
        ('volatility', 10, {'min_vol': 1.0, 'max_vol': 5.0}),
        ('confidence', 10, {'min_confidence': 70}),
    ],
    'SmartBot': [
        ('ema', 20, {'fast_period': 12, 'slow_period': 26}),
        ('rsi', 15, {'period': 14}),
        ('volume', 15, {'multiplier': 1.5}),
        ('support_resistance', 20, {'tolerance': 0.01}),
        ('momentum', 15, {'min_momentum': 0.01}),
        ('confidence', 15, {'min_confidence': 75}),
    ],
    'RealBot': [
        ('ema', 20, {'fast_period': 12, 'slow_period': 26}),
        ('rsi', 15, {'period': 14}),
        ('volume', 15, {'multiplier': 1.3}),
        ('momentum', 15, {'min_momentum': 0.01}),
        ('confidence', 15, {'min_confidence': 70}),
        ('volatility', 20, {'min_vol': 1.0, 'max_vol': 4.0}),
    ],
    'UltraConservative': [
        ('ema', 20, {'fast_period': 12, 'slow_period': 26}),
        ('rsi', 15, {'period': 14}),
        ('volume', 15, {'multiplier': 1.8}),
        ('support_resistance', 20, {'tolerance': 0.005}),
        ('momentum', 10, {'min_momentum': 0.02}),
        ('volatility', 10, {'min_vol': 0.5, 'max_vol': 3.0}),
        ('confidence', 10, {'min_confidence': 85}),
    ],
    'Simulation': [
        ('ema', 20, {'fast_period': 12, 'slow_period': 26}),
        ('rsi', 15, {'period': 14}),
        ('volume', 15, {'multiplier': 1.2}),
        ('momentum', 15, {'min_momentum': 0.01}),
        ('confidence', 15, {'min_confidence': 70}),
        ('volatility', 20, {'min_vol': 1.0, 'max_vol': 4.0}),
    ],
}
DEFAULT_PRESET = 'Simulation'

# Smart scoring parameters
SMART_SCORE_WEIGHTS = {
    'ema': 0.35,
    'ai': 0.40,
    'volume': 0.15,
    'momentum': 0.10,
}
HIGH_CONFIDENCE = 80
MEDIUM_CONFIDENCE = 78
BUY_THRESHOLD = 75
ADAPTIVE_THRESHOLDS = {
    'BULL_MARKET': 65,
    'BEAR_MARKET': MEDIUM_CONFIDENCE,
    'SIDEWAYS': 75,
}
