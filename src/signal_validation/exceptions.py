"""Exceptions raised by the signal validation engine."""


class SignalValidationError(Exception):
    """Base class for signal validation errors."""
    pass


class SnapshotError(SignalValidationError, ValueError):
    """Raised when a market snapshot violates its length invariants."""
    pass


class MarketDataError(SignalValidationError):
    """Raised when price history cannot be loaded or converted."""
    pass
