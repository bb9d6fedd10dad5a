"""
Exception types raised by the localization core.

All errors are precondition violations detected before any state is
modified. Numerical degeneracies (all weights zero, unmatched
observations) are handled inside the algorithms and never raised.
"""


class LocalizationError(Exception):
    """Base class for all landmark_mcl errors."""


class InvalidGeometry(LocalizationError, ValueError):
    """
    Bad spatial index geometry.

    Raised for a degenerate bounding rectangle, a non-positive cell
    size, or a point inserted outside the configured world.
    """


class NotInitialized(LocalizationError, RuntimeError):
    """A filter operation was called before ``init``."""


class InvalidConfiguration(LocalizationError, ValueError):
    """Non-positive particle count, negative noise, or bad config keys."""


class TelemetryError(LocalizationError, ValueError):
    """A telemetry message is missing fields or holds malformed values."""
