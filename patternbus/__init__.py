"""
patternbus: in-process publish/subscribe with structural pattern matching.
"""

from patternbus.core.message_bus import Bus, BusConfig, Subscriber, SubscriberOptions, match
from patternbus.utils.errors import (
    BusError,
    ConfigurationError,
    DuplicateRelayerError,
    InvalidPatternError,
    TransformError,
)

__all__ = [
    "Bus",
    "BusConfig",
    "Subscriber",
    "SubscriberOptions",
    "match",
    "BusError",
    "ConfigurationError",
    "DuplicateRelayerError",
    "InvalidPatternError",
    "TransformError",
]
