from .errors import (
    BusError,
    ConfigurationError,
    DuplicateRelayerError,
    InvalidPatternError,
    ParseError,
    TransformError,
)

__all__ = [
    "BusError",
    "ConfigurationError",
    "DuplicateRelayerError",
    "InvalidPatternError",
    "ParseError",
    "TransformError",
]
