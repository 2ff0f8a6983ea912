"""
Core Message Bus Records

Defines the option and configuration records and the state enums shared by
the bus and its subscribers.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, Optional

from patternbus.utils import get_optional
from patternbus.utils.errors import ConfigurationError

log = logging.getLogger(__name__)

DEFAULT_RETENTION_MAX = 32
DEFAULT_FALLBACK_CUTOVER_MS = 180_000


class LifecycleState(Enum):
    """Subscriber lifecycle"""
    ACTIVE = "active"
    DESTROYING = "destroying"            # Deregistered, waiting for the forced cutover
    DESTROYED = "destroyed"


class BufferingState(Enum):
    """Subscriber retention mode"""
    NOT_RETAINING = "not_retaining"
    RETAINING = "retaining"
    CUT_OVER = "cut_over"                # Retention released for good


class TransformFailurePolicy(Enum):
    """What pub() does when a subscriber's map function raises"""
    ISOLATE = "isolate"                  # Log, count and keep fanning out
    ABORT = "abort"                      # Re-raise out of pub()


def _require_positive_int(name: str, value: Any) -> None:
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        raise ConfigurationError(f"{name} must be a positive integer, got {value!r}")


def _require_non_negative_int(name: str, value: Any) -> None:
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ConfigurationError(f"{name} must be a non-negative integer, got {value!r}")


@dataclass
class SubscriberOptions:
    """Construction-time options for a subscriber"""
    max: int = DEFAULT_RETENTION_MAX
    retain: bool = False
    map: Optional[Callable[[Any], Any]] = None
    relays: bool = True
    fallback_cutover_ms: int = DEFAULT_FALLBACK_CUTOVER_MS

    def __post_init__(self):
        """Validate options"""
        _require_positive_int("max", self.max)
        _require_non_negative_int("fallback_cutover_ms", self.fallback_cutover_ms)

        if not isinstance(self.retain, bool):
            raise ConfigurationError(f"retain must be a boolean, got {self.retain!r}")

        if not isinstance(self.relays, bool):
            raise ConfigurationError(f"relays must be a boolean, got {self.relays!r}")

        if self.map is not None and not callable(self.map):
            raise ConfigurationError(f"map must be callable, got {type(self.map).__name__}")


@dataclass
class BusConfig:
    """Bus-wide defaults and policies"""
    default_max: int = DEFAULT_RETENTION_MAX
    fallback_cutover_ms: int = DEFAULT_FALLBACK_CUTOVER_MS
    transform_failures: TransformFailurePolicy = TransformFailurePolicy.ISOLATE

    def __post_init__(self):
        _require_positive_int("default_max", self.default_max)
        _require_non_negative_int("fallback_cutover_ms", self.fallback_cutover_ms)

        if not isinstance(self.transform_failures, TransformFailurePolicy):
            try:
                self.transform_failures = TransformFailurePolicy(self.transform_failures)
            except ValueError:
                raise ConfigurationError(
                    f"transform_failures must be one of "
                    f"{[policy.value for policy in TransformFailurePolicy]}, got {self.transform_failures!r}"
                )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "default_max": self.default_max,
            "fallback_cutover_ms": self.fallback_cutover_ms,
            "transform_failures": self.transform_failures.value,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "BusConfig":
        """Build a config from a plain dict, using defaults for missing keys"""
        return cls(
            default_max=get_optional(data, "default_max", DEFAULT_RETENTION_MAX, int),
            fallback_cutover_ms=get_optional(data, "fallback_cutover_ms", DEFAULT_FALLBACK_CUTOVER_MS, int),
            transform_failures=get_optional(data, "transform_failures", TransformFailurePolicy.ISOLATE.value),
        )
