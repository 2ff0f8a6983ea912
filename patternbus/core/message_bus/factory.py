"""
Bus Factory with Environment Defaults

Provides zero-configuration bus creation, with defaults taken from the
environment (and a .env file, if present) and optional dict configuration
for callers that need to override them.
"""

import os
import logging
from typing import Any, Dict, Optional

from dotenv import load_dotenv

from patternbus.utils.errors import ConfigurationError

from .bus import Bus
from .interface import BusConfig

log = logging.getLogger(__name__)

ENV_RETENTION_MAX = "PATTERNBUS_RETENTION_MAX"
ENV_FALLBACK_CUTOVER_MS = "PATTERNBUS_FALLBACK_CUTOVER_MS"
ENV_TRANSFORM_FAILURES = "PATTERNBUS_TRANSFORM_FAILURES"


def _env_int(name: str) -> Optional[int]:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return None
    try:
        return int(raw)
    except ValueError:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}")


class BusFactory:
    """Factory for creating bus instances with environment defaults"""

    @staticmethod
    def config_from_env() -> Dict[str, Any]:
        """Read bus settings from the environment, loading .env first"""
        load_dotenv(dotenv_path=os.path.join(os.getcwd(), ".env"))

        config: Dict[str, Any] = {}

        default_max = _env_int(ENV_RETENTION_MAX)
        if default_max is not None:
            config["default_max"] = default_max

        fallback_cutover_ms = _env_int(ENV_FALLBACK_CUTOVER_MS)
        if fallback_cutover_ms is not None:
            config["fallback_cutover_ms"] = fallback_cutover_ms

        transform_failures = os.getenv(ENV_TRANSFORM_FAILURES)
        if transform_failures:
            config["transform_failures"] = transform_failures.strip().lower()

        log.debug("[BusFactory] Environment configuration: %s", config)
        return config

    @staticmethod
    def create_bus(config: Optional[Dict[str, Any]] = None, **kwargs) -> Bus:
        """
        Create a bus instance

        Args:
            config: Optional configuration dict. Keys it does not set are taken
                from the environment, then from the built-in defaults.
            **kwargs: Passed to Bus (scheduler, onsub)

        Returns:
            Bus instance
        """
        merged = {**BusFactory.config_from_env(), **(config or {})}
        bus_config = BusConfig.from_dict(merged)

        log.debug("[BusFactory] Creating Bus: %s", bus_config.to_dict())

        return Bus(config=bus_config, **kwargs)


# Global bus instance for zero-configuration usage
_global_bus: Optional[Bus] = None
_bus_config: Optional[Dict[str, Any]] = None


def create_default_bus() -> Bus:
    """Create a bus from the global configuration, if any, and the environment"""
    log.debug("[BusFactory] Creating default bus")
    return BusFactory.create_bus(_bus_config)


def get_global_bus() -> Bus:
    """
    Get or create the global bus instance

    This provides a singleton bus that components can share without passing
    it around explicitly.
    """
    global _global_bus

    if _global_bus is None:
        _global_bus = create_default_bus()
        log.info("[BusFactory] Global bus created")

    return _global_bus


def set_global_bus(bus: Bus) -> None:
    """
    Set a custom global bus instance

    Args:
        bus: Bus instance to share
    """
    global _global_bus

    if _global_bus is not None and _global_bus is not bus:
        log.warning("[BusFactory] Replacing existing global bus")

    _global_bus = bus

    log.info("[BusFactory] Set custom global bus")


def shutdown_global_bus() -> None:
    """
    Destroy every subscriber of the global bus and forget it

    This should be called during application shutdown.
    """
    global _global_bus

    if _global_bus is not None:
        log.info("[BusFactory] Shutting down global bus")
        _global_bus.destroy()
        _global_bus = None
    else:
        log.debug("[BusFactory] No global bus to shutdown")


def configure_global_bus(config: Dict[str, Any]) -> None:
    """
    Configure the global bus before first use

    Args:
        config: Bus configuration dict

    Note:
        If called after the global bus has been created, this logs a warning
        and the configuration is ignored.
    """
    global _bus_config

    if _global_bus is not None:
        log.warning("[BusFactory] Global bus already created, configuration ignored: %s", config)
        return

    BusConfig.from_dict(config)
    _bus_config = config

    log.debug("[BusFactory] Configured global bus: %s", config)


def get_bus_config() -> Optional[Dict[str, Any]]:
    """Get the current global bus configuration"""
    return _bus_config
