import importlib.metadata
import importlib.resources as pkg_resources
import logging

from patternbus.utils.errors import ConfigurationError

log = logging.getLogger(__name__)


def get_optional(dictionary: dict, key: str, default=None, type: type | None = None):
    """
    Given the key to look up in a dictionary, assert that the variable is of the correct type.
    Then return either the value, or the default value, or None if this is blank.
    """

    value = dictionary.get(key)

    if value is None:
        return default

    if type is None:
        return value

    if not isinstance(value, type):
        raise ConfigurationError(f"{key}={value!r} is not of type {type.__name__}.")
    return value


def get_package_directory():
    return pkg_resources.files("patternbus")


def get_version() -> str:
    """
    Get the installed version of patternbus.
    """
    try:
        return importlib.metadata.version("patternbus")
    except importlib.metadata.PackageNotFoundError:
        log.debug("patternbus is not installed, version unknown")
        return "unknown"
