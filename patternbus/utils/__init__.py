from .helper_functions import get_optional, get_package_directory, get_version

__all__ = ["get_optional", "get_package_directory", "get_version"]
