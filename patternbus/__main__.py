import logging
import sys

from patternbus.cli.main import cli_entrypoint
from patternbus.utils.errors import BusError

log = logging.getLogger(__name__)


def custom_excepthook(exc_type, exc_value, exc_traceback):
    if issubclass(exc_type, BusError):
        print(f"{exc_value}")
    else:
        sys.__excepthook__(exc_type, exc_value, exc_traceback)


def main() -> None:
    sys.excepthook = custom_excepthook
    cli_entrypoint()


if __name__ == "__main__":
    main()
