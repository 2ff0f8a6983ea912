import argparse
import pathlib
from collections.abc import Sequence

from patternbus.utils.errors import ParseError


def parse_args(args: Sequence[str] | None = None) -> argparse.Namespace:
    """
    Parse command line arguments for the patternbus demo.

    Args:
        args (Optional[Sequence[str]], optional): Arguments to parse. Defaults to sys.argv.

    Returns:
        argparse.Namespace: The parsed command line arguments as a Namespace object.
    """

    parser = argparse.ArgumentParser(
        description="Run the patternbus publish/subscribe demo.",
        add_help=True,
    )

    parser.add_argument(
        "--log",
        action="store_true",
        help="Print every message published on the bus through a catch-all subscriber.",
    )

    parser.add_argument(
        "--logConfig",
        default=None,
        help=("A custom path to a JSON logging configuration file."),
    )

    parser.add_argument(
        "--version",
        action="store_true",
        help="Display the version of patternbus and exit.",
    )

    return parser.parse_args(args)


def check_parse_conflicts(args: argparse.Namespace) -> None:
    """
    Check for conflicts in the parsed arguments.

    Args:
        args (argparse.Namespace): The parsed command line arguments.

    Raises:
        ParseError: If there are conflicts in the arguments.
    """

    if args.logConfig is not None and not pathlib.Path(args.logConfig).is_file():
        raise ParseError(
            message="Logging configuration file not found. See --help for more information.",
            detail=f"--logConfig {args.logConfig}",
        )
