import asyncio
import json
import logging
import logging.config
import pathlib
import sys

from patternbus import argument_parser
from patternbus.cli.demo import run_demo
from patternbus.utils import get_package_directory, get_version
from patternbus.utils.errors import ParseError

log = logging.getLogger(__name__)


def app_entrypoint(args):
    # Set a delineator for a new application run in log file
    log.debug("\n%s NEW LOG RUN %s\n", "=" * 60, "=" * 60)

    try:
        # Confirm that there are no known conflicts in the arguments before doing anything else
        argument_parser.check_parse_conflicts(args)
    except ParseError as e:
        log.critical("ParseError: %s", e)
        return

    if args.version:
        print(f"patternbus version: {get_version()}")
        return

    log.debug("Arguments: %s", args)

    asyncio.run(run_demo(log_messages=args.log))


def cli_entrypoint():
    """
    This is used to configure logging when ran standalone from any external scripts.
    If a logging configuration file is not found, the process exits with status 1.
    Do not use this function if you have configured your own logger. Simply call `app_entrypoint()` directly.
    """

    args = argument_parser.parse_args()

    if args.logConfig is not None:
        # If a custom logging configuration file is specified, use it
        config_file = pathlib.Path(args.logConfig)
    else:
        config_file = pathlib.Path(str(get_package_directory())) / "config" / "log_config.json"

    try:
        with pathlib.Path.open(config_file) as f_in:
            config = json.load(f_in)
    except FileNotFoundError:
        print(f"Logging configuration file not found: {config_file}", file=sys.stderr)
        sys.exit(1)

    # The file handler's directory is created on demand; the configured
    # filename must be at most one folder deep, such as "logs/patternbus.log".
    file_handler = config.get("handlers", {}).get("file")
    if file_handler is not None and "/" in file_handler["filename"]:
        log_directory = pathlib.Path(file_handler["filename"].split("/")[0])
        if not log_directory.exists():
            log_directory.mkdir()

    logging.config.dictConfig(config)

    app_entrypoint(args)
