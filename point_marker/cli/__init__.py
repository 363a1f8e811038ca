"""
Command line interface for point_marker.

Every package under ``point_marker/cli/`` is a subcommand. It exposes
``COMMAND_DESCRIPTION`` and ``command(subparser)``, which adds its
arguments and returns the handler called with the parsed namespace.
"""

import logging
import sys
from argparse import ArgumentDefaultsHelpFormatter, ArgumentParser
from gettext import gettext as _
from pathlib import Path

import point_marker.utils.i18n  # noqa: F401
from point_marker.utils.misc import load_module

logger = logging.getLogger(__name__)

VERSION_FILE = Path(__file__).parent.parent / "VERSION"


def read_version() -> str:
    return VERSION_FILE.read_text().strip()


def common_flags(parser):
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help=_("Log debug messages"),
    )
    parser.add_argument(
        "-V",
        "--version",
        dest="show_version",
        action="store_true",
        help=_("Print version and exit"),
    )


def discover_subcommands():
    """Yield ``(name, module)`` for each subcommand package, sorted by name."""
    for init_file in sorted(Path(__file__).parent.glob("*/__init__.py")):
        name = init_file.parent.name
        if name.startswith("__"):
            continue
        yield name, load_module(init_file, module_name=f"point_marker.cli.{name}")


def build_parser() -> ArgumentParser:
    parser = ArgumentParser(
        prog="point_marker", formatter_class=ArgumentDefaultsHelpFormatter
    )
    common_flags(parser)
    subparsers = parser.add_subparsers()

    for name, module in discover_subcommands():
        subparser = subparsers.add_parser(name, help=module.COMMAND_DESCRIPTION)
        common_flags(subparser)
        subparser.set_defaults(handler=module.command(subparser))
    return parser


def main(argv=None):  # pragma: no cover
    """Entry point of ``point_marker`` and ``python -m point_marker``."""
    logging.basicConfig()
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.verbose:
        logging.root.setLevel(logging.DEBUG)

    if args.show_version:
        print(read_version())
        sys.exit(0)

    handler = getattr(args, "handler", None)
    if handler is None:
        parser.print_help()
        sys.exit(1)

    logger.debug("point_marker v%s", read_version())
    handler(args)
