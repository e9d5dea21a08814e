"""
Command line argument parser.

Handles parsing and validation of CLI arguments.
"""

import argparse
import sys
from typing import List, Optional

from smb_trigger.config.constants import AUTHOR, HELP_TEXT, VERSION
from smb_trigger.config.settings import VALID_EVENTS


def positive_int(value: str) -> int:
    """argparse type for strictly positive integers."""
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"'{value}' is not a whole number")
    if number <= 0:
        raise argparse.ArgumentTypeError(f"'{value}' must be greater than 0")
    return number


class ArgumentParser:
    """Custom argument parser for SMB Trigger."""

    def __init__(self):
        """Initialize argument parser."""
        self.parser = self._create_parser()

    def _create_parser(self) -> argparse.ArgumentParser:
        """Create and configure the argument parser."""
        parser = argparse.ArgumentParser(
            prog="smb-trigger",
            description="Emit events when files change on an SMB share",
            add_help=False,  # We'll handle help ourselves
            formatter_class=argparse.RawDescriptionHelpFormatter,
        )

        parser.add_argument(
            "-h", "--help", action="store_true", help="Show this help"
        )

        parser.add_argument(
            "-v", "--version", action="store_true", help="Show version"
        )

        parser.add_argument(
            "path",
            nargs="?",
            metavar="PATH",
            help="Folder on the share to watch",
        )

        parser.add_argument(
            "-e",
            "--event",
            choices=VALID_EVENTS,
            default=None,
            help="Event to watch for (default: created)",
        )

        parser.add_argument(
            "-r",
            "--recursive",
            action="store_true",
            help="Include changes in subfolders",
        )

        parser.add_argument(
            "--no-wait",
            action="store_true",
            help="Emit 'created' without waiting for the file to be complete",
        )

        parser.add_argument(
            "--wait-duration",
            type=positive_int,
            metavar="MS",
            help="Milliseconds between size checks",
        )

        parser.add_argument(
            "--max-polls",
            type=positive_int,
            metavar="N",
            help="Give up on a file after N size checks",
        )

        parser.add_argument(
            "--root",
            type=str,
            metavar="DIR",
            help="Local mount point of the share",
        )

        parser.add_argument(
            "--polling",
            action="store_true",
            help="Use a polling observer (for network mounts)",
        )

        parser.add_argument(
            "--config",
            type=str,
            metavar="FILE",
            help="Load settings from a JSON file",
        )

        parser.add_argument(
            "--json",
            action="store_true",
            help="Print one JSON object per event",
        )

        parser.add_argument(
            "--verbose",
            action="store_true",
            help="Enable debug logging",
        )

        parser.add_argument(
            "--quiet",
            action="store_true",
            help="Only print events",
        )

        return parser

    def parse_args(self, args: Optional[List[str]] = None) -> argparse.Namespace:
        """Parse command line arguments.

        Args:
            args: Optional list of arguments (for testing)

        Returns:
            Parsed arguments namespace
        """
        parsed = self.parser.parse_args(args)

        # Handle special cases
        if parsed.help:
            self.print_help()
            sys.exit(0)

        if parsed.version:
            self.print_version()
            sys.exit(0)

        if not parsed.path and not parsed.config:
            self.parser.error("PATH is required")

        return parsed

    def print_help(self) -> None:
        """Print custom help text."""
        print(HELP_TEXT)

    def print_version(self) -> None:
        """Print version information."""
        print(f"smb-trigger {VERSION}")
        print(f"By {AUTHOR}")


def create_parser() -> ArgumentParser:
    """Create and return a configured argument parser."""
    return ArgumentParser()
