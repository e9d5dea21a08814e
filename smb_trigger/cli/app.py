"""
CLI application for watch mode.

Coordinates argument parsing, settings, logging and the watch session
lifecycle.
"""

import logging
import sys
import threading
from typing import Optional

from rich.logging import RichHandler

from smb_trigger.cli.interface import IUserInterface, create_console_interface
from smb_trigger.cli.parser import create_parser
from smb_trigger.config.constants import MESSAGES
from smb_trigger.config.settings import ConfigError, Settings, configure_from_args
from smb_trigger.core.events import EmittedEvent
from smb_trigger.core.session import (
    ClientFactory,
    WatchSetupError,
    default_client_factory,
    open_watch_session,
)

logger = logging.getLogger(__name__)


def configure_logging(verbose: bool = False, quiet: bool = False) -> None:
    """Route log records through rich on stderr."""
    if verbose:
        level = logging.DEBUG
    elif quiet:
        level = logging.ERROR
    else:
        level = logging.WARNING

    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(show_path=verbose, rich_tracebacks=True)],
        force=True,
    )


class SmbTriggerCLI:
    """CLI application running one watch session until interrupted."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        interface: Optional[IUserInterface] = None,
        client_factory: ClientFactory = default_client_factory,
    ):
        """Initialize CLI application.

        Args:
            settings: Settings to fill from the command line
            interface: Output interface (default: rich console)
            client_factory: Builds the share client for the session
        """
        self.parser = create_parser()
        self.settings = settings if settings is not None else Settings()
        self.interface = (
            interface
            if interface is not None
            else create_console_interface(self.settings)
        )
        self.client_factory = client_factory
        self.stop_event = threading.Event()

    def request_stop(self) -> None:
        """Ask a running watch to shut down."""
        self.stop_event.set()

    def run(self, args: Optional[list] = None) -> int:
        """Run the CLI application.

        Args:
            args: Optional command line arguments

        Returns:
            Exit code (0 for success, non-zero for error)
        """
        try:
            parsed_args = self.parser.parse_args(args)
            configure_from_args(parsed_args, self.settings)
        except ConfigError as e:
            self.interface.show_message(
                MESSAGES["CONFIG_ERROR"].format(error=e), message_type="error"
            )
            return 1

        configure_logging(
            verbose=self.settings.get("verbose", False),
            quiet=self.settings.get("quiet", False),
        )
        self.interface.show_welcome()
        return self._execute_watch()

    def _on_event(self, event: EmittedEvent) -> None:
        self.interface.show_event(event)

    def _execute_watch(self) -> int:
        """Start the watch session and block until stopped.

        Returns:
            Exit code (0 for normal exit)
        """
        try:
            session = open_watch_session(
                self.settings, self._on_event, client_factory=self.client_factory
            )
        except (WatchSetupError, ConfigError) as e:
            self.interface.show_message(str(e), message_type="error")
            return 1

        self.interface.show_watch_status(self.settings.watched_path, self.settings.event)

        try:
            # Main loop - wait for stop request
            while not self.stop_event.wait(1):
                pass
        except KeyboardInterrupt:
            self.interface.show_message(MESSAGES["OPERATION_CANCELLED"], "warning")
        finally:
            session.close()
            self.interface.show_watch_stopped()

        return 0


def main(args: Optional[list] = None) -> int:
    """Main entry point for the CLI.

    Args:
        args: Optional command line arguments

    Returns:
        Exit code
    """
    app = SmbTriggerCLI()
    return app.run(args)


if __name__ == "__main__":
    sys.exit(main())
