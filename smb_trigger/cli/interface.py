"""
Command line interface module.

Handles user-facing output: watch status and one line per emitted event.
"""

import json
from abc import ABC, abstractmethod
from typing import Optional

from rich.console import Console
from rich.markup import escape
from rich.style import Style

from smb_trigger.config.constants import MESSAGES, VERSION
from smb_trigger.config.settings import Settings, settings as global_settings
from smb_trigger.core.events import EmittedEvent, EventKind


class IUserInterface(ABC):
    """Interface for user interaction."""

    @abstractmethod
    def show_welcome(self) -> None:
        """Show welcome message."""
        pass

    @abstractmethod
    def show_message(self, message: str, message_type: str = "info") -> None:
        """Show a message to the user."""
        pass

    @abstractmethod
    def show_event(self, event: EmittedEvent) -> None:
        """Show one emitted event."""
        pass

    @abstractmethod
    def show_watch_status(self, path: str, event: str) -> None:
        """Show that watching has started."""
        pass

    @abstractmethod
    def show_watch_stopped(self) -> None:
        """Show that watching has stopped."""
        pass


class ConsoleInterface(IUserInterface):
    """Console-based user interface implementation."""

    EVENT_MARKERS = {
        EventKind.CREATED: ("[+]", "green"),
        EventKind.DELETED: ("[-]", "red"),
        EventKind.UPDATED: ("[~]", "yellow"),
    }

    def __init__(
        self, settings: Optional[Settings] = None, console: Optional[Console] = None
    ):
        """Initialize console interface."""
        self.settings = settings if settings is not None else global_settings
        self.console = console if console is not None else Console()

        # Theme styles (minimalist - no bold/dim modifiers)
        self.success_style = Style(color="green")
        self.error_style = Style(color="red")
        self.warning_style = Style(color="yellow")
        self.info_style = Style(color="white")

    def _print(self, renderable, style=None) -> None:
        """Print directly to console."""
        if style:
            self.console.print(renderable, style=style)
        else:
            self.console.print(renderable)

    def show_welcome(self) -> None:
        """Show welcome message in minimalist Unix style."""
        if self.settings.get("quiet", False) or self.settings.get("output_json", False):
            return
        header = f"SMB Trigger v{VERSION}\n------------------"
        self.console.print(header, style="blue")

    def show_message(self, message: str, message_type: str = "info") -> None:
        """Show a message to the user.

        Errors are always shown; other messages respect --quiet.

        Args:
            message: Message to display
            message_type: Type of message (info, success, error, warning)
        """
        if message_type != "error" and self.settings.get("quiet", False):
            return

        if message_type == "success":
            self._print(message, style=self.success_style)
        elif message_type == "error":
            self._print(message, style=self.error_style)
        elif message_type == "warning":
            self._print(message, style=self.warning_style)
        elif message_type == "info":
            self._print(message, style=self.info_style)
        else:
            self._print(message)

    def show_event(self, event: EmittedEvent) -> None:
        """Print an event as a status line, or as JSON with --json."""
        if self.settings.get("output_json", False):
            self.console.print(
                json.dumps(event.to_dict()), markup=False, highlight=False
            )
            return

        marker, color = self.EVENT_MARKERS[event.event]
        line = (
            f"[{color}]{escape(marker)}[/{color}] {event.event.value:<8}"
            f"{escape(event.filename)}"
        )
        if event.file_size is not None:
            line += f" ({event.file_size} bytes)"
        line += f" in {escape(event.path)}"
        self.console.print(line)

    def show_watch_status(self, path: str, event: str) -> None:
        self.show_message(MESSAGES["WATCH_STARTED"].format(path=path, event=event))
        if event == "created" and self.settings.effective_wait_for_completion:
            self.show_message(
                MESSAGES["WAITING_FOR_COMPLETION"].format(
                    duration=self.settings.wait_duration_ms
                )
            )

    def show_watch_stopped(self) -> None:
        self.show_message(MESSAGES["WATCH_STOPPED"])


def create_console_interface(settings: Optional[Settings] = None) -> ConsoleInterface:
    """Create and return a console interface."""
    return ConsoleInterface(settings)
