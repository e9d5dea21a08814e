"""
Constants and configuration values for SMB Trigger.

This module centralizes all constants, making them easy to modify
and test. Defaults used by the settings layer and the core live here.
"""

# Version Information
VERSION = "1.0.0"
AUTHOR = "SMB Trigger Contributors"


# SMB2 change notification action codes (FILE_NOTIFY_INFORMATION.Action)
FILE_ACTION_ADDED = 1
FILE_ACTION_REMOVED = 2
FILE_ACTION_MODIFIED = 3
FILE_ACTION_RENAMED_OLD_NAME = 4
FILE_ACTION_RENAMED_NEW_NAME = 5

ACTION_NAMES = {
    FILE_ACTION_ADDED: "FILE_ACTION_ADDED",
    FILE_ACTION_REMOVED: "FILE_ACTION_REMOVED",
    FILE_ACTION_MODIFIED: "FILE_ACTION_MODIFIED",
    FILE_ACTION_RENAMED_OLD_NAME: "FILE_ACTION_RENAMED_OLD_NAME",
    FILE_ACTION_RENAMED_NEW_NAME: "FILE_ACTION_RENAMED_NEW_NAME",
}


# Watch defaults
DEFAULT_EVENT = "created"
DEFAULT_WAIT_DURATION_MS = 5000
DEFAULT_CONNECT_ATTEMPTS = 3
# Upper bound for joining monitor threads during teardown (seconds)
MONITOR_JOIN_TIMEOUT = 5.0


# User-facing messages
MESSAGES = {
    "WATCH_STARTED": "Watching {path} for '{event}' events (Ctrl+C to stop)",
    "WATCH_STOPPED": "Watch stopped.",
    "WAITING_FOR_COMPLETION": "Waiting {duration} ms between size checks",
    "CONNECT_FAILED": "Failed to connect to SMB server: {error}",
    "WATCH_FAILED": "Failed to watch {path}: {error}",
    "CONFIG_ERROR": "Configuration error: {error}",
    "OPERATION_CANCELLED": "\nOperation cancelled.",
}


HELP_TEXT = """
SMB Trigger - emit events when files change on an SMB share

Usage:
    smb-trigger PATH [OPTIONS]

Options:
    -h, --help              Show this help
    -v, --version           Show version
    -e, --event KIND        Event to watch for: created, deleted, updated
                            (default: created)
    -r, --recursive         Include changes in subfolders
    --no-wait               Emit 'created' immediately instead of waiting
                            for the file to stop growing
    --wait-duration MS      Interval between size checks in milliseconds
                            (default: 5000)
    --max-polls N           Give up on a file after N size checks
                            (default: unlimited)
    --root DIR              Local mount point of the share (default: cwd)
    --polling               Use a polling observer (network mounts)
    --config FILE           Load settings from a JSON file
    --json                  Print one JSON object per event
    --verbose               Enable debug logging
    --quiet                 Only print events

Examples:
    # Emit an event once each new file has finished copying
    smb-trigger incoming --root /mnt/share

    # Report deletions in a folder tree
    smb-trigger archive --event deleted --recursive
"""
