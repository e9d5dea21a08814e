"""
Remote path helpers and error formatting.

SMB paths always use forward slashes here, regardless of the
local operating system.
"""

import errno
import re

_DOT_SEGMENT = re.compile(r"/\./")


def join_remote_path(directory: str, filename: str) -> str:
    """
    Join a watched directory and a reported filename.

    Change notifications report names relative to the watched
    directory, and a watched path of "." or "./x" would otherwise
    leave "/./" segments in the result.

    Args:
        directory: Watched directory on the share
        filename: Name reported by the change notification

    Returns:
        The combined path with every "/./" collapsed to "/"

    Examples:
        >>> join_remote_path("./incoming", "a.txt")
        './incoming/a.txt'
        >>> join_remote_path(".", "a.txt")
        'a.txt'
    """
    full_path = f"{directory}/{filename}"
    # Loop because "/././" only loses one segment per substitution pass
    while _DOT_SEGMENT.search(full_path):
        full_path = _DOT_SEGMENT.sub("/", full_path)
    if full_path.startswith("./") and directory == ".":
        full_path = full_path[2:]
    return full_path


def readable_error(error: BaseException) -> str:
    """
    Turn an exception into a short, human-readable cause.

    Args:
        error: The exception to describe

    Returns:
        Text suitable for a one-line error message
    """
    if isinstance(error, OSError):
        if error.strerror:
            code = errno.errorcode.get(error.errno) if error.errno else None
            if code:
                return f"{error.strerror} ({code})"
            return error.strerror
        if error.args:
            return str(error.args[0])

    message = str(error).strip()
    if message:
        return message
    return error.__class__.__name__
