"""
Event models and action-code classification.

Raw change records arrive from the share client with the numeric
SMB2 action code of each change. classify() maps those codes to the
semantic event kinds the rest of the package works with.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Mapping, Optional

from smb_trigger.config.constants import (
    FILE_ACTION_ADDED,
    FILE_ACTION_MODIFIED,
    FILE_ACTION_REMOVED,
)


class MalformedRecordError(ValueError):
    """Raised when a raw change record cannot be interpreted."""

    pass


class EventKind(str, Enum):
    """Semantic event kinds emitted to the consumer."""

    CREATED = "created"
    DELETED = "deleted"
    UPDATED = "updated"


EVENT_MAP: Dict[int, EventKind] = {
    FILE_ACTION_ADDED: EventKind.CREATED,
    FILE_ACTION_REMOVED: EventKind.DELETED,
    FILE_ACTION_MODIFIED: EventKind.UPDATED,
}


def classify(action_code: Any) -> Optional[EventKind]:
    """Map a raw action code to its event kind.

    Renames and any other code are intentionally left unclassified.

    Args:
        action_code: Action code from a change notification

    Returns:
        The matching EventKind, or None if the code has no kind
    """
    # bool is an int subclass; True must not be read as FILE_ACTION_ADDED
    if isinstance(action_code, bool) or not isinstance(action_code, int):
        return None
    return EVENT_MAP.get(action_code)


@dataclass(frozen=True)
class RawChangeRecord:
    """A single entry of a change notification batch."""

    action: Any
    action_name: str
    filename: str
    metadata: Mapping[str, Any] = field(default_factory=dict)

    @classmethod
    def from_raw(cls, raw: Any) -> RawChangeRecord:
        """Build a record from a record instance or a notification mapping.

        Raises:
            MalformedRecordError: If the entry has no string filename.
        """
        if isinstance(raw, cls):
            return raw
        if not isinstance(raw, Mapping):
            raise MalformedRecordError(
                f"Change record must be a mapping, got {type(raw).__name__}"
            )

        filename = raw.get("filename")
        if not isinstance(filename, str) or not filename:
            raise MalformedRecordError(f"Change record without filename: {raw!r}")

        action_name = raw.get("actionName", raw.get("action_name", ""))
        metadata = {
            key: value
            for key, value in raw.items()
            if key not in ("action", "actionName", "action_name", "filename")
        }
        return cls(
            action=raw.get("action"),
            action_name=str(action_name) if action_name is not None else "",
            filename=filename,
            metadata=metadata,
        )


@dataclass(frozen=True)
class EmittedEvent:
    """The event delivered to the consumer."""

    event: EventKind
    filename: str
    path: str
    file_size: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        """Serialize the event, including fileSize only when known."""
        data: Dict[str, Any] = {
            "event": self.event.value,
            "filename": self.filename,
            "path": self.path,
        }
        if self.file_size is not None:
            data["fileSize"] = self.file_size
        return data
