"""
Core watch logic for SMB Trigger.
"""

from .dispatcher import ChangeDispatcher
from .events import (
    EmittedEvent,
    EventKind,
    MalformedRecordError,
    RawChangeRecord,
    classify,
)
from .monitor import MonitorState, StabilityMonitor
from .pending import PendingSet
from .session import WatchSession, WatchSetupError, open_watch_session
from .share import IFileHandle, IShareClient, LocalShareClient
