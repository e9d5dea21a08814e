"""
Watch session lifecycle: subscribe, dispatch, tear down.

A WatchSession binds one watched directory to the share client's change
subscription and forwards every notification to a ChangeDispatcher.
open_watch_session() adds connection setup with retries on top and
turns every startup failure into a WatchSetupError.
"""

import logging
import threading
from typing import Callable, Optional

from smb_trigger.config.constants import MESSAGES, MONITOR_JOIN_TIMEOUT
from smb_trigger.config.settings import Settings
from smb_trigger.core.dispatcher import ChangeDispatcher
from smb_trigger.core.monitor import EmitCallback
from smb_trigger.core.pending import PendingSet
from smb_trigger.core.resilience import create_connect_retry_decorator
from smb_trigger.core.share import IShareClient, LocalShareClient, Unsubscribe
from smb_trigger.utils.paths import readable_error

logger = logging.getLogger(__name__)

ClientFactory = Callable[[Settings], IShareClient]


class WatchSetupError(Exception):
    """Raised when a watch session cannot be started."""

    pass


class WatchSession:
    """One subscription to change notifications for a watched directory.

    Attributes:
        client: Connected share client; closed by close().
        settings: Validated watch settings.
        pending: Filenames currently under stability tracking.
        dispatcher: Routes notifications to the event sink.
    """

    def __init__(
        self,
        client: IShareClient,
        settings: Settings,
        emit: EmitCallback,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.client = client
        self.settings = settings
        self.logger = logger if logger is not None else logging.getLogger(__name__)
        self.pending = PendingSet()
        self.dispatcher = ChangeDispatcher(
            client=client,
            pending=self.pending,
            path=settings.watched_path,
            event=settings.event,
            emit=emit,
            wait_for_completion=settings.effective_wait_for_completion,
            wait_duration_ms=settings.wait_duration_ms,
            max_polls=settings.max_polls,
            logger=self.logger,
        )
        self._lock = threading.Lock()
        self._unsubscribe: Optional[Unsubscribe] = None
        self._started = False
        self._closed = False

    @property
    def path(self) -> str:
        return self.settings.watched_path

    @property
    def is_closed(self) -> bool:
        return self._closed

    def start(self) -> "WatchSession":
        """Subscribe to change notifications.

        Raises:
            WatchSetupError: If the subscription fails. The client
                connection is released before the error propagates.
        """
        with self._lock:
            if self._closed:
                raise WatchSetupError("Watch session is already closed")
            if self._started:
                return self
            self._started = True

        try:
            self._unsubscribe = self.client.watch(
                self.path,
                self.settings.recursive,
                self.dispatcher.handle_notification,
            )
        except Exception as e:
            self.logger.error(f"Watch setup failed for {self.path}: {e}")
            self.close()
            raise WatchSetupError(
                MESSAGES["WATCH_FAILED"].format(path=self.path, error=readable_error(e))
            ) from e

        self.logger.info(
            f"Watching {self.path} for '{self.settings.event}' events "
            f"(recursive={self.settings.recursive})"
        )
        return self

    def close(self, join_timeout: float = MONITOR_JOIN_TIMEOUT) -> None:
        """Tear the session down.

        Stops the subscription, cancels every stability monitor that is
        still waiting, clears the pending set and closes the client. No
        event is emitted once this returns. Calling it again is a no-op.
        """
        with self._lock:
            if self._closed:
                return
            self._closed = True

        unsubscribe, self._unsubscribe = self._unsubscribe, None
        if unsubscribe is not None:
            try:
                unsubscribe()
            except Exception as e:
                self.logger.warning(f"Failed to stop watching {self.path}: {e}")

        cancelled = self.dispatcher.close(join_timeout)
        self.pending.clear()

        try:
            self.client.close()
        except Exception as e:
            self.logger.warning(f"Failed to close share connection: {e}")

        self.logger.info(
            f"Stopped watching {self.path} ({cancelled} pending checks cancelled)"
        )

    def __enter__(self) -> "WatchSession":
        return self.start()

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()


def default_client_factory(settings: Settings) -> IShareClient:
    """Connect to the share mounted at settings.share_root."""
    return LocalShareClient(
        root=settings.share_root,
        use_polling=settings.use_polling,
    )


def connect(
    settings: Settings,
    client_factory: ClientFactory = default_client_factory,
) -> IShareClient:
    """Connect to the share, retrying transient failures.

    Raises:
        WatchSetupError: If no connection could be established.
    """
    retrying_factory = create_connect_retry_decorator(
        max_attempts=settings.connect_attempts
    )(client_factory)
    try:
        return retrying_factory(settings)
    except Exception as e:
        logger.error(f"Connect error: {e}")
        raise WatchSetupError(
            MESSAGES["CONNECT_FAILED"].format(error=readable_error(e))
        ) from e


def open_watch_session(
    settings: Settings,
    emit: EmitCallback,
    client_factory: ClientFactory = default_client_factory,
    logger: Optional[logging.Logger] = None,
) -> WatchSession:
    """Validate settings, connect and start a watch session.

    Args:
        settings: Watch settings; validated here.
        emit: Receives every emitted event.
        client_factory: Builds the share client from the settings.
        logger: Logger for the session and its monitors.

    Returns:
        A started WatchSession. Call close() to release it.

    Raises:
        ConfigError: If the settings are invalid.
        WatchSetupError: If connecting or subscribing fails.
    """
    settings.validate()
    client = connect(settings, client_factory)
    session = WatchSession(client, settings, emit, logger=logger)
    return session.start()
