from dataclasses import dataclass, field
from enum import Enum
from typing import FrozenSet

from autosend.config import NOTIFICATION_TIMEOUT, POLL_INTERVAL
from autosend.logger import logger


class EventKind(Enum):
    WINDOW_STATE_CHANGED = "window-state-changed"
    WINDOW_CONTENT_CHANGED = "window-content-changed"


@dataclass(frozen=True)
class UiChangeNotification:
    source_package: str
    kind: EventKind


@dataclass(frozen=True)
class EventFilter:
    packages: FrozenSet[str]
    kinds: FrozenSet[EventKind] = field(default_factory=lambda: frozenset(EventKind))
    notification_timeout: float = NOTIFICATION_TIMEOUT

    def accepts(self, notification):
        if self.packages and notification.source_package not in self.packages:
            return False
        return notification.kind in self.kinds


class WindowWatcher:
    """Turns device polling into UI-change notifications.

    Each tick compares the foreground (package, activity) pair and, while a
    watched package is in front, a digest of its hierarchy. Notifications of
    the same kind are delivered at most once per notification_timeout.
    """

    def __init__(self, platform, scheduler, event_filter, listener, poll_interval=POLL_INTERVAL):
        self.platform = platform
        self.scheduler = scheduler
        self.event_filter = event_filter
        self.listener = listener
        self.poll_interval = poll_interval
        self._last_window = None
        self._last_digest = None
        self._last_delivered = {}
        self._task = None

    def start(self):
        if self._task is None:
            logger.info(f"👀 Watching {sorted(self.event_filter.packages)} for UI changes")
            self._task = self.scheduler.call_later(0, self._tick, name="window_watcher")

    def stop(self):
        if self._task is not None:
            self._task.cancel()
            self._task = None

    def _tick(self):
        try:
            self.poll()
        finally:
            if self._task is not None:
                self._task = self.scheduler.call_later(self.poll_interval, self._tick, name="window_watcher")

    def poll(self):
        window = self.platform.foreground()
        if window is None:
            return
        package = window[0]

        if window != self._last_window:
            self._last_window = window
            self._last_digest = None
            self.emit(UiChangeNotification(package, EventKind.WINDOW_STATE_CHANGED))

        if self.event_filter.packages and package not in self.event_filter.packages:
            return
        digest = self.platform.hierarchy_digest()
        if digest is not None and digest != self._last_digest:
            changed = self._last_digest is not None
            self._last_digest = digest
            if changed:
                self.emit(UiChangeNotification(package, EventKind.WINDOW_CONTENT_CHANGED))

    def emit(self, notification):
        if not self.event_filter.accepts(notification):
            return False
        now = self.scheduler.now()
        last = self._last_delivered.get(notification.kind)
        if last is not None and now - last < self.event_filter.notification_timeout:
            return False
        self._last_delivered[notification.kind] = now
        self.listener(notification)
        return True
