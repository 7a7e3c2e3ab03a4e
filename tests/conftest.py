from contextlib import contextmanager

import pytest

from autosend import accessibility_service
from autosend.accessibility_service import AutomationService
from autosend.scheduler import Scheduler, VirtualClock
from autosend.ui_tree import Bounds, UiNode, UiSnapshot

SCREEN_WIDTH = 1080


class FakePlatform:
    """Records every platform request and serves scripted UI trees."""

    def __init__(self, screen_width=SCREEN_WIDTH):
        self.width = screen_width
        self.launches = []
        self.clicks = []
        self.backs = 0
        self.snapshots = []
        self.screenshots = []
        self.settings_opened = 0
        self.enabled = ""
        self.launch_ok = True
        self.event_filter = None
        self.listener = None
        # Roots handed out by snapshot(), last one repeats
        self.trees = [None]

    def open_uri(self, uri, package=None):
        self.launches.append((uri, package))
        return self.launch_ok

    def enabled_services(self):
        return self.enabled

    def open_accessibility_settings(self):
        self.settings_opened += 1
        return True

    def register_event_filter(self, event_filter, listener):
        self.event_filter = event_filter
        self.listener = listener

    def unregister_event_filter(self):
        self.event_filter = None
        self.listener = None

    @contextmanager
    def snapshot(self):
        root = self.trees.pop(0) if len(self.trees) > 1 else self.trees[0]
        snap = UiSnapshot(root)
        self.snapshots.append(snap)
        try:
            yield snap
        finally:
            snap.release()

    def screen_width(self):
        return self.width

    def click(self, node):
        self.clicks.append(node)
        return True

    def back(self):
        self.backs += 1
        return True

    def screenshot(self, label):
        self.screenshots.append(label)
        return f"screenshots/{label}.png"


def send_button_tree(resource_id="com.whatsapp:id/send"):
    return UiNode(
        class_name="android.widget.FrameLayout",
        bounds=Bounds(0, 0, SCREEN_WIDTH, 2400),
        children=[
            UiNode(resource_id="com.whatsapp:id/entry", class_name="android.widget.EditText",
                   clickable=True, bounds=Bounds(40, 2200, 900, 2300)),
            UiNode(resource_id=resource_id, class_name="android.widget.ImageButton",
                   content_desc="Send", clickable=True, bounds=Bounds(940, 2200, 1060, 2300)),
        ],
    )


def empty_tree():
    return UiNode(class_name="android.widget.FrameLayout", bounds=Bounds(0, 0, SCREEN_WIDTH, 2400))


@pytest.fixture
def scheduler():
    return Scheduler(VirtualClock())


@pytest.fixture
def platform():
    return FakePlatform()


@pytest.fixture
def service(platform, scheduler):
    svc = AutomationService(platform, scheduler)
    svc.connect()
    yield svc
    svc.destroy()


@pytest.fixture(autouse=True)
def no_leftover_instance():
    yield
    accessibility_service._instance = None
