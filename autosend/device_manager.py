import hashlib
from contextlib import contextmanager

import uiautomator2 as u2

from autosend.config import DEVICE_SERIAL
from autosend.events import WindowWatcher
from autosend.logger import logger
from autosend.screenshot_manager import take_screenshot
from autosend.ui_tree import Bounds, UiSnapshot, parse_hierarchy

FLAG_ACTIVITY_NEW_TASK = "0x10000000"
ACTION_VIEW = "android.intent.action.VIEW"
ACTION_ACCESSIBILITY_SETTINGS = "android.settings.ACCESSIBILITY_SETTINGS"


def connect_to_device(serial=DEVICE_SERIAL):
    """Connect to the Android device using uiautomator2."""
    logger.info("🔌 Connecting to device...")
    return u2.connect(serial) if serial else u2.connect()


class DevicePlatform:
    """The accessibility primitives the automation service needs, backed by uiautomator2."""

    def __init__(self, d, scheduler):
        self.d = d
        self.scheduler = scheduler
        self.watcher = None

    def _start_activity(self, *args):
        response = self.d.shell(["am", "start", "-f", FLAG_ACTIVITY_NEW_TASK, *args])
        output = response.output or ""
        if response.exit_code != 0 or "Error" in output:
            logger.error(f"❌ Activity start failed: {output.strip()}")
            return False
        return True

    def open_uri(self, uri, package=None):
        args = ["-a", ACTION_VIEW, "-d", uri]
        if package:
            args += ["-p", package]
        try:
            return self._start_activity(*args)
        except Exception as e:
            logger.error(f"❌ Could not open {uri}: {e}")
            return False

    def enabled_services(self):
        """Colon separated component list, empty when nothing is enabled."""
        try:
            output = self.d.shell("settings get secure enabled_accessibility_services").output
        except Exception as e:
            logger.error(f"❌ Could not read enabled accessibility services: {e}")
            return ""
        output = (output or "").strip()
        return "" if output == "null" else output

    def open_accessibility_settings(self):
        try:
            return self._start_activity("-a", ACTION_ACCESSIBILITY_SETTINGS)
        except Exception as e:
            logger.error(f"❌ Could not open accessibility settings: {e}")
            return False

    def register_event_filter(self, event_filter, listener):
        if self.watcher is not None:
            self.watcher.stop()
        self.watcher = WindowWatcher(self, self.scheduler, event_filter, listener)
        self.watcher.start()
        return self.watcher

    def unregister_event_filter(self):
        if self.watcher is not None:
            self.watcher.stop()
            self.watcher = None

    def _dump(self):
        try:
            return self.d.dump_hierarchy(compressed=False)
        except Exception as e:
            logger.warning(f"⚠️ Hierarchy dump failed: {e}")
            return None

    @contextmanager
    def snapshot(self):
        xml_str = self._dump()
        root = None
        if xml_str:
            try:
                root = parse_hierarchy(xml_str)
            except Exception as e:
                logger.warning(f"⚠️ Could not parse hierarchy: {e}")
        snap = UiSnapshot(root)
        try:
            yield snap
        finally:
            snap.release()

    def hierarchy_digest(self):
        xml_str = self._dump()
        if xml_str is None:
            return None
        return hashlib.sha1(xml_str.encode("utf-8")).hexdigest()

    def foreground(self):
        try:
            current = self.d.app_current()
        except Exception as e:
            logger.debug(f"Foreground app unavailable: {e}")
            return None
        return current.get("package"), current.get("activity")

    def click(self, node):
        if node.bounds == Bounds():
            logger.error("❌ Node has no usable bounds, not clicking")
            return False
        x, y = node.bounds.center
        try:
            self.d.click(x, y)
        except Exception as e:
            logger.error(f"❌ Click at ({x}, {y}) failed: {e}")
            return False
        return True

    def back(self):
        try:
            self.d.press("back")
        except Exception as e:
            logger.error(f"❌ Back navigation failed: {e}")
            return False
        return True

    def screen_width(self):
        try:
            return self.d.window_size()[0]
        except Exception as e:
            logger.warning(f"⚠️ Screen size unavailable: {e}")
            return None

    def screenshot(self, label):
        try:
            return take_screenshot(self.d, label)
        except Exception as e:
            logger.warning(f"⚠️ Screenshot failed: {e}")
            return None
