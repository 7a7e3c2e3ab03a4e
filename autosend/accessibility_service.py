from autosend.automation_state import AutomationPhase, AutomationState, SendOutcome, SendRequest
from autosend.config import (
    AWAIT_TIMEOUT,
    BACK_DELAY,
    MAX_RETRIES,
    NOTIFICATION_TIMEOUT,
    OVERLAP_POLICY,
    SCREENSHOT_ON_GIVE_UP,
    SEARCH_DELAY,
    TARGET_PACKAGE,
)
from autosend.deep_link import request_launch
from autosend.events import EventFilter, EventKind
from autosend.logger import logger
from autosend.send_search import find_send_control

# The connected service, set by connect() and cleared by destroy()
_instance = None


def current_instance():
    return _instance


def send_message(phone, message, on_complete=None):
    """Start a send attempt through the connected service.

    Returns True once the chat launch was requested (or the request was
    queued behind the one in flight), False when no service is connected,
    the launch failed or the request was rejected. The final result is
    only reported through on_complete(request, outcome).
    """
    service = current_instance()
    if service is None:
        logger.warning("⚠️ Automation service not ready, dropping send request")
        return False
    return service.machine.submit(SendRequest(phone, message, on_complete))


class SendStateMachine:
    """Drives one send attempt from chat launch to the return navigation.

    All transitions run on the scheduler's thread: UI-change notifications
    start the search, and every later step is a timer scheduled by the
    previous one. The machine only reaches the platform through
    service_lookup(), which returns None once the service is gone.
    """

    def __init__(self, scheduler, service_lookup=current_instance, target_package=TARGET_PACKAGE,
                 search_delay=SEARCH_DELAY, back_delay=BACK_DELAY, max_retries=MAX_RETRIES,
                 overlap_policy=OVERLAP_POLICY, screenshot_on_give_up=SCREENSHOT_ON_GIVE_UP,
                 strategies=None, await_timeout=AWAIT_TIMEOUT):
        if overlap_policy not in ("queue", "reject"):
            raise ValueError(f"Unknown overlap policy: {overlap_policy!r}")
        self.scheduler = scheduler
        self.service_lookup = service_lookup
        self.target_package = target_package
        self.search_delay = search_delay
        self.back_delay = back_delay
        self.max_retries = max_retries
        self.overlap_policy = overlap_policy
        self.screenshot_on_give_up = screenshot_on_give_up
        self.strategies = strategies
        self.await_timeout = search_delay * max_retries if await_timeout is None else await_timeout
        self.state = AutomationState()
        self.queued = None
        self._navigating_back = False

    @property
    def busy(self):
        return self.state.busy or self._navigating_back

    # === Requests ===
    def submit(self, request):
        if self.busy:
            return self._enqueue(request)
        return self._begin(request)

    def _enqueue(self, request):
        if self.overlap_policy == "queue" and self.queued is None:
            logger.info(f"⏳ Send in progress, queued request for {request.phone}")
            self.queued = request
            return True
        logger.warning(f"⚠️ Send in progress, rejected request for {request.phone}")
        return False

    def _begin(self, request):
        service = self.service_lookup()
        if service is None:
            logger.warning("⚠️ Automation service not ready, cannot launch chat")
            return False
        self.state.start(request)
        if not request_launch(service, request.phone, request.message, self.target_package):
            self._finish(SendOutcome.LAUNCH_FAILED)
            return False
        logger.info("📨 Chat launch requested, waiting for the target app")
        self.scheduler.call_later(self.await_timeout, self._await_timed_out, request, name="await_target_app")
        return True

    # === Notifications ===
    def on_notification(self, notification):
        if not self.state.awaiting_target_app:
            logger.debug(f"Ignoring {notification.kind.value} from {notification.source_package}: not waiting")
            return False
        if notification.source_package != self.target_package:
            logger.debug(f"Ignoring {notification.kind.value} from {notification.source_package}")
            return False
        if self.state.phase is not AutomationPhase.AWAITING_TARGET_APP:
            logger.debug(f"Search already running, ignoring {notification.kind.value}")
            return False

        logger.info(f"📱 {self.target_package} event: {notification.kind.value}")
        self.state.phase = AutomationPhase.SEARCHING
        self.scheduler.call_later(self.search_delay, self._try_click_send, name="try_click_send")
        return True

    # === Timers ===
    def _await_timed_out(self, request):
        if self.state.pending is not request or self.state.phase is not AutomationPhase.AWAITING_TARGET_APP:
            return
        logger.warning(f"⏰ No {self.target_package} event after {self.await_timeout:.1f}s, searching anyway")
        self.state.phase = AutomationPhase.SEARCHING
        self._try_click_send()

    def _try_click_send(self):
        if not self.state.awaiting_target_app:
            return
        service = self.service_lookup()
        if service is None:
            logger.warning("⚠️ Automation service went away while searching")
            self._finish(SendOutcome.SERVICE_LOST)
            return

        with service.snapshot() as snapshot:
            match = find_send_control(snapshot.root, service.screen_width(), self.strategies)
            if match is not None:
                strategy, node = match
                logger.info(f"🎯 Found send button by {strategy}, clicking...")
                if service.click(node):
                    self.state.phase = AutomationPhase.CONFIRMING
                    self.scheduler.call_later(self.search_delay, self._confirm_sent, name="confirm_sent")
                    return

        self.state.retry_count += 1
        if self.state.retry_count < self.max_retries:
            logger.info(f"🔄 Send button not found, retrying... ({self.state.retry_count}/{self.max_retries})")
            self.scheduler.call_later(self.search_delay, self._try_click_send, name="try_click_send")
        else:
            self._give_up(service)

    def _confirm_sent(self):
        request = self.state.pending
        self.state.reset()
        logger.info("✅ Message sent, returning to the host app")
        self._complete(request, SendOutcome.SENT)

        service = self.service_lookup()
        if service is None:
            logger.warning("⚠️ Automation service went away, skipping back navigation")
            self._drain_queue()
            return
        self._navigating_back = True
        service.back()
        self.scheduler.call_later(self.back_delay, self._second_back, name="second_back")

    def _second_back(self):
        service = self.service_lookup()
        if service is not None:
            service.back()
        self._navigating_back = False
        self._drain_queue()

    def _give_up(self, service):
        self.state.phase = AutomationPhase.GAVE_UP
        logger.warning(f"🛑 Max retries reached ({self.max_retries}), giving up")
        if self.screenshot_on_give_up:
            service.screenshot("send_button_not_found")
        self._finish(SendOutcome.GAVE_UP)

    # === Completion ===
    def _finish(self, outcome):
        request = self.state.pending
        self.state.reset()
        self._complete(request, outcome)
        self._drain_queue()

    def _complete(self, request, outcome):
        if request is None or request.on_complete is None:
            return
        try:
            request.on_complete(request, outcome)
        except Exception:
            logger.exception(f"❌ Completion callback failed for {outcome.value}")

    def _drain_queue(self):
        if self.queued is None or self.busy:
            return
        request, self.queued = self.queued, None
        if self.service_lookup() is None:
            logger.warning(f"⚠️ Dropping queued request for {request.phone}: service not ready")
            self._complete(request, SendOutcome.SERVICE_LOST)
            return
        logger.info(f"▶️ Starting queued request for {request.phone}")
        self._begin(request)


class AutomationService:
    """Host-side stand-in for the accessibility service bound by the platform."""

    def __init__(self, platform, scheduler, target_package=TARGET_PACKAGE, **machine_options):
        self.platform = platform
        self.scheduler = scheduler
        self.target_package = target_package
        self.machine = SendStateMachine(
            scheduler, service_lookup=self._live, target_package=target_package, **machine_options
        )

    def _live(self):
        return self if _instance is self else None

    @property
    def connected(self):
        return _instance is self

    def connect(self):
        global _instance
        _instance = self
        self.platform.register_event_filter(
            EventFilter(
                packages=frozenset({self.target_package}),
                kinds=frozenset({EventKind.WINDOW_STATE_CHANGED, EventKind.WINDOW_CONTENT_CHANGED}),
                notification_timeout=NOTIFICATION_TIMEOUT,
            ),
            self.on_accessibility_event,
        )
        logger.info("🔗 Accessibility service connected")

    def destroy(self):
        global _instance
        if _instance is self:
            _instance = None
        self.platform.unregister_event_filter()
        logger.info("🔌 Accessibility service destroyed")

    def on_accessibility_event(self, notification):
        if notification is None:
            return
        self.machine.on_notification(notification)

    # === Platform primitives ===
    def open_uri(self, uri, package):
        return self.platform.open_uri(uri, package)

    def snapshot(self):
        return self.platform.snapshot()

    def screen_width(self):
        return self.platform.screen_width()

    def click(self, node):
        return self.platform.click(node)

    def back(self):
        return self.platform.back()

    def screenshot(self, label):
        return self.platform.screenshot(label)
