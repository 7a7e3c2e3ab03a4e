import heapq
import itertools
import time
from autosend.logger import logger


class MonotonicClock:
    def now(self):
        return time.monotonic()


class VirtualClock:
    """Manually driven clock so timer chains run without wall-clock waits."""

    def __init__(self, start=0.0):
        self._now = start

    def now(self):
        return self._now

    def set(self, value):
        if value < self._now:
            raise ValueError("VirtualClock cannot move backwards")
        self._now = value


class ScheduledTask:
    def __init__(self, due, callback, args, name):
        self.due = due
        self.callback = callback
        self.args = args
        self.name = name or getattr(callback, "__name__", "task")
        self.cancelled = False

    def cancel(self):
        self.cancelled = True

    def __repr__(self):
        return f"<ScheduledTask {self.name} due={self.due:.3f}>"


class Scheduler:
    """Single-threaded timer queue; every callback runs on the caller's thread."""

    def __init__(self, clock=None):
        self.clock = clock or MonotonicClock()
        self._queue = []
        self._seq = itertools.count()

    def now(self):
        return self.clock.now()

    def call_later(self, delay, callback, *args, name=None):
        task = ScheduledTask(self.now() + max(delay, 0.0), callback, args, name)
        # Sequence number keeps FIFO order among tasks due at the same time
        heapq.heappush(self._queue, (task.due, next(self._seq), task))
        return task

    def pending(self):
        return [task for _, _, task in sorted(self._queue) if not task.cancelled]

    def next_due(self):
        while self._queue and self._queue[0][2].cancelled:
            heapq.heappop(self._queue)
        return self._queue[0][0] if self._queue else None

    def _run(self, task):
        try:
            task.callback(*task.args)
        except Exception:
            logger.exception(f"❌ Scheduled task {task.name} failed")

    def run_pending(self):
        """Run every task that is due now, including ones they schedule for now."""
        ran = 0
        while True:
            due = self.next_due()
            if due is None or due > self.now():
                return ran
            _, _, task = heapq.heappop(self._queue)
            self._run(task)
            ran += 1

    def advance(self, seconds):
        """Move a VirtualClock forward, firing tasks in due order on the way."""
        if not isinstance(self.clock, VirtualClock):
            raise TypeError("advance() needs a VirtualClock")
        target = self.now() + seconds
        ran = self.run_pending()
        while True:
            due = self.next_due()
            if due is None or due > target:
                break
            self.clock.set(due)
            ran += self.run_pending()
        self.clock.set(target)
        return ran

    def run_until(self, predicate, timeout=None):
        """Drive the queue in real time until predicate() holds or timeout passes."""
        deadline = None if timeout is None else self.now() + timeout
        while not predicate():
            self.run_pending()
            if predicate():
                break
            now = self.now()
            if deadline is not None and now >= deadline:
                return False
            due = self.next_due()
            wake = deadline if due is None else due if deadline is None else min(due, deadline)
            if wake is None:
                return False
            if isinstance(self.clock, VirtualClock):
                self.clock.set(max(wake, now))
            else:
                time.sleep(max(wake - now, 0))
        return True
