import time
import logging
from typing import Callable, List, Optional
from datetime import datetime
from sortedcontainers import SortedList  # type: ignore

from ..event import Event, TrafficEvent


class TrafficSpikeDetector:
    """
    Trigger alert if the average number of hits per section within the traffic
    window crosses the given threshold, or returns back to normal.

    Every hit schedules its own removal from the window once the window duration
    has passed, the window count is therefore the superposition of all those
    pending removals rather than an exact sliding window.
    Alerts are queued rather than sent, see popAlerts(), so that whoever owns
    the detector can deliver them once it no longer holds any lock.
    Not thread-safe, the owning Tracker serialises access.
    """

    def __init__(
        self,
        sectionCount: Callable[[], int],
        windowSizeInSeconds: float = 120,
        threshold: int = 10,
    ):
        # Read at every evaluation, the denominator grows as sections get discovered
        self._sectionCount = sectionCount

        self._windowSize = windowSizeInSeconds
        self._threshold = threshold

        # Hits currently counted in the window, and ever since start
        self._windowTraffic: int = 0
        self._totalTraffic: int = 0

        # Store if in high-traffic alert mode
        self._isHighAlert = False

        # Deadlines of pending window decrements, one per hit. Kept sorted as
        # they're only in recording order for as long as the window size is unchanged
        self._expiries = SortedList()

        # Spike and recovery alerts fired but not yet delivered, oldest first
        self._alerts: List[TrafficEvent] = []

    @property
    def windowSize(self) -> float:
        return self._windowSize

    @property
    def threshold(self) -> int:
        return self._threshold

    @property
    def windowTraffic(self) -> int:
        return self._windowTraffic

    @property
    def totalTraffic(self) -> int:
        return self._totalTraffic

    @property
    def isAlerting(self) -> bool:
        return self._isHighAlert

    def recordHit(self, now: float) -> None:
        "Count a hit in the window until `now` plus window size"
        self._windowTraffic += 1
        self._totalTraffic += 1
        self._expiries.add(now + self._windowSize)
        logging.debug(f"Window traffic up to {self._windowTraffic}")
        self.triggerAlert()

    def expire(self, now: float) -> int:
        "Apply every decrement due by `now`, one by one, return how many were applied"
        expired = 0
        while self._expiries and self._expiries[0] <= now:
            self._expiries.pop(0)
            self._discount()
            expired += 1
        return expired

    def nextExpiry(self) -> Optional[float]:
        "Deadline of the earliest pending decrement, if any"
        return self._expiries[0] if self._expiries else None

    def pendingExpiries(self) -> int:
        return len(self._expiries)

    def popAlerts(self) -> List[TrafficEvent]:
        "Alerts fired since last call, in the order they were fired"
        alerts, self._alerts = self._alerts, []
        return alerts

    def setWindowSize(self, windowSizeInSeconds: float) -> None:
        "Applies to hits recorded from now on, pending ones keep their deadline"
        if windowSizeInSeconds <= 0:
            raise ValueError(f"Traffic window must be positive: {windowSizeInSeconds}")
        self._windowSize = windowSizeInSeconds

    def setThreshold(self, threshold: int) -> None:
        if threshold < 0:
            raise ValueError(f"Traffic threshold can't be negative: {threshold}")
        self._threshold = threshold
        self.triggerAlert()

    def _discount(self) -> None:
        if self._windowTraffic <= 0:
            # Each decrement pairs with exactly one hit, so this is a bug somewhere
            logging.error("Window traffic would drop below zero, clamping it to zero")
            self._windowTraffic = 0
            # Fatal unless running optimised, i.e. python -O
            if __debug__:
                raise AssertionError("Window traffic decremented below zero")
        else:
            self._windowTraffic -= 1
        logging.debug(f"Window traffic down to {self._windowTraffic}")
        self.triggerAlert()

    def average(self) -> int:
        "Truncated average of window hits per known section"
        return self._windowTraffic // max(self._sectionCount(), 1)

    def triggerAlert(self) -> None:
        """
        If average above threshold, alert once until recovery.
        If average back below threshold, alert once that it's recovered.
        """
        average = self.average()
        now = int(time.time())

        # Fire only if average exceeds threshold, alert only once
        if average > self._threshold and not self._isHighAlert:
            alertHighTraffic = TrafficEvent(
                time=now,
                priority=Event.Priority.HIGH,
                message="High traffic generated an alert - "
                f"hits = {self._windowTraffic}, triggered at {datetime.fromtimestamp(now)}",
                kind=TrafficEvent.Kind.SPIKE,
                windowTraffic=self._windowTraffic,
            )
            self._isHighAlert = True
            self._alerts.append(alertHighTraffic)
            logging.debug(f"High traffic, fired {alertHighTraffic}")

        # If back to normal again
        elif average <= self._threshold and self._isHighAlert:
            alertBackToNormal = TrafficEvent(
                time=now,
                priority=Event.Priority.HIGH,
                message="Traffic is now back to normal - "
                f"hits = {self._windowTraffic}, recovered at {datetime.fromtimestamp(now)}",
                kind=TrafficEvent.Kind.RECOVERY,
                windowTraffic=self._windowTraffic,
            )
            self._isHighAlert = False
            self._alerts.append(alertBackToNormal)
            logging.debug(f"High traffic back to normal, fired {alertBackToNormal}")
