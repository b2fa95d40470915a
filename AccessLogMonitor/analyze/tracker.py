import time
import logging
import threading
from collections import deque
from dataclasses import dataclass
from typing import Callable, Deque, List, Optional

from ..action import Action
from ..config import Config
from ..event import TrafficEvent
from ..parse import parseSection
from .rwlock import ReadWriteLock
from .rankedIndex import RankedSectionIndex, SectionRecord
from .spikeDetector import TrafficSpikeDetector

# Requests per second are averaged over at least this many seconds
_MIN_ELAPSED_SECONDS = 1.0


@dataclass
class Snapshot:
    """ Consistent view of the tracked statistics at one point in time """

    topSections: List[SectionRecord]
    sectionCount: int
    totalTraffic: int
    windowTraffic: int
    requestsPerSecond: float
    isAlerting: bool


class Tracker:
    """
    Entry point for log lines and for statistics about them.

    Counts hits per section in a ranked index and feeds them to the traffic spike
    detector. Both, and the counters around them, are guarded by one readers-writer
    lock: ingesting a line and each window decay pass write, everything else reads.
    A background worker, see start(), applies the window decrements as they fall due.
    Spike and recovery alerts go to the action only after the lock is released,
    so the action is free to read statistics back from the tracker.
    """

    def __init__(
        self,
        action: Action,
        trafficWindow: float = 120,
        trafficThreshold: int = 10,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._lock = ReadWriteLock()
        self._clock = clock

        self._index = RankedSectionIndex()
        self._action = action
        self._detector = TrafficSpikeDetector(
            sectionCount=self._index.size,
            windowSizeInSeconds=trafficWindow,
            threshold=trafficThreshold,
        )
        self._startTime = clock()

        # Alerts taken from the detector under the lock, delivered in firing order
        self._outbox: Deque[TrafficEvent] = deque()
        self._deliveryLock = threading.RLock()

        # Decay worker state
        self._closed = False
        self._stopping = threading.Event()
        self._wakeUp = threading.Event()
        self._worker: Optional[threading.Thread] = None
        self._onFailure: Optional[Callable[[], None]] = None

    @classmethod
    def fromConfig(
        cls, action: Action, config: Config, clock: Callable[[], float] = time.monotonic
    ) -> "Tracker":
        return cls(
            action,
            trafficWindow=config.trafficWindow,
            trafficThreshold=config.trafficThreshold,
            clock=clock,
        )

    def processLogEntry(self, line: str) -> str:
        """
        Count the log line against its section and check for traffic spikes.
        Raises MalformedEntry, leaving all statistics untouched, if the line has no section.
        """
        section = parseSection(line)

        with self._lock.writing():
            self._index.upsert(section)
            self._detector.recordHit(self._clock())
            self._collectAlerts()

        # A new deadline may be due before the one the worker is waiting for
        self._wakeUp.set()
        self._deliverAlerts()
        return section

    def decay(self, now: Optional[float] = None) -> int:
        "Remove from the traffic window all hits older than the window, return how many"
        with self._lock.writing():
            if self._closed:
                return 0
            try:
                expired = self._detector.expire(self._clock() if now is None else now)
            finally:
                self._collectAlerts()
        self._deliverAlerts()
        return expired

    def reconfigure(
        self,
        trafficWindow: Optional[float] = None,
        trafficThreshold: Optional[int] = None,
    ) -> None:
        "Change spike detection settings while running"
        with self._lock.writing():
            if trafficWindow is not None:
                self._detector.setWindowSize(trafficWindow)
            if trafficThreshold is not None:
                self._detector.setThreshold(trafficThreshold)
            logging.info(
                f"Traffic window {self._detector.windowSize}s, threshold {self._detector.threshold}"
            )
            self._collectAlerts()
        self._wakeUp.set()
        self._deliverAlerts()

    def _collectAlerts(self) -> None:
        "Only call with the write lock held"
        self._outbox.extend(self._detector.popAlerts())

    def _deliverAlerts(self) -> None:
        "Only call without the state lock, the action may read statistics back"
        with self._deliveryLock:
            while self._outbox:
                self._action.notify(self._outbox.popleft())

    def topSections(self, limit: int) -> List[SectionRecord]:
        with self._lock.reading():
            return self._index.topN(limit)

    def sectionCount(self) -> int:
        with self._lock.reading():
            return self._index.size()

    def totalTraffic(self) -> int:
        with self._lock.reading():
            return self._detector.totalTraffic

    def windowTraffic(self) -> int:
        with self._lock.reading():
            return self._detector.windowTraffic

    def isAlerting(self) -> bool:
        with self._lock.reading():
            return self._detector.isAlerting

    def requestsPerSecond(self) -> float:
        with self._lock.reading():
            return self._requestsPerSecond()

    def snapshot(self, limit: int) -> Snapshot:
        "All statistics at once, as of the same instant"
        with self._lock.reading():
            return Snapshot(
                topSections=self._index.topN(limit),
                sectionCount=self._index.size(),
                totalTraffic=self._detector.totalTraffic,
                windowTraffic=self._detector.windowTraffic,
                requestsPerSecond=self._requestsPerSecond(),
                isAlerting=self._detector.isAlerting,
            )

    def _requestsPerSecond(self) -> float:
        elapsed = max(self._clock() - self._startTime, _MIN_ELAPSED_SECONDS)
        return self._detector.totalTraffic / elapsed

    def start(self, onFailure: Optional[Callable[[], None]] = None) -> None:
        """
        Start applying window decrements in the background.
        onFailure gets called, from the worker, if it stops on an unexpected error.
        """
        if self._worker is not None:
            return
        self._onFailure = onFailure
        self._worker = threading.Thread(
            target=self._decayLoop, name="traffic-window-decay", daemon=True
        )
        self._worker.start()

    def close(self, timeout: Optional[float] = None) -> None:
        "Stop the background worker, pending decrements are abandoned"
        with self._lock.writing():
            self._closed = True
        self._stopping.set()
        self._wakeUp.set()
        if self._worker is not None:
            self._worker.join(timeout)
            self._worker = None

    def _decayLoop(self) -> None:
        while not self._stopping.is_set():
            with self._lock.reading():
                deadline = self._detector.nextExpiry()

            # Never wait while holding the lock
            timeout = None if deadline is None else max(0.0, deadline - self._clock())
            self._wakeUp.wait(timeout)
            self._wakeUp.clear()

            if self._stopping.is_set():
                break
            try:
                self.decay()
            except Exception:
                logging.exception("Traffic window decay failed, it's no longer running")
                if self._onFailure is not None:
                    self._onFailure()
                break
        logging.debug("Traffic window decay stopped")
