import logging
import threading

from .action import Action
from .analyze.tracker import Snapshot, Tracker


class Reporter:
    """ Periodically pass the most visited sections and overall traffic to an action """

    def __init__(
        self, tracker: Tracker, action: Action, reportInterval: float = 10, reportLimit: int = 10
    ):
        self._tracker = tracker
        self._action = action
        self._reportInterval = reportInterval
        self._reportLimit = reportLimit

    def reportOnce(self) -> Snapshot:
        snapshot = self._tracker.snapshot(self._reportLimit)
        logging.debug(
            f"Reporting {len(snapshot.topSections)} of {snapshot.sectionCount} sections"
        )
        self._action.report(snapshot)
        return snapshot

    def run(self, stopEvent: threading.Event) -> None:
        "Report every interval until stopEvent is set"
        while not stopEvent.wait(self._reportInterval):
            self.reportOnce()
