import signal
import logging
import threading
from typing import Callable, List, Optional

from .action import Action, TerminalNotifier
from .config import Config
from .read import FileReader, checkReadable
from .report import Reporter
from .analyze.tracker import Tracker


class Monitor:
    """
    Runs the three moving parts of the monitor side by side: a reader tailing the
    log file into the tracker, a reporter printing tracker statistics periodically,
    and the tracker's own traffic window decay.
    If any of them dies on an unexpected error the whole monitor stops, with `failed` set.
    """

    def __init__(self, path: str, config: Config, action: Action):
        self.config = config.validate()
        self.tracker = Tracker.fromConfig(action, config)
        self.reader = FileReader(self.tracker, path, pollInterval=config.pollInterval)
        self.reporter = Reporter(
            self.tracker,
            action,
            reportInterval=config.reportInterval,
            reportLimit=config.reportLimit,
        )
        self.failed = False
        self._stopEvent = threading.Event()
        self._threads: List[threading.Thread] = []

    def start(self) -> None:
        "Raises SourceUnavailable, without starting anything, if the log file can't be read"
        self.reader.open()
        self.tracker.start(onFailure=lambda: self._fail("traffic-window-decay"))
        for name, target in (
            ("log-reader", self.reader.follow),
            ("reporter", self.reporter.run),
        ):
            thread = threading.Thread(
                target=self._runLogged, args=(name, target), name=name, daemon=True
            )
            thread.start()
            self._threads.append(thread)

    def _runLogged(self, name: str, target: Callable[[threading.Event], None]) -> None:
        try:
            target(self._stopEvent)
        except Exception:
            logging.exception(f"Unexpected failure in {name}, it's no longer running")
            self._fail(name)

    def _fail(self, name: str) -> None:
        logging.error(f"Stopping monitor, {name} failed")
        self.failed = True
        self.requestStop()

    def wait(self, pollInterval: float = 1.0) -> None:
        "Block until stop() is called, from a signal handler say"
        while not self._stopEvent.wait(pollInterval):
            pass

    def requestStop(self) -> None:
        "Safe to call from a signal handler"
        self._stopEvent.set()

    def stop(self, timeout: Optional[float] = 5.0) -> None:
        self._stopEvent.set()
        for thread in self._threads:
            thread.join(timeout)
        self._threads.clear()
        self.tracker.close(timeout)


def monitorAccessLogs(path: str, config: Config, action: Optional[Action] = None) -> int:
    """
    Monitor an HTTP access log file until interrupted: report the most visited
    sections every config.reportInterval seconds, and alert on traffic spikes.
    Raises SourceUnavailable before starting if the file can't be read.
    Returns 0 once interrupted, 1 if the monitor stopped on its own after a failure.
    """
    checkReadable(path)

    logging.info("Starting monitor")
    monitor = Monitor(path, config, action or TerminalNotifier())

    try:
        # Treat a polite kill like Ctrl-C. Handlers can only be set from the main thread
        if threading.current_thread() is threading.main_thread():
            signal.signal(signal.SIGTERM, lambda signum, frame: monitor.requestStop())

        monitor.start()
        logging.info("Ctrl-C to quit")
        monitor.wait()
    except KeyboardInterrupt:
        logging.info("Caught signal, shutting down...")
    finally:
        monitor.stop()

    if monitor.failed:
        logging.error("Monitor stopped after a failure")
        return 1
    logging.info("Done monitoring")
    return 0
