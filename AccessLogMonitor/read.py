import os
import logging
import threading

from .parse import MalformedEntry
from .analyze.tracker import Tracker


class SourceUnavailable(OSError):
    """ The log file can't be opened for monitoring """


def checkReadable(path: str) -> None:
    "Raise SourceUnavailable unless the file can be opened for reading"
    try:
        with open(path, mode="rb"):
            pass
    except OSError as e:
        raise SourceUnavailable(f"Can't open HTTP log file {path}: {e.strerror}") from e


class Reader:
    """ Feed raw log lines to the tracker, one complete line at a time and in order """

    def __init__(self, tracker: Tracker):
        self.tracker = tracker

    def follow(self, stopEvent: threading.Event) -> None:
        """ Reading implementation here, until stopEvent is set """
        raise NotImplementedError()


class FileReader(Reader):
    """ Follows an HTTP access log file as it grows, similar to `tail --follow` """

    def __init__(self, tracker: Tracker, path: str, pollInterval: float = 1.0):
        super().__init__(tracker)
        self._log = logging.getLogger(__name__)
        self._path = path
        self._pollInterval = pollInterval

        # Offset right after the last complete line consumed
        self._position = 0

    @property
    def position(self) -> int:
        return self._position

    def open(self) -> None:
        "Check the file can be read at all before anything starts"
        checkReadable(self._path)

    def follow(self, stopEvent: threading.Event) -> None:
        self._log.info(f"Monitoring HTTP log file {self._path}")
        while not stopEvent.is_set():
            self.readAvailable()
            stopEvent.wait(self._pollInterval)
        self._log.debug(f"Stopped reading {self._path}")

    def readAvailable(self) -> int:
        "Consume every complete line appended since last time, return how many"
        consumed = 0
        try:
            with open(self._path, mode="rb") as fd:
                size = fd.seek(0, os.SEEK_END)
                if size < self._position:
                    self._log.warning(
                        f"HTTP log file shrunk, reading from the start: {self._path}"
                    )
                    self._position = 0
                fd.seek(self._position)

                while True:
                    line = fd.readline()
                    if not line.endswith(b"\n"):
                        # EOF, or a line still being written, retry it next time
                        break
                    self._position = fd.tell()
                    self._consume(line.decode("utf-8", errors="replace"))
                    consumed += 1
        except FileNotFoundError:
            self._log.error(f"HTTP log file doesn't exist: {self._path}")
        except OSError as e:
            self._log.error(f"HTTP log file can't be read: {self._path} ({e.strerror})")
        return consumed

    def _consume(self, line: str) -> None:
        line = line.rstrip("\r\n")
        if not line.strip():
            return
        try:
            self.tracker.processLogEntry(line)
        except MalformedEntry as e:
            # Best-effort, carry on with the next line
            self._log.warning(f"Malformed log entry: {e}")
