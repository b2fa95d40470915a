import threading
from contextlib import contextmanager
from typing import Iterator


class ReadWriteLock:
    """
    Many concurrent readers or one writer. Waiting writers block new readers so
    a steady stream of reports can't starve ingestion. Not reentrant.
    """

    def __init__(self):
        self._cond = threading.Condition(threading.Lock())
        self._readers: int = 0
        self._writing = False
        self._waitingWriters: int = 0

    def acquireRead(self) -> None:
        with self._cond:
            while self._writing or self._waitingWriters:
                self._cond.wait()
            self._readers += 1

    def releaseRead(self) -> None:
        with self._cond:
            if self._readers <= 0:
                raise RuntimeError("Read lock released more times than acquired")
            self._readers -= 1
            if self._readers == 0:
                self._cond.notify_all()

    def acquireWrite(self) -> None:
        with self._cond:
            self._waitingWriters += 1
            try:
                while self._writing or self._readers:
                    self._cond.wait()
            finally:
                self._waitingWriters -= 1
            self._writing = True

    def releaseWrite(self) -> None:
        with self._cond:
            if not self._writing:
                raise RuntimeError("Write lock released while not held")
            self._writing = False
            self._cond.notify_all()

    @contextmanager
    def reading(self) -> Iterator[None]:
        self.acquireRead()
        try:
            yield
        finally:
            self.releaseRead()

    @contextmanager
    def writing(self) -> Iterator[None]:
        self.acquireWrite()
        try:
            yield
        finally:
            self.releaseWrite()
