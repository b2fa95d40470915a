import threading
import unittest
from AccessLogMonitor.analyze.rwlock import ReadWriteLock


class TestReadWriteLock(unittest.TestCase):
    "Shared reads, exclusive writes"

    def testReadersShare(self):
        lock = ReadWriteLock()
        bothInside = threading.Barrier(2, timeout=5)

        def read():
            with lock.reading():
                # Would time out if the second reader couldn't get in
                bothInside.wait()

        threads = [threading.Thread(target=read) for _ in range(2)]
        for t in threads:
            t.start()
        for t in threads:
            t.join(5)
        self.assertFalse(bothInside.broken)

    def testWriterExcludesReaders(self):
        lock = ReadWriteLock()
        readDone = threading.Event()

        def read():
            with lock.reading():
                readDone.set()

        with lock.writing():
            reader = threading.Thread(target=read)
            reader.start()
            self.assertFalse(readDone.wait(0.2), "Reader got in while writing")
        self.assertTrue(readDone.wait(5))
        reader.join(5)

    def testWaitingWriterBlocksNewReaders(self):
        lock = ReadWriteLock()
        order = []
        writerWaiting = threading.Event()

        def write():
            writerWaiting.set()
            with lock.writing():
                order.append("write")

        def read():
            with lock.reading():
                order.append("read")

        lock.acquireRead()
        writer = threading.Thread(target=write)
        writer.start()
        writerWaiting.wait(5)
        # Give the writer a chance to queue up behind the held read lock
        while not lock._waitingWriters:
            writer.join(0.01)
        reader = threading.Thread(target=read)
        reader.start()
        reader.join(0.2)
        self.assertEqual([], order)

        lock.releaseRead()
        writer.join(5)
        reader.join(5)
        self.assertEqual(["write", "read"], order)

    def testReleaseWithoutAcquire(self):
        lock = ReadWriteLock()
        with self.assertRaises(RuntimeError):
            lock.releaseRead()
        with self.assertRaises(RuntimeError):
            lock.releaseWrite()
