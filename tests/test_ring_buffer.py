import threading
import unittest
from datetime import datetime, timedelta, timezone

from logflow.logs.buffer import RingBuffer
from logflow.types import LogEntry, LogLevel


BASE = datetime(2024, 1, 1, tzinfo=timezone.utc)


def make_entry(n, level=LogLevel.INFO, content=None, source="svc"):
    text = content if content is not None else f"line {n}"
    return LogEntry(
        timestamp=BASE + timedelta(seconds=n),
        source=source,
        level=level,
        content=text,
        raw=text,
    )


class TestRingBuffer(unittest.TestCase):
    def test_partial_fill_keeps_order(self):
        buf = RingBuffer(5)
        for n in range(3):
            buf.add(make_entry(n))
        self.assertEqual([e.content for e in buf.get_all()], ["line 0", "line 1", "line 2"])
        self.assertEqual(buf.count(), 3)

    def test_overwrites_oldest_when_full(self):
        buf = RingBuffer(3)
        for n in range(5):
            buf.add(make_entry(n))
        self.assertEqual([e.content for e in buf.get_all()], ["line 2", "line 3", "line 4"])
        self.assertEqual(len(buf), 3)

    def test_capacity_one(self):
        buf = RingBuffer(1)
        buf.add(make_entry(0))
        buf.add(make_entry(1))
        self.assertEqual([e.content for e in buf.get_all()], ["line 1"])

    def test_rejects_non_positive_capacity(self):
        with self.assertRaises(ValueError):
            RingBuffer(0)

    def test_get_recent(self):
        buf = RingBuffer(10)
        for n in range(4):
            buf.add(make_entry(n))
        self.assertEqual([e.content for e in buf.get_recent(2)], ["line 2", "line 3"])
        self.assertEqual(len(buf.get_recent(50)), 4)
        self.assertEqual(buf.get_recent(0), [])

    def test_filter_by_floor(self):
        buf = RingBuffer(10)
        buf.add(make_entry(0, LogLevel.DEBUG))
        buf.add(make_entry(1, LogLevel.INFO))
        buf.add(make_entry(2, LogLevel.WARN))
        buf.add(make_entry(3, LogLevel.ERROR))
        self.assertEqual(len(buf.filter(LogLevel.DEBUG)), 4)
        self.assertEqual([e.level for e in buf.filter(LogLevel.WARN)], [LogLevel.WARN, LogLevel.ERROR])
        self.assertEqual([e.level for e in buf.filter(LogLevel.ERROR)], [LogLevel.ERROR])

    def test_search_is_case_insensitive_over_content_and_raw(self):
        buf = RingBuffer(10)
        buf.add(make_entry(0, content="User Created"))
        buf.add(make_entry(1, content="nothing here"))
        buf.add(
            LogEntry(
                timestamp=BASE,
                source="svc",
                level=LogLevel.INFO,
                content="short",
                raw='{"msg": "short", "user": "bob"}',
            )
        )
        self.assertEqual(len(buf.search("user")), 2)
        self.assertEqual(len(buf.search("")), 3)

    def test_clear_resets_history(self):
        buf = RingBuffer(3)
        for n in range(5):
            buf.add(make_entry(n))
        buf.clear()
        self.assertEqual(buf.get_all(), [])
        buf.add(make_entry(9))
        self.assertEqual([e.content for e in buf.get_all()], ["line 9"])

    def test_returned_list_is_a_copy(self):
        buf = RingBuffer(3)
        buf.add(make_entry(0))
        snapshot = buf.get_all()
        snapshot.clear()
        self.assertEqual(buf.count(), 1)

    def test_concurrent_reader_sees_consistent_snapshots(self):
        buf = RingBuffer(50)
        total = 2000
        problems = []
        done = threading.Event()

        def _write():
            for n in range(total):
                buf.add(make_entry(n))
            done.set()

        def _read():
            while not done.is_set():
                snapshot = buf.get_all()
                if len(snapshot) > 50:
                    problems.append("too long")
                stamps = [entry.timestamp for entry in snapshot]
                if stamps != sorted(stamps):
                    problems.append("out of order")

        writer = threading.Thread(target=_write)
        readers = [threading.Thread(target=_read) for _ in range(3)]
        for t in readers:
            t.start()
        writer.start()
        writer.join()
        for t in readers:
            t.join()

        self.assertEqual(problems, [])
        self.assertEqual(buf.get_all()[-1].content, f"line {total - 1}")


if __name__ == "__main__":
    unittest.main()
