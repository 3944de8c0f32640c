import unittest
from datetime import datetime, timezone

from logflow.logs.parser import classify_line, parse_level, parse_structured, parse_timestamp
from logflow.types import LogLevel


NOW = datetime(2030, 1, 1, tzinfo=timezone.utc)


class TestParseLevel(unittest.TestCase):
    def test_substring_scan_is_case_insensitive(self):
        self.assertEqual(parse_level("something Error happened"), LogLevel.ERROR)
        self.assertEqual(parse_level("[warning] disk at 91%"), LogLevel.WARN)
        self.assertEqual(parse_level("dbg: cache miss"), LogLevel.DEBUG)
        self.assertEqual(parse_level("Information only"), LogLevel.INFO)

    def test_error_beats_lower_severities_on_the_same_line(self):
        self.assertEqual(parse_level("DEBUG retry after ERROR"), LogLevel.ERROR)
        self.assertEqual(parse_level("info: warn threshold reached"), LogLevel.WARN)

    def test_defaults_to_info(self):
        self.assertEqual(parse_level("server listening on :8080"), LogLevel.INFO)
        self.assertEqual(parse_level(""), LogLevel.INFO)


class TestParseTimestamp(unittest.TestCase):
    def test_rfc3339_with_nanoseconds(self):
        ts = parse_timestamp("2024-05-06T07:08:09.123456789Z")
        self.assertEqual(ts, datetime(2024, 5, 6, 7, 8, 9, 123456, tzinfo=timezone.utc))

    def test_naive_layout_is_utc(self):
        ts = parse_timestamp("2024-05-06 07:08:09")
        self.assertEqual(ts, datetime(2024, 5, 6, 7, 8, 9, tzinfo=timezone.utc))

    def test_garbage_is_none(self):
        self.assertIsNone(parse_timestamp("yesterday"))


class TestClassifyLine(unittest.TestCase):
    def test_plain_line(self):
        entry = classify_line("WARNING: disk usage high", "api", now=NOW)
        self.assertEqual(entry.level, LogLevel.WARN)
        self.assertEqual(entry.content, "WARNING: disk usage high")
        self.assertEqual(entry.raw, "WARNING: disk usage high")
        self.assertEqual(entry.source, "api")
        self.assertEqual(entry.timestamp, NOW)
        self.assertEqual(entry.metadata, {})

    def test_plain_line_with_embedded_timestamp(self):
        entry = classify_line("2024-01-02 03:04:05 ERROR boom", "db", now=NOW)
        self.assertEqual(entry.level, LogLevel.ERROR)
        self.assertEqual(entry.timestamp, datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc))
        self.assertEqual(entry.content, "2024-01-02 03:04:05 ERROR boom")

    def test_json_line_aliases(self):
        line = '{"ts": "2024-01-02T03:04:05Z", "msg": "user created", "severity": "warning", "user_id": 7}'
        entry = classify_line(line, "users", now=NOW)
        self.assertEqual(entry.content, "user created")
        self.assertEqual(entry.level, LogLevel.WARN)
        self.assertEqual(entry.timestamp, datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc))
        self.assertEqual(entry.metadata, {"user_id": 7})
        self.assertEqual(entry.raw, line)

    def test_json_level_field_overrides_line_scan(self):
        entry = classify_line('{"message": "ERROR budget ok", "level": "debug"}', "svc", now=NOW)
        self.assertEqual(entry.level, LogLevel.DEBUG)

    def test_json_without_level_field_scans_line(self):
        entry = classify_line('{"message": "request failed", "kind": "error"}', "svc", now=NOW)
        self.assertEqual(entry.level, LogLevel.ERROR)
        self.assertEqual(entry.content, "request failed")

    def test_unparseable_json_timestamp_stays_in_metadata(self):
        entry = classify_line('{"time": "soon", "msg": "hi"}', "svc", now=NOW)
        self.assertEqual(entry.timestamp, NOW)
        self.assertEqual(entry.metadata, {"time": "soon"})

    def test_malformed_json_falls_back_to_plain(self):
        line = '{"msg": "unterminated'
        entry = classify_line(line, "svc", now=NOW)
        self.assertEqual(entry.content, line)
        self.assertEqual(entry.level, LogLevel.INFO)

    def test_json_array_is_plain_text(self):
        self.assertEqual(parse_structured("[1, 2, 3]"), {})

    def test_empty_source_rejected(self):
        with self.assertRaises(ValueError):
            classify_line("hello", "")


if __name__ == "__main__":
    unittest.main()
