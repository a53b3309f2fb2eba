from __future__ import annotations

from datetime import datetime, timedelta, timezone
from pathlib import Path
import sys
import unittest

sys.path.insert(0, str(Path(__file__).resolve().parents[1] / "src"))

from discord_mcp.errors import InvalidTimeFormatError
from discord_mcp.resolution.timewindow import (
    DISCORD_EPOCH_MS,
    cursor_to_instant,
    instant_to_cursor,
    parse_boundary,
    scan_cursor,
)


NOW = datetime(2026, 2, 14, 12, 0, tzinfo=timezone.utc)


class ParseBoundaryTests(unittest.TestCase):
    def test_relative_hours_days_minutes(self):
        self.assertEqual(parse_boundary("24h", now=NOW), NOW - timedelta(hours=24))
        self.assertEqual(parse_boundary("7d", now=NOW), NOW - timedelta(days=7))
        self.assertEqual(parse_boundary("90m", now=NOW), NOW - timedelta(minutes=90))

    def test_relative_defaults_to_wall_clock(self):
        before = datetime.now(timezone.utc)
        parsed = parse_boundary("24h")
        after = datetime.now(timezone.utc)

        self.assertGreaterEqual(parsed, before - timedelta(hours=24))
        self.assertLessEqual(parsed, after - timedelta(hours=24))

    def test_iso_instant_with_zulu_suffix(self):
        parsed = parse_boundary("2024-01-01T00:00:00Z")

        self.assertEqual(parsed, datetime(2024, 1, 1, tzinfo=timezone.utc))
        self.assertEqual(parsed.utcoffset(), timedelta(0))

    def test_iso_offset_is_normalized_to_utc(self):
        parsed = parse_boundary("2024-01-01T02:30:00+02:00")

        self.assertEqual(parsed, datetime(2024, 1, 1, 0, 30, tzinfo=timezone.utc))
        self.assertIs(parsed.tzinfo, timezone.utc)

    def test_naive_iso_is_read_as_utc(self):
        self.assertEqual(
            parse_boundary("2024-06-01T08:15:00"),
            datetime(2024, 6, 1, 8, 15, tzinfo=timezone.utc),
        )

    def test_rejects_unrecognized_formats(self):
        for value in ("banana", "", "10w", "h24", "2024-13-01T00:00:00Z", "-5h"):
            with self.subTest(value=value):
                with self.assertRaises(InvalidTimeFormatError) as ctx:
                    parse_boundary(value, now=NOW)
                self.assertIn("ISO 8601", str(ctx.exception))
                self.assertIn('"24h"', str(ctx.exception))

    def test_offset_outside_utc_range_is_rejected(self):
        with self.assertRaises(InvalidTimeFormatError):
            parse_boundary("0001-01-01T00:30:00+01:00")

    def test_earliest_representable_instant_is_accepted(self):
        self.assertEqual(
            parse_boundary("0001-01-01T00:00:00Z"),
            datetime.min.replace(tzinfo=timezone.utc),
        )


class CursorTests(unittest.TestCase):
    def test_platform_epoch_maps_to_zero(self):
        epoch = datetime(2015, 1, 1, tzinfo=timezone.utc)

        self.assertEqual(instant_to_cursor(epoch), 0)
        self.assertEqual(instant_to_cursor(epoch + timedelta(milliseconds=1)), 1 << 22)

    def test_known_snowflake_timestamp(self):
        snowflake = 175928847299117063
        instant = datetime(2016, 4, 30, 11, 18, 25, 796000, tzinfo=timezone.utc)

        self.assertEqual(cursor_to_instant(snowflake), instant)
        self.assertEqual(instant_to_cursor(instant), (snowflake >> 22) << 22)

    def test_large_instants_keep_integer_precision(self):
        instant = datetime(2090, 7, 1, 0, 0, 0, 123000, tzinfo=timezone.utc)
        expected_ms = int((instant - datetime(1970, 1, 1, tzinfo=timezone.utc)) / timedelta(milliseconds=1))

        cursor = instant_to_cursor(instant)

        self.assertIsInstance(cursor, int)
        self.assertGreater(cursor, 2**53)
        self.assertEqual(cursor, (expected_ms - DISCORD_EPOCH_MS) << 22)
        self.assertEqual(str(cursor), str((expected_ms - DISCORD_EPOCH_MS) * 4194304))

    def test_cursor_is_monotonic(self):
        instants = [
            datetime(2014, 6, 1, tzinfo=timezone.utc),
            datetime(2015, 1, 1, tzinfo=timezone.utc),
            datetime(2020, 5, 5, 5, 5, 5, 5000, tzinfo=timezone.utc),
            datetime(2020, 5, 5, 5, 5, 5, 5500, tzinfo=timezone.utc),
            datetime(2024, 1, 1, tzinfo=timezone.utc),
            datetime(2026, 2, 14, 9, 0, 0, 1000, tzinfo=timezone.utc),
        ]

        cursors = [instant_to_cursor(instant) for instant in instants]

        self.assertEqual(cursors, sorted(cursors))

    def test_instants_before_epoch_clamp_to_zero(self):
        self.assertEqual(instant_to_cursor(datetime(2010, 1, 1, tzinfo=timezone.utc)), 0)

    def test_scan_cursor_at_earliest_instant_clamps_to_zero(self):
        self.assertEqual(scan_cursor(datetime.min.replace(tzinfo=timezone.utc)), 0)

    def test_scan_cursor_includes_messages_at_exact_boundary(self):
        since = datetime(2026, 2, 14, 9, 0, tzinfo=timezone.utc)
        created = [
            since - timedelta(seconds=2),
            since - timedelta(milliseconds=1),
            since,
            since + timedelta(milliseconds=1),
            since + timedelta(minutes=5),
        ]
        # Real ids carry worker/sequence bits below the timestamp.
        message_ids = [instant_to_cursor(instant) | 0x1F3 for instant in created]

        cursor = scan_cursor(since)
        fetched = [
            instant
            for instant, message_id in zip(created, message_ids)
            if message_id > cursor
        ]
        kept = [instant for instant in fetched if instant >= since]

        self.assertEqual(kept, created[2:])


if __name__ == "__main__":
    unittest.main()
