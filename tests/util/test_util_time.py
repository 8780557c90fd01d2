import unittest
from datetime import datetime, timezone

from gdrivesync.util.time import format_ms, now_ms, parse_rfc3339, rfc3339_to_ms, to_epoch_ms


class TestUtilTime(unittest.TestCase):
    def test_now_ms_is_epoch_milliseconds(self) -> None:
        # After 2020-01-01 and not in microseconds.
        self.assertGreater(now_ms(), 1_577_836_800_000)
        self.assertLess(now_ms(), 10_000_000_000_000)

    def test_parse_rfc3339_z(self) -> None:
        dt = parse_rfc3339("2025-01-01T12:34:56Z")
        self.assertEqual(dt, datetime(2025, 1, 1, 12, 34, 56, tzinfo=timezone.utc))

    def test_parse_rfc3339_offset_converts_to_utc(self) -> None:
        dt = parse_rfc3339("2025-01-01T12:34:56+09:00")
        self.assertEqual(dt.tzinfo, timezone.utc)
        # 12:34:56 JST == 03:34:56 UTC
        self.assertEqual(dt, datetime(2025, 1, 1, 3, 34, 56, tzinfo=timezone.utc))

    def test_parse_rfc3339_rejects_naive(self) -> None:
        with self.assertRaises(ValueError):
            parse_rfc3339("2025-01-01T12:34:56")

    def test_to_epoch_ms_rejects_naive(self) -> None:
        with self.assertRaises(ValueError):
            to_epoch_ms(datetime(2025, 1, 1))

    def test_rfc3339_to_ms_keeps_milliseconds(self) -> None:
        self.assertEqual(rfc3339_to_ms("2025-01-01T00:00:00.123Z"), 1_735_689_600_123)

    def test_format_ms(self) -> None:
        self.assertEqual(format_ms(1_735_689_600_123), "2025-01-01T00:00:00.123Z")


if __name__ == "__main__":
    unittest.main()
