import os
import tempfile
import unittest
from datetime import date, datetime, timedelta
from types import SimpleNamespace
from unittest import mock

import fitparse

from zonetrack.analyzer import FitAnalyzer, build_activity_summary
from zonetrack.errors import (
    ActivityImportError,
    EmptyActivityError,
    MalformedFitError,
    SourceUnreadableError,
)
from zonetrack.fit_decoder import RawField, RawMessage, convert_message, decode_fit_file

# A Wednesday
START = datetime(2026, 2, 4, 23, 59, 50)


def _activity_messages():
    messages = [RawMessage("file_id", [RawField("manufacturer", "garmin")])]
    for i, hr in enumerate([110, 130, 150, 170, 185]):
        messages.append(RawMessage("record", [
            RawField("timestamp", START + timedelta(seconds=i * 5)),
            RawField("heart_rate", hr),
            RawField("distance", i * 12.5),
            RawField("enhanced_altitude", 1600.0 + i),
            RawField("position_lat", 477218931),
            RawField("position_long", -1256001418),
            RawField("cadence", 80 + i),
        ]))
    messages.append(RawMessage("session", [RawField("sport", "running")]))
    return messages


def _field(name, value, base_type="uint8"):
    return SimpleNamespace(name=name, value=value, base_type=SimpleNamespace(name=base_type))


class BuildSummaryTests(unittest.TestCase):
    def test_summary_fields(self):
        lookup = mock.Mock(return_value=("Boulder", "US"))
        summary = build_activity_summary("morning.fit", _activity_messages(), lookup)

        self.assertEqual(summary.filename, "morning.fit")
        self.assertEqual(summary.activity_type, "Run")
        self.assertEqual(summary.activity_date, date(2026, 2, 4))
        self.assertEqual(summary.start_time, "2026-02-04T23:59:50+00:00")
        self.assertEqual(summary.week_start, date(2026, 2, 2))
        self.assertEqual(summary.month_start, date(2026, 2, 1))
        self.assertEqual(summary.location, "Boulder, US")
        self.assertAlmostEqual(summary.total_duration, 20.0)
        self.assertAlmostEqual(summary.total_distance, 50.0)
        self.assertAlmostEqual(summary.elevation_gain, 4.0)
        self.assertEqual(len(summary.records), 5)
        self.assertEqual(summary.records[-1].extras, {"cadence": 84.0})
        self.assertAlmostEqual(summary.zones.zone1, 5.0)
        self.assertAlmostEqual(summary.zones.zone5, 0.0)
        lookup.assert_called_once()

    def test_without_geocoder(self):
        summary = build_activity_summary("a.fit", _activity_messages())
        self.assertIsNone(summary.location)

    def test_dict_view(self):
        data = build_activity_summary("a.fit", _activity_messages()).as_dict()
        self.assertEqual(data["total_records"], 5)
        self.assertEqual(data["week_start"], "2026-02-02")
        self.assertNotIn("records", data)

    def test_no_records(self):
        with self.assertRaises(EmptyActivityError):
            build_activity_summary("empty.fit", [RawMessage("session", [RawField("sport", "running")])])


class DecodeTests(unittest.TestCase):
    def test_convert_message_flags_enums(self):
        message = SimpleNamespace(name="record", fields=[
            _field("heart_rate", 150),
            _field("activity_type", "running", base_type="enum"),
        ])
        raw = convert_message(message)
        self.assertEqual(raw.kind, "record")
        self.assertEqual(raw.get("heart_rate"), 150)
        self.assertFalse(raw.fields[0].enum)
        self.assertTrue(raw.fields[1].enum)
        self.assertIsNone(raw.get("power"))

    def test_missing_file_is_unreadable(self):
        with tempfile.TemporaryDirectory() as tmp:
            with self.assertRaises(SourceUnreadableError) as ctx:
                decode_fit_file(os.path.join(tmp, "missing.fit"))
        self.assertIn("Failed to open file", str(ctx.exception))

    @mock.patch("zonetrack.fit_decoder.fitparse.FitFile")
    def test_parse_error_is_malformed(self, fit_file):
        fit_file.side_effect = fitparse.FitParseError("Invalid .FIT File Header")
        with self.assertRaises(MalformedFitError) as ctx:
            decode_fit_file("broken.fit")
        self.assertIn("FIT parse error", str(ctx.exception))

    @mock.patch("zonetrack.fit_decoder.fitparse.FitFile")
    def test_error_mid_stream_returns_nothing(self, fit_file):
        def messages():
            yield SimpleNamespace(name="record", fields=[_field("heart_rate", 120)])
            raise fitparse.FitParseError("CRC mismatch")

        fit_file.return_value.get_messages.return_value = messages()
        with self.assertRaises(MalformedFitError):
            decode_fit_file("truncated.fit")


class FitAnalyzerTests(unittest.TestCase):
    @mock.patch("zonetrack.analyzer.decode_fit_file")
    def test_analyze_file(self, decode):
        decode.return_value = _activity_messages()
        lines = []
        analyzer = FitAnalyzer(output_callback=lines.append, geocode_enabled=False)

        summary = analyzer.analyze_file("/data/runs/morning.fit")

        self.assertEqual(summary.filename, "morning.fit")
        self.assertIsNone(summary.location)
        self.assertEqual(lines, ["Processing: morning.fit... Done."])

    @mock.patch("zonetrack.analyzer.decode_fit_file")
    def test_analyze_folder_continues_after_failure(self, decode):
        def fake_decode(path):
            if path.endswith("bad.fit"):
                raise MalformedFitError("FIT parse error: bad header")
            return _activity_messages()

        decode.side_effect = fake_decode
        lines = []
        analyzer = FitAnalyzer(output_callback=lines.append, geocode_enabled=False)

        with tempfile.TemporaryDirectory() as tmp:
            for name in ("a.fit", "bad.fit", "c.FIT", "notes.txt"):
                open(os.path.join(tmp, name), "wb").close()
            results = analyzer.analyze_folder(tmp)

        self.assertEqual([r.filename for r in results], ["a.fit", "c.FIT"])
        self.assertTrue(any("bad.fit" in line and "Error" in line for line in lines))

    def test_import_errors_share_a_base(self):
        for cls in (SourceUnreadableError, MalformedFitError, EmptyActivityError):
            self.assertTrue(issubclass(cls, ActivityImportError))


if __name__ == "__main__":
    unittest.main()
