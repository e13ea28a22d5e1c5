import unittest
from datetime import datetime, timedelta, timezone

from zonetrack.aggregator import aggregate_samples
from zonetrack.models import Sample, ZoneTimes
from zonetrack.track import TRACK_COLUMNS, track_frame, zone_percentages

START = datetime(2026, 2, 4, 7, 0, tzinfo=timezone.utc)


class TrackFrameTests(unittest.TestCase):
    def test_frame_from_records(self):
        samples = [
            Sample(timestamp=START, heart_rate=120, extras={"cadence": 80.0}),
            Sample(timestamp=START + timedelta(seconds=1), heart_rate=125, extras={"power": 200.0}),
        ]
        df = track_frame(aggregate_samples(samples).records)

        self.assertEqual(len(df), 2)
        self.assertEqual(list(df.columns), TRACK_COLUMNS + ["cadence", "power"])
        self.assertEqual(df["cadence"].iloc[0], 80.0)
        self.assertTrue(df["cadence"].isna().iloc[1])
        self.assertEqual(df["timestamp"].iloc[0], START)

    def test_extras_named_like_core_columns_get_prefixed(self):
        # FIT record messages carry a device "zone" field that lands in extras
        samples = [Sample(timestamp=START, heart_rate=150, extras={"zone": 3.0, "cadence": 82.0})]
        df = track_frame(aggregate_samples(samples).records)

        self.assertEqual(list(df.columns), TRACK_COLUMNS + ["extra_zone", "cadence"])
        self.assertEqual(df["zone"].iloc[0], "zone3")
        self.assertEqual(df["extra_zone"].iloc[0], 3.0)

    def test_frame_from_replayed_dicts(self):
        rows = [{
            "timestamp": START.isoformat(),
            "elapsed_time": 0.0,
            "heart_rate": 130,
            "zone": "zone2",
            "extras": {},
        }]
        df = track_frame(rows)
        self.assertEqual(df["heart_rate"].iloc[0], 130)
        self.assertTrue(df["altitude"].isna().iloc[0])

    def test_empty(self):
        df = track_frame([])
        self.assertTrue(df.empty)
        self.assertEqual(list(df.columns), TRACK_COLUMNS)


class ZonePercentageTests(unittest.TestCase):
    def test_shares(self):
        shares = zone_percentages(ZoneTimes(zone1=30.0, zone2=60.0, zone3=10.0))
        self.assertEqual(shares, {"zone1": 30.0, "zone2": 60.0, "zone3": 10.0, "zone4": 0.0, "zone5": 0.0})

    def test_no_zone_time(self):
        self.assertEqual(set(zone_percentages(ZoneTimes()).values()), {0.0})


if __name__ == "__main__":
    unittest.main()
