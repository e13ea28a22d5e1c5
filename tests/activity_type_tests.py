import unittest

from zonetrack.activity_type import classify_activity, map_sport_code, map_sport_text
from zonetrack.fit_decoder import RawField, RawMessage


def _session(*fields):
    return RawMessage("session", [RawField(name, value) for name, value in fields])


class SportTextTests(unittest.TestCase):
    def test_keywords_in_priority_order(self):
        self.assertEqual(map_sport_text("Hiking"), "Hike")
        self.assertEqual(map_sport_text("walking"), "Walk")
        self.assertEqual(map_sport_text("open_water_swimming"), "Swimming")
        self.assertEqual(map_sport_text("trail running"), "Run")
        self.assertEqual(map_sport_text("strength_training"), "Strength")
        self.assertIsNone(map_sport_text("cycling"))

    def test_hike_beats_walk(self):
        self.assertEqual(map_sport_text("hike and walk"), "Hike")

    def test_codes(self):
        self.assertEqual(map_sport_code(1), "Run")
        self.assertEqual(map_sport_code(5), "Swimming")
        self.assertEqual(map_sport_code(11), "Walk")
        self.assertEqual(map_sport_code(17), "Hike")
        for code in (7, 8, 9):
            self.assertEqual(map_sport_code(code), "Strength")
        self.assertIsNone(map_sport_code(2))


class ClassifyActivityTests(unittest.TestCase):
    def test_text_beats_code(self):
        messages = [_session(("sport", 11), ("sub_sport", "trail running"))]
        self.assertEqual(classify_activity(messages), "Run")

    def test_code_alone(self):
        self.assertEqual(classify_activity([_session(("sport", 11))]), "Walk")

    def test_activity_message_counts(self):
        messages = [RawMessage("activity", [RawField("sport", "swimming")])]
        self.assertEqual(classify_activity(messages), "Swimming")

    def test_sample_messages_are_ignored(self):
        messages = [RawMessage("record", [RawField("sport", "running")])]
        self.assertEqual(classify_activity(messages), "Other")

    def test_default_is_other(self):
        self.assertEqual(classify_activity([]), "Other")
        self.assertEqual(classify_activity([_session(("sport", "cycling"), ("sub_sport", 2))]), "Other")

    def test_first_mapped_message_wins(self):
        messages = [
            _session(("sport", "cycling")),
            _session(("sport", "hiking")),
            _session(("sport", "running")),
        ]
        self.assertEqual(classify_activity(messages), "Hike")


if __name__ == "__main__":
    unittest.main()
