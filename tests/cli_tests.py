import io
import os
import tempfile
import unittest
from contextlib import redirect_stdout
from datetime import datetime, timedelta
from unittest import mock

from zonetrack import cli
from zonetrack.analyzer import build_activity_summary
from zonetrack.db import DatabaseManager
from zonetrack.errors import MalformedFitError
from zonetrack.fit_decoder import RawField, RawMessage


def _summary(name):
    start = datetime(2026, 2, 4, 7, 0)
    messages = [
        RawMessage("record", [
            RawField("timestamp", start + timedelta(seconds=i)),
            RawField("heart_rate", 150),
            RawField("distance", i * 4.0),
        ])
        for i in range(4)
    ]
    messages.append(RawMessage("session", [RawField("sport", "running")]))
    return build_activity_summary(name, messages)


class CliTests(unittest.TestCase):
    def setUp(self):
        self.temp_dir = tempfile.TemporaryDirectory()
        self.db_path = os.path.join(self.temp_dir.name, "cli.db")
        env = mock.patch.dict(os.environ, {"ZONETRACK_DATA_DIR": self.temp_dir.name})
        env.start()
        self.addCleanup(env.stop)
        logging_setup = mock.patch("zonetrack.cli.setup_logging")
        logging_setup.start()
        self.addCleanup(logging_setup.stop)

    def tearDown(self):
        self.temp_dir.cleanup()

    def _run(self, *argv):
        out = io.StringIO()
        with redirect_stdout(out):
            code = cli.main(["--db", self.db_path, *argv])
        return code, out.getvalue()

    def test_list_and_show(self):
        activity_id = DatabaseManager(self.db_path).insert_activity(_summary("run.fit"))

        code, out = self._run("list")
        self.assertEqual(code, 0)
        self.assertIn("Run", out)
        self.assertIn("2026-02-04", out)

        csv_path = os.path.join(self.temp_dir.name, "track.csv")
        code, out = self._run("show", str(activity_id), "--csv", csv_path)
        self.assertEqual(code, 0)
        self.assertIn("run.fit", out)
        with open(csv_path) as fh:
            lines = fh.read().splitlines()
        self.assertTrue(lines[0].startswith("timestamp,elapsed_time,heart_rate"))
        self.assertEqual(len(lines), 5)

    def test_week_and_month(self):
        DatabaseManager(self.db_path).insert_activity(_summary("run.fit"))

        code, out = self._run("week", "2026-02-06")
        self.assertEqual(code, 0)
        self.assertIn("Week of 2026-02-02: 1 activity", out)
        self.assertIn("Threshold", out)

        code, out = self._run("month", "2026-02-28")
        self.assertEqual(code, 0)
        self.assertIn("Month of 2026-02-01: 1 activity", out)

    def test_delete_missing_activity_fails(self):
        code, out = self._run("delete", "42")
        self.assertEqual(code, 1)
        self.assertIn("Activity not found: 42", out)

    def test_invalid_log_level_fails(self):
        code, out = self._run("--log-level", "chatty", "list")
        self.assertEqual(code, 1)
        self.assertIn("Invalid configuration", out)

    @mock.patch("zonetrack.cli.FitAnalyzer")
    def test_import_reports_failures(self, analyzer_cls):
        def analyze(path):
            if path.endswith("bad.fit"):
                raise MalformedFitError("FIT parse error: bad header")
            return _summary(os.path.basename(path))

        analyzer_cls.return_value.analyze_file.side_effect = analyze
        good = os.path.join(self.temp_dir.name, "good.fit")
        bad = os.path.join(self.temp_dir.name, "bad.fit")
        for path in (good, bad):
            open(path, "wb").close()

        code, out = self._run("--no-geocode", "import", good, bad)

        self.assertEqual(code, 1)
        self.assertIn("good.fit", out)
        self.assertIn("bad header", out)
        analyzer_cls.assert_called_once_with(geocode_enabled=False)
        self.assertEqual(DatabaseManager(self.db_path).get_count(), 1)


if __name__ == "__main__":
    unittest.main()
