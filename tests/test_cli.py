from __future__ import annotations

import contextlib
import io
import json
from pathlib import Path
import tempfile
import unittest

import main as cli


class CliTests(unittest.TestCase):
    def _write(self, root: Path, name: str, payload: object) -> Path:
        path = root / name
        path.write_text(json.dumps(payload), encoding="utf-8")
        return path

    def test_render_prints_snapshot_json(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            root = Path(td)
            config = self._write(root, "graph.json", {"chart_type": "bar", "period": {"type": "rolling_window", "hours": 3}})
            history = self._write(
                root,
                "history.json",
                [
                    {"last_changed": "2024-05-01T09:30:00Z", "state": "2"},
                    {"last_changed": "2024-05-01T11:30:00Z", "state": "6"},
                ],
            )
            out = io.StringIO()
            with contextlib.redirect_stdout(out):
                code = cli.main(["render", str(config), str(history), "--now", "2024-05-01T12:00:00Z"])
        self.assertEqual(code, 0)
        data = json.loads(out.getvalue())
        self.assertEqual([p["value"] for p in data["points"]], [2.0, 2.0, 6.0])
        self.assertEqual(data["geometry"]["kind"], "bar")
        self.assertEqual(data["bounds"], {"min": 2.0, "max": 6.0})

    def test_render_with_current_value(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            root = Path(td)
            config = self._write(root, "graph.json", {"period": {"type": "rolling_window", "hours": 2}})
            history = self._write(root, "history.json", [])
            out = io.StringIO()
            with contextlib.redirect_stdout(out):
                code = cli.main(
                    ["render", str(config), str(history), "--now", "2024-05-01T12:00:00Z", "--current", "4"]
                )
        self.assertEqual(code, 0)
        self.assertEqual([p["value"] for p in json.loads(out.getvalue())["points"]], [0.0, 4.0])

    def test_render_writes_null_for_non_numeric_buckets(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            root = Path(td)
            config = self._write(root, "graph.json", {"period": {"type": "rolling_window", "hours": 2}})
            history = self._write(root, "history.json", [{"last_changed": "2024-05-01T10:30:00Z", "state": "unavailable"}])
            out = io.StringIO()
            with contextlib.redirect_stdout(out):
                cli.main(["render", str(config), str(history), "--now", "2024-05-01T12:00:00Z"])
        self.assertNotIn("NaN", out.getvalue())
        data = json.loads(out.getvalue())
        self.assertIsNone(data["points"][0]["value"])

    def test_validate(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            root = Path(td)
            good = self._write(root, "good.json", {"chart_type": "equalizer"})
            bad = self._write(root, "bad.json", {"chart_type": "pie"})
            out, err = io.StringIO(), io.StringIO()
            with contextlib.redirect_stdout(out), contextlib.redirect_stderr(err):
                self.assertEqual(cli.main(["validate", str(good)]), 0)
                self.assertEqual(cli.main(["validate", str(bad)]), 1)
        self.assertIn("chart_type=equalizer", out.getvalue())
        self.assertIn("pie", err.getvalue())

    def test_render_missing_history_file(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            root = Path(td)
            config = self._write(root, "graph.json", {})
            err = io.StringIO()
            with contextlib.redirect_stderr(err):
                code = cli.main(["render", str(config), str(root / "missing.json")])
        self.assertEqual(code, 1)
        self.assertTrue(err.getvalue().startswith("error:"))


if __name__ == "__main__":
    unittest.main()
