from __future__ import annotations

import contextlib
import importlib.util
import io
import json
from pathlib import Path
import tempfile
import unittest

from PIL import Image


HOUR_MS = 3_600_000


def _load_cli():
    path = Path(__file__).resolve().parents[1] / "main.py"
    spec = importlib.util.spec_from_file_location("streamgraph_cli", path)
    assert spec is not None and spec.loader is not None
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


def _write_events(path: Path) -> None:
    rows = []
    for hour in range(4):
        rows.append({"artistName": "A", "msPlayed": 100 + hour, "ts": hour * HOUR_MS})
        rows.append({"artistName": "B", "msPlayed": 50, "ts": hour * HOUR_MS + 10})
    path.write_text(json.dumps(rows), encoding="utf-8")


class MainCliTests(unittest.TestCase):
    def setUp(self) -> None:
        self.cli = _load_cli()
        self._td = tempfile.TemporaryDirectory()
        self.root = Path(self._td.name)
        self.events = self.root / "events.json"
        _write_events(self.events)
        self.fields = ["--key", "artistName", "--weight", "msPlayed", "--timestamp", "ts", "--bucket-ms", str(HOUR_MS)]

    def tearDown(self) -> None:
        self._td.cleanup()

    def test_summary_prints_totals(self) -> None:
        out = io.StringIO()
        with contextlib.redirect_stdout(out):
            self.cli.main(["summary", str(self.events), *self.fields])
        payload = json.loads(out.getvalue())
        self.assertEqual(payload["bucket_count"], 4)
        self.assertEqual(payload["totals"], {"A": 406.0, "B": 200.0})
        self.assertEqual(set(payload["keys"]), {"A", "B"})

    def test_render_writes_png(self) -> None:
        config = self.root / "chart.toml"
        config.write_text("[chart]\nwidth = 160\nheight = 80\ntransition_duration_s = 0.5\n", encoding="utf-8")
        png = self.root / "nested" / "chart.png"
        with contextlib.redirect_stdout(io.StringIO()):
            self.cli.main(
                [
                    "render",
                    str(self.events),
                    str(png),
                    "--config",
                    str(config),
                    "--zoom",
                    "40",
                    "20",
                    "80",
                    "40",
                    "--select",
                    "A",
                    "--seed",
                    "3",
                    *self.fields,
                ]
            )
        with Image.open(png) as image:
            self.assertEqual(image.size, (160, 80))

    def test_bad_input_exits(self) -> None:
        bad = self.root / "bad.json"
        bad.write_text(json.dumps({"not": "a list"}), encoding="utf-8")
        with contextlib.redirect_stderr(io.StringIO()):
            with self.assertRaises(SystemExit):
                self.cli.main(["summary", str(bad)])
            with self.assertRaises(SystemExit):
                self.cli.main(["summary", str(self.events)])
            with self.assertRaises(SystemExit):
                self.cli.main(["render", str(self.events), str(self.root / "x.png"), "--select", "Z", *self.fields])


if __name__ == "__main__":
    unittest.main()
