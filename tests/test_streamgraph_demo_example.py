from __future__ import annotations

import importlib.util
from pathlib import Path
import tempfile
import unittest

from PIL import Image


class StreamgraphDemoExampleTests(unittest.TestCase):
    def test_demo_writes_images(self) -> None:
        path = Path(__file__).resolve().parents[1] / "examples" / "streamgraph_demo.py"
        spec = importlib.util.spec_from_file_location("streamgraph_demo", path)
        assert spec is not None and spec.loader is not None
        module = importlib.util.module_from_spec(spec)
        spec.loader.exec_module(module)

        with tempfile.TemporaryDirectory() as td:
            out_dir = Path(td)
            module.main(out_dir)
            full = Image.open(out_dir / "streamgraph_full.png")
            zoomed = Image.open(out_dir / "streamgraph_zoomed.png")
            self.assertEqual(full.size, (900, 300))
            self.assertEqual(zoomed.size, (900, 300))
            # Both frames should show more than the background color.
            self.assertGreater(len(full.getcolors(maxcolors=1 << 16) or []), 1)
            full.close()
            zoomed.close()


if __name__ == "__main__":
    unittest.main()
