from __future__ import annotations

import argparse
import dataclasses
import json
from pathlib import Path
from typing import Any

import pandas as pd

from streamgraph_plot import ChartConfig, StreamgraphChart, StreamgraphError, chart, load_chart_config
from streamgraph_plot.adapters import normalize_events


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(prog="streamgraph")
    sub = parser.add_subparsers(dest="command", required=True)

    render = sub.add_parser("render", help="render an event file to a PNG")
    render.add_argument("events", type=Path)
    render.add_argument("out", type=Path)
    _add_input_arguments(render)
    render.add_argument(
        "--zoom",
        type=float,
        nargs=4,
        metavar=("X", "Y", "W", "H"),
        default=None,
        help="screen rectangle to zoom into before saving",
    )
    render.add_argument("--select", default=None, help="key to highlight")

    summary = sub.add_parser("summary", help="print stack order and per-key totals as JSON")
    summary.add_argument("events", type=Path)
    _add_input_arguments(summary)
    args = parser.parse_args(argv)

    try:
        config = _resolve_config(args.config, args.bucket_ms)
        records = _read_events(args.events)
        sg = chart(config, seed=args.seed)
        sg.load(_select_fields(records, args))
    except (OSError, ValueError, StreamgraphError) as exc:
        parser.error(str(exc))

    if args.command == "render":
        if args.zoom is not None:
            transition = sg.view.gesture_end(tuple(args.zoom), now=0.0)
            sg.tick(transition.duration)
        if args.select is not None:
            try:
                sg.select(args.select)
            except KeyError:
                parser.error(f"unknown key: {args.select}")
        args.out.parent.mkdir(parents=True, exist_ok=True)
        sg.surface.to_image().save(args.out)
        print(f"render complete: keys={len(sg.keys)} buckets={sg.stack.bucket_count} out={args.out}")
        return

    if args.command == "summary":
        print(json.dumps(_summarize(sg), indent=2, sort_keys=True))
        return

    raise RuntimeError(f"unsupported command: {args.command}")


def _add_input_arguments(cmd: argparse.ArgumentParser) -> None:
    cmd.add_argument("--config", type=Path, default=None)
    cmd.add_argument("--bucket-ms", type=int, default=None)
    cmd.add_argument("--key", default="key")
    cmd.add_argument("--weight", default="weight")
    cmd.add_argument("--timestamp", default="timestamp")
    cmd.add_argument("--seed", type=int, default=None)


def _resolve_config(path: Path | None, bucket_ms: int | None) -> ChartConfig:
    config = load_chart_config(path) if path is not None else ChartConfig()
    if bucket_ms is not None:
        config = dataclasses.replace(config, bucket_width_ms=bucket_ms)
    return config


def _read_events(path: Path) -> Any:
    if path.suffix.lower() == ".csv":
        return pd.read_csv(path)
    raw = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(raw, list):
        raise ValueError(f"{path} must hold a JSON array of event records")
    return raw


def _select_fields(records: Any, args: argparse.Namespace) -> Any:
    return normalize_events(records, key=args.key, weight=args.weight, timestamp=args.timestamp)


def _summarize(sg: StreamgraphChart) -> dict[str, Any]:
    lo, hi = sg.stack.extent()
    return {
        "keys": list(sg.stack.order),
        "bucket_count": sg.stack.bucket_count,
        "totals": sg.aggregation.totals(),
        "extent": [lo, hi],
    }


if __name__ == "__main__":
    main()
