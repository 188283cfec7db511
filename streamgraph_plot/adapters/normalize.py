from __future__ import annotations

from collections.abc import Iterable, Mapping
from decimal import Decimal
import math
from typing import Any

from streamgraph_plot.errors import EventDataError
from streamgraph_plot.series import ListenEvent


try:
    import pandas as pd
except Exception:  # pragma: no cover - optional dependency
    pd = None  # type: ignore[assignment]


def normalize_events(
    data: Any,
    *,
    key: str = "key",
    weight: str = "weight",
    timestamp: str = "timestamp",
) -> list[ListenEvent]:
    """Coerce records into `ListenEvent`s.

    Accepts `ListenEvent`s, mappings with the named fields, or a pandas
    DataFrame with those columns. Datetime timestamps become epoch milliseconds.
    """
    if data is None:
        return []
    if pd is not None and isinstance(data, pd.DataFrame):
        return _from_frame(data, key=key, weight=weight, timestamp=timestamp)
    if isinstance(data, (str, bytes, bytearray)) or not isinstance(data, Iterable):
        raise EventDataError(f"unsupported event input type: {type(data)!r}")

    out: list[ListenEvent] = []
    for i, record in enumerate(data):
        if isinstance(record, ListenEvent):
            out.append(record)
            continue
        if not isinstance(record, Mapping):
            raise EventDataError(f"event record {i} must be a mapping, got {type(record)!r}")
        try:
            raw_key = record[key]
            raw_weight = record[weight]
            raw_ts = record[timestamp]
        except KeyError as exc:
            raise EventDataError(f"event record {i} missing field: {exc.args[0]}") from exc
        out.append(_build_event(i, raw_key, raw_weight, raw_ts))
    return out


def _from_frame(frame: Any, *, key: str, weight: str, timestamp: str) -> list[ListenEvent]:
    for column in (key, weight, timestamp):
        if column not in frame.columns:
            raise EventDataError(f"column not found: {column}")
    stamps = frame[timestamp]
    if pd.api.types.is_datetime64_any_dtype(stamps):
        if getattr(stamps.dt, "tz", None) is not None:
            stamps = stamps.dt.tz_convert("UTC").dt.tz_localize(None)
        stamps = stamps.astype("datetime64[ms]").astype("int64")
    out: list[ListenEvent] = []
    for i, (raw_key, raw_weight, raw_ts) in enumerate(
        zip(frame[key].tolist(), frame[weight].tolist(), stamps.tolist(), strict=True)
    ):
        out.append(_build_event(i, raw_key, raw_weight, raw_ts))
    return out


def _build_event(index: int, raw_key: Any, raw_weight: Any, raw_ts: Any) -> ListenEvent:
    if raw_key is None:
        raise EventDataError(f"event record {index} has no key")
    weight = _coerce_float(raw_weight, index=index, label="weight")
    ts = _coerce_timestamp(raw_ts, index=index)
    try:
        return ListenEvent(key=str(raw_key), weight=weight, timestamp=ts)
    except ValueError as exc:
        raise EventDataError(f"event record {index}: {exc}") from exc


def _coerce_float(raw: Any, *, index: int, label: str) -> float:
    if isinstance(raw, bool):
        raise EventDataError(f"event record {index} {label} must be numeric, got bool")
    if isinstance(raw, Decimal):
        return float(raw)
    try:
        return float(raw)
    except (TypeError, ValueError) as exc:
        raise EventDataError(f"event record {index} {label} is not numeric: {raw!r}") from exc


def _coerce_timestamp(raw: Any, *, index: int) -> int:
    if pd is not None and isinstance(raw, pd.Timestamp):
        return int(raw.value // 1_000_000)
    if hasattr(raw, "timestamp") and callable(raw.timestamp):
        return int(round(raw.timestamp() * 1000))
    value = _coerce_float(raw, index=index, label="timestamp")
    if not math.isfinite(value):
        raise EventDataError(f"event record {index} timestamp is not finite: {raw!r}")
    return int(value)
