from __future__ import annotations

from dataclasses import dataclass, fields
from pathlib import Path
import tomllib
from typing import Any

from streamgraph_plot.aggregate import MONTH_MS
from streamgraph_plot.curves import DEFAULT_SAMPLES_PER_SEGMENT
from streamgraph_plot.errors import ConfigError
from streamgraph_plot.pick import DEFAULT_MAX_ATTEMPTS
from streamgraph_plot.raster.colors import from_hex
from streamgraph_plot.series import RGB
from streamgraph_plot.view import DEFAULT_MAX_SCALE, DEFAULT_TRANSITION_S


@dataclass(frozen=True)
class ChartConfig:
    width: int = 1500
    height: int = 500
    bucket_width_ms: int = MONTH_MS
    max_scale: float = DEFAULT_MAX_SCALE
    transition_duration_s: float = DEFAULT_TRANSITION_S
    samples_per_segment: int = DEFAULT_SAMPLES_PER_SEGMENT
    color_id_max_attempts: int = DEFAULT_MAX_ATTEMPTS
    offset: str = "wiggle"
    background: RGB = (0, 0, 0)
    selection_dim: float = 0.5

    def __post_init__(self) -> None:
        if self.width <= 0 or self.height <= 0:
            raise ConfigError("width and height must be > 0")
        if self.bucket_width_ms <= 0:
            raise ConfigError("bucket_width_ms must be > 0")
        if self.max_scale < 1.0:
            raise ConfigError("max_scale must be >= 1")
        if self.transition_duration_s < 0:
            raise ConfigError("transition_duration_s must be >= 0")
        if self.samples_per_segment <= 0:
            raise ConfigError("samples_per_segment must be > 0")
        if self.color_id_max_attempts <= 0:
            raise ConfigError("color_id_max_attempts must be > 0")
        if self.offset not in ("wiggle", "zero"):
            raise ConfigError(f"unknown stack offset: {self.offset}")
        if len(self.background) != 3 or any(not 0 <= int(c) <= 255 for c in self.background):
            raise ConfigError("background must be three channels in [0, 255]")
        if not 0.0 <= self.selection_dim <= 1.0:
            raise ConfigError("selection_dim must be in [0, 1]")


_FIELD_TYPES: dict[str, type] = {
    "width": int,
    "height": int,
    "bucket_width_ms": int,
    "max_scale": float,
    "transition_duration_s": float,
    "samples_per_segment": int,
    "color_id_max_attempts": int,
    "offset": str,
    "selection_dim": float,
}


def load_chart_config(path: str | Path) -> ChartConfig:
    config_path = Path(path)
    if not config_path.exists():
        raise ConfigError(f"chart config not found: {config_path}")
    with config_path.open("rb") as f:
        try:
            raw = tomllib.load(f)
        except tomllib.TOMLDecodeError as exc:
            raise ConfigError(f"invalid TOML in {config_path}: {exc}") from exc
    table = raw.get("chart", raw)
    if not isinstance(table, dict):
        raise ConfigError("[chart] must be a table")
    return chart_config_from_mapping(table)


def chart_config_from_mapping(raw: dict[str, Any]) -> ChartConfig:
    known = {f.name for f in fields(ChartConfig)}
    unknown = sorted(set(raw) - known)
    if unknown:
        raise ConfigError(f"unknown chart config fields: {', '.join(unknown)}")
    kwargs: dict[str, Any] = {}
    for name, value in raw.items():
        if name == "background":
            kwargs[name] = _coerce_rgb(value)
            continue
        kwargs[name] = _coerce_scalar(name, value, _FIELD_TYPES[name])
    return ChartConfig(**kwargs)


def _coerce_scalar(name: str, value: Any, kind: type) -> Any:
    if isinstance(value, bool):
        raise ConfigError(f"{name} must be {kind.__name__}, got bool")
    if kind is float and isinstance(value, (int, float)):
        return float(value)
    if not isinstance(value, kind):
        raise ConfigError(f"{name} must be {kind.__name__}, got {type(value).__name__}")
    return value


def _coerce_rgb(value: Any) -> RGB:
    if isinstance(value, str):
        try:
            return from_hex(value)
        except ValueError as exc:
            raise ConfigError(str(exc)) from exc
    if not isinstance(value, list) or len(value) != 3 or not all(isinstance(c, int) for c in value):
        raise ConfigError("background must be a hex string or a list of three integers")
    return (value[0], value[1], value[2])
