from __future__ import annotations

import math

from streamgraph_plot.series import RGB


# Cubehelix basis, as used by d3-color.
_A = -0.14861
_B = 1.78277
_C = -0.29227
_D = -0.90649
_E = 1.97294


def cubehelix_rgb(h: float, s: float, l: float) -> RGB:
    hr = (h + 120.0) * math.pi / 180.0
    amp = s * l * (1.0 - l)
    cosh = math.cos(hr)
    sinh = math.sin(hr)
    r = 255.0 * (l + amp * (_A * cosh + _B * sinh))
    g = 255.0 * (l + amp * (_C * cosh + _D * sinh))
    b = 255.0 * (l + amp * (_E * cosh))
    return (_channel(r), _channel(g), _channel(b))


def interpolate_rainbow(t: float) -> RGB:
    """Cyclical cubehelix rainbow; `t` wraps into [0, 1)."""
    if not math.isfinite(t):
        t = 0.0
    t -= math.floor(t)
    ts = abs(t - 0.5)
    return cubehelix_rgb(360.0 * t - 100.0, 1.5 - 1.5 * ts, 0.8 - 0.9 * ts)


def first_seen_colors(first_seen: dict[str, int]) -> dict[str, RGB]:
    """Display color per key from when it was first seen across the whole range."""
    if not first_seen:
        return {}
    lo = min(first_seen.values())
    hi = max(first_seen.values())
    span = hi - lo
    out: dict[str, RGB] = {}
    for key, ts in first_seen.items():
        t = 0.0 if span == 0 else (ts - lo) / span
        out[key] = interpolate_rainbow(t)
    return out


def mix(color: RGB, other: RGB, t: float) -> RGB:
    t = min(1.0, max(0.0, t))
    return tuple(_channel((1.0 - t) * c + t * o) for c, o in zip(color, other, strict=True))  # type: ignore[return-value]


def to_hex(color: RGB) -> str:
    return "#" + "".join(f"{max(0, min(255, int(c))):02x}" for c in color[:3])


def from_hex(value: str) -> RGB:
    raw = value.strip().lstrip("#")
    if len(raw) == 3:
        raw = "".join(ch * 2 for ch in raw)
    if len(raw) != 6:
        raise ValueError(f"invalid hex color: {value!r}")
    return (int(raw[0:2], 16), int(raw[2:4], 16), int(raw[4:6], 16))


def pack_rgb(color: RGB) -> int:
    return (int(color[0]) << 16) | (int(color[1]) << 8) | int(color[2])


def unpack_rgb(value: int) -> RGB:
    return ((value >> 16) & 0xFF, (value >> 8) & 0xFF, value & 0xFF)


def _channel(value: float) -> int:
    return max(0, min(255, int(round(value))))
