from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import TypeAlias

import numpy as np
from PIL import Image
import torch


LOGGER = logging.getLogger(__name__)
MAGENTA = torch.tensor([255, 0, 255, 255], dtype=torch.uint8)

TensorLike: TypeAlias = torch.Tensor


@dataclass(frozen=True)
class FullRewrite:
    tensor_h_w_4: TensorLike


WriteOp: TypeAlias = FullRewrite


@dataclass(frozen=True)
class WriteBatch:
    operations: list[WriteOp]


class Surface:
    """RGBA255 render target with atomic write-batch commits and pixel read-back."""

    def __init__(self, height: int, width: int, background: tuple[int, int, int, int] = (0, 0, 0, 255)) -> None:
        if height <= 0 or width <= 0:
            raise ValueError("height and width must be > 0")
        self.height = height
        self.width = width
        self.background = background
        self._revision = 0
        bg = torch.tensor(background, dtype=torch.uint8).view(1, 1, 4)
        self._matrix = bg.expand(height, width, 4).clone()

    @property
    def revision(self) -> int:
        return self._revision

    def read_snapshot(self) -> torch.Tensor:
        return self._matrix.clone()

    def read_pixel(self, x: int, y: int) -> tuple[int, int, int, int] | None:
        if x < 0 or y < 0 or x >= self.width or y >= self.height:
            return None
        r, g, b, a = self._matrix[y, x].tolist()
        return (int(r), int(g), int(b), int(a))

    def unique_colors(self) -> np.ndarray:
        flat = self._matrix[:, :, :3].reshape(-1, 3)
        return torch.unique(flat, dim=0).numpy()

    def to_image(self) -> Image.Image:
        return Image.fromarray(np.ascontiguousarray(self._matrix.numpy()))

    def submit_write_batch(self, batch: WriteBatch) -> int:
        if not batch.operations:
            raise ValueError("write batch must include at least one operation")

        staged = self._matrix.clone()
        offending_pixels = 0
        for op in batch.operations:
            staged, op_offending = self._apply_operation(staged, op)
            offending_pixels += op_offending

        if offending_pixels > 0:
            LOGGER.warning(
                "Surface write batch sanitized invalid RGBA channels; offending_pixels=%d",
                offending_pixels,
            )

        self._matrix = staged
        self._revision += 1
        return self._revision

    def _apply_operation(self, matrix: torch.Tensor, op: WriteOp) -> tuple[torch.Tensor, int]:
        if isinstance(op, FullRewrite):
            return _sanitize_rgba_tensor(op.tensor_h_w_4, (self.height, self.width, 4))
        raise TypeError(f"Unsupported write op: {type(op)!r}")


def _coerce_numeric(value: torch.Tensor, expected_shape: tuple[int, ...], label: str) -> torch.Tensor:
    if not torch.is_tensor(value):
        raise ValueError(f"{label} must be a torch.Tensor")
    if tuple(value.shape) != expected_shape:
        raise ValueError(f"{label} has invalid shape: {tuple(value.shape)} expected {expected_shape}")
    if value.dtype == torch.bool:
        return value.to(torch.float32)
    if value.is_floating_point() or value.dtype in (
        torch.int8,
        torch.int16,
        torch.int32,
        torch.int64,
        torch.uint8,
    ):
        return value.to(torch.float32)
    raise ValueError(f"{label} must be a numeric tensor, got {value.dtype}")


def _sanitize_rgba_tensor(value: torch.Tensor, expected_shape: tuple[int, ...]) -> tuple[torch.Tensor, int]:
    raw = _coerce_numeric(value, expected_shape, "rgba tensor")
    invalid = ~torch.isfinite(raw) | (raw < 0) | (raw > 255)
    pixel_mask = torch.any(invalid, dim=-1)
    invalid_pixels = int(pixel_mask.sum().item())
    clamped = torch.clamp(torch.nan_to_num(raw, nan=0.0), 0, 255).to(torch.uint8)
    if invalid_pixels > 0:
        clamped[pixel_mask] = MAGENTA
    return clamped, invalid_pixels
