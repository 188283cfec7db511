from __future__ import annotations

import numpy as np
import torch

from streamgraph_core.surface import FullRewrite, WriteBatch


def compile_full_rewrite_batch(frame_rgba: np.ndarray) -> WriteBatch:
    _check_rgba(frame_rgba, "frame_rgba")
    tensor = torch.from_numpy(np.ascontiguousarray(frame_rgba))
    return WriteBatch([FullRewrite(tensor)])


def _check_rgba(frame: np.ndarray, label: str) -> None:
    if frame.dtype != np.uint8:
        raise ValueError(f"{label} must be uint8")
    if frame.ndim != 3 or frame.shape[2] != 4:
        raise ValueError(f"{label} must have shape (H, W, 4)")
