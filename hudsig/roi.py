from __future__ import annotations
from dataclasses import dataclass
from typing import Optional, Tuple, Union
from pathlib import Path

import numpy as np
import cv2

from .errors import DecodeFailed, OutOfBounds, SizeMismatch

FrameLike = Union[str, Path, np.ndarray]

@dataclass(frozen=True)
class Roi:
    x: int
    y: int
    w: int
    h: int

    @classmethod
    def from_dict(cls, d: dict) -> "Roi":
        return cls(x=int(d["x"]), y=int(d["y"]), w=int(d["w"]), h=int(d["h"]))

    def to_dict(self) -> dict:
        return {"x": self.x, "y": self.y, "w": self.w, "h": self.h}

    def shifted(self, dx: int, dy: int) -> "Roi":
        return Roi(self.x + dx, self.y + dy, self.w, self.h)

def clamp_roi(roi: Roi, frame_w: int, frame_h: int) -> Optional[Roi]:
    """Intersect ``roi`` with the frame; None if nothing is left."""
    x0 = max(0, roi.x)
    y0 = max(0, roi.y)
    x1 = min(frame_w, roi.x + roi.w)
    y1 = min(frame_h, roi.y + roi.h)
    if x1 <= x0 or y1 <= y0:
        return None
    return Roi(x0, y0, x1 - x0, y1 - y0)

def read_frame(path: Union[str, Path]) -> np.ndarray:
    img = cv2.imread(str(path), cv2.IMREAD_COLOR)
    if img is None:
        raise DecodeFailed(f"Cannot read frame image: {path}")
    return img

def as_image(frame: FrameLike) -> np.ndarray:
    if isinstance(frame, np.ndarray):
        return frame
    return read_frame(frame)

def crop(img: np.ndarray, roi: Optional[Roi]) -> np.ndarray:
    if roi is None:
        return img
    fh, fw = img.shape[:2]
    if roi.w <= 0 or roi.h <= 0 or roi.x < 0 or roi.y < 0 or roi.x + roi.w > fw or roi.y + roi.h > fh:
        raise OutOfBounds(f"ROI {roi} outside frame {fw}x{fh}")
    return img[roi.y:roi.y + roi.h, roi.x:roi.x + roi.w]

def to_gray(bgr: np.ndarray) -> np.ndarray:
    # luminance 0.299R + 0.587G + 0.114B, rounded half up
    if bgr.ndim == 2:
        return bgr.astype(np.uint8, copy=False)
    b = bgr[..., 0].astype(np.float64)
    g = bgr[..., 1].astype(np.float64)
    r = bgr[..., 2].astype(np.float64)
    lum = np.floor(0.299 * r + 0.587 * g + 0.114 * b + 0.5)
    return np.clip(lum, 0, 255).astype(np.uint8)

def resize_gray(gray: np.ndarray, size: Tuple[int, int]) -> np.ndarray:
    """Bilinear resize to ``size`` = (w, h); no-op when already that size."""
    w, h = size
    if gray.shape[1] == w and gray.shape[0] == h:
        return gray
    return cv2.resize(gray, (int(w), int(h)), interpolation=cv2.INTER_LINEAR)

def load_color(frame: FrameLike, roi: Optional[Roi] = None) -> np.ndarray:
    return crop(as_image(frame), roi)

def load_gray(frame: FrameLike, roi: Optional[Roi] = None,
              size: Optional[Tuple[int, int]] = None) -> np.ndarray:
    gray = to_gray(load_color(frame, roi))
    if size is not None:
        gray = resize_gray(gray, size)
    return gray

def check_same_size(a: np.ndarray, b: np.ndarray) -> None:
    if a.shape != b.shape:
        raise SizeMismatch(f"buffer shapes differ: {a.shape} vs {b.shape}")

def mean_abs_diff(a: np.ndarray, b: np.ndarray) -> float:
    """Mean absolute pixel difference normalized to [0, 1]."""
    check_same_size(a, b)
    if a.size == 0:
        return 0.0
    return float(cv2.absdiff(a, b).mean()) / 255.0
