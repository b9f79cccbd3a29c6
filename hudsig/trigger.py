from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Iterable, List, Optional

import numpy as np

from .roi import FrameLike, Roi, load_gray, mean_abs_diff

@dataclass
class DiffHit:
    t: float
    frame: Any
    score: float

class DiffTrigger:
    """Fires when a ROI differs enough from the last *hit* frame.

    The reference only moves on a hit, so a slow drift still fires once the
    accumulated change crosses the threshold. The first frame never fires.
    Frames must be fed in timestamp order.
    """

    def __init__(self, threshold: float = 0.08):
        self.threshold = threshold
        self.ref: Optional[np.ndarray] = None

    def reset(self) -> None:
        self.ref = None

    def update(self, t: float, frame: Any, gray: np.ndarray) -> Optional[DiffHit]:
        if self.ref is None:
            self.ref = gray
            return None
        score = mean_abs_diff(self.ref, gray)
        if score >= self.threshold:
            self.ref = gray
            return DiffHit(t=t, frame=frame, score=score)
        return None

def detect_roi_changes(frames: Iterable, roi: Roi, threshold: float = 0.08) -> List[DiffHit]:
    """Diff hits over ``frames`` given as ``(t, image_or_path)`` pairs."""
    frames = list(frames)
    hits: List[DiffHit] = []
    if len(frames) < 2:
        return hits
    trig = DiffTrigger(threshold)
    for t, frame in frames:
        hit = trig.update(t, frame, load_gray(frame, roi))
        if hit is not None:
            hits.append(hit)
    return hits
