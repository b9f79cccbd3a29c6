from __future__ import annotations
from typing import List

import numpy as np
import cv2

from .roi import Roi

def extract_components(mask: np.ndarray) -> List[Roi]:
    """Bounding boxes of the 4-connected foreground regions of ``mask``.

    Every component is returned, however small; size filtering and
    left-to-right ordering are up to the caller.
    """
    fg = (mask > 0).astype(np.uint8)
    if not fg.any():
        return []
    n, _, stats, _ = cv2.connectedComponentsWithStats(fg, connectivity=4)
    boxes: List[Roi] = []
    for label in range(1, n):  # 0 is background
        x, y, w, h = (int(v) for v in stats[label, :4])
        boxes.append(Roi(x, y, w, h))
    return boxes

def filter_boxes(boxes: List[Roi], min_w: int = 2, min_h: int = 6) -> List[Roi]:
    return sorted((b for b in boxes if b.w >= min_w and b.h >= min_h), key=lambda b: b.x)
