from __future__ import annotations
from dataclasses import dataclass
from typing import Hashable, Iterable, Optional, Tuple

import numpy as np
import cv2

from .errors import TemplateTooLarge
from .roi import check_same_size

MAX_SQ_ERR = 255.0 * 255.0

@dataclass
class Match:
    x: int
    y: int
    score: float

def conf_from_mse(mse: float) -> float:
    return float(min(1.0, max(0.0, 1.0 - mse / MAX_SQ_ERR)))

def mse(a: np.ndarray, b: np.ndarray) -> float:
    check_same_size(a, b)
    d = a.astype(np.float64) - b.astype(np.float64)
    return float(np.mean(d * d))

def similarity(a: np.ndarray, b: np.ndarray) -> float:
    """``1 - MSE/65025`` between two equal-sized gray buffers, clamped to [0, 1]."""
    return conf_from_mse(mse(a, b))

def best_template(image: np.ndarray,
                  templates: Iterable[Tuple[Hashable, np.ndarray]]) -> Tuple[Optional[Hashable], float]:
    """Best fixed-position match of ``image`` among ``(key, template)`` pairs.

    Templates must already share the image size. Ties keep the first key seen,
    so callers pass templates in a fixed (sorted) order.
    """
    best_key = None
    best_conf = -1.0
    for key, tpl in templates:
        c = similarity(image, tpl)
        if c > best_conf:
            best_conf = c
            best_key = key
    if best_key is None:
        return None, 0.0
    return best_key, best_conf

def slide_match(target: np.ndarray, template: np.ndarray) -> Match:
    """Exhaustive sliding-window search of ``template`` over ``target``.

    Every top-left offset with the template fully inside the target is scored;
    the first best offset in row-major order wins.
    """
    th, tw = template.shape[:2]
    H, W = target.shape[:2]
    if th == 0 or tw == 0 or th > H or tw > W:
        raise TemplateTooLarge(f"template {tw}x{th} does not fit target {W}x{H}")
    res = cv2.matchTemplate(target.astype(np.uint8), template.astype(np.uint8), cv2.TM_SQDIFF)
    _, _, min_loc, _ = cv2.minMaxLoc(res)
    x, y = int(min_loc[0]), int(min_loc[1])
    # TM_SQDIFF accumulates in float32; score the winner exactly
    score = similarity(target[y:y + th, x:x + tw], template)
    return Match(x=x, y=y, score=score)
