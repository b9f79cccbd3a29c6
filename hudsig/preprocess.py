from __future__ import annotations
from enum import Enum
from typing import Optional

import numpy as np

from .config import ColorRules, SupplyConfig
from .roi import FrameLike, Roi, load_color

class MaskRule(str, Enum):
    GREEN = "green"
    WHITE = "white"

def _channels(bgr: np.ndarray):
    b = bgr[..., 0].astype(np.int16)
    g = bgr[..., 1].astype(np.int16)
    r = bgr[..., 2].astype(np.int16)
    return r, g, b

def green_mask(bgr: np.ndarray, rules: Optional[ColorRules] = None) -> np.ndarray:
    rules = rules or ColorRules()
    r, g, b = _channels(bgr)
    on = (g > rules.green_min) & (g - r > rules.green_margin) & (g - b > rules.green_margin)
    return on.astype(np.uint8) * 255

def white_mask(bgr: np.ndarray, rules: Optional[ColorRules] = None) -> np.ndarray:
    rules = rules or ColorRules()
    r, g, b = _channels(bgr)
    avg = (r + g + b) / 3.0
    spread = np.maximum(np.maximum(r, g), b) - np.minimum(np.minimum(r, g), b)
    on = (avg > rules.white_min) & (spread < rules.white_spread)
    # green wins, so the two masks never overlap
    on &= green_mask(bgr, rules) == 0
    return on.astype(np.uint8) * 255

_RULES = {
    MaskRule.GREEN: green_mask,
    MaskRule.WHITE: white_mask,
}

def color_mask(bgr: np.ndarray, rule, rules: Optional[ColorRules] = None) -> np.ndarray:
    return _RULES[MaskRule(rule)](bgr, rules)

def load_mask(frame: FrameLike, roi: Optional[Roi], rule,
              rules: Optional[ColorRules] = None) -> np.ndarray:
    return color_mask(load_color(frame, roi), rule, rules)

def binarize_threshold(gray: np.ndarray, cfg: Optional[SupplyConfig] = None) -> float:
    cfg = cfg or SupplyConfig()
    g = gray.astype(np.float64)
    thr = float(g.mean()) + cfg.bin_k * float(g.std())
    return min(max(thr, float(cfg.bin_lo)), float(cfg.bin_hi))

def binarize(gray: np.ndarray, cfg: Optional[SupplyConfig] = None) -> np.ndarray:
    """Adaptive binarization: ``pixel >= clamp(mean + k*std, lo, hi)`` maps to 255."""
    thr = binarize_threshold(gray, cfg)
    return np.where(gray.astype(np.float64) >= thr, 255, 0).astype(np.uint8)

def count_on(mask: np.ndarray) -> int:
    return int(np.count_nonzero(mask))
