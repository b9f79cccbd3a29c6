"""Supply gauge reader ("used/total" digits around a separator glyph).

Per frame the separator is located in the supply strip, glyph boxes are laid
out on both sides of it, and a small exhaustive offset search picks the
placement whose four glyph matches score best. No state is kept between frames.
"""
from __future__ import annotations
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

import numpy as np
from loguru import logger

from .config import SupplyConfig
from .errors import TemplateTooLarge
from .match import best_template, slide_match
from .preprocess import binarize, count_on
from .roi import FrameLike, Roi, crop, load_gray
from .templates import DigitTemplates

@dataclass
class SupplyReading:
    used: Optional[int]
    total: Optional[int]
    conf: float

    @property
    def key(self) -> Tuple[Optional[int], Optional[int]]:
        return (self.used, self.total)

@dataclass
class GlyphRead:
    active: bool
    digit: Optional[int]
    conf: float

@dataclass
class Landmark:
    left: int    # first separator column
    right: int   # one past the last separator column
    top: int     # glyph row top
    score: Optional[float] = None

@dataclass
class Alignment:
    dx: int
    dy: int
    score: float
    used: List[GlyphRead] = field(default_factory=list)
    total: List[GlyphRead] = field(default_factory=list)

def search_offsets(radius: int) -> List[Tuple[int, int]]:
    """All (dx, dy) in [-r, r]^2, nearest to the origin first."""
    offs = [(dx, dy) for dy in range(-radius, radius + 1) for dx in range(-radius, radius + 1)]
    return sorted(offs, key=lambda o: (abs(o[0]) + abs(o[1]), o[1], o[0]))

def locate_landmark(strip_gray: np.ndarray, separator: Optional[np.ndarray], glyph_h: int,
                    cfg: Optional[SupplyConfig] = None) -> Landmark:
    cfg = cfg or SupplyConfig()
    H, W = strip_gray.shape[:2]
    if separator is not None:
        try:
            m = slide_match(strip_gray, separator)
            sh, sw = separator.shape[:2]
            return Landmark(left=m.x, right=m.x + sw, top=m.y + (sh - glyph_h) // 2, score=m.score)
        except TemplateTooLarge as e:
            logger.debug(f"separator search skipped: {e}")
    x = int(W * cfg.separator_fallback)
    return Landmark(left=x, right=x, top=(H - glyph_h) // 2)

def glyph_layout(mark: Landmark, glyph_size: Tuple[int, int],
                 cfg: Optional[SupplyConfig] = None) -> Tuple[List[Roi], List[Roi]]:
    """Strip-local glyph boxes, left to right on each side of the landmark."""
    cfg = cfg or SupplyConfig()
    gw, gh = glyph_size
    n = cfg.glyphs_per_side
    step = gw + cfg.glyph_gap
    used = [Roi(mark.left - (n - k) * step, mark.top, gw, gh) for k in range(n)]
    total = [Roi(mark.right + cfg.glyph_gap + k * step, mark.top, gw, gh) for k in range(n)]
    return used, total

def read_glyph(gray: np.ndarray, templates: DigitTemplates,
               cfg: Optional[SupplyConfig] = None) -> GlyphRead:
    cfg = cfg or SupplyConfig()
    bw = binarize(gray, cfg)
    if count_on(bw) < cfg.min_active_pixels:
        return GlyphRead(active=False, digit=None, conf=cfg.inactive_conf)
    digit, conf = best_template(bw, templates.items)
    if digit is None or conf < cfg.min_digit_conf:
        return GlyphRead(active=True, digit=None, conf=conf)
    return GlyphRead(active=True, digit=int(digit), conf=conf)

def _inside(box: Roi, w: int, h: int) -> bool:
    return box.x >= 0 and box.y >= 0 and box.x + box.w <= w and box.y + box.h <= h

def align_glyphs(strip_gray: np.ndarray, used: Sequence[Roi], total: Sequence[Roi],
                 templates: DigitTemplates, cfg: Optional[SupplyConfig] = None) -> Optional[Alignment]:
    """Pick the joint offset maximizing the summed per-glyph confidence."""
    cfg = cfg or SupplyConfig()
    H, W = strip_gray.shape[:2]
    best: Optional[Alignment] = None
    for dx, dy in search_offsets(cfg.search_radius):
        u = [b.shifted(dx, dy) for b in used]
        t = [b.shifted(dx, dy) for b in total]
        if not all(_inside(b, W, H) for b in u + t):
            continue
        ur = [read_glyph(crop(strip_gray, b), templates, cfg) for b in u]
        tr = [read_glyph(crop(strip_gray, b), templates, cfg) for b in t]
        score = sum(r.conf for r in ur + tr)
        if best is None or score > best.score:
            best = Alignment(dx=dx, dy=dy, score=score, used=ur, total=tr)
    return best

def _side_value(reads_inner_first: Sequence[GlyphRead]) -> Tuple[List[int], float]:
    # blanks outward of the last active glyph are a shorter number, not a miss
    last_active = max((i for i, r in enumerate(reads_inner_first) if r.active), default=-1)
    digits: List[int] = []
    conf = 1.0
    for i, r in enumerate(reads_inner_first):
        if not r.active:
            if last_active < 0 or i < last_active:
                conf = min(conf, r.conf)
            continue
        conf = min(conf, r.conf)
        if r.digit is not None:
            digits.append(r.digit)
    return digits, conf

def _to_number(digits: Sequence[int]) -> Optional[int]:
    if not digits:
        return None
    return int("".join(str(d) for d in digits))

def reading_from_alignment(al: Alignment) -> SupplyReading:
    used_digits, used_conf = _side_value(list(reversed(al.used)))
    total_digits, total_conf = _side_value(al.total)
    used_digits.reverse()
    return SupplyReading(used=_to_number(used_digits), total=_to_number(total_digits),
                         conf=min(used_conf, total_conf))

def read_supply_strip(strip_gray: np.ndarray, templates: DigitTemplates,
                      separator: Optional[np.ndarray] = None,
                      cfg: Optional[SupplyConfig] = None) -> SupplyReading:
    cfg = cfg or SupplyConfig()
    if len(templates) == 0:
        return SupplyReading(used=None, total=None, conf=0.0)
    mark = locate_landmark(strip_gray, separator, templates.size[1], cfg)
    used, total = glyph_layout(mark, templates.size, cfg)
    al = align_glyphs(strip_gray, used, total, templates, cfg)
    if al is None:
        logger.debug("no glyph placement fits inside the supply strip")
        return SupplyReading(used=None, total=None, conf=0.0)
    return reading_from_alignment(al)

def read_supply(frame: FrameLike, strip: Roi, templates: DigitTemplates,
                separator: Optional[np.ndarray] = None,
                cfg: Optional[SupplyConfig] = None) -> SupplyReading:
    return read_supply_strip(load_gray(frame, strip), templates, separator, cfg)
