from __future__ import annotations
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple, Union

import numpy as np
import cv2
from loguru import logger

from .components import extract_components, filter_boxes
from .config import ColorRules
from .decode import Frame
from .errors import CalibrationError, TemplateTooLarge
from .match import slide_match
from .preprocess import MaskRule, green_mask, load_mask, white_mask
from .profile import SupplyRoi
from .roi import FrameLike, Roi, load_color, load_gray, resize_gray

MIN_GLYPH_W = 10
MIN_GLYPH_H = 14
BOX_GAP = 2

def column_clusters(mask: np.ndarray, min_count: int = 3) -> List[Tuple[int, int]]:
    """Runs of adjacent columns holding at least ``min_count`` foreground pixels."""
    on = np.count_nonzero(mask, axis=0) >= min_count
    clusters: List[Tuple[int, int]] = []
    start = -1
    for x, v in enumerate(on):
        if v and start < 0:
            start = x
        elif not v and start >= 0:
            clusters.append((start, x - 1))
            start = -1
    if start >= 0:
        clusters.append((start, len(on) - 1))
    return clusters

def cluster_bbox(mask: np.ndarray, a: int, b: int) -> Optional[Roi]:
    rows = np.nonzero(np.any(mask[:, a:b + 1] > 0, axis=1))[0]
    if rows.size == 0:
        return None
    return Roi(a, int(rows[0]), b - a + 1, int(rows[-1] - rows[0] + 1))

def _cluster_boxes(mask: np.ndarray) -> List[Roi]:
    boxes = [cluster_bbox(mask, a, b) for a, b in column_clusters(mask)]
    return sorted((b for b in boxes if b is not None), key=lambda b: b.x)

def _pad_left(boxes: List[Roi], n: int) -> List[Roi]:
    boxes = list(boxes)
    while len(boxes) < n:
        first = boxes[0]
        boxes.insert(0, Roi(first.x - first.w - BOX_GAP, first.y, first.w, first.h))
    return boxes

def calibrate_supply(frame: FrameLike, strip: Roi, boxes_per_side: int = 3,
                     rules: Optional[ColorRules] = None) -> SupplyRoi:
    """Derive used/total glyph boxes from one frame with a visible gauge.

    Total digits are the rightmost two green clusters, the used digit is the
    rightmost white cluster. Both sides are padded leftwards to
    ``boxes_per_side`` boxes of a common glyph size.
    """
    color = load_color(frame, strip)
    greens = _cluster_boxes(green_mask(color, rules))
    whites = _cluster_boxes(white_mask(color, rules))
    total = greens[-2:]
    if not whites or not total:
        raise CalibrationError("Failed to detect supply digits. Try a different frame.")
    used = whites[-1]

    total_abs = [Roi(strip.x + b.x, strip.y + b.y, b.w, b.h) for b in total]
    gw = max([b.w for b in total_abs] + [used.w, MIN_GLYPH_W])
    gh = max([b.h for b in total_abs] + [used.h, MIN_GLYPH_H])
    cx = strip.x + used.x + used.w // 2
    cy = strip.y + used.y + used.h // 2
    used_box = Roi(max(0, cx - gw // 2), max(0, cy - gh // 2), gw, gh)

    supply = SupplyRoi(strip=strip,
                       used_boxes=_pad_left([used_box], boxes_per_side),
                       total_boxes=_pad_left(total_abs, boxes_per_side))
    logger.info(f"calibrated supply: used={supply.used_boxes} total={supply.total_boxes}")
    return supply

def glyph_boxes(mask: np.ndarray, min_w: int = 2, min_h: int = 6) -> List[Roi]:
    return filter_boxes(extract_components(mask), min_w, min_h)

def separator_column(strip_gray: np.ndarray, separator: Optional[np.ndarray],
                     fallback: float = 0.6) -> int:
    x = int(strip_gray.shape[1] * fallback)
    if separator is None:
        return x
    try:
        m = slide_match(strip_gray, separator)
    except TemplateTooLarge:
        logger.warning("separator template larger than the supply strip, using fallback column")
        return x
    return m.x + separator.shape[1] // 2

def extract_digit_templates(frame: FrameLike, strip: Roi, used_text: str, total_text: str,
                            separator: Optional[np.ndarray] = None,
                            rules: Optional[ColorRules] = None) -> Dict[int, np.ndarray]:
    """Cut digit glyphs out of a frame whose gauge shows ``used_text/total_text``."""
    img = load_color(frame)
    slash_x = separator_column(load_gray(img, strip), separator)
    used_region = Roi(strip.x, strip.y, max(1, slash_x - BOX_GAP), strip.h)
    total_region = Roi(strip.x + slash_x + BOX_GAP, strip.y,
                       max(1, strip.w - slash_x - BOX_GAP), strip.h)

    def pick(region: Roi, rule: MaskRule, n: int) -> List[Roi]:
        boxes = glyph_boxes(load_mask(img, region, rule, rules))
        if len(boxes) < n:
            raise CalibrationError(f"found {len(boxes)} {rule.value} glyphs, expected {n}")
        return [Roi(region.x + b.x, region.y + b.y, b.w, b.h) for b in boxes[-n:]]

    used_boxes = pick(used_region, MaskRule.WHITE, len(used_text))
    total_boxes = pick(total_region, MaskRule.GREEN, len(total_text))
    all_boxes = used_boxes + total_boxes
    size = (max(b.w for b in all_boxes), max(b.h for b in all_boxes))

    out: Dict[int, np.ndarray] = {}
    for ch, box in zip(used_text + total_text, all_boxes):
        out[int(ch)] = resize_gray(load_gray(img, box), size)
    logger.info(f"extracted digit templates {sorted(out)} at size {size}")
    return out

def save_digit_templates(templates: Dict[int, np.ndarray], out_dir: Union[str, Path]) -> List[Path]:
    outp = Path(out_dir)
    outp.mkdir(parents=True, exist_ok=True)
    paths = []
    for digit, img in sorted(templates.items()):
        p = outp / f"{digit}.png"
        cv2.imwrite(str(p), img)
        paths.append(p)
    return paths

@dataclass
class DigitCandidate:
    score: float
    t: float
    frame: str
    box_type: str
    index: int
    roi: Roi

    def to_dict(self) -> dict:
        return {"score": self.score, "t": self.t, "frame": self.frame,
                "box_type": self.box_type, "index": self.index, "roi": self.roi.to_dict()}

def rank_digit_candidates(frames: Sequence[Frame], supply: SupplyRoi,
                          per_box: int = 12) -> List[DigitCandidate]:
    """Highest-variance glyph crops across ``frames``, best first."""
    best: List[DigitCandidate] = []
    boxes = [("used", i, b) for i, b in enumerate(supply.used_boxes)]
    boxes += [("total", i, b) for i, b in enumerate(supply.total_boxes)]
    for fr in frames:
        img = load_color(fr.path)
        for box_type, index, roi in boxes:
            score = float(load_gray(img, roi).astype(np.float64).var())
            best.append(DigitCandidate(score, fr.t, fr.path, box_type, index, roi))
        best.sort(key=lambda c: c.score, reverse=True)
        del best[per_box:]
    return best
