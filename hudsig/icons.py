from __future__ import annotations
from dataclasses import dataclass
from typing import List, Optional

import numpy as np

from .match import similarity
from .profile import QueueSlots
from .roi import FrameLike, Roi, as_image, clamp_roi, load_gray, resize_gray
from .templates import QueueTemplates

@dataclass
class QueueHit:
    slot: int
    item_id: str
    conf: float

def slot_roi(queue: Roi, slots: QueueSlots, index: int) -> Roi:
    x = queue.x + slots.start_x + index * (slots.slot_w + slots.gap)
    y = queue.y + slots.start_y
    return Roi(x, y, slots.slot_w, slots.slot_h)

def match_icon(slot_gray: np.ndarray, templates: QueueTemplates):
    best_id: Optional[str] = None
    best_conf = -1.0
    for icon_id, tpl in templates.items:
        th, tw = tpl.shape[:2]
        c = similarity(resize_gray(slot_gray, (tw, th)), tpl)
        if c > best_conf:
            best_conf = c
            best_id = icon_id
    return best_id, max(0.0, best_conf)

def read_queue_icons(frame: FrameLike, queue: Roi, slots: QueueSlots,
                     templates: QueueTemplates, min_conf: float = 0.6) -> List[QueueHit]:
    """Recognize the icon in each queue slot; at most one hit per slot."""
    if len(templates) == 0:
        return []
    img = as_image(frame)
    fh, fw = img.shape[:2]
    hits: List[QueueHit] = []
    for i in range(slots.count):
        roi = clamp_roi(slot_roi(queue, slots, i), fw, fh)
        if roi is None:
            continue
        icon_id, conf = match_icon(load_gray(img, roi), templates)
        if icon_id is not None and conf >= min_conf:
            hits.append(QueueHit(slot=i, item_id=icon_id, conf=conf))
    return hits
