from __future__ import annotations
import math
from typing import Dict, Iterable, List, Tuple

from .events import Event

def bucket_key(e: Event) -> Tuple[int, str]:
    return (int(math.floor(e.t)), e.id)

def dedupe_events(events: Iterable[Event]) -> List[Event]:
    """One event per (whole second, id): the most confident one, earliest on ties."""
    best: Dict[Tuple[int, str], Event] = {}
    for e in events:
        k = bucket_key(e)
        cur = best.get(k)
        if cur is None or e.conf > cur.conf:
            best[k] = e
    return sorted(best.values(), key=lambda e: e.t)
