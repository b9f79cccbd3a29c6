from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Tuple

from .supply import SupplyReading

@dataclass
class Event:
    t: float
    id: str
    count: int = 1
    conf: float = 0.0
    evidence: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {"t": self.t, "id": self.id, "count": self.count,
                "conf": self.conf, "evidence": list(self.evidence)}

def queue_started_events(queue_events: Iterable[Dict[str, Any]]) -> List[Event]:
    return [Event(t=float(e["t"]), id=f"{e['item_id']}_started", count=1,
                  conf=float(e["conf"]), evidence=[e["frame"]])
            for e in queue_events]

class SupplySeries:
    """Change-point encoder: keeps a sample only when (used, total) changes."""

    def __init__(self):
        self.samples: List[Dict[str, Any]] = []
        self._last_key: Optional[Tuple[Optional[int], Optional[int]]] = None
        self._started = False

    def push(self, t: float, reading: SupplyReading) -> bool:
        key = reading.key
        if self._started and key == self._last_key:
            return False
        self._started = True
        self._last_key = key
        self.samples.append({"t": t, "used": reading.used, "total": reading.total,
                             "conf": reading.conf})
        return True

def change_points(readings: Iterable[Tuple[float, SupplyReading]]) -> List[Dict[str, Any]]:
    series = SupplySeries()
    for t, r in readings:
        series.push(t, r)
    return series.samples
