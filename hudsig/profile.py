from __future__ import annotations
from dataclasses import dataclass, field
from pathlib import Path
import json
from typing import Any, Dict, List, Union

from .roi import Roi

@dataclass
class SupplyRoi:
    strip: Roi
    used_boxes: List[Roi] = field(default_factory=list)
    total_boxes: List[Roi] = field(default_factory=list)

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "SupplyRoi":
        return cls(
            strip=Roi.from_dict(d),
            used_boxes=[Roi.from_dict(b) for b in d.get("used_boxes", [])],
            total_boxes=[Roi.from_dict(b) for b in d.get("total_boxes", [])],
        )

    def to_dict(self) -> Dict[str, Any]:
        out = self.strip.to_dict()
        out["used_boxes"] = [b.to_dict() for b in self.used_boxes]
        out["total_boxes"] = [b.to_dict() for b in self.total_boxes]
        return out

@dataclass
class QueueSlots:
    count: int
    slot_w: int
    slot_h: int
    gap: int = 0
    start_x: int = 0
    start_y: int = 0

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "QueueSlots":
        return cls(count=int(d["count"]), slot_w=int(d["slot_w"]), slot_h=int(d["slot_h"]),
                   gap=int(d.get("gap", 0)), start_x=int(d.get("start_x", 0)),
                   start_y=int(d.get("start_y", 0)))

    def to_dict(self) -> Dict[str, Any]:
        return {"count": self.count, "slot_w": self.slot_w, "slot_h": self.slot_h,
                "gap": self.gap, "start_x": self.start_x, "start_y": self.start_y}

@dataclass
class QueueRoi:
    area: Roi
    slots: QueueSlots

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "QueueRoi":
        return cls(area=Roi.from_dict(d), slots=QueueSlots.from_dict(d["slots"]))

    def to_dict(self) -> Dict[str, Any]:
        out = self.area.to_dict()
        out["slots"] = self.slots.to_dict()
        return out

@dataclass
class Profile:
    name: str
    resolution: Dict[str, int]
    supply: SupplyRoi
    selection_panel: Roi
    production_queue: QueueRoi
    extra: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "Profile":
        known = {"name", "resolution", "supply", "selection_panel", "production_queue"}
        return cls(
            name=str(d["name"]),
            resolution={"w": int(d["resolution"]["w"]), "h": int(d["resolution"]["h"])},
            supply=SupplyRoi.from_dict(d["supply"]),
            selection_panel=Roi.from_dict(d["selection_panel"]),
            production_queue=QueueRoi.from_dict(d["production_queue"]),
            extra={k: v for k, v in d.items() if k not in known},
        )

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "name": self.name,
            "resolution": dict(self.resolution),
            "supply": self.supply.to_dict(),
            "selection_panel": self.selection_panel.to_dict(),
            "production_queue": self.production_queue.to_dict(),
        }
        out.update(self.extra)
        return out

def load_profile(path: Union[str, Path]) -> Profile:
    with open(path, "r", encoding="utf-8") as f:
        return Profile.from_dict(json.load(f))

def save_profile(profile: Profile, path: Union[str, Path]) -> None:
    with open(path, "w", encoding="utf-8") as f:
        json.dump(profile.to_dict(), f, indent=2)
