from __future__ import annotations
from dataclasses import asdict, dataclass
import math
from typing import Any, Dict, List, Sequence

@dataclass
class EvalResult:
    precision: float
    recall: float
    f1: float
    mean_dt: float
    matched: int
    predicted: int
    ground_truth: int

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

def evaluate_events(pred: Sequence[Dict[str, Any]], gt: Sequence[Dict[str, Any]],
                    tol_sec: float = 3.0) -> EvalResult:
    """Greedy one-to-one matching of predicted to ground-truth events.

    Each ground-truth event takes the closest unused prediction with the same
    id within ``tol_sec`` seconds.
    """
    used: set = set()
    matched = 0
    sum_dt = 0.0
    for g in gt:
        best_idx = -1
        best_dt = math.inf
        for j, p in enumerate(pred):
            if j in used or p["id"] != g["id"]:
                continue
            dt = abs(float(p["t"]) - float(g["t"]))
            if dt <= tol_sec and dt < best_dt:
                best_dt = dt
                best_idx = j
        if best_idx >= 0:
            used.add(best_idx)
            matched += 1
            sum_dt += best_dt

    precision = matched / len(pred) if pred else 0.0
    recall = matched / len(gt) if gt else 0.0
    f1 = 2 * precision * recall / (precision + recall) if precision + recall > 0 else 0.0
    return EvalResult(
        precision=precision, recall=recall, f1=f1,
        mean_dt=sum_dt / matched if matched else 0.0,
        matched=matched, predicted=len(pred), ground_truth=len(gt),
    )

def events_from_result(result: Dict[str, Any]) -> List[Dict[str, Any]]:
    return [{"t": e["t"], "id": e["id"], "count": e.get("count", 1)} for e in result.get("events", [])]
