import numpy as np
import pytest

from hudsig.errors import SizeMismatch
from hudsig.roi import Roi
from hudsig.trigger import DiffTrigger, detect_roi_changes

ROI = Roi(0, 0, 8, 8)


def _frame(value):
    return np.full((8, 8, 3), value, dtype=np.uint8)


def test_constant_sequence_has_no_hits():
    frames = [(i * 0.5, _frame(40)) for i in range(6)]
    assert detect_roi_changes(frames, ROI, 0.08) == []


def test_every_frame_changing_fires_n_minus_one():
    frames = [(float(i), _frame(0 if i % 2 == 0 else 255)) for i in range(5)]
    hits = detect_roi_changes(frames, ROI, 0.08)
    assert len(hits) == 4
    assert [h.t for h in hits] == [1.0, 2.0, 3.0, 4.0]
    assert all(h.score == pytest.approx(1.0) for h in hits)


def test_single_frame_returns_nothing():
    assert detect_roi_changes([(0.0, _frame(0))], ROI) == []
    assert detect_roi_changes([], ROI) == []


def test_slow_drift_compares_against_last_hit():
    # +13 per frame is ~0.051 per step: below 0.08 alone, above it over two steps
    frames = [(float(i), _frame(13 * i)) for i in range(7)]
    hits = detect_roi_changes(frames, ROI, 0.08)
    assert [h.t for h in hits] == [2.0, 4.0, 6.0]


def test_hit_carries_frame_reference():
    trig = DiffTrigger(0.08)
    assert trig.update(0.0, "f1", np.zeros((4, 4), np.uint8)) is None
    hit = trig.update(0.5, "f2", np.full((4, 4), 255, np.uint8))
    assert hit.frame == "f2" and hit.t == 0.5


def test_threshold_is_inclusive():
    trig = DiffTrigger(threshold=51 / 255)
    trig.update(0.0, "a", np.zeros((2, 2), np.uint8))
    assert trig.update(1.0, "b", np.full((2, 2), 51, np.uint8)) is not None


def test_size_change_is_an_error():
    trig = DiffTrigger()
    trig.update(0.0, "a", np.zeros((2, 2), np.uint8))
    with pytest.raises(SizeMismatch):
        trig.update(1.0, "b", np.zeros((3, 2), np.uint8))
