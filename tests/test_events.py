from hudsig.events import Event, SupplySeries, change_points, queue_started_events
from hudsig.grouping import dedupe_events
from hudsig.supply import SupplyReading


def test_dedupe_keeps_most_confident_in_same_second():
    events = [Event(t=5.2, id="marine_started", conf=0.7), Event(t=5.8, id="marine_started", conf=0.9)]
    out = dedupe_events(events)
    assert len(out) == 1
    assert out[0].conf == 0.9 and out[0].t == 5.8


def test_dedupe_keeps_adjacent_seconds():
    events = [Event(t=5.9, id="marine_started", conf=0.7), Event(t=6.1, id="marine_started", conf=0.7)]
    assert [e.t for e in dedupe_events(events)] == [5.9, 6.1]


def test_dedupe_separates_ids_and_sorts():
    events = [Event(t=3.5, id="b", conf=0.8), Event(t=3.1, id="a", conf=0.6), Event(t=1.0, id="a", conf=0.9)]
    assert [(e.t, e.id) for e in dedupe_events(events)] == [(1.0, "a"), (3.1, "a"), (3.5, "b")]


def test_dedupe_tie_keeps_first():
    events = [Event(t=2.0, id="a", conf=0.8, evidence=["x"]), Event(t=2.5, id="a", conf=0.8, evidence=["y"])]
    assert dedupe_events(events)[0].evidence == ["x"]


def test_constant_reading_emits_one_sample():
    readings = [(float(i), SupplyReading(used=3, total=10, conf=0.95)) for i in range(10)]
    samples = change_points(readings)
    assert samples == [{"t": 0.0, "used": 3, "total": 10, "conf": 0.95}]


def test_change_point_at_first_frame_of_each_value():
    readings = [(0.0, SupplyReading(3, 10, 0.9)), (0.5, SupplyReading(3, 10, 0.8)), (1.0, SupplyReading(4, 10, 0.9))]
    samples = change_points(readings)
    assert [(s["t"], s["used"], s["total"]) for s in samples] == [(0.0, 3, 10), (1.0, 4, 10)]


def test_null_readings_are_a_value_too():
    series = SupplySeries()
    assert series.push(0.0, SupplyReading(None, None, 0.2))
    assert not series.push(0.5, SupplyReading(None, None, 0.2))
    assert series.push(1.0, SupplyReading(4, 12, 1.0))
    assert series.push(1.5, SupplyReading(None, None, 0.2))
    assert len(series.samples) == 3


def test_queue_started_events():
    rows = [{"t": 1.5, "item_id": "marine", "conf": 0.8, "frame": "evidence/q_000001.jpg"}]
    (e,) = queue_started_events(rows)
    assert e.to_dict() == {"t": 1.5, "id": "marine_started", "count": 1, "conf": 0.8,
                           "evidence": ["evidence/q_000001.jpg"]}
