import math

import numpy as np
import pytest

from editstack.core.simplify import (normalize, perpendicular_distances,
                                     rdp_indices, simplify)
from editstack.ops.thin import ThinLane
from editstack.state import AutomationLane, PointSnapshot


def snaps(pairs):
    return [PointSnapshot(id=i + 1, time=t, value=v)
            for i, (t, v) in enumerate(pairs)]


def sine_lane(n=200):
    lane = AutomationLane('cutoff', 0.0, 1.0)
    for i in range(n):
        t = i / 20.0
        lane.add_point(t, 0.5 + 0.5 * math.sin(t))
    return lane


def test_nearly_straight_line_collapses():
    kept = simplify(snaps([(0, 0), (1, 0.0001), (2, 0)]), 0.01)
    assert [(p.time, p.value) for p in kept] == [(0, 0), (2, 0)]


def test_sharp_corner_survives():
    kept = simplify(snaps([(0, 0), (1, 1), (2, 0)]), 0.01)
    assert len(kept) == 3


def test_short_inputs_pass_through():
    assert simplify([], 0.01) == []
    one = snaps([(0, 0.5)])
    assert simplify(one, 0.01) == one
    assert rdp_indices([0.0, 1.0], [0.0, 1.0], 0.5) == [0, 1]


def test_endpoints_always_kept():
    times = np.linspace(0, 10, 101)
    values = np.sin(times)
    for threshold in (0.001, 0.05, 0.5, 10.0):
        kept = rdp_indices(times, values, threshold)
        assert kept[0] == 0
        assert kept[-1] == 100
        assert kept == sorted(kept)


def test_count_never_grows_with_threshold():
    times = np.linspace(0, 10, 101)
    values = np.sin(times) + 0.1 * np.cos(7 * times)
    counts = [len(rdp_indices(times, values, th))
              for th in (0.0001, 0.001, 0.01, 0.05, 0.1, 0.5)]
    assert counts == sorted(counts, reverse=True)


def test_threshold_is_scale_independent():
    times = np.linspace(0, 4, 41)
    values = 2.0 * np.abs(np.sin(times))
    small = rdp_indices(times, values, 0.02)
    large = rdp_indices(times, values * 10000.0 + 20.0, 0.02)
    assert small == large


def test_normalize_uses_own_extents():
    xs, ys = normalize([10.0, 15.0, 20.0], [100.0, 300.0, 200.0])
    assert xs.tolist() == [0.0, 0.5, 1.0]
    assert ys.tolist() == [0.0, 1.0, 0.5]


def test_degenerate_chord_falls_back_to_point_distance():
    xs = np.array([0.0, 0.3, 0.0])
    ys = np.array([0.0, 0.4, 0.0])
    assert perpendicular_distances(xs, ys, 0, 2) == pytest.approx([0.5])


def test_thin_lane_round_trip(history):
    lane = sine_lane()
    before = lane.snapshot()
    cmd = ThinLane.create(lane, 0.01)
    history.record(cmd)
    assert 2 < len(lane.points) < 200
    assert cmd.removed_count == 200 - len(lane.points)
    assert lane.points[0].snapshot() == before[0]
    assert lane.points[-1].snapshot() == before[-1]
    after = lane.snapshot()
    history.undo()
    assert lane.snapshot() == before
    history.redo()
    assert lane.snapshot() == after


def test_thin_description():
    cmd = ThinLane.create(sine_lane(), 10.0)
    assert cmd.description == 'Thin Automation (200 -> 2 points)'


def test_thin_small_lane_is_untouched():
    lane = AutomationLane('gain', 0.0, 1.0)
    lane.add_point(0.0, 0.0)
    lane.add_point(1.0, 1.0)
    before = lane.snapshot()
    cmd = ThinLane.create(lane, 0.5)
    cmd.execute()
    assert lane.snapshot() == before
    cmd.undo()
    assert lane.snapshot() == before


def test_thin_threshold_has_a_floor(lane):
    assert ThinLane.create(lane, 0.0).threshold > 0.0


def test_sub_unit_value_span_is_measured_in_raw_units():
    # 0.05 of bend on a 0..1 lane stays 0.05, not a full-scale peak
    pairs = [(0, 0.0), (1, 0.05), (2, 0.0)]
    assert len(simplify(snaps(pairs), 0.1)) == 2
    assert len(simplify(snaps(pairs), 0.01)) == 3
