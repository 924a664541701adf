"""Ramer-Douglas-Peucker thinning for automation curves.

Works on anything with ``time`` and ``value`` attributes, in time order.
Each axis is divided by its own span before measuring distances, but a
span narrower than one unit counts as 1.0. A threshold therefore means
the same thing on a 20..20000 Hz cutoff lane as on a 0..100 percent lane,
while a 0..1 gain lane is measured in its raw units and a tiny wiggle on
an otherwise flat curve is never stretched to full scale.
"""

from __future__ import annotations
import numpy as np

MIN_THRESHOLD = 1e-4


def _unit_span(lo, hi):
    # Spans under one unit are not stretched; a 0.0001 wiggle stays tiny
    span = hi - lo
    return span if span > 1.0 else 1.0


def normalize(times, values):
    """Scale times and values into unit range using their own extents."""
    t = np.asarray(times, dtype=np.float64)
    v = np.asarray(values, dtype=np.float64)
    if len(t) == 0:
        return t, v
    t_span = _unit_span(t[0], t[-1])
    v_span = _unit_span(v.min(), v.max())
    return (t - t[0]) / t_span, (v - v.min()) / v_span


def perpendicular_distances(xs, ys, start, end):
    """Distances of points start+1..end-1 from the start-end chord."""
    x0, y0 = xs[start], ys[start]
    x1, y1 = xs[end], ys[end]
    px = xs[start + 1:end]
    py = ys[start + 1:end]
    dx = x1 - x0
    dy = y1 - y0
    len_sq = dx * dx + dy * dy
    if len_sq < np.finfo(np.float64).eps:
        # Chord collapsed to a point
        return np.hypot(px - x0, py - y0)
    return np.abs(dy * px - dx * py + x1 * y0 - y1 * x0) / np.sqrt(len_sq)


def rdp_indices(times, values, threshold: float) -> list[int]:
    """Indices of the points RDP keeps, ascending.

    The first and last index are always kept.
    """
    n = len(times)
    if n <= 2:
        return list(range(n))
    threshold = max(MIN_THRESHOLD, float(threshold))
    xs, ys = normalize(times, values)

    keep = {0, n - 1}
    work = [(0, n - 1)]
    while work:
        start, end = work.pop()
        if end <= start + 1:
            continue
        dists = perpendicular_distances(xs, ys, start, end)
        i = int(np.argmax(dists))
        if dists[i] > threshold:
            split = start + 1 + i
            keep.add(split)
            work.append((start, split))
            work.append((split, end))
    return sorted(keep)


def simplify(points, threshold: float) -> list:
    """Reduce a time-ordered point sequence, returning the kept originals."""
    points = list(points)
    if len(points) <= 2:
        return points
    kept = rdp_indices([p.time for p in points], [p.value for p in points],
                       threshold)
    return [points[i] for i in kept]
