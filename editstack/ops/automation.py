"""Automation point editing commands.

Every command goes through the lane's add/remove/clear primitives and
keeps exactly the snapshots it needs to put the lane back. Points keep
their ids across remove-and-readd, so later commands in the history can
still find the point after an earlier command has been undone and redone.
"""

from __future__ import annotations
import logging
from dataclasses import dataclass, field, replace
from typing import ClassVar, Optional

from ..clipboard import AutomationClipboard
from ..commands import Command, require
from ..state import (TIME_EPSILON, AutomationLane, AutomationPoint,
                     CurveType, PointSnapshot)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PointValue:
    id: int
    time: float
    value: float


@dataclass(frozen=True)
class PointTime:
    id: int
    time: float


def _as_points(points):
    if points is None:
        raise ValueError('points are required')
    if isinstance(points, AutomationPoint):
        return [points]
    points = list(points)
    if any(p is None for p in points):
        raise ValueError('points must not contain None')
    return points


def _affected(lane, start, end, respect_locks):
    return [p for p in lane.points_in_range(start, end)
            if not (respect_locks and p.is_locked)]


def _owned(lane, point):
    if lane.find_point(point.id) is not point:
        raise ValueError(
            f'point {point.id} at {point.time} does not belong to lane '
            f'{lane.parameter!r}')
    return point


def _stale(cmd, point_id):
    logger.debug('%s: point %s no longer in lane, skipping', cmd.kind, point_id)


@dataclass(eq=False, repr=False)
class AddPoint(Command):
    kind: ClassVar[str] = 'automation.add'

    lane: AutomationLane
    time: float
    value: float
    curve_type: CurveType = CurveType.LINEAR
    _point_id: Optional[int] = field(default=None, init=False)

    @classmethod
    def create(cls, lane, time, value, curve_type=CurveType.LINEAR):
        require(lane, 'lane')
        return cls(lane, float(time), float(value), CurveType.parse(curve_type))

    @property
    def description(self):
        return f'Add Automation Point at {self.time:.2f}s'

    @property
    def point(self) -> Optional[AutomationPoint]:
        if self._point_id is None:
            return None
        return self.lane.find_point(self._point_id)

    def execute(self):
        if self._point_id is not None and self.point is not None:
            return
        pt = self.lane.add_point(self.time, self.value, self.curve_type,
                                 point_id=self._point_id)
        self._point_id = pt.id

    def undo(self):
        pt = self.point
        if pt is None:
            _stale(self, self._point_id)
            return
        self.lane.remove_point(pt)


@dataclass(eq=False, repr=False)
class DeletePoints(Command):
    kind: ClassVar[str] = 'automation.delete'

    lane: AutomationLane
    points: tuple
    _removed: list = field(default_factory=list, init=False)

    @classmethod
    def create(cls, lane, points):
        require(lane, 'lane')
        return cls(lane, tuple(_owned(lane, p).snapshot()
                               for p in _as_points(points)))

    @property
    def description(self):
        if len(self.points) == 1:
            return 'Delete Automation Point'
        return f'Delete {len(self.points)} Automation Points'

    def execute(self):
        removed = []
        for snap in reversed(self.points):
            pt = self.lane.find_point(snap.id)
            if pt is None:
                _stale(self, snap.id)
                continue
            removed.append(pt.snapshot())
            self.lane.remove_point(pt)
        self._removed = removed

    def undo(self):
        # Only what execute removed goes back
        for snap in reversed(self._removed):
            if self.lane.find_point(snap.id) is None:
                self.lane.add_snapshot(snap)
        self._removed = []


@dataclass(eq=False, repr=False)
class MovePoint(Command):
    """Move one point; the point is removed and re-added at the target.

    The point is located by id. Consecutive moves of the same point merge
    when the new move starts where the previous one ended.
    """
    kind: ClassVar[str] = 'automation.move'

    lane: AutomationLane
    origin: PointSnapshot
    new_time: float
    new_value: float

    @classmethod
    def create(cls, lane, point, new_time, new_value):
        require(lane, 'lane')
        point = _owned(lane, require(point, 'point'))
        return cls(lane, point.snapshot(), float(new_time), float(new_value))

    @property
    def point_id(self):
        return self.origin.id

    @property
    def description(self):
        return 'Move Automation Point'

    def _relocate(self, target: PointSnapshot):
        pt = self.lane.find_point(self.point_id)
        if pt is None:
            _stale(self, self.point_id)
            return
        self.lane.remove_point(pt)
        self.lane.add_snapshot(target)

    def execute(self):
        self._relocate(replace(self.origin, time=self.new_time,
                               value=self.new_value))

    def undo(self):
        self._relocate(self.origin)

    def can_merge_with(self, other):
        return (isinstance(other, MovePoint)
                and other.lane is self.lane
                and other.point_id == self.point_id
                and abs(other.origin.time - self.new_time) < TIME_EPSILON)

    def merge_with(self, other):
        if not isinstance(other, MovePoint):
            return self
        return MovePoint(self.lane, self.origin, other.new_time, other.new_value)


@dataclass(eq=False, repr=False)
class SetCurveType(Command):
    kind: ClassVar[str] = 'automation.curve_type'

    lane: AutomationLane
    origin: PointSnapshot
    new_type: CurveType

    @classmethod
    def create(cls, lane, point, new_type):
        require(lane, 'lane')
        point = _owned(lane, require(point, 'point'))
        return cls(lane, point.snapshot(), CurveType.parse(new_type))

    @property
    def old_type(self) -> CurveType:
        return self.origin.curve_type

    @property
    def description(self):
        return f'Change Curve Type to {self.new_type.name.replace("_", "-").title()}'

    def _retype(self, curve_type):
        pt = self.lane.find_point(self.origin.id)
        if pt is None:
            _stale(self, self.origin.id)
            return
        self.lane.remove_point(pt)
        self.lane.add_snapshot(replace(self.origin, curve_type=curve_type))

    def execute(self):
        self._retype(self.new_type)

    def undo(self):
        self._retype(self.old_type)


@dataclass(eq=False, repr=False)
class ClearLane(Command):
    kind: ClassVar[str] = 'automation.clear'

    lane: AutomationLane
    points: tuple

    @classmethod
    def create(cls, lane):
        require(lane, 'lane')
        return cls(lane, tuple(lane.snapshot()))

    @property
    def description(self):
        return 'Clear Automation Lane'

    def execute(self):
        # Undo restores what was cleared, not what create saw
        self.points = tuple(self.lane.snapshot())
        self.lane.clear_points()

    def undo(self):
        for snap in self.points:
            if self.lane.find_point(snap.id) is None:
                self.lane.add_snapshot(snap)


@dataclass(eq=False, repr=False)
class CopyPoints(Command):
    """Copy points (optionally within [start, end]) to a clipboard.

    Copying does not change the lane, so undo does nothing.
    """
    kind: ClassVar[str] = 'automation.copy'

    lane: AutomationLane
    clipboard: AutomationClipboard
    start: Optional[float] = None
    end: Optional[float] = None

    @classmethod
    def create(cls, lane, clipboard, start=None, end=None):
        require(lane, 'lane')
        require(clipboard, 'clipboard')
        return cls(lane, clipboard, start, end)

    @property
    def description(self):
        return 'Copy Automation'

    def execute(self):
        self.clipboard.store(
            p.snapshot() for p in self.lane.points_in_range(self.start, self.end))

    def undo(self):
        pass


@dataclass(eq=False, repr=False)
class PastePoints(Command):
    """Paste clipboard contents at paste_time.

    The clipboard is read when the command is created. With
    replace_existing, points already inside the pasted range are removed
    first and restored on undo.
    """
    kind: ClassVar[str] = 'automation.paste'

    lane: AutomationLane
    points: tuple
    paste_time: float
    replace_existing: bool = False
    _pasted_ids: list = field(default_factory=list, init=False)
    _replaced: list = field(default_factory=list, init=False)

    @classmethod
    def create(cls, lane, clipboard, paste_time, replace_existing=False):
        require(lane, 'lane')
        require(clipboard, 'clipboard')
        return cls(lane, tuple(clipboard.points), float(paste_time),
                   bool(replace_existing))

    @property
    def description(self):
        return 'Paste Automation'

    @property
    def end_time(self) -> float:
        return self.paste_time + (self.points[-1].time if self.points else 0.0)

    def execute(self):
        if not self.points:
            return
        if self.replace_existing:
            existing = self.lane.points_in_range(self.paste_time, self.end_time)
            self._replaced = [p.snapshot() for p in existing]
            for p in existing:
                self.lane.remove_point(p)

        reuse = len(self._pasted_ids) == len(self.points)
        ids = []
        for i, snap in enumerate(self.points):
            pid = self._pasted_ids[i] if reuse else None
            if pid is not None and self.lane.find_point(pid) is not None:
                ids.append(pid)
                continue
            pt = self.lane.add_point(self.paste_time + snap.time, snap.value,
                                     snap.curve_type, point_id=pid,
                                     **snap.shape())
            ids.append(pt.id)
        self._pasted_ids = ids
        logger.info('[CLIPBOARD] Pasted %d automation points at %.3f',
                    len(ids), self.paste_time)

    def undo(self):
        for pid in self._pasted_ids:
            pt = self.lane.find_point(pid)
            if pt is None:
                _stale(self, pid)
                continue
            self.lane.remove_point(pt)
        for snap in self._replaced:
            if self.lane.find_point(snap.id) is None:
                self.lane.add_snapshot(snap)
        self._replaced = []

    @property
    def pasted_points(self) -> list[AutomationPoint]:
        return [p for p in map(self.lane.find_point, self._pasted_ids)
                if p is not None]


@dataclass(eq=False, repr=False)
class ScalePoints(Command):
    """Scale values around a pivot: pivot + (value - pivot) * factor.

    Results are clamped to the lane bounds; undo writes back the captured
    values rather than applying the inverse factor.
    """
    kind: ClassVar[str] = 'automation.scale'

    lane: AutomationLane
    factor: float
    pivot: float
    before: tuple
    start: Optional[float] = None
    end: Optional[float] = None

    @classmethod
    def create(cls, lane, factor, pivot=0.0, start=None, end=None,
               respect_locks=False):
        require(lane, 'lane')
        before = tuple(PointValue(p.id, p.time, p.value)
                       for p in _affected(lane, start, end, respect_locks))
        return cls(lane, float(factor), float(pivot), before, start, end)

    @property
    def description(self):
        return f'Scale Automation by {self.factor:.2f}x'

    def scaled(self, value: float) -> float:
        return self.lane.clamp(self.pivot + (value - self.pivot) * self.factor)

    def _write(self, values):
        for pid, v in values:
            pt = self.lane.find_point(pid)
            if pt is None:
                _stale(self, pid)
                continue
            pt.value = v
        self.lane.notify('scale')

    def execute(self):
        self._write((pv.id, self.scaled(pv.value)) for pv in self.before)

    def undo(self):
        self._write((pv.id, pv.value) for pv in self.before)


@dataclass(eq=False, repr=False)
class ShiftPoints(Command):
    """Shift point times by an offset, never below zero.

    Consecutive shifts over the same range merge into one step that goes
    from the first shift's starting times to the last shift's results.
    """
    kind: ClassVar[str] = 'automation.shift'

    lane: AutomationLane
    offset: float
    before: tuple
    start: Optional[float] = None
    end: Optional[float] = None
    respect_locks: bool = False
    after: Optional[tuple] = None

    @classmethod
    def create(cls, lane, offset, start=None, end=None, respect_locks=False):
        require(lane, 'lane')
        before = tuple(PointTime(p.id, p.time)
                       for p in _affected(lane, start, end, respect_locks))
        return cls(lane, float(offset), before, start, end, respect_locks)

    @property
    def description(self):
        sign = '+' if self.offset >= 0 else ''
        return f'Shift Automation {sign}{self.offset:.2f}'

    def targets(self) -> tuple:
        if self.after is None:
            self.after = tuple(PointTime(pt.id, max(0.0, pt.time + self.offset))
                               for pt in self.before)
        return self.after

    def _write(self, times):
        for pt_time in times:
            pt = self.lane.find_point(pt_time.id)
            if pt is None:
                _stale(self, pt_time.id)
                continue
            pt.time = pt_time.time
        self.lane.curve.sort()
        self.lane.notify('shift')

    def execute(self):
        self._write(self.targets())

    def undo(self):
        self._write(self.before)

    def can_merge_with(self, other):
        return (isinstance(other, ShiftPoints)
                and other.lane is self.lane
                and other.start == self.start
                and other.end == self.end
                and other.respect_locks == self.respect_locks)

    def merge_with(self, other):
        if not isinstance(other, ShiftPoints):
            return self
        seen = {pt.id for pt in self.before}
        before = self.before + tuple(pt for pt in other.before
                                     if pt.id not in seen)
        final = {pt.id: pt for pt in self.targets()}
        final.update((pt.id, pt) for pt in other.targets())
        after = tuple(final.get(pt.id, pt) for pt in before)
        return ShiftPoints(self.lane, self.offset + other.offset, before,
                           self.start, self.end, self.respect_locks, after)
