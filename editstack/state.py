"""Editable domain model for the edit engine.

Automation lanes own their curves; notes, mixer channels and arrangement
sections are plain mutable records. Commands reach into these objects by
reference and only mutate automation points through the lane primitives.
All records serialize with to_dict/from_dict for persistence layers.
"""

from __future__ import annotations
import bisect
import math
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Callable, Optional


# Time lookups tolerate float drift from repeated move/undo arithmetic.
TIME_EPSILON = 0.001

NOTE_NAMES = ['C', 'C#', 'D', 'D#', 'E', 'F', 'F#', 'G', 'G#', 'A', 'A#', 'B']

PALETTE = [
    '#e94560', '#533483', '#0f3460', '#00b4d8', '#06d6a0', '#ffd166',
    '#ef476f', '#118ab2', '#9b5de5', '#f15bb5', '#00f5d4', '#fee440',
]

DEFAULT_SECTION_COLOR = '#4A9EFF'


def clamp(v, lo, hi):
    return max(lo, min(hi, v))


def note_name(pitch):
    """MIDI pitch to a name like 'C4' (middle C = 60)."""
    return f'{NOTE_NAMES[pitch % 12]}{pitch // 12 - 1}'


class Listenable:
    """Observer hooks shared by aggregates that UI views watch."""

    def on_change(self, callback: Callable):
        self._listeners.append(callback)

    def notify(self, source=None):
        for cb in self._listeners:
            cb(source)


# ============================================================================
# AUTOMATION
# ============================================================================

class CurveType(str, Enum):
    LINEAR = 'linear'
    STEP = 'step'
    BEZIER = 'bezier'
    EXPONENTIAL = 'exponential'
    LOGARITHMIC = 'logarithmic'
    S_CURVE = 's_curve'

    @classmethod
    def parse(cls, v) -> CurveType:
        if isinstance(v, cls):
            return v
        try:
            return cls(str(v).lower())
        except ValueError:
            raise ValueError(f'Unknown curve type {v!r}') from None


@dataclass(frozen=True)
class PointSnapshot:
    """Immutable copy of every field of an automation point."""
    id: Optional[int]
    time: float
    value: float
    curve_type: CurveType = CurveType.LINEAR
    tension: float = 0.0
    bezier_x1: float = 0.25
    bezier_y1: float = 0.0
    bezier_x2: float = 0.75
    bezier_y2: float = 1.0
    is_locked: bool = False
    label: Optional[str] = None

    def shape(self) -> dict:
        """Fields that travel with a point when it is re-created elsewhere."""
        return {
            'tension': self.tension,
            'bezier_x1': self.bezier_x1, 'bezier_y1': self.bezier_y1,
            'bezier_x2': self.bezier_x2, 'bezier_y2': self.bezier_y2,
            'is_locked': self.is_locked, 'label': self.label,
        }

    def shifted(self, dt: float) -> PointSnapshot:
        return replace(self, time=self.time + dt)


@dataclass(eq=False)
class AutomationPoint:
    id: int
    time: float
    value: float
    curve_type: CurveType = CurveType.LINEAR
    tension: float = 0.0
    bezier_x1: float = 0.25
    bezier_y1: float = 0.0
    bezier_x2: float = 0.75
    bezier_y2: float = 1.0
    is_locked: bool = False
    label: Optional[str] = None

    def snapshot(self) -> PointSnapshot:
        return PointSnapshot(
            id=self.id, time=self.time, value=self.value,
            curve_type=self.curve_type, tension=self.tension,
            bezier_x1=self.bezier_x1, bezier_y1=self.bezier_y1,
            bezier_x2=self.bezier_x2, bezier_y2=self.bezier_y2,
            is_locked=self.is_locked, label=self.label,
        )

    def to_dict(self):
        return {
            'id': self.id, 'time': self.time, 'value': self.value,
            'curveType': self.curve_type.value, 'tension': self.tension,
            'bezier': [self.bezier_x1, self.bezier_y1,
                       self.bezier_x2, self.bezier_y2],
            'locked': self.is_locked, 'label': self.label,
        }

    @staticmethod
    def from_dict(d):
        bx1, by1, bx2, by2 = d.get('bezier', [0.25, 0.0, 0.75, 1.0])
        return AutomationPoint(
            id=d['id'], time=d['time'], value=d['value'],
            curve_type=CurveType.parse(d.get('curveType', 'linear')),
            tension=d.get('tension', 0.0),
            bezier_x1=bx1, bezier_y1=by1, bezier_x2=bx2, bezier_y2=by2,
            is_locked=d.get('locked', False), label=d.get('label'),
        )


def _cubic(p1, p2, t):
    """1-D cubic bezier from 0 to 1 with control values p1, p2."""
    u = 1.0 - t
    return 3 * u * u * t * p1 + 3 * u * t * t * p2 + t * t * t


def _shape(curve_type, t, point):
    if curve_type == CurveType.STEP:
        return 0.0
    if curve_type == CurveType.EXPONENTIAL:
        return t ** (2.0 + max(0.0, point.tension) * 2.0)
    if curve_type == CurveType.LOGARITHMIC:
        return 1.0 - (1.0 - t) ** (2.0 + max(0.0, point.tension) * 2.0)
    if curve_type == CurveType.S_CURVE:
        return t * t * (3.0 - 2.0 * t)
    if curve_type == CurveType.BEZIER:
        return _cubic(point.bezier_y1, point.bezier_y2, t)
    return t


class AutomationCurve:
    """Time-ordered point collection.

    Insertion keeps the list sorted; callers that edit point times in
    place must call sort() afterwards.
    """

    def __init__(self):
        self.points: list[AutomationPoint] = []

    def __len__(self):
        return len(self.points)

    def __iter__(self):
        return iter(self.points)

    def insert(self, point: AutomationPoint):
        pts = self.points
        if not pts or point.time >= pts[-1].time:
            # Time-ordered bulk re-adds land here
            pts.append(point)
            return
        keys = [p.time for p in pts]
        pts.insert(bisect.bisect_right(keys, point.time), point)

    def remove(self, point: AutomationPoint) -> bool:
        for i, p in enumerate(self.points):
            if p is point:
                self.points.pop(i)
                return True
        return False

    def clear(self):
        self.points.clear()

    def sort(self):
        self.points.sort(key=lambda p: p.time)

    def value_at(self, time: float, default: float = 0.0) -> float:
        """Evaluate the curve; segment shape follows the left point's type."""
        pts = self.points
        if not pts:
            return default
        if time <= pts[0].time:
            return pts[0].value
        if time >= pts[-1].time:
            return pts[-1].value
        i = bisect.bisect_right([p.time for p in pts], time) - 1
        p0, p1 = pts[i], pts[i + 1]
        dt = p1.time - p0.time
        if dt <= 0:
            return p1.value
        t = (time - p0.time) / dt
        return p0.value + (p1.value - p0.value) * _shape(p0.curve_type, t, p0)


class AutomationLane(Listenable):
    """Owns one curve plus the value bounds its points are clamped to."""

    def __init__(self, parameter: str = 'volume', min_value: float = 0.0,
                 max_value: float = 1.0, default_value: Optional[float] = None,
                 id: int = 0):
        if not (math.isfinite(min_value) and math.isfinite(max_value)):
            raise ValueError('lane bounds must be finite')
        if min_value >= max_value:
            raise ValueError(
                f'min_value ({min_value}) must be less than max_value ({max_value})')
        self.id = id
        self.parameter = parameter
        self.min_value = float(min_value)
        self.max_value = float(max_value)
        self.default_value = (self.clamp(default_value)
                              if default_value is not None else self.min_value)
        self.curve = AutomationCurve()
        self._by_id: dict[int, AutomationPoint] = {}
        self._next_id: int = 1
        self._listeners: list[Callable] = []

    @property
    def points(self) -> list[AutomationPoint]:
        return self.curve.points

    def new_id(self) -> int:
        nid = self._next_id
        self._next_id += 1
        return nid

    def clamp(self, value: float) -> float:
        return clamp(value, self.min_value, self.max_value)

    # Mutation primitives
    def add_point(self, time: float, value: float,
                  curve_type: CurveType = CurveType.LINEAR, *,
                  point_id: Optional[int] = None, **shape) -> AutomationPoint:
        """Insert a point; a given point_id re-creates that identity."""
        if point_id is None:
            point_id = self.new_id()
        elif point_id in self._by_id:
            raise ValueError(f'point id {point_id} already present in lane')
        else:
            self._next_id = max(self._next_id, point_id + 1)
        pt = AutomationPoint(id=point_id, time=float(time),
                             value=self.clamp(value),
                             curve_type=CurveType.parse(curve_type), **shape)
        self.curve.insert(pt)
        self._by_id[pt.id] = pt
        self.notify('add_point')
        return pt

    def add_snapshot(self, snap: PointSnapshot, time: Optional[float] = None,
                     keep_id: bool = True) -> AutomationPoint:
        return self.add_point(
            snap.time if time is None else time, snap.value, snap.curve_type,
            point_id=snap.id if keep_id else None, **snap.shape())

    def remove_point(self, point: AutomationPoint) -> bool:
        if self._by_id.get(point.id) is not point:
            return False
        self.curve.remove(point)
        del self._by_id[point.id]
        self.notify('remove_point')
        return True

    def clear_points(self):
        self.curve.clear()
        self._by_id.clear()
        self.notify('clear_points')

    # Lookup helpers
    def find_point(self, point_id) -> Optional[AutomationPoint]:
        return self._by_id.get(point_id)

    def find_point_at(self, time: float,
                      epsilon: float = TIME_EPSILON) -> Optional[AutomationPoint]:
        return next((p for p in self.points if abs(p.time - time) < epsilon),
                    None)

    def points_in_range(self, start: Optional[float] = None,
                        end: Optional[float] = None) -> list[AutomationPoint]:
        return [p for p in self.points
                if (start is None or p.time >= start)
                and (end is None or p.time <= end)]

    def snapshot(self) -> list[PointSnapshot]:
        return [p.snapshot() for p in self.points]

    def value_at(self, time: float) -> float:
        return self.curve.value_at(time, self.default_value)

    # Serialization
    def to_dict(self):
        return {
            'id': self.id, 'parameter': self.parameter,
            'min': self.min_value, 'max': self.max_value,
            'default': self.default_value,
            'points': [p.to_dict() for p in self.points],
            'nextId': self._next_id,
        }

    @staticmethod
    def from_dict(d):
        lane = AutomationLane(
            parameter=d.get('parameter', 'volume'),
            min_value=d.get('min', 0.0), max_value=d.get('max', 1.0),
            default_value=d.get('default'), id=d.get('id', 0),
        )
        for pd in d.get('points', []):
            if 'id' not in pd:
                pd = dict(pd, id=lane.new_id())
            pt = AutomationPoint.from_dict(pd)
            if pt.id in lane._by_id:
                raise ValueError(f'duplicate point id {pt.id}')
            pt.value = lane.clamp(pt.value)
            lane.curve.insert(pt)
            lane._by_id[pt.id] = pt
            lane._next_id = max(lane._next_id, pt.id + 1)
        lane._next_id = max(lane._next_id, d.get('nextId', 1))
        return lane


# ============================================================================
# NOTES
# ============================================================================

@dataclass(eq=False)
class Note:
    pitch: int
    start: float
    duration: float
    velocity: int = 100
    id: int = 0

    @property
    def name(self) -> str:
        return note_name(self.pitch)

    @property
    def end(self) -> float:
        return self.start + self.duration

    def to_dict(self):
        return {'id': self.id, 'pitch': self.pitch, 'start': self.start,
                'duration': self.duration, 'velocity': self.velocity}

    @staticmethod
    def from_dict(d):
        return Note(pitch=d['pitch'], start=d['start'],
                    duration=d['duration'], velocity=d.get('velocity', 100),
                    id=d.get('id', 0))


@dataclass
class Pattern:
    id: int
    name: str
    length: float
    notes: list = field(default_factory=list)
    color: str = PALETTE[0]

    def find_note(self, nid) -> Optional[Note]:
        return next((n for n in self.notes if n.id == nid), None)

    def to_dict(self):
        return {
            'id': self.id, 'name': self.name, 'length': self.length,
            'notes': [n.to_dict() for n in self.notes], 'color': self.color,
        }

    @staticmethod
    def from_dict(d):
        return Pattern(
            id=d['id'], name=d['name'], length=d['length'],
            notes=[Note.from_dict(n) for n in d.get('notes', [])],
            color=d.get('color', PALETTE[0]),
        )


# ============================================================================
# MIXER
# ============================================================================

@dataclass(eq=False)
class Send:
    id: int
    target_bus_name: str
    level: float = 0.0

    def to_dict(self):
        return {'id': self.id, 'target': self.target_bus_name,
                'level': self.level}

    @staticmethod
    def from_dict(d):
        return Send(id=d['id'], target_bus_name=d['target'],
                    level=d.get('level', 0.0))


@dataclass(eq=False)
class MixerChannel:
    id: int
    name: str
    volume: float = 0.8
    pan: float = 0.0
    muted: bool = False
    soloed: bool = False
    color: str = PALETTE[0]
    sends: list = field(default_factory=list)

    def to_dict(self):
        return {
            'id': self.id, 'name': self.name, 'volume': self.volume,
            'pan': self.pan, 'muted': self.muted, 'soloed': self.soloed,
            'color': self.color, 'sends': [s.to_dict() for s in self.sends],
        }

    @staticmethod
    def from_dict(d):
        return MixerChannel(
            id=d['id'], name=d['name'], volume=d.get('volume', 0.8),
            pan=d.get('pan', 0.0), muted=d.get('muted', False),
            soloed=d.get('soloed', False), color=d.get('color', PALETTE[0]),
            sends=[Send.from_dict(s) for s in d.get('sends', [])],
        )


@dataclass(eq=False)
class BusChannel:
    id: int
    name: str
    volume: float = 0.8

    def to_dict(self):
        return {'id': self.id, 'name': self.name, 'volume': self.volume}

    @staticmethod
    def from_dict(d):
        return BusChannel(id=d['id'], name=d['name'],
                          volume=d.get('volume', 0.8))


@dataclass(eq=False)
class MasterChannel:
    volume: float = 1.0
    limiter_enabled: bool = True
    limiter_ceiling: float = -0.3  # dBFS
    stereo_width: float = 1.0

    def to_dict(self):
        return {'volume': self.volume, 'limiterEnabled': self.limiter_enabled,
                'limiterCeiling': self.limiter_ceiling,
                'stereoWidth': self.stereo_width}

    @staticmethod
    def from_dict(d):
        return MasterChannel(
            volume=d.get('volume', 1.0),
            limiter_enabled=d.get('limiterEnabled', True),
            limiter_ceiling=d.get('limiterCeiling', -0.3),
            stereo_width=d.get('stereoWidth', 1.0),
        )


# ============================================================================
# ARRANGEMENT
# ============================================================================

class SectionType(str, Enum):
    INTRO = 'intro'
    VERSE = 'verse'
    PRE_CHORUS = 'pre_chorus'
    CHORUS = 'chorus'
    BRIDGE = 'bridge'
    BREAKDOWN = 'breakdown'
    DROP = 'drop'
    OUTRO = 'outro'
    CUSTOM = 'custom'

    @property
    def label(self) -> str:
        return self.value.replace('_', '-').title()


@dataclass(eq=False)
class ArrangementSection:
    id: int
    name: str
    start: float
    end: float
    type: SectionType = SectionType.CUSTOM
    repeat_count: int = 1
    muted: bool = False
    locked: bool = False
    color: str = DEFAULT_SECTION_COLOR

    @property
    def length(self) -> float:
        return self.end - self.start

    def contains(self, position: float) -> bool:
        return self.start <= position < self.end

    def to_dict(self):
        return {
            'id': self.id, 'name': self.name, 'start': self.start,
            'end': self.end, 'type': self.type.value,
            'repeatCount': self.repeat_count, 'muted': self.muted,
            'locked': self.locked, 'color': self.color,
        }

    @staticmethod
    def from_dict(d):
        return ArrangementSection(
            id=d['id'], name=d['name'], start=d['start'], end=d['end'],
            type=SectionType(d.get('type', 'custom')),
            repeat_count=d.get('repeatCount', 1), muted=d.get('muted', False),
            locked=d.get('locked', False),
            color=d.get('color', DEFAULT_SECTION_COLOR),
        )


class Arrangement(Listenable):
    """Song sections ordered by start position."""

    def __init__(self):
        self.sections: list[ArrangementSection] = []
        self._next_id: int = 1
        self._listeners: list[Callable] = []

    def new_id(self) -> int:
        nid = self._next_id
        self._next_id += 1
        return nid

    def _sort(self):
        self.sections.sort(key=lambda s: s.start)

    def add_section(self, start: float, end: float,
                    section_type: SectionType = SectionType.CUSTOM,
                    name: Optional[str] = None) -> ArrangementSection:
        if end <= start:
            raise ValueError(f'section end ({end}) must be after start ({start})')
        section = ArrangementSection(
            id=self.new_id(), name=name or section_type.label,
            start=start, end=end, type=section_type,
        )
        return self.insert_section(section)

    def insert_section(self, section: ArrangementSection) -> ArrangementSection:
        """Re-insert an existing section object (keeps its identity)."""
        self.sections.append(section)
        self._next_id = max(self._next_id, section.id + 1)
        self._sort()
        self.notify('add_section')
        return section

    def remove_section(self, section: ArrangementSection) -> bool:
        for i, s in enumerate(self.sections):
            if s is section:
                self.sections.pop(i)
                self.notify('remove_section')
                return True
        return False

    def move_section(self, section: ArrangementSection, start: float):
        """Move a section, keeping its length."""
        self.set_bounds(section, start, start + section.length)

    def set_bounds(self, section: ArrangementSection, start: float, end: float):
        section.start = start
        section.end = end
        self._sort()
        self.notify('move_section')

    def contains(self, section) -> bool:
        return any(s is section for s in self.sections)

    def find_section(self, sid) -> Optional[ArrangementSection]:
        return next((s for s in self.sections if s.id == sid), None)

    def section_at(self, position: float) -> Optional[ArrangementSection]:
        return next((s for s in self.sections if s.contains(position)), None)

    def to_dict(self):
        return {'sections': [s.to_dict() for s in self.sections],
                'nextId': self._next_id}

    @staticmethod
    def from_dict(d):
        arr = Arrangement()
        arr.sections = [ArrangementSection.from_dict(s)
                        for s in d.get('sections', [])]
        arr._sort()
        arr._next_id = max([d.get('nextId', 1)]
                           + [s.id + 1 for s in arr.sections])
        return arr
