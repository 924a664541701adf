"""Arrangement section commands: add, delete, move/resize, properties."""

from __future__ import annotations
import logging
from dataclasses import dataclass, field, replace
from typing import Any, ClassVar, Optional

from ..commands import Command, require
from ..state import (TIME_EPSILON, Arrangement, ArrangementSection,
                     SectionType)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SectionState:
    name: str
    start: float
    end: float
    type: SectionType
    repeat_count: int
    muted: bool
    locked: bool
    color: str

    @staticmethod
    def of(s: ArrangementSection) -> SectionState:
        return SectionState(s.name, s.start, s.end, s.type, s.repeat_count,
                            s.muted, s.locked, s.color)

    def apply(self, s: ArrangementSection):
        s.name = self.name
        s.start = self.start
        s.end = self.end
        s.type = self.type
        s.repeat_count = self.repeat_count
        s.muted = self.muted
        s.locked = self.locked
        s.color = self.color


@dataclass(eq=False, repr=False)
class AddSection(Command):
    kind: ClassVar[str] = 'section.add'

    arrangement: Arrangement
    start: float
    end: float
    section_type: SectionType = SectionType.CUSTOM
    name: Optional[str] = None
    _section: Optional[ArrangementSection] = field(default=None, init=False)

    @classmethod
    def create(cls, arrangement, start, end,
               section_type=SectionType.CUSTOM, name=None):
        require(arrangement, 'arrangement')
        if end <= start:
            raise ValueError(f'section end ({end}) must be after start ({start})')
        return cls(arrangement, float(start), float(end),
                   SectionType(section_type), name)

    @classmethod
    def of_section(cls, arrangement, section):
        """Add an already-built section object."""
        require(arrangement, 'arrangement')
        require(section, 'section')
        cmd = cls(arrangement, section.start, section.end, section.type,
                  section.name)
        cmd._section = section
        return cmd

    @property
    def section(self) -> Optional[ArrangementSection]:
        return self._section

    @property
    def description(self):
        return f'Add {self.name or self.section_type.label} Section'

    def execute(self):
        if self._section is None:
            self._section = self.arrangement.add_section(
                self.start, self.end, self.section_type, self.name)
        elif not self.arrangement.contains(self._section):
            self.arrangement.insert_section(self._section)

    def undo(self):
        if self._section is not None:
            self.arrangement.remove_section(self._section)


@dataclass(eq=False, repr=False)
class DeleteSection(Command):
    kind: ClassVar[str] = 'section.delete'

    arrangement: Arrangement
    section: ArrangementSection
    state: SectionState
    _removed: bool = field(default=False, init=False)

    @classmethod
    def create(cls, arrangement, section):
        require(arrangement, 'arrangement')
        require(section, 'section')
        return cls(arrangement, section, SectionState.of(section))

    @property
    def description(self):
        return f'Delete {self.state.name} Section'

    def execute(self):
        self._removed = self.arrangement.remove_section(self.section)
        if not self._removed:
            logger.debug('section.delete: %s already gone', self.state.name)

    def undo(self):
        if not self._removed or self.arrangement.contains(self.section):
            return
        self._removed = False
        self.state.apply(self.section)
        self.arrangement.insert_section(self.section)


@dataclass(eq=False, repr=False)
class MoveSection(Command):
    """Move and/or resize a section."""
    kind: ClassVar[str] = 'section.move'

    arrangement: Arrangement
    section: ArrangementSection
    old_start: float
    old_end: float
    new_start: float
    new_end: float
    label: str = ''

    @classmethod
    def create(cls, arrangement, section, new_start, new_end=None):
        """Without new_end the section keeps its length."""
        require(arrangement, 'arrangement')
        require(section, 'section')
        if new_end is None:
            new_end = new_start + section.length
        if new_end <= new_start:
            raise ValueError(
                f'section end ({new_end}) must be after start ({new_start})')
        return cls(arrangement, section, section.start, section.end,
                   float(new_start), float(new_end), section.name)

    @property
    def is_resize(self) -> bool:
        return abs((self.new_end - self.new_start)
                   - (self.old_end - self.old_start)) > TIME_EPSILON

    @property
    def description(self):
        verb = 'Resize' if self.is_resize else 'Move'
        return f'{verb} {self.label} Section'

    def _place(self, start, end):
        if not self.arrangement.contains(self.section):
            logger.debug('section.move: %s not in arrangement', self.section.name)
            return
        self.arrangement.set_bounds(self.section, start, end)

    def execute(self):
        self._place(self.new_start, self.new_end)

    def undo(self):
        self._place(self.old_start, self.old_end)

    def can_merge_with(self, other):
        return (isinstance(other, MoveSection)
                and other.section is self.section
                and abs(other.old_start - self.new_start) < TIME_EPSILON)

    def merge_with(self, other):
        if not isinstance(other, MoveSection):
            return self
        return replace(self, new_start=other.new_start, new_end=other.new_end)


@dataclass(eq=False, repr=False)
class SectionFieldChange(Command):
    section: ArrangementSection
    old: Any
    new: Any
    label: str = ''

    @classmethod
    def create(cls, section, value):
        require(section, 'section')
        return cls(section, cls.read(section), cls.limit(value), section.name)

    @staticmethod
    def read(s):
        raise NotImplementedError

    @staticmethod
    def write(s, v):
        raise NotImplementedError

    @staticmethod
    def limit(v):
        return v

    def execute(self):
        self.write(self.section, self.new)

    def undo(self):
        self.write(self.section, self.old)


@dataclass(eq=False, repr=False)
class SetSectionMuted(SectionFieldChange):
    kind: ClassVar[str] = 'section.muted'

    @staticmethod
    def read(s):
        return s.muted

    @staticmethod
    def write(s, v):
        s.muted = v

    @staticmethod
    def limit(v):
        return bool(v)

    @property
    def description(self):
        return f'{"Mute" if self.new else "Unmute"} {self.label}'


@dataclass(eq=False, repr=False)
class SetSectionLocked(SectionFieldChange):
    kind: ClassVar[str] = 'section.locked'

    @staticmethod
    def read(s):
        return s.locked

    @staticmethod
    def write(s, v):
        s.locked = v

    @staticmethod
    def limit(v):
        return bool(v)

    @property
    def description(self):
        return f'{"Lock" if self.new else "Unlock"} {self.label}'


@dataclass(eq=False, repr=False)
class SetSectionRepeatCount(SectionFieldChange):
    kind: ClassVar[str] = 'section.repeat_count'

    @staticmethod
    def read(s):
        return s.repeat_count

    @staticmethod
    def write(s, v):
        s.repeat_count = v

    @staticmethod
    def limit(v):
        return max(1, int(v))

    @property
    def description(self):
        return f'Repeat {self.label} x{self.new}'


@dataclass(eq=False, repr=False)
class SetSectionColor(SectionFieldChange):
    kind: ClassVar[str] = 'section.color'

    @staticmethod
    def read(s):
        return s.color

    @staticmethod
    def write(s, v):
        s.color = v

    @staticmethod
    def limit(v):
        return require(v, 'color')

    @property
    def description(self):
        return f'Change {self.label} Color'


@dataclass(eq=False, repr=False)
class RenameSection(SectionFieldChange):
    kind: ClassVar[str] = 'section.rename'

    @staticmethod
    def read(s):
        return s.name

    @staticmethod
    def write(s, v):
        s.name = v

    @staticmethod
    def limit(v):
        return require(v, 'name')

    @property
    def description(self):
        return f'Rename Section to {self.new}'
