"""Note editing commands for the piano roll.

Commands hold Note objects by reference. Insert/delete work on the
pattern's note list by index so the list order survives undo; move,
resize and velocity edits write fields on the notes directly.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import ClassVar

from ..commands import Command, require
from ..state import Note, Pattern, clamp

MIN_DURATION = 1 / 64  # beats


@dataclass(frozen=True)
class NoteIndex:
    note: Note
    index: int


@dataclass(frozen=True)
class NoteMove:
    note: Note
    old_start: float
    old_pitch: int
    new_start: float
    new_pitch: int


@dataclass(frozen=True)
class NoteResize:
    note: Note
    old_duration: float
    new_duration: float


@dataclass(frozen=True)
class NoteVelocity:
    note: Note
    old_velocity: int
    new_velocity: int


def _as_notes(notes):
    if notes is None:
        raise ValueError('notes are required')
    if isinstance(notes, Note):
        return [notes]
    notes = list(notes)
    if any(n is None for n in notes):
        raise ValueError('notes must not contain None')
    return notes


def _pair_up(notes, values, what):
    if len(notes) != len(values):
        raise ValueError(
            f'got {len(notes)} notes but {len(values)} {what}')
    return list(zip(notes, values))


def index_of(notes, note):
    """Position of *note* in *notes* by identity, or -1."""
    return next((i for i, n in enumerate(notes) if n is note), -1)


def _same_notes(a, b):
    return len(a) == len(b) and all(x.note is y.note for x, y in zip(a, b))


def _label(items, one, many):
    if len(items) == 1:
        return one.format(name=items[0].note.name)
    return many.format(count=len(items))


@dataclass(eq=False, repr=False)
class AddNote(Command):
    kind: ClassVar[str] = 'note.add'

    pattern: Pattern
    note: Note
    label: str = ''

    @classmethod
    def create(cls, pattern, note):
        require(pattern, 'pattern')
        require(note, 'note')
        return cls(pattern, note, f'Add Note {note.name}')

    @property
    def description(self):
        return self.label

    def execute(self):
        if index_of(self.pattern.notes, self.note) < 0:
            self.pattern.notes.append(self.note)

    def undo(self):
        idx = index_of(self.pattern.notes, self.note)
        if idx >= 0:
            self.pattern.notes.pop(idx)


@dataclass(eq=False, repr=False)
class DeleteNotes(Command):
    """Delete notes, restoring them at their original indices on undo."""
    kind: ClassVar[str] = 'note.delete'

    pattern: Pattern
    entries: tuple
    label: str = ''
    _removed: list = field(default_factory=list, init=False)

    @classmethod
    def create(cls, pattern, notes):
        require(pattern, 'pattern')
        entries = tuple(NoteIndex(n, index_of(pattern.notes, n))
                        for n in _as_notes(notes))
        return cls(pattern, entries,
                   _label(entries, 'Delete Note {name}', 'Delete {count} Notes'))

    @property
    def description(self):
        return self.label

    def execute(self):
        notes = self.pattern.notes
        present = [NoteIndex(e.note, index_of(notes, e.note))
                   for e in self.entries]
        # Highest index first so earlier indices stay valid
        removed = sorted((e for e in present if e.index >= 0),
                         key=lambda e: e.index, reverse=True)
        for e in removed:
            notes.pop(e.index)
        self._removed = removed

    def undo(self):
        notes = self.pattern.notes
        for e in reversed(self._removed):
            if index_of(notes, e.note) >= 0:
                continue
            if e.index <= len(notes):
                notes.insert(e.index, e.note)
            else:
                notes.append(e.note)
        self._removed = []


@dataclass(eq=False, repr=False)
class MoveNotes(Command):
    kind: ClassVar[str] = 'note.move'

    moves: tuple
    label: str = ''

    @classmethod
    def create(cls, notes, positions):
        """positions: (start, pitch) per note, or one pair for one note."""
        notes = _as_notes(notes)
        if positions is None:
            raise ValueError('positions are required')
        positions = list(positions)
        if len(positions) == 2 and not isinstance(positions[0], (tuple, list)):
            positions = [tuple(positions)]
        moves = tuple(
            NoteMove(n, n.start, n.pitch, float(start), clamp(int(pitch), 0, 127))
            for n, (start, pitch) in _pair_up(notes, positions, 'positions'))
        return cls(moves, _label(moves, 'Move Note {name}', 'Move {count} Notes'))

    @property
    def description(self):
        return self.label

    def execute(self):
        for m in self.moves:
            m.note.start = m.new_start
            m.note.pitch = m.new_pitch

    def undo(self):
        for m in self.moves:
            m.note.start = m.old_start
            m.note.pitch = m.old_pitch

    def can_merge_with(self, other):
        return isinstance(other, MoveNotes) and _same_notes(self.moves, other.moves)

    def merge_with(self, other):
        if not isinstance(other, MoveNotes):
            return self
        return MoveNotes(tuple(
            NoteMove(a.note, a.old_start, a.old_pitch, b.new_start, b.new_pitch)
            for a, b in zip(self.moves, other.moves)), self.label)


@dataclass(eq=False, repr=False)
class ResizeNotes(Command):
    kind: ClassVar[str] = 'note.resize'

    resizes: tuple
    label: str = ''

    @classmethod
    def create(cls, notes, durations):
        notes = _as_notes(notes)
        if durations is None:
            raise ValueError('durations are required')
        if isinstance(durations, (int, float)):
            durations = [durations] * len(notes)
        resizes = tuple(
            NoteResize(n, n.duration, max(MIN_DURATION, float(d)))
            for n, d in _pair_up(notes, list(durations), 'durations'))
        return cls(resizes,
                   _label(resizes, 'Resize Note {name}', 'Resize {count} Notes'))

    @property
    def description(self):
        return self.label

    def execute(self):
        for r in self.resizes:
            r.note.duration = r.new_duration

    def undo(self):
        for r in self.resizes:
            r.note.duration = r.old_duration

    def can_merge_with(self, other):
        return (isinstance(other, ResizeNotes)
                and _same_notes(self.resizes, other.resizes))

    def merge_with(self, other):
        if not isinstance(other, ResizeNotes):
            return self
        return ResizeNotes(tuple(
            NoteResize(a.note, a.old_duration, b.new_duration)
            for a, b in zip(self.resizes, other.resizes)), self.label)


@dataclass(eq=False, repr=False)
class SetNoteVelocity(Command):
    kind: ClassVar[str] = 'note.velocity'

    changes: tuple

    @classmethod
    def create(cls, notes, velocities):
        """velocities: one value for all notes, or one per note."""
        notes = _as_notes(notes)
        if velocities is None:
            raise ValueError('velocities are required')
        if isinstance(velocities, int):
            velocities = [velocities] * len(notes)
        return cls(tuple(
            NoteVelocity(n, n.velocity, clamp(int(v), 0, 127))
            for n, v in _pair_up(notes, list(velocities), 'velocities')))

    @property
    def description(self):
        if len(self.changes) == 1:
            return f'Change Velocity to {self.changes[0].new_velocity}'
        return f'Change Velocity of {len(self.changes)} Notes'

    def execute(self):
        for c in self.changes:
            c.note.velocity = c.new_velocity

    def undo(self):
        for c in self.changes:
            c.note.velocity = c.old_velocity

    def can_merge_with(self, other):
        return (isinstance(other, SetNoteVelocity)
                and _same_notes(self.changes, other.changes))

    def merge_with(self, other):
        if not isinstance(other, SetNoteVelocity):
            return self
        return SetNoteVelocity(tuple(
            NoteVelocity(a.note, a.old_velocity, b.new_velocity)
            for a, b in zip(self.changes, other.changes)))
