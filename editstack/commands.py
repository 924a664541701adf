"""Reversible edit commands.

Every edit the UI performs is one of a closed set of command variants.
Each variant is a dataclass tagged with a ``kind`` string and holding the
pre-state it captured at construction (plus whatever post-state it needs),
so that ``execute(); undo()`` restores the edited aggregate exactly.

Variants are built through their ``create`` classmethods, which validate
arguments and read the prior state off the live objects. Merging builds a
new variant straight from the two payloads.
"""

from __future__ import annotations
import dataclasses
import logging
from enum import Enum
from typing import ClassVar, Optional

logger = logging.getLogger(__name__)

# kind tag -> variant class
COMMAND_KINDS: dict = {}


def require(value, name):
    """Fail fast on a missing collaborator at construction time."""
    if value is None:
        raise ValueError(f'{name} is required')
    return value


class Command:
    """Base of the command family.

    Subclasses set ``kind`` and implement execute/undo. The default merge
    policy refuses everything.
    """

    kind: ClassVar[str] = ''

    def __init_subclass__(cls, **kwargs):
        super().__init_subclass__(**kwargs)
        kind = cls.__dict__.get('kind')
        if not kind:
            return
        if kind in COMMAND_KINDS and COMMAND_KINDS[kind] is not cls:
            raise TypeError(f'duplicate command kind {kind!r}')
        COMMAND_KINDS[kind] = cls

    @property
    def description(self) -> str:
        return self.kind

    def execute(self):
        raise NotImplementedError

    def undo(self):
        raise NotImplementedError

    def can_merge_with(self, other: Command) -> bool:
        return False

    def merge_with(self, other: Command) -> Command:
        return self

    def to_dict(self) -> dict:
        """Debug serialization: kind tag plus payload, aggregates by id."""
        d = {'kind': self.kind}
        if dataclasses.is_dataclass(self):
            for f in dataclasses.fields(self):
                if f.name.startswith('_'):
                    continue
                d[f.name] = _plain(getattr(self, f.name))
        return d

    def __repr__(self):
        return f'<{type(self).__name__} {self.description!r}>'


def _plain(v):
    if isinstance(v, Enum):
        return v.value
    if isinstance(v, Command):
        return v.to_dict()
    if dataclasses.is_dataclass(v) and not isinstance(v, type):
        if getattr(type(v), '__dataclass_params__').frozen:
            return {k: _plain(x) for k, x in dataclasses.asdict(v).items()}
        return {'ref': type(v).__name__, 'id': getattr(v, 'id', None)}
    if isinstance(v, (list, tuple)):
        return [_plain(x) for x in v]
    if isinstance(v, (str, int, float, bool)) or v is None:
        return v
    # Lanes, arrangements, note lists and other containers
    ref = getattr(v, 'id', None)
    return {'ref': type(v).__name__, 'id': ref}


@dataclasses.dataclass(eq=False, repr=False)
class CompoundCommand(Command):
    """Several commands recorded as one undo step."""
    kind: ClassVar[str] = 'batch'

    label: str
    commands: list = dataclasses.field(default_factory=list)

    @property
    def description(self) -> str:
        return self.label

    def execute(self):
        for cmd in self.commands:
            cmd.execute()

    def undo(self):
        for cmd in reversed(self.commands):
            cmd.undo()


def variant_kinds() -> list:
    return sorted(COMMAND_KINDS)


def command_class(kind: str) -> Optional[type]:
    return COMMAND_KINDS.get(kind)
