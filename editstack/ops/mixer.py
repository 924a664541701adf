"""Mixer commands: channel, send, bus and master controls.

Continuous controls (faders, pan knobs, send levels) coalesce: a change
to the same control arriving within the merge window of the previous one
folds into it, so a whole drag is one undo step. Switches and text edits
never merge. The master channel gets one variant per field.
"""

from __future__ import annotations
import time
from dataclasses import dataclass, replace
from typing import Any, ClassVar, Optional

from ..commands import Command, require
from ..core.settings import DEFAULT_MERGE_WINDOW
from ..state import BusChannel, MasterChannel, MixerChannel, Send, clamp

clock = time.monotonic


@dataclass(eq=False, repr=False)
class ContinuousChange(Command):
    """old -> new on one control, stamped for time-window merging."""

    target: Any
    old: float
    new: float
    timestamp: float
    merge_window: float = DEFAULT_MERGE_WINDOW
    label: str = ''

    @classmethod
    def create(cls, target, value, *, timestamp: Optional[float] = None,
               merge_window: float = DEFAULT_MERGE_WINDOW):
        require(target, 'target')
        return cls(target, cls.read(target), cls.limit(float(value)),
                   clock() if timestamp is None else timestamp, merge_window,
                   cls.name_of(target))

    @staticmethod
    def name_of(target) -> str:
        return getattr(target, 'name', '')

    @staticmethod
    def read(target) -> float:
        raise NotImplementedError

    @staticmethod
    def write(target, value):
        raise NotImplementedError

    @staticmethod
    def limit(value: float) -> float:
        return value

    def execute(self):
        self.write(self.target, self.new)

    def undo(self):
        self.write(self.target, self.old)

    def can_merge_with(self, other):
        return (type(other) is type(self)
                and other.target is self.target
                and 0 <= other.timestamp - self.timestamp < self.merge_window)

    def merge_with(self, other):
        if type(other) is not type(self):
            return self
        # Original pre-value and timestamp, latest post-value
        return replace(self, new=other.new)


@dataclass(eq=False, repr=False)
class FieldChange(Command):
    """old -> new on a switch or text field; never merges."""

    target: Any
    old: Any
    new: Any
    label: str = ''

    @classmethod
    def create(cls, target, value):
        require(target, 'target')
        return cls(target, cls.read(target), cls.limit(value),
                   getattr(target, 'name', ''))

    @staticmethod
    def read(target):
        raise NotImplementedError

    @staticmethod
    def write(target, value):
        raise NotImplementedError

    @staticmethod
    def limit(value):
        return value

    def execute(self):
        self.write(self.target, self.new)

    def undo(self):
        self.write(self.target, self.old)


# -- channel ----------------------------------------------------------------

@dataclass(eq=False, repr=False)
class SetChannelVolume(ContinuousChange):
    kind: ClassVar[str] = 'mixer.volume'

    @staticmethod
    def read(ch: MixerChannel):
        return ch.volume

    @staticmethod
    def write(ch: MixerChannel, v):
        ch.volume = v

    @staticmethod
    def limit(v):
        return max(0.0, v)

    @property
    def description(self):
        return f'Change {self.label} Volume'


@dataclass(eq=False, repr=False)
class SetChannelPan(ContinuousChange):
    kind: ClassVar[str] = 'mixer.pan'

    @staticmethod
    def read(ch: MixerChannel):
        return ch.pan

    @staticmethod
    def write(ch: MixerChannel, v):
        ch.pan = v

    @staticmethod
    def limit(v):
        return clamp(v, -1.0, 1.0)

    @property
    def description(self):
        return f'Change {self.label} Pan'


@dataclass(eq=False, repr=False)
class SetChannelMute(FieldChange):
    kind: ClassVar[str] = 'mixer.mute'

    @staticmethod
    def read(ch: MixerChannel):
        return ch.muted

    @staticmethod
    def write(ch: MixerChannel, v):
        ch.muted = v

    @staticmethod
    def limit(v):
        return bool(v)

    @property
    def description(self):
        return f'{"Mute" if self.new else "Unmute"} {self.label}'


@dataclass(eq=False, repr=False)
class SetChannelSolo(FieldChange):
    kind: ClassVar[str] = 'mixer.solo'

    @staticmethod
    def read(ch: MixerChannel):
        return ch.soloed

    @staticmethod
    def write(ch: MixerChannel, v):
        ch.soloed = v

    @staticmethod
    def limit(v):
        return bool(v)

    @property
    def description(self):
        return f'{"Solo" if self.new else "Unsolo"} {self.label}'


@dataclass(eq=False, repr=False)
class RenameChannel(FieldChange):
    kind: ClassVar[str] = 'mixer.rename'

    @staticmethod
    def read(ch: MixerChannel):
        return ch.name

    @staticmethod
    def write(ch: MixerChannel, v):
        ch.name = v

    @staticmethod
    def limit(v):
        return require(v, 'name')

    @property
    def description(self):
        return f'Rename Channel to {self.new}'


@dataclass(eq=False, repr=False)
class SetChannelColor(FieldChange):
    kind: ClassVar[str] = 'mixer.color'

    @staticmethod
    def read(ch: MixerChannel):
        return ch.color

    @staticmethod
    def write(ch: MixerChannel, v):
        ch.color = v

    @staticmethod
    def limit(v):
        return require(v, 'color')

    @property
    def description(self):
        return f'Change {self.label} Color'


# -- sends and buses ----------------------------------------------------------

@dataclass(eq=False, repr=False)
class SetSendLevel(ContinuousChange):
    kind: ClassVar[str] = 'mixer.send_level'

    @staticmethod
    def name_of(send: Send):
        return send.target_bus_name

    @staticmethod
    def read(send: Send):
        return send.level

    @staticmethod
    def write(send: Send, v):
        send.level = v

    @staticmethod
    def limit(v):
        return clamp(v, 0.0, 1.0)

    @property
    def description(self):
        return f'Change Send Level to {self.label}'


@dataclass(eq=False, repr=False)
class SetBusVolume(ContinuousChange):
    kind: ClassVar[str] = 'mixer.bus_volume'

    @staticmethod
    def read(bus: BusChannel):
        return bus.volume

    @staticmethod
    def write(bus: BusChannel, v):
        bus.volume = v

    @staticmethod
    def limit(v):
        return max(0.0, v)

    @property
    def description(self):
        return f'Change {self.label} Bus Volume'


# -- master -------------------------------------------------------------------

@dataclass(eq=False, repr=False)
class SetMasterVolume(ContinuousChange):
    kind: ClassVar[str] = 'master.volume'

    @staticmethod
    def read(m: MasterChannel):
        return m.volume

    @staticmethod
    def write(m: MasterChannel, v):
        m.volume = v

    @staticmethod
    def limit(v):
        return max(0.0, v)

    @property
    def description(self):
        return 'Change Master Volume'


@dataclass(eq=False, repr=False)
class SetLimiterEnabled(FieldChange):
    kind: ClassVar[str] = 'master.limiter_enabled'

    @staticmethod
    def read(m: MasterChannel):
        return m.limiter_enabled

    @staticmethod
    def write(m: MasterChannel, v):
        m.limiter_enabled = v

    @staticmethod
    def limit(v):
        return bool(v)

    @property
    def description(self):
        return f'{"Enable" if self.new else "Disable"} Master Limiter'


@dataclass(eq=False, repr=False)
class SetLimiterCeiling(FieldChange):
    kind: ClassVar[str] = 'master.limiter_ceiling'

    @staticmethod
    def read(m: MasterChannel):
        return m.limiter_ceiling

    @staticmethod
    def write(m: MasterChannel, v):
        m.limiter_ceiling = v

    @staticmethod
    def limit(v):
        return min(0.0, float(v))

    @property
    def description(self):
        return 'Change Master Limiter Ceiling'


@dataclass(eq=False, repr=False)
class SetStereoWidth(FieldChange):
    kind: ClassVar[str] = 'master.stereo_width'

    @staticmethod
    def read(m: MasterChannel):
        return m.stereo_width

    @staticmethod
    def write(m: MasterChannel, v):
        m.stereo_width = v

    @staticmethod
    def limit(v):
        return clamp(float(v), 0.0, 2.0)

    @property
    def description(self):
        return 'Change Master Stereo Width'
