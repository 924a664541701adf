"""Per-document editing context.

Bundles the objects every edit surface shares: the settings, the undo
history and the automation clipboard. UI handlers take what they need
from here instead of reaching for module-level singletons.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Optional

from .clipboard import AutomationClipboard
from .core.settings import Settings
from .ops.mixer import ContinuousChange
from .undo import HistoryStack


@dataclass
class EditContext:
    settings: Settings = field(default_factory=lambda: Settings(load=False))
    clipboard: AutomationClipboard = field(default_factory=AutomationClipboard)
    history: Optional[HistoryStack] = None

    def __post_init__(self):
        if self.history is None:
            self.history = HistoryStack(max_size=self.settings.max_history)

    @classmethod
    def from_user_settings(cls, path=None) -> EditContext:
        return cls(settings=Settings(path))

    @property
    def merge_window(self) -> float:
        return self.settings.merge_window

    @property
    def thin_threshold(self) -> float:
        return self.settings.thin_threshold

    def record(self, cmd):
        """Execute *cmd* and add it to this document's history."""
        self.history.record(cmd)
        return cmd

    def change(self, variant, target, value):
        """Build and record a control change.

        Continuous controls get this document's merge window, so a fader
        drag coalesces according to ``Settings.merge_window_ms``.
        """
        if issubclass(variant, ContinuousChange):
            cmd = variant.create(target, value, merge_window=self.merge_window)
        else:
            cmd = variant.create(target, value)
        return self.record(cmd)
