"""User-facing settings - persisted to ~/.config/editstack/settings.json.

Covers the edit-history tuning knobs:
  - max_history: how many undo steps are kept before the oldest drop off
  - merge_window_ms: how close together two continuous-control edits
    (fader, pan knob, send level) must arrive to coalesce into one step
  - thin_threshold: default tolerance for automation thinning, in
    normalized curve units
"""

import json
import logging
from pathlib import Path

logger = logging.getLogger(__name__)

CONFIG_PATH = Path.home() / '.config' / 'editstack' / 'settings.json'

DEFAULTS = {
    'max_history': 200,
    'merge_window_ms': 500,
    'thin_threshold': 0.01,
}

DEFAULT_MERGE_WINDOW = DEFAULTS['merge_window_ms'] / 1000.0


class Settings:
    def __init__(self, path=None, load=True):
        self.path = Path(path) if path else CONFIG_PATH
        self.max_history: int = DEFAULTS['max_history']
        self.merge_window_ms: int = DEFAULTS['merge_window_ms']
        self.thin_threshold: float = DEFAULTS['thin_threshold']
        if load:
            self._load()

    @property
    def merge_window(self) -> float:
        """Merge window in seconds."""
        return self.merge_window_ms / 1000.0

    def _load(self):
        if not self.path.exists():
            return
        try:
            with open(self.path) as f:
                d = json.load(f)
            max_history = int(d.get('max_history', self.max_history))
            merge_window_ms = int(d.get('merge_window_ms', self.merge_window_ms))
            thin_threshold = float(d.get('thin_threshold', self.thin_threshold))
        except (OSError, ValueError, TypeError, AttributeError) as e:
            logger.warning('[SETTINGS] ignoring unreadable %s: %s', self.path, e)
            return
        # Out-of-range values keep defaults
        if max_history > 0:
            self.max_history = max_history
        if merge_window_ms >= 0:
            self.merge_window_ms = merge_window_ms
        if thin_threshold > 0:
            self.thin_threshold = thin_threshold

    def to_dict(self):
        return {
            'max_history': self.max_history,
            'merge_window_ms': self.merge_window_ms,
            'thin_threshold': self.thin_threshold,
        }

    def save(self):
        """Persist current settings to the user config file."""
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.path, 'w') as f:
                json.dump(self.to_dict(), f, indent=2)
        except OSError as e:
            logger.warning('[SETTINGS] could not write %s: %s', self.path, e)
