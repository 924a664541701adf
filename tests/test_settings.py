import json
import logging

from editstack.context import EditContext
from editstack.core.settings import DEFAULTS, Settings
from editstack.ops import mixer
from editstack.ops.mixer import SetChannelMute, SetChannelVolume


def test_defaults_without_file(tmp_path):
    s = Settings(tmp_path / 'missing.json')
    assert s.to_dict() == DEFAULTS
    assert s.merge_window == 0.5


def test_save_and_load(tmp_path):
    path = tmp_path / 'cfg' / 'settings.json'
    s = Settings(path, load=False)
    s.max_history = 20
    s.merge_window_ms = 250
    s.save()
    loaded = Settings(path)
    assert loaded.max_history == 20
    assert loaded.merge_window == 0.25


def test_invalid_values_keep_defaults(tmp_path):
    path = tmp_path / 'settings.json'
    path.write_text(json.dumps({'max_history': 0, 'merge_window_ms': -5,
                                'thin_threshold': 0.05}))
    s = Settings(path)
    assert s.max_history == DEFAULTS['max_history']
    assert s.merge_window_ms == DEFAULTS['merge_window_ms']
    assert s.thin_threshold == 0.05


def test_unreadable_file_is_logged(tmp_path, caplog):
    path = tmp_path / 'settings.json'
    path.write_text('{not json')
    with caplog.at_level(logging.WARNING):
        s = Settings(path)
    assert s.to_dict() == DEFAULTS
    assert '[SETTINGS]' in caplog.text


def test_context_wires_settings_into_history(tmp_path, channel):
    path = tmp_path / 'settings.json'
    path.write_text(json.dumps({'max_history': 2}))
    ctx = EditContext.from_user_settings(path)
    assert ctx.history.max_size == 2
    for ts, v in ((0.0, 0.1), (5.0, 0.2), (10.0, 0.3)):
        ctx.record(SetChannelVolume.create(channel, v, timestamp=ts,
                                           merge_window=ctx.merge_window))
    assert len(ctx.history.undo_stack) == 2


def test_default_context_is_independent():
    a, b = EditContext(), EditContext()
    assert a.clipboard is not b.clipboard
    assert a.history is not b.history
    assert a.thin_threshold == DEFAULTS['thin_threshold']


def test_context_change_uses_configured_merge_window(tmp_path, monkeypatch,
                                                     channel):
    path = tmp_path / 'settings.json'
    path.write_text(json.dumps({'merge_window_ms': 2000}))
    ctx = EditContext.from_user_settings(path)
    times = iter([0.0, 1.5, 4.0])
    monkeypatch.setattr(mixer, 'clock', lambda: next(times))
    ctx.change(SetChannelVolume, channel, 0.5)
    ctx.change(SetChannelVolume, channel, 0.6)
    assert len(ctx.history.undo_stack) == 1
    ctx.change(SetChannelVolume, channel, 0.7)
    assert len(ctx.history.undo_stack) == 2
    ctx.change(SetChannelMute, channel, True)
    assert channel.muted is True
    assert len(ctx.history.undo_stack) == 3
