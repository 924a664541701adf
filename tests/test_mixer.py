import pytest

from editstack.ops import mixer
from editstack.ops.mixer import (RenameChannel, SetBusVolume, SetChannelColor,
                                 SetChannelMute, SetChannelPan,
                                 SetChannelSolo, SetChannelVolume,
                                 SetLimiterCeiling, SetLimiterEnabled,
                                 SetMasterVolume, SetSendLevel, SetStereoWidth)


def test_fader_drag_within_window_merges(history, channel):
    history.record(SetChannelVolume.create(channel, 0.5, timestamp=10.0))
    history.record(SetChannelVolume.create(channel, 0.6, timestamp=10.2))
    history.record(SetChannelVolume.create(channel, 0.7, timestamp=10.4))
    assert len(history.undo_stack) == 1
    assert channel.volume == 0.7
    assert history.undo_stack[-1].timestamp == 10.0
    history.undo()
    assert channel.volume == 0.8


def test_changes_outside_window_stay_separate(history, channel):
    history.record(SetChannelVolume.create(channel, 0.5, timestamp=10.0))
    history.record(SetChannelVolume.create(channel, 0.6, timestamp=10.7))
    assert len(history.undo_stack) == 2
    history.undo()
    assert channel.volume == 0.5


def test_window_is_configurable(history, channel):
    history.record(SetChannelPan.create(channel, 0.1, timestamp=0.0,
                                        merge_window=2.0))
    history.record(SetChannelPan.create(channel, 0.2, timestamp=1.5))
    assert len(history.undo_stack) == 1


def test_different_controls_do_not_merge(history, channel):
    history.record(SetChannelVolume.create(channel, 0.5, timestamp=1.0))
    history.record(SetChannelPan.create(channel, 0.5, timestamp=1.1))
    assert len(history.undo_stack) == 2


def test_out_of_order_timestamp_does_not_merge(channel):
    later = SetChannelVolume.create(channel, 0.5, timestamp=5.0)
    earlier = SetChannelVolume.create(channel, 0.6, timestamp=4.9)
    assert not later.can_merge_with(earlier)


def test_default_timestamp_comes_from_clock(monkeypatch, channel):
    monkeypatch.setattr(mixer, 'clock', lambda: 42.0)
    assert SetChannelVolume.create(channel, 0.5).timestamp == 42.0


def test_values_are_limited(channel, master):
    assert SetChannelVolume.create(channel, -1.0).new == 0.0
    assert SetChannelPan.create(channel, 3.0).new == 1.0
    assert SetSendLevel.create(channel.sends[0], 1.5).new == 1.0
    assert SetLimiterCeiling.create(master, 2.0).new == 0.0
    assert SetStereoWidth.create(master, 5.0).new == 2.0


def test_switches_never_merge(history, channel):
    history.record(SetChannelMute.create(channel, True))
    history.record(SetChannelMute.create(channel, False))
    assert len(history.undo_stack) == 2
    assert history.undo_history() == ['Unmute Drums', 'Mute Drums']
    history.undo_many(2)
    assert channel.muted is False


@pytest.mark.parametrize('variant, attr, value', [
    (SetChannelSolo, 'soloed', True),
    (RenameChannel, 'name', 'Kit'),
    (SetChannelColor, 'color', '#000000'),
])
def test_channel_fields(history, channel, variant, attr, value):
    old = getattr(channel, attr)
    history.record(variant.create(channel, value))
    assert getattr(channel, attr) == value
    history.undo()
    assert getattr(channel, attr) == old


def test_rename_requires_name(channel):
    with pytest.raises(ValueError):
        RenameChannel.create(channel, None)


def test_send_and_bus(history, channel, bus):
    send = channel.sends[0]
    history.record(SetSendLevel.create(send, 0.6, timestamp=0.0))
    history.record(SetBusVolume.create(bus, 0.3, timestamp=0.0))
    assert (send.level, bus.volume) == (0.6, 0.3)
    assert history.undo_history() == ['Change Reverb Bus Volume',
                                      'Change Send Level to Reverb']
    history.undo_many(2)
    assert (send.level, bus.volume) == (0.2, 0.7)


def test_master_controls(history, master):
    history.record(SetMasterVolume.create(master, 0.5, timestamp=0.0))
    history.record(SetLimiterEnabled.create(master, False))
    history.record(SetLimiterCeiling.create(master, -1.0))
    history.record(SetStereoWidth.create(master, 1.5))
    assert (master.volume, master.limiter_enabled,
            master.limiter_ceiling, master.stereo_width) == (0.5, False, -1.0, 1.5)
    history.undo_many(4)
    assert (master.volume, master.limiter_enabled,
            master.limiter_ceiling, master.stereo_width) == (1.0, True, -0.3, 1.0)


def test_target_is_required():
    with pytest.raises(ValueError):
        SetChannelVolume.create(None, 0.5)


def test_descriptions_keep_the_name_at_creation(channel):
    volume = SetChannelVolume.create(channel, 0.5, timestamp=0.0)
    mute = SetChannelMute.create(channel, True)
    send = SetSendLevel.create(channel.sends[0], 0.4, timestamp=0.0)
    RenameChannel.create(channel, 'Kit').execute()
    channel.sends[0].target_bus_name = 'Delay'
    assert volume.description == 'Change Drums Volume'
    assert mute.description == 'Mute Drums'
    assert send.description == 'Change Send Level to Reverb'
