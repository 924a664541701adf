"""Shared fixtures for the test suite."""

import pytest

from editstack.clipboard import AutomationClipboard
from editstack.state import (Arrangement, AutomationLane, BusChannel,
                             CurveType, MasterChannel, MixerChannel, Note,
                             Pattern, SectionType, Send)
from editstack.undo import HistoryStack


@pytest.fixture
def history():
    return HistoryStack(max_size=50)


@pytest.fixture
def clipboard():
    return AutomationClipboard()


@pytest.fixture
def lane():
    """Unit lane with a few points of mixed shape."""
    ln = AutomationLane('cutoff', 0.0, 1.0)
    ln.add_point(0.0, 0.1)
    ln.add_point(1.0, 0.5, CurveType.BEZIER, bezier_y1=0.2, bezier_y2=0.8)
    ln.add_point(2.0, 0.9, CurveType.STEP, tension=0.3, label='peak')
    ln.add_point(3.0, 0.4, CurveType.EXPONENTIAL, is_locked=True)
    return ln


@pytest.fixture
def pattern():
    return Pattern(id=1, name='Lead', length=4.0, notes=[
        Note(pitch=60, start=0.0, duration=1.0, velocity=90, id=1),
        Note(pitch=64, start=1.0, duration=0.5, velocity=100, id=2),
        Note(pitch=67, start=2.0, duration=1.0, velocity=110, id=3),
    ])


@pytest.fixture
def channel():
    return MixerChannel(id=1, name='Drums', volume=0.8, pan=0.0,
                        sends=[Send(id=1, target_bus_name='Reverb', level=0.2)])


@pytest.fixture
def bus():
    return BusChannel(id=10, name='Reverb', volume=0.7)


@pytest.fixture
def master():
    return MasterChannel()


@pytest.fixture
def arrangement():
    arr = Arrangement()
    arr.add_section(0.0, 8.0, SectionType.INTRO)
    arr.add_section(8.0, 24.0, SectionType.VERSE)
    arr.add_section(24.0, 40.0, SectionType.CHORUS)
    return arr
