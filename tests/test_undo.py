import pytest

from editstack.commands import Command
from editstack.ops.automation import AddPoint, MovePoint
from editstack.ops.mixer import SetChannelVolume
from editstack.undo import HistoryStack


class Append(Command):
    """Minimal command over a plain list."""

    def __init__(self, target, item):
        self.target = target
        self.item = item

    @property
    def description(self):
        return f'Append {self.item}'

    def execute(self):
        self.target.append(self.item)

    def undo(self):
        self.target.remove(self.item)


class Explode(Command):
    def execute(self):
        raise RuntimeError('boom')

    def undo(self):
        pass


def test_record_executes_and_clears_redo(history):
    items = []
    history.record(Append(items, 1))
    history.record(Append(items, 2))
    history.undo()
    assert history.can_redo()
    history.record(Append(items, 3))
    assert items == [1, 3]
    assert not history.can_redo()


def test_undo_redo_round_trip(history):
    items = []
    for i in range(3):
        history.record(Append(items, i))
    assert history.undo_many(3) == 3
    assert items == []
    assert history.undo() is None
    assert history.redo_many(5) == 3
    assert items == [0, 1, 2]


def test_push_does_not_execute(history):
    items = [1]
    history.push(Append(items, 1))
    assert items == [1]
    history.undo()
    assert items == []


def test_none_command_is_rejected(history):
    with pytest.raises(ValueError):
        history.record(None)


def test_failed_execute_is_not_recorded(history):
    with pytest.raises(RuntimeError):
        history.record(Explode())
    assert not history.can_undo()


def test_max_size_drops_oldest():
    history = HistoryStack(max_size=3)
    items = []
    for i in range(5):
        history.record(Append(items, i))
    assert history.undo_history() == ['Append 4', 'Append 3', 'Append 2']
    assert history.undo_many(10) == 3
    assert items == [0, 1]


def test_invalid_max_size():
    with pytest.raises(ValueError):
        HistoryStack(max_size=0)


def test_menu_text(history):
    assert history.undo_text == 'Undo'
    assert history.redo_text == 'Redo'
    assert history.undo_description is None
    history.record(Append([], 'x'))
    assert history.undo_text == 'Undo Append x'
    history.undo()
    assert history.redo_text == 'Redo Append x'
    assert history.redo_history() == ['Append x']


def test_clear(history):
    history.record(Append([], 1))
    history.undo()
    history.record(Append([], 2))
    history.clear()
    assert not history.can_undo()
    assert not history.can_redo()


def test_listeners_see_each_change(history, channel):
    events = []
    history.on_change(events.append)
    history.record(SetChannelVolume.create(channel, 0.5, timestamp=1.0))
    history.record(SetChannelVolume.create(channel, 0.6, timestamp=1.1))
    history.undo()
    history.redo()
    history.clear()
    assert events == ['record', 'merge', 'undo', 'redo', 'clear']


def test_batch_is_one_step(history):
    items = []
    with history.batch('Add Three'):
        for i in range(3):
            history.record(Append(items, i))
    assert items == [0, 1, 2]
    assert history.undo_history() == ['Add Three']
    history.undo()
    assert items == []
    history.redo()
    assert items == [0, 1, 2]


def test_nested_batch_folds_into_outer(history):
    items = []
    with history.batch('Outer'):
        history.record(Append(items, 1))
        with history.batch('Inner'):
            history.record(Append(items, 2))
    assert history.undo_history() == ['Outer']


def test_empty_batch_records_nothing(history):
    with history.batch('Nothing'):
        pass
    assert not history.can_undo()


def test_batch_rolls_back_on_error(history):
    items = []
    with pytest.raises(RuntimeError):
        with history.batch('Broken'):
            history.record(Append(items, 1))
            history.record(Append(items, 2))
            raise RuntimeError('cancelled')
    assert items == []
    assert not history.can_undo()


def test_drag_merges_into_one_step(history, lane):
    before = lane.snapshot()
    pt = lane.points[1]
    pid = pt.id
    t, v = pt.time, pt.value
    for _ in range(5):
        t += 0.1
        v -= 0.05
        history.record(MovePoint.create(lane, lane.find_point(pid), t, v))
    assert len(history.undo_stack) == 1
    assert lane.find_point(pid).time == pytest.approx(1.5)
    history.undo()
    assert lane.snapshot() == before


def test_undo_after_undo_redo_cycle_finds_added_point(history, lane):
    history.record(AddPoint.create(lane, 0.5, 0.3))
    history.undo()
    history.redo()
    added = lane.find_point_at(0.5)
    history.record(MovePoint.create(lane, added, 0.7, 0.4))
    history.undo()
    history.undo()
    assert lane.find_point_at(0.5) is None
    assert lane.find_point_at(0.7) is None
