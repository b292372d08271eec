from arena.services.games import RoomRegistry


class TaskRecorder:
    """Stand-in for socketio.start_background_task that defers execution."""

    def __init__(self):
        self.tasks = []

    def __call__(self, fn, *args):
        self.tasks.append((fn, args))

    def run_all(self):
        tasks, self.tasks = self.tasks, []
        for fn, args in tasks:
            fn(*args)


def _registry(**kwargs):
    kwargs.setdefault('broadcast_factory', lambda room_id: (lambda event, payload: None))
    return RoomRegistry(**kwargs)


def test_get_or_create_is_lazy_and_stable():
    registry = _registry()
    assert registry.get('arena1') is None
    room = registry.get_or_create('arena1')
    assert registry.get_or_create('arena1') is room
    assert 'arena1' in registry
    assert len(registry) == 1


def test_rooms_are_isolated():
    registry = _registry()
    a = registry.get_or_create('a')
    b = registry.get_or_create('b')
    a.add_player('p1', 'Alice')
    assert b.is_empty
    assert a.players is not b.players


def test_new_room_starts_tick_loop():
    runner = TaskRecorder()
    registry = _registry(start_background_task=runner, sleep=lambda s: None)
    room = registry.get_or_create('arena1')
    assert room.running
    assert len(runner.tasks) == 1

    registry.get_or_create('arena1')
    assert len(runner.tasks) == 1


def test_remove_stops_room():
    runner = TaskRecorder()
    registry = _registry(start_background_task=runner, sleep=lambda s: None)
    room = registry.get_or_create('arena1')
    registry.remove('arena1')
    assert not room.running
    assert registry.get('arena1') is None
    # unknown ids are ignored
    registry.remove('nope')


def test_eviction_disabled_keeps_empty_rooms():
    registry = _registry(idle_timeout=-1)
    registry.get_or_create('arena1')
    registry.schedule_eviction('arena1')
    assert 'arena1' in registry


def test_immediate_eviction_of_empty_room():
    registry = _registry(idle_timeout=0)
    room = registry.get_or_create('arena1')
    room.add_player('p1', 'Alice')
    registry.schedule_eviction('arena1')
    assert 'arena1' in registry

    room.remove_player('p1')
    registry.schedule_eviction('arena1')
    assert 'arena1' not in registry


def test_delayed_eviction_after_idle_timeout():
    now = [100.0]
    slept = []

    def sleep(seconds):
        slept.append(seconds)
        now[0] += seconds

    runner = TaskRecorder()
    registry = _registry(
        idle_timeout=30, start_background_task=runner, sleep=sleep,
        start_loops=False, clock=lambda: now[0],
    )
    registry.get_or_create('arena1')
    registry.schedule_eviction('arena1')
    assert 'arena1' in registry

    runner.run_all()
    assert slept == [30]
    assert 'arena1' not in registry


def test_rejoin_cancels_pending_eviction():
    runner = TaskRecorder()
    registry = _registry(
        idle_timeout=30, start_background_task=runner, sleep=lambda s: None,
        start_loops=False,
    )
    room = registry.get_or_create('arena1')
    registry.schedule_eviction('arena1')
    assert registry.get_or_create('arena1') is room

    runner.run_all()
    assert registry.get('arena1') is room


def test_shutdown_removes_everything():
    registry = _registry()
    rooms = [registry.get_or_create(name) for name in ('a', 'b', 'c')]
    registry.shutdown()
    assert len(registry) == 0
    assert not any(room.running for room in rooms)


def test_join_creates_room_and_adds_player():
    registry = _registry()
    room, player = registry.join('red', 'p1', 'Alice')
    assert registry.get('red') is room
    assert room.players == {'p1': player}
    assert player.username == 'Alice'


def test_join_cancels_pending_eviction():
    runner = TaskRecorder()
    registry = _registry(
        idle_timeout=30, start_background_task=runner, sleep=lambda s: None,
        start_loops=False,
    )
    room = registry.get_or_create('arena1')
    registry.schedule_eviction('arena1')
    registry.join('arena1', 'p1', 'Alice')

    runner.run_all()
    assert registry.get('arena1') is room
