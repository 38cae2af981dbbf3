from datetime import datetime, timezone

from conftest import ManualTasks, solved_pieces
from puzzle_room.models import Difficulty
from puzzle_room.registry import RoomRegistry
from puzzle_room.services.puzzle.cleanup import RoomCleanupScheduler


T0 = datetime(2024, 5, 1, tzinfo=timezone.utc)


def _registry():
    return RoomRegistry(generator=lambda difficulty: solved_pieces(4), clock=lambda: T0)


def _scheduler(registry, tasks):
    return RoomCleanupScheduler(registry, delay_sec=60, start_task=tasks.start, sleep=lambda s: None)


def test_ensure_room_is_idempotent():
    registry = RoomRegistry(clock=lambda: T0)
    room, created = registry.ensure_room('r1', 'easy')
    assert created
    assert room.config.difficulty is Difficulty.EASY
    assert len(room.pieces) == 16
    assert room.start_time == T0
    assert room.players == [] and room.completed is False and room.puzzle_image_url is None

    again, created = registry.ensure_room('r1', 'hard')
    assert again is room and not created
    assert room.config.difficulty is Difficulty.EASY


def test_players_keep_insertion_order_and_allow_duplicates():
    registry = _registry()
    registry.ensure_room('r1')
    registry.add_player('r1', 'sid-a', 'Alice')
    registry.add_player('r1', 'sid-b', 'Bob')
    registry.add_player('r1', 'sid-a', 'Alice')
    assert [p.connection_id for p in registry.get_room('r1').players] == ['sid-a', 'sid-b', 'sid-a']

    assert registry.remove_player('r1', 'sid-a') is False
    assert [p.connection_id for p in registry.get_room('r1').players] == ['sid-b', 'sid-a']


def test_remove_player_reports_empty_room():
    registry = _registry()
    registry.ensure_room('r1')
    registry.add_player('r1', 'sid-a', 'Alice')
    assert registry.remove_player('r1', 'sid-a') is True
    assert registry.remove_player('missing', 'sid-a') is False
    assert registry.add_player('missing', 'sid-a', 'Alice') is None


def test_rooms_for_connection_spans_rooms():
    registry = _registry()
    for rid in ('r1', 'r2', 'r3'):
        registry.ensure_room(rid)
    registry.add_player('r1', 'sid-a', 'Alice')
    registry.add_player('r3', 'sid-a', 'Alice')
    registry.add_player('r2', 'sid-b', 'Bob')
    assert sorted(r.id for r in registry.rooms_for_connection('sid-a')) == ['r1', 'r3']


def test_usernames_last_write_wins():
    registry = _registry()
    registry.set_username('sid-a', 'Alice')
    registry.set_username('sid-a', 'Alicia')
    assert registry.get_username('sid-a') == 'Alicia'
    registry.forget_username('sid-a')
    assert registry.get_username('sid-a') is None


def test_delete_room_drops_config_with_room():
    registry = _registry()
    room, _ = registry.ensure_room('r1', 'hard')
    assert registry.delete_room('r1')
    assert registry.get_room('r1') is None
    fresh, created = registry.ensure_room('r1')
    assert created and fresh is not room
    assert fresh.config.difficulty is Difficulty.MEDIUM


def test_cleanup_deletes_empty_room_when_fired():
    registry, tasks = _registry(), ManualTasks()
    cleanup = _scheduler(registry, tasks)
    registry.ensure_room('r1')
    cleanup.schedule('r1')
    assert cleanup.pending('r1')
    assert tasks.run_all() == 1
    assert registry.get_room('r1') is None
    assert not cleanup.pending('r1')


def test_cleanup_rechecks_emptiness_at_fire_time():
    registry, tasks = _registry(), ManualTasks()
    cleanup = _scheduler(registry, tasks)
    registry.ensure_room('r1')
    cleanup.schedule('r1')
    # Someone came back without going through cancel
    registry.add_player('r1', 'sid-b', 'Bob')
    tasks.run_all()
    assert registry.get_room('r1') is not None


def test_cancelled_cleanup_aborts():
    registry, tasks = _registry(), ManualTasks()
    cleanup = _scheduler(registry, tasks)
    registry.ensure_room('r1')
    cleanup.schedule('r1')
    assert cleanup.cancel('r1')
    assert not cleanup.cancel('r1')
    tasks.run_all()
    assert registry.get_room('r1') is not None


def test_rescheduling_supersedes_older_task():
    registry, tasks = _registry(), ManualTasks()
    cleanup = _scheduler(registry, tasks)
    registry.ensure_room('r1')
    first = cleanup.schedule('r1')
    second = cleanup.schedule('r1')
    assert second != first
    (fn_old, args_old, _), (fn_new, args_new, _) = tasks.calls
    fn_old(*args_old)
    assert registry.get_room('r1') is not None
    assert cleanup.pending('r1')
    fn_new(*args_new)
    assert registry.get_room('r1') is None


def test_clear_is_a_full_teardown():
    registry = _registry()
    registry.ensure_room('r1')
    registry.set_username('sid-a', 'Alice')
    registry.clear()
    assert registry.room_ids() == []
    assert registry.get_username('sid-a') is None


def test_remove_every_entry_for_connection():
    registry = _registry()
    registry.ensure_room('r1')
    registry.add_player('r1', 'sid-a', 'Alice')
    registry.add_player('r1', 'sid-b', 'Bob')
    registry.add_player('r1', 'sid-a', 'Alice')
    assert registry.remove_player('r1', 'sid-a', every=True) is False
    assert [p.connection_id for p in registry.get_room('r1').players] == ['sid-b']
    assert registry.remove_player('r1', 'sid-b', every=True) is True
