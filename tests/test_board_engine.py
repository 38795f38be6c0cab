import pytest

from stop_board.board_engine.control_layer.drag_session import DragPhase
from stop_board.board_engine.control_layer.drop_policy import TransitionKind
from stop_board.board_engine.control_layer.identity import UidStrategy
from stop_board.board_engine.control_layer.state import (
    BoardGroup,
    BoardState,
    CatalogItemDrag,
    GroupDrag,
    Stop,
    StopInstance,
    UnassignedPool,
)
from stop_board.board_engine.core import BoardEngine, BoardSetupError
from stop_board.board_engine.events import Actor, DragEndEvent
from stop_board.board_engine.interface_layer.services import SeedDataService
from stop_board.command import (
    CollapseAllCommand,
    Command,
    RemoveInstanceCommand,
    SetVisibilityFilterCommand,
    ToggleExpansionCommand,
    UnknownCommandError,
)
from stop_board.config import BoardConfig


@pytest.fixture
def engine() -> BoardEngine:
    eng = BoardEngine.create(config=BoardConfig(uid_strategy=UidStrategy.COUNTER))
    seed = SeedDataService().fetch()
    eng.initialize(seed.stops, seed.groups)
    return eng


def _stop_ids(engine, group_id):
    return [i.stop.id for i in engine.state.group_by_id(group_id).stops]


def _pool_ids(engine):
    return [s.id for s in engine.state.unassigned.stops]


class TestInitialization:
    def test_seed_builds_groups_and_pool(self, engine):
        assert [g.id for g in engine.state.groups] == [1, 2]
        assert _stop_ids(engine, 1) == [1, 2]
        assert _stop_ids(engine, 2) == []
        assert _pool_ids(engine) == [1, 2, 3, 4]
        assert engine.state.group_by_id(2).is_public is False
        assert all(g.is_expanded for g in engine.state.groups)

    def test_seed_instances_get_fresh_uids(self, engine):
        uids = engine.state.all_instance_uids()
        assert uids == [f"{engine.board_id}:stop:1", f"{engine.board_id}:stop:2"]

    def test_groups_can_start_collapsed(self):
        eng = BoardEngine.create(config=BoardConfig(groups_start_expanded=False))
        seed = SeedDataService().fetch()
        eng.initialize(seed.stops, seed.groups)
        assert not any(g.is_expanded for g in eng.state.groups)

    def test_duplicate_stop_ids_rejected(self):
        eng = BoardEngine.create()
        with pytest.raises(BoardSetupError):
            eng.load_catalog([{"id": 1, "name": "A"}, {"id": 1, "name": "B"}])

    def test_duplicate_group_ids_rejected(self, engine):
        with pytest.raises(BoardSetupError):
            engine.load_containers([{"id": 5, "name": "A"}, {"id": 5, "name": "B"}])

    def test_unknown_stop_ids_are_skipped(self, engine):
        engine.load_containers([{"id": 5, "name": "Extra", "stopIds": [4, 99]}])
        assert _stop_ids(engine, 5) == [4]


class TestDragLifecycle:
    def test_drag_start_fills_overlay_only(self, engine):
        before = engine.get_state_snapshot()
        engine.on_drag_start("un-3")
        assert isinstance(engine.active_drag, CatalogItemDrag)
        assert engine.active_drag.stop.name == "Workshop"
        assert engine.get_state_snapshot() == before
        assert engine.build_snapshot()["active_drag"]["kind"] == "catalog_item"

    def test_pool_item_dropped_on_group_is_copied(self, engine):
        engine.on_drag_start("un-3")
        outcome = engine.on_drag_end("un-3", 1)
        assert outcome.transition == TransitionKind.PLACE_IN_GROUP
        assert _stop_ids(engine, 1) == [1, 2, 3]
        assert _pool_ids(engine) == [1, 2, 3, 4]
        assert engine.active_drag is None
        assert engine.session.phase == DragPhase.COMMITTED

    def test_drop_outside_any_container_cancels(self, engine):
        before = engine.get_state_snapshot()
        engine.on_drag_start("un-3")
        outcome = engine.on_drag_end("un-3", None)
        assert not outcome.applied
        assert engine.session.phase == DragPhase.CANCELLED
        assert engine.active_drag is None
        assert engine.get_state_snapshot() == before
        assert engine.sink_log[-1]["error"] == "No drop target"

    def test_drag_end_without_start_is_ignored(self, engine):
        before = engine.get_state_snapshot()
        assert engine.on_drag_end("un-3", 1) is None
        assert engine.get_state_snapshot() == before
        assert engine.sink_log[-1]["error"] == "Drag end without active drag"

    def test_duplicate_drag_end_places_once(self, engine):
        engine.on_drag_start("un-4")
        engine.on_drag_end("un-4", 1)
        engine.on_drag_end("un-4", 1)
        assert _stop_ids(engine, 1) == [1, 2, 4]

    def test_second_drag_start_overwrites_first(self, engine):
        engine.on_drag_start("un-3")
        engine.on_drag_start("un-4")
        assert engine.active_drag.stop.id == 4
        engine.on_drag_end("un-4", 1)
        assert _stop_ids(engine, 1) == [1, 2, 4]

    def test_mismatched_source_cancels(self, engine):
        before = engine.get_state_snapshot()
        engine.on_drag_start("un-3")
        engine.on_drag_end("un-4", 1)
        assert engine.get_state_snapshot() == before
        assert engine.active_drag is None

    def test_instance_removed_mid_drag_is_noop(self, engine):
        uid = engine.state.group_by_id(1).stops[0].uid
        engine.on_drag_start(uid)
        engine.remove_instance(uid)
        before = engine.get_state_snapshot()

        outcome = engine.on_drag_end(uid, 2)
        assert not outcome.applied
        assert engine.get_state_snapshot() == before
        assert engine.active_drag is None

    def test_unknown_or_undraggable_start_stays_idle(self, engine):
        engine.on_drag_start("no-such-uid")
        engine.on_drag_start("unassigned")
        engine.on_drag_start(404)
        assert not engine.session.is_active
        assert len(engine.sink_log) == 3

    def test_malformed_payloads_never_raise(self, engine):
        engine.on_drag_start({"kind": "bogus"})
        assert not engine.session.is_active
        engine.on_drag_start("un-3")
        engine.process_event(DragEndEvent(payload={"target": 1}))
        assert not engine.session.is_active
        assert engine.sink_log[-1]["error"].startswith("Invalid drag end payload")

    def test_group_reorder(self, engine):
        engine.on_drag_start(1)
        assert isinstance(engine.active_drag, GroupDrag)
        outcome = engine.on_drag_end(1, 2)
        assert outcome.transition == TransitionKind.GROUP_REORDER
        assert [g.id for g in engine.state.groups] == [2, 1]

    def test_explicit_cancel(self, engine):
        engine.on_drag_start(1)
        engine.cancel_drag()
        assert engine.session.phase == DragPhase.CANCELLED
        assert engine.active_drag is None

    def test_events_are_stamped_in_order(self, engine):
        engine.on_drag_start("un-3", actor=Actor.KEYBOARD)
        engine.on_drag_end("un-3", 1, actor=Actor.KEYBOARD)
        indices = [e.logical_index for e in engine.event_log]
        assert indices == [1, 2]
        assert all(e.board_id == engine.board_id for e in engine.event_log)
        assert engine.event_log[0].actor == Actor.KEYBOARD


def test_catalog_example_walkthrough():
    welcome = Stop(id=1, name="Welcome")
    library = Stop(id=2, name="Library")
    state = BoardState(
        catalog=[welcome, library],
        groups=[BoardGroup(id=1, name="G1", stops=[StopInstance(uid="a", stop=welcome)])],
        unassigned=UnassignedPool(stops=[welcome, library]),
    )
    engine = BoardEngine(initial_state=state)

    engine.on_drag_start("un-2")
    engine.on_drag_end("un-2", 1)
    g1 = engine.state.group_by_id(1).stops
    assert [i.stop.id for i in g1] == [1, 2]
    assert g1[0].uid == "a"
    assert g1[1].uid != "a"
    assert [s.id for s in engine.state.unassigned.stops] == [1, 2]

    engine.on_drag_start("a")
    engine.on_drag_end("a", "unassigned")
    assert [i.stop.id for i in engine.state.group_by_id(1).stops] == [2]
    assert [s.id for s in engine.state.unassigned.stops] == [1, 2]


class TestCommands:
    def test_toggle_expansion_flips_one_group(self, engine):
        engine.execute_command(ToggleExpansionCommand(group_id=1))
        assert engine.state.group_by_id(1).is_expanded is False
        assert engine.state.group_by_id(2).is_expanded is True
        engine.execute_command(ToggleExpansionCommand(group_id=1))
        assert engine.state.group_by_id(1).is_expanded is True

    def test_toggle_unknown_group_is_noop(self, engine):
        before = engine.get_state_snapshot()
        engine.toggle_expansion(99)
        assert engine.get_state_snapshot() == before

    def test_collapse_all_is_idempotent(self, engine):
        engine.execute_command(CollapseAllCommand())
        once = engine.get_state_snapshot()
        engine.execute_command(CollapseAllCommand())
        assert engine.get_state_snapshot() == once
        assert not any(g.is_expanded for g in engine.state.groups)

    def test_remove_instance_never_touches_pool(self, engine):
        uid = engine.state.group_by_id(1).stops[1].uid
        engine.execute_command(RemoveInstanceCommand(uid=uid))
        assert _stop_ids(engine, 1) == [1]
        assert _pool_ids(engine) == [1, 2, 3, 4]

    def test_remove_unknown_instance_is_noop(self, engine):
        before = engine.get_state_snapshot()
        engine.remove_instance("missing")
        assert engine.get_state_snapshot() == before

    def test_visibility_filter_keeps_groups(self, engine):
        engine.execute_command(SetVisibilityFilterCommand(show_private=True))
        assert engine.state.show_private_groups is True
        assert [g.id for g in engine.state.groups] == [1, 2]

    def test_unknown_command_raises(self, engine):
        with pytest.raises(UnknownCommandError):
            engine.execute_command(Command())


class TestSnapshots:
    def test_listeners_get_snapshot_on_commit_only(self, engine):
        received = []
        unsubscribe = engine.subscribe(received.append)

        engine.on_drag_start("un-3")
        assert received == []
        engine.on_drag_end("un-3", None)
        assert received == []
        engine.on_drag_start("un-3")
        engine.on_drag_end("un-3", 1)
        assert len(received) == 1
        assert received[0]["active_drag"] is None
        assert len(received[0]["board_state"]["groups"][0]["stops"]) == 3

        unsubscribe()
        engine.collapse_all()
        assert len(received) == 1

    def test_snapshot_is_a_copy(self, engine):
        snapshot = engine.build_snapshot()
        snapshot["board_state"]["groups"][0]["stops"].clear()
        assert len(engine.state.group_by_id(1).stops) == 2

    def test_from_snapshot_restores_board_without_uid_collisions(self, engine):
        snapshot = engine.build_snapshot()
        restored = BoardEngine.from_snapshot(snapshot, config=BoardConfig(uid_strategy=UidStrategy.COUNTER))
        assert restored.board_id == engine.board_id
        assert restored.get_state_snapshot() == engine.get_state_snapshot()

        restored.on_drag_start("un-3")
        restored.on_drag_end("un-3", 1)
        uids = restored.state.all_instance_uids()
        assert len(uids) == len(set(uids)) == 3

    def test_active_drag_is_not_restored(self, engine):
        engine.on_drag_start("un-3")
        restored = BoardEngine.from_snapshot(engine.build_snapshot())
        assert restored.active_drag is None
