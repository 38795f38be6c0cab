import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Iterable, List, Optional

from pydantic import ValidationError

from stop_board.board_engine.control_layer.state import (
    BoardGroup, BoardState, CatalogItemDrag, DragPayload, EntityKind, EntityRef,
    GroupDrag, InstanceDrag, Stop, StopGroup, StopInstance, UnassignedPool,
)
from stop_board.board_engine.control_layer.identity import (
    DuplicateInstanceUidError, InstanceUidAllocator,
)
from stop_board.board_engine.control_layer.resolver import ContainerResolver
from stop_board.board_engine.control_layer.drag_session import DragSession
from stop_board.board_engine.control_layer.drop_policy import DropOutcome, DropPolicy
from stop_board.board_engine.events import (
    Actor, BaseEvent, DragCancelEvent, DragEndEvent, DragEndPayload,
    DragStartEvent, DragStartPayload, EventType,
)
from stop_board.command import (
    Command, CollapseAllCommand, LoadCatalogCommand, LoadContainersCommand,
    RemoveInstanceCommand, SetVisibilityFilterCommand, ToggleExpansionCommand,
    UnknownCommandError,
)
from stop_board.config import BoardConfig

logger = logging.getLogger(__name__)

SnapshotListener = Callable[[dict], None]


class BoardSetupError(Exception):
    pass


class BoardEngine:
    """
    Drag-and-drop assignment engine for one board session.

    Handlers run to completion synchronously. Drag interaction never raises:
    anything that cannot be resolved is written to the sink log and ignored.
    """

    def __init__(
        self,
        board_id: Optional[str] = None,
        initial_state: Optional[BoardState] = None,
        config: Optional[BoardConfig] = None,
    ):
        if board_id:
            self.board_id = str(uuid.UUID(board_id))
        else:
            self.board_id = str(uuid.uuid4())
        self.config = config or BoardConfig()
        self._state = initial_state or BoardState(show_private_groups=self.config.show_private_groups)
        self.allocator = InstanceUidAllocator(self.board_id, self.config.uid_strategy)
        self.allocator.reserve(self._state.all_instance_uids())
        self.drop_policy = DropPolicy(self.allocator, self.config.placement_mode)
        self.session = DragSession()
        self.event_log: List[BaseEvent] = []
        self.sink_log: List[Dict[str, str]] = []
        self.last_outcome: Optional[DropOutcome] = None
        self._listeners: List[SnapshotListener] = []
        self._logical_index = 0

    @classmethod
    def create(cls, config: Optional[BoardConfig] = None) -> "BoardEngine":
        return cls(config=config)

    @classmethod
    def from_snapshot(
        cls, snapshot: dict, board_id: Optional[str] = None, config: Optional[BoardConfig] = None
    ) -> "BoardEngine":
        state = BoardState.model_validate(snapshot["board_state"] if "board_state" in snapshot else snapshot)
        return cls(board_id=board_id or snapshot.get("board_id"), initial_state=state, config=config)

    @property
    def state(self) -> BoardState:
        return self._state

    @property
    def active_drag(self) -> Optional[DragPayload]:
        return self.session.payload

    def subscribe(self, listener: SnapshotListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)
        return unsubscribe

    # --- Gesture driver entry points ---

    def on_drag_start(self, entity: Any, actor: Actor = Actor.POINTER) -> None:
        self.process_event(DragStartEvent(payload={"entity": entity}, actor=actor))

    def on_drag_end(self, source: Any, target: Any = None, actor: Actor = Actor.POINTER) -> Optional[DropOutcome]:
        self.process_event(DragEndEvent(payload={"source": source, "target": target}, actor=actor))
        return self.last_outcome

    def cancel_drag(self, actor: Actor = Actor.POINTER) -> None:
        self.process_event(DragCancelEvent(payload={}, actor=actor))

    def process_event(self, event: BaseEvent):
        """
        Main event loop.
        1. Stamp and log the event
        2. Dispatch to the drag handler
        """
        logger.debug(f"[Board] Processing Event: {event.type} by {event.actor}")
        if not event.event_id:
            event.event_id = str(uuid.uuid4())
        if not event.board_id:
            event.board_id = self.board_id
        if event.logical_index is None:
            self._logical_index += 1
            event.logical_index = self._logical_index
        if not event.wall_timestamp:
            event.wall_timestamp = datetime.now(timezone.utc)
        self.event_log.append(event)

        dispatch = {
            EventType.DRAG_START: self._handle_drag_start,
            EventType.DRAG_END: self._handle_drag_end,
            EventType.DRAG_CANCEL: self._handle_drag_cancel,
        }

        handler = dispatch.get(event.type)
        if handler:
            handler(event)
        else:
            self._sink_event(event, error="Unhandled event type")

    def _handle_drag_start(self, event: BaseEvent):
        try:
            payload = DragStartPayload(**event.payload)
        except ValidationError as e:
            self._sink_event(event, error=f"Invalid drag start payload: {e.error_count()} error(s)")
            return

        overlay = self._overlay_for(payload.entity)
        if overlay is None:
            self._sink_event(event, error=f"Entity not draggable or not found: {payload.entity.kind.value}:{payload.entity.id}")
            return

        if self.session.is_active:
            # Single pointer model: a new start replaces the unfinished drag.
            logger.warning(f"[Board] Drag start while {self.session.source} is active; previous drag cancelled")
            self.session.cancel()
        self.session.begin(payload.entity, overlay)
        logger.info(f"[Board] Drag started: {payload.entity.kind.value}:{payload.entity.id}")

    def _handle_drag_end(self, event: BaseEvent):
        self.last_outcome = None
        if not self.session.is_active:
            self._sink_event(event, error="Drag end without active drag")
            return

        try:
            payload = DragEndPayload(**event.payload)
        except ValidationError as e:
            self.session.cancel()
            self._sink_event(event, error=f"Invalid drag end payload: {e.error_count()} error(s)")
            return

        if payload.source != self.session.source:
            self.session.cancel()
            self._sink_event(event, error="Drag end source does not match active drag")
            return

        working = self._state.model_copy(deep=True)
        outcome = self.drop_policy.apply(working, payload.source, payload.target)
        self.last_outcome = outcome

        if not outcome.applied:
            self.session.cancel()
            logger.info(f"[Board] Drag cancelled: {outcome.reason}")
            self._sink_event(event, error=outcome.reason or "Drop skipped")
            return

        self._assert_unique_uids(working)
        self._state = working
        self.session.commit()
        logger.info(f"[Board] Drag committed: {outcome.transition.value}")
        self._emit()

    def _handle_drag_cancel(self, event: BaseEvent):
        self.last_outcome = None
        if not self.session.is_active:
            self._sink_event(event, error="Cancel without active drag")
            return
        self.session.cancel()
        logger.info("[Board] Drag cancelled by driver")

    def _overlay_for(self, ref: EntityRef) -> Optional[DragPayload]:
        if ref.kind == EntityKind.CONTAINER:
            group = self._state.group_by_id(ref.id) if isinstance(ref.id, int) else None
            return GroupDrag(group=group.model_copy(deep=True)) if group else None
        resolver = ContainerResolver(self._state)
        if ref.kind == EntityKind.INSTANCE:
            instance = resolver.find_instance(str(ref.id))
            return InstanceDrag(instance=instance.model_copy(deep=True)) if instance else None
        if ref.kind == EntityKind.CATALOG_ITEM and isinstance(ref.id, int):
            stop = resolver.find_unassigned_stop(ref.id)
            return CatalogItemDrag(stop=stop) if stop else None
        return None

    # --- Commands ---

    def execute_command(self, command: Command) -> None:
        dispatch = {
            LoadCatalogCommand: lambda c: self.load_catalog(c.stops),
            LoadContainersCommand: lambda c: self.load_containers(c.groups),
            ToggleExpansionCommand: lambda c: self.toggle_expansion(c.group_id),
            CollapseAllCommand: lambda c: self.collapse_all(),
            RemoveInstanceCommand: lambda c: self.remove_instance(c.uid),
            SetVisibilityFilterCommand: lambda c: self.set_visibility_filter(c.show_private),
        }
        handler = dispatch.get(type(command))
        if handler is None:
            raise UnknownCommandError(f"Unknown command: {type(command).__name__}")
        handler(command)

    def load_catalog(self, stops: Iterable[Any]) -> None:
        catalog = [s if isinstance(s, Stop) else Stop.model_validate(s) for s in stops]
        seen = set()
        for stop in catalog:
            if stop.id in seen:
                raise BoardSetupError(f"Duplicate stop id {stop.id} in catalog")
            seen.add(stop.id)
        self._state.catalog = catalog
        # The pool is the catalog view; placing or removing instances never changes it.
        self._state.unassigned = UnassignedPool(stops=list(catalog))
        logger.info(f"[Board] Catalog loaded: {len(catalog)} stops")
        self._emit()

    def load_containers(self, groups: Iterable[Any]) -> None:
        definitions = [g if isinstance(g, StopGroup) else StopGroup.model_validate(g) for g in groups]
        seen = set()
        for definition in definitions:
            if definition.id in seen:
                raise BoardSetupError(f"Duplicate group id {definition.id}")
            seen.add(definition.id)

        catalog = {stop.id: stop for stop in self._state.catalog}
        board_groups = []
        assigned = set()
        for definition in definitions:
            instances = []
            for stop_id in definition.stop_ids:
                stop = catalog.get(stop_id)
                if stop is None:
                    logger.warning(f"[Board] Group {definition.id} references unknown stop {stop_id}; skipped")
                    continue
                instances.append(StopInstance(uid=self.allocator.new_instance_uid(), stop=stop.model_copy(deep=True)))
                assigned.add(stop_id)
            board_groups.append(BoardGroup(
                id=definition.id,
                name=definition.name,
                description=definition.description,
                is_public=definition.is_public,
                stops=instances,
                is_expanded=self.config.groups_start_expanded,
            ))

        self._state.groups = board_groups
        logger.info(f"[Board] Groups loaded: {len(board_groups)} groups, {len(assigned)} assigned stops")
        self._emit()

    def initialize(self, stops: Iterable[Any], groups: Iterable[Any]) -> None:
        """One-shot board setup once the seed fetch completes."""
        self.load_catalog(stops)
        self.load_containers(groups)

    def toggle_expansion(self, group_id: int) -> None:
        group = self._state.group_by_id(group_id)
        if not group:
            logger.info(f"[Board] No-Op: group {group_id} not found")
            return
        group.is_expanded = not group.is_expanded
        self._emit()

    def collapse_all(self) -> None:
        for group in self._state.groups:
            group.is_expanded = False
        self._emit()

    def remove_instance(self, uid: str) -> None:
        for group in self._state.groups:
            if group.index_of(uid) is not None:
                group.stops = [i for i in group.stops if i.uid != uid]
                logger.info(f"[Board] Removed {uid} from group {group.id}")
                self._emit()
                return
        logger.info(f"[Board] No-Op: instance {uid} not found")

    def set_visibility_filter(self, show_private: bool) -> None:
        self._state.show_private_groups = bool(show_private)
        self._emit()

    # --- Snapshots ---

    def get_state_snapshot(self) -> dict:
        return self._state.model_copy(deep=True).model_dump(mode="json")

    def build_snapshot(self) -> dict:
        active = self.session.payload
        return {
            "snapshot_id": str(uuid.uuid4()),
            "board_id": self.board_id,
            "board_state": self.get_state_snapshot(),
            "active_drag": active.model_dump(mode="json") if active else None,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }

    def _emit(self) -> None:
        if not self._listeners:
            return
        snapshot = self.build_snapshot()
        for listener in list(self._listeners):
            listener(snapshot)

    def _sink_event(self, event: BaseEvent, error: str):
        self.sink_log.append({"event_id": event.event_id or "", "type": event.type.value, "error": error})
        logger.info(f"[Board] EVENT SINK: {error} -> {event.type.value}")

    @staticmethod
    def _assert_unique_uids(state: BoardState) -> None:
        uids = state.all_instance_uids()
        if len(uids) != len(set(uids)):
            raise DuplicateInstanceUidError("Instance uid collision on board")
