import logging
from typing import Any, List, Optional

from stop_board.board_engine.control_layer.drop_policy import DropOutcome
from stop_board.board_engine.control_layer.state import EntityKind, EntityRef
from stop_board.board_engine.events import Actor, parse_entity_ref
from stop_board.view_model import BoardVM, project_board

logger = logging.getLogger(__name__)


def keyboard_targets(view: BoardVM, source: EntityRef) -> List[EntityRef]:
    """Ordered drop candidates reachable from the rendered board, in visual order."""
    if source.kind == EntityKind.CONTAINER:
        return [EntityRef.container(g.id) for g in view.groups]
    targets: List[EntityRef] = []
    for group in view.groups:
        targets.append(EntityRef.container(group.id))
        targets.extend(EntityRef.instance(i.uid) for i in group.stops)
    targets.append(EntityRef.unassigned_pool())
    targets.extend(EntityRef.catalog_item(s.stop_id) for s in view.unassigned)
    return targets


class KeyboardDragDriver:
    """
    Discrete equivalent of a pointer drag: select, step the cursor, confirm.
    Emits the same start/end events as the pointer driver.
    """

    def __init__(self, engine):
        self.engine = engine
        self._source: Optional[EntityRef] = None
        self._targets: List[EntityRef] = []
        self._cursor = 0

    @property
    def source(self) -> Optional[EntityRef]:
        return self._source

    @property
    def target(self) -> Optional[EntityRef]:
        if self._source is None or not self._targets:
            return None
        return self._targets[self._cursor]

    @property
    def targets(self) -> List[EntityRef]:
        return list(self._targets)

    def select(self, entity: Any) -> bool:
        ref = parse_entity_ref(entity)
        if ref is None:
            return False
        view = project_board(self.engine.state)
        targets = keyboard_targets(view, ref)
        if ref not in targets:
            logger.info(f"Keyboard select ignored, {ref.kind.value}:{ref.id} is not rendered")
            return False

        self.engine.on_drag_start(ref, actor=Actor.KEYBOARD)
        if not self.engine.session.is_active or self.engine.session.source != ref:
            return False
        self._source = ref
        self._targets = targets
        self._cursor = targets.index(ref)
        return True

    def move(self, step: int = 1) -> Optional[EntityRef]:
        if self._source is None:
            return None
        self._cursor = max(0, min(len(self._targets) - 1, self._cursor + step))
        return self.target

    def confirm(self) -> Optional[DropOutcome]:
        if self._source is None:
            return None
        source, target = self._source, self.target
        self._reset()
        return self.engine.on_drag_end(source, target, actor=Actor.KEYBOARD)

    def cancel(self) -> None:
        if self._source is None:
            return
        self._reset()
        self.engine.cancel_drag(actor=Actor.KEYBOARD)

    def _reset(self) -> None:
        self._source = None
        self._targets = []
        self._cursor = 0
