from enum import Enum
from datetime import datetime
from pydantic import BaseModel, field_validator
from typing import Optional, Dict, Any

from stop_board.board_engine.control_layer.state import EntityKind, EntityRef

UNASSIGNED_DROP_ID = "unassigned"
UNASSIGNED_ITEM_PREFIX = "un-"


class Actor(str, Enum):
    POINTER = "pointer"
    KEYBOARD = "keyboard"
    SYSTEM = "system"


class EventType(str, Enum):
    DRAG_START = "drag_start"
    DRAG_END = "drag_end"
    DRAG_CANCEL = "drag_cancel"


class BaseEvent(BaseModel):
    type: EventType
    payload: Dict[str, Any]
    actor: Optional[Actor] = None
    event_id: Optional[str] = None
    board_id: Optional[str] = None
    logical_index: Optional[int] = None
    wall_timestamp: Optional[datetime] = None


class DragStartEvent(BaseEvent):
    type: EventType = EventType.DRAG_START
    actor: Actor = Actor.POINTER
    # payload: {"entity": EntityRef | raw id}


class DragEndEvent(BaseEvent):
    type: EventType = EventType.DRAG_END
    actor: Actor = Actor.POINTER
    # payload: {"source": EntityRef | raw id, "target": EntityRef | raw id | None}


class DragCancelEvent(BaseEvent):
    type: EventType = EventType.DRAG_CANCEL
    actor: Actor = Actor.POINTER


def parse_entity_ref(raw: Any) -> Optional[EntityRef]:
    """
    Maps identifiers reported by a pointer toolkit onto typed refs.
    "unassigned" is the pool, "un-<id>" a pool item, integers are groups,
    any other string an instance uid.
    """
    if raw is None:
        return None
    if isinstance(raw, EntityRef):
        return raw
    if isinstance(raw, dict):
        return EntityRef.model_validate(raw)
    if isinstance(raw, bool):
        raise ValueError(f"Unsupported entity id: {raw!r}")
    if isinstance(raw, int):
        return EntityRef.container(raw)
    if isinstance(raw, str):
        if raw == UNASSIGNED_DROP_ID:
            return EntityRef.unassigned_pool()
        if raw.startswith(UNASSIGNED_ITEM_PREFIX) and raw[len(UNASSIGNED_ITEM_PREFIX):].isdigit():
            return EntityRef.catalog_item(int(raw[len(UNASSIGNED_ITEM_PREFIX):]))
        if raw.isdigit():
            return EntityRef.container(int(raw))
        return EntityRef.instance(raw)
    raise ValueError(f"Unsupported entity id: {raw!r}")


def format_entity_ref(ref: EntityRef) -> Any:
    """Inverse of parse_entity_ref."""
    if ref.kind == EntityKind.UNASSIGNED_POOL:
        return UNASSIGNED_DROP_ID
    if ref.kind == EntityKind.CATALOG_ITEM:
        return f"{UNASSIGNED_ITEM_PREFIX}{ref.id}"
    return ref.id


class DragStartPayload(BaseModel):
    entity: EntityRef

    @field_validator("entity", mode="before")
    @classmethod
    def _parse_entity(cls, value):
        return parse_entity_ref(value)


class DragEndPayload(BaseModel):
    source: EntityRef
    target: Optional[EntityRef] = None

    @field_validator("source", "target", mode="before")
    @classmethod
    def _parse_ref(cls, value):
        return parse_entity_ref(value)
