# stop_board/view_model.py
"""
ViewModel Definitions
Immutable, UI-independent projections of the board state. The presentation side
renders only what these contain, and may only offer drop affordances for the
refs returned by droppable_refs().
"""

from dataclasses import dataclass
from typing import Optional, Tuple

from stop_board.board_engine.control_layer.state import (
    BoardState, CatalogItemDrag, DragPayload, EntityRef, GroupDrag, InstanceDrag, Stop,
)

# --- Stop ViewModels ---

@dataclass(frozen=True)
class StopVM:
    """A stop as listed in the unassigned pool."""
    stop_id: int
    name: str
    room_nr: str
    description: str

@dataclass(frozen=True)
class InstanceVM:
    """A placed stop inside a group."""
    uid: str
    stop_id: int
    name: str
    room_nr: str

# --- Group ViewModels ---

@dataclass(frozen=True)
class GroupVM:
    id: int
    name: str
    description: str
    is_public: bool
    is_expanded: bool
    stop_count: int
    stops: Tuple[InstanceVM, ...]  # Empty while collapsed

@dataclass(frozen=True)
class DragOverlayVM:
    kind: str
    title: str
    subtitle: str

@dataclass(frozen=True)
class BoardVM:
    groups: Tuple[GroupVM, ...]
    unassigned: Tuple[StopVM, ...]
    show_private_groups: bool
    hidden_group_count: int
    active_drag: Optional[DragOverlayVM] = None


def _stop_vm(stop: Stop) -> StopVM:
    return StopVM(stop_id=stop.id, name=stop.name, room_nr=stop.room_nr, description=stop.description)


def project_overlay(payload: Optional[DragPayload]) -> Optional[DragOverlayVM]:
    if payload is None:
        return None
    if isinstance(payload, GroupDrag):
        return DragOverlayVM(kind=payload.kind, title=payload.group.name, subtitle=payload.group.description)
    if isinstance(payload, InstanceDrag):
        return DragOverlayVM(kind=payload.kind, title=payload.instance.stop.name, subtitle=payload.instance.stop.room_nr)
    if isinstance(payload, CatalogItemDrag):
        return DragOverlayVM(kind=payload.kind, title=payload.stop.name, subtitle=payload.stop.room_nr)
    return None


def project_board(state: BoardState, active_drag: Optional[DragPayload] = None) -> BoardVM:
    visible = [g for g in state.groups if state.show_private_groups or g.is_public]
    groups = tuple(
        GroupVM(
            id=g.id,
            name=g.name,
            description=g.description,
            is_public=g.is_public,
            is_expanded=g.is_expanded,
            stop_count=len(g.stops),
            stops=tuple(
                InstanceVM(uid=i.uid, stop_id=i.stop.id, name=i.stop.name, room_nr=i.stop.room_nr)
                for i in g.stops
            ) if g.is_expanded else (),
        )
        for g in visible
    )
    return BoardVM(
        groups=groups,
        unassigned=tuple(_stop_vm(s) for s in state.unassigned.stops),
        show_private_groups=state.show_private_groups,
        hidden_group_count=len(state.groups) - len(visible),
        active_drag=project_overlay(active_drag),
    )


def droppable_refs(view: BoardVM) -> Tuple[EntityRef, ...]:
    """Drop targets the presentation side may expose: rendered groups and the pool."""
    return tuple(EntityRef.container(g.id) for g in view.groups) + (EntityRef.unassigned_pool(),)
