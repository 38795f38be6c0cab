from .state import (
    BoardGroup,
    BoardState,
    CatalogItemDrag,
    DragPayload,
    EntityKind,
    EntityRef,
    GroupDrag,
    InstanceDrag,
    PlacementMode,
    Stop,
    StopGroup,
    StopInstance,
    UnassignedPool,
)
from .identity import DuplicateInstanceUidError, InstanceUidAllocator, UidStrategy
from .resolver import ContainerResolver, Location, LocationKind, NOT_FOUND, UNASSIGNED
from .drag_session import DragPhase, DragSession
from .drop_policy import DropOutcome, DropPolicy, TransitionKind, array_move

__all__ = [
    "BoardGroup",
    "BoardState",
    "CatalogItemDrag",
    "DragPayload",
    "EntityKind",
    "EntityRef",
    "GroupDrag",
    "InstanceDrag",
    "PlacementMode",
    "Stop",
    "StopGroup",
    "StopInstance",
    "UnassignedPool",
    "DuplicateInstanceUidError",
    "InstanceUidAllocator",
    "UidStrategy",
    "ContainerResolver",
    "Location",
    "LocationKind",
    "NOT_FOUND",
    "UNASSIGNED",
    "DragPhase",
    "DragSession",
    "DropOutcome",
    "DropPolicy",
    "TransitionKind",
    "array_move",
]
