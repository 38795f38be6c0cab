from enum import Enum
from typing import Optional
from pydantic import BaseModel, ConfigDict

from .state import BoardState, EntityKind, EntityRef, StopInstance, Stop


class LocationKind(str, Enum):
    GROUP = "group"
    UNASSIGNED = "unassigned"
    NOT_FOUND = "not_found"


class Location(BaseModel):
    kind: LocationKind
    group_id: Optional[int] = None

    model_config = ConfigDict(frozen=True)

    @property
    def found(self) -> bool:
        return self.kind != LocationKind.NOT_FOUND


UNASSIGNED = Location(kind=LocationKind.UNASSIGNED)
NOT_FOUND = Location(kind=LocationKind.NOT_FOUND)


def in_group(group_id: int) -> Location:
    return Location(kind=LocationKind.GROUP, group_id=group_id)


class ContainerResolver:
    """Read-only lookups answering "which container holds this entity"."""

    def __init__(self, state: BoardState):
        self._state = state

    def resolve(self, ref: EntityRef) -> Location:
        """
        Containers resolve to themselves, the pool
        to UNASSIGNED, pool items and instances to whatever holds them.
        """
        kind = ref.kind
        if kind == EntityKind.UNASSIGNED_POOL:
            return UNASSIGNED
        if kind == EntityKind.CONTAINER:
            if not isinstance(ref.id, int) or self._state.group_by_id(ref.id) is None:
                return NOT_FOUND
            return in_group(ref.id)
        if kind == EntityKind.CATALOG_ITEM:
            if isinstance(ref.id, int) and self._state.unassigned.index_of(ref.id) is not None:
                return UNASSIGNED
            return NOT_FOUND
        if kind == EntityKind.INSTANCE:
            for group in self._state.groups:
                if group.index_of(str(ref.id)) is not None:
                    return in_group(group.id)
            return NOT_FOUND
        return NOT_FOUND

    def index_in(self, ref: EntityRef, location: Location) -> Optional[int]:
        """Position of ref inside the ordered list of location, or None."""
        if location.kind == LocationKind.UNASSIGNED:
            if ref.kind != EntityKind.CATALOG_ITEM or not isinstance(ref.id, int):
                return None
            return self._state.unassigned.index_of(ref.id)
        if location.kind == LocationKind.GROUP:
            if ref.kind != EntityKind.INSTANCE:
                return None
            group = self._state.group_by_id(location.group_id)
            return group.index_of(str(ref.id)) if group else None
        return None

    def find_instance(self, uid: str) -> Optional[StopInstance]:
        for group in self._state.groups:
            idx = group.index_of(uid)
            if idx is not None:
                return group.stops[idx]
        return None

    def find_unassigned_stop(self, stop_id: int) -> Optional[Stop]:
        idx = self._state.unassigned.index_of(stop_id)
        return self._state.unassigned.stops[idx] if idx is not None else None
