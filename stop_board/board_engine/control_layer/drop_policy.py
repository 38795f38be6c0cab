from enum import Enum
from typing import List, Optional, TypeVar
from pydantic import BaseModel

from .identity import InstanceUidAllocator
from .resolver import ContainerResolver, LocationKind
from .state import BoardState, EntityKind, EntityRef, PlacementMode, StopInstance

T = TypeVar("T")


class TransitionKind(str, Enum):
    GROUP_REORDER = "group_reorder"
    ITEM_REORDER = "item_reorder"
    RETURN_TO_POOL = "return_to_pool"
    PLACE_IN_GROUP = "place_in_group"
    NONE = "none"


class DropOutcome(BaseModel):
    transition: TransitionKind = TransitionKind.NONE
    applied: bool = False
    reason: Optional[str] = None
    created_uid: Optional[str] = None
    removed_uid: Optional[str] = None


def array_move(items: List[T], old_index: int, new_index: int) -> List[T]:
    """Returns a new list with the entry at old_index moved to new_index."""
    moved = list(items)
    entry = moved.pop(old_index)
    moved.insert(new_index, entry)
    return moved


def _skipped(reason: str, transition: TransitionKind = TransitionKind.NONE) -> DropOutcome:
    return DropOutcome(transition=transition, applied=False, reason=reason)


class DropPolicy:
    """
    Decides which of the four drop transitions a (source, target) pair triggers
    and applies it to the given state. Every lookup happens before the first
    mutation, so a skipped drop leaves the state untouched.
    """

    def __init__(self, allocator: InstanceUidAllocator, placement_mode: PlacementMode = PlacementMode.COPY):
        self.allocator = allocator
        self.placement_mode = PlacementMode(placement_mode)

    def apply(self, state: BoardState, source: EntityRef, target: Optional[EntityRef]) -> DropOutcome:
        if target is None:
            return _skipped("No drop target")

        if source.kind == EntityKind.CONTAINER:
            return self._reorder_groups(state, source, target)
        if source.kind == EntityKind.UNASSIGNED_POOL:
            return _skipped("Unassigned pool is not draggable")

        resolver = ContainerResolver(state)
        source_loc = resolver.resolve(source)
        if not source_loc.found:
            return _skipped(f"Stale source {source.kind.value}:{source.id}")
        dest_loc = resolver.resolve(target)
        if not dest_loc.found:
            return _skipped(f"Unresolved target {target.kind.value}:{target.id}")

        if source_loc == dest_loc:
            return self._reorder_items(state, resolver, source, target, source_loc)
        if dest_loc.kind == LocationKind.UNASSIGNED:
            return self._return_to_pool(state, source, source_loc.group_id)
        return self._place_in_group(state, resolver, source, source_loc, dest_loc.group_id)

    # --- Rule 1 ---
    def _reorder_groups(self, state: BoardState, source: EntityRef, target: EntityRef) -> DropOutcome:
        if target.kind != EntityKind.CONTAINER:
            return _skipped("Groups can only be dropped on groups", TransitionKind.GROUP_REORDER)
        old_index = state.group_index(source.id) if isinstance(source.id, int) else None
        new_index = state.group_index(target.id) if isinstance(target.id, int) else None
        if old_index is None or new_index is None:
            return _skipped("Group not found", TransitionKind.GROUP_REORDER)
        if old_index == new_index:
            return _skipped("Group dropped on itself", TransitionKind.GROUP_REORDER)
        state.groups = array_move(state.groups, old_index, new_index)
        return DropOutcome(transition=TransitionKind.GROUP_REORDER, applied=True)

    # --- Rule 2 ---
    def _reorder_items(self, state, resolver, source, target, location) -> DropOutcome:
        old_index = resolver.index_in(source, location)
        new_index = resolver.index_in(target, location)
        if old_index is None or new_index is None:
            return _skipped("Reorder position not found", TransitionKind.ITEM_REORDER)
        if old_index == new_index:
            return _skipped("Dropped on itself", TransitionKind.ITEM_REORDER)

        if location.kind == LocationKind.UNASSIGNED:
            state.unassigned.stops = array_move(state.unassigned.stops, old_index, new_index)
        else:
            group = state.group_by_id(location.group_id)
            group.stops = array_move(group.stops, old_index, new_index)
        return DropOutcome(transition=TransitionKind.ITEM_REORDER, applied=True)

    # --- Rule 3 ---
    def _return_to_pool(self, state: BoardState, source: EntityRef, group_id: int) -> DropOutcome:
        # The pool is a fixed catalog view; only the instance is destroyed.
        group = state.group_by_id(group_id)
        uid = str(source.id)
        group.stops = [instance for instance in group.stops if instance.uid != uid]
        return DropOutcome(transition=TransitionKind.RETURN_TO_POOL, applied=True, removed_uid=uid)

    # --- Rule 4 ---
    def _place_in_group(self, state, resolver, source, source_loc, dest_group_id) -> DropOutcome:
        if source_loc.kind == LocationKind.UNASSIGNED:
            template = resolver.find_unassigned_stop(source.id)
        else:
            instance = resolver.find_instance(str(source.id))
            template = instance.stop if instance else None
        dest = state.group_by_id(dest_group_id)
        if template is None or dest is None:
            return _skipped("Placement source or destination vanished", TransitionKind.PLACE_IN_GROUP)

        new_instance = StopInstance(uid=self.allocator.new_instance_uid(), stop=template.model_copy(deep=True))
        dest.stops = dest.stops + [new_instance]

        removed_uid = None
        if self.placement_mode == PlacementMode.MOVE and source_loc.kind == LocationKind.GROUP:
            origin = state.group_by_id(source_loc.group_id)
            removed_uid = str(source.id)
            origin.stops = [i for i in origin.stops if i.uid != removed_uid]

        return DropOutcome(
            transition=TransitionKind.PLACE_IN_GROUP,
            applied=True,
            created_uid=new_instance.uid,
            removed_uid=removed_uid,
        )
