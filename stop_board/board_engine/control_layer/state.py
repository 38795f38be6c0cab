from typing import Annotated, List, Optional, Union, Literal
from enum import Enum
from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator


class EntityKind(str, Enum):
    CONTAINER = "container"
    INSTANCE = "instance"
    CATALOG_ITEM = "catalog_item"
    UNASSIGNED_POOL = "unassigned_pool"


class PlacementMode(str, Enum):
    COPY = "copy"
    MOVE = "move"


class EntityRef(BaseModel):
    """Tagged reference to a draggable or droppable entity."""
    kind: EntityKind
    id: Optional[Union[int, str]] = None

    model_config = ConfigDict(frozen=True)

    @field_validator("id", mode="before")
    @classmethod
    def _normalize_id(cls, value, info: ValidationInfo):
        kind = info.data.get("kind")
        if kind in (EntityKind.CONTAINER, EntityKind.CATALOG_ITEM) and isinstance(value, str) and value.isdigit():
            return int(value)
        if kind == EntityKind.INSTANCE and isinstance(value, int):
            return str(value)
        return value

    @classmethod
    def container(cls, group_id: int) -> "EntityRef":
        return cls(kind=EntityKind.CONTAINER, id=group_id)

    @classmethod
    def instance(cls, uid: str) -> "EntityRef":
        return cls(kind=EntityKind.INSTANCE, id=uid)

    @classmethod
    def catalog_item(cls, stop_id: int) -> "EntityRef":
        return cls(kind=EntityKind.CATALOG_ITEM, id=stop_id)

    @classmethod
    def unassigned_pool(cls) -> "EntityRef":
        return cls(kind=EntityKind.UNASSIGNED_POOL, id="unassigned")


# --- Catalog ---

class Stop(BaseModel):
    """Catalog template. Never mutated once loaded."""
    id: int
    name: str
    room_nr: str = Field(default="", alias="roomNr")
    description: str = ""
    division_ids: List[int] = Field(default_factory=list, alias="divisionIds")
    stop_group_ids: List[int] = Field(default_factory=list, alias="stopGroupIds")

    model_config = ConfigDict(frozen=True, populate_by_name=True)


class StopInstance(BaseModel):
    uid: str
    stop: Stop


# --- Groups ---

class StopGroup(BaseModel):
    """Group definition as delivered by the seed fetch."""
    id: int
    name: str
    description: str = ""
    is_public: bool = Field(default=True, alias="isPublic")
    stop_ids: List[int] = Field(default_factory=list, alias="stopIds")

    model_config = ConfigDict(populate_by_name=True)


class BoardGroup(BaseModel):
    id: int
    name: str
    description: str = ""
    is_public: bool = True
    stops: List[StopInstance] = Field(default_factory=list)
    is_expanded: bool = True

    def index_of(self, uid: str) -> Optional[int]:
        for idx, instance in enumerate(self.stops):
            if instance.uid == uid:
                return idx
        return None


class UnassignedPool(BaseModel):
    stops: List[Stop] = Field(default_factory=list)

    def index_of(self, stop_id: int) -> Optional[int]:
        for idx, stop in enumerate(self.stops):
            if stop.id == stop_id:
                return idx
        return None


class BoardState(BaseModel):
    catalog: List[Stop] = Field(default_factory=list)
    groups: List[BoardGroup] = Field(default_factory=list)
    unassigned: UnassignedPool = Field(default_factory=UnassignedPool)
    # View preference only; never changes group membership
    show_private_groups: bool = False

    def group_by_id(self, group_id: int) -> Optional[BoardGroup]:
        for group in self.groups:
            if group.id == group_id:
                return group
        return None

    def group_index(self, group_id: int) -> Optional[int]:
        for idx, group in enumerate(self.groups):
            if group.id == group_id:
                return idx
        return None

    def all_instance_uids(self) -> List[str]:
        return [instance.uid for group in self.groups for instance in group.stops]


# --- Drag payloads (transient, overlay only) ---

class GroupDrag(BaseModel):
    kind: Literal["container"] = "container"
    group: BoardGroup


class InstanceDrag(BaseModel):
    kind: Literal["instance"] = "instance"
    instance: StopInstance


class CatalogItemDrag(BaseModel):
    kind: Literal["catalog_item"] = "catalog_item"
    stop: Stop


DragPayload = Annotated[
    Union[GroupDrag, InstanceDrag, CatalogItemDrag],
    Field(discriminator="kind"),
]
