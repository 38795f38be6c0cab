# stop_board/command.py
"""
Command Layer Definitions
Discrete intents forwarded by the presentation side (buttons, checkboxes, board setup).
Drag gestures do not go through here; they arrive as events.
"""

from dataclasses import dataclass, field
from typing import List, Dict, Any, Union

from pydantic import StrictBool, TypeAdapter

# --- Base Command ---

@dataclass
class Command:
    """Base class for all commands to allow for type hinting."""
    pass

# --- Board setup ---

@dataclass
class LoadCatalogCommand(Command):
    """Replaces the catalog. Stops may be Stop models or raw dicts."""
    stops: List[Any] = field(default_factory=list)

@dataclass
class LoadContainersCommand(Command):
    """Builds the groups from their definitions (StopGroup models or raw dicts)."""
    groups: List[Any] = field(default_factory=list)

# --- Presentation commands ---

@dataclass
class ToggleExpansionCommand(Command):
    group_id: int

@dataclass
class CollapseAllCommand(Command):
    pass

@dataclass
class RemoveInstanceCommand(Command):
    """Deletes one placed stop. Never touches the unassigned pool."""
    uid: str

@dataclass
class SetVisibilityFilterCommand(Command):
    """Controls whether private groups are rendered. Group membership is unaffected."""
    show_private: StrictBool


# A union type for easier handling in the command executor
AnyCommand = Union[
    LoadCatalogCommand,
    LoadContainersCommand,
    ToggleExpansionCommand,
    CollapseAllCommand,
    RemoveInstanceCommand,
    SetVisibilityFilterCommand,
]

# Wire names used by the HTTP surface and replay scripts
COMMAND_MAP: Dict[str, type] = {
    "LoadCatalog": LoadCatalogCommand,
    "LoadContainers": LoadContainersCommand,
    "ToggleExpansion": ToggleExpansionCommand,
    "CollapseAll": CollapseAllCommand,
    "RemoveInstance": RemoveInstanceCommand,
    "SetVisibilityFilter": SetVisibilityFilterCommand,
}


class UnknownCommandError(Exception):
    pass


def build_command(command_type: str, payload: Dict[str, Any]) -> Command:
    """
    Builds a typed command from its wire form.
    Raises UnknownCommandError for unknown names and pydantic.ValidationError
    for payloads that do not match the command fields.
    """
    command_class = COMMAND_MAP.get(command_type)
    if not command_class:
        raise UnknownCommandError(f"Unknown command type: '{command_type}'")
    return TypeAdapter(command_class).validate_python(payload or {})
