import pytest
from pydantic import ValidationError

from stop_board.command import (
    COMMAND_MAP,
    CollapseAllCommand,
    LoadCatalogCommand,
    SetVisibilityFilterCommand,
    ToggleExpansionCommand,
    UnknownCommandError,
    build_command,
)


def test_every_wire_name_builds():
    assert set(COMMAND_MAP) == {
        "LoadCatalog", "LoadContainers", "ToggleExpansion",
        "CollapseAll", "RemoveInstance", "SetVisibilityFilter",
    }
    assert isinstance(build_command("CollapseAll", {}), CollapseAllCommand)
    assert build_command("ToggleExpansion", {"group_id": 2}) == ToggleExpansionCommand(group_id=2)
    assert build_command("SetVisibilityFilter", {"show_private": True}) == SetVisibilityFilterCommand(show_private=True)


def test_load_catalog_keeps_raw_stops():
    command = build_command("LoadCatalog", {"stops": [{"id": 1, "name": "Hall"}]})
    assert isinstance(command, LoadCatalogCommand)
    assert command.stops == [{"id": 1, "name": "Hall"}]


def test_unknown_command():
    with pytest.raises(UnknownCommandError):
        build_command("Explode", {})


@pytest.mark.parametrize("command_type,payload", [
    ("LoadCatalog", {"stops": None}),
    ("SetVisibilityFilter", {"show_private": "false"}),
    ("RemoveInstance", {"wrong": 1}),
    ("ToggleExpansion", {"group_id": "first"}),
])
def test_bad_payloads_rejected(command_type, payload):
    with pytest.raises(ValidationError):
        build_command(command_type, payload)
