import asyncio
import json

import pytest

from stop_board.board_engine.control_layer.identity import UidStrategy
from stop_board.board_engine.control_layer.state import PlacementMode
from stop_board.board_engine.interface_layer.services import SeedDataService, load_seed_file
from stop_board.config import CONFIG_ENV_VAR, BoardConfig, load_config


def test_defaults_without_file(monkeypatch):
    monkeypatch.delenv(CONFIG_ENV_VAR, raising=False)
    config = load_config()
    assert config == BoardConfig()
    assert config.placement_mode == PlacementMode.COPY
    assert config.uid_strategy == UidStrategy.UUID


def test_missing_file_falls_back_to_defaults(tmp_path):
    assert load_config(tmp_path / "absent.yaml") == BoardConfig()


def test_load_from_yaml(tmp_path):
    path = tmp_path / "board.yaml"
    path.write_text("placement_mode: move\nuid_strategy: counter\ngroups_start_expanded: false\n", encoding="utf-8")
    config = load_config(path)
    assert config.placement_mode == PlacementMode.MOVE
    assert config.uid_strategy == UidStrategy.COUNTER
    assert config.groups_start_expanded is False


def test_nested_board_key_and_env_var(tmp_path, monkeypatch):
    path = tmp_path / "settings.yaml"
    path.write_text("board:\n  show_private_groups: true\n  log_level: DEBUG\n", encoding="utf-8")
    monkeypatch.setenv(CONFIG_ENV_VAR, str(path))
    config = load_config()
    assert config.show_private_groups is True
    assert config.log_level == "DEBUG"


def test_non_mapping_config_rejected(tmp_path):
    path = tmp_path / "board.yaml"
    path.write_text("- just\n- a list\n", encoding="utf-8")
    with pytest.raises(ValueError):
        load_config(path)


def test_seed_from_yaml(tmp_path):
    path = tmp_path / "seed.yaml"
    path.write_text(
        "stops:\n"
        "  - {id: 10, name: Lab, roomNr: L2}\n"
        "groups:\n"
        "  - {id: 5, name: Science, isPublic: false, stopIds: [10]}\n",
        encoding="utf-8",
    )
    seed = load_seed_file(path)
    assert seed.stops[0].room_nr == "L2"
    assert seed.groups[0].is_public is False
    assert seed.groups[0].stop_ids == [10]


def test_seed_from_json(tmp_path):
    path = tmp_path / "seed.json"
    path.write_text(json.dumps({"stops": [{"id": 1, "name": "Hall"}], "groups": []}), encoding="utf-8")
    seed = load_seed_file(path)
    assert [s.name for s in seed.stops] == ["Hall"]
    assert seed.groups == []


def test_service_demo_data_and_async_fetch():
    service = SeedDataService()
    seed = asyncio.run(service.fetch_async(delay=0))
    assert [s.name for s in seed.stops] == ["Welcome", "Library", "Workshop", "Cafeteria"]
    assert [g.name for g in seed.groups] == ["Information", "Tours"]
