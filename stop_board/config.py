# stop_board/config.py
"""Board settings, loaded from YAML, plus the shared logging setup."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Optional

import yaml
from pydantic import BaseModel

from stop_board.board_engine.control_layer.identity import UidStrategy
from stop_board.board_engine.control_layer.state import PlacementMode

CONFIG_ENV_VAR = "STOP_BOARD_CONFIG"
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class BoardConfig(BaseModel):
    placement_mode: PlacementMode = PlacementMode.COPY
    uid_strategy: UidStrategy = UidStrategy.UUID
    groups_start_expanded: bool = True
    show_private_groups: bool = False
    seed_path: Optional[str] = None
    log_level: str = "INFO"
    log_file: Optional[str] = None


def load_config(path: Optional[str | Path] = None) -> BoardConfig:
    if path is None:
        path = os.environ.get(CONFIG_ENV_VAR)
    if not path:
        return BoardConfig()
    config_path = Path(path)
    if not config_path.exists():
        return BoardConfig()
    with config_path.open("r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Config file must contain a mapping: {config_path}")
    return BoardConfig.model_validate(data.get("board", data))


def configure_logging(config: Optional[BoardConfig] = None) -> None:
    config = config or BoardConfig()
    kwargs = {
        "level": getattr(logging, config.log_level.upper(), logging.INFO),
        "format": LOG_FORMAT,
    }
    if config.log_file:
        kwargs["filename"] = config.log_file
    logging.basicConfig(**kwargs)
