# stop_board/cli/session.py

from pathlib import Path
from typing import Optional

import yaml
from pydantic import ValidationError

from stop_board.board_engine.core import BoardEngine
from stop_board.board_engine.interface_layer.keyboard import KeyboardDragDriver
from stop_board.board_engine.interface_layer.services import SeedDataService
from stop_board.command import UnknownCommandError, build_command
from stop_board.config import configure_logging, load_config


def build_engine(seed: Optional[str] = None, config_path: Optional[str] = None) -> BoardEngine:
    """Loads config, seeds a fresh board and returns its engine."""
    config = load_config(config_path)
    configure_logging(config)
    engine = BoardEngine.create(config=config)
    data = SeedDataService(seed or config.seed_path).fetch()
    engine.initialize(data.stops, data.groups)
    return engine


def load_steps(script: Path) -> list:
    with Path(script).open("r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or []
    if isinstance(data, dict):
        data = data.get("steps", [])
    return list(data)


def _step_body(step: dict, key: str, index: int) -> dict:
    body = step[key] or {}
    if not isinstance(body, dict):
        raise ValueError(f"Step {index}: '{key}' must be a mapping")
    return body


def _run_keyboard_step(engine: BoardEngine, body: dict) -> None:
    # select, move the cursor by `move` positions, then confirm (or cancel)
    driver = KeyboardDragDriver(engine)
    if not driver.select(body.get("select")):
        return
    driver.move(int(body.get("move", 0)))
    if body.get("cancel"):
        driver.cancel()
    else:
        driver.confirm()


def apply_steps(engine: BoardEngine, steps: list) -> None:
    """
    Runs replay steps. A drag step is a full pointer start/end gesture, a
    keyboard step selects an entity and steps the cursor through the rendered
    targets, and a command step names a wire command.
    Raises ValueError on malformed steps.
    """
    for index, step in enumerate(steps, start=1):
        if not isinstance(step, dict):
            raise ValueError(f"Step {index}: expected a mapping")
        if "drag" in step:
            drag = _step_body(step, "drag", index)
            engine.on_drag_start(drag.get("source"))
            engine.on_drag_end(drag.get("source"), drag.get("target"))
        elif "keyboard" in step:
            keyboard = _step_body(step, "keyboard", index)
            try:
                _run_keyboard_step(engine, keyboard)
            except (TypeError, ValueError) as e:
                raise ValueError(f"Step {index}: {e}") from e
        elif "command" in step:
            spec = _step_body(step, "command", index)
            try:
                engine.execute_command(build_command(spec.get("type", ""), spec.get("payload") or {}))
            except (UnknownCommandError, ValidationError, TypeError) as e:
                raise ValueError(f"Step {index}: {e}") from e
        else:
            raise ValueError(f"Step {index}: expected 'drag', 'keyboard' or 'command'")
