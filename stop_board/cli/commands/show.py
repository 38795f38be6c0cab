# stop_board/cli/commands/show.py

import typer
import json
from dataclasses import asdict
from typing import Optional
from stop_board.cli.session import build_engine
from stop_board.view_model import project_board

def show(
    seed: Optional[str] = typer.Option(None, "--seed", help="Seed file (YAML or JSON); demo data when omitted"),
    config: Optional[str] = typer.Option(None, "--config", help="Board config YAML"),
    show_private: bool = typer.Option(False, "--show-private", help="Render private groups too"),
    pretty: bool = typer.Option(False, "--pretty", help="Human-readable output (JSON default)")
):
    """
    Prints the rendered board projection as JSON.
    """
    engine = build_engine(seed, config)
    if show_private:
        engine.set_visibility_filter(True)
    output = asdict(project_board(engine.state, engine.active_drag))

    if pretty:
        print(json.dumps(output, indent=2, ensure_ascii=False))
    else:
        print(json.dumps(output, ensure_ascii=False))
