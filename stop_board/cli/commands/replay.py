# stop_board/cli/commands/replay.py

import typer
import json
from pathlib import Path
from typing import Optional
from stop_board.cli.session import apply_steps, build_engine, load_steps

def replay(
    script: Path = typer.Argument(..., exists=True, dir_okay=False, help="YAML list of drag, keyboard and command steps"),
    seed: Optional[str] = typer.Option(None, "--seed", help="Seed file (YAML or JSON); demo data when omitted"),
    config: Optional[str] = typer.Option(None, "--config", help="Board config YAML"),
    pretty: bool = typer.Option(False, "--pretty", help="Human-readable output (JSON default)")
):
    """
    Replays drag gestures and commands against a freshly seeded board and prints the final snapshot.
    """
    engine = build_engine(seed, config)
    try:
        apply_steps(engine, load_steps(script))
    except ValueError as e:
        typer.echo(str(e), err=True)
        raise typer.Exit(code=1)

    output = {"snapshot": engine.build_snapshot(), "ignored": engine.sink_log}
    if pretty:
        print(json.dumps(output, indent=2, ensure_ascii=False))
    else:
        print(json.dumps(output, ensure_ascii=False))
