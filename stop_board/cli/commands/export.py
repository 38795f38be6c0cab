# stop_board/cli/commands/export.py

import typer
import json
import csv
from typing import Optional
from pathlib import Path
from stop_board.cli.session import apply_steps, build_engine, load_steps

def _assignment_rows(engine) -> list:
    rows = []
    for group in engine.state.groups:
        for position, instance in enumerate(group.stops):
            rows.append({
                "group_id": group.id,
                "group_name": group.name,
                "position": position,
                "uid": instance.uid,
                "stop_id": instance.stop.id,
                "stop_name": instance.stop.name,
            })
    return rows

def export(
    format: str = typer.Option("json", "--format", help="Export format (json, csv)"),
    out: Optional[str] = typer.Option(None, "--out", help="Output file path"),
    seed: Optional[str] = typer.Option(None, "--seed", help="Seed file (YAML or JSON); demo data when omitted"),
    config: Optional[str] = typer.Option(None, "--config", help="Board config YAML"),
    script: Optional[Path] = typer.Option(None, "--script", exists=True, dir_okay=False, help="Replay steps before exporting"),
):
    """
    Exports the group assignments of a seeded board to JSON or CSV.
    """
    engine = build_engine(seed, config)
    if script:
        try:
            apply_steps(engine, load_steps(script))
        except ValueError as e:
            typer.echo(str(e), err=True)
            raise typer.Exit(code=1)
    rows = _assignment_rows(engine)

    if format.lower() == "json":
        data = json.dumps({"board_id": engine.board_id, "assignments": rows}, indent=2, ensure_ascii=False)
        if out:
            with open(out, "w", encoding="utf-8") as f:
                f.write(data)
            print(f"Exported to {out}")
        else:
            print(data)

    elif format.lower() == "csv":
        if not out:
            print("CSV output requires --out path")
            raise typer.Exit(code=1)
        with open(out, "w", encoding="utf-8", newline="") as f:
            writer = csv.DictWriter(f, fieldnames=["group_id", "group_name", "position", "uid", "stop_id", "stop_name"])
            writer.writeheader()
            writer.writerows(rows)
        print(f"Exported to {out}")
    else:
        print(f"Unsupported format: {format}")
        raise typer.Exit(code=1)
