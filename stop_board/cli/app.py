# stop_board/cli/app.py

import typer
from stop_board.cli.commands.show import show
from stop_board.cli.commands.replay import replay
from stop_board.cli.commands.export import export

app = typer.Typer(help="Stop Board CLI - inspect and replay drag-and-drop sessions")

app.command()(show)
app.command()(replay)
app.command()(export)

def main():
    app()

if __name__ == "__main__":
    main()
