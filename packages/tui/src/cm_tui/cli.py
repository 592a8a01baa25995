"""
CLI entry point: inspect how a document lays out in the split view.
"""
from __future__ import annotations

from typing import Optional

import typer
from rich.console import Console
from rich.text import Text

from .components import SplitView, SplitViewTheme
from .config import configure_debug_logging, load_settings
from .render import PreviewTheme
from .results import PreviewMode
from .session import EditorSession

app = typer.Typer(
    name="cm-tui",
    help="Dual-pane layout tools for calc-markdown documents",
    no_args_is_help=True,
)

console = Console()
err_console = Console(stderr=True)


@app.callback()
def main_callback(
    debug: bool = typer.Option(False, "--debug", help="Write debug logs to the config directory"),
) -> None:
    if debug:
        configure_debug_logging()


def _parse_mode(mode: str) -> PreviewMode:
    try:
        return PreviewMode(mode.lower())
    except ValueError:
        raise typer.BadParameter(f"expected one of: {', '.join(m.value for m in PreviewMode)}")


def _open_session(path: str, width: int, height: int, cursor: int, mode: str,
                  color: bool = False) -> EditorSession:
    preview_mode = _parse_mode(mode)
    try:
        with open(path, encoding="utf-8") as f:
            text = f.read()
    except OSError as e:
        err_console.print(f"[red]Cannot read {path}: {e.strerror or e}[/red]")
        raise typer.Exit(1)

    session = EditorSession.from_text(
        text.removesuffix("\n"),
        settings=load_settings(),
        theme=PreviewTheme.ansi() if color else None,
        width=width,
        height=height,
    )
    while session.preview_mode is not preview_mode:
        session.cycle_preview_mode()
    session.move_cursor(cursor)
    return session


@app.command()
def layout(
    path: str = typer.Argument(..., help="Document to lay out"),
    width: int = typer.Option(80, "--width", "-w", help="Terminal width"),
    cursor: int = typer.Option(0, "--cursor", "-c", help="Cursor line (0-based)"),
    mode: str = typer.Option("full", "--mode", "-m", help="Preview mode: full/minimal/hidden"),
) -> None:
    """Print the visual rows of both panes as a table."""
    session = _open_session(path, width, 24, cursor, mode)
    model = session.aligned_model()
    source_width, preview_width = session.content_widths()

    from rich.table import Table

    table = Table(title=f"{path} ({source_width}/{preview_width} columns)")
    table.add_column("Row", justify="right")
    table.add_column("Line", justify="right")
    table.add_column("Kind")
    table.add_column("Source")
    table.add_column("Preview")

    for i, (src, prev) in enumerate(zip(model.source_rows, model.preview_rows)):
        table.add_row(
            str(i),
            str(src.source_line_idx + 1),
            src.kind.value,
            Text(src.content),
            Text(prev.content),
        )

    console.print(table)

    check = model.invariants()
    status = "[green]ok[/green]" if check.ok else f"[red]{check}[/red]"
    console.print(
        f"{model.total_source_lines} lines, {model.total_visual_lines} rows, alignment {status}"
    )


@app.command()
def view(
    path: str = typer.Argument(..., help="Document to render"),
    width: int = typer.Option(80, "--width", "-w", help="Terminal width"),
    height: int = typer.Option(24, "--height", "-h", help="Terminal height"),
    cursor: int = typer.Option(0, "--cursor", "-c", help="Cursor line (0-based)"),
    mode: str = typer.Option("full", "--mode", "-m", help="Preview mode: full/minimal/hidden"),
    color: Optional[bool] = typer.Option(None, "--color/--no-color", help="Use ANSI styling"),
) -> None:
    """Print one frame of the split view."""
    use_color = console.is_terminal if color is None else color
    session = _open_session(path, width, height, cursor, mode, color=use_color)
    view = SplitView(session, SplitViewTheme.ansi() if use_color else SplitViewTheme())
    for line in view.render(width):
        typer.echo(line)


def main() -> None:
    """Main CLI entrypoint."""
    app()


if __name__ == "__main__":
    main()
