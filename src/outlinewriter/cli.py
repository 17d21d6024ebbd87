"""CLI entrypoints for OutlineWriter."""

from __future__ import annotations

import asyncio
from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table
from rich.text import Text

from outlinewriter.config import load_settings
from outlinewriter.logging import configure_logging, get_logger
from outlinewriter.models.outline import SAMPLE_OUTLINE, OutlinePoint, PointState, compose_document
from outlinewriter.orchestrator.runner import Orchestrator
from outlinewriter.utils.outline_parser import parse_outline

app = typer.Typer(add_completion=False, help="Expand an outline into a continuous essay")
logger = get_logger(__name__)
console = Console()

_STATE_STYLE = {
    PointState.PENDING: "dim",
    PointState.GENERATING: "yellow",
    PointState.DONE: "green",
    PointState.FAILED: "red",
}


def _read_outline(outline_file: Path | None, sample: bool) -> str:
    if sample:
        return SAMPLE_OUTLINE
    if outline_file is None:
        raise typer.BadParameter("Provide an OUTLINE_FILE or pass --sample.")
    text = outline_file.read_text(encoding="utf-8")
    if not text.strip():
        raise typer.BadParameter("The outline file is empty.")
    return text


def _points_table(points: list[OutlinePoint], *, with_state: bool) -> Table:
    table = Table(show_lines=False)
    table.add_column("#", justify="right")
    table.add_column("Level", justify="right")
    table.add_column("Point")
    if with_state:
        table.add_column("State")
        table.add_column("Words", justify="right")
        table.add_column("Error")
    for i, p in enumerate(points, start=1):
        row: list[str | Text] = [str(i), str(p.level), Text("  " * p.level + p.text)]
        if with_state:
            row += [
                f"[{_STATE_STYLE[p.state]}]{p.state.value}[/]",
                str(len(p.content.split())),
                Text(p.error_detail or ""),
            ]
        table.add_row(*row)
    return table


@app.command()
def outline(
    outline_file: Path | None = typer.Argument(None, help="UTF-8 text file with the outline", show_default=False),
    sample: bool = typer.Option(False, "--sample", help="Use the built-in sample outline"),
) -> None:
    """Parse an outline and print its points without generating anything."""

    points = parse_outline(_read_outline(outline_file, sample))
    console.print(_points_table(points, with_state=False))


@app.command()
def write(
    outline_file: Path | None = typer.Argument(None, help="UTF-8 text file with the outline", show_default=False),
    sample: bool = typer.Option(False, "--sample", help="Use the built-in sample outline"),
    output: Path = typer.Option(Path("essay.md"), "--output", "-o", help="Output file for the essay"),
    tone: list[str] | None = typer.Option(None, "--tone", help="Tone to use (repeatable)"),
    language: str | None = typer.Option(None, "--language", help="Output language"),
    detail_level: str | None = typer.Option(None, "--detail-level", help="brief, standard or detailed"),
) -> None:
    """Generate the whole essay for an outline and write it to a file."""

    raw = _read_outline(outline_file, sample)

    settings = load_settings()
    configure_logging(settings.log_level)

    orchestrator = Orchestrator.from_settings(settings)
    overrides = {"tones": tone or None, "language": language, "detail_level": detail_level}
    for key, value in overrides.items():
        if value is not None and not orchestrator.update_config(key, value):
            raise typer.BadParameter(f"Invalid value for {key}: {value!r}")

    orchestrator.process_outline(raw)
    logger.info("CLI run requested", extra={"point_count": len(orchestrator.points)})

    summary = asyncio.run(orchestrator.generate_all())

    console.print(_points_table(orchestrator.points, with_state=True))
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(compose_document(orchestrator.points) + "\n", encoding="utf-8")
    typer.echo(str(output))

    if summary.halted:
        console.print("[red]Run halted:[/]", Text(summary.halt_reason or ""))
    if any(p.state != PointState.DONE for p in orchestrator.points):
        raise typer.Exit(code=1)


if __name__ == "__main__":
    app()
