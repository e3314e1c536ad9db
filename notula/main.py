from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import typer

from . import config
from .directory import SnapshotSource, SqlReferenceSource
from .models import MinuteStatus, create_store_engine
from .pipeline.run import filter_meetings, run_batch

app = typer.Typer(help="Print-ready meeting minutes and attendance rosters")


@app.callback()
def main(verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging")) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@app.command()
def render(
    snapshot: Path = typer.Option(..., "--snapshot", help="JSON export with minutes (and users/units/settings)"),
    db: Optional[Path] = typer.Option(None, "--db", help="SQLite reference store for users/units/settings"),
    out: Optional[Path] = typer.Option(None, "--out", help="Output directory"),
    minute_id: Optional[str] = typer.Option(None, "--minute-id", help="Render only this minute"),
    status: Optional[MinuteStatus] = typer.Option(None, "--status", help="Filter by status"),
    preview: bool = typer.Option(False, "--preview", help="Also write a PNG of the first page"),
    template: Optional[Path] = typer.Option(None, "--template", help="Template JSON overrides"),
) -> None:
    if out:
        config.set_out_dir(out)
    template_config = config.load_template(template)
    problems = config.validate_template(template_config)
    if problems:
        for problem in problems:
            typer.echo(f"TEMPLATE: {problem}", err=True)
        raise typer.Exit(code=2)

    snapshot_source = SnapshotSource(snapshot)
    meetings = filter_meetings(snapshot_source.meetings(), status=status, meeting_id=minute_id)
    if not meetings:
        typer.echo("No minutes to render")
        return

    source = SqlReferenceSource(create_store_engine(db)) if db else snapshot_source
    results = run_batch(meetings, source, preview=preview, template=template_config)
    typer.echo(f"READY: {len(results['READY'])}")
    typer.echo(f"FAILED: {len(results['FAILED'])}")
    for slug in results["FAILED"]:
        typer.echo(f"FAILED: {slug}")
    if results["FAILED"]:
        raise typer.Exit(code=1)


@app.command("check-template")
def check_template(path: Optional[Path] = typer.Argument(None, help="Template JSON (default: assets/template.json)")) -> None:
    template_config = config.load_template(path)
    problems = config.validate_template(template_config)
    for problem in problems:
        typer.echo(problem)
    if problems:
        raise typer.Exit(code=1)
    typer.echo("Template OK")


if __name__ == "__main__":
    app()
