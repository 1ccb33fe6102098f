"""
Command-line interface for the daily digest service.

Uses Typer to provide commands for serving the HTTP trigger surface with
the daily scheduler, running one pass directly, and inspecting the
seen-link store. Loads .env files for credentials.
"""

from __future__ import annotations

import asyncio
from pathlib import Path

from dotenv import load_dotenv
import typer
from rich.console import Console
from rich.table import Table

from .config import AppConfig, load_config
from .core.errors import DigestError
from .core.store import open_store
from .logging_utils import setup_logging
from .runner import build_pipeline
from .scheduler import DailyScheduler
from .server import create_app, serve as serve_app

app = typer.Typer(add_completion=False)
console = Console()


def _load(config: Path | None, log_level: str | None) -> AppConfig:
    load_dotenv()
    cfg = load_config(str(config) if config else None)
    if log_level:
        cfg.logging.level = log_level
    return cfg


@app.command()
def serve(
    config: Path | None = typer.Option(None, "--config", "-c", exists=True, readable=True),
    host: str | None = typer.Option(None, "--host", help="Bind address."),
    port: int | None = typer.Option(None, "--port", "-p", help="Listening port (or set PORT)."),
    schedule: bool = typer.Option(True, "--schedule/--no-schedule", help="Enable the daily run."),
    log_level: str | None = typer.Option(None, "--log-level", help="Logging level."),
):
    """Serve /run-now, /health and /processed, and run the digest daily."""
    cfg = _load(config, log_level)
    if host:
        cfg.server.host = host
    if port is not None:
        cfg.server.port = port

    logger = setup_logging(cfg.logging, Path(cfg.logging.directory))
    pipeline = build_pipeline(cfg, logger)
    scheduler = DailyScheduler(pipeline, cfg.schedule, logger) if schedule and cfg.schedule.enabled else None
    serve_app(create_app(pipeline, scheduler), cfg.server.host, cfg.server.port, cfg.logging.level)


@app.command()
def run(
    config: Path | None = typer.Option(None, "--config", "-c", exists=True, readable=True),
    log_level: str | None = typer.Option(None, "--log-level", help="Logging level."),
):
    """Run the digest pipeline once and exit."""
    cfg = _load(config, log_level)
    logger = setup_logging(cfg.logging, Path(cfg.logging.directory))
    pipeline = build_pipeline(cfg, logger)

    async def _run():
        try:
            return await pipeline.run_once(trigger="cli")
        finally:
            await pipeline.aclose()

    try:
        result = asyncio.run(_run())
    except DigestError as exc:
        console.print(f"[bold red]Run failed[/bold red]: {exc}")
        raise typer.Exit(code=1) from exc

    console.print(
        "[bold]Run summary[/bold]: "
        f"status={result.status}, fetched={result.fetched}, new={result.new}, "
        f"published={result.published}"
    )


@app.command()
def processed(
    config: Path | None = typer.Option(None, "--config", "-c", exists=True, readable=True),
):
    """List links recorded in the seen-link store."""
    cfg = _load(config, None)
    store = open_store(cfg.store)

    async def _links():
        try:
            return await store.links()
        finally:
            await store.close()

    links = asyncio.run(_links())
    table = Table(title=f"Processed articles ({len(links)})")
    table.add_column("#", justify="right")
    table.add_column("Link")
    for idx, link in enumerate(links, 1):
        table.add_row(str(idx), link)
    console.print(table)


if __name__ == "__main__":
    app()
