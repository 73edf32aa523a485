"""Typer CLI entrypoint for newsroom-sync."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Optional

import typer
import yaml
from rich import box
from rich.console import Console
from rich.table import Table

from .config import ConfigLocator, ConfigRepository, SyncConfig
from .engine.store import open_backend
from .errors import FatalInitError, StoreError
from .logging_conf import SHARED_LOGS, available_content_logs, configure_logging, resolve_log, tail_log
from .orchestrator import SyncReport, SyncRunner
from .scheduler import SyncScheduler

app = typer.Typer(
    help="newsroom-sync: mirror a news site into a document store",
    no_args_is_help=True,
    rich_markup_mode=None,
)
config_app = typer.Typer(name="config", help="Configuration commands", no_args_is_help=True)
log_app = typer.Typer(name="log", help="Log viewing commands", no_args_is_help=True)

console = Console()


@dataclass
class AppState:
    repository: ConfigRepository
    verbose: bool = False

    @property
    def base_dir(self) -> Path:
        return self.repository.locator.project_root


def build_state(verbose: bool, config_path: Path | None = None) -> AppState:
    locator = ConfigLocator()
    repository = ConfigRepository(locator, path=config_path)
    configure_logging(verbose=verbose)
    return AppState(repository=repository, verbose=verbose)


def build_runner(state: AppState, config: SyncConfig) -> SyncRunner:
    return SyncRunner(config, state.base_dir)


def build_scheduler() -> SyncScheduler:
    return SyncScheduler()


def _get_state(ctx: typer.Context) -> AppState:
    state = ctx.obj
    if state is None:
        state = build_state(verbose=False)
        ctx.obj = state
    return state


def _load_config(state: AppState, reload: bool = False) -> SyncConfig:
    try:
        return state.repository.reload() if reload else state.repository.load()
    except FatalInitError as exc:
        console.print(f"Configuration error: {exc}", style="red")
        raise typer.Exit(code=1) from exc


def _report_status(report: SyncReport) -> str:
    if report.failed:
        return "failed"
    if report.skipped:
        return "nothing new" if report.candidates else "no items"
    return "published"


def _render_reports_table(reports: Iterable[SyncReport]) -> Table:
    table = Table(title="Sync results", box=box.SIMPLE_HEAD)
    table.add_column("Type", style="cyan", no_wrap=True)
    table.add_column("Listing", style="magenta")
    table.add_column("Found", justify="right")
    table.add_column("New", justify="right")
    table.add_column("Enriched", justify="right")
    table.add_column("Carried", justify="right")
    table.add_column("Published", style="green", justify="right")
    table.add_column("Status")
    for report in reports:
        table.add_row(
            report.content_type,
            report.listing_status.value if report.listing_status else "-",
            str(report.candidates),
            str(report.new_items),
            str(report.enriched),
            str(report.carried),
            "-" if report.published is None else str(report.published),
            _report_status(report),
        )
    return table


def _execute(state: AppState, only: list[str] | None, reload: bool = False) -> int:
    config = _load_config(state, reload=reload)
    try:
        runner = build_runner(state, config)
        summary = asyncio.run(runner.run(only or None))
    except FatalInitError as exc:
        console.print(f"Initialisation failed: {exc}", style="red")
        return 1
    except KeyError as exc:
        console.print(str(exc.args[0] if exc.args else exc), style="red")
        return 1
    console.print(_render_reports_table(summary.reports))
    for report in summary.reports:
        if report.failed:
            console.print(f"{report.content_type} failed: {report.error}", style="red", markup=False)
    published = sum(1 for report in summary.reports if report.published is not None)
    console.print(f"Done: {published} published, {len(summary.reports) - published} unchanged or failed")
    return summary.exit_code


app.add_typer(config_app, name="config")
app.add_typer(log_app, name="log")


@app.callback()
def main(
    ctx: typer.Context,
    verbose: bool = typer.Option(False, "--verbose", help="Enable debug logging"),
    config: Optional[Path] = typer.Option(
        None, "--config", help="Configuration file (defaults to data/sync_config.yaml)"
    ),
) -> None:
    ctx.obj = build_state(verbose, config)


@app.command("run", help="Run one sync pass.")
def run(
    ctx: typer.Context,
    only: Optional[list[str]] = typer.Option(
        None, "--only", help="Content type to run; repeat for several."
    ),
) -> None:
    state = _get_state(ctx)
    raise typer.Exit(code=_execute(state, only))


@app.command("schedule", help="Run sync passes periodically until interrupted.")
def schedule(
    ctx: typer.Context,
    interval: Optional[float] = typer.Option(None, "--interval", help="Seconds between passes."),
    cron: Optional[str] = typer.Option(None, "--cron", help="Crontab expression."),
    only: Optional[list[str]] = typer.Option(None, "--only", help="Content type to run."),
    now: bool = typer.Option(False, "--now", help="Run one pass immediately."),
) -> None:
    state = _get_state(ctx)
    _load_config(state)
    logger = configure_logging(state.verbose).bind(component="schedule")

    def job() -> None:
        try:
            code = _execute(state, only, reload=True)
        except typer.Exit as exc:
            code = exc.exit_code
        logger.info("scheduled_pass_finished", exit_code=code)

    scheduler = build_scheduler()
    try:
        scheduler.schedule(job, interval=interval, cron=cron, run_now=now)
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc
    console.print("Scheduler started, press Ctrl+C to stop.", style="cyan")
    scheduler.start()


@app.command("show", help="Print a published collection.")
def show(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Content type or collection name."),
    limit: int = typer.Option(20, "--limit", help="Maximum records to print."),
) -> None:
    state = _get_state(ctx)
    config = _load_config(state)
    collection = name
    for content_type in config.content_types:
        if name in (content_type.name, content_type.collection):
            collection = content_type.collection
            break
    try:
        store, _ = open_backend(config.backend, state.base_dir)
        records = asyncio.run(store.read_all(collection))
    except (FatalInitError, StoreError) as exc:
        console.print(f"Cannot read {collection}: {exc}", style="red")
        raise typer.Exit(code=1) from exc
    if not records:
        console.print(f"`{collection}` is empty.", style="dim")
        return
    table = Table(title=f"{collection} · {len(records)} records", box=box.SIMPLE_HEAD)
    table.add_column("#", justify="right", style="dim")
    table.add_column("Date", style="green", no_wrap=True)
    table.add_column("Category", style="magenta")
    table.add_column("Title", style="cyan", overflow="fold")
    table.add_column("Image", overflow="fold")
    for index, record in enumerate(records[:limit]):
        table.add_row(
            str(index),
            str(record.get("date", "")),
            str(record.get("category", "")),
            str(record.get("title", "")),
            "yes" if record.get("imageUrl") else "-",
        )
    console.print(table)


@config_app.command("init", help="Write the default configuration file.")
def config_init(
    ctx: typer.Context,
    force: bool = typer.Option(False, "--force", help="Overwrite an existing file."),
) -> None:
    state = _get_state(ctx)
    path = state.repository.path
    if path.exists() and not force:
        console.print(f"{path} already exists, use --force to overwrite.", style="yellow")
        raise typer.Exit(code=1)
    state.repository.save(SyncConfig())
    console.print(f"Wrote {path}", style="green")


@config_app.command("show", help="Print the effective configuration.")
def config_show(ctx: typer.Context) -> None:
    state = _get_state(ctx)
    config = _load_config(state)
    console.print(f"# {state.repository.path}", style="dim")
    console.print(
        yaml.safe_dump(config.model_dump(mode="json"), allow_unicode=True, sort_keys=False),
        markup=False,
    )


@log_app.command("list", help="List available log files.")
def log_list() -> None:
    table = Table(box=box.SIMPLE_HEAD)
    table.add_column("Name", style="cyan")
    table.add_column("File", style="green")
    for name in SHARED_LOGS:
        path = resolve_log(name)
        if path.exists():
            table.add_row(name, path.name)
    for path in available_content_logs():
        table.add_row(path.stem, f"content/{path.name}")
    if not table.row_count:
        console.print("No log files yet.", style="dim")
        return
    console.print(table)


@log_app.command("show", help="Print the last lines of a log.")
def log_show(
    name: str = typer.Argument("sync", help="sync, error or a content type name."),
    lines: int = typer.Option(100, "--lines", help="Number of lines to print."),
) -> None:
    path = resolve_log(name)
    content = tail_log(path, lines)
    if not content:
        console.print("No log entries yet.", style="dim")
        return
    console.print(f"{path.name} · last {len(content)} lines", style="cyan")
    console.print("".join(content), markup=False)


def cli() -> None:
    app()


if __name__ == "__main__":  # pragma: no cover
    cli()
