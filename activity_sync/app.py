"""Typer CLI entrypoint for activity-sync."""

from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import Optional, Sequence

import typer
from rich import box
from rich.console import Console
from rich.table import Table

from .config import ConfigRepository, GlobalConfig
from .engine import HttpFetcher
from .errors import SourceConfigError
from .infra import HistoryStore, build_history_store
from .logging_conf import available_source_logs, configure_logging, log_dir, tail_log
from .orchestrator import Orchestrator
from .scheduler import APSchedulerAdapter, Scheduler, TickReport
from .sinks import BaseSink, build_sink
from .sources import ADAPTERS, SourceAdapter, build_adapters

app = typer.Typer(help="Forward activity history into a calendar.", no_args_is_help=True)
source_app = typer.Typer(name="source", help="Inspect configured sources.", no_args_is_help=True)
history_app = typer.Typer(name="history", help="Inspect or reset delivered event ids.", no_args_is_help=True)
log_app = typer.Typer(name="log", help="Show log files.", no_args_is_help=True)

console = Console()


@dataclass
class AppState:
    repository: ConfigRepository
    global_config: GlobalConfig
    history: HistoryStore
    fetcher: HttpFetcher
    orchestrator: Orchestrator


def build_state(verbose: bool) -> AppState:
    configure_logging(verbose=verbose)
    repository = ConfigRepository()
    global_config = repository.load_global_config()
    history = build_history_store(global_config.history_backend, repository.history_dir())
    fetcher = HttpFetcher(timeout=global_config.request_timeout)
    outputs_dir = repository.outputs_dir()

    def sink_factory(adapter: SourceAdapter) -> BaseSink:
        return build_sink(
            global_config,
            adapter.identifier(),
            adapter.calendar_id(),
            outputs_dir,
            base_dir=repository.locator.project_root,
        )

    orchestrator = Orchestrator(fetcher, sink_factory, history=history)
    return AppState(
        repository=repository,
        global_config=global_config,
        history=history,
        fetcher=fetcher,
        orchestrator=orchestrator,
    )


def _get_state(ctx: typer.Context) -> AppState:
    state = ctx.obj
    if state is None:
        state = build_state(verbose=False)
        ctx.obj = state
    return state


def _active_source_names(state: AppState, requested: Sequence[str] | None = None) -> list[str]:
    if requested:
        return list(requested)
    if state.global_config.sources:
        return list(state.global_config.sources)
    return [name for name in state.repository.list_source_names() if name in ADAPTERS]


def _build_scheduler(
    state: AppState, requested: Sequence[str] | None = None, calendar_id: str | None = None
) -> Scheduler:
    adapters = build_adapters(
        state.repository,
        state.history,
        _active_source_names(state, requested),
        calendar_id=calendar_id,
    )
    if not adapters:
        console.print("No usable source configuration found under data/sources.", style="yellow")
        raise typer.Exit(code=1)
    return Scheduler(
        state.orchestrator,
        adapters,
        interval=state.global_config.poll_interval_seconds,
    )


def _render_tick_report(report: TickReport) -> Table:
    table = Table(title=f"Cycle results · {report.started_at:%Y-%m-%d %H:%M}", box=box.SIMPLE_HEAD)
    table.add_column("Source", style="cyan", no_wrap=True)
    table.add_column("Fetched", justify="right")
    table.add_column("Suppressed", justify="right")
    table.add_column("Duplicates", justify="right")
    table.add_column("Delivered", justify="right", style="green")
    table.add_column("Error", style="red", overflow="fold")
    for summary in report.succeeded:
        table.add_row(
            summary.source,
            str(summary.fetched),
            str(summary.suppressed),
            str(summary.duplicates),
            str(summary.delivered),
            "",
        )
    for source, error in report.failed.items():
        table.add_row(source, "-", "-", "-", "-", error)
    return table


app.add_typer(source_app, name="source")
app.add_typer(history_app, name="history")
app.add_typer(log_app, name="log")


@app.callback()
def main(
    ctx: typer.Context,
    verbose: bool = typer.Option(False, "--verbose", help="Enable debug logging."),
) -> None:
    ctx.obj = build_state(verbose)


@app.command("run", help="Run the polling loop in the foreground.")
def run(
    ctx: typer.Context,
    ticks: Optional[int] = typer.Option(None, "--ticks", min=1, help="Stop after N ticks."),
) -> None:
    state = _get_state(ctx)
    scheduler = _build_scheduler(state)
    try:
        scheduler.run(max_ticks=ticks)
    except KeyboardInterrupt:
        console.print("Interrupted.", style="yellow")
    finally:
        state.fetcher.close()


@app.command("serve", help="Run the polling loop through APScheduler until interrupted.")
def serve(ctx: typer.Context) -> None:
    state = _get_state(ctx)
    scheduler = _build_scheduler(state)
    adapter = APSchedulerAdapter()
    adapter.schedule_tick(scheduler.tick, state.global_config.poll_interval_seconds)
    adapter.start()
    stop = threading.Event()
    console.print(
        f"Polling {len(scheduler.adapters)} source(s) every "
        f"{state.global_config.poll_interval_seconds:g}s. Press Ctrl+C to stop.",
        style="cyan",
    )
    try:
        while not stop.wait(1.0):
            pass
    except KeyboardInterrupt:
        console.print("Stopping…", style="yellow")
    finally:
        adapter.shutdown()
        state.fetcher.close()


@app.command("once", help="Run a single cycle for all or the given sources.")
def once(
    ctx: typer.Context,
    sources: Optional[list[str]] = typer.Argument(None, help="Source identifiers."),
    calendar_id: Optional[str] = typer.Option(
        None, "--calendar-id", help="Deliver to this calendar instead of the configured ones."
    ),
) -> None:
    state = _get_state(ctx)
    scheduler = _build_scheduler(state, sources, calendar_id=calendar_id)
    try:
        report = scheduler.tick()
    finally:
        state.fetcher.close()
    console.print(_render_tick_report(report))
    if report.failed:
        raise typer.Exit(code=1)


@source_app.command("list", help="List configured sources.")
def source_list(ctx: typer.Context) -> None:
    state = _get_state(ctx)
    names = state.repository.list_source_names()
    if not names:
        console.print("No sources configured under data/sources.", style="yellow")
        raise typer.Exit(code=0)
    active = set(_active_source_names(state))
    table = Table(title=f"Sources · {len(names)} configured", box=box.SIMPLE_HEAD)
    table.add_column("Name", style="cyan", no_wrap=True)
    table.add_column("Active", style="magenta")
    table.add_column("Request URL", overflow="fold")
    table.add_column("Calendar", style="green")
    for name in names:
        if name not in ADAPTERS:
            table.add_row(name, "unknown adapter", "-", "-")
            continue
        try:
            config = state.repository.require_source(name)
        except SourceConfigError as exc:
            table.add_row(name, "invalid", str(exc), "-")
            continue
        table.add_row(
            name,
            "yes" if name in active else "no",
            config.request_url_template,
            config.calendar_id or state.global_config.sink.default_calendar_id,
        )
    console.print(table)


@history_app.command("show", help="Show delivered event ids of a source.")
def history_show(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Source identifier."),
    limit: int = typer.Option(20, "--limit", min=1, help="Number of ids to show."),
) -> None:
    state = _get_state(ctx)
    rows = state.orchestrator.view_history(name, limit=limit)
    if not rows:
        console.print("No delivered events recorded.", style="dim")
        return
    table = Table(title=f"{name} · {len(rows)} delivered ids", box=box.SIMPLE_HEAD)
    table.add_column("Event id", overflow="fold")
    for event_id in rows:
        table.add_row(event_id)
    console.print(table)


@history_app.command("reset", help="Forget every delivered event id of a source.")
def history_reset(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Source identifier."),
    yes: bool = typer.Option(False, "--yes", help="Skip the confirmation prompt."),
) -> None:
    state = _get_state(ctx)
    if not yes and not typer.confirm(f"Forget delivered events of `{name}`?", default=False):
        console.print("Cancelled.", style="yellow")
        raise typer.Exit(code=0)
    state.orchestrator.reset_history(name)
    console.print(f"History of `{name}` cleared.", style="green")


@log_app.command("list", help="List per-source log files.")
def log_list() -> None:
    logs = list(available_source_logs())
    if not logs:
        console.print("No source logs yet.", style="dim")
        return
    table = Table(box=box.SIMPLE_HEAD)
    table.add_column("File", style="green")
    for path in logs:
        table.add_row(path.name)
    console.print(table)


@log_app.command("show", help="Show the tail of the global or a source log.")
def log_show(
    name: Optional[str] = typer.Option(None, "--source", help="Source name; global log when omitted."),
    tail: int = typer.Option(100, "--tail", min=1, help="Number of lines."),
) -> None:
    base_dir = log_dir()
    path = base_dir / "sources" / f"{name}.log" if name else base_dir / "sync.log"
    lines = tail_log(path, tail)
    if not lines:
        console.print("Log is empty.", style="dim")
        return
    console.print("".join(lines), markup=False, highlight=False)


def cli() -> None:
    app()


if __name__ == "__main__":  # pragma: no cover
    cli()
