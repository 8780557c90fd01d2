from __future__ import annotations

import queue
import webbrowser
from enum import Enum
from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from gdrivesync.config import DEFAULT_CONFIG_PATH, AppConfig, SyncStateStore, load_config
from gdrivesync.conflict import PendingConflict
from gdrivesync.errors import GDriveSyncError
from gdrivesync.logging_setup import setup_logging
from gdrivesync.manager import SyncManager
from gdrivesync.scheduler import SyncScheduler
from gdrivesync.util.time import format_ms

app = typer.Typer(add_completion=False, help="Two-way sync between a local folder and Google Drive.")
console = Console()

ConfigOption = typer.Option(DEFAULT_CONFIG_PATH, "--config", "-c", help="Path to config.yaml")


class Direction(str, Enum):
    both = "both"
    up = "up"
    down = "down"


def _load(config_path: Path) -> AppConfig:
    cfg = load_config(config_path)
    setup_logging(cfg.logging.level, cfg.logging.file)
    return cfg


def _prompt_arbiter(conflict: PendingConflict) -> None:
    console.print(f"[yellow]⚠ Sync conflict:[/yellow] {conflict.path} was modified locally and on Google Drive.")
    choice = typer.prompt("Keep [l]ocal, [r]emote, or [s]kip", default="s").strip().lower()
    if choice.startswith("l"):
        conflict.choose_local()
    elif choice.startswith("r"):
        conflict.choose_remote()


class _ConflictQueue:
    """
    Arbiter for `watch`: scheduled runs fire on timer threads, so conflicts
    are queued there and prompted for on the main thread.
    """

    def __init__(self) -> None:
        self._queue: queue.Queue[PendingConflict] = queue.Queue()

    def __call__(self, conflict: PendingConflict) -> None:
        self._queue.put(conflict)

    def prompt_next(self, timeout: float) -> bool:
        """Prompt for the next queued conflict. Returns False if none arrived in time."""
        try:
            conflict = self._queue.get(timeout=timeout)
        except queue.Empty:
            return False
        # A newer run may have replaced it, or it was resolved elsewhere.
        if not conflict.is_resolved:
            try:
                _prompt_arbiter(conflict)
            except GDriveSyncError as exc:
                console.print(f"[red]✗ Could not resolve {conflict.path}:[/red] {exc}")
        return True


@app.command()
def authenticate(config_path: Path = ConfigOption) -> None:
    """Authorize access to Google Drive and store the refresh token."""
    cfg = _load(config_path)
    try:
        manager = SyncManager(cfg, config_path=config_path)

        def read_code(url: str) -> str:
            console.print("Open this URL and authorize access:")
            console.print(url)
            webbrowser.open(url)
            return typer.prompt("Authorization code")

        manager.authenticate(read_code)
    except GDriveSyncError as exc:
        console.print(f"[red]Authentication failed:[/red] {exc}")
        raise typer.Exit(code=1)
    console.print("[green]Authenticated successfully![/green]")


@app.command()
def sync(
    direction: Direction = typer.Option(Direction.both, "--direction", "-d"),
    config_path: Path = ConfigOption,
) -> None:
    """Run one reconciliation pass."""
    cfg = _load(config_path)
    try:
        manager = SyncManager(cfg, config_path=config_path, arbiter=_prompt_arbiter)
        summary = manager.run(
            to_remote=direction in (Direction.both, Direction.up),
            from_remote=direction in (Direction.both, Direction.down),
        )
    except GDriveSyncError as exc:
        console.print(f"[red]✗ Sync failed:[/red] {exc}")
        raise typer.Exit(code=1)
    console.print(f"[green]✓[/green] {summary.status_message()}")


@app.command()
def watch(config_path: Path = ConfigOption) -> None:
    """Sync now, then on local changes and at the configured interval."""
    cfg = _load(config_path)
    if not cfg.sync.auto_sync:
        console.print("Auto sync is disabled in settings.")
        raise typer.Exit(code=1)

    conflicts = _ConflictQueue()
    try:
        manager = SyncManager(cfg, config_path=config_path, arbiter=conflicts)
        summary = manager.run()
        console.print(f"[green]✓[/green] {summary.status_message()}")
    except GDriveSyncError as exc:
        console.print(f"[red]✗ Sync failed:[/red] {exc}")
        raise typer.Exit(code=1)

    scheduler = SyncScheduler.from_manager(manager)
    scheduler.start()
    try:
        while not scheduler.is_closed:
            conflicts.prompt_next(timeout=1.0)
    except KeyboardInterrupt:
        console.print("Stopping…")
    finally:
        scheduler.shutdown()


@app.command()
def status(config_path: Path = ConfigOption) -> None:
    """Show settings and the last successful sync time."""
    cfg = load_config(config_path)
    last = SyncStateStore(cfg.state_file).load().last_sync_time

    table = Table(show_header=False)
    table.add_row("Local root", cfg.sync.local_root or "-")
    table.add_row("Folder ID", cfg.sync.folder_id or "-")
    table.add_row("Authenticated", "yes" if cfg.auth.refresh_token else "no")
    table.add_row("Auto sync", f"{cfg.sync.auto_sync} (every {cfg.sync.sync_interval} min)")
    table.add_row("Conflict resolution", cfg.sync.conflict_resolution)
    table.add_row("Last sync", format_ms(last) if last else "never")
    console.print(table)


if __name__ == "__main__":
    app()
