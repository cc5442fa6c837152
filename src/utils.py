"""Shared utility functions for create-better-next.

Provides shell command execution with inherited terminal streams, atomic
file writes, and Rich-based progress reporting.
"""

from __future__ import annotations

import asyncio
import os
import stat
import tempfile
from pathlib import Path

from rich.console import Console
from rich.markup import escape
from rich.rule import Rule
from rich.table import Table

console = Console()
err_console = Console(stderr=True)

# ---------------------------------------------------------------------------
# Command execution
# ---------------------------------------------------------------------------


class ProcessError(Exception):
    """Raised when a spawned command exits non-zero or cannot be started."""

    def __init__(
        self,
        command: str,
        exit_code: int | None = None,
        cause: BaseException | None = None,
    ) -> None:
        self.command = command
        self.exit_code = exit_code
        self.cause = cause
        if cause is not None:
            message = f"Command could not be started ({cause}): {command}"
        else:
            message = f"Command failed with exit code {exit_code}: {command}"
        super().__init__(message)


async def run_command(cmd: str, cwd: str | Path | None = None) -> None:
    """Run a shell command with the parent's stdin/stdout/stderr.

    The command line is echoed before it starts so the user can see which
    step is running.  Interactive tools can prompt the user directly since
    no stream is captured.  There is no timeout.

    Args:
        cmd: Shell command string.
        cwd: Working directory for the child process.

    Raises:
        ProcessError: If the process cannot be spawned or exits non-zero.
    """
    console.print(f"[dim]$[/dim] {escape(cmd)}", highlight=False, soft_wrap=True)

    try:
        process = await asyncio.create_subprocess_shell(
            cmd,
            cwd=str(cwd) if cwd else None,
        )
    except OSError as exc:
        raise ProcessError(cmd, cause=exc) from exc

    returncode = await process.wait()
    if returncode != 0:
        raise ProcessError(cmd, exit_code=returncode)


# ---------------------------------------------------------------------------
# File-system helpers
# ---------------------------------------------------------------------------


def _current_umask() -> int:
    # os.umask can only be read by setting it.
    mask = os.umask(0o022)
    os.umask(mask)
    return mask


def write_file(path: str | Path, content: str) -> Path:
    """Write *content* to *path*, creating parent directories as needed.

    An existing file is replaced and keeps its permission bits; a new file
    gets ``0o666`` minus the process umask.  The content is written to a
    temporary sibling first and renamed over the target, so a failed write
    never leaves a truncated file behind.

    Raises:
        OSError: On permission or disk errors.
    """
    file_path = Path(path)
    file_path.parent.mkdir(parents=True, exist_ok=True)

    try:
        mode = stat.S_IMODE(file_path.stat().st_mode)
    except FileNotFoundError:
        mode = 0o666 & ~_current_umask()

    fd, tmp_name = tempfile.mkstemp(
        dir=file_path.parent, prefix=f".{file_path.name}.", suffix=".tmp"
    )
    try:
        with os.fdopen(fd, "w", encoding="utf-8", newline="") as handle:
            handle.write(content)
        os.chmod(tmp_name, mode)
        os.replace(tmp_name, file_path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise
    return file_path


# ---------------------------------------------------------------------------
# Formatting helpers
# ---------------------------------------------------------------------------


def format_duration(seconds: float) -> str:
    """Render the elapsed setup time, e.g. ``"3.7s"`` or ``"2m 5s"``.

    Runs longer than an hour stay in minutes (``"61m 1s"``).
    """
    if seconds < 60:
        return f"{max(seconds, 0.0):.1f}s"
    minutes, secs = divmod(int(seconds), 60)
    return f"{minutes}m {secs}s"


# ---------------------------------------------------------------------------
# Rich output helpers
# ---------------------------------------------------------------------------


def print_phase_header(title: str) -> None:
    """Print a rule announcing the next setup phase."""
    console.print()
    console.print(Rule(f"[bold bright_cyan] {title} [/bold bright_cyan]", style="bright_cyan"))


def print_summary_table(data: dict[str, str], title: str = "Summary") -> None:
    """Show the resolved project settings as an Item/Value table."""
    table = Table(title=title, show_header=True, header_style="bold cyan")
    table.add_column("Item", style="dim", no_wrap=True)
    table.add_column("Value")

    for key, value in data.items():
        table.add_row(escape(key), escape(str(value)))

    console.print(table)
    console.print()


def print_success(message: str) -> None:
    """Print a green success message."""
    console.print(f"[bold green]{escape(message)}[/bold green]")


def print_info(message: str) -> None:
    """Print an informational message without markup processing."""
    console.print(message, markup=False, highlight=False, soft_wrap=True)


def print_error(message: str) -> None:
    """Print a red error message on stderr."""
    err_console.print(f"[bold red]{escape(message)}[/bold red]", soft_wrap=True)


def print_warning(message: str) -> None:
    """Print a yellow warning message."""
    console.print(f"[bold yellow]{escape(message)}[/bold yellow]", soft_wrap=True)
