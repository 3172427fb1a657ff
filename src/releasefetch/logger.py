"""Package logger with Rich progress bar support for asset downloads."""

import logging
from contextlib import contextmanager
from typing import Callable, Iterator

from rich.console import Console
from rich.progress import (
    BarColumn,
    Progress,
    ProgressColumn,
    TextColumn,
    TimeElapsedColumn,
    TimeRemainingColumn,
)
from rich.text import Text

from . import constants


def format_bytes(bytes_count: int) -> str:
    """Format bytes into human-readable string with appropriate unit.

    Args:
        bytes_count: Number of bytes

    Returns:
        Formatted string like "1.50 GB", "250 B", "500.00 KB", etc.
    """
    units = ['B', 'KB', 'MB', 'GB', 'TB', 'PB']
    unit_index = 0
    size = float(bytes_count)

    while size >= 1024 and unit_index < len(units) - 1:
        size /= 1024
        unit_index += 1

    if unit_index == 0:
        return f"{int(size)} {units[unit_index]}"
    return f"{size:.2f} {units[unit_index]}"


class ByteSizeColumn(ProgressColumn):
    """Displays downloaded/total size of a task."""

    def render(self, task):
        total = task.total or 0
        completed = task.completed or 0
        if not total:
            return Text(format_bytes(completed), style="progress.percentage")
        return Text(
            f"{format_bytes(completed)}/{format_bytes(total)}",
            style="progress.percentage",
        )


def make_progress() -> Progress:
    """Create a transient Progress bound to a width-limited console."""
    console = Console(stderr=True)
    console.width = (
        min(console.width, constants.CONSOLE_WIDTH_LIMIT)
        if console.width
        else constants.CONSOLE_WIDTH_LIMIT
    )

    return Progress(
        TextColumn("[bold blue]{task.description}"),
        BarColumn(bar_width=None),
        TextColumn("[progress.percentage]{task.percentage:>3.0f}%"),
        TextColumn("•"),
        ByteSizeColumn(),
        TextColumn("•"),
        TimeElapsedColumn(),
        TextColumn("•"),
        TimeRemainingColumn(),
        console=console,
        transient=True,
        expand=True,
    )


@contextmanager
def download_progress(
    filename: str, total: int | None = None
) -> Iterator[Callable[[int], None]]:
    """Show a progress bar for a single download.

    Yields a callback taking the number of bytes received since the last call.
    Nothing is rendered when the logger is not attached to a terminal.
    """
    progress = make_progress()
    if not progress.console.is_terminal:
        yield lambda advance: None
        return

    with progress:
        task_id = progress.add_task(f"Downloading {filename}", total=total or None)
        yield lambda advance: progress.update(task_id, advance=advance)


def setup_logger() -> logging.Logger:
    """Setup and return the package logger."""
    logger = logging.getLogger('releasefetch')

    # If no handlers, add a default one
    if not logger.handlers:
        handler = logging.StreamHandler()
        formatter = logging.Formatter('%(name)s - %(levelname)s - %(message)s')
        handler.setFormatter(formatter)
        logger.addHandler(handler)
        logger.setLevel(logging.INFO)

    return logger


# Create the module-level log instance
log = setup_logger()
