"""Utility functions for the setup tool."""
import hashlib
import logging
from datetime import datetime
from pathlib import Path
from typing import Optional, Union

import typer

BACKUP_TIMESTAMP_FORMAT = "%Y%m%d-%H%M%S"


def timestamp(now: Optional[datetime] = None) -> str:
    """Return a sortable, filesystem friendly timestamp."""
    return (now or datetime.now()).strftime(BACKUP_TIMESTAMP_FORMAT)


def sha256_file(path: Union[str, Path]) -> str:
    """Return the hex SHA-256 digest of a file's content."""
    h = hashlib.sha256()
    with open(path, "rb") as f:
        for chunk in iter(lambda: f.read(1024 * 1024), b""):
            h.update(chunk)
    return h.hexdigest()


def log_step(message: str) -> None:
    """Announce the start of a provisioning step."""
    typer.echo()
    typer.secho(f":: {message}", fg=typer.colors.CYAN)


def log_info(message: str) -> None:
    """Log an informational message."""
    typer.echo(f"[INFO] {message}")


def log_action(message: str) -> None:
    """Log an action being performed."""
    typer.echo(f"  -> {message}")


def log_ok(message: str) -> None:
    """Log a step that completed successfully."""
    typer.echo("   " + typer.style("[OK]", fg=typer.colors.GREEN) + f" {message}")


def log_skip(message: str) -> None:
    """Log a step that had nothing to do."""
    typer.echo("   " + typer.style("[SKIP]", fg=typer.colors.YELLOW) + f" {message}")


def log_fail(message: str) -> None:
    """Log a failed operation."""
    typer.echo("   " + typer.style("[FAIL]", fg=typer.colors.RED) + f" {message}")


def log_warn(message: str) -> None:
    """Log a warning that does not fail the step."""
    typer.secho(f"   {message}", fg=typer.colors.YELLOW)


def setup_logging(verbose: bool = False) -> None:
    """Setup logging configuration.

    User facing output goes through the log_* helpers above; the stdlib
    loggers only carry diagnostics such as the exact commands being run.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
