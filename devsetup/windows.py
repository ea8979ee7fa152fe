"""Windows-specific provisioning functions."""
import os
import shutil
import stat
import sys
from datetime import datetime
from typing import List, Optional

import typer

from devsetup.context import ProvisionContext
from devsetup.environment import command_exists
from devsetup.report import Outcome, Status, failed, ok, skipped
from devsetup.runner import run_captured, run_passthrough
from devsetup.utils import log_action, log_warn, timestamp

SCOOP_INSTALL_COMMAND = "Invoke-RestMethod get.scoop.sh | Invoke-Expression"
LAZYVIM_STARTER_URL = "https://github.com/LazyVim/starter"
CONNECTIVITY_URL = "https://www.github.com"

GIT_DEFAULTS = [
    ("core.editor", "nvim"),
    ("core.autocrlf", "true"),
    ("init.defaultBranch", "main"),
    ("pull.rebase", "true"),
    ("diff.colorMoved", "default"),
    ("merge.conflictstyle", "diff3"),
]


def check_winget(ctx: ProvisionContext) -> bool:
    """Check if the winget frontend is available."""
    return command_exists("winget", ctx.env)


def check_connectivity(ctx: ProvisionContext, url: str = CONNECTIVITY_URL, timeout: int = 10) -> bool:
    """Probe the clone source once with a short deadline."""
    result = run_captured(
        "curl", "-sS", "-o", os.devnull, "--max-time", str(timeout), url, env=ctx.env
    )
    return result.succeeded


def install_scoop(ctx: ProvisionContext) -> List[Outcome]:
    """Install Scoop if not already installed."""
    if command_exists("scoop", ctx.env):
        return [skipped("Scoop already installed")]

    if ctx.dry_run:
        return [skipped("[DRY RUN] Would install Scoop")]

    log_action("Installing Scoop...")
    result = run_passthrough("powershell", "-NoProfile", "-Command", SCOOP_INSTALL_COMMAND, env=ctx.env)
    if not result.succeeded:
        return [failed(f"Failed to install Scoop (exit status {result.returncode})")]

    ctx.refresh_path()
    return [ok(Status.INSTALLED, "Scoop installed")]


def install_node(ctx: ProvisionContext) -> List[Outcome]:
    """Install Node.js LTS through Volta."""
    if command_exists("node", ctx.env):
        version = run_captured("node", "--version", env=ctx.env).output
        return [skipped(f"Node.js already installed ({version})")]

    if not command_exists("volta", ctx.env):
        return [failed("Volta not found - cannot install Node.js")]

    if ctx.dry_run:
        return [skipped("[DRY RUN] Would install Node.js LTS via Volta")]

    log_action("Installing Node.js LTS via Volta...")
    if not run_passthrough("volta", "install", "node", env=ctx.env).succeeded:
        return [failed("Failed to install Node.js via Volta")]

    ctx.refresh_path()
    return [ok(Status.INSTALLED, "Node.js LTS installed via Volta")]


def get_git_config(ctx: ProvisionContext, key: str) -> str:
    """Read a global git config value, empty when unset."""
    return run_captured("git", "config", "--global", "--get", key, env=ctx.env).output


def set_git_config(ctx: ProvisionContext, key: str, value: str) -> bool:
    """Write a global git config value."""
    return run_captured("git", "config", "--global", key, value, env=ctx.env).succeeded


def set_git_config_if_missing(ctx: ProvisionContext, key: str, value: str) -> Outcome:
    """Set a global git config value unless one is already configured."""
    current = get_git_config(ctx, key)
    if current:
        return skipped(f"git {key} already set to '{current}'")

    if ctx.dry_run:
        return skipped(f"[DRY RUN] Would set git {key} to '{value}'")

    if not set_git_config(ctx, key, value):
        return failed(f"Failed to set git {key}")
    return ok(Status.CONFIGURED, f"git {key} set to '{value}'")


def configure_git_defaults(ctx: ProvisionContext) -> List[Outcome]:
    """Apply the default git settings that are not set yet."""
    if not command_exists("git", ctx.env):
        return [failed("Git not found - skipping git config")]
    return [set_git_config_if_missing(ctx, key, value) for key, value in GIT_DEFAULTS]


def _prompt_identity(ctx: ProvisionContext, key: str, label: str, example: str) -> Optional[Outcome]:
    current = get_git_config(ctx, key)
    if current:
        return skipped(f"git {key} already set to '{current}'")

    log_warn(f"Git {key} not configured.")
    if ctx.dry_run or not ctx.interactive:
        return skipped(f"Not prompting for git {key}")

    value = typer.prompt(f"   Enter your {label} (e.g. {example})", default="", show_default=False).strip()
    if not value:
        # Leaving it empty is the user's choice, not a failure.
        return None
    if not set_git_config(ctx, key, value):
        return failed(f"Failed to set git {key}")
    return ok(Status.CONFIGURED, f"git {key} set to '{value}'")


def configure_git_identity(ctx: ProvisionContext) -> List[Outcome]:
    """Ask for user.name and user.email when they are not set globally."""
    if not command_exists("git", ctx.env):
        return [skipped("Git not found - skipping identity setup")]

    outcomes = [
        _prompt_identity(ctx, "user.name", "name", "John Doe"),
        _prompt_identity(ctx, "user.email", "email", "john@example.com"),
    ]
    return [o for o in outcomes if o is not None]


def _make_writable(func, path, _exc):
    # git marks its object files read-only on Windows.
    os.chmod(path, stat.S_IWRITE)
    func(path)


def remove_tree(path) -> None:
    """Delete a directory tree, including read-only files."""
    if sys.version_info >= (3, 12):
        shutil.rmtree(path, onexc=_make_writable)
    else:
        shutil.rmtree(path, onerror=_make_writable)


def install_lazyvim(ctx: ProvisionContext, now: Optional[datetime] = None) -> List[Outcome]:
    """Clone the LazyVim starter into the nvim config directory."""
    nvim_dir = ctx.env.local_appdata / "nvim"
    marker = nvim_dir / "lua" / "config" / "lazy.lua"

    if marker.exists():
        return [skipped("LazyVim already configured")]

    if not command_exists("git", ctx.env):
        return [failed("Git not found - cannot clone LazyVim starter")]

    if ctx.dry_run:
        return [skipped(f"[DRY RUN] Would clone LazyVim starter to {nvim_dir}")]

    if nvim_dir.exists():
        backup_dir = nvim_dir.with_name(f"{nvim_dir.name}.bak.{timestamp(now)}")
        log_warn(f"Backing up existing nvim config to {backup_dir}")
        nvim_dir.rename(backup_dir)

    log_action("Cloning LazyVim starter...")
    if not run_passthrough("git", "clone", LAZYVIM_STARTER_URL, str(nvim_dir), env=ctx.env).succeeded:
        return [failed("Failed to clone LazyVim starter")]

    git_dir = nvim_dir / ".git"
    if git_dir.exists():
        remove_tree(git_dir)
    return [ok(Status.INSTALLED, f"LazyVim starter cloned to {nvim_dir}")]
