"""Post-install verification of the provisioned tools."""
import re
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

import typer

from devsetup.environment import EnvironmentSnapshot, command_exists
from devsetup.runner import run_captured

# (display name, command, version arguments)
TOOLS: List[Tuple[str, str, Tuple[str, ...]]] = [
    ("git", "git", ("--version",)),
    ("scoop", "scoop", ("--version",)),
    ("zig", "zig", ("version",)),
    ("rg", "rg", ("--version",)),
    ("fd", "fd", ("--version",)),
    ("volta", "volta", ("--version",)),
    ("node", "node", ("--version",)),
    ("nu", "nu", ("--version",)),
    ("starship", "starship", ("--version",)),
    ("wezterm", "wezterm", ("--version",)),
    ("nvim", "nvim", ("--version",)),
]

_VERSION_RE = re.compile(r"\d[\d.]*")


@dataclass(frozen=True)
class ToolStatus:
    name: str
    resolvable: bool
    version: Optional[str] = None


def extract_version(text: str) -> str:
    """Pull the first version-like run of digits and dots out of text.

    Returns the text unchanged when it has no digits at all.
    """
    match = _VERSION_RE.search(text)
    if match:
        return match.group(0)
    return text


def probe_tool(name: str, command: str, args: Sequence[str], env: EnvironmentSnapshot) -> ToolStatus:
    """Check one tool and read its version from the first output line."""
    if not command_exists(command, env):
        return ToolStatus(name=name, resolvable=False)
    output = run_captured(command, *args, env=env).output
    first_line = output.splitlines()[0] if output else ""
    return ToolStatus(name=name, resolvable=True, version=extract_version(first_line))


def collect_tool_status(env: EnvironmentSnapshot, tools=TOOLS) -> List[ToolStatus]:
    """Re-probe every tool; nothing is cached between calls."""
    return [probe_tool(name, command, args, env) for name, command, args in tools]


def print_tool_table(statuses: Sequence[ToolStatus]) -> None:
    """Print the tool/version table."""
    typer.echo()
    typer.echo(f"   {'Tool':<16}Version")
    typer.echo(f"   {'────':<16}───────")
    for status in statuses:
        if status.resolvable:
            typer.secho(f"   {status.name:<16}{status.version}", fg=typer.colors.GREEN)
        else:
            typer.secho(f"   {status.name:<16}NOT FOUND", fg=typer.colors.RED)
