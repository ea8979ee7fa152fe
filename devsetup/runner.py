"""Run external programs and report success by exit status."""
import logging
import subprocess
from dataclasses import dataclass
from typing import List, Optional

from devsetup.environment import EnvironmentSnapshot, resolve_command

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CommandResult:
    argv: List[str]
    output: str
    succeeded: bool
    returncode: Optional[int] = None


def _spawn(program: str, args, env: Optional[EnvironmentSnapshot], capture: bool) -> CommandResult:
    argv = [program, *args]
    executable = program
    child_env = None
    if env is not None:
        executable = resolve_command(program, env)
        if executable is None:
            logger.debug("Command not found on PATH: %s", program)
            return CommandResult(argv=argv, output="", succeeded=False)
        child_env = env.child_env()

    logger.debug("CMD %s", subprocess.list2cmdline(argv))
    kwargs = {}
    if capture:
        kwargs = dict(
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            text=True,
            errors="replace",
        )
    try:
        p = subprocess.run([executable, *args], env=child_env, **kwargs)
    except OSError as e:
        logger.debug("Failed to start %s: %s", program, e)
        return CommandResult(argv=argv, output="", succeeded=False)

    output = (p.stdout or "").strip() if capture else ""
    if p.returncode != 0:
        logger.debug("%s exited with %s", program, p.returncode)
    return CommandResult(argv=argv, output=output, succeeded=p.returncode == 0, returncode=p.returncode)


def run_captured(program: str, *args: str, env: Optional[EnvironmentSnapshot] = None) -> CommandResult:
    """Run a command, returning stdout and stderr combined into one string."""
    return _spawn(program, args, env, capture=True)


def run_passthrough(program: str, *args: str, env: Optional[EnvironmentSnapshot] = None) -> CommandResult:
    """Run a command attached to the terminal so the user sees live progress."""
    return _spawn(program, args, env, capture=False)
