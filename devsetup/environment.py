"""Snapshot of the environment values the setup run depends on."""
import os
import shutil
import sys
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Callable, Mapping, Optional

_MACHINE_ENV_KEY = r"SYSTEM\CurrentControlSet\Control\Session Manager\Environment"
_USER_ENV_KEY = "Environment"


def _read_registry_path(root, key: str) -> str:
    import winreg

    try:
        with winreg.OpenKey(root, key) as handle:
            value, _ = winreg.QueryValueEx(handle, "Path")
    except OSError:
        return ""
    return os.path.expandvars(value)


def read_persisted_path() -> str:
    """Re-read the search path from where installers persist it.

    Installers on Windows write new PATH entries to the registry, which the
    running process never sees. Machine entries come before user entries,
    matching how Windows builds PATH for a new login session.
    """
    if sys.platform != "win32":
        return os.environ.get("PATH", "")

    import winreg

    parts = [
        _read_registry_path(winreg.HKEY_LOCAL_MACHINE, _MACHINE_ENV_KEY),
        _read_registry_path(winreg.HKEY_CURRENT_USER, _USER_ENV_KEY),
    ]
    return os.pathsep.join(p.strip(os.pathsep) for p in parts if p)


@dataclass(frozen=True)
class EnvironmentSnapshot:
    """Directories and search path used by one setup run."""

    home: Path
    appdata: Path
    local_appdata: Path
    path: str

    @classmethod
    def from_environ(cls, environ: Optional[Mapping[str, str]] = None) -> "EnvironmentSnapshot":
        if environ is None:
            environ = os.environ
        home = Path(environ.get("USERPROFILE") or Path.home())
        appdata = Path(environ.get("APPDATA") or home / "AppData" / "Roaming")
        local_appdata = Path(environ.get("LOCALAPPDATA") or home / "AppData" / "Local")
        return cls(
            home=home,
            appdata=appdata,
            local_appdata=local_appdata,
            path=environ.get("PATH", ""),
        )

    def refreshed(self, reader: Callable[[], str] = read_persisted_path) -> "EnvironmentSnapshot":
        """Return a copy whose search path is re-read from persisted state."""
        path = reader()
        if not path:
            # Keep the old path rather than losing every tool.
            return self
        return replace(self, path=path)

    def child_env(self) -> dict:
        """Environment for child processes, with this snapshot's PATH."""
        env = dict(os.environ)
        env["PATH"] = self.path
        return env


def resolve_command(name: str, env: EnvironmentSnapshot) -> Optional[str]:
    """Return the full path of a command, or None if it is not on env.path."""
    return shutil.which(name, path=env.path)


def command_exists(name: str, env: EnvironmentSnapshot) -> bool:
    """Check if a command exists on the snapshot's search path."""
    return resolve_command(name, env) is not None
