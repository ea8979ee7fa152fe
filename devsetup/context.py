"""State shared by the steps of one setup run."""
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable

from devsetup.environment import EnvironmentSnapshot, read_persisted_path


def default_config_root() -> Path:
    """Directory holding the bundled configuration files."""
    return Path(__file__).parent / "configs"


@dataclass
class ProvisionContext:
    env: EnvironmentSnapshot
    config_root: Path = field(default_factory=default_config_root)
    dry_run: bool = False
    interactive: bool = True
    path_reader: Callable[[], str] = read_persisted_path

    def refresh_path(self) -> None:
        """Pick up PATH entries written by an installer that just ran."""
        self.env = self.env.refreshed(self.path_reader)
