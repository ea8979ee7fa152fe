"""Shared fixtures for the test suite."""
from pathlib import Path

import pytest

from devsetup.context import ProvisionContext
from devsetup.environment import EnvironmentSnapshot


@pytest.fixture
def env(tmp_path: Path) -> EnvironmentSnapshot:
    home = tmp_path / "home"
    return EnvironmentSnapshot(
        home=home,
        appdata=home / "AppData" / "Roaming",
        local_appdata=home / "AppData" / "Local",
        path="/usr/bin",
    )


@pytest.fixture
def ctx(env: EnvironmentSnapshot, tmp_path: Path) -> ProvisionContext:
    return ProvisionContext(
        env=env,
        config_root=tmp_path / "configs",
        path_reader=lambda: "/refreshed/bin",
    )
