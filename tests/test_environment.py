"""Tests for the environment snapshot and existence probe."""
import os
import sys
from dataclasses import replace
from pathlib import Path
from unittest.mock import patch

import pytest

from devsetup.environment import (
    EnvironmentSnapshot, command_exists, read_persisted_path, resolve_command
)


class TestFromEnviron:
    """Tests for building a snapshot from environment variables."""

    def test_reads_windows_directories(self):
        """Test USERPROFILE, APPDATA and LOCALAPPDATA are used when set."""
        snapshot = EnvironmentSnapshot.from_environ({
            "USERPROFILE": "C:/Users/dev",
            "APPDATA": "C:/Users/dev/AppData/Roaming",
            "LOCALAPPDATA": "C:/Users/dev/AppData/Local",
            "PATH": "C:/bin",
        })

        assert snapshot.home == Path("C:/Users/dev")
        assert snapshot.appdata == Path("C:/Users/dev/AppData/Roaming")
        assert snapshot.local_appdata == Path("C:/Users/dev/AppData/Local")
        assert snapshot.path == "C:/bin"

    def test_falls_back_to_home_layout(self):
        """Test missing app-data variables are derived from the home directory."""
        snapshot = EnvironmentSnapshot.from_environ({"USERPROFILE": "/home/dev"})

        assert snapshot.appdata == Path("/home/dev/AppData/Roaming")
        assert snapshot.local_appdata == Path("/home/dev/AppData/Local")
        assert snapshot.path == ""

    def test_without_userprofile_uses_home(self):
        """Test Path.home() is used when USERPROFILE is missing."""
        with patch('devsetup.environment.Path.home', return_value=Path("/home/other")):
            snapshot = EnvironmentSnapshot.from_environ({})
        assert snapshot.home == Path("/home/other")


class TestRefresh:
    """Tests for re-reading the persisted search path."""

    def test_refreshed_uses_reader(self, env):
        """Test refreshed returns a new snapshot with the reader's path."""
        refreshed = env.refreshed(lambda: "/new/bin")

        assert refreshed.path == "/new/bin"
        assert refreshed.home == env.home
        assert env.path == "/usr/bin"

    def test_refreshed_keeps_path_when_reader_is_empty(self, env):
        """Test an empty persisted path does not wipe out the current one."""
        assert env.refreshed(lambda: "") is env

    def test_read_persisted_path_off_windows(self):
        """Test the current PATH is used on platforms without a registry."""
        with patch('devsetup.environment.sys.platform', 'linux'):
            with patch.dict('os.environ', {'PATH': '/opt/bin'}):
                assert read_persisted_path() == "/opt/bin"

    def test_child_env_uses_snapshot_path(self, env):
        """Test child processes get the snapshot's PATH."""
        with patch.dict('os.environ', {'PATH': '/stale', 'OTHER': '1'}):
            child = env.child_env()
        assert child["PATH"] == "/usr/bin"
        assert child["OTHER"] == "1"


class TestCommandExists:
    """Tests for the existence probe."""

    @patch('devsetup.environment.shutil.which')
    def test_command_found(self, mock_which, env):
        """Test command_exists returns True when the command resolves."""
        mock_which.return_value = '/usr/bin/git'

        assert command_exists('git', env) is True
        mock_which.assert_called_once_with('git', path='/usr/bin')

    @patch('devsetup.environment.shutil.which')
    def test_command_not_found(self, mock_which, env):
        """Test command_exists returns False when the command does not resolve."""
        mock_which.return_value = None

        assert command_exists('nonexistent', env) is False

    @pytest.mark.skipif(sys.platform == "win32", reason="uses POSIX executable bits")
    def test_probe_follows_refreshed_path(self, env, tmp_path):
        """Test a tool added to a new PATH entry is found only after refresh."""
        bin_dir = tmp_path / "newbin"
        bin_dir.mkdir()
        tool = bin_dir / "sometool"
        tool.write_text("#!/bin/sh\n")
        tool.chmod(0o755)

        assert command_exists('sometool', replace(env, path="")) is False
        refreshed = env.refreshed(lambda: str(bin_dir))
        assert resolve_command('sometool', refreshed) == os.path.join(str(bin_dir), "sometool")
