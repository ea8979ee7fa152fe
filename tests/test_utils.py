"""Tests for devsetup.utils module."""
import hashlib
import logging
from datetime import datetime
from unittest.mock import patch

import pytest

from devsetup import cli, utils, verify, windows


def test_timestamp_format():
    """Test timestamp is zero padded and sortable."""
    assert utils.timestamp(datetime(2024, 1, 2, 3, 4, 5)) == "20240102-030405"


def test_timestamp_defaults_to_now():
    """Test timestamp without an argument uses the current time."""
    assert len(utils.timestamp()) == len("20240102-030405")


def test_sha256_file(tmp_path):
    """Test sha256_file hashes the file content."""
    path = tmp_path / "a.conf"
    path.write_bytes(b"X")
    assert utils.sha256_file(path) == hashlib.sha256(b"X").hexdigest()


def test_sha256_file_differs_for_different_content(tmp_path):
    """Test different content gives a different fingerprint."""
    a = tmp_path / "a"
    b = tmp_path / "b"
    a.write_text("X")
    b.write_text("Y")
    assert utils.sha256_file(a) != utils.sha256_file(b)


def test_log_info(capsys):
    """Test log_info outputs formatted message."""
    utils.log_info("Test message")
    captured = capsys.readouterr()
    assert "[INFO] Test message\n" == captured.out


def test_log_action(capsys):
    """Test log_action outputs indented message."""
    utils.log_action("Installing package")
    captured = capsys.readouterr()
    assert "  -> Installing package\n" == captured.out


def test_log_ok(capsys):
    """Test log_ok prints an [OK] tag without colors when not on a terminal."""
    utils.log_ok("Git installed")
    assert capsys.readouterr().out == "   [OK] Git installed\n"


def test_log_skip(capsys):
    """Test log_skip prints a [SKIP] tag."""
    utils.log_skip("Git already installed")
    assert capsys.readouterr().out == "   [SKIP] Git already installed\n"


def test_log_fail(capsys):
    """Test log_fail prints a [FAIL] tag."""
    utils.log_fail("Failed to install Git")
    assert capsys.readouterr().out == "   [FAIL] Failed to install Git\n"


def test_log_step(capsys):
    """Test log_step prints a blank line then the step header."""
    utils.log_step("Step 1/2: Git")
    assert capsys.readouterr().out == "\n:: Step 1/2: Git\n"


@patch('devsetup.utils.logging.basicConfig')
def test_setup_logging_verbose(mock_basic_config):
    """Test setup_logging in verbose mode enables debug output."""
    utils.setup_logging(verbose=True)
    assert mock_basic_config.call_args.kwargs["level"] == logging.DEBUG


@patch('devsetup.utils.logging.basicConfig')
def test_setup_logging_normal(mock_basic_config):
    """Test setup_logging in normal mode only shows warnings."""
    utils.setup_logging(verbose=False)
    assert mock_basic_config.call_args.kwargs["level"] == logging.WARNING


@pytest.mark.parametrize("func", [
    utils.log_ok, utils.log_skip, utils.log_fail, utils.log_warn,
    cli.print_banner, cli.print_summary,
    windows.get_git_config, windows.set_git_config,
    windows.set_git_config_if_missing, windows.configure_git_defaults,
    verify.probe_tool, verify.print_tool_table,
])
def test_public_helpers_are_documented(func):
    """Test public helpers carry a one-line docstring."""
    assert func.__doc__ and func.__doc__.strip()
