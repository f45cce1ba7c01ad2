# This file is part of pkg-builder, a tool for building Debian and Ubuntu packages.
#
# Copyright 2025 Canonical Ltd.
#
# SPDX-License-Identifier: GPL-3.0-only
#
# pkg-builder is free software: you can redistribute it and/or modify it under
# the terms of the GNU General Public License version 3, as published by the
# Free Software Foundation.
#
# pkg-builder is distributed in the hope that it will be useful, but WITHOUT
# ANY WARRANTY; without even the implied warranties of MERCHANTABILITY,
# SATISFACTORY QUALITY, or FITNESS FOR A PARTICULAR PURPOSE. See the GNU
# General Public License for more details.
#
# You should have received a copy of the GNU General Public License along with
# pkg-builder. If not, see <http://www.gnu.org/licenses/>.

"""Tests for pkg_builder.core.executor module."""

from __future__ import annotations

import logging
import shutil
import subprocess
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from pkg_builder.core import executor
from pkg_builder.core.exceptions import CommandFailedError, CommandStatusError, SudoUnavailableError

requires_sh = pytest.mark.skipif(shutil.which("sh") is None, reason="sh not available")


@requires_sh
class TestExecuteCommand:
    """Tests for execute_command function."""

    def test_streams_stdout_to_log(self, caplog: pytest.LogCaptureFixture) -> None:
        """Test each stdout line is logged as it arrives."""
        with caplog.at_level(logging.INFO, logger="pkg_builder.core.executor"):
            executor.execute_command("sh", ["-c", "echo first; echo second"])

        messages = [r.getMessage() for r in caplog.records]
        assert "first" in messages
        assert "second" in messages
        assert messages.index("first") < messages.index("second")

    def test_runs_in_working_directory(self, tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
        """Test the child inherits the requested working directory."""
        with caplog.at_level(logging.INFO, logger="pkg_builder.core.executor"):
            executor.execute_command("sh", ["-c", "pwd"], cwd=tmp_path)

        assert str(tmp_path.resolve()) in [r.getMessage() for r in caplog.records]

    def test_nonzero_exit_raises_status_error(self) -> None:
        """Test a nonzero exit carries the command name and exit code."""
        with pytest.raises(CommandStatusError) as exc_info:
            executor.execute_command("sh", ["-c", "exit 3"])

        assert exc_info.value.command == "sh"
        assert exc_info.value.code == 3
        assert "sh" in exc_info.value.message

    def test_signal_exit_reports_minus_one(self) -> None:
        """Test a process killed by a signal reports exit code -1."""
        with pytest.raises(CommandStatusError) as exc_info:
            executor.execute_command("sh", ["-c", "kill -9 $$"])

        assert exc_info.value.code == -1

    def test_missing_binary_raises_failed_error(self) -> None:
        """Test a spawn failure is reported as CommandFailedError."""
        with pytest.raises(CommandFailedError) as exc_info:
            executor.execute_command("definitely-nonexistent-tool-12345", [])

        assert exc_info.value.command == "definitely-nonexistent-tool-12345"


class TestExecuteCommandWithSudo:
    """Tests for execute_command_with_sudo function."""

    def test_prepends_sudo(self, tmp_path: Path) -> None:
        """Test the command is run as sudo -S and named accordingly."""
        with (
            patch.object(executor, "ensure_sudo_available"),
            patch.object(executor, "_spawn") as mock_spawn,
        ):
            executor.execute_command_with_sudo("piuparts", ["-d", "bookworm"], cwd=tmp_path)

        mock_spawn.assert_called_once_with(
            ["sudo", "-S", "piuparts", "-d", "bookworm"], "sudo -S piuparts", tmp_path
        )

    def test_checks_sudo_before_spawning(self) -> None:
        """Test nothing is spawned when sudo is unavailable."""
        with (
            patch.object(executor, "ensure_sudo_available", side_effect=SudoUnavailableError()),
            patch.object(executor, "_spawn") as mock_spawn,
        ):
            with pytest.raises(SudoUnavailableError):
                executor.execute_command_with_sudo("piuparts", [])

        mock_spawn.assert_not_called()


class TestEnsureSudoAvailable:
    """Tests for ensure_sudo_available function."""

    def test_root_skips_probe(self) -> None:
        with (
            patch("os.geteuid", return_value=0),
            patch("subprocess.run") as mock_run,
        ):
            executor.ensure_sudo_available()
        mock_run.assert_not_called()

    def test_cached_credentials_pass(self) -> None:
        with (
            patch("os.geteuid", return_value=1000),
            patch("subprocess.run", return_value=subprocess.CompletedProcess([], 0, "", "")),
        ):
            executor.ensure_sudo_available()

    def test_password_needed_with_tty_passes(self) -> None:
        """Test an interactive terminal can answer the password prompt."""
        stdin = MagicMock()
        stdin.isatty.return_value = True
        with (
            patch("os.geteuid", return_value=1000),
            patch("subprocess.run", return_value=subprocess.CompletedProcess([], 1, "", "")),
            patch("sys.stdin", stdin),
        ):
            executor.ensure_sudo_available()

    def test_password_needed_without_tty_fails(self) -> None:
        """Test non-interactive runs fail fast instead of hanging."""
        stdin = MagicMock()
        stdin.isatty.return_value = False
        with (
            patch("os.geteuid", return_value=1000),
            patch("subprocess.run", return_value=subprocess.CompletedProcess([], 1, "", "")),
            patch("sys.stdin", stdin),
        ):
            with pytest.raises(SudoUnavailableError):
                executor.ensure_sudo_available()


class TestRunCommand:
    """Tests for run_command function."""

    @requires_sh
    def test_captures_output(self) -> None:
        code, stdout, stderr = executor.run_command(["sh", "-c", "echo out; echo err >&2; exit 2"])
        assert code == 2
        assert stdout.strip() == "out"
        assert stderr.strip() == "err"

    @requires_sh
    def test_runs_in_cwd(self, tmp_path: Path) -> None:
        code, stdout, _ = executor.run_command(["sh", "-c", "pwd"], cwd=tmp_path)
        assert code == 0
        assert Path(stdout.strip()).resolve() == tmp_path.resolve()

    def test_missing_binary_raises(self) -> None:
        with pytest.raises(CommandFailedError):
            executor.run_command(["definitely-nonexistent-tool-12345"])
