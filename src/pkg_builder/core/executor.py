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

"""External command execution.

Two flavours are provided. ``execute_command`` and its sudo variant stream
the child's stdout into the log line by line and raise on failure; they are
used for long-running tools (sbuild, piuparts, autopkgtest) whose progress
must be visible. ``run_command`` captures output for short probes whose
stdout/stderr the caller needs to inspect.
"""

from __future__ import annotations

import logging
import os
import shlex
import subprocess
import sys
from pathlib import Path
from typing import TYPE_CHECKING

from pkg_builder.core.exceptions import CommandFailedError, CommandStatusError, SudoUnavailableError

if TYPE_CHECKING:
    from collections.abc import Sequence

logger = logging.getLogger(__name__)


def _spawn(argv: Sequence[str], name: str, cwd: Path | None) -> None:
    logger.info(f"Executing: {shlex.join(argv)}" + (f" (in {cwd})" if cwd else ""))
    try:
        process = subprocess.Popen(
            list(argv),
            cwd=cwd,
            stdout=subprocess.PIPE,
            text=True,
            errors="replace",
        )
    except OSError as e:
        raise CommandFailedError(command=name, reason=str(e)) from e

    assert process.stdout is not None
    with process.stdout:
        for line in process.stdout:
            logger.info(line.rstrip("\n"))
    returncode = process.wait()

    if returncode != 0:
        # Negative return codes mean the child was killed by a signal.
        raise CommandStatusError(command=name, code=returncode if returncode > 0 else -1)


def execute_command(cmd: str, args: Sequence[str], cwd: Path | None = None) -> None:
    """Run ``cmd args...`` and block until it exits.

    Stdout is forwarded to the log as it arrives; stderr is inherited.

    Raises:
        CommandFailedError: The process could not be spawned.
        CommandStatusError: The process exited nonzero.
    """
    _spawn([cmd, *args], cmd, cwd)


def ensure_sudo_available() -> None:
    """Fail fast when sudo would block on a password prompt with no terminal."""
    if hasattr(os, "geteuid") and os.geteuid() == 0:
        return
    try:
        probe = subprocess.run(["sudo", "-n", "true"], capture_output=True, text=True)
    except OSError as e:
        raise CommandFailedError(command="sudo", reason=str(e)) from e
    if probe.returncode == 0:
        return
    stdin = sys.stdin
    if stdin is not None and stdin.isatty():
        return
    raise SudoUnavailableError()


def execute_command_with_sudo(cmd: str, args: Sequence[str], cwd: Path | None = None) -> None:
    """Run ``sudo -S cmd args...`` with the same semantics as execute_command."""
    ensure_sudo_available()
    _spawn(["sudo", "-S", cmd, *args], f"sudo -S {cmd}", cwd)


def run_command(
    cmd: Sequence[str],
    cwd: Path | None = None,
) -> tuple[int, str, str]:
    """Run a command and return exit code, stdout, stderr.

    Args:
        cmd: Command and arguments to run.
        cwd: Working directory for the command.

    Returns:
        Tuple of (exit_code, stdout, stderr).

    Raises:
        CommandFailedError: The process could not be spawned.
    """
    try:
        result = subprocess.run(
            list(cmd),
            cwd=cwd,
            capture_output=True,
            text=True,
            errors="replace",
        )
    except OSError as e:
        raise CommandFailedError(command=cmd[0], reason=str(e)) from e
    return result.returncode, result.stdout, result.stderr
