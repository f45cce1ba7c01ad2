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

"""Implementation of `pkg-builder package`.

Prepares the source tree for the configured package type and builds it
with sbuild, optionally followed by piuparts and autopkgtest.
"""

from __future__ import annotations

import sys
from typing import TYPE_CHECKING

import typer

from pkg_builder.build.tools import check_required_tools, check_tool_version, get_missing_tools_message
from pkg_builder.commands.common import run_backend_command
from pkg_builder.core.exceptions import ToolMissingError

if TYPE_CHECKING:
    from pkg_builder.build.backend import BuildBackend


def _package(backend: BuildBackend) -> None:
    tools = check_required_tools()
    if not tools.is_complete():
        raise ToolMissingError(get_missing_tools_message(tools.missing))
    check_tool_version("sbuild", backend.config.build_env.sbuild_version)
    backend.package()


def package(
    config: str | None = typer.Argument(None, help="Path to pkg-builder.toml or the directory containing it"),
    run_lintian: bool | None = typer.Option(None, "--run-lintian/--no-run-lintian", help="Override build_env.run_lintian"),
    run_piuparts: bool | None = typer.Option(None, "--run-piuparts/--no-run-piuparts", help="Override build_env.run_piuparts"),
    run_autopkgtest: bool | None = typer.Option(
        None, "--run-autopkgtest/--no-run-autopkgtest", help="Override build_env.run_autopkgtest"
    ),
    verbose: bool = typer.Option(False, "-v", "--verbose", help="Show build output on the terminal"),
) -> None:
    """Build a package from its pkg-builder.toml."""
    exit_code = run_backend_command(
        "package",
        config,
        "Building package",
        _package,
        verbose=verbose,
        overrides={
            "run_lintian": run_lintian,
            "run_piuparts": run_piuparts,
            "run_autopkgtest": run_autopkgtest,
        },
    )
    sys.exit(exit_code)
