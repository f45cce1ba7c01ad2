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

"""Standalone QA commands: `lintian`, `piuparts` and `autopkgtest`.

Each runs against artifacts from a previous `pkg-builder package`.
"""

from __future__ import annotations

import sys

import typer

from pkg_builder.commands.common import run_backend_command

CONFIG_HELP = "Path to pkg-builder.toml or the directory containing it"


def lintian(
    config: str | None = typer.Argument(None, help=CONFIG_HELP),
    verbose: bool = typer.Option(False, "-v", "--verbose", help="Show tool output on the terminal"),
) -> None:
    """Run lintian on the built .changes file."""
    sys.exit(run_backend_command("lintian", config, "Running lintian", lambda b: b.run_lintian(), verbose=verbose))


def piuparts(
    config: str | None = typer.Argument(None, help=CONFIG_HELP),
    verbose: bool = typer.Option(False, "-v", "--verbose", help="Show tool output on the terminal"),
) -> None:
    """Run piuparts on the built .deb (requires sudo)."""
    sys.exit(
        run_backend_command("piuparts", config, "Running piuparts", lambda b: b.run_piuparts(), verbose=verbose)
    )


def autopkgtest(
    config: str | None = typer.Argument(None, help=CONFIG_HELP),
    verbose: bool = typer.Option(False, "-v", "--verbose", help="Show tool output on the terminal"),
) -> None:
    """Run autopkgtest in a QEMU image, building the image on first use."""
    sys.exit(
        run_backend_command(
            "autopkgtest", config, "Running autopkgtest", lambda b: b.run_autopkgtests(), verbose=verbose
        )
    )
