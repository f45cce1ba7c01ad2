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

"""Implementation of `pkg-builder env create|clean`."""

from __future__ import annotations

import sys

import typer

from pkg_builder.commands.common import run_backend_command

env_app = typer.Typer(name="env", help="Manage the sbuild chroot cache.", add_completion=False)

CONFIG_HELP = "Path to pkg-builder.toml or the directory containing it"


@env_app.command(name="create")
def create(
    config: str | None = typer.Argument(None, help=CONFIG_HELP),
    verbose: bool = typer.Option(False, "-v", "--verbose", help="Show tool output on the terminal"),
) -> None:
    """Create the chroot tarball for the configured codename and arch."""
    sys.exit(run_backend_command("env", config, "Creating chroot cache", lambda b: b.create(), verbose=verbose))


@env_app.command(name="clean")
def clean(
    config: str | None = typer.Argument(None, help=CONFIG_HELP),
    verbose: bool = typer.Option(False, "-v", "--verbose", help="Show tool output on the terminal"),
) -> None:
    """Remove the chroot tarball, if present."""
    sys.exit(run_backend_command("env", config, "Removing chroot cache", lambda b: b.clean(), verbose=verbose))
