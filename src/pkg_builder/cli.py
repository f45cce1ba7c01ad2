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

"""CLI application definition for pkg-builder."""

from __future__ import annotations

from typer import Typer

from pkg_builder.commands.env import env_app
from pkg_builder.commands.package import package
from pkg_builder.commands.qa import autopkgtest, lintian, piuparts
from pkg_builder.commands.verify import verify
from pkg_builder.commands.version import version

app: Typer = Typer(
    name="pkg-builder",
    help="A tool for building reproducible Debian and Ubuntu packages with sbuild.",
    add_completion=False,
)

# Register commands
app.command(name="package")(package)
app.add_typer(env_app, name="env")
app.command(name="lintian")(lintian)
app.command(name="piuparts")(piuparts)
app.command(name="autopkgtest")(autopkgtest)
app.command(name="verify")(verify)
app.command(name="version")(version)
