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

"""Implementation of `pkg-builder verify`."""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import TYPE_CHECKING

import typer

from pkg_builder.commands.common import run_backend_command
from pkg_builder.pkgconfig.loader import VERIFY_CONFIG_FILENAME, load_verify_config

if TYPE_CHECKING:
    from pkg_builder.build.backend import BuildBackend

logger = logging.getLogger(__name__)


def verify(
    config: str | None = typer.Argument(None, help="Path to pkg-builder.toml or the directory containing it"),
    verify_config: Path | None = typer.Option(
        None, "--verify-config", help=f"Expected hashes file (default: {VERIFY_CONFIG_FILENAME} beside the config)"
    ),
    no_package: bool = typer.Option(False, "--no-package", help="Verify existing artifacts without building"),
    verbose: bool = typer.Option(False, "-v", "--verbose", help="Show build output on the terminal"),
) -> None:
    """Build the package and check artifact SHA-1 digests."""

    def _verify(backend: BuildBackend) -> None:
        path = verify_config or backend.config.config_root / VERIFY_CONFIG_FILENAME
        expected = load_verify_config(Path(path).expanduser())
        logger.info(f"Verifying {len(expected)} artifacts from {path}")
        backend.verify(expected, no_package=no_package)

    sys.exit(run_backend_command("verify", config, "Verifying artifacts", _verify, verbose=verbose))
