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

"""Generation of the debian/ directory with debcrafter."""

from __future__ import annotations

import logging
import shutil
import tempfile
from pathlib import Path

from pkg_builder.build.tools import require_tool
from pkg_builder.core.exceptions import CommandError, DebcrafterError
from pkg_builder.core.executor import execute_command

logger = logging.getLogger(__name__)


def debcrafter_binary(version: str) -> str:
    return f"debcrafter_{version}"


def check_debcrafter_tools(version: str) -> None:
    """Ensure dpkg-parsechangelog and the versioned debcrafter are on PATH."""
    require_tool("dpkg-parsechangelog", "dpkg-parsechangelog is not installed, please install it.")
    binary = debcrafter_binary(version)
    require_tool(binary, f"{binary} is not installed")


def generate(spec_file: Path, target_dir: Path, debcrafter_version: str) -> None:
    """Run debcrafter on ``spec_file`` and copy its debian/ into ``target_dir``.

    debcrafter resolves includes relative to the spec file, so it runs from
    the spec file's directory. Each call uses a fresh temporary output
    directory.

    Raises:
        ToolMissingError: A required binary is not installed.
        DebcrafterError: The spec file is missing, debcrafter failed, or it
            produced no output directory.
    """
    check_debcrafter_tools(debcrafter_version)

    try:
        spec_path = spec_file.resolve(strict=True)
    except OSError:
        raise DebcrafterError(f"{spec_file} spec_file doesn't exist") from None

    with tempfile.TemporaryDirectory(prefix="debcrafter-") as tmp:
        out_dir = Path(tmp)
        try:
            execute_command(
                debcrafter_binary(debcrafter_version),
                [spec_path.name, str(out_dir)],
                cwd=spec_path.parent,
            )
        except CommandError as e:
            raise DebcrafterError(f"debcrafter failed: {e.message}") from e

        generated = next((p for p in sorted(out_dir.iterdir()) if p.is_dir()), None)
        if generated is None:
            raise DebcrafterError("Unable to create debian dir: no output directory found")

        source = generated / "debian"
        destination = target_dir / "debian"
        logger.info(f"Copying {source} to {destination}")
        try:
            shutil.copytree(source, destination, dirs_exist_ok=True)
        except OSError as e:
            raise DebcrafterError(f"Unable to copy debian dir: {e}") from e
