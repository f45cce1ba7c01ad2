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

"""Installation of the user's ``~/.sbuildrc``."""

from __future__ import annotations

import logging
from importlib import resources
from pathlib import Path

from pkg_builder.core.exceptions import FileCreationError, FileWriteError, HomeDirNotFoundError

logger = logging.getLogger(__name__)

HOME_PLACEHOLDER = "<HOME>"


def sbuildrc_template() -> str:
    return resources.files("pkg_builder.build").joinpath("sbuildrc.template").read_text()


def render_sbuildrc(home: Path) -> str:
    return sbuildrc_template().replace(HOME_PLACEHOLDER, str(home))


def get_home_dir() -> Path:
    """Return the user's home directory.

    Raises:
        HomeDirNotFoundError: If no home directory can be determined.
    """
    try:
        return Path.home()
    except RuntimeError as e:
        raise HomeDirNotFoundError() from e


def write_sbuildrc(home: Path | None = None) -> Path:
    """Write ``~/.sbuildrc`` from the bundled template and return its path.

    Raises:
        HomeDirNotFoundError: No home directory.
        FileCreationError: The file could not be created.
        FileWriteError: The file could not be written.
    """
    if home is None:
        home = get_home_dir()
    dest = home / ".sbuildrc"
    content = render_sbuildrc(home)

    try:
        f = dest.open("w", encoding="utf-8")
    except OSError as e:
        raise FileCreationError(f"Failed to create ~/.sbuildrc: {e}") from e
    with f:
        try:
            f.write(content)
        except OSError as e:
            raise FileWriteError(f"Failed to write to ~/.sbuildrc: {e}") from e
    logger.info(f"Wrote {dest}")
    return dest
