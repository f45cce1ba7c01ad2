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

"""Idempotent fix-ups applied to the build tree after debcrafter runs.

Every function here can be re-run on an already patched tree without
changing it.
"""

from __future__ import annotations

import logging
import shutil
from pathlib import Path

from pkg_builder.core.exceptions import (
    ControlFileError,
    CopyDirectoryError,
    RulesPermissionGetError,
    RulesPermissionSetError,
)

logger = logging.getLogger(__name__)

SOURCE_FORMAT = "3.0 (quilt)\n"
PC_VERSION = "2\n"
STANDARDS_VERSION = "4.5.1"


def patch_quilt(debian_dir: Path) -> None:
    """Write debian/source/format unless the maintainer already chose one."""
    source_dir = debian_dir / "source"
    source_dir.mkdir(parents=True, exist_ok=True)
    format_file = source_dir / "format"
    if not format_file.exists():
        logger.info(f"Writing {format_file}")
        format_file.write_text(SOURCE_FORMAT)


def patch_pc_dir(debian_dir: Path) -> None:
    """(Re)create the quilt ``.pc/.version`` marker."""
    pc_dir = debian_dir / ".pc"
    pc_dir.mkdir(parents=True, exist_ok=True)
    (pc_dir / ".version").write_text(PC_VERSION)


def patch_standards_version(debian_dir: Path, homepage: str) -> None:
    """Insert Standards-Version and Homepage after Priority: in debian/control.

    A control file that already declares Standards-Version is left alone.
    Without a Priority: line the fields are prepended.

    Raises:
        ControlFileError: debian/control cannot be read or written.
    """
    control = debian_dir / "control"
    try:
        lines = control.read_text().splitlines()
    except OSError as e:
        raise ControlFileError(f"Failed to read {control}: {e}") from e

    if any(line.startswith("Standards-Version") for line in lines):
        return

    index = next((i for i, line in enumerate(lines) if line.startswith("Priority:")), None)
    if index is None:
        logger.warning(f"No Priority: line in {control}; prepending Standards-Version")
        insert_at = 0
    else:
        insert_at = index + 1
    lines[insert_at:insert_at] = [f"Standards-Version: {STANDARDS_VERSION}", f"Homepage: {homepage}"]

    try:
        control.write_text("".join(f"{line}\n" for line in lines))
    except OSError as e:
        raise ControlFileError(f"Failed to write {control}: {e}") from e


def copy_src_dir(src_dir: Path, build_files_dir: Path) -> None:
    """Overlay a local source directory onto the build tree, if it exists."""
    if not src_dir.is_dir():
        return
    logger.info(f"Copying {src_dir} over {build_files_dir}")
    try:
        shutil.copytree(src_dir, build_files_dir, dirs_exist_ok=True)
    except (OSError, shutil.Error) as e:
        raise CopyDirectoryError(f"Failed to copy {src_dir} to {build_files_dir}: {e}") from e


def patch_rules_permission(debian_dir: Path) -> None:
    """Make debian/rules executable for owner, group and other."""
    rules = debian_dir / "rules"
    try:
        mode = rules.stat().st_mode
    except OSError as e:
        raise RulesPermissionGetError(f"Failed to get debian/rules permission: {e}") from e
    try:
        rules.chmod(mode | 0o111)
    except OSError as e:
        raise RulesPermissionSetError(f"Failed to set debian/rules permission: {e}") from e


def patch_source(build_files_dir: Path, homepage: str, src_dir: Path | None = None) -> None:
    """Apply every fix-up to ``build_files_dir`` in order."""
    debian_dir = build_files_dir / "debian"
    patch_quilt(debian_dir)
    patch_pc_dir(debian_dir)
    patch_standards_version(debian_dir, homepage)
    if src_dir is not None:
        copy_src_dir(src_dir, build_files_dir)
    patch_rules_permission(debian_dir)
