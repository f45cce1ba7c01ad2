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

"""Extraction of upstream tarballs into the build tree."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import TYPE_CHECKING

from pkg_builder.core.exceptions import ExtractionError
from pkg_builder.core.executor import run_command

if TYPE_CHECKING:
    from collections.abc import Sequence

logger = logging.getLogger(__name__)


def longest_common_prefix(entries: Sequence[str]) -> str:
    """Return the character-wise common prefix of archive entries.

    A single entry yields its parent directory instead, so an archive
    holding one file at its root has no prefix.
    """
    if not entries:
        return ""
    if len(entries) == 1:
        parent = os.path.dirname(entries[0].rstrip("/"))
        return parent
    return os.path.commonprefix(list(entries))


def components_to_strip(entries: Sequence[str]) -> int:
    """Count the leading directories shared by every archive entry.

    Directory entries (ending in ``/``) are ignored. Only whole path
    components count, so ``pkg/abc`` and ``pkg/abd`` share one component.
    """
    files = [entry for entry in entries if entry and not entry.endswith("/")]
    prefix = longest_common_prefix(files)
    if len(files) > 1:
        prefix = prefix[: prefix.rfind("/") + 1]
    return len([part for part in prefix.split("/") if part])


def list_archive(tarball_path: Path) -> list[str]:
    code, stdout, stderr = run_command(["tar", "--list", "-z", "-f", str(tarball_path)])
    if code != 0:
        raise ExtractionError(stderr)
    return stdout.splitlines()


def extract(tarball_path: Path, destination: Path) -> None:
    """Extract ``tarball_path`` into ``destination``, flattening a shared top directory.

    Raises:
        ExtractionError: Listing or extraction failed; carries tar's stderr.
    """
    logger.info(f"Extracting {tarball_path} to {destination}")
    destination.mkdir(parents=True, exist_ok=True)

    strip = components_to_strip(list_archive(tarball_path))
    args = ["tar", "zxvf", str(tarball_path), "-C", str(destination)]
    if strip > 0:
        args.append(f"--strip-components={strip}")
    logger.info(f"Stripping {strip} leading path components")

    code, _, stderr = run_command(args)
    if code != 0:
        raise ExtractionError(stderr)
