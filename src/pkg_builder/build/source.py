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

"""Tarball and virtual source acquisition plus checksum verification."""

from __future__ import annotations

import hashlib
import logging
import shutil
from pathlib import Path

from pkg_builder.core.exceptions import (
    CommandError,
    DownloadFailedError,
    FileCopyFailedError,
    HashMismatchError,
    TarballOpenError,
    TarballReadError,
    VirtualTarballError,
)
from pkg_builder.core.executor import execute_command, run_command

logger = logging.getLogger(__name__)


def download_or_copy(destination: Path, source: str) -> None:
    """Fetch an upstream tarball into ``destination``.

    Sources starting with ``http`` are downloaded with wget; anything else
    is treated as a local path and copied.

    Raises:
        DownloadFailedError: wget could not be run or exited nonzero.
        FileCopyFailedError: The local copy failed.
    """
    if source.startswith("http"):
        logger.info(f"Downloading {source} to {destination}")
        try:
            execute_command("wget", ["-q", "-O", str(destination), source])
        except CommandError as e:
            raise DownloadFailedError(f"Failed to download {source}: {e.message}") from e
        return

    logger.info(f"Copying {source} to {destination}")
    try:
        shutil.copyfile(source, destination)
    except OSError as e:
        raise FileCopyFailedError(f"Failed to copy {source} to {destination}: {e}") from e


def compute_digests(data: bytes) -> tuple[str, str]:
    """Return the (sha512, sha256) hex digests of ``data``."""
    return hashlib.sha512(data).hexdigest(), hashlib.sha256(data).hexdigest()


def verify_checksum(tarball_path: Path, expected: str | None) -> None:
    """Check a tarball against a SHA-512 or SHA-256 hex digest.

    A missing expected digest means the tarball is trusted as-is.

    Raises:
        TarballOpenError: The file could not be opened.
        TarballReadError: The file could not be read.
        HashMismatchError: Neither digest matches.
    """
    if expected is None:
        logger.info("No tarball hash configured, skipping verification")
        return

    try:
        f = tarball_path.open("rb")
    except OSError as e:
        raise TarballOpenError(f"Failed to open tarball {tarball_path}: {e}") from e
    with f:
        try:
            data = f.read()
        except OSError as e:
            raise TarballReadError(f"Failed to read tarball {tarball_path}: {e}") from e

    expected = expected.strip().lower()
    sha512, sha256 = compute_digests(data)
    logger.info(f"sha512 of {tarball_path.name}: {sha512}")
    logger.info(f"sha256 of {tarball_path.name}: {sha256}")
    logger.info(f"expected hash: {expected}")

    if sha512 == expected or sha256 == expected:
        logger.info("Hashes match")
        return
    raise HashMismatchError()


def create_empty_tarball(build_artifacts_dir: Path, tarball_path: Path) -> None:
    """Write a valid, empty gzip tarball standing in for upstream source.

    Raises:
        VirtualTarballError: tar could not create the archive.
    """
    logger.info(f"Creating empty tarball {tarball_path}")
    try:
        code, _, stderr = run_command(
            ["tar", "czf", str(tarball_path), "--files-from", "/dev/null"],
            cwd=build_artifacts_dir,
        )
    except CommandError as e:
        raise VirtualTarballError() from e
    if code != 0:
        logger.warning(f"tar failed: {stderr.strip()}")
        raise VirtualTarballError()
