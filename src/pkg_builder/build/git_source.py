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

"""Reproducible upstream source acquisition from git.

The tag is cloned shallowly, submodules are pinned to their configured
commits, history is dropped, timestamps are normalized, and the tree is
packed with tar options that keep the archive byte-identical across
machines and clone times.
"""

from __future__ import annotations

import logging
import os
import shutil
from pathlib import Path
from typing import TYPE_CHECKING

import git

from pkg_builder.build.tools import find_tool
from pkg_builder.core.exceptions import (
    CheckoutTagFailedError,
    CommandError,
    GitLfsMissingError,
    SubmoduleCommitFailedError,
    SubmoduleInitFailedError,
    TarballCreationFailedError,
)
from pkg_builder.core.executor import run_command

if TYPE_CHECKING:
    from collections.abc import Sequence

    from pkg_builder.pkgconfig.models import SubModule

logger = logging.getLogger(__name__)

# 2022-01-01T00:00:00Z
FIXED_TIMESTAMP = 1640995200

TAR_DETERMINISTIC_ARGS = [
    "--sort=name",
    "--owner=0",
    "--group=0",
    "--numeric-owner",
    "--pax-option=exthdr.name=%d/PaxHeaders/%f,delete=atime,delete=ctime",
]


def _git_error_text(error: Exception) -> str:
    if isinstance(error, git.GitCommandError):
        return (error.stderr or str(error)).strip()
    return str(error)


def clone_and_checkout(
    repo_url: str,
    tag: str,
    destination: Path,
    submodules: Sequence[SubModule] = (),
) -> None:
    """Clone ``tag`` into ``destination`` and prepare a history-free tree.

    Raises:
        GitLfsMissingError: git-lfs is not on PATH.
        CheckoutTagFailedError: The shallow clone failed.
        SubmoduleInitFailedError: Submodule init or update failed.
        SubmoduleCommitFailedError: A submodule could not be moved to its
            pinned commit.
    """
    if find_tool("git-lfs") is None:
        raise GitLfsMissingError()

    logger.info(f"Cloning {repo_url} at {tag} into {destination}")
    try:
        repo = git.Repo.clone_from(repo_url, to_path=destination, depth=1, branch=tag)
    except git.GitCommandError as e:
        raise CheckoutTagFailedError(tag=tag, reason=_git_error_text(e)) from e

    try:
        repo.git.submodule("init")
        repo.git.submodule("update", "--depth", "1", "--recursive")
    except git.GitCommandError as e:
        raise SubmoduleInitFailedError(reason=_git_error_text(e)) from e

    # A shallow submodule's tip need not contain the pinned commit, so fetch
    # that object explicitly before checking it out.
    for submodule in submodules:
        _pin_submodule(destination, submodule)

    repo.close()
    shutil.rmtree(destination / ".git", ignore_errors=True)
    normalize_timestamps(destination)


def _pin_submodule(root: Path, submodule: SubModule) -> None:
    logger.info(f"Pinning submodule {submodule.path} to {submodule.commit}")
    try:
        sub_repo = git.Repo(root / submodule.path)
    except (git.InvalidGitRepositoryError, git.NoSuchPathError) as e:
        raise SubmoduleCommitFailedError(commit=submodule.commit, path=submodule.path, reason=str(e)) from e
    with sub_repo:
        try:
            sub_repo.git.fetch("origin", submodule.commit)
            sub_repo.git.checkout(submodule.commit)
        except git.GitCommandError as e:
            raise SubmoduleCommitFailedError(
                commit=submodule.commit, path=submodule.path, reason=_git_error_text(e)
            ) from e


def normalize_timestamps(root: Path, timestamp: int = FIXED_TIMESTAMP) -> None:
    """Set atime and mtime of every entry under ``root`` to ``timestamp``.

    Symlinks are updated themselves rather than their targets.
    """
    times = (timestamp, timestamp)
    for dirpath, dirnames, filenames in os.walk(root):
        for name in [*dirnames, *filenames]:
            os.utime(os.path.join(dirpath, name), times, follow_symlinks=False)
    os.utime(root, times, follow_symlinks=False)


def create_deterministic_tarball(parent_dir: Path, dir_name: str, tarball_path: Path) -> None:
    """Pack ``parent_dir/dir_name`` into ``tarball_path`` reproducibly.

    Raises:
        TarballCreationFailedError: tar failed; carries its stderr.
    """
    logger.info(f"Creating tarball {tarball_path} from {parent_dir / dir_name}")
    try:
        code, _, stderr = run_command(
            ["tar", *TAR_DETERMINISTIC_ARGS, "-czf", str(tarball_path), dir_name],
            cwd=parent_dir,
        )
    except CommandError as e:
        raise TarballCreationFailedError(e.message) from e
    if code != 0:
        raise TarballCreationFailedError(stderr)
