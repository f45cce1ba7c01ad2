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

"""Tests for pkg_builder.build.git_source module."""

from __future__ import annotations

import os
import shutil
from pathlib import Path
from unittest.mock import MagicMock, patch

import git
import pytest

from pkg_builder.build import git_source
from pkg_builder.core.exceptions import (
    CheckoutTagFailedError,
    GitLfsMissingError,
    SubmoduleCommitFailedError,
    SubmoduleInitFailedError,
    TarballCreationFailedError,
)
from pkg_builder.pkgconfig.models import SubModule


def _fake_clone(files: dict[str, str]):
    """Return a clone_from side effect that materializes a checkout."""

    def _clone(url: str, to_path: Path, **kwargs: object) -> MagicMock:
        to_path = Path(to_path)
        (to_path / ".git").mkdir(parents=True)
        (to_path / ".git" / "HEAD").write_text("ref: refs/heads/main\n")
        for name, content in files.items():
            path = to_path / name
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(content)
        return MagicMock()

    return _clone


class TestCloneAndCheckout:
    """Tests for clone_and_checkout function."""

    def test_requires_git_lfs(self, tmp_path: Path) -> None:
        with patch.object(git_source, "find_tool", return_value=None):
            with pytest.raises(GitLfsMissingError):
                git_source.clone_and_checkout("https://example.com/x.git", "v1", tmp_path / "x")

    def test_shallow_clone_at_tag(self, tmp_path: Path) -> None:
        dest = tmp_path / "hello-world"
        with (
            patch.object(git_source, "find_tool", return_value="/usr/bin/git-lfs"),
            patch.object(git_source.git.Repo, "clone_from", side_effect=_fake_clone({"main.go": "package main"})) as mock_clone,
        ):
            git_source.clone_and_checkout("https://example.com/hello.git", "v1.0.0", dest)

        mock_clone.assert_called_once_with("https://example.com/hello.git", to_path=dest, depth=1, branch="v1.0.0")

    def test_removes_git_dir_and_normalizes_times(self, tmp_path: Path) -> None:
        dest = tmp_path / "hello-world"
        with (
            patch.object(git_source, "find_tool", return_value="/usr/bin/git-lfs"),
            patch.object(git_source.git.Repo, "clone_from", side_effect=_fake_clone({"src/main.go": "package main"})),
        ):
            git_source.clone_and_checkout("https://example.com/hello.git", "v1.0.0", dest)

        assert not (dest / ".git").exists()
        assert (dest / "src" / "main.go").exists()
        for path in (dest, dest / "src", dest / "src" / "main.go"):
            assert int(os.lstat(path).st_mtime) == git_source.FIXED_TIMESTAMP

    def test_initializes_submodules(self, tmp_path: Path) -> None:
        repo = MagicMock()
        dest = tmp_path / "hello"
        dest.mkdir()
        with (
            patch.object(git_source, "find_tool", return_value="/usr/bin/git-lfs"),
            patch.object(git_source.git.Repo, "clone_from", return_value=repo),
        ):
            git_source.clone_and_checkout("https://example.com/hello.git", "v1.0.0", dest)

        repo.git.submodule.assert_any_call("init")
        repo.git.submodule.assert_any_call("update", "--depth", "1", "--recursive")

    def test_clone_failure(self, tmp_path: Path) -> None:
        error = git.GitCommandError("clone", 128, stderr="fatal: Remote branch v9 not found")
        with (
            patch.object(git_source, "find_tool", return_value="/usr/bin/git-lfs"),
            patch.object(git_source.git.Repo, "clone_from", side_effect=error),
        ):
            with pytest.raises(CheckoutTagFailedError) as exc_info:
                git_source.clone_and_checkout("https://example.com/hello.git", "v9", tmp_path / "hello")

        assert exc_info.value.tag == "v9"
        assert "Remote branch v9 not found" in exc_info.value.message

    def test_submodule_init_failure(self, tmp_path: Path) -> None:
        repo = MagicMock()
        repo.git.submodule.side_effect = git.GitCommandError("submodule", 1, stderr="no url")
        with (
            patch.object(git_source, "find_tool", return_value="/usr/bin/git-lfs"),
            patch.object(git_source.git.Repo, "clone_from", return_value=repo),
        ):
            with pytest.raises(SubmoduleInitFailedError):
                git_source.clone_and_checkout("https://example.com/hello.git", "v1", tmp_path / "hello")

    def test_pins_submodules(self, tmp_path: Path) -> None:
        dest = tmp_path / "hello"
        sub_repo = MagicMock()
        sub_repo.__enter__.return_value = sub_repo
        with (
            patch.object(git_source, "find_tool", return_value="/usr/bin/git-lfs"),
            patch.object(git_source.git, "Repo") as mock_repo_cls,
        ):
            mock_repo_cls.clone_from.side_effect = _fake_clone({"vendor/lib/lib.go": "package lib"})
            mock_repo_cls.return_value = sub_repo
            git_source.clone_and_checkout(
                "https://example.com/hello.git",
                "v1.0.0",
                dest,
                submodules=[SubModule(commit="0123abcd", path="vendor/lib")],
            )

        mock_repo_cls.assert_called_once_with(dest / "vendor/lib")
        sub_repo.git.fetch.assert_called_once_with("origin", "0123abcd")
        sub_repo.git.checkout.assert_called_once_with("0123abcd")

    def test_submodule_pin_failure(self, tmp_path: Path) -> None:
        sub_repo = MagicMock()
        sub_repo.__enter__.return_value = sub_repo
        sub_repo.git.fetch.side_effect = git.GitCommandError("fetch", 128, stderr="not our ref")
        with (
            patch.object(git_source, "find_tool", return_value="/usr/bin/git-lfs"),
            patch.object(git_source.git, "Repo") as mock_repo_cls,
        ):
            mock_repo_cls.clone_from.side_effect = _fake_clone({})
            mock_repo_cls.return_value = sub_repo
            with pytest.raises(SubmoduleCommitFailedError) as exc_info:
                git_source.clone_and_checkout(
                    "https://example.com/hello.git",
                    "v1.0.0",
                    tmp_path / "hello",
                    submodules=[SubModule(commit="0123abcd", path="vendor/lib")],
                )

        assert exc_info.value.path == "vendor/lib"


class TestNormalizeTimestamps:
    """Tests for normalize_timestamps function."""

    def test_sets_every_entry(self, tmp_path: Path) -> None:
        (tmp_path / "a" / "b").mkdir(parents=True)
        (tmp_path / "a" / "b" / "file.txt").write_text("x")
        (tmp_path / "top.txt").write_text("y")

        git_source.normalize_timestamps(tmp_path, 1000)

        for path in tmp_path.rglob("*"):
            assert int(path.stat().st_mtime) == 1000
            assert int(path.stat().st_atime) == 1000

    def test_symlink_not_followed(self, tmp_path: Path) -> None:
        outside = tmp_path / "outside.txt"
        outside.write_text("target")
        os.utime(outside, (5000, 5000))
        tree = tmp_path / "tree"
        tree.mkdir()
        (tree / "link").symlink_to(outside)

        git_source.normalize_timestamps(tree, 1000)

        assert int(outside.stat().st_mtime) == 5000
        assert int(os.lstat(tree / "link").st_mtime) == 1000


@pytest.mark.skipif(shutil.which("tar") is None, reason="tar not available")
class TestCreateDeterministicTarball:
    """Tests for create_deterministic_tarball function."""

    def _tree(self, parent: Path, mtime: int) -> None:
        root = parent / "hello-world"
        (root / "src").mkdir(parents=True)
        (root / "src" / "main.go").write_text("package main\n")
        (root / "README").write_text("hello\n")
        for path in [root, *root.rglob("*")]:
            os.utime(path, (mtime, mtime))
        git_source.normalize_timestamps(root)

    def test_identical_bytes_for_identical_content(self, tmp_path: Path) -> None:
        first, second = tmp_path / "one", tmp_path / "two"
        self._tree(first, 1_700_000_000)
        self._tree(second, 1_600_000_000)

        git_source.create_deterministic_tarball(first, "hello-world", tmp_path / "one.tar.gz")
        git_source.create_deterministic_tarball(second, "hello-world", tmp_path / "two.tar.gz")

        assert (tmp_path / "one.tar.gz").read_bytes() == (tmp_path / "two.tar.gz").read_bytes()

    def test_missing_directory(self, tmp_path: Path) -> None:
        with pytest.raises(TarballCreationFailedError):
            git_source.create_deterministic_tarball(tmp_path, "missing", tmp_path / "out.tar.gz")
