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

"""Pytest fixtures and configuration for pkg-builder tests."""

from __future__ import annotations

import tempfile
from collections.abc import Callable, Generator
from pathlib import Path
from unittest import mock

import pytest

DEFAULT_PACKAGE_TYPE = """\
[package_type]
package_type = "default"
tarball_url = "hello-world-1.0.0.tar.gz"
tarball_hash = "abc123"

[package_type.language_env]
language_env = "c"
"""

GIT_PACKAGE_TYPE = """\
[package_type]
package_type = "git"
git_tag = "v1.0.0"
git_url = "https://example.com/hello-world.git"
submodules = [
    { commit = "0123456789abcdef", path = "vendor/lib" },
]

[package_type.language_env]
language_env = "go"
go_version = "1.22.0"
go_binary_url = "https://go.dev/dl/go1.22.0.linux-amd64.tar.gz"
go_binary_checksum = "f6c8a87aa03b92c4b0bf3d558e28ea03006eb29db78917daec5cfb6ec1046265"
"""

VIRTUAL_PACKAGE_TYPE = """\
[package_type]
package_type = "virtual"
"""


def render_pkg_config(
    package_type: str = DEFAULT_PACKAGE_TYPE,
    codename: str = "bookworm",
    pkg_builder_version: str = "0.3.1",
    extra_build_env: str = "",
) -> str:
    return f"""\
[package_fields]
spec_file = "hello-world.sss"
package_name = "hello-world"
version_number = "1.0.0"
revision_number = "1"
homepage = "https://example.com/hello-world"

{package_type}
[build_env]
codename = "{codename}"
arch = "amd64"
pkg_builder_version = "{pkg_builder_version}"
debcrafter_version = "8189263"
lintian_version = "2.116.3"
piuparts_version = "1.1.7"
autopkgtest_version = "5.28"
sbuild_version = "0.85.0"
{extra_build_env}
"""


@pytest.fixture
def temp_home(monkeypatch: pytest.MonkeyPatch) -> Generator[Path, None, None]:
    """Create a temporary home directory and set HOME/XDG paths."""
    with tempfile.TemporaryDirectory() as tmpdir:
        home = Path(tmpdir)
        monkeypatch.setenv("HOME", str(home))
        monkeypatch.setenv("XDG_CONFIG_HOME", str(home / ".config"))
        monkeypatch.setenv("XDG_CACHE_HOME", str(home / ".cache"))
        # Also patch Path.home() to return our temp home
        monkeypatch.setattr(Path, "home", lambda: home)
        yield home


@pytest.fixture
def mock_config(temp_home: Path) -> Path:
    """Create a minimal user config file in the temp home."""
    config_dir = temp_home / ".config" / "pkg-builder"
    config_dir.mkdir(parents=True, exist_ok=True)
    config_file = config_dir / "config.yaml"
    config_file.write_text("""
paths:
  runs_root: "~/.cache/pkg-builder/runs"
  workdir_root: "~/.pkg-builder/packages"
  sbuild_cache_dir: "~/.cache/sbuild"

behavior:
  verbose: false
""")
    return config_file


@pytest.fixture
def pkg_config_file(tmp_path: Path, mock_config: Path) -> Callable[..., Path]:
    """Factory writing a pkg-builder.toml into a fresh package directory.

    Keyword arguments are passed to render_pkg_config.
    """

    def _write(**kwargs: str) -> Path:
        pkg_dir = tmp_path / "pkg"
        pkg_dir.mkdir(exist_ok=True)
        path = pkg_dir / "pkg-builder.toml"
        path.write_text(render_pkg_config(**kwargs))
        return path

    return _write


@pytest.fixture
def non_tty_stdout(monkeypatch: pytest.MonkeyPatch) -> None:
    """Mock sys.__stdout__.isatty() to return False."""
    mock_stdout = mock.MagicMock()
    mock_stdout.isatty.return_value = False
    monkeypatch.setattr("sys.__stdout__", mock_stdout)


@pytest.fixture
def tty_stdout(monkeypatch: pytest.MonkeyPatch) -> None:
    """Mock sys.__stdout__.isatty() to return True."""
    mock_stdout = mock.MagicMock()
    mock_stdout.isatty.return_value = True
    mock_stdout.write = lambda x: None
    mock_stdout.flush = lambda: None
    monkeypatch.setattr("sys.__stdout__", mock_stdout)


@pytest.fixture
def render_config() -> Callable[..., str]:
    """Return render_pkg_config for tests that parse config text directly."""
    return render_pkg_config


@pytest.fixture
def package_types() -> dict[str, str]:
    """TOML [package_type] sections keyed by package type."""
    return {"default": DEFAULT_PACKAGE_TYPE, "git": GIT_PACKAGE_TYPE, "virtual": VIRTUAL_PACKAGE_TYPE}
