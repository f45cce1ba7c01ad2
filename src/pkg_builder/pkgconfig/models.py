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

"""Typed model of a ``pkg-builder.toml`` package configuration.

The loader in :mod:`pkg_builder.pkgconfig.loader` builds these objects and
validates them; everything downstream trusts that required strings are
present and non-empty.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from pkg_builder.distribution import Distribution


@dataclass(frozen=True)
class SubModule:
    """A git submodule pinned to a specific commit.

    Attributes:
        commit: Commit hash the submodule must be checked out at.
        path: Submodule path relative to the repository root.
    """

    commit: str
    path: str


# Language environments


class Language(Enum):
    """Toolchain families a package can be built with."""

    RUST = "rust"
    GO = "go"
    JAVASCRIPT = "javascript"
    TYPESCRIPT = "typescript"
    JAVA = "java"
    DOTNET = "dotnet"
    NIM = "nim"
    C = "c"
    PYTHON = "python"


@dataclass(frozen=True)
class RustConfig:
    rust_version: str
    rust_binary_url: str
    rust_binary_gpg_asc: str


@dataclass(frozen=True)
class GoConfig:
    go_version: str
    go_binary_url: str
    go_binary_checksum: str


@dataclass(frozen=True)
class JavascriptConfig:
    """Node toolchain, shared by the javascript and typescript environments."""

    node_version: str
    node_binary_url: str
    node_binary_checksum: str
    yarn_version: str | None = None


@dataclass(frozen=True)
class GradleConfig:
    gradle_version: str
    gradle_binary_url: str
    gradle_binary_checksum: str


@dataclass(frozen=True)
class JavaConfig:
    is_oracle: bool
    jdk_version: str
    jdk_binary_url: str
    jdk_binary_checksum: str
    gradle: GradleConfig | None = None


@dataclass(frozen=True)
class DotnetPackage:
    """A .deb pulled into the chroot, checked by SHA-1."""

    name: str
    hash: str
    url: str


@dataclass(frozen=True)
class DotnetConfig:
    use_backup_version: bool
    dotnet_packages: tuple[DotnetPackage, ...] = ()
    deps: tuple[str, ...] | None = None


@dataclass(frozen=True)
class NimConfig:
    nim_version: str
    nim_binary_url: str
    nim_version_checksum: str


LanguageConfig = RustConfig | GoConfig | JavascriptConfig | JavaConfig | DotnetConfig | NimConfig


@dataclass(frozen=True)
class LanguageEnv:
    """Tagged language environment.

    ``config`` is None for languages without toolchain settings (C, Python).
    """

    language: Language
    config: LanguageConfig | None = None


# Package types


@dataclass(frozen=True)
class DefaultPackage:
    """Upstream source from a tarball URL or local path."""

    tarball_url: str
    language_env: LanguageEnv
    tarball_hash: str | None = None


@dataclass(frozen=True)
class GitPackage:
    """Upstream source from a git tag, with submodules pinned to commits."""

    git_tag: str
    git_url: str
    language_env: LanguageEnv
    submodules: tuple[SubModule, ...] = ()


@dataclass(frozen=True)
class VirtualPackage:
    """A package with no upstream source, only packaging metadata."""


PackageType = DefaultPackage | GitPackage | VirtualPackage


@dataclass(frozen=True)
class PackageFields:
    spec_file: str
    package_name: str
    version_number: str
    revision_number: str
    homepage: str


@dataclass(frozen=True)
class BuildEnv:
    """Per-build settings from the ``[build_env]`` section.

    Attributes:
        codename: Codename as written in the config, e.g. "noble numbat".
        arch: Target architecture, e.g. "amd64".
        pkg_builder_version: Minimum pkg-builder version the config expects.
        debcrafter_version: Suffix of the ``debcrafter_<version>`` binary.
        lintian_version: Expected lintian version (advisory).
        piuparts_version: Expected piuparts version (advisory).
        autopkgtest_version: Expected autopkgtest version (advisory).
        sbuild_version: Expected sbuild version (advisory).
        run_lintian: Run lintian as part of sbuild.
        run_piuparts: Run piuparts after a successful build.
        run_autopkgtest: Run autopkgtest after a successful build.
        docker: Reserved for container-based builds; recorded only.
        sbuild_cache_dir: Directory holding chroot tarballs and test images.
        workdir: Root directory for per-package build artifacts.
    """

    codename: str
    arch: str
    pkg_builder_version: str
    debcrafter_version: str
    lintian_version: str
    piuparts_version: str
    autopkgtest_version: str
    sbuild_version: str
    sbuild_cache_dir: Path
    workdir: Path
    run_lintian: bool = False
    run_piuparts: bool = False
    run_autopkgtest: bool = False
    docker: bool = False

    @property
    def distribution(self) -> Distribution:
        return Distribution.from_codename(self.codename)


@dataclass(frozen=True)
class PkgConfig:
    """A fully loaded and validated package configuration.

    Attributes:
        package_fields: Name, version and packaging metadata.
        package_type: Source acquisition strategy.
        build_env: Build environment settings.
        config_root: Directory containing the config file; relative paths
            in the config are resolved against it.
    """

    package_fields: PackageFields
    package_type: PackageType
    build_env: BuildEnv
    config_root: Path = field(default_factory=Path.cwd)

    @property
    def language_env(self) -> LanguageEnv | None:
        if isinstance(self.package_type, VirtualPackage):
            return None
        return self.package_type.language_env


@dataclass(frozen=True)
class PackageHash:
    """Expected SHA-1 digest of one build artifact."""

    name: str
    hash: str
