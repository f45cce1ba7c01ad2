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

"""Build context threaded through the build pipeline.

The context is derived once from a validated PkgConfig before the pipeline
starts. Steps read it; none of them rewrite its paths.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from pkg_builder.pkgconfig.models import DefaultPackage, GitPackage, PkgConfig, SubModule


@dataclass
class BuildContext:
    """Paths and source settings for one package build.

    Attributes:
        build_artifacts_dir: ``<workdir>/<name>-<version>-<revision>``.
        build_files_dir: Extracted source tree, ``<artifacts>/<name>-<version>``.
        tarball_path: ``<artifacts>/<name>_<version>.orig.tar.gz``.
        tarball_url: Upstream tarball URL or absolute local path.
        tarball_hash: Expected SHA-256 or SHA-512 hex digest, if any.
        debcrafter_version: Suffix of the ``debcrafter_<version>`` binary.
        homepage: Value for the injected ``Homepage:`` control field.
        spec_file: debcrafter specification file.
        src_dir: Optional overlay copied over the build tree.
        package_name: Package name; names the directory that git sources
            are packed from.
        git_tag: Tag to clone (git packages only).
        git_url: Remote to clone (git packages only).
        submodules: Submodules to pin (git packages only).
    """

    build_artifacts_dir: Path
    build_files_dir: Path
    tarball_path: Path
    debcrafter_version: str
    homepage: str
    spec_file: Path
    src_dir: Path
    package_name: str
    tarball_url: str = ""
    tarball_hash: str | None = None
    git_tag: str = ""
    git_url: str = ""
    submodules: list[SubModule] = field(default_factory=list)

    @classmethod
    def from_config(cls, config: PkgConfig) -> BuildContext:
        """Derive every build path from a package configuration."""
        fields = config.package_fields
        name = fields.package_name
        version = fields.version_number
        artifacts = config.build_env.workdir / f"{name}-{version}-{fields.revision_number}"

        ctx = cls(
            build_artifacts_dir=artifacts,
            build_files_dir=artifacts / f"{name}-{version}",
            tarball_path=artifacts / f"{name}_{version}.orig.tar.gz",
            debcrafter_version=config.build_env.debcrafter_version,
            homepage=fields.homepage,
            spec_file=config.config_root / fields.spec_file,
            src_dir=config.config_root / "src",
            package_name=name,
        )

        package_type = config.package_type
        if isinstance(package_type, DefaultPackage):
            url = package_type.tarball_url
            if not url.startswith("http"):
                url = str(config.config_root / url)
            ctx.tarball_url = url
            ctx.tarball_hash = package_type.tarball_hash
        elif isinstance(package_type, GitPackage):
            ctx.git_tag = package_type.git_tag
            ctx.git_url = package_type.git_url
            ctx.submodules = list(package_type.submodules)
        return ctx
