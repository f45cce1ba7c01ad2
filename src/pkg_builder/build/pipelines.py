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

"""Canonical step orderings for each package type."""

from __future__ import annotations

from pkg_builder.build.pipeline import BuildPipeline
from pkg_builder.build.steps import (
    CreateDebianDir,
    CreateEmptyTar,
    DownloadGit,
    DownloadSource,
    ExtractSource,
    PackageDirSetup,
    PatchSource,
    SetupSbuild,
    VerifyHash,
)
from pkg_builder.pkgconfig.models import DefaultPackage, GitPackage, PackageType, VirtualPackage


def _finish(pipeline: BuildPipeline) -> BuildPipeline:
    return (
        pipeline.add_step(ExtractSource())
        .add_step(CreateDebianDir())
        .add_step(PatchSource())
        .add_step(SetupSbuild())
    )


def default_pipeline() -> BuildPipeline:
    """Tarball packages: download or copy, then verify before extracting."""
    return _finish(
        BuildPipeline().add_step(PackageDirSetup()).add_step(DownloadSource()).add_step(VerifyHash())
    )


def git_pipeline() -> BuildPipeline:
    return _finish(BuildPipeline().add_step(PackageDirSetup()).add_step(DownloadGit()))


def virtual_pipeline() -> BuildPipeline:
    return _finish(BuildPipeline().add_step(PackageDirSetup()).add_step(CreateEmptyTar()))


def pipeline_for(package_type: PackageType) -> BuildPipeline:
    """Return the preparation pipeline for ``package_type``."""
    if isinstance(package_type, DefaultPackage):
        return default_pipeline()
    if isinstance(package_type, GitPackage):
        return git_pipeline()
    if isinstance(package_type, VirtualPackage):
        return virtual_pipeline()
    raise TypeError(f"Unknown package type: {package_type!r}")
