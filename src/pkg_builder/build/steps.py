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

"""Build steps composing the package preparation pipelines.

Each step exposes ``name`` and ``step(context)`` and raises a
PkgBuilderError subclass on failure.
"""

from __future__ import annotations

import logging
import shutil
from typing import TYPE_CHECKING

from pkg_builder.build import debcrafter, extract, git_source, patch, sbuildrc, source
from pkg_builder.core.exceptions import SourceError

if TYPE_CHECKING:
    from pkg_builder.build.context import BuildContext

logger = logging.getLogger(__name__)


class PackageDirSetup:
    """Recreate an empty build artifacts directory."""

    name = "package-dir-setup"

    def step(self, context: BuildContext) -> None:
        artifacts = context.build_artifacts_dir
        try:
            if artifacts.exists():
                logger.info(f"Removing previous build artifacts in {artifacts}")
                shutil.rmtree(artifacts)
            artifacts.mkdir(parents=True)
        except OSError as e:
            raise SourceError(f"Failed to prepare {artifacts}: {e}") from e


class DownloadSource:
    name = "download-source"

    def step(self, context: BuildContext) -> None:
        source.download_or_copy(context.tarball_path, context.tarball_url)


class VerifyHash:
    name = "verify-hash"

    def step(self, context: BuildContext) -> None:
        source.verify_checksum(context.tarball_path, context.tarball_hash)


class DownloadGit:
    """Clone the configured tag and pack it into the orig tarball."""

    name = "download-git"

    def step(self, context: BuildContext) -> None:
        checkout = context.build_artifacts_dir / context.package_name
        if checkout.exists():
            shutil.rmtree(checkout)
        git_source.clone_and_checkout(context.git_url, context.git_tag, checkout, context.submodules)
        git_source.create_deterministic_tarball(
            context.build_artifacts_dir, context.package_name, context.tarball_path
        )


class CreateEmptyTar:
    name = "create-empty-tar"

    def step(self, context: BuildContext) -> None:
        source.create_empty_tarball(context.build_artifacts_dir, context.tarball_path)


class ExtractSource:
    name = "extract-source"

    def step(self, context: BuildContext) -> None:
        extract.extract(context.tarball_path, context.build_files_dir)


class CreateDebianDir:
    name = "create-debian-dir"

    def step(self, context: BuildContext) -> None:
        debcrafter.generate(context.spec_file, context.build_files_dir, context.debcrafter_version)


class PatchSource:
    name = "patch-source"

    def step(self, context: BuildContext) -> None:
        patch.patch_source(context.build_files_dir, context.homepage, context.src_dir)


class SetupSbuild:
    name = "setup-sbuild"

    def step(self, context: BuildContext) -> None:
        sbuildrc.write_sbuildrc()
