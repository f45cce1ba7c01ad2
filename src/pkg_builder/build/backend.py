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

"""Build backends.

:class:`BuildBackend` is the set of operations every backend provides;
:class:`SbuildBackend` implements it with sbuild, sbuild-createchroot,
lintian, piuparts and autopkgtest.
"""

from __future__ import annotations

import hashlib
import logging
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path
from typing import TYPE_CHECKING

from pkg_builder.build import sbuild
from pkg_builder.build.context import BuildContext
from pkg_builder.build.pipelines import pipeline_for
from pkg_builder.build.tools import check_tool_version
from pkg_builder.core.exceptions import BackendError, CommandError, VerificationError
from pkg_builder.core.executor import execute_command, execute_command_with_sudo
from pkg_builder.distribution import BOOKWORM, JAMMY
from pkg_builder.installers import installer_for
from pkg_builder.pkgconfig.models import Language

if TYPE_CHECKING:
    from collections.abc import Iterable

    from pkg_builder.pkgconfig.models import PackageHash, PkgConfig

logger = logging.getLogger(__name__)


class BuildBackend(ABC):
    """Operations a package build backend must support.

    Attributes:
        config: The package configuration the backend builds.
    """

    config: PkgConfig

    @abstractmethod
    def create(self) -> None:
        """Create the build environment cache."""

    @abstractmethod
    def clean(self) -> None:
        """Remove the build environment cache; absent caches are not an error."""

    @abstractmethod
    def package(self) -> None:
        """Prepare the source tree and build the package."""

    @abstractmethod
    def verify(self, expected: Iterable[PackageHash], no_package: bool = False) -> None:
        """Check built artifacts against expected SHA-1 digests."""

    @abstractmethod
    def run_lintian(self) -> None: ...

    @abstractmethod
    def run_piuparts(self) -> None: ...

    @abstractmethod
    def run_autopkgtests(self) -> None: ...


class SbuildBackend(BuildBackend):
    """sbuild-driven backend for a single package configuration."""

    def __init__(self, config: PkgConfig) -> None:
        self.config = config
        self.build_env = config.build_env
        self.distribution = config.build_env.distribution
        self.context = BuildContext.from_config(config)
        self.installer = installer_for(config.language_env)

    # Derived paths

    @property
    def cache_file(self) -> Path:
        return self.build_env.sbuild_cache_dir / f"{self.distribution.codename}-{self.build_env.arch}.tar.gz"

    @property
    def autopkgtest_image(self) -> Path:
        return self.build_env.sbuild_cache_dir / f"autopkgtest-{self.distribution.codename}-{self.build_env.arch}.img"

    def _artifact(self, extension: str) -> Path:
        fields = self.config.package_fields
        name = f"{fields.package_name}_{fields.version_number}-{fields.revision_number}_{self.build_env.arch}"
        return self.context.build_artifacts_dir / f"{name}.{extension}"

    @property
    def deb_file(self) -> Path:
        return self._artifact("deb")

    @property
    def changes_file(self) -> Path:
        return self._artifact("changes")

    def _run(self, command: str, args: list[str], cwd: Path | None = None, sudo: bool = False) -> None:
        """Run a backend tool, reporting any failure as a :class:`BackendError`."""
        runner = execute_command_with_sudo if sudo else execute_command
        try:
            runner(command, args, cwd=cwd)
        except CommandError as e:
            raise BackendError(f"{command} failed: {e.message}") from e

    # Environment

    def create(self) -> None:
        cache_file = self.cache_file
        cache_file.parent.mkdir(parents=True, exist_ok=True)
        with tempfile.TemporaryDirectory(prefix="pkg-builder-chroot-", ignore_cleanup_errors=True) as tmp:
            self._run("sbuild-createchroot", sbuild.build_createchroot_args(self.distribution, cache_file, Path(tmp)))
        logger.info(f"Created chroot cache {cache_file}")

    def clean(self) -> None:
        cache_file = self.cache_file
        if cache_file.exists():
            logger.info(f"Removing chroot cache {cache_file}")
            cache_file.unlink()
        else:
            logger.info(f"No chroot cache at {cache_file}")

    # Build

    def prepare(self) -> None:
        """Run the source preparation pipeline for the configured package type."""
        pipeline_for(self.config.package_type).execute(self.context)

    def sbuild_config(self) -> sbuild.SbuildConfig:
        build_deps = self.installer.build_deps(self.build_env.arch, self.distribution)
        return sbuild.SbuildConfig(
            distribution=self.distribution,
            cache_file=self.cache_file,
            setup_commands=sbuild.chroot_setup_commands(self.distribution, build_deps),
            run_lintian=self.build_env.run_lintian,
        )

    def package(self) -> None:
        self.prepare()
        self._run("sbuild", sbuild.build_sbuild_args(self.sbuild_config()), cwd=self.context.build_files_dir)
        if self.build_env.run_piuparts:
            self.run_piuparts()
        if self.build_env.run_autopkgtest:
            self.run_autopkgtests()

    def verify(self, expected: Iterable[PackageHash], no_package: bool = False) -> None:
        """Compare SHA-1 digests of built artifacts, reporting every failure.

        Raises:
            VerificationError: One or more artifacts are missing, unreadable
                or mismatched; the message lists all of them.
        """
        if not no_package:
            self.package()

        output_dir = self.context.build_artifacts_dir
        failures: list[str] = []
        for item in expected:
            path = output_dir / item.name
            if not path.exists():
                failures.append(f"Verification file missing: {item.name}")
                continue
            try:
                actual = hashlib.sha1(path.read_bytes()).hexdigest()
            except OSError:
                failures.append(f"Failed to read file: {item.name}")
                continue
            if actual != item.hash.strip().lower():
                failures.append(f"SHA1 mismatch for {item.name}: expected {item.hash}, got {actual}")
            else:
                logger.info(f"Verified {item.name}")

        if failures:
            raise VerificationError("; ".join(failures), failures=failures)

    # QA tools

    def run_lintian(self) -> None:
        check_tool_version("lintian", self.build_env.lintian_version)
        self._run("lintian", sbuild.build_lintian_args(self.distribution, self.changes_file), cwd=self.context.build_artifacts_dir)

    def _needs_microsoft_repo(self) -> bool:
        env = self.config.language_env
        return env is not None and env.language is Language.DOTNET and self.distribution in (BOOKWORM, JAMMY)

    def run_piuparts(self) -> None:
        check_tool_version("piuparts", self.build_env.piuparts_version)
        self._run(
            "piuparts",
            sbuild.build_piuparts_args(self.distribution, self.deb_file, self._needs_microsoft_repo()),
            cwd=self.context.build_artifacts_dir,
            sudo=True,
        )

    def ensure_autopkgtest_image(self) -> Path:
        """Build the QEMU test image unless a cached one exists."""
        image = self.autopkgtest_image
        if image.exists():
            logger.info(f"Using cached autopkgtest image {image}")
            return image
        image.parent.mkdir(parents=True, exist_ok=True)
        cmd = sbuild.build_autopkgtest_image_command(self.distribution, self.build_env.arch, image)
        self._run(cmd[0], cmd[1:], cwd=image.parent, sudo=True)
        return image

    def run_autopkgtests(self) -> None:
        check_tool_version("autopkgtest", self.build_env.autopkgtest_version)
        image = self.ensure_autopkgtest_image()
        self._run(
            "autopkgtest",
            sbuild.build_autopkgtest_args(self.changes_file, image, self.installer.test_deps(self.distribution)),
            cwd=self.context.build_artifacts_dir,
        )
