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

"""Command-line builders for sbuild and the Debian QA tools.

Each builder returns the argument list that follows the program name, so
callers pass it straight to the command executor.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from pkg_builder.distribution import JAMMY, NOBLE, Distribution

# Ubuntu noble keeps several build dependencies outside main.
NOBLE_SETUP_COMMANDS = [
    "apt install -y software-properties-common",
    "add-apt-repository universe",
    "add-apt-repository restricted",
    "add-apt-repository multiverse",
    "apt update",
]

SBUILD_LINTIAN_ARGS = [
    "--run-lintian",
    "--lintian-opt=-i",
    "--lintian-opt=--I",
    "--lintian-opt=--suppress-tags",
    "--lintian-opt=bad-distribution-in-changes-file",
    "--lintian-opt=--suppress-tags",
    "--lintian-opt=debug-file-with-no-debug-symbols",
    "--lintian-opt=--tag-display-limit=0",
    "--lintian-opts=--fail-on=error",
    "--lintian-opts=--fail-on=warning",
]

MICROSOFT_DEBIAN_REPO = "https://packages.microsoft.com/debian/12/prod"


@dataclass
class SbuildConfig:
    """Inputs for one sbuild invocation.

    Attributes:
        distribution: Target distribution.
        cache_file: Chroot tarball created by ``env create``.
        setup_commands: Commands run in the chroot before building.
        run_lintian: Let sbuild run lintian on the result.
    """

    distribution: Distribution
    cache_file: Path
    setup_commands: list[str] = field(default_factory=list)
    run_lintian: bool = False


def chroot_setup_commands(distribution: Distribution, build_deps: list[str]) -> list[str]:
    """Release-specific repository setup followed by language build deps."""
    commands = list(NOBLE_SETUP_COMMANDS) if distribution == NOBLE else []
    return commands + list(build_deps)


def build_sbuild_args(config: SbuildConfig) -> list[str]:
    """Build the sbuild argument list.

    piuparts and autopkgtest are always disabled here; they run
    standalone afterwards so a failure does not discard the build.
    """
    args = [
        "-d",
        config.distribution.codename,
        "-A",
        "-s",
        "--source-only-changes",
        "-c",
        str(config.cache_file),
        "-v",
        "--chroot-mode=unshare",
    ]
    args.extend(f"--chroot-setup-commands={cmd}" for cmd in config.setup_commands)
    args.append("--no-run-piuparts")
    args.extend(["--no-apt-upgrade", "--no-apt-distupgrade"])
    if config.run_lintian:
        args.extend(SBUILD_LINTIAN_ARGS)
    else:
        args.append("--no-run-lintian")
    args.append("--no-run-autopkgtest")
    return args


def build_createchroot_args(distribution: Distribution, cache_file: Path, chroot_dir: Path) -> list[str]:
    return [
        "--chroot-mode=unshare",
        "--make-sbuild-tarball",
        str(cache_file),
        distribution.codename,
        str(chroot_dir),
        distribution.repo_url,
    ]


def build_lintian_args(distribution: Distribution, changes_file: Path) -> list[str]:
    args = [
        "--suppress-tags",
        "bad-distribution-in-changes-file",
        "-i",
        "-I",
        str(changes_file),
        "--tag-display-limit=0",
        "--fail-on=warning",
        "--fail-on=error",
        "--suppress-tags",
        "debug-file-with-no-debug-symbols",
    ]
    if distribution in (JAMMY, NOBLE):
        args.extend(["--suppress-tags", "malformed-deb-archive"])
    return args


def build_piuparts_args(distribution: Distribution, deb_file: Path, microsoft_repo: bool = False) -> list[str]:
    """Build piuparts arguments.

    ``microsoft_repo`` adds the Microsoft package feed, whose packages the
    default keyring cannot verify, for .NET builds on bookworm and jammy.
    """
    args = [
        "-d",
        distribution.codename,
        "-m",
        distribution.repo_url,
        "--bindmount=/dev",
        f"--keyring={distribution.keyring}",
        "--verbose",
    ]
    if microsoft_repo:
        args.append(f"--extra-repo=deb {MICROSOFT_DEBIAN_REPO} {distribution.codename} main")
        args.append("--do-not-verify-signatures")
    args.append(str(deb_file))
    return args


def build_autopkgtest_image_command(distribution: Distribution, arch: str, image_path: Path) -> list[str]:
    """Return the full command (program included) that builds a QEMU test image."""
    if distribution.is_debian:
        return [
            "autopkgtest-build-qemu",
            distribution.codename,
            f"--mirror={distribution.repo_url}",
            f"--arch={arch}",
            str(image_path),
        ]
    return [
        "autopkgtest-buildvm-ubuntu-cloud",
        f"--release={distribution.codename}",
        f"--mirror={distribution.repo_url}",
        f"--arch={arch}",
        "-v",
    ]


def build_autopkgtest_args(changes_file: Path, image_path: Path, test_deps: list[str]) -> list[str]:
    args = [str(changes_file), "--no-built-binaries", "--apt-upgrade"]
    args.extend(f"--setup-commands={dep}" for dep in test_deps)
    args.extend(["--", "qemu", str(image_path)])
    return args
