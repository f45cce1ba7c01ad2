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

"""pkg-builder exception types with associated exit codes."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class PkgBuilderError(Exception):
    """Base class for pkg-builder errors with an exit code."""

    message: str = "An error occurred"
    exit_code: int = field(default=1)

    def __str__(self) -> str:  # pragma: no cover - trivial
        return f"{self.message} (exit {self.exit_code})"


# Configuration and distribution errors


@dataclass
class ConfigError(PkgBuilderError):
    exit_code: int = field(default=1)


@dataclass
class UnsupportedCodenameError(ConfigError):
    """Raised when a codename does not map to a known distribution."""

    codename: str = ""

    def __post_init__(self) -> None:
        if self.codename:
            self.message = f"Unsupported codename: {self.codename}"


@dataclass
class ToolMissingError(PkgBuilderError):
    exit_code: int = field(default=2)


# Command execution errors


@dataclass
class CommandError(PkgBuilderError):
    exit_code: int = field(default=3)


@dataclass
class CommandFailedError(CommandError):
    """Raised when a child process could not be spawned."""

    command: str = ""
    reason: str = ""

    def __post_init__(self) -> None:
        if self.command:
            self.message = f"Failed to execute {self.command}: {self.reason}"


@dataclass
class CommandStatusError(CommandError):
    """Raised when a child process exits nonzero.

    ``code`` is -1 when the process was terminated by a signal.
    """

    command: str = ""
    code: int = -1

    def __post_init__(self) -> None:
        if self.command:
            self.message = f"Command {self.command} failed with exit code {self.code}"


@dataclass
class SudoUnavailableError(CommandError):
    message: str = (
        "sudo requires a password but no terminal is available; "
        "run interactively or configure passwordless sudo"
    )


# Source acquisition errors


@dataclass
class SourceError(PkgBuilderError):
    exit_code: int = field(default=4)


@dataclass
class DownloadFailedError(SourceError):
    pass


@dataclass
class FileCopyFailedError(SourceError):
    pass


@dataclass
class TarballOpenError(SourceError):
    pass


@dataclass
class TarballReadError(SourceError):
    pass


@dataclass
class HashMismatchError(SourceError):
    message: str = "Checksum verification failed: hashes do not match"


@dataclass
class ExtractionError(SourceError):
    pass


@dataclass
class VirtualTarballError(SourceError):
    message: str = "Failed to create virtual package tarball"


# Git acquisition errors


@dataclass
class GitSourceError(PkgBuilderError):
    exit_code: int = field(default=5)


@dataclass
class GitLfsMissingError(GitSourceError):
    message: str = "git-lfs is not installed, please install it!"


@dataclass
class CheckoutTagFailedError(GitSourceError):
    tag: str = ""
    reason: str = ""

    def __post_init__(self) -> None:
        if self.tag:
            self.message = f"Failed to checkout tag {self.tag}: {self.reason}"


@dataclass
class SubmoduleInitFailedError(GitSourceError):
    reason: str = ""

    def __post_init__(self) -> None:
        if self.reason:
            self.message = f"Failed to initialize submodules: {self.reason}"


@dataclass
class SubmoduleCommitFailedError(GitSourceError):
    commit: str = ""
    path: str = ""
    reason: str = ""

    def __post_init__(self) -> None:
        if self.commit:
            self.message = f"Failed to checkout commit {self.commit} in submodule {self.path}: {self.reason}"


@dataclass
class TarballCreationFailedError(GitSourceError):
    pass


# Debian metadata and patching errors


@dataclass
class DebcrafterError(PkgBuilderError):
    exit_code: int = field(default=6)


@dataclass
class PatchError(PkgBuilderError):
    exit_code: int = field(default=7)


@dataclass
class ControlFileError(PatchError):
    pass


@dataclass
class RulesPermissionGetError(PatchError):
    message: str = "Failed to get debian/rules permission"


@dataclass
class RulesPermissionSetError(PatchError):
    message: str = "Failed to set debian/rules permission"


@dataclass
class CopyDirectoryError(PatchError):
    pass


@dataclass
class SbuildSetupError(PkgBuilderError):
    exit_code: int = field(default=8)


@dataclass
class HomeDirNotFoundError(SbuildSetupError):
    message: str = "Home directory not found"


@dataclass
class FileCreationError(SbuildSetupError):
    pass


@dataclass
class FileWriteError(SbuildSetupError):
    pass


# Backend errors


@dataclass
class BackendError(PkgBuilderError):
    exit_code: int = field(default=9)


@dataclass
class VerificationError(PkgBuilderError):
    """Error aggregating every missing or mismatched artifact."""

    exit_code: int = field(default=10)
    failures: list[str] = field(default_factory=list)


@dataclass
class VersionMismatchError(PkgBuilderError):
    exit_code: int = field(default=11)
