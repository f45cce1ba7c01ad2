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

"""External tool discovery and version checks.

Build steps resolve the binaries they need here before touching the
filesystem. Installed tool versions are compared against the versions
recorded in the package config; a mismatch is reported but never fatal.
"""

from __future__ import annotations

import logging
import re
import shutil
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path

from packaging.version import InvalidVersion, Version

from pkg_builder.core.exceptions import CommandError, ToolMissingError
from pkg_builder.core.executor import run_command

logger = logging.getLogger(__name__)


@dataclass
class ToolCheck:
    """Result of checking for required external tools."""

    tools: dict[str, Path | None] = field(default_factory=dict)
    missing: list[str] = field(default_factory=list)

    def is_complete(self) -> bool:
        """Return True if all required tools are available."""
        return len(self.missing) == 0


# Tools needed by every package build
REQUIRED_TOOLS = [
    "tar",
    "sbuild",
    "sbuild-createchroot",
    "dpkg-parsechangelog",
]

# Installation instructions per tool
INSTALL_INSTRUCTIONS: dict[str, str] = {
    "tar": "apt install tar",
    "wget": "apt install wget",
    "git": "apt install git",
    "git-lfs": "apt install git-lfs",
    "sbuild": "apt install sbuild",
    "sbuild-createchroot": "apt install sbuild",
    "dpkg-parsechangelog": "apt install dpkg-dev",
    "lintian": "apt install lintian",
    "piuparts": "apt install piuparts",
    "autopkgtest": "apt install autopkgtest",
    "autopkgtest-build-qemu": "apt install autopkgtest vmdb2",
    "autopkgtest-buildvm-ubuntu-cloud": "apt install autopkgtest",
}

# Package names for apt install command
TOOL_PACKAGES: dict[str, str] = {
    "tar": "tar",
    "wget": "wget",
    "git": "git",
    "git-lfs": "git-lfs",
    "sbuild": "sbuild",
    "sbuild-createchroot": "sbuild",
    "dpkg-parsechangelog": "dpkg-dev",
    "lintian": "lintian",
    "piuparts": "piuparts",
    "autopkgtest": "autopkgtest",
    "autopkgtest-build-qemu": "autopkgtest",
    "autopkgtest-buildvm-ubuntu-cloud": "autopkgtest",
}


def find_tool(name: str) -> Path | None:
    """Find an executable tool in PATH.

    Args:
        name: Name of the tool to find.

    Returns:
        Path to the tool if found, None otherwise.
    """
    path = shutil.which(name)
    if path:
        return Path(path)
    return None


def require_tool(name: str, message: str | None = None) -> Path:
    """Return the path of ``name`` or raise ToolMissingError."""
    path = find_tool(name)
    if path is None:
        raise ToolMissingError(message or f"{name} is not installed, please install it.")
    return path


def check_required_tools(extra: list[str] | None = None) -> ToolCheck:
    """Check for the external tools a build needs.

    Args:
        extra: Additional tools to check beyond REQUIRED_TOOLS.

    Returns:
        ToolCheck with available tools and list of missing tools.
    """
    result = ToolCheck()
    for tool in [*REQUIRED_TOOLS, *(extra or [])]:
        if tool in result.tools:
            continue
        path = find_tool(tool)
        result.tools[tool] = path
        if path is None:
            result.missing.append(tool)
    return result


def get_missing_tools_message(missing: list[str]) -> str:
    """Generate a user-friendly message for installing missing tools.

    Args:
        missing: List of missing tool names.

    Returns:
        Multi-line string with installation instructions.
    """
    if not missing:
        return ""

    lines = ["The following required tools are missing:"]
    for tool in missing:
        instruction = INSTALL_INSTRUCTIONS.get(tool, f"Install {tool}")
        lines.append(f"  - {tool}: {instruction}")

    packages = sorted({TOOL_PACKAGES[t] for t in missing if t in TOOL_PACKAGES})
    if packages:
        lines.append("")
        lines.append("Quick install:")
        lines.append(f"  sudo apt install {' '.join(packages)}")

    return "\n".join(lines)


# Version probes

SBUILD_VERSION_RE = re.compile(r"sbuild \(Debian sbuild\) ([\d.]+)")
AUTOPKGTEST_VERSION_RE = re.compile(r"^\d[\d.]*")


def normalize_version(version: str) -> str:
    """Pad ``X.Y`` to ``X.Y.0`` so two- and three-part versions compare."""
    version = version.strip()
    if version.count(".") == 1:
        return f"{version}.0"
    return version


def parse_sbuild_version(output: str) -> str | None:
    match = SBUILD_VERSION_RE.search(output)
    return match.group(1) if match else None


def parse_lintian_version(output: str) -> str | None:
    # "Lintian v2.116.3ubuntu1" -> "2.116.3"
    text = output.strip().replace("Lintian v", "")
    text = text.split("ubuntu")[0].strip()
    return text or None


def parse_piuparts_version(output: str) -> str | None:
    text = output.strip().replace("piuparts ", "")
    return text or None


def parse_autopkgtest_version(output: str) -> str | None:
    """Extract the version from ``apt list --installed autopkgtest`` output."""
    for token in output.split():
        if token[:1].isdigit():
            match = AUTOPKGTEST_VERSION_RE.match(token)
            if match:
                return match.group(0).rstrip(".")
    return None


VERSION_PROBES: dict[str, tuple[list[str], Callable[[str], str | None]]] = {
    "sbuild": (["sbuild", "--version"], parse_sbuild_version),
    "lintian": (["lintian", "--version"], parse_lintian_version),
    "piuparts": (["piuparts", "--version"], parse_piuparts_version),
    "autopkgtest": (["apt", "list", "--installed", "autopkgtest"], parse_autopkgtest_version),
}


def get_tool_version(tool: str) -> str | None:
    """Return the installed version of ``tool`` or None if it cannot be determined."""
    cmd, parser = VERSION_PROBES[tool]
    try:
        code, stdout, stderr = run_command(cmd)
    except CommandError as e:
        logger.warning(f"Could not run {cmd[0]}: {e.message}")
        return None
    if code != 0:
        logger.warning(f"{' '.join(cmd)} exited with {code}: {stderr.strip()}")
        return None
    return parser(stdout)


def compare_versions(expected: str, actual: str) -> int:
    """Return -1, 0 or 1 as ``actual`` is older, equal or newer than ``expected``."""
    try:
        want = Version(normalize_version(expected))
        have = Version(normalize_version(actual))
    except InvalidVersion:
        return 0 if expected.strip() == actual.strip() else 1
    return (have > want) - (have < want)


def check_tool_version(tool: str, expected: str, actual: str | None = None) -> bool:
    """Warn when the installed ``tool`` differs from ``expected``.

    Returns:
        True if the versions match.
    """
    if actual is None:
        actual = get_tool_version(tool)
    if actual is None:
        logger.warning(f"Unable to determine installed {tool} version (expected {expected})")
        return False

    result = compare_versions(expected, actual)
    if result > 0:
        logger.warning(f"Installed {tool} {actual} is newer than expected {expected}")
    elif result < 0:
        logger.warning(f"Installed {tool} {actual} is older than expected {expected}")
    else:
        logger.info(f"{tool} version {actual} matches")
    return result == 0
