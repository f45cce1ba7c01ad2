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

"""Target distribution resolution.

Maps the codename strings accepted in ``pkg-builder.toml`` to a
:class:`Distribution`, which determines the mirror, keyring and
autopkgtest image tooling used for a build.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from pkg_builder.core.exceptions import UnsupportedCodenameError


class Family(Enum):
    """Distribution families supported by the sbuild backend."""

    DEBIAN = "debian"
    UBUNTU = "ubuntu"


DEBIAN_MIRROR = "http://deb.debian.org/debian"
UBUNTU_MIRROR = "http://archive.ubuntu.com/ubuntu"

DEBIAN_KEYRING = "/usr/share/keyrings/debian-archive-keyring.gpg"
UBUNTU_KEYRING = "/usr/share/keyrings/ubuntu-archive-keyring.gpg"


@dataclass(frozen=True)
class Distribution:
    """A resolved target distribution.

    Attributes:
        family: Debian or Ubuntu.
        codename: Short release codename (bookworm, jammy, noble).
    """

    family: Family
    codename: str

    @classmethod
    def from_codename(cls, value: str) -> Distribution:
        """Resolve a configured codename, e.g. "jammy jellyfish".

        Raises:
            UnsupportedCodenameError: If the codename is not supported.
        """
        key = " ".join(value.strip().lower().split())
        try:
            return _CODENAMES[key]
        except KeyError:
            raise UnsupportedCodenameError(codename=value) from None

    @property
    def is_debian(self) -> bool:
        return self.family is Family.DEBIAN

    @property
    def repo_url(self) -> str:
        return DEBIAN_MIRROR if self.is_debian else UBUNTU_MIRROR

    @property
    def keyring(self) -> str:
        return DEBIAN_KEYRING if self.is_debian else UBUNTU_KEYRING

    def __str__(self) -> str:
        return self.codename


BOOKWORM = Distribution(Family.DEBIAN, "bookworm")
JAMMY = Distribution(Family.UBUNTU, "jammy")
NOBLE = Distribution(Family.UBUNTU, "noble")

_CODENAMES: dict[str, Distribution] = {
    "bookworm": BOOKWORM,
    "jammy": JAMMY,
    "jammy jellyfish": JAMMY,
    "noble": NOBLE,
    "noble numbat": NOBLE,
}
