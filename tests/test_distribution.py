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

"""Tests for pkg_builder.distribution module."""

from __future__ import annotations

import pytest

from pkg_builder.core.exceptions import UnsupportedCodenameError
from pkg_builder.distribution import (
    BOOKWORM,
    DEBIAN_KEYRING,
    DEBIAN_MIRROR,
    JAMMY,
    NOBLE,
    UBUNTU_KEYRING,
    UBUNTU_MIRROR,
    Distribution,
    Family,
)


class TestFromCodename:
    """Tests for Distribution.from_codename."""

    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            ("bookworm", BOOKWORM),
            ("jammy", JAMMY),
            ("jammy jellyfish", JAMMY),
            ("noble", NOBLE),
            ("noble numbat", NOBLE),
        ],
    )
    def test_supported_codenames(self, value: str, expected: Distribution) -> None:
        assert Distribution.from_codename(value) == expected

    def test_normalizes_case_and_whitespace(self) -> None:
        assert Distribution.from_codename("  Jammy   Jellyfish ") == JAMMY

    @pytest.mark.parametrize("value", ["focal fossa", "trixie", "", "bookworm-backports"])
    def test_unsupported_codename(self, value: str) -> None:
        with pytest.raises(UnsupportedCodenameError) as exc_info:
            Distribution.from_codename(value)
        assert exc_info.value.codename == value
        assert exc_info.value.exit_code == 1


class TestDistributionProperties:
    """Tests for mirror and keyring selection."""

    def test_debian(self) -> None:
        assert BOOKWORM.family is Family.DEBIAN
        assert BOOKWORM.is_debian
        assert BOOKWORM.repo_url == DEBIAN_MIRROR
        assert BOOKWORM.keyring == DEBIAN_KEYRING

    @pytest.mark.parametrize("dist", [JAMMY, NOBLE])
    def test_ubuntu(self, dist: Distribution) -> None:
        assert dist.family is Family.UBUNTU
        assert dist.repo_url == UBUNTU_MIRROR
        assert dist.keyring == UBUNTU_KEYRING

    def test_str_is_codename(self) -> None:
        assert str(NOBLE) == "noble"
