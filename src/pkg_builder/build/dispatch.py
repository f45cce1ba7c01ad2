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

"""Selection of the build backend for a target distribution."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from pkg_builder.build.backend import BuildBackend, SbuildBackend
from pkg_builder.distribution import Distribution

if TYPE_CHECKING:
    from pkg_builder.pkgconfig.models import PkgConfig

logger = logging.getLogger(__name__)


def get_backend(config: PkgConfig) -> BuildBackend:
    """Return the backend for the configured codename.

    Every supported release builds with sbuild.

    Raises:
        UnsupportedCodenameError: The codename is not supported. Nothing is
            touched on disk in that case.
    """
    distribution = Distribution.from_codename(config.build_env.codename)
    logger.info(f"Using sbuild backend for {distribution.family.value} {distribution.codename}")
    return SbuildBackend(config)
