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

"""Build module for pkg-builder.

Provides the build context, the source preparation pipeline and its steps,
and the sbuild backend.
"""

from pkg_builder.build.backend import BuildBackend, SbuildBackend
from pkg_builder.build.context import BuildContext
from pkg_builder.build.dispatch import get_backend
from pkg_builder.build.pipeline import BuildPipeline, BuildStep
from pkg_builder.build.pipelines import pipeline_for

__all__ = [
    "BuildBackend",
    "BuildContext",
    "BuildPipeline",
    "BuildStep",
    "SbuildBackend",
    "get_backend",
    "pipeline_for",
]
