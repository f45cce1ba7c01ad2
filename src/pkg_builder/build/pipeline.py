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

"""Ordered execution of build steps over a shared context."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from pkg_builder.build.context import BuildContext

logger = logging.getLogger(__name__)


class BuildStep(Protocol):
    """A single fallible unit of work in a build pipeline.

    Steps signal failure by raising a PkgBuilderError subclass.
    """

    name: str

    def step(self, context: BuildContext) -> None: ...


class BuildPipeline:
    """Runs steps strictly in registration order, stopping at the first error.

    Usage:
        BuildPipeline().add_step(PackageDirSetup()).add_step(DownloadSource()).execute(ctx)
    """

    def __init__(self) -> None:
        self.steps: list[BuildStep] = []

    def add_step(self, step: BuildStep) -> BuildPipeline:
        self.steps.append(step)
        return self

    def execute(self, context: BuildContext) -> None:
        """Run every step; the first exception raised aborts the pipeline.

        No cleanup is attempted on failure so the partial tree can be
        inspected.
        """
        total = len(self.steps)
        for index, step in enumerate(self.steps, start=1):
            logger.info(f"Pipeline step {index}/{total}: {step.name}")
            step.step(context)
