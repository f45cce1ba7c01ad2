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

"""Shared plumbing for CLI commands.

Every backend command follows the same shape: open a RunContext, resolve
and load the package config, check the configured pkg-builder version,
dispatch the backend, run one operation, and turn a PkgBuilderError into
an exit code with matching log events.
"""

from __future__ import annotations

import dataclasses
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from packaging.version import InvalidVersion, Version

from pkg_builder import __version__
from pkg_builder.build.dispatch import get_backend
from pkg_builder.build.tools import compare_versions, normalize_version
from pkg_builder.core.exceptions import ConfigError, PkgBuilderError, VersionMismatchError
from pkg_builder.core.run import RunContext, activity
from pkg_builder.pkgconfig.loader import load_pkg_config, resolve_config_path
from pkg_builder.spinner import activity_spinner

if TYPE_CHECKING:
    from pkg_builder.build.backend import BuildBackend
    from pkg_builder.pkgconfig.models import PkgConfig

EXIT_SUCCESS = 0


def log_phase_event(
    run: RunContext,
    phase: str,
    message: str,
    event_key: str,
    **event_data: Any,
) -> None:
    """Log a phase activity message and structured event together.

    Args:
        run: RunContext for structured logging.
        phase: Phase name for activity logging (e.g., "package", "env").
        message: Human-readable message for activity output.
        event_key: Event key for structured logging (e.g., "package.config").
        **event_data: Additional data to include in the log event.
    """
    activity(phase, message)
    run.log_event({"event": event_key, **event_data})


def phase_error(
    run: RunContext,
    phase: str,
    message: str,
    exit_code: int,
    *,
    event_key: str | None = None,
    **event_data: Any,
) -> int:
    """Log a phase error and write summary, returning the exit code.

    Returns:
        The exit_code parameter, for use in `return phase_error(...)`.
    """
    activity(phase, f"ERROR: {message}")
    run.log_event(
        {
            "event": event_key or f"{phase}.error",
            "message": message,
            "exit_code": exit_code,
            **event_data,
        }
    )
    run.write_summary(status="failed", error=message, exit_code=exit_code)
    return exit_code


def phase_warning(run: RunContext, phase: str, message: str, **event_data: Any) -> None:
    activity(phase, f"WARNING: {message}")
    run.log_event({"event": f"{phase}.warning", "message": message, **event_data})


def check_pkg_builder_version(
    run: RunContext,
    phase: str,
    configured: str,
    running: str = __version__,
) -> None:
    """Refuse configs written for a newer pkg-builder; warn on older ones.

    Raises:
        ConfigError: ``configured`` is not a valid version.
        VersionMismatchError: ``configured`` is newer than ``running``.
    """
    try:
        Version(normalize_version(configured))
    except InvalidVersion:
        raise ConfigError(f"Invalid build_env.pkg_builder_version: {configured!r}") from None
    result = compare_versions(running, configured)
    if result > 0:
        raise VersionMismatchError(
            f"Config requires pkg-builder {configured}, but {running} is installed; please upgrade"
        )
    if result < 0:
        phase_warning(
            run,
            phase,
            f"Config was written for pkg-builder {configured}; running {running}",
            configured=configured,
            running=running,
        )


def load_config_for(run: RunContext, phase: str, config: str | None) -> PkgConfig:
    path = resolve_config_path(config)
    run.log_event({"event": f"{phase}.config", "path": str(path)})
    pkg_config = load_pkg_config(path)
    check_pkg_builder_version(run, phase, pkg_config.build_env.pkg_builder_version)
    return pkg_config


def with_build_env(pkg_config: PkgConfig, **overrides: Any) -> PkgConfig:
    """Return ``pkg_config`` with non-None build_env overrides applied."""
    values = {k: v for k, v in overrides.items() if v is not None}
    if not values:
        return pkg_config
    return dataclasses.replace(pkg_config, build_env=dataclasses.replace(pkg_config.build_env, **values))


def run_backend_command(
    phase: str,
    config: str | None,
    description: str,
    action: Callable[[BuildBackend], None],
    *,
    verbose: bool = False,
    overrides: dict[str, Any] | None = None,
) -> int:
    """Run one backend operation inside a RunContext and return an exit code.

    Args:
        phase: Command name; used for the run id, activity prefix and events.
        config: Config path argument as given on the command line.
        description: Spinner text shown while ``action`` runs.
        action: Operation to run against the dispatched backend.
        verbose: Mirror log output to the terminal.
        overrides: build_env fields to override, None values ignored.
    """
    with RunContext(phase, verbose=verbose) as run:
        try:
            pkg_config = load_config_for(run, phase, config)
            pkg_config = with_build_env(pkg_config, **(overrides or {}))
            run.record_package(pkg_config)
            fields = pkg_config.package_fields
            log_phase_event(
                run,
                phase,
                f"{fields.package_name} {fields.version_number}-{fields.revision_number} "
                f"for {pkg_config.build_env.codename} ({pkg_config.build_env.arch})",
                f"{phase}.start",
                package=fields.package_name,
                version=fields.version_number,
                codename=pkg_config.build_env.codename,
            )
            backend = get_backend(pkg_config)
            with activity_spinner(phase, description, disable=verbose):
                action(backend)
        except PkgBuilderError as e:
            return phase_error(run, phase, e.message, e.exit_code, error_type=type(e).__name__)

        log_phase_event(run, phase, "Done", f"{phase}.complete")
        run.write_summary(status="success", exit_code=EXIT_SUCCESS)
    return EXIT_SUCCESS
