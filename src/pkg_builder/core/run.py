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

"""Per-invocation run directories.

Every CLI command runs inside a :class:`RunContext`. The run directory keeps
what a failed build leaves behind for inspection::

    <runs_root>/<run id>/
        summary.json          package identity, status, exit code
        logs/build.log        log records, including streamed tool output
        logs/stdout.log       anything printed while the run is active
        logs/stderr.log       Python-level stderr; child processes keep the terminal
        logs/events.jsonl     structured command events

Terminal feedback bypasses the redirected streams through ``sys.__stdout__``.
"""

from __future__ import annotations

import contextlib
import datetime
import json
import logging
import sys
import uuid
from pathlib import Path
from typing import IO, TYPE_CHECKING, Any

from pkg_builder import __version__
from pkg_builder.config import load_config

if TYPE_CHECKING:
    from pkg_builder.pkgconfig.models import PkgConfig

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def _utcnow() -> datetime.datetime:
    return datetime.datetime.now(datetime.UTC)


class RunContext:
    """Context manager owning the run directory and log capture for one command.

    Usage:
        with RunContext("package") as run:
            run.record_package(pkg_config)
            run.log_event({"event": "package.start"})
    """

    def __init__(self, command: str, verbose: bool = False) -> None:
        self.command = command
        self.cfg = load_config()
        # --verbose on the command line or behavior.verbose in config.yaml
        self.verbose = verbose or bool(self.cfg["behavior"].get("verbose", False))
        started = _utcnow()
        self.run_id = f"{started:%Y%m%dT%H%M%SZ}-{command}-{uuid.uuid4().hex[:8]}"
        self.run_path = Path(self.cfg["paths"]["runs_root"]) / self.run_id
        self.logs_path = self.run_path / "logs"
        self.summary: dict[str, Any] = {
            "command": command,
            "pkg_builder_version": __version__,
            "start_utc": started.isoformat(),
        }
        self._streams: dict[str, IO[str]] = {}
        self._handlers: list[logging.Handler] = []
        self._saved_streams = (sys.stdout, sys.stderr)
        self._saved_level = logging.getLogger().level

    def _open(self, name: str, mode: str = "w") -> IO[str]:
        stream = (self.logs_path / name).open(mode, encoding="utf-8")
        self._streams[name] = stream
        return stream

    def __enter__(self) -> RunContext:
        self.logs_path.mkdir(parents=True, exist_ok=True)
        sys.stdout = self._open("stdout.log")
        sys.stderr = self._open("stderr.log")
        self._open("events.jsonl", "a")

        file_handler = logging.StreamHandler(self._open("build.log"))
        file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
        self._handlers.append(file_handler)
        if self.verbose and sys.__stdout__ is not None:
            self._handlers.append(logging.StreamHandler(sys.__stdout__))

        root = logging.getLogger()
        for handler in self._handlers:
            root.addHandler(handler)
        root.setLevel(logging.INFO)

        self.log_event({"event": "run.start", "run_id": self.run_id})
        return self

    def log_event(self, event: dict[str, Any]) -> None:
        """Append one timestamped JSON line to events.jsonl."""
        events = self._streams.get("events.jsonl")
        if events is None:  # pragma: no cover
            return
        events.write(json.dumps({"timestamp": _utcnow().isoformat(), **event}, default=str) + "\n")
        events.flush()

    def record_package(self, pkg_config: PkgConfig) -> None:
        """Add the package being built to the run summary."""
        fields = pkg_config.package_fields
        env = pkg_config.build_env
        self.summary.update(
            package=fields.package_name,
            version=f"{fields.version_number}-{fields.revision_number}",
            codename=env.codename,
            arch=env.arch,
            workdir=str(env.workdir),
        )

    def write_summary(self, **kwargs: Any) -> None:
        self.summary.update(kwargs)
        (self.run_path / "summary.json").write_text(json.dumps(self.summary, indent=2, default=str))

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: object,
    ) -> bool | None:
        status = "failed" if exc is not None else self.summary.get("status", "success")
        if exc is not None:
            self.summary.setdefault("error", str(exc))
        self.write_summary(status=status, end_utc=_utcnow().isoformat())

        with contextlib.suppress(ValueError):
            self.log_event({"event": "run.end", "status": status})

        root = logging.getLogger()
        for handler in self._handlers:
            root.removeHandler(handler)
        root.setLevel(self._saved_level)
        self._handlers.clear()

        try:
            for stream in self._streams.values():
                stream.close()
        finally:
            sys.stdout, sys.stderr = self._saved_streams
            self._streams.clear()

        if status != "success":
            activity("report", f"Build logs: {self.logs_path}")

        return None


def activity(phase: str, description: str) -> None:
    """Print a ``[phase] description`` line on the real terminal."""
    with contextlib.suppress(Exception):
        print(f"[{phase}] {description}", file=sys.__stdout__, flush=True)
