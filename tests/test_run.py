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

"""Tests for pkg_builder.core.run module."""

from __future__ import annotations

import json
import logging
import re
import sys
from collections.abc import Callable
from pathlib import Path

import pytest

from pkg_builder import __version__
from pkg_builder.core import run
from pkg_builder.pkgconfig.loader import load_pkg_config


class TestRunContext:
    """Tests for RunContext class."""

    def test_creates_run_directory(self, mock_config: Path) -> None:
        with run.RunContext("package") as ctx:
            assert ctx.logs_path.is_dir()

    def test_run_directory_under_runs_root(self, temp_home: Path, mock_config: Path) -> None:
        with run.RunContext("package") as ctx:
            assert ctx.run_path.parent == temp_home / ".cache" / "pkg-builder" / "runs"

    def test_run_id_format(self, mock_config: Path) -> None:
        with run.RunContext("verify") as ctx:
            assert re.match(r"^\d{8}T\d{6}Z-verify-[a-f0-9]{8}$", ctx.run_id)

    def test_captures_stdout_and_stderr(self, mock_config: Path) -> None:
        with run.RunContext("package") as ctx:
            print("to stdout")
            print("to stderr", file=sys.stderr)

        assert "to stdout" in (ctx.logs_path / "stdout.log").read_text()
        assert "to stderr" in (ctx.logs_path / "stderr.log").read_text()

    def test_restores_streams(self, mock_config: Path) -> None:
        before_out, before_err = sys.stdout, sys.stderr
        with run.RunContext("package"):
            pass
        assert sys.stdout is before_out
        assert sys.stderr is before_err

    def test_log_records_reach_build_log(self, mock_config: Path) -> None:
        with run.RunContext("package") as ctx:
            logging.getLogger("pkg_builder.test").info("sbuild output line")

        content = (ctx.logs_path / "build.log").read_text()
        assert "sbuild output line" in content
        assert "INFO" in content
        assert "sbuild output line" not in (ctx.logs_path / "stdout.log").read_text()

    def test_verbose_from_user_config(self, mock_config: Path) -> None:
        mock_config.write_text("behavior:\n  verbose: true\n")
        assert run.RunContext("package").verbose is True

    def test_verbose_flag(self, mock_config: Path) -> None:
        assert run.RunContext("package").verbose is False
        assert run.RunContext("package", verbose=True).verbose is True

    def test_removes_logging_handlers(self, mock_config: Path) -> None:
        root = logging.getLogger()
        before = list(root.handlers)
        with run.RunContext("package"):
            assert len(root.handlers) > len(before)
        assert root.handlers == before

    def test_events_jsonl(self, mock_config: Path) -> None:
        with run.RunContext("package") as ctx:
            ctx.log_event({"event": "custom", "data": "value"})

        lines = (ctx.logs_path / "events.jsonl").read_text().strip().splitlines()
        events = [json.loads(line) for line in lines]
        assert events[0]["event"] == "run.start"
        assert events[-1]["event"] == "run.end"
        custom = [e for e in events if e["event"] == "custom"]
        assert custom[0]["data"] == "value"
        assert "timestamp" in custom[0]

    def test_summary_success(self, mock_config: Path) -> None:
        with run.RunContext("package") as ctx:
            pass

        summary = json.loads((ctx.run_path / "summary.json").read_text())
        assert summary["command"] == "package"
        assert summary["status"] == "success"
        assert "end_utc" in summary
        assert summary["pkg_builder_version"] == __version__

    def test_summary_records_package(self, mock_config: Path, pkg_config_file: Callable[..., Path]) -> None:
        pkg_config = load_pkg_config(pkg_config_file())
        with run.RunContext("package") as ctx:
            ctx.record_package(pkg_config)

        summary = json.loads((ctx.run_path / "summary.json").read_text())
        assert summary["package"] == pkg_config.package_fields.package_name
        assert summary["codename"] == pkg_config.build_env.codename
        assert summary["arch"] == pkg_config.build_env.arch

    def test_summary_failed_on_exception(self, mock_config: Path) -> None:
        with pytest.raises(RuntimeError), run.RunContext("package") as ctx:
            raise RuntimeError("broken")

        summary = json.loads((ctx.run_path / "summary.json").read_text())
        assert summary["status"] == "failed"
        assert summary["error"] == "broken"

    def test_summary_keeps_explicit_status(self, mock_config: Path) -> None:
        with run.RunContext("package") as ctx:
            ctx.write_summary(status="failed", exit_code=4)

        summary = json.loads((ctx.run_path / "summary.json").read_text())
        assert summary["status"] == "failed"
        assert summary["exit_code"] == 4


class TestActivity:
    """Tests for activity function."""

    def test_prints_phase_and_description(self, capsys: pytest.CaptureFixture[str], monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr("sys.__stdout__", sys.stdout)
        run.activity("package", "Building hello-world")
        assert "[package] Building hello-world" in capsys.readouterr().out
