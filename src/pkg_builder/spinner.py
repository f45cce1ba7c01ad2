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

"""Terminal feedback for long-running backend operations.

sbuild, chroot creation and autopkgtest can run for many minutes, so the
spinner shows elapsed time and the final line reports how long the step took.
Nothing here writes to the redirected run streams.
"""

from __future__ import annotations

import contextlib
import sys
import time
from collections.abc import Iterator

from rich.console import Console
from rich.live import Live
from rich.spinner import Spinner


def is_tty() -> bool:
    """Return True if the real stdout is a TTY."""
    stream = sys.__stdout__
    if stream is None:
        return False  # pragma: no cover
    try:
        return stream.isatty()
    except ValueError:
        return False


def format_elapsed(seconds: float) -> str:
    """Format a duration as ``42s``, ``3m05s`` or ``1h02m``."""
    total = int(seconds)
    if total < 60:
        return f"{total}s"
    minutes, secs = divmod(total, 60)
    if minutes < 60:
        return f"{minutes}m{secs:02d}s"
    hours, minutes = divmod(minutes, 60)
    return f"{hours}h{minutes:02d}m"


def _emit(line: str) -> None:
    with contextlib.suppress(Exception):
        print(line, file=sys.__stdout__, flush=True)


@contextlib.contextmanager
def activity_spinner(phase: str, description: str, disable: bool = False) -> Iterator[None]:
    """Show ``[phase] description`` while the wrapped block runs.

    On a TTY a Rich spinner animates with the elapsed time; otherwise, or
    with ``disable``, the line is printed once up front. Either way a closing
    line with the total duration is printed when the block succeeds.
    """
    text = f"[{phase}] {description}"
    started = time.monotonic()

    if disable or not is_tty():
        _emit(text)
        yield
    else:
        spinner = Spinner("dots", text=text)

        def _render() -> Spinner:
            spinner.update(text=f"{text} ({format_elapsed(time.monotonic() - started)})")
            return spinner

        console = Console(file=sys.__stdout__, force_terminal=True)
        with Live(console=console, refresh_per_second=4, transient=True, get_renderable=_render):
            yield

    _emit(f"{text} done in {format_elapsed(time.monotonic() - started)}")
