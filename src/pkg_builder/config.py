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

"""User-level defaults for pkg-builder.

Per-package settings live in ``pkg-builder.toml``; this file only holds the
machine-wide defaults that apply when a package config leaves them unset.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml

logger = logging.getLogger(__name__)

DEFAULT_CONFIG: dict[str, Any] = {
    "paths": {
        "runs_root": "~/.cache/pkg-builder/runs",
        "workdir_root": "~/.pkg-builder/packages",
        "sbuild_cache_dir": "~/.cache/sbuild",
    },
    "behavior": {"verbose": False},
}


def get_config_path() -> Path:
    """Return the path to the user config file."""
    return Path.home() / ".config" / "pkg-builder" / "config.yaml"


def ensure_config_exists() -> None:
    """Create the config file with defaults if it does not exist."""
    cfg_path = get_config_path()
    cfg_path.parent.mkdir(parents=True, exist_ok=True)
    if not cfg_path.exists():
        cfg_path.write_text(yaml.safe_dump(DEFAULT_CONFIG))


def load_config() -> dict[str, Any]:
    """Load the user config and merge it over DEFAULT_CONFIG.

    Top-level sections are merged shallowly; ``paths`` entries are returned
    with ``~`` expanded.
    """
    ensure_config_exists()
    cfg_path = get_config_path()
    try:
        raw = yaml.safe_load(cfg_path.read_text()) or {}
    except yaml.YAMLError as e:
        logger.warning(f"Ignoring unreadable user config {cfg_path}: {e}")
        raw = {}
    if not isinstance(raw, dict):
        logger.warning(f"Ignoring user config {cfg_path}: expected a mapping")
        raw = {}

    merged: dict[str, Any] = {}
    for key, val in DEFAULT_CONFIG.items():
        if key in raw and isinstance(raw[key], dict):
            merged[key] = {**val, **raw[key]}
        elif isinstance(val, dict):
            merged[key] = dict(val)
        else:
            merged[key] = raw.get(key, val)

    for pkey, pval in merged.get("paths", {}).items():
        merged["paths"][pkey] = str(Path(pval).expanduser())

    return merged
