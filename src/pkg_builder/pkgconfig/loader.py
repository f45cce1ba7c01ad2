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

"""Loading and validation of ``pkg-builder.toml`` files."""

from __future__ import annotations

import logging
import tomllib
from pathlib import Path
from typing import Any

from pkg_builder.config import load_config
from pkg_builder.core.exceptions import ConfigError
from pkg_builder.distribution import Distribution
from pkg_builder.pkgconfig.models import (
    BuildEnv,
    DefaultPackage,
    DotnetConfig,
    DotnetPackage,
    GitPackage,
    GoConfig,
    GradleConfig,
    JavaConfig,
    JavascriptConfig,
    Language,
    LanguageEnv,
    NimConfig,
    PackageFields,
    PackageHash,
    PackageType,
    PkgConfig,
    RustConfig,
    SubModule,
    VirtualPackage,
)

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "pkg-builder.toml"
VERIFY_CONFIG_FILENAME = "pkg-builder-verify.toml"


def resolve_config_path(config: str | Path | None, cwd: Path | None = None) -> Path:
    """Resolve the config file from a CLI argument.

    An explicit file is used as-is, a directory is searched for
    ``pkg-builder.toml``, and no argument means the current directory.

    Raises:
        ConfigError: If the resolved file does not exist.
    """
    base = cwd or Path.cwd()
    if config is None:
        path = base / CONFIG_FILENAME
    else:
        path = Path(config).expanduser()
        if not path.is_absolute():
            path = base / path
        if path.is_dir():
            path = path / CONFIG_FILENAME
    if not path.is_file():
        raise ConfigError(f"Config file not found: {path}")
    return path.resolve()


def _read_toml(path: Path) -> dict[str, Any]:
    try:
        with path.open("rb") as f:
            return tomllib.load(f)
    except OSError as e:
        raise ConfigError(f"Failed to read config file {path}: {e}") from e
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"Invalid TOML in {path}: {e}") from e


def _table(data: dict[str, Any], key: str, where: str) -> dict[str, Any]:
    value = data.get(key)
    if not isinstance(value, dict):
        raise ConfigError(f"Missing section [{where}{key}]")
    return value


def _str(table: dict[str, Any], key: str, where: str) -> str:
    value = table.get(key)
    if value is None:
        raise ConfigError(f"Missing field {where}.{key}")
    if not isinstance(value, str):
        raise ConfigError(f"Field {where}.{key} must be a string")
    if not value.strip():
        raise ConfigError(f"Field {where}.{key} must not be empty")
    return value


def _optional_str(table: dict[str, Any], key: str, where: str) -> str | None:
    if table.get(key) is None:
        return None
    return _str(table, key, where)


def _bool(table: dict[str, Any], key: str, where: str, default: bool | None = None) -> bool:
    value = table.get(key, default)
    if not isinstance(value, bool):
        raise ConfigError(f"Field {where}.{key} must be a boolean")
    return value


def _list(table: dict[str, Any], key: str, where: str) -> list[Any]:
    value = table.get(key, [])
    if not isinstance(value, list):
        raise ConfigError(f"Field {where}.{key} must be a list")
    return value


def _expand_path(value: str | Path, root: Path) -> Path:
    path = Path(value).expanduser()
    if not path.is_absolute():
        path = root / path
    return path


def parse_language_env(table: dict[str, Any]) -> LanguageEnv:
    """Parse a ``[package_type.language_env]`` table."""
    where = "package_type.language_env"
    tag = _str(table, "language_env", where)
    try:
        language = Language(tag.lower())
    except ValueError:
        raise ConfigError(f"Unknown language_env: {tag}") from None

    if language is Language.RUST:
        return LanguageEnv(
            language,
            RustConfig(
                rust_version=_str(table, "rust_version", where),
                rust_binary_url=_str(table, "rust_binary_url", where),
                rust_binary_gpg_asc=_str(table, "rust_binary_gpg_asc", where),
            ),
        )
    if language is Language.GO:
        return LanguageEnv(
            language,
            GoConfig(
                go_version=_str(table, "go_version", where),
                go_binary_url=_str(table, "go_binary_url", where),
                go_binary_checksum=_str(table, "go_binary_checksum", where),
            ),
        )
    if language in (Language.JAVASCRIPT, Language.TYPESCRIPT):
        return LanguageEnv(
            language,
            JavascriptConfig(
                node_version=_str(table, "node_version", where),
                node_binary_url=_str(table, "node_binary_url", where),
                node_binary_checksum=_str(table, "node_binary_checksum", where),
                yarn_version=_optional_str(table, "yarn_version", where),
            ),
        )
    if language is Language.JAVA:
        gradle = None
        if table.get("gradle") is not None:
            gradle_table = _table(table, "gradle", f"{where}.")
            gwhere = f"{where}.gradle"
            gradle = GradleConfig(
                gradle_version=_str(gradle_table, "gradle_version", gwhere),
                gradle_binary_url=_str(gradle_table, "gradle_binary_url", gwhere),
                gradle_binary_checksum=_str(gradle_table, "gradle_binary_checksum", gwhere),
            )
        return LanguageEnv(
            language,
            JavaConfig(
                is_oracle=_bool(table, "is_oracle", where, default=False),
                jdk_version=_str(table, "jdk_version", where),
                jdk_binary_url=_str(table, "jdk_binary_url", where),
                jdk_binary_checksum=_str(table, "jdk_binary_checksum", where),
                gradle=gradle,
            ),
        )
    if language is Language.DOTNET:
        packages = []
        for i, entry in enumerate(_list(table, "dotnet_packages", where)):
            pwhere = f"{where}.dotnet_packages[{i}]"
            if not isinstance(entry, dict):
                raise ConfigError(f"Field {pwhere} must be a table")
            packages.append(
                DotnetPackage(
                    name=_str(entry, "name", pwhere),
                    hash=_str(entry, "hash", pwhere),
                    url=_str(entry, "url", pwhere),
                )
            )
        deps = None
        if table.get("deps") is not None:
            deps = tuple(str(dep) for dep in _list(table, "deps", where))
        return LanguageEnv(
            language,
            DotnetConfig(
                use_backup_version=_bool(table, "use_backup_version", where, default=False),
                dotnet_packages=tuple(packages),
                deps=deps,
            ),
        )
    if language is Language.NIM:
        return LanguageEnv(
            language,
            NimConfig(
                nim_version=_str(table, "nim_version", where),
                nim_binary_url=_str(table, "nim_binary_url", where),
                nim_version_checksum=_str(table, "nim_version_checksum", where),
            ),
        )
    return LanguageEnv(language)


def parse_package_type(table: dict[str, Any]) -> PackageType:
    """Parse the ``[package_type]`` table into its tagged variant."""
    where = "package_type"
    tag = _str(table, "package_type", where).lower()

    if tag == "virtual":
        return VirtualPackage()

    language_env = parse_language_env(_table(table, "language_env", f"{where}."))
    if tag == "default":
        return DefaultPackage(
            tarball_url=_str(table, "tarball_url", where),
            tarball_hash=_optional_str(table, "tarball_hash", where),
            language_env=language_env,
        )
    if tag == "git":
        submodules = []
        for i, entry in enumerate(_list(table, "submodules", where)):
            swhere = f"{where}.submodules[{i}]"
            if not isinstance(entry, dict):
                raise ConfigError(f"Field {swhere} must be a table")
            submodules.append(SubModule(commit=_str(entry, "commit", swhere), path=_str(entry, "path", swhere)))
        return GitPackage(
            git_tag=_str(table, "git_tag", where),
            git_url=_str(table, "git_url", where),
            submodules=tuple(submodules),
            language_env=language_env,
        )
    raise ConfigError(f"Unknown package_type: {tag}")


def parse_build_env(table: dict[str, Any], config_root: Path, defaults: dict[str, Any]) -> BuildEnv:
    """Parse ``[build_env]`` and fill in workdir/cache defaults."""
    where = "build_env"
    codename = _str(table, "codename", where)
    distribution = Distribution.from_codename(codename)
    paths = defaults.get("paths", {})

    workdir_value = _optional_str(table, "workdir", where)
    if workdir_value is None:
        workdir = Path(paths.get("workdir_root", "~/.pkg-builder/packages")).expanduser() / distribution.codename
    else:
        workdir = _expand_path(workdir_value, config_root)

    cache_value = _optional_str(table, "sbuild_cache_dir", where) or paths.get("sbuild_cache_dir", "~/.cache/sbuild")
    sbuild_cache_dir = _expand_path(cache_value, config_root)

    return BuildEnv(
        codename=codename,
        arch=_str(table, "arch", where),
        pkg_builder_version=_str(table, "pkg_builder_version", where),
        debcrafter_version=_str(table, "debcrafter_version", where),
        lintian_version=_str(table, "lintian_version", where),
        piuparts_version=_str(table, "piuparts_version", where),
        autopkgtest_version=_str(table, "autopkgtest_version", where),
        sbuild_version=_str(table, "sbuild_version", where),
        sbuild_cache_dir=sbuild_cache_dir,
        workdir=workdir,
        run_lintian=_bool(table, "run_lintian", where, default=False),
        run_piuparts=_bool(table, "run_piuparts", where, default=False),
        run_autopkgtest=_bool(table, "run_autopkgtest", where, default=False),
        docker=_bool(table, "docker", where, default=False),
    )


def parse_pkg_config(
    data: dict[str, Any],
    config_root: Path,
    defaults: dict[str, Any] | None = None,
) -> PkgConfig:
    """Build a validated PkgConfig from parsed TOML data.

    Args:
        data: Parsed TOML document.
        config_root: Directory relative paths are resolved against.
        defaults: User defaults; loaded from the user config when None.

    Raises:
        ConfigError: On missing sections, missing or empty fields, unknown
            tags, or an unsupported codename.
    """
    if defaults is None:
        defaults = load_config()

    fields_table = _table(data, "package_fields", "")
    where = "package_fields"
    package_fields = PackageFields(
        spec_file=_str(fields_table, "spec_file", where),
        package_name=_str(fields_table, "package_name", where),
        version_number=_str(fields_table, "version_number", where),
        revision_number=_str(fields_table, "revision_number", where),
        homepage=_str(fields_table, "homepage", where),
    )

    return PkgConfig(
        package_fields=package_fields,
        package_type=parse_package_type(_table(data, "package_type", "")),
        build_env=parse_build_env(_table(data, "build_env", ""), config_root, defaults),
        config_root=config_root,
    )


def load_pkg_config(path: Path, defaults: dict[str, Any] | None = None) -> PkgConfig:
    """Read and validate a ``pkg-builder.toml`` file."""
    logger.info(f"Loading package config from {path}")
    return parse_pkg_config(_read_toml(path), path.parent.resolve(), defaults)


def load_verify_config(path: Path) -> list[PackageHash]:
    """Read ``[verify] package_hash = [{name, hash}, ...]`` from a file."""
    if not path.is_file():
        raise ConfigError(f"Verify config file not found: {path}")
    data = _read_toml(path)
    verify = _table(data, "verify", "")
    hashes = []
    for i, entry in enumerate(_list(verify, "package_hash", "verify")):
        where = f"verify.package_hash[{i}]"
        if not isinstance(entry, dict):
            raise ConfigError(f"Field {where} must be a table")
        hashes.append(PackageHash(name=_str(entry, "name", where), hash=_str(entry, "hash", where)))
    return hashes
