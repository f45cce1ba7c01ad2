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

"""Chroot setup commands that install a language toolchain.

Most languages are described by a shell recipe under ``recipes/``; each
recipe line becomes one ``--chroot-setup-commands`` entry after its
``${placeholder}`` tokens are replaced with values from the package config.
.NET is assembled in code because its commands depend on the target
release.
"""

from __future__ import annotations

from importlib import resources

from pkg_builder.distribution import BOOKWORM, JAMMY, NOBLE, Distribution
from pkg_builder.pkgconfig.models import (
    DotnetConfig,
    GoConfig,
    JavaConfig,
    JavascriptConfig,
    Language,
    LanguageEnv,
    NimConfig,
    RustConfig,
)

MICROSOFT_PROD_DEB = "https://packages.microsoft.com/config/debian/12/packages-microsoft-prod.deb"


def load_recipe(name: str) -> str:
    return resources.files("pkg_builder.installers").joinpath("recipes", f"{name}.sh").read_text()


def render_recipe(recipe: str, substitutions: dict[str, str]) -> list[str]:
    """Turn recipe text into trimmed, substituted commands, one per line."""
    commands = []
    for line in recipe.splitlines():
        command = line.strip()
        if not command:
            continue
        for key, value in substitutions.items():
            command = command.replace(f"${{{key}}}", value)
        commands.append(command)
    return commands


class LanguageInstaller:
    """Base installer; languages without a toolchain install nothing."""

    recipes: tuple[str, ...] = ()

    def recipe(self) -> str:
        return "\n".join(load_recipe(name) for name in self.recipes)

    def substitutions(self) -> dict[str, str]:
        return {}

    def build_deps(self, arch: str, distribution: Distribution) -> list[str]:
        return render_recipe(self.recipe(), self.substitutions())

    def test_deps(self, distribution: Distribution) -> list[str]:
        return []


class EmptyInstaller(LanguageInstaller):
    pass


class RustInstaller(LanguageInstaller):
    recipes = ("rust_installer",)

    def __init__(self, config: RustConfig) -> None:
        self.config = config

    def substitutions(self) -> dict[str, str]:
        return {
            "rust_binary_url": self.config.rust_binary_url,
            "rust_binary_gpg_asc": self.config.rust_binary_gpg_asc,
        }


class GoInstaller(LanguageInstaller):
    recipes = ("go_installer",)

    def __init__(self, config: GoConfig) -> None:
        self.config = config

    def substitutions(self) -> dict[str, str]:
        return {
            "go_binary_url": self.config.go_binary_url,
            "go_binary_checksum": self.config.go_binary_checksum,
        }


class NodeInstaller(LanguageInstaller):
    """Node.js, plus yarn through corepack when a yarn version is set."""

    def __init__(self, config: JavascriptConfig) -> None:
        self.config = config
        self.recipes = ("node_installer", "yarn_installer") if config.yarn_version else ("node_installer",)

    def substitutions(self) -> dict[str, str]:
        subs = {
            "node_version": self.config.node_version,
            "node_binary_url": self.config.node_binary_url,
            "node_binary_checksum": self.config.node_binary_checksum,
        }
        if self.config.yarn_version:
            subs["yarn_version"] = self.config.yarn_version
        return subs


class JavaInstaller(LanguageInstaller):
    def __init__(self, config: JavaConfig) -> None:
        self.config = config
        self.recipes = ("java_installer", "java_gradle_installer") if config.gradle else ("java_installer",)

    def substitutions(self) -> dict[str, str]:
        subs = {
            "jdk_version": self.config.jdk_version,
            "jdk_binary_url": self.config.jdk_binary_url,
            "jdk_binary_checksum": self.config.jdk_binary_checksum,
        }
        gradle = self.config.gradle
        if gradle:
            subs.update(
                gradle_version=gradle.gradle_version,
                gradle_binary_url=gradle.gradle_binary_url,
                gradle_binary_checksum=gradle.gradle_binary_checksum,
            )
        return subs


class NimInstaller(LanguageInstaller):
    recipes = ("nim_installer",)

    def __init__(self, config: NimConfig) -> None:
        self.config = config

    def substitutions(self) -> dict[str, str]:
        return {
            "nim_version": self.config.nim_version,
            "nim_binary_url": self.config.nim_binary_url,
            "nim_version_checksum": self.config.nim_version_checksum,
        }


def transform_name(name: str, arch: str) -> str:
    """Turn a .deb basename into an apt ``package=version`` spec.

    ``dotnet-host-8.0_8.0.4-0ubuntu1_amd64`` becomes
    ``dotnet-host-8.0=8.0.4-0ubuntu1``.
    """
    pos = name.find(f"_{arch}")
    if pos != -1:
        name = name[:pos]
    return name.replace("_", "=")


class DotnetInstaller(LanguageInstaller):
    def __init__(self, config: DotnetConfig) -> None:
        self.config = config

    def _microsoft_repo(self) -> list[str]:
        return [
            "apt install -y wget",
            f"cd /tmp && wget -q {MICROSOFT_PROD_DEB} -O packages-microsoft-prod.deb",
            "cd /tmp && dpkg -i packages-microsoft-prod.deb",
        ]

    def build_deps(self, arch: str, distribution: Distribution) -> list[str]:
        packages = self.config.dotnet_packages
        commands: list[str] = []

        if self.config.use_backup_version:
            commands += ["apt install -y wget", "apt install -y libicu-dev"]
            commands += [f"apt install -y {dep}" for dep in self.config.deps or ()]
            for package in packages:
                commands += [
                    f"cd /tmp && wget -q {package.url}",
                    f"cd /tmp && ls && dpkg -i {package.name}.deb",
                    f"cd /tmp && ls && sha1sum {package.name}.deb",
                    f"cd /tmp && echo {package.hash} {package.name}.deb > hash_file.txt && cat hash_file.txt",
                    "cd /tmp && sha1sum -c hash_file.txt",
                ]
        elif distribution in (BOOKWORM, JAMMY):
            commands += [*self._microsoft_repo(), "apt update -y"]
            for package in packages:
                pkg = transform_name(package.name, arch)
                commands += [
                    f"cd /tmp && wget -q {package.url}",
                    f"cd /tmp && apt install -y --allow-downgrades {pkg}",
                    f"cd /tmp && apt download -y {pkg}",
                    f"cd /tmp && ls && sha1sum {package.name}.deb",
                    f"cd /tmp && echo {package.hash} {package.name}.deb >> hash_file.txt && cat hash_file.txt",
                    "cd /tmp && sha1sum -c hash_file.txt",
                ]
        elif distribution == NOBLE:
            commands += [
                "apt-get install software-properties-common -y",
                "add-apt-repository ppa:dotnet/backports",
                "apt-get update -y",
                "apt install -y wget",
            ]
            for package in packages:
                pkg = transform_name(package.name, arch)
                commands += [
                    f"cd /tmp && wget -q {package.url}",
                    f"cd /tmp && apt install -y {pkg}",
                    f"cd /tmp && apt download -y {pkg}",
                    f"cd /tmp && ls && sha1sum {package.name}.deb",
                    f"cd /tmp && echo {package.hash} {package.name}.deb >> hash_file.txt && cat hash_file.txt",
                    "cd /tmp && sha1sum -c hash_file.txt",
                ]
        else:
            return []

        commands += ["dotnet --version", "apt remove -y wget"]
        return commands

    def test_deps(self, distribution: Distribution) -> list[str]:
        if distribution not in (BOOKWORM, JAMMY):
            return []
        return [*self._microsoft_repo(), "apt-get update -y", "apt remove -y wget"]


def installer_for(language_env: LanguageEnv | None) -> LanguageInstaller:
    """Return the installer for a language environment.

    Virtual packages (no environment), C and Python install nothing.
    """
    if language_env is None:
        return EmptyInstaller()
    language, config = language_env.language, language_env.config
    if language is Language.RUST and isinstance(config, RustConfig):
        return RustInstaller(config)
    if language is Language.GO and isinstance(config, GoConfig):
        return GoInstaller(config)
    if language in (Language.JAVASCRIPT, Language.TYPESCRIPT) and isinstance(config, JavascriptConfig):
        return NodeInstaller(config)
    if language is Language.JAVA and isinstance(config, JavaConfig):
        return JavaInstaller(config)
    if language is Language.DOTNET and isinstance(config, DotnetConfig):
        return DotnetInstaller(config)
    if language is Language.NIM and isinstance(config, NimConfig):
        return NimInstaller(config)
    return EmptyInstaller()
