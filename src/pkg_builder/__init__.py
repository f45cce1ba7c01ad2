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

"""pkg-builder: reproducible Debian and Ubuntu package builds driven by sbuild."""

__version__ = "0.3.1"
