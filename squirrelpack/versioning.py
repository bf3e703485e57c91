# Copyright 2025 Roger Cibrian
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""Version string handling for NuGet/Squirrel packages.

NuGet 2.x (which Squirrel.Windows relies on) only accepts a single
alphanumeric pre-release label: "1.0.0-beta1" is valid, "1.0.0-beta.1"
is not. Semantic versions coming from package.json therefore have the
dots removed from their pre-release suffix before they are written into
the .nuspec file.

Examples:
    >>> normalize_version("1.0.0")
    '1.0.0'
    >>> normalize_version("1.0.0-beta.1")
    '1.0.0-beta1'
    >>> normalize_version("2.1.0-rc.1.2")
    '2.1.0-rc12'
    >>> normalize_version("1.0.0-alpha-2.1")
    '1.0.0-alpha-21'
"""

from __future__ import annotations

__all__ = ["normalize_version"]


def normalize_version(version: str) -> str:
    """Collapse a semver pre-release suffix into a NuGet-compatible label.

    Splits on the first "-" and strips every "." from the remainder. The
    release segment (before the "-") is never modified.

    Args:
        version: Semantic version string (e.g., "1.2.3-beta.4").

    Returns:
        The version with a dot-free pre-release label (e.g., "1.2.3-beta4").
    """
    main, sep, prerelease = version.partition("-")
    if not sep:
        return main
    return f"{main}-{prerelease.replace('.', '')}"
