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

""".nupkg generation for squirrelpack.

This module creates the intermediate NuGet package from the staged spec
file and application copy using NuGet.exe:

    NuGet.exe pack <nuget/name.nuspec> -BasePath <name/> \\
        -OutputDirectory <nuget/> -NoDefaultExcludes

-NoDefaultExcludes keeps dotfiles and other files NuGet would otherwise
drop, so the package holds the staged tree verbatim.

Example:
    from squirrelpack.build.packager import create_package, find_package

    create_package(options, staging_dir, nuget=Path("vendor/nuget/NuGet.exe"))
    package = find_package(options, staging_dir)
"""

from __future__ import annotations

from pathlib import Path

from squirrelpack.exceptions import ExecutionError, NotFoundError, PackagingError
from squirrelpack.io.process import Runner, run_tool
from squirrelpack.options import Options

from .content import application_dir, spec_path

PACKAGE_PATTERN = "*.nupkg"


def nuget_args(options: Options, staging_dir: Path) -> list[str]:
    """Build the NuGet.exe argument list for this run."""
    nuget_dir = staging_dir / "nuget"
    return [
        "pack",
        str(spec_path(options, staging_dir)),
        "-BasePath",
        str(application_dir(options, staging_dir)),
        "-OutputDirectory",
        str(nuget_dir),
        "-NoDefaultExcludes",
    ]


def create_package(
    options: Options,
    staging_dir: Path,
    nuget: Path,
    runner: Runner = run_tool,
) -> Path:
    """Run NuGet.exe to pack the staged application.

    Args:
        options: Resolved options.
        staging_dir: Staging directory containing nuget/ and <name>/.
        nuget: Path to NuGet.exe.
        runner: Process runner. Default: run_tool.

    Returns:
        The staging directory.

    Raises:
        PackagingError: If NuGet.exe fails.
    """
    options.logger.verbose("NUGET", f"Creating package at {staging_dir}")

    try:
        runner(nuget, nuget_args(options, staging_dir), options.logger)
    except ExecutionError as err:
        raise PackagingError(f"Error creating package: {err}") from err

    return staging_dir


def find_package(options: Options, staging_dir: Path) -> Path:
    """Locate the .nupkg NuGet.exe just wrote.

    Raises:
        NotFoundError: If nothing matches nuget/*.nupkg.
    """
    nuget_dir = staging_dir / "nuget"
    options.logger.verbose(
        "NUGET", f"Finding package with pattern {nuget_dir / PACKAGE_PATTERN}"
    )

    packages = sorted(nuget_dir.glob(PACKAGE_PATTERN))
    if not packages:
        raise NotFoundError(
            f"NuGet completed but no {PACKAGE_PATTERN} file found in {nuget_dir}"
        )

    options.logger.verbose("NUGET", f"[OK] Found package: {packages[0].name}")
    return packages[0]
