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

"""Core orchestration for squirrelpack.

This module provides create_installer(), which runs the complete pipeline
for turning a packaged Electron application into Squirrel installers:

1. Resolve options (package.json defaults, option bag, overrides)
2. Locate NuGet and Squirrel tools (downloading missing ones)
3. Create the staging directory and its nuget/ and squirrel/ subdirectories
4. Write the .nuspec and copy the application plus Update.exe
5. Run NuGet.exe pack and locate the .nupkg
6. Sync previous releases from the remote feed (if configured)
7. Run Squirrel --releasify
8. Move the artifacts to the destination

Stages run strictly in order; the first failure aborts the run and is
re-raised with its staging_dir attribute set. The staging directory is
never removed here. It is returned in the result (or on the error) so
the caller can inspect or remove it.

Design Principles:

- Each stage is a plain function in squirrelpack.build
- External tools run through an injectable runner for testing
- The logger is passed in; there is no process-wide logger
- Error handling uses exceptions; CLI layer formats for user display

Example:
    Programmatic usage:
        ```python
        from pathlib import Path
        from squirrelpack import create_installer

        result = create_installer(
            Path("dist/app-win32-x64"),
            Path("dist/installers"),
            options={"remoteReleases": "https://example.com/releases"},
            noMsi=True,
        )

        for artifact in result.artifacts:
            print(artifact)
        ```
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Mapping

import yaml

from squirrelpack.build.content import create_contents
from squirrelpack.build.mover import move_package
from squirrelpack.build.packager import create_package, find_package
from squirrelpack.build.releases import releasify_package, sync_remote_releases
from squirrelpack.build.staging import create_staging_dir, create_subdirs
from squirrelpack.build.tools import (
    NUGET,
    SYNC_RELEASES,
    UPDATER,
    ensure_tools,
    find_tool,
    release_tool,
)
from squirrelpack.exceptions import SquirrelPackError
from squirrelpack.io.process import Runner, run_tool
from squirrelpack.logging import Logger, SilentLogger
from squirrelpack.metadata import resolve_options
from squirrelpack.options import Options, RenameFunc
from squirrelpack.results import InstallerResult

TOTAL_STEPS = 8


def _log_options(options: Options, logger: Logger) -> None:
    printable = {
        key: str(value) if isinstance(value, Path) else value
        for key, value in options.summary().items()
    }
    logger.debug(
        "META",
        "Creating package with options:\n"
        + yaml.safe_dump(printable, default_flow_style=False, sort_keys=False).rstrip(),
    )


def _locate_tools(options: Options, logger: Logger) -> dict[str, Path]:
    vendor_dir = ensure_tools(options.vendor_directory, logger)
    tools = {
        "nuget": find_tool(vendor_dir, NUGET),
        "updater": find_tool(vendor_dir, UPDATER),
        "squirrel": find_tool(vendor_dir, release_tool()),
    }
    if options.remote_releases:
        tools["sync"] = find_tool(vendor_dir, SYNC_RELEASES)
    for key, path in tools.items():
        logger.verbose("TOOLS", f"{key}: {path}")
    return tools


def create_installer(
    src: Path | str,
    dest: Path | str,
    *,
    options: Mapping[str, Any] | None = None,
    rename: RenameFunc | None = None,
    logger: Logger | None = None,
    runner: Runner | None = None,
    **overrides: Any,
) -> InstallerResult:
    """Package an Electron application into Squirrel installers.

    Args:
        src: Directory containing the packaged application (the output of
            an Electron packager, with resources/app.asar or
            resources/app/package.json).
        dest: Directory that receives the final artifacts.
        options: Option bag; camelCase (productName) and snake_case
            (product_name) keys are both accepted.
        rename: Maps (dest, basename) to an artifact's final path, which
            may contain ${field} placeholders. Default:
            "<dest>/${name}-${version}-setup.<ext>" for installers.
        logger: Diagnostic sink. Default is silent.
        runner: Process runner for the external tools. Default: run_tool.
        **overrides: Explicit options; these win over the option bag and
            package.json.

    Returns:
        InstallerResult with the resolved options, the staging directory
        and the final artifact paths.

    Raises:
        MetadataError: If package.json cannot be read or required fields
            are missing. Raised before anything touches the filesystem.
        NotFoundError: If a tool or the intermediate .nupkg is missing.
        StagingError, ContentError, PackagingError, SyncError,
        ReleaseError, MoveError: If the corresponding stage fails.
        NetworkError: If tool provisioning has to download and fails.

        Every error raised carries staging_dir: the staging directory of
        the failed run, or None if it failed before staging.

    Example:
        Custom rename keeping the original file names:
            ```python
            result = create_installer(
                "dist/app", "dist/out",
                rename=lambda dest, name: f"{dest}/${{version}}/{name}",
            )
            ```
    """
    logger = logger or SilentLogger()
    runner = runner or run_tool
    staging_dir: Path | None = None

    try:
        logger.step(1, TOTAL_STEPS, "Reading package metadata...")
        resolved = resolve_options(
            src, dest, options, rename=rename, logger=logger, **overrides
        )
        _log_options(resolved, logger)

        logger.step(2, TOTAL_STEPS, "Locating NuGet and Squirrel tools...")
        tools = _locate_tools(resolved, logger)

        logger.step(3, TOTAL_STEPS, "Creating staging directory...")
        staging_dir = create_staging_dir(resolved)
        create_subdirs(resolved, staging_dir)

        logger.step(4, TOTAL_STEPS, "Creating package contents...")
        create_contents(resolved, staging_dir, tools["updater"])

        logger.step(5, TOTAL_STEPS, "Creating NuGet package...")
        create_package(resolved, staging_dir, tools["nuget"], runner)
        package = find_package(resolved, staging_dir)

        logger.step(6, TOTAL_STEPS, "Syncing remote releases...")
        if "sync" in tools:
            sync_remote_releases(resolved, staging_dir, tools["sync"], runner)
        else:
            logger.verbose("SYNC", "No remote releases configured, skipping sync")

        logger.step(7, TOTAL_STEPS, "Releasifying package...")
        releasify_package(resolved, staging_dir, package, tools["squirrel"], runner)

        logger.step(8, TOTAL_STEPS, "Moving artifacts to destination...")
        artifacts = move_package(resolved, staging_dir)
    except SquirrelPackError as err:
        err.staging_dir = staging_dir
        logger.verbose("CORE", f"Error creating package: {err}")
        if staging_dir is not None:
            logger.verbose("CORE", f"Staging directory left at {staging_dir}")
        raise

    logger.verbose("CORE", f"Successfully created package at {resolved.dest}")

    return InstallerResult(
        options=resolved,
        dest=resolved.dest,
        staging_dir=staging_dir,
        package_path=package,
        artifacts=artifacts,
    )
