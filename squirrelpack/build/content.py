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

"""Package content generation for squirrelpack.

Fills the staging directory with everything NuGet needs:

    nuget/<name>.nuspec     rendered from the spec template
    <name>/...              copy of the application directory
    <name>/Update.exe       the Squirrel updater

The .nuspec and the application copy write to disjoint paths, so
create_contents() runs them side by side and waits for both. The first
failure (in submission order) is raised once both have finished.

Example:
    from squirrelpack.build.content import create_contents

    create_contents(options, staging_dir, updater=Path("vendor/squirrel/Squirrel.exe"))
"""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor, wait
from pathlib import Path
import shutil

from squirrelpack.exceptions import ContentError
from squirrelpack.options import Options

from .template import generate_spec

UPDATER_NAME = "Update.exe"


def spec_path(options: Options, staging_dir: Path) -> Path:
    """Return where the .nuspec file for this run lives."""
    return staging_dir / "nuget" / f"{options.name}.nuspec"


def application_dir(options: Options, staging_dir: Path) -> Path:
    """Return where the application copy for this run lives."""
    return staging_dir / options.name


def create_spec(options: Options, staging_dir: Path) -> Path:
    """Render the .nuspec template and write it into nuget/.

    Returns:
        Path to the written .nuspec file.

    Raises:
        ContentError: If rendering or writing fails.
    """
    spec_dest = spec_path(options, staging_dir)
    options.logger.verbose("CONTENT", f"Creating spec file at {spec_dest}")

    try:
        text = generate_spec(options)
        spec_dest.parent.mkdir(parents=True, exist_ok=True)
        spec_dest.write_text(text, encoding="utf-8")
    except (ContentError, OSError) as err:
        raise ContentError(f"Error creating spec file: {err}") from err

    return spec_dest


def create_application(options: Options, staging_dir: Path, updater: Path) -> Path:
    """Copy the application tree and the updater into the staging directory.

    Args:
        options: Resolved options (src is the tree to copy).
        staging_dir: Staging directory for this run.
        updater: Squirrel.exe, copied into the application root as Update.exe.

    Returns:
        Path to the application copy.

    Raises:
        ContentError: If either copy fails.
    """
    app_dir = application_dir(options, staging_dir)
    options.logger.verbose("CONTENT", f"Copying application to {app_dir}")

    try:
        shutil.copytree(options.src, app_dir, symlinks=True, dirs_exist_ok=True)
        shutil.copy2(updater, app_dir / UPDATER_NAME)
    except OSError as err:
        raise ContentError(f"Error copying application directory: {err}") from err

    options.logger.verbose("CONTENT", f"[OK] Copied {UPDATER_NAME} into {app_dir}")
    return app_dir


def create_contents(options: Options, staging_dir: Path, updater: Path) -> Path:
    """Create the .nuspec and the application copy concurrently.

    Returns:
        The staging directory.

    Raises:
        ContentError: The first failure among the two sub-operations.
    """
    options.logger.verbose("CONTENT", "Creating contents of package")

    with ThreadPoolExecutor(max_workers=2) as pool:
        futures = [
            pool.submit(create_spec, options, staging_dir),
            pool.submit(create_application, options, staging_dir, updater),
        ]
        wait(futures)

    for future in futures:
        future.result()

    return staging_dir
