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

"""Staging directory management for squirrelpack.

Every pipeline run gets its own temporary tree:

    <tmp>/electron-XXXXXX/            (unique root from tempfile.mkdtemp)
        <name>_<version>/             (staging dir returned to the pipeline)
            nuget/                    (.nuspec + intermediate .nupkg)
            squirrel/                 (RELEASES, full/delta .nupkg, Setup.exe, .msi)
            <name>/                   (application copy, created by content)

The pipeline never removes the tree; the caller does, after the artifacts
have been moved out (see cleanup_staging).
"""

from __future__ import annotations

from pathlib import Path
import shutil
import tempfile

from squirrelpack.exceptions import StagingError
from squirrelpack.options import Options

STAGING_PREFIX = "electron-"
SUBDIRS = ("nuget", "squirrel")


def create_staging_dir(options: Options, base_dir: Path | None = None) -> Path:
    """Create a unique temporary directory for this run.

    Args:
        options: Resolved options (name and version name the subdirectory).
        base_dir: Parent for the temporary root. Default: system temp dir.

    Returns:
        Path to <root>/<name>_<version>.

    Raises:
        StagingError: If any directory cannot be created.
    """
    logger = options.logger
    logger.verbose("STAGE", "Creating temporary directory")

    try:
        root = Path(tempfile.mkdtemp(prefix=STAGING_PREFIX, dir=base_dir))
        staging_dir = root / f"{options.name}_{options.version}"
        staging_dir.mkdir(parents=True, exist_ok=True)
    except OSError as err:
        raise StagingError(f"Error creating temporary directory: {err}") from err

    logger.verbose("STAGE", f"Created temporary directory: {staging_dir}")
    return staging_dir


def create_subdirs(options: Options, staging_dir: Path) -> Path:
    """Create the nuget/ and squirrel/ subdirectories.

    Raises:
        StagingError: If a subdirectory cannot be created.
    """
    options.logger.verbose("STAGE", f"Creating subdirectories under {staging_dir}")

    try:
        for sub in SUBDIRS:
            (staging_dir / sub).mkdir(parents=True, exist_ok=True)
    except OSError as err:
        raise StagingError(f"Error creating temporary subdirectories: {err}") from err

    return staging_dir


def cleanup_staging(staging_dir: Path) -> None:
    """Remove the whole temporary tree that holds staging_dir.

    Safe to call on a tree that is already gone.
    """
    root = Path(staging_dir).parent
    if root.name.startswith(STAGING_PREFIX):
        shutil.rmtree(root, ignore_errors=True)
    else:
        shutil.rmtree(staging_dir, ignore_errors=True)
