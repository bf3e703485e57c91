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

"""Artifact relocation for squirrelpack.

Moves everything in the staging squirrel/ directory to the destination.
Each file's final path comes from the rename function, after which
${field} placeholders are filled from the options:

    rename(dest, "Setup.exe")   -> "<dest>/${name}-${version}-setup.exe"
    substitution                -> "<dest>/footest-0.0.1-setup.exe"

Unknown placeholders are left as-is, and the destination directory itself
is never substituted, so literal "$" characters in paths survive.
Existing files at the destination are overwritten. Moves run concurrently;
all are attempted, and completed moves are not rolled back when another
one fails.

Example:
    from squirrelpack.build.mover import move_package

    moved = move_package(options, staging_dir)
"""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
import shutil
import string
import time

from squirrelpack.exceptions import MoveError
from squirrelpack.options import Options

INSTALLER_EXTENSIONS = (".exe", ".msi")


def default_rename(dest: Path, basename: str) -> str:
    """Name installers "<name>-<version>-setup.<ext>"; keep everything else.

    Example:
        >>> default_rename(Path("out"), "Setup.exe")
        'out/${name}-${version}-setup.exe'
        >>> default_rename(Path("out"), "RELEASES")
        'out/RELEASES'
    """
    ext = Path(basename).suffix
    if ext.lower() in INSTALLER_EXTENSIONS:
        basename = "${name}-${version}-setup" + ext
    return str(Path(dest) / basename)


def compute_destination(options: Options, file: Path) -> Path:
    """Apply the rename function and option substitution to one artifact.

    Only the part of the rename result after the destination directory is
    substituted, so "$" sequences in the destination itself are kept
    verbatim.
    """
    rename = options.rename or default_rename
    raw = str(rename(options.dest, file.name))
    prefix = str(options.dest)
    if not raw.startswith(prefix):
        prefix = ""
    tail = string.Template(raw[len(prefix):]).safe_substitute(
        options.template_vars()
    )
    return Path(prefix + tail)


def _move(file: Path, dest: Path) -> Path:
    dest.parent.mkdir(parents=True, exist_ok=True)
    if dest.is_file() or dest.is_symlink():
        dest.unlink()
    shutil.move(str(file), str(dest))
    return dest


def move_package(options: Options, staging_dir: Path) -> list[Path]:
    """Move every release artifact to its final destination.

    Args:
        options: Resolved options (dest, rename and template fields).
        staging_dir: Staging directory for this run.

    Returns:
        Final paths of the moved artifacts, in file-name order.

    Raises:
        MoveError: If enumeration or any individual move fails.
    """
    logger = options.logger
    release_dir = staging_dir / "squirrel"
    logger.verbose("MOVE", "Moving package to destination")

    try:
        files = sorted(release_dir.glob("*"))
        plan = [(f, compute_destination(options, f)) for f in files]
    except Exception as err:  # rename is caller-supplied
        raise MoveError(f"Error moving package files: {err}") from err

    for src, dest in plan:
        logger.verbose("MOVE", f"Moving file {src} to {dest}")

    with ThreadPoolExecutor() as pool:
        futures = [pool.submit(_move, src, dest) for src, dest in plan]

    moved: list[Path] = []
    errors: list[BaseException] = []
    for future in futures:
        err = future.exception()
        if err is None:
            moved.append(future.result())
        else:
            errors.append(err)

    if errors:
        raise MoveError(
            f"Error moving package files: {errors[0]}"
            + (f" (and {len(errors) - 1} more)" if len(errors) > 1 else "")
        ) from errors[0]

    logger.verbose("MOVE", f"[OK] Moved {len(moved)} file(s) to {options.dest}")
    return moved


def wait_for_artifact(
    path: Path, retries: int = 3, min_timeout: float = 0.5, factor: float = 2.0
) -> Path:
    """Wait for a file to appear, retrying with exponential backoff.

    For callers that poll for artifacts after a run; the pipeline itself
    never retries.

    Args:
        path: File to check.
        retries: Number of retries after the first check.
        min_timeout: Delay before the first retry (seconds).
        factor: Multiplier applied to the delay after each retry.

    Returns:
        The path, once it exists.

    Raises:
        FileNotFoundError: If the file is still missing after all retries.
    """
    path = Path(path)
    delay = min_timeout
    for attempt in range(retries + 1):
        if path.exists():
            return path
        if attempt < retries:
            time.sleep(delay)
            delay *= factor
    raise FileNotFoundError(f"no such file or directory: {path}")
