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

"""External tool location and provisioning for squirrelpack.

The pipeline drives NuGet.exe and the Squirrel.Windows tools. They live in
a vendor directory with this layout:

    <vendor>/nuget/NuGet.exe
    <vendor>/squirrel/Squirrel.exe        (updater, shipped as Update.exe)
    <vendor>/squirrel/Squirrel.com        (release tool on Windows)
    <vendor>/squirrel/Squirrel-Mono.exe   (release tool under mono)
    <vendor>/squirrel/SyncReleases.exe

Design Principles:
    - Vendor directory: Options.vendor_directory > $SQUIRRELPACK_VENDOR_DIR
      > ./cache/vendor
    - Tools already present are never re-downloaded
    - NuGet.exe comes from dist.nuget.org; Squirrel tools are extracted from
      the squirrel.windows NuGet package (tools/ folder)
    - A tool that is still missing after provisioning is a NotFoundError

Example:
    from pathlib import Path
    from squirrelpack.build.tools import NUGET, ensure_tools, find_tool

    vendor = ensure_tools(Path("cache/vendor"))
    nuget = find_tool(vendor, NUGET)
"""

from __future__ import annotations

import os
from pathlib import Path, PurePosixPath
import zipfile

from squirrelpack.exceptions import NetworkError, NotFoundError
from squirrelpack.io.download import download_file
from squirrelpack.io.process import is_windows
from squirrelpack.logging import Logger, SilentLogger

VENDOR_ENV = "SQUIRRELPACK_VENDOR_DIR"
DEFAULT_VENDOR_DIR = Path("cache/vendor")

NUGET = Path("nuget") / "NuGet.exe"
UPDATER = Path("squirrel") / "Squirrel.exe"
SQUIRREL_WINDOWS = Path("squirrel") / "Squirrel.com"
SQUIRREL_MONO = Path("squirrel") / "Squirrel-Mono.exe"
SYNC_RELEASES = Path("squirrel") / "SyncReleases.exe"

NUGET_URL = "https://dist.nuget.org/win-x86-commandline/latest/nuget.exe"
SQUIRREL_VERSION = "1.9.1"
SQUIRREL_PACKAGE_URL = (
    f"https://www.nuget.org/api/v2/package/squirrel.windows/{SQUIRREL_VERSION}"
)


def resolve_vendor_dir(vendor_directory: Path | None = None) -> Path:
    """Return the vendor directory to use for this run."""
    if vendor_directory:
        return Path(vendor_directory)
    from_env = os.environ.get(VENDOR_ENV)
    if from_env:
        return Path(from_env)
    return DEFAULT_VENDOR_DIR


def release_tool(platform_name: str | None = None) -> Path:
    """Return the relative path of the Squirrel release tool for the host."""
    return SQUIRREL_WINDOWS if is_windows(platform_name) else SQUIRREL_MONO


def find_tool(vendor_dir: Path, relative: Path) -> Path:
    """Locate a tool inside the vendor directory.

    Raises:
        NotFoundError: If the tool is not present.
    """
    tool = (Path(vendor_dir) / relative).resolve()
    if not tool.is_file():
        raise NotFoundError(
            f"Required tool not found: {tool}. Populate the vendor directory "
            f"or set {VENDOR_ENV}."
        )
    return tool


def _extract_squirrel_tools(package: Path, squirrel_dir: Path, logger: Logger) -> None:
    """Copy every file under tools/ in a squirrel.windows .nupkg to squirrel_dir."""
    squirrel_dir.mkdir(parents=True, exist_ok=True)
    try:
        with zipfile.ZipFile(package) as zf:
            for info in zf.infolist():
                member = PurePosixPath(info.filename)
                if info.is_dir() or len(member.parts) != 2 or member.parts[0] != "tools":
                    continue
                target = squirrel_dir / member.name
                if target.exists():
                    continue
                target.write_bytes(zf.read(info))
                logger.verbose("TOOLS", f"  Extracted: {member.name}")
    except zipfile.BadZipFile as err:
        raise NetworkError(f"Downloaded squirrel.windows package is corrupt: {err}") from err


def ensure_tools(
    vendor_directory: Path | None = None,
    logger: Logger | None = None,
    platform_name: str | None = None,
) -> Path:
    """Make sure the vendor directory holds NuGet and Squirrel tools.

    Missing tools are downloaded; present ones are left untouched.

    Args:
        vendor_directory: Explicit vendor directory. Default: see
            resolve_vendor_dir().
        logger: Diagnostic sink. Default is silent.
        platform_name: Host platform to provision for. Default: current host.

    Returns:
        The vendor directory that was checked.

    Raises:
        NetworkError: If a download fails.
    """
    logger = logger or SilentLogger()
    vendor_dir = resolve_vendor_dir(vendor_directory)

    nuget = vendor_dir / NUGET
    if nuget.exists():
        logger.verbose("TOOLS", f"Using NuGet: {nuget}")
    else:
        logger.verbose("TOOLS", "Downloading NuGet.exe...")
        download_file(NUGET_URL, nuget, logger=logger)

    required = (UPDATER, release_tool(platform_name), SYNC_RELEASES)
    missing = [t for t in required if not (vendor_dir / t).exists()]
    if missing:
        logger.verbose(
            "TOOLS",
            f"Missing Squirrel tools: {', '.join(t.name for t in missing)}; "
            f"downloading squirrel.windows {SQUIRREL_VERSION}...",
        )
        package = vendor_dir / f"squirrel.windows.{SQUIRREL_VERSION}.nupkg"
        download_file(SQUIRREL_PACKAGE_URL, package, logger=logger)
        try:
            _extract_squirrel_tools(package, vendor_dir / "squirrel", logger)
        finally:
            package.unlink(missing_ok=True)
    else:
        logger.verbose("TOOLS", f"Using Squirrel tools from: {vendor_dir / 'squirrel'}")

    return vendor_dir
