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

"""Exception hierarchy for squirrelpack.

Each pipeline stage raises its own exception type so callers can tell
where a run failed:

- MetadataError: package.json unreadable, unparseable, or missing required fields
- StagingError: temporary directory creation failures
- ContentError: spec file rendering or application copy failures
- PackagingError: NuGet failures
- NotFoundError: an expected file (package, tool) is missing
- SyncError: SyncReleases failures
- ReleaseError: Squirrel --releasify failures
- MoveError: moving artifacts to the destination failed
- ExecutionError: generic subprocess failure, wrapped by the stage errors above

ConfigError and NetworkError cover config file loading and tool downloads.
All exceptions inherit from SquirrelPackError.

Example:
    Catching stage errors:
        ```python
        from squirrelpack import create_installer
        from squirrelpack.exceptions import MetadataError, SquirrelPackError

        try:
            create_installer("dist/app", "dist/installer")
        except MetadataError as e:
            print(f"Bad package.json: {e}")
        except SquirrelPackError as e:
            print(f"Packaging failed: {e}")
        ```
"""

from __future__ import annotations

from pathlib import Path

__all__ = [
    "SquirrelPackError",
    "ConfigError",
    "NetworkError",
    "MetadataError",
    "StagingError",
    "ContentError",
    "PackagingError",
    "NotFoundError",
    "SyncError",
    "ReleaseError",
    "MoveError",
    "ExecutionError",
]


class SquirrelPackError(Exception):
    """Base exception for all squirrelpack errors.

    Attributes:
        staging_dir: Staging directory of the failed run, or None if the
            run failed before one was created. Set by create_installer;
            removing it is up to the caller.
    """

    staging_dir: Path | None = None


class ConfigError(SquirrelPackError):
    """Raised when a config file cannot be read or parsed."""

    pass


class NetworkError(SquirrelPackError):
    """Raised when downloading an external tool fails."""

    pass


class MetadataError(SquirrelPackError):
    """Raised for application metadata problems.

    This exception is raised when:

    - Neither resources/app.asar nor resources/app/package.json can be read
    - package.json is not valid JSON
    - Required fields (description, authors) are missing after merging
    """

    pass


class StagingError(SquirrelPackError):
    """Raised when the staging directory tree cannot be created."""

    pass


class ContentError(SquirrelPackError):
    """Raised when the .nuspec or the application copy cannot be created."""

    pass


class PackagingError(SquirrelPackError):
    """Raised when NuGet fails to create the intermediate package."""

    pass


class NotFoundError(SquirrelPackError):
    """Raised when an expected file is absent.

    Used for the .nupkg that NuGet should have produced and for external
    tools missing from the vendor directory.
    """

    pass


class SyncError(SquirrelPackError):
    """Raised when syncing remote releases fails."""

    pass


class ReleaseError(SquirrelPackError):
    """Raised when Squirrel fails to releasify the package."""

    pass


class MoveError(SquirrelPackError):
    """Raised when one or more artifacts cannot be moved to the destination."""

    pass


class ExecutionError(SquirrelPackError):
    """Raised when an external program fails to run or exits non-zero.

    Attributes:
        command: The full command line that was executed.
        stderr: Standard error captured from the process.
        returncode: Exit code, or None if the process never started.

    Example:
        Inspecting a failed command:
            ```python
            try:
                run_tool(Path("vendor/nuget/NuGet.exe"), ["pack", "app.nuspec"])
            except ExecutionError as e:
                print(e.command)
                print(e.stderr)
            ```
    """

    def __init__(
        self,
        message: str,
        command: list[str] | None = None,
        stderr: str = "",
        returncode: int | None = None,
    ) -> None:
        super().__init__(message)
        self.command = command or []
        self.stderr = stderr
        self.returncode = returncode
