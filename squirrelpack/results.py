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

"""Public API return types for squirrelpack.

Example:
    Using the result of a run:
        ```python
        from squirrelpack import create_installer
        from squirrelpack.build import cleanup_staging

        result = create_installer("dist/app", "dist/installer")
        for artifact in result.artifacts:
            print(artifact)
        cleanup_staging(result.staging_dir)
        ```
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from squirrelpack.options import Options


@dataclass(frozen=True)
class InstallerResult:
    """Result from a complete packaging run.

    Attributes:
        options: The resolved options the run used.
        dest: Directory that received the artifacts.
        staging_dir: Temporary staging directory; owned by the caller,
            who should remove it with cleanup_staging().
        package_path: Intermediate .nupkg produced by NuGet.
        artifacts: Final paths of every moved artifact.
    """

    options: Options
    dest: Path
    staging_dir: Path
    package_path: Path
    artifacts: list[Path]
