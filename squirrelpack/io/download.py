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

"""
HTTP(S) download of external tools for squirrelpack.

Used to fetch NuGet.exe and the squirrel.windows package when the vendor
directory does not already contain them.

Key Features:

- **Retry Logic with Exponential Backoff** - Retries transient failures
  (429, 500, 502, 503, 504) via urllib3.util.Retry.
- **Atomic Writes** - Downloads to a temporary .part file and renames it on
  success, so a cached tool is never half-written.
- **SHA-256** - Computed while streaming and returned to the caller.

Example:
    >>> from pathlib import Path
    >>> from squirrelpack.io import download_file
    >>> path, sha256 = download_file(
    ...     url="https://dist.nuget.org/win-x86-commandline/latest/nuget.exe",
    ...     target=Path("vendor/nuget/NuGet.exe"),
    ... )
"""

from __future__ import annotations

import hashlib
from pathlib import Path

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from squirrelpack.exceptions import NetworkError
from squirrelpack.logging import Logger, SilentLogger

# Stream size per chunk (1 MiB).
DEFAULT_CHUNK = 1024 * 1024


def make_session() -> requests.Session:
    """
    Create a requests.Session with retry/backoff defaults.

    - Retries on common transient status codes.
    - Applies exponential backoff.
    - Sets a User-Agent identifying squirrelpack.
    """
    s = requests.Session()
    retries = Retry(
        total=5,
        backoff_factor=0.5,
        status_forcelist=(429, 500, 502, 503, 504),
        allowed_methods=("GET", "HEAD"),
        raise_on_status=False,
    )
    s.headers.update({"User-Agent": "squirrelpack/0.1"})
    s.mount("http://", HTTPAdapter(max_retries=retries))
    s.mount("https://", HTTPAdapter(max_retries=retries))
    return s


def download_file(
    url: str,
    target: Path,
    *,
    timeout: int = 60,
    logger: Logger | None = None,
) -> tuple[Path, str]:
    """Download a URL to an exact file path.

    Follows redirects and retries transient failures. Writes to
    <target>.part and renames to <target> on success.

    Args:
        url: Source URL.
        target: Destination file (parent directories are created).
        timeout: Per-request timeout (seconds).
        logger: Diagnostic sink. Default is silent.

    Returns:
        A tuple (file_path, sha256_hex).

    Raises:
        NetworkError: For connection failures and non-2xx responses
            (after retries).
    """
    logger = logger or SilentLogger()
    target = Path(target)
    target.parent.mkdir(parents=True, exist_ok=True)

    logger.verbose("HTTP", f"GET {url}")

    tmp = target.with_suffix(target.suffix + ".part")
    sha = hashlib.sha256()

    try:
        with make_session() as session:
            resp = session.get(url, stream=True, allow_redirects=True, timeout=timeout)
            try:
                resp.raise_for_status()
                logger.verbose("HTTP", f"Response: {resp.status_code} {resp.reason}")

                with tmp.open("wb") as f:
                    for chunk in resp.iter_content(chunk_size=DEFAULT_CHUNK):
                        if not chunk:
                            continue
                        f.write(chunk)
                        sha.update(chunk)
            finally:
                resp.close()
    except requests.RequestException as err:
        tmp.unlink(missing_ok=True)
        raise NetworkError(f"Download failed for {url}: {err}") from err

    tmp.replace(target)

    digest = sha.hexdigest()
    logger.verbose("FILE", f"Downloaded {target} (SHA-256: {digest})")
    return target, digest
