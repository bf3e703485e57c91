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

"""Read single files out of Electron asar archives.

An asar archive is laid out as:

    | uint32 (4) | uint32 header_size | header pickle | file data ... |

The header pickle holds a uint32 payload size, a uint32 string length and
a JSON index of the archive tree. Each file entry in the index has a
"size" and an "offset" (a decimal string, relative to the end of the
header). Entries flagged "unpacked" live next to the archive in
"<archive>.unpacked/", and "link" entries point at another path in the
archive.

Only what is needed to read package.json is implemented; no writing and
no integrity checks.

Example:
    >>> from pathlib import Path
    >>> from squirrelpack.metadata.asar import read_asar_file
    >>> raw = read_asar_file(Path("dist/app/resources/app.asar"), "package.json")
"""

from __future__ import annotations

import json
from pathlib import Path
import struct
from typing import Any

__all__ = ["read_asar_file", "read_asar_index"]

_MAX_LINK_DEPTH = 16


def read_asar_index(archive: Path) -> tuple[dict[str, Any], int]:
    """Parse the JSON index of an asar archive.

    Args:
        archive: Path to the .asar file.

    Returns:
        A tuple (index, data_offset), where index is the parsed header
            tree and data_offset is the absolute position where file data
            begins.

    Raises:
        OSError: If the archive cannot be opened.
        ValueError: If the header is truncated or not valid JSON.
    """
    with archive.open("rb") as f:
        prefix = f.read(8)
        if len(prefix) != 8:
            raise ValueError(f"truncated asar header in {archive}")
        _, header_size = struct.unpack("<II", prefix)

        header = f.read(header_size)
        if len(header) != header_size or header_size < 8:
            raise ValueError(f"truncated asar header in {archive}")

    _, json_size = struct.unpack("<II", header[:8])
    raw = header[8 : 8 + json_size]
    try:
        index = json.loads(raw.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as err:
        raise ValueError(f"invalid asar index in {archive}: {err}") from err

    return index, 8 + header_size


def _lookup(index: dict[str, Any], member: str) -> dict[str, Any]:
    node = index
    for part in [p for p in member.replace("\\", "/").split("/") if p]:
        children = node.get("files")
        if not isinstance(children, dict) or part not in children:
            raise FileNotFoundError(f"{member} not found in asar archive")
        node = children[part]
    return node


def read_asar_file(archive: Path, member: str) -> bytes:
    """Return the raw bytes of one file stored in an asar archive.

    Args:
        archive: Path to the .asar file.
        member: Path of the file inside the archive (e.g., "package.json").

    Returns:
        The file contents.

    Raises:
        FileNotFoundError: If the archive or the member does not exist.
        IsADirectoryError: If member names a directory.
        ValueError: If the archive is malformed.
    """
    archive = Path(archive)
    index, data_offset = read_asar_index(archive)

    entry = _lookup(index, member)
    depth = 0
    while "link" in entry:
        depth += 1
        if depth > _MAX_LINK_DEPTH:
            raise ValueError(f"too many links resolving {member} in {archive}")
        member = entry["link"]
        entry = _lookup(index, member)

    if "files" in entry:
        raise IsADirectoryError(f"{member} is a directory in {archive}")

    if entry.get("unpacked"):
        return (Path(str(archive) + ".unpacked") / member).read_bytes()

    size = int(entry.get("size", 0))
    offset = int(entry.get("offset", "0"))
    with archive.open("rb") as f:
        f.seek(data_offset + offset)
        data = f.read(size)

    if len(data) != size:
        raise ValueError(f"truncated data for {member} in {archive}")
    return data
