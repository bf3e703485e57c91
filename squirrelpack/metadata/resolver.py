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

"""Application metadata resolution for squirrelpack.

Reads package.json from the packaged application and turns it into a
complete Options record.

Metadata Sources (first readable wins):
    1. <src>/resources/app.asar (package.json at the archive root)
    2. <src>/resources/app/package.json

Precedence (highest first):
    1. Explicit per-call overrides (keyword arguments)
    2. The caller's option bag (e.g., a --config file)
    3. Defaults derived from package.json
    4. Hardcoded fallbacks (name "electron", version "0.0.0")

A None value never counts as "set" at any layer.

Private Helpers:
    - _coerce_list: Accept a string or list for authors/owners/tags
    - _finalize: Fill dependent fields and validate required ones

Example:
    from pathlib import Path
    from squirrelpack.metadata import resolve_options

    options = resolve_options(
        Path("dist/app"),
        Path("dist/installer"),
        {"productDescription": "Just a test."},
        no_msi=True,
    )
    print(options.name, options.version)
"""

from __future__ import annotations

from collections.abc import Mapping
from datetime import date
from importlib import resources
import json
from pathlib import Path
import re
from typing import Any

from squirrelpack.exceptions import MetadataError
from squirrelpack.logging import Logger, SilentLogger
from squirrelpack.metadata.asar import read_asar_file
from squirrelpack.options import (
    Options,
    RenameFunc,
    normalize_option_keys,
    resolve_signing,
)

DEFAULT_NAME = "electron"
DEFAULT_VERSION = "0.0.0"

# Names the staging tree already uses for its own subdirectories
RESERVED_NAMES = frozenset({"nuget", "squirrel"})

ASAR_PATH = Path("resources") / "app.asar"
LOOSE_PATH = Path("resources") / "app" / "package.json"

_AUTHOR_DECORATION = re.compile(r"\s+(<[^>]+>|\([^)]+\))")
_AUTHOR_URL = re.compile(r"\(([^)]+)\)")


def read_metadata(src: Path, logger: Logger | None = None) -> dict[str, Any]:
    """Read package.json from a packaged Electron application.

    Args:
        src: Application directory (output of electron-packager or similar).
        logger: Diagnostic sink. Default is silent.

    Returns:
        The parsed package.json mapping.

    Raises:
        MetadataError: If neither source can be read and parsed.
    """
    logger = logger or SilentLogger()
    src = Path(src)
    with_asar = src / ASAR_PATH
    without_asar = src / LOOSE_PATH

    if with_asar.exists():
        logger.verbose("META", f"Reading package metadata from {with_asar}")
        try:
            data = json.loads(read_asar_file(with_asar, "package.json"))
        except (OSError, ValueError) as err:
            logger.debug("META", f"Could not read {with_asar}: {err}")
        else:
            if isinstance(data, dict):
                return data
            logger.debug("META", f"{with_asar} package.json is not an object")

    logger.verbose("META", f"Reading package metadata from {without_asar}")
    try:
        with without_asar.open("r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, ValueError) as err:
        raise MetadataError(f"Error reading package metadata: {err}") from err

    if not isinstance(data, dict):
        raise MetadataError(
            f"Error reading package metadata: {without_asar} must contain a JSON object"
        )
    return data


def parse_author(author: Any) -> tuple[str | None, str | None]:
    """Extract a bare name and homepage from a package.json author field.

    Accepts the npm "Name <email> (url)" string convention or a mapping
    with name/url keys.

    Args:
        author: The raw author value.

    Returns:
        A tuple (name, url); either element may be None.

    Example:
        >>> parse_author("Jane Doe <jane@example.com> (https://jane.dev)")
        ('Jane Doe', 'https://jane.dev')
        >>> parse_author({"name": "Jane Doe"})
        ('Jane Doe', None)
    """
    if isinstance(author, str):
        name = _AUTHOR_DECORATION.sub("", author).strip() or None
        match = _AUTHOR_URL.search(author)
        return name, match.group(1) if match else None
    if isinstance(author, Mapping):
        return author.get("name") or None, author.get("url") or None
    return None, None


def bundled_resource(name: str) -> Path:
    """Return the path of a file shipped in squirrelpack/resources."""
    return Path(str(resources.files("squirrelpack") / "resources" / name))


def get_defaults(metadata: Mapping[str, Any]) -> dict[str, Any]:
    """Derive default option values from package.json.

    Args:
        metadata: Parsed package.json (may be empty).

    Returns:
        A dict keyed by Options attribute names. Keys whose value cannot be
            derived are present with None.
    """
    author_name, author_url = parse_author(metadata.get("author"))
    authors = [author_name] if author_name else None

    copyright_line = metadata.get("copyright")
    if not copyright_line and authors:
        copyright_line = f"Copyright © {date.today().year} {', '.join(authors)}"

    name = metadata.get("name")

    return {
        "name": name or DEFAULT_NAME,
        "product_name": metadata.get("productName") or name,
        "description": metadata.get("description"),
        "product_description": (
            metadata.get("productDescription") or metadata.get("description")
        ),
        "version": metadata.get("version") or DEFAULT_VERSION,
        "copyright": copyright_line,
        "authors": authors,
        "owners": authors,
        "homepage": metadata.get("homepage") or author_url,
        "exe": f"{name}.exe" if name else f"{DEFAULT_NAME}.exe",
        "icon": bundled_resource("icon.ico"),
        "animation": bundled_resource("animation.gif"),
        "icon_url": None,
        "license_url": None,
        "require_license_acceptance": False,
        "tags": [],
        "no_msi": False,
    }


def _coerce_list(value: Any) -> list[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [part.strip() for part in value.split(",") if part.strip()]
    return [str(v) for v in value]


def _finalize(options: Options) -> Options:
    options.src = Path(options.src)
    options.dest = Path(options.dest)
    options.authors = _coerce_list(options.authors)
    options.owners = _coerce_list(options.owners) or list(options.authors)
    options.tags = _coerce_list(options.tags)
    options.product_name = options.product_name or options.name
    options.description = options.description or options.product_description
    options.product_description = options.product_description or options.description

    for attr in ("icon", "animation", "vendor_directory"):
        value = getattr(options, attr)
        if value:
            setattr(options, attr, Path(value).resolve())
    if options.certificate_file:
        options.certificate_file = Path(options.certificate_file)

    if not options.name:
        raise MetadataError("Missing required option 'name'")
    if not options.version:
        raise MetadataError("Missing required option 'version'")
    for attr in ("name", "version"):
        value = getattr(options, attr)
        if not isinstance(value, str):
            raise MetadataError(
                f"Option '{attr}' must be a string, got "
                f"{type(value).__name__}: {value!r}"
            )
    if options.name.lower() in RESERVED_NAMES:
        raise MetadataError(
            f"Package name '{options.name}' is reserved for a staging "
            f"subdirectory; choose another name"
        )
    if not options.description:
        raise MetadataError(
            "Missing required option 'description': add it to package.json "
            "or pass it as an option"
        )
    if not options.authors:
        raise MetadataError(
            "Missing required option 'authors': add an author to package.json "
            "or pass it as an option"
        )

    options.signing = resolve_signing(options)
    return options


def resolve_options(
    src: Path,
    dest: Path,
    options: Mapping[str, Any] | None = None,
    *,
    rename: RenameFunc | None = None,
    logger: Logger | None = None,
    **overrides: Any,
) -> Options:
    """Build the complete Options record for a pipeline run.

    Steps:
      1) Read package.json from the application (asar first).
      2) Derive defaults from it.
      3) Layer the option bag, then the explicit overrides, on top.
      4) Fill dependent fields (product_name, owners, ...), validate
         required fields and resolve the signing method.

    Args:
        src: Application directory.
        dest: Output directory for the final artifacts.
        options: Option bag (camelCase or snake_case keys).
        rename: Artifact rename function. Default: default_rename.
        logger: Diagnostic sink. Default is silent.
        **overrides: Explicit options; these win over everything else.

    Returns:
        A fully defaulted Options record.

    Raises:
        MetadataError: If metadata cannot be read or required fields are
            missing after merging.
    """
    from squirrelpack.build.mover import default_rename

    logger = logger or SilentLogger()

    metadata = read_metadata(Path(src), logger)
    merged = {k: v for k, v in get_defaults(metadata).items() if v is not None}

    for layer_name, layer in (("options", options or {}), ("overrides", overrides)):
        known, unknown = normalize_option_keys(layer)
        for key in unknown:
            logger.verbose("META", f"Ignoring unknown option in {layer_name}: {key}")
        merged.update(known)

    # src/dest are positional and always win
    merged["src"] = Path(src)
    merged["dest"] = Path(dest)
    bag_rename = merged.pop("rename", None)
    merged.pop("logger", None)

    resolved = Options(**merged)
    resolved.rename = rename or bag_rename or default_rename
    resolved.logger = logger
    return _finalize(resolved)
