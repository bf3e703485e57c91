"""Application metadata reading and option resolution for squirrelpack.

Public API:

- read_metadata: Read package.json from resources/app.asar or resources/app/
- parse_author: Split an npm author field into name and homepage
- get_defaults: Derive option defaults from package.json
- resolve_options: Merge defaults, option bag and overrides into Options
- read_asar_file: Extract one file from an asar archive

Example:
    from pathlib import Path
    from squirrelpack.metadata import resolve_options

    options = resolve_options(Path("dist/app"), Path("dist/installer"))
    print(options.product_name)
"""

from .asar import read_asar_file
from .resolver import get_defaults, parse_author, read_metadata, resolve_options

__all__ = [
    "get_defaults",
    "parse_author",
    "read_asar_file",
    "read_metadata",
    "resolve_options",
]
