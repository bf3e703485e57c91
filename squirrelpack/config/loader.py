"""
Config file loading for squirrelpack.

A config file is an option bag for the packaging pipeline: it sits above
the defaults derived from package.json and below options passed
explicitly on the command line or to create_installer().

Format
------
YAML or JSON (JSON is valid YAML). The top level must be a mapping.
Keys may use the camelCase names from package.json (productName,
remoteReleases, ...) or the snake_case Options attribute names.

    productDescription: Just a test.
    icon: assets/icon.ico
    tags: [Utility]
    remoteReleases: https://updates.example.com/foo/

Path Resolution
---------------
Relative paths are resolved against the CONFIG FILE location, so a
config can be moved along with its assets. Currently resolved keys:
  - icon
  - animation
  - certificateFile / certificate_file
  - vendorDirectory / vendor_directory

Error Handling
--------------
- ConfigError: file missing, YAML parse errors, non-mapping top level
- All errors are chained with "from err"
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml

from squirrelpack.exceptions import ConfigError
from squirrelpack.logging import Logger, SilentLogger

_PATH_KEYS = (
    "icon",
    "animation",
    "certificateFile",
    "certificate_file",
    "vendorDirectory",
    "vendor_directory",
)


def _load_yaml_file(p: Path) -> Any:
    """
    Load a YAML file and return the parsed Python object.

    Raises:
      ConfigError - when the file is missing or is not valid YAML
    """
    if not p.exists():
        raise ConfigError(f"Config file not found: {p}")
    try:
        with p.open("r", encoding="utf-8") as f:
            return yaml.safe_load(f)
    except yaml.YAMLError as err:
        raise ConfigError(f"Error parsing config file {p}: {err}") from err
    except OSError as err:
        raise ConfigError(f"Error reading config file {p}: {err}") from err


def _resolve_known_paths(cfg: dict[str, Any], config_dir: Path) -> None:
    """
    Resolve relative path values against 'config_dir'. Modifies cfg in place.
    """
    for key in _PATH_KEYS:
        raw_path = cfg.get(key)
        if isinstance(raw_path, str) and raw_path:
            p = Path(raw_path)
            if not p.is_absolute():
                cfg[key] = str((config_dir / p).resolve())


def load_config_file(config_path: Path, logger: Logger | None = None) -> dict[str, Any]:
    """
    Load an option bag from a YAML/JSON config file.

    An empty file yields an empty dict.

    Returns
      The option mapping with relative paths resolved.

    Raises
      ConfigError on missing files, parse errors or a non-mapping top level.
    """
    logger = logger or SilentLogger()
    config_path = Path(config_path).resolve()

    logger.verbose("CONFIG", f"Loading config: {config_path}")
    data = _load_yaml_file(config_path)
    if data is None:
        logger.verbose("CONFIG", "Config file is empty")
        return {}
    if not isinstance(data, dict):
        raise ConfigError(
            f"Config file must contain a mapping at the top level: {config_path}"
        )

    _resolve_known_paths(data, config_path.parent)

    logger.verbose("CONFIG", f"Loaded {len(data)} option(s): {', '.join(data)}")
    return data
