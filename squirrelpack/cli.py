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

"""Command-line interface for squirrelpack.

This module provides the main CLI entry point for the squirrelpack tool.

Commands:

    create: Package an Electron application into Squirrel installers
    tools: Download NuGet and Squirrel tools into the vendor directory

Example:
    Create installers:
        ```bash
        $ squirrelpack create --src dist/app-win32-x64 --dest dist/installers
        ```

    Use a config file and sync with a release feed:
        ```bash
        $ squirrelpack create --src dist/app --dest dist/out \\
            --config squirrel.yaml --remote-releases https://example.com/releases
        ```

    Provision tools ahead of time:
        ```bash
        $ squirrelpack tools --vendor-directory ./vendor
        ```

Exit Codes:

- 0: Success
- 1: Error (metadata, tool, staging, packaging or move failure)

Note:
    Explicit flags win over the config file, which wins over package.json.
    Errors always print the traceback so subprocess failures can be
    diagnosed without a second run. The staging directory is removed after
    the run, whether it succeeded or failed, unless --keep-staging is given.

"""

from __future__ import annotations

import argparse
from importlib.metadata import version
from pathlib import Path
import sys
import traceback
from typing import Any

from squirrelpack.build.staging import cleanup_staging
from squirrelpack.build.tools import (
    NUGET,
    SYNC_RELEASES,
    UPDATER,
    ensure_tools,
    find_tool,
    release_tool,
)
from squirrelpack.config import load_config_file
from squirrelpack.core import create_installer
from squirrelpack.exceptions import SquirrelPackError
from squirrelpack.logging import get_logger

# argparse dest -> option name understood by resolve_options
_OPTION_FLAGS = (
    "remote_releases",
    "no_msi",
    "icon",
    "animation",
    "certificate_file",
    "certificate_password",
    "sign_with_params",
    "vendor_directory",
)


def _report_error(err: BaseException) -> int:
    print(f"Error: {err}")
    traceback.print_exc()
    return 1


def _flag_overrides(args: argparse.Namespace) -> dict[str, Any]:
    return {
        name: getattr(args, name)
        for name in _OPTION_FLAGS
        if getattr(args, name, None) is not None
    }


def cmd_create(args: argparse.Namespace) -> int:
    """Handler for 'squirrelpack create' command.

    Loads the optional config file, runs the packaging pipeline and prints
    the resulting artifacts.

    Args:
        args: Parsed command-line arguments.

    Returns:
        Exit code (0 for success, 1 for failure).
    """
    src = Path(args.src)
    dest = Path(args.dest)

    if not src.is_dir():
        print(f"Error: Application directory not found: {src}")
        return 1

    print(f"Creating installers for: {src}")
    print(f"Destination: {dest}")
    print()

    logger = get_logger(verbose=args.verbose, debug=args.debug)

    try:
        options = load_config_file(Path(args.config), logger) if args.config else None
        result = create_installer(
            src,
            dest,
            options=options,
            logger=logger,
            **_flag_overrides(args),
        )
    except SquirrelPackError as err:
        code = _report_error(err)
        if err.staging_dir is not None:
            if args.keep_staging:
                print(f"Staging kept at: {err.staging_dir}")
            else:
                cleanup_staging(err.staging_dir)
        return code

    if args.keep_staging:
        staging_note = f"{result.staging_dir} (kept)"
    else:
        cleanup_staging(result.staging_dir)
        staging_note = f"{result.staging_dir} (removed)"

    print()
    print("=" * 70)
    print("INSTALLER RESULTS")
    print("=" * 70)
    print(f"Name:            {result.options.name}")
    print(f"Version:         {result.options.version}")
    print(f"Package:         {result.package_path.name}")
    print(f"Staging:         {staging_note}")
    print(f"Destination:     {result.dest}")
    print(f"Artifacts ({len(result.artifacts)}):")
    for artifact in result.artifacts:
        print(f"  {artifact}")
    print("=" * 70)
    print()
    print(f"[SUCCESS] Successfully created package at {result.dest}")

    return 0


def cmd_tools(args: argparse.Namespace) -> int:
    """Handler for 'squirrelpack tools' command.

    Downloads any missing NuGet or Squirrel tool and lists where each one
    lives.

    Args:
        args: Parsed command-line arguments.

    Returns:
        Exit code (0 for success, 1 for failure).
    """
    logger = get_logger(verbose=args.verbose, debug=args.debug)

    try:
        vendor_dir = ensure_tools(args.vendor_directory, logger)
        tools = {
            "NuGet": find_tool(vendor_dir, NUGET),
            "Updater": find_tool(vendor_dir, UPDATER),
            "Releasify": find_tool(vendor_dir, release_tool()),
            "SyncReleases": find_tool(vendor_dir, SYNC_RELEASES),
        }
    except SquirrelPackError as err:
        return _report_error(err)

    print("=" * 70)
    print("TOOLS")
    print("=" * 70)
    print(f"Vendor Directory: {vendor_dir}")
    for label, path in tools.items():
        print(f"{label + ':':<18}{path}")
    print("=" * 70)
    print()
    print("[SUCCESS] All tools available!")

    return 0


def _add_verbosity(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Show progress and high-level status updates",
    )
    parser.add_argument(
        "-d",
        "--debug",
        action="store_true",
        help="Show detailed debugging output (implies --verbose)",
    )


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for the squirrelpack CLI."""
    parser = argparse.ArgumentParser(
        prog="squirrelpack",
        description="squirrelpack - Squirrel.Windows installers for Electron apps",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"squirrelpack {version('squirrelpack')}",
    )

    subparsers = parser.add_subparsers(
        dest="command",
        help="Available commands",
        required=True,
    )

    # 'create' command
    parser_create = subparsers.add_parser(
        "create",
        help="Package an Electron application into Squirrel installers",
        description="Build a NuGet package from the application and releasify it with Squirrel.",
    )
    parser_create.add_argument(
        "--src",
        required=True,
        help="Directory containing the packaged Electron application",
    )
    parser_create.add_argument(
        "--dest",
        required=True,
        help="Directory that receives the installers and release files",
    )
    parser_create.add_argument(
        "--config",
        default=None,
        help="YAML or JSON file with package options",
    )
    parser_create.add_argument(
        "--remote-releases",
        default=None,
        help="URL of an existing release feed to build delta packages against",
    )
    parser_create.add_argument(
        "--no-msi",
        action="store_true",
        default=None,
        help="Do not create an MSI installer",
    )
    parser_create.add_argument(
        "--icon",
        default=None,
        help="Setup icon (.ico)",
    )
    parser_create.add_argument(
        "--animation",
        default=None,
        help="Loading animation (.gif) shown while installing",
    )
    parser_create.add_argument(
        "--certificate-file",
        default=None,
        help="Code signing certificate (.pfx)",
    )
    parser_create.add_argument(
        "--certificate-password",
        default=None,
        help="Password for the code signing certificate",
    )
    parser_create.add_argument(
        "--sign-with-params",
        default=None,
        help="Raw signtool parameters (overrides the certificate options)",
    )
    parser_create.add_argument(
        "--vendor-directory",
        type=Path,
        default=None,
        help="Directory holding NuGet and Squirrel tools",
    )
    parser_create.add_argument(
        "--keep-staging",
        action="store_true",
        help="Keep the temporary staging directory instead of removing it after the run",
    )
    _add_verbosity(parser_create)
    parser_create.set_defaults(func=cmd_create)

    # 'tools' command
    parser_tools = subparsers.add_parser(
        "tools",
        help="Download NuGet and Squirrel tools",
        description="Populate the vendor directory with any missing NuGet or Squirrel tool.",
    )
    parser_tools.add_argument(
        "--vendor-directory",
        type=Path,
        default=None,
        help="Directory holding NuGet and Squirrel tools (default: $SQUIRRELPACK_VENDOR_DIR or ./cache/vendor)",
    )
    _add_verbosity(parser_tools)
    parser_tools.set_defaults(func=cmd_tools)

    return parser


def main(argv: list[str] | None = None) -> None:
    """Main entry point for the squirrelpack CLI.

    This function is registered as the 'squirrelpack' console script in
    pyproject.toml.
    """
    args = build_parser().parse_args(argv)

    exit_code = args.func(args)
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
