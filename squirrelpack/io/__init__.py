"""
I/O operations for squirrelpack.

This package provides the process runner used for every external tool
and the HTTP download used to provision those tools.

Modules:

process : module
    Run .NET tools (through mono off Windows) with stderr capture.
download : module
    Robust HTTP(S) download with retries and atomic writes.

Example:
    from pathlib import Path
    from squirrelpack.io import run_tool

    result = run_tool(Path("vendor/nuget/NuGet.exe"), ["help"])
    print(result.stdout)
"""

from .download import download_file, make_session
from .process import Runner, ToolResult, build_command, mono_install_hint, run_tool

__all__ = [
    "Runner",
    "ToolResult",
    "build_command",
    "download_file",
    "make_session",
    "mono_install_hint",
    "run_tool",
]
