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

"""External tool execution for squirrelpack.

NuGet.exe and the Squirrel tools are .NET programs. On Windows they are
run directly; everywhere else the command is rewritten to go through
mono ("mono NuGet.exe pack ...").

Behavior:
    - Blocks until the process exits; there is no timeout.
    - stderr is streamed line by line to the logger's debug channel and
      accumulated for error reporting.
    - A non-zero exit or a spawn failure raises ExecutionError carrying
      the command line and captured stderr.
    - A missing mono binary produces an install hint for the host.
    - No retries.

Example:
    Run a tool and inspect the result:
        ```python
        from pathlib import Path
        from squirrelpack.io.process import run_tool

        result = run_tool(Path("vendor/nuget/NuGet.exe"), ["help"])
        print(result.stdout)
        ```
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass
from pathlib import Path
import platform
import subprocess
import sys
import threading
from typing import Union

from squirrelpack.exceptions import ExecutionError
from squirrelpack.logging import Logger, SilentLogger

COMPAT_RUNTIME = "mono"


@dataclass(frozen=True)
class ToolResult:
    """Outcome of a successful tool invocation.

    Attributes:
        command: The command line that was executed (after the mono rewrite).
        returncode: Process exit code (always 0 for returned results).
        stdout: Captured standard output.
        stderr: Captured standard error.
    """

    command: list[str]
    returncode: int
    stdout: str
    stderr: str


Runner = Callable[[Union[str, Path], Sequence[str], Logger], ToolResult]


def is_windows(platform_name: str | None = None) -> bool:
    """Return True when running on (or asked about) a Windows host."""
    return (platform_name or sys.platform).startswith("win")


def build_command(
    file: str | Path, args: Sequence[str], platform_name: str | None = None
) -> list[str]:
    """Build the argv for a .NET tool, going through mono off Windows.

    Example:
        >>> build_command("NuGet.exe", ["pack"], platform_name="linux")
        ['mono', 'NuGet.exe', 'pack']
        >>> build_command("NuGet.exe", ["pack"], platform_name="win32")
        ['NuGet.exe', 'pack']
    """
    if is_windows(platform_name):
        return [str(file), *args]
    return [COMPAT_RUNTIME, str(file), *args]


def _os_release_ids() -> set[str]:
    try:
        info = platform.freedesktop_os_release()
    except OSError:
        return set()
    ids = {info.get("ID", "")}
    ids.update(info.get("ID_LIKE", "").split())
    return {i.lower() for i in ids if i}


def mono_install_hint(
    platform_name: str | None = None, os_ids: set[str] | None = None
) -> str:
    """Return the message shown when mono cannot be found.

    Args:
        platform_name: sys.platform value to assume. Default: current host.
        os_ids: Linux distribution ids (ID and ID_LIKE from /etc/os-release).
            Default: read from the host on Linux.

    Returns:
        A message recommending a package-manager command.
    """
    platform_name = platform_name or sys.platform
    if platform_name == "darwin":
        install = "brew install mono"
    elif platform_name.startswith("linux"):
        if os_ids is None:
            os_ids = _os_release_ids()
        if os_ids & {"debian", "ubuntu"}:
            install = "sudo apt-get install mono-runtime"
        elif os_ids & {"fedora", "rhel", "centos"}:
            install = "sudo dnf install mono-core"
        elif "arch" in os_ids:
            install = "sudo pacman -S mono"
        elif os_ids & {"suse", "opensuse"}:
            install = "sudo zypper install mono-core"
        else:
            install = None
    else:
        install = None

    if install:
        return f"Your system is missing the mono package. Try, e.g. '{install}'"
    return (
        "Your system is missing the mono package. "
        "Install it with your system's package manager"
    )


def run_tool(
    file: str | Path, args: Sequence[str], logger: Logger | None = None
) -> ToolResult:
    """Execute an external tool and wait for it to finish.

    Args:
        file: Path to the executable (.exe/.com).
        args: Arguments passed to the tool.
        logger: Diagnostic sink. Default is silent.

    Returns:
        ToolResult for the finished process.

    Raises:
        ExecutionError: If the process cannot be started or exits non-zero.
    """
    logger = logger or SilentLogger()
    cmd = build_command(file, args)
    cmdline = " ".join(cmd)

    logger.verbose("EXEC", f"Executing file {cmdline}")

    try:
        proc = subprocess.Popen(
            cmd,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            text=True,
            encoding="utf-8",
            errors="replace",
        )
    except FileNotFoundError as err:
        if cmd[0] == COMPAT_RUNTIME:
            raise ExecutionError(
                f"{mono_install_hint()}\n{cmdline}\n", command=cmd
            ) from err
        raise ExecutionError(
            f"Error executing file ({err}):\n{cmdline}\n", command=cmd
        ) from err
    except OSError as err:
        raise ExecutionError(
            f"Error executing file ({err}):\n{cmdline}\n", command=cmd
        ) from err

    stdout_chunks: list[str] = []

    def _drain_stdout() -> None:
        assert proc.stdout is not None
        for line in proc.stdout:
            stdout_chunks.append(line)

    reader = threading.Thread(target=_drain_stdout, daemon=True)
    reader.start()

    stderr_chunks: list[str] = []
    assert proc.stderr is not None
    for line in proc.stderr:
        stderr_chunks.append(line)
        logger.debug("EXEC", line.rstrip())

    returncode = proc.wait()
    reader.join()

    stdout = "".join(stdout_chunks)
    stderr = "".join(stderr_chunks)

    for line in stdout.splitlines():
        logger.debug("EXEC", line)

    if returncode != 0:
        raise ExecutionError(
            f"Error executing file (exit code {returncode}):\n{cmdline}\n{stderr}",
            command=cmd,
            stderr=stderr,
            returncode=returncode,
        )

    return ToolResult(command=cmd, returncode=returncode, stdout=stdout, stderr=stderr)
