"""
Pytest configuration and shared fixtures for squirrelpack tests.

This module provides reusable fixtures and test utilities used across
the test suite: fake Electron applications (loose and asar-packed), a
populated vendor directory, a fake tool runner that writes the files the
real NuGet/Squirrel tools would, and a logger that records everything.
"""

from __future__ import annotations

import json
from pathlib import Path
import re
import struct
from typing import Any

import pytest

from squirrelpack.exceptions import ExecutionError
from squirrelpack.io.process import ToolResult


def build_asar(
    files: dict[str, bytes],
    links: dict[str, str] | None = None,
    unpacked: dict[str, int] | None = None,
) -> bytes:
    """Build an asar archive in memory.

    files maps archive paths ("package.json", "lib/a.js") to contents;
    links maps archive paths to the path they point at; unpacked maps
    archive paths to the size of a file stored outside the archive.
    """
    index: dict[str, Any] = {"files": {}}
    data = b""

    def _parent(path: str) -> tuple[dict[str, Any], str]:
        node = index
        parts = path.split("/")
        for part in parts[:-1]:
            node = node["files"].setdefault(part, {"files": {}})
        return node, parts[-1]

    for path, content in files.items():
        node, leaf = _parent(path)
        node["files"][leaf] = {"size": len(content), "offset": str(len(data))}
        data += content

    for path, target in (links or {}).items():
        node, leaf = _parent(path)
        node["files"][leaf] = {"link": target}

    for path, size in (unpacked or {}).items():
        node, leaf = _parent(path)
        node["files"][leaf] = {"size": size, "unpacked": True}

    raw = json.dumps(index).encode("utf-8")
    padded = raw + b"\0" * (-len(raw) % 4)
    header = struct.pack("<II", len(padded) + 4, len(raw)) + padded
    return struct.pack("<II", 4, len(header)) + header + data


class RecordingLogger:
    """Logger that stores every message for later assertions."""

    def __init__(self) -> None:
        self.steps: list[tuple[int, int, str]] = []
        self.messages: list[tuple[str, str, str]] = []

    def step(self, step: int, total: int, message: str) -> None:
        self.steps.append((step, total, message))

    def verbose(self, prefix: str, message: str) -> None:
        self.messages.append(("verbose", prefix, message))

    def debug(self, prefix: str, message: str) -> None:
        self.messages.append(("debug", prefix, message))

    def text(self) -> str:
        return "\n".join(message for _, _, message in self.messages)


class FakeRunner:
    """Stand-in for run_tool that mimics NuGet, SyncReleases and Squirrel.

    Attributes:
        calls: (tool file name, args) for every invocation, in order.
        remote_version: Version published on the fake release feed, or None
            for an empty feed.
        fail_on: Tool file name that should fail with ExecutionError.
    """

    def __init__(
        self, remote_version: str | None = None, fail_on: str | None = None
    ) -> None:
        self.calls: list[tuple[str, list[str]]] = []
        self.remote_version = remote_version
        self.fail_on = fail_on

    def __call__(self, file, args, logger=None) -> ToolResult:
        name = Path(file).name
        args = list(args)
        self.calls.append((name, args))
        command = [str(file), *args]

        if name == self.fail_on:
            raise ExecutionError(
                f"Error executing file (exit code 1):\n{' '.join(command)}\nsimulated failure",
                command=command,
                stderr="simulated failure",
                returncode=1,
            )

        if args and args[0] == "pack":
            self._pack(args)
        elif "--url" in args:
            self._sync(args)
        elif "--releasify" in args:
            self._releasify(args)

        return ToolResult(command=command, returncode=0, stdout="", stderr="")

    def tools_called(self) -> list[str]:
        return [name for name, _ in self.calls]

    @staticmethod
    def _arg(args: list[str], flag: str) -> str:
        return args[args.index(flag) + 1]

    def _pack(self, args: list[str]) -> None:
        spec = Path(args[1]).read_text(encoding="utf-8")
        pkg_id = re.search(r"<id>(.*?)</id>", spec).group(1)
        version = re.search(r"<version>(.*?)</version>", spec).group(1)
        out = Path(self._arg(args, "-OutputDirectory"))
        (out / f"{pkg_id}.{version}.nupkg").write_bytes(b"nupkg")

    def _sync(self, args: list[str]) -> None:
        release_dir = Path(self._arg(args, "--releaseDir"))
        if self.remote_version is None:
            return
        full = release_dir / f"footest-{self.remote_version}-full.nupkg"
        full.write_bytes(b"previous release")
        (release_dir / "RELEASES").write_text(f"SHA1 {full.name} 16\n")

    def _releasify(self, args: list[str]) -> None:
        package = Path(self._arg(args, "--releasify"))
        release_dir = Path(self._arg(args, "--releaseDir"))
        pkg_id, version = re.match(r"^(.+?)\.(\d.*)\.nupkg$", package.name).groups()

        previous = [
            p for p in release_dir.glob(f"{pkg_id}-*-full.nupkg")
            if p.name != f"{pkg_id}-{version}-full.nupkg"
        ]

        full = release_dir / f"{pkg_id}-{version}-full.nupkg"
        full.write_bytes(b"full release")
        lines = [f"SHA1 {full.name} 12"]
        if previous:
            delta = release_dir / f"{pkg_id}-{version}-delta.nupkg"
            delta.write_bytes(b"delta release")
            lines.append(f"SHA1 {delta.name} 13")
        (release_dir / "RELEASES").write_text("\n".join(lines) + "\n")
        (release_dir / "Setup.exe").write_bytes(b"setup exe")
        if "--no-msi" not in args:
            (release_dir / "Setup.msi").write_bytes(b"setup msi")


@pytest.fixture
def tmp_test_dir(tmp_path: Path) -> Path:
    """
    Provide a temporary directory for test artifacts.

    Automatically cleaned up after test completion.
    """
    return tmp_path


@pytest.fixture
def sample_package_json() -> dict[str, Any]:
    """Provide package.json contents for the footest application."""
    return {
        "name": "footest",
        "productName": "Foo Test",
        "description": "Just a test.",
        "version": "0.0.1",
        "author": "Jane Doe <jane@example.com> (https://jane.example.com)",
        "homepage": "https://footest.example.com",
    }


@pytest.fixture
def make_app(tmp_test_dir: Path, sample_package_json: dict[str, Any]):
    """
    Factory fixture for creating fake packaged Electron applications.

    Usage:
        src = make_app()                      # loose resources/app/package.json
        src = make_app(asar=True)             # resources/app.asar
        src = make_app({"name": "x"}, dirname="other")
    """

    def _create(
        package_json: dict[str, Any] | None = None,
        *,
        asar: bool = False,
        dirname: str = "app",
    ) -> Path:
        data = sample_package_json if package_json is None else package_json
        src = tmp_test_dir / dirname
        resources = src / "resources"
        resources.mkdir(parents=True)
        raw = json.dumps(data).encode("utf-8")
        if asar:
            (resources / "app.asar").write_bytes(
                build_asar({"package.json": raw, "main.js": b"console.log(1)"})
            )
        else:
            (resources / "app").mkdir()
            (resources / "app" / "package.json").write_bytes(raw)
        (src / f"{data.get('name', 'electron')}.exe").write_bytes(b"MZ fake exe")
        (src / "LICENSE").write_text("MIT")
        return src

    return _create


@pytest.fixture
def vendor_dir(tmp_test_dir: Path) -> Path:
    """Provide a vendor directory holding (fake) copies of every tool."""
    vendor = tmp_test_dir / "vendor"
    (vendor / "nuget").mkdir(parents=True)
    (vendor / "squirrel").mkdir(parents=True)
    (vendor / "nuget" / "NuGet.exe").write_bytes(b"nuget")
    for tool in ("Squirrel.exe", "Squirrel.com", "Squirrel-Mono.exe", "SyncReleases.exe"):
        (vendor / "squirrel" / tool).write_bytes(tool.encode("ascii"))
    return vendor


@pytest.fixture
def asar_builder():
    """Provide the in-memory asar archive builder."""
    return build_asar


@pytest.fixture
def fake_runner() -> FakeRunner:
    """Provide a fake runner with an empty release feed."""
    return FakeRunner()


@pytest.fixture
def make_runner():
    """
    Factory fixture for fake runners.

    Usage:
        runner = make_runner(remote_version="0.0.0")
        runner = make_runner(fail_on="NuGet.exe")
    """
    return FakeRunner


@pytest.fixture
def recording_logger() -> RecordingLogger:
    """Provide a logger that records all messages."""
    return RecordingLogger()


@pytest.fixture
def make_options(tmp_test_dir: Path):
    """
    Factory fixture for resolved Options without reading package.json.

    Usage:
        options = make_options(no_msi=True)
    """
    from squirrelpack.build.mover import default_rename
    from squirrelpack.options import Options, resolve_signing

    def _create(**fields: Any) -> Options:
        values: dict[str, Any] = {
            "name": "footest",
            "product_name": "Foo Test",
            "description": "Just a test.",
            "product_description": "Just a test.",
            "version": "0.0.1",
            "authors": ["Jane Doe"],
            "owners": ["Jane Doe"],
            "exe": "footest.exe",
            "src": tmp_test_dir / "app",
            "dest": tmp_test_dir / "out",
            "rename": default_rename,
        }
        values.update(fields)
        options = Options(**values)
        options.signing = resolve_signing(options)
        return options

    return _create
