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

"""Squirrel release generation for squirrelpack.

Two steps, both driven through external tools:

1. sync_remote_releases: when Options.remote_releases is set, run
   SyncReleases.exe so the previous RELEASES file and packages are in
   squirrel/ and Squirrel can compute a delta package.
2. releasify_package: run Squirrel --releasify on the intermediate
   .nupkg to produce RELEASES, <name>-<version>-full.nupkg, an optional
   -delta.nupkg, Setup.exe and (on Windows, unless no_msi) Setup.msi.

Neither step is retried. A failed sync is a SyncError; if the feed simply
holds no compatible release, Squirrel just skips the delta.

Example:
    from squirrelpack.build.releases import releasify_package

    releasify_package(options, staging_dir, package, squirrel=tool_path)
"""

from __future__ import annotations

from pathlib import Path

from squirrelpack.exceptions import ExecutionError, ReleaseError, SyncError
from squirrelpack.io.process import Runner, run_tool
from squirrelpack.options import CertificateCredential, Options, RawParams, SigningMethod


def sync_args(options: Options, staging_dir: Path) -> list[str]:
    """Build the SyncReleases.exe argument list."""
    return [
        "--url",
        str(options.remote_releases),
        "--releaseDir",
        str(staging_dir / "squirrel"),
    ]


def sync_remote_releases(
    options: Options,
    staging_dir: Path,
    sync_tool: Path,
    runner: Runner = run_tool,
) -> bool:
    """Pull previous releases from the remote feed, if one is configured.

    Args:
        options: Resolved options.
        staging_dir: Staging directory for this run.
        sync_tool: Path to SyncReleases.exe.
        runner: Process runner. Default: run_tool.

    Returns:
        True if a sync ran, False when no feed is configured.

    Raises:
        SyncError: If SyncReleases.exe fails.
    """
    if not options.remote_releases:
        options.logger.verbose("SYNC", "No remote releases configured, skipping sync")
        return False

    options.logger.verbose("SYNC", f"Syncing package at {staging_dir}")

    try:
        runner(sync_tool, sync_args(options, staging_dir), options.logger)
    except ExecutionError as err:
        raise SyncError(f"Error syncing remote releases: {err}") from err

    return True


def signing_args(signing: SigningMethod, product_name: str | None = None) -> list[str]:
    """Build the --signWithParams argument block.

    Returns an empty list when the package is not signed. A certificate
    credential becomes signtool parameters with every value quoted, so
    paths and names containing spaces survive.

    Example:
        >>> signing_args(RawParams("/a /f cert.pfx"))
        ['--signWithParams', '/a /f cert.pfx']
        >>> signing_args(CertificateCredential(Path("/c/my cert.pfx"), "pw"), "Foo App")
        ['--signWithParams', '/a /f "/c/my cert.pfx" /p "pw" /d "Foo App"']
    """
    if isinstance(signing, RawParams):
        return ["--signWithParams", signing.params]
    if isinstance(signing, CertificateCredential):
        params = [
            "/a",
            f'/f "{Path(signing.path).resolve()}"',
            f'/p "{signing.password}"',
        ]
        if product_name:
            params.append(f'/d "{product_name}"')
        return ["--signWithParams", " ".join(params)]
    return []


def releasify_args(options: Options, staging_dir: Path, package: Path) -> list[str]:
    """Build the Squirrel --releasify argument list."""
    args = [
        "--releasify",
        str(package),
        "--releaseDir",
        str(staging_dir / "squirrel"),
    ]

    if options.icon:
        args += ["--setupIcon", str(Path(options.icon).resolve())]

    if options.animation:
        args += ["--loadingGif", str(Path(options.animation).resolve())]

    args += signing_args(options.signing, options.product_name)

    if options.no_msi:
        args.append("--no-msi")

    return args


def releasify_package(
    options: Options,
    staging_dir: Path,
    package: Path,
    squirrel: Path,
    runner: Runner = run_tool,
) -> Path:
    """Turn the intermediate .nupkg into Squirrel release artifacts.

    Args:
        options: Resolved options.
        staging_dir: Staging directory for this run.
        package: The .nupkg produced by NuGet.
        squirrel: Path to Squirrel.com (Windows) or Squirrel-Mono.exe.
        runner: Process runner. Default: run_tool.

    Returns:
        The squirrel/ release directory.

    Raises:
        ReleaseError: If Squirrel fails.
    """
    options.logger.verbose("RELEASE", f"Releasifying package at {staging_dir}")

    try:
        runner(squirrel, releasify_args(options, staging_dir, package), options.logger)
    except ExecutionError as err:
        raise ReleaseError(f"Error releasifying package: {err}") from err

    return staging_dir / "squirrel"
