"""
squirrelpack - Squirrel.Windows installers for Electron apps

A Python library and CLI that turns a packaged Electron application into
Squirrel.Windows installers and release files.

squirrelpack provides:
  - Metadata defaults read from package.json (inside app.asar or loose)
  - NuGet package generation from a rendered .nuspec
  - Squirrel releasify with optional delta packages from a remote feed
  - Code signing through raw signtool parameters or a certificate
  - Configurable artifact naming with ${name}/${version} placeholders
  - Automatic download of NuGet and Squirrel tools
  - mono-based execution of the .NET tools on macOS and Linux

Quick Start
-----------
Create installers:

    $ squirrelpack create --src dist/app-win32-x64 --dest dist/installers

For full CLI documentation:

    $ squirrelpack --help

Package Structure
-----------------
cli : module
    Command-line interface with argparse.
core : module
    Pipeline orchestration (create_installer).
options : module
    Options record, signing methods and option-name aliases.
metadata : package
    package.json reading (asar aware) and option resolution.
build : package
    The pipeline stages: tools, staging, content, packager, releases, mover.
io : package
    External process runner and HTTP download.
config : package
    YAML/JSON option files.

Public API
----------
    from squirrelpack import create_installer
    from squirrelpack.metadata import resolve_options
    from squirrelpack.build import cleanup_staging
    from squirrelpack.versioning import normalize_version

For more details, see the individual module docstrings.

Project Information
-------------------
Author: Roger Cibrian
License: Apache-2.0
"""

__version__ = "0.1.0"
__author__ = "Roger Cibrian"
__license__ = "Apache-2.0"
__description__ = "Squirrel.Windows installers for Electron applications"

# Re-export commonly used functions for convenience
from squirrelpack.build import cleanup_staging
from squirrelpack.config import load_config_file
from squirrelpack.core import create_installer
from squirrelpack.metadata import resolve_options
from squirrelpack.options import CertificateCredential, Options, RawParams
from squirrelpack.results import InstallerResult
from squirrelpack.versioning import normalize_version

__all__ = [
    "__version__",
    "__author__",
    "__license__",
    "__description__",
    "create_installer",
    "resolve_options",
    "load_config_file",
    "cleanup_staging",
    "normalize_version",
    "Options",
    "RawParams",
    "CertificateCredential",
    "InstallerResult",
]
