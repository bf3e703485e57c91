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

"""The options record threaded through every pipeline stage.

Options is built once by squirrelpack.metadata.resolve_options() and then
passed to each stage. Field names are snake_case; the camelCase spellings
used in package.json and config files are accepted on input through
OPTION_ALIASES.

Signing is resolved into a SigningMethod when options are finalized:

- RawParams: a caller-supplied --signWithParams string
- CertificateCredential: a certificate file and password
- None: the package is not signed

Example:
    Normalizing config keys:
        ```python
        from squirrelpack.options import normalize_option_keys

        known, unknown = normalize_option_keys(
            {"productName": "Foo", "noMsi": True, "bogus": 1}
        )
        # known == {"product_name": "Foo", "no_msi": True}
        # unknown == ["bogus"]
        ```
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Union

from squirrelpack.logging import Logger, SilentLogger

RenameFunc = Callable[[Path, str], Union[str, Path]]


@dataclass(frozen=True)
class RawParams:
    """Signing parameters passed verbatim to Squirrel --signWithParams."""

    params: str


@dataclass(frozen=True)
class CertificateCredential:
    """A code signing certificate file and its password."""

    path: Path
    password: str


SigningMethod = Union[RawParams, CertificateCredential, None]


# camelCase (package.json / config file) -> Options attribute
OPTION_ALIASES: dict[str, str] = {
    "productName": "product_name",
    "productDescription": "product_description",
    "iconUrl": "icon_url",
    "licenseUrl": "license_url",
    "requireLicenseAcceptance": "require_license_acceptance",
    "certificateFile": "certificate_file",
    "certificatePassword": "certificate_password",
    "signWithParams": "sign_with_params",
    "remoteReleases": "remote_releases",
    "noMsi": "no_msi",
    "vendorDirectory": "vendor_directory",
    "bin": "exe",
}

# Fields that never take part in template substitution
_NON_TEMPLATE_FIELDS = {"rename", "logger", "signing"}


@dataclass
class Options:
    """Complete, defaulted settings for one pipeline run.

    Attributes:
        name: Package id; also used for the staging and spec file names.
        product_name: Human-readable title (defaults to name).
        description: Short summary of the application.
        product_description: Long description (defaults to description).
        version: Semantic version of the application.
        copyright: Copyright line for the package.
        authors: Ordered list of author names.
        owners: Ordered list of owner names (defaults to authors).
        homepage: Project URL.
        exe: Name of the application's main executable.
        icon: Setup icon (.ico) passed to Squirrel. Defaults to the
            bundled resources/icon.ico when resolved from package.json.
        animation: Loading animation (.gif) shown by Setup.exe. Defaults
            to the bundled resources/animation.gif.
        icon_url: URL of the package icon.
        license_url: URL of the license.
        require_license_acceptance: Whether NuGet should prompt for the license.
        tags: Package tags.
        certificate_file: Code signing certificate (.pfx).
        certificate_password: Password for certificate_file.
        sign_with_params: Raw signtool parameters; wins over the certificate pair.
        remote_releases: URL of a release feed to sync before releasifying.
        no_msi: Skip creating the MSI installer.
        src: Directory containing the packaged application.
        dest: Directory that receives the final artifacts.
        vendor_directory: Directory holding NuGet and Squirrel tools.
        rename: Maps (dest, basename) to the artifact's final path.
        logger: Diagnostic sink for all stages.
        signing: Resolved signing method (set by resolve_options).
    """

    name: str = "electron"
    product_name: str | None = None
    description: str | None = None
    product_description: str | None = None
    version: str = "0.0.0"
    copyright: str | None = None
    authors: list[str] = field(default_factory=list)
    owners: list[str] = field(default_factory=list)
    homepage: str | None = None
    exe: str | None = None
    icon: Path | None = None
    animation: Path | None = None
    icon_url: str | None = None
    license_url: str | None = None
    require_license_acceptance: bool = False
    tags: list[str] = field(default_factory=list)
    certificate_file: Path | None = None
    certificate_password: str | None = None
    sign_with_params: str | None = None
    remote_releases: str | None = None
    no_msi: bool = False
    src: Path = Path(".")
    dest: Path = Path(".")
    vendor_directory: Path | None = None
    rename: RenameFunc | None = None
    logger: Logger = field(default_factory=SilentLogger)
    signing: SigningMethod = None

    def template_vars(self) -> dict[str, str]:
        """Return every substitutable field as a string.

        Lists are joined with ", ", booleans become "true"/"false" and unset
        values become "". Both the attribute name and its camelCase alias
        are present, so "${product_name}" and "${productName}" both work.
        """
        result: dict[str, str] = {}
        for f in fields(self):
            if f.name in _NON_TEMPLATE_FIELDS:
                continue
            result[f.name] = _stringify(getattr(self, f.name))
        for alias, attr in OPTION_ALIASES.items():
            result.setdefault(alias, result[attr])
        return result

    def summary(self) -> dict[str, Any]:
        """Return a loggable view of the options with secrets masked."""
        data = {
            f.name: getattr(self, f.name)
            for f in fields(self)
            if f.name not in _NON_TEMPLATE_FIELDS
        }
        if data.get("certificate_password"):
            data["certificate_password"] = "********"
        return data


def _stringify(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (list, tuple)):
        return ", ".join(str(v) for v in value)
    return str(value)


def option_names() -> set[str]:
    """Return the attribute names accepted by Options."""
    return {f.name for f in fields(Options)} - {"signing"}


def normalize_option_keys(data: Mapping[str, Any]) -> tuple[dict[str, Any], list[str]]:
    """Translate camelCase keys to Options attributes.

    Keys whose value is None are dropped so they never mask a default.

    Args:
        data: Raw option mapping (CLI, config file, or API caller).

    Returns:
        A tuple (known, unknown), where known maps Options attribute names
            to values and unknown lists the keys that matched nothing.
    """
    valid = option_names()
    known: dict[str, Any] = {}
    unknown: list[str] = []
    for key, value in data.items():
        attr = OPTION_ALIASES.get(key, key)
        if attr not in valid:
            unknown.append(key)
            continue
        if value is None:
            continue
        known[attr] = value
    return known, unknown


def resolve_signing(options: Options) -> SigningMethod:
    """Pick the signing method for a run.

    Explicit sign_with_params wins; otherwise a certificate file and
    password are used only when both are present.
    """
    if options.sign_with_params:
        return RawParams(options.sign_with_params)
    if options.certificate_file and options.certificate_password:
        return CertificateCredential(
            Path(options.certificate_file).resolve(), options.certificate_password
        )
    return None
