"""NuGet spec (.nuspec) generation for squirrelpack.

This module renders the package descriptor consumed by NuGet.exe from the
bundled resources/spec.nuspec template and the resolved Options.

Private Helpers:
    - _optional_elements: Build the XML lines for fields that may be unset
    - _escape: XML-escape a value for element content

Design Principles:
    - The bundled template remains pristine; output is produced by
      substitution only
    - Rendering is pure: the same Options always produce the same text
    - Every ${field} in the template must be supplied; an unknown field is
      an error, never an empty string
    - The version is normalized for NuGet (see squirrelpack.versioning)

Example:
    from squirrelpack.build.template import generate_spec

    text = generate_spec(options)
    (staging_dir / "nuget" / f"{options.name}.nuspec").write_text(text)
"""

from __future__ import annotations

from importlib import resources
from pathlib import Path
import string
from typing import Any
from xml.sax.saxutils import escape

from squirrelpack.exceptions import ContentError
from squirrelpack.options import Options
from squirrelpack.versioning import normalize_version


def _escape(value: Any) -> str:
    if value is None:
        return ""
    return escape(str(value))


def _optional_elements(options: Options) -> str:
    """Return XML lines for optional metadata, each ending with a newline."""
    optional = (
        ("iconUrl", options.icon_url),
        ("licenseUrl", options.license_url),
        ("projectUrl", options.homepage),
        ("copyright", options.copyright),
    )
    return "".join(
        f"    <{tag}>{_escape(value)}</{tag}>\n" for tag, value in optional if value
    )


def build_spec_vars(options: Options) -> dict[str, str]:
    """Build the substitution mapping for the .nuspec template.

    Starts from Options.template_vars() and replaces the values that need
    NuGet-specific formatting. All values are XML-escaped.

    Args:
        options: Resolved options.

    Returns:
        Mapping of template field name to rendered text.
    """
    spec_vars = {k: _escape(v) for k, v in options.template_vars().items()}
    spec_vars.update(
        {
            "version": _escape(normalize_version(options.version)),
            "authors": _escape(", ".join(options.authors)),
            "owners": _escape(", ".join(options.owners)),
            "tags": _escape(" ".join(options.tags)),
            "optional_metadata": _optional_elements(options),
        }
    )
    return spec_vars


def render_template(template: str, values: dict[str, str]) -> str:
    """Substitute ${field} placeholders strictly.

    Raises:
        ContentError: If the template references an unknown field or has a
            malformed placeholder.
    """
    try:
        return string.Template(template).substitute(values)
    except KeyError as err:
        raise ContentError(
            f"Template references unknown field {err.args[0]!r}"
        ) from err
    except ValueError as err:
        raise ContentError(f"Invalid template placeholder: {err}") from err


def default_template_path() -> Path:
    """Return the path of the bundled spec template."""
    return Path(str(resources.files("squirrelpack") / "resources" / "spec.nuspec"))


def generate_spec(options: Options, template_path: Path | None = None) -> str:
    """Generate .nuspec text from a template and options.

    Args:
        options: Resolved options.
        template_path: Template to render. Default: the bundled template.

    Returns:
        The rendered XML document.

    Raises:
        ContentError: If the template cannot be read or rendered.
    """
    template_path = template_path or default_template_path()
    options.logger.verbose("CONTENT", f"Generating template from {template_path}")

    try:
        template = template_path.read_text(encoding="utf-8")
    except OSError as err:
        raise ContentError(f"Could not read template {template_path}: {err}") from err

    result = render_template(template, build_spec_vars(options))
    options.logger.debug(
        "CONTENT", f"Generated template from {template_path}\n{result}"
    )
    return result
