"""
Tests for squirrelpack.metadata.resolver module.

Tests metadata reading and option resolution including:
- package.json from app.asar or resources/app/
- Author parsing (npm string convention and mappings)
- Defaults derived from package.json
- Precedence of overrides > option bag > package.json > fallbacks
- Required field validation, name/version types and reserved names
- Bundled default icon and loading animation
- Signing method resolution
"""

from __future__ import annotations

from datetime import date
import json
from pathlib import Path

import pytest

from squirrelpack.build.mover import default_rename
from squirrelpack.exceptions import MetadataError
from squirrelpack.metadata import (
    get_defaults,
    parse_author,
    read_metadata,
    resolve_options,
)
from squirrelpack.metadata.resolver import bundled_resource
from squirrelpack.options import CertificateCredential, RawParams

pytestmark = pytest.mark.unit


class TestReadMetadata:
    """Tests for read_metadata."""

    def test_reads_loose_package_json(self, make_app):
        """Test reading resources/app/package.json."""
        src = make_app()
        assert read_metadata(src)["name"] == "footest"

    def test_reads_asar_package_json(self, make_app):
        """Test reading package.json from resources/app.asar."""
        src = make_app(asar=True)
        assert read_metadata(src)["version"] == "0.0.1"

    def test_asar_wins_over_loose_file(self, make_app):
        """Test that the asar archive is preferred when both exist."""
        src = make_app(asar=True)
        loose = src / "resources" / "app"
        loose.mkdir()
        (loose / "package.json").write_text(json.dumps({"name": "loose"}))

        assert read_metadata(src)["name"] == "footest"

    def test_falls_back_when_asar_lacks_package_json(self, make_app, asar_builder):
        """Test fallback to the loose file when the archive has no package.json."""
        src = make_app()
        (src / "resources" / "app.asar").write_bytes(asar_builder({"main.js": b"x"}))

        assert read_metadata(src)["name"] == "footest"

    def test_missing_metadata_raises(self, tmp_path):
        """Test that a directory without metadata raises MetadataError."""
        with pytest.raises(MetadataError, match="Error reading package metadata"):
            read_metadata(tmp_path)

    def test_invalid_json_raises(self, make_app):
        """Test that unparseable package.json raises MetadataError."""
        src = make_app()
        (src / "resources" / "app" / "package.json").write_text("{not json")

        with pytest.raises(MetadataError):
            read_metadata(src)

    def test_non_object_raises(self, make_app):
        """Test that a JSON array is rejected."""
        src = make_app()
        (src / "resources" / "app" / "package.json").write_text("[1, 2]")

        with pytest.raises(MetadataError, match="JSON object"):
            read_metadata(src)


class TestParseAuthor:
    """Tests for parse_author."""

    @pytest.mark.parametrize(
        "author, expected",
        [
            ("Jane Doe", ("Jane Doe", None)),
            ("Jane Doe <jane@example.com>", ("Jane Doe", None)),
            ("Jane Doe (https://jane.dev)", ("Jane Doe", "https://jane.dev")),
            (
                "Jane Doe <jane@example.com> (https://jane.dev)",
                ("Jane Doe", "https://jane.dev"),
            ),
            ({"name": "Jane Doe", "url": "https://jane.dev"}, ("Jane Doe", "https://jane.dev")),
            ({"email": "jane@example.com"}, (None, None)),
            (None, (None, None)),
        ],
    )
    def test_parse_author(self, author, expected):
        """Test author field variants."""
        assert parse_author(author) == expected


class TestGetDefaults:
    """Tests for get_defaults."""

    def test_defaults_from_package_json(self, sample_package_json):
        """Test fields derived from a complete package.json."""
        defaults = get_defaults(sample_package_json)

        assert defaults["name"] == "footest"
        assert defaults["product_name"] == "Foo Test"
        assert defaults["description"] == "Just a test."
        assert defaults["product_description"] == "Just a test."
        assert defaults["version"] == "0.0.1"
        assert defaults["authors"] == ["Jane Doe"]
        assert defaults["owners"] == ["Jane Doe"]
        assert defaults["homepage"] == "https://footest.example.com"
        assert defaults["exe"] == "footest.exe"
        assert defaults["tags"] == []
        assert defaults["no_msi"] is False

    def test_copyright_generated_from_authors(self, sample_package_json):
        """Test the generated copyright line."""
        defaults = get_defaults(sample_package_json)
        assert defaults["copyright"] == f"Copyright © {date.today().year} Jane Doe"

    def test_explicit_copyright_kept(self, sample_package_json):
        """Test that package.json copyright wins."""
        sample_package_json["copyright"] = "Copyright ACME"
        assert get_defaults(sample_package_json)["copyright"] == "Copyright ACME"

    def test_homepage_falls_back_to_author_url(self, sample_package_json):
        """Test that the author url is used when homepage is absent."""
        del sample_package_json["homepage"]
        assert get_defaults(sample_package_json)["homepage"] == "https://jane.example.com"

    def test_empty_metadata_uses_fallbacks(self):
        """Test hardcoded fallbacks for empty package.json."""
        defaults = get_defaults({})

        assert defaults["name"] == "electron"
        assert defaults["version"] == "0.0.0"
        assert defaults["exe"] == "electron.exe"
        assert defaults["authors"] is None
        assert defaults["copyright"] is None

    def test_bundled_icon_and_animation(self):
        """Test the setup icon and loading animation default to bundled files."""
        defaults = get_defaults({})

        assert defaults["icon"] == bundled_resource("icon.ico")
        assert defaults["animation"] == bundled_resource("animation.gif")
        assert defaults["icon"].is_file()
        assert defaults["animation"].read_bytes().startswith(b"GIF89a")


class TestResolveOptions:
    """Tests for resolve_options."""

    def test_resolves_from_package_json(self, make_app, tmp_path):
        """Test a plain resolution with no overrides."""
        src = make_app()
        options = resolve_options(src, tmp_path / "out")

        assert options.name == "footest"
        assert options.product_name == "Foo Test"
        assert options.version == "0.0.1"
        assert options.src == src
        assert options.dest == tmp_path / "out"
        assert options.rename is default_rename
        assert options.signing is None

    def test_precedence(self, make_app, tmp_path):
        """Test overrides beat the option bag, which beats package.json."""
        src = make_app()
        options = resolve_options(
            src,
            tmp_path / "out",
            {"productName": "From Bag", "version": "9.9.9", "tags": ["a"]},
            version="1.2.3",
        )

        assert options.product_name == "From Bag"
        assert options.version == "1.2.3"
        assert options.tags == ["a"]

    def test_none_does_not_mask_defaults(self, make_app, tmp_path):
        """Test that None values at any layer are ignored."""
        src = make_app()
        options = resolve_options(
            src, tmp_path / "out", {"description": None}, version=None
        )

        assert options.description == "Just a test."
        assert options.version == "0.0.1"

    def test_camel_and_snake_case_keys(self, make_app, tmp_path):
        """Test both key spellings are accepted."""
        src = make_app()
        options = resolve_options(
            src,
            tmp_path / "out",
            {"noMsi": True, "remoteReleases": "https://feed.example.com"},
            icon_url="https://example.com/icon.png",
        )

        assert options.no_msi is True
        assert options.remote_releases == "https://feed.example.com"
        assert options.icon_url == "https://example.com/icon.png"

    def test_unknown_keys_logged(self, make_app, tmp_path, recording_logger):
        """Test that unknown option keys are reported and ignored."""
        src = make_app()
        resolve_options(src, tmp_path / "out", {"bogus": 1}, logger=recording_logger)

        assert "Ignoring unknown option in options: bogus" in recording_logger.text()

    def test_dependent_fields_filled(self, make_app, tmp_path):
        """Test product_name and owners fall back to name and authors."""
        src = make_app({"name": "bar", "description": "d", "author": "Bob"})
        options = resolve_options(src, tmp_path / "out")

        assert options.product_name == "bar"
        assert options.owners == ["Bob"]
        assert options.product_description == "d"

    def test_string_lists_split(self, make_app, tmp_path):
        """Test comma-separated strings are accepted for list fields."""
        src = make_app()
        options = resolve_options(
            src, tmp_path / "out", authors="Jane Doe, John Roe", tags="one,two"
        )

        assert options.authors == ["Jane Doe", "John Roe"]
        assert options.tags == ["one", "two"]

    def test_icon_path_resolved(self, make_app, tmp_path):
        """Test relative asset paths are made absolute."""
        src = make_app()
        options = resolve_options(src, tmp_path / "out", icon="icon.ico")

        assert options.icon == Path("icon.ico").resolve()

    def test_default_assets_used(self, make_app, tmp_path):
        """Test the bundled icon and animation apply when none is given."""
        options = resolve_options(make_app(), tmp_path / "out")

        assert options.icon == bundled_resource("icon.ico").resolve()
        assert options.animation == bundled_resource("animation.gif").resolve()

    @pytest.mark.parametrize("version", [1, 1.5, ["1", "0"]])
    def test_non_string_version_raises(self, make_app, tmp_path, sample_package_json, version):
        """Test a non-string version is a MetadataError, not a crash later on."""
        sample_package_json["version"] = version
        src = make_app(sample_package_json)

        with pytest.raises(MetadataError, match="'version' must be a string"):
            resolve_options(src, tmp_path / "out")

    def test_non_string_name_override_raises(self, make_app, tmp_path):
        """Test the name type is checked after merging overrides."""
        with pytest.raises(MetadataError, match="'name' must be a string"):
            resolve_options(make_app(), tmp_path / "out", name=42)

    @pytest.mark.parametrize("name", ["squirrel", "nuget", "NuGet"])
    def test_reserved_name_raises(self, make_app, tmp_path, sample_package_json, name):
        """Test names that collide with staging subdirectories are rejected."""
        sample_package_json["name"] = name
        src = make_app(sample_package_json)

        with pytest.raises(MetadataError, match="reserved"):
            resolve_options(src, tmp_path / "out")

    def test_missing_description_raises(self, make_app, tmp_path):
        """Test a field-specific error when description is absent."""
        src = make_app({"name": "bar", "version": "1.0.0", "author": "Bob"})

        with pytest.raises(MetadataError, match="description"):
            resolve_options(src, tmp_path / "out")

    def test_product_description_satisfies_description(self, make_app, tmp_path):
        """Test productDescription alone is enough."""
        src = make_app({"name": "bar", "author": "Bob"})
        options = resolve_options(
            src, tmp_path / "out", {"productDescription": "Long text"}
        )

        assert options.description == "Long text"
        assert options.product_description == "Long text"

    def test_missing_authors_raises(self, make_app, tmp_path):
        """Test a field-specific error when authors are absent."""
        src = make_app({"name": "bar", "description": "d"})

        with pytest.raises(MetadataError, match="authors"):
            resolve_options(src, tmp_path / "out")

    def test_authors_override_satisfies_validation(self, make_app, tmp_path):
        """Test that authors supplied as an override pass validation."""
        src = make_app({"name": "bar", "description": "d"})
        options = resolve_options(src, tmp_path / "out", authors=["Bob"])

        assert options.authors == ["Bob"]

    def test_sign_with_params_wins(self, make_app, tmp_path):
        """Test raw signing params take precedence over a certificate."""
        src = make_app()
        options = resolve_options(
            src,
            tmp_path / "out",
            signWithParams="/a /f cert.pfx",
            certificate_file="cert.pfx",
            certificate_password="pw",
        )

        assert options.signing == RawParams("/a /f cert.pfx")

    def test_certificate_pair(self, make_app, tmp_path):
        """Test a certificate file plus password becomes a credential."""
        src = make_app()
        options = resolve_options(
            src,
            tmp_path / "out",
            certificateFile="cert.pfx",
            certificatePassword="pw",
        )

        assert isinstance(options.signing, CertificateCredential)
        assert options.signing.path == Path("cert.pfx").resolve()
        assert options.signing.password == "pw"

    def test_certificate_without_password_is_unsigned(self, make_app, tmp_path):
        """Test a certificate without a password does not sign."""
        src = make_app()
        options = resolve_options(src, tmp_path / "out", certificate_file="cert.pfx")

        assert options.signing is None

    def test_custom_rename_kept(self, make_app, tmp_path):
        """Test that a caller rename function is used."""
        src = make_app()

        def rename(dest, name):
            return f"{dest}/{name}"

        options = resolve_options(src, tmp_path / "out", rename=rename)
        assert options.rename is rename

    def test_missing_metadata_raises(self, tmp_path):
        """Test that missing metadata surfaces as MetadataError."""
        with pytest.raises(MetadataError):
            resolve_options(tmp_path / "empty", tmp_path / "out")
