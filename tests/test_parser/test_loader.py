"""Tests for ramlmock.parser.loader."""

from __future__ import annotations

import asyncio
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

from ramlmock.exceptions import SpecLoadError
from ramlmock.parser.loader import load_spec, parse_raml, validate_raml_version

FIXTURES_DIR = Path(__file__).parent.parent / "fixtures"

PING_TEXT = """#%RAML 0.8
title: Remote Ping
/ping:
  get:
    responses:
      200:
        body:
          application/json:
            example: {"status": "ok"}
"""


def _mock_async_client(response: MagicMock | None = None, side_effect: Exception | None = None):
    """Build a patched httpx.AsyncClient usable as an async context manager."""
    client = MagicMock()
    client.get = AsyncMock(return_value=response, side_effect=side_effect)
    client.__aenter__ = AsyncMock(return_value=client)
    client.__aexit__ = AsyncMock(return_value=False)
    return client


# ---------------------------------------------------------------------------
# validate_raml_version
# ---------------------------------------------------------------------------


class TestValidateRamlVersion:
    @pytest.mark.parametrize("version", ["0.8", "1.0"])
    def test_supported(self, version: str) -> None:
        assert validate_raml_version(f"#%RAML {version}\ntitle: x\n") == version

    def test_byte_order_mark(self) -> None:
        assert validate_raml_version("\ufeff#%RAML 1.0\ntitle: x\n") == "1.0"

    def test_missing_header(self) -> None:
        with pytest.raises(SpecLoadError, match="Missing '#%RAML <version>' header"):
            validate_raml_version("title: x\n", "api.yaml")

    def test_unsupported_version(self) -> None:
        with pytest.raises(SpecLoadError, match="RAML 2.0 is not supported"):
            validate_raml_version("#%RAML 2.0\n")

    def test_header_must_be_first_line(self) -> None:
        with pytest.raises(SpecLoadError):
            validate_raml_version("\n#%RAML 1.0\n")


# ---------------------------------------------------------------------------
# parse_raml
# ---------------------------------------------------------------------------


class TestParseRaml:
    def test_plain_document(self) -> None:
        raw = parse_raml(PING_TEXT, base_dir=None, source="ping.raml")
        assert raw["title"] == "Remote Ping"
        assert raw["/ping"]["get"]["responses"][200]["body"]["application/json"]["example"] == {
            "status": "ok"
        }

    def test_invalid_yaml(self) -> None:
        with pytest.raises(SpecLoadError, match="Invalid RAML in broken.raml"):
            parse_raml("#%RAML 1.0\n/things:\n  get: [unclosed\n", None, "broken.raml")

    def test_not_a_mapping(self) -> None:
        with pytest.raises(SpecLoadError, match="must be a mapping"):
            parse_raml("#%RAML 1.0\n- a\n- b\n", None, "list.raml")

    def test_empty_document(self) -> None:
        with pytest.raises(SpecLoadError, match="empty document"):
            parse_raml("#%RAML 1.0\n", None, "empty.raml")

    def test_json_include_inlined_as_text(self) -> None:
        raw = parse_raml(
            "#%RAML 1.0\nschema: !include schemas/user.json\n", FIXTURES_DIR, "api.raml"
        )
        assert raw["schema"] == (FIXTURES_DIR / "schemas" / "user.json").read_text()

    def test_yaml_include_parsed(self, tmp_path: Path) -> None:
        (tmp_path / "fragment.yaml").write_text("description: shared\nnested: !include note.txt\n")
        (tmp_path / "note.txt").write_text("hello")

        raw = parse_raml("#%RAML 1.0\nshared: !include fragment.yaml\n", tmp_path, "api.raml")

        assert raw["shared"] == {"description": "shared", "nested": "hello"}

    def test_missing_include(self, tmp_path: Path) -> None:
        with pytest.raises(SpecLoadError, match="Cannot read !include"):
            parse_raml("#%RAML 1.0\nschema: !include nope.json\n", tmp_path, "api.raml")

    def test_circular_include(self, tmp_path: Path) -> None:
        (tmp_path / "a.yaml").write_text("next: !include b.yaml\n")
        (tmp_path / "b.yaml").write_text("next: !include a.yaml\n")

        with pytest.raises(SpecLoadError, match="Circular !include"):
            parse_raml("#%RAML 1.0\nstart: !include a.yaml\n", tmp_path, "api.raml")

    def test_include_rejected_without_base_dir(self) -> None:
        with pytest.raises(SpecLoadError, match="cannot be resolved in remote spec"):
            parse_raml("#%RAML 1.0\nschema: !include user.json\n", None, "http://x/api.raml")

    def test_python_tags_rejected(self) -> None:
        with pytest.raises(SpecLoadError):
            parse_raml("#%RAML 1.0\nx: !!python/object/apply:os.system ['true']\n", None, "evil.raml")


# ---------------------------------------------------------------------------
# load_spec: local files
# ---------------------------------------------------------------------------


class TestLoadSpecFile:
    def test_users_fixture(self) -> None:
        spec = asyncio.run(load_spec(str(FIXTURES_DIR / "users.raml")))

        assert spec.raml_version == "1.0"
        assert spec.title == "Users API"
        assert spec.version == "v1"
        assert spec.media_type == "application/json"
        assert [r.relative_uri for r in spec.root.resources] == ["/users"]

    def test_ping_fixture_is_raml_08(self) -> None:
        spec = asyncio.run(load_spec(str(FIXTURES_DIR / "ping-a.raml")))
        assert spec.raml_version == "0.8"
        assert spec.version == "v2"

    def test_source_recorded(self) -> None:
        path = str(FIXTURES_DIR / "ping-b.raml")
        assert asyncio.run(load_spec(path)).source == path

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(SpecLoadError, match="RAML file not found"):
            asyncio.run(load_spec(str(tmp_path / "missing.raml")))

    def test_not_raml(self) -> None:
        with pytest.raises(SpecLoadError, match="Is this a RAML document"):
            asyncio.run(load_spec(str(FIXTURES_DIR / "not-raml.yaml")))

    def test_invalid_yaml(self) -> None:
        with pytest.raises(SpecLoadError, match="Invalid RAML"):
            asyncio.run(load_spec(str(FIXTURES_DIR / "broken.raml")))


# ---------------------------------------------------------------------------
# load_spec: URLs
# ---------------------------------------------------------------------------


class TestLoadSpecUrl:
    def test_fetches_and_parses(self) -> None:
        response = MagicMock()
        response.text = PING_TEXT
        response.raise_for_status = MagicMock()
        client = _mock_async_client(response)

        with patch("ramlmock.parser.loader.httpx.AsyncClient", return_value=client):
            spec = asyncio.run(load_spec("https://example.com/ping.raml"))

        assert spec.title == "Remote Ping"
        assert spec.source == "https://example.com/ping.raml"
        client.get.assert_awaited_once_with("https://example.com/ping.raml")

    def test_http_error(self) -> None:
        request = httpx.Request("GET", "https://example.com/api.raml")
        error_response = httpx.Response(404, request=request)
        response = MagicMock()
        response.raise_for_status = MagicMock(
            side_effect=httpx.HTTPStatusError("404", request=request, response=error_response)
        )
        client = _mock_async_client(response)

        with patch("ramlmock.parser.loader.httpx.AsyncClient", return_value=client):
            with pytest.raises(SpecLoadError, match="HTTP 404"):
                asyncio.run(load_spec("https://example.com/api.raml"))

    def test_connection_error(self) -> None:
        client = _mock_async_client(side_effect=httpx.ConnectError("refused"))

        with patch("ramlmock.parser.loader.httpx.AsyncClient", return_value=client):
            with pytest.raises(SpecLoadError, match="Failed to fetch RAML"):
                asyncio.run(load_spec("https://example.com/api.raml"))
