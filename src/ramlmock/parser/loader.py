"""Load RAML specifications from a local file or a URL.

This module handles all I/O of the pipeline. A RAML document is YAML with a
``#%RAML 0.8`` or ``#%RAML 1.0`` header line and an ``!include`` tag that
pulls in other files relative to the including one:

* ``.raml``, ``.yaml`` and ``.yml`` includes are parsed as YAML (and may
  include further files);
* anything else (``.json`` schemas, ``.xml`` examples) is inlined as text.

The public coroutine :func:`load_spec` reads, validates, parses and
normalizes a document into a :class:`~ramlmock.models.SpecTree`. Local files
are read in a worker thread so that several specs load concurrently; URLs
are fetched with :class:`httpx.AsyncClient`. Every failure surfaces as
:class:`~ramlmock.exceptions.SpecLoadError`.
"""

from __future__ import annotations

import asyncio
import re
from pathlib import Path
from typing import Any, Optional

import httpx
import yaml

from ramlmock.exceptions import SpecLoadError
from ramlmock.models import SpecTree
from ramlmock.parser.normalizer import normalize_spec

_RAML_HEADER_RE = re.compile(r"^#%RAML[ \t]+(?P<version>\d+\.\d+)")

SUPPORTED_RAML_VERSIONS = ("0.8", "1.0")

_YAML_SUFFIXES = (".raml", ".yaml", ".yml")


async def load_spec(source: str) -> SpecTree:
    """Load and normalize the RAML document at *source*.

    Args:
        source: A local file path or an ``http(s)://`` URL.

    Returns:
        The normalized :class:`~ramlmock.models.SpecTree`.

    Raises:
        SpecLoadError: If the document cannot be read, is not RAML 0.8/1.0,
            is not valid YAML, or does not normalize.
    """
    if source.startswith(("http://", "https://")):
        content = await _fetch_url(source)
        raml_version = validate_raml_version(content, source)
        raw = parse_raml(content, base_dir=None, source=source)
    else:
        raml_version, raw = await asyncio.to_thread(_load_from_file, source)

    return normalize_spec(raw, raml_version=raml_version, source=source)


def validate_raml_version(content: str, source: str = "<string>") -> str:
    """Return the RAML version declared on the first line of *content*.

    Raises:
        SpecLoadError: If the header is missing or names an unsupported
            version.
    """
    first_line = content.lstrip("\ufeff").split("\n", 1)[0].strip()
    match = _RAML_HEADER_RE.match(first_line)
    if match is None:
        raise SpecLoadError(
            f"Missing '#%RAML <version>' header in {source}. Is this a RAML document?",
            source=source,
        )
    version = match.group("version")
    if version not in SUPPORTED_RAML_VERSIONS:
        raise SpecLoadError(
            f"RAML {version} is not supported ({source}). "
            f"Supported versions: {', '.join(SUPPORTED_RAML_VERSIONS)}",
            source=source,
        )
    return version


def parse_raml(content: str, base_dir: Optional[Path], source: str) -> dict[str, Any]:
    """Parse RAML text into a plain dict, resolving ``!include`` tags.

    Args:
        content: The document text.
        base_dir: Directory that relative includes are resolved against.
            ``None`` disables includes (remote documents).
        source: Path or URL used in error messages.

    Raises:
        SpecLoadError: If the YAML is invalid, an include cannot be read, or
            the document is not a mapping.
    """
    try:
        raw = yaml.load(content, Loader=_make_loader(base_dir, source, frozenset()))
    except yaml.YAMLError as exc:
        raise SpecLoadError(f"Invalid RAML in {source}: {exc}", source=source) from exc

    if not isinstance(raw, dict):
        raise SpecLoadError(
            f"RAML document {source} must be a mapping (got "
            f"{type(raw).__name__ if raw is not None else 'empty document'})",
            source=source,
        )
    return raw


def _load_from_file(path: str) -> tuple[str, dict[str, Any]]:
    """Read, validate and parse a local RAML file. Runs in a worker thread."""
    file_path = Path(path)
    if not file_path.is_file():
        raise SpecLoadError(f"RAML file not found: {path}", source=path)

    try:
        content = file_path.read_text(encoding="utf-8")
    except OSError as exc:
        raise SpecLoadError(f"Failed to read RAML file {path}: {exc}", source=path) from exc

    raml_version = validate_raml_version(content, path)
    return raml_version, parse_raml(content, file_path.parent, path)


async def _fetch_url(url: str) -> str:
    """Fetch a remote RAML document."""
    try:
        async with httpx.AsyncClient(timeout=30.0, follow_redirects=True) as client:
            response = await client.get(url)
            response.raise_for_status()
    except httpx.HTTPStatusError as exc:
        raise SpecLoadError(
            f"HTTP {exc.response.status_code} fetching RAML from {url}", source=url
        ) from exc
    except httpx.RequestError as exc:
        raise SpecLoadError(f"Failed to fetch RAML from {url}: {exc}", source=url) from exc
    return response.text


# ------------------------------------------------------------------ #
# !include support
# ------------------------------------------------------------------ #


def _make_loader(
    base_dir: Optional[Path], source: str, chain: frozenset[Path]
) -> type[yaml.SafeLoader]:
    """Build a SafeLoader subclass whose ``!include`` resolves against *base_dir*.

    *chain* holds the files currently being included, to reject include
    cycles.
    """

    class _IncludeLoader(yaml.SafeLoader):
        pass

    def _include(loader: yaml.SafeLoader, node: yaml.Node) -> Any:
        target = str(loader.construct_scalar(node)).strip()
        if base_dir is None:
            raise SpecLoadError(
                f"!include {target} cannot be resolved in remote spec {source}",
                source=source,
            )
        return _read_include((base_dir / target).resolve(), source, chain)

    _IncludeLoader.add_constructor("!include", _include)
    return _IncludeLoader


def _read_include(path: Path, source: str, chain: frozenset[Path]) -> Any:
    if path in chain:
        raise SpecLoadError(f"Circular !include of {path} in {source}", source=source)
    try:
        content = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise SpecLoadError(f"Cannot read !include {path}: {exc}", source=source) from exc

    if path.suffix.lower() not in _YAML_SUFFIXES:
        return content

    try:
        return yaml.load(content, Loader=_make_loader(path.parent, source, chain | {path}))
    except yaml.YAMLError as exc:
        raise SpecLoadError(f"Invalid YAML in !include {path}: {exc}", source=source) from exc
