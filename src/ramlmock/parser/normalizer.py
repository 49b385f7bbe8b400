"""Normalize a raw RAML document into a :class:`~ramlmock.models.SpecTree`.

The raw document is the plain dict produced by
:func:`~ramlmock.parser.loader.parse_raml`. Normalization only keeps what the
collection pipeline needs:

* keys starting with ``/`` are resources, nested to any depth;
* keys naming an HTTP verb are methods, with their ``responses``;
* each response body is keyed by media type. A body written without a media
  type (``body: {schema: ..., example: ...}``) is filed under the document's
  ``mediaType``, or ``application/json`` when none is declared;
* body ``schema`` (RAML 0.8) or ``type`` (RAML 1.0) values that name an
  entry of the top-level ``schemas``/``types`` are replaced by that entry,
  and schemas written as YAML mappings are serialized to JSON text;
* string examples that hold JSON are decoded; RAML 1.0 ``examples`` maps
  contribute their first example;
* a resource's uri parameters are the declared ones plus every
  ``{placeholder}`` of its relative uri.

Resource types and traits are not applied.
"""

from __future__ import annotations

import json
import re
from typing import Any, Optional

from pydantic import ValidationError

from ramlmock.exceptions import SpecLoadError
from ramlmock.models import BodyNode, MethodNode, ResponseNode, SpecNode, SpecTree

HTTP_VERBS = frozenset(
    ["get", "post", "put", "patch", "delete", "head", "options", "trace", "connect"]
)

DEFAULT_MEDIA_TYPE = "application/json"

_PLACEHOLDER_RE = re.compile(r"\{([^{}]+)\}")

# Keys that mark a body written without a media type level.
_BODY_KEYS = frozenset(["schema", "type", "example", "examples", "properties"])


def normalize_spec(raw: dict[str, Any], raml_version: str, source: str) -> SpecTree:
    """Build a :class:`~ramlmock.models.SpecTree` from a parsed RAML document.

    Args:
        raw: The parsed document.
        raml_version: Version from the ``#%RAML`` header.
        source: File path or URL, recorded on the tree.

    Raises:
        SpecLoadError: If a resource or method is not a mapping, or the
            result fails model validation.
    """
    media_type = raw.get("mediaType")
    if isinstance(media_type, list):
        media_type = media_type[0] if media_type else None

    context = _Context(
        source=source,
        media_type=media_type or DEFAULT_MEDIA_TYPE,
        schemas=_named_schemas(raw),
    )

    try:
        return SpecTree(
            source=source,
            raml_version=raml_version,
            title=_optional_str(raw.get("title")),
            version=_optional_str(raw.get("version")),
            base_uri=_optional_str(raw.get("baseUri")),
            media_type=media_type,
            root=SpecNode(resources=_normalize_resources(raw, "", context)),
        )
    except ValidationError as exc:
        raise SpecLoadError(f"Invalid RAML structure in {source}: {exc}", source=source) from exc


class _Context:
    """Document-wide settings threaded through the normalization."""

    def __init__(self, source: str, media_type: str, schemas: dict[str, Any]) -> None:
        self.source = source
        self.media_type = media_type
        self.schemas = schemas


def _named_schemas(raw: dict[str, Any]) -> dict[str, Any]:
    """Collect top-level ``schemas`` and ``types``.

    RAML 0.8 writes ``schemas`` as a list of single-entry mappings, RAML 1.0
    as a mapping.
    """
    named: dict[str, Any] = {}
    for key in ("schemas", "types"):
        declared = raw.get(key)
        if isinstance(declared, list):
            for entry in declared:
                if isinstance(entry, dict):
                    named.update(entry)
        elif isinstance(declared, dict):
            named.update(declared)
    return named


def _normalize_resources(parent: dict[str, Any], parent_path: str, ctx: _Context) -> list[SpecNode]:
    resources: list[SpecNode] = []
    for key, value in parent.items():
        if isinstance(key, str) and key.startswith("/"):
            resources.append(_normalize_resource(key, value, parent_path + key, ctx))
    return resources


def _normalize_resource(relative_uri: str, value: Any, full_path: str, ctx: _Context) -> SpecNode:
    if value is None:
        value = {}
    if not isinstance(value, dict):
        raise SpecLoadError(
            f"Resource {full_path} in {ctx.source} must be a mapping", source=ctx.source
        )

    uri_parameters: dict[str, Any] = {}
    declared = value.get("uriParameters")
    if isinstance(declared, dict):
        uri_parameters.update(declared)
    for name in _PLACEHOLDER_RE.findall(relative_uri):
        uri_parameters.setdefault(name, {})

    methods: list[MethodNode] = []
    for key, method_value in value.items():
        if isinstance(key, str) and key.lower() in HTTP_VERBS:
            methods.append(_normalize_method(key, method_value, full_path, ctx))

    return SpecNode(
        relative_uri=relative_uri,
        display_name=_optional_str(value.get("displayName")),
        uri_parameters=uri_parameters,
        methods=methods,
        resources=_normalize_resources(value, full_path, ctx),
    )


def _normalize_method(verb: str, value: Any, full_path: str, ctx: _Context) -> MethodNode:
    if value is None:
        value = {}
    if not isinstance(value, dict):
        raise SpecLoadError(
            f"Method {verb} {full_path} in {ctx.source} must be a mapping", source=ctx.source
        )

    responses: dict[str, Optional[ResponseNode]] = {}
    for code, response in (value.get("responses") or {}).items():
        if isinstance(response, dict):
            responses[str(code)] = ResponseNode(
                description=_optional_str(response.get("description")),
                body=_normalize_body(response.get("body"), ctx),
            )
        else:
            responses[str(code)] = None

    return MethodNode(
        method=verb,
        description=_optional_str(value.get("description")),
        responses=responses,
    )


def _normalize_body(body: Any, ctx: _Context) -> Optional[dict[str, BodyNode]]:
    if not isinstance(body, dict) or not body:
        return None

    if not any("/" in str(key) for key in body) and _BODY_KEYS.intersection(body):
        body = {ctx.media_type: body}

    normalized: dict[str, BodyNode] = {}
    for media_type, entry in body.items():
        if not isinstance(entry, dict):
            normalized[str(media_type)] = BodyNode()
            continue
        if "schema" in entry:
            schema = _schema_text(entry["schema"], ctx, keep_unknown=True)
        else:
            schema = _schema_text(entry.get("type"), ctx, keep_unknown=False)
        normalized[str(media_type)] = BodyNode(schema=schema, example=_example(entry))
    return normalized


def _schema_text(value: Any, ctx: _Context, keep_unknown: bool) -> Optional[str]:
    """Return the JSON text of a body schema, or ``None``.

    *keep_unknown* keeps strings that are neither JSON nor a named schema, so
    that a malformed RAML 0.8 ``schema`` is reported when it is parsed. RAML
    1.0 ``type`` values such as ``string`` or ``Pet[]`` are dropped instead.
    """
    if value is None:
        return None
    if isinstance(value, (dict, list)):
        return json.dumps(value)
    text = str(value).strip()
    if text in ctx.schemas:
        named = ctx.schemas[text]
        if isinstance(named, (dict, list)):
            return json.dumps(named)
        return str(named).strip() or None
    if text.startswith(("{", "[")) or keep_unknown:
        return text or None
    return None


def _example(entry: dict[str, Any]) -> Any:
    example = entry.get("example")
    if example is None and isinstance(entry.get("examples"), dict):
        first = next(iter(entry["examples"].values()), None)
        # RAML 1.0 named examples may wrap the payload in ``value``.
        if isinstance(first, dict) and "value" in first:
            first = first["value"]
        example = first
    if isinstance(example, str) and example.strip().startswith(("{", "[")):
        try:
            return json.loads(example)
        except json.JSONDecodeError:
            return example
    return example


def _optional_str(value: Any) -> Optional[str]:
    return None if value is None else str(value)
