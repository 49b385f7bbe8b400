"""Synthesize mock values from JSON schemas.

:func:`synthesize` walks a JSON schema and builds a value that satisfies it:
objects get every declared property, arrays get ``minItems`` (at least one)
items, and scalars honour ``enum``, ``const``, ``default``, ``examples`` and
numeric or length bounds. Strings with a ``format`` are filled by Faker
(``email``, ``date-time``, ``uuid``, ...) unless the caller supplies a hook
for that format in *formats*, which always wins.

``$ref`` pointers are resolved on the fly: internal ones (``#/definitions/Pet``)
against the root schema, relative file references (``pet.json#/definitions/Pet``)
against the directory of the RAML file the schema came from. Circular
references are cut at the cycle point and yield ``None``.

Example::

    synthesize({"type": "object", "properties": {"id": {"type": "integer"}}})
    # {'id': 42}
"""

from __future__ import annotations

import json
import math
import random
from pathlib import Path
from typing import Any, Callable, Optional

import yaml
from faker import Faker

from ramlmock.exceptions import SchemaMockError

FormatHook = Callable[[dict[str, Any]], Any]

_MAX_DEPTH = 12

_faker = Faker()


def seed(value: int) -> None:
    """Seed Faker and :mod:`random` for reproducible mocks."""
    Faker.seed(value)
    random.seed(value)


def synthesize(
    schema: Any,
    formats: Optional[dict[str, FormatHook]] = None,
    source: Optional[str] = None,
) -> Any:
    """Build a value matching *schema*.

    Args:
        schema: A parsed JSON schema (dict). Booleans and ``None`` yield
            ``None``.
        formats: Custom generators keyed by string ``format`` name. Each hook
            receives the (resolved) sub-schema and returns the value.
        source: Path of the RAML file the schema belongs to; relative
            ``$ref`` files are looked up next to it.

    Returns:
        The synthesized value.

    Raises:
        SchemaMockError: If a ``$ref`` cannot be resolved.
    """
    if not isinstance(schema, dict):
        return None
    base_dir = Path(source).parent if source and "://" not in source else Path.cwd()
    return SchemaMocker(formats or {}, base_dir).generate(schema)


class SchemaMocker:
    """Recursive JSON-schema walker bound to one root document.

    Args:
        formats: Custom string-format hooks.
        base_dir: Directory used to resolve relative ``$ref`` files.
    """

    def __init__(self, formats: dict[str, FormatHook], base_dir: Path) -> None:
        self._formats = formats
        self._base_dir = base_dir
        self._documents: dict[Path, Any] = {}

    def generate(self, schema: dict[str, Any]) -> Any:
        return self._generate(schema, schema, frozenset(), 0)

    # ------------------------------------------------------------------ #
    # Walking
    # ------------------------------------------------------------------ #

    def _generate(self, schema: Any, root: Any, seen: frozenset[str], depth: int) -> Any:
        if not isinstance(schema, dict) or depth > _MAX_DEPTH:
            return None

        if "$ref" in schema:
            ref = schema["$ref"]
            if ref in seen:
                return None
            target, target_root = self._resolve_ref(ref, root)
            return self._generate(target, target_root, seen | {ref}, depth + 1)

        if "const" in schema:
            return schema["const"]
        if schema.get("enum"):
            return random.choice(schema["enum"])
        if "default" in schema:
            return schema["default"]
        if "example" in schema:
            return schema["example"]
        if isinstance(schema.get("examples"), list) and schema["examples"]:
            return schema["examples"][0]

        if "allOf" in schema:
            merged = _merge_all_of(
                [self._deref(part, root, seen) for part in schema["allOf"]]
            )
            rest = {k: v for k, v in schema.items() if k != "allOf"}
            return self._generate(_merge_all_of([rest, merged]), root, seen, depth + 1)
        for key in ("oneOf", "anyOf"):
            if schema.get(key):
                return self._generate(schema[key][0], root, seen, depth + 1)

        schema_type = _pick_type(schema)
        if schema_type == "object":
            return self._generate_object(schema, root, seen, depth)
        if schema_type == "array":
            return self._generate_array(schema, root, seen, depth)
        if schema_type == "string":
            return self._generate_string(schema)
        if schema_type == "integer":
            return _generate_number(schema, integer=True)
        if schema_type == "number":
            return _generate_number(schema, integer=False)
        if schema_type == "boolean":
            return random.choice([True, False])
        return None

    def _generate_object(
        self, schema: dict[str, Any], root: Any, seen: frozenset[str], depth: int
    ) -> dict[str, Any]:
        properties = schema.get("properties") or {}
        return {
            name: self._generate(subschema, root, seen, depth + 1)
            for name, subschema in properties.items()
        }

    def _generate_array(
        self, schema: dict[str, Any], root: Any, seen: frozenset[str], depth: int
    ) -> list[Any]:
        items = schema.get("items", {})
        # Draft 4 tuple validation
        if isinstance(items, list):
            return [self._generate(item, root, seen, depth + 1) for item in items]
        count = max(int(schema.get("minItems", 1)), 1)
        if "maxItems" in schema:
            count = min(count, int(schema["maxItems"]))
        return [self._generate(items, root, seen, depth + 1) for _ in range(count)]

    def _generate_string(self, schema: dict[str, Any]) -> str:
        fmt = schema.get("format")
        if fmt and fmt in self._formats:
            return self._formats[fmt](schema)
        if fmt in _FAKER_FORMATS:
            return _FAKER_FORMATS[fmt]()

        min_length = int(schema.get("minLength", 1))
        max_length = int(schema.get("maxLength", max(min_length, 24)))
        if "minLength" not in schema:
            min_length = min(min_length, max(max_length, 0))
        max_length = max(max_length, min_length)
        if max_length <= 0:
            return ""
        return _faker.pystr(min_chars=min_length, max_chars=max_length)

    # ------------------------------------------------------------------ #
    # $ref resolution
    # ------------------------------------------------------------------ #

    def _deref(self, schema: Any, root: Any, seen: frozenset[str]) -> Any:
        """Resolve a top-level ``$ref`` so ``allOf`` parts can be merged."""
        while isinstance(schema, dict) and "$ref" in schema and schema["$ref"] not in seen:
            seen = seen | {schema["$ref"]}
            schema, root = self._resolve_ref(schema["$ref"], root)
        return schema

    def _resolve_ref(self, ref: str, root: Any) -> tuple[Any, Any]:
        """Return ``(target, target_root)`` for a ``$ref`` string."""
        location, _, pointer = ref.partition("#")
        if location:
            root = self._load_document(location)
        if not pointer:
            return root, root
        return _follow_pointer(pointer, root, ref), root

    def _load_document(self, location: str) -> Any:
        if "://" in location:
            raise SchemaMockError(f"Remote $ref not supported: {location}")
        path = (self._base_dir / location).resolve()
        if path not in self._documents:
            try:
                text = path.read_text(encoding="utf-8")
            except OSError as exc:
                raise SchemaMockError(f"Cannot read $ref file {location}: {exc}") from exc
            try:
                self._documents[path] = json.loads(text)
            except json.JSONDecodeError:
                try:
                    self._documents[path] = yaml.safe_load(text)
                except yaml.YAMLError as exc:
                    raise SchemaMockError(
                        f"$ref file {location} is neither JSON nor YAML: {exc}"
                    ) from exc
        return self._documents[path]


# ------------------------------------------------------------------ #
# Helpers
# ------------------------------------------------------------------ #

_FAKER_FORMATS: dict[str, Callable[[], str]] = {
    "date-time": lambda: _faker.iso8601(),
    "date": lambda: _faker.date(),
    "time": lambda: _faker.time(),
    "email": lambda: _faker.email(),
    "hostname": lambda: _faker.hostname(),
    "ipv4": lambda: _faker.ipv4(),
    "ipv6": lambda: _faker.ipv6(),
    "uri": lambda: _faker.uri(),
    "url": lambda: _faker.url(),
    "uuid": lambda: _faker.uuid4(),
}


def _pick_type(schema: dict[str, Any]) -> Optional[str]:
    """Return the schema type, inferring ``object``/``array`` from keywords."""
    schema_type = schema.get("type")
    if isinstance(schema_type, list):
        non_null = [t for t in schema_type if t != "null"]
        schema_type = non_null[0] if non_null else None
    if schema_type is None:
        if "properties" in schema:
            return "object"
        if "items" in schema:
            return "array"
    return schema_type


def _generate_number(schema: dict[str, Any], integer: bool) -> int | float:
    minimum = schema.get("minimum")
    maximum = schema.get("maximum")
    if minimum is None:
        minimum = 0 if maximum is None or maximum >= 0 else maximum - 1000
    if maximum is None:
        maximum = max(minimum, 0) + 1000
    if schema.get("exclusiveMinimum") is True:
        minimum += 1 if integer else 0.01
    if schema.get("exclusiveMaximum") is True:
        maximum -= 1 if integer else 0.01
    maximum = max(minimum, maximum)
    if integer:
        low = math.ceil(minimum)
        return random.randint(low, max(low, math.floor(maximum)))
    return float(min(max(round(random.uniform(minimum, maximum), 2), minimum), maximum))


def _merge_all_of(parts: list[Any]) -> dict[str, Any]:
    merged: dict[str, Any] = {}
    for part in parts:
        if not isinstance(part, dict):
            continue
        for key, value in part.items():
            if key == "properties":
                merged.setdefault("properties", {}).update(value)
            elif key == "required":
                merged.setdefault("required", []).extend(value)
            else:
                merged.setdefault(key, value)
    return merged


def _follow_pointer(pointer: str, document: Any, ref: str) -> Any:
    """Navigate a JSON Pointer (RFC 6901) such as ``/definitions/Pet``."""
    current = document
    for segment in pointer.lstrip("/").split("/"):
        if segment == "":
            continue
        segment = segment.replace("~1", "/").replace("~0", "~")
        if isinstance(current, dict) and segment in current:
            current = current[segment]
        elif isinstance(current, list):
            try:
                current = current[int(segment)]
            except (ValueError, IndexError) as exc:
                raise SchemaMockError(
                    f"Cannot resolve $ref '{ref}': invalid array index '{segment}'"
                ) from exc
        else:
            raise SchemaMockError(f"Cannot resolve $ref '{ref}': '{segment}' not found")
    return current
