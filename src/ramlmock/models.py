"""Canonical Pydantic models shared across all ramlmock modules.

The models fall into three groups:

**Normalized spec models** -- produced by :mod:`ramlmock.parser` and walked
by :mod:`ramlmock.collector`:
    :class:`BodyNode`, :class:`ResponseNode`, :class:`MethodNode`,
    :class:`SpecNode`, and :class:`SpecTree`.

**Derived models** -- short-lived values computed during collection:
    :class:`ResponseCandidate`.

**Options** -- the caller-facing knobs for a collection run:
    :class:`GenerateOptions`.

Fields named ``schema`` are stored as ``schema_`` with an alias, the same way
throughout, because ``schema`` shadows a ``BaseModel`` attribute.
"""

from __future__ import annotations

from typing import Any, Callable, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


# --- Normalized spec models ---


class BodyNode(BaseModel):
    """One media-type entry of a response body.

    ``schema_`` holds the JSON schema as *text*, exactly as the RAML document
    (or an ``!include``) supplied it. Parsing happens later, per candidate, so
    that a malformed schema only affects its own status code.
    """

    schema_: Optional[str] = Field(default=None, alias="schema")
    example: Any = None

    model_config = ConfigDict(populate_by_name=True)


class ResponseNode(BaseModel):
    """A documented response for one status code."""

    description: Optional[str] = None
    body: Optional[dict[str, BodyNode]] = None


class MethodNode(BaseModel):
    """An HTTP method declared on a resource.

    ``method`` keeps the verb exactly as written in the source document.
    ``responses`` is keyed by the status code text; ``None`` values stand for
    codes documented without any body or description.
    """

    method: str
    description: Optional[str] = None
    responses: dict[str, Optional[ResponseNode]] = Field(default_factory=dict)


class SpecNode(BaseModel):
    """One node of the resource tree.

    The root node of a :class:`SpecTree` has no ``relative_uri``; every other
    node carries the segment it adds to its parent's path, such as
    ``/users`` or ``/{userId}``.
    """

    relative_uri: Optional[str] = None
    display_name: Optional[str] = None
    uri_parameters: dict[str, Any] = Field(default_factory=dict)
    methods: list[MethodNode] = Field(default_factory=list)
    resources: list[SpecNode] = Field(default_factory=list)


class SpecTree(BaseModel):
    """A fully loaded and normalized RAML document.

    See Also:
        :func:`~ramlmock.parser.loader.load_spec`: Produces instances.
    """

    source: str = Field(description="File path or URL the document was loaded from")
    raml_version: str = Field(description="RAML version from the header line")
    title: Optional[str] = None
    version: Optional[str] = None
    base_uri: Optional[str] = None
    media_type: Optional[str] = None
    root: SpecNode = Field(default_factory=SpecNode)


SpecNode.model_rebuild()


# --- Derived models ---


class ResponseCandidate(BaseModel):
    """The body representation picked for one numeric status code."""

    code: int
    schema_: Any = Field(default=None, alias="schema")
    example: Any = None

    model_config = ConfigDict(populate_by_name=True)


# --- Options ---


class GenerateOptions(BaseModel):
    """Options for a collection run.

    ``path`` and ``files`` select the RAML sources and are mutually
    exclusive. Both the snake_case names and the camelCase aliases
    (``useApiVersion``) are accepted so that plain option dicts work.

    Example::

        GenerateOptions(files=["api/*.raml"], use_api_version=True)
    """

    path: Optional[str] = Field(
        default=None, description="Directory whose *.raml files are collected"
    )
    files: Optional[list[str]] = Field(
        default=None, description="Files, URLs, or glob patterns to collect"
    )
    use_api_version: bool = Field(
        default=False,
        alias="useApiVersion",
        description="Prefix every uri with the RAML document's declared version",
    )
    formats: dict[str, Callable[..., Any]] = Field(
        default_factory=dict,
        description="Custom string-format generators handed to the schema mocker",
    )

    model_config = ConfigDict(populate_by_name=True)

    @model_validator(mode="after")
    def _check_sources(self) -> GenerateOptions:
        if self.path is not None and self.files is not None:
            raise ValueError("'path' and 'files' are mutually exclusive")
        return self
