"""Walk a resource tree and flatten it into a deduplicated bundle list.

:func:`collect_resources` is a pure recursive function: every call returns
the bundles of its own subtree and the caller folds them in with
:func:`union_bundles`. No accumulator is shared between branches, so the
order in which siblings are visited never changes the resulting set.

URI handling follows RAML: a node's relative uri is appended to the parent's
uri, ``{name}`` placeholders of declared uri parameters become ``:name``, and
runs of slashes collapse into one. ``/users`` + ``/{id}`` + ``/orders``
resolves to ``/users/:id/orders``.
"""

from __future__ import annotations

import re
from typing import Any, Callable, Iterable, Optional

from ramlmock.bundle import MockBundle
from ramlmock.collector.methods import Synthesizer, collect_methods
from ramlmock.mocker import synthesize as default_synthesize
from ramlmock.models import SpecNode
from ramlmock.output import OutputManager, get_output

_SLASH_RUN_RE = re.compile(r"/{2,}")


def resolve_uri(node: SpecNode, parent_uri: str) -> str:
    """Return the absolute uri of *node* below *parent_uri*.

    Nodes without a relative uri (the root) keep the parent's uri. The result
    always starts with ``/`` and never contains ``//``.
    """
    uri = parent_uri
    if node.relative_uri:
        segment = node.relative_uri
        for name in node.uri_parameters:
            segment = segment.replace("{" + name + "}", ":" + name)
        uri = f"{parent_uri}/{segment}"
    return _SLASH_RUN_RE.sub("/", "/" + uri)


def union_bundles(*collections: Iterable[MockBundle]) -> list[MockBundle]:
    """Merge bundle collections by ``(uri, method)``.

    The first bundle seen for a pair keeps its position; later bundles for
    the same pair contribute the status codes it does not document yet.

    Returns:
        A new list with at most one bundle per ``(uri, method)``.
    """
    merged: dict[tuple[str, str], MockBundle] = {}
    for collection in collections:
        for bundle in collection:
            existing = merged.get(bundle.key)
            merged[bundle.key] = bundle if existing is None else existing.merge(bundle)
    return list(merged.values())


def collect_resources(
    node: SpecNode,
    parent_uri: str = "/",
    formats: Optional[dict[str, Callable[..., Any]]] = None,
    source: Optional[str] = None,
    synthesize: Synthesizer = default_synthesize,
    reporter: Optional[OutputManager] = None,
) -> list[MockBundle]:
    """Collect the bundles of *node* and all of its descendants.

    A failure while collecting one child branch is reported as an error and
    that branch contributes no bundles; its siblings are still collected.

    Args:
        node: The resource (or root) node to walk.
        parent_uri: The uri accumulated from the node's ancestors.
        formats: Custom string-format generators for *synthesize*.
        source: Path of the RAML file the tree was loaded from.
        synthesize: Schema-to-mock generator, invoked lazily.
        reporter: Diagnostics sink. Defaults to the global output manager.

    Returns:
        The union of this node's method bundles and its children's bundles.
    """
    reporter = reporter or get_output()
    uri = resolve_uri(node, parent_uri)

    own = collect_methods(node.methods, uri, formats, source, synthesize, reporter)

    children: list[list[MockBundle]] = []
    for child in node.resources:
        try:
            children.append(
                collect_resources(child, uri, formats, source, synthesize, reporter)
            )
        except Exception as exc:
            reporter.error(f"Skipping resource {resolve_uri(child, uri)}: {exc}")

    return union_bundles(own, *children)
