"""Turn the methods of one resource into :class:`~ramlmock.bundle.MockBundle` objects.

Only ``get``, ``post``, ``put`` and ``delete`` (any case) with at least one
documented response produce a bundle; every other method is skipped without
a diagnostic. The default response of a bundle is its lowest ``2xx`` code,
so ``200`` wins over ``201`` regardless of declaration order.
"""

from __future__ import annotations

import re
from typing import Any, Callable, Optional, Sequence

from ramlmock.bundle import LazyMock, MockBundle, MockResponse, is_success_code
from ramlmock.collector.responses import extract_response_candidates
from ramlmock.mocker import synthesize as default_synthesize
from ramlmock.models import MethodNode
from ramlmock.output import OutputManager, get_output

MOCKED_METHODS = re.compile(r"^(get|post|put|delete)$", re.IGNORECASE)

Synthesizer = Callable[[Any, dict[str, Callable[..., Any]], Optional[str]], Any]


def collect_methods(
    methods: Sequence[MethodNode],
    uri: str,
    formats: Optional[dict[str, Callable[..., Any]]] = None,
    source: Optional[str] = None,
    synthesize: Synthesizer = default_synthesize,
    reporter: Optional[OutputManager] = None,
) -> list[MockBundle]:
    """Build one bundle per mockable method.

    Args:
        methods: The methods declared on a resource.
        uri: The resource's absolute, normalized uri.
        formats: Custom string-format generators for *synthesize*.
        source: Path of the RAML file, used by *synthesize* to resolve
            relative schema references.
        synthesize: Schema-to-mock generator. Invoked lazily, only when a
            bundle's mock is read.
        reporter: Diagnostics sink. Defaults to the global output manager.

    Returns:
        The bundles, in method declaration order.
    """
    reporter = reporter or get_output()
    formats = formats or {}
    bundles: list[MockBundle] = []

    for method in methods:
        if not MOCKED_METHODS.match(method.method) or not method.responses:
            continue

        responses: dict[int, MockResponse] = {}
        default_code: Optional[int] = None

        for candidate in extract_response_candidates(method.responses, reporter):
            responses[candidate.code] = MockResponse(
                candidate.code,
                LazyMock(_mock_factory(candidate.schema_, formats, source, synthesize)),
                candidate.example,
            )
            if is_success_code(candidate.code) and (
                default_code is None or candidate.code < default_code
            ):
                default_code = candidate.code

        reporter.debug(
            f"{method.method.upper()} {uri}: codes {sorted(responses)}, default {default_code}"
        )
        bundles.append(MockBundle(uri, method.method, responses, default_code))

    return bundles


def _mock_factory(
    schema: Any,
    formats: dict[str, Callable[..., Any]],
    source: Optional[str],
    synthesize: Synthesizer,
) -> Callable[[], Any]:
    def factory() -> Any:
        if schema is None:
            return None
        return synthesize(schema, formats, source)

    return factory
