"""Pick one body representation per documented status code.

:func:`extract_response_candidates` turns a method's ``responses`` map into
:class:`~ramlmock.models.ResponseCandidate` values. For each status code it
prefers an ``application/json`` body and otherwise takes the first vendor
JSON/XML media type, such as ``application/vnd.acme.v2+json``. Codes that
are not integers (``default``) or that have no usable body are skipped.

Schema text is parsed here. A schema that is not valid JSON is reported as a
warning and the candidate keeps its example with ``schema=None``; nothing
raised by this module stops the collection.
"""

from __future__ import annotations

import json
import re
from typing import Any, Mapping, Optional

from ramlmock.models import BodyNode, ResponseCandidate, ResponseNode
from ramlmock.output import OutputManager, get_output

JSON_MEDIA_TYPE = "application/json"

# application/json, application/xml, application/vnd.acme.v1+json, ...
_MEDIA_TYPE_RE = re.compile(r"application/[A-Za-z0-9.\-]*\+?(json|xml)", re.IGNORECASE)

_STATUS_CODE_RE = re.compile(r"\d+", re.ASCII)


def extract_response_candidates(
    responses: Mapping[Any, Optional[ResponseNode]],
    reporter: Optional[OutputManager] = None,
) -> list[ResponseCandidate]:
    """Build one candidate per usable status code, in discovery order.

    Args:
        responses: Status code text mapped to the documented response, as
            found on :attr:`~ramlmock.models.MethodNode.responses`.
        reporter: Receives schema parse warnings. Defaults to the global
            output manager.

    Returns:
        A list of :class:`~ramlmock.models.ResponseCandidate`.
    """
    reporter = reporter or get_output()
    candidates: list[ResponseCandidate] = []

    for code_text, response in responses.items():
        if response is None:
            continue

        body = select_body(response.body)
        if body is None:
            continue

        code = _parse_status_code(code_text)
        if code is None:
            continue

        candidates.append(
            ResponseCandidate(
                code=code,
                schema=_parse_schema(body.schema_, code, reporter),
                example=body.example,
            )
        )

    return candidates


def select_body(body: Optional[Mapping[str, BodyNode]]) -> Optional[BodyNode]:
    """Return the representative body of a response, or ``None``.

    ``application/json`` wins when present; otherwise the first media type
    matching the vendor JSON/XML pattern is used.
    """
    if not body:
        return None
    if body.get(JSON_MEDIA_TYPE) is not None:
        return body[JSON_MEDIA_TYPE]
    for media_type, node in body.items():
        if node is not None and _MEDIA_TYPE_RE.match(media_type):
            return node
    return None


def _parse_status_code(code_text: Any) -> Optional[int]:
    """Return the status code as an integer, or ``None`` for ``default`` and friends."""
    if isinstance(code_text, bool):
        return None
    text = str(code_text)
    if not _STATUS_CODE_RE.fullmatch(text):
        return None
    return int(text)


def _parse_schema(schema_text: Optional[str], code: int, reporter: OutputManager) -> Any:
    """Parse the JSON schema text of a body, reporting failures as warnings."""
    if not schema_text:
        return None
    try:
        return json.loads(schema_text)
    except (ValueError, RecursionError) as exc:
        reporter.warning(
            f"Unable to parse the schema of response {code} ({exc}). "
            "Use '!include schemas/<file-name>' for JSON schemas instead."
        )
        return None
