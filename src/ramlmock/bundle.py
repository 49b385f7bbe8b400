"""The :class:`MockBundle` data structure.

A bundle describes one endpoint -- an absolute uri plus an HTTP verb -- and
every response documented for it, keyed by integer status code. Each
response pairs a stored example with a :class:`LazyMock`: a deferred
computation that synthesizes a body from the response schema the first time
it is read. Building a bundle never runs the schema mocker.

Bundles are immutable. :meth:`MockBundle.merge` returns a new bundle whose
response map is the union of both inputs; this is what
:func:`~ramlmock.collector.resources.union_bundles` uses when two branches
of a tree, or two files, document the same ``(uri, method)`` pair.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Any, Callable, Iterable, Mapping, Optional

_UNSET = object()


def is_success_code(code: int) -> bool:
    """Return True for ``2xx`` status codes."""
    return 200 <= code <= 299


def lowest_success_code(codes: Iterable[int]) -> Optional[int]:
    """Return the lowest ``2xx`` code in *codes*, or ``None`` when there is none."""
    success = [code for code in codes if is_success_code(code)]
    return min(success) if success else None


class LazyMock:
    """A zero-argument, memoized deferred computation.

    Args:
        factory: Callable producing the mock value. Called at most once.
    """

    def __init__(self, factory: Callable[[], Any]) -> None:
        self._factory = factory
        self._value: Any = _UNSET

    @property
    def computed(self) -> bool:
        """Whether the factory has already run."""
        return self._value is not _UNSET

    def __call__(self) -> Any:
        if self._value is _UNSET:
            self._value = self._factory()
        return self._value

    def __repr__(self) -> str:
        state = "computed" if self.computed else "pending"
        return f"<LazyMock {state}>"


class MockResponse:
    """A single coded response: lazy mock body plus stored example."""

    __slots__ = ("code", "_mock", "example")

    def __init__(self, code: int, mock: LazyMock, example: Any = None) -> None:
        self.code = code
        self._mock = mock
        self.example = example

    def mock(self) -> Any:
        """Return the schema-derived mock body, generating it on first call."""
        return self._mock()

    @property
    def schema_thunk(self) -> LazyMock:
        return self._mock

    def __repr__(self) -> str:
        return f"MockResponse(code={self.code}, mock={self._mock!r})"


class MockBundle:
    """One ``(uri, method)`` endpoint and its documented responses.

    Args:
        uri: Absolute path, already normalized (``/users/:id``).
        method: HTTP verb, case preserved from the RAML source.
        responses: Responses keyed by status code.
        default_code: The representative success code. When omitted it is
            derived as the lowest ``2xx`` code in *responses*.

    Example::

        bundle.default_code          # 200
        bundle.mock()                # body synthesized for 200
        bundle.example_for(404)      # example documented for 404
    """

    def __init__(
        self,
        uri: str,
        method: str,
        responses: Optional[Mapping[int, MockResponse]] = None,
        default_code: Optional[int] = None,
    ) -> None:
        self._uri = uri
        self._method = method
        self._responses: dict[int, MockResponse] = dict(responses or {})
        if default_code is None:
            default_code = lowest_success_code(self._responses)
        elif default_code not in self._responses:
            raise ValueError(f"default code {default_code} has no response")
        self._default_code = default_code

    # ------------------------------------------------------------------ #
    # Identity
    # ------------------------------------------------------------------ #

    @property
    def uri(self) -> str:
        return self._uri

    @property
    def method(self) -> str:
        return self._method

    @property
    def key(self) -> tuple[str, str]:
        """The ``(uri, method)`` pair that identifies this bundle in a collection."""
        return (self._uri, self._method)

    # ------------------------------------------------------------------ #
    # Responses
    # ------------------------------------------------------------------ #

    @property
    def responses_by_code(self) -> Mapping[int, MockResponse]:
        """Read-only view of the responses keyed by status code."""
        return MappingProxyType(self._responses)

    @property
    def codes(self) -> list[int]:
        """Documented status codes in ascending order."""
        return sorted(self._responses)

    def get_responses(self) -> dict[int, LazyMock]:
        """Map every status code to its zero-argument mock accessor."""
        return {code: response.schema_thunk for code, response in self._responses.items()}

    def get_examples(self) -> dict[int, Any]:
        """Map every status code to its stored example."""
        return {code: response.example for code, response in self._responses.items()}

    def mock_for(self, code: int) -> Any:
        """Return the mock body for *code*, generating it on first access.

        Raises:
            KeyError: If *code* is not documented for this bundle.
        """
        return self._responses[code].mock()

    def example_for(self, code: int) -> Any:
        """Return the stored example for *code*.

        Raises:
            KeyError: If *code* is not documented for this bundle.
        """
        return self._responses[code].example

    # ------------------------------------------------------------------ #
    # Default response
    # ------------------------------------------------------------------ #

    @property
    def default_code(self) -> Optional[int]:
        """Lowest documented ``2xx`` code, or ``None``."""
        return self._default_code

    @property
    def default_response(self) -> Optional[MockResponse]:
        if self._default_code is None:
            return None
        return self._responses[self._default_code]

    def mock(self) -> Any:
        """Mock body of the default response; ``None`` without a default."""
        response = self.default_response
        return response.mock() if response is not None else None

    @property
    def example(self) -> Any:
        """Example of the default response; ``None`` without a default."""
        response = self.default_response
        return response.example if response is not None else None

    # ------------------------------------------------------------------ #
    # Merging
    # ------------------------------------------------------------------ #

    def merge(self, other: MockBundle) -> MockBundle:
        """Return a new bundle holding the responses of both bundles.

        When both document the same code, this bundle's response is kept.
        The default code is recomputed over the merged responses.

        Raises:
            ValueError: If *other* describes a different ``(uri, method)``.
        """
        if other.key != self.key:
            raise ValueError(f"cannot merge {other.key} into {self.key}")
        responses = dict(self._responses)
        for code, response in other._responses.items():
            responses.setdefault(code, response)
        return MockBundle(self._uri, self._method, responses)

    def __repr__(self) -> str:
        return (
            f"MockBundle(uri={self._uri!r}, method={self._method!r}, "
            f"codes={self.codes}, default_code={self._default_code})"
        )
