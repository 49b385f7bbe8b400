"""Library entry points.

:func:`generate` is the callback-style entry point: it validates its inputs,
resolves the RAML sources, runs the collection, and hands the bundle list to
``callback`` exactly once. It never raises for problems it can detect up
front; a missing options object or callback is reported on stderr together
with the usage banner, and nothing else happens.

:func:`agenerate` is the coroutine behind it for callers that already run an
event loop; it raises instead of reporting.
"""

from __future__ import annotations

import asyncio
from typing import Any, Callable, Iterable, Mapping, Optional, Union

from pydantic import ValidationError

from ramlmock.bundle import MockBundle
from ramlmock.collector import collect_bundles
from ramlmock.discovery import expand_sources, list_raml_files
from ramlmock.exceptions import InvalidUsageError, SpecLoadError
from ramlmock.models import GenerateOptions
from ramlmock.output import OutputManager, get_output

USAGE_TITLE = "HOW TO USE RAMLMOCK"

USAGE_LINES = [
    "from ramlmock.api import generate",
    "",
    "options = {'path': 'test/raml'}",
    "def callback(bundles):",
    "    print(bundles)",
    "",
    "generate(options, callback)",
]

OptionsLike = Union[GenerateOptions, Mapping[str, Any]]


def show_usage(reporter: Optional[OutputManager] = None) -> None:
    """Print the usage banner to stderr."""
    (reporter or get_output()).banner(USAGE_TITLE, USAGE_LINES)


def resolve_files(options: GenerateOptions) -> list[str]:
    """Return the RAML files selected by *options*.

    Raises:
        InvalidUsageError: If neither ``path`` nor ``files`` is set.
        SpecLoadError: If ``path`` cannot be listed.
    """
    if options.path is not None:
        return list_raml_files(options.path)
    if options.files is not None:
        return expand_sources(options.files)
    raise InvalidUsageError("Options must set either 'path' or 'files'")


async def agenerate(
    options: OptionsLike,
    reporter: Optional[OutputManager] = None,
) -> list[MockBundle]:
    """Resolve the sources in *options* and collect their bundles.

    Raises:
        InvalidUsageError: If *options* is invalid.
        SpecLoadError: If a source cannot be listed or loaded.
    """
    opts = _coerce_options(options)
    files = resolve_files(opts)
    (reporter or get_output()).debug(f"Collecting bundles from {len(files)} file(s)")
    return await collect_bundles(files, opts, reporter)


def generate(
    options: Optional[OptionsLike],
    callback: Optional[Callable[[list[MockBundle]], Any]],
    errback: Optional[Callable[[SpecLoadError], Any]] = None,
    reporter: Optional[OutputManager] = None,
) -> None:
    """Collect mock bundles and pass them to *callback*.

    Args:
        options: A :class:`~ramlmock.models.GenerateOptions` or an equivalent
            mapping (``{"path": ...}`` or ``{"files": [...]}``, plus
            ``useApiVersion`` and ``formats``).
        callback: Receives the list of bundles once the collection succeeds.
        errback: Receives the :class:`~ramlmock.exceptions.SpecLoadError`
            when a file fails to load. Without one the error is reported on
            stderr.
        reporter: Diagnostics sink. Defaults to the global output manager.

    Example::

        generate({"files": ["api/*.raml"]}, lambda bundles: print(len(bundles)))
    """
    reporter = reporter or get_output()

    if options is None:
        reporter.error("You must define an options object")
        show_usage(reporter)
        return
    if callback is None or not callable(callback):
        reporter.error("You must define a callback function")
        show_usage(reporter)
        return

    try:
        opts = _coerce_options(options)
        files = resolve_files(opts)
    except InvalidUsageError as exc:
        reporter.error(str(exc))
        show_usage(reporter)
        return
    except SpecLoadError as exc:
        _report_failure(exc, errback, reporter)
        return
    except Exception as exc:
        reporter.error(f"A runtime error has occurred: {exc!r}")
        show_usage(reporter)
        return

    if _loop_is_running():
        reporter.error(
            "generate() cannot run inside an active event loop; await agenerate() instead"
        )
        show_usage(reporter)
        return

    try:
        bundles = asyncio.run(collect_bundles(files, opts, reporter))
    except SpecLoadError as exc:
        _report_failure(exc, errback, reporter)
        return

    callback(bundles)


def find_bundle(bundles: Iterable[MockBundle], uri: str, method: str) -> Optional[MockBundle]:
    """Return the bundle for *uri* and *method* (case-insensitive), if any."""
    for bundle in bundles:
        if bundle.uri == uri and bundle.method.lower() == method.lower():
            return bundle
    return None


def _loop_is_running() -> bool:
    try:
        asyncio.get_running_loop()
    except RuntimeError:
        return False
    return True


def _coerce_options(options: OptionsLike) -> GenerateOptions:
    if isinstance(options, GenerateOptions):
        return options
    try:
        return GenerateOptions.model_validate(dict(options))
    except (ValidationError, TypeError, ValueError) as exc:
        raise InvalidUsageError(f"Invalid options: {exc}") from exc


def _report_failure(
    exc: SpecLoadError,
    errback: Optional[Callable[[SpecLoadError], Any]],
    reporter: OutputManager,
) -> None:
    if errback is not None:
        errback(exc)
    else:
        reporter.error(str(exc))
