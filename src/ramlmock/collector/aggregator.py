"""Collect bundles across several RAML files.

:func:`collect_bundles` loads every file concurrently, walks each resulting
tree with :func:`~ramlmock.collector.resources.collect_resources`, and unions
the per-file results. Loading is the only I/O in the pipeline; tree walking
is synchronous.

Unlike a failing branch inside one tree, a file that fails to load aborts
the whole collection: the first :class:`~ramlmock.exceptions.SpecLoadError`
propagates and no partial result is returned.
"""

from __future__ import annotations

import asyncio
from typing import Awaitable, Callable, Optional, Sequence

from ramlmock.bundle import MockBundle
from ramlmock.collector.methods import Synthesizer
from ramlmock.collector.resources import collect_resources, union_bundles
from ramlmock.exceptions import SpecLoadError
from ramlmock.mocker import synthesize as default_synthesize
from ramlmock.models import GenerateOptions, SpecTree
from ramlmock.output import OutputManager, get_output
from ramlmock.parser import load_spec as default_load_spec

SpecLoader = Callable[[str], Awaitable[SpecTree]]


def base_uri(spec: SpecTree, use_api_version: bool) -> str:
    """Return the uri prefix for a spec: ``/`` or ``/<version>/``."""
    if use_api_version and spec.version:
        return f"/{spec.version}/"
    return "/"


async def collect_bundles(
    files: Sequence[str],
    options: Optional[GenerateOptions] = None,
    reporter: Optional[OutputManager] = None,
    load_spec: SpecLoader = default_load_spec,
    synthesize: Synthesizer = default_synthesize,
) -> list[MockBundle]:
    """Load *files* and return the union of their bundles.

    Args:
        files: RAML file paths or URLs, already expanded from globs.
        options: Collection options; only ``use_api_version`` and
            ``formats`` are read here.
        reporter: Diagnostics sink. Defaults to the global output manager.
        load_spec: Async spec loader, injectable for tests.
        synthesize: Schema-to-mock generator captured by every bundle.

    Returns:
        One bundle per distinct ``(uri, method)`` across all files.

    Raises:
        SpecLoadError: If any file fails to load.

    Example::

        bundles = asyncio.run(collect_bundles(["api/users.raml"]))
    """
    options = options or GenerateOptions()
    reporter = reporter or get_output()

    async def _collect_file(source: str) -> list[MockBundle]:
        try:
            spec = await load_spec(source)
        except SpecLoadError:
            raise
        except Exception as exc:
            raise SpecLoadError(f"Error parsing {source}: {exc}", source=source) from exc

        reporter.debug(f"Loaded {source} ({spec.title or 'untitled'}, RAML {spec.raml_version})")
        return collect_resources(
            spec.root,
            base_uri(spec, options.use_api_version),
            options.formats,
            source,
            synthesize,
            reporter,
        )

    per_file = await asyncio.gather(*(_collect_file(source) for source in files))
    bundles = union_bundles(*per_file)
    reporter.debug(f"Collected {len(bundles)} bundles from {len(files)} file(s)")
    return bundles
