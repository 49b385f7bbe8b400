"""ramlmock -- Turn RAML API specifications into mock response bundles.

This package walks the resource tree of one or more RAML files and produces a
flat collection of :class:`~ramlmock.bundle.MockBundle` objects, one per
``(uri, method)`` pair. Each bundle knows every documented status code for its
endpoint, the example attached to each, and how to synthesize a mock body
from the response schema on demand.

Typical usage::

    from ramlmock.api import generate

    def on_bundles(bundles):
        for bundle in bundles:
            print(bundle.method, bundle.uri, bundle.default_code)

    generate({"path": "api/raml"}, on_bundles)

Modules:
    api: Callback-style entry point and usage banner.
    app: Typer application and CLI entry point.
    bundle: The lazy :class:`MockBundle` data structure.
    collector: Response, method, resource, and multi-file collection.
    config: Option resolution from CLI flags, env vars, and project config.
    discovery: Directory listing and glob expansion of RAML sources.
    exceptions: Exception hierarchy with exit-code mapping.
    mocker: JSON-schema driven mock value synthesis.
    models: Pydantic models for the normalized RAML tree and options.
    output: stdout/stderr formatting and diagnostics.
    parser: RAML loading and normalization.
"""

__version__ = "0.3.0"
