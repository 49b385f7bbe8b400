"""RAML spec parser -- load, validate, and normalize RAML documents.

This sub-package is the first half of the ramlmock pipeline: it turns a RAML
0.8 or 1.0 document (local file or remote URL) into a
:class:`~ramlmock.models.SpecTree` that the collectors can walk.

Typical usage::

    import asyncio

    from ramlmock.parser import load_spec

    spec = asyncio.run(load_spec("api/users.raml"))
    for resource in spec.root.resources:
        print(resource.relative_uri)

Sub-modules:

* :mod:`~ramlmock.parser.loader` -- I/O layer (file, URL), header
  validation, and ``!include`` resolution.
* :mod:`~ramlmock.parser.normalizer` -- Walks the raw document and builds
  the resource tree.
"""

from ramlmock.parser.loader import load_spec, parse_raml, validate_raml_version
from ramlmock.parser.normalizer import normalize_spec

__all__ = ["load_spec", "parse_raml", "validate_raml_version", "normalize_spec"]
