"""Schema-to-mock generation.

The collection pipeline only ever calls :func:`synthesize`, and only lazily,
when a bundle's mock value is read.
"""

from ramlmock.mocker.schema import SchemaMocker, seed, synthesize

__all__ = ["SchemaMocker", "seed", "synthesize"]
