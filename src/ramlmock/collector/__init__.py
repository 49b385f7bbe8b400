"""Collection pipeline -- from normalized RAML trees to mock bundles.

Sub-modules, leaves first:

* :mod:`~ramlmock.collector.responses` -- pick one body per status code.
* :mod:`~ramlmock.collector.methods` -- one bundle per mockable method.
* :mod:`~ramlmock.collector.resources` -- recursive tree walk and the
  ``(uri, method)`` union.
* :mod:`~ramlmock.collector.aggregator` -- concurrent multi-file collection.
"""

from ramlmock.collector.aggregator import collect_bundles
from ramlmock.collector.methods import collect_methods
from ramlmock.collector.resources import collect_resources, resolve_uri, union_bundles
from ramlmock.collector.responses import extract_response_candidates

__all__ = [
    "collect_bundles",
    "collect_methods",
    "collect_resources",
    "extract_response_candidates",
    "resolve_uri",
    "union_bundles",
]
