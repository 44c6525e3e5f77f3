"""OpenAPI document parser -- load, dereference ``$ref`` pointers, build the tree.

This sub-package turns raw OpenAPI 3.x text into the structures the rest of
openapi-import consumes:

Typical usage::

    from openapi_import.parser import build_tree, load_document

    document = load_document("petstore.yaml")
    for tag in build_tree(document):
        print(tag.label, [p.label for p in tag.children])

Sub-modules:

* :mod:`~openapi_import.parser.loader` -- I/O (file, stdin, URL), JSON/YAML
  detection and OpenAPI 3.x validation.
* :mod:`~openapi_import.parser.resolver` -- ``$ref`` dereferencing with
  cycle detection, memoisation and ``allOf`` merging.
* :mod:`~openapi_import.parser.tree` -- tag -> path -> endpoint tree builder
  and query filter.
"""

from openapi_import.parser.loader import load_document, parse_openapi, read_source
from openapi_import.parser.resolver import RefResolver, get_by_pointer, merge
from openapi_import.parser.tree import build_tree, filter_tree, flatten_endpoints

__all__ = [
    "load_document",
    "parse_openapi",
    "read_source",
    "RefResolver",
    "get_by_pointer",
    "merge",
    "build_tree",
    "filter_tree",
    "flatten_endpoints",
]
