"""Example synthesis and request-document generation.

This sub-package turns resolved endpoints into something a user can run:

Typical usage::

    from openapi_import.generator import endpoint_to_document, synthesize

    synthesize({"type": "string", "format": "uuid"})
    # '00000000-0000-0000-0000-000000000000'
    request = endpoint_to_document(endpoint, document, "specs/petstore.yaml")

Sub-modules:

* :mod:`~openapi_import.generator.sampler` -- schema classification and the
  deterministic example synthesizer.
* :mod:`~openapi_import.generator.content` -- media-type selection and
  explicit-example lookup for request bodies and responses.
* :mod:`~openapi_import.generator.blocks` -- endpoint -> titled list of
  content blocks, plus file and folder naming.
"""

from openapi_import.generator.blocks import endpoint_to_document, render_document
from openapi_import.generator.content import pick_content, request_example, response_example
from openapi_import.generator.sampler import schema_kind, synthesize

__all__ = [
    "endpoint_to_document",
    "render_document",
    "pick_content",
    "request_example",
    "response_example",
    "schema_kind",
    "synthesize",
]
