"""Pick the media type to sample and extract request/response examples.

OpenAPI request bodies and responses carry a ``content`` map keyed by media
type.  :func:`pick_content` chooses the entry that best fits a JSON-based
request template; :func:`example_from_media` prefers an author-supplied
example and falls back to :func:`~openapi_import.generator.sampler.synthesize`.
"""

from __future__ import annotations

import json
import re
from typing import Any, Optional

from openapi_import.generator.sampler import MAX_DEPTH, synthesize
from openapi_import.models import EndpointNode

_VENDOR_JSON = re.compile(r"^application/.+\+json$", re.IGNORECASE)


def pick_content(content: Any) -> Any:
    """Return the best-fit media-type entry of a ``content`` map.

    Precedence, first match wins:

    1. ``application/json``
    2. the first ``application/*+json`` key (vendor JSON types)
    3. ``*/*``
    4. the first entry in iteration order

    Returns:
        The media-type object, or ``None`` for a missing, non-mapping or
        empty map.
    """
    if not isinstance(content, dict) or not content:
        return None

    if content.get("application/json") is not None:
        return content["application/json"]

    for key, value in content.items():
        if isinstance(key, str) and _VENDOR_JSON.match(key):
            return value

    if content.get("*/*") is not None:
        return content["*/*"]

    return next(iter(content.values()))


def example_from_media(media: Any, *, max_depth: int = MAX_DEPTH) -> Any:
    """Return an example value for a media-type object.

    Explicit examples are looked up in order ``example``,
    ``examples.default.value``, ``schema.example`` and
    ``schema.examples.default.value``.  String examples holding JSON text are
    decoded.  Without any explicit example the schema is synthesized.

    Returns:
        The example, or ``None`` if the media object has neither an example
        nor a schema.
    """
    if not isinstance(media, dict):
        return None

    schema = media.get("schema")
    for candidate in (
        media.get("example"),
        _default_example(media),
        schema.get("example") if isinstance(schema, dict) else None,
        _default_example(schema),
    ):
        if candidate is not None:
            return _decode(candidate)

    if schema is not None:
        return synthesize(schema, max_depth=max_depth)
    return None


def _default_example(holder: Any) -> Any:
    if not isinstance(holder, dict):
        return None
    examples = holder.get("examples")
    if not isinstance(examples, dict):
        return None
    default = examples.get("default")
    return default.get("value") if isinstance(default, dict) else None


def _decode(example: Any) -> Any:
    if isinstance(example, str):
        try:
            return json.loads(example)
        except ValueError:
            return example
    return example


def request_example(endpoint: EndpointNode, *, max_depth: int = MAX_DEPTH) -> Any:
    """Example request body for *endpoint*, or ``None`` if it takes no body."""
    body = endpoint.request_body
    if not isinstance(body, dict):
        return None
    return example_from_media(pick_content(body.get("content")), max_depth=max_depth)


def response_example(response: Any, *, max_depth: int = MAX_DEPTH) -> Any:
    """Example payload for one resolved response object."""
    if not isinstance(response, dict):
        return None
    return example_from_media(pick_content(response.get("content")), max_depth=max_depth)


def response_examples(
    endpoint: EndpointNode, *, max_depth: int = MAX_DEPTH
) -> dict[str, Optional[Any]]:
    """Examples for every declared response of *endpoint*, keyed by status code."""
    responses = endpoint.responses
    if not isinstance(responses, dict):
        return {}
    return {
        str(code): response_example(response, max_depth=max_depth)
        for code, response in responses.items()
    }
