"""Read OpenAPI documents and turn their text into a validated document model.

This module is split into an I/O half and a pure half:

* :func:`read_source` -- fetch raw text from a local file, stdin (``-``), or
  an http(s) URL.  Only the document itself is ever fetched; ``$ref``
  pointers to other files or URLs are never followed.
* :func:`parse_openapi` -- detect JSON vs. YAML, parse, and validate that
  the result is an OpenAPI 3.x document with a ``paths`` object.

:func:`load_document` chains the two.  The resulting
:class:`~openapi_import.models.OpenAPIDocument` is passed on to
:func:`~openapi_import.parser.tree.build_tree`.
"""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Any

import httpx
import yaml

from openapi_import.exceptions import ParseError, SourceError, ValidationError
from openapi_import.models import APIInfo, OpenAPIDocument, ServerInfo


def load_document(source: str) -> OpenAPIDocument:
    """Read *source* and parse it into an :class:`~openapi_import.models.OpenAPIDocument`.

    Raises:
        SourceError: If the text cannot be read.
        ParseError: If the text is malformed.
        ValidationError: If the document is not OpenAPI 3.x.
    """
    return parse_openapi(read_source(source))


def read_source(source: str) -> str:
    """Read raw document text from a URL, file path, or stdin ('-').

    Args:
        source: A URL (http/https), file path, or '-' for stdin.

    Returns:
        The document text, undecoded.

    Raises:
        SourceError: If the source cannot be read or is empty.
    """
    if source == "-":
        return _read_stdin()
    elif source.startswith(("http://", "https://")):
        return _read_url(source)
    else:
        return _read_file(source)


def _read_stdin() -> str:
    try:
        content = sys.stdin.read()
    except Exception as exc:
        raise SourceError(f"Failed to read from stdin: {exc}") from exc

    if not content.strip():
        raise SourceError("No input received from stdin")
    return content


def _read_url(url: str) -> str:
    try:
        response = httpx.get(url, timeout=30.0, follow_redirects=True)
        response.raise_for_status()
    except httpx.HTTPStatusError as exc:
        raise SourceError(
            f"HTTP {exc.response.status_code} fetching document from {url}"
        ) from exc
    except httpx.RequestError as exc:
        raise SourceError(f"Failed to fetch document from {url}: {exc}") from exc

    if not response.text.strip():
        raise SourceError(f"Empty response from {url}")
    return response.text


def _read_file(path: str) -> str:
    file_path = Path(path)
    if not file_path.is_file():
        raise SourceError(f"Document file not found: {path}")

    try:
        content = file_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise SourceError(f"Failed to read document file {path}: {exc}") from exc

    if not content.strip():
        raise SourceError(f"Document file is empty: {path}")
    return content


def parse_openapi(text: str) -> OpenAPIDocument:
    """Parse raw document text and validate it as OpenAPI 3.x.

    Content whose first non-blank character is ``{`` or ``[`` is parsed as
    strict JSON; anything else goes through ``yaml.safe_load``.  There is no
    fallback from one format to the other, so a broken JSON document reports
    the JSON error rather than a confusing YAML one.

    Args:
        text: The raw document text.

    Returns:
        The validated :class:`~openapi_import.models.OpenAPIDocument`.  Its
        ``raw`` attribute is the parsed tree itself.

    Raises:
        ParseError: If the text is not well-formed JSON/YAML.
        ValidationError: If ``openapi`` is missing or not ``3.x``, or if
            ``paths`` is missing.
    """
    raw = _parse_text(text)
    version = validate_openapi_version(raw)
    if raw.get("paths") is None:
        raise ValidationError("Missing 'paths' field")

    return OpenAPIDocument(
        openapi_version=version,
        info=_extract_info(raw.get("info")),
        servers=_extract_servers(raw.get("servers")),
        raw=raw,
    )


def _looks_like_json(text: str) -> bool:
    return text.lstrip().startswith(("{", "["))


def _parse_text(text: str) -> Any:
    if _looks_like_json(text):
        try:
            return json.loads(text)
        except json.JSONDecodeError as exc:
            raise ParseError(f"Failed to parse: {exc}") from exc

    try:
        return yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ParseError(f"Failed to parse: {exc}") from exc


def validate_openapi_version(raw: Any) -> str:
    """Validate and return the OpenAPI version string.

    Any ``3.x`` version is accepted.  Swagger 2.x documents get a dedicated
    message since they are the most common wrong input.

    Args:
        raw: The parsed document.

    Returns:
        The version string (e.g. ``'3.0.3'``, ``'3.1.0'``).

    Raises:
        ValidationError: If the version is missing or not ``3.x``.
    """
    if not isinstance(raw, dict):
        raise ValidationError(
            "Missing 'openapi' field: document root is not a mapping"
        )

    if "swagger" in raw and "openapi" not in raw:
        raise ValidationError(
            f"Swagger {raw['swagger']} is not supported. "
            "OpenAPI 3.x required (missing 'openapi' field)"
        )

    version = raw.get("openapi")
    if version is None:
        raise ValidationError("Missing 'openapi' field. OpenAPI 3.x required")

    version_str = str(version)
    if not version_str.startswith("3."):
        raise ValidationError(
            f"Unsupported 'openapi' version: {version_str}. OpenAPI 3.x required"
        )
    return version_str


def _extract_info(info: Any) -> APIInfo | None:
    if not isinstance(info, dict):
        return None

    def _text(value: Any) -> str | None:
        return None if value is None else str(value)

    return APIInfo(
        title=_text(info.get("title")),
        version=_text(info.get("version")),
        description=_text(info.get("description")),
    )


def _extract_servers(servers: Any) -> list[ServerInfo]:
    if not isinstance(servers, list):
        return []

    return [
        ServerInfo(
            url=str(server["url"]),
            description=server.get("description") if isinstance(server.get("description"), str) else None,
        )
        for server in servers
        if isinstance(server, dict) and server.get("url") is not None
    ]
