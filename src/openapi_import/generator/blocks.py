"""Turn one endpoint into a request document made of typed content blocks.

A request document is what the export host persists (or opens) for each
selected endpoint: a title plus an ordered list of
:class:`~openapi_import.models.ContentBlock` objects describing the source
document link, method and URL, header and query tables, and example payloads.  The
concrete file format is decided by the conversion callback handed to the
export driver; :func:`render_document` (JSON) is the default.

File and folder naming helpers live here too so that the export driver and
the pre-export existence checks agree on every name.
"""

from __future__ import annotations

import json
import re
import uuid
from pathlib import PurePosixPath
from typing import Any, Callable, Optional

from openapi_import.generator.content import request_example, response_example
from openapi_import.generator.sampler import (
    MAX_DEPTH,
    flatten_schema_to_rows,
    schema_kind,
    to_cell_text,
)
from openapi_import.models import (
    ContentBlock,
    EndpointNode,
    OpenAPIDocument,
    RequestDocument,
    SchemaKind,
)

UidFactory = Callable[[], str]

DOCUMENT_SUFFIX = ".json"


def new_uid() -> str:
    return str(uuid.uuid4())


def first_server_url(document: OpenAPIDocument) -> str:
    """The first declared server URL without a trailing slash, or ``""``."""
    url = document.servers[0].url if document.servers else ""
    return url[:-1] if url.endswith("/") else url


def endpoint_to_document(
    endpoint: EndpointNode,
    document: OpenAPIDocument,
    source_link: str = "",
    *,
    uid_factory: UidFactory = new_uid,
    max_depth: int = MAX_DEPTH,
) -> RequestDocument:
    """Build the request document for *endpoint*.

    Args:
        endpoint: A node from :func:`~openapi_import.parser.tree.build_tree`.
        document: The document the endpoint came from (for the server URL).
        source_link: Path of the OpenAPI file, stored in the link block.
        uid_factory: Produces the ``uid`` attribute of every block.
        max_depth: Recursion cap for synthesized examples.

    Returns:
        A :class:`~openapi_import.models.RequestDocument`.
    """
    method = endpoint.method.value.upper()
    blocks: list[ContentBlock] = [
        ContentBlock(
            type="openapispecLink",
            attrs={
                "uid": uid_factory(),
                "filePath": source_link,
                "filename": PurePosixPath(source_link).name if source_link else "",
                "isExternal": False,
            },
        ),
        ContentBlock(
            type="request",
            attrs={"uid": uid_factory()},
            content=[
                ContentBlock(
                    type="method",
                    attrs={"uid": uid_factory(), "method": method, "importedFrom": "", "visible": True},
                    content=method,
                ),
                ContentBlock(
                    type="url",
                    attrs={"uid": uid_factory()},
                    content=f"{first_server_url(document)}{endpoint.path}",
                ),
            ],
        ),
    ]

    headers = header_rows(endpoint)
    if headers:
        blocks.append(_table_block("headers-table", headers, uid_factory))

    queries = query_rows(endpoint)
    if queries:
        blocks.append(_table_block("query-table", queries, uid_factory))

    body = request_example(endpoint, max_depth=max_depth)
    if body is not None:
        blocks.append(
            ContentBlock(type="paragraph", attrs={"uid": uid_factory()}, content="Request Body - Example")
        )
        blocks.append(
            ContentBlock(
                type="json_body",
                attrs={
                    "uid": uid_factory(),
                    "importedFrom": "",
                    "contentType": "json",
                    "body": as_json_text(body),
                },
            )
        )

    responses = endpoint.responses if isinstance(endpoint.responses, dict) else {}
    for code, response in responses.items():
        example = response_example(response, max_depth=max_depth)
        if example is None:
            continue
        description = response.get("description") if isinstance(response, dict) else None
        heading = f"Response {code}"
        if description:
            heading += f" - {description}"
        blocks.append(
            ContentBlock(type="paragraph", attrs={"uid": uid_factory()}, content=f"{heading} - Example")
        )
        blocks.append(ContentBlock(type="inline-json", text=as_json_text(example)))

    return RequestDocument(title=endpoint.title, blocks=blocks)


def header_rows(endpoint: EndpointNode) -> list[tuple[str, str]]:
    """Header parameters as rows; the value is the schema default, then example."""
    rows: list[tuple[str, str]] = []
    for param in _params_in(endpoint, "header"):
        schema = param.get("schema")
        value: Any = None
        if isinstance(schema, dict):
            value = schema.get("default")
            if value is None:
                value = schema.get("example")
        rows.append((str(param.get("name", "")), to_cell_text(value)))
    return rows


def query_rows(endpoint: EndpointNode) -> list[tuple[str, str]]:
    """Query parameters as rows.

    Object parameters serialised with ``style: form, explode: true`` (the
    OpenAPI default for query parameters) are expanded into one row per
    property; everything else is a single row with an empty value.
    """
    rows: list[tuple[str, str]] = []
    for param in _params_in(endpoint, "query"):
        name = str(param.get("name", ""))
        schema = param.get("schema") or {}
        style = param.get("style", "form")
        explode = param.get("explode", True)
        if schema_kind(schema) is SchemaKind.OBJECT and explode and style == "form":
            rows.extend(flatten_schema_to_rows(name, schema))
        else:
            rows.append((name, ""))
    return rows


def _params_in(endpoint: EndpointNode, location: str) -> list[dict[str, Any]]:
    return [
        p for p in endpoint.parameters if isinstance(p, dict) and p.get("in") == location
    ]


def _table_block(kind: str, rows: list[tuple[str, str]], uid_factory: UidFactory) -> ContentBlock:
    return ContentBlock(
        type=kind,
        attrs={"uid": uid_factory(), "importedFrom": ""},
        content=[
            {
                "type": "table",
                "rows": [
                    {"attrs": {"disabled": False}, "row": [key, value]} for key, value in rows
                ],
            }
        ],
    )


def as_json_text(value: Any) -> str:
    """Render an example for a JSON block; strings are passed through as-is."""
    if value is None:
        return "{}"
    if isinstance(value, str):
        return value
    return json.dumps(value, indent=2, ensure_ascii=False, default=str)


def render_document(request: RequestDocument) -> str:
    """Default conversion callback: the request document as JSON text."""
    return request.model_dump_json(indent=2, exclude_none=True) + "\n"


# --- Naming ---


def sanitize_name(name: str) -> str:
    """Make *name* safe as a folder name (letters, digits, single dashes)."""
    name = re.sub(r"/+", "-", name.strip())
    name = re.sub(r"[^a-zA-Z0-9\-\s]", "", name)
    name = re.sub(r"\s+", "-", name)
    name = re.sub(r"-+", "-", name)
    return name.strip("-")


def tag_folder_name(endpoint: EndpointNode) -> str:
    return sanitize_name(endpoint.tag or "untagged")


def endpoint_file_name(endpoint: EndpointNode, suffix: str = DOCUMENT_SUFFIX) -> str:
    """File name for *endpoint*, e.g. ``get_pets_petId.json`` for ``GET /pets/{petId}``."""
    safe_path = re.sub(r"[^\w/-]+", "", endpoint.path, flags=re.ASCII).replace("/", "_") or "root"
    return f"{endpoint.method.value}_{safe_path}{suffix}".replace("__", "_", 1)


def root_folder_name(name: Optional[str], fallback: str = "openapi-import") -> str:
    return sanitize_name(name or "") or fallback
