"""Canonical Pydantic models shared across all openapi-import modules.

This is the single source of truth for data shapes in the project. The
models fall into three groups:

**Configuration models** -- serialised as JSON in the user's config directory:
    :class:`OutputConfig`, :class:`SamplingConfig`, :class:`ExportConfig`
    and :class:`GlobalConfig`.

**Document and tree models** -- produced by the parser and consumed by the
CLI and the export driver:
    :class:`HTTPMethod`, :class:`SchemaKind`, :class:`APIInfo`,
    :class:`ServerInfo`, :class:`OpenAPIDocument`, :class:`TagNode`,
    :class:`PathNode` and :class:`EndpointNode`.

**Export models** -- the hand-off format between the request-document
generator and an export host:
    :class:`ContentBlock`, :class:`RequestDocument` and :class:`ExportReport`.

Fields that hold raw or resolved schema fragments are typed ``Any`` on
purpose: Pydantic copies containers it validates, and the resolver relies on
the identity of the parsed sub-trees for memoisation.
"""

from __future__ import annotations

import enum
from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


# --- Config ---


class OutputConfig(BaseModel):
    """Default output format preferences stored in :class:`GlobalConfig`."""

    format: str = Field(
        default="auto", description="Output format: auto, json, plain, rich"
    )


class SamplingConfig(BaseModel):
    """Example synthesis settings."""

    max_depth: int = Field(
        default=8, ge=0, description="Recursion cap for example synthesis"
    )


class ExportConfig(BaseModel):
    """Defaults for ``openapi-import export``."""

    root_folder_name: Optional[str] = Field(
        default=None,
        description="Export root folder; defaults to the document title",
    )
    requests_dir: str = Field(
        default="requests", description="Sub-folder holding the per-tag folders"
    )
    overwrite: bool = Field(
        default=False,
        description="Reuse an existing root folder instead of creating a new one",
    )


class GlobalConfig(BaseModel):
    """User-wide configuration persisted at ``~/.config/openapi-import/config.json``.

    Loaded by :func:`~openapi_import.config.load_global_config`. See
    :func:`~openapi_import.config.resolve_config` for the precedence chain.
    """

    output: OutputConfig = Field(default_factory=OutputConfig)
    sampling: SamplingConfig = Field(default_factory=SamplingConfig)
    export: ExportConfig = Field(default_factory=ExportConfig)


# --- Document ---


class HTTPMethod(str, enum.Enum):
    """HTTP methods recognised by OpenAPI 3.x path-item objects.

    Keys of a path item that are not one of these (``parameters``,
    ``summary``, vendor extensions) never become endpoints.
    """

    GET = "get"
    POST = "post"
    PUT = "put"
    PATCH = "patch"
    DELETE = "delete"
    OPTIONS = "options"
    HEAD = "head"
    TRACE = "trace"


class SchemaKind(str, enum.Enum):
    """Closed set of schema fragment shapes used for type-directed dispatch.

    ``UNKNOWN`` is an explicit variant: fragments that match nothing else
    land here instead of falling through silently.
    """

    REFERENCE = "reference"
    COMBINATOR = "combinator"
    OBJECT = "object"
    ARRAY = "array"
    PRIMITIVE = "primitive"
    UNKNOWN = "unknown"


class APIInfo(BaseModel):
    """API metadata from the document's *Info Object*."""

    title: Optional[str] = None
    version: Optional[str] = None
    description: Optional[str] = None


class ServerInfo(BaseModel):
    """A server entry from the document's ``servers`` array."""

    url: str
    description: Optional[str] = None


class OpenAPIDocument(BaseModel):
    """A parsed and validated OpenAPI 3.x document.

    Immutable once built by :func:`~openapi_import.parser.loader.parse_openapi`.
    ``raw`` is the parsed root mapping itself (not a copy); every ``$ref``
    pointer is resolved against it.
    """

    model_config = ConfigDict(frozen=True)

    openapi_version: str
    info: Optional[APIInfo] = None
    servers: list[ServerInfo] = Field(default_factory=list)
    raw: Any = Field(default=None, repr=False)

    @property
    def title(self) -> Optional[str]:
        """The ``info.title`` value, if declared."""
        return self.info.title if self.info else None

    @property
    def paths(self) -> Any:
        """The raw ``paths`` value (not guaranteed to be a mapping)."""
        return self.raw.get("paths") if isinstance(self.raw, dict) else None

    @property
    def components(self) -> Any:
        return self.raw.get("components") if isinstance(self.raw, dict) else None

    @property
    def tags(self) -> list[Any]:
        """The top-level ``tags`` declarations, or an empty list."""
        tags = self.raw.get("tags") if isinstance(self.raw, dict) else None
        return tags if isinstance(tags, list) else []


# --- Tree ---


class EndpointNode(BaseModel):
    """One HTTP operation, identified by its ``(method, path)`` pair.

    ``parameters``, ``request_body`` and ``responses`` hold *resolved*
    fragments; ``raw`` points back at the un-resolved operation object for
    diagnostic display. ``tag`` is the grouping tag (the first declared tag
    or ``"untagged"``) while ``tags`` keeps every declared tag.
    """

    id: str
    type: Literal["endpoint"] = "endpoint"
    method: HTTPMethod
    path: str
    tag: str = "untagged"
    tags: list[str] = Field(default_factory=list)
    operation_id: Optional[str] = None
    summary: Optional[str] = None
    description: Optional[str] = None
    parameters: list[Any] = Field(default_factory=list)
    request_body: Any = None
    responses: Any = None
    raw: Any = Field(default=None, repr=False)

    @property
    def title(self) -> str:
        """Display title: summary, then operationId, then ``METHOD /path``."""
        return self.summary or self.operation_id or f"{self.method.value.upper()} {self.path}"


class PathNode(BaseModel):
    """A URL path within one tag. Same path under another tag is another node."""

    id: str
    type: Literal["path"] = "path"
    label: str
    children: list[EndpointNode] = Field(default_factory=list)


class TagNode(BaseModel):
    """A tag grouping, created lazily on the first endpoint carrying it."""

    id: str
    type: Literal["tag"] = "tag"
    label: str
    description: str = ""
    children: list[PathNode] = Field(default_factory=list)


# --- Export ---


class ContentBlock(BaseModel):
    """A typed block of a generated request document.

    ``type`` names the block kind (``request``, ``method``, ``url``,
    ``headers-table``, ``query-table``, ``paragraph``, ``json_body``,
    ``inline-json``, ``openapispecLink``). Container blocks nest children in
    ``content``; leaf blocks carry a string ``content`` or ``text``.
    """

    type: str
    attrs: dict[str, Any] = Field(default_factory=dict)
    content: Any = None
    text: Optional[str] = None


class RequestDocument(BaseModel):
    """Title plus ordered content blocks for one endpoint."""

    title: str
    blocks: list[ContentBlock] = Field(default_factory=list)


class ExportReport(BaseModel):
    """Outcome of one :func:`~openapi_import.export.driver.generate_selected` run."""

    total: int = 0
    written: list[str] = Field(default_factory=list)
    opened: list[str] = Field(default_factory=list)
    failed: list[str] = Field(default_factory=list)
    cancelled: bool = False
    root_path: Optional[str] = None

    @property
    def processed(self) -> int:
        return len(self.written) + len(self.opened) + len(self.failed)
