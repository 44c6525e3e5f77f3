"""Build the tag -> path -> endpoint tree from a parsed OpenAPI document.

:func:`build_tree` walks ``paths`` in document order and produces the
hierarchy the CLI renders and the export driver consumes:

* one :class:`~openapi_import.models.TagNode` per distinct grouping tag,
  where the grouping tag is the operation's *first* declared tag or
  ``"untagged"``;
* one :class:`~openapi_import.models.PathNode` per path string *within a
  tag* -- the same path under two tags yields two nodes;
* one :class:`~openapi_import.models.EndpointNode` per recognised HTTP verb,
  with parameters, request body and responses dereferenced through a
  :class:`~openapi_import.parser.resolver.RefResolver`.

Operations with several tags are placed under the first one only; the full
list stays available on :attr:`EndpointNode.tags` and on the raw operation.

:func:`filter_tree` prunes a tree by a free-text query, and
:func:`flatten_endpoints` lists the endpoints in display order.
"""

from __future__ import annotations

from typing import Any, Optional

from openapi_import.models import EndpointNode, HTTPMethod, OpenAPIDocument, PathNode, TagNode
from openapi_import.parser.resolver import RefResolver

UNTAGGED = "untagged"

_HTTP_METHODS = frozenset(m.value for m in HTTPMethod)


def build_tree(
    document: OpenAPIDocument,
    resolver: Optional[RefResolver] = None,
) -> list[TagNode]:
    """Group every operation of *document* into a sorted list of tag nodes.

    Args:
        document: The parsed document.
        resolver: Resolver to dereference fragments with.  A fresh one bound
            to *document* is created when omitted; pass one in to inspect its
            ``unresolved`` / ``circular`` sets afterwards.

    Returns:
        Tag nodes ordered by label.  Path nodes keep first-seen order within
        their tag and endpoints keep the verb order of their path item.  A
        document whose ``paths`` is not a mapping yields an empty list.
    """
    paths = document.paths
    if not isinstance(paths, dict):
        return []

    if resolver is None:
        resolver = RefResolver(document)

    descriptions = _tag_descriptions(document)
    tag_index: dict[str, TagNode] = {}
    path_index: dict[tuple[str, str], PathNode] = {}

    for path, path_item in paths.items():
        if not isinstance(path_item, dict):
            continue
        path = str(path)
        shared_params = path_item.get("parameters")

        for method, operation in path_item.items():
            if not isinstance(operation, dict):
                continue
            http = str(method).lower()
            if http not in _HTTP_METHODS:
                continue

            endpoint = _build_endpoint(path, http, operation, shared_params, resolver)

            tag_node = tag_index.get(endpoint.tag)
            if tag_node is None:
                tag_node = TagNode(
                    id=f"tag:{endpoint.tag}",
                    label=endpoint.tag,
                    description=descriptions.get(endpoint.tag, ""),
                )
                tag_index[endpoint.tag] = tag_node

            path_node = path_index.get((endpoint.tag, path))
            if path_node is None:
                path_node = PathNode(id=f"path:{path}:{endpoint.tag}", label=path)
                path_index[(endpoint.tag, path)] = path_node
                tag_node.children.append(path_node)

            path_node.children.append(endpoint)

    return sorted(tag_index.values(), key=lambda node: collation_key(node.label))


def collation_key(label: str) -> tuple[str, str]:
    """Sort key approximating locale-aware comparison.

    Case-insensitive first; on ties lowercase sorts before uppercase.
    """
    return (label.casefold(), label.swapcase())


def _build_endpoint(
    path: str,
    method: str,
    operation: dict[str, Any],
    shared_params: Any,
    resolver: RefResolver,
) -> EndpointNode:
    declared_tags = operation.get("tags")
    if not isinstance(declared_tags, list):
        declared_tags = []
    tags = [str(t) for t in declared_tags if t is not None]
    tag = str(declared_tags[0]) if declared_tags and declared_tags[0] else UNTAGGED

    request_body = operation.get("requestBody")
    responses = operation.get("responses")

    return EndpointNode(
        id=f"ep:{method}:{path}",
        method=HTTPMethod(method),
        path=path,
        tag=tag,
        tags=tags,
        operation_id=_text(operation.get("operationId")),
        summary=_text(operation.get("summary")),
        description=_text(operation.get("description")),
        parameters=_resolve_parameters(shared_params, operation.get("parameters"), resolver),
        request_body=resolver.resolve(request_body) if request_body is not None else None,
        responses=resolver.resolve(responses) if responses is not None else None,
        raw=operation,
    )


def _resolve_parameters(
    shared_params: Any,
    op_params: Any,
    resolver: RefResolver,
) -> list[Any]:
    """Resolve operation parameters, prepending path-level ones not overridden.

    An operation-level parameter overrides a path-level one with the same
    ``name`` and ``in`` values.
    """
    own = [resolver.resolve(p) for p in op_params] if isinstance(op_params, list) else []
    if not isinstance(shared_params, list):
        return own

    overridden = {_param_key(p) for p in own}
    inherited = [
        param
        for param in (resolver.resolve(p) for p in shared_params)
        if _param_key(param) is None or _param_key(param) not in overridden
    ]
    return inherited + own


def _param_key(param: Any) -> tuple[Any, Any] | None:
    if not isinstance(param, dict):
        return None
    return (param.get("name"), param.get("in"))


def _text(value: Any) -> Optional[str]:
    return value if isinstance(value, str) else None


def _tag_descriptions(document: OpenAPIDocument) -> dict[str, str]:
    descriptions: dict[str, str] = {}
    for entry in document.tags:
        if isinstance(entry, dict) and entry.get("name") is not None:
            description = entry.get("description")
            descriptions[str(entry["name"])] = description if isinstance(description, str) else ""
    return descriptions


# --- Browsing helpers ---


def filter_tree(nodes: list[TagNode], query: str) -> list[TagNode]:
    """Prune *nodes* to the parts matching a case-insensitive substring query.

    An endpoint matches when the query occurs in its tag label, path label,
    method, path, summary, operationId, or any declared tag.  A path is kept
    when one of its endpoints matches (with only those endpoints) or when its
    own label matches (with all of them); tags follow the same rule one
    level up.  The input tree is not modified.

    Args:
        nodes: Tag nodes as returned by :func:`build_tree`.
        query: Free-text query; blank means "no filter".

    Returns:
        A new list of (copied) tag nodes, or *nodes* itself for a blank query.
    """
    needle = query.strip().lower()
    if not needle:
        return nodes

    def _matches(*values: Optional[str]) -> bool:
        return any(needle in (v or "").lower() for v in values)

    result: list[TagNode] = []
    for tag in nodes:
        kept_paths: list[PathNode] = []
        for path in tag.children:
            endpoints = [
                ep
                for ep in path.children
                if _matches(tag.label, path.label, ep.method.value, ep.path,
                            ep.summary, ep.operation_id, *ep.tags)
            ]
            if endpoints or _matches(path.label):
                kept_paths.append(
                    path.model_copy(update={"children": endpoints or list(path.children)})
                )

        if kept_paths or _matches(tag.label):
            result.append(
                tag.model_copy(update={"children": kept_paths or list(tag.children)})
            )
    return result


def flatten_endpoints(nodes: list[TagNode]) -> list[EndpointNode]:
    """Return every endpoint of the tree in display order."""
    return [ep for tag in nodes for path in tag.children for ep in path.children]


def count_endpoints(nodes: list[TagNode]) -> int:
    return sum(len(path.children) for tag in nodes for path in tag.children)
