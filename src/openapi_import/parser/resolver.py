"""Dereference in-document ``$ref`` pointers and merge ``allOf`` compositions.

OpenAPI documents share sub-trees through ``$ref`` pointers (e.g.
``{"$ref": "#/components/schemas/Pet"}``), and those pointers may form
cycles (a ``TreeNode`` whose ``children`` are ``TreeNode`` items).  A
:class:`RefResolver` is closed over one parsed document and exposes a
single operation, :meth:`RefResolver.resolve`, which returns a fully
expanded copy of any fragment: no ``$ref`` left, every ``allOf`` merged.

Termination and cost are bounded by three tables living on the resolver
instance (never shared across documents):

* an identity memo -- a fragment reached through two different paths is
  resolved once and both callers get the same resolved value;
* a ref cache keyed by pointer string -- repeated references to the same
  target reuse one resolution;
* the set of pointers currently being resolved -- a pointer met again
  while it is still on the stack is a cycle, and is replaced by a sentinel
  (the original ``$ref`` fragment plus ``circular: True``).

Only internal pointers (``#/...``) are followed.  A pointer that is external
or points nowhere resolves to ``None`` instead of raising, so one broken
reference cannot abort a whole document; such pointers are collected in
:attr:`RefResolver.unresolved` for diagnostics.

Resolution recurses on the Python stack, so an acyclic chain of several
hundred hops raises ``RecursionError``; the CLI reports that as a
:class:`~openapi_import.exceptions.ParseError`.
"""

from __future__ import annotations

from functools import reduce
from typing import Any

from openapi_import.models import OpenAPIDocument

CIRCULAR_MARKER = "circular"
"""Key added to a ``$ref`` fragment when resolving it would recurse forever."""


def get_by_pointer(root: Any, pointer: str) -> Any:
    """Look up a ``#/a/b/c`` JSON pointer inside *root*.

    Segments are unescaped per RFC 6901 (``~1`` -> ``/``, then ``~0`` ->
    ``~``).  Sequence segments must be decimal indexes.

    Returns:
        The target value, or ``None`` if the pointer is not internal or any
        segment is missing.
    """
    if not isinstance(pointer, str) or not pointer.startswith("#/"):
        return None

    current = root
    for segment in pointer[2:].split("/"):
        segment = segment.replace("~1", "/").replace("~0", "~")
        if isinstance(current, dict):
            current = current.get(segment)
        elif isinstance(current, list) and segment.isdigit():
            index = int(segment)
            current = current[index] if index < len(current) else None
        else:
            return None
    return current


def merge(a: Any, b: Any) -> Any:
    """Deep-merge two resolved fragments, *b* taking precedence.

    * ``None`` on either side yields the other side.
    * Two sequences yield their union in first-seen order with duplicates
      dropped (the semantics of ``required`` lists).
    * A type mismatch, or two non-mappings, yields *b*.
    * Two mappings are merged key by key; *b*'s ``allOf`` key is skipped
      because ``allOf`` is consumed by the resolver before merging.

    Neither argument is mutated.
    """
    if a is None:
        return b
    if b is None:
        return a
    if isinstance(a, list) and isinstance(b, list):
        union: list[Any] = []
        for item in (*a, *b):
            if item not in union:
                union.append(item)
        return union
    if not isinstance(a, dict) or not isinstance(b, dict):
        return b

    out = dict(a)
    for key, value in b.items():
        if key == "allOf":
            continue
        out[key] = merge(a.get(key), value)
    return out


class RefResolver:
    """Resolve fragments of one OpenAPI document.

    Construct one resolver per parsed document; its caches are only valid
    for that document.  Resolving the same fragment twice returns the same
    value.

    Args:
        document: A parsed :class:`~openapi_import.models.OpenAPIDocument`,
            or a bare root mapping.

    Attributes:
        unresolved: Pointer strings that could not be found.
        circular: Pointer strings at which a cycle was cut.

    Example::

        resolver = RefResolver(document)
        schema = resolver.resolve({"$ref": "#/components/schemas/Pet"})
    """

    def __init__(self, document: OpenAPIDocument | dict[str, Any]) -> None:
        self._root = document.raw if isinstance(document, OpenAPIDocument) else document
        # id(fragment) -> (fragment, resolved); the fragment is kept so its id stays unique
        self._memo: dict[int, tuple[Any, Any]] = {}
        self._ref_cache: dict[str, Any] = {}
        self._resolving: set[str] = set()
        self.unresolved: set[str] = set()
        self.circular: set[str] = set()

    def resolve(self, fragment: Any) -> Any:
        """Return *fragment* with every ``$ref`` dereferenced and ``allOf`` merged.

        Scalars (and ``None``) are returned unchanged.  Sequences and
        mappings are never modified in place; a new value is built.
        """
        if not isinstance(fragment, (dict, list)):
            return fragment

        hit = self._memo.get(id(fragment))
        if hit is not None:
            return hit[1]

        if isinstance(fragment, list):
            resolved = [self.resolve(item) for item in fragment]
            self._remember(fragment, resolved)
            return resolved

        ref = fragment.get("$ref")
        if isinstance(ref, str):
            return self._resolve_reference(fragment, ref)

        if isinstance(fragment.get("allOf"), list):
            return self._resolve_all_of(fragment)

        out: dict[str, Any] = {}
        # Registered before recursing so identity cycles (YAML aliases) terminate.
        self._remember(fragment, out)
        for key, value in fragment.items():
            out[key] = self.resolve(value)
        return out

    def _remember(self, fragment: Any, resolved: Any) -> None:
        self._memo[id(fragment)] = (fragment, resolved)

    def _resolve_siblings(self, fragment: dict[str, Any], skip: str) -> dict[str, Any]:
        return {key: self.resolve(value) for key, value in fragment.items() if key != skip}

    def _resolve_reference(self, fragment: dict[str, Any], ref: str) -> Any:
        if ref in self._ref_cache:
            resolved = self._with_overrides(self._ref_cache[ref], fragment)
            self._remember(fragment, resolved)
            return resolved

        if ref in self._resolving:
            self.circular.add(ref)
            return {**fragment, CIRCULAR_MARKER: True}

        self._resolving.add(ref)
        try:
            target = get_by_pointer(self._root, ref)
            if target is None:
                self.unresolved.add(ref)
            resolved_target = self.resolve(target)
            self._ref_cache[ref] = resolved_target
        finally:
            self._resolving.discard(ref)

        resolved = self._with_overrides(resolved_target, fragment)
        self._remember(fragment, resolved)
        return resolved

    def _with_overrides(self, target: Any, fragment: dict[str, Any]) -> Any:
        """Merge the keys sitting next to ``$ref`` on top of the resolved target."""
        siblings = self._resolve_siblings(fragment, skip="$ref")
        if not siblings:
            return target
        return merge(target, siblings)

    def _resolve_all_of(self, fragment: dict[str, Any]) -> Any:
        branches = [self.resolve(branch) for branch in fragment["allOf"]]
        combined = reduce(merge, branches, {})
        # Local keys are merged last, so they win over the branches.
        resolved = merge(combined, self._resolve_siblings(fragment, skip="allOf"))
        self._remember(fragment, resolved)
        return resolved
