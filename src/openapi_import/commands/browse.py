"""Browse commands -- look at a document without writing anything.

``tree`` prints the tag -> path -> endpoint index, ``show`` prints one
endpoint with its parameters and synthesized examples, and ``example``
synthesizes a sample for any ``#/...`` pointer in the document.
"""

from __future__ import annotations

from typing import Any, Optional

import typer

from openapi_import.exceptions import InvalidUsageError, ParseError
from openapi_import.models import EndpointNode, GlobalConfig, OpenAPIDocument, TagNode
from openapi_import.output import OutputFormat, debug, get_output, info, warning


def load_index(source: str) -> tuple[OpenAPIDocument, list[TagNode]]:
    """Load *source* and build its endpoint tree, reporting reference problems.

    Unresolved pointers are warnings; cycles that were cut are debug lines.
    """
    from openapi_import.parser import RefResolver, build_tree, load_document

    document = load_document(source)
    debug(f"Loaded {document.title} (OpenAPI {document.openapi_version})")
    resolver = RefResolver(document)
    try:
        nodes = build_tree(document, resolver)
    except RecursionError:
        raise _too_deep(source) from None
    for pointer in sorted(resolver.unresolved):
        warning(f"Unresolved reference: {pointer}")
    for pointer in sorted(resolver.circular):
        debug(f"Circular reference cut at {pointer}")
    return document, nodes


def _too_deep(source: str) -> ParseError:
    return ParseError(f"$ref chains in {source} are nested too deeply to resolve")


def _config(ctx: typer.Context) -> GlobalConfig:
    obj = ctx.obj if isinstance(ctx.obj, dict) else {}
    config = obj.get("config")
    return config if isinstance(config, GlobalConfig) else GlobalConfig()


def tree_command(
    ctx: typer.Context,
    source: str = typer.Argument(..., help="OpenAPI file, URL, or '-' for stdin."),
    filter_query: Optional[str] = typer.Option(
        None, "--filter", help="Keep tags, paths or endpoints matching this text."
    ),
) -> None:
    """Show the tag -> path -> endpoint tree of an OpenAPI document.

    Example::

        openapi-import tree petstore.yaml
        openapi-import tree petstore.yaml --filter pets
    """
    from openapi_import.parser.tree import count_endpoints, filter_tree

    document, nodes = load_index(source)
    if filter_query:
        nodes = filter_tree(nodes, filter_query)

    get_output().print_tree(nodes, title=document.title or "API")
    info(f"{count_endpoints(nodes)} endpoint(s) in {len(nodes)} tag(s)")


def show_command(
    ctx: typer.Context,
    source: str = typer.Argument(..., help="OpenAPI file, URL, or '-' for stdin."),
    method: str = typer.Argument(..., help="HTTP method, e.g. GET."),
    path: str = typer.Argument(..., help="Path template, e.g. /pets/{petId}."),
) -> None:
    """Show one endpoint with its parameters and example payloads.

    Example::

        openapi-import show petstore.yaml GET /pets/{petId}
    """
    from openapi_import.generator.content import request_example, response_examples
    from openapi_import.generator.sampler import sample_to_text
    from openapi_import.parser import flatten_endpoints

    depth = _config(ctx).sampling.max_depth
    _, nodes = load_index(source)
    endpoint = find_endpoint(flatten_endpoints(nodes), method, path)

    body = request_example(endpoint, max_depth=depth)
    responses = response_examples(endpoint, max_depth=depth)
    params = [p for p in endpoint.parameters if isinstance(p, dict)]

    output = get_output()
    if output.format == OutputFormat.JSON:
        output.print_json({
            "id": endpoint.id,
            "method": endpoint.method.value.upper(),
            "path": endpoint.path,
            "tag": endpoint.tag,
            "operationId": endpoint.operation_id,
            "summary": endpoint.summary,
            "description": endpoint.description,
            "parameters": params,
            "requestBody": body,
            "responses": responses,
        })
        return

    output.print_data(f"{endpoint.method.value.upper()} {endpoint.path}  [{endpoint.tag}]")
    if endpoint.summary:
        output.print_data(endpoint.summary)
    if endpoint.description:
        output.print_data(endpoint.description)

    if params:
        rows = [
            [
                str(p.get("name", "")),
                str(p.get("in", "")),
                "yes" if p.get("required") else "",
                sample_to_text(p.get("schema"), max_depth=depth),
            ]
            for p in params
        ]
        output.print_table(["Name", "In", "Required", "Example"], rows, title="Parameters")

    if body is not None:
        output.print_data("Request body:")
        output.print_json(body)

    for code, example in responses.items():
        output.print_data(f"Response {code}:")
        if example is not None:
            output.print_json(example)


def find_endpoint(endpoints: list[EndpointNode], method: str, path: str) -> EndpointNode:
    """Return the endpoint for ``method path``.

    Raises:
        InvalidUsageError: If the document has no such operation.
    """
    wanted = method.lower()
    for endpoint in endpoints:
        if endpoint.method.value == wanted and endpoint.path == path:
            return endpoint
    raise InvalidUsageError(f"No operation {method.upper()} {path} in this document")


def example_command(
    ctx: typer.Context,
    source: str = typer.Argument(..., help="OpenAPI file, URL, or '-' for stdin."),
    pointer: str = typer.Argument(..., help="JSON pointer, e.g. '#/components/schemas/Pet'."),
    max_depth: Optional[int] = typer.Option(
        None, "--max-depth", min=0, help="Recursion cap for the synthesized example."
    ),
) -> None:
    """Synthesize an example for the schema at POINTER.

    Example::

        openapi-import example petstore.yaml '#/components/schemas/Pet'
    """
    from openapi_import.generator import synthesize
    from openapi_import.parser import RefResolver, get_by_pointer, load_document

    depth = max_depth if max_depth is not None else _config(ctx).sampling.max_depth
    document = load_document(source)
    fragment: Any = get_by_pointer(document.raw, pointer)
    if fragment is None:
        raise InvalidUsageError(f"Pointer not found: {pointer}")

    # Entered through a reference so a schema that recurses into itself is cut at POINTER.
    resolver = RefResolver(document)
    try:
        schema = resolver.resolve({"$ref": pointer})
    except RecursionError:
        raise _too_deep(source) from None
    for ref in sorted(resolver.unresolved):
        warning(f"Unresolved reference: {ref}")
    get_output().print_json(synthesize(schema, max_depth=depth))
