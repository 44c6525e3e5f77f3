"""Export command -- write one request document per selected endpoint.

Endpoints are selected from the document tree by ``--filter``, ``--tag``
and ``--endpoint``; without any selector every endpoint is exported.
Files land next to the source document unless ``--out`` is given, and
``--stdout`` prints the documents instead of writing them.
"""

from __future__ import annotations

import signal
import threading
from pathlib import Path
from typing import Any, Optional

import typer

from openapi_import.commands.browse import _config, load_index
from openapi_import.exceptions import ExportError, InvalidUsageError
from openapi_import.models import EndpointNode, TagNode
from openapi_import.output import info, progress, success, warning


def export_command(
    ctx: typer.Context,
    source: str = typer.Argument(..., help="OpenAPI file, URL, or '-' for stdin."),
    out_dir: Optional[Path] = typer.Option(
        None, "--out", "-o", help="Directory receiving the root folder."
    ),
    root_name: Optional[str] = typer.Option(
        None, "--root-name", help="Root folder name (defaults to the API title)."
    ),
    overwrite: bool = typer.Option(
        False, "--overwrite", help="Write into an existing root folder."
    ),
    filter_query: Optional[str] = typer.Option(
        None, "--filter", help="Only endpoints matching this text."
    ),
    tags: Optional[list[str]] = typer.Option(
        None, "--tag", help="Only endpoints under this tag (repeatable)."
    ),
    endpoints: Optional[list[str]] = typer.Option(
        None, "--endpoint", help="Only this operation, as 'METHOD PATH' (repeatable)."
    ),
    to_stdout: bool = typer.Option(
        False, "--stdout", help="Print the documents instead of writing files."
    ),
) -> None:
    """Export request documents for the selected endpoints.

    Example::

        openapi-import export petstore.yaml
        openapi-import export petstore.yaml --tag pets --out ./requests
        openapi-import export petstore.yaml --endpoint "GET /pets" --stdout
    """
    from openapi_import.export import LocalFileHost, files_exist, generate_selected
    from openapi_import.parser import filter_tree, flatten_endpoints

    config = _config(ctx)
    document, nodes = load_index(source)

    if filter_query:
        nodes = filter_tree(nodes, filter_query)
    if tags:
        nodes = _select_tags(nodes, tags)
    selected = flatten_endpoints(nodes)
    if endpoints:
        selected = _select_endpoints(selected, endpoints)

    if not selected:
        warning("No endpoints selected; nothing to export.")
        return

    host = LocalFileHost()
    is_file = source != "-" and not source.startswith(("http://", "https://"))
    link = str(Path(source).resolve()) if is_file else source

    output_dir: Optional[str] = None
    root_folder = root_name or config.export.root_folder_name or document.title
    replace = overwrite or config.export.overwrite
    if not to_stdout:
        if out_dir is not None:
            output_dir = str(out_dir)
        elif is_file:
            output_dir = str(Path(link).parent)
        else:
            output_dir = str(Path.cwd())
        if not replace and files_exist(
            host, output_dir, root_folder, selected, config.export.requests_dir
        ):
            info("Existing files found; writing into a new folder. Use --overwrite to replace them.")

    cancel = threading.Event()
    previous = _install_cancel_handler(cancel)
    try:
        report = generate_selected(
            document,
            selected,
            host,
            source=link,
            output_dir=output_dir,
            project_dir=str(Path.cwd()),
            root_folder_name=root_folder,
            overwrite=replace,
            on_progress=lambda current, total: progress(current, total, "endpoints"),
            cancel=cancel,
            max_depth=config.sampling.max_depth,
            requests_dir=config.export.requests_dir,
        )
    finally:
        if previous is not None:
            signal.signal(signal.SIGINT, previous)

    if report.root_path is not None:
        success(f"Wrote {len(report.written)} file(s) to {report.root_path}")
    if report.failed:
        raise ExportError(f"{len(report.failed)} of {report.total} endpoint(s) failed to export")


def _select_tags(nodes: list[TagNode], tags: list[str]) -> list[TagNode]:
    wanted = set(tags)
    kept = [node for node in nodes if node.label in wanted]
    for missing in sorted(wanted - {node.label for node in kept}):
        warning(f"No tag named {missing!r}")
    return kept


def _select_endpoints(candidates: list[EndpointNode], specs: list[str]) -> list[EndpointNode]:
    wanted: list[tuple[str, str]] = []
    for item in specs:
        parts = item.split(None, 1)
        if len(parts) != 2:
            raise InvalidUsageError(f"--endpoint expects 'METHOD PATH', got {item!r}")
        wanted.append((parts[0].lower(), parts[1].strip()))

    found = {(ep.method.value, ep.path) for ep in candidates}
    for method, path in wanted:
        if (method, path) not in found:
            warning(f"No operation {method.upper()} {path} among the selected endpoints")
    keys = set(wanted)
    return [ep for ep in candidates if (ep.method.value, ep.path) in keys]


def _install_cancel_handler(cancel: threading.Event) -> Any:
    """Make Ctrl-C stop the export after the endpoint in progress.

    Returns the previous handler, or ``None`` when not on the main thread.
    """
    if threading.current_thread() is not threading.main_thread():
        return None

    def _handler(signum: int, frame: Any) -> None:  # noqa: ANN401
        cancel.set()

    return signal.signal(signal.SIGINT, _handler)
