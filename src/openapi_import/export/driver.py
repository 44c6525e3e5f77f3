"""Sequential export of selected endpoints through an :class:`ExportHost`.

Layout produced when writing to disk::

    <output_dir>/<root>/requests/<tag>/<method>_<path>.json

Endpoints are handled strictly one at a time.  A failure on one endpoint is
logged and recorded in the :class:`~openapi_import.models.ExportReport`;
the remaining endpoints still run.
"""

from __future__ import annotations

import os
import threading
from pathlib import PurePath
from typing import Callable, Optional

from openapi_import import output
from openapi_import.export.host import ExportHost
from openapi_import.generator.blocks import (
    endpoint_file_name,
    endpoint_to_document,
    render_document,
    root_folder_name as make_root_folder_name,
    tag_folder_name,
)
from openapi_import.generator.sampler import MAX_DEPTH
from openapi_import.models import EndpointNode, ExportReport, OpenAPIDocument, RequestDocument

REQUESTS_DIR = "requests"

ProgressCallback = Callable[[int, int], None]
Converter = Callable[[RequestDocument], str]


def relative_source(source: str, project_dir: Optional[str]) -> str:
    """Express *source* relative to *project_dir* when it lives inside it."""
    if project_dir:
        path = PurePath(source)
        if path.is_relative_to(project_dir):
            return path.relative_to(project_dir).as_posix()
    return source


def generate_selected(
    document: OpenAPIDocument,
    endpoints: list[EndpointNode],
    host: ExportHost,
    *,
    source: str = "",
    output_dir: Optional[str] = None,
    project_dir: Optional[str] = None,
    root_folder_name: Optional[str] = None,
    overwrite: bool = False,
    on_progress: Optional[ProgressCallback] = None,
    cancel: Optional[threading.Event] = None,
    convert: Converter = render_document,
    max_depth: int = MAX_DEPTH,
    requests_dir: str = REQUESTS_DIR,
) -> ExportReport:
    """Generate a request document for each endpoint and hand it to *host*.

    Args:
        document: The parsed document the endpoints belong to.
        endpoints: Endpoints to export, in the order they are processed.
        host: Storage backend.
        source: Location of the OpenAPI document, stored in the link block.
        output_dir: Directory receiving the root folder.  When ``None`` every
            document goes to :meth:`ExportHost.open_document` instead.
        project_dir: When *source* lies below it, the link block stores the
            project-relative path.
        root_folder_name: Root folder name, sanitised; defaults to
            ``openapi-import``.
        overwrite: Reuse an existing root folder instead of creating a fresh
            one next to it.
        on_progress: Called with ``(current, total)`` after every endpoint,
            whether it succeeded or failed.
        cancel: When set, no further endpoints are started.
        convert: Turns a :class:`RequestDocument` into file content.
        max_depth: Recursion cap for synthesized examples.
        requests_dir: Name of the folder holding the tag folders.

    Returns:
        An :class:`~openapi_import.models.ExportReport`.
    """
    total = len(endpoints)
    report = ExportReport(total=total)
    link = relative_source(source, project_dir)

    root_path: Optional[str] = None
    if output_dir is not None:
        root_path = _prepare_root(host, output_dir, make_root_folder_name(root_folder_name), overwrite, requests_dir)
        report.root_path = root_path
        output.debug(f"Exporting {total} endpoint(s) into {root_path}")

    created_tags: set[str] = set()
    for index, endpoint in enumerate(endpoints, start=1):
        if cancel is not None and cancel.is_set():
            report.cancelled = True
            output.warning(f"Export cancelled after {index - 1} of {total} endpoint(s)")
            break
        try:
            request = endpoint_to_document(endpoint, document, link, max_depth=max_depth)
            content = convert(request)
            if root_path is None:
                host.open_document(request.title, content)
                report.opened.append(request.title)
            else:
                requests_path = os.path.join(root_path, requests_dir)
                tag_folder = tag_folder_name(endpoint)
                if tag_folder not in created_tags:
                    if not host.directory_exists(requests_path, tag_folder):
                        host.create_directory(requests_path, tag_folder)
                    created_tags.add(tag_folder)
                file_path = os.path.join(requests_path, tag_folder, endpoint_file_name(endpoint))
                host.write_file(file_path, content)
                report.written.append(file_path)
        except Exception as exc:
            output.error(f"Failed to generate {endpoint.method.value.upper()} {endpoint.path}: {exc}")
            report.failed.append(endpoint.id)
        finally:
            if on_progress is not None:
                on_progress(index, total)

    return report


def _prepare_root(
    host: ExportHost, output_dir: str, name: str, overwrite: bool, requests_dir: str
) -> str:
    if overwrite and host.directory_exists(output_dir, name):
        root_path = os.path.join(output_dir, name)
        if not host.directory_exists(root_path, requests_dir):
            host.create_directory(root_path, requests_dir)
        return root_path

    created = host.create_directory(output_dir, name)
    root_path = os.path.join(output_dir, created)
    host.create_directory(root_path, requests_dir)
    return root_path


# --- Pre-export checks ---


def folder_exists(host: ExportHost, output_dir: str, root_folder_name: Optional[str]) -> bool:
    """Return True if the sanitised root folder already exists in *output_dir*."""
    return host.directory_exists(output_dir, make_root_folder_name(root_folder_name))


def files_exist(
    host: ExportHost,
    output_dir: str,
    root_folder_name: Optional[str],
    endpoints: list[EndpointNode],
    requests_dir: str = REQUESTS_DIR,
) -> bool:
    """Return True if exporting *endpoints* would replace an existing file.

    Callers use this to choose between overwriting the existing root folder
    and creating a new one.
    """
    name = make_root_folder_name(root_folder_name)
    if not endpoints or not host.directory_exists(output_dir, name):
        return False

    requests_path = os.path.join(output_dir, name, requests_dir)
    for endpoint in endpoints:
        tag_folder = tag_folder_name(endpoint)
        if not host.directory_exists(requests_path, tag_folder):
            continue
        if host.file_exists(os.path.join(requests_path, tag_folder), endpoint_file_name(endpoint)):
            return True
    return False
