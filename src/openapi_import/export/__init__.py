"""Export of request documents to a host (local filesystem by default).

Typical usage::

    from openapi_import.export import LocalFileHost, generate_selected

    report = generate_selected(document, endpoints, LocalFileHost(), output_dir=".")
"""

from openapi_import.export.driver import files_exist, folder_exists, generate_selected
from openapi_import.export.host import ExportHost, LocalFileHost

__all__ = [
    "ExportHost",
    "LocalFileHost",
    "files_exist",
    "folder_exists",
    "generate_selected",
]
