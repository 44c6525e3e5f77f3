"""Hosts that materialise generated request documents.

The export driver never touches the filesystem directly; it talks to an
:class:`ExportHost`.  :class:`LocalFileHost` is the implementation used by
the CLI.  Tests substitute an in-memory host.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path

from openapi_import.config import atomic_write
from openapi_import.output import get_output


class ExportHost(ABC):
    """Storage primitives the export driver relies on.

    Paths are plain strings so that hosts backed by something other than
    the local disk can interpret them however they like.
    """

    @abstractmethod
    def directory_exists(self, parent: str, name: str) -> bool:
        """Return True if directory *name* exists under *parent*."""

    @abstractmethod
    def file_exists(self, parent: str, name: str) -> bool:
        """Return True if file *name* exists under *parent*."""

    @abstractmethod
    def create_directory(self, parent: str, name: str) -> str:
        """Create a directory under *parent* and return the name actually used.

        When *name* is already taken the host picks a fresh name instead of
        reusing the existing directory.
        """

    @abstractmethod
    def write_file(self, path: str, content: str) -> None:
        """Write *content* to *path*, replacing any existing file."""

    @abstractmethod
    def open_document(self, title: str, content: str) -> None:
        """Present a document that is not persisted to disk."""


class LocalFileHost(ExportHost):
    """:class:`ExportHost` backed by the local filesystem."""

    def directory_exists(self, parent: str, name: str) -> bool:
        return (Path(parent) / name).is_dir()

    def file_exists(self, parent: str, name: str) -> bool:
        return (Path(parent) / name).is_file()

    def create_directory(self, parent: str, name: str) -> str:
        base = Path(parent)
        candidate = name
        counter = 1
        while (base / candidate).exists():
            candidate = f"{name}-{counter}"
            counter += 1
        (base / candidate).mkdir(parents=True)
        return candidate

    def write_file(self, path: str, content: str) -> None:
        atomic_write(Path(path), content)

    def open_document(self, title: str, content: str) -> None:
        out = get_output()
        out.info(f"# {title}")
        out.print_data(content.rstrip("\n"))
