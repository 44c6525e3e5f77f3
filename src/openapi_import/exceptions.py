"""Exception hierarchy for openapi-import.

All exceptions inherit from :class:`OpenAPIImportError`, which carries an
``exit_code`` attribute mapped to a constant from
:mod:`openapi_import.exit_codes`. The top-level handler in
:func:`openapi_import.app.main` catches ``OpenAPIImportError`` and exits with
the appropriate code, while unexpected exceptions produce a crash log.

Unresolvable and circular ``$ref`` pointers are deliberately *not*
exceptions: the resolver degrades them to an absent value or a sentinel
fragment and records them on the resolver instance instead.

Subclass hierarchy::

    OpenAPIImportError (exit 1)
    +-- InvalidUsageError   (exit 2)
    +-- SourceError         (exit 3)
    +-- ParseError          (exit 4)
    +-- ValidationError     (exit 5)
    +-- ExportError         (exit 6)
    +-- ConfigError         (exit 1)
"""

from openapi_import.exit_codes import (
    EXIT_EXPORT_ERROR,
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_USAGE,
    EXIT_PARSE_ERROR,
    EXIT_SOURCE_ERROR,
    EXIT_VALIDATION_ERROR,
)


class OpenAPIImportError(Exception):
    """Base exception for all openapi-import errors.

    Every subclass sets a class-level ``exit_code`` corresponding to one of
    the constants in :mod:`openapi_import.exit_codes`.

    Args:
        message: Human-readable error description printed to stderr.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class InvalidUsageError(OpenAPIImportError):
    """Raised for invalid CLI arguments (unknown endpoint, bad pointer)."""

    exit_code = EXIT_INVALID_USAGE


class SourceError(OpenAPIImportError):
    """Raised when the document text cannot be read from a file, stdin, or URL."""

    exit_code = EXIT_SOURCE_ERROR


class ParseError(OpenAPIImportError):
    """Raised when the document is malformed JSON or YAML.

    The message carries the underlying parser's message. No partial result
    is produced.
    """

    exit_code = EXIT_PARSE_ERROR


class ValidationError(OpenAPIImportError):
    """Raised when a parsed document lacks ``openapi: 3.x`` or ``paths``."""

    exit_code = EXIT_VALIDATION_ERROR


class ExportError(OpenAPIImportError):
    """Raised when a single endpoint cannot be materialised by the export host."""

    exit_code = EXIT_EXPORT_ERROR


class ConfigError(OpenAPIImportError):
    """Raised for configuration problems (invalid JSON, bad environment values)."""

    exit_code = EXIT_GENERIC_FAILURE
