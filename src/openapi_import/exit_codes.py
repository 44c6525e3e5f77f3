"""Numeric process exit codes following `clig.dev <https://clig.dev/>`_ conventions.

Each constant maps to a specific error category and is referenced by the
corresponding :class:`~openapi_import.exceptions.OpenAPIImportError`
subclass. Shell scripts can inspect the exit code to tell a broken document
apart from a missing file without parsing stderr.

Example::

    $ openapi-import tree swagger2.json
    $ echo $?
    5   # EXIT_VALIDATION_ERROR -- not an OpenAPI 3.x document
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_INVALID_USAGE = 2
"""The command was invoked with invalid arguments."""

EXIT_SOURCE_ERROR = 3
"""The document source (file, stdin, URL) could not be read."""

EXIT_PARSE_ERROR = 4
"""The document is not well-formed JSON or YAML."""

EXIT_VALIDATION_ERROR = 5
"""The document parsed but is not an OpenAPI 3.x document."""

EXIT_EXPORT_ERROR = 6
"""Generated request documents could not be written."""
