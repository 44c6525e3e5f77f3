"""Built-in CLI commands for openapi-import.

* :mod:`~openapi_import.commands.browse` -- ``tree``, ``show`` and
  ``example``: read-only views of a document.
* :mod:`~openapi_import.commands.export` -- ``export``: write request
  documents for the selected endpoints.

Each module exports plain callback functions that
:mod:`openapi_import.app` registers directly on the root app.
"""
