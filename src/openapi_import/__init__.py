"""openapi-import -- browse OpenAPI 3.x documents and export request templates.

This package parses an OpenAPI 3.0/3.1 document, dereferences every
in-document ``$ref`` pointer (with cycle detection and ``allOf`` merging),
groups the operations into a tag -> path -> endpoint tree, and synthesizes
example values from JSON Schema fragments so each endpoint can be previewed
or exported as a ready-to-edit request document.

Typical workflow::

    openapi-import tree petstore.yaml           # browse the endpoint tree
    openapi-import show petstore.yaml get /pets # preview one endpoint
    openapi-import export petstore.yaml --tag pets

Modules:
    app: Typer application and CLI entry point.
    models: Pydantic models shared across the entire package.
    config: XDG-aware configuration and precedence resolution.
    exceptions: Exception hierarchy with exit-code mapping.
    exit_codes: Numeric exit codes following clig.dev conventions.
    output: stdout/stderr formatting system with Rich support.
"""

__version__ = "0.3.0"
