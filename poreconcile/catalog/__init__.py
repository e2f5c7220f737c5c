"""Translation catalog package.

Catalogs are read from and written to the gettext PO text format:

* :mod:`poreconcile.catalog.models` holds the catalog and entry types
* :mod:`poreconcile.catalog.pofile` converts between bytes and catalogs

Example:
    from poreconcile.catalog.pofile import parse, serialize

    catalog = parse(path.read_bytes(), filename=str(path))
    path.write_bytes(serialize(catalog))
"""

from __future__ import annotations


class ParseError(Exception):
    """Exception raised when catalog bytes do not follow the PO grammar."""

    def __init__(
        self,
        message: str,
        *,
        filename: str | None = None,
        lineno: int | None = None,
    ) -> None:
        """Initialize the error.

        Args:
            message: Error message
            filename: Catalog the error was found in
            lineno: 1-based line of the offending input
        """
        location = filename or "<catalog>"
        if lineno is not None:
            location = f"{location}:{lineno}"
        super().__init__(f"{location}: {message}")
        self.filename = filename
        self.lineno = lineno


__all__ = ["ParseError"]
