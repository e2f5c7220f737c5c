"""Plural-Forms header handling.

* :mod:`poreconcile.plurals.expressions` parses the C-like ``plural=``
  expression into a comparable tree
* :mod:`poreconcile.plurals.forms` turns a whole header value into a
  :class:`~poreconcile.plurals.forms.PluralFormSpec`
"""

from __future__ import annotations


class FormatError(Exception):
    """Exception raised when a Plural-Forms value cannot be understood."""

    def __init__(self, message: str, value: str | None = None) -> None:
        """Initialize the error.

        Args:
            message: Error message
            value: The offending header or expression text
        """
        if value is not None:
            message = f"{message}: {value!r}"
        super().__init__(message)
        self.value = value


__all__ = ["FormatError"]
