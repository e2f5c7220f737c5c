"""Parsed ``Plural-Forms`` header values."""

from __future__ import annotations

import re
from dataclasses import dataclass

from poreconcile.plurals import FormatError
from poreconcile.plurals.expressions import Node, evaluate, parse_expression

_PLURAL_FORMS_RE = re.compile(
    r"^\s*nplurals\s*=\s*(?P<count>\d+)\s*;"
    r"\s*plural\s*=\s*(?P<expression>[^;]+?)\s*;?\s*$"
)


@dataclass(frozen=True)
class PluralFormSpec:
    """Number of plural slots and the rule that picks one for ``n``.

    Two specs are equal when the counts match and the condition trees are
    structurally identical.
    """

    plural_count: int
    condition: Node

    def plural_index(self, n: int) -> int:
        """Return the msgstr index the rule selects for quantity ``n``."""
        return evaluate(self.condition, n)

    def __str__(self) -> str:
        return f"nplurals={self.plural_count}; plural={self.condition};"


def parse_plural_form(value: str | None) -> PluralFormSpec:
    """Parse a header value like ``nplurals=2; plural=(n != 1);``.

    Args:
        value: Raw ``Plural-Forms`` header value

    Returns:
        Parsed spec

    Raises:
        FormatError: If the value is missing or not of that shape
    """
    if value is None:
        raise FormatError("Missing Plural-Forms header")

    match = _PLURAL_FORMS_RE.match(value)
    if not match:
        raise FormatError("Malformed Plural-Forms header", value)

    plural_count = int(match.group("count"))
    if plural_count < 1:
        raise FormatError("nplurals must be a positive integer", value)

    return PluralFormSpec(
        plural_count=plural_count,
        condition=parse_expression(match.group("expression")),
    )
