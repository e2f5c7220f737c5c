"""Core data models for translation catalogs.

A :class:`Catalog` is built once by the PO reader, has msgstr values
rewritten in place by the merge and repair steps, and is written back out
by the PO writer. Entries are never added or removed after parsing.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from dataclasses import dataclass, field

logger = logging.getLogger("poreconcile.catalog")

HEADER_KEY: tuple[str, str] = ("", "")


@dataclass(kw_only=True)
class TranslationEntry:
    """A single message of a catalog.

    Besides the message itself every entry keeps the raw source lines it
    was parsed from, so an unchanged entry is written back byte for byte.
    """

    msgid: str
    msgstr: list[str]
    context: str = ""
    lineno: int | None = field(default=None, compare=False)

    # Raw source: comments/blank lines before the entry, the keyword lines
    # themselves, and where the msgstr lines start within ``lines``.
    leading: list[str] = field(default_factory=list, repr=False, compare=False)
    lines: list[str] = field(default_factory=list, repr=False, compare=False)
    msgstr_offset: int | None = field(default=None, repr=False, compare=False)
    original_msgstr: tuple[str, ...] | None = field(
        default=None, repr=False, compare=False
    )

    @property
    def key(self) -> tuple[str, str]:
        return (self.context, self.msgid)

    @property
    def is_header(self) -> bool:
        """Check if this is the reserved metadata entry."""
        return self.key == HEADER_KEY

    @property
    def is_plural(self) -> bool:
        return False

    @property
    def is_modified(self) -> bool:
        """Check if msgstr differs from what was parsed."""
        if self.original_msgstr is None or self.msgstr_offset is None:
            return True
        return tuple(self.msgstr) != self.original_msgstr


@dataclass(kw_only=True)
class SingularEntry(TranslationEntry):
    """Entry without ``msgid_plural``; holds exactly one msgstr slot."""

    def __post_init__(self) -> None:
        if len(self.msgstr) != 1:
            raise ValueError(
                f"Singular entry {self.msgid!r} needs exactly one msgstr, "
                f"got {len(self.msgstr)}"
            )

    @property
    def value(self) -> str:
        return self.msgstr[0]


@dataclass(kw_only=True)
class PluralEntry(TranslationEntry):
    """Entry with ``msgid_plural``; holds one msgstr slot per plural form."""

    msgid_plural: str

    def __post_init__(self) -> None:
        if not self.msgstr:
            raise ValueError(f"Plural entry {self.msgid!r} has no msgstr slots")

    @property
    def is_plural(self) -> bool:
        return True


def parse_headers(text: str) -> dict[str, str]:
    """Split the header entry's msgstr into an ordered name/value mapping.

    Lines without a ``Name: value`` shape are ignored.
    """
    headers: dict[str, str] = {}
    for line in text.split("\n"):
        name, sep, value = line.partition(":")
        name = name.strip()
        if not sep or not name:
            if line.strip():
                logger.debug("Ignoring malformed header line %r", line)
            continue
        headers[name] = value.strip()
    return headers


@dataclass
class Catalog:
    """A parsed PO catalog.

    ``entries`` keeps every entry in document order. ``translations`` maps
    context to msgid to entry, both levels in insertion order; the empty
    context is the default one. When a file repeats a key the later entry
    wins the mapping slot, but both stay in ``entries`` for output.
    """

    entries: list[TranslationEntry] = field(default_factory=list)
    trailer: list[str] = field(default_factory=list, repr=False, compare=False)
    filename: str | None = field(default=None, compare=False)
    encoding: str = field(default="utf-8", compare=False)
    bom: bool = field(default=False, repr=False, compare=False)
    headers: dict[str, str] = field(init=False)
    translations: dict[str, dict[str, TranslationEntry]] = field(
        init=False, repr=False, compare=False
    )

    def __post_init__(self) -> None:
        self.translations = {}
        for entry in self.entries:
            messages = self.translations.setdefault(entry.context, {})
            if entry.msgid in messages:
                logger.warning(
                    "%s: duplicate entry for msgid %r (context %r) at line %s",
                    self.filename or "<catalog>",
                    entry.msgid,
                    entry.context,
                    entry.lineno,
                )
            messages[entry.msgid] = entry

        header = self.header_entry
        self.headers = parse_headers(header.msgstr[0]) if header else {}

    @property
    def header_entry(self) -> TranslationEntry | None:
        return self.get(*HEADER_KEY)

    @property
    def plural_forms(self) -> str | None:
        """Return the raw ``Plural-Forms`` header value, if any."""
        return self.headers.get("Plural-Forms")

    def get(self, context: str, msgid: str) -> TranslationEntry | None:
        return self.translations.get(context, {}).get(msgid)

    def __iter__(self) -> Iterator[TranslationEntry]:
        """Iterate mapped entries by context, then msgid, in insertion order."""
        for messages in self.translations.values():
            yield from messages.values()

    def __len__(self) -> int:
        return sum(len(messages) for messages in self.translations.values())
