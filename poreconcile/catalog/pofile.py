"""Read and write gettext PO catalogs.

The reader is line based and keeps every source line it consumes. Comments,
flags, obsolete entries, blank lines and line endings are carried through
untouched; only msgstr fields whose value changed are rendered again when
the catalog is written.
"""

from __future__ import annotations

import codecs
import logging
import re
from dataclasses import dataclass, field

from babel.messages.pofile import escape, normalize, unescape

from poreconcile.catalog import ParseError
from poreconcile.catalog.models import (
    Catalog,
    PluralEntry,
    SingularEntry,
    TranslationEntry,
)
from poreconcile.config import config

logger = logging.getLogger("poreconcile.catalog")

_LINE_RE = re.compile(r"[^\n]*\n|[^\n]+\Z")
_KEYWORD_RE = re.compile(
    r"^(?P<keyword>msgctxt|msgid_plural|msgid|msgstr(?:\[(?P<index>\d+)\])?)"
    r"\s*(?P<string>\".*)$"
)
_STRING_RE = re.compile(r'^"(?:[^"\\]|\\.)*"$')
_HEADER_MSGSTR_RE = re.compile(
    rb"\A(?:[ \t\r]*(?:#[^\n]*)?\n)*"
    rb"[ \t]*msgid[ \t]*\"\"[ \t\r]*\n"
    rb"[ \t]*msgstr[ \t]*(\"[^\n]*(?:\n[ \t]*\"[^\n]*)*)"
)
_CHARSET_RE = re.compile(rb"Content-Type:[^\n\"]*?charset=([A-Za-z0-9_.:-]+)")


@dataclass
class _PendingEntry:
    """Entry under construction while its keyword lines are read."""

    leading: list[str]
    context: str | None = None
    msgid: str | None = None
    msgid_plural: str | None = None
    msgstr: list[str] = field(default_factory=list)
    lineno: int | None = None
    lines: list[str] = field(default_factory=list)
    msgstr_offset: int | None = None
    open_field: str | None = None

    @property
    def has_msgstr(self) -> bool:
        return self.msgstr_offset is not None

    def build(self) -> TranslationEntry:
        common = {
            "context": self.context or "",
            "msgid": self.msgid or "",
            "msgstr": list(self.msgstr),
            "lineno": self.lineno,
            "leading": self.leading,
            "lines": self.lines,
            "msgstr_offset": self.msgstr_offset,
            "original_msgstr": tuple(self.msgstr),
        }
        if self.msgid_plural is not None:
            return PluralEntry(msgid_plural=self.msgid_plural, **common)
        return SingularEntry(**common)


def split_lines(text: str) -> list[str]:
    """Split text on ``\\n`` only, keeping line endings."""
    return _LINE_RE.findall(text)


def _detect_encoding(data: bytes) -> str:
    """Return the charset declared in the header entry's Content-Type."""
    header = _HEADER_MSGSTR_RE.match(data)
    match = _CHARSET_RE.search(header.group(1)) if header else None
    if match:
        charset = match.group(1).decode("ascii")
        try:
            return codecs.lookup(charset).name
        except LookupError:
            logger.debug(
                "Unknown charset %r, using %s", charset, config.DEFAULT_ENCODING
            )
    return config.DEFAULT_ENCODING


def _decode_string(token: str, filename: str | None, lineno: int) -> str:
    token = token.rstrip()
    if not _STRING_RE.match(token):
        raise ParseError(
            f"malformed quoted string {token!r}", filename=filename, lineno=lineno
        )
    return unescape(token)


class _Reader:
    """State machine turning PO lines into catalog entries."""

    def __init__(self, filename: str | None) -> None:
        self.filename = filename
        self.entries: list[TranslationEntry] = []
        self.pending_lines: list[str] = []
        self.current: _PendingEntry | None = None

    def error(self, message: str, lineno: int) -> ParseError:
        return ParseError(message, filename=self.filename, lineno=lineno)

    def start_entry(self) -> _PendingEntry:
        self.current = _PendingEntry(leading=self.pending_lines)
        self.pending_lines = []
        return self.current

    def finish_entry(self, lineno: int) -> None:
        current = self.current
        if current is None:
            return
        if not current.has_msgstr:
            raise self.error(f"entry for msgid {current.msgid!r} has no msgstr", lineno)
        self.entries.append(current.build())
        self.current = None

    def feed(self, lineno: int, raw: str) -> None:
        stripped = raw.rstrip("\r\n").strip()

        if not stripped and self.current is not None and not self.current.has_msgstr:
            # Blank lines before msgstr belong to the entry head.
            self.current.lines.append(raw)
            self.current.open_field = None
            return

        if not stripped or stripped.startswith("#"):
            if self.current is not None:
                self.finish_entry(lineno)
            self.pending_lines.append(raw)
            return

        match = _KEYWORD_RE.match(stripped)
        if match:
            self.keyword(lineno, raw, match)
            return

        if stripped.startswith('"'):
            current = self.current
            if current is None or current.open_field is None:
                raise self.error("string continuation outside of an entry", lineno)
            value = _decode_string(stripped, self.filename, lineno)
            if current.open_field == "msgctxt":
                current.context = (current.context or "") + value
            elif current.open_field == "msgid":
                current.msgid = (current.msgid or "") + value
            elif current.open_field == "msgid_plural":
                current.msgid_plural = (current.msgid_plural or "") + value
            else:
                current.msgstr[-1] += value
            current.lines.append(raw)
            return

        raise self.error(f"unrecognized line {stripped!r}", lineno)

    def keyword(self, lineno: int, raw: str, match: re.Match[str]) -> None:
        keyword = match.group("keyword")
        value = _decode_string(match.group("string"), self.filename, lineno)
        current = self.current

        if keyword == "msgctxt":
            if current is not None:
                if not current.has_msgstr:
                    raise self.error("msgctxt inside an unfinished entry", lineno)
                self.finish_entry(lineno)
            current = self.start_entry()
            current.context = value
        elif keyword == "msgid":
            if current is not None and current.has_msgstr:
                self.finish_entry(lineno)
                current = None
            if current is None:
                current = self.start_entry()
            elif current.msgid is not None:
                raise self.error("second msgid before msgstr", lineno)
            current.msgid = value
            current.lineno = lineno
        else:
            if current is None or current.msgid is None:
                raise self.error(f"{keyword} without msgid", lineno)
            if keyword == "msgid_plural":
                if current.has_msgstr:
                    raise self.error("msgid_plural after msgstr", lineno)
                if current.msgid_plural is not None:
                    raise self.error("duplicate msgid_plural", lineno)
                current.msgid_plural = value
            else:
                self.msgstr(lineno, current, keyword, match.group("index"), value)

        current.lines.append(raw)
        current.open_field = "msgstr" if keyword.startswith("msgstr") else keyword

    def msgstr(
        self,
        lineno: int,
        current: _PendingEntry,
        keyword: str,
        index: str | None,
        value: str,
    ) -> None:
        if index is None:
            if current.msgid_plural is not None:
                raise self.error("plain msgstr in an entry with msgid_plural", lineno)
            if current.has_msgstr:
                raise self.error("duplicate msgstr", lineno)
        else:
            if current.msgid_plural is None:
                raise self.error(f"{keyword} in an entry without msgid_plural", lineno)
            expected = len(current.msgstr)
            if int(index) != expected:
                raise self.error(f"expected msgstr[{expected}], got {keyword}", lineno)

        if current.msgstr_offset is None:
            current.msgstr_offset = len(current.lines)
        current.msgstr.append(value)

    def close(self, lineno: int) -> list[str]:
        if self.current is not None:
            if not self.current.has_msgstr:
                raise self.error("unterminated entry at end of catalog", lineno)
            self.finish_entry(lineno)
        trailer, self.pending_lines = self.pending_lines, []
        return trailer


def parse(data: bytes, *, filename: str | None = None) -> Catalog:
    """Parse PO catalog bytes into a :class:`Catalog`.

    Args:
        data: Raw catalog contents
        filename: Name used in error messages and defect reports

    Returns:
        Parsed catalog

    Raises:
        ParseError: If the bytes do not follow the PO grammar
    """
    bom = data.startswith(codecs.BOM_UTF8)
    if bom:
        data = data[len(codecs.BOM_UTF8) :]

    encoding = _detect_encoding(data)
    try:
        text = data.decode(encoding)
    except UnicodeDecodeError as exc:
        raise ParseError(
            f"cannot decode as {encoding}: {exc}", filename=filename
        ) from exc

    reader = _Reader(filename)
    lines = split_lines(text)
    for lineno, raw in enumerate(lines, start=1):
        reader.feed(lineno, raw)
    trailer = reader.close(len(lines))

    catalog = Catalog(
        entries=reader.entries,
        trailer=trailer,
        filename=filename,
        encoding=encoding,
        bom=bom,
    )
    logger.debug(
        "Parsed %d entries from %s (%s)",
        len(catalog.entries),
        filename or "<catalog>",
        encoding,
    )
    return catalog


def _line_ending(lines: list[str]) -> str:
    for line in lines:
        if line.endswith("\r\n"):
            return "\r\n"
        if line.endswith("\n"):
            return "\n"
    return "\n"


def _render_field(keyword: str, value: str, width: int, newline: str) -> list[str]:
    rendered = f"{keyword} {normalize(value, width=width)}"
    return [line + newline for line in rendered.split("\n")]


def _render_entry(entry: TranslationEntry, width: int) -> list[str]:
    """Render an entry whose msgstr changed, reusing its unchanged head lines."""
    if entry.msgstr_offset is not None:
        head = entry.lines[: entry.msgstr_offset]
        newline = _line_ending(entry.lines)
    else:
        newline = "\n"
        head = []
        if entry.context:
            head += _render_field("msgctxt", entry.context, width, newline)
        head += _render_field("msgid", entry.msgid, width, newline)
        if isinstance(entry, PluralEntry):
            head += _render_field("msgid_plural", entry.msgid_plural, width, newline)

    body: list[str] = []
    if isinstance(entry, PluralEntry):
        for index, value in enumerate(entry.msgstr):
            body += _render_field(f"msgstr[{index}]", value, width, newline)
    else:
        body += _render_field("msgstr", entry.msgstr[0], width, newline)
    return head + body


def serialize(catalog: Catalog, *, width: int | None = None) -> bytes:
    """Write a catalog back to PO bytes.

    Entries whose msgstr is unchanged since parsing are emitted verbatim.

    Args:
        catalog: Catalog to write
        width: Wrap width for re-rendered msgstr values

    Returns:
        Encoded catalog contents
    """
    if width is None:
        width = config.WRAP_WIDTH

    chunks: list[str] = []
    for entry in catalog.entries:
        if chunks and not entry.leading and entry.msgstr_offset is None:
            chunks.append("\n")
        chunks.extend(entry.leading)
        if entry.is_modified:
            chunks.extend(_render_entry(entry, width))
        else:
            chunks.extend(entry.lines)
    chunks.extend(catalog.trailer)

    data = "".join(chunks).encode(catalog.encoding)
    if catalog.bom:
        data = codecs.BOM_UTF8 + data
    return data


def locate_line(source: str, msgid: str, length: int | None = None) -> int | None:
    """Guess the line of ``msgid`` by searching the raw catalog text.

    Only the first ``length`` characters of the escaped msgid are searched
    for, so msgids wrapped over several lines or sharing a prefix may give
    no result or the wrong line.
    """
    if length is None:
        length = config.LINE_HINT_LENGTH
    needle = escape(msgid)[1:-1][:length]
    if not needle:
        return None
    position = source.find(needle)
    if position < 0:
        return None
    return source.count("\n", 0, position) + 1
