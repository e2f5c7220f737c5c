import logging
import textwrap
from collections.abc import Callable, Iterator
from pathlib import Path

import pytest

GERMAN_PLURALS = "nplurals=2; plural=(n != 1);"

HEADER = r'''# German translation for demo.
# Copyright (C) 2024 Demo Authors
#
#, fuzzy
msgid ""
msgstr ""
"Project-Id-Version: demo 1.0\n"
"Language: de\n"
"MIME-Version: 1.0\n"
"Content-Type: text/plain; charset=UTF-8\n"
"Content-Transfer-Encoding: 8bit\n"
"Plural-Forms: {plural_forms}\n"
'''

COMPLETE_BODY = r'''
#: app.py:10
msgid "cat"
msgid_plural "cats"
msgstr[0] "Katze"
msgstr[1] "Katzen"

#, python-format
msgid "Hello %s"
msgstr "Hallo %s"

msgctxt "menu"
msgid "Open"
msgstr "Öffnen"

#. Shown on the front page
msgid ""
"A long message that "
"spans two lines"
msgstr ""
"Eine lange Nachricht, die "
"über zwei Zeilen geht"
'''

SUBSET_BODY = r'''
#: app.py:10
msgid "cat"
msgid_plural "cats"
msgstr[0] ""
msgstr[1] ""

msgctxt "menu"
msgid "Open"
msgstr ""

msgid "Only here"
msgstr ""
'''

PoFactory = Callable[..., bytes]


def _make_po(body: str, plural_forms: str | None = GERMAN_PLURALS) -> bytes:
    header = HEADER.format(plural_forms=plural_forms)
    if plural_forms is None:
        header = header.replace('"Plural-Forms: None\\n"\n', "")
    return (header + textwrap.dedent(body)).encode("utf-8")


@pytest.fixture
def make_po() -> PoFactory:
    """Build PO bytes from an entry body and a Plural-Forms value."""
    return _make_po


@pytest.fixture
def complete_po() -> bytes:
    return _make_po(COMPLETE_BODY)


@pytest.fixture
def subset_po() -> bytes:
    return _make_po(SUBSET_BODY)


@pytest.fixture
def write_po(tmp_path: Path) -> Callable[[str, bytes], Path]:
    def _write(name: str, data: bytes) -> Path:
        path = tmp_path / name
        path.write_bytes(data)
        return path

    return _write


@pytest.fixture(autouse=True)
def reset_logging() -> Iterator[None]:
    yield
    app_logger = logging.getLogger("poreconcile")
    for handler in list(app_logger.handlers):
        app_logger.removeHandler(handler)
    app_logger.propagate = True
    app_logger.setLevel(logging.NOTSET)
