"""Tests for merging translations between catalogs."""

import copy
import io
import logging

import pytest
from babel.messages.pofile import read_po

from poreconcile.catalog.pofile import parse, serialize
from poreconcile.merge import IncompatibleCatalogsError, check_compatible, merge
from poreconcile.plurals import FormatError


def test_merge_fills_matching_entries(complete_po: bytes, subset_po: bytes) -> None:
    """Test the complete → subset merge of plural and context entries."""
    complete = parse(complete_po)
    subset = parse(subset_po)

    result = merge(complete, subset)

    assert result.catalog is subset
    assert subset.get("", "cat").msgstr == ["Katze", "Katzen"]
    assert subset.get("menu", "Open").msgstr == ["Öffnen"]
    # header + cat + Open
    assert result.translated_count == 3
    assert result.not_translated_count == 1
    assert result.not_translated == [("", "Only here")]
    assert subset.get("", "Only here").msgstr == [""]


def test_merge_keeps_entry_set_and_order(complete_po: bytes, subset_po: bytes) -> None:
    subset = parse(subset_po)
    keys_before = [entry.key for entry in subset]
    count_before = len(subset.entries)

    merge(parse(complete_po), subset)

    assert [entry.key for entry in subset] == keys_before
    assert len(subset.entries) == count_before


def test_merge_with_itself_changes_nothing(complete_po: bytes) -> None:
    catalog = parse(complete_po)
    original = copy.deepcopy(catalog)

    result = merge(parse(complete_po), catalog)

    assert result.catalog == original
    assert result.not_translated_count == 0
    assert result.translated_count == len(original)
    assert serialize(result.catalog) == complete_po


def test_merge_end_to_end_plural_entry(make_po) -> None:
    complete = parse(make_po('''
        msgid "cat"
        msgid_plural "cats"
        msgstr[0] "Katze"
        msgstr[1] "Katzen"
        '''))
    subset = parse(make_po('''
        msgid "cat"
        msgid_plural "cats"
        msgstr[0] ""
        msgstr[1] ""
        '''))

    result = merge(complete, subset)

    assert result.not_translated_count == 0
    assert result.translated_count == 2
    written = read_po(io.StringIO(serialize(result.catalog).decode("utf-8")))
    assert written.get("cat").string == ("Katze", "Katzen")


def test_merge_accepts_equivalent_plural_spelling(make_po) -> None:
    complete = parse(make_po('msgid "a"\nmsgstr "b"\n', "nplurals=2;plural=n!=1"))
    subset = parse(make_po('msgid "a"\nmsgstr ""\n', "nplurals=2; plural=(n != 1);"))

    result = merge(complete, subset)

    assert subset.get("", "a").msgstr == ["b"]
    assert result.not_translated_count == 0


def test_merge_rejects_different_plural_forms(make_po) -> None:
    """Test that nothing is merged when plural rules differ."""
    complete = parse(make_po('msgid "a"\nmsgstr "b"\n'))
    subset = parse(
        make_po('msgid "a"\nmsgstr ""\n', "nplurals=3; plural=(n==0?0:n==1?1:2);")
    )

    with pytest.raises(IncompatibleCatalogsError) as excinfo:
        merge(complete, subset)

    assert subset.get("", "a").msgstr == [""]
    assert excinfo.value.complete.plural_count == 2
    assert excinfo.value.subset.plural_count == 3


def test_merge_requires_plural_forms_header(make_po) -> None:
    complete = parse(make_po('msgid "a"\nmsgstr "b"\n', None))
    subset = parse(make_po('msgid "a"\nmsgstr ""\n'))

    with pytest.raises(FormatError):
        merge(complete, subset)


def test_merge_skips_arity_mismatch(make_po) -> None:
    """Test that entries with a different number of msgstr slots are left alone."""
    complete = parse(make_po('''
        msgid "cat"
        msgid_plural "cats"
        msgstr[0] "Katze"
        msgstr[1] "Katzen"
        msgstr[2] "Katzen!"
        '''))
    subset = parse(make_po('''
        msgid "cat"
        msgid_plural "cats"
        msgstr[0] ""
        msgstr[1] ""
        '''))

    result = merge(complete, subset)

    assert subset.get("", "cat").msgstr == ["", ""]
    assert result.not_translated == [("", "cat")]
    assert result.not_translated_count == 1


def test_merge_skips_values_the_subset_charset_cannot_hold(make_po) -> None:
    """Test that a latin-1 subset keeps entries it could not write."""
    complete = parse(make_po('''
        msgid "cat"
        msgstr "猫"

        msgid "Open"
        msgstr "Öffnen"
        '''))
    subset = parse(
        make_po('''
        msgid "cat"
        msgstr ""

        msgid "Open"
        msgstr ""
        ''').replace(b"charset=UTF-8", b"charset=ISO-8859-1")
    )

    result = merge(complete, subset)

    assert subset.get("", "cat").msgstr == [""]
    assert subset.get("", "Open").msgstr == ["Öffnen"]
    assert result.not_translated == [("", "cat")]
    assert "Öffnen".encode("latin-1") in serialize(subset)


def test_merge_logs_plural_forms_at_debug(
    complete_po: bytes, subset_po: bytes, caplog: pytest.LogCaptureFixture
) -> None:
    with caplog.at_level(logging.DEBUG, logger="poreconcile.merge"):
        merge(parse(complete_po), parse(subset_po))

    assert "n=0..5 select forms [1, 0, 1, 1, 1, 1]" in caplog.text


def test_merge_matches_context(make_po) -> None:
    complete = parse(make_po('''
        msgctxt "menu"
        msgid "Open"
        msgstr "Öffnen"
        '''))
    subset = parse(make_po('''
        msgctxt "door"
        msgid "Open"
        msgstr ""

        msgid "Open"
        msgstr ""
        '''))

    result = merge(complete, subset)

    assert subset.get("door", "Open").msgstr == [""]
    assert subset.get("", "Open").msgstr == [""]
    assert result.not_translated_count == 2


def test_check_compatible_returns_spec(complete_po: bytes, subset_po: bytes) -> None:
    spec = check_compatible(parse(complete_po), parse(subset_po))

    assert spec.plural_count == 2
