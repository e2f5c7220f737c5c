"""Copy translations from a complete catalog into a subset catalog."""

from __future__ import annotations

import logging
from typing import NamedTuple

from poreconcile.catalog.models import Catalog
from poreconcile.plurals.forms import PluralFormSpec, parse_plural_form

logger = logging.getLogger("poreconcile.merge")


class IncompatibleCatalogsError(Exception):
    """Exception raised when two catalogs use different plural rules."""

    def __init__(
        self,
        message: str,
        complete: PluralFormSpec | None = None,
        subset: PluralFormSpec | None = None,
    ) -> None:
        """Initialize the error.

        Args:
            message: Error message
            complete: Plural rule of the complete catalog
            subset: Plural rule of the subset catalog
        """
        super().__init__(message)
        self.complete = complete
        self.subset = subset


class MergeResult(NamedTuple):
    """Merge outcome."""

    catalog: Catalog
    translated_count: int
    not_translated_count: int
    not_translated: list[tuple[str, str]]


def check_compatible(complete: Catalog, subset: Catalog) -> PluralFormSpec:
    """Ensure both catalogs declare the same plural rule and return it.

    Raises:
        FormatError: If either Plural-Forms header is missing or malformed
        IncompatibleCatalogsError: If the rules differ
    """
    complete_spec = parse_plural_form(complete.plural_forms)
    subset_spec = parse_plural_form(subset.plural_forms)
    if complete_spec != subset_spec:
        raise IncompatibleCatalogsError(
            f"Plural forms differ: {complete.filename or 'complete catalog'} has "
            f"'{complete.plural_forms}', {subset.filename or 'subset catalog'} has "
            f"'{subset.plural_forms}'",
            complete=complete_spec,
            subset=subset_spec,
        )
    return subset_spec


def _encodable(values: list[str], encoding: str) -> bool:
    try:
        "".join(values).encode(encoding)
    except UnicodeEncodeError:
        return False
    return True


def merge(complete: Catalog, subset: Catalog) -> MergeResult:
    """Fill the subset catalog with translations from the complete one.

    An entry takes the complete catalog's msgstr values only when the same
    (context, msgid) exists there with the same number of msgstr slots and
    the subset catalog's charset can hold the values.
    The header entry is counted as translated but never touched. The subset
    catalog is updated in place and returned; no entry is added or removed.

    Args:
        complete: Catalog providing translations
        subset: Catalog receiving translations

    Returns:
        MergeResult with the subset catalog and the counts

    Raises:
        FormatError: If a Plural-Forms header cannot be parsed
        IncompatibleCatalogsError: If the plural rules differ
    """
    spec = check_compatible(complete, subset)
    if logger.isEnabledFor(logging.DEBUG):
        try:
            forms = [spec.plural_index(n) for n in range(6)]
        except ZeroDivisionError:
            forms = []
        logger.debug("Both catalogs use %s; n=0..5 select forms %s", spec, forms)

    translated = 0
    not_translated: list[tuple[str, str]] = []

    for entry in subset:
        if entry.is_header:
            translated += 1
            continue

        source = complete.get(entry.context, entry.msgid)
        if source is None:
            logger.debug(
                "No translation for %r (context %r)", entry.msgid, entry.context
            )
            not_translated.append(entry.key)
            continue
        if len(source.msgstr) != len(entry.msgstr):
            logger.warning(
                "Skipping %r (context %r): %d msgstr slots in complete catalog, "
                "%d in subset",
                entry.msgid,
                entry.context,
                len(source.msgstr),
                len(entry.msgstr),
            )
            not_translated.append(entry.key)
            continue
        if not _encodable(source.msgstr, subset.encoding):
            logger.warning(
                "Skipping %r (context %r): translation cannot be written as %s",
                entry.msgid,
                entry.context,
                subset.encoding,
            )
            not_translated.append(entry.key)
            continue

        entry.msgstr = list(source.msgstr)
        translated += 1

    return MergeResult(
        catalog=subset,
        translated_count=translated,
        not_translated_count=len(not_translated),
        not_translated=not_translated,
    )
