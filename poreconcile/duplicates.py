"""Find and repair plural entries that repeat one translation across slots.

A plural entry is defective when two different msgstr indices hold the
same non-empty value, e.g. ``["Katzen", "Katzen"]``. Empty slots are
untranslated, not duplicates.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, NamedTuple

from poreconcile.catalog.models import Catalog, PluralEntry
from poreconcile.catalog.pofile import locate_line

logger = logging.getLogger("poreconcile.duplicates")

DUPLICATE = "duplicate"


@dataclass
class Defect:
    """A defective entry found in a catalog."""

    file: str | None
    line: int | None
    msgid: str
    msgid_plural: str
    context: str = ""
    kind: str = DUPLICATE
    resolved: bool = False

    def to_dict(self) -> dict[str, Any]:
        """Report row for the check command."""
        report: dict[str, Any] = {
            "file": self.file,
            "line": self.line,
            "failed": self.kind,
            "msgid": [self.msgid, self.msgid_plural],
        }
        if self.context:
            report["context"] = self.context
        return report


class RepairResult(NamedTuple):
    """Repair outcome."""

    catalog: Catalog
    defects: list[Defect]

    @property
    def resolved_count(self) -> int:
        return sum(1 for defect in self.defects if defect.resolved)


def find_duplicate_indices(entry: PluralEntry) -> list[tuple[int, int]]:
    """Return every index pair holding the same non-empty value."""
    pairs: list[tuple[int, int]] = []
    values = entry.msgstr
    for i in range(len(values)):
        if not values[i]:
            continue
        for j in range(i + 1, len(values)):
            if values[i] == values[j]:
                pairs.append((i, j))
    return pairs


def detect(catalog: Catalog, *, source: str | None = None) -> list[Defect]:
    """List defective plural entries of a catalog.

    Args:
        catalog: Catalog to scan
        source: Raw catalog text, used to guess a line for entries that
            carry none

    Returns:
        One unresolved Defect per defective entry, in catalog order
    """
    defects: list[Defect] = []
    for entry in catalog:
        if entry.is_header or not isinstance(entry, PluralEntry):
            continue
        pairs = find_duplicate_indices(entry)
        if not pairs:
            continue

        line = entry.lineno
        if line is None and source is not None:
            line = locate_line(source, entry.msgid)
        logger.debug("Duplicate plural values at %s in %r", pairs, entry.msgid)
        defects.append(
            Defect(
                file=catalog.filename,
                line=line,
                msgid=entry.msgid,
                msgid_plural=entry.msgid_plural,
                context=entry.context,
            )
        )
    return defects


def repair(catalog: Catalog, reference: Catalog) -> RepairResult:
    """Overwrite defective entries with values from a reference catalog.

    Each slot takes the reference value at the same index when that value
    is non-empty, so a repair never blanks a translated slot. A defect is
    resolved when at least one slot changed. The catalog is updated in
    place and always returned.

    Args:
        catalog: Catalog to repair
        reference: Catalog with known good translations

    Returns:
        RepairResult with the catalog and every defect found
    """
    defects = detect(catalog)
    for defect in defects:
        entry = catalog.get(defect.context, defect.msgid)
        known_good = reference.get(defect.context, defect.msgid)
        if entry is None or known_good is None:
            logger.info("No reference entry for %r", defect.msgid)
            continue

        changed = False
        for index in range(min(len(entry.msgstr), len(known_good.msgstr))):
            value = known_good.msgstr[index]
            if value and entry.msgstr[index] != value:
                entry.msgstr[index] = value
                changed = True

        defect.resolved = changed
        if not changed:
            logger.info("Reference entry for %r did not change anything", defect.msgid)

    return RepairResult(catalog=catalog, defects=defects)
