"""CLI tool for poreconcile."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

from poreconcile.catalog import ParseError
from poreconcile.duplicates import detect, repair
from poreconcile.files import read_catalog, write_catalog
from poreconcile.logging_config import configure_logging
from poreconcile.merge import IncompatibleCatalogsError, merge
from poreconcile.plurals import FormatError

logger = logging.getLogger("poreconcile.cli")

YES_ANSWERS = frozenset({"y", "yes"})
NO_ANSWERS = frozenset({"n", "no"})


def confirm_overwrite(path: Path) -> bool:
    """Ask whether an existing file may be replaced, until the answer is clear."""
    while True:
        try:
            answer = input(f"{path} already exists. Overwrite? [y/n] ")
        except EOFError:
            return False
        answer = answer.strip().lower()
        if answer in YES_ANSWERS:
            return True
        if answer in NO_ANSWERS:
            return False
        print("Please answer 'y' or 'n'.", file=sys.stderr)


def merge_catalogs(
    complete_path: Path, subset_path: Path, output_path: Path, *, assume_yes: bool
) -> int:
    """Merge translations from one catalog into another and write the result."""
    complete = read_catalog(complete_path)
    subset = read_catalog(subset_path)
    result = merge(complete, subset)

    if output_path.exists() and not assume_yes and not confirm_overwrite(output_path):
        logger.warning("Not overwriting %s", output_path)
        return 1

    write_catalog(result.catalog, output_path)
    logger.info(
        "Wrote %s: %d translated, %d not translated",
        output_path,
        result.translated_count,
        result.not_translated_count,
    )
    return 0


def check_catalog(target_path: Path, fix_path: Path | None, *, strict: bool) -> int:
    """Report duplicate plural translations, or repair them from a reference."""
    catalog = read_catalog(target_path)

    if fix_path is None:
        defects = detect(catalog)
        for defect in defects:
            print(json.dumps(defect.to_dict(), ensure_ascii=False))
        logger.info("%s: %d duplicate plural entries", target_path, len(defects))
        return 1 if strict and defects else 0

    reference = read_catalog(fix_path)
    result = repair(catalog, reference)
    write_catalog(result.catalog, target_path)
    print(
        f"Resolved {result.resolved_count} of {len(result.defects)} "
        "duplicate plural entries"
    )
    unresolved = len(result.defects) - result.resolved_count
    return 1 if strict and unresolved else 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="poreconcile", description="Reconcile gettext PO catalogs."
    )
    parser.add_argument("--debug", action="store_true", help="Verbose logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    # merge
    merge_parser = subparsers.add_parser(
        "merge", help="Copy translations from a complete catalog into a subset"
    )
    merge_parser.add_argument("complete", type=Path, help="Fully translated catalog")
    merge_parser.add_argument("subset", type=Path, help="Catalog to fill in")
    merge_parser.add_argument("output", type=Path, help="Where to write the result")
    merge_parser.add_argument(
        "-y",
        "--yes",
        action="store_true",
        help="Overwrite the output without asking",
    )

    # check
    check_parser = subparsers.add_parser(
        "check", help="Find plural entries with repeated translations"
    )
    check_parser.add_argument("target", type=Path, help="Catalog to check")
    check_parser.add_argument(
        "--fix",
        type=Path,
        metavar="REFERENCE",
        help="Repair the target in place from this catalog",
    )
    check_parser.add_argument(
        "--strict",
        action="store_true",
        help="Exit non-zero when unresolved defects remain",
    )

    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(debug=args.debug)

    try:
        if args.command == "merge":
            return merge_catalogs(
                args.complete, args.subset, args.output, assume_yes=args.yes
            )
        return check_catalog(args.target, args.fix, strict=args.strict)
    except (
        FileNotFoundError,
        ParseError,
        FormatError,
        IncompatibleCatalogsError,
    ) as exc:
        logger.error("%s", exc)
        return 1


if __name__ == "__main__":
    sys.exit(main())
