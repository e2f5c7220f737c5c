"""Reading and writing catalog files."""

from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path

from poreconcile.catalog.models import Catalog
from poreconcile.catalog.pofile import parse, serialize

logger = logging.getLogger("poreconcile.files")


def read_catalog(path: Path | str) -> Catalog:
    """Read and parse a catalog file.

    Args:
        path: Catalog path

    Returns:
        The parsed catalog

    Raises:
        FileNotFoundError: If the path does not exist
        ParseError: If the file is not a valid PO catalog
    """
    path = Path(path)
    if not path.is_file():
        raise FileNotFoundError(f"No such catalog: {path}")

    return parse(path.read_bytes(), filename=str(path))


def write_catalog(catalog: Catalog, path: Path | str) -> None:
    """Write a catalog, replacing the target in one step.

    The catalog is serialized before anything touches the disk and written
    to a temporary file next to the target, so a failure never leaves a
    partial catalog behind.
    """
    path = Path(path)
    data = serialize(catalog)
    mode = path.stat().st_mode & 0o777 if path.exists() else 0o644

    fd, tmp_name = tempfile.mkstemp(
        prefix=f".{path.name}.", suffix=".tmp", dir=path.parent
    )
    try:
        with os.fdopen(fd, "wb") as handle:
            handle.write(data)
        os.chmod(tmp_name, mode)
        os.replace(tmp_name, path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise

    logger.debug("Wrote %d bytes to %s", len(data), path)
