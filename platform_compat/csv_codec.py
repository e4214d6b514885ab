"""CSV persistence for the compatibility database.

Format::

    DocId,Namespace,Type,Member,<platform1>,<platform2>,...
    M:System.Console.get_Title,System,Console,get_Title,X,,X

One row per entry, one column per platform, ``X`` marks presence.
"""

import csv
import logging
import os
import tempfile
from pathlib import Path
from typing import IO, List, Optional, Union

from .database import Database

logger = logging.getLogger(__name__)

FIXED_COLUMNS = ["DocId", "Namespace", "Type", "Member"]
PRESENT = "X"
ABSENT = ""


class CsvFormatError(ValueError):
    """Malformed compatibility CSV (short header/row, blank doc-id)."""

    def __init__(self, message: str, line: Optional[int] = None,
                 source: Optional[str] = None):
        self.line = line
        self.source = source
        location = ""
        if source:
            location = f"{source}:"
        if line is not None:
            location += f"{line}:"
        super().__init__(f"{location} {message}" if location else message)


def export_csv(database: Database, stream: IO[str]) -> None:
    """Write ``database`` as CSV to a text stream.

    Rows are sorted by (namespace, type, member, doc-id) so that repeated
    exports of the same data are byte-identical.
    """
    platforms = database.platforms
    writer = csv.writer(stream, lineterminator="\n")
    writer.writerow(FIXED_COLUMNS + list(platforms))

    for entry in database.sorted_entries():
        row = [entry.doc_id, entry.namespace_name, entry.type_name, entry.member_name]
        present = entry.platforms
        row.extend(PRESENT if p in present else ABSENT for p in platforms)
        writer.writerow(row)


def import_csv(stream: IO[str], database: Optional[Database] = None,
               source: Optional[str] = None) -> Database:
    """Read CSV rows from a text stream into ``database``.

    Every non-blank platform cell becomes one ``Database.add`` call, so the
    target's exclusions apply. Rows without any platform mark are accepted
    and contribute nothing.

    Args:
        stream: Text stream positioned at the header row
        database: Target database; a new empty one is created if omitted
        source: Name used in error messages (usually the file path)

    Returns:
        The populated database

    Raises:
        CsvFormatError: On a missing or short header, a row shorter than
            the header, or a blank doc-id on a row with platform marks
        ValueError: If a field holds a line break
    """
    if database is None:
        database = Database()

    reader = csv.reader(stream)
    header = _read_header(reader, source)
    platforms = header[len(FIXED_COLUMNS):]
    rows = 0

    for row in reader:
        if not row or all(not cell.strip() for cell in row):
            continue
        if len(row) < len(header):
            raise CsvFormatError(
                f"row has {len(row)} columns, header has {len(header)}",
                line=reader.line_num, source=source,
            )

        doc_id, namespace_name, type_name, member_name = row[:len(FIXED_COLUMNS)]
        marked = [
            platform
            for platform, cell in zip(platforms, row[len(FIXED_COLUMNS):])
            if cell.strip()
        ]
        if marked and not doc_id.strip():
            raise CsvFormatError("blank DocId", line=reader.line_num, source=source)

        for platform in marked:
            database.add(doc_id, namespace_name, type_name, member_name, platform)
        rows += 1

    logger.debug("Imported %d rows (%d platforms) from %s",
                 rows, len(platforms), source or "stream")
    return database


def _read_header(reader, source: Optional[str]) -> List[str]:
    for row in reader:
        if row:
            if len(row) < len(FIXED_COLUMNS):
                raise CsvFormatError(
                    f"header needs at least {len(FIXED_COLUMNS)} columns "
                    f"({','.join(FIXED_COLUMNS)}), got {len(row)}",
                    line=reader.line_num, source=source,
                )
            return row
    raise CsvFormatError("missing header row", source=source)


def write_csv(database: Database, path: Union[str, Path]) -> Path:
    """Export ``database`` to ``path``.

    The file is written next to the target and moved into place, so a failed
    export never leaves a partial file behind.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
    try:
        with os.fdopen(fd, "w", encoding="utf-8", newline="") as f:
            export_csv(database, f)
        os.replace(tmp_name, path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise

    logger.debug("Wrote %d entries to %s", len(database), path)
    return path


def read_csv(path: Union[str, Path], database: Optional[Database] = None) -> Database:
    """Import the CSV file at ``path`` (UTF-8, optional BOM)."""
    path = Path(path)
    with path.open("r", encoding="utf-8-sig", newline="") as f:
        return import_csv(f, database, source=str(path))
