"""CSV report writer for commit activity around toxic comments."""

from __future__ import annotations

import csv
import typing as typ

if typ.TYPE_CHECKING:
    import collections.abc as cabc
    from pathlib import Path

    from .window import ExportRow

REPORT_HEADER = ("id_comment", "id_issue", "commits_before", "commits_after")


def write_report(path: Path, rows: cabc.Iterable[ExportRow]) -> int:
    """Write the header and one line per row; return the number of rows."""
    path.parent.mkdir(parents=True, exist_ok=True)
    written = 0
    with path.open("w", encoding="utf-8", newline="") as handle:
        writer = csv.writer(handle)
        writer.writerow(REPORT_HEADER)
        for row in rows:
            writer.writerow(row.as_csv_row())
            written += 1
    return written
