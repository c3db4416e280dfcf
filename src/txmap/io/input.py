"""
Input Adapters: reading mapping batches from tab-separated files.

Two layouts are supported, both with a header row; lines starting with '#'
before the header are skipped.

- Genomic batches: ``seq_name  start  end  [strand]``
- Identifier batches: ``id  start  end``
"""

import csv
from collections.abc import Iterator
from pathlib import Path
from typing import TextIO

from pydantic import ValidationError

from ..errors import StructuralInputError
from ..models.core import GenomicRange, Interval


def _skip_comments(handle: TextIO) -> None:
    while True:
        pos = handle.tell()
        line = handle.readline()
        if not line.startswith("#"):
            handle.seek(pos)
            break


class RangeReader:
    """Abstract base class for batch readers."""

    required_columns: tuple[str, ...] = ()

    def __init__(self, path: Path):
        self.path = Path(path)

    def _rows(self) -> Iterator[tuple[int, dict[str, str]]]:
        if not self.path.exists():
            raise StructuralInputError(f"Input file not found: {self.path}")
        with open(self.path, newline="") as f:
            _skip_comments(f)
            reader = csv.DictReader(f, delimiter="\t")
            missing = [c for c in self.required_columns if c not in (reader.fieldnames or [])]
            if missing:
                raise StructuralInputError(
                    f"{self.path}: missing column(s) {', '.join(missing)}; "
                    f"expected {', '.join(self.required_columns)}"
                )
            for line_no, row in enumerate(reader, start=2):
                yield line_no, row

    def _parse(self, line_no: int, build):
        try:
            return build()
        except (ValidationError, ValueError, TypeError) as e:
            raise StructuralInputError(f"{self.path}, line {line_no}: {e}") from e


class GenomicRangeReader(RangeReader):
    """Reads GenomicRange batches."""

    required_columns = ("seq_name", "start", "end")

    def __iter__(self) -> Iterator[GenomicRange]:
        for line_no, row in self._rows():
            yield self._parse(
                line_no,
                lambda: GenomicRange(
                    seq_name=row["seq_name"],
                    start=int(row["start"]),
                    end=int(row["end"]),
                    strand=(row.get("strand") or "*").strip(),
                ),
            )


class IdRangeReader(RangeReader):
    """Reads (identifier, Interval) batches."""

    required_columns = ("id", "start", "end")

    def __iter__(self) -> Iterator[tuple[str, Interval]]:
        for line_no, row in self._rows():
            yield self._parse(
                line_no,
                lambda: (row["id"].strip(), Interval(start=int(row["start"]), end=int(row["end"]))),
            )

    def read(self) -> tuple[list[str], list[Interval]]:
        """Identifiers and ranges as two aligned lists."""
        ids: list[str] = []
        ranges: list[Interval] = []
        for identifier, interval in self:
            ids.append(identifier)
            ranges.append(interval)
        return ids, ranges
