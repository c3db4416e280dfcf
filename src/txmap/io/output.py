"""
Output Writers: formatting result groups as tab-separated rows.

Every mapped range becomes one row tagged with the index of the input element
it belongs to. Sentinel ranges are written as-is (start and end of -1); empty
groups produce no rows. Grouped protein-to-genome results add a ``group``
column holding the resolved protein id.
"""

import csv
import sys
from collections.abc import Iterable, Sequence
from pathlib import Path

from ..models.core import GroupedTargets, MappedRange, ProteinGenomeResult, SingleTarget

FIELDNAMES = [
    "input_index",
    "group",
    "start",
    "end",
    "seq_name",
    "strand",
    "tx_id",
    "exon_id",
    "exon_rank",
    "protein_id",
    "cds_ok",
    "tx_start",
    "tx_end",
    "source_id",
    "source_seq_name",
    "source_start",
    "source_end",
    "source_strand",
]


def _cell(value) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "TRUE" if value else "FALSE"
    return str(value)


class ResultWriter:
    """Writes result groups to a TSV file, or stdout when no path is given."""

    def __init__(self, path: Path | None = None):
        self.path = path
        self.file = open(path, "w", newline="") if path else sys.stdout
        self.writer = csv.DictWriter(
            self.file, fieldnames=FIELDNAMES, delimiter="\t", extrasaction="ignore"
        )
        self.writer.writeheader()
        self.rows_written = 0

    def write_range(self, index: int, mapped: MappedRange, group: str | None = None) -> None:
        row = {k: _cell(v) for k, v in mapped.model_dump(mode="json").items()}
        row["input_index"] = str(index)
        row["group"] = _cell(group)
        self.writer.writerow(row)
        self.rows_written += 1

    def write_group(self, index: int, group: Sequence[MappedRange]) -> None:
        for mapped in group:
            self.write_range(index, mapped)

    def write_target(self, index: int, target: ProteinGenomeResult) -> None:
        if isinstance(target, GroupedTargets):
            for protein_id, ranges in target.groups.items():
                for mapped in ranges:
                    self.write_range(index, mapped, group=protein_id)
        else:
            for mapped in target.ranges:
                self.write_range(index, mapped, group=target.protein_id)

    def write_all(self, results: Iterable) -> None:
        for index, result in enumerate(results):
            if isinstance(result, (SingleTarget, GroupedTargets)):
                self.write_target(index, result)
            else:
                self.write_group(index, result)

    def close(self) -> None:
        if self.path:
            self.file.close()
        else:
            self.file.flush()

    def __enter__(self) -> "ResultWriter":
        return self

    def __exit__(self, *exc) -> None:
        self.close()
