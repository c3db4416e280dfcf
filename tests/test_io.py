"""Tests for TSV batch readers and the result writer."""

import csv
from pathlib import Path

import pytest

from txmap.errors import StructuralInputError
from txmap.io.input import GenomicRangeReader, IdRangeReader
from txmap.io.output import ResultWriter
from txmap.mapper import Mapper
from txmap.models.core import Interval, Strand


def _write(path: Path, text: str) -> Path:
    path.write_text(text)
    return path


def _rows(path: Path) -> list[dict]:
    with open(path, newline="") as f:
        return list(csv.DictReader(f, delimiter="\t"))


def test_genomic_reader(tmp_path: Path):
    path = _write(
        tmp_path / "genomic.tsv",
        "# batch of genomic ranges\nseq_name\tstart\tend\tstrand\nchr1\t140\t145\t+\nchr2\t1000\t1002\t\n",
    )
    ranges = list(GenomicRangeReader(path))
    assert [(r.seq_name, r.start, r.end, r.strand) for r in ranges] == [
        ("chr1", 140, 145, Strand.PLUS),
        ("chr2", 1000, 1002, Strand.UNKNOWN),
    ]


def test_genomic_reader_without_strand_column(tmp_path: Path):
    path = _write(tmp_path / "genomic.tsv", "seq_name\tstart\tend\nchr1\t1\t2\n")
    (region,) = GenomicRangeReader(path)
    assert region.strand is Strand.UNKNOWN


def test_id_reader(tmp_path: Path):
    path = _write(tmp_path / "ids.tsv", "id\tstart\tend\nENST01\t48\t55\nENSP01\t1\t1\n")
    ids, ranges = IdRangeReader(path).read()
    assert ids == ["ENST01", "ENSP01"]
    assert ranges == [Interval(start=48, end=55), Interval(start=1, end=1)]


@pytest.mark.parametrize(
    "content",
    [
        "id\tbegin\tend\nENST01\t1\t2\n",
        "id\tstart\tend\nENST01\tone\t2\n",
        "id\tstart\tend\nENST01\t5\t2\n",
    ],
)
def test_id_reader_rejects_malformed_input(tmp_path: Path, content: str):
    path = _write(tmp_path / "ids.tsv", content)
    with pytest.raises(StructuralInputError):
        IdRangeReader(path).read()


def test_reader_missing_file(tmp_path: Path):
    with pytest.raises(StructuralInputError):
        list(GenomicRangeReader(tmp_path / "missing.tsv"))


def test_writer_rows(tmp_path: Path, store):
    mapper = Mapper(store)
    results = mapper.transcript_to_genome(["ENST01", "ENSTXX"], [(48, 55), (1, 2)])
    out = tmp_path / "out.tsv"
    with ResultWriter(out) as writer:
        writer.write_all(results)
    assert writer.rows_written == 2

    rows = _rows(out)
    assert [(r["input_index"], r["start"], r["end"], r["exon_id"]) for r in rows] == [
        ("0", "147", "150", "E1a"),
        ("0", "300", "303", "E1b"),
    ]
    assert rows[0]["strand"] == "+"
    assert rows[0]["seq_name"] == "chr1"


def test_writer_sentinels_and_flags(tmp_path: Path, store):
    results = Mapper(store).transcript_to_protein(["ENST04", "ENSTXX"], [(1, 3), (1, 3)])
    out = tmp_path / "out.tsv"
    with ResultWriter(out) as writer:
        writer.write_all(results)
    rows = _rows(out)
    assert [(r["start"], r["end"], r["cds_ok"]) for r in rows] == [("1", "1", "FALSE"), ("-1", "-1", "")]


def test_writer_grouped_targets(tmp_path: Path, store):
    results = Mapper(store).protein_to_genome(["P12345", "Q11111"], [(1, 1), (1, 1)], id_type="uniprot_id")
    out = tmp_path / "out.tsv"
    with ResultWriter(out) as writer:
        writer.write_all(results)
    rows = _rows(out)
    assert [(r["input_index"], r["group"]) for r in rows] == [
        ("0", "ENSP01"),
        ("0", "ENSP02"),
        ("0", "ENSP04"),
        ("0", "ENSP05"),
        ("1", "ENSP02"),
    ]
    assert rows[1]["strand"] == "-"
