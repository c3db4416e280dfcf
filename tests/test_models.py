"""Tests for the core data models."""

import pytest
from pydantic import TypeAdapter, ValidationError

from txmap.models.core import (
    GenomicMappedRange,
    GenomicRange,
    GroupedTargets,
    Interval,
    MappedRange,
    ProteinGenomeResult,
    SingleTarget,
    Strand,
    TranscriptInfo,
)


def test_strand_compatibility():
    assert Strand.PLUS.compatible(Strand.PLUS)
    assert not Strand.PLUS.compatible(Strand.MINUS)
    assert Strand.UNKNOWN.compatible(Strand.MINUS)
    assert Strand.MINUS.compatible(Strand.UNKNOWN)


def test_interval_validation():
    assert Interval(start=3, end=5).width == 3
    with pytest.raises(ValidationError):
        Interval(start=5, end=3)
    # Bounds are checked per element by the mapper
    assert Interval(start=0, end=3).width == 4


def test_genomic_range_defaults_to_unknown_strand():
    region = GenomicRange(seq_name="chr1", start=1, end=10)
    assert region.strand is Strand.UNKNOWN
    assert GenomicRange(seq_name="chr1", start=1, end=10, strand="-").strand is Strand.MINUS


def test_sentinel():
    sentinel = MappedRange.unmapped(tx_id="ENST01")
    assert (sentinel.start, sentinel.end) == (-1, -1)
    assert not sentinel.is_mapped
    assert sentinel.tx_id == "ENST01"
    assert MappedRange(start=1, end=3).is_mapped


@pytest.mark.parametrize(
    "protein_length,expected",
    [(26, True), (27, False), (25, False), (None, False)],
)
def test_cds_ok(protein_length, expected):
    tx = TranscriptInfo(
        tx_id="TX", seq_name="chr1", strand="+", length=102,
        cds_start=10, cds_end=90, protein_length=protein_length,
    )
    assert tx.cds_length == 81
    assert tx.cds_ok is expected


def test_non_coding_transcript_info():
    tx = TranscriptInfo(tx_id="TX", seq_name="chr1", strand="+", length=102)
    assert not tx.is_coding
    assert tx.cds_length is None
    assert tx.cds_ok is False


def test_targets_flatten():
    r1 = GenomicMappedRange(start=1, end=3, seq_name="chr1", strand="+")
    r2 = GenomicMappedRange(start=7, end=9, seq_name="chr1", strand="-")
    assert SingleTarget(protein_id="P1", ranges=[r1]).flatten() == [r1]
    assert GroupedTargets(groups={"P1": [r1], "P2": [r2]}).flatten() == [r1, r2]
    assert SingleTarget().kind == "single"
    assert GroupedTargets().kind == "grouped"


def test_protein_genome_result_discriminates_on_kind():
    adapter = TypeAdapter(list[ProteinGenomeResult])
    results = adapter.validate_python(
        [
            {"kind": "single", "protein_id": "P1"},
            {"kind": "grouped", "groups": {"P1": [], "P2": []}},
        ]
    )
    assert isinstance(results[0], SingleTarget)
    assert isinstance(results[1], GroupedTargets)
    assert list(results[1].groups) == ["P1", "P2"]
    with pytest.raises(ValidationError):
        adapter.validate_python([{"kind": "flat"}])
