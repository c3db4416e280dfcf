"""Pytest configuration and fixtures."""

import sys
from pathlib import Path

import pytest

# Add src directory to path so tests use local code, not installed package
project_root = Path(__file__).parent.parent
src_dir = project_root / "src"
if str(src_dir) not in sys.path:
    sys.path.insert(0, str(src_dir))

from txmap.store import ExonRecord, InMemoryAnnotationStore, TranscriptRecord  # noqa: E402


def _exons(prefix: str, *extents: tuple[int, int]) -> list[ExonRecord]:
    return [
        ExonRecord(exon_id=f"{prefix}{chr(ord('a') + i)}", start=start, end=end)
        for i, (start, end) in enumerate(extents)
    ]


@pytest.fixture
def transcripts() -> list[TranscriptRecord]:
    """
    Small gene models used throughout the tests.

    chr1:
      ENST01 (+)  exons [100,150] tx 1-51, [300,350] tx 52-102; CDS 10-90, ENSP01 (26 aa)
      ENST03 (+)  exon [120,200]; non-coding
      ENST06 (+)  exon [130,249]; CDS 11-100, ENSP06 (29 aa)
      ENST02 (-)  exons [500,540] tx 1-41, [400,459] tx 42-101; CDS 5-97, ENSP02 (30 aa)
    chr2:
      ENST04 (+)  exon [1000,1099]; CDS 1-100, ENSP04 (33 aa), incomplete CDS
    chr3:
      ENST05 (+)  exon [10,99]; CDS 1-90, ENSP05 (29 aa)
    """
    return [
        TranscriptRecord(
            tx_id="ENST01", gene_id="ENSG01", seq_name="chr1", strand="+",
            exons=_exons("E1", (100, 150), (300, 350)),
            cds_start=10, cds_end=90, protein_id="ENSP01", protein_length=26,
        ),
        TranscriptRecord(
            tx_id="ENST03", gene_id="ENSG03", seq_name="chr1", strand="+",
            exons=_exons("E3", (120, 200)),
        ),
        TranscriptRecord(
            tx_id="ENST06", gene_id="ENSG06", seq_name="chr1", strand="+",
            exons=_exons("E6", (130, 249)),
            cds_start=11, cds_end=100, protein_id="ENSP06", protein_length=29,
        ),
        TranscriptRecord(
            tx_id="ENST02", gene_id="ENSG02", seq_name="chr1", strand="-",
            exons=_exons("E2", (500, 540), (400, 459)),
            cds_start=5, cds_end=97, protein_id="ENSP02", protein_length=30,
        ),
        TranscriptRecord(
            tx_id="ENST04", gene_id="ENSG04", seq_name="chr2", strand="+",
            exons=_exons("E4", (1000, 1099)),
            cds_start=1, cds_end=100, protein_id="ENSP04", protein_length=33,
        ),
        TranscriptRecord(
            tx_id="ENST05", gene_id="ENSG05", seq_name="chr3", strand="+",
            exons=_exons("E5", (10, 99)),
            cds_start=1, cds_end=90, protein_id="ENSP05", protein_length=29,
        ),
    ]


@pytest.fixture
def uniprot() -> dict[str, list[str]]:
    return {
        "P12345": ["ENSP01", "ENSP02", "ENSP04", "ENSP05"],
        "Q11111": ["ENSP02"],
        "P00000": ["ENSP_GONE"],
    }


@pytest.fixture
def store(transcripts, uniprot) -> InMemoryAnnotationStore:
    return InMemoryAnnotationStore(transcripts, uniprot)


@pytest.fixture
def single_transcript_store() -> InMemoryAnnotationStore:
    """Only transcript T: exon1 genome [100,150] (tx 1-51), exon2 genome [300,350] (tx 52-102)."""
    return InMemoryAnnotationStore(
        [
            TranscriptRecord(
                tx_id="T", seq_name="chr1", strand="+",
                exons=_exons("T", (100, 150), (300, 350)),
            )
        ]
    )


@pytest.fixture
def snapshot_file(tmp_path: Path, store: InMemoryAnnotationStore) -> Path:
    path = tmp_path / "annotation.json"
    store.to_json(path)
    return path
