"""
Annotation stores: the read-only source of exon structures and identifiers.

The mapper only depends on the ``AnnotationStore`` protocol. Any backend that
implements it (a database, a REST client, ...) can be plugged in, provided its
methods are safe to call concurrently when the mapper runs with several jobs.

``InMemoryAnnotationStore`` is a complete implementation holding transcripts in
memory, loadable from and savable to a JSON snapshot.
"""

import logging
from bisect import bisect_right
from collections.abc import Iterable, Mapping, Sequence
from pathlib import Path
from typing import Protocol, runtime_checkable

from pydantic import BaseModel, Field, ValidationError, model_validator

from .errors import AnnotationSnapshotError
from .models.core import Exon, GenomicRange, IdType, Strand, TranscriptInfo

logger = logging.getLogger(__name__)


@runtime_checkable
class AnnotationStore(Protocol):
    """Interface the mapper consumes."""

    def exons_of(self, tx_id: str) -> list[Exon]:
        """Exons of a transcript in rank order; empty if the id is unknown."""
        ...

    def transcript_info(self, tx_id: str) -> TranscriptInfo | None:
        """Summary of a transcript, or None if the id is unknown."""
        ...

    def transcripts_overlapping(self, region: GenomicRange) -> list[str]:
        """Ids of transcripts whose exons overlap the region (any strand)."""
        ...

    def resolve_identifier(self, identifier: str, scheme: IdType) -> list[str]:
        """Internal protein ids an identifier of the given scheme stands for."""
        ...

    def encoding_transcript(self, protein_id: str) -> str | None:
        """Id of the transcript encoding a protein, or None if unknown."""
        ...


class ExonRecord(BaseModel):
    exon_id: str
    start: int = Field(ge=1)
    end: int = Field(ge=1)

    @model_validator(mode="after")
    def validate_extent(self) -> "ExonRecord":
        if self.end < self.start:
            raise ValueError(f"Exon {self.exon_id}: end ({self.end}) must be >= start ({self.start})")
        return self


class TranscriptRecord(BaseModel):
    """
    A transcript as stored. Exons are listed in transcript order (5' to 3'),
    so on the minus strand their genomic positions decrease.
    """
    tx_id: str
    gene_id: str | None = None
    seq_name: str
    strand: Strand
    exons: list[ExonRecord] = Field(min_length=1)
    cds_start: int | None = Field(default=None, ge=1, description="Transcript-relative CDS start")
    cds_end: int | None = Field(default=None, ge=1, description="Transcript-relative CDS end, stop codon included")
    protein_id: str | None = None
    protein_length: int | None = Field(default=None, ge=1)

    @model_validator(mode="after")
    def validate_structure(self) -> "TranscriptRecord":
        if self.strand is Strand.UNKNOWN:
            raise ValueError(f"Transcript {self.tx_id} must be on the + or - strand")

        for prev, curr in zip(self.exons, self.exons[1:]):
            if self.strand is Strand.PLUS:
                ordered = prev.end < curr.start
            else:
                ordered = curr.end < prev.start
            if not ordered:
                raise ValueError(
                    f"Transcript {self.tx_id}: exons {prev.exon_id} and {curr.exon_id} "
                    f"overlap or are out of order for the {self.strand.value} strand"
                )

        if (self.cds_start is None) != (self.cds_end is None):
            raise ValueError(f"Transcript {self.tx_id}: cds_start and cds_end must be given together")
        if self.cds_start is not None:
            if not self.cds_start <= self.cds_end <= self.length:
                raise ValueError(
                    f"Transcript {self.tx_id}: CDS {self.cds_start}-{self.cds_end} "
                    f"must lie within 1-{self.length}"
                )
        if self.protein_id is not None and self.cds_start is None:
            raise ValueError(f"Transcript {self.tx_id}: protein {self.protein_id} requires a CDS")
        return self

    @property
    def length(self) -> int:
        return sum(e.end - e.start + 1 for e in self.exons)

    @property
    def genomic_start(self) -> int:
        return min(e.start for e in self.exons)

    @property
    def genomic_end(self) -> int:
        return max(e.end for e in self.exons)

    def to_exons(self) -> list[Exon]:
        """Exons with rank and cumulative transcript-relative spans."""
        exons = []
        tx_pos = 1
        for rank, record in enumerate(self.exons, start=1):
            width = record.end - record.start + 1
            exons.append(
                Exon(
                    exon_id=record.exon_id,
                    rank=rank,
                    start=record.start,
                    end=record.end,
                    tx_start=tx_pos,
                    tx_end=tx_pos + width - 1,
                )
            )
            tx_pos += width
        return exons

    def to_info(self) -> TranscriptInfo:
        return TranscriptInfo(
            tx_id=self.tx_id,
            gene_id=self.gene_id,
            seq_name=self.seq_name,
            strand=self.strand,
            length=self.length,
            cds_start=self.cds_start,
            cds_end=self.cds_end,
            protein_id=self.protein_id,
            protein_length=self.protein_length,
        )


class AnnotationSnapshot(BaseModel):
    """Serialized content of an InMemoryAnnotationStore."""
    transcripts: list[TranscriptRecord] = Field(default_factory=list)
    uniprot: dict[str, list[str]] = Field(
        default_factory=dict, description="Uniprot id -> Ensembl protein ids"
    )


class InMemoryAnnotationStore:
    """
    AnnotationStore backed by in-memory dictionaries.

    Never mutated after construction, so concurrent reads are safe.
    """

    def __init__(
        self,
        transcripts: Iterable[TranscriptRecord],
        uniprot: Mapping[str, Sequence[str]] | None = None,
    ):
        self._records: dict[str, TranscriptRecord] = {}
        self._exons: dict[str, list[Exon]] = {}
        self._info: dict[str, TranscriptInfo] = {}
        self._protein_to_tx: dict[str, str] = {}

        for record in transcripts:
            if record.tx_id in self._records:
                raise ValueError(f"Duplicate transcript id: {record.tx_id}")
            self._records[record.tx_id] = record
            self._exons[record.tx_id] = record.to_exons()
            self._info[record.tx_id] = record.to_info()
            if record.protein_id is not None:
                self._protein_to_tx[record.protein_id] = record.tx_id

        self._uniprot: dict[str, list[str]] = {k: list(v) for k, v in (uniprot or {}).items()}

        # seq_name -> [(genomic_start, genomic_end, tx_id)] sorted by start
        self._by_seq: dict[str, list[tuple[int, int, str]]] = {}
        for record in self._records.values():
            self._by_seq.setdefault(record.seq_name, []).append(
                (record.genomic_start, record.genomic_end, record.tx_id)
            )
        for spans in self._by_seq.values():
            spans.sort()
        self._starts = {seq: [s[0] for s in spans] for seq, spans in self._by_seq.items()}

        logger.debug(
            "Loaded %d transcripts (%d coding) and %d Uniprot mappings",
            len(self._records),
            len(self._protein_to_tx),
            len(self._uniprot),
        )

    def __len__(self) -> int:
        return len(self._records)

    @classmethod
    def from_snapshot(cls, snapshot: AnnotationSnapshot) -> "InMemoryAnnotationStore":
        return cls(snapshot.transcripts, snapshot.uniprot)

    @classmethod
    def from_json(cls, path: Path) -> "InMemoryAnnotationStore":
        """Load a store from a JSON snapshot file."""
        try:
            snapshot = AnnotationSnapshot.model_validate_json(Path(path).read_text())
            return cls.from_snapshot(snapshot)
        except FileNotFoundError as e:
            raise AnnotationSnapshotError(f"Annotation snapshot not found: {path}") from e
        except (ValidationError, ValueError) as e:
            raise AnnotationSnapshotError(f"Invalid annotation snapshot {path}: {e}") from e

    def to_snapshot(self) -> AnnotationSnapshot:
        return AnnotationSnapshot(transcripts=list(self._records.values()), uniprot=self._uniprot)

    def to_json(self, path: Path) -> None:
        Path(path).write_text(self.to_snapshot().model_dump_json(indent=2))

    # AnnotationStore interface

    def exons_of(self, tx_id: str) -> list[Exon]:
        return list(self._exons.get(tx_id, []))

    def transcript_info(self, tx_id: str) -> TranscriptInfo | None:
        return self._info.get(tx_id)

    def transcripts_overlapping(self, region: GenomicRange) -> list[str]:
        spans = self._by_seq.get(region.seq_name)
        if not spans:
            return []
        # Only transcripts starting at or before the region end can overlap it.
        candidates = spans[: bisect_right(self._starts[region.seq_name], region.end)]
        hits = []
        for _, span_end, tx_id in candidates:
            if span_end < region.start:
                continue
            if any(e.start <= region.end and e.end >= region.start for e in self._exons[tx_id]):
                hits.append(tx_id)
        return hits

    def resolve_identifier(self, identifier: str, scheme: IdType) -> list[str]:
        if scheme is IdType.PROTEIN_ID:
            return [identifier] if identifier in self._protein_to_tx else []
        if scheme is IdType.UNIPROT_ID:
            return list(self._uniprot.get(identifier, []))
        if scheme is IdType.TX_ID:
            info = self._info.get(identifier)
            if info is None or info.protein_id is None:
                return []
            return [info.protein_id]
        return []

    def encoding_transcript(self, protein_id: str) -> str | None:
        return self._protein_to_tx.get(protein_id)
