"""
Core data models for txmap.

Inputs (GenomicRange, Interval), annotation views (Exon, TranscriptInfo) and
results (MappedRange, GenomicMappedRange, SingleTarget, GroupedTargets).
All coordinates are 1-based and inclusive.
"""

from enum import Enum
from typing import Annotated, ClassVar, Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator


class Strand(str, Enum):
    """Strand of a genomic range or transcript."""
    PLUS = "+"
    MINUS = "-"
    UNKNOWN = "*"

    def compatible(self, other: "Strand") -> bool:
        """An unknown strand on either side matches any strand."""
        if self is Strand.UNKNOWN or other is Strand.UNKNOWN:
            return True
        return self is other


class IdType(str, Enum):
    """Identifier scheme of a protein identifier."""
    PROTEIN_ID = "protein_id"
    UNIPROT_ID = "uniprot_id"
    TX_ID = "tx_id"


class Interval(BaseModel):
    """
    A range in a relative coordinate system (transcript, CDS or protein).
    """
    model_config = ConfigDict(frozen=True)

    start: int = Field(description="1-based start position (inclusive)")
    end: int = Field(description="1-based end position (inclusive)")

    @model_validator(mode="after")
    def validate_interval(self) -> "Interval":
        if self.end < self.start:
            raise ValueError(f"End position ({self.end}) must be >= start position ({self.start})")
        return self

    @property
    def width(self) -> int:
        return self.end - self.start + 1


class GenomicRange(BaseModel):
    """A range on a genomic sequence."""
    model_config = ConfigDict(frozen=True)

    seq_name: str
    start: int = Field(ge=1, description="1-based start position (inclusive)")
    end: int = Field(ge=1, description="1-based end position (inclusive)")
    strand: Strand = Strand.UNKNOWN

    @model_validator(mode="after")
    def validate_range(self) -> "GenomicRange":
        if self.end < self.start:
            raise ValueError(f"End position ({self.end}) must be >= start position ({self.start})")
        return self


class Exon(BaseModel):
    """
    An exon of a transcript with its genomic extent and the transcript-relative
    span it covers (tx_start..tx_end, cumulative over lower-ranked exons).
    """
    model_config = ConfigDict(frozen=True)

    exon_id: str
    rank: int = Field(ge=1)
    start: int = Field(ge=1)
    end: int = Field(ge=1)
    tx_start: int = Field(ge=1)
    tx_end: int = Field(ge=1)

    @property
    def width(self) -> int:
        return self.end - self.start + 1


class TranscriptInfo(BaseModel):
    """Read-only summary of a transcript as supplied by an annotation store."""
    model_config = ConfigDict(frozen=True)

    tx_id: str
    gene_id: str | None = None
    seq_name: str
    strand: Strand
    length: int = Field(ge=1)
    cds_start: int | None = None
    cds_end: int | None = None
    protein_id: str | None = None
    protein_length: int | None = None

    @property
    def is_coding(self) -> bool:
        return self.cds_start is not None and self.cds_end is not None

    @property
    def cds_length(self) -> int | None:
        if not self.is_coding:
            return None
        return self.cds_end - self.cds_start + 1

    @property
    def cds_ok(self) -> bool:
        """
        Whether the CDS is consistent with the encoded protein: the protein
        length times three equals the CDS length minus the stop codon.
        """
        if not self.is_coding or self.protein_length is None:
            return False
        return self.protein_length * 3 == self.cds_length - 3


class MappedRange(BaseModel):
    """
    A range in the target coordinate system plus the metadata describing how
    it was obtained. A range with start == end == -1 is the sentinel used by
    some operations to report that no mapping exists.
    """
    SENTINEL: ClassVar[int] = -1

    start: int
    end: int

    tx_id: str | None = None
    exon_id: str | None = None
    exon_rank: int | None = None
    protein_id: str | None = None
    cds_ok: bool | None = None

    # Originating input: the identifier supplied by the caller (or the
    # genomic location) and the input range itself.
    source_id: str | None = None
    source_seq_name: str | None = None
    source_strand: Strand | None = None
    source_start: int | None = None
    source_end: int | None = None

    @property
    def is_mapped(self) -> bool:
        return not (self.start == self.SENTINEL and self.end == self.SENTINEL)

    @classmethod
    def unmapped(cls, **metadata) -> "MappedRange":
        """Build the sentinel (-1, -1) range carrying the given metadata."""
        return cls(start=cls.SENTINEL, end=cls.SENTINEL, **metadata)


class GenomicMappedRange(MappedRange):
    """A mapped range located on the genome."""
    seq_name: str
    strand: Strand
    # Transcript-relative span covered by this genomic piece.
    tx_start: int | None = None
    tx_end: int | None = None


class SingleTarget(BaseModel):
    """Protein-to-genome result of an identifier that resolved to one protein."""
    kind: Literal["single"] = "single"
    protein_id: str | None = None
    ranges: list[GenomicMappedRange] = Field(default_factory=list)

    def flatten(self) -> list[GenomicMappedRange]:
        return list(self.ranges)


class GroupedTargets(BaseModel):
    """
    Protein-to-genome result of an identifier that resolved to several
    proteins, keyed by resolved protein id in resolution order.
    """
    kind: Literal["grouped"] = "grouped"
    groups: dict[str, list[GenomicMappedRange]] = Field(default_factory=dict)

    def flatten(self) -> list[GenomicMappedRange]:
        return [r for ranges in self.groups.values() for r in ranges]


ProteinGenomeResult = Annotated[SingleTarget | GroupedTargets, Field(discriminator="kind")]
