"""
Coordinate Kernel: the arithmetic between genome, transcript, CDS and protein.

Conventions:
- All coordinates are 1-based and inclusive.
- Transcript coordinates run 5' to 3' along the transcript, so CDS and protein
  arithmetic never looks at the strand; only the genome/transcript exon walk does.
- The CDS end includes the stop codon, which has no amino acid.
"""

from collections.abc import Iterable, Iterator

from txmap.core.outcome import Unmapped, UnmappedReason
from txmap.models.core import Exon, Strand, TranscriptInfo

CODON_SIZE = 3

# (exon, start, end) pieces produced by the exon walks
ExonPiece = tuple[Exon, int, int]


class CoordinateKernel:
    """
    Stateless utility for coordinate transformations.
    """

    @staticmethod
    def ranked(exons: Iterable[Exon]) -> list[Exon]:
        """Exons in transcript (rank) order."""
        return sorted(exons, key=lambda e: e.rank)

    @staticmethod
    def genome_to_transcript(
        start: int, end: int, strand: Strand, exons: Iterable[Exon]
    ) -> Iterator[ExonPiece]:
        """
        Map a genomic range onto a transcript, one piece per overlapping exon.

        The genomic range is clipped to each exon it overlaps. On the minus
        strand the exon is walked from its genomic end, so the genomic start
        becomes the transcript end.

        Yields:
            (exon, tx_start, tx_end) in exon rank order.
        """
        for exon in CoordinateKernel.ranked(exons):
            clip_start = max(start, exon.start)
            clip_end = min(end, exon.end)
            if clip_start > clip_end:
                continue
            if strand is Strand.MINUS:
                tx_start = exon.tx_start + (exon.end - clip_end)
                tx_end = exon.tx_start + (exon.end - clip_start)
            else:
                tx_start = exon.tx_start + (clip_start - exon.start)
                tx_end = exon.tx_start + (clip_end - exon.start)
            yield exon, tx_start, tx_end

    @staticmethod
    def transcript_to_genome(
        tx: TranscriptInfo, exons: Iterable[Exon], start: int, end: int
    ) -> list[tuple[Exon, int, int, int, int]] | Unmapped:
        """
        Map a transcript-relative range onto the genome.

        A range crossing exon-exon junctions yields one genomic range per exon.

        Returns:
            List of (exon, genomic_start, genomic_end, tx_start, tx_end) in exon
            rank order, or Unmapped if the range is outside [1, tx.length].
        """
        if start < 1 or end > tx.length:
            return Unmapped(
                UnmappedReason.OUT_OF_BOUNDS,
                f"{start}-{end} outside transcript {tx.tx_id} (length {tx.length})",
            )

        pieces = []
        for exon in CoordinateKernel.ranked(exons):
            clip_start = max(start, exon.tx_start)
            clip_end = min(end, exon.tx_end)
            if clip_start > clip_end:
                continue
            if tx.strand is Strand.MINUS:
                g_start = exon.end - (clip_end - exon.tx_start)
                g_end = exon.end - (clip_start - exon.tx_start)
            else:
                g_start = exon.start + (clip_start - exon.tx_start)
                g_end = exon.start + (clip_end - exon.tx_start)
            pieces.append((exon, g_start, g_end, clip_start, clip_end))
        return pieces

    @staticmethod
    def transcript_to_cds(tx: TranscriptInfo, start: int, end: int) -> tuple[int, int] | Unmapped:
        """Shift a transcript range into CDS coordinates; it must lie within the CDS."""
        if not tx.is_coding:
            return Unmapped(UnmappedReason.NON_CODING, tx.tx_id)
        if start < tx.cds_start or end > tx.cds_end:
            return Unmapped(
                UnmappedReason.OUT_OF_BOUNDS,
                f"{start}-{end} outside CDS {tx.cds_start}-{tx.cds_end} of {tx.tx_id}",
            )
        offset = tx.cds_start - 1
        return start - offset, end - offset

    @staticmethod
    def cds_to_transcript(tx: TranscriptInfo, start: int, end: int) -> tuple[int, int] | Unmapped:
        """
        Shift a CDS range into transcript coordinates.

        A range starting before CDS position 1 is rejected. The end is not
        checked against the CDS end, so the result may extend past the CDS into
        the 3' UTR.
        """
        if not tx.is_coding:
            return Unmapped(UnmappedReason.NON_CODING, tx.tx_id)
        if start < 1:
            return Unmapped(UnmappedReason.OUT_OF_BOUNDS, f"CDS {start}-{end} starts before the CDS of {tx.tx_id}")
        offset = tx.cds_start - 1
        return start + offset, end + offset

    @staticmethod
    def cds_to_protein(tx: TranscriptInfo, start: int, end: int) -> tuple[int, int] | Unmapped:
        """Convert a CDS range to amino acids, rejecting the stop codon."""
        last_sense = tx.cds_length - CODON_SIZE
        if end > last_sense:
            return Unmapped(
                UnmappedReason.OUT_OF_BOUNDS,
                f"CDS {start}-{end} reaches the stop codon of {tx.tx_id} (last sense nucleotide {last_sense})",
            )
        return (start - 1) // CODON_SIZE + 1, (end - 1) // CODON_SIZE + 1

    @staticmethod
    def protein_to_cds(start: int, end: int) -> tuple[int, int]:
        """First nucleotide of the first codon to last nucleotide of the last codon."""
        return (start - 1) * CODON_SIZE + 1, end * CODON_SIZE

    @staticmethod
    def transcript_to_protein(tx: TranscriptInfo, start: int, end: int) -> tuple[int, int] | Unmapped:
        cds = CoordinateKernel.transcript_to_cds(tx, start, end)
        if isinstance(cds, Unmapped):
            return cds
        return CoordinateKernel.cds_to_protein(tx, *cds)

    @staticmethod
    def protein_to_transcript(tx: TranscriptInfo, start: int, end: int) -> tuple[int, int] | Unmapped:
        if start < 1 or (tx.protein_length is not None and end > tx.protein_length):
            return Unmapped(
                UnmappedReason.OUT_OF_BOUNDS,
                f"{start}-{end} outside protein {tx.protein_id} (length {tx.protein_length})",
            )
        return CoordinateKernel.cds_to_transcript(tx, *CoordinateKernel.protein_to_cds(start, end))
