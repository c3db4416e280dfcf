"""
Mapper: the public coordinate mapping operations.

Every operation takes an ordered batch and returns one result group per input
element, in input order. Elements are processed independently (optionally in
parallel), and a per-element annotation gap never raises. How a gap is
reported depends on the operation:

    genome_to_transcript    sentinel range (-1, -1)
    transcript_to_genome    empty group
    transcript_to_cds       sentinel range
    cds_to_transcript       sentinel range
    transcript_to_protein   sentinel range
    genome_to_protein       sentinel range
    protein_to_transcript   sentinel range
    protein_to_genome       empty group

Only malformed batches (mismatched id/range counts, invalid ranges, unknown id
schemes) raise, with StructuralInputError.
"""

import logging
from collections.abc import Mapping, Sequence
from typing import Any

from pydantic import BaseModel, ValidationError

from .config import MapperConfig
from .core.kernel import CoordinateKernel
from .core.outcome import Unmapped, UnmappedReason
from .errors import StructuralInputError
from .models.core import (
    GenomicMappedRange,
    GenomicRange,
    GroupedTargets,
    IdType,
    Interval,
    MappedRange,
    ProteinGenomeResult,
    SingleTarget,
    TranscriptInfo,
)
from .parallel import ParallelProcessor
from .store import AnnotationStore
from .utils.logging import timed

logger = logging.getLogger(__name__)

RangeLike = Interval | tuple | list | Mapping
GenomicRangeLike = GenomicRange | tuple | list | Mapping


def _coerce(model: type[BaseModel], fields: tuple[str, ...], values: Sequence[Any]) -> list[Any]:
    coerced = []
    for i, value in enumerate(values):
        try:
            if isinstance(value, model):
                coerced.append(value)
            elif isinstance(value, Mapping):
                coerced.append(model.model_validate(value))
            elif isinstance(value, (tuple, list)) and len(value) <= len(fields):
                coerced.append(model(**dict(zip(fields, value))))
            else:
                raise StructuralInputError(
                    f"Range at index {i} is not a {model.__name__}: {value!r}"
                )
        except ValidationError as e:
            raise StructuralInputError(f"Malformed range at index {i}: {e}") from e
    return coerced


def _coerce_id_type(id_type: IdType | str) -> IdType:
    try:
        return IdType(id_type)
    except ValueError as e:
        valid = ", ".join(t.value for t in IdType)
        raise StructuralInputError(f"Unknown id type {id_type!r}; expected one of: {valid}") from e


class Mapper:
    """
    Coordinate mapper bound to an annotation store.

    Example:
        mapper = Mapper(store)
        groups = mapper.transcript_to_genome(["ENST01"], [(48, 55)])
    """

    def __init__(self, store: AnnotationStore, config: MapperConfig | None = None):
        if not isinstance(store, AnnotationStore):
            raise TypeError(f"{type(store).__name__} does not implement AnnotationStore")
        self.store = store
        self.config = config or MapperConfig()
        self.processor = ParallelProcessor(self.config)

    # -- Input handling --

    @staticmethod
    def _genomic_ranges(ranges: Sequence[GenomicRangeLike]) -> list[GenomicRange]:
        return _coerce(GenomicRange, ("seq_name", "start", "end", "strand"), ranges)

    @staticmethod
    def _id_ranges(ids: Sequence[str], ranges: Sequence[RangeLike]) -> list[tuple[str, Interval]]:
        if isinstance(ids, str):
            raise StructuralInputError("ids must be a sequence of identifiers, not a single string")
        if len(ids) != len(ranges):
            raise StructuralInputError(
                f"Got {len(ids)} identifiers for {len(ranges)} ranges; lengths must match"
            )
        for i, identifier in enumerate(ids):
            if not isinstance(identifier, str) or not identifier:
                raise StructuralInputError(f"Identifier at index {i} is not a non-empty string: {identifier!r}")
        return list(zip(ids, _coerce(Interval, ("start", "end"), ranges)))

    def _report(self, operation: str, subject: str, outcome: Unmapped) -> None:
        if self.config.warn_unmapped:
            logger.warning("%s: %s could not be mapped (%s)", operation, subject, outcome)

    def _run(self, operation: str, func, items: list, star: bool = False) -> list:
        with timed(operation, logger, items=len(items)):
            if star:
                return self.processor.starmap(func, items, description=operation)
            return self.processor.map(func, items, description=operation)

    # -- Genome -> transcript --

    def _transcript_hits(self, region: GenomicRange) -> list[tuple[TranscriptInfo, MappedRange]]:
        hits = []
        for tx_id in sorted(set(self.store.transcripts_overlapping(region))):
            tx = self.store.transcript_info(tx_id)
            if tx is None or not region.strand.compatible(tx.strand):
                continue
            pieces = CoordinateKernel.genome_to_transcript(
                region.start, region.end, tx.strand, self.store.exons_of(tx_id)
            )
            for exon, tx_start, tx_end in pieces:
                hits.append(
                    (
                        tx,
                        MappedRange(
                            start=tx_start,
                            end=tx_end,
                            tx_id=tx_id,
                            exon_id=exon.exon_id,
                            exon_rank=exon.rank,
                            **self._genomic_source(region),
                        ),
                    )
                )
        return hits

    @staticmethod
    def _genomic_source(region: GenomicRange) -> dict[str, Any]:
        return {
            "source_seq_name": region.seq_name,
            "source_start": region.start,
            "source_end": region.end,
            "source_strand": region.strand,
        }

    def _genome_to_transcript_one(self, region: GenomicRange) -> list[MappedRange]:
        hits = [mapped for _, mapped in self._transcript_hits(region)]
        if not hits:
            self._report(
                "genome_to_transcript",
                f"{region.seq_name}:{region.start}-{region.end}:{region.strand.value}",
                Unmapped(UnmappedReason.NO_OVERLAP),
            )
            return [MappedRange.unmapped(**self._genomic_source(region))]
        return hits

    def genome_to_transcript(self, ranges: Sequence[GenomicRangeLike]) -> list[list[MappedRange]]:
        """
        Map genomic ranges to every transcript whose exons they overlap.

        Each group holds one range per overlapping (transcript, exon), ordered
        by transcript id then exon rank. A range of unknown strand matches
        transcripts on both strands. No overlap yields a single sentinel.
        """
        regions = self._genomic_ranges(ranges)
        return self._run("genome_to_transcript", self._genome_to_transcript_one, regions)

    # -- Transcript -> genome --

    def _transcript_to_genome_one(self, tx_id: str, interval: Interval) -> list[GenomicMappedRange]:
        tx = self.store.transcript_info(tx_id)
        if tx is None:
            self._report("transcript_to_genome", tx_id, Unmapped(UnmappedReason.UNKNOWN_IDENTIFIER))
            return []
        pieces = CoordinateKernel.transcript_to_genome(
            tx, self.store.exons_of(tx_id), interval.start, interval.end
        )
        if isinstance(pieces, Unmapped):
            self._report("transcript_to_genome", tx_id, pieces)
            return []
        return [
            GenomicMappedRange(
                start=g_start,
                end=g_end,
                seq_name=tx.seq_name,
                strand=tx.strand,
                tx_id=tx_id,
                exon_id=exon.exon_id,
                exon_rank=exon.rank,
                tx_start=tx_start,
                tx_end=tx_end,
                source_id=tx_id,
                source_start=interval.start,
                source_end=interval.end,
            )
            for exon, g_start, g_end, tx_start, tx_end in pieces
        ]

    def transcript_to_genome(
        self, ids: Sequence[str], ranges: Sequence[RangeLike]
    ) -> list[list[GenomicMappedRange]]:
        """
        Map transcript-relative ranges to the genome.

        A range crossing exon junctions yields one genomic range per exon, in
        exon rank order. An unknown transcript or a range outside the
        transcript yields an empty group.
        """
        items = self._id_ranges(ids, ranges)
        return self._run("transcript_to_genome", self._transcript_to_genome_one, items, star=True)

    # -- Transcript <-> CDS --

    def _cds_step(self, operation: str, tx_id: str, interval: Interval, step) -> MappedRange:
        source = {"source_id": tx_id, "source_start": interval.start, "source_end": interval.end}
        tx = self.store.transcript_info(tx_id)
        if tx is None:
            self._report(operation, tx_id, Unmapped(UnmappedReason.UNKNOWN_IDENTIFIER))
            return MappedRange.unmapped(**source)

        result = step(tx, interval.start, interval.end)
        if isinstance(result, Unmapped):
            self._report(operation, tx_id, result)
            return MappedRange.unmapped(tx_id=tx_id, protein_id=tx.protein_id, **source)
        start, end = result
        return MappedRange(start=start, end=end, tx_id=tx_id, protein_id=tx.protein_id, **source)

    def _transcript_to_cds_one(self, tx_id: str, interval: Interval) -> list[MappedRange]:
        return [self._cds_step("transcript_to_cds", tx_id, interval, CoordinateKernel.transcript_to_cds)]

    def _cds_to_transcript_one(self, tx_id: str, interval: Interval) -> list[MappedRange]:
        return [self._cds_step("cds_to_transcript", tx_id, interval, CoordinateKernel.cds_to_transcript)]

    def transcript_to_cds(self, ids: Sequence[str], ranges: Sequence[RangeLike]) -> list[list[MappedRange]]:
        """
        Map transcript-relative ranges to CDS-relative ranges.

        The range must lie within the CDS; otherwise, and for unknown or
        non-coding transcripts, the group holds a single sentinel.
        """
        items = self._id_ranges(ids, ranges)
        return self._run("transcript_to_cds", self._transcript_to_cds_one, items, star=True)

    def cds_to_transcript(self, ids: Sequence[str], ranges: Sequence[RangeLike]) -> list[list[MappedRange]]:
        """
        Map CDS-relative ranges to transcript-relative ranges.

        Only requires a coding transcript; the range is not checked against the
        CDS end. Unknown or non-coding transcripts yield a single sentinel.
        """
        items = self._id_ranges(ids, ranges)
        return self._run("cds_to_transcript", self._cds_to_transcript_one, items, star=True)

    # -- Transcript / genome -> protein --

    def _to_protein(self, tx: TranscriptInfo, hit: MappedRange, operation: str, subject: str) -> MappedRange:
        aa = CoordinateKernel.transcript_to_protein(tx, hit.start, hit.end)
        metadata = hit.model_dump(exclude={"start", "end"})
        if isinstance(aa, Unmapped):
            self._report(operation, subject, aa)
            return MappedRange.unmapped(**{**metadata, "protein_id": tx.protein_id})
        if not tx.cds_ok:
            logger.debug("%s: CDS of %s is incomplete (cds_ok=False)", operation, tx.tx_id)
        return MappedRange(
            start=aa[0],
            end=aa[1],
            **{**metadata, "protein_id": tx.protein_id, "cds_ok": tx.cds_ok},
        )

    def _transcript_to_protein_one(self, tx_id: str, interval: Interval) -> list[MappedRange]:
        tx = self.store.transcript_info(tx_id)
        if tx is None:
            self._report("transcript_to_protein", tx_id, Unmapped(UnmappedReason.UNKNOWN_IDENTIFIER))
            return [
                MappedRange.unmapped(
                    source_id=tx_id, source_start=interval.start, source_end=interval.end
                )
            ]
        hit = MappedRange(
            start=interval.start,
            end=interval.end,
            tx_id=tx_id,
            source_id=tx_id,
            source_start=interval.start,
            source_end=interval.end,
        )
        return [self._to_protein(tx, hit, "transcript_to_protein", tx_id)]

    def transcript_to_protein(
        self, ids: Sequence[str], ranges: Sequence[RangeLike]
    ) -> list[list[MappedRange]]:
        """
        Map transcript-relative ranges to amino acid ranges.

        Ranges outside the CDS or touching the stop codon, and unknown or
        non-coding transcripts, yield a single sentinel. Results carry cds_ok.
        """
        items = self._id_ranges(ids, ranges)
        return self._run("transcript_to_protein", self._transcript_to_protein_one, items, star=True)

    def _genome_to_protein_one(self, region: GenomicRange) -> list[MappedRange]:
        subject = f"{region.seq_name}:{region.start}-{region.end}:{region.strand.value}"
        hits = self._transcript_hits(region)
        if not hits:
            self._report("genome_to_protein", subject, Unmapped(UnmappedReason.NO_OVERLAP))
            return [MappedRange.unmapped(**self._genomic_source(region))]
        return [
            self._to_protein(tx, hit, "genome_to_protein", f"{subject} in {tx.tx_id}")
            for tx, hit in hits
        ]

    def genome_to_protein(self, ranges: Sequence[GenomicRangeLike]) -> list[list[MappedRange]]:
        """
        Map genomic ranges to amino acid ranges of every overlapping transcript.

        One result per (transcript, exon) hit; hits on non-coding transcripts
        or outside the CDS are sentinels tagged with the transcript. A range
        overlapping no transcript yields a single sentinel.
        """
        regions = self._genomic_ranges(ranges)
        return self._run("genome_to_protein", self._genome_to_protein_one, regions)

    # -- Protein -> transcript / genome --

    def _resolve(self, identifier: str, id_type: IdType) -> list[str]:
        resolved = self.store.resolve_identifier(identifier, id_type)
        # Keep resolver order, drop duplicates.
        return list(dict.fromkeys(resolved))

    def _protein_to_transcript_for(
        self, protein_id: str, interval: Interval
    ) -> tuple[TranscriptInfo | None, tuple[int, int] | Unmapped]:
        tx_id = self.store.encoding_transcript(protein_id)
        tx = self.store.transcript_info(tx_id) if tx_id is not None else None
        if tx is None:
            return None, Unmapped(UnmappedReason.UNKNOWN_IDENTIFIER, f"no transcript encodes {protein_id}")
        return tx, CoordinateKernel.protein_to_transcript(tx, interval.start, interval.end)

    def _protein_to_transcript_one(
        self, identifier: str, interval: Interval, id_type: IdType
    ) -> list[MappedRange]:
        source = {"source_id": identifier, "source_start": interval.start, "source_end": interval.end}
        protein_ids = self._resolve(identifier, id_type)
        if not protein_ids:
            self._report("protein_to_transcript", identifier, Unmapped(UnmappedReason.UNKNOWN_IDENTIFIER))
            return [MappedRange.unmapped(**source)]

        group = []
        for protein_id in protein_ids:
            tx, result = self._protein_to_transcript_for(protein_id, interval)
            tx_id = tx.tx_id if tx is not None else None
            if isinstance(result, Unmapped):
                self._report("protein_to_transcript", protein_id, result)
                group.append(MappedRange.unmapped(tx_id=tx_id, protein_id=protein_id, **source))
                continue
            if not tx.cds_ok:
                logger.debug("protein_to_transcript: CDS of %s is incomplete (cds_ok=False)", tx_id)
            group.append(
                MappedRange(
                    start=result[0],
                    end=result[1],
                    tx_id=tx_id,
                    protein_id=protein_id,
                    cds_ok=tx.cds_ok,
                    **source,
                )
            )
        return group

    def protein_to_transcript(
        self,
        ids: Sequence[str],
        ranges: Sequence[RangeLike],
        id_type: IdType | str = IdType.PROTEIN_ID,
    ) -> list[list[MappedRange]]:
        """
        Map amino acid ranges to transcript-relative ranges.

        An identifier resolving to several proteins (e.g. a Uniprot id) yields
        one range per resolved protein, each tagged with its own transcript.
        Unknown identifiers yield a single sentinel; proteins that cannot be
        mapped contribute a sentinel tagged with the protein id. Coordinates
        from an incomplete CDS are still returned with cds_ok=False.
        """
        id_type = _coerce_id_type(id_type)
        items = [(i, r, id_type) for i, r in self._id_ranges(ids, ranges)]
        return self._run("protein_to_transcript", self._protein_to_transcript_one, items, star=True)

    def _protein_to_genome_for(
        self, identifier: str, protein_id: str, interval: Interval
    ) -> list[GenomicMappedRange]:
        tx, result = self._protein_to_transcript_for(protein_id, interval)
        if isinstance(result, Unmapped):
            self._report("protein_to_genome", protein_id, result)
            return []
        pieces = CoordinateKernel.transcript_to_genome(tx, self.store.exons_of(tx.tx_id), *result)
        if isinstance(pieces, Unmapped):
            self._report("protein_to_genome", protein_id, pieces)
            return []
        return [
            GenomicMappedRange(
                start=g_start,
                end=g_end,
                seq_name=tx.seq_name,
                strand=tx.strand,
                tx_id=tx.tx_id,
                exon_id=exon.exon_id,
                exon_rank=exon.rank,
                protein_id=protein_id,
                cds_ok=tx.cds_ok,
                tx_start=tx_start,
                tx_end=tx_end,
                source_id=identifier,
                source_start=interval.start,
                source_end=interval.end,
            )
            for exon, g_start, g_end, tx_start, tx_end in pieces
        ]

    def _protein_to_genome_one(
        self, identifier: str, interval: Interval, id_type: IdType
    ) -> ProteinGenomeResult:
        protein_ids = self._resolve(identifier, id_type)
        if not protein_ids:
            self._report("protein_to_genome", identifier, Unmapped(UnmappedReason.UNKNOWN_IDENTIFIER))
            return SingleTarget()
        if len(protein_ids) == 1:
            protein_id = protein_ids[0]
            return SingleTarget(
                protein_id=protein_id,
                ranges=self._protein_to_genome_for(identifier, protein_id, interval),
            )
        return GroupedTargets(
            groups={
                protein_id: self._protein_to_genome_for(identifier, protein_id, interval)
                for protein_id in protein_ids
            }
        )

    def protein_to_genome(
        self,
        ids: Sequence[str],
        ranges: Sequence[RangeLike],
        id_type: IdType | str = IdType.PROTEIN_ID,
    ) -> list[ProteinGenomeResult]:
        """
        Map amino acid ranges to the genome.

        Each result is a SingleTarget when the identifier resolved to one
        protein, or a GroupedTargets keyed by protein id when it resolved to
        several. Each protein's ranges follow exon rank order; a protein that
        cannot be mapped, or an unknown identifier, gives an empty collection.
        """
        id_type = _coerce_id_type(id_type)
        items = [(i, r, id_type) for i, r in self._id_ranges(ids, ranges)]
        return self._run("protein_to_genome", self._protein_to_genome_one, items, star=True)


def genome_to_transcript(ranges, store: AnnotationStore, config: MapperConfig | None = None):
    """Convenience wrapper around Mapper.genome_to_transcript."""
    return Mapper(store, config).genome_to_transcript(ranges)


def transcript_to_genome(ids, ranges, store: AnnotationStore, config: MapperConfig | None = None):
    """Convenience wrapper around Mapper.transcript_to_genome."""
    return Mapper(store, config).transcript_to_genome(ids, ranges)


def transcript_to_cds(ids, ranges, store: AnnotationStore, config: MapperConfig | None = None):
    """Convenience wrapper around Mapper.transcript_to_cds."""
    return Mapper(store, config).transcript_to_cds(ids, ranges)


def cds_to_transcript(ids, ranges, store: AnnotationStore, config: MapperConfig | None = None):
    """Convenience wrapper around Mapper.cds_to_transcript."""
    return Mapper(store, config).cds_to_transcript(ids, ranges)


def transcript_to_protein(ids, ranges, store: AnnotationStore, config: MapperConfig | None = None):
    """Convenience wrapper around Mapper.transcript_to_protein."""
    return Mapper(store, config).transcript_to_protein(ids, ranges)


def genome_to_protein(ranges, store: AnnotationStore, config: MapperConfig | None = None):
    """Convenience wrapper around Mapper.genome_to_protein."""
    return Mapper(store, config).genome_to_protein(ranges)


def protein_to_transcript(
    ids,
    ranges,
    store: AnnotationStore,
    id_type: IdType | str = IdType.PROTEIN_ID,
    config: MapperConfig | None = None,
):
    """Convenience wrapper around Mapper.protein_to_transcript."""
    return Mapper(store, config).protein_to_transcript(ids, ranges, id_type)


def protein_to_genome(
    ids,
    ranges,
    store: AnnotationStore,
    id_type: IdType | str = IdType.PROTEIN_ID,
    config: MapperConfig | None = None,
):
    """Convenience wrapper around Mapper.protein_to_genome."""
    return Mapper(store, config).protein_to_genome(ids, ranges, id_type)
