"""
CLI Entry Point: exposes the mapping operations via command line.

Each operation is a subcommand reading a TSV batch, mapping it against a JSON
annotation snapshot, and writing one TSV row per mapped range.
"""

from pathlib import Path

import typer
from pydantic import ValidationError
from rich.console import Console

from . import __version__
from .config import MapperConfig
from .errors import TxmapError
from .io.input import GenomicRangeReader, IdRangeReader
from .io.output import ResultWriter
from .mapper import Mapper
from .models.core import IdType
from .store import InMemoryAnnotationStore
from .utils.logging import get_logger, setup_logging

app = typer.Typer(help="txmap: map coordinates between genome, transcript, CDS and protein")

console = Console(stderr=True)
logger = get_logger(__name__)

AnnotationOption = typer.Option(
    ..., "--annotation", "-a", help="JSON annotation snapshot (transcripts, exons, Uniprot ids)"
)
InputOption = typer.Option(..., "--input", "-i", help="Tab-separated batch to map (with header)")
OutputOption = typer.Option(None, "--output", "-o", help="Output TSV (default: stdout)")
ThreadsOption = typer.Option(1, "--threads", "-t", help="Number of parallel jobs (-1 for all CPUs)")
VerboseOption = typer.Option(False, "--verbose", "-V", help="Enable verbose debug logging")
IdTypeOption = typer.Option(IdType.PROTEIN_ID, "--id-type", help="Scheme of the protein identifiers")


@app.callback()
def main():
    """
    txmap: map coordinates between genome, transcript, CDS and protein.
    """
    pass


@app.command()
def version():
    """Show the txmap version."""
    typer.echo(f"txmap {__version__}")


def _mapper(annotation: Path, threads: int, verbose: bool) -> Mapper:
    setup_logging(verbose=verbose)
    store = InMemoryAnnotationStore.from_json(annotation)
    logger.debug("Loaded %d transcripts from %s", len(store), annotation)
    return Mapper(store, MapperConfig(n_jobs=threads))


def _write(results: list, output: Path | None) -> None:
    with ResultWriter(output) as writer:
        writer.write_all(results)
    if output:
        console.print(f"Wrote {writer.rows_written} rows for {len(results)} inputs to {output}")


def _run_genomic(operation: str, annotation: Path, input: Path, output: Path | None, threads: int, verbose: bool):
    try:
        mapper = _mapper(annotation, threads, verbose)
        ranges = list(GenomicRangeReader(input))
        _write(getattr(mapper, operation)(ranges), output)
    except (TxmapError, ValidationError) as e:
        console.print(f"[bold red]Error: {e}[/bold red]")
        raise typer.Exit(code=1) from e


def _run_ids(
    operation: str,
    annotation: Path,
    input: Path,
    output: Path | None,
    threads: int,
    verbose: bool,
    id_type: IdType | None = None,
):
    try:
        mapper = _mapper(annotation, threads, verbose)
        ids, ranges = IdRangeReader(input).read()
        func = getattr(mapper, operation)
        results = func(ids, ranges) if id_type is None else func(ids, ranges, id_type)
        _write(results, output)
    except (TxmapError, ValidationError) as e:
        console.print(f"[bold red]Error: {e}[/bold red]")
        raise typer.Exit(code=1) from e


@app.command("genome-to-transcript")
def genome_to_transcript(
    annotation: Path = AnnotationOption,
    input: Path = InputOption,
    output: Path | None = OutputOption,
    threads: int = ThreadsOption,
    verbose: bool = VerboseOption,
):
    """Map genomic ranges (seq_name, start, end, strand) to transcript coordinates."""
    _run_genomic("genome_to_transcript", annotation, input, output, threads, verbose)


@app.command("genome-to-protein")
def genome_to_protein(
    annotation: Path = AnnotationOption,
    input: Path = InputOption,
    output: Path | None = OutputOption,
    threads: int = ThreadsOption,
    verbose: bool = VerboseOption,
):
    """Map genomic ranges (seq_name, start, end, strand) to amino acid coordinates."""
    _run_genomic("genome_to_protein", annotation, input, output, threads, verbose)


@app.command("transcript-to-genome")
def transcript_to_genome(
    annotation: Path = AnnotationOption,
    input: Path = InputOption,
    output: Path | None = OutputOption,
    threads: int = ThreadsOption,
    verbose: bool = VerboseOption,
):
    """Map transcript ranges (id, start, end) to the genome."""
    _run_ids("transcript_to_genome", annotation, input, output, threads, verbose)


@app.command("transcript-to-cds")
def transcript_to_cds(
    annotation: Path = AnnotationOption,
    input: Path = InputOption,
    output: Path | None = OutputOption,
    threads: int = ThreadsOption,
    verbose: bool = VerboseOption,
):
    """Map transcript ranges (id, start, end) to CDS coordinates."""
    _run_ids("transcript_to_cds", annotation, input, output, threads, verbose)


@app.command("cds-to-transcript")
def cds_to_transcript(
    annotation: Path = AnnotationOption,
    input: Path = InputOption,
    output: Path | None = OutputOption,
    threads: int = ThreadsOption,
    verbose: bool = VerboseOption,
):
    """Map CDS ranges (id, start, end) to transcript coordinates."""
    _run_ids("cds_to_transcript", annotation, input, output, threads, verbose)


@app.command("transcript-to-protein")
def transcript_to_protein(
    annotation: Path = AnnotationOption,
    input: Path = InputOption,
    output: Path | None = OutputOption,
    threads: int = ThreadsOption,
    verbose: bool = VerboseOption,
):
    """Map transcript ranges (id, start, end) to amino acid coordinates."""
    _run_ids("transcript_to_protein", annotation, input, output, threads, verbose)


@app.command("protein-to-transcript")
def protein_to_transcript(
    annotation: Path = AnnotationOption,
    input: Path = InputOption,
    output: Path | None = OutputOption,
    id_type: IdType = IdTypeOption,
    threads: int = ThreadsOption,
    verbose: bool = VerboseOption,
):
    """Map amino acid ranges (id, start, end) to transcript coordinates."""
    _run_ids("protein_to_transcript", annotation, input, output, threads, verbose, id_type)


@app.command("protein-to-genome")
def protein_to_genome(
    annotation: Path = AnnotationOption,
    input: Path = InputOption,
    output: Path | None = OutputOption,
    id_type: IdType = IdTypeOption,
    threads: int = ThreadsOption,
    verbose: bool = VerboseOption,
):
    """Map amino acid ranges (id, start, end) to the genome."""
    _run_ids("protein_to_genome", annotation, input, output, threads, verbose, id_type)


if __name__ == "__main__":
    app()
