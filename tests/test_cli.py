"""Tests for CLI module."""

import csv
from pathlib import Path

import pytest
from pydantic import ValidationError
from typer.testing import CliRunner

from txmap import __version__
from txmap.cli import app

runner = CliRunner()


def _rows(path: Path) -> list[dict]:
    with open(path, newline="") as f:
        return list(csv.DictReader(f, delimiter="\t"))


@pytest.fixture
def id_batch(tmp_path: Path) -> Path:
    path = tmp_path / "ids.tsv"
    path.write_text("id\tstart\tend\nENST01\t48\t55\nENSTXX\t1\t2\n")
    return path


@pytest.fixture
def genomic_batch(tmp_path: Path) -> Path:
    path = tmp_path / "genomic.tsv"
    path.write_text("seq_name\tstart\tend\tstrand\nchr1\t140\t142\t+\nchr1\t5000\t5001\t*\n")
    return path


def test_cli_version():
    result = runner.invoke(app, ["version"])
    assert result.exit_code == 0
    assert __version__ in result.stdout


def test_cli_help():
    result = runner.invoke(app, ["--help"])
    assert result.exit_code == 0
    assert "genome-to-transcript" in result.stdout
    assert "protein-to-genome" in result.stdout


def test_cli_missing_required_args():
    result = runner.invoke(app, ["transcript-to-genome"])
    assert result.exit_code != 0


def test_cli_transcript_to_genome(snapshot_file, id_batch, tmp_path):
    output = tmp_path / "out.tsv"
    result = runner.invoke(
        app,
        ["transcript-to-genome", "-a", str(snapshot_file), "-i", str(id_batch), "-o", str(output)],
    )
    assert result.exit_code == 0
    rows = _rows(output)
    # The unknown transcript yields no rows
    assert [(r["input_index"], r["start"], r["end"]) for r in rows] == [
        ("0", "147", "150"),
        ("0", "300", "303"),
    ]


def test_cli_cds_to_transcript_writes_sentinel(snapshot_file, id_batch, tmp_path):
    output = tmp_path / "out.tsv"
    result = runner.invoke(
        app,
        ["cds-to-transcript", "-a", str(snapshot_file), "-i", str(id_batch), "-o", str(output)],
    )
    assert result.exit_code == 0
    rows = _rows(output)
    assert [(r["input_index"], r["start"], r["end"]) for r in rows] == [
        ("0", "57", "64"),
        ("1", "-1", "-1"),
    ]


def test_cli_genome_to_protein(snapshot_file, genomic_batch, tmp_path):
    output = tmp_path / "out.tsv"
    result = runner.invoke(
        app,
        ["genome-to-protein", "-a", str(snapshot_file), "-i", str(genomic_batch), "-o", str(output), "-t", "2"],
    )
    assert result.exit_code == 0
    rows = _rows(output)
    assert [(r["input_index"], r["tx_id"], r["start"]) for r in rows] == [
        ("0", "ENST01", "11"),
        ("0", "ENST03", "-1"),
        ("0", "ENST06", "1"),
        ("1", "", "-1"),
    ]


def test_cli_protein_to_genome_uniprot(snapshot_file, tmp_path):
    batch = tmp_path / "proteins.tsv"
    batch.write_text("id\tstart\tend\nP12345\t1\t1\n")
    output = tmp_path / "out.tsv"
    result = runner.invoke(
        app,
        [
            "protein-to-genome",
            "-a", str(snapshot_file),
            "-i", str(batch),
            "-o", str(output),
            "--id-type", "uniprot_id",
        ],
    )
    assert result.exit_code == 0
    assert [r["group"] for r in _rows(output)] == ["ENSP01", "ENSP02", "ENSP04", "ENSP05"]


def test_cli_stdout(snapshot_file, tmp_path):
    batch = tmp_path / "ids.tsv"
    batch.write_text("id\tstart\tend\nENST01\t10\t12\n")
    result = runner.invoke(app, ["transcript-to-protein", "-a", str(snapshot_file), "-i", str(batch)])
    assert result.exit_code == 0
    lines = [line for line in result.stdout.splitlines() if line.startswith(("input_index", "0\t"))]
    assert lines[0].startswith("input_index\tgroup\tstart\tend")
    assert lines[1].split("\t")[2:4] == ["1", "1"]


def test_cli_missing_annotation(id_batch, tmp_path):
    result = runner.invoke(
        app, ["transcript-to-genome", "-a", str(tmp_path / "missing.json"), "-i", str(id_batch)]
    )
    assert result.exit_code == 1


def test_cli_malformed_batch(snapshot_file, tmp_path):
    batch = tmp_path / "bad.tsv"
    batch.write_text("id\tstart\tend\nENST01\t9\t2\n")
    result = runner.invoke(app, ["transcript-to-cds", "-a", str(snapshot_file), "-i", str(batch)])
    assert result.exit_code == 1


@pytest.mark.parametrize("threads", ["0", "-2"])
def test_cli_invalid_threads(snapshot_file, id_batch, threads):
    result = runner.invoke(
        app,
        ["transcript-to-genome", "-a", str(snapshot_file), "-i", str(id_batch), "-t", threads],
    )
    assert result.exit_code == 1
    assert not isinstance(result.exception, ValidationError)


def test_cli_invalid_id_type(snapshot_file, id_batch):
    result = runner.invoke(
        app, ["protein-to-transcript", "-a", str(snapshot_file), "-i", str(id_batch), "--id-type", "refseq"]
    )
    assert result.exit_code != 0
