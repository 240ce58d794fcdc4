"""Tests for the command-line entrypoint."""

from __future__ import annotations

import json

import pytest

from insight import __main__ as cli

NOW_ARG = "2025-03-15T12:00:00Z"


@pytest.fixture(autouse=True)
def quiet(monkeypatch):
    """Keep the CLI from attaching handlers to the root logger."""
    monkeypatch.setattr(cli, "setup_logging", lambda config: None)
    monkeypatch.delenv("CONFIG_PATH", raising=False)


@pytest.fixture
def rows_file(tmp_path, artifact_rows):
    path = tmp_path / "artifacts.json"
    path.write_text(json.dumps(artifact_rows))
    return path


def _run(capsys, *argv):
    code = cli.main(list(argv))
    return code, capsys.readouterr()


def test_readout(rows_file, capsys):
    code, out = _run(capsys, "readout", str(rows_file), "--now", NOW_ARG)
    assert code == 0
    readout = json.loads(out.out)
    assert readout["topOpportunities"][0]["title"] == "Free tier expansion for SMB"
    assert len(readout["execSummaryBullets"]) == 5
    assert readout["actionPlan"]["next3Moves"][0] == "Free tier expansion for SMB"


def test_run(rows_file, capsys):
    code, out = _run(capsys, "run", str(rows_file), "--now", NOW_ARG, "--project-id", "proj-1")
    assert code == 0
    result = json.loads(out.out)
    assert result["normalized"]["meta"]["projectId"] == "proj-1"
    assert result["compression"]["stats"] == {"original": 4, "merged": 1}


def test_coverage_of_any_document(tmp_path, capsys):
    doc = tmp_path / "doc.json"
    doc.write_text(json.dumps({"notes": {"sources": [
        {"type": "docs", "date": "2025-03-14T00:00:00Z"},
    ]}}))
    code, out = _run(capsys, "coverage", str(doc), "--now", NOW_ARG)
    assert code == 0
    coverage = json.loads(out.out)
    assert coverage["totalCitations"] == 1
    assert coverage["recencyLabel"] == "Last 7 days"


def test_compress_assumptions_levers(rows_file, capsys):
    code, out = _run(capsys, "compress", str(rows_file))
    assert code == 0
    assert len(json.loads(out.out)["items"]) == 3

    code, out = _run(capsys, "assumptions", str(rows_file))
    assert code == 0
    assert len(json.loads(out.out)) == 8

    code, out = _run(capsys, "levers", str(rows_file))
    assert code == 0
    levers = json.loads(out.out)
    assert levers[0]["quadrant"] == "mustProveNow"


def test_single_frame(rows_file, capsys):
    code, out = _run(capsys, "frames", str(rows_file), "--frame", "jobs")
    assert code == 0
    frames = json.loads(out.out)
    assert list(frames) == ["jobs"]
    assert frames["jobs"][0]["label"] == "All Jobs"


def test_all_frames(rows_file, capsys):
    code, out = _run(capsys, "frames", str(rows_file))
    assert code == 0
    assert len(json.loads(out.out)) == 4


def test_unknown_frame(rows_file, capsys):
    code, out = _run(capsys, "frames", str(rows_file), "--frame", "by_vibes")
    assert code == 1
    assert "unknown frame" in out.err


def test_invalid_now(rows_file, capsys):
    code, out = _run(capsys, "readout", str(rows_file), "--now", "whenever")
    assert code == 1
    assert "invalid --now" in out.err


def test_unreadable_file(tmp_path, capsys):
    bad = tmp_path / "bad.json"
    bad.write_text("{not json")
    assert _run(capsys, "readout", str(bad))[0] == 1
    assert _run(capsys, "readout", str(tmp_path / "missing.json"))[0] == 1


def test_config_file(rows_file, tmp_path, capsys):
    cfg = tmp_path / "config.yaml"
    cfg.write_text("readout:\n  top_n: 1\n")
    code, out = _run(capsys, "readout", str(rows_file), "--now", NOW_ARG, "--config", str(cfg))
    assert code == 0
    assert len(json.loads(out.out)["topOpportunities"]) == 1
