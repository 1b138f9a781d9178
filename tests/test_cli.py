"""Tests for the print-queue command line."""

from __future__ import annotations

import json
import logging
from pathlib import Path

import pytest

from print_queue.cli import build_parser, main


@pytest.fixture
def db_args(tmp_path: Path) -> list[str]:
    return ["--database-url", f"sqlite:///{tmp_path / 'queue.db'}"]


def _run(capsys: pytest.CaptureFixture[str], *argv: str):
    code = main(list(argv))
    out = capsys.readouterr().out
    return code, (json.loads(out) if out.strip() else None)


def test_enqueue_and_lifecycle(db_args, capsys):
    code, entry = _run(capsys, *db_args, "enqueue", "J1")
    assert code == 0
    assert entry["job_reference"] == "J1"
    assert entry["position"] == 1
    assert entry["status"] == "pending"

    code, entry = _run(capsys, *db_args, "enqueue", "J2")
    assert entry["position"] == 2

    code, entry = _run(capsys, *db_args, "start", "J1")
    assert code == 0
    assert entry["status"] == "in-progress"

    code, entry = _run(capsys, *db_args, "complete", "J1")
    assert entry["status"] == "completed"

    code, entry = _run(capsys, *db_args, "show", "J1")
    assert entry["status"] == "completed"


def test_list_and_stats(db_args, capsys):
    for job in ("J1", "J2", "J3"):
        _ = _run(capsys, *db_args, "enqueue", job)
    _ = _run(capsys, *db_args, "start", "J2")

    code, entries = _run(capsys, *db_args, "list", "--limit", "2")
    assert code == 0
    assert [e["job_reference"] for e in entries] == ["J1", "J2"]

    code, stats = _run(capsys, *db_args, "stats")
    assert stats == {"total": 3, "pending": 2, "in_progress": 1}


def test_queue_error_returns_nonzero(db_args, capsys, caplog):
    _ = _run(capsys, *db_args, "enqueue", "J1")

    with caplog.at_level(logging.ERROR, logger="print-queue"):
        code, output = _run(capsys, *db_args, "complete", "J1")

    assert code == 1
    assert output is None
    assert "Invalid status transition from pending to completed" in caplog.text


def test_transition_missing_job(db_args, capsys):
    code, output = _run(capsys, *db_args, "fail", "missing")

    assert code == 1
    assert output is None


def test_parser_requires_command():
    with pytest.raises(SystemExit):
        build_parser().parse_args([])
