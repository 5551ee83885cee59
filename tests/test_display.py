"""Tests for table rendering."""

from slyft_cli.core.types import Job
from slyft_cli.display import display_job, table_output

from tests.helpers import job_payload


def test_long_cells_wrap_instead_of_truncating(capsys):
    table_output(["Key", "Value"], [["Detail", "alpha beta gamma delta"]], [6, 11])

    lines = capsys.readouterr().out.splitlines()
    assert lines[2:] == ["Detail  alpha beta", "        gamma delta"]


def test_empty_cell_keeps_its_row(capsys):
    table_output(["Key", "Value"], [["Lock", ""]], [4, 10])
    assert capsys.readouterr().out.splitlines()[2] == "Lock"


def test_job_details_show_every_result_line(capsys, monkeypatch):
    monkeypatch.setattr("slyft_cli.display.terminal_width", lambda: 40)
    detail = "line 12: unexpected token ::= in module definition, expected BEGIN"
    job = Job.from_dict(job_payload("failed", results={"resultMessage": "failed", "resultDetails": [detail]}))

    display_job(job)

    out = capsys.readouterr().out
    assert " ".join(out.split()).count(detail) == 1
