"""Tests for the specimen command line."""

from __future__ import annotations

import json

import pytest

from specimen.cli.main import main


def test_no_script_prints_help(capsys):
    with pytest.raises(SystemExit) as exit_info:
        main([])
    assert exit_info.value.code == 1
    assert "usage: specimen" in capsys.readouterr().out


def test_rejects_non_python_file():
    with pytest.raises(SystemExit) as exit_info:
        main(["notes.txt"])
    assert exit_info.value.code == 2


def test_json_and_html_are_exclusive():
    with pytest.raises(SystemExit) as exit_info:
        main(["--json", "--html", "out.html", "x.py"])
    assert exit_info.value.code == 2


def test_demo(capsys):
    main(["--demo"])
    out = capsys.readouterr().out
    assert out.startswith("uncaught MuhMockException\n")
    assert "- {main}" in out


def test_demo_json(capsys):
    main(["--demo", "--json"])
    model = json.loads(capsys.readouterr().out)
    assert model["root"][0] == "exception"
    assert model["objects"]


def test_demo_html(tmp_path):
    path = tmp_path / "demo.html"
    main(["--demo", "--html", str(path)])
    assert "MuhMockException" in path.read_text(encoding="utf-8")


def test_runs_script_and_exits_with_status(tmp_path, capsys):
    script = tmp_path / "bad.py"
    script.write_text("raise KeyError('missing')\n")
    with pytest.raises(SystemExit) as exit_info:
        main([str(script)])
    assert exit_info.value.code == 1
    assert "uncaught KeyError" in capsys.readouterr().err
