"""
Unit tests for the run_intake command line script.
"""
import json

from scripts.run_intake import main

COMPLETE = "I'm seeing patient John Smith today. He was born on March 15th, 1985."


def test_extract_complete(capsys):
    assert main(["--text", COMPLETE]) == 0
    out = json.loads(capsys.readouterr().out)
    assert out["canonical_key"] == "Smith_John__03_15_1985"
    assert out["confidence"] == 1.0


def test_extract_incomplete(capsys):
    assert main(["--text", "nothing useful here"]) == 2
    out = json.loads(capsys.readouterr().out)
    assert out["canonical_key"] is None


def test_reads_file(tmp_path, capsys):
    path = tmp_path / "dictation.txt"
    path.write_text(COMPLETE, encoding="utf-8")
    assert main(["--file", str(path)]) == 0
    assert json.loads(capsys.readouterr().out)["last_name"] == "Smith"


def test_prompt_fills_missing(monkeypatch, capsys):
    monkeypatch.setattr("builtins.input", lambda prompt: "03/15/1985")
    assert main(["--text", "patient named John Smith", "--prompt"]) == 0
    out = json.loads(capsys.readouterr().out)
    assert out["identity"]["canonical_key"] == "Smith_John__03_15_1985"
    assert out["result"] is None


def test_prompt_left_blank(monkeypatch, capsys):
    monkeypatch.setattr("builtins.input", lambda prompt: "")
    assert main(["--text", "patient named John Smith", "--prompt"]) == 2
    out = json.loads(capsys.readouterr().out)
    assert out["missing_fields"] == ["date_of_birth"]
