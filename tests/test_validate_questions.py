import json
from pathlib import Path

import yaml

from examtex.extract_questions import extract_questions, questions_to_yaml
from examtex.validate_questions import main


def write(tmp_path: Path, name: str, records) -> Path:
    p = tmp_path / name
    if name.endswith(".json"):
        p.write_text(json.dumps(records), encoding="utf-8")
    else:
        p.write_text(yaml.safe_dump(records), encoding="utf-8")
    return p


def test_extracted_questions_validate(tmp_path, capsys, default_paper):
    p = tmp_path / "questions.yaml"
    p.write_text(questions_to_yaml(extract_questions(default_paper)), encoding="utf-8")
    assert main([str(p)]) == 0
    assert f"{p}: OK" in capsys.readouterr().out


def test_schema_errors_fail(tmp_path, capsys):
    p = write(tmp_path, "bad.json", [{"number": 0, "prompt": "", "solution": "x", "extra": 1}])
    assert main([str(p)]) == 1
    out = capsys.readouterr().out
    assert f"{p}: FAIL" in out
    assert "0.number" in out


def test_duplicate_and_descending_numbers_fail(tmp_path, capsys):
    records = [
        {"number": 2, "marks": None, "prompt": "Second", "solution": ""},
        {"number": 1, "marks": None, "prompt": "First", "solution": ""},
        {"number": 1, "marks": None, "prompt": "First again", "solution": ""},
    ]
    p = write(tmp_path, "order.yaml", records)
    assert main([str(p)]) == 1
    out = capsys.readouterr().out
    assert "[1].number: 1 comes after 2" in out
    assert "[2].number: duplicate question number 1" in out


def test_lint_levels(tmp_path, capsys):
    records = [{"number": 1, "marks": "2", "prompt": "Solve $x + 1 = 2", "solution": "\\textbf{x"}]
    p = write(tmp_path, "lint.yaml", records)

    assert main([str(p)]) == 0
    out = capsys.readouterr().out
    assert "with 2 lint warnings" in out
    assert "  ! [0].prompt: unbalanced $ inline-math delimiters" in out
    assert "[0].solution: unbalanced braces (1 open, 0 close)" in out

    assert main([str(p), "--lint-level", "error"]) == 1
    out = capsys.readouterr().out
    assert out.startswith(f"{p}: FAIL\n")
    assert "  - [0].solution: unbalanced braces (1 open, 0 close)" in out

    assert main([str(p), "--lint-level", "off"]) == 0
    assert capsys.readouterr().out == f"{p}: OK  (lint skipped)\n"


def test_escaped_dollar_is_not_a_delimiter(tmp_path, capsys):
    p = write(tmp_path, "money.yaml", [{"number": 1, "prompt": "It costs \\$5.", "solution": ""}])
    assert main([str(p), "--lint-level", "error"]) == 0


def test_unparseable_and_missing_inputs(tmp_path, capsys):
    bad = tmp_path / "broken.yaml"
    bad.write_text("- number: [1\n", encoding="utf-8")
    assert main([str(bad)]) == 1
    assert "YAML parse error" in capsys.readouterr().out
    assert main([str(tmp_path / "nothing.txt")]) == 1
