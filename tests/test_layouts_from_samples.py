# tests/test_layouts_from_samples.py
from __future__ import annotations

import json
from pathlib import Path
from typing import Dict, List

import jsonschema
import pytest
import yaml

from examtex.config import DEFAULT_CONFIG, SCHEMA_DIR
from examtex.extract_questions import extract_questions, questions_to_yaml
from examtex.extractors.common import narrow_body, run_layout
from examtex.extractors.registry import discover_layouts

REPO_ROOT = Path(__file__).resolve().parents[1]

# Where sample documents must live:
SAMPLES_ROOT = REPO_ROOT / "samples"


def load_schema() -> Dict:
    with (SCHEMA_DIR / "question-list.schema.json").open("r", encoding="utf-8") as f:
        return json.load(f)

VALIDATOR = jsonschema.Draft202012Validator(load_schema())

def validate_records(records: List[Dict]):
    errors = sorted(VALIDATOR.iter_errors(records), key=lambda e: list(e.path))
    if errors:
        msg = "\n".join(f"- {e.message} @ path {list(e.path)}" for e in errors)
        raise AssertionError(f"Schema validation failed:\n{msg}")

def layouts_by_name():
    return {l.name: l for l in discover_layouts()}

def sample_path_for(layout_name: str) -> Path:
    """
    Enforce one sample document per layout:
      samples/<layout>/<file>.tex
    """
    layout_dir = SAMPLES_ROOT / layout_name
    assert layout_dir.is_dir(), f"Missing sample dir for '{layout_name}': {layout_dir}"
    candidates = sorted(p for p in layout_dir.iterdir() if p.is_file() and p.suffix == ".tex")
    assert len(candidates) >= 1, (
        f"Expected at least one .tex sample for '{layout_name}' under {layout_dir}. Found: {[p.name for p in candidates]}"
    )
    return candidates[0]

def test_all_layouts_have_samples():
    layouts = layouts_by_name()
    assert layouts, "No layouts discovered in examtex/extractors/layouts/"
    missing = []
    extras = []

    for name in sorted(layouts):
        try:
            _ = sample_path_for(name)
        except AssertionError as e:
            missing.append(str(e))

    # Also flag any sample folders without a matching layout (helps cleanup)
    if SAMPLES_ROOT.exists():
        for d in sorted([p for p in SAMPLES_ROOT.iterdir() if p.is_dir()]):
            if d.name not in layouts:
                extras.append(f"Sample dir exists with no layout: {d}")

    err = ""
    if missing:
        err += "\n".join(missing)
    if extras:
        err += ("\n" if err else "") + "\n".join(extras)
    if err:
        pytest.fail(err)

def test_layouts_are_ordered_by_priority():
    priorities = [l.priority for l in discover_layouts()]
    assert priorities == sorted(priorities)
    assert discover_layouts()[-1].name == "numbered_line"

@pytest.mark.parametrize("name", sorted(layouts_by_name().keys()))
def test_layout_parses_own_sample(name: str):
    layout = layouts_by_name()[name]
    src = sample_path_for(name)
    text = src.read_text(encoding="utf-8")

    region, _how = narrow_body(text)
    found = run_layout(layout, region, DEFAULT_CONFIG.extract)
    assert found, f"{name} layout found no questions in {src.name}"
    assert [q.number for q in found] == list(range(1, len(found) + 1))
    for q in found:
        assert q.prompt.strip()
        assert q.solution.strip(), f"Q{q.number} in {src.name} lost its solution"
        assert "\\end{document}" not in q.prompt + q.solution

@pytest.mark.parametrize("name", sorted(layouts_by_name().keys()))
def test_cascade_picks_sample_layout(name: str, events):
    text = sample_path_for(name).read_text(encoding="utf-8")

    questions = extract_questions(text, observer=events.append)
    assert questions, f"cascade found nothing in sample for {name}"

    extracted = [e for e in events if e.name == "extracted"]
    assert extracted and extracted[-1].data["layout"] == name

    loaded = yaml.safe_load(questions_to_yaml(questions))
    validate_records(loaded)
    assert [r["number"] for r in loaded] == [q.number for q in questions]
