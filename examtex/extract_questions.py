#!/usr/bin/env python3
"""
Extract numbered questions (and their solutions) from a generated paper.

Layouts are discovered from examtex/extractors/layouts/*.py and tried from
most specific to most permissive; the first layout that yields at least one
accepted question wins. An empty result means no structure was detected and
callers should show the raw text instead.

Usage:
  python -m examtex.extract_questions generated.tex --out build/questions.yaml
Options:
  --format {yaml,json}   Output format (default: yaml)
  --config FILE          YAML config (see examtex/config.py)
"""
from __future__ import annotations
import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Iterable, List, Optional, Tuple

import yaml

from examtex.common import Observer, blockify, emit, read_text
from examtex.config import ConfigError, DEFAULT_CONFIG, ExamTexConfig, ExtractConfig, load_config
from examtex.extractors.common import (
    STAGE, Layout, Question, dedupe_and_sort, document_body, narrow_body, run_layout,
)
from examtex.extractors.registry import select_layouts

logger = logging.getLogger(__name__)


def run_cascade(
    body: str,
    layouts: Iterable[Layout],
    cfg: ExtractConfig,
    observer: Optional[Observer] = None,
) -> Tuple[List[Question], Optional[str]]:
    """Try layouts in order; return (questions, layout name) of the first hit."""
    for layout in layouts:
        found = run_layout(layout, body, cfg, observer)
        emit(observer, STAGE, "layout_tried", layout=layout.name, accepted=len(found))
        if found:
            return dedupe_and_sort(found), layout.name
    return [], None


def extract_questions(
    text: str,
    config: Optional[ExamTexConfig] = None,
    observer: Optional[Observer] = None,
) -> List[Question]:
    """Ordered, de-duplicated questions found in text (possibly empty)."""
    config = config or DEFAULT_CONFIG
    text = str(text or "")
    layouts = select_layouts(config.extract.layouts)

    region, how = narrow_body(text)
    emit(observer, STAGE, "body_narrowed", boundary=how, length=len(region))
    questions, used = run_cascade(region, layouts, config.extract, observer)

    if not questions and how not in ("document", "whole"):
        # the boundary guess can cut too much; retry on the whole body
        questions, used = run_cascade(document_body(text), layouts, config.extract, observer)

    if questions:
        logger.info("extracted %d question(s) with layout %s", len(questions), used)
        emit(observer, STAGE, "extracted", layout=used, count=len(questions))
    else:
        logger.info("no question structure detected")
        emit(observer, STAGE, "no_structure")
    return questions


# ---------------- Output ----------------

def questions_to_records(questions: Iterable[Question]) -> List[dict]:
    return [q.to_dict() for q in questions]


def questions_to_yaml(questions: Iterable[Question]) -> str:
    records = questions_to_records(questions)
    for rec in records:
        for k in ["prompt", "solution"]:
            rec[k] = blockify(rec[k])
    return yaml.safe_dump(records, sort_keys=False, allow_unicode=True)


def questions_to_json(questions: Iterable[Question]) -> str:
    return json.dumps(questions_to_records(questions), indent=2, ensure_ascii=False) + "\n"


# ---------------- Main ----------------

def main(argv: Optional[List[str]] = None) -> int:
    ap = argparse.ArgumentParser(argument_default=None)
    ap.add_argument("input", help="Generated .tex file, or '-' for stdin")
    ap.add_argument("--out", default="-", help="Output file or '-' for stdout")
    ap.add_argument("--format", choices=["yaml", "json"], default="yaml")
    ap.add_argument("--config", help="YAML config file")
    ap.add_argument("--log-level", default="WARNING", help="Logging level (default: WARNING)")
    args = ap.parse_args(argv)

    logging.basicConfig(level=args.log_level.upper(), format="%(levelname)s %(name)s: %(message)s")

    try:
        config = load_config(Path(args.config) if args.config else None)
        text = read_text(args.input)
    except (ConfigError, OSError) as e:
        sys.stderr.write(f"{e}\n")
        return 2

    questions = extract_questions(text, config)
    if not questions:
        print("No questions detected.", file=sys.stderr)
        return 1

    out = questions_to_yaml(questions) if args.format == "yaml" else questions_to_json(questions)
    if args.out == "-" or args.out == "":
        sys.stdout.write(out)
    else:
        out_path = Path(args.out)
        out_path.parent.mkdir(parents=True, exist_ok=True)
        out_path.write_text(out, encoding="utf-8")
        print(f"Wrote {len(questions)} question(s) to {out_path}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
