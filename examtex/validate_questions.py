#!/usr/bin/env python3
r"""
Validate extracted question files (YAML or JSON) against JSON Schema and
lint the LaTeX they carry.

Structural rules (always errors):
  - the file matches schemas/question-list.schema.json
  - question numbers are unique and ascending

Lint rules (default: warn):
  - balanced $ inline math and $$ display math (escaped \$ ignored)
  - balanced braces

Usage:
  python -m examtex.validate_questions [FILES or GLOBS...]
Options:
  --schema PATH                   Schema JSON (default: bundled question-list schema)
  --lint-level {off,warn,error}   Lint severity (default: warn)

Examples:
  python -m examtex.validate_questions build/questions.yaml
  python -m examtex.validate_questions --lint-level error "build/*.json"
"""

from __future__ import annotations
import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Iterable, List, Tuple

import yaml
from jsonschema import Draft202012Validator

from examtex.common import count_braces
from examtex.config import SCHEMA_DIR

logger = logging.getLogger(__name__)

SCHEMA_PATH = SCHEMA_DIR / "question-list.schema.json"
SUFFIXES = {".yaml", ".yml", ".json"}

# ---------------- Loading ----------------

def load_schema(path: Path) -> dict:
    return json.loads(path.read_text(encoding="utf-8"))


def load_questions(path: Path) -> Any:
    text = path.read_text(encoding="utf-8")
    if path.suffix.lower() == ".json":
        try:
            return json.loads(text)
        except json.JSONDecodeError as e:
            raise ValueError(f"JSON parse error: {e}") from e
    try:
        return yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise ValueError(f"YAML parse error: {e}") from e

# ---------------- Ordering ----------------

def check_numbering(records: List[dict]) -> Iterable[str]:
    prev = 0
    seen = set()
    for i, rec in enumerate(records):
        n = rec["number"]
        if n in seen:
            yield f"[{i}].number: duplicate question number {n}"
        elif n < prev:
            yield f"[{i}].number: {n} comes after {prev}"
        seen.add(n)
        prev = max(prev, n)

# ---------------- Lint ----------------

def check_dollar_balance(text: str) -> Iterable[str]:
    src = text.replace("\\$", "")
    if src.count("$$") % 2 != 0:
        yield "unbalanced $$ display-math delimiters"
    if src.replace("$$", "").count("$") % 2 != 0:
        yield "unbalanced $ inline-math delimiters"


def check_brace_balance(text: str) -> Iterable[str]:
    opens, closes = count_braces(text)
    if opens != closes:
        yield f"unbalanced braces ({opens} open, {closes} close)"


def lint_record(index: int, rec: dict) -> List[Tuple[str, str]]:
    problems: List[Tuple[str, str]] = []
    for field in ("prompt", "solution"):
        text = rec.get(field) or ""
        for msg in list(check_dollar_balance(text)) + list(check_brace_balance(text)):
            problems.append((f"[{index}].{field}", msg))
    return problems

# ---------------- Validation orchestration ----------------

def report(path: Path, status: str, lines: Iterable[str] = (), mark: str = "-") -> None:
    print(f"{path}: {status}")
    for line in lines:
        print(f"  {mark} {line}")


def validate_file(path: Path, validator: Draft202012Validator, lint_level: str) -> int:
    try:
        data = load_questions(path)
    except (OSError, ValueError) as e:
        report(path, "FAIL", [f"(root): {e}"])
        return 1

    errors = sorted(validator.iter_errors(data), key=lambda e: (list(e.path), e.message))
    if errors:
        report(path, "FAIL", [f"{'.'.join(str(p) for p in err.path) or '(root)'}: {err.message}" for err in errors])
        return 1

    order_issues = list(check_numbering(data))
    if order_issues:
        report(path, "FAIL", order_issues)
        return 1

    lint_issues = [f"{loc}: {msg}" for i, rec in enumerate(data) for loc, msg in lint_record(i, rec)]
    level = lint_level.lower()
    if not lint_issues:
        report(path, "OK")
    elif level == "off":
        report(path, "OK  (lint skipped)")
    elif level == "warn":
        plural = "s" if len(lint_issues) != 1 else ""
        report(path, f"OK  (with {len(lint_issues)} lint warning{plural})", lint_issues, mark="!")
    else:
        report(path, "FAIL", lint_issues)
        return 1
    return 0


def expand_globs(patterns: List[str]) -> List[Path]:
    files: List[Path] = []
    for pat in patterns:
        if any(ch in pat for ch in "*?[]"):
            files.extend(Path().glob(pat))
        else:
            files.append(Path(pat))
    uniq: List[Path] = []
    seen = set()
    for p in files:
        if p.is_dir() or p.suffix.lower() not in SUFFIXES:
            continue
        rp = p.resolve()
        if rp not in seen:
            seen.add(rp)
            uniq.append(p)
    return uniq


def main(argv: List[str] | None = None) -> int:
    parser = argparse.ArgumentParser(argument_default=None)
    parser.add_argument("paths", nargs="*", help="Question files (.yaml/.yml/.json) or globs")
    parser.add_argument("--schema", default=str(SCHEMA_PATH), help="Path to schema JSON")
    parser.add_argument("--lint-level", choices=["off", "warn", "error"], default="warn", help="Lint severity")
    args = parser.parse_args(argv)

    try:
        schema = load_schema(Path(args.schema))
    except (OSError, json.JSONDecodeError) as e:
        sys.stderr.write(f"Schema could not be loaded: {args.schema}\n{e}\n")
        return 2
    validator = Draft202012Validator(schema)

    files = expand_globs(args.paths or ["build/*.yaml"])
    if not files:
        print("No question files found to validate.")
        return 1

    failures = 0
    for f in files:
        failures += validate_file(f, validator, args.lint_level)
    logger.debug("validated %d file(s), %d failure(s)", len(files), failures)
    return 1 if failures else 0


if __name__ == "__main__":
    raise SystemExit(main())
