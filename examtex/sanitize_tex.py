#!/usr/bin/env python3
r"""
Sanitize model-generated LaTeX so pdflatex can compile it.

Scope:
  - Math ($...$, $$...$$, \[...\], \(...\), equation/align/... environments),
    verbatim (\verb|..|, verbatim/lstlisting) and whole comment lines are
    protected and come back byte-identical.
  - Legacy enumerate options are rewritten for enumitem:
      \begin{enumerate}[(a)]  -> \begin{enumerate}[label=(\alph*)]
  - Bare _ & % # ^ outside protected spans are escaped.
  - Fill-in blanks (two or more underscores) become
      \underline{\hspace{<w>cm}}
  - Brace balance is checked and reported, never repaired.

Sanitizing twice gives the same text as sanitizing once.

Usage:
  python -m examtex.sanitize_tex generated.tex --out build/questions.tex
Options:
  --config FILE        YAML config (see examtex/config.py)
  --strip-solutions    Remove solution sections before writing
"""

from __future__ import annotations
import argparse
import logging
import re
import sys
from collections import Counter
from pathlib import Path
from typing import List, Optional, Tuple

from examtex.common import UNESCAPED, Observer, count_braces, emit, find_protected_spans, read_text
from examtex.config import ConfigError, ExamTexConfig, DEFAULT_CONFIG, load_config

logger = logging.getLogger(__name__)

STAGE = "sanitize"


# ---------------- Protected spans ----------------

# (token, original text, kind), in discovery order.
Span = Tuple[str, str, str]


def _token_prefix(text: str) -> str:
    prefix = "EXAMTEXSPAN"
    while prefix in text:
        prefix += "X"
    return prefix


def protect_spans(text: str) -> Tuple[str, List[Span]]:
    """Replace protected spans with placeholder tokens."""
    prefix = _token_prefix(text)
    spans: List[Span] = []
    parts: List[str] = []
    pos = 0
    for start, end, kind in find_protected_spans(text):
        token = f"{prefix}{len(spans)}Z"
        spans.append((token, text[start:end], kind))
        parts.append(text[pos:start])
        parts.append(token)
        pos = end
    parts.append(text[pos:])
    return "".join(parts), spans


def restore_spans(text: str, spans: List[Span]) -> str:
    """Put protected spans back in a single pass."""
    if not spans:
        return text
    originals = {token: original for token, original, _kind in spans}
    prefix = spans[0][0].rstrip("Z").rstrip("0123456789")
    return re.sub(re.escape(prefix) + r"\d+Z", lambda m: originals.get(m.group(0), m.group(0)), text)


# ---------------- Legacy list options ----------------

LEGACY_ENUM_OPTIONS = [
    ("(a)", r"(\alph*)"),
    ("(A)", r"(\Alph*)"),
    ("(i)", r"(\roman*)"),
    ("(I)", r"(\Roman*)"),
    ("(1)", r"(\arabic*)"),
    ("a)", r"\alph*)"),
    ("A)", r"\Alph*)"),
    ("i)", r"\roman*)"),
    ("1)", r"\arabic*)"),
    ("a.", r"\alph*."),
    ("A.", r"\Alph*."),
    ("i.", r"\roman*."),
    ("1.", r"\arabic*."),
]

LEGACY_ENUM_RE = re.compile(
    r"\\begin\{enumerate\}\s*\[\s*("
    + "|".join(re.escape(old) for old, _new in LEGACY_ENUM_OPTIONS)
    + r")\s*\]"
)
_LEGACY_MAP = dict(LEGACY_ENUM_OPTIONS)


def rewrite_list_options(text: str) -> Tuple[str, int]:
    def repl(m: re.Match) -> str:
        return r"\begin{enumerate}[label=" + _LEGACY_MAP[m.group(1)] + "]"
    return LEGACY_ENUM_RE.subn(repl, text)


STYLE_SPACING_RE = re.compile(r"\\(textbf|textit|emph|underline)\s+\{")

def normalize_command_spacing(text: str) -> str:
    r"""\textbf {x} -> \textbf{x}"""
    return STYLE_SPACING_RE.sub(r"\\\1{", text)


# ---------------- Escaping ----------------

SIMPLE_RESERVED_RE = re.compile(UNESCAPED + r"([_&#])")
PERCENT_RE = re.compile(UNESCAPED + r"%(?=( ?))")
CARET_RE = re.compile(UNESCAPED + r"\^")


def escape_reserved(text: str) -> Tuple[str, Counter]:
    """Escape bare _ & # % ^. Already-escaped characters are left alone."""
    counts: Counter = Counter()

    def simple(m: re.Match) -> str:
        counts[m.group(2)] += 1
        return m.group(1) + "\\" + m.group(2)

    def percent(m: re.Match) -> str:
        counts["%"] += 1
        # a control space keeps the gap after the percent sign explicit
        return m.group(1) + ("\\%\\" if m.group(2) else "\\%")

    def caret(m: re.Match) -> str:
        counts["^"] += 1
        return m.group(1) + "\\^{}"

    text = SIMPLE_RESERVED_RE.sub(simple, text)
    text = PERCENT_RE.sub(percent, text)
    text = CARET_RE.sub(caret, text)
    return text, counts


# ---------------- Fill-in blanks ----------------

BLANK_RUN_RE = re.compile(UNESCAPED + r"((?:\\?_){2,})")


def blank_construct(underscores: int, config: ExamTexConfig = DEFAULT_CONFIG) -> str:
    cfg = config.sanitize
    width = min(underscores * cfg.blank_cm_per_underscore, cfg.blank_max_cm)
    return r"\underline{\hspace{" + f"{round(width, 2):g}" + "cm}}"


def collapse_blank_runs(text: str, config: ExamTexConfig = DEFAULT_CONFIG) -> Tuple[str, int]:
    """Turn runs of raw or escaped underscores into one sized blank."""
    def repl(m: re.Match) -> str:
        return m.group(1) + blank_construct(m.group(2).count("_"), config)
    return BLANK_RUN_RE.subn(repl, text)


# ---------------- Brace balance ----------------

COMMENT_LINE_RE = re.compile(r"^[ \t]*%[^\n]*", re.MULTILINE)


def check_brace_balance(text: str) -> Tuple[int, int]:
    """Return (open, close) counts of unescaped braces outside comment lines."""
    return count_braces(COMMENT_LINE_RE.sub("", text))


# ---------------- Pipeline ----------------

def sanitize_latex(
    text: str,
    config: Optional[ExamTexConfig] = None,
    observer: Optional[Observer] = None,
) -> str:
    """
    Normalize a generated LaTeX document for compilation.

    Never raises on odd input; problems are logged and reported to the
    observer, and a best-effort result is returned.
    """
    config = config or DEFAULT_CONFIG
    text = str(text or "")

    work, spans = protect_spans(text)
    emit(observer, STAGE, "protected", count=len(spans),
         kinds=dict(Counter(kind for _t, _o, kind in spans)))

    work, n_options = rewrite_list_options(work)
    if n_options:
        emit(observer, STAGE, "list_options_rewritten", count=n_options)
    work = normalize_command_spacing(work)

    work, escaped = escape_reserved(work)
    if escaped:
        emit(observer, STAGE, "escaped", counts=dict(escaped))

    work, n_blanks = collapse_blank_runs(work, config)
    if n_blanks:
        emit(observer, STAGE, "blank_runs_collapsed", count=n_blanks)

    out = restore_spans(work, spans)

    opens, closes = check_brace_balance(out)
    if opens != closes:
        if config.sanitize.warn_on_brace_imbalance:
            logger.warning("Unmatched braces detected: %d open, %d close", opens, closes)
        emit(observer, STAGE, "brace_imbalance", open=opens, close=closes)
    return out


# ---------------- Solution stripping ----------------

_NEXT_QUESTION = (
    r"(?=\\noindent\\textbf\{Q\.|\\subsection\*\{Q|\\textbf\{Q\.|\\end\{document\}|\Z)"
)
SOLUTION_BLOCK_RES = [
    re.compile(r"\\subsection\*\{Solution\}.*?" + _NEXT_QUESTION, re.I | re.S),
    re.compile(r"\\noindent\\textbf\{Solution:\}.*?" + _NEXT_QUESTION, re.I | re.S),
    re.compile(r"\\textbf\{Solution[:.]?\}.*?" + _NEXT_QUESTION, re.I | re.S),
    re.compile(r"\n[ \t]*Solution:.*?" + _NEXT_QUESTION, re.I | re.S),
]
VSPACE_RUN_RE = re.compile(r"(?:\\vspace\{[^}\n]*\}\s*){2,}")
RULE_RUN_RE = re.compile(r"(?:\\noindent\\rule\{[^}\n]*\}\{[^}\n]*\}\s*){2,}")
ORPHAN_SOLUTION_RE = re.compile(r"\\(?:textbf|subsection\*)\{Solution\}", re.I)


def strip_solutions(text: str) -> str:
    """Remove solution sections, leaving a question-only paper."""
    out = str(text or "")
    for rx in SOLUTION_BLOCK_RES:
        out = rx.sub("", out)
    out = VSPACE_RUN_RE.sub(lambda _m: "\\vspace{0.5cm}\n", out)
    out = RULE_RUN_RE.sub(lambda _m: "\\noindent\\rule{0.5\\textwidth}{0.3pt}\n", out)
    return ORPHAN_SOLUTION_RE.sub("", out)


# ---------------- Main ----------------

def main(argv: List[str] | None = None) -> int:
    ap = argparse.ArgumentParser(argument_default=None)
    ap.add_argument("input", help="Generated .tex file, or '-' for stdin")
    ap.add_argument("--out", default="-", help="Output file or '-' for stdout")
    ap.add_argument("--config", help="YAML config file")
    ap.add_argument("--strip-solutions", action="store_true", help="Remove solution sections")
    ap.add_argument("--log-level", default="WARNING", help="Logging level (default: WARNING)")
    args = ap.parse_args(argv)

    logging.basicConfig(level=args.log_level.upper(), format="%(levelname)s %(name)s: %(message)s")

    try:
        config = load_config(Path(args.config) if args.config else None)
        text = read_text(args.input)
    except (ConfigError, OSError) as e:
        sys.stderr.write(f"{e}\n")
        return 2

    tex = sanitize_latex(text, config)
    if args.strip_solutions:
        tex = strip_solutions(tex)

    if args.out == "-" or args.out == "":
        sys.stdout.write(tex)
    else:
        out_path = Path(args.out)
        out_path.parent.mkdir(parents=True, exist_ok=True)
        out_path.write_text(tex, encoding="utf-8")
        print(f"Wrote {out_path}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
