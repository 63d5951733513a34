"""
Common helpers for examtex tools.

Shared by the sanitizer, the question extractor and the HTML renderer:
  - trace events for an injectable observer (instead of ad hoc prints)
  - escape-aware scanning helpers (backslash runs, brace groups, and
    the math/verbatim spans that other rewrites must leave alone)
  - YAML helpers (block scalars for multi-line question text)

Typical use:
  from examtex.common import emit, TraceEvent

  events = []
  sanitize_latex(doc, observer=events.append)
"""

from __future__ import annotations
import logging
import re
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Set, Tuple

import yaml

logger = logging.getLogger(__name__)


# ---------- Trace events ----------

@dataclass(frozen=True)
class TraceEvent:
    """One structured event from a pipeline stage (sanitize/extract/render)."""
    stage: str
    name: str
    data: Dict[str, Any] = field(default_factory=dict)

Observer = Callable[[TraceEvent], None]

def emit(observer: Optional[Observer], stage: str, name: str, **data: Any) -> None:
    """Log an event at debug level and hand it to the observer, if any."""
    event = TraceEvent(stage, name, data)
    logger.debug("%s.%s %s", stage, name, data)
    if observer is None:
        return
    try:
        observer(event)
    except Exception:
        logger.exception("observer failed on %s.%s", stage, name)


# ---------- Escape-aware scanning ----------

# Zero or more backslash pairs not preceded by another backslash; a character
# following this prefix is NOT escaped.
UNESCAPED = r"(?<!\\)((?:\\\\)*)"

BRACE_TOKEN_RE = re.compile(r"\\.|[{}]", re.DOTALL)

def brace_pairs(text: str) -> Dict[int, int]:
    """
    Map the index of every unescaped "{" to the index of its matching "}".
    Groups that never close are left out. One pass over the text.
    """
    pairs: Dict[int, int] = {}
    stack: List[int] = []
    for m in BRACE_TOKEN_RE.finditer(text):
        tok = m.group(0)
        if tok == "{":
            stack.append(m.start())
        elif tok == "}" and stack:
            pairs[stack.pop()] = m.start()
    return pairs

def count_braces(text: str) -> Tuple[int, int]:
    """Count unescaped opening and closing braces."""
    opens = len(re.findall(UNESCAPED + r"\{", text))
    closes = len(re.findall(UNESCAPED + r"\}", text))
    return opens, closes


# ---------- Math, verbatim and comment spans ----------

MATH_ENVS = ("equation", "align", "alignat", "gather", "multline", "flalign",
             "eqnarray", "displaymath", "math")
VERBATIM_ENVS = ("verbatim", "Verbatim", "lstlisting", "minted")

# Where a span can start. \\ \$ \% are consumed as plain text, so the
# line break in "\\[2mm]" never opens display math. $$ is tried before $.
SPAN_START_RE = re.compile(
    r"""
      (?P<plain>\\[\\$%])
    | (?P<comment>^[ \t]*%[^\n]*)
    | (?P<verb>\\verb\*?(?P<delim>[^A-Za-z\s*])[^\n]{0,500}?(?P=delim))
    | (?P<open>\$\$|\$|\\\[|\\\(|\\begin\{(?P<env>"""
    + "|".join(MATH_ENVS + VERBATIM_ENVS)
    + r""")(?P<star>\*?)\})
    """,
    re.VERBOSE | re.MULTILINE,
)
INLINE_MATH_REST_RE = re.compile(r"(?:\\.|[^$\\])+\$", re.DOTALL)
CLOSERS = {"$$": "$$", "\\[": "\\]", "\\(": "\\)"}


def _span_end(text: str, m: re.Match, unclosed: Set[str]) -> Optional[int]:
    opener = m.group("open")
    if opener == "$":
        rest = INLINE_MATH_REST_RE.match(text, m.end())
        return rest.end() if rest else None
    closer = CLOSERS.get(opener) or "\\end{%s%s}" % (m.group("env"), m.group("star"))
    # once a closer is missing after some point it is missing after every later one
    if closer in unclosed:
        return None
    at = text.find(closer, m.end())
    if at == -1:
        unclosed.add(closer)
        return None
    return at + len(closer)


def find_protected_spans(text: str) -> List[Tuple[int, int, str]]:
    """
    Locate math, verbatim and whole comment-line spans.

    Returns (start, end, kind) triples in document order, where kind is
    one of comment-line, verbatim, display-math, inline-math. An opener
    that never closes is plain text. Runs in time linear in the text.
    """
    spans: List[Tuple[int, int, str]] = []
    unclosed: Set[str] = set()
    pos = 0
    while True:
        m = SPAN_START_RE.search(text, pos)
        if not m:
            return spans
        group = m.lastgroup
        if group == "plain":
            pos = m.end()
            continue
        if group == "comment":
            spans.append((m.start(), m.end(), "comment-line"))
            pos = m.end()
            continue
        if group == "verb":
            spans.append((m.start(), m.end(), "verbatim"))
            pos = m.end()
            continue

        end = _span_end(text, m, unclosed)
        opener = m.group("open")
        if end is None:
            # an unclosed $$ may still start $..$ one character later
            pos = m.start() + 1 if opener == "$$" else m.end()
            continue
        env = m.group("env")
        if env in VERBATIM_ENVS:
            kind = "verbatim"
        elif opener in ("$", "\\("):
            kind = "inline-math"
        else:
            kind = "display-math"
        spans.append((m.start(), end, kind))
        pos = end


# ---------- YAML block-scalar helper ----------
class LiteralStr(str): pass
def _repr_literal(dumper, data):
    return dumper.represent_scalar("tag:yaml.org,2002:str", data, style="|")
yaml.add_representer(LiteralStr, _repr_literal)
yaml.SafeDumper.add_representer(LiteralStr, _repr_literal)

def blockify(s: Optional[str]) -> Optional[str]:
    if s is None:
        return None
    s = str(s)
    if "\n" in s:
        return LiteralStr(s.rstrip("\n"))
    return s

def read_text(path: str) -> str:
    """Read a document from a path, or stdin when path is '-'."""
    if path == "-":
        return sys.stdin.read()
    return Path(path).read_text(encoding="utf-8")
