#!/usr/bin/env python3
r"""
Render question/solution fragments of a generated paper as HTML.

This is a preview, not a typesetter. A fixed set of commands is mapped:
    \textbf{..} / \textit{..} / \emph{..} / \underline{..} / \texttt{..}
    \section*{..}, \subsection*{..}, center, \fbox{\parbox{..}{..}}
    itemize / enumerate (with [..] options), \item[..]
    {\Large ..} and other size groups, \vspace / \hspace / \quad
    \rule / \hrule / \newpage, \\ and \newline, escaped & % # _ { }
Preamble and page-style commands are dropped. Anything else is left as
literal text. Math ($..$, $$..$$, \[..\], \(..\)) is passed through so a
math typesetter (KaTeX auto-render) can run over the result afterwards.

Usage:
  python -m examtex.render_html generated.tex --out build/preview.html
"""


from __future__ import annotations
import argparse
import html
import logging
import re
import sys
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Tuple

from examtex.common import brace_pairs, find_protected_spans, read_text
from examtex.config import ConfigError, load_config
from examtex.extract_questions import extract_questions
from examtex.extractors.common import Question

logger = logging.getLogger(__name__)


# ---------------- Math passthrough ----------------

MATH_TOKEN_RE = re.compile("\x00(\\d+)\x00")


def protect_math(text: str) -> Tuple[str, List[str]]:
    """Swap math and verbatim spans for \\x00N\\x00 tokens no rewrite touches."""
    text = text.replace("\x00", "")
    kept: List[str] = []
    parts: List[str] = []
    pos = 0
    for start, end, kind in find_protected_spans(text):
        if kind == "comment-line":
            continue
        parts.append(text[pos:start])
        parts.append(f"\x00{len(kept)}\x00")
        kept.append(text[start:end])
        pos = end
    parts.append(text[pos:])
    return "".join(parts), kept


def restore_math(text: str, kept: List[str]) -> str:
    return MATH_TOKEN_RE.sub(lambda m: kept[int(m.group(1))], text)


# ---------------- Preamble ----------------

PREAMBLE_RES = [
    re.compile(r"\\(?:documentclass|usepackage)(?:\[[^\]]{0,200}\])?\{[^}]{0,200}\}"),
    re.compile(r"\\(?:begin|end)\{document\}"),
    re.compile(r"\\(?:maketitle|noindent|centering|fancyhf\{\})"),
]


def strip_preamble(text: str) -> str:
    for rx in PREAMBLE_RES:
        text = rx.sub("", text)
    return text


# ---------------- Commands ----------------

# (start, end, replacement) over the text being rewritten.
Edit = Tuple[int, int, str]
# Start and end index of each argument's braces.
Groups = List[Tuple[int, int]]

LENGTH_RE = re.compile(r"-?\d*\.?\d+\s*(?:cm|mm|in|pt|em|ex|px)")


def css_length(arg: str, default: str = "1em") -> str:
    arg = arg.strip()
    return arg.replace(" ", "") if LENGTH_RE.fullmatch(arg) else default


def _drop(text: str, pairs: Dict[int, int], start: int, groups: Groups, end: int) -> List[Edit]:
    return [(start, end, "")]


def _wrap(open_tag: str, close_tag: str, strip: bool = False) -> Callable[..., List[Edit]]:
    def edits(text: str, pairs: Dict[int, int], start: int, groups: Groups, end: int) -> List[Edit]:
        o, c = groups[-1]
        o += 1
        if strip:
            while o < c and text[o].isspace():
                o += 1
            while c > o and text[c - 1].isspace():
                c -= 1
        return [(start, o, open_tag), (c, end, close_tag)]
    return edits


def _space(template: str) -> Callable[..., List[Edit]]:
    def edits(text: str, pairs: Dict[int, int], start: int, groups: Groups, end: int) -> List[Edit]:
        o, c = groups[0]
        return [(start, end, template.format(css_length(text[o + 1:c])))]
    return edits


PARBOX_RE = re.compile(r"\s*\\parbox(?:\[[^\]\n]{0,200}\])?\s*")


def _fbox(text: str, pairs: Dict[int, int], start: int, groups: Groups, end: int) -> List[Edit]:
    # \fbox{\parbox{width}{content}} is the instructions box
    o, c = groups[0]
    m = PARBOX_RE.match(text, o + 1)
    if m and m.end() in pairs:
        j = pairs[m.end()] + 1
        while j < c and text[j] in " \t\n":
            j += 1
        if j in pairs and pairs[j] < c:
            return [(start, j + 1, '<div class="boxed">'), (pairs[j], end, "</div>")]
    return _wrap('<span class="framed">', "</span>")(text, pairs, start, groups, end)


# name -> (brace arguments, takes [..] first, edits)
COMMANDS: Dict[str, Tuple[int, bool, Callable[..., List[Edit]]]] = {
    # preamble and page furniture
    "geometry": (1, False, _drop),
    "pagestyle": (1, False, _drop),
    "thispagestyle": (1, False, _drop),
    "title": (1, False, _drop),
    "author": (1, False, _drop),
    "date": (1, False, _drop),
    "phantom": (1, False, _drop),
    "fancyhead": (1, True, _drop),
    "fancyfoot": (1, True, _drop),
    "setlength": (2, False, _drop),
    "addtolength": (2, False, _drop),
    # blocks
    "fbox": (1, False, _fbox),
    "framebox": (1, True, _fbox),
    "section": (1, False, _wrap("<h2>", "</h2>", strip=True)),
    "subsection": (1, False, _wrap("<h3>", "</h3>", strip=True)),
    "subsubsection": (1, False, _wrap("<h4>", "</h4>", strip=True)),
    "vspace": (1, False, _space('<div class="vspace" style="height:{}"></div>')),
    # inline
    "textbf": (1, False, _wrap("<strong>", "</strong>")),
    "textit": (1, False, _wrap("<em>", "</em>")),
    "emph": (1, False, _wrap("<em>", "</em>")),
    "underline": (1, False, _wrap("<u>", "</u>")),
    "texttt": (1, False, _wrap("<code>", "</code>")),
    "hspace": (1, False, _space('<span class="hspace" style="display:inline-block;width:{}"></span>')),
}
COMMAND_RE = re.compile(
    r"\\(?P<name>" + "|".join(sorted(COMMANDS, key=len, reverse=True)) + r")\*?(?![A-Za-z])"
)
OPTIONAL_ARG_RE = re.compile(r"\s*\[[^\]\n]{0,200}\]")

SIZES = {
    "Huge": "text-huge", "huge": "text-huge", "LARGE": "text-xlarge",
    "Large": "text-large", "large": "text-medium", "normalsize": "text-normal",
    "small": "text-small", "footnotesize": "text-small", "scriptsize": "text-xsmall",
    "tiny": "text-xsmall",
}
SIZE_NAMES = "|".join(SIZES)
SIZE_GROUP_RE = re.compile(r"\{\\(?P<size>" + SIZE_NAMES + r")(?![A-Za-z])\s*")


def apply_edits(text: str, edits: List[Edit]) -> str:
    """Apply edits left to right; an edit inside an earlier replaced range is dropped."""
    parts: List[str] = []
    pos = 0
    for start, end, replacement in sorted(edits):
        if start < pos:
            continue
        parts.append(text[pos:start])
        parts.append(replacement)
        pos = end
    parts.append(text[pos:])
    return "".join(parts)


def rewrite_commands(text: str) -> str:
    r"""
    Rewrite every command in COMMANDS and every {\size ..} group in one scan.

    Arguments are balanced-brace groups. A command whose arguments are
    missing or never close is left as it is. Nested commands are handled
    in the same scan, since a wrapping command only edits its own name and
    braces.
    """
    pairs = brace_pairs(text)
    edits: List[Edit] = []
    arg_opens = set()
    for m in COMMAND_RE.finditer(text):
        nargs, optional, make_edits = COMMANDS[m.group("name")]
        i = m.end()
        if optional:
            opt = OPTIONAL_ARG_RE.match(text, i)
            if opt:
                i = opt.end()
        groups: Groups = []
        for _ in range(nargs):
            while i < len(text) and text[i] in " \t\n":
                i += 1
            if i not in pairs:
                break
            groups.append((i, pairs[i]))
            i = pairs[i] + 1
        if len(groups) != nargs:
            continue
        arg_opens.update(o for o, _c in groups)
        edits.extend(make_edits(text, pairs, m.start(), groups, i))

    for m in SIZE_GROUP_RE.finditer(text):
        close = pairs.get(m.start())
        if close is None or m.start() in arg_opens:
            continue
        edits.append((m.start(), m.end(), f'<span class="{SIZES[m.group("size")]}">'))
        edits.append((close, close + 1, "</span>"))
    return apply_edits(text, edits)


# ---------------- Blocks ----------------

ALIGN_CLASS = {"center": "center", "flushleft": "left", "flushright": "right"}
ALIGN_BEGIN_RE = re.compile(r"\\begin\{(center|flushleft|flushright)\}")
ALIGN_END_RE = re.compile(r"\\end\{(?:center|flushleft|flushright)\}")

LIST_RES = [
    (re.compile(r"\\begin\{itemize\}(?:\s*\[[^\]\n]{0,200}\])?"), "<ul>"),
    (re.compile(r"\\end\{itemize\}"), "</ul>"),
    (re.compile(r"\\begin\{enumerate\}(?:\s*\[[^\]\n]{0,200}\])?"), "<ol>"),
    (re.compile(r"\\end\{enumerate\}"), "</ol>"),
    (re.compile(r"\\begin\{description\}(?:\s*\[[^\]\n]{0,200}\])?"), "<dl>"),
    (re.compile(r"\\end\{description\}"), "</dl>"),
    (re.compile(r"\\item\s*\[([^\]\n]{0,200})\]\s*"), r'<li><span class="item-label">\1</span> '),
    (re.compile(r"\\item(?![A-Za-z])\s*"), "<li>"),
]

RULE_RES = [
    (re.compile(r"\\rule(?:\[[^\]]{0,50}\])?\{[^}]{0,100}\}\{[^}]{0,100}\}"), "<hr/>"),
    (re.compile(r"\\(?:hrule|hline)(?![A-Za-z])"), "<hr/>"),
    (re.compile(r"\\(?:newpage|clearpage|pagebreak)(?![A-Za-z])"), '<hr class="page-break"/>'),
]

SKIPS = {"bigskip": "1.5em", "medskip": "1em", "smallskip": "0.5em"}
SKIP_RE = re.compile(r"\\(bigskip|medskip|smallskip)(?![A-Za-z])")


def render_blocks(text: str) -> str:
    text = ALIGN_BEGIN_RE.sub(lambda m: f'<div class="{ALIGN_CLASS[m.group(1)]}">', text)
    text = ALIGN_END_RE.sub("</div>", text)
    for rx, repl in LIST_RES:
        text = rx.sub(repl, text)
    for rx, repl in RULE_RES:
        text = rx.sub(repl, text)
    return SKIP_RE.sub(
        lambda m: f'<div class="vspace" style="height:{SKIPS[m.group(1)]}"></div>', text
    )


# ---------------- Inline ----------------

SIZE_SWITCH_RE = re.compile(r"\\(?:" + SIZE_NAMES + r")(?![A-Za-z])\s*")
LINE_BREAK_RE = re.compile(r"\\\\(?:[ \t]*\[[^\]\n]{0,40}\])?|\\(?:newline|linebreak)(?![A-Za-z])[ \t]*")
QUAD_RE = re.compile(r"\\(q?quad)(?![A-Za-z])")
CARET_RE = re.compile(r"\\\^\{\}")
ESCAPED_RE = re.compile(r"\\([&%#_{}])")
CONTROL_SPACE_RE = re.compile(r"\\ ")
PAR_RE = re.compile(r"\\par(?![A-Za-z])\s*")


def render_inline(text: str) -> str:
    text = SIZE_SWITCH_RE.sub("", text)
    text = QUAD_RE.sub(
        lambda m: '<span class="hspace" style="display:inline-block;width:'
        + ("2em" if m.group(1) == "qquad" else "1em") + '"></span>',
        text,
    )
    text = LINE_BREAK_RE.sub("<br/>", text)
    text = PAR_RE.sub("\n\n", text)
    text = CARET_RE.sub("^", text)
    text = CONTROL_SPACE_RE.sub(" ", text)
    return ESCAPED_RE.sub(r"\1", text)


# ---------------- Paragraphs ----------------

PARAGRAPH_SPLIT_RE = re.compile(r"\n[ \t]*\n\s*")
BLOCK_START_RE = re.compile(r"^<(?:div|h[1-6]|ul|ol|dl|hr|p|table|blockquote)\b")


def wrap_paragraphs(text: str) -> str:
    paras = [p.strip() for p in PARAGRAPH_SPLIT_RE.split(text.strip())]
    paras = [p for p in paras if p]
    if len(paras) <= 1:
        return paras[0] if paras else ""
    return "\n".join(p if BLOCK_START_RE.match(p) else f"<p>{p}</p>" for p in paras)


def render_fragment(fragment: str) -> str:
    """Convert one question or solution fragment to an HTML fragment."""
    text = str(fragment or "")
    text = text.replace("<", "&lt;").replace(">", "&gt;")
    text, kept = protect_math(text)
    text = strip_preamble(text)
    text = rewrite_commands(text)
    text = render_blocks(text)
    text = render_inline(text)
    return restore_math(wrap_paragraphs(text), kept)


def render_question(q: Question) -> Dict[str, Any]:
    return {
        "number": q.number,
        "marks": q.marks,
        "prompt_html": render_fragment(q.prompt),
        "solution_html": render_fragment(q.solution) if q.solution else "",
    }


# ---------------- Preview page ----------------

KATEX = "https://cdn.jsdelivr.net/npm/katex@0.16.9/dist"


def build_preview_page(text: str, questions: List[Question], title: str = "Generated Questions") -> str:
    lines: List[str] = []
    lines.append("<!DOCTYPE html>")
    lines.append('<html lang="en">')
    lines.append("<head>")
    lines.append('<meta charset="utf-8"/>')
    lines.append(f"<title>{html.escape(title)}</title>")
    lines.append(f'<link rel="stylesheet" href="{KATEX}/katex.min.css"/>')
    lines.append(f'<script defer src="{KATEX}/katex.min.js"></script>')
    lines.append(f'<script defer src="{KATEX}/contrib/auto-render.min.js"></script>')
    lines.append("</head>")
    lines.append("<body>")
    lines.append(f"<h1>{html.escape(title)}</h1>")

    if questions:
        lines.append(f"<p>{len(questions)} question{'s' if len(questions) != 1 else ''} found</p>")
        for q in questions:
            r = render_question(q)
            marks = f' <span class="marks">[{html.escape(r["marks"])}]</span>' if r["marks"] else ""
            lines.append(f'<section class="question" id="q{r["number"]}">')
            lines.append(f"<h2>Question {r['number']}{marks}</h2>")
            lines.append(f'<div class="prompt">{r["prompt_html"]}</div>')
            if r["solution_html"]:
                lines.append("<details><summary>See Solution</summary>")
                lines.append(f'<div class="solution">{r["solution_html"]}</div>')
                lines.append("</details>")
            lines.append("</section>")
    else:
        lines.append("<h2>No Questions Detected</h2>")
        lines.append("<p>Questions couldn't be parsed automatically. Showing raw LaTeX content:</p>")
        lines.append(f"<pre>{html.escape(text[:2000])}</pre>")

    lines.append("<script>")
    lines.append('document.addEventListener("DOMContentLoaded", function () {')
    lines.append("  renderMathInElement(document.body, {")
    lines.append("    delimiters: [")
    lines.append('      {left: "$$", right: "$$", display: true},')
    lines.append('      {left: "$", right: "$", display: false},')
    lines.append('      {left: "\\\\[", right: "\\\\]", display: true},')
    lines.append('      {left: "\\\\(", right: "\\\\)", display: false}')
    lines.append("    ],")
    lines.append("    throwOnError: false")
    lines.append("  });")
    lines.append("});")
    lines.append("</script>")
    lines.append("</body>")
    lines.append("</html>")
    return "\n".join(lines) + "\n"


# ---------------- Main ----------------

def main(argv: Optional[List[str]] = None) -> int:
    ap = argparse.ArgumentParser(argument_default=None)
    ap.add_argument("input", help="Generated .tex file, or '-' for stdin")
    ap.add_argument("--out", default="-", help="Output file or '-' for stdout")
    ap.add_argument("--title", default="Generated Questions")
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

    page = build_preview_page(text, extract_questions(text, config), args.title)
    if args.out == "-" or args.out == "":
        sys.stdout.write(page)
    else:
        out_path = Path(args.out)
        out_path.parent.mkdir(parents=True, exist_ok=True)
        out_path.write_text(page, encoding="utf-8")
        print(f"Wrote {out_path}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
