from __future__ import annotations
import logging
import re
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Pattern, Tuple

from examtex.common import Observer, emit
from examtex.config import ExtractConfig

logger = logging.getLogger(__name__)

STAGE = "extract"


# ---------- Records ----------

@dataclass(frozen=True)
class Question:
    number: int
    marks: Optional[str]
    prompt: str
    solution: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "number": self.number,
            "marks": self.marks,
            "prompt": self.prompt,
            "solution": self.solution,
        }


@dataclass(frozen=True)
class Layout:
    """
    One way a generated paper lays out its questions.

    header must define a "number" group and may define "marks" and "lead"
    groups; lead text is kept as the start of the content. A question's
    content runs from the end of its header to the next header of the
    same layout (or \\end{document}). separator splits that content into
    prompt and solution; solution_end, when set, cuts the solution.
    """
    name: str
    priority: int
    header: Pattern[str]
    separator: Pattern[str]
    solution_end: Optional[Pattern[str]] = None


# Solution labels shared by the looser layouts:
#   \subsection*{Solution}, \textbf{Solution:}, Answer:, Ans., a bare
#   "Solution" line. A bare word without punctuation is not a label, so
#   "Answer the following" stays in the prompt.
GENERIC_SOLUTION = re.compile(
    r"\\(?:sub)*section\*?\{(?:Solution|Answer)s?:?\}"
    r"|\\textbf\{(?:Solution|Answer|Ans)\}"
    r"|(?:\\(?:textbf|textit|emph)\{)?\b(?:Solution|Answer|Ans)\s?[:.)]\}?"
    r"|^[ \t]*(?:Solution|Answer)[ \t]*$",
    re.MULTILINE,
)


# ---------- Body narrowing ----------

DOC_START = r"\begin{document}"
DOC_END = r"\end{document}"

QUESTION_SECTION_RE = re.compile(
    r"(?i:\\section\*?\{\s*questions\s*\}|SECTION:\s*QUESTIONS|BEGIN\s+QUESTIONS|Questions\s+Section)"
    r"|\bQUESTIONS\b"
)
HEADER_TABLES_RE = re.compile(r"\\end\{tabular\}.*?\\end\{tabular\}", re.DOTALL)
AFTER_INSTRUCTIONS_RE = re.compile(
    r"\\end\{enumerate\}[\s\S]{0,200}?(\\textbf\{Q|\\noindent\s*\\textbf\{Q|^[ \t]*\d+\.)",
    re.MULTILINE,
)


def document_body(text: str) -> str:
    """Everything from \\begin{document} on, or the whole text."""
    start = text.find(DOC_START)
    return text[start:] if start != -1 else text


def narrow_body(text: str) -> Tuple[str, str]:
    """
    Cut the document down to the region that holds the questions.

    Returns (region, how) where how names the boundary used.
    """
    body = document_body(text)
    how = "document" if DOC_START in text else "whole"

    m = QUESTION_SECTION_RE.search(body)
    if m:
        return body[m.end():], "questions_marker"
    m = HEADER_TABLES_RE.search(body)
    if m:
        return body[m.end():], "header_tables"
    m = AFTER_INSTRUCTIONS_RE.search(body)
    if m:
        return body[m.start(1):], "instructions"
    return body, how


# ---------- Acceptance ----------

BOILERPLATE_PHRASES = (
    "instructions to candidates",
    "general instructions",
    "examination paper",
)


def rejection_reason(number: str, content: str, cfg: ExtractConfig) -> Optional[str]:
    """Why a header match is not a question, or None when it is."""
    try:
        n = int(number)
    except (TypeError, ValueError):
        return "bad_number"
    if n <= 0:
        return "bad_number"
    stripped = content.strip()
    if len(stripped) < cfg.min_content_length:
        return "too_short"
    lower = stripped.lower()
    for phrase in BOILERPLATE_PHRASES + cfg.extra_boilerplate:
        if phrase in lower:
            return "boilerplate"
    if "answer any" in lower and len(stripped) < 100:
        return "boilerplate"
    if "duration:" in lower and "maximum marks:" in lower:
        return "boilerplate"
    return None


def split_solution(layout: Layout, content: str) -> Tuple[str, str]:
    m = layout.separator.search(content)
    if not m:
        return content.strip(), ""
    solution = content[m.end():]
    if layout.solution_end is not None:
        end = layout.solution_end.search(solution)
        if end:
            solution = solution[:end.start()]
    return content[:m.start()].strip(), solution.strip()


# ---------- Running one layout ----------

def run_layout(
    layout: Layout,
    body: str,
    cfg: ExtractConfig,
    observer: Optional[Observer] = None,
) -> List[Question]:
    """All accepted questions for one layout, in document order."""
    headers = list(layout.header.finditer(body))
    out: List[Question] = []
    for i, m in enumerate(headers):
        end = headers[i + 1].start() if i + 1 < len(headers) else len(body)
        content = (m.groupdict().get("lead") or "") + body[m.end():end]
        doc_end = content.find(DOC_END)
        if doc_end != -1:
            content = content[:doc_end]

        number = m.group("number")
        reason = rejection_reason(number, content, cfg)
        if reason is None:
            prompt, solution = split_solution(layout, content)
            if len(prompt) <= cfg.min_prompt_length:
                reason = "short_prompt"
        if reason is not None:
            emit(observer, STAGE, "rejected", layout=layout.name, number=number, reason=reason)
            continue

        marks = m.groupdict().get("marks")
        out.append(Question(int(number), marks.strip() if marks else None, prompt, solution))
    return out


def dedupe_and_sort(questions: List[Question]) -> List[Question]:
    """Unique by number (first occurrence wins), ascending."""
    seen: Dict[int, Question] = {}
    for q in questions:
        if q.number in seen:
            logger.debug("dropping repeated question number %d", q.number)
            continue
        seen[q.number] = q
    return [seen[n] for n in sorted(seen)]
