"""
Turn a pdflatex log into one short message for the person who asked for the PDF.

Known failures get a plain-language hint; anything else falls back to the
first error lines of the log.
"""

from __future__ import annotations
import logging
import re
from typing import List, Optional

logger = logging.getLogger(__name__)

GENERIC_FAILURE = "LaTeX compilation failed."
MATH_MODE_HINT = (
    "LaTeX syntax error: Math mode issue. "
    "Please check underscores and special characters."
)
INVALID_COMMAND_HINT = "LaTeX syntax error: Invalid command used."
MISSING_PACKAGE_HINT = (
    "Missing LaTeX package. "
    "The generated code uses packages that may not be installed."
)

UNDEFINED_CS_RE = re.compile(r"Undefined control sequence[\s\S]{0,100}")


def error_excerpts(log: str, limit: int = 2) -> List[str]:
    """Error lines ('!' prefix or containing 'Error'), each with two lines of context."""
    lines = log.split("\n")
    out: List[str] = []
    for i, line in enumerate(lines):
        if line.startswith("!") or "Error" in line:
            out.append("\n".join(lines[i:i + 3]))
    if out:
        logger.debug("compiler errors: %s", out[:3])
    return out[:limit]


def diagnose_log(log: Optional[str]) -> str:
    """One human-readable message for a failed compilation log."""
    log = log or ""
    message = GENERIC_FAILURE

    details = error_excerpts(log)
    if details:
        message = " | ".join(details)[:300]

    # later rules win
    if "Missing $ inserted" in log:
        message = MATH_MODE_HINT
    if "Undefined control sequence" in log:
        m = UNDEFINED_CS_RE.search(log)
        message = m.group(0)[:200] if m else INVALID_COMMAND_HINT
    if "! Package" in log:
        message = MISSING_PACKAGE_HINT
    return message
