r"""Q1 / Q.1 / Question 1, optionally bold or after \noindent, with optional (2 marks)."""
from __future__ import annotations
import re

from examtex.extractors.common import GENERIC_SOLUTION

LAYOUT_NAME = "plain_q"
PRIORITY = 50

HEADER = re.compile(
    r"(?:^[ \t]*|\\noindent\s*)(?:\\textbf\{)?(?:Q\.?|Question)\s*(?P<number>\d+)\}?"
    r"(?:[ \t]*[(\[]?(?P<marks>[^\])\n]{0,30}?marks?)[\])]?)?[:.)]?",
    re.MULTILINE,
)
SEPARATOR = GENERIC_SOLUTION
