r"""\textbf{Q.1} ... [2 marks]: text before the marks bracket opens the prompt."""
from __future__ import annotations
import re

from examtex.extractors.common import GENERIC_SOLUTION

LAYOUT_NAME = "bold_q_marks"
PRIORITY = 30

HEADER = re.compile(
    r"\\textbf\{Q\.(?P<number>\d+)\}(?P<lead>[^\[]{0,200})\[(?P<marks>[^\]\n]{1,40})\]"
)
SEPARATOR = GENERIC_SOLUTION
