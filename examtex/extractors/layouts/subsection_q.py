r"""\subsection*{Question 1 [3 marks]} ... \subsection*{Solution} ... \vspace"""
from __future__ import annotations
import re

LAYOUT_NAME = "subsection_q"
PRIORITY = 40

HEADER = re.compile(
    r"\\subsection\*\{(?:Q\.|Question)\s*(?P<number>\d+)\s*\[(?P<marks>[^\]\n]{1,40})\]\}"
)
SEPARATOR = re.compile(r"\\subsection\*\{Solution\}")
SOLUTION_END = re.compile(r"\\vspace")
