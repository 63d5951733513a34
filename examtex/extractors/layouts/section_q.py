r"""\section*{Question 1 [3 marks]} or \section*{1} ... \section*{Solution}"""
from __future__ import annotations
import re

LAYOUT_NAME = "section_q"
PRIORITY = 60

HEADER = re.compile(
    r"\\section\*\{(?:Question\s+)?(?P<number>\d+)(?:\s*\[(?P<marks>[^\]\n]{1,40})\])?\}"
)
SEPARATOR = re.compile(r"\\section\*\{Solution\}")
