r"""\textbf{Q.1} \hfill \textbf{[3 marks]} without the leading \noindent."""
from __future__ import annotations
import re

LAYOUT_NAME = "bold_q_hfill"
PRIORITY = 20

HEADER = re.compile(
    r"\\textbf\{Q\.(?P<number>\d+)\}\s*\\hfill\s*\\textbf\{\[(?P<marks>[^\]\n]{1,40})\]\}"
)
SEPARATOR = re.compile(r"\\textbf\{Solution[:.]?\}|\bSolution\s?[:.]")
