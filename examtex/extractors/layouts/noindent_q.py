r"""\noindent\textbf{Q.1} \hfill \textbf{[3 marks]} ... \noindent\textbf{Solution:} ... \noindent\rule"""
from __future__ import annotations
import re

LAYOUT_NAME = "noindent_q"
PRIORITY = 10

HEADER = re.compile(
    r"\\noindent\s*\\textbf\{Q\.(?P<number>\d+)\}\s*\\hfill\s*\\textbf\{\[(?P<marks>[^\]\n]{1,40})\]\}"
)
SEPARATOR = re.compile(r"\\noindent\s*\\textbf\{Solution:\}")
SOLUTION_END = re.compile(r"\\noindent\s*\\rule")
