r"""Last resort: "1." or "1)" at the start of a line."""
from __future__ import annotations
import re

from examtex.extractors.common import GENERIC_SOLUTION

LAYOUT_NAME = "numbered_line"
PRIORITY = 70

HEADER = re.compile(r"^[ \t]*(?P<number>\d+)[.)](?!\d)", re.MULTILINE)
SEPARATOR = GENERIC_SOLUTION
