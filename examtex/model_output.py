"""Recover the LaTeX document from a language model's chat-style reply."""

from __future__ import annotations
import re
from typing import Optional

FENCED_BLOCK_RE = re.compile(r"```(?:latex)?\s*\n([\s\S]*?)\n```", re.IGNORECASE)
LEADING_FENCE_RE = re.compile(r"^```(?:latex)?\s*\n?", re.IGNORECASE)
TRAILING_FENCE_RE = re.compile(r"\n?```\s*$")
DOCUMENT_START_RE = re.compile(r"\\documentclass[\s\S]*")


def extract_latex_payload(response: Optional[str]) -> str:
    r"""
    Strip markdown fences and chatter around a generated document.

    The first fenced block wins; without one, stray leading/trailing fences
    are removed. Text before \documentclass is dropped when it is present.
    """
    text = (response or "").strip()
    m = FENCED_BLOCK_RE.search(text)
    if m:
        text = m.group(1)
    else:
        text = LEADING_FENCE_RE.sub("", text)
        text = TRAILING_FENCE_RE.sub("", text)
    m = DOCUMENT_START_RE.search(text)
    if m:
        text = m.group(0)
    return text.strip()
