# adaptive_interview/parsing.py
"""
Loose parsers for free-text model replies.

Small local models rarely follow output instructions exactly, so these scan
for the first usable token and ignore everything around it.
"""

from __future__ import annotations

import re
from typing import Sequence

from adaptive_interview.errors import ModelParseError
from adaptive_interview.models import QuestionDocument

_INT_RE = re.compile(r"\d+")


def extract_score(text: str) -> int:
    """First integer literal in `text`, clamped to 0-100."""
    m = _INT_RE.search(text if isinstance(text, str) else "")
    if m is None:
        raise ModelParseError(f"no score in model reply: {text!r}")
    digits = m.group(0).lstrip("0")
    # clamp before int(): very long digit runs trip the int-string limit
    if len(digits) > 3:
        return 100
    return min(100, int(digits or "0"))


def extract_question(text: str, candidates: Sequence[QuestionDocument]) -> QuestionDocument:
    """
    First candidate, in candidate order, whose id appears anywhere in `text`.
    Ids are matched as plain substrings.
    """
    text = text.strip() if isinstance(text, str) else ""
    for q in candidates:
        qid = str(q.id)
        if qid and qid in text:
            return q
    raise ModelParseError(f"no candidate id in model reply: {text!r}")
