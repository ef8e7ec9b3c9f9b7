"""Near-duplicate removal using Jaccard similarity over word sets."""
from __future__ import annotations

import re

from interview_ai.models import Question

SIMILARITY_THRESHOLD = 0.7

_URL_RE = re.compile(r"https?://\S+")
_PUNCT_RE = re.compile(r"[\\/\-_.:,;()\[\]{}\"'`<>]")
_DIGITS_RE = re.compile(r"\d+")
_SPACE_RE = re.compile(r"\s+")


def normalize_text(text: str | None) -> str:
    if not text:
        return ""
    t = str(text).lower()
    t = _URL_RE.sub("", t)
    t = _PUNCT_RE.sub(" ", t)
    t = _DIGITS_RE.sub(" ", t)
    return _SPACE_RE.sub(" ", t).strip()


def _tokens(text: str | None) -> set[str]:
    return set(normalize_text(text).split())


def similarity(a: str | None, b: str | None) -> float:
    """Jaccard index of the two texts' word sets; 0 if either is empty."""
    sa = _tokens(a)
    sb = _tokens(b)
    if not sa or not sb:
        return 0.0
    return len(sa & sb) / len(sa | sb)


def question_text(q: Question) -> str:
    return q.prompt or q.reference_solution or ""


def dedupe(items: list[Question], needed: int) -> list[Question]:
    """Keep questions in order, skipping any too similar to one already kept.

    Stops once *needed* questions are kept.
    """
    kept: list[Question] = []
    kept_texts: list[str] = []
    if needed <= 0:
        return kept
    for q in items:
        text = question_text(q)
        if any(similarity(text, k) > SIMILARITY_THRESHOLD for k in kept_texts):
            continue
        kept.append(q)
        kept_texts.append(text)
        if len(kept) >= needed:
            break
    return kept
