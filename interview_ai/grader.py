"""Grade a coding submission against its reference solution with the LLM."""
from __future__ import annotations

import logging
import math
from typing import TYPE_CHECKING

from interview_ai.errors import MissingReferenceSolution
from interview_ai.models import VERDICTS, GradeResult, Question, SamplingConfig
from interview_ai.parsers.response_parser import parse
from interview_ai.prompts import build_grading_prompts

if TYPE_CHECKING:
    from interview_ai.providers.base import CompletionClient

_log = logging.getLogger("interview_ai.grader")

GRADING_SAMPLING = SamplingConfig(temperature=0.0, max_tokens=800)


def _coerce_score(value) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, str):
        try:
            value = float(value.strip())
        except ValueError:
            return None
    if not isinstance(value, (int, float)):
        return None
    try:
        value = float(value)
    except OverflowError:
        return None
    if not math.isfinite(value):
        return None
    score = int(round(value))
    return score if 0 <= score <= 100 else None


def parse_grade(raw: str | None) -> GradeResult:
    """Build a GradeResult from the grader's reply.

    Anything that is not a complete ``{score, verdict, feedback}`` object
    comes back ungraded (verdict None) with the raw text as feedback.
    """
    data = parse(raw)
    if isinstance(data, dict):
        score = _coerce_score(data.get("score"))
        verdict = data.get("verdict")
        verdict = verdict.strip().lower() if isinstance(verdict, str) else None
        feedback = data.get("feedback")
        if score is not None and verdict in VERDICTS and isinstance(feedback, str):
            return GradeResult(score=score, verdict=verdict, feedback=feedback, raw=raw)
    _log.info("Grader reply not gradeable, returning raw text")
    return GradeResult(score=None, verdict=None, feedback=raw or "", raw=raw)


async def grade(client: CompletionClient, question: Question, submission: str) -> GradeResult:
    if not question.reference_solution:
        raise MissingReferenceSolution()
    system, user = build_grading_prompts(question, submission or "")
    raw = await client.complete(system, user, GRADING_SAMPLING)
    return parse_grade(raw)
