"""Drive the LLM through over-generate → dedupe → validate → corrective retry."""
from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from interview_ai.dedupe import dedupe
from interview_ai.errors import RelevanceValidationFailed, UnparseableAfterRetry, UpstreamError
from interview_ai.models import GenerationRequest, GenerationResult, Question, SamplingConfig, new_id
from interview_ai.parsers.question_normalizer import STRICT, normalize_all
from interview_ai.parsers.response_parser import extract_items, parse
from interview_ai.prompts import (
    build_corrective_prompts,
    build_generation_prompts,
    over_generation_count,
)
from interview_ai.validation import validate

if TYPE_CHECKING:
    from interview_ai.providers.base import CompletionClient

_log = logging.getLogger("interview_ai.qgen")

MAX_GENERATION_ATTEMPTS = 2
MAX_CORRECTIVE_RETRIES = 1

GENERATION_SAMPLING = SamplingConfig(
    temperature=0.6,
    top_p=0.95,
    frequency_penalty=0.5,
    presence_penalty=0.5,
    max_tokens=2000,
)
CORRECTIVE_SAMPLING = SamplingConfig(temperature=0.0, max_tokens=1500)

LOG_TRUNCATE = 1000


@dataclass
class _GenerationState:
    attempts: int = 0
    corrective_retries: int = 0
    pool: list[Question] = field(default_factory=list)
    seen_ids: set[str] = field(default_factory=set)
    last_raw: str | None = None
    last_error: UpstreamError | None = None


def _truncate(text: str | None) -> str:
    if not isinstance(text, str):
        return repr(text)
    return text[:LOG_TRUNCATE].replace("\n", " ")


def _unique_ids(
    questions: list[Question], seen: set[str], id_factory: Callable[[], str]
) -> list[Question]:
    """Re-key questions whose id is already taken (models reuse q1, q2, …)."""
    for q in questions:
        while q.id in seen:
            q.id = id_factory()
        seen.add(q.id)
    return questions


def _collect(
    raw: str | None,
    request: GenerationRequest,
    mode: str,
    id_factory: Callable[[], str],
) -> list[Question] | None:
    """Parse and normalize one response; None when it held no question list."""
    items = extract_items(parse(raw))
    if items is None:
        return None
    return normalize_all(items, request.language, mode=mode, id_factory=id_factory)


async def _corrective_retry(
    client: CompletionClient,
    request: GenerationRequest,
    problems: list[dict],
    generation_count: int,
    mode: str,
    id_factory: Callable[[], str],
) -> GenerationResult:
    system, user = build_corrective_prompts(request, problems, generation_count)
    raw = await client.complete(system, user, CORRECTIVE_SAMPLING)
    _log.info("Corrective response: %s", _truncate(raw))

    collected = _collect(raw, request, mode, id_factory)
    if collected is None:
        raise UnparseableAfterRetry(raw)
    questions = dedupe(_unique_ids(collected, set(), id_factory), request.count)

    validation = validate(questions, request.language, request.role)
    if not validation.ok:
        _log.warning("Corrective retry still failed validation: %s", validation.problems)
        raise RelevanceValidationFailed(raw, validation.problems, questions)
    return GenerationResult(questions=questions[: request.count], raw_assistant_text=raw)


async def generate_questions(
    client: CompletionClient,
    request: GenerationRequest,
    *,
    mode: str = STRICT,
    id_factory: Callable[[], str] = new_id,
) -> GenerationResult:
    """Generate ``request.count`` unique, on-language questions.

    Up to MAX_GENERATION_ATTEMPTS over-generated batches are merged into one
    pool, deduplicated and validated.  A validation failure triggers exactly
    one zero-temperature corrective call; its failure is raised to the
    caller.  An empty pool yields an empty (best-effort) result.
    """
    generation_count = over_generation_count(request.count)
    system, user = build_generation_prompts(request, generation_count)
    state = _GenerationState()
    unique: list[Question] = []

    while state.attempts < MAX_GENERATION_ATTEMPTS:
        state.attempts += 1
        _log.info(
            "Generate %d x %s (attempt %d/%d, requesting %d)",
            request.count, request.language, state.attempts,
            MAX_GENERATION_ATTEMPTS, generation_count,
        )
        try:
            raw = await client.complete(system, user, GENERATION_SAMPLING)
        except UpstreamError as e:
            state.last_error = e
            _log.warning("  Attempt %d: %s", state.attempts, e)
            continue
        state.last_raw = raw
        _log.info("  Assistant content: %s", _truncate(raw))

        collected = _collect(raw, request, mode, id_factory)
        if collected is None:
            _log.info("  Attempt %d: no parseable question list", state.attempts)
        else:
            state.pool.extend(_unique_ids(collected, state.seen_ids, id_factory))

        unique = dedupe(state.pool, request.count)
        if len(unique) >= request.count:
            break

    if not state.pool:
        if state.last_error is not None and state.last_raw is None:
            raise state.last_error
        _log.warning("No questions generated after %d attempt(s)", state.attempts)
        return GenerationResult(questions=[], raw_assistant_text=state.last_raw)

    _log.info("Pool: %d question(s), %d unique", len(state.pool), len(unique))
    validation = validate(unique, request.language, request.role)
    if validation.ok:
        return GenerationResult(questions=unique[: request.count], raw_assistant_text=state.last_raw)

    _log.warning(
        "Validation failed after dedupe, attempting one corrective retry: %s", validation.problems
    )
    if state.corrective_retries >= MAX_CORRECTIVE_RETRIES:
        raise RelevanceValidationFailed(state.last_raw, validation.problems, unique)
    state.corrective_retries += 1
    return await _corrective_retry(
        client, request, validation.problems, generation_count, mode, id_factory,
    )
