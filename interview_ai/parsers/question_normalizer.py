"""Map the question shapes models actually return onto the canonical Question.

Models mix field names freely (``question`` vs ``prompt``, ``options`` vs
``choices``).  Each variant reads its fields in a fixed priority order
instead of probing whatever happens to be present.
"""
from __future__ import annotations

import logging
from collections.abc import Callable

from interview_ai.models import CODING, MULTIPLE_CHOICE, Question, new_id

log = logging.getLogger("interview_ai.normalize")

STRICT = "strict"
LENIENT = "lenient"
MODES = (STRICT, LENIENT)

PLACEHOLDER_SOLUTION = "(no reference solution provided)"

TYPE_KEYS = ("type", "questionType", "qtype")
MC_PROMPT_KEYS = ("question", "prompt")
MC_OPTION_KEYS = ("options", "choices")
MC_INDEX_KEYS = ("correctIndex", "correct_index")
CODING_PROMPT_KEYS = ("prompt", "question")
CODING_SOLUTION_KEYS = ("referenceSolution", "sampleAnswer", "answer")


def _first(raw: dict, keys: tuple[str, ...]):
    for key in keys:
        value = raw.get(key)
        if value is not None:
            return value
    return None


def _text(value) -> str | None:
    if isinstance(value, str) and value.strip():
        return value
    return None


def _type_token(raw: dict) -> str:
    token = _first(raw, TYPE_KEYS)
    return str(token).lower() if token is not None else ""


def detect_kind(raw: dict) -> str | None:
    token = _type_token(raw)
    if "multiple" in token or "mcq" in token or _first(raw, MC_OPTION_KEYS) is not None:
        return MULTIPLE_CHOICE
    if token in ("code", "coding") or raw.get("prompt"):
        return CODING
    return None


def _valid_index(value, options: list) -> bool:
    return (
        isinstance(value, int)
        and not isinstance(value, bool)
        and 0 <= value < len(options)
    )


def _normalize_mc(raw: dict, mode: str) -> dict | None:
    prompt = _text(_first(raw, MC_PROMPT_KEYS))
    if prompt is None:
        return None
    options = _first(raw, MC_OPTION_KEYS)
    options_ok = (
        isinstance(options, list)
        and len(options) >= 2
        and all(isinstance(o, str) for o in options)
    )
    index = _first(raw, MC_INDEX_KEYS)
    index_ok = options_ok and _valid_index(index, options)

    if mode == STRICT:
        if not index_ok:
            return None
        return {"prompt": prompt, "options": list(options), "correct_index": index}

    if not options_ok:
        return {"prompt": prompt, "options": [], "correct_index": None}
    return {
        "prompt": prompt,
        "options": list(options),
        "correct_index": index if index_ok else None,
    }


def _normalize_coding(raw: dict, mode: str) -> dict | None:
    prompt = _text(_first(raw, CODING_PROMPT_KEYS))
    if prompt is None:
        return None
    solution = _text(_first(raw, CODING_SOLUTION_KEYS))
    if solution is None:
        if mode == STRICT:
            return None
        solution = PLACEHOLDER_SOLUTION
    return {"prompt": prompt, "reference_solution": solution}


def normalize(
    raw_item,
    language_fallback: str | None = None,
    *,
    mode: str = STRICT,
    id_factory: Callable[[], str] = new_id,
) -> Question | None:
    """Return a canonical Question for *raw_item*, or None if it is incomplete.

    ``mode="strict"`` drops anything missing a required field.
    ``mode="lenient"`` keeps items that have a prompt and fills the rest with
    display defaults (empty options, no correct index, placeholder solution).
    """
    if mode not in MODES:
        raise ValueError(f"Unknown normalize mode: {mode}")
    if not isinstance(raw_item, dict):
        return None

    kind = detect_kind(raw_item)
    if kind == MULTIPLE_CHOICE:
        fields = _normalize_mc(raw_item, mode)
    elif kind == CODING:
        fields = _normalize_coding(raw_item, mode)
    else:
        return None
    if fields is None:
        return None

    raw_id = raw_item.get("id")
    qid = str(raw_id) if raw_id not in (None, "") else id_factory()
    topic = _text(raw_item.get("topic")) or language_fallback
    return Question(id=qid, kind=kind, topic=topic, **fields)


def grading_subject(raw_item, id_factory: Callable[[], str] = new_id) -> Question | None:
    """Read a coding question sent back by a client for grading.

    Unlike ``normalize`` the reference solution may be missing here; the
    grader decides what to do about that.
    """
    if not isinstance(raw_item, dict):
        return None
    prompt = _text(_first(raw_item, CODING_PROMPT_KEYS))
    if prompt is None:
        return None
    raw_id = raw_item.get("id")
    return Question(
        id=str(raw_id) if raw_id not in (None, "") else id_factory(),
        kind=CODING,
        prompt=prompt,
        reference_solution=_text(_first(raw_item, CODING_SOLUTION_KEYS)),
        topic=_text(raw_item.get("topic")),
    )


def normalize_all(
    items: list,
    language_fallback: str | None = None,
    *,
    mode: str = STRICT,
    id_factory: Callable[[], str] = new_id,
) -> list[Question]:
    questions = []
    for item in items:
        q = normalize(item, language_fallback, mode=mode, id_factory=id_factory)
        if q is not None:
            questions.append(q)
    dropped = len(items) - len(questions)
    if dropped:
        log.info("Normalize: dropped %d of %d item(s) (%s mode)", dropped, len(items), mode)
    return questions
