"""FastAPI application with all routes."""
from __future__ import annotations

import logging

logging.basicConfig(level=logging.INFO, format="%(name)s | %(message)s")

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException

from interview_ai.config import Settings, load_settings
from interview_ai.errors import (
    CredentialMissing,
    InterviewAIError,
    InvalidRequest,
    MissingReferenceSolution,
    RelevanceValidationFailed,
    SessionClosed,
    UnparseableAfterRetry,
    UpstreamError,
    UpstreamUnavailable,
)
from interview_ai.grader import grade
from interview_ai.mock import generate_mock_questions, heuristic_grade
from interview_ai.models import CODING, GenerationRequest, GenerationResult
from interview_ai.parsers.question_normalizer import grading_subject
from interview_ai.providers.base import CompletionClient, create_client
from interview_ai.question_generator import generate_questions
from interview_ai.session import SessionStore

log = logging.getLogger("interview_ai.app")

app = FastAPI(title="Interview AI")
app.add_middleware(CORSMiddleware, allow_origins=["*"], allow_methods=["*"], allow_headers=["*"])

# Global state (initialized in startup)
_settings: Settings | None = None
_sessions = SessionStore()


def get_settings() -> Settings:
    assert _settings is not None
    return _settings


def _get_client() -> CompletionClient:
    return create_client(get_settings())


def _require_credential() -> None:
    """Refuse before any network call when no API key is configured."""
    if not get_settings().api_key:
        raise CredentialMissing()


async def _json_body(request: Request) -> dict:
    if not await request.body():
        return {}
    try:
        body = await request.json()
    except ValueError:
        raise InvalidRequest("request body must be JSON")
    if not isinstance(body, dict):
        raise InvalidRequest("request body must be a JSON object")
    return body


async def _generate(body: dict) -> tuple[GenerationRequest, GenerationResult]:
    gen_request = GenerationRequest.from_dict(body)
    log.info("Generate request: %s", body)
    s = get_settings()
    if s.mock_mode:
        return gen_request, generate_mock_questions(gen_request)
    _require_credential()
    result = await generate_questions(_get_client(), gen_request, mode=s.normalize_mode)
    return gen_request, result


@app.on_event("startup")
async def startup():
    global _settings
    if _settings is not None:
        return  # Already initialized (e.g. by tests)
    _settings = load_settings()
    if not _settings.mock_mode and not _settings.api_key:
        log.warning(
            "BACKEND_OPENAI_KEY is not set. AI requests will return 500 until you set it."
        )


@app.on_event("shutdown")
async def shutdown():
    _sessions.clear()


# ── Error handlers ────────────────────────────────────────────────────────

def _error(http_status: int, error: str, **detail) -> JSONResponse:
    return JSONResponse({"ok": False, "error": error, **detail}, status_code=http_status)


@app.exception_handler(HTTPException)
async def _http_error(request: Request, exc: HTTPException):
    return _error(exc.status_code, str(exc.detail))


@app.exception_handler(UpstreamUnavailable)
async def _upstream_unavailable(request: Request, exc: UpstreamUnavailable):
    return _error(500, str(exc))


@app.exception_handler(UpstreamError)
async def _upstream_error(request: Request, exc: UpstreamError):
    log.warning("Upstream error %d: %.300s", exc.status, exc.body)
    return _error(502, "OpenAI error", status=exc.status, detail=exc.body)


@app.exception_handler(RelevanceValidationFailed)
async def _relevance_failed(request: Request, exc: RelevanceValidationFailed):
    return _error(
        422, exc.code,
        reason={"ok": False, "problems": exc.problems},
        assistant=exc.raw,
        data={"questions": [q.to_dict() for q in exc.questions]},
    )


@app.exception_handler(UnparseableAfterRetry)
async def _unparseable(request: Request, exc: UnparseableAfterRetry):
    return _error(422, exc.code, assistant=exc.raw)


@app.exception_handler(InvalidRequest)
async def _invalid_request(request: Request, exc: InvalidRequest):
    return _error(400, exc.code, detail=str(exc))


@app.exception_handler(MissingReferenceSolution)
async def _missing_reference(request: Request, exc: MissingReferenceSolution):
    return _error(500, exc.code, detail=str(exc))


@app.exception_handler(SessionClosed)
async def _session_closed(request: Request, exc: SessionClosed):
    return _error(409, exc.code, detail=str(exc))


@app.exception_handler(InterviewAIError)
async def _interview_error(request: Request, exc: InterviewAIError):
    log.warning("%s: %s", type(exc).__name__, exc)
    return _error(500, exc.code, detail=str(exc))


@app.exception_handler(Exception)
async def _unexpected(request: Request, exc: Exception):
    log.exception("Unhandled error on %s", request.url.path)
    return _error(500, "internal_error")


# ── API: Health ───────────────────────────────────────────────────────────

@app.get("/")
async def index():
    return {"ok": True, "message": "Interview AI proxy running"}


# ── API: Generate questions ───────────────────────────────────────────────

@app.post("/api/generate-questions")
async def api_generate_questions(request: Request):
    body = await _json_body(request)
    _, result = await _generate(body)
    response = {
        "ok": True,
        "data": {"questions": [q.to_dict() for q in result.questions]},
        "assistant": result.raw_assistant_text,
    }
    if not result.questions:
        response["warning"] = "no_questions_generated"
    return response


# ── API: Grade code ───────────────────────────────────────────────────────

@app.post("/api/grade-code")
async def api_grade_code(request: Request):
    body = await _json_body(request)
    s = get_settings()
    if not s.mock_mode:
        _require_credential()
    question = grading_subject(body.get("question"))
    if question is None:
        return _error(500, "question is required")
    user_code = body.get("userCode") or ""

    if s.mock_mode:
        result = heuristic_grade(question, user_code)
    else:
        result = await grade(_get_client(), question, user_code)
    return {"ok": True, "data": result.to_dict()}


# ── API: Session management ──────────────────────────────────────────────

def _get_session(session_id):
    session = _sessions.get(str(session_id)) if session_id else None
    if session is None:
        raise HTTPException(404, "Session not found")
    return session


@app.post("/api/session/start")
async def api_session_start(request: Request):
    body = await _json_body(request)
    gen_request, result = await _generate(body)
    if not result.questions:
        return {"ok": False, "error": "no_questions_generated", "session_id": None}

    session = _sessions.create(gen_request, result.questions)
    _sessions.start_timer(session)
    log.info("Session %s started with %d questions", session.id, len(session.questions))
    return {"ok": True, "data": session.to_dict()}


@app.get("/api/session/{session_id}")
async def api_session_get(session_id: str):
    return {"ok": True, "data": _get_session(session_id).to_dict()}


@app.post("/api/session/answer")
async def api_session_answer(request: Request):
    body = await _json_body(request)
    session = _get_session(body.get("session_id"))
    question_id = str(body.get("question_id", ""))
    try:
        question = session.question(question_id)
    except KeyError:
        raise HTTPException(404, "Question not found")

    answer = body.get("answer")
    session.record_answer(question_id, answer)

    grade_result = None
    if body.get("grade") and question.kind == CODING and question.reference_solution:
        s = get_settings()
        if s.mock_mode:
            grade_result = heuristic_grade(question, answer)
        else:
            _require_credential()
            grade_result = await grade(_get_client(), question, str(answer or ""))
        session.attach_grade(question_id, grade_result)

    return {
        "ok": True,
        "data": {
            "question_id": question_id,
            "recorded": True,
            "grade": grade_result.to_dict() if grade_result else None,
        },
    }


@app.post("/api/session/finish")
async def api_session_finish(request: Request):
    body = await _json_body(request)
    session = _get_session(body.get("session_id"))
    session.finalize("manual")
    summary = session.score()
    _sessions.discard(session.id)
    return {
        "ok": True,
        "data": {
            "session_complete": True,
            "finalize_reason": session.finalize_reason,
            "summary": summary,
        },
    }
