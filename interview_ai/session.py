"""In-memory interview sessions with a countdown that finalizes exactly once."""
from __future__ import annotations

import asyncio
import logging
import re
import time
import uuid
from collections.abc import Callable
from dataclasses import dataclass, field

from interview_ai.errors import SessionClosed
from interview_ai.models import MULTIPLE_CHOICE, GenerationRequest, GradeResult, Question

log = logging.getLogger("interview_ai.session")

EXPIRED_GRACE_SECONDS = 300.0


def session_duration_minutes(n: int) -> int:
    """Time allowed for *n* questions (bands are inclusive)."""
    if n <= 5:
        return 20
    if n <= 10:
        return 30
    if n <= 16:
        return 40
    return 60


def format_remaining(seconds: float) -> str:
    s = int(seconds)
    if s <= 0:
        return "00:00"
    hrs, rest = divmod(s, 3600)
    mins, secs = divmod(rest, 60)
    if hrs > 0:
        return f"{hrs:02d}:{mins:02d}:{secs:02d}"
    return f"{mins:02d}:{secs:02d}"


def _squash(code: str | None) -> str:
    text = re.sub(r"\s+", "", str(code or ""))
    return re.sub(r";+$", "", text).lower()


@dataclass
class Session:
    id: str
    request: GenerationRequest
    questions: list[Question]
    started_at: float = field(default_factory=time.time)
    answers: dict[str, object] = field(default_factory=dict)
    grades: dict[str, GradeResult] = field(default_factory=dict)
    finalized: bool = False
    finalize_reason: str | None = None

    @property
    def duration_seconds(self) -> int:
        return session_duration_minutes(len(self.questions)) * 60

    @property
    def deadline(self) -> float:
        return self.started_at + self.duration_seconds

    def remaining_seconds(self, now: float | None = None) -> float:
        now = time.time() if now is None else now
        return max(0.0, self.deadline - now)

    def question(self, question_id: str) -> Question:
        for q in self.questions:
            if q.id == question_id:
                return q
        raise KeyError(question_id)

    def record_answer(self, question_id: str, answer) -> None:
        if self.finalized:
            raise SessionClosed(f"Session {self.id} is already finished")
        self.question(question_id)
        self.answers[question_id] = answer

    def attach_grade(self, question_id: str, grade: GradeResult) -> None:
        self.question(question_id)
        self.grades[question_id] = grade

    def finalize(self, reason: str = "manual") -> bool:
        """Close the session; True only for the call that actually closed it."""
        if self.finalized:
            return False
        self.finalized = True
        self.finalize_reason = reason
        log.info("Session %s finalized (%s)", self.id, reason)
        return True

    def score(self) -> dict:
        correct = 0
        details = []
        for q in self.questions:
            given = self.answers.get(q.id)
            if q.kind == MULTIPLE_CHOICE:
                try:
                    is_correct = given is not None and int(given) == q.correct_index
                except (TypeError, ValueError):
                    is_correct = False
                details.append({
                    "id": q.id, "type": q.kind, "prompt": q.prompt, "given": given,
                    "options": q.options, "correctIndex": q.correct_index,
                    "isCorrect": is_correct,
                })
            else:
                grade = self.grades.get(q.id)
                if grade is not None and grade.graded:
                    is_correct = grade.verdict == "pass"
                else:
                    is_correct = bool(given) and bool(q.reference_solution) and (
                        _squash(given) == _squash(q.reference_solution)
                    )
                details.append({
                    "id": q.id, "type": q.kind, "prompt": q.prompt, "given": given,
                    "modelAnswer": q.reference_solution,
                    "grade": grade.to_dict() if grade else None,
                    "isCorrect": is_correct,
                })
            if is_correct:
                correct += 1
        return {"total": len(self.questions), "correct": correct, "details": details}

    def to_dict(self) -> dict:
        return {
            "session_id": self.id,
            "questions": [q.to_dict() for q in self.questions],
            "duration_seconds": self.duration_seconds,
            "remaining_seconds": int(self.remaining_seconds()),
            "remaining": format_remaining(self.remaining_seconds()),
            "finalized": self.finalized,
        }


class SessionTimer:
    """Countdown task that finalizes *session* when its time runs out.

    Expiry and a manual finish may race; ``Session.finalize`` guarantees
    only one of them takes effect, and *on_expire* runs only if the timer won.
    """

    def __init__(self, session: Session, on_expire: Callable[[Session], None] | None = None):
        self.session = session
        self.on_expire = on_expire
        self._task: asyncio.Task | None = None

    def start(self) -> None:
        if self._task is None:
            self._task = asyncio.create_task(self._run())

    async def _run(self) -> None:
        await asyncio.sleep(self.session.remaining_seconds())
        if self.session.finalize("timeout") and self.on_expire is not None:
            self.on_expire(self.session)

    def cancel(self) -> None:
        if self._task is not None and not self._task.done():
            self._task.cancel()

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()


class SessionStore:
    """Live sessions by id.

    A session that times out stays readable for *expired_grace* seconds so a
    late ``/finish`` still gets its summary, then it is evicted.
    """

    def __init__(self, expired_grace: float = EXPIRED_GRACE_SECONDS):
        self.expired_grace = expired_grace
        self._sessions: dict[str, Session] = {}
        self._timers: dict[str, SessionTimer] = {}
        self._evictions: dict[str, asyncio.TimerHandle] = {}

    def create(self, request: GenerationRequest, questions: list[Question]) -> Session:
        session = Session(id=uuid.uuid4().hex, request=request, questions=questions)
        self._sessions[session.id] = session
        return session

    def start_timer(self, session: Session) -> SessionTimer:
        timer = SessionTimer(session, on_expire=self._schedule_eviction)
        self._timers[session.id] = timer
        timer.start()
        return timer

    def _schedule_eviction(self, session: Session) -> None:
        loop = asyncio.get_running_loop()
        self._evictions[session.id] = loop.call_later(
            self.expired_grace, self._evict, session.id
        )

    def _evict(self, session_id: str) -> None:
        self._evictions.pop(session_id, None)
        if self.discard(session_id) is not None:
            log.info("Session %s evicted after timeout", session_id)

    def get(self, session_id: str) -> Session | None:
        return self._sessions.get(session_id)

    def discard(self, session_id: str) -> Session | None:
        timer = self._timers.pop(session_id, None)
        if timer is not None:
            timer.cancel()
        eviction = self._evictions.pop(session_id, None)
        if eviction is not None:
            eviction.cancel()
        return self._sessions.pop(session_id, None)

    def clear(self) -> None:
        for sid in list(self._sessions):
            self.discard(sid)

    def __len__(self) -> int:
        return len(self._sessions)
