from __future__ import annotations

import uuid
from dataclasses import dataclass, field

from interview_ai.errors import InvalidRequest

MULTIPLE_CHOICE = "multiple_choice"
CODING = "coding"

VERDICTS = ("pass", "partial", "fail")


def new_id() -> str:
    return f"q_{uuid.uuid4().hex[:12]}"


@dataclass
class Question:
    id: str
    kind: str  # multiple_choice | coding
    prompt: str
    options: list[str] = field(default_factory=list)
    correct_index: int | None = None
    reference_solution: str | None = None
    topic: str | None = None

    def to_dict(self) -> dict:
        data: dict = {"id": self.id, "type": self.kind, "prompt": self.prompt}
        if self.kind == MULTIPLE_CHOICE:
            data["options"] = list(self.options)
            data["correctIndex"] = self.correct_index
        else:
            data["referenceSolution"] = self.reference_solution
        if self.topic:
            data["topic"] = self.topic
        return data


@dataclass
class GenerationRequest:
    language: str = "javascript"
    topic: str = "algorithms"
    count: int = 10
    difficulty: str = "medium"
    role: str | None = None
    framework: str | None = None

    @classmethod
    def from_dict(cls, body: dict) -> GenerationRequest:
        count = body.get("count", 10)
        # bool is an int subclass; "true" is not a count
        if isinstance(count, bool) or not isinstance(count, int):
            if isinstance(count, str) and count.strip().isdigit():
                count = int(count.strip())
            else:
                raise InvalidRequest(f"count must be an integer (got {count!r})")
        if count < 1:
            raise InvalidRequest(f"count must be at least 1 (got {count})")
        return cls(
            language=str(body.get("language") or "javascript").strip().lower(),
            topic=str(body.get("topic") or "algorithms"),
            count=count,
            difficulty=str(body.get("difficulty") or "medium"),
            role=body.get("role") or None,
            framework=body.get("framework") or None,
        )


@dataclass
class GenerationResult:
    questions: list[Question]
    raw_assistant_text: str | None = None


@dataclass
class GradeResult:
    score: int | None
    verdict: str | None  # pass | partial | fail, None when ungraded
    feedback: str
    raw: str | None = None

    @property
    def graded(self) -> bool:
        return self.verdict is not None

    def to_dict(self) -> dict:
        data = {"score": self.score, "verdict": self.verdict, "feedback": self.feedback}
        if self.raw is not None and not self.graded:
            data["raw"] = self.raw
        return data


@dataclass
class ValidationResult:
    ok: bool
    problems: list[dict] = field(default_factory=list)
    notes: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {"ok": self.ok, "problems": self.problems}


@dataclass
class SamplingConfig:
    temperature: float = 0.7
    top_p: float | None = None
    frequency_penalty: float | None = None
    presence_penalty: float | None = None
    max_tokens: int | None = None

    def to_dict(self) -> dict:
        """Request parameters, leaving out options that were not set."""
        params = {
            "temperature": self.temperature,
            "top_p": self.top_p,
            "frequency_penalty": self.frequency_penalty,
            "presence_penalty": self.presence_penalty,
            "max_tokens": self.max_tokens,
        }
        return {k: v for k, v in params.items() if v is not None}
