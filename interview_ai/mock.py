"""Local stand-ins for generation and grading when mock mode is on."""
from __future__ import annotations

from collections.abc import Callable

from interview_ai.models import (
    CODING,
    MULTIPLE_CHOICE,
    GenerationRequest,
    GenerationResult,
    GradeResult,
    Question,
    new_id,
)

MAX_MOCK_QUESTIONS = 8
MIN_PASSING_LENGTH = 20


def generate_mock_questions(
    request: GenerationRequest, id_factory: Callable[[], str] = new_id
) -> GenerationResult:
    questions = []
    for i in range(min(request.count, MAX_MOCK_QUESTIONS)):
        if i % 4 == 3:
            questions.append(Question(
                id=id_factory(),
                kind=CODING,
                prompt=(
                    f"Write a function in {request.language} that reverses an array and "
                    "returns a new array. Provide a simple example usage."
                ),
                reference_solution=(
                    "function reverseArray(arr) { return arr.slice().reverse(); }\n"
                    "// example: reverseArray([1,2,3]) // [3,2,1]"
                ),
                topic=request.topic,
            ))
        else:
            questions.append(Question(
                id=id_factory(),
                kind=MULTIPLE_CHOICE,
                prompt=f"({request.topic}) What is the output of this {request.language} expression #{i + 1}?",
                options=["Option A", "Option B", "Option C", "Option D"],
                correct_index=i % 3,
                topic=request.topic,
            ))
    return GenerationResult(questions=questions, raw_assistant_text=None)


def heuristic_grade(question: Question, submission: str | None) -> GradeResult:
    if submission and len(submission) > MIN_PASSING_LENGTH:
        return GradeResult(score=90, verdict="pass", feedback="Solution looks reasonable (mock).")
    return GradeResult(score=30, verdict="fail", feedback="Solution too short (mock).")
