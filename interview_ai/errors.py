"""Exception types raised by the generation and grading pipeline."""
from __future__ import annotations


class InterviewAIError(Exception):
    code = "internal_error"


class InvalidRequest(InterviewAIError):
    code = "invalid_request"


class UpstreamUnavailable(InterviewAIError):
    code = "upstream_unavailable"


class CredentialMissing(UpstreamUnavailable):
    code = "credential_missing"

    def __init__(self, message: str = "OpenAI key not configured on server"):
        super().__init__(message)


class UpstreamError(InterviewAIError):
    """The completion service answered with a non-success HTTP status."""

    code = "upstream_error"

    def __init__(self, status: int, body: str):
        super().__init__(f"completion service returned HTTP {status}")
        self.status = status
        self.body = body


class UpstreamTransportError(UpstreamError):
    """The completion service could not be reached or did not answer in time."""

    code = "upstream_transport_error"

    def __init__(self, detail: str):
        InterviewAIError.__init__(self, f"completion service unreachable: {detail}")
        self.status = 0
        self.body = detail


class ParseFailure(InterviewAIError):
    code = "parse_failure"


class UnparseableAfterRetry(ParseFailure):
    code = "ai_response_not_parseable_after_retry"

    def __init__(self, raw: str | None):
        super().__init__("corrective response did not contain parseable JSON")
        self.raw = raw


class RelevanceValidationFailed(InterviewAIError):
    code = "ai_response_not_in_language"

    def __init__(self, raw: str | None, problems: list[dict], questions: list):
        super().__init__(f"{len(problems)} question(s) failed relevance validation after retry")
        self.raw = raw
        self.problems = problems
        self.questions = questions


class MissingReferenceSolution(InterviewAIError):
    code = "missing_reference_solution"

    def __init__(self, message: str = "Question must include a referenceSolution to allow AI grading."):
        super().__init__(message)


class SessionClosed(InterviewAIError):
    code = "session_closed"
