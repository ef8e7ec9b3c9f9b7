"""Command line for the interview question service.

Usage:
  python -m interview_ai serve [--port PORT] [--host HOST]
  python -m interview_ai stop
  python -m interview_ai restart [--port PORT] [--host HOST]
  python -m interview_ai status
  python -m interview_ai generate --language LANG [--count N] [--role R] [--framework F] [--topic T] [--difficulty D]
  python -m interview_ai grade --question FILE --code FILE
"""
from __future__ import annotations

import asyncio
import json
import os
import signal
import sys
import time
from pathlib import Path

PID_PATH = Path(__file__).resolve().parent.parent / ".interview_ai.pid"


def _flag(args: list[str], name: str, default: str | None = None) -> str | None:
    """Value following *name* in *args*, or *default*."""
    if name in args:
        pos = args.index(name)
        if pos + 1 < len(args):
            return args[pos + 1]
    return default


# ── Server process ────────────────────────────────────────────────────────

def _running_pid() -> int | None:
    """PID of a live server, clearing a PID file that points nowhere."""
    try:
        pid = int(PID_PATH.read_text().strip())
    except (FileNotFoundError, ValueError):
        return None
    try:
        os.kill(pid, 0)
    except (ProcessLookupError, PermissionError):
        PID_PATH.unlink(missing_ok=True)
        return None
    return pid


def cmd_status(args: list[str]) -> None:
    pid = _running_pid()
    print(f"Interview AI is running (PID {pid})." if pid else "Interview AI is not running.")


def cmd_stop(args: list[str]) -> bool:
    pid = _running_pid()
    if pid is None:
        print("Interview AI is not running.")
        return False
    try:
        os.kill(pid, signal.SIGTERM)
    except ProcessLookupError:
        pass
    PID_PATH.unlink(missing_ok=True)
    print(f"Sent SIGTERM to PID {pid}.")
    return True


def cmd_serve(args: list[str]) -> None:
    import uvicorn

    from interview_ai.config import load_settings

    pid = _running_pid()
    if pid is not None:
        print(f"Interview AI already running (PID {pid}); use 'restart' or 'stop'.")
        sys.exit(1)

    settings = load_settings()
    host = _flag(args, "--host", "127.0.0.1")
    port = int(_flag(args, "--port", str(settings.port)))
    if not settings.mock_mode and not settings.api_key:
        print("Warning: BACKEND_OPENAI_KEY is not set; AI routes will answer 500.")

    PID_PATH.write_text(str(os.getpid()))
    print(f"Interview AI listening on http://{host}:{port} ({settings.llm_provider}/{settings.llm_model})")
    try:
        uvicorn.run("interview_ai.app:app", host=host, port=port, timeout_graceful_shutdown=5)
    finally:
        PID_PATH.unlink(missing_ok=True)


def cmd_restart(args: list[str]) -> None:
    if cmd_stop(args):
        time.sleep(1)
    cmd_serve(args)


# ── Offline generation and grading ────────────────────────────────────────

def _client():
    from interview_ai.config import load_settings
    from interview_ai.providers.base import create_client

    settings = load_settings()
    if not settings.api_key:
        sys.exit("BACKEND_OPENAI_KEY is not set.")
    try:
        return settings, create_client(settings)
    except ValueError as e:
        sys.exit(str(e))


def cmd_generate(args: list[str]) -> None:
    from interview_ai.errors import InterviewAIError
    from interview_ai.models import GenerationRequest
    from interview_ai.question_generator import generate_questions

    body = {
        "language": _flag(args, "--language", "javascript"),
        "count": _flag(args, "--count", "10"),
        "role": _flag(args, "--role"),
        "framework": _flag(args, "--framework"),
        "topic": _flag(args, "--topic"),
        "difficulty": _flag(args, "--difficulty"),
    }
    try:
        request = GenerationRequest.from_dict(body)
    except InterviewAIError as e:
        sys.exit(str(e))

    settings, client = _client()
    print(f"Asking {client.name()} for {request.count} {request.language} questions...",
          file=sys.stderr)
    try:
        result = asyncio.run(generate_questions(client, request, mode=settings.normalize_mode))
    except InterviewAIError as e:
        print(f"{e.code}: {e}", file=sys.stderr)
        sys.exit(2)

    print(json.dumps({"questions": [q.to_dict() for q in result.questions]}, indent=2))
    print(f"{len(result.questions)} question(s)", file=sys.stderr)


def cmd_grade(args: list[str]) -> None:
    from interview_ai.errors import InterviewAIError
    from interview_ai.grader import grade
    from interview_ai.parsers.question_normalizer import grading_subject

    question_path = _flag(args, "--question")
    code_path = _flag(args, "--code")
    if not (question_path and code_path):
        sys.exit("Usage: grade --question FILE --code FILE")

    question = grading_subject(json.loads(Path(question_path).read_text()))
    if question is None:
        sys.exit(f"{question_path}: question has no prompt")
    submission = Path(code_path).read_text()

    _, client = _client()
    try:
        result = asyncio.run(grade(client, question, submission))
    except InterviewAIError as e:
        print(f"{e.code}: {e}", file=sys.stderr)
        sys.exit(2)
    print(json.dumps(result.to_dict(), indent=2))


COMMANDS = {
    "serve": cmd_serve,
    "stop": cmd_stop,
    "restart": cmd_restart,
    "status": cmd_status,
    "generate": cmd_generate,
    "grade": cmd_grade,
}


def main():
    argv = sys.argv[1:] or ["serve"]
    handler = COMMANDS.get(argv[0])
    if handler is None:
        print(f"Unknown command {argv[0]!r}; expected one of: {', '.join(COMMANDS)}")
        sys.exit(1)
    handler(argv[1:])


if __name__ == "__main__":
    main()
