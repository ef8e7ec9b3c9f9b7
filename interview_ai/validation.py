"""Check that generated questions stay on the requested language."""
from __future__ import annotations

import logging
import re

from interview_ai.models import Question, ValidationResult

log = logging.getLogger("interview_ai.validation")

# Tokens that strongly indicate a *different* language than the key.  Kept
# conservative: tokens native to the target (e.g. ``function`` for
# JavaScript) must never appear in its own list.
FOREIGN_TOKENS: dict[str, tuple[str, ...]] = {
    "javascript": ("def ", "import numpy", "print(", "printf(", "public static",
                   "system.out", "std::", "#include", "cout<<"),
    "python": ("console.log", "console.error", "var ", "let ", "const ", "=>", "function "),
    "java": ("console.log", "var ", "let ", "const ", "console.error", "=>", "def "),
    "html": ("def ", "print(", "public static", "system.out", "std::", "#include"),
    "sql": ("def ", "console.log", "public static", "function ", "var ", "let ", "const "),
    "csharp": ("def ", "console.log", "print(", "std::", "cout<<"),
}

LANGUAGE_ALIASES = {
    "js": "javascript",
    "node": "javascript",
    "nodejs": "javascript",
    "node.js": "javascript",
    "py": "python",
    "python3": "python",
    "c#": "csharp",
    "cs": "csharp",
    "html5": "html",
    "mysql": "sql",
    "postgresql": "sql",
    "postgres": "sql",
    "sqlite": "sql",
}

_SQL_KEYWORD_RE = re.compile(r"select\b|insert\b|update\b|delete\b|join\b|primary key|foreign key")


def canonical_language(language: str | None) -> str:
    lang = (language or "").strip().lower()
    return LANGUAGE_ALIASES.get(lang, lang)


def combined_text(q: Question) -> str:
    parts = [q.prompt or "", *q.options, q.reference_solution or ""]
    return "\n".join(p for p in parts if p).lower()


def foreign_tokens_in(text: str, language: str | None) -> list[str]:
    denylist = FOREIGN_TOKENS.get(canonical_language(language), ())
    return [tok for tok in denylist if tok in text]


def validate(
    questions: list[Question], target_language: str | None, role: str | None = None
) -> ValidationResult:
    problems: list[dict] = []
    notes: list[str] = []
    for q in questions:
        text = combined_text(q)
        found = foreign_tokens_in(text, target_language)
        if found:
            problems.append({
                "id": q.id,
                "reason": "contains foreign-language tokens: " + ", ".join(repr(t) for t in found),
            })
        # Conceptual database questions need no SQL, so this only annotates
        if (role or "").strip().lower() == "database" and not _SQL_KEYWORD_RE.search(text):
            notes.append(f"{q.id}: no SQL keywords")
    if notes:
        log.debug("Database role: %d question(s) without SQL keywords", len(notes))
    return ValidationResult(ok=not problems, problems=problems, notes=notes)
