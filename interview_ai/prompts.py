"""Prompt templates for question generation, correction and grading."""
from __future__ import annotations

import json

from interview_ai.models import GenerationRequest, Question

MAX_GENERATION_COUNT = 50

SYSTEM_PROMPT = (
    "You are an assistant that generates programming interview questions and coding "
    "tasks tailored to a requested language, role, and framework. ALWAYS respond with "
    "valid JSON only (no commentary, no explanation). The top-level JSON must be: "
    '{ "questions": [ ... ] }.'
)

CORRECTIVE_SYSTEM_PROMPT = (
    "You are an assistant that must strictly follow user instructions and output "
    "valid JSON only."
)

GRADING_SYSTEM_PROMPT = "You are a helpful, concise code reviewer and grader."

# Worked examples anchor both the JSON shape and the domain.  The SQL, HTML
# and DevOps samples keep the model from drifting into a generic scripting
# language when the request is about something else.
FEW_SHOT_EXAMPLES = [
    ("Database (SQL) example A", {"questions": [
        {"id": "q1", "type": "multiple_choice",
         "question": "Which SQL clause is used to filter rows based on a condition?",
         "options": ["WHERE", "GROUP BY", "ORDER BY", "HAVING"], "correctIndex": 0},
        {"id": "q2", "type": "coding",
         "prompt": "Write an SQL query that selects the name and email from users where active=1",
         "referenceSolution": "SELECT name, email FROM users WHERE active = 1;"},
    ]}),
    ("Database (SQL) example B", {"questions": [
        {"id": "q1", "type": "multiple_choice",
         "question": "Which index type is most appropriate for range queries on a numeric column?",
         "options": ["B-tree index", "Hash index", "GiST index", "GIN index"], "correctIndex": 0},
        {"id": "q2", "type": "coding",
         "prompt": "Write an SQL statement to create a table 'orders' with id (primary key), "
                   "user_id (int), total (decimal)",
         "referenceSolution": "CREATE TABLE orders (id SERIAL PRIMARY KEY, user_id INTEGER, "
                              "total DECIMAL(10,2));"},
    ]}),
    ("HTML/Frontend example", {"questions": [
        {"id": "q1", "type": "multiple_choice",
         "question": "What does the HTML <main> element represent?",
         "options": ["The main content of a document", "A navigation region", "A footer", "A sidebar"],
         "correctIndex": 0},
        {"id": "q2", "type": "coding",
         "prompt": "Create an accessible HTML form with a labeled input for email",
         "referenceSolution": '<form><label for="email">Email</label><input id="email" type="email" /></form>'},
    ]}),
    ("DevOps example", {"questions": [
        {"id": "q1", "type": "multiple_choice",
         "question": "Which file is commonly used to define a Docker image build process?",
         "options": ["Dockerfile", "docker-compose.yml", "Jenkinsfile", ".env"], "correctIndex": 0},
        {"id": "q2", "type": "coding",
         "prompt": "Write a minimal Dockerfile for a Node.js app using 'node:18' base image",
         "referenceSolution": "FROM node:18\nWORKDIR /app\nCOPY package*.json ./\nRUN npm install\n"
                              "COPY . .\nCMD [\"node\", \"index.js\"]"},
    ]}),
]

GENERATION_PROMPT = """\
Generate exactly {count} interview questions focused on the language '{language}'{context}.

STRONG REQUIREMENTS:
- Produce JSON only, with top-level {{ "questions": [...] }} and nothing else. Do NOT include \
any explanation or extra text.
- Questions MUST be relevant to the requested language and role. If language is 'html' or \
role is 'database', DO NOT include code snippets or questions about unrelated languages \
(for example: JavaScript, Python, Java); use SQL for database tasks.
- Mix multiple-choice (type: "multiple_choice") and coding/markup/SQL tasks (type: "coding").
- For multiple-choice, include: {{ "type": "multiple_choice", "question": string, \
"options": [strings], "correctIndex": number }}
- For coding tasks, include: {{ "type": "coding", "prompt": string, "referenceSolution": string }}

EXAMPLES FOLLOW (use these as templates):
{examples}

Now produce the JSON with {count} questions and nothing else.

DIVERSITY_INSTRUCTION: Produce a varied set of questions; avoid repeating the same template \
more than twice. Vary the cognitive level (knowledge, application, analysis). Include a small \
"topic" field for each question (e.g. "arrays", "strings", "closures"). Do not sacrifice the \
JSON-only requirement.
"""

CORRECTIVE_PROMPT = """\
The previous response included questions that are not specific to the requested language \
({language}) or role ({role}).

Problems found:
{problems}

Please produce JSON only with the same schema and make sure ALL questions are strictly about \
the requested language and role. Generate exactly {count} questions{context}.
Example for {language}: {example}
"""

GRADING_PROMPT = """\
You are an expert programming interviewer. Grade the student's submission.
---
Question prompt:
{prompt}
---
Reference solution:
{reference_solution}
---
Student submission:
{submission}
---
Provide a JSON response only with shape: {{
  "score": number (0-100),
  "verdict": "pass"|"partial"|"fail",
  "feedback": string
}}
"""


def over_generation_count(count: int) -> int:
    """Items to request so dedupe/validation losses still leave *count*."""
    return min(max(count * 2, count), MAX_GENERATION_COUNT)


def format_examples() -> str:
    lines = []
    for i, (title, payload) in enumerate(FEW_SHOT_EXAMPLES, 1):
        lines.append(f"{i}) {title}:")
        lines.append(json.dumps(payload, ensure_ascii=False))
        lines.append("")
    return "\n".join(lines).rstrip()


def format_context(request: GenerationRequest) -> str:
    parts = []
    if request.role:
        parts.append(f"role: '{request.role}'")
    if request.framework:
        parts.append(f"framework: '{request.framework}'")
    if request.topic:
        parts.append(f"topic: '{request.topic}'")
    if request.difficulty:
        parts.append(f"difficulty: '{request.difficulty}'")
    return "".join(f", {p}" for p in parts)


def build_generation_prompts(request: GenerationRequest, count: int | None = None) -> tuple[str, str]:
    """Return ``(system, user)`` prompts asking for *count* questions.

    *count* defaults to ``request.count``; pass the over-generated count to
    ask for extra candidates with every other instruction unchanged.
    """
    user = GENERATION_PROMPT.format(
        count=count if count is not None else request.count,
        language=request.language,
        context=format_context(request),
        examples=format_examples(),
    )
    return SYSTEM_PROMPT, user


def build_corrective_prompts(
    request: GenerationRequest, problems: list[dict], count: int | None = None
) -> tuple[str, str]:
    example = json.dumps({"questions": [{
        "id": "q1", "type": "multiple_choice", "question": "Example",
        "options": ["a", "b"], "correctIndex": 0,
    }]})
    problem_lines = "\n".join(
        f"- {p.get('id') or '(no id)'}: {p.get('reason', '')}" for p in problems
    ) or "- (unspecified)"
    user = CORRECTIVE_PROMPT.format(
        language=request.language,
        role=request.role or "any",
        problems=problem_lines,
        count=count if count is not None else request.count,
        context=format_context(request),
        example=example,
    )
    return CORRECTIVE_SYSTEM_PROMPT, user


def build_grading_prompts(question: Question, submission: str) -> tuple[str, str]:
    user = GRADING_PROMPT.format(
        prompt=question.prompt,
        reference_solution=question.reference_solution,
        submission=submission,
    )
    return GRADING_SYSTEM_PROMPT, user
