"""Shared test fixtures."""
from __future__ import annotations

import itertools
import json

import pytest

from interview_ai.models import CODING, MULTIPLE_CHOICE, GenerationRequest, Question


class FakeClient:
    """Completion client that replays canned responses.

    A response that is an exception instance is raised instead of returned.
    The last response repeats once the list is exhausted.
    """

    def __init__(self, responses=None):
        self._responses = list(responses or [])
        self.calls: list[dict] = []

    async def complete(self, system_prompt, user_prompt, sampling=None):
        self.calls.append({"system": system_prompt, "user": user_prompt, "sampling": sampling})
        idx = min(len(self.calls), len(self._responses)) - 1
        response = self._responses[idx]
        if isinstance(response, Exception):
            raise response
        return response

    def name(self) -> str:
        return "fake-llm"

    @property
    def call_count(self) -> int:
        return len(self.calls)


def questions_json(items: list[dict]) -> str:
    return json.dumps({"questions": items})


@pytest.fixture
def id_factory():
    counter = itertools.count(1)
    return lambda: f"gen_{next(counter)}"


@pytest.fixture
def sql_request():
    return GenerationRequest(language="sql", topic="queries", count=3, role="database")


@pytest.fixture
def sql_items():
    """Six raw SQL items: #2 is a near-duplicate of #1, #3 leaks Python."""
    return [
        {"id": "q1", "type": "multiple_choice",
         "question": "Which SQL clause filters rows based on a condition?",
         "options": ["WHERE", "GROUP BY", "ORDER BY", "HAVING"], "correctIndex": 0},
        {"id": "q2", "type": "multiple_choice",
         "question": "Which SQL clause filters the rows based on a condition?",
         "options": ["WHERE", "HAVING", "LIMIT", "ORDER BY"], "correctIndex": 0},
        {"id": "q3", "type": "coding",
         "prompt": "Return the number of orders for each customer row",
         "referenceSolution": "def count_orders(rows):\n    return len(rows)"},
        {"id": "q4", "type": "coding",
         "prompt": "Write a query returning all users ordered by signup date",
         "referenceSolution": "SELECT * FROM users ORDER BY signup_date;"},
        {"id": "q5", "type": "multiple_choice",
         "question": "What does a PRIMARY KEY constraint guarantee?",
         "options": ["Uniqueness and non-null values", "Fast full-text search",
                     "Automatic backups", "Row-level encryption"],
         "correctIndex": 0},
        {"id": "q6", "type": "coding",
         "prompt": "Write an SQL statement that counts orders per customer",
         "referenceSolution": "SELECT customer_id, COUNT(*) FROM orders GROUP BY customer_id;"},
    ]


@pytest.fixture
def clean_sql_items():
    return [
        {"id": "c1", "type": "multiple_choice",
         "question": "Which JOIN returns only rows with matches in both tables?",
         "options": ["INNER JOIN", "LEFT JOIN", "RIGHT JOIN", "FULL OUTER JOIN"], "correctIndex": 0},
        {"id": "c2", "type": "coding",
         "prompt": "Select the email of every user created after 2024-01-01",
         "referenceSolution": "SELECT email FROM users WHERE created_at > '2024-01-01';"},
        {"id": "c3", "type": "multiple_choice",
         "question": "Which statement removes all rows from a table but keeps its structure?",
         "options": ["TRUNCATE", "DROP", "ALTER", "RENAME"], "correctIndex": 0},
    ]


@pytest.fixture
def mc_question():
    return Question(
        id="mc-1",
        kind=MULTIPLE_CHOICE,
        prompt="Which SQL clause filters grouped rows?",
        options=["WHERE", "HAVING", "ORDER BY", "LIMIT"],
        correct_index=1,
        topic="aggregation",
    )


@pytest.fixture
def coding_question():
    return Question(
        id="code-1",
        kind=CODING,
        prompt="Write an SQL query that selects the name and email from users where active=1",
        reference_solution="SELECT name, email FROM users WHERE active = 1;",
    )
