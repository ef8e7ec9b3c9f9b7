"""Tests for the command line entry point."""
from __future__ import annotations

import json
from unittest.mock import patch

import pytest

from conftest import FakeClient, questions_json
from interview_ai.__main__ import COMMANDS, cmd_generate, main


@pytest.fixture
def cli_env(tmp_path, monkeypatch):
    monkeypatch.setenv("BACKEND_OPENAI_KEY", "sk-test")
    monkeypatch.delenv("INTERVIEW_AI_MOCK", raising=False)
    monkeypatch.delenv("INTERVIEW_AI_NORMALIZE_MODE", raising=False)
    with patch("interview_ai.config.CONFIG_PATH", tmp_path / "config.json"):
        yield


class TestGenerate:
    def test_prints_questions_and_passes_flags(self, cli_env, capsys, clean_sql_items):
        fake = FakeClient([questions_json(clean_sql_items)])
        with patch("interview_ai.providers.base.create_client", return_value=fake):
            cmd_generate(["--language", "SQL", "--count", "2", "--role", "database",
                          "--topic", "joins", "--difficulty", "hard"])

        out = json.loads(capsys.readouterr().out)
        assert [q["id"] for q in out["questions"]] == ["c1", "c2"]
        user = fake.calls[0]["user"]
        assert "difficulty: 'hard'" in user
        assert "topic: 'joins'" in user
        assert "role: 'database'" in user

    def test_difficulty_defaults_to_medium(self, cli_env, capsys, clean_sql_items):
        fake = FakeClient([questions_json(clean_sql_items)])
        with patch("interview_ai.providers.base.create_client", return_value=fake):
            cmd_generate(["--language", "sql", "--count", "1"])
        assert "difficulty: 'medium'" in fake.calls[0]["user"]

    def test_invalid_count_exits(self, cli_env):
        with pytest.raises(SystemExit):
            cmd_generate(["--count", "zero"])

    def test_missing_key_exits(self, cli_env, monkeypatch):
        monkeypatch.delenv("BACKEND_OPENAI_KEY")
        monkeypatch.delenv("OPENAI_API_KEY", raising=False)
        with pytest.raises(SystemExit):
            cmd_generate(["--language", "sql"])


class TestMain:
    def test_unknown_command(self, monkeypatch, capsys):
        monkeypatch.setattr("sys.argv", ["interview-ai", "frobnicate"])
        with pytest.raises(SystemExit) as exc:
            main()
        assert exc.value.code == 1
        assert "frobnicate" in capsys.readouterr().out

    def test_commands(self):
        assert set(COMMANDS) == {"serve", "stop", "restart", "status", "generate", "grade"}
