from __future__ import annotations

import json
import os
from dataclasses import dataclass
from pathlib import Path

CONFIG_PATH = Path(__file__).resolve().parent.parent / "config.json"

DEFAULTS = {
    "llm_provider": "openai",
    "llm_model": "gpt-4",
    "base_url": "https://api.openai.com/v1",
    "port": 4000,
    "mock_mode": False,
    "normalize_mode": "strict",
    "request_timeout": 120.0,
}

# env var -> (field, converter)
ENV_OVERRIDES = {
    "INTERVIEW_AI_LLM_PROVIDER": ("llm_provider", str),
    "BACKEND_OPENAI_MODEL": ("llm_model", str),
    "BACKEND_OPENAI_BASE_URL": ("base_url", str),
    "PORT": ("port", int),
    "INTERVIEW_AI_MOCK": ("mock_mode", lambda v: v.strip().lower() in ("1", "true", "yes", "on")),
    "INTERVIEW_AI_NORMALIZE_MODE": ("normalize_mode", str),
}

API_KEY_ENV_VARS = ("BACKEND_OPENAI_KEY", "OPENAI_API_KEY")


@dataclass
class Settings:
    llm_provider: str = DEFAULTS["llm_provider"]
    llm_model: str = DEFAULTS["llm_model"]
    base_url: str = DEFAULTS["base_url"]
    port: int = DEFAULTS["port"]
    mock_mode: bool = DEFAULTS["mock_mode"]
    normalize_mode: str = DEFAULTS["normalize_mode"]
    request_timeout: float = DEFAULTS["request_timeout"]

    @property
    def api_key(self) -> str | None:
        """Completion-service credential; read from the environment only."""
        for name in API_KEY_ENV_VARS:
            value = os.environ.get(name)
            if value:
                return value
        return None

    def to_dict(self) -> dict:
        return {
            "llm_provider": self.llm_provider,
            "llm_model": self.llm_model,
            "base_url": self.base_url,
            "port": self.port,
            "mock_mode": self.mock_mode,
            "normalize_mode": self.normalize_mode,
            "request_timeout": self.request_timeout,
        }


def _apply_env(raw: dict) -> dict:
    for env_name, (field_name, convert) in ENV_OVERRIDES.items():
        value = os.environ.get(env_name)
        if value is None or value == "":
            continue
        raw[field_name] = convert(value)
    return raw


def load_settings() -> Settings:
    raw: dict = {}
    if CONFIG_PATH.exists():
        raw = json.loads(CONFIG_PATH.read_text())
        known = {f.name for f in Settings.__dataclass_fields__.values()}
        raw = {k: v for k, v in raw.items() if k in known}
    return Settings(**_apply_env(raw))


def save_settings(settings: Settings) -> None:
    CONFIG_PATH.write_text(json.dumps(settings.to_dict(), indent=4) + "\n")
