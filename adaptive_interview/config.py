from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

from dotenv import load_dotenv
from openai import OpenAI


def ensure_env_loaded() -> None:

    # Load .env early
    project_root = Path(__file__).resolve().parent.parent  # repo root
    env_path = project_root / ".env"
    if env_path.exists():
        load_dotenv(dotenv_path=env_path, override=False)
    else:
        load_dotenv(override=False)


# Load env first so settings reads the model switches
ensure_env_loaded()


@dataclass(frozen=True)
class Settings:
    ai_enabled: bool
    fallback_to_rules: bool
    model: str
    base_url: str
    api_key: str
    model_timeout_s: float
    question_cache_ttl_s: float


def _openai_base_url(ollama_url: str) -> str:
    # Ollama serves the OpenAI-compatible API under /v1
    url = ollama_url.rstrip("/")
    if not url.endswith("/v1"):
        url += "/v1"
    return url


def load_settings(env: Optional[Mapping[str, str]] = None) -> Settings:
    env = os.environ if env is None else env
    return Settings(
        # AI is opt-in, falling back to rules is opt-out; both match the literal exactly
        ai_enabled=env.get("AI_ENABLED") == "true",
        fallback_to_rules=env.get("AI_FALLBACK_TO_RULES") != "false",
        model=env.get("OLLAMA_MODEL", "llama3.2"),
        base_url=_openai_base_url(env.get("OLLAMA_BASE_URL", "http://localhost:11434")),
        api_key=env.get("OLLAMA_API_KEY", "ollama"),
        model_timeout_s=float(env.get("MODEL_TIMEOUT_S", "20")),
        question_cache_ttl_s=float(env.get("QUESTION_CACHE_TTL_S", "300")),
    )


settings = load_settings()


def get_openai_client(cfg: Settings = settings) -> OpenAI:
    """
    OpenAI SDK client pointed at the local model server.
    Retries are disabled: a failed or timed-out call fails once and the
    caller falls back to the rule-based path.
    """
    return OpenAI(
        base_url=cfg.base_url,
        api_key=cfg.api_key,
        timeout=cfg.model_timeout_s,
        max_retries=0,
    )
