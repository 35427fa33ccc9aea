from __future__ import annotations

"""Environment-driven settings for the Lekhan engine.

Env vars:
- LEKHAN_HISTORY_WINDOW (default 5 exchanges, i.e. 10 turns of context)
- LEKHAN_SESSION_PREVIEW_CHARS (default 50)
- LEKHAN_SESSION_LIST_LIMIT (default 20)
- LEKHAN_LLM_TIMEOUT_S (default 60; 0 disables the per-attempt timeout)
- LEKHAN_LLM_RETRIES (default 0)
- LEKHAN_LLM_BACKOFF_S (default 0.5)
- LEKHAN_LLM_TEMPERATURE (default 0.7)
"""

from dataclasses import dataclass
from typing import Mapping, Optional
import os


def _int_env(env: Mapping[str, str], name: str, default: int, minimum: int = 0) -> int:
    raw = env.get(name)
    if raw is None or not str(raw).strip():
        return default
    try:
        value = int(str(raw).strip())
    except ValueError:
        return default
    return max(minimum, value)


def _float_env(env: Mapping[str, str], name: str, default: float) -> float:
    raw = env.get(name)
    if raw is None or not str(raw).strip():
        return default
    try:
        return max(0.0, float(str(raw).strip()))
    except ValueError:
        return default


@dataclass(frozen=True)
class EngineSettings:
    history_window: int = 5
    preview_chars: int = 50
    session_list_limit: int = 20
    llm_timeout_s: float = 60.0
    llm_retries: int = 0
    llm_backoff_s: float = 0.5
    llm_temperature: float = 0.7

    @property
    def history_turns(self) -> int:
        """Number of stored turns fetched for context (user + assistant per exchange)."""
        return self.history_window * 2

    @staticmethod
    def from_env(env: Optional[Mapping[str, str]] = None) -> "EngineSettings":
        env = env if env is not None else os.environ
        return EngineSettings(
            history_window=_int_env(env, "LEKHAN_HISTORY_WINDOW", 5, minimum=1),
            preview_chars=_int_env(env, "LEKHAN_SESSION_PREVIEW_CHARS", 50, minimum=1),
            session_list_limit=_int_env(env, "LEKHAN_SESSION_LIST_LIMIT", 20, minimum=1),
            llm_timeout_s=_float_env(env, "LEKHAN_LLM_TIMEOUT_S", 60.0),
            llm_retries=_int_env(env, "LEKHAN_LLM_RETRIES", 0),
            llm_backoff_s=_float_env(env, "LEKHAN_LLM_BACKOFF_S", 0.5),
            llm_temperature=_float_env(env, "LEKHAN_LLM_TEMPERATURE", 0.7),
        )
