from __future__ import annotations

"""Generative backend clients.

The engine only sees :class:`GenerativeBackend`. Concrete clients wrap
langchain-openai (Gemini, OpenAI and xAI through their OpenAI-compatible
endpoints) or a local OpenAI/Ollama host. Timeouts and retries live in
:class:`ResilientBackend`, which is applied once at the composition root.
"""

from typing import Any, Dict, List, Optional, Protocol
import asyncio
import json
import logging
import os

import requests
from langchain_openai import ChatOpenAI
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from ..config import EngineSettings
from .model_router import ModelRouter


logger = logging.getLogger(__name__)
LOG = logging.getLogger("lekhan.llm")


class GenerativeBackend(Protocol):
    async def generate(self, prompt: str, **options: Any) -> str: ...


def _content_text(res: Any) -> str:
    content = res.content if hasattr(res, "content") else res
    if isinstance(content, list):
        parts: List[str] = []
        for item in content:
            if isinstance(item, dict):
                parts.append(str(item.get("text", "")))
            else:
                parts.append(str(item))
        return "".join(parts)
    return str(content or "")


class LangChainBackend:
    """Hosted chat model driven through ``ChatOpenAI.ainvoke``."""

    def __init__(self, llm: Any, provider: str, model: str) -> None:
        self._llm = llm
        self.provider = provider
        self.model = model

    async def generate(self, prompt: str, **options: Any) -> str:
        LOG.debug("llm_invoke", extra={"provider": self.provider, "model": self.model})
        res = await self._llm.ainvoke(prompt, **options)
        return _content_text(res)


def _build_session() -> requests.Session:
    session = requests.Session()
    retry = Retry(
        total=2,
        connect=2,
        read=0,
        backoff_factor=0.5,
        status_forcelist=(502, 503, 504),
        allowed_methods=frozenset(["POST", "GET"]),
    )
    adapter = HTTPAdapter(max_retries=retry, pool_connections=10, pool_maxsize=10)
    session.mount("http://", adapter)
    session.mount("https://", adapter)
    return session


class LocalLLMBackend:
    """OpenAI-compatible or Ollama host reached over plain HTTP."""

    def __init__(self, base_url: str, model: str, read_timeout: float = 90.0) -> None:
        self.base_url = base_url.rstrip("/")
        self.model = model
        self.provider = "local"
        self.api_style = (os.getenv("LEKHAN_LLM_LOCAL_API") or "auto").lower()
        self._timeout = (3, read_timeout)
        self._session = _build_session()

    async def generate(self, prompt: str, **options: Any) -> str:
        return await asyncio.to_thread(self.invoke, prompt)

    def invoke(self, prompt: str) -> str:
        if self.api_style == "ollama":
            return self._invoke_ollama(prompt)
        if self.api_style == "openai":
            return self._invoke_openai(prompt)
        try:
            return self._invoke_openai(prompt)
        except requests.exceptions.RequestException as exc:
            LOG.warning(
                "local_llm_openai_failed_switching_to_ollama",
                extra={"base_url": self.base_url, "model": self.model, "err": str(exc)},
            )
            self.api_style = "ollama"
            return self._invoke_ollama(prompt)

    def _invoke_openai(self, prompt: str) -> str:
        LOG.debug("local_llm_invoke", extra={"model": self.model, "base_url": self.base_url})
        resp = self._session.post(
            f"{self.base_url}/v1/chat/completions",
            json={"model": self.model, "messages": [{"role": "user", "content": prompt}], "stream": False},
            timeout=self._timeout,
        )
        resp.raise_for_status()
        data = resp.json()
        choices = data.get("choices") or []
        if choices:
            message = choices[0].get("message") or {}
            content = message.get("content")
            if content:
                return content
        return data.get("response") or data.get("text") or ""

    def _invoke_ollama(self, prompt: str) -> str:
        resp = self._session.post(
            f"{self.base_url}/api/generate",
            json={"model": self.model, "prompt": prompt, "stream": False},
            timeout=self._timeout,
        )
        resp.raise_for_status()
        try:
            data: Dict[str, Any] = resp.json()
        except json.JSONDecodeError as exc:
            raise RuntimeError(f"local_llm_invalid_json: {exc}") from exc
        return data.get("response") or data.get("text") or ""


class UnavailableBackend:
    """Stands in when no provider is configured; every call fails."""

    provider = None
    model = None

    def __init__(self, reason: str = "LLM not configured") -> None:
        self.reason = reason

    async def generate(self, prompt: str, **options: Any) -> str:
        raise RuntimeError(self.reason)


class ResilientBackend:
    """Per-attempt timeout and bounded retry around another backend."""

    def __init__(
        self,
        inner: GenerativeBackend,
        timeout_s: Optional[float] = None,
        retries: int = 0,
        backoff_s: float = 0.5,
    ) -> None:
        self.inner = inner
        self.timeout_s = timeout_s or None
        self.retries = max(0, retries)
        self.backoff_s = backoff_s

    async def generate(self, prompt: str, **options: Any) -> str:
        last_error: Optional[Exception] = None
        for attempt in range(self.retries + 1):
            try:
                if self.timeout_s:
                    return await asyncio.wait_for(self.inner.generate(prompt, **options), self.timeout_s)
                return await self.inner.generate(prompt, **options)
            except asyncio.TimeoutError:
                last_error = TimeoutError(f"llm_timeout after {self.timeout_s}s")
            except Exception as exc:
                last_error = exc
            LOG.warning("llm_attempt_failed", extra={"attempt": attempt + 1, "err": str(last_error)})
            if attempt < self.retries:
                await asyncio.sleep(self.backoff_s * (2**attempt))
        raise last_error or RuntimeError("llm_no_attempt")


def build_backend(settings: EngineSettings, router: Optional[ModelRouter] = None) -> GenerativeBackend:
    """Construct the process-wide backend from the environment."""
    router = router or ModelRouter()
    selection = router.maybe_select_provider()
    backend: GenerativeBackend
    if selection is None:
        logger.warning("No LLM provider configured; report generation will use the template fallback")
        backend = UnavailableBackend("No active model provider available")
    elif selection.name == "local":
        base_url = router.base_url_for(selection) or "http://127.0.0.1:11434"
        logger.info("Using local LLM provider base_url=%s model=%s", base_url, selection.model)
        backend = LocalLLMBackend(
            base_url=base_url,
            model=selection.model,
            read_timeout=settings.llm_timeout_s or 90.0,
        )
    else:
        base_url = router.base_url_for(selection)
        logger.info(
            "Using remote LLM provider name=%s model=%s base_url=%s",
            selection.name,
            selection.model,
            base_url,
        )
        llm = ChatOpenAI(
            api_key=router.api_key_for(selection),
            base_url=base_url,
            model=selection.model,
            temperature=settings.llm_temperature,
        )
        backend = LangChainBackend(llm, provider=selection.name, model=selection.model)
    return ResilientBackend(
        backend,
        timeout_s=settings.llm_timeout_s,
        retries=settings.llm_retries,
        backoff_s=settings.llm_backoff_s,
    )
