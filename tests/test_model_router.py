"""Unit tests for `ModelRouter` provider selection and metadata."""

from __future__ import annotations

from typing import Dict

import pytest

from src.lekhan.services.model_router import ModelRouter, ProviderSelection


def _router(values: Dict[str, str]) -> ModelRouter:
    return ModelRouter(env=dict(values))


def test_router_prefers_gemini_by_default():
    selection = _router({"GEMINI_API_KEY": "gemini", "OPENAI_API_KEY": "openai"}).select_provider()
    assert isinstance(selection, ProviderSelection)
    assert selection.name == "gemini"
    assert selection.model == "gemini-1.5-flash"
    assert selection.api_key_env == "GEMINI_API_KEY"


def test_router_honours_preferred_provider():
    router = _router(
        {"GEMINI_API_KEY": "gemini", "OPENAI_API_KEY": "openai", "LEKHAN_MODEL_PROVIDER": "openai"}
    )
    assert router.select_provider().name == "openai"


def test_router_skips_preferred_provider_without_key():
    router = _router({"OPENAI_API_KEY": "openai", "LEKHAN_MODEL_PROVIDER": "xai"})
    assert router.select_provider().name == "openai"


def test_router_model_and_base_url_overrides():
    router = _router({"OPENAI_API_KEY": "k", "OPENAI_MODEL": "gpt-4o", "OPENAI_BASE_URL": "https://proxy/v1"})
    selection = router.select_provider()
    assert selection.model == "gpt-4o"
    assert router.base_url_for(selection) == "https://proxy/v1"
    assert router.api_key_for(selection) == "k"


def test_local_provider_requires_opt_in():
    assert not _router({}).provider_available("local")
    assert _router({"LEKHAN_ENABLE_LOCAL_PROVIDER": "1"}).provider_available("local")
    selection = _router({"LEKHAN_ENABLE_LOCAL_PROVIDER": "1"}).select_provider()
    assert selection.name == "local"
    assert selection.requires_api_key is False


def test_allowed_providers_filter():
    router = ModelRouter(env={"GEMINI_API_KEY": "g", "OPENAI_API_KEY": "o"}, allowed_providers=["openai"])
    assert router.select_provider().name == "openai"


def test_no_provider_available():
    router = _router({})
    with pytest.raises(RuntimeError):
        router.select_provider()
    assert router.maybe_select_provider() is None


def test_resolve_unknown_provider():
    with pytest.raises(KeyError):
        _router({}).resolve_provider("anthropic-direct")
