# tests/unit/backends/test_unit_deepl_backend.py - v1
"""Tests for backends/deepl_backend.py - request building and response parsing.

HTTP is served by httpx.MockTransport; no network access.
"""

from __future__ import annotations

from urllib.parse import parse_qs

import httpx
import pytest

from transbatch.backends.deepl_backend import (
    FREE_API_URL,
    PRO_API_URL,
    DeepLBackend,
    build_translate_params,
    parse_translate_response,
)
from transbatch.core.errors import AuthError, CountMismatchError, NetworkError, ValidationError
from transbatch.core.models import TranslationOptions
from transbatch.http.executor import RequestExecutor
from transbatch.http.retry import RetryPolicy


async def _no_sleep(delay: float) -> None:
    return None


def _backend(handler, **kwargs) -> DeepLBackend:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    executor = RequestExecutor(RetryPolicy(), sleep=_no_sleep)
    return DeepLBackend("test-key:fx", client=client, executor=executor, **kwargs)


def _echo_handler(captured: list[httpx.Request]):
    def handler(request: httpx.Request) -> httpx.Response:
        captured.append(request)
        form = parse_qs(request.content.decode())
        return httpx.Response(200, json={
            "translations": [
                {"detected_source_language": "EN", "text": f"ES:{t}", "billed_characters": len(t)}
                for t in form["text"]
            ],
        })
    return handler


class TestConstruction:
    def test_empty_key_rejected(self):
        with pytest.raises(AuthError, match="API key is required"):
            DeepLBackend("")

    def test_free_endpoint_by_default(self):
        backend = _backend(lambda r: httpx.Response(200))
        assert backend.base_url == FREE_API_URL

    def test_pro_endpoint(self):
        backend = _backend(lambda r: httpx.Response(200), use_pro=True)
        assert backend.base_url == PRO_API_URL

    def test_explicit_base_url_wins(self):
        backend = _backend(lambda r: httpx.Response(200), base_url="http://localhost:8080/")
        assert backend.base_url == "http://localhost:8080"

    def test_provider_name(self):
        assert _backend(lambda r: httpx.Response(200)).provider_name == "deepl"


class TestTranslateBatch:
    @pytest.mark.asyncio
    async def test_sends_form_with_repeated_text(self):
        captured: list[httpx.Request] = []
        backend = _backend(_echo_handler(captured))
        options = TranslationOptions(target_lang="es", source_lang="en", formality="less")

        results = await backend.translate_batch(["Hello", "World"], options)

        assert [r.text for r in results] == ["ES:Hello", "ES:World"]
        assert results[0].detected_source_lang == "en"
        assert results[1].billed_characters == 5

        request = captured[0]
        assert request.method == "POST"
        assert request.url.path == "/v2/translate"
        assert request.headers["Authorization"] == "DeepL-Auth-Key test-key:fx"
        form = parse_qs(request.content.decode())
        assert form["text"] == ["Hello", "World"]
        assert form["target_lang"] == ["ES"]
        assert form["source_lang"] == ["EN"]
        assert form["formality"] == ["less"]

    @pytest.mark.asyncio
    async def test_empty_input_makes_no_request(self):
        captured: list[httpx.Request] = []
        backend = _backend(_echo_handler(captured))
        assert await backend.translate_batch([], TranslationOptions(target_lang="de")) == []
        assert captured == []

    @pytest.mark.asyncio
    async def test_single_translate(self):
        captured: list[httpx.Request] = []
        backend = _backend(_echo_handler(captured))
        result = await backend.translate("Hi", TranslationOptions(target_lang="es"))
        assert result.text == "ES:Hi"

    @pytest.mark.asyncio
    async def test_server_error_retried_then_raised(self):
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(500, json={"message": "boom"})

        backend = _backend(handler)
        with pytest.raises(NetworkError, match="boom"):
            await backend.translate_batch(["a"], TranslationOptions(target_lang="es"))
        assert len(calls) == 4

    @pytest.mark.asyncio
    async def test_short_response_is_count_mismatch(self):
        def handler(request):
            return httpx.Response(200, json={"translations": [{"text": "uno"}]})

        backend = _backend(handler)
        with pytest.raises(CountMismatchError, match="sent 2 texts but received 1"):
            await backend.translate_batch(["one", "two"], TranslationOptions(target_lang="es"))

    @pytest.mark.asyncio
    async def test_async_context_manager_closes_owned_client(self):
        async with DeepLBackend("k", base_url="http://localhost") as backend:
            client = backend._client
        assert client.is_closed


class TestBuildTranslateParams:
    def test_minimal(self):
        params = build_translate_params(["a"], TranslationOptions(target_lang="pt-br"))
        assert params == {"text": ["a"], "target_lang": "PT-BR"}

    def test_optional_fields(self):
        options = TranslationOptions(
            target_lang="de", glossary_id="g1", context="UI labels",
            preserve_formatting=False, model_type="quality_optimized",
        )
        params = build_translate_params(["a"], options)
        assert params["glossary_id"] == "g1"
        assert params["context"] == "UI labels"
        assert params["preserve_formatting"] == "0"
        assert params["model_type"] == "quality_optimized"


class TestParseTranslateResponse:
    def _resp(self, **kwargs) -> httpx.Response:
        return httpx.Response(200, request=httpx.Request("POST", "http://x"), **kwargs)

    def test_malformed_json(self):
        with pytest.raises(ValidationError, match="Malformed"):
            parse_translate_response(self._resp(content=b"<html>"), expected=1)

    def test_missing_translations(self):
        with pytest.raises(ValidationError, match="No translations"):
            parse_translate_response(self._resp(json={}), expected=1)

    def test_top_level_billed_characters(self):
        body = {"translations": [{"text": "x"}], "billed_characters": 42}
        results = parse_translate_response(self._resp(json=body), expected=1)
        assert results[0].billed_characters == 42
        assert results[0].detected_source_lang is None
