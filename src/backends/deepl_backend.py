# src/backends/deepl_backend.py - v1
"""DeepL v2 adapter implementing TranslationBackend.

Talks to ``POST /v2/translate`` with httpx; every call goes through the
RequestExecutor retry policy.
"""

from __future__ import annotations

import logging
import time
from typing import Any

import httpx

from transbatch.backends.base_backend import TranslationBackend
from transbatch.core.errors import AuthError, CountMismatchError, ValidationError
from transbatch.core.models import TranslationOptions, TranslationResult
from transbatch.http.executor import RequestExecutor
from transbatch.http.retry import RetryPolicy

logger = logging.getLogger(__name__)

FREE_API_URL = "https://api-free.deepl.com"
PRO_API_URL = "https://api.deepl.com"
DEFAULT_TIMEOUT_S = 30.0
TRANSLATE_PATH = "/v2/translate"


class DeepLBackend(TranslationBackend):
    """DeepL translation API client.

    Args:
        api_key: DeepL authentication key.
        base_url: API root; defaults to the Free or Pro endpoint.
        use_pro: Select the Pro endpoint when ``base_url`` is not given.
        timeout_s: Per-request HTTP timeout.
        executor: Retry executor (a default policy is used when None).
        client: Preconfigured ``httpx.AsyncClient`` (tests inject one with
            a MockTransport). Owned clients are closed by ``aclose``.
    """

    def __init__(
        self,
        api_key: str,
        base_url: str | None = None,
        use_pro: bool = False,
        timeout_s: float = DEFAULT_TIMEOUT_S,
        executor: RequestExecutor | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        if not api_key or not api_key.strip():
            raise AuthError("API key is required")
        self._base_url = (base_url or (PRO_API_URL if use_pro else FREE_API_URL)).rstrip("/")
        self._executor = executor or RequestExecutor(RetryPolicy())
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            base_url=self._base_url,
            timeout=timeout_s,
            headers={"Authorization": f"DeepL-Auth-Key {api_key}"},
        )
        if client is not None:
            self._client.headers.setdefault("Authorization", f"DeepL-Auth-Key {api_key}")

    @property
    def provider_name(self) -> str:
        return "deepl"

    @property
    def base_url(self) -> str:
        return self._base_url

    async def translate_batch(
        self,
        texts: list[str],
        options: TranslationOptions,
    ) -> list[TranslationResult]:
        if not texts:
            return []

        data = build_translate_params(texts, options)
        t0 = time.monotonic()
        response = await self._executor.execute(
            self._client.post,
            f"{self._base_url}{TRANSLATE_PATH}",
            data=data,
            label=f"translate[{len(texts)}]",
        )
        latency = int((time.monotonic() - t0) * 1000)
        logger.debug(
            "DeepL translate: %d texts -> %s in %dms (status %d)",
            len(texts), options.target_lang, latency, response.status_code,
        )
        return parse_translate_response(response, expected=len(texts))

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> DeepLBackend:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()


def build_translate_params(texts: list[str], options: TranslationOptions) -> dict[str, Any]:
    """Form fields for /v2/translate; ``text`` is repeated once per input."""
    params: dict[str, Any] = {
        "text": list(texts),
        "target_lang": options.target_lang.upper(),
    }
    if options.source_lang:
        params["source_lang"] = options.source_lang.upper()
    if options.formality:
        params["formality"] = options.formality
    if options.glossary_id:
        params["glossary_id"] = options.glossary_id
    if options.context:
        params["context"] = options.context
    if options.preserve_formatting is not None:
        params["preserve_formatting"] = "1" if options.preserve_formatting else "0"
    if options.model_type:
        params["model_type"] = options.model_type
    return params


def parse_translate_response(response: httpx.Response, expected: int) -> list[TranslationResult]:
    try:
        body = response.json()
    except ValueError as exc:
        raise ValidationError(f"Malformed response from DeepL API: {exc}") from exc

    translations = body.get("translations") if isinstance(body, dict) else None
    if not isinstance(translations, list):
        raise ValidationError(
            f"No translations returned from DeepL API (requested {expected} texts)"
        )
    if len(translations) != expected:
        raise CountMismatchError(sent=expected, received=len(translations))

    shared_billed = body.get("billed_characters")
    results: list[TranslationResult] = []
    for item in translations:
        detected = item.get("detected_source_language")
        results.append(TranslationResult(
            text=item.get("text", ""),
            detected_source_lang=detected.lower() if detected else None,
            billed_characters=item.get("billed_characters", shared_billed),
            model_type_used=item.get("model_type_used"),
        ))
    return results
