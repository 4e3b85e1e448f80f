# src/backends/backend_factory.py - v1
"""Factory: instantiate a translation backend from its provider name."""

from __future__ import annotations

import importlib
import logging

from transbatch.backends.base_backend import TranslationBackend
from transbatch.config.settings import Settings
from transbatch.http.executor import RequestExecutor
from transbatch.http.retry import RetryPolicy

logger = logging.getLogger(__name__)

# Registry of provider name -> backend class path (lazy import).
_BACKEND_REGISTRY: dict[str, str] = {
    "deepl": "transbatch.backends.deepl_backend.DeepLBackend",
}


class UnsupportedBackendError(ValueError):
    """Raised when a provider is not registered."""


def create_backend(
    settings: Settings,
    provider: str = "deepl",
    **kwargs: object,
) -> TranslationBackend:
    """Instantiate the backend for ``provider`` configured from settings.

    Raises:
        UnsupportedBackendError: If provider is not registered.
        AuthError: If the API key is missing.
    """
    if provider not in _BACKEND_REGISTRY:
        raise UnsupportedBackendError(
            f"Unsupported translation backend: {provider!r}. "
            f"Available: {', '.join(sorted(_BACKEND_REGISTRY))}"
        )

    backend_cls = _import_class(_BACKEND_REGISTRY[provider])

    init_kwargs = dict(kwargs)
    init_kwargs.setdefault("api_key", settings.deepl_api_key)
    init_kwargs.setdefault("base_url", settings.deepl_api_url or None)
    init_kwargs.setdefault("use_pro", settings.deepl_use_pro)
    init_kwargs.setdefault("timeout_s", settings.http_timeout_s)
    init_kwargs.setdefault("executor", RequestExecutor(RetryPolicy.from_settings(settings)))

    logger.debug("Creating translation backend: provider=%s", provider)
    return backend_cls(**init_kwargs)


def register_backend(name: str, class_path: str) -> None:
    """Register a custom backend implementing TranslationBackend."""
    _BACKEND_REGISTRY[name] = class_path
    logger.info("Registered translation backend: %s -> %s", name, class_path)


def _import_class(class_path: str) -> type:
    """Dynamically import a class from its fully qualified path."""
    module_path, class_name = class_path.rsplit(".", 1)
    module = importlib.import_module(module_path)
    return getattr(module, class_name)
