# src/backends/structured.py - v1
"""Structured file translator for JSON and YAML.

Every non-blank string leaf is extracted in document order, masked,
translated with ``translate_batch`` in count/byte-bounded chunks, and put
back at its original location. Keys, numbers, booleans and nulls are left
untouched. JSON keeps its detected indentation and trailing newline. YAML
is round-tripped with ruamel.yaml, so comments, key order and scalar
quoting survive translation.
"""

from __future__ import annotations

import io
import json
import logging
import re
from dataclasses import dataclass
from typing import Any

from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError
from ruamel.yaml.scalarstring import ScalarString

from transbatch.backends.base_backend import BaseFileTranslator, TranslationBackend
from transbatch.batch.planner import chunk_by_limits
from transbatch.core.errors import (
    CountMismatchError,
    EmptyFileError,
    FileTooLargeError,
    ValidationError,
)
from transbatch.core.models import (
    MAX_TEXT_BYTES,
    TRANSLATE_BATCH_SIZE,
    FileEntry,
    TranslationOptions,
)
from transbatch.text.placeholder import PlaceholderCodec

logger = logging.getLogger(__name__)

STRUCTURED_EXTENSIONS: frozenset[str] = frozenset({".json", ".yaml", ".yml"})

_JSON_INDENT_RE = re.compile(r"^[{\[]\n(\t+| +)", re.MULTILINE)
YAML_LINE_WIDTH = 4096


@dataclass
class _ExtractedString:
    path: tuple[str | int, ...]
    value: str
    masked: str
    token_table: dict[str, str]

    @property
    def byte_size(self) -> int:
        return len(self.masked.encode("utf-8"))


class StructuredFileTranslator(BaseFileTranslator):
    """Translate string values inside JSON/YAML documents."""

    def __init__(
        self,
        backend: TranslationBackend,
        codec: PlaceholderCodec | None = None,
        max_texts: int = TRANSLATE_BATCH_SIZE,
        max_bytes: int = MAX_TEXT_BYTES,
        extensions: frozenset[str] = STRUCTURED_EXTENSIONS,
    ) -> None:
        self._backend = backend
        self._codec = codec or PlaceholderCodec()
        self._max_texts = max_texts
        self._max_bytes = max_bytes
        self._extensions = frozenset(e.lower() for e in extensions)

    @property
    def extensions(self) -> frozenset[str]:
        return self._extensions

    async def translate_entry(self, entry: FileEntry, options: TranslationOptions) -> str:
        content = entry.raw_content
        is_json = entry.extension == ".json"
        data = _parse_json(entry.path, content) if is_json else _parse_yaml(entry.path, content)

        strings = self._extract(data)
        if strings:
            oversized = [s for s in strings if s.byte_size > self._max_bytes]
            if oversized:
                raise FileTooLargeError(entry.path, oversized[0].byte_size, self._max_bytes)

            translated = await self._translate_strings(strings, options)
            for item, text in zip(strings, translated):
                data = _assign(data, item.path, text)

        logger.debug("Translated %d strings in %s", len(strings), entry.path)
        if is_json:
            return _dump_json(data, content)
        return _dump_yaml(data, content)

    def _extract(self, data: Any) -> list[_ExtractedString]:
        found: list[_ExtractedString] = []

        def walk(value: Any, path: tuple[str | int, ...]) -> None:
            if isinstance(value, str):
                if value.strip():
                    masked, table = self._codec.mask(value)
                    found.append(_ExtractedString(path, value, masked, table))
            elif isinstance(value, list):
                for i, item in enumerate(value):
                    walk(item, path + (i,))
            elif isinstance(value, dict):
                for key, item in value.items():
                    walk(item, path + (key,))

        walk(data, ())
        return found

    async def _translate_strings(
        self, strings: list[_ExtractedString], options: TranslationOptions,
    ) -> list[str]:
        out: list[str] = []
        chunks = chunk_by_limits(
            strings, lambda s: s.byte_size, self._max_texts, self._max_bytes,
        )
        for chunk in chunks:
            results = await self._backend.translate_batch([s.masked for s in chunk], options)
            if len(results) != len(chunk):
                raise CountMismatchError(sent=len(chunk), received=len(results))
            out.extend(
                self._codec.unmask(r.text, s.token_table) for s, r in zip(chunk, results)
            )
        return out


def _parse_json(path: str, content: str) -> Any:
    try:
        return json.loads(content)
    except json.JSONDecodeError as exc:
        raise ValidationError(f"JSON parse error in {path}: {exc}") from exc


def _yaml() -> YAML:
    yaml = YAML(typ="rt")
    yaml.preserve_quotes = True
    yaml.width = YAML_LINE_WIDTH
    return yaml


def _parse_yaml(path: str, content: str) -> Any:
    try:
        data = _yaml().load(content)
    except YAMLError as exc:
        raise ValidationError(f"YAML parse error in {path}: {exc}") from exc
    if data is None:
        raise EmptyFileError(path)
    return data


def _assign(data: Any, path: tuple[str | int, ...], value: str) -> Any:
    if not path:
        return value
    target = data
    for key in path[:-1]:
        target = target[key]
    target[path[-1]] = _keep_style(target[path[-1]], value)
    return data


def _keep_style(original: Any, value: str) -> str:
    # Quoted, literal and folded YAML scalars are str subclasses.
    if isinstance(original, ScalarString):
        return type(original)(value)
    return value


def _detect_json_indent(content: str) -> int | str:
    match = _JSON_INDENT_RE.search(content)
    if match:
        indent = match.group(1)
        return "\t" if indent.startswith("\t") else len(indent)
    return 2


def _dump_json(data: Any, original: str) -> str:
    result = json.dumps(data, ensure_ascii=False, indent=_detect_json_indent(original))
    if original.endswith("\n") and not result.endswith("\n"):
        result += "\n"
    return result


def _dump_yaml(data: Any, original: str) -> str:
    stream = io.StringIO()
    _yaml().dump(data, stream)
    result = stream.getvalue()
    if not original.endswith("\n"):
        result = result.rstrip("\n")
    return result
