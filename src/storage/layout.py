# src/storage/layout.py - v2
"""Output path conventions for translated files.

Default name: ``{name}.{lang}{ext}`` next to the input, or under
``output_dir``. A custom pattern may use ``{name}``, ``{lang}`` and
``{ext}`` (ext includes the leading dot). With ``base_dir`` set, the input's
directory relative to it is recreated under ``output_dir``.
"""

from __future__ import annotations

from pathlib import Path

DEFAULT_PATTERN = "{name}.{lang}{ext}"


def output_path_for(
    input_path: str | Path,
    target_lang: str,
    output_dir: str | Path | None = None,
    pattern: str | None = None,
    base_dir: str | Path | None = None,
) -> Path:
    """Derive the output path for one translated file."""
    source = Path(input_path)
    ext = source.suffix
    name = source.name[: -len(ext)] if ext else source.name

    filename = (
        (pattern or DEFAULT_PATTERN)
        .replace("{name}", name)
        .replace("{lang}", target_lang)
        .replace("{ext}", ext)
    )

    root = Path(output_dir) if output_dir is not None else source.parent
    if base_dir is not None and output_dir is not None:
        try:
            relative_dir = source.parent.resolve().relative_to(Path(base_dir).resolve())
        except ValueError:
            relative_dir = Path()
        return root / relative_dir / filename
    return root / filename
