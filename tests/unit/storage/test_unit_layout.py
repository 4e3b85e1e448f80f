# tests/unit/storage/test_unit_layout.py - v2
"""Tests for storage/layout.py - output path derivation."""

from __future__ import annotations

from pathlib import Path

from transbatch.storage.layout import output_path_for


class TestOutputPathFor:
    def test_default_next_to_input(self):
        assert output_path_for("docs/readme.md", "es") == Path("docs/readme.es.md")

    def test_no_extension(self):
        assert output_path_for("docs/LICENSE", "de") == Path("docs/LICENSE.de")

    def test_multiple_dots(self):
        assert output_path_for("a/archive.v2.txt", "fr") == Path("a/archive.v2.fr.txt")

    def test_output_dir(self, tmp_path):
        out = output_path_for("docs/readme.md", "es", output_dir=tmp_path)
        assert out == tmp_path / "readme.es.md"

    def test_custom_pattern(self, tmp_path):
        out = output_path_for("x/guide.md", "ja", output_dir=tmp_path, pattern="{lang}_{name}{ext}")
        assert out == tmp_path / "ja_guide.md"

    def test_pattern_placeholders_replaced_everywhere(self):
        out = output_path_for("a/b.txt", "es", pattern="{name}-{lang}-{name}{ext}")
        assert out == Path("a/b-es-b.txt")

    def test_base_dir_mirrors_tree(self, tmp_path):
        src = tmp_path / "src"
        out = output_path_for(src / "guide" / "intro.md", "es", output_dir=tmp_path / "out", base_dir=src)
        assert out == tmp_path / "out" / "guide" / "intro.es.md"

    def test_base_dir_with_pattern(self, tmp_path):
        src = tmp_path / "src"
        out = output_path_for(
            src / "a" / "b.md", "es", output_dir=tmp_path / "out",
            pattern="{name}_{lang}{ext}", base_dir=src,
        )
        assert out == tmp_path / "out" / "a" / "b_es.md"

    def test_file_outside_base_dir_goes_to_root(self, tmp_path):
        out = output_path_for(
            tmp_path / "other" / "x.txt", "es", output_dir=tmp_path / "out", base_dir=tmp_path / "src",
        )
        assert out == tmp_path / "out" / "x.es.txt"

    def test_base_dir_ignored_without_output_dir(self, tmp_path):
        out = output_path_for(tmp_path / "src" / "a" / "b.md", "es", base_dir=tmp_path / "src")
        assert out == tmp_path / "src" / "a" / "b.es.md"
