"""Tests for art file discovery and variant parsing."""

from pathlib import Path

from component_vrt.registry.art_scanner import (
    art_owner,
    load_variants,
    parse_art_file,
    parse_art_source,
    scan_art_files,
    variant_address,
)

BUTTON_ART = """
<script setup lang="ts">
import Button from './Button.vue'
</script>

<art title="Primary Button" component="./Button.vue" category="inputs">
  <variant name="default" default>
    <Button>Click</Button>
  </variant>
  <variant name="disabled">
    <Button disabled>Click</Button>
  </variant>
  <variant name="loading" skip-vrt>
    <Button loading>Click</Button>
  </variant>
</art>
"""


def _write(path: Path, text: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


class TestParseArtSource:
    """Tests for parsing a single art file's source."""

    def test_parses_metadata(self):
        art = parse_art_source(BUTTON_ART, "src/Button.art.vue")
        assert art.title == "Primary Button"
        assert art.component == "./Button.vue"
        assert art.category == "inputs"

    def test_parses_variants_in_order(self):
        art = parse_art_source(BUTTON_ART, "src/Button.art.vue")
        assert [v.name for v in art.variants] == ["default", "disabled", "loading"]
        assert all(v.owner == "Button" for v in art.variants)
        assert all(v.art_path == "src/Button.art.vue" for v in art.variants)

    def test_parses_flags(self):
        variants = parse_art_source(BUTTON_ART, "Button.art.vue").variants
        assert [v.is_default for v in variants] == [True, False, False]
        assert [v.skip for v in variants] == [False, False, True]

    def test_flag_inside_attribute_value_is_not_a_flag(self):
        source = '<art><variant name="skip-vrt"><X /></variant></art>'
        variant = parse_art_source(source, "X.art.vue").variants[0]
        assert variant.name == "skip-vrt"
        assert variant.skip is False

    def test_unnamed_variant_is_ignored(self):
        source = '<art><variant label="x"><X /></variant><variant name="ok"><X /></variant></art>'
        assert [v.name for v in parse_art_source(source, "X.art.vue").variants] == ["ok"]

    def test_title_defaults_to_owner(self):
        art = parse_art_source("<art></art>", "Card.art.vue")
        assert art.title == "Card"
        assert art.variants == []


class TestDiscovery:
    """Tests for finding art files on disk."""

    def test_art_owner(self):
        assert art_owner("src/components/Button.art.vue") == "Button"

    def test_scan_skips_dependency_folders(self, tmp_path):
        _write(tmp_path / "src" / "Button.art.vue", BUTTON_ART)
        _write(tmp_path / "src" / "Button.vue", "<template />")
        _write(tmp_path / "node_modules" / "lib" / "Other.art.vue", BUTTON_ART)
        _write(tmp_path / "dist" / "Built.art.vue", BUTTON_ART)

        found = scan_art_files(tmp_path)

        assert found == [tmp_path / "src" / "Button.art.vue"]

    def test_scan_is_sorted(self, tmp_path):
        _write(tmp_path / "b" / "Zed.art.vue", "")
        _write(tmp_path / "a" / "Alpha.art.vue", "")
        _write(tmp_path / "a" / "Beta.art.vue", "")

        names = [p.name for p in scan_art_files(tmp_path)]
        assert names == ["Alpha.art.vue", "Beta.art.vue", "Zed.art.vue"]

    def test_unreadable_file_returns_none(self, tmp_path):
        path = tmp_path / "Bad.art.vue"
        path.write_bytes(b"\xff\xfe\x00 not utf-8 \xc3")
        assert parse_art_file(path) is None

    def test_load_variants_includes_skipped(self, tmp_path):
        _write(tmp_path / "Button.art.vue", BUTTON_ART)
        _write(tmp_path / "Card.art.vue", '<art><variant name="plain"><C /></variant></art>')

        variants = load_variants(tmp_path)

        assert [(v.owner, v.name) for v in variants] == [
            ("Button", "default"), ("Button", "disabled"), ("Button", "loading"), ("Card", "plain"),
        ]


class TestVariantAddress:
    def test_builds_preview_url(self):
        url = variant_address("http://localhost:5173/", "src/Button.art.vue", "with icon")
        assert url == (
            "http://localhost:5173/__musea__/preview"
            "?art=src%2FButton.art.vue&variant=with%20icon"
        )
