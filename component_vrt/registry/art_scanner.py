"""Finds component variants declared in ``*.art.vue`` files."""

from __future__ import annotations

import logging
import os
import re
from pathlib import Path
from urllib.parse import quote

from component_vrt.models.variant import ArtFile, VariantRef

logger = logging.getLogger(__name__)

ART_SUFFIX = ".art.vue"
IGNORED_DIRS = {"node_modules", "dist", ".git"}
PREVIEW_ROUTE = "/__musea__/preview"

_ART_TAG_RE = re.compile(r"<art\b([^>]*)>", re.IGNORECASE)
_VARIANT_RE = re.compile(r"<variant\s+([^>]*)>([\s\S]*?)</variant>", re.IGNORECASE)


def _attr(attrs: str, name: str) -> str | None:
    match = re.search(rf"(?:^|\s){name}=[\"']([^\"']+)[\"']", attrs)
    return match.group(1) if match else None


def _flag(attrs: str, name: str) -> bool:
    # Strip quoted values so `name="skip-vrt"` doesn't read as the flag
    bare = re.sub(r"=[\"'][^\"']*[\"']", "", attrs)
    return re.search(rf"(?:^|\s){re.escape(name)}(?:\s|$|/)", bare) is not None


def art_owner(path: str | Path) -> str:
    """Owner name of an art file: ``Button.art.vue`` -> ``Button``."""
    name = Path(path).name
    return name[: -len(ART_SUFFIX)] if name.endswith(ART_SUFFIX) else Path(path).stem


def scan_art_files(root: str | Path) -> list[Path]:
    """Find every art file below ``root``, skipping dependency and build folders."""
    found: list[Path] = []
    for dirpath, dirnames, filenames in os.walk(root):
        dirnames[:] = sorted(d for d in dirnames if d not in IGNORED_DIRS)
        for filename in sorted(filenames):
            if filename.endswith(ART_SUFFIX):
                found.append(Path(dirpath) / filename)
    logger.debug("Found %d art file(s) under %s", len(found), root)
    return found


def parse_art_source(source: str, path: str | Path) -> ArtFile:
    owner = art_owner(path)
    art_attrs = ""
    art_match = _ART_TAG_RE.search(source)
    if art_match:
        art_attrs = art_match.group(1)

    variants = []
    for match in _VARIANT_RE.finditer(source):
        attrs = match.group(1)
        name = _attr(attrs, "name")
        if not name:
            logger.debug("Ignoring unnamed variant in %s", path)
            continue
        variants.append(VariantRef(
            owner=owner,
            name=name,
            skip=_flag(attrs, "skip-vrt"),
            is_default=_flag(attrs, "default"),
            art_path=str(path),
        ))

    return ArtFile(
        path=str(path),
        title=_attr(art_attrs, "title") or owner,
        component=_attr(art_attrs, "component"),
        category=_attr(art_attrs, "category"),
        variants=variants,
    )


def parse_art_file(path: str | Path) -> ArtFile | None:
    """Parse an art file; returns None (and logs) if it can't be read."""
    try:
        source = Path(path).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        logger.warning("Failed to parse %s: %s", path, e)
        return None
    return parse_art_source(source, path)


def load_variants(root: str | Path) -> list[VariantRef]:
    """All declared variants under ``root``, skipped ones included, in file order."""
    variants: list[VariantRef] = []
    for path in scan_art_files(root):
        art = parse_art_file(path)
        if art:
            variants.extend(art.variants)
    return variants


def variant_address(base_url: str, art_path: str, variant_name: str) -> str:
    """Preview URL served by the gallery dev server for one variant."""
    return (
        f"{base_url.rstrip('/')}{PREVIEW_ROUTE}"
        f"?art={quote(art_path, safe='')}&variant={quote(variant_name, safe='')}"
    )
