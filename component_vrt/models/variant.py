"""Variant data structures produced by the art file scanner."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field


class VariantRef(BaseModel):
    owner: str  # art file stem, e.g. "Button" for Button.art.vue
    name: str
    skip: bool = False  # skip-vrt attribute
    is_default: bool = False
    art_path: str = ""


class ArtFile(BaseModel):
    path: str
    title: str
    component: Optional[str] = None
    category: Optional[str] = None
    variants: list[VariantRef] = Field(default_factory=list)
