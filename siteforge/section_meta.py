"""Front matter of section files (``_index.md``)."""

from __future__ import annotations

import tomllib
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable

from siteforge.config import _boolean, _invalid, _string, _table, _unsigned
from siteforge.errors import Error

DEFAULT_PAGINATE_PATH = "page"


class SortBy(Enum):
    """How the pages of a section are sorted."""

    DATE = "date"
    """Most recent to oldest."""
    WEIGHT = "weight"
    """Lower weight comes first."""
    NONE = "none"
    """No sorting."""


class InsertAnchor(Enum):
    """Where heading anchor links are inserted."""

    LEFT = "left"
    RIGHT = "right"
    NONE = "none"


def _enum_converter(kind: type[Enum]) -> Callable[[str, Any], Any]:
    expected = ", ".join(f"`{member.value}`" for member in kind)

    def convert(key: str, value: Any) -> Enum:
        text = _string(key, value)
        try:
            return kind(text)
        except ValueError:
            raise Error(
                f"unknown variant `{text}`, expected one of {expected} for key `{key}`"
            ) from None

    return convert


def _load_toml(content: str) -> dict[str, Any]:
    """Parse TOML text, turning parse failures into :class:`Error`."""
    try:
        return tomllib.loads(content)
    except tomllib.TOMLDecodeError as exc:
        raise Error(str(exc)) from exc


_SECTION_SPEC: dict[str, Callable[[str, Any], Any]] = {
    "title": _string,
    "description": _string,
    "sort_by": _enum_converter(SortBy),
    "weight": _unsigned,
    "template": _string,
    "paginate_by": _unsigned,
    "paginate_path": _string,
    "insert_anchor_links": _enum_converter(InsertAnchor),
    "render": _boolean,
    "redirect_to": _string,
    "in_search_index": _boolean,
    "transparent": _boolean,
    "page_template": _string,
    "extra": _table,
}


@dataclass
class SectionFrontMatter:
    """The front matter of a section."""

    title: str | None = None
    description: str | None = None
    sort_by: SortBy = SortBy.NONE
    weight: int = 0
    template: str | None = None
    paginate_by: int | None = None
    paginate_path: str = DEFAULT_PAGINATE_PATH
    insert_anchor_links: InsertAnchor = InsertAnchor.NONE
    render: bool = True
    redirect_to: str | None = None
    in_search_index: bool = True
    transparent: bool = False
    page_template: str | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def parse(cls, toml: str) -> SectionFrontMatter:
        """Parse the TOML front matter of a section; unknown keys are ignored."""
        document = _load_toml(toml)
        fields = {
            key: _SECTION_SPEC[key](key, value)
            for key, value in document.items()
            if key in _SECTION_SPEC
        }
        return cls(**fields)

    def is_paginated(self) -> bool:
        """Whether the section's pages are split over several pages."""
        return self.paginate_by is not None and self.paginate_by > 0