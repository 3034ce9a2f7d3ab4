"""Front matter of page files."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta
from typing import Any, Callable

from siteforge.config import (
    _boolean,
    _invalid,
    _string,
    _string_list,
    _table,
    _unsigned,
)
from siteforge.errors import Error
from siteforge.section_meta import _load_toml


def _format_time(value: time) -> str:
    text = f"{value.hour:02d}:{value.minute:02d}:{value.second:02d}"
    if value.microsecond:
        text += "." + f"{value.microsecond:06d}".rstrip("0")
    return text


def _format_toml_datetime(value: date | time) -> str:
    """Render a TOML date, time or datetime the way TOML writes it."""
    if isinstance(value, datetime):
        text = f"{value.date().isoformat()}T{_format_time(value.time())}"
        offset = value.utcoffset()
        if offset is None:
            return text
        if offset == timedelta(0):
            return text + "Z"
        sign = "-" if offset < timedelta(0) else "+"
        minutes = abs(int(offset.total_seconds())) // 60
        return f"{text}{sign}{minutes // 60:02d}:{minutes % 60:02d}"
    if isinstance(value, date):
        return value.isoformat()
    return _format_time(value)


def _fix_toml_dates(value: Any) -> Any:
    """Replace every TOML date or time inside ``value`` by its string form."""
    if isinstance(value, dict):
        return {key: _fix_toml_dates(item) for key, item in value.items()}
    if isinstance(value, list):
        return [_fix_toml_dates(item) for item in value]
    if isinstance(value, (date, time)):
        return _format_toml_datetime(value)
    return value


def _toml_datetime(key: str, value: Any) -> str:
    if not isinstance(value, (date, time)):
        raise _invalid(key, value, "a TOML datetime")
    return _format_toml_datetime(value)


def _taxonomies(key: str, value: Any) -> dict[str, list[str]]:
    return {name: _string_list(name, terms) for name, terms in _table(key, value).items()}


_PAGE_SPEC: dict[str, Callable[[str, Any], Any]] = {
    "title": _string,
    "description": _string,
    "date": _toml_datetime,
    "draft": _boolean,
    "slug": _string,
    "path": _string,
    "taxonomies": _taxonomies,
    "order": _unsigned,
    "weight": _unsigned,
    "aliases": _string_list,
    "template": _string,
    "in_search_index": _boolean,
    "extra": _table,
}


@dataclass
class PageFrontMatter:
    """The front matter of a page."""

    title: str | None = None
    description: str | None = None
    date: str | None = None
    datetime: datetime | None = None
    datetime_tuple: tuple[int, int, int] | None = None
    draft: bool = False
    slug: str | None = None
    path: str | None = None
    taxonomies: dict[str, list[str]] = field(default_factory=dict)
    order: int | None = None
    weight: int | None = None
    aliases: list[str] = field(default_factory=list)
    template: str | None = None
    in_search_index: bool = True
    extra: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def parse(cls, toml: str) -> PageFrontMatter:
        """Parse the TOML front matter of a page; unknown keys are ignored."""
        document = _load_toml(toml)
        fields = {
            key: _PAGE_SPEC[key](key, value)
            for key, value in document.items()
            if key in _PAGE_SPEC
        }
        meta = cls(**fields)

        if meta.slug == "":
            raise Error("`slug` can't be empty if present")
        if meta.path == "":
            raise Error("`path` can't be empty if present")

        meta.extra = _fix_toml_dates(meta.extra)
        meta.date_to_datetime()
        return meta

    def date_to_datetime(self) -> None:
        """Fill ``datetime`` and ``datetime_tuple`` from the ``date`` string."""
        parsed: datetime | None = None
        if self.date is not None:
            if "T" in self.date:
                try:
                    stamp = datetime.fromisoformat(self.date)
                except ValueError:
                    stamp = None
                if stamp is not None and stamp.tzinfo is not None:
                    parsed = stamp.replace(tzinfo=None)
            else:
                try:
                    parsed = datetime.strptime(self.date, "%Y-%m-%d")
                except ValueError:
                    parsed = None

        self.datetime = parsed
        self.datetime_tuple = (
            (parsed.year, parsed.month, parsed.day) if parsed is not None else None
        )