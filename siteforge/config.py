"""Site configuration loaded from ``config.toml``."""

from __future__ import annotations

import os
import re
import time
import tomllib
from dataclasses import dataclass, field
from datetime import date, datetime, time as dtime
from os import PathLike
from pathlib import Path
from typing import Any, Callable, Iterable

from siteforge.errors import Error, chain
from siteforge.theme import Theme

DEFAULT_BASE_URL = "http://a-website.com"


def _describe(value: Any) -> str:
    if isinstance(value, bool):
        return f"boolean `{str(value).lower()}`"
    if isinstance(value, int):
        return f"integer `{value}`"
    if isinstance(value, float):
        return f"floating point `{value}`"
    if isinstance(value, str):
        return f'string "{value}"'
    if isinstance(value, list):
        return "sequence"
    if isinstance(value, dict):
        return "table"
    if isinstance(value, (datetime, date, dtime)):
        return "datetime"
    return type(value).__name__


def _invalid(key: str, value: Any, expected: str) -> Error:
    return Error(f"invalid type: {_describe(value)}, expected {expected} for key `{key}`")


def _string(key: str, value: Any) -> str:
    if not isinstance(value, str):
        raise _invalid(key, value, "a string")
    return value


def _boolean(key: str, value: Any) -> bool:
    if not isinstance(value, bool):
        raise _invalid(key, value, "a boolean")
    return value


def _integer(key: str, value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise _invalid(key, value, "an integer")
    return value


def _unsigned(key: str, value: Any) -> int:
    number = _integer(key, value)
    if number < 0:
        raise Error(f"invalid value: integer `{number}`, expected usize for key `{key}`")
    return number


def _table(key: str, value: Any) -> dict[str, Any]:
    if not isinstance(value, dict):
        raise _invalid(key, value, "a table")
    return dict(value)


def _string_list(key: str, value: Any) -> list[str]:
    if not isinstance(value, list):
        raise _invalid(key, value, "a sequence")
    return [_string(key, item) for item in value]


Converter = Callable[[str, Any], Any]


def _record(kind: type, spec: dict[str, Converter], key: str, value: Any) -> Any:
    data = _table(key, value)
    fields = {name: spec[name](name, item) for name, item in data.items() if name in spec}
    return kind(**fields)


@dataclass
class Language:
    """An additional language of a multilingual site."""

    code: str = ""
    rss: bool = False


@dataclass
class Taxonomy:
    """A taxonomy such as tags or categories."""

    name: str = ""
    paginate_by: int | None = None
    paginate_path: str | None = None
    rss: bool = False
    lang: str = ""

    def is_paginated(self) -> bool:
        """Whether term pages of this taxonomy are paginated."""
        return self.paginate_by is not None and self.paginate_by > 0

    def effective_paginate_path(self) -> str:
        """The path segment used for pagination, ``page`` unless set."""
        return self.paginate_path if self.paginate_path is not None else "page"


_LANGUAGE_SPEC: dict[str, Converter] = {"code": _string, "rss": _boolean}
_TAXONOMY_SPEC: dict[str, Converter] = {
    "name": _string,
    "paginate_by": _unsigned,
    "paginate_path": _string,
    "rss": _boolean,
    "lang": _string,
}


def _languages(key: str, value: Any) -> list[Language]:
    if not isinstance(value, list):
        raise _invalid(key, value, "a sequence")
    return [_record(Language, _LANGUAGE_SPEC, key, item) for item in value]


def _taxonomies(key: str, value: Any) -> list[Taxonomy]:
    if not isinstance(value, list):
        raise _invalid(key, value, "a sequence")
    return [_record(Taxonomy, _TAXONOMY_SPEC, key, item) for item in value]


_CONFIG_SPEC: dict[str, Converter] = {
    "base_url": _string,
    "theme": _string,
    "title": _string,
    "description": _string,
    "default_language": _string,
    "languages": _languages,
    "translations": _table,
    "highlight_code": _boolean,
    "highlight_theme": _string,
    "generate_rss": _boolean,
    "rss_limit": _unsigned,
    "taxonomies": _taxonomies,
    "compile_sass": _boolean,
    "build_search_index": _boolean,
    "ignored_content": _string_list,
    "check_external_links": _boolean,
    "extra_syntaxes": _string_list,
    "extra": _table,
    "build_timestamp": _integer,
}


class _InvalidGlob(Error):
    def __init__(self, pattern: str, reason: str) -> None:
        super().__init__(f"error parsing glob '{pattern}': {reason}")
        self.pattern = pattern
        self.reason = reason


def _glob_to_regex(pattern: str) -> re.Pattern[str]:
    out: list[str] = []
    length = len(pattern)
    in_alternates = False
    i = 0
    while i < length:
        char = pattern[i]
        if char == "\\":
            if i + 1 >= length:
                raise ValueError("dangling '\\'")
            out.append(re.escape(pattern[i + 1]))
            i += 2
        elif char == "*" and pattern.startswith("**", i):
            after = i + 2
            starts_component = i == 0 or pattern[i - 1] == "/"
            ends_component = after == length or pattern[after] == "/"
            if not (starts_component and ends_component):
                raise ValueError("invalid use of **; must be one path component")
            if after == length:
                out.append(".*")
                i = after
            else:
                out.append("(?:.*/)?")
                i = after + 1
        elif char == "*":
            out.append(".*")
            i += 1
        elif char == "?":
            out.append(".")
            i += 1
        elif char == "[":
            j = i + 1
            negate = j < length and pattern[j] in "!^"
            if negate:
                j += 1
            items: list[str] = []
            first = True
            while True:
                if j >= length:
                    raise ValueError("unclosed character class; missing ']'")
                current = pattern[j]
                if current == "]" and not first:
                    break
                first = False
                if j + 2 < length and pattern[j + 1] == "-" and pattern[j + 2] != "]":
                    low, high = current, pattern[j + 2]
                    if low > high:
                        raise ValueError(f"invalid range; '{low}' > '{high}'")
                    items.append(f"{re.escape(low)}-{re.escape(high)}")
                    j += 3
                else:
                    items.append(re.escape(current))
                    j += 1
            out.append("[" + ("^" if negate else "") + "".join(items) + "]")
            i = j + 1
        elif char == "{":
            if in_alternates:
                raise ValueError("nested alternate groups are not allowed")
            in_alternates = True
            out.append("(?:")
            i += 1
        elif char == "}" and in_alternates:
            in_alternates = False
            out.append(")")
            i += 1
        elif char == "," and in_alternates:
            out.append("|")
            i += 1
        else:
            out.append(re.escape(char))
            i += 1
    if in_alternates:
        raise ValueError("unclosed alternate group; missing '}'")
    return re.compile("".join(out), re.DOTALL)


class GlobSet:
    """A set of glob patterns matched against whole paths."""

    def __init__(self, patterns: Iterable[str]) -> None:
        self.patterns = list(patterns)
        self._regexes: list[re.Pattern[str]] = []
        for pattern in self.patterns:
            try:
                self._regexes.append(_glob_to_regex(pattern))
            except ValueError as exc:
                raise _InvalidGlob(pattern, str(exc)) from exc

    def __len__(self) -> int:
        return len(self._regexes)

    def is_match(self, path: str | PathLike[str]) -> bool:
        """Whether any pattern matches ``path``."""
        text = os.fspath(path)
        return any(regex.fullmatch(text) for regex in self._regexes)


@dataclass
class Config:
    """The configuration of a site."""

    base_url: str = DEFAULT_BASE_URL
    theme: str | None = None
    title: str | None = None
    description: str | None = None
    default_language: str = "en"
    languages: list[Language] = field(default_factory=list)
    translations: dict[str, Any] = field(default_factory=dict)
    highlight_code: bool = False
    highlight_theme: str = "base16-ocean-dark"
    generate_rss: bool = False
    rss_limit: int | None = None
    taxonomies: list[Taxonomy] = field(default_factory=list)
    compile_sass: bool = False
    build_search_index: bool = False
    ignored_content: list[str] = field(default_factory=list)
    ignored_content_globset: GlobSet | None = None
    check_external_links: bool = False
    extra_syntaxes: list[str] = field(default_factory=list)
    extra: dict[str, Any] = field(default_factory=dict)
    build_timestamp: int | None = 1

    @classmethod
    def parse(cls, content: str) -> Config:
        """Parse TOML text into a config; unknown keys are ignored."""
        try:
            document = tomllib.loads(content)
        except tomllib.TOMLDecodeError as exc:
            raise Error(str(exc)) from exc

        config = cls()
        for key, value in document.items():
            converter = _CONFIG_SPEC.get(key)
            if converter is not None:
                setattr(config, key, converter(key, value))

        if not config.base_url or config.base_url == DEFAULT_BASE_URL:
            raise Error("A base URL is required in config.toml with key `base_url`")

        config.build_timestamp = int(time.time())

        if config.ignored_content:
            try:
                config.ignored_content_globset = GlobSet(config.ignored_content)
            except _InvalidGlob as exc:
                raise Error(
                    f"Invalid ignored_content glob pattern: {exc.pattern}, error = {exc.reason}"
                ) from exc

        for taxonomy in config.taxonomies:
            if not taxonomy.lang:
                taxonomy.lang = config.default_language

        return config

    @classmethod
    def from_file(cls, path: str | PathLike[str]) -> Config:
        """Read and parse a config file."""
        path = Path(path)
        try:
            content = path.read_text(encoding="utf-8")
        except OSError as exc:
            raise chain(
                f'No `"{path.name}"` file found. Are you in the right directory?', exc
            ) from exc
        return cls.parse(content)

    def make_permalink(self, path: str) -> str:
        """Join ``path`` to the base URL, adding a trailing slash where needed."""
        base = self.base_url
        trailing = "" if path.endswith("/") or path.endswith("rss.xml") or not path else "/"
        if base.endswith("/") and path == "/":
            return base
        if path == "/":
            return f"{base}/"
        if base.endswith("/") and path.startswith("/"):
            return f"{base}{path[1:]}{trailing}"
        if base.endswith("/") or path.startswith("/"):
            return f"{base}{path}{trailing}"
        return f"{base}/{path}{trailing}"

    def add_theme_extra(self, theme: Theme) -> None:
        """Add the theme's extra values that the config does not already set."""
        for key, value in theme.extra.items():
            self.extra.setdefault(key, value)

    def merge_with_theme(self, path: str | PathLike[str]) -> None:
        """Load a ``theme.toml`` and merge its extra data into this config."""
        self.add_theme_extra(Theme.from_file(path))

    def is_multilingual(self) -> bool:
        """Whether the site has languages besides the default one."""
        return bool(self.languages)

    def languages_codes(self) -> list[str]:
        """The codes of all additional languages."""
        return [language.code for language in self.languages]


def get_config(path: str | PathLike[str], filename: str) -> Config:
    """Load the config, printing the error and exiting with status 1 on failure."""
    try:
        return Config.from_file(Path(path) / filename)
    except Error as exc:
        print(f"Failed to load {filename}")
        print(f"Error: {exc}")
        raise SystemExit(1) from exc