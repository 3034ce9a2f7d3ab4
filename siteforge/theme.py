"""Loading of the ``extra`` data from a theme's ``theme.toml``."""

from __future__ import annotations

import tomllib
from dataclasses import dataclass, field
from os import PathLike
from pathlib import Path
from typing import Any

from siteforge.errors import Error, chain

_MISSING_THEME_MESSAGE = (
    "No `theme.toml` file found. "
    "Is the `theme` defined in your `config.toml present in the `themes` directory "
    "and does it have a `theme.toml` inside?"
)


@dataclass
class Theme:
    """The data of a ``theme.toml`` file that the site generator uses."""

    extra: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def parse(cls, content: str) -> Theme:
        """Parse TOML text, keeping only the ``[extra]`` table."""
        try:
            document = tomllib.loads(content)
        except tomllib.TOMLDecodeError as exc:
            raise Error(str(exc)) from exc
        if not isinstance(document, dict):
            raise Error("Expected the `theme.toml` to be a TOML table")
        extra = document.get("extra")
        return cls(extra=dict(extra) if isinstance(extra, dict) else {})

    @classmethod
    def from_file(cls, path: str | PathLike[str]) -> Theme:
        """Read and parse a ``theme.toml`` file."""
        try:
            content = Path(path).read_text(encoding="utf-8")
        except OSError as exc:
            raise chain(_MISSING_THEME_MESSAGE, exc) from exc
        return cls.parse(content)