"""Splitting content files into front matter and body."""

from __future__ import annotations

import os
import re
from os import PathLike

from siteforge.errors import Error, chain
from siteforge.page_meta import PageFrontMatter
from siteforge.section_meta import SectionFrontMatter

_PAGE_RE = re.compile(
    r"\A[ \t\n\r\f\v]*\+\+\+\r?\n(.*?)\+\+\+\r?\n?(.*)\Z",
    re.DOTALL,
)


def _split_content(file_path: str | PathLike[str], content: str) -> tuple[str, str]:
    match = _PAGE_RE.match(content)
    if match is None:
        raise Error(
            f"Couldn't find front matter in `{os.fspath(file_path)}`. "
            "Did you forget to add `+++`?"
        )
    return match.group(1), match.group(2)


def split_section_content(
    file_path: str | PathLike[str], content: str
) -> tuple[SectionFrontMatter, str]:
    """Return the parsed section front matter and the rest of the content."""
    front_matter, body = _split_content(file_path, content)
    try:
        meta = SectionFrontMatter.parse(front_matter)
    except Error as exc:
        raise chain(
            f"Error when parsing front matter of section `{os.fspath(file_path)}`", exc
        ) from exc
    return meta, body


def split_page_content(
    file_path: str | PathLike[str], content: str
) -> tuple[PageFrontMatter, str]:
    """Return the parsed page front matter and the rest of the content."""
    front_matter, body = _split_content(file_path, content)
    try:
        meta = PageFrontMatter.parse(front_matter)
    except Error as exc:
        raise chain(
            f"Error when parsing front matter of page `{os.fspath(file_path)}`", exc
        ) from exc
    return meta, body