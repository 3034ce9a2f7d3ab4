"""The error type shared by every part of the site tools."""

from __future__ import annotations


class Error(Exception):
    """An error with a readable message and an optional underlying cause."""

    def __init__(self, message: object, source: BaseException | None = None) -> None:
        text = str(message)
        super().__init__(text)
        self.message = text
        self.source = source
        if source is not None:
            self.__cause__ = source

    def __str__(self) -> str:
        return self.message


def chain(message: object, source: BaseException) -> Error:
    """Build an :class:`Error` whose cause is ``source``."""
    return Error(message, source)