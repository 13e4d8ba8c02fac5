"""Compile errors and warnings returned by the builder.

Errors are raised as exceptions and abort the build. Warnings are plain
values collected alongside the built machine.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

from turing_lang.internals import errors as er
from turing_lang.internals.report import Reporter, Span


class CompilerError(Exception):
    """Base class for every error that aborts a build."""

    def __init__(self, error_code: str, position: Span, code: str = "",
                 expected: Optional[str] = None, found: Optional[str] = None, **kwargs):
        self.error_code = error_code
        self.message = er.format_message(error_code, **kwargs)
        self.position = position
        self.code = code
        self.expected = expected
        self.found = found
        super().__init__(self.message)

    def emit(self, reporter: Reporter) -> None:
        reporter.error(self.error_code, self.message, self.position, self.code)

    def __str__(self) -> str:
        return f"{self.error_code} at {self.position}: {self.message}"


class CompilerSyntaxError(CompilerError):
    """A construct accepted by the grammar but rejected during validation.

    Examples are an all-zero tape, an unknown movement symbol or a
    composition of a library that does not exist.
    """


class FileRuleError(CompilerError):
    """The grammar could not derive a parse tree for the source."""

    def __init__(self, detail: str, position: Span, code: str = "",
                 expected: Optional[str] = None, found: Optional[str] = None):
        self.detail = detail
        super().__init__("CE1001", position, code, expected, found, detail=detail)


class LibraryError(CompilerError):
    """A built-in library could not be turned into an instruction table."""

    def __init__(self, name: str, reason: str):
        self.name = name
        super().__init__("CE0001", Span(1, 1), name=name, reason=reason)


@dataclass(frozen=True)
class CompilerWarning(ABC):
    """A problem that does not stop the build; subclasses name their catalog code."""
    position: Span

    error_code = ""

    @property
    @abstractmethod
    def message(self) -> str:
        ...

    def emit(self, reporter: Reporter) -> None:
        reporter.warn(self.error_code, self.message, self.position)


@dataclass(frozen=True)
class StateOverwrite(CompilerWarning):
    """An instruction replaced an earlier one with the same (state, value) key."""
    state: str
    value_from: bool

    error_code = "CW1001"

    @property
    def message(self) -> str:
        return er.format_message(self.error_code, state=self.state,
                                 value="1" if self.value_from else "0")
