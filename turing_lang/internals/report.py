from __future__ import annotations
import os
import sys
from dataclasses import dataclass
from typing import Any, Iterator, List, Optional, TextIO

from lark import Token

class C:
    """ANSI escape codes used by the reporter."""
    RESET = "\x1b[0m"
    BOLD  = "\x1b[1m"
    DIM   = "\x1b[2m"
    RED   = "\x1b[31m"
    YELLOW = "\x1b[33m"
    CYAN  = "\x1b[36m"
    GRAY  = "\x1b[90m"

KIND_COLORS = {"error": C.RED, "warning": C.YELLOW}

@dataclass(frozen=True)
class Span:
    """A source location. Lines and columns are 1-based; the end is optional."""
    line: int
    col: int
    end_line: Optional[int] = None
    end_col: Optional[int] = None

    def __str__(self) -> str:
        if self.end_line is None or self.end_col is None:
            return f"{self.line}:{self.col}"
        return f"{self.line}:{self.col} to {self.end_line}:{self.end_col}"

@dataclass
class Diagnostic:
    kind: str                       # "error" or "warning"
    code: str
    message: str
    span: Optional[Span] = None
    snippet: Optional[str] = None   # Offending text, used when the source line is unavailable

def span_of(node: Any) -> Optional[Span]:
    """Location of a lark Tree (through its meta) or Token, if it has one."""
    meta = getattr(node, "meta", None)
    if meta is not None and not getattr(meta, "empty", True):
        return Span(meta.line, meta.column, meta.end_line, meta.end_column)
    if isinstance(node, Token) and node.line is not None and node.column is not None:
        end_line = node.end_line or node.line
        return Span(node.line, node.column, end_line, node.end_column or node.column)
    return None


def underline(text: str, start: int, end: Optional[int]) -> str:
    """Mark columns [start, end) of `text` with carets and the rest with tildes.

    Columns are 1-based. A missing or empty end marks a single column.
    """
    start = max(1, start)
    width = max(1, (end or start + 1) - start)
    before = start - 1
    after = max(0, len(text) - before - width)
    return f"{'~' * before}{'^' * width}{'~' * after}"


def _terminal_allows(stream: TextIO, opt_out: str) -> bool:
    """A TTY that is not dumb, where the user did not set `opt_out`."""
    if not getattr(stream, "isatty", lambda: False)():
        return False
    return os.getenv(opt_out) is None and os.getenv("TERM") != "dumb"


class Reporter:
    """Collects diagnostics for one source file and renders them."""

    def __init__(self, source: Optional[str] = None, filename: str = "<input>") -> None:
        self.source = source
        self.filename = filename
        self.items: List[Diagnostic] = []
        self._lines = source.splitlines() if source else []

    def error(self, code: str, msg: str, span: Optional[Span], snippet: Optional[str] = None):
        self.items.append(Diagnostic("error", code, msg, span, snippet))

    def warn(self, code: str, msg: str, span: Optional[Span], snippet: Optional[str] = None):
        self.items.append(Diagnostic("warning", code, msg, span, snippet))

    @property
    def has_warnings(self) -> bool:
        return any(d.kind == "warning" for d in self.items)

    def _location(self, d: Diagnostic) -> str:
        if d.span is None:
            return self.filename
        return f"{self.filename}:{d.span.line}:{d.span.col}"

    def _excerpt(self, d: Diagnostic) -> tuple[str, str]:
        """The offending line and its underline."""
        span = d.span
        if 0 < span.line <= len(self._lines):
            text, start = self._lines[span.line - 1], span.col
        else:
            text, start = d.snippet or "", 1

        if span.end_line == span.line and span.end_col is not None:
            end = start + (span.end_col - span.col)
        else:
            # Unknown or multi-line end: mark the rest of the line
            end = len(text) + 1
        return text, underline(text, start, end)

    def _render(self, d: Diagnostic, use_color: bool, use_unicode: bool) -> Iterator[str]:
        message = d.message if d.message.endswith(".") else f"{d.message}."
        loc = self._location(d)
        if use_color:
            color = KIND_COLORS[d.kind]
            yield (f"{C.CYAN}{loc}{C.RESET}: {C.BOLD}{color}{d.kind}{C.RESET} "
                   f"[{C.DIM}{d.code}{C.RESET}]: {message}")
        else:
            yield f"{loc}: {d.kind} [{d.code}]: {message}"

        if d.span is None:
            return

        text, marks = self._excerpt(d)
        bar, corner = ("│", "╰") if use_unicode else ("|", "`")
        if use_color:
            yield f"{C.GRAY}  {bar} {C.RESET}{text}"
            yield f"{C.GRAY}  {corner} {C.RESET}{KIND_COLORS[d.kind]}{marks}{C.RESET}"
        else:
            yield f"  {bar} {text}"
            yield f"  {corner} {marks}"

    def format(self, use_color: bool = True, use_unicode: bool = True) -> str:
        """Render every diagnostic, each followed by its source excerpt."""
        lines: List[str] = []
        for d in self.items:
            lines.extend(self._render(d, use_color, use_unicode))
        return "\n".join(lines)

    def print(self, stream: Optional[TextIO] = None, use_color: Optional[bool] = None,
              use_unicode: Optional[bool] = None) -> None:
        """Write the diagnostics to `stream`, standard error by default.

        Colors and the │/╰ guides are used only on a TTY; NO_COLOR,
        NO_UNICODE and TERM=dumb turn them off.
        """
        stream = stream or sys.stderr
        if use_color is None:
            use_color = _terminal_allows(stream, "NO_COLOR")
        if use_unicode is None:
            use_unicode = _terminal_allows(stream, "NO_UNICODE")

        if self.items:
            print(self.format(use_color=use_color, use_unicode=use_unicode), file=stream)
