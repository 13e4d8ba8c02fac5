"""Lark parser setup and AST construction."""
from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from lark import Lark, UnexpectedCharacters, UnexpectedEOF, UnexpectedInput, UnexpectedToken

from turing_lang.internals.diagnostics import FileRuleError
from turing_lang.internals.report import Span
from turing_lang.semantics.ast import Program
from turing_lang.semantics.ast_builder import ASTBuilder

GRAMMAR_PATH = Path(__file__).parent.parent / "grammar.lark"

# Readable names for the grammar's terminals in error messages
TERMINAL_NAMES = {
    "LBRACE": "'{'",
    "RBRACE": "'}'",
    "LPAR": "'('",
    "RPAR": "')'",
    "COMMA": "','",
    "SEMICOLON": "';'",
    "EQUAL": "'='",
    "I": "'I'",
    "F": "'F'",
    "COMPOSE": "'compose'",
    "BIT": "a tape value (0 or 1)",
    "STATE": "a state name",
    "LIBRARY": "a library name",
    "MOVEMENT": "a movement",
    "DESCRIPTION": "a description",
    "$END": "end of file",
}


@lru_cache(maxsize=1)
def get_parser() -> Lark:
    return Lark.open(
        str(GRAMMAR_PATH),
        parser="lalr",
        lexer="contextual",
        propagate_positions=True,
        maybe_placeholders=False,
    )


def _describe_expected(expected) -> str:
    names = sorted(TERMINAL_NAMES.get(e, e) for e in expected)
    if not names:
        return ""
    if len(names) == 1:
        return names[0]
    return ", ".join(names[:-1]) + " or " + names[-1]


def improve_parse_error(e: UnexpectedInput) -> str:
    """Turn a Lark failure into a one-line message."""
    if isinstance(e, UnexpectedEOF):
        return f"unexpected end of file, expected {_describe_expected(e.expected)}"
    if isinstance(e, UnexpectedToken):
        found = "end of file" if e.token.type == "$END" else f"'{e.token}'"
        return f"unexpected {found}, expected {_describe_expected(e.expected)}"
    if isinstance(e, UnexpectedCharacters):
        allowed = getattr(e, "allowed", None) or set()
        hint = f", expected {_describe_expected(allowed)}" if allowed else ""
        return f"unexpected character '{e.char}'{hint}"
    return str(e).splitlines()[0]


def _error_position(e: UnexpectedInput, src: str) -> Span:
    line = getattr(e, "line", -1)
    col = getattr(e, "column", -1)
    if line is None or line < 1:
        # EOF errors carry no location; point past the last character
        lines = src.splitlines() or [""]
        return Span(len(lines), len(lines[-1]) + 1)
    return Span(line, col)


def parse_tree(src: str):
    """Parse source code into a raw Lark tree, raising FileRuleError on failure."""
    try:
        return get_parser().parse(src)
    except UnexpectedInput as e:
        position = _error_position(e, src)
        lines = src.splitlines()
        code = lines[position.line - 1] if 0 < position.line <= len(lines) else ""
        expected = _describe_expected(getattr(e, "expected", None) or getattr(e, "allowed", None) or [])
        found = str(e.token) if isinstance(e, UnexpectedToken) else getattr(e, "char", None)
        raise FileRuleError(improve_parse_error(e), position, code,
                            expected=expected or None, found=found) from e


def parse_to_ast(src: str, dump_parse: bool = False):
    """Parse source code into records.

    Returns:
        Tuple of (program, parse_tree).
    """
    tree = parse_tree(src)
    if dump_parse:
        print(tree.pretty())

    ast_builder = ASTBuilder()
    return ast_builder.build(tree), tree


def parse(src: str) -> Program:
    """Parse source code into a Program; raises FileRuleError on grammar failure."""
    program, _ = parse_to_ast(src)
    return program
