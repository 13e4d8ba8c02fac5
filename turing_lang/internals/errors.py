"""Catalog of every diagnostic the compiler and the driver can produce.

Codes are grouped by their prefix:

    CE0xxx  internal errors (a bug in the compiler or its built-in libraries)
    CE1xxx  grammar errors
    CE2xxx  validation errors
    CWxxxx  build warnings
    RExxxx  runtime errors reported by the driver
    RWxxxx  runtime warnings reported by the driver
"""
from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional

from turing_lang.internals.report import Span, Reporter


class Severity(str, Enum):
    ERROR = "error"
    WARNING = "warning"


class Category(str, Enum):
    GENERAL   = "general"
    SYNTAX    = "syntax"
    TAPE      = "tape"
    STATE     = "state"
    LIBRARY   = "library"
    RUNTIME   = "runtime"
    INTERNAL  = "internal"


@dataclass(frozen=True)
class ErrorMessage:
    code: str
    severity: Severity
    text: str                       # str.format template
    category: Category = Category.GENERAL
    doc: str = ""                   # Longer explanation, shown by tooling


REGISTRY: Dict[str, ErrorMessage] = {}


class _ErrorCatalog:
    """Attribute access to REGISTRY: ERR.CE2001 or ERR["CE2001"]."""

    def __init__(self, registry: Dict[str, ErrorMessage]) -> None:
        self._by_code = registry

    def __getattr__(self, code: str) -> ErrorMessage:
        if code.startswith("_") or code not in self._by_code:
            raise AttributeError(code)
        return self._by_code[code]

    def __getitem__(self, code: str) -> ErrorMessage:
        return _get(code)


ERR = _ErrorCatalog(REGISTRY)


def emit(r: Reporter, em: ErrorMessage, span: Optional[Span], snippet: Optional[str] = None, **kwargs) -> None:
    """Format `em` with `kwargs` and add it to `r` with its own severity."""
    report = r.error if em.severity is Severity.ERROR else r.warn
    report(em.code, _fmt(em.code, **kwargs), span, snippet)


def format_message(code: str, **kwargs) -> str:
    """Return the catalog text for `code` with its placeholders filled in."""
    return _fmt(code, **kwargs)


def raise_internal_error(code: str, **kwargs) -> None:
    """Abort on a condition that user input cannot cause.

    Raises:
        RuntimeError: always, as "CODE: message".
    """
    raise RuntimeError(f"{code}: {_fmt(code, **kwargs)}")


#
# --- Helpers
#

def _add(msg: ErrorMessage) -> None:
    existing = REGISTRY.get(msg.code)
    if existing is not None:
        raise ValueError(f"duplicate error code {msg.code}: {existing.text!r} and {msg.text!r}")
    REGISTRY[msg.code] = msg

def _get(code: str) -> ErrorMessage:
    msg = REGISTRY.get(code)
    if msg is None:
        raise KeyError(f"unknown error code: {code}")
    return msg

def _fmt(code: str, **kwargs) -> str:
    template = _get(code).text
    try:
        return template.format(**kwargs)
    except KeyError as e:
        raise KeyError(f"missing text key '{e.args[0]}' for {code} in {template!r}") from None

#
# --- Registry population
#

# Internal errors (CE0xxx)
_add(ErrorMessage("CE0001", Severity.ERROR,
    "built-in library '{name}' is malformed: {reason}",
    Category.INTERNAL, "A library shipped with the compiler failed to parse or validate (compiler bug)."))

_add(ErrorMessage("CE0002", Severity.ERROR,
    "instruction expects 5 fields, got {got}",
    Category.INTERNAL, "The parse tree of an instruction did not have the five expected children."))

# Grammar errors (CE1xxx)
_add(ErrorMessage("CE1001", Severity.ERROR,
    "{detail}",
    Category.SYNTAX, "The source could not be parsed by the grammar."))

# Validation errors (CE2xxx)
_add(ErrorMessage("CE2001", Severity.ERROR,
    "Expected at least a 1 in the tape",
    Category.TAPE, "The tape literal must contain at least one 1 cell."))

_add(ErrorMessage("CE2002", Severity.ERROR,
    "\"{symbol}\" is an unknown movement",
    Category.SYNTAX, "Movements are R/D (right), L/I (left) and H/N (halt)."))

_add(ErrorMessage("CE2003", Severity.ERROR,
    "Could not find the library \"{name}\"",
    Category.LIBRARY, "Composed names must match a built-in library exactly. Run 'turingc --libs' to list them."))

_add(ErrorMessage("CE2004", Severity.ERROR,
    "duplicate {construct} declaration (first declared at {prev_loc})",
    Category.SYNTAX, "A program may declare at most one tape, initial state, final-state set and composition."))

# Warnings (CW1xxx)
_add(ErrorMessage("CW1001", Severity.WARNING,
    "instruction ({state}, {value}) already exists, overwriting it",
    Category.STATE, "A later instruction for the same state and tape value replaces the earlier one."))

#
# --- Runtime diagnostics (RExxxx / RWxxxx) ---
#
# Reported by the command line driver after a run stops early.
#

_add(ErrorMessage("RE0001", Severity.ERROR,
    "no instruction given for state ({state}, {value})",
    Category.RUNTIME, "The machine reached a non-final state with no transition for the value under the head."))

_add(ErrorMessage("RW0001", Severity.WARNING,
    "state '{state}' was visited more than {threshold} times, probable infinite loop",
    Category.RUNTIME, "Raise --threshold if the machine is expected to revisit states this often."))
