"""Turing Lang - compile and run single-tape binary Turing machines."""
from importlib.metadata import version, PackageNotFoundError

try:
    __version__ = version("turing-lang")
    __dev__ = False
except PackageNotFoundError:
    # Development mode - read from pyproject.toml
    import tomllib
    from pathlib import Path
    try:
        pyproject = Path(__file__).parent.parent / "pyproject.toml"
        with open(pyproject, "rb") as f:
            __version__ = tomllib.load(f).get("project", {}).get("version", "unknown")
    except (OSError, tomllib.TOMLDecodeError):
        __version__ = "unknown"
    __dev__ = True

from turing_lang.backend.library_registry import Library, LibraryRegistry, get_registry
from turing_lang.backend.machine import StepOutcome, TuringMachine
from turing_lang.backend.output import Defined, TuringOutput, Undefined
from turing_lang.compiler.builder import build
from turing_lang.internals.diagnostics import (
    CompilerError,
    CompilerSyntaxError,
    CompilerWarning,
    FileRuleError,
    LibraryError,
    StateOverwrite,
)
from turing_lang.internals.parser import parse
from turing_lang.internals.report import Span
from turing_lang.semantics.instruction import Instruction, Movement

__all__ = [
    "build",
    "parse",
    "get_registry",
    "CompilerError",
    "CompilerSyntaxError",
    "CompilerWarning",
    "Defined",
    "FileRuleError",
    "Instruction",
    "Library",
    "LibraryError",
    "LibraryRegistry",
    "Movement",
    "Span",
    "StateOverwrite",
    "StepOutcome",
    "TuringMachine",
    "TuringOutput",
    "Undefined",
]
