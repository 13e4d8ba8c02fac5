"""Built-in library machines available to `compose = {...};`.

Numbers use the unary convention of the language: n is written as n + 1
consecutive 1 cells and arguments are separated by a single 0. Every
library starts in `q0` on the leftmost 1 of its first argument and leaves
its result as the number of 1 cells on the tape.
"""
from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
from types import MappingProxyType
from typing import Dict, FrozenSet, Iterable, List, Mapping, Optional

from turing_lang.internals.diagnostics import CompilerError, LibraryError
from turing_lang.semantics.ast import InstructionDecl
from turing_lang.semantics.instruction import Instruction, Key


@dataclass(frozen=True)
class Library:
    """A named machine whose instructions can be merged into a program."""

    name: str
    description: str
    initial_state: str
    final_state: str
    used_states: FrozenSet[str]
    code: str

    def get_instructions(self) -> Dict[Key, Instruction]:
        """Parse the embedded code into a fresh instruction table.

        Raises:
            LibraryError: if the embedded code does not parse.
        """
        from turing_lang.internals.parser import parse

        try:
            program = parse(self.code)
            instructions = [Instruction.from_fields(r.fields) for r in program.of_type(InstructionDecl)]
        except CompilerError as e:
            raise LibraryError(self.name, f"{e.message} at {e.position}") from e

        return {i.key: i for i in instructions}


def _states(*names: str) -> FrozenSet[str]:
    return frozenset(names)


SUM = Library(
    name="sum",
    description="a + b",
    initial_state="q0",
    final_state="q2",
    used_states=_states("q0", "q1", "q2", "q3"),
    code="""
    // Drop one 1 from each argument; the separator is left in place.
    (q0, 1, 0, R, q1);
    (q1, 1, 1, R, q1);
    (q1, 0, 0, R, q3);
    (q3, 1, 0, H, q2);
    """,
)

DOUBLE = Library(
    name="double",
    description="2 * a",
    initial_state="q0",
    final_state="q8",
    used_states=_states(*(f"q{i}" for i in range(9))),
    code="""
    (q0, 1, 0, R, q1);

    // Take one 1 from the argument...
    (q1, 1, 0, R, q2);
    (q1, 0, 0, H, q8);
    (q2, 1, 1, R, q2);
    (q2, 0, 0, R, q3);

    // ...and write two at the end of the result
    (q3, 1, 1, R, q3);
    (q3, 0, 1, R, q4);
    (q4, 0, 1, L, q5);

    // Back to the leftmost 1 of what is left of the argument
    (q5, 1, 1, L, q5);
    (q5, 0, 0, L, q6);
    (q6, 1, 1, L, q7);
    (q6, 0, 0, H, q8);
    (q7, 1, 1, L, q7);
    (q7, 0, 0, R, q1);
    """,
)

MOD2 = Library(
    name="mod2",
    description="a mod 2",
    initial_state="q0",
    final_state="q3",
    used_states=_states("q0", "q1", "q2", "q3"),
    code="""
    (q0, 1, 0, R, q1);
    // q1: even so far, q2: odd so far
    (q1, 1, 0, R, q2);
    (q1, 0, 0, H, q3);
    (q2, 1, 0, R, q1);
    (q2, 0, 1, H, q3);
    """,
)

DIV2 = Library(
    name="div2",
    description="a / 2, rounded down",
    initial_state="q0",
    final_state="q3",
    used_states=_states("q0", "q1", "q2", "q3"),
    code="""
    (q0, 1, 0, R, q1);
    // Erase one 1 of every pair, keep the other
    (q1, 1, 0, R, q2);
    (q1, 0, 0, H, q3);
    (q2, 1, 1, R, q1);
    (q2, 0, 0, H, q3);
    """,
)

MONUS = Library(
    name="monus",
    description="a - b, or 0 when b > a",
    initial_state="q0",
    final_state="q18",
    used_states=_states(*(f"q{i}" for i in range(19))),
    code="""
    // The leftmost 1 of a is kept as a sentinel until the end.
    (q0, 1, 1, R, q1);
    (q1, 1, 1, R, q1);
    (q1, 0, 0, R, q2);
    (q2, 1, 0, R, q3);

    // Erase the leftmost 1 of b and check whether it was the last one
    (q3, 1, 0, R, q4);
    (q3, 0, 0, L, q13);
    (q4, 1, 1, L, q5);
    (q4, 0, 0, L, q9);

    // More of b left: erase the rightmost 1 of a and come back
    (q5, 0, 0, L, q5);
    (q5, 1, 1, L, q6);
    (q6, 1, 1, R, q7);
    (q6, 0, 0, R, q15);
    (q7, 1, 0, R, q8);
    (q8, 0, 0, R, q8);
    (q8, 1, 1, H, q3);

    // That was the last 1 of b: erase the rightmost 1 of a, then the sentinel
    (q9, 0, 0, L, q9);
    (q9, 1, 1, L, q10);
    (q10, 1, 1, R, q11);
    (q10, 0, 0, R, q14);
    (q11, 1, 0, L, q12);
    (q12, 1, 1, L, q12);
    (q12, 0, 0, R, q14);
    (q13, 0, 0, L, q13);
    (q13, 1, 1, L, q12);
    (q14, 1, 0, H, q18);

    // a ran out first: erase the sentinel and what is left of b
    (q15, 1, 0, R, q16);
    (q16, 0, 0, R, q16);
    (q16, 1, 0, R, q17);
    (q17, 1, 0, R, q17);
    (q17, 0, 0, H, q18);
    """,
)

BUILTIN_LIBRARIES = (SUM, DOUBLE, MOD2, DIV2, MONUS)


class LibraryRegistry:
    """Read-only lookup of the built-in libraries by exact name."""

    def __init__(self, libraries: Iterable[Library]):
        table: Dict[str, Library] = {}
        for lib in libraries:
            if lib.name in table:
                raise ValueError(f"duplicate library name '{lib.name}'")
            table[lib.name] = lib
        self._libraries: Mapping[str, Library] = MappingProxyType(table)

    def get_library(self, lib_name: str) -> Optional[Library]:
        return self._libraries.get(lib_name)

    def get_all_libraries(self) -> Mapping[str, Library]:
        return self._libraries

    def names(self) -> List[str]:
        return list(self._libraries)

    def validate(self) -> None:
        """Check that every library parses and only uses its declared states.

        Raises:
            LibraryError: for the first library that fails.
        """
        for lib in self._libraries.values():
            instructions = lib.get_instructions()
            if not instructions:
                raise LibraryError(lib.name, "no instructions")

            for state in (lib.initial_state, lib.final_state):
                if state not in lib.used_states:
                    raise LibraryError(lib.name, f"state '{state}' is not declared as used")

            for instruction in instructions.values():
                undeclared = {instruction.from_state, instruction.to_state} - lib.used_states
                if undeclared:
                    raise LibraryError(
                        lib.name,
                        f"instruction {instruction} uses undeclared state(s) {', '.join(sorted(undeclared))}",
                    )

    def __contains__(self, lib_name: object) -> bool:
        return lib_name in self._libraries

    def __len__(self) -> int:
        return len(self._libraries)


@lru_cache(maxsize=1)
def get_registry() -> LibraryRegistry:
    """The built-in registry, validated once on first use."""
    registry = LibraryRegistry(BUILTIN_LIBRARIES)
    registry.validate()
    return registry
