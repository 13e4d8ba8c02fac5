# semantics/ast.py
from __future__ import annotations
from dataclasses import dataclass, field
from typing import List, Optional, Union

from turing_lang.internals.report import Span

# === Core node base ===

@dataclass
class Node:
    loc: Optional[Span]

@dataclass
class Field:
    """A single token of a declaration, kept with its own span."""
    text: str
    loc: Optional[Span] = None

# === Declarations ===

@dataclass
class Description(Node):
    text: str                        # Without the leading '///', trimmed

@dataclass
class TapeLiteral(Node):
    bits: List[Field]                # One field per '0'/'1' character, in order

    @property
    def code(self) -> str:
        return "".join(b.text for b in self.bits)

@dataclass
class InitialState(Node):
    state: Field

@dataclass
class FinalStates(Node):
    states: List[Field]

@dataclass
class Composition(Node):
    libraries: List[Field]           # Library names, resolved by the builder

@dataclass
class InstructionDecl(Node):
    fields: List[Field]              # state, value, value, movement, state

Record = Union[Description, TapeLiteral, InitialState, FinalStates, Composition, InstructionDecl]

# === Program structure ===

@dataclass
class Program(Node):
    records: List[Record] = field(default_factory=list)

    def of_type(self, kind: type) -> List[Record]:
        return [r for r in self.records if isinstance(r, kind)]
