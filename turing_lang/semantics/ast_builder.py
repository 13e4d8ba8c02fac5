"""Build the record sequence from a Lark parse tree."""
from __future__ import annotations

import logging
from typing import Callable, Dict, List, Optional

from lark import Token, Tree

from turing_lang.internals.report import span_of
from turing_lang.semantics.ast import (
    Composition,
    Description,
    Field,
    FinalStates,
    InitialState,
    InstructionDecl,
    Program,
    Record,
    TapeLiteral,
)

logger = logging.getLogger(__name__)


def tokens_of(t: Tree, *types: str) -> List[Token]:
    """Get the Token children of `t`, optionally restricted to some terminal types."""
    return [c for c in t.children if isinstance(c, Token) and (not types or c.type in types)]


def field_of(tok: Token) -> Field:
    return Field(text=str(tok.value), loc=span_of(tok))


class ASTBuilder:
    """Turns the `start` tree into a Program, one record per declaration."""

    def __init__(self) -> None:
        self._handlers: Dict[str, Callable[[Tree], Record]] = {
            "description": self._description,
            "tape": self._tape,
            "initial_state": self._initial_state,
            "final_state": self._final_state,
            "composition": self._composition,
            "instruction": self._instruction,
        }

    def build(self, tree: Tree) -> Program:
        assert tree.data == "start"
        program = Program(loc=span_of(tree))
        for child in tree.children:
            if not isinstance(child, Tree):
                continue
            record = self.build_record(child)
            if record is not None:
                program.records.append(record)
        return program

    def build_record(self, t: Tree) -> Optional[Record]:
        handler = self._handlers.get(str(t.data))
        if handler is None:
            logger.warning("Unhandled parse node '%s'", t.data)
            return None
        return handler(t)

    def _description(self, t: Tree) -> Description:
        tok = tokens_of(t, "DESCRIPTION")[0]
        text = str(tok.value)[3:].strip()
        return Description(loc=span_of(t), text=text)

    def _tape(self, t: Tree) -> TapeLiteral:
        return TapeLiteral(loc=span_of(t), bits=[field_of(b) for b in tokens_of(t, "BIT")])

    def _initial_state(self, t: Tree) -> InitialState:
        return InitialState(loc=span_of(t), state=field_of(tokens_of(t, "STATE")[0]))

    def _final_state(self, t: Tree) -> FinalStates:
        return FinalStates(loc=span_of(t), states=[field_of(s) for s in tokens_of(t, "STATE")])

    def _composition(self, t: Tree) -> Composition:
        return Composition(loc=span_of(t), libraries=[field_of(n) for n in tokens_of(t, "LIBRARY")])

    def _instruction(self, t: Tree) -> InstructionDecl:
        # Children keep grammar order: STATE, BIT, BIT, MOVEMENT, STATE
        return InstructionDecl(loc=span_of(t), fields=[field_of(tok) for tok in tokens_of(t)])
