"""Transition rules of a Turing machine."""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Sequence, Tuple

from turing_lang.internals.diagnostics import CompilerSyntaxError
from turing_lang.internals.errors import raise_internal_error
from turing_lang.internals.report import Span
from turing_lang.semantics.ast import Field


class Movement(str, Enum):
    """The possible movements of the tape head."""
    RIGHT = "R"
    LEFT = "L"
    HALT = "H"

    @classmethod
    def parse(cls, symbol: str) -> "Movement":
        """Parse a movement symbol; raises ValueError for unknown symbols."""
        try:
            return MOVEMENT_SYMBOLS[symbol]
        except KeyError:
            raise ValueError(f"\"{symbol}\" is an unknown movement") from None

    def __str__(self) -> str:
        return self.value


# English and Spanish initials: Right/Derecha, Left/Izquierda, Halt/Nada
MOVEMENT_SYMBOLS: Dict[str, Movement] = {
    "R": Movement.RIGHT,
    "D": Movement.RIGHT,
    "L": Movement.LEFT,
    "I": Movement.LEFT,
    "H": Movement.HALT,
    "N": Movement.HALT,
}

Key = Tuple[str, bool]


@dataclass(frozen=True)
class Instruction:
    """A rule (from_state, from_value) -> (to_value, movement, to_state)."""
    from_state: str
    from_value: bool
    to_value: bool
    movement: Movement
    to_state: str

    @property
    def key(self) -> Key:
        return (self.from_state, self.from_value)

    def __str__(self) -> str:
        return (
            f"({self.from_state}, {int(self.from_value)}, {int(self.to_value)}, "
            f"{self.movement}, {self.to_state})"
        )

    @classmethod
    def from_fields(cls, fields: Sequence[Field]) -> "Instruction":
        """Create an instruction from the five fields of a declaration.

        Raises:
            CompilerSyntaxError: if the movement symbol is unknown. The error
                points at the movement token.
        """
        if len(fields) != 5:
            raise_internal_error("CE0002", got=len(fields))
        from_state, from_value, to_value, movement, to_state = fields

        try:
            move = Movement.parse(movement.text)
        except ValueError:
            raise CompilerSyntaxError(
                "CE2002",
                movement.loc or Span(1, 1),
                code=movement.text,
                expected="movement",
                symbol=movement.text,
            ) from None

        return cls(
            from_state=from_state.text,
            from_value=from_value.text == "1",
            to_value=to_value.text == "1",
            movement=move,
            to_state=to_state.text,
        )

    @classmethod
    def halt(cls, state: str, value: bool) -> "Instruction":
        """The implicit rule of a final state with no explicit instruction."""
        return cls(
            from_state=state,
            from_value=value,
            to_value=value,
            movement=Movement.HALT,
            to_state=state,
        )
