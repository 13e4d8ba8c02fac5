"""The Turing machine execution engine."""
from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Deque, Dict, List, Optional, Tuple

from turing_lang.backend.constants import TAPE_MARGIN
from turing_lang.backend.output import Defined, TuringOutput, Undefined
from turing_lang.semantics.instruction import Instruction, Key, Movement

if TYPE_CHECKING:
    from turing_lang.backend.library_registry import Library
    from turing_lang.internals.diagnostics import CompilerWarning

logger = logging.getLogger(__name__)


class StepOutcome(Enum):
    """What happened on a single step."""
    CONTINUE = "continue"    # A rule was applied and the new state is not final
    FINAL = "final"          # The machine is in a final state
    UNDEFINED = "undefined"  # No rule for a non-final state; nothing was changed


@dataclass
class TuringMachine:
    """A binary single-tape Turing machine.

    The head always keeps TAPE_MARGIN cells on both of its sides; the tape
    grows at either end when needed.
    """

    # The dictionary of instructions for the machine
    instructions: Dict[Key, Instruction]
    # If the machine reaches one of these states, it stops
    final_states: List[str]
    current_state: str
    tape: Deque[bool]
    tape_position: int = 0
    # How many times each state was entered; used to detect infinite loops
    frequencies: Dict[str, int] = field(default_factory=dict)
    # Found in the `///` comment of the source
    description: Optional[str] = None
    # Informational only, their instructions are already in `instructions`
    composed_libs: List["Library"] = field(default_factory=list)
    # The source code of the machine, used by reset(); None for none()
    code: Optional[str] = None

    @classmethod
    def from_source(cls, code: str) -> Tuple["TuringMachine", List["CompilerWarning"]]:
        """Compile `code`; see turing_lang.compiler.builder.build."""
        from turing_lang.compiler.builder import build
        return build(code)

    @classmethod
    def none(cls) -> "TuringMachine":
        """A single-state machine that is already halted."""
        state = "f"
        halt = Instruction(state, False, False, Movement.HALT, state)
        machine = cls(
            instructions={halt.key: halt},
            final_states=[state],
            current_state=state,
            tape=deque([False]),
        )
        machine.restore_margin()
        return machine

    def reset(self) -> None:
        """Rebuild the machine from its source code, discarding its run.

        A machine without source code, such as the one from none(), is
        rebuilt as none().
        """
        if self.code is None:
            fresh = self.none()
        else:
            fresh, _ = self.from_source(self.code)
        self.__dict__.update(fresh.__dict__)

    # === Tape ===

    def restore_margin(self) -> None:
        """Grow the tape until the head has TAPE_MARGIN cells on each side."""
        while self.tape_position < TAPE_MARGIN:
            self.tape.appendleft(False)
            self.tape_position += 1

        while self.tape_position >= len(self.tape) - TAPE_MARGIN:
            self.tape.append(False)

    def _move(self, movement: Movement) -> None:
        if movement is Movement.LEFT:
            if self.tape_position == 0:
                self.tape.appendleft(False)
            else:
                self.tape_position -= 1
        elif movement is Movement.RIGHT:
            if self.tape_position == len(self.tape) - 1:
                self.tape.append(False)
            self.tape_position += 1

    @property
    def current_value(self) -> bool:
        return self.tape[self.tape_position]

    # === Instructions ===

    def get_instruction(self) -> Optional[Instruction]:
        """The rule for the current state and value.

        A final state without an explicit rule gets an implicit halt rule.
        Returns None when the transition is undefined.
        """
        index = (self.current_state, self.current_value)
        instruction = self.instructions.get(index)
        if instruction is not None:
            return instruction

        if not self.finished():
            return None

        return Instruction.halt(*index)

    def get_current_instruction(self) -> Optional[Instruction]:
        """The explicit rule for the current state and value, if any."""
        return self.instructions.get((self.current_state, self.current_value))

    def is_undefined(self) -> bool:
        return self.get_instruction() is None

    # === Execution ===

    def advance(self) -> StepOutcome:
        """Apply one rule and report where the machine ended up."""
        instruction = self.get_instruction()
        if instruction is None:
            logger.error(
                "No instruction given for state (%s, %s)",
                self.current_state, int(self.current_value),
            )
            return StepOutcome.UNDEFINED

        self.tape[self.tape_position] = instruction.to_value
        self._move(instruction.movement)
        self.restore_margin()

        return StepOutcome.FINAL if self._update_state(instruction.to_state) else StepOutcome.CONTINUE

    def step(self) -> bool:
        """Calculate the next step; True when the machine stopped.

        Use is_undefined() to tell a final state from an undefined transition.
        """
        return self.advance() is not StepOutcome.CONTINUE

    def _update_state(self, state: str) -> bool:
        self.current_state = state
        self.frequencies[state] = self.frequencies.get(state, 0) + 1
        return self.finished()

    def finished(self) -> bool:
        return self.current_state in self.final_states

    def final_result(self) -> TuringOutput:
        """Run until a final state or an undefined transition.

        There is no step limit; drive step() yourself together with
        is_infinite_loop() when the machine may not terminate.
        """
        steps = 0
        while not self.finished():
            outcome = self.advance()
            if outcome is StepOutcome.UNDEFINED:
                return Undefined(steps)
            steps += 1

        return Defined(steps, self.ones())

    def tape_value(self) -> TuringOutput:
        """The current output without running the machine."""
        if self.is_undefined():
            return Undefined(0)
        return Defined(0, self.ones())

    # === Loop detection ===

    def is_infinite_loop(self, threshold: int) -> bool:
        """True if a state was entered more than `threshold` times."""
        return any(count > threshold for count in self.frequencies.values())

    def reset_frequencies(self) -> None:
        self.frequencies = {}

    # === Tape inspection ===

    def ones(self) -> int:
        return sum(self.tape)

    def values(self) -> List[int]:
        """The numbers on the tape: each run of n 1 cells encodes n - 1."""
        cells = "".join("1" if v else "0" for v in self.tape)
        return [len(run) - 1 for run in cells.split("0") if run]

    def to_display_string(self) -> str:
        cells = "".join(f"{int(v)} " for v in self.tape)
        marks = "".join("^ " if i == self.tape_position else "  " for i in range(len(self.tape)))
        return f"{cells}\n{marks}"

    def __str__(self) -> str:
        return self.to_display_string()
