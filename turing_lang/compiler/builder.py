"""Compile source text into a TuringMachine."""
from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass, field
from typing import Deque, Dict, List, Optional, Tuple

from turing_lang.backend.library_registry import Library, get_registry
from turing_lang.backend.machine import TuringMachine
from turing_lang.backend.transition_table import OverwritePolicy, TransitionTable
from turing_lang.internals.diagnostics import CompilerSyntaxError, CompilerWarning
from turing_lang.internals.parser import parse
from turing_lang.internals.report import Span
from turing_lang.semantics.ast import (
    Composition,
    Description,
    FinalStates,
    InitialState,
    InstructionDecl,
    Node,
    Record,
    TapeLiteral,
)
from turing_lang.semantics.instruction import Instruction

logger = logging.getLogger(__name__)

# Declarations a program may contain at most once, by record type
SINGLE_DECLARATIONS = {
    TapeLiteral: "tape",
    InitialState: "initial state",
    FinalStates: "final state",
    Composition: "composition",
}


@dataclass
class _BuildState:
    """Everything collected while walking the records of one build."""
    table: TransitionTable = field(default_factory=TransitionTable)
    final_states: List[str] = field(default_factory=list)
    current_state: str = ""
    tape: Deque[bool] = field(default_factory=deque)
    description: Optional[str] = None
    composed: List[Library] = field(default_factory=list)
    warnings: List[CompilerWarning] = field(default_factory=list)
    seen: Dict[type, Optional[Span]] = field(default_factory=dict)


def _check_single(record: Node, state: _BuildState) -> None:
    kind = type(record)
    construct = SINGLE_DECLARATIONS.get(kind)
    if construct is None:
        return
    if kind in state.seen:
        prev = state.seen[kind]
        raise CompilerSyntaxError(
            "CE2004",
            record.loc or Span(1, 1),
            expected=construct,
            found=construct,
            construct=construct,
            prev_loc=f"{prev.line}:{prev.col}" if prev else "?",
        )
    state.seen[kind] = record.loc


def _description(record: Description, state: _BuildState) -> None:
    if state.description is not None:
        logger.debug("Ignoring extra description line: %r", record.text)
        return
    if record.text:
        state.description = record.text
        logger.debug("Found description: %r", state.description)


def _tape(record: TapeLiteral, state: _BuildState) -> None:
    logger.debug("Entered tape rule: %s", record.code)

    bits = [b.text == "1" for b in record.bits]
    if bits and not bits[0]:
        logger.info("The tape started with a 0, skipping it")
        bits = bits[1:]

    if not any(bits):
        logger.error("The tape did not contain at least a 1")
        raise CompilerSyntaxError(
            "CE2001",
            record.loc or Span(1, 1),
            code=record.code,
            expected="tape",
        )

    state.tape = deque(bits)
    logger.debug("Tape: %s", record.code)


def _initial_state(record: InitialState, state: _BuildState) -> None:
    state.current_state = record.state.text
    logger.debug("The initial state is %r", state.current_state)


def _final_state(record: FinalStates, state: _BuildState) -> None:
    state.final_states = [s.text for s in record.states]
    logger.debug("The final states are %s", state.final_states)


def _composition(record: Composition, state: _BuildState) -> None:
    registry = get_registry()
    for name in record.libraries:
        library = registry.get_library(name.text)
        if library is None:
            logger.error("Could not find the library %r", name.text)
            raise CompilerSyntaxError(
                "CE2003",
                name.loc or record.loc or Span(1, 1),
                code=name.text,
                expected="library",
                name=name.text,
            )

        logger.debug("Found composition of %s, composing...", library.name)
        state.table.merge(library.get_instructions().values(), OverwritePolicy.SILENT)
        state.composed.append(library)


def _instruction(record: InstructionDecl, state: _BuildState) -> None:
    instruction = Instruction.from_fields(record.fields)
    warning = state.table.insert(instruction, OverwritePolicy.WARN, record.loc)
    if warning is not None:
        state.warnings.append(warning)
    logger.debug("Found instruction %s", instruction)


_HANDLERS = {
    Description: _description,
    TapeLiteral: _tape,
    InitialState: _initial_state,
    FinalStates: _final_state,
    Composition: _composition,
    InstructionDecl: _instruction,
}


def build(code: str) -> Tuple[TuringMachine, List[CompilerWarning]]:
    """Create a Turing machine from source code.

    Returns:
        The machine, positioned on the first cell of its tape, and the
        warnings produced while building it.

    Raises:
        CompilerError: FileRuleError when the grammar rejects the source,
            CompilerSyntaxError when a declaration is invalid.
    """
    program = parse(code)
    state = _BuildState()

    record: Record
    for record in program.records:
        handler = _HANDLERS.get(type(record))
        if handler is None:
            logger.warning("Unhandled record: %r", record)
            continue
        _check_single(record, state)
        handler(record, state)

    machine = TuringMachine(
        instructions=state.table.as_dict(),
        final_states=state.final_states,
        current_state=state.current_state,
        tape=state.tape,
        description=state.description,
        composed_libs=state.composed,
        code=code,
    )
    machine.restore_margin()

    logger.debug("The instructions are %s", [str(i) for i in state.table])
    return machine, state.warnings
