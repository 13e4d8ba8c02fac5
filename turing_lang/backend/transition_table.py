"""Transition table with explicit overwrite policies.

Entries are keyed by (state, value) and the latest insertion always wins.
What differs is whether replacing an entry is reported:

- OverwritePolicy.SILENT: used when merging a composed library. Libraries
  that reuse each other's internal state names are the program author's
  responsibility.
- OverwritePolicy.WARN: used for instructions written in the program. A
  redefinition produces a StateOverwrite warning.
"""
from __future__ import annotations

import logging
from enum import Enum
from typing import Dict, Iterable, Iterator, List, Optional

from turing_lang.internals.diagnostics import StateOverwrite
from turing_lang.internals.report import Span
from turing_lang.semantics.instruction import Instruction, Key

logger = logging.getLogger(__name__)


class OverwritePolicy(Enum):
    SILENT = "silent"
    WARN = "warn"


class TransitionTable:
    def __init__(self, rules: Optional[Dict[Key, Instruction]] = None) -> None:
        self._rules: Dict[Key, Instruction] = dict(rules or {})

    def insert(self, instruction: Instruction, policy: OverwritePolicy,
               position: Optional[Span] = None) -> Optional[StateOverwrite]:
        """Insert `instruction`, replacing any rule with the same key.

        Returns the warning produced under OverwritePolicy.WARN, if any.
        """
        warning = None
        if instruction.key in self._rules and policy is OverwritePolicy.WARN:
            logger.warning("Instruction %s already exists, overwriting it", instruction)
            warning = StateOverwrite(
                position=position or Span(1, 1),
                state=instruction.from_state,
                value_from=instruction.from_value,
            )
        self._rules[instruction.key] = instruction
        return warning

    def merge(self, instructions: Iterable[Instruction], policy: OverwritePolicy) -> List[StateOverwrite]:
        warnings = []
        for instruction in instructions:
            warning = self.insert(instruction, policy)
            if warning is not None:
                warnings.append(warning)
        return warnings

    def get(self, key: Key) -> Optional[Instruction]:
        return self._rules.get(key)

    def as_dict(self) -> Dict[Key, Instruction]:
        return dict(self._rules)

    def __contains__(self, key: object) -> bool:
        return key in self._rules

    def __len__(self) -> int:
        return len(self._rules)

    def __iter__(self) -> Iterator[Instruction]:
        return iter(self._rules.values())
