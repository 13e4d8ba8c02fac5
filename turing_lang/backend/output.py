"""Results of running a machine."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Union


@dataclass(frozen=True)
class Defined:
    """The machine stopped in a final state."""
    steps: int
    ones: int

    def __str__(self) -> str:
        return f"{self.steps} steps, {self.ones} ones"


@dataclass(frozen=True)
class Undefined:
    """The machine stopped on a transition that does not exist."""
    steps: int = 0

    def __str__(self) -> str:
        return f"undefined after {self.steps} steps"


TuringOutput = Union[Defined, Undefined]
