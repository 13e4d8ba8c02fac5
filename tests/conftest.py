import textwrap
from pathlib import Path

import pytest

from turing_lang import build

EXAMPLES_DIR = Path(__file__).parent.parent / "Examples"


def machine_of(src: str):
    """Build `src` and fail the test if the build produced warnings."""
    machine, warnings = build(textwrap.dedent(src))
    assert warnings == []
    return machine


@pytest.fixture
def example_source():
    def read(name: str) -> str:
        return (EXAMPLES_DIR / name).read_text(encoding="utf-8")
    return read


@pytest.fixture
def write_program(tmp_path):
    def write(src: str, name: str = "program.tm") -> Path:
        path = tmp_path / name
        path.write_text(textwrap.dedent(src), encoding="utf-8")
        return path
    return write
