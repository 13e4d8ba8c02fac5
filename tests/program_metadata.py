"""
Expectation metadata for the program test runner.

Test programs declare what the `turingc` driver should do with them in
`//` comments at the top of the file.
"""

import re
from dataclasses import dataclass, field
from typing import List, Optional
from pathlib import Path


@dataclass
class ProgramMetadata:
    """Expected driver behaviour for one .tm program."""

    expect_exit: Optional[int] = None
    expect_stdout_contains: List[str] = field(default_factory=list)
    expect_stderr_contains: List[str] = field(default_factory=list)
    timeout_seconds: int = 30
    cmd_args: Optional[str] = None  # Extra driver arguments


def _unquote(value: str) -> str:
    # Remove quotes if present
    if value.startswith('"') and value.endswith('"'):
        value = value[1:-1]
    # Handle escape sequences
    return value.replace('\\"', '"').replace('\\n', '\n').replace('\\t', '\t')


def parse_program_metadata(program: Path) -> ProgramMetadata:
    """
    Parse expectations from a program's header comments.

    Recognised directives:
    // EXPECT_EXIT: 0
    // EXPECT_STDOUT_CONTAINS: "steps: 5"
    // EXPECT_STDERR_CONTAINS: "CW1001"
    // TIMEOUT_SECONDS: 10
    // CMD_ARGS: --threshold 50

    Without EXPECT_EXIT the expected exit code follows the file name:
    test_err_* → 2, test_warn_* → 1, test_run_* → 3, anything else → 0.
    """
    metadata = ProgramMetadata()

    content = program.read_text(encoding='utf-8')

    # Only parse metadata from the first 20 lines
    for line in content.split('\n')[:20]:
        line = line.strip()
        if not line.startswith('//') or line.startswith('///'):
            continue

        directive = line[2:].strip()
        match = re.match(r'([A-Z_]+):\s*(.*)$', directive)
        if match is None:
            continue
        key, value = match.groups()

        if key == 'EXPECT_EXIT':
            try:
                metadata.expect_exit = int(value)
            except ValueError:
                print(f"Warning: Invalid EXPECT_EXIT value in {program}: {value}")
        elif key == 'EXPECT_STDOUT_CONTAINS':
            metadata.expect_stdout_contains.append(_unquote(value))
        elif key == 'EXPECT_STDERR_CONTAINS':
            metadata.expect_stderr_contains.append(_unquote(value))
        elif key == 'TIMEOUT_SECONDS':
            try:
                metadata.timeout_seconds = int(value)
            except ValueError:
                print(f"Warning: Invalid TIMEOUT_SECONDS value in {program}: {value}")
        elif key == 'CMD_ARGS':
            metadata.cmd_args = value

    if metadata.expect_exit is None:
        metadata.expect_exit = expected_exit_from_name(program)

    return metadata


def expected_exit_from_name(program: Path) -> int:
    name = program.name
    if name.startswith("test_err_"):
        return 2
    if name.startswith("test_warn_"):
        return 1
    if name.startswith("test_run_"):
        return 3
    return 0
