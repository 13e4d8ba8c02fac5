"""Source file loading."""
from __future__ import annotations

import os
from pathlib import Path


def get_effective_cwd() -> Path:
    """Get the effective current working directory for file resolution.

    Checks for the TURING_CWD environment variable, which wrapper scripts set
    when they change directory before starting the compiler. Otherwise falls
    back to the process working directory.
    """
    turing_cwd = os.environ.get('TURING_CWD')
    if turing_cwd:
        return Path(turing_cwd)
    return Path.cwd()


def resolve_source_path(source: str | Path) -> Path:
    src_path = Path(source)
    if not src_path.is_absolute():
        src_path = get_effective_cwd() / src_path
    return src_path.resolve()


def load_source(source: str | Path) -> tuple[Path, str]:
    """Resolve and read a program.

    Returns:
        Tuple of (resolved path, source text).

    Raises:
        OSError: if the file cannot be read.
    """
    src_path = resolve_source_path(source)
    return src_path, src_path.read_text(encoding="utf-8")
