"""Turn build exceptions into reporter diagnostics."""
from __future__ import annotations

import sys

from turing_lang.internals.diagnostics import CompilerError, LibraryError


def handle_parse_exception(exc: Exception, reporter, source_path=None) -> bool:
    """Report `exc` through `reporter` if it is a compiler error.

    Args:
        exc: The exception raised by the build.
        reporter: Reporter for the source being built.
        source_path: Named in the message of internal errors.

    Returns:
        True if the exception was reported, False if the caller should re-raise it.
    """
    if isinstance(exc, LibraryError):
        # A broken built-in library has no location in the user's source
        if source_path:
            print(f"Internal error while building {source_path}:", file=sys.stderr)
        reporter.error(exc.error_code, exc.message, None)
        return True

    if not isinstance(exc, CompilerError):
        return False

    exc.emit(reporter)
    return True
