"""CLI entry point and argument parsing."""
from __future__ import annotations

import argparse
import logging
import sys

from turing_lang.backend.constants import (
    DEFAULT_BATCH_SIZE,
    DEFAULT_LOOP_THRESHOLD,
    EXIT_ABORTED,
    EXIT_ERRORS,
    EXIT_OK,
    EXIT_WARNINGS,
)
from turing_lang.internals.version import print_banner


def print_library_list() -> int:
    """Print the name and description of every built-in library."""
    from turing_lang.backend.library_registry import get_registry

    registry = get_registry()
    print(f"Libraries ({len(registry)}):")
    width = max(len(name) for name in registry.names())
    for lib in registry.get_all_libraries().values():
        print(f"  {lib.name:<{width}}  {lib.description}")
    return EXIT_OK


def print_library_info(name: str) -> int:
    """Print the metadata and instruction table of one built-in library.

    Returns:
        0 on success, 2 if the library does not exist.
    """
    from turing_lang.backend.library_registry import get_registry

    lib = get_registry().get_library(name)
    if lib is None:
        print(f"Error: unknown library: {name}", file=sys.stderr)
        return EXIT_ERRORS

    print(f"Library: {lib.name}")
    print(f"Computes: {lib.description}")
    print(f"Initial state: {lib.initial_state}")
    print(f"Final state: {lib.final_state}")
    print(f"Used states: {', '.join(sorted(lib.used_states, key=lambda s: (len(s), s)))}")
    print()

    instructions = lib.get_instructions()
    print(f"Instructions ({len(instructions)}):")
    for instruction in instructions.values():
        print(f"  {instruction}")
    return EXIT_OK


def run_machine(machine, reporter, threshold: int, batch: int,
                max_steps: int | None = None, trace: bool = False) -> tuple[int, bool]:
    """Run `machine` in batches, stopping on probable infinite loops.

    Visit frequencies are reset after every batch, so `threshold` applies
    to the visits within one batch.

    Returns:
        Tuple of (steps taken, whether the machine reached a final state).
    """
    from turing_lang.backend.machine import StepOutcome
    from turing_lang.internals import errors as er

    steps = 0
    while not machine.finished():
        for _ in range(batch):
            if max_steps is not None and steps >= max_steps:
                print(f"Stopped after the maximum of {max_steps} steps")
                return steps, False

            outcome = machine.advance()
            if outcome is StepOutcome.UNDEFINED:
                er.emit(reporter, er.ERR.RE0001, None,
                        state=machine.current_state, value=int(machine.current_value))
                return steps, False

            steps += 1
            if trace:
                print(machine)
            if outcome is StepOutcome.FINAL:
                break

        if not machine.finished() and machine.is_infinite_loop(threshold):
            state = max(machine.frequencies, key=machine.frequencies.get)
            er.emit(reporter, er.ERR.RW0001, None, state=state, threshold=threshold)
            return steps, False

        machine.reset_frequencies()

    return steps, True


def _positive_int(text: str) -> int:
    value = int(text)
    if value <= 0:
        raise argparse.ArgumentTypeError(f"expected a positive integer, got {value}")
    return value


def main(argv: list[str] | None = None) -> int:
    """Main compiler entry point."""
    ap = argparse.ArgumentParser(prog="turingc", description="Turing machine compiler and simulator")

    ap.add_argument("source", nargs='?', help="Path to source file (.tm)")
    ap.add_argument("--version", action="store_true", help="Show version and exit")
    ap.add_argument("--dump-parse", action="store_true", help="Print raw Lark tree")
    ap.add_argument("--dump-ast", action="store_true", help="Print the parsed declarations")
    ap.add_argument("--trace", action="store_true", help="Print the tape after every step")
    ap.add_argument("--threshold", type=_positive_int, default=DEFAULT_LOOP_THRESHOLD,
                    help=f"Visits of a single state per batch considered an infinite loop "
                         f"(default: {DEFAULT_LOOP_THRESHOLD})")
    ap.add_argument("--batch", type=_positive_int, default=DEFAULT_BATCH_SIZE,
                    help=f"Steps between infinite loop checks (default: {DEFAULT_BATCH_SIZE})")
    ap.add_argument("--max-steps", type=_positive_int, metavar="N",
                    help="Stop the run after N steps")
    ap.add_argument("--libs", action="store_true", help="List the built-in libraries and exit")
    ap.add_argument("--lib-info", metavar="NAME", help="Display a built-in library")
    ap.add_argument("-q", "--quiet", action="store_true", help="Do not print the banner")
    ap.add_argument("-v", "--verbose", action="count", default=0,
                    help="Log compiler activity (-v for info, -vv for debug)")
    args = ap.parse_args(argv)

    level = {0: logging.WARNING, 1: logging.INFO}.get(args.verbose, logging.DEBUG)
    logging.basicConfig(level=level, format="[%(levelname)s] %(name)s: %(message)s")

    if not args.quiet:
        print_banner()

    if args.version:
        return EXIT_OK

    if args.libs:
        return print_library_list()

    if args.lib_info:
        return print_library_info(args.lib_info)

    if not args.source:
        print("error: source file required (unless using --libs or --lib-info)", file=sys.stderr)
        return EXIT_ERRORS

    from turing_lang.compiler.builder import build
    from turing_lang.compiler.loader import load_source
    from turing_lang.internals.parser import parse_to_ast
    from turing_lang.internals.parse_errors import handle_parse_exception
    from turing_lang.internals.report import Reporter

    try:
        src_path, src = load_source(args.source)
    except OSError as e:
        print(f"error: cannot read {args.source}: {e}", file=sys.stderr)
        return EXIT_ERRORS

    reporter = Reporter(source=src, filename=str(src_path))

    try:
        if args.dump_parse or args.dump_ast:
            program, _ = parse_to_ast(src, dump_parse=args.dump_parse)
            if args.dump_ast:
                for record in program.records:
                    print(record)
                print()

        machine, warnings = build(src)

    except Exception as exc:
        if handle_parse_exception(exc, reporter, source_path=src_path):
            reporter.print()
            print()
            return EXIT_ERRORS
        raise

    for warning in warnings:
        warning.emit(reporter)
    reporter.print()

    if machine.description:
        print(f"Description: {machine.description}")
    if machine.composed_libs:
        print(f"Composed: {', '.join(lib.name for lib in machine.composed_libs)}")
    print(machine)
    print()

    runtime = Reporter(filename=str(src_path))
    steps, halted = run_machine(machine, runtime, args.threshold, args.batch,
                                max_steps=args.max_steps, trace=args.trace)
    runtime.print()

    print(f"steps: {steps}")
    print(f"ones: {machine.ones()}")
    print(f"values: {machine.values()}")
    print(machine)

    if not halted:
        return EXIT_ABORTED
    return EXIT_WARNINGS if reporter.has_warnings else EXIT_OK


if __name__ == "__main__":
    raise SystemExit(main())
