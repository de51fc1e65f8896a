#!/usr/bin/env python3
"""
pystep CLI

A command-line interface for evaluating the built-in sample expressions
under a chosen effect mode.

Usage:
    python -m pystep.cli [sample] [options]
    pystep [sample] [options]

Examples:
    pystep example
    pystep example --mode output
    pystep unbound --mode logging --verbose
    pystep omega --max-steps 100
"""

from __future__ import annotations

import argparse
import logging
import sys

from pystep.effects import EffectMode
from pystep.evaluator import EvalOptions, Evaluator
from pystep.samples import SAMPLES, get_sample
from pystep.types import Expr, format_expr, format_value, is_error
from pystep.validator import validate_expr


DEFAULT_MAX_STEPS = 500


#==============================================================================
# CLI Output Formatting
#==============================================================================

class Colors:
    """ANSI color codes for terminal output"""
    RESET = "\x1b[0m"
    BOLD = "\x1b[1m"
    DIM = "\x1b[2m"
    RED = "\x1b[31m"
    GREEN = "\x1b[32m"
    YELLOW = "\x1b[33m"
    CYAN = "\x1b[36m"


def print_msg(msg: str, color: str = Colors.RESET) -> None:
    """Print a message with optional color"""
    print(f"{color}{msg}{Colors.RESET}")


#==============================================================================
# Main CLI
#==============================================================================

def non_negative_int(text: str) -> int:
    """argparse type for counts that may not be negative"""
    value = int(text)
    if value < 0:
        raise argparse.ArgumentTypeError(f"must be non-negative, got {value}")
    return value


def run_sample(
    name: str,
    mode: EffectMode = EffectMode.TRACING,
    start: int = 0,
    max_steps: int | None = DEFAULT_MAX_STEPS,
    verbose: bool = False,
) -> int:
    """
    Evaluate a named sample expression and print the outcome.

    Args:
        name: Sample name
        mode: Effect mode
        start: Initial step counter
        max_steps: Step limit, or None for no limit
        verbose: Show detailed output

    Returns:
        Exit code (0 for success, 1 for failure)
    """
    expr: Expr | None = get_sample(name)
    if expr is None:
        print_msg(f"Error: Unknown sample: {name}", Colors.RED)
        return 1

    print_msg(f"\n{Colors.BOLD}Evaluating:{Colors.RESET} {Colors.CYAN}{format_expr(expr)}{Colors.RESET}\n")

    validation = validate_expr(expr)
    if not validation.valid:
        print_msg("Validation failed:", Colors.RED)
        for error in validation.errors:
            print_msg(f"  - {error}", Colors.RED)
        return 1

    evaluator = Evaluator(EvalOptions(mode=mode, max_steps=max_steps))

    try:
        outcome = evaluator.run(expr, initial_steps=start)
    except Exception as e:
        import traceback
        print_msg(f"{Colors.RED}Error:{Colors.RESET} {e}", Colors.RED)
        if verbose:
            traceback.print_exc()
        return 1

    if is_error(outcome.result):
        print_msg(f"{Colors.RED}Evaluation error:{Colors.RESET} {format_value(outcome.result)}", Colors.RED)
    else:
        print_msg(f"{Colors.GREEN}✓ Result:{Colors.RESET} {format_value(outcome.result)}", Colors.GREEN)

    print_msg(f"{Colors.DIM}Steps: {outcome.steps}{Colors.RESET}", Colors.DIM)
    print_msg(f"{Colors.DIM}Access log: {outcome.access_log}{Colors.RESET}", Colors.DIM)
    print_msg(f"{Colors.DIM}Trace: {outcome.trace}{Colors.RESET}", Colors.DIM)

    if verbose:
        print_msg(f"{Colors.DIM}Mode: {mode.value}{Colors.RESET}", Colors.DIM)

    return 0 if outcome.ok else 1


def list_samples() -> None:
    """Print the available sample names"""
    print_msg(f"{Colors.BOLD}Samples:{Colors.RESET}")
    for name, expr in SAMPLES.items():
        print(f"  {name:<16} {format_expr(expr)}")


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point"""
    parser = argparse.ArgumentParser(
        prog="pystep",
        description="pystep CLI - Evaluate sample expressions under effects",
    )

    parser.add_argument(
        "sample",
        nargs="?",
        default="example",
        help="Name of the sample expression (default: example)",
    )

    parser.add_argument(
        "--mode",
        choices=[m.value for m in EffectMode],
        default=EffectMode.TRACING.value,
        help="Effect mode (default: tracing)",
    )

    parser.add_argument(
        "--start",
        type=int,
        default=0,
        help="Initial value of the step counter",
    )

    parser.add_argument(
        "--max-steps",
        type=non_negative_int,
        dest="max_steps",
        default=DEFAULT_MAX_STEPS,
        help=f"Step limit, 0 for none (default: {DEFAULT_MAX_STEPS})",
    )

    parser.add_argument(
        "--list",
        action="store_true",
        help="List the available samples",
    )

    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Show detailed output",
    )

    args = parser.parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(name)s: %(message)s")

    if args.list:
        list_samples()
        return 0

    return run_sample(
        args.sample,
        mode=EffectMode(args.mode),
        start=args.start,
        max_steps=args.max_steps or None,
        verbose=args.verbose,
    )


if __name__ == "__main__":
    sys.exit(main())
