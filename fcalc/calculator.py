#!/usr/bin/env python3
"""Interactive calculator: reads one expression per line until ``bye``."""

import argparse
import logging
import sys
from typing import Optional, TextIO

from fcalc.builder import build_expression
from fcalc.config import CalcConfig, MAX_DEPTH, MAX_INPUT_LENGTH
from fcalc.math_ast import evaluate

logger = logging.getLogger("fcalc.calculator")


def calculate(expression: str, config: Optional[CalcConfig] = None) -> float:
    tree = build_expression(expression, config)
    return evaluate(tree)


def run(stdin: TextIO, stdout: TextIO, config: CalcConfig) -> int:
    while True:
        print(config.prompt, file=stdout)
        line = stdin.readline()
        if not line:
            logger.debug("End of input")
            return 0
        line = line.rstrip('\r\n')
        if line == config.exit_word:
            print("BYE", file=stdout)
            return 0

        print("Calculating...", file=stdout)
        try:
            result = calculate(line, config)
        except (ArithmeticError, ValueError) as e:
            # parse errors, or remainder by zero or of a non-finite value
            print(f"Failed to calculate the expression: {e}", file=stdout)
        else:
            print(f"\nResult: {result}", file=stdout)
        print(file=stdout)


def setup_logging(config: CalcConfig) -> None:
    level = logging.DEBUG if config.verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )
    logging.getLogger("fcalc").setLevel(level)


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Evaluate space-separated arithmetic expressions read from stdin.")
    parser.add_argument('--max-length', type=int, default=MAX_INPUT_LENGTH,
                        help=f'Reject input lines longer than this many characters (default: {MAX_INPUT_LENGTH}).')
    parser.add_argument('--max-depth', type=int, default=MAX_DEPTH,
                        help=f'Maximum parenthesis nesting depth (default: {MAX_DEPTH}).')
    parser.add_argument('--verbose', action='store_true', help='Log parser steps to stderr.')
    args = parser.parse_args(argv)

    try:
        config = CalcConfig(max_input_length=args.max_length, max_depth=args.max_depth, verbose=args.verbose)
    except ValueError as e:
        parser.error(str(e))
    setup_logging(config)
    return run(sys.stdin, sys.stdout, config)


if __name__ == '__main__':
    sys.exit(main())
