#!/usr/bin/env python3
"""
Pebble Programming Language Interpreter
Usage: pebble [script.pebble] [--color auto|always|never] [--max-errors N] [--rpn]
"""

import argparse
import sys
from typing import List, Optional, TextIO
from ast_nodes import ExpressionStatement, PrintStatement, Statement
from diagnostics import ColorMode, get_formatter, report, set_color_mode, set_max_errors
from interpreter import Interpreter
from lexer import Lexer
from parser import Parser
from resolver import Resolver
from rpn import to_rpn
from source_map import reset_source_map

# Exit statuses, following sysexits.h
EX_USAGE = 64
EX_DATAERR = 65
EX_NOINPUT = 66
EX_SOFTWARE = 70

def run(source: str, file_path: str, interpreter: Interpreter, rpn: bool = False,
        output: Optional[TextIO] = None) -> int:
    """Lex, parse, resolve and execute one source text; returns an exit status"""
    lexer = Lexer(source, file_path, reporter=report)
    tokens = lexer.tokenize()

    parser = Parser(tokens, reporter=report)
    statements = parser.parse()

    if rpn:
        if lexer.had_error or parser.had_error:
            return EX_DATAERR
        print_rpn(statements, output or sys.stdout)
        return 0

    resolver = Resolver(reporter=report)
    locals = resolver.resolve(statements)

    # Nothing runs once any static error has been reported
    if lexer.had_error or parser.had_error or resolver.had_error:
        return EX_DATAERR

    if not interpreter.interpret(statements, locals):
        return EX_SOFTWARE
    return 0

def print_rpn(statements: List[Statement], output: TextIO):
    for statement in statements:
        if isinstance(statement, (ExpressionStatement, PrintStatement)):
            print(to_rpn(statement.expression), file=output)

def run_file(filename: str, rpn: bool = False) -> int:
    """Run a Pebble program from a file"""
    try:
        with open(filename, 'r', encoding='utf-8') as f:
            source = f.read()
    except (OSError, UnicodeDecodeError) as e:
        print(f"Error: cannot read '{filename}': {e}", file=sys.stderr)
        return EX_NOINPUT

    reset_source_map()
    formatter = get_formatter()
    formatter.reset()

    status = run(source, filename, Interpreter(reporter=report), rpn)
    formatter.print_summary()
    return status

def run_interactive(rpn: bool = False):
    """Run Pebble in interactive mode; one interpreter lives across lines

    Every line adds a source-map entry and its resolved nodes to the
    interpreter, so both grow for the length of the session.
    """
    print("Pebble Interactive Mode")
    print("Type 'exit' to quit")

    interpreter = Interpreter(reporter=report)

    while True:
        try:
            line = input("> ")
        except EOFError:
            print()
            break
        except KeyboardInterrupt:
            print("\nUse 'exit' to quit.")
            continue

        if line.strip() == 'exit':
            break
        if line.strip() == '':
            continue

        # Errors were already reported; the prompt just carries on
        get_formatter().reset()
        run(line, "<repl>", interpreter, rpn)

def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pebble",
        description="Run a Pebble script, or start an interactive prompt when no script is given."
    )
    parser.add_argument("script", nargs="?", help="path to a .pebble file")
    parser.add_argument("--color", choices=[mode.value for mode in ColorMode], default=ColorMode.AUTO.value,
                        help="colorize diagnostics (default: auto)")
    parser.add_argument("--max-errors", type=int, default=20, metavar="N",
                        help="stop rendering diagnostics after N errors (default: 20)")
    parser.add_argument("--rpn", action="store_true",
                        help="print expressions in Reverse Polish notation instead of running them")
    return parser

def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point"""
    parser = build_arg_parser()
    try:
        args = parser.parse_args(argv)
    except SystemExit as e:
        # argparse exits 2 on bad usage; --help exits 0
        return EX_USAGE if e.code else 0

    if args.max_errors < 1:
        print("Error: --max-errors must be at least 1", file=sys.stderr)
        return EX_USAGE

    set_color_mode(ColorMode(args.color))
    set_max_errors(args.max_errors)

    if args.script is None:
        run_interactive(args.rpn)
        return 0
    return run_file(args.script, args.rpn)

if __name__ == "__main__":
    sys.exit(main())
