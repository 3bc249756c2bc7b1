#!/usr/bin/env python3
"""
exprcc: arithmetic expression compiler CLI

Usage:
    python exprcc.py <expression> [-o output.s] [--tokens | --ast | --run] [--verbose]

Examples:
    python exprcc.py "1+2*3" -o tmp.s        # then: cc -o tmp tmp.s && ./tmp; echo $?
    python exprcc.py " 12 + 3 "              # listing to stdout
    python exprcc.py "(1+2)*3" --run         # evaluate the listing, prints 9
    python exprcc.py "1+$"                   # diagnostic on stderr, exit status 1
"""

import argparse
import logging
import os
import sys

# Allow running from project root or as module
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from exprcc_compiler import __version__, compile_source, dump_ast
from exprcc_compiler.diagnostics import CompileError, format_diagnostic
from exprcc_compiler.lexer import Lexer
from exprcc_compiler.parser import Parser
from exprcc_compiler.codegen import CodeGenError
from exprcc_compiler.evaluator import EvaluationError, StackMachine, exit_status

logger = logging.getLogger("exprcc")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="exprcc",
        description="Compile an integer arithmetic expression to x86-64 assembly",
    )
    parser.add_argument("expression", help="Expression to compile, e.g. '(1+2)*3'")
    parser.add_argument("-o", "--output", help="Output assembly file (default: stdout)")
    parser.add_argument("--verbose", "-v", action="store_true",
                        help="Print compilation details to stderr")
    mode = parser.add_mutually_exclusive_group()
    mode.add_argument("--tokens", action="store_true",
                      help="Dump token stream and exit (debug)")
    mode.add_argument("--ast", action="store_true",
                      help="Dump AST and exit (debug)")
    mode.add_argument("--run", action="store_true",
                      help="Evaluate the generated listing and print the result")
    parser.add_argument("--version", action="version",
                        version=f"exprcc {__version__}")
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="[exprcc] %(levelname)s: %(message)s",
        stream=sys.stderr,
    )
    source = args.expression
    logger.debug("input: %r", source)

    try:
        # Token dump mode
        if args.tokens:
            for tok in Lexer(source).tokenize():
                print(tok)
            return 0

        # AST dump mode
        if args.ast:
            tokens = Lexer(source).tokenize()
            print(dump_ast(Parser(tokens, source).parse()))
            return 0

        listing = compile_source(source)

        if args.run:
            value = StackMachine().run(listing.splitlines())
            print(f"{value} (exit status {exit_status(value)})")
            return 0

        if args.output:
            with open(args.output, "w", encoding="utf-8") as f:
                f.write(listing + "\n")
            logger.debug("wrote %d lines to %s", listing.count("\n") + 1, args.output)
        else:
            print(listing)

    except CompileError as e:
        print(format_diagnostic(e), file=sys.stderr)
        return 1
    except EvaluationError as e:
        print(f"Evaluation error: {e}", file=sys.stderr)
        return 1
    except (CodeGenError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except Exception as e:
        print(f"Internal compiler error: {e}", file=sys.stderr)
        if args.verbose:
            logger.exception("traceback")
        return 2

    return 0


if __name__ == "__main__":
    sys.exit(main())
