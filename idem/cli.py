"""
Idem CLI — Command-Line Interface for the Idem toolchain
=========================================================

Usage:
    # Run a program (validated first)
    python -m idem.cli run examples/hello.id
    python -m idem.cli run examples/factorial.id --trace

    # Report validation issues
    python -m idem.cli validate examples/hello.id

    # Rewrite a file in canonical layout
    python -m idem.cli format examples/hello.id
    python -m idem.cli format examples/hello.id --check

    # Export the function call graph (Graphviz)
    python -m idem.cli display functions examples/hello.id -o calls.dot

    # List native functions
    python -m idem.cli natives
"""

from __future__ import annotations

import argparse
import logging
import sys

from .config import IdemConfig
from .formatter import format_program
from .graph import function_calls_graph
from .interpreter import IdemError, Interpreter
from .lexer import Lexer
from .natives import describe_all
from .parser import IdemSyntaxError, Parser, ProgramNode
from .reader import SourceFileError, read_source
from .tracing import LoggingObserver
from .validator import Validator


# ─────────────────────────────────────────────────────────────
#  Helpers
# ─────────────────────────────────────────────────────────────

def _error(message: str):
    print(message, file=sys.stderr)


def load_program(path: str, config: IdemConfig) -> ProgramNode:
    """Read, tokenize and parse a source file."""
    source = read_source(path, config.extension)
    tokens = Lexer(source, path).tokenize()
    return Parser(tokens).parse()


def _config_from_args(args) -> IdemConfig:
    config = IdemConfig.from_env()
    return config.with_overrides(
        trace=True if getattr(args, "trace", False) else None,
        validate_before_run=False if getattr(args, "no_validate", False) else None,
        max_depth=getattr(args, "max_depth", None),
    )


# ─────────────────────────────────────────────────────────────
#  Commands
# ─────────────────────────────────────────────────────────────

def cmd_run(args, config: IdemConfig) -> int:
    """Validate (unless disabled) and execute a program."""
    ast = load_program(args.path, config)

    if config.validate_before_run:
        reports = Validator().validate(ast)
        if reports:
            _error(f"Issues were found in {args.path}:")
            for report in reports:
                print(report)
            return 1

    observer = LoggingObserver(level=logging.INFO) if config.trace else None
    Interpreter(observer=observer, max_depth=config.max_depth).run(ast)
    return 0


def cmd_validate(args, config: IdemConfig) -> int:
    """Print every validation report. Reports are advisory; exits 0."""
    ast = load_program(args.path, config)
    reports = Validator().validate(ast)
    for report in reports:
        print(report)
    return 0


def cmd_format(args, config: IdemConfig) -> int:
    """Rewrite a file in canonical layout."""
    source = read_source(args.path, config.extension)
    ast = Parser(Lexer(source, args.path).tokenize()).parse()
    formatted = format_program(ast) + "\n"

    if args.check:
        if formatted != source:
            _error(f"{args.path} would be reformatted")
            return 1
        return 0

    if formatted != source:
        with open(args.path, "w", encoding="utf-8") as f:
            f.write(formatted)
    return 0


def cmd_display_functions(args, config: IdemConfig) -> int:
    """Write the function call graph to a file or stdout."""
    ast = load_program(args.path, config)
    graph = str(function_calls_graph(args.path, ast))

    if args.output:
        with open(args.output, "w", encoding="utf-8") as f:
            f.write(graph)
    else:
        print(graph)
    return 0


def cmd_natives(args, config: IdemConfig) -> int:
    """List the native functions."""
    print(describe_all())
    return 0


# ─────────────────────────────────────────────────────────────
#  Main
# ─────────────────────────────────────────────────────────────

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="idem",
        description="Idem language toolchain",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  idem run examples/hello.id\n"
            "  idem validate examples/hello.id\n"
            "  idem format examples/hello.id --check\n"
            "  idem display functions examples/hello.id -o calls.dot\n"
        ),
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    # run
    p_run = subparsers.add_parser("run", help="Run an Idem program")
    p_run.add_argument("path", help="Path to an Idem source file")
    p_run.add_argument("--trace", action="store_true", help="Log every function call")
    p_run.add_argument("--no-validate", action="store_true",
                       help="Run even if validation reports issues")
    p_run.add_argument("--max-depth", type=int, default=None,
                       help="Maximum nested calls (default: no limit)")

    # format
    p_fmt = subparsers.add_parser("format", help="Format an Idem program in place")
    p_fmt.add_argument("path", help="Path to an Idem source file")
    p_fmt.add_argument("--check", action="store_true",
                       help="Only report whether the file would change")

    # validate
    p_val = subparsers.add_parser("validate", help="Check an Idem program")
    p_val.add_argument("path", help="Path to an Idem source file")

    # display
    p_display = subparsers.add_parser("display", help="Display visualizations for a program")
    display_sub = p_display.add_subparsers(dest="display_command", help="Visualization")
    p_functions = display_sub.add_parser("functions", help="Function call graph (Graphviz)")
    p_functions.add_argument("path", help="Path to an Idem source file")
    p_functions.add_argument("--output", "-o", default=None,
                             help="File to save the graph to (default: stdout)")

    # natives
    subparsers.add_parser("natives", help="List native functions")

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(message)s",
    )

    commands = {
        "run": cmd_run,
        "format": cmd_format,
        "validate": cmd_validate,
        "natives": cmd_natives,
    }
    if args.command == "display" and args.display_command == "functions":
        command = cmd_display_functions
    elif args.command in commands:
        command = commands[args.command]
    else:
        parser.print_help()
        return 1

    try:
        config = _config_from_args(args)
        return command(args, config)
    except (SourceFileError, IdemSyntaxError, IdemError, ValueError) as e:
        _error(str(e))
        return 1
    except OSError as e:
        _error(f"{type(e).__name__}: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
