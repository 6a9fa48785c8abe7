"""
The `selve` command.

    selve                       Start the REPL
    selve program.sv            Run a program
    selve program.sv --ast      Print the parsed syntax tree (YAML or JSON)
    selve program.sv --check    Print the static analysis report
"""

import argparse
import logging
import sys
from typing import Callable, List, Optional, TextIO

from selve import __version__
from selve.analyzer import ProgramReport, analyze_program
from selve.ast_nodes import Program
from selve.config import SelveConfig, apply_overrides, load_config
from selve.environment import create_global_environment
from selve.errors import ConfigError, LexError, ParseError, SelveError
from selve.interpreter import Interpreter
from selve.parser import Parser
from selve.serialization import program_to_json, program_to_yaml
from selve.values import NullValue, display

logger = logging.getLogger(__name__)


def describe_error(error: SelveError) -> str:
    """Prefix an error with the stage that raised it."""
    if isinstance(error, LexError):
        stage = "Syntax error"
    elif isinstance(error, ParseError):
        stage = "Parse error"
    elif isinstance(error, ConfigError):
        stage = "Config error"
    else:
        stage = "Runtime error"
    return f"{stage}: {error.format()}"


def dump_ast(program: Program, fmt: str) -> str:
    if fmt == "json":
        return program_to_json(program)
    return program_to_yaml(program)


def format_report(report: ProgramReport) -> str:
    lines = [
        f"Statements:  {report.total_statements}",
        f"Functions:   {report.total_functions}",
        f"Variables:   {report.total_variables}",
        f"Constants:   {report.total_constants}",
        f"Comments:    {report.total_comments}",
        f"Max expression depth: {report.max_expression_depth}",
    ]
    for error in report.errors:
        lines.append(f"error: {error}")
    for warning in report.warnings:
        lines.append(f"warning: {warning}")
    lines.append("OK" if report.ok else "FAILED")
    return "\n".join(lines)


def run_file(path: str, config: SelveConfig, dump: bool = False, check: bool = False) -> int:
    """Execute, dump or check a source file. Returns the exit status."""
    try:
        with open(path, "r", encoding="utf-8") as f:
            source = f.read()
    except FileNotFoundError:
        print(f"Error: File not found: {path}", file=sys.stderr)
        return 1
    except (OSError, UnicodeDecodeError) as e:
        print(f"Error: Cannot read {path}: {e}", file=sys.stderr)
        return 1

    try:
        program = Parser().produce_ast(source)

        if dump:
            print(dump_ast(program, config.ast_format))
            return 0

        if check:
            report = analyze_program(program)
            print(format_report(report))
            return 0 if report.ok else 1

        env = create_global_environment()
        Interpreter(max_call_depth=config.max_call_depth).execute(program, env)
    except SelveError as e:
        print(describe_error(e), file=sys.stderr)
        return 1

    return 0


def run_repl(
    config: SelveConfig,
    input_fn: Callable[[str], str] = input,
    out: Optional[TextIO] = None,
) -> int:
    """
    Interactive loop. One environment lives for the whole session.

    Exits on `exit`, an empty line or end of input. Errors are reported
    and the session continues.
    """
    out = out if out is not None else sys.stdout
    parser = Parser()
    interpreter = Interpreter(max_call_depth=config.max_call_depth)
    env = create_global_environment(out=out)

    while True:
        try:
            line = input_fn(config.prompt)
        except EOFError:
            out.write("\n")
            break
        except KeyboardInterrupt:
            out.write("\nInterrupted\n")
            continue

        source = line.strip()
        if not source or source == "exit":
            break

        try:
            program = parser.produce_ast(source)
            if config.show_ast:
                out.write(dump_ast(program, config.ast_format).rstrip("\n") + "\n")
            result = interpreter.execute(program, env)
        except SelveError as e:
            out.write(describe_error(e) + "\n")
            continue

        if not isinstance(result, NullValue):
            out.write(display(result) + "\n")

    return 0


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="selve", description="Run Selve programs or start a REPL")
    parser.add_argument("file", nargs="?", help="Source file to run (starts the REPL when omitted)")
    parser.add_argument("--ast", action="store_true", help="Print the syntax tree instead of running")
    parser.add_argument("--format", choices=["yaml", "json"], help="Syntax tree format")
    parser.add_argument("--check", action="store_true", help="Print the static analysis report")
    parser.add_argument("--config", help="Path to a YAML config file")
    parser.add_argument("--max-call-depth", type=int, help="Nested call limit")
    parser.add_argument("-v", "--verbose", action="count", default=0, help="More logging (-vv for debug)")
    parser.add_argument("--version", action="version", version=f"selve {__version__}")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_arg_parser().parse_args(argv)

    log_level = None
    if args.verbose == 1:
        log_level = "INFO"
    elif args.verbose > 1:
        log_level = "DEBUG"

    try:
        config = load_config(args.config)
        config = apply_overrides(
            config,
            ast_format=args.format,
            max_call_depth=args.max_call_depth,
            show_ast=True if (args.ast and not args.file) else None,
            log_level=log_level,
        )
    except ConfigError as e:
        print(describe_error(e), file=sys.stderr)
        return 2

    logging.basicConfig(
        level=getattr(logging, config.log_level),
        format="%(levelname)s %(name)s: %(message)s",
    )
    logger.debug("Resolved config: %s", config)

    if args.file:
        return run_file(args.file, config, dump=args.ast, check=args.check)

    print(f"Selve {__version__} - type 'exit' or an empty line to quit")
    return run_repl(config)


if __name__ == "__main__":
    sys.exit(main())
