"""
MiniKV: In-Memory Transactional Key-Value Store
===============================================
Entry point for the command shell.

Usage:
    python main.py [options]

Options:
    --help              Show help
    --execute CMDS      Execute ;-separated commands and exit
    --file PATH         Execute a command script and exit
    --verbose           Log store activity (DEBUG) to stderr

Default:
    Interactive REPL on a fresh, empty store
"""

import argparse
import logging
import os
import sys
from typing import List, Optional


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="minikv",
        description="MiniKV: in-memory key-value store with nested transactions.",
        epilog="""Meta-Commands (REPL only):
    .help           Command reference
    .dump           List visible keys
    .depth          Show transaction depth
    .stats          Session statistics
    .quit           Exit""",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    mode = parser.add_mutually_exclusive_group()
    mode.add_argument("--execute", "-e", metavar="CMDS",
                      help="execute ;-separated commands and exit")
    mode.add_argument("--file", "-f", metavar="PATH",
                      help="execute a command script and exit")
    parser.add_argument("--verbose", "-v", action="store_true",
                        help="log store activity to stderr")
    return parser


def _configure_logging(verbose: bool):
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def execute_single(commands: str) -> int:
    """Execute ;-separated commands on a fresh store. Returns exit code."""
    from cli.session import Session
    from cli.renderer import Renderer
    from cli.repl import split_commands

    renderer = Renderer()

    with Session() as session:
        for text in split_commands(commands):
            try:
                renderer.render_message(session.execute(text))
            except Exception as e:
                renderer.render_error(e)
                return 1
    return 0


def execute_script(script_path: str) -> int:
    """
    Execute a command script and return the exit code.

    Semantics: one store for the whole script; ; or newline separates
    commands. Lines starting with -- or # are comments. Meta-commands
    are skipped. Errors stop execution.
    """
    from cli.session import Session
    from cli.renderer import Renderer
    from cli.repl import split_commands

    if not os.path.isfile(script_path):
        print(f"Error: script file not found: {script_path}", file=sys.stderr)
        return 1

    with open(script_path, "r", encoding="utf-8") as f:
        lines = f.read().splitlines()

    renderer = Renderer()

    with Session() as session:
        for lineno, line in enumerate(lines, start=1):
            stripped = line.strip()
            if not stripped or stripped.startswith(("--", "#")):
                continue

            if stripped.startswith("."):
                print(f"-- meta-command not supported in script mode: {stripped}",
                      file=sys.stderr)
                continue

            for text in split_commands(stripped):
                try:
                    renderer.render_message(session.execute(text))
                except Exception as e:
                    renderer.render_error(e)
                    print(f"Error in {script_path}:{lineno}: {text[:80]}",
                          file=sys.stderr)
                    return 1

    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Parse CLI arguments and dispatch."""
    args = _build_parser().parse_args(argv)
    _configure_logging(args.verbose)

    if args.execute is not None:
        return execute_single(args.execute)
    if args.file is not None:
        return execute_script(args.file)

    from cli.repl import REPL
    REPL().run()
    return 0


if __name__ == "__main__":
    sys.exit(main())
