"""CLI parser for the package command."""

from __future__ import annotations

import argparse
from pathlib import Path

from tools.gobuild.core import logging as console
from tools.gobuild.core.context import load_context
from tools.gobuild.core.runner import CommandRunner


def register_parser(subparsers: argparse._SubParsersAction[argparse.ArgumentParser]) -> None:
    parser = subparsers.add_parser(
        "package",
        help="Point Go function handlers at their built binaries",
    )
    parser.add_argument("--function", "-f", help="Rewrite only this function")
    parser.add_argument(
        "--output",
        "-o",
        help="Write the rewritten serverless config here (default: print to stdout)",
    )
    parser.set_defaults(func=run)


def run(args: argparse.Namespace, runner: CommandRunner) -> int:
    context = load_context(args, runner)
    command = "deploy:function" if args.function else "package"
    context.driver.run(command)

    content = context.registry.dump()
    if not args.output:
        print(content, end="")
        return 0

    output = Path(args.output).expanduser()
    if runner.dry_run:
        runner.emit(f"[dry-run] write {output}")
        return 0
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(content, encoding="utf-8")
    console.success(f"Wrote {output}")
    return 0
