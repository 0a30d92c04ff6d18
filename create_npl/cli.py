"""Command-line entry point for create-npl.

Usage::

    create-npl create -n my-app -t acme -a iou -p iou
    create-npl create -n my-app -t acme -a iou -p iou --force
    create-npl setup -c ./frontend-config.ts -d ./frontend --auto
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from typing import Sequence

from .config import Config
from .fetcher import OpenApiFetcher
from .pipeline import ScaffoldPipeline, ScaffoldRequest
from .prompts import ConfirmFn, DecisionGate, rich_confirm
from .runner import CommandRunner
from .utils import console, print_error, print_warning


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="create-npl",
        description="Create a new NPL frontend project",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  create-npl create -n my-app -t acme -a iou -p iou\n"
            "  create-npl setup --config ./frontend-config.ts --directory ./frontend --auto\n"
        ),
    )
    subparsers = parser.add_subparsers(dest="mode", required=True)

    create = subparsers.add_parser(
        "create",
        help="Copy the React template and wire it to an NPL engine",
    )
    create.add_argument("--name", "-n", help="The name of the project and directory to create")
    create.add_argument("--tenant", "-t", help="The tenant slug")
    create.add_argument("--app", "-a", help="The application slug")
    create.add_argument("--package", "-p", help="The NPL package name")
    create.add_argument(
        "--force", "-f", action="store_true", default=False,
        help="Force overwrite of existing directory",
    )
    create.add_argument(
        "--directory", "-d", default=None,
        help="Parent directory for the project (default: current directory)",
    )
    create.add_argument(
        "--auto", action="store_true", default=False,
        help="Never prompt; take the default answer to every question",
    )
    create.add_argument(
        "--build", action="store_true", default=False,
        help="Run the project build after generating the API client",
    )

    setup = subparsers.add_parser(
        "setup",
        help="Generate a frontend from a frontend-config.ts settings file",
    )
    setup.add_argument(
        "--config", "-c", default="./frontend-config.ts",
        help="Path to frontend-config.ts file (default: ./frontend-config.ts)",
    )
    setup.add_argument(
        "--directory", "-d", default="./frontend",
        help="Directory to create the frontend in (default: ./frontend)",
    )
    setup.add_argument(
        "--auto", "-a", action="store_true", default=False,
        help="Run with minimal prompts, using sensible defaults",
    )
    setup.add_argument(
        "--force", "-f", action="store_true", default=False,
        help="Force overwrite of existing directory",
    )
    return parser


def build_request(args: argparse.Namespace, config: Config) -> ScaffoldRequest:
    """Translate parsed arguments into a ``ScaffoldRequest``."""
    if args.mode == "create":
        return ScaffoldRequest.for_create(
            name=args.name,
            tenant=args.tenant,
            app=args.app,
            package=args.package,
            config=config,
            parent_dir=args.directory,
            force=args.force,
            auto=args.auto,
            build=args.build,
        )
    return ScaffoldRequest.for_setup(
        settings_path=args.config,
        directory=args.directory,
        config=config,
        force=args.force,
        auto=args.auto,
    )


async def run_cli(
    argv: Sequence[str] | None = None,
    *,
    config: Config | None = None,
    confirm: ConfirmFn | None = None,
    fetcher: OpenApiFetcher | None = None,
    runner: CommandRunner | None = None,
) -> int:
    """Parse *argv*, run the scaffolder and return the process exit code."""
    args = build_parser().parse_args(argv)
    config = config or Config.from_env()

    # Prompts need a terminal; without one every question takes its default.
    if confirm is None and not args.auto and not sys.stdin.isatty():
        print_warning("No interactive terminal detected -- running in auto mode.")
        args.auto = True

    request = build_request(args, config)
    gate = DecisionGate(request.auto_mode, confirm or rich_confirm)
    pipeline = ScaffoldPipeline(request, config, gate=gate, fetcher=fetcher, runner=runner)
    result = await pipeline.run()

    if result.success:
        console.print("[bold green]Project created successfully![/bold green]")
        return 0
    print_error(f"Error: {result.error}")
    return 1


def main() -> None:
    """Console-script entry point for ``create-npl``."""
    try:
        exit_code = asyncio.run(run_cli())
    except KeyboardInterrupt:
        print_error("Interrupted.")
        exit_code = 130
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
