"""Command-line entry point for the Woolball template scaffolder.

Usage::

    woolball-scaffold
    woolball-scaffold --stack DOTNET --variant minimal-api --yes
    WOOLBALL_API_KEY=... woolball-scaffold --stack NODEJS --variant nextjs
    woolball-scaffold --list
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from woolball_scaffold.config import ScaffoldConfig, api_key_from_env
from woolball_scaffold.errors import NotAProjectRoot, OperationCancelled, ScaffoldError
from woolball_scaffold.scaffolder import materialize, registry
from woolball_scaffold.selector import Selector
from woolball_scaffold.utils import (
    configure_logging,
    console,
    print_banner,
    print_error,
    print_file_list,
    print_steps,
    print_success,
    print_summary_table,
    print_warning,
)

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="woolball-scaffold",
        description="Download a Woolball API template into your project",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  woolball-scaffold\n"
            "  woolball-scaffold --stack DOTNET --variant minimal-api\n"
            "  WOOLBALL_API_KEY=... woolball-scaffold --stack NODEJS --variant express --yes\n"
        ),
    )
    parser.add_argument("--feature", help="Feature to scaffold (default: prompt)")
    parser.add_argument("--stack", help="Technology stack, e.g. DOTNET or NODEJS (default: prompt)")
    parser.add_argument("--variant", help="Template type, e.g. minimal-api (default: prompt)")
    parser.add_argument(
        "--base-dir",
        default=None,
        help="Directory the template is written under (default: current directory)",
    )
    parser.add_argument(
        "--yes", "-y",
        action="store_true",
        help="Overwrite an existing destination without asking",
    )
    parser.add_argument(
        "--list",
        action="store_true",
        help="List available templates and exit",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable debug logging",
    )
    return parser


def list_templates() -> None:
    """Print every registered template."""
    rows = []
    for key in registry.entries():
        manifest = registry.REGISTRY[key]
        rows.append(
            (
                key.feature.value,
                key.stack.value,
                key.variant.value,
                str(manifest.destination_root),
                str(len(manifest.entries)),
            )
        )
    print_summary_table(
        rows,
        columns=("Feature", "Stack", "Variant", "Destination", "Files"),
        title="Available templates",
    )


def run(args: argparse.Namespace, config: ScaffoldConfig, selector: Selector | None = None) -> int:
    """Run one interactive scaffold. Returns the process exit code."""
    selector = selector or Selector()

    try:
        feature = args.feature or selector.select_feature()
        if feature is None:
            console.print("bye.")
            return 0

        console.print(
            f"\nGet your key at: [blue underline]{config.key_url}[/blue underline]"
        )
        stack = args.stack or selector.select_stack(feature)
        variant = args.variant or selector.select_variant(feature, stack)
        manifest = registry.resolve(feature, stack, variant)

        secret = api_key_from_env() or selector.ask_secret()
        root = config.resolve_destination(manifest.destination_root)
        selector.guard_overwrite(manifest, root, assume_yes=args.yes)
        selector.check_project(manifest, config.base_dir)
    except OperationCancelled as exc:
        print_warning(f"\n{exc}")
        return 0
    except NotAProjectRoot as exc:
        print_error(f"\n{exc}.")
        console.print(
            f"[yellow]Please run this command in the root of your {exc.expected} project.[/yellow]"
        )
        return 1
    except ScaffoldError as exc:
        print_error(f"\n{exc}")
        return 1

    console.print("\nDownloading Woolball template...")
    try:
        result = asyncio.run(materialize(manifest, secret, config))
    except ScaffoldError as exc:
        logger.debug("Materialization failed", exc_info=True)
        print_error(f"\nError downloading template: {exc}")
        return 1

    print_file_list(result.sorted_paths())
    print_success(f"\n{len(result)} file(s) written to {result.destination_root}")
    for steps in manifest.next_steps:
        print_steps(steps.heading, steps.lines)
    return 0


def main(argv: list[str] | None = None) -> None:
    """CLI entry point for ``woolball-scaffold`` and ``python -m woolball_scaffold``."""
    args = build_parser().parse_args(argv)
    configure_logging(args.verbose)

    if args.list:
        list_templates()
        return

    config = ScaffoldConfig.from_env()
    if args.base_dir:
        config = config.model_copy(update={"base_dir": Path(args.base_dir)})

    print_banner()
    exit_code = run(args, config)
    if exit_code:
        sys.exit(exit_code)


if __name__ == "__main__":
    main()
