# Copyright (c) 2025 Henru Wang
# All rights reserved.

"""Command-line interface for maintaining redirect tables.

Examples:
    locale-redirects add /en-US/docs/Old /en-US/docs/New
    locale-redirects fix en-US fr
    locale-redirects validate --strict
    locale-redirects resolve /en-US/docs/Old /fr/docs/Web
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from locale_redirects.config import Config, ConfigurationError
from locale_redirects.locales import canonical_locale
from locale_redirects.logging_setup import configure_cli_logging
from locale_redirects.models import RedirectError
from locale_redirects.service import RedirectService

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="locale-redirects",
        description="Maintain and query per-locale redirect tables",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__.split("Examples:", 1)[1] if __doc__ else None,
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to .locale_redirects.yml (default: working directory)",
    )
    parser.add_argument(
        "--log-dir",
        type=Path,
        default=None,
        help="Also write JSON logs to this directory",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Log at DEBUG level",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    add = subparsers.add_parser("add", help="Add one redirect to its locale's table")
    add.add_argument("from_url", help="Source URL, e.g. /en-US/docs/Old")
    add.add_argument("to_url", help="Target URL, internal or https://")

    fix = subparsers.add_parser("fix", help="Rewrite tables in repair mode")
    fix.add_argument("locales", nargs="+", help="Locales to repair")

    validate = subparsers.add_parser("validate", help="Check tables are canonical")
    validate.add_argument(
        "locales", nargs="*", help="Locales to check (default: every locale with a table)"
    )
    validate.add_argument(
        "--strict",
        action="store_true",
        help="Also require tables to be free of orphaned redirects",
    )

    resolve = subparsers.add_parser("resolve", help="Print where URLs redirect to")
    resolve.add_argument("urls", nargs="+", help="URLs to resolve")

    return parser


def _add(service: RedirectService, args: argparse.Namespace) -> int:
    result = service.add_redirect(args.from_url, args.to_url)
    print(f"Saved {result.table_path} ({len(result.pairs)} redirects)")
    return 0


def _fix(service: RedirectService, args: argparse.Namespace) -> int:
    for locale in args.locales:
        result = service.add(locale, [], fix=True)
        print(
            f"Fixed {result.table_path}: {len(result.pairs)} redirects, "
            f"{len(result.dropped_orphans)} orphaned, {len(result.cycles)} cycles dropped"
        )
    return 0


def _validate(service: RedirectService, args: argparse.Namespace) -> int:
    locales = args.locales or service.locales_with_tables()
    failed = 0
    for locale in locales:
        try:
            service.validate_locale(locale, strict=args.strict)
        except RedirectError as e:
            failed += 1
            print(f"✗ {canonical_locale(locale) or locale}: {e}", file=sys.stderr)
            continue
        print(f"✓ {canonical_locale(locale) or locale}")
    return 1 if failed else 0


def _resolve(service: RedirectService, args: argparse.Namespace) -> int:
    # Lazy loading skips broken tables, so one bad locale can't fail a lookup.
    for url in args.urls:
        resolved = service.resolve(url)
        if resolved == url:
            print(f"{url} (no redirect)")
        else:
            print(f"{url} -> {resolved}")
    return 0


COMMANDS = {
    "add": _add,
    "fix": _fix,
    "validate": _validate,
    "resolve": _resolve,
}


def main(argv: Optional[List[str]] = None) -> int:
    """Run the CLI and return its exit status."""
    args = build_parser().parse_args(argv)
    configure_cli_logging(args.log_dir, args.verbose)
    logger.debug(f"Running {args.command} command")

    try:
        service = RedirectService(config=Config(config_path=args.config))
        return COMMANDS[args.command](service, args)
    except (RedirectError, ConfigurationError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
