"""
Command-line interface for the ETT/SAD fit matcher.

Usage:
    python -m airwayfit brands [--json]
    python -m airwayfit sizes --name "AuraGain" --manufacturer Ambu
    python -m airwayfit ett-names
    python -m airwayfit match --name "AuraGain" --manufacturer Ambu --size 4 [--tolerance 0.5]
    python -m airwayfit make-example [--output policy.json]
    python -m airwayfit serve [--port 8000]

WARNING: Geometric fit only, NOT a clinical recommendation.
"""

import argparse
import json
import logging
import sys
from pathlib import Path

from pydantic import ValidationError

from airwayfit import __version__
from airwayfit.canonical.normalizer import canonical_manufacturer, canonical_name
from airwayfit.canonical.rules import load_canonical_rules
from airwayfit.catalog.index import build_catalog_index
from airwayfit.catalog.loader import load_catalogs
from airwayfit.cli.readable_output import (
    print_brand_options,
    print_ett_options,
    print_match_view,
)
from airwayfit.errors import AirwayFitError
from airwayfit.matching.pipeline import run_match
from airwayfit.models.outputs import CanonicalKey
from airwayfit.models.policy import GroupBy, MatchPolicy, Selection, load_policy


def _common_parser() -> argparse.ArgumentParser:
    """Options shared by every command that reads catalogs."""
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "--sad-catalog",
        type=Path,
        default=None,
        help="Path to SAD catalog JSON (default: data/sad_catalog.json or packaged copy)",
    )
    common.add_argument(
        "--ett-catalog",
        type=Path,
        default=None,
        help="Path to ETT catalog JSON (default: data/ett_catalog.json or packaged copy)",
    )
    common.add_argument(
        "--rules",
        type=Path,
        default=None,
        help="Path to canonicalization rules JSON (default: packaged rules)",
    )
    common.add_argument(
        "--strict-load",
        action="store_true",
        help="Fail if a catalog cannot be loaded instead of using an empty one",
    )
    common.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Log per-record exclusions to stderr",
    )
    common.add_argument(
        "--json",
        action="store_true",
        help="Print JSON instead of a table",
    )
    return common


def _add_brand_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--name", "-n",
        required=True,
        help="SAD brand/model as listed by 'brands' (any spelling that canonicalizes to it)",
    )
    parser.add_argument(
        "--manufacturer", "-m",
        default="",
        help="SAD manufacturer (misspellings in the alias table are accepted); optional when only one manufacturer lists the name",
    )


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="airwayfit",
        description="Airway Fit - which endotracheal tubes pass through which supraglottic airway. "
                    "WARNING: Geometric fit only, NOT a clinical recommendation.",
    )
    parser.add_argument("--version", action="version", version=f"airwayfit {__version__}")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")
    common = _common_parser()

    # brands command
    subparsers.add_parser(
        "brands",
        parents=[common],
        help="List SAD brand/model options",
    )

    # sizes command
    sizes_parser = subparsers.add_parser(
        "sizes",
        parents=[common],
        help="List sizes available for a SAD brand",
    )
    _add_brand_arguments(sizes_parser)

    # ett-names command
    subparsers.add_parser(
        "ett-names",
        parents=[common],
        help="List ETT name options",
    )

    # match command
    match_parser = subparsers.add_parser(
        "match",
        parents=[common],
        help="Classify ETTs against a selected SAD",
    )
    _add_brand_arguments(match_parser)
    match_parser.add_argument(
        "--size", "-s",
        type=float,
        default=None,
        help="Nominal SAD size (default: any size, smallest lumen wins)",
    )
    match_parser.add_argument(
        "--ett",
        action="append",
        default=[],
        metavar="NAME",
        help="Only consider this ETT name (repeatable)",
    )
    match_parser.add_argument(
        "--policy",
        type=Path,
        default=None,
        help="Path to a MatchPolicy JSON file (see make-example)",
    )
    match_parser.add_argument(
        "--tolerance", "-t",
        type=float,
        default=None,
        help="Required clearance in mm (overrides policy file)",
    )
    match_parser.add_argument(
        "--strict",
        action="store_true",
        help="Treat gaps below the tolerance as no-fit",
    )
    match_parser.add_argument(
        "--exclusive-boundary",
        action="store_true",
        help="A gap exactly equal to the tolerance is tight, not fit",
    )
    match_parser.add_argument(
        "--hide-non-fitting",
        action="store_true",
        help="Drop no-fit and unknown rows before ranking",
    )
    match_parser.add_argument(
        "--all-per-diameter",
        action="store_true",
        help="Keep every model at an inner diameter, not only the smallest OD",
    )
    match_parser.add_argument(
        "--group-by",
        choices=[g.value for g in GroupBy],
        default=None,
        help="Ranking group: ETT name or ETT category",
    )
    match_parser.add_argument(
        "--max-per-group",
        type=int,
        default=None,
        help="Rows kept per group (0 keeps all)",
    )
    match_parser.add_argument(
        "--output", "-o",
        type=Path,
        default=None,
        help="Path to save JSON output",
    )

    # make-example command
    example_parser = subparsers.add_parser(
        "make-example",
        help="Generate an example policy JSON file",
    )
    example_parser.add_argument(
        "--output", "-o",
        type=Path,
        default=Path("example_policy.json"),
        help="Output path for example file (default: example_policy.json)",
    )

    # serve command
    serve_parser = subparsers.add_parser(
        "serve",
        help="Start the FastAPI web server",
    )
    serve_parser.add_argument(
        "--host",
        default="127.0.0.1",
        help="Host to bind to (default: 127.0.0.1)",
    )
    serve_parser.add_argument(
        "--port", "-p",
        type=int,
        default=8000,
        help="Port to listen on (default: 8000)",
    )
    serve_parser.add_argument(
        "--reload",
        action="store_true",
        help="Enable auto-reload for development",
    )

    return parser


def configure_logging(verbose: bool) -> None:
    """Send library logs to stderr; DEBUG when verbose."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def _load(args: argparse.Namespace):
    """Load rules and catalogs named on the command line."""
    rules = load_canonical_rules(args.rules) if args.rules else None
    catalogs = load_catalogs(
        sad_path=str(args.sad_catalog) if args.sad_catalog else None,
        ett_path=str(args.ett_catalog) if args.ett_catalog else None,
        strict=args.strict_load,
    )
    return rules, catalogs


def _brand_key(args: argparse.Namespace, rules, index) -> CanonicalKey:
    """Canonical brand key; a bare name resolves to its only manufacturer."""
    key = CanonicalKey(
        name=canonical_name(args.name, rules),
        manufacturer=canonical_manufacturer(args.manufacturer, rules),
    )
    return index.resolve(key)


def build_policy(args: argparse.Namespace) -> MatchPolicy:
    """
    Policy from an optional JSON file plus command-line overrides.

    Raises:
        pydantic.ValidationError: If an override is out of range
    """
    base = load_policy(args.policy) if args.policy else MatchPolicy()
    data = base.model_dump()

    if args.tolerance is not None:
        data["tolerance_mm"] = args.tolerance
    if args.strict:
        data["strict_tolerance"] = True
    if args.exclusive_boundary:
        data["inclusive_boundary"] = False
    if args.hide_non_fitting:
        data["show_non_fitting"] = False
    if args.all_per_diameter:
        data["best_per_diameter"] = False
    if args.group_by is not None:
        data["group_by"] = args.group_by
    if args.max_per_group is not None:
        data["max_per_group"] = args.max_per_group or None

    return MatchPolicy(**data)


def cmd_brands(args: argparse.Namespace) -> int:
    """List SAD brand/model options."""
    rules, catalogs = _load(args)
    options = build_catalog_index(catalogs, rules).brand_options()

    if args.json:
        print(json.dumps([o.model_dump() for o in options], indent=2))
    else:
        print_brand_options(options)
    return 0


def cmd_sizes(args: argparse.Namespace) -> int:
    """List sizes for one SAD brand."""
    rules, catalogs = _load(args)
    index = build_catalog_index(catalogs, rules)
    sizes = index.sizes_for(_brand_key(args, rules, index))

    if args.json:
        print(json.dumps(sizes))
    elif sizes:
        print(", ".join(f"{s:g}" for s in sizes))
    else:
        print(f"No sizes listed for {args.name!r}", file=sys.stderr)
    return 0


def cmd_ett_names(args: argparse.Namespace) -> int:
    """List ETT name options."""
    rules, catalogs = _load(args)
    options = build_catalog_index(catalogs, rules).ett_names

    if args.json:
        print(json.dumps([o.model_dump() for o in options], indent=2))
    else:
        print_ett_options(options)
    return 0


def cmd_match(args: argparse.Namespace) -> int:
    """Classify ETTs against the selected SAD."""
    policy = build_policy(args)
    rules, catalogs = _load(args)

    selection = Selection(
        brand=_brand_key(args, rules, build_catalog_index(catalogs, rules)),
        size=args.size,
        ett_names=[canonical_name(name, rules) for name in args.ett],
    )

    print(f"\nAirway Fit", file=sys.stderr)
    print(f"Device: {args.name} {args.manufacturer}".rstrip(), file=sys.stderr)
    print(f"Catalog: {len(catalogs.sads)} SADs, {len(catalogs.etts)} ETTs", file=sys.stderr)

    view = run_match(catalogs, selection, policy, rules)

    if args.output:
        with open(args.output, "w") as f:
            f.write(view.model_dump_json(indent=2))
        print(f"\nResults saved to {args.output}", file=sys.stderr)

    if args.json:
        print(view.model_dump_json(indent=2))
    else:
        print_match_view(view)

    return 0


def cmd_make_example(args: argparse.Namespace) -> int:
    """Generate an example policy JSON file."""
    example = MatchPolicy()

    with open(args.output, "w") as f:
        f.write(example.model_dump_json(indent=2))

    print(f"Created example policy file: {args.output}")
    print("\nRun a match with:")
    print(f"  python -m airwayfit match --name AuraGain --manufacturer Ambu --size 4 --policy {args.output}")

    return 0


def cmd_serve(args: argparse.Namespace) -> int:
    """Start the FastAPI web server."""
    import uvicorn

    print(f"\nStarting Airway Fit API", file=sys.stderr)
    print(f"API: http://{args.host}:{args.port}/", file=sys.stderr)
    print(f"Docs: http://{args.host}:{args.port}/docs", file=sys.stderr)
    print("\nPress Ctrl+C to stop\n", file=sys.stderr)

    uvicorn.run(
        "airwayfit.api.server:app",
        host=args.host,
        port=args.port,
        reload=args.reload,
    )
    return 0


COMMANDS = {
    "brands": cmd_brands,
    "sizes": cmd_sizes,
    "ett-names": cmd_ett_names,
    "match": cmd_match,
    "make-example": cmd_make_example,
    "serve": cmd_serve,
}


def cli(argv=None) -> int:
    """Main CLI entry point."""
    parser = create_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    configure_logging(getattr(args, "verbose", False))

    handler = COMMANDS.get(args.command)
    if handler is None:
        parser.print_help()
        return 1

    try:
        return handler(args)
    except ValidationError as e:
        print(f"Validation Error: {e}", file=sys.stderr)
        return 1
    except json.JSONDecodeError as e:
        print(f"Error: Invalid JSON: {e}", file=sys.stderr)
        return 1
    except (AirwayFitError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


def main():
    """Console script entrypoint wrapper."""
    return cli()


if __name__ == "__main__":
    sys.exit(cli())
