"""
Genowa CLI

Generates rating programs from templates and metadata.

Usage:
    genowa generate --target cobol_rating --ins-line BOP --metadata meta.json
    genowa generate --target java_rating --ins-line BOP --ins-line CPP --metadata meta.db
    genowa keywords --target cobol_rating
    genowa --help
"""

import argparse
import sys
from pathlib import Path

from genowa.config import GeneratorConfig
from genowa.errors import GenerationError
from genowa.generator import GenerationResult, create_driver
from genowa.genobj import create_generation_object, list_variants
from genowa.observability import configure_logging
from genowa.output import InMemoryOutputWriter
from genowa.triggers import (
    TriggerRegistry,
    create_cobol_registry,
    create_default_registry,
    create_java_registry,
)


REGISTRY_FACTORIES = {
    "cobol_rating": create_cobol_registry,
    "java_rating": create_java_registry,
}


def registry_for(target: str | None) -> TriggerRegistry:
    factory = REGISTRY_FACTORIES.get(target or "", create_default_registry)
    return factory()


def print_result(result: GenerationResult, verbose: bool = False, dry_run: bool = False) -> None:
    """Print one run outcome"""
    status = "[PASS]" if result.success else "[FAIL]"
    label = result.gen_object.ins_line_cd or "-"
    if result.success:
        if dry_run or result.output_path is None:
            where = f"{result.file_name} (dry run)"
        else:
            where = result.output_path
        print(f"{status} - {label}: {result.lines} lines -> {where}")
    else:
        print(f"{status} - {label}: {result.error}")
    if verbose:
        print(f"  run_id: {result.run_id}")
        print(f"  states: {' -> '.join(s.value for s in result.history)}")
        print(f"  duration: {result.duration_seconds:.3f}s")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="genowa",
        description="Genowa - template-driven rating program generator",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Generate a COBOL driver for one insurance line
  genowa generate --target cobol_rating --ins-line BOP --metadata meta.json

  # Several insurance lines at once, without writing files
  genowa generate --target java_rating --ins-line BOP --ins-line CPP --metadata meta.db --dry-run

  # List keywords known to a target
  genowa keywords --target java_rating
        """,
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    generate = subparsers.add_parser("generate", help="Generate source for insurance lines")
    generate.add_argument(
        "--target",
        required=True,
        choices=list_variants(),
        help="Generation target",
    )
    generate.add_argument(
        "--ins-line",
        action="append",
        required=True,
        dest="ins_lines",
        metavar="CODE",
        help="Insurance-line code (repeat for several)",
    )
    generate.add_argument(
        "--metadata",
        type=Path,
        help="Metadata file: .json fixture or SQLite export (default: GENOWA_METADATA_PATH)",
    )
    generate.add_argument("--templates", type=Path, help="Template root directory")
    generate.add_argument("--output", type=Path, help="Output root directory")
    generate.add_argument("--file-name", help="Output file name (default: target's naming rule)")
    generate.add_argument("--linkage-prefix", help="Linkage-section prefix")
    generate.add_argument("--workers", type=int, dest="max_workers", help="Concurrent runs")
    generate.add_argument(
        "--dry-run",
        action="store_true",
        help="Generate but do not write files",
    )
    generate.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Verbose output (debug logging, run details)",
    )
    generate.add_argument(
        "--json-logs",
        action="store_true",
        default=None,
        help="Log as JSON lines",
    )

    keywords = subparsers.add_parser("keywords", help="List registered trigger keywords")
    keywords.add_argument(
        "--target",
        choices=list_variants(),
        help="Only the keywords of this target (default: all)",
    )
    return parser


def run_generate(args: argparse.Namespace) -> int:
    config = GeneratorConfig.from_env(
        template_root=args.templates,
        output_root=args.output,
        metadata_path=args.metadata,
        linkage_prefix=args.linkage_prefix,
        max_workers=args.max_workers,
        json_logs=args.json_logs,
    )
    configure_logging(
        level="DEBUG" if args.verbose else config.log_level,
        json_format=config.json_logs,
        stream=sys.stderr,
    )

    if config.metadata_path is not None and not config.metadata_path.exists():
        print(f"[ERROR] Metadata not found: {config.metadata_path}")
        return 1

    writer = InMemoryOutputWriter() if args.dry_run else None
    driver = create_driver(config, registry=registry_for(args.target), writer=writer)
    gen_objects = [
        create_generation_object(args.target, ins_line, args.file_name)
        for ins_line in args.ins_lines
    ]

    results = driver.generate_many(gen_objects)
    for result in results:
        print_result(result, args.verbose, dry_run=args.dry_run)

    failed = sum(1 for r in results if not r.success)
    if len(results) > 1:
        print(f"\n{'=' * 60}")
        print(f"Summary: {len(results) - failed} passed, {failed} failed")
        print(f"{'=' * 60}")
    return 0 if failed == 0 else 1


def run_keywords(args: argparse.Namespace) -> int:
    for keyword in registry_for(args.target).list_keywords():
        print(keyword)
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        if args.command == "generate":
            return run_generate(args)
        return run_keywords(args)
    except KeyboardInterrupt:
        print("\n\n[WARNING] Interrupted by user")
        return 130
    except (GenerationError, ValueError, OSError) as e:
        print(f"[ERROR] {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
