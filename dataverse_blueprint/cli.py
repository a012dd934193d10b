"""CLI for dataverse-blueprint."""

import argparse
import asyncio
import logging
import os
import sys
import time

from dataverse_blueprint.client.snapshot import SnapshotClient
from dataverse_blueprint.domain.constants import PHASE_ORDER
from dataverse_blueprint.domain.errors import BlueprintError
from dataverse_blueprint.domain.models import BlueprintResult, GeneratorOptions, ProgressSnapshot, Scope
from dataverse_blueprint.generator import BlueprintGenerator
from dataverse_blueprint.output.json_dumper import JSONDumper
from dataverse_blueprint.utils.logging import get_logger, setup_logging

logger = get_logger('cli')


def _print_progress(snapshot: ProgressSnapshot) -> None:
    if snapshot.total:
        print(f"  [{snapshot.phase.value}] {snapshot.current}/{snapshot.total} {snapshot.message}")
    else:
        print(f"  [{snapshot.phase.value}] {snapshot.message}")


def generate_blueprint(
    snapshot_path: str,
    output_dir: str,
    scope: Scope,
    options: GeneratorOptions | None = None,
    pretty: bool = True,
) -> BlueprintResult:
    """Main orchestration: snapshot -> blueprint -> JSON output."""
    start_time = time.time()

    client = SnapshotClient.from_file(snapshot_path)
    generator = BlueprintGenerator(client, scope, options)
    result = asyncio.run(generator.generate())

    JSONDumper(output_dir, pretty=pretty).write_all(result)
    logger.info("Blueprint written to %s in %.2fs", output_dir, time.time() - start_time)
    return result


def main():
    parser = argparse.ArgumentParser(prog='dataverse-blueprint', description='Dataverse blueprint generator')
    parser.add_argument('-v', '--verbose', action='store_true', help='Enable debug logging')
    parser.add_argument('--log-file', help='Also write logs to this file')
    subparsers = parser.add_subparsers(dest='command')

    gen_parser = subparsers.add_parser('generate', help='Generate a blueprint from a metadata snapshot')
    gen_parser.add_argument('snapshot', help='Path to metadata snapshot JSON file')
    gen_parser.add_argument('output', help='Output directory')
    selection = gen_parser.add_mutually_exclusive_group(required=True)
    selection.add_argument('--publisher', action='append', metavar='PREFIX',
                           help='Publisher prefix to document (repeatable)')
    selection.add_argument('--solution', action='append', metavar='ID',
                           help='Solution id to document (repeatable)')
    gen_parser.add_argument('--no-system-entities', action='store_true',
                            help='Skip system entities in solution scope')
    gen_parser.add_argument('--exclude-system-fields', action='store_true',
                            help='Drop audit, ownership and versioning fields')
    gen_parser.add_argument('--delay', type=float, default=None,
                            help='Seconds to pause after each entity schema fetch')
    gen_parser.add_argument('--no-pretty', action='store_true', help='Disable pretty printing')
    gen_parser.add_argument('--quiet', action='store_true', help='Do not print progress')

    subparsers.add_parser('phases', help='List generation phases in order')

    args = parser.parse_args()
    setup_logging(logging.DEBUG if args.verbose else logging.WARNING, log_file=args.log_file)

    if args.command == 'generate':
        if not os.path.isfile(args.snapshot):
            print(f"Error: {args.snapshot} not found", file=sys.stderr)
            sys.exit(1)

        flags = {
            'include_system_entities': not args.no_system_entities,
            'exclude_system_fields': args.exclude_system_fields,
        }
        if args.publisher:
            scope = Scope.publisher(args.publisher, **flags)
        else:
            scope = Scope.solution(args.solution, **flags)

        options = GeneratorOptions(on_progress=None if args.quiet else _print_progress)
        if args.delay is not None:
            options.schema_delay = args.delay

        print(f"Generating blueprint from {args.snapshot} ({scope.description})...")
        try:
            result = generate_blueprint(args.snapshot, args.output, scope, options,
                                        pretty=not args.no_pretty)
        except BlueprintError as e:
            print(f"Error: {e}", file=sys.stderr)
            sys.exit(1)

        print(f"Done! Documented {result.metadata.entity_count} entities")
        for warning in result.warnings:
            print(f"  warning: {warning}")
        for item in result.degraded:
            print(f"  degraded: {item.category} ({item.error})")
        print(f"Output: {args.output}")

    elif args.command == 'phases':
        for phase in PHASE_ORDER:
            print(f"  {phase.value}")

    else:
        parser.print_help()


if __name__ == '__main__':
    main()
