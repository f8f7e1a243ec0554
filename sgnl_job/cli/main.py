"""Main CLI entry point for the SGNL hello world HTTP job."""

import argparse
import sys
from typing import Optional

from .commands import invoke_job, resolve_templates


def _add_common_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        'params',
        type=str,
        help='Path to JSON or YAML file with job parameters'
    )
    parser.add_argument(
        '--context',
        action='append',
        metavar='KEY=VALUE',
        help='Context data values, dotted keys allowed (can be specified multiple times)'
    )
    parser.add_argument(
        '--context-file',
        type=str,
        help='Path to JSON or YAML file with the execution context'
    )
    parser.add_argument(
        '--debug',
        action='store_true',
        help='Enable debug logging'
    )
    parser.add_argument(
        '--quiet',
        action='store_true',
        help='Suppress non-error output'
    )
    parser.add_argument(
        '--log-level',
        choices=['debug', 'info', 'warning', 'error'],
        default='info',
        help='Set log level'
    )


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser for the job CLI."""
    parser = argparse.ArgumentParser(
        prog='sgnl-job',
        description='SGNL hello world HTTP job'
    )

    subparsers = parser.add_subparsers(dest='command', help='Commands')

    # Resolve command
    resolve_parser = subparsers.add_parser('resolve', help='Resolve templates in job parameters')
    _add_common_arguments(resolve_parser)
    resolve_parser.add_argument(
        '--omit-no-value',
        action='store_true',
        help='Drop values whose exact template cannot be resolved'
    )
    resolve_parser.add_argument(
        '--no-namespace',
        action='store_true',
        help='Do not inject sgnl.* runtime values into the context'
    )

    # Invoke command
    invoke_parser = subparsers.add_parser('invoke', help='Run the job')
    _add_common_arguments(invoke_parser)
    invoke_parser.add_argument(
        '--timeout',
        type=float,
        default=30.0,
        help='HTTP request timeout in seconds'
    )
    invoke_parser.add_argument(
        '--secrets-from-env',
        action='store_true',
        help='Read secrets missing from the context from the environment (bearer_token -> BEARER_TOKEN)'
    )

    return parser


def main(args: Optional[list] = None) -> int:
    """Main entry point for the CLI."""
    parser = create_parser()
    parsed_args = parser.parse_args(args)

    if not parsed_args.command:
        parser.print_help()
        return 1

    if parsed_args.command == 'resolve':
        return resolve_templates(parsed_args)
    elif parsed_args.command == 'invoke':
        return invoke_job(parsed_args)
    else:
        parser.print_help()
        return 1


if __name__ == '__main__':
    sys.exit(main())
