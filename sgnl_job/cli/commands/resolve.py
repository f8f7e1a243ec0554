"""Resolve command: print job params with templates resolved."""

import json
import logging
from argparse import Namespace

import yaml

from sgnl_job.cli.commands.inputs import configure_logging, load_document, parse_context
from sgnl_job.templates import ResolveOptions, TemplateResolver


logger = logging.getLogger(__name__)


def resolve_templates(args: Namespace) -> int:
    """
    Resolve templates in a params file against the given context.

    Resolution errors are logged as warnings and never change the exit code.
    """
    configure_logging(args)

    try:
        params = load_document(args.params)
        context = parse_context(args)
    except FileNotFoundError as e:
        logger.error(f"{e}")
        return 1
    except yaml.YAMLError as e:
        logger.error(f"Failed to parse input: {e}")
        return 1
    except ValueError as e:
        logger.error(f"Validation error: {e}")
        return 2

    options = ResolveOptions(
        omit_no_value_for_exact_templates=args.omit_no_value,
        inject_namespace=not args.no_namespace
    )
    result, errors = TemplateResolver(options).resolve(params, context['data'])

    for message in errors:
        logger.warning(f"Template resolution error: {message}")

    print(json.dumps(result, indent=2, ensure_ascii=False, default=str))
    return 0
