"""Loading params and job context from command line arguments."""

import logging
from argparse import Namespace
from pathlib import Path
from typing import Any, Dict

import yaml


class JsonValueLoader(yaml.SafeLoader):
    """SafeLoader that keeps unquoted dates and times as strings."""


JsonValueLoader.yaml_implicit_resolvers = {
    first_char: [
        (tag, regexp) for tag, regexp in resolvers
        if tag != 'tag:yaml.org,2002:timestamp'
    ]
    for first_char, resolvers in yaml.SafeLoader.yaml_implicit_resolvers.items()
}


def configure_logging(args: Namespace) -> None:
    """Set up root logging from --log-level, --debug and --quiet."""
    log_level = getattr(logging, args.log_level.upper())
    if args.debug:
        log_level = logging.DEBUG
    elif args.quiet:
        log_level = logging.ERROR

    logging.basicConfig(
        level=log_level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )


def load_document(path: str) -> Any:
    """Load a JSON or YAML document (JSON is valid YAML) into JSON-shaped values."""
    file_path = Path(path)
    if not file_path.exists():
        raise FileNotFoundError(f"File not found: {file_path}")

    with open(file_path, 'r', encoding='utf-8') as f:
        return yaml.load(f, Loader=JsonValueLoader)


def parse_context(args: Namespace) -> Dict[str, Any]:
    """
    Build the execution context from --context-file and --context KEY=VALUE.

    The file holds the full context ({"data": ..., "secrets": ...}). A file
    without either key is treated as the data itself. KEY=VALUE pairs are
    added to data; dotted keys create nested mappings.
    """
    context: Dict[str, Any] = {'data': {}, 'secrets': {}}

    if args.context_file:
        file_context = load_document(args.context_file) or {}
        if not isinstance(file_context, dict):
            raise ValueError(
                f"Context file must contain a mapping, got {type(file_context).__name__}"
            )
        if 'data' in file_context or 'secrets' in file_context:
            context['data'] = file_context.get('data') or {}
            context['secrets'] = file_context.get('secrets') or {}
        else:
            context['data'] = file_context

    if args.context:
        if not isinstance(context['data'], dict):
            raise ValueError("--context requires the context data to be a mapping")
        for item in args.context:
            if '=' not in item:
                raise ValueError(f"Invalid context format: {item}. Expected KEY=VALUE")
            key, value = item.split('=', 1)
            if not key:
                raise ValueError(f"Invalid KEY in pair: {item}")
            _set_dotted(context['data'], key, value)

    return context


def _set_dotted(target: Dict[str, Any], key: str, value: str) -> None:
    parts = key.split('.')
    for part in parts[:-1]:
        child = target.get(part)
        if not isinstance(child, dict):
            child = {}
            target[part] = child
        target = child
    target[parts[-1]] = value
