"""
Template resolution module.
Implements {$<path>} resolution against a job context.
"""

from .namespace import inject_namespace
from .paths import Extraction, extract_value, parse_path
from .resolver import (
    NO_VALUE_PLACEHOLDER,
    ResolveOptions,
    TemplateResolver,
    resolve,
    resolve_json_path_templates,
)

__all__ = [
    'Extraction',
    'NO_VALUE_PLACEHOLDER',
    'ResolveOptions',
    'TemplateResolver',
    'extract_value',
    'inject_namespace',
    'parse_path',
    'resolve',
    'resolve_json_path_templates',
]
