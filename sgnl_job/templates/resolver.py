"""
Template resolution implementation.
Handles {$<path>} resolution against a job context in strings and nested data.

Supported expressions:
- {$}                  whole job context (as JSON)
- {$.user.name}        dotted keys
- {$.users[0].email}   sequence indices
- {$['user-id']}       quoted bracket keys
- {$.sgnl.time.now}    injected runtime values (see namespace.py)

Resolution never raises. Lookups that fail are reported as messages in the
returned error list and replaced with a placeholder.
"""

import json
import re
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, List, Mapping, Optional, Tuple, Union

from .namespace import inject_namespace
from .paths import extract_value, parse_path


NO_VALUE_PLACEHOLDER = '{No Value}'

# Whole floats at or above this keep exponent notation
MAX_INTEGRAL_FLOAT = 1e21


@dataclass
class ResolveOptions:
    """Options controlling template resolution."""
    omit_no_value_for_exact_templates: bool = False
    inject_namespace: bool = True

    # Accept the option names used by job definitions as well
    _ALIASES = {
        'omitNoValueForExactTemplates': 'omit_no_value_for_exact_templates',
        'injectNamespace': 'inject_namespace',
    }

    @classmethod
    def from_value(cls, value: Union['ResolveOptions', Mapping[str, Any], None]) -> 'ResolveOptions':
        """Build options from an instance, a mapping, or None (defaults)."""
        if value is None:
            return cls()
        if isinstance(value, cls):
            return value

        options = cls()
        for key, option_value in value.items():
            name = cls._ALIASES.get(key, key)
            if name in ('omit_no_value_for_exact_templates', 'inject_namespace'):
                setattr(options, name, bool(option_value))
        return options


class TemplateResolver:
    """
    Resolves template expressions in strings and data structures.

    A resolver holds no per-call state, so one instance can be reused
    across calls and threads.
    """

    # Pattern to match {$...} expressions up to the next closing brace
    TEMPLATE_PATTERN = re.compile(r'\{\$[^}]*\}')

    def __init__(
        self,
        options: Union[ResolveOptions, Mapping[str, Any], None] = None,
        now: Optional[Callable[[], datetime]] = None
    ):
        """
        Initialize the resolver.

        Args:
            options: Resolution options (ResolveOptions or mapping)
            now: Clock for the injected sgnl.time.now value
        """
        self.options = ResolveOptions.from_value(options)
        self.now = now

    def resolve(self, value: Any, job_context: Any = None) -> Tuple[Any, List[str]]:
        """
        Resolve templates in a value (string, list, dict or scalar).

        Args:
            value: The value to resolve templates in
            job_context: Data available to template paths

        Returns:
            Tuple of (resolved value, ordered error messages)
        """
        if self.options.inject_namespace:
            context = inject_namespace(job_context, now=self.now)
        else:
            context = job_context if job_context is not None else {}

        errors: List[str] = []
        result = self._resolve_value(value, context, errors)
        return result, errors

    def _resolve_value(self, value: Any, context: Any, errors: List[str]) -> Any:
        omit = self.options.omit_no_value_for_exact_templates

        if isinstance(value, str):
            resolved, string_errors = self.resolve_string(value, context)
            errors.extend(string_errors)
            return resolved
        elif isinstance(value, list):
            items = [self._resolve_value(item, context, errors) for item in value]
            if omit:
                items = [item for item in items if item != '']
            return items
        elif isinstance(value, dict):
            resolved = {}
            for key, item in value.items():
                resolved_item = self._resolve_value(item, context, errors)
                if omit and resolved_item == '':
                    continue
                resolved[key] = resolved_item
            return resolved
        else:
            # Numbers, booleans and None are never templates
            return value

    def resolve_string(self, text: str, context: Any) -> Tuple[str, List[str]]:
        """
        Resolve every template expression in a single string.

        Args:
            text: String possibly containing {$...} expressions
            context: Job context, already namespace-augmented

        Returns:
            Tuple of (resolved string, error messages for this string)
        """
        errors: List[str] = []
        matches = list(self.TEMPLATE_PATTERN.finditer(text))
        if not matches:
            return text, errors

        is_exact = self.TEMPLATE_PATTERN.fullmatch(text) is not None

        parts: List[str] = []
        position = 0
        for match in matches:
            parts.append(text[position:match.start()])
            parts.append(self._substitute(match.group(0)[1:-1], context, is_exact, errors))
            position = match.end()
        parts.append(text[position:])

        return ''.join(parts), errors

    def _substitute(self, path: str, context: Any, is_exact: bool, errors: List[str]) -> str:
        extraction = extract_value(context, parse_path(path))

        if not extraction.found:
            errors.append(f"failed to extract field '{path}': field not found")
            if is_exact and self.options.omit_no_value_for_exact_templates:
                return ''
            return NO_VALUE_PLACEHOLDER

        text = stringify(extraction.value)
        if text == '':
            errors.append(f"failed to extract field '{path}': field is empty")
        return text


def stringify(value: Any) -> str:
    """Convert an extracted value to its substitution text."""
    if isinstance(value, str):
        return value
    if value is None:
        return ''
    # Everything else gets its compact JSON representation
    return json.dumps(_integral_floats_as_ints(value), separators=(',', ':'), ensure_ascii=False, default=str)


def _integral_floats_as_ints(value: Any) -> Any:
    # JSON has a single number type: 1.0 renders as 1 and 1e16 in full
    if isinstance(value, float):
        if value.is_integer() and abs(value) < MAX_INTEGRAL_FLOAT:
            return int(value)
        return value
    if isinstance(value, dict):
        return {key: _integral_floats_as_ints(item) for key, item in value.items()}
    if isinstance(value, list):
        return [_integral_floats_as_ints(item) for item in value]
    return value


def resolve(
    value: Any,
    job_context: Any = None,
    options: Union[ResolveOptions, Mapping[str, Any], None] = None
) -> Tuple[Any, List[str]]:
    """
    Resolve {$...} templates in value against job_context.

    Args:
        value: Any JSON-shaped value, typically job parameters
        job_context: Data available at job execution time
        options: ResolveOptions or a mapping of option names

    Returns:
        Tuple of (resolved value, error messages); an empty list means success
    """
    return TemplateResolver(options).resolve(value, job_context)


resolve_json_path_templates = resolve
