"""
Path parsing and value extraction for template expressions.

Supports a restricted JSONPath subset:
- $            the whole job context
- $.a.b        dotted mapping keys
- $.a[0]       sequence indices
- $['a-b']     quoted bracket keys (single or double quotes)

Wildcards, filters, slices and recursive descent are not supported.
"""

import re
from dataclasses import dataclass
from typing import Any, List


INDEX_PATTERN = re.compile(r'[0-9]+')


@dataclass(frozen=True)
class Extraction:
    """Outcome of a path lookup."""
    value: Any = None
    found: bool = False


NOT_FOUND = Extraction()


def parse_path(path: str) -> List[str]:
    """
    Split a path expression into its segments.

    Args:
        path: Path starting with '$', e.g. "$.users[0]['display-name']"

    Returns:
        Ordered list of segments. An empty list refers to the whole context.
    """
    if path.startswith('$'):
        path = path[1:]
    if path.startswith('.'):
        path = path[1:]

    if not path:
        return []

    segments: List[str] = []
    current = ''
    in_brackets = False

    for char in path:
        if char == '.' and not in_brackets:
            if current:
                segments.append(current)
            current = ''
        elif char == '[' and not in_brackets:
            if current:
                segments.append(current)
            current = ''
            in_brackets = True
        elif char == ']' and in_brackets:
            segments.append(_strip_quotes(current))
            current = ''
            in_brackets = False
        else:
            current += char

    # Unterminated segment (or unbalanced bracket) still counts
    if current:
        segments.append(current)

    return segments


def _strip_quotes(text: str) -> str:
    if len(text) >= 2 and text[0] == text[-1] and text[0] in ('"', "'"):
        return text[1:-1]
    return text


def extract_value(context: Any, segments: List[str]) -> Extraction:
    """
    Walk the context following the parsed segments.

    A null at the end of the walk counts as not found, so null and absent
    values are indistinguishable to callers.

    Args:
        context: Job context tree (dicts, lists, scalars)
        segments: Segments from parse_path()

    Returns:
        Extraction with the located value, or NOT_FOUND
    """
    try:
        current = context
        for segment in segments:
            if isinstance(current, list):
                if not INDEX_PATTERN.fullmatch(segment):
                    return NOT_FOUND
                index = int(segment)
                if index >= len(current):
                    return NOT_FOUND
                current = current[index]
            elif isinstance(current, dict):
                if segment not in current:
                    return NOT_FOUND
                current = current[segment]
            else:
                # None and scalars cannot be traversed
                return NOT_FOUND

        if current is None:
            return NOT_FOUND
        return Extraction(value=current, found=True)
    except Exception:
        return NOT_FOUND
