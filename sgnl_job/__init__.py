"""SGNL hello world HTTP job with JSONPath template resolution."""

from .templates import ResolveOptions, TemplateResolver, resolve, resolve_json_path_templates

__version__ = '0.1.0'

__all__ = ['ResolveOptions', 'TemplateResolver', 'resolve', 'resolve_json_path_templates']
