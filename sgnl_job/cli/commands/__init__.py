"""CLI command handlers."""

from .invoke import invoke_job
from .resolve import resolve_templates

__all__ = ['invoke_job', 'resolve_templates']
