"""
Secrets retrieval and masking implementation.

- Secrets come from the job context's `secrets` mapping
- The process environment (upper-cased name) is consulted only when the
  manager is created with env_fallback=True
- Empty strings count as present
- Known secret values are masked in log lines written through
  SecretsMaskingAdapter
"""

import logging
import os
import re
from typing import Any, Dict, List, Mapping, Optional, Pattern, Set
from dataclasses import dataclass


MASK = '***'


@dataclass
class SecretsContext:
    """Secrets resolved for one job invocation."""
    declared_secrets: List[str]  # Names of secrets the job requires
    missing_secrets: List[str]  # Declared secrets with no value anywhere
    secret_values: Dict[str, str]  # Resolved values keyed by secret name


class SecretsManager:
    """
    Looks up secrets and remembers their values for masking.

    Each job owns its manager; call clear_masked_values() when an
    invocation ends so values never outlive it.
    """

    def __init__(self, env_fallback: bool = False):
        """
        Initialize secrets manager.

        Args:
            env_fallback: Read missing secrets from the process environment
        """
        self.env_fallback = env_fallback
        self._masked_values: Set[str] = set()
        self._pattern: Optional[Pattern[str]] = None

    def resolve_secrets(
        self,
        declared_secrets: Optional[List[str]] = None,
        provided: Optional[Mapping[str, Any]] = None
    ) -> SecretsContext:
        """
        Resolve secrets for a job invocation.

        Args:
            declared_secrets: Names of secrets the job requires
            provided: Secrets supplied with the job context

        Returns:
            SecretsContext with resolved values and any missing secrets
        """
        context = SecretsContext(
            declared_secrets=list(declared_secrets or []),
            missing_secrets=[],
            secret_values={}
        )
        provided = provided or {}

        for secret_name in context.declared_secrets:
            value = provided.get(secret_name)
            if value is None and self.env_fallback:
                value = os.environ.get(secret_name.upper())

            if value is None:
                context.missing_secrets.append(secret_name)
            else:
                context.secret_values[secret_name] = str(value)

        self.remember(*context.secret_values.values())
        return context

    def remember(self, *values: str) -> None:
        """Add values to the mask set. Empty strings are ignored."""
        added = {value for value in values if value}
        if added - self._masked_values:
            self._masked_values |= added
            # Longest first so a secret containing another is masked whole
            ordered = sorted(self._masked_values, key=len, reverse=True)
            self._pattern = re.compile('|'.join(re.escape(value) for value in ordered))

    def mask_text(self, text: str) -> str:
        """Replace every known secret value in text with '***'."""
        if not text or self._pattern is None:
            return text
        return self._pattern.sub(MASK, text)

    def mask_value(self, data: Any) -> Any:
        """
        Recursively mask secrets in strings, dicts and lists.

        Args:
            data: Value potentially containing secrets

        Returns:
            Copy of the value with secrets masked
        """
        if self._pattern is None:
            return data

        if isinstance(data, str):
            return self.mask_text(data)
        elif isinstance(data, dict):
            return {key: self.mask_value(value) for key, value in data.items()}
        elif isinstance(data, (list, tuple)):
            return type(data)(self.mask_value(item) for item in data)
        return data

    def clear_masked_values(self):
        """Forget all values to mask."""
        self._masked_values.clear()
        self._pattern = None


class SecretsMaskingAdapter(logging.LoggerAdapter):
    """
    Logger adapter that masks the secrets known to one SecretsManager.

    Masking is scoped to the adapter, so jobs sharing a module logger never
    mask each other's secrets.
    """

    def __init__(self, logger: logging.Logger, secrets_manager: SecretsManager):
        super().__init__(logger, {})
        self.secrets_manager = secrets_manager

    def process(self, msg, kwargs):
        return self.secrets_manager.mask_text(str(msg)), kwargs

    def log(self, level, msg, *args, **kwargs):
        if args:
            args = tuple(self.secrets_manager.mask_value(arg) for arg in args)
        super().log(level, msg, *args, **kwargs)
