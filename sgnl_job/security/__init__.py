"""Security module for secrets retrieval and masking."""

from .secrets import SecretsContext, SecretsManager, SecretsMaskingAdapter

__all__ = ['SecretsContext', 'SecretsManager', 'SecretsMaskingAdapter']
