"""
SGNL hello world HTTP job.

Sends a hello world message via HTTP POST to a configured URL using a
bearer token from the job secrets. Job parameters may contain {$...}
templates that are resolved against the execution context data before use.

Lifecycle hooks:
- invoke: resolve params, POST the message, return the response summary
- error:  log the failure and re-raise as unrecoverable
- halt:   log the halt reason
"""

import json
import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional

import httpx

from .exceptions import HttpRequestError, JobError, JobValidationError, ValidationError
from .security.secrets import SecretsManager, SecretsMaskingAdapter
from .templates import TemplateResolver


logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0
DEFAULT_MESSAGE = 'Hello World!'
BEARER_TOKEN_SECRET = 'bearer_token'


def iso_timestamp() -> str:
    """Current UTC time with millisecond precision, e.g. 2025-12-04T17:30:00.123Z."""
    return datetime.now(timezone.utc).isoformat(timespec='milliseconds').replace('+00:00', 'Z')


class HelloWorldJob:
    """
    Executes the hello world HTTP job.
    Handles template resolution, secrets lookup, and the outbound request.
    """

    def __init__(
        self,
        client: Optional[httpx.Client] = None,
        timeout: float = DEFAULT_TIMEOUT,
        secrets_manager: Optional[SecretsManager] = None,
        resolver: Optional[TemplateResolver] = None
    ):
        """
        Initialize the job.

        Args:
            client: HTTP client to use (default: a new client per request)
            timeout: Request timeout in seconds
            secrets_manager: Manager for secrets lookup and log masking
            resolver: Template resolver for job params
        """
        self.client = client
        self.timeout = timeout
        self.resolver = resolver or TemplateResolver()
        self.secrets_manager = secrets_manager or SecretsManager()
        self.log = SecretsMaskingAdapter(logger, self.secrets_manager)

    def invoke(self, params: Optional[Dict[str, Any]], context: Optional[Dict[str, Any]]) -> Dict[str, Any]:
        """
        Main execution handler - sends hello world message via HTTP POST.

        Args:
            params: Job input parameters (may contain templates)
            context: Execution context with data and secrets

        Returns:
            Job results with response status and body

        Raises:
            JobValidationError: If url or the bearer_token secret is missing
            HttpRequestError: If the request fails or returns a non-2xx status
        """
        try:
            return self._invoke(params or {}, context or {})
        finally:
            # Secret values never outlive the invocation that supplied them
            self.secrets_manager.clear_masked_values()

    def _invoke(self, params: Dict[str, Any], context: Dict[str, Any]) -> Dict[str, Any]:
        self.log.info('Starting hello world HTTP job execution')

        # Look up secrets first so their values are masked in every log line below
        secrets = self.secrets_manager.resolve_secrets(
            declared_secrets=[BEARER_TOKEN_SECRET],
            provided=context.get('secrets')
        )

        job_context = context.get('data') or {}
        self._log_inputs(params, job_context)

        resolved_params, errors = self.resolver.resolve(params, job_context)
        if errors:
            self.log.warning(f"Template resolution errors: {errors}")
        self.log.debug(f"Resolved params: {json.dumps(resolved_params, indent=2, default=str)}")

        if not isinstance(resolved_params, dict):
            raise JobValidationError([ValidationError("params must be a mapping", field="params")])

        url = resolved_params.get('url')
        message = resolved_params.get('message')

        bearer_token = secrets.secret_values.get(BEARER_TOKEN_SECRET)
        if not bearer_token:
            raise JobValidationError([
                ValidationError(f"{BEARER_TOKEN_SECRET} secret is required", field=BEARER_TOKEN_SECRET)
            ])

        if not url:
            raise JobValidationError([ValidationError("url parameter is required", field="url")])

        payload = {
            'message': message or DEFAULT_MESSAGE,
            'timestamp': iso_timestamp()
        }

        self.log.info(f"Sending POST request to: {url}")
        response = self._post(url, payload, bearer_token)

        response_status = response.status_code
        response_status_text = response.reason_phrase
        response_body = self._read_body(response)

        self.log.info(f"Response status: {response_status} {response_status_text}")

        if not response.is_success:
            self.log.error(f"HTTP request failed: {response_status} {response_status_text}")
            raise HttpRequestError(
                f"HTTP request failed with status {response_status}: {response_status_text}",
                status_code=response_status,
                reason=response_status_text
            )

        self.log.info('HTTP POST request completed successfully')

        return {
            'success': True,
            'response_status': response_status,
            'response_body': response_body,
            'sent_at': payload['timestamp']
        }

    def error(self, params: Dict[str, Any]) -> None:
        """
        Error recovery handler. The failure is never recoverable.

        Args:
            params: Original params plus error information

        Raises:
            JobError: Always
        """
        error = params.get('error')
        url = params.get('url')
        message = _error_message(error)
        self.log.error(f"Hello world HTTP job failed for URL {url}: {message}")
        raise JobError(f"Unrecoverable error: {message}")

    def halt(self, params: Dict[str, Any]) -> None:
        """
        Graceful shutdown handler.

        Args:
            params: Original params plus halt reason
        """
        self.log.info(f"Job halted: {params.get('reason')}")

    def _log_inputs(self, params: Dict[str, Any], job_context: Any) -> None:
        if not self.log.isEnabledFor(logging.DEBUG):
            return

        self.log.debug('=== DEBUG: Input Analysis ===')
        self.log.debug(f"params type: {type(params).__name__}")
        self.log.debug(f"params keys: {list(params.keys()) if isinstance(params, dict) else []}")
        self.log.debug(f"params: {json.dumps(params, indent=2, default=str)}")
        self.log.debug(f"params JSON length: {len(json.dumps(params, default=str))}")
        self.log.debug(f"context.data type: {type(job_context).__name__}")
        self.log.debug(f"context.data keys: {list(job_context.keys()) if isinstance(job_context, dict) else []}")
        self.log.debug(f"context.data JSON length: {len(json.dumps(job_context, default=str))}")

    def _post(self, url: str, payload: Dict[str, Any], bearer_token: str) -> httpx.Response:
        headers = {
            'Content-Type': 'application/json',
            'Authorization': f"Bearer {bearer_token}"
        }
        body = json.dumps(payload)

        try:
            if self.client is not None:
                return self.client.post(url, content=body, headers=headers, timeout=self.timeout)
            with httpx.Client(timeout=self.timeout) as client:
                return client.post(url, content=body, headers=headers)
        except httpx.RequestError as e:
            self.log.error(f"HTTP request to {url} failed: {e}")
            raise HttpRequestError(f"HTTP request failed: {e}") from e

    @staticmethod
    def _read_body(response: httpx.Response) -> Any:
        try:
            text = response.text
        except Exception:
            return None
        try:
            return json.loads(text)
        except ValueError:
            # Keep as text if not valid JSON
            return text


def _error_message(error: Any) -> str:
    if isinstance(error, BaseException):
        return str(error)
    if isinstance(error, dict):
        return str(error.get('message', ''))
    return str(error) if error is not None else ''


_default_job = HelloWorldJob()


def invoke(params: Optional[Dict[str, Any]], context: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    """Run the job with the default HelloWorldJob instance."""
    return _default_job.invoke(params, context)


def error(params: Dict[str, Any]) -> None:
    """Error hook of the default HelloWorldJob instance."""
    _default_job.error(params)


def halt(params: Dict[str, Any]) -> None:
    """Halt hook of the default HelloWorldJob instance."""
    _default_job.halt(params)
