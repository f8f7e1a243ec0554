"""
Namespace injection for the job context.

Adds runtime values under the reserved `sgnl` key before templates are
resolved:
- sgnl.time.now: current UTC instant, e.g. "2025-12-04T17:30:00Z"

Values the caller already supplies under `sgnl.time` take precedence over
the computed ones, so a caller can pin `sgnl.time.now` for a run.
"""

from datetime import datetime, timezone
from typing import Any, Callable, Dict, Optional


NAMESPACE_KEY = 'sgnl'
TIMESTAMP_FORMAT = '%Y-%m-%dT%H:%M:%SZ'


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def format_timestamp(moment: datetime) -> str:
    """Format an instant as RFC 3339 with second precision and a Z suffix."""
    if moment.tzinfo is not None:
        moment = moment.astimezone(timezone.utc)
    return moment.strftime(TIMESTAMP_FORMAT)


def inject_namespace(
    job_context: Any,
    now: Optional[Callable[[], datetime]] = None
) -> Any:
    """
    Build an augmented copy of the job context.

    Args:
        job_context: Caller-supplied context (None is treated as {})
        now: Clock used for sgnl.time.now (default: utc_now)

    Returns:
        New context with the sgnl namespace merged in. Non-mapping
        contexts are returned unchanged.
    """
    if job_context is None:
        job_context = {}
    if not isinstance(job_context, dict):
        return job_context

    clock = now or utc_now

    existing_sgnl = job_context.get(NAMESPACE_KEY)
    if not isinstance(existing_sgnl, dict):
        existing_sgnl = {}

    existing_time = existing_sgnl.get('time')
    if not isinstance(existing_time, dict):
        existing_time = {}

    time_values: Dict[str, Any] = {'now': format_timestamp(clock())}
    time_values.update(existing_time)

    augmented = dict(job_context)
    augmented[NAMESPACE_KEY] = {**existing_sgnl, 'time': time_values}
    return augmented
