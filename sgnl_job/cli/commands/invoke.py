"""Invoke command: run the hello world HTTP job."""

import json
import logging
from argparse import Namespace

import yaml

from sgnl_job.cli.commands.inputs import configure_logging, load_document, parse_context
from sgnl_job.exceptions import JobError, JobValidationError
from sgnl_job.job import HelloWorldJob
from sgnl_job.security import SecretsManager


logger = logging.getLogger(__name__)


def invoke_job(args: Namespace) -> int:
    """
    Run the job once and print its result.

    Exit codes: 0 success, 1 request/input failure, 2 validation failure.
    """
    configure_logging(args)

    try:
        params = load_document(args.params) or {}
        context = parse_context(args)
    except FileNotFoundError as e:
        logger.error(f"{e}")
        return 1
    except yaml.YAMLError as e:
        logger.error(f"Failed to parse input: {e}")
        return 1
    except ValueError as e:
        logger.error(f"Validation error: {e}")
        return 2

    job = HelloWorldJob(
        timeout=args.timeout,
        secrets_manager=SecretsManager(env_fallback=args.secrets_from_env)
    )

    try:
        result = job.invoke(params, context)
    except JobValidationError as e:
        for error in e.errors:
            logger.error(f"Validation error: {error.message}")
        return e.exit_code
    except JobError as e:
        logger.error(f"Job failed: {e}")
        try:
            job.error({**params, 'error': e})
        except JobError as unrecoverable:
            logger.debug(f"{unrecoverable}")
        return e.exit_code
    except KeyboardInterrupt:
        job.halt({**params, 'reason': 'interrupted'})
        return 130

    print(json.dumps(result, indent=2, ensure_ascii=False, default=str))
    return 0
