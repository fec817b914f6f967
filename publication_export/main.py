"""Main module entrypoint for local runtime execution.

This module validates startup configuration and either launches the FastAPI
service or runs one job-layer entry point and exits.
"""

import argparse
import logging

import uvicorn

from publication_export.bootstrap import (
    bootstrap_close_components,
    bootstrap_create_application,
    bootstrap_create_components,
)

logger = logging.getLogger(__name__)


def main() -> None:
    """Run selected runtime command with validated startup configuration.

    Returns:
        None: This function does not return a runtime value.

    Raises:
        SettingsLoadError: Raised when configuration validation fails.
    """

    argument_parser = argparse.ArgumentParser(description="Publication export runtime entrypoint")
    argument_parser.add_argument(
        "command",
        nargs="?",
        default="api",
        choices=("api", "run-jobs", "retry-failed", "poll"),
        help="Runtime command: `api` starts server, `run-jobs` drains scheduled jobs, "
        "`retry-failed` re-executes retryable failed jobs, `poll` schedules jobs for due publication requests",
        type=str,
    )
    parsed_arguments = argument_parser.parse_args()

    components = bootstrap_create_components()

    if parsed_arguments.command == "api":
        application = bootstrap_create_application(components)
        uvicorn.run(
            application,
            host=components.settings.application_host,
            port=components.settings.application_port,
            log_config=None,
        )
        return

    try:
        if parsed_arguments.command == "run-jobs":
            executed = components.scheduler.scheduler_run_next()
            logger.info("Executed %d scheduled job(s)", executed)
        elif parsed_arguments.command == "retry-failed":
            executed = components.scheduler.scheduler_retry_failed()
            logger.info("Retried %d failed job(s)", executed)
        else:
            created = components.discoverer.discoverer_trigger_publications()
            logger.info("Scheduled %d job(s) for due publication requests", len(created))
    finally:
        bootstrap_close_components(components)


if __name__ == "__main__":
    main()
