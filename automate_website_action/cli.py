"""CLI entry point for the automate.website build-step action."""

import argparse
import asyncio
import json
import logging
import os
import signal
import sys
from collections.abc import Mapping, Sequence
from typing import Any

from pydantic import ValidationError

from automate_website_action.config import ActionConfig
from automate_website_action.models.outcome import ExecutionReport, Outcome
from automate_website_action.poller import (
    ExecutionInterruptedError,
    JobPoller,
    job_url,
)
from automate_website_action.progress import LoggingProgressLogger
from automate_website_action.service.remote import JobManagementRemoteService

PASSWORD_ENV_VAR = "AUTOMATE_WEBSITE_PASSWORD"

EXIT_CODES: Mapping[Outcome, int] = {
    "success": 0,
    "failure": 1,
    "success_with_problems": 2,
}
EXIT_INTERRUPTED = 130

RESULT_LABELS = {
    None: "missing",
    True: "failed",
    False: "passed",
}


def parse_scenario_ids(scenario_ids: str) -> Sequence[str]:
    """Parse comma-separated scenario IDs."""
    if not scenario_ids.strip():
        return ()
    return tuple(s.strip() for s in scenario_ids.split(",") if s.strip())


def format_output(report: ExecutionReport, app_base_url: str) -> dict[str, Any]:
    """Format an execution report for JSON output."""
    jobs: list[dict[str, Any]] = []
    for job in report.jobs:
        failed = job.test_results.failed if job.test_results else None
        jobs.append(
            {
                "id": job.id,
                "scenario_id": job.scenario_id,
                "title": job.title,
                "status": job.status,
                "result": RESULT_LABELS[failed],
                "url": job_url(app_base_url, job.id),
            }
        )

    return {
        "outcome": report.outcome,
        "timed_out": report.timed_out,
        "total": len(jobs),
        "passed": sum(1 for j in jobs if j["result"] == "passed"),
        "failed": sum(1 for j in jobs if j["result"] == "failed"),
        "missing": sum(1 for j in jobs if j["result"] == "missing"),
        "jobs": jobs,
    }


async def run(config: ActionConfig, interrupt: asyncio.Event | None = None) -> int:
    """Run the configured scenarios and return exit code."""
    log = logging.getLogger("automate_website_action")
    if interrupt is None:
        interrupt = asyncio.Event()

    async with JobManagementRemoteService.from_config(config) as service:
        poller = JobPoller(
            service=service,
            progress=LoggingProgressLogger(logger=log),
            app_base_url=config.app_base_url,
            check_interval=config.check_interval,
            timeout=config.timeout,
            interrupt=interrupt,
        )
        try:
            report = await poller.run(config.scenario_ids, config.principal())
        except ExecutionInterruptedError as e:
            log.error("%s Submitted jobs keep running remotely.", e)
            return EXIT_INTERRUPTED

    log.info("Build outcome: %s", report.outcome)
    print(json.dumps(format_output(report, config.app_base_url), indent=2))

    return EXIT_CODES[report.outcome]


async def run_until_signalled(config: ActionConfig) -> int:
    """Run with SIGINT/SIGTERM wired to the poller's interrupt event."""
    interrupt = asyncio.Event()
    loop = asyncio.get_running_loop()
    signals = (signal.SIGTERM, signal.SIGINT)

    def _on_signal() -> None:
        # A second signal falls through to the default handlers.
        interrupt.set()
        for sig in signals:
            loop.remove_signal_handler(sig)

    for sig in signals:
        loop.add_signal_handler(sig, _on_signal)

    try:
        return await run(config, interrupt)
    finally:
        for sig in signals:
            loop.remove_signal_handler(sig)


def main() -> None:
    """CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Run automate.website scenarios and wait for their jobs"
    )
    parser.add_argument(
        "--scenario-ids",
        default="",
        help="Comma-separated scenario IDs to execute",
    )
    parser.add_argument(
        "--username",
        required=True,
        help="automate.website account username",
    )
    parser.add_argument(
        "--password",
        default=os.environ.get(PASSWORD_ENV_VAR),
        help=f"Account password (default: ${PASSWORD_ENV_VAR})",
    )
    parser.add_argument(
        "--api-base-url",
        default="https://automate.website/api/",
        help="Base URL of the job-management API",
    )
    parser.add_argument(
        "--app-base-url",
        default="https://automate.website",
        help="Base URL used for job links in the build log",
    )
    parser.add_argument(
        "--check-interval",
        type=float,
        default=30,
        help="Seconds between job status checks",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=300,
        help="Seconds to wait for jobs after creating them",
    )

    args = parser.parse_args()
    if args.password is None:
        parser.error(f"--password or ${PASSWORD_ENV_VAR} is required")

    try:
        config = ActionConfig(
            scenario_ids=parse_scenario_ids(args.scenario_ids),
            username=args.username,
            password=args.password,
            api_base_url=args.api_base_url,
            app_base_url=args.app_base_url,
            check_interval=args.check_interval,
            timeout=args.timeout,
        )
    except ValidationError as e:
        problems = [
            f"--{str(err['loc'][0]).replace('_', '-')}: {err['msg']}"
            for err in e.errors()
        ]
        parser.error("; ".join(problems))

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )

    exit_code = asyncio.run(run_until_signalled(config))
    sys.exit(exit_code)


if __name__ == "__main__":  # pragma: no cover
    main()
