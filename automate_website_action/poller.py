"""Submit scenarios as jobs and poll the job-management service until done."""

import asyncio
import logging
import time
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field

from automate_website_action.models.auth import Authentication
from automate_website_action.models.job import Job, JobRequest
from automate_website_action.models.outcome import ExecutionReport, Outcome
from automate_website_action.progress import ProgressLogger
from automate_website_action.service.base import JobManagementService

log = logging.getLogger(__name__)

DEFAULT_CHECK_INTERVAL = 30.0
DEFAULT_TIMEOUT = 300.0


class ExecutionInterruptedError(Exception):
    """Raised when the wait between status checks is interrupted."""


def job_url(app_base_url: str, job_id: str) -> str:
    """Build the human-readable link to a job."""
    return f"{app_base_url.rstrip('/')}/job/{job_id}"


def are_completed(jobs: Sequence[Job], job_ids: Sequence[str]) -> bool:
    """Return True when every job was reported and none is SCHEDULED or RUNNING."""
    reported = {job.id for job in jobs}
    if any(job_id not in reported for job_id in job_ids):
        return False
    return all(job.is_terminal for job in jobs)


def with_unreported(jobs: Sequence[Job], created_jobs: Sequence[Job]) -> list[Job]:
    """Append created jobs the service left out, stripped of any results."""
    reported = {job.id for job in jobs}
    unreported = [
        job.model_copy(update={"test_results": None})
        for job in created_jobs
        if job.id not in reported
    ]
    return [*jobs, *unreported]


def reduce_outcome(
    jobs: Sequence[Job], progress: ProgressLogger, app_base_url: str
) -> Outcome:
    """Reduce the final job states to one outcome, logging a line per job.

    A failed test run downgrades success to success_with_problems. A job
    without test results (remote error, or still running when the timeout
    hit) makes the whole outcome a failure, and nothing lifts it back.
    """
    outcome: Outcome = "success"

    for job in jobs:
        url = job_url(app_base_url, job.id)
        if job.test_results is None:
            outcome = "failure"
            progress.warning(
                f"Unexpected error occurred during execution of '{job.title}' "
                f"or execution took too long ({url})."
            )
        elif job.test_results.failed:
            if outcome != "failure":
                outcome = "success_with_problems"
            progress.warning(f"{job.title} job execution failed ({url}).")
        else:
            progress.message(f"{job.title} job execution succeeded ({url}).")

    return outcome


@dataclass(frozen=True, kw_only=True)
class JobPoller:
    """Runs scenarios on the job-management service and waits for the jobs.

    The interrupt event aborts the wait between status checks; setting it
    makes the current run raise ExecutionInterruptedError. Jobs that were
    already submitted keep running on the service.
    """

    service: JobManagementService
    progress: ProgressLogger
    app_base_url: str
    check_interval: float = DEFAULT_CHECK_INTERVAL
    timeout: float = DEFAULT_TIMEOUT
    interrupt: asyncio.Event = field(default_factory=asyncio.Event)
    clock: Callable[[], float] = field(default=time.monotonic, repr=False)

    def __post_init__(self) -> None:
        if self.check_interval <= 0:
            raise ValueError(
                f"check_interval must be positive, got {self.check_interval}"
            )
        if self.timeout <= 0:
            raise ValueError(f"timeout must be positive, got {self.timeout}")

    async def execute(
        self, scenario_ids: Sequence[str], principal: Authentication
    ) -> Outcome:
        """Run the scenarios and return the aggregate outcome."""
        report = await self.run(scenario_ids, principal)
        return report.outcome

    async def run(
        self, scenario_ids: Sequence[str], principal: Authentication
    ) -> ExecutionReport:
        """Run the scenarios and return the outcome with the final jobs.

        Args:
            scenario_ids: Scenarios to execute, one job each
            principal: Credentials used for every remote call

        Returns:
            Report with the outcome and the COMPLETE view of every job

        Raises:
            ExecutionInterruptedError: If the interrupt event fires while
                waiting between status checks

        """
        if not scenario_ids:
            self.progress.message("Skipping execution - no scenarios were selected.")
            return ExecutionReport(outcome="success")

        self.progress.message(
            f"Creating jobs for selected scenarios {list(scenario_ids)} ..."
        )
        requests = [
            JobRequest(scenario_id=scenario_id, take_screenshots="ON_FAILURE")
            for scenario_id in scenario_ids
        ]
        created_jobs = await self.service.create_jobs(requests, principal)
        created_at = self.clock()

        job_ids = [job.id for job in created_jobs]
        log.info("Created job(s): %s", ", ".join(job_ids))

        timed_out = False
        while True:
            if self.clock() - created_at >= self.timeout:
                timed_out = True
                self.progress.warning(
                    f"Jobs did not complete within {self.timeout:g} seconds."
                )
                break

            await self._wait()

            self.progress.message("Checking job statuses ...")
            jobs = await self.service.get_jobs_by_principal_and_ids(
                job_ids, principal, "BRIEF"
            )
            if are_completed(jobs, job_ids):
                break

            active = [f"{job.id}={job.status}" for job in jobs if not job.is_terminal]
            log.info("Job(s) still active: %s", ", ".join(active))

        self.progress.message("Jobs execution completed.")
        reported = await self.service.get_jobs_by_principal_and_ids(
            job_ids, principal, "COMPLETE"
        )
        jobs = with_unreported(reported, created_jobs)

        outcome = reduce_outcome(jobs, self.progress, self.app_base_url)
        return ExecutionReport(outcome=outcome, jobs=jobs, timed_out=timed_out)

    async def _wait(self) -> None:
        """Sleep for the check interval unless interrupted first."""
        try:
            await asyncio.wait_for(self.interrupt.wait(), timeout=self.check_interval)
        except TimeoutError:
            return
        raise ExecutionInterruptedError(
            "Job polling was interrupted while waiting for job statuses."
        )
