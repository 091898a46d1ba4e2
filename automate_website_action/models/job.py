"""Models for jobs created on and read back from the job-management service."""

from typing import Literal, TypeAlias

from automate_website_action.models.base import Model

TakeScreenshots: TypeAlias = Literal["ON_FAILURE", "ALWAYS", "NEVER"]

JobProfile: TypeAlias = Literal["BRIEF", "COMPLETE"]

# Any status outside this set is terminal. The service may add terminal
# statuses without notice, so they are not enumerated.
ACTIVE_STATUSES: frozenset[str] = frozenset(["SCHEDULED", "RUNNING"])


class TestResults(Model):
    """Summary of a finished job's test execution."""

    __test__ = False

    failed: bool


class JobRequest(Model):
    """Request to execute one scenario."""

    scenario_id: str
    take_screenshots: TakeScreenshots = "ON_FAILURE"


class Job(Model):
    """A job as reported by the job-management service.

    BRIEF queries only guarantee ``id`` and ``status``; ``title`` and
    ``test_results`` are filled in by COMPLETE queries.
    """

    id: str
    status: str
    scenario_id: str | None = None
    take_screenshots: TakeScreenshots | None = None
    title: str | None = None
    test_results: TestResults | None = None

    @property
    def is_terminal(self) -> bool:
        """Whether the job has left the SCHEDULED/RUNNING states."""
        return self.status not in ACTIVE_STATUSES
