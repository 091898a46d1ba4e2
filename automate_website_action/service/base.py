"""Abstract base class for job-management service clients."""

from abc import ABC, abstractmethod
from collections.abc import Sequence

from automate_website_action.models.auth import Authentication
from automate_website_action.models.job import Job, JobProfile, JobRequest


class JobManagementService(ABC):
    """Client for a service that executes scenarios as jobs."""

    @abstractmethod
    async def create_jobs(
        self,
        jobs: Sequence[JobRequest],
        principal: Authentication,
    ) -> Sequence[Job]:
        """Create all jobs in a single call.

        Args:
            jobs: One request per scenario to execute
            principal: Credentials of the job owner

        Returns:
            The created jobs, with identifiers assigned by the service

        """

    @abstractmethod
    async def get_jobs_by_principal_and_ids(
        self,
        ids: Sequence[str],
        principal: Authentication,
        profile: JobProfile,
    ) -> Sequence[Job]:
        """Fetch jobs owned by the principal.

        Args:
            ids: Identifiers of the jobs to fetch
            principal: Credentials of the job owner
            profile: BRIEF for id and status only, COMPLETE for title and
                test results as well

        Returns:
            The jobs found for the given identifiers

        """
