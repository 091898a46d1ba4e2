"""Integration tests for the job-management HTTP client."""

from collections.abc import AsyncGenerator

import aiohttp
import pytest
from aioresponses import aioresponses as aioresponses_cls
from pydantic import SecretStr
from yarl import URL

from automate_website_action.config import ActionConfig
from automate_website_action.models.auth import Authentication
from automate_website_action.models.job import JobRequest, TestResults
from automate_website_action.service import (
    JobManagementRemoteService,
    JobServiceError,
)
from automate_website_action.testing.factories import JobRequestFactory
from automate_website_action.testing.payloads import created_job, job

API_BASE_URL = "http://automate.test/api/"
CREATE_URL = f"{API_BASE_URL}public/jobs"
QUERY_URL = f"{API_BASE_URL}public/jobs/query"


@pytest.fixture
def config() -> ActionConfig:
    """Create test configuration."""
    return ActionConfig(
        username="test-user",
        password=SecretStr("test-password"),
        api_base_url=API_BASE_URL,
    )


@pytest.fixture
def principal(config: ActionConfig) -> Authentication:
    """Create test principal."""
    return config.principal()


@pytest.fixture
async def service(
    config: ActionConfig, aioresponses: aioresponses_cls
) -> AsyncGenerator[JobManagementRemoteService, None]:
    """Create service client with managed session."""
    async with JobManagementRemoteService.from_config(config) as impl:
        yield impl


class TestCreateJobs:
    """Tests for create_jobs."""

    async def test_posts_job_requests(
        self,
        service: JobManagementRemoteService,
        principal: Authentication,
        aioresponses: aioresponses_cls,
    ) -> None:
        """Posts all requests in one call with basic auth."""
        aioresponses.post(
            CREATE_URL,
            status=201,
            payload=[
                created_job(job_id="job-1", scenario_id="s1"),
                created_job(job_id="job-2", scenario_id="s2"),
            ],
        )

        jobs = await service.create_jobs(
            [JobRequest(scenario_id="s1"), JobRequest(scenario_id="s2")],
            principal,
        )

        assert [j.id for j in jobs] == ["job-1", "job-2"]
        assert [j.status for j in jobs] == ["SCHEDULED", "SCHEDULED"]
        call = aioresponses.requests[("POST", URL(CREATE_URL))][0]
        assert call.kwargs["json"] == [
            {"scenarioId": "s1", "takeScreenshots": "ON_FAILURE"},
            {"scenarioId": "s2", "takeScreenshots": "ON_FAILURE"},
        ]
        assert call.kwargs["auth"] == aiohttp.BasicAuth("test-user", "test-password")

    async def test_accepts_200(
        self,
        service: JobManagementRemoteService,
        principal: Authentication,
        aioresponses: aioresponses_cls,
    ) -> None:
        """Accepts OK as well as Created."""
        aioresponses.post(CREATE_URL, status=200, payload=[created_job()])

        jobs = await service.create_jobs([JobRequestFactory.build()], principal)

        assert len(jobs) == 1

    async def test_raises_on_error_status(
        self,
        service: JobManagementRemoteService,
        principal: Authentication,
        aioresponses: aioresponses_cls,
    ) -> None:
        """Raises JobServiceError with status on rejection."""
        aioresponses.post(CREATE_URL, status=401, body="Bad credentials")

        with pytest.raises(JobServiceError, match="401 Bad credentials") as exc_info:
            await service.create_jobs([JobRequestFactory.build()], principal)

        assert exc_info.value.status == 401


class TestGetJobsByPrincipalAndIds:
    """Tests for get_jobs_by_principal_and_ids."""

    async def test_queries_brief_profile(
        self,
        service: JobManagementRemoteService,
        principal: Authentication,
        aioresponses: aioresponses_cls,
    ) -> None:
        """Sends ids and profile and parses brief jobs."""
        aioresponses.post(
            QUERY_URL,
            status=200,
            payload=[
                job(job_id="job-1", status="RUNNING", profile="BRIEF"),
                job(job_id="job-2", status="SUCCESS", profile="BRIEF"),
            ],
        )

        jobs = await service.get_jobs_by_principal_and_ids(
            ["job-1", "job-2"], principal, "BRIEF"
        )

        assert [(j.id, j.status, j.is_terminal) for j in jobs] == [
            ("job-1", "RUNNING", False),
            ("job-2", "SUCCESS", True),
        ]
        call = aioresponses.requests[("POST", URL(QUERY_URL))][0]
        assert call.kwargs["json"] == {"ids": ["job-1", "job-2"], "profile": "BRIEF"}
        assert call.kwargs["auth"] == aiohttp.BasicAuth("test-user", "test-password")

    async def test_queries_complete_profile(
        self,
        service: JobManagementRemoteService,
        principal: Authentication,
        aioresponses: aioresponses_cls,
    ) -> None:
        """Parses titles and test results from complete jobs."""
        aioresponses.post(
            QUERY_URL,
            status=200,
            payload=[
                job(job_id="job-1", title="Checkout", failed=True),
                job(job_id="job-2", title="Search", status="ERROR", failed=None),
            ],
        )

        jobs = await service.get_jobs_by_principal_and_ids(
            ["job-1", "job-2"], principal, "COMPLETE"
        )

        assert jobs[0].title == "Checkout"
        assert jobs[0].test_results == TestResults(failed=True)
        assert jobs[1].test_results is None

    async def test_raises_on_error_status(
        self,
        service: JobManagementRemoteService,
        principal: Authentication,
        aioresponses: aioresponses_cls,
    ) -> None:
        """Raises JobServiceError on server errors."""
        aioresponses.post(QUERY_URL, status=503, body="Unavailable")

        with pytest.raises(JobServiceError, match="503"):
            await service.get_jobs_by_principal_and_ids(["job-1"], principal, "BRIEF")
