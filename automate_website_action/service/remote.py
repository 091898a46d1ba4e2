"""HTTP client for the job-management service."""

import logging
from collections.abc import AsyncGenerator, Sequence
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import Any

import aiohttp
from pydantic import TypeAdapter

from automate_website_action.config import ActionConfig
from automate_website_action.models.auth import Authentication
from automate_website_action.models.job import Job, JobProfile, JobRequest
from automate_website_action.service.base import JobManagementService

log = logging.getLogger(__name__)

JOBS_ADAPTER: TypeAdapter[list[Job]] = TypeAdapter(list[Job])


class JobServiceError(RuntimeError):
    """Raised when the job-management service rejects a request."""

    def __init__(self, message: str, status: int):
        self.status = status
        super().__init__(message)


def basic_auth(principal: Authentication) -> aiohttp.BasicAuth:
    """Convert a principal to aiohttp basic auth."""
    return aiohttp.BasicAuth(
        principal.username, principal.password.get_secret_value()
    )


@dataclass(frozen=True, kw_only=True)
class JobManagementRemoteService(JobManagementService):
    """Job-management service reached over its public REST API."""

    session: aiohttp.ClientSession = field(repr=False)

    @classmethod
    @asynccontextmanager
    async def from_config(
        cls, config: ActionConfig
    ) -> AsyncGenerator["JobManagementRemoteService", None]:
        """Create service client with managed session lifecycle."""
        headers = {"Accept": "application/json"}
        async with aiohttp.ClientSession(
            base_url=config.api_base_url,
            headers=headers,
        ) as session:
            yield cls(session=session)

    async def create_jobs(
        self,
        jobs: Sequence[JobRequest],
        principal: Authentication,
    ) -> Sequence[Job]:
        """Create jobs in one batch request."""
        payload = [job.model_dump(mode="json", by_alias=True) for job in jobs]

        log.debug("Creating %d job(s) as %s", len(jobs), principal.username)
        data = await self._post("public/jobs", payload, principal, {200, 201})

        return JOBS_ADAPTER.validate_python(data)

    async def get_jobs_by_principal_and_ids(
        self,
        ids: Sequence[str],
        principal: Authentication,
        profile: JobProfile,
    ) -> Sequence[Job]:
        """Fetch jobs by identifier at the given detail level."""
        payload = {"ids": list(ids), "profile": profile}

        log.debug("Querying %d job(s) with profile=%s", len(ids), profile)
        data = await self._post("public/jobs/query", payload, principal, {200})

        return JOBS_ADAPTER.validate_python(data)

    async def _post(
        self,
        url: str,
        payload: Any,
        principal: Authentication,
        expected: set[int],
    ) -> Any:
        async with self.session.post(
            url, json=payload, auth=basic_auth(principal)
        ) as response:
            if response.status not in expected:
                text = await response.text()
                raise JobServiceError(
                    f"Request to {url} failed: {response.status} {text}",
                    status=response.status,
                )
            return await response.json()
