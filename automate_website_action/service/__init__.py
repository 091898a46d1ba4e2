"""Job-management service clients."""

from automate_website_action.service.base import JobManagementService
from automate_website_action.service.remote import (
    JobManagementRemoteService,
    JobServiceError,
)

__all__ = ["JobManagementRemoteService", "JobManagementService", "JobServiceError"]
