"""Credentials passed with every call to the job-management service."""

from pydantic import SecretStr

from automate_website_action.models.base import Model


class Authentication(Model):
    """Username/password principal."""

    username: str
    password: SecretStr
