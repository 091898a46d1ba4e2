"""Configuration for the action."""

from collections.abc import Sequence

from pydantic import BaseModel, Field, SecretStr

from automate_website_action.models.auth import Authentication


class ActionConfig(BaseModel):
    """Configuration for a single action run."""

    scenario_ids: Sequence[str] = Field(default_factory=list)
    username: str
    password: SecretStr
    api_base_url: str = "https://automate.website/api/"
    app_base_url: str = "https://automate.website"
    check_interval: float = Field(default=30, gt=0, description="Seconds")
    timeout: float = Field(default=300, gt=0, description="Seconds")

    def principal(self) -> Authentication:
        """Build the principal used for every remote call."""
        return Authentication(username=self.username, password=self.password)
