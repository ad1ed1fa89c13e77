"""Pydantic models for driver credentials."""

from pydantic import BaseModel, ConfigDict, Field

from messenger_driver.constants import (
    FACEBOOK_API_TIMEOUT_SECONDS,
    FACEBOOK_GRAPH_API_URL,
)


class FacebookConfig(BaseModel):
    """Read-only Facebook credentials supplied with each request."""

    model_config = ConfigDict(frozen=True)

    token: str = Field(default="", description="Page access token")
    app_secret: str | None = Field(
        default=None, description="App secret used to sign webhook bodies"
    )
    verification: str | None = Field(
        default=None, description="Token expected during webhook subscription"
    )
    api_base: str = Field(
        default=FACEBOOK_GRAPH_API_URL,
        description="Base URL of the Graph API, without a trailing slash",
    )
    timeout_seconds: float = Field(
        default=FACEBOOK_API_TIMEOUT_SECONDS,
        description="Timeout for Graph API calls (seconds)",
    )
