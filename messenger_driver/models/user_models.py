"""Pydantic models for Messenger user profiles."""

from typing import Any, Optional

from pydantic import BaseModel, Field


class UserProfile(BaseModel):
    """User info from the Graph API profile endpoint."""

    id: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    profile_pic: Optional[str] = None
    locale: Optional[str] = None
    timezone: Optional[float] = None
    gender: Optional[str] = None
    is_payment_enabled: Optional[bool] = None
    last_ad_referral: Optional[dict[str, Any]] = None
    info: dict[str, Any] = Field(
        default_factory=dict, description="Raw profile response"
    )

    @property
    def full_name(self) -> str:
        return " ".join(p for p in (self.first_name, self.last_name) if p)
