"""Messaging abstraction protocols for the Graph API calls.

The driver talks to Facebook through ``MessagingService`` so tests and
host applications can swap the transport without httpx mocking.
"""

from typing import Any, Protocol

import httpx

from messenger_driver.models.config_models import FacebookConfig
from messenger_driver.models.user_models import UserProfile


class MessagingService(Protocol):
    """Protocol for the outbound calls a driver needs."""

    async def send_payload(self, payload: dict[str, Any]) -> httpx.Response:
        """Post a Send API payload; raise PlatformError on non-200."""
        ...

    async def send_typing(self, recipient_id: str) -> httpx.Response | None:
        """Show the typing indicator; never raises on platform errors."""
        ...

    async def get_user_profile(self, user_id: str) -> UserProfile:
        """Fetch a user's profile; raise PlatformError on non-200."""
        ...

    async def send_request(
        self, endpoint: str, parameters: dict[str, Any]
    ) -> httpx.Response:
        """POST to an arbitrary Graph API endpoint."""
        ...


class FacebookMessagingService:
    """Facebook Graph API implementation of MessagingService.

    Wraps the facebook_service functions with the credentials of one page.

    Example:
        >>> service = FacebookMessagingService(FacebookConfig(token="..."))
        >>> await service.send_typing("user123")
    """

    def __init__(self, config: FacebookConfig):
        if not config.token:
            raise ValueError("page access token is required")
        self._config = config

    async def send_payload(self, payload: dict[str, Any]) -> httpx.Response:
        from messenger_driver.services.facebook_service import send_payload

        return await send_payload(payload, self._config)

    async def send_typing(self, recipient_id: str) -> httpx.Response | None:
        from messenger_driver.services.facebook_service import send_typing

        return await send_typing(recipient_id, self._config)

    async def get_user_profile(self, user_id: str) -> UserProfile:
        from messenger_driver.services.facebook_service import get_user_profile

        return await get_user_profile(user_id, self._config)

    async def send_request(
        self, endpoint: str, parameters: dict[str, Any]
    ) -> httpx.Response:
        from messenger_driver.services.facebook_service import send_request

        return await send_request(endpoint, parameters, self._config)


class MockMessagingService:
    """Mock implementation for testing.

    Records every call and answers with canned responses.

    Example:
        >>> service = MockMessagingService()
        >>> await service.send_payload({"recipient": {"id": "1"}})
        >>> service.sent_payloads
        [{'recipient': {'id': '1'}}]
    """

    def __init__(
        self,
        user_profile: UserProfile | None = None,
        error: Exception | None = None,
    ):
        """Initialize mock service.

        Args:
            user_profile: profile returned by get_user_profile
            error: exception raised by send_payload and get_user_profile
        """
        self._user_profile = user_profile
        self._error = error
        self.sent_payloads: list[dict[str, Any]] = []
        self.typing_calls: list[str] = []
        self.profile_calls: list[str] = []
        self.requests: list[tuple[str, dict[str, Any]]] = []

    async def send_payload(self, payload: dict[str, Any]) -> httpx.Response:
        self.sent_payloads.append(payload)
        if self._error is not None:
            raise self._error
        return httpx.Response(200, json={"message_id": "mid.mock"})

    async def send_typing(self, recipient_id: str) -> httpx.Response | None:
        self.typing_calls.append(recipient_id)
        return httpx.Response(200, json={"recipient_id": recipient_id})

    async def get_user_profile(self, user_id: str) -> UserProfile:
        self.profile_calls.append(user_id)
        if self._error is not None:
            raise self._error
        return self._user_profile or UserProfile(id=user_id)

    async def send_request(
        self, endpoint: str, parameters: dict[str, Any]
    ) -> httpx.Response:
        self.requests.append((endpoint, parameters))
        return httpx.Response(200, json={"success": True})


def get_messaging_service(config: FacebookConfig) -> FacebookMessagingService:
    """Factory returning the production MessagingService for a page."""
    return FacebookMessagingService(config=config)
