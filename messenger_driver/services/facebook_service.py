"""Facebook Graph API calls: Send API, typing indicator and user profiles."""

import time
from typing import Any

import httpx
import logfire

from messenger_driver.constants import (
    FACEBOOK_PROFILE_FIELDS,
    FACEBOOK_SEND_ENDPOINT,
    MAX_LOGGED_RESPONSE_CHARS,
)
from messenger_driver.exceptions import PlatformError
from messenger_driver.logging_config import redact_tokens
from messenger_driver.models.config_models import FacebookConfig
from messenger_driver.models.user_models import UserProfile
from messenger_driver.services.payload_builder import (
    build_typing_payload,
    with_access_token,
)


def graph_url(endpoint: str, config: FacebookConfig) -> str:
    """Absolute Graph API URL for an endpoint such as ``me/messages``."""
    base = config.api_base.rstrip("/")
    return f"{base}/{endpoint.lstrip('/')}"


def _platform_error_message(response: httpx.Response) -> str | None:
    try:
        data = response.json()
    except ValueError:
        return None
    error = data.get("error") if isinstance(data, dict) else None
    if isinstance(error, dict) and error.get("message") is not None:
        return str(error["message"])
    return None


def raise_for_platform_error(response: httpx.Response) -> None:
    """Raise PlatformError for any non-200 Graph API response.

    No status is treated specially: rate limiting (429) fails the same way
    as any other error and retry policy is left to the caller.
    """
    if response.status_code == 200:
        return
    platform_message = _platform_error_message(response)
    detail = platform_message or response.text[:MAX_LOGGED_RESPONSE_CHARS]
    raise PlatformError(
        f"Error sending payload: {detail}",
        status_code=response.status_code,
        platform_message=platform_message,
    )


async def _post(
    endpoint: str, payload: dict[str, Any], config: FacebookConfig
) -> httpx.Response:
    async with httpx.AsyncClient(timeout=config.timeout_seconds) as client:
        return await client.post(graph_url(endpoint, config), json=payload)


async def send_payload(
    payload: dict[str, Any], config: FacebookConfig
) -> httpx.Response:
    """
    Post a built Send API payload to ``/me/messages``.

    Args:
        payload: body produced by ``build_payload`` (carries the access token)
        config: Graph API base URL and timeout

    Returns:
        The Graph API response

    Raises:
        PlatformError: Facebook answered with a non-200 status
        httpx.RequestError: the request could not be sent
    """
    start_time = time.time()
    recipient_id = payload.get("recipient", {}).get("id")

    logfire.info(
        "Sending Facebook message",
        recipient_id=recipient_id,
        payload=redact_tokens(payload),
    )

    try:
        response = await _post(FACEBOOK_SEND_ENDPOINT, payload, config)
    except httpx.RequestError as e:
        logfire.error(
            "Facebook API request error",
            recipient_id=recipient_id,
            error=str(e),
            error_type=type(e).__name__,
            response_time_ms=(time.time() - start_time) * 1000,
        )
        raise

    elapsed = time.time() - start_time
    if response.status_code != 200:
        logfire.error(
            "Facebook message send failed",
            recipient_id=recipient_id,
            status_code=response.status_code,
            response_body=response.text[:MAX_LOGGED_RESPONSE_CHARS],
            response_time_ms=elapsed * 1000,
        )
        raise_for_platform_error(response)

    logfire.info(
        "Facebook message sent successfully",
        recipient_id=recipient_id,
        status_code=response.status_code,
        response_time_ms=elapsed * 1000,
    )
    return response


async def send_typing(recipient_id: str, config: FacebookConfig) -> httpx.Response | None:
    """
    Show the typing indicator to a user.

    Fire-and-forget: failures are logged and never raised, so callers can
    schedule this without awaiting its outcome.
    """
    try:
        response = await _post(
            FACEBOOK_SEND_ENDPOINT, build_typing_payload(recipient_id, config), config
        )
    except httpx.RequestError as e:
        logfire.warn(
            "Typing indicator request failed",
            recipient_id=recipient_id,
            error=str(e),
            error_type=type(e).__name__,
        )
        return None

    if response.status_code != 200:
        logfire.warn(
            "Typing indicator rejected",
            recipient_id=recipient_id,
            status_code=response.status_code,
        )
    return response


async def get_user_profile(sender_id: str, config: FacebookConfig) -> UserProfile:
    """
    Fetch a sender's public profile from the Graph API.

    Raises:
        PlatformError: Facebook answered with a non-200 status
    """
    params = {
        "fields": ",".join(FACEBOOK_PROFILE_FIELDS),
        "access_token": config.token,
    }
    logfire.info("Fetching user profile from Facebook", user_id=sender_id)

    async with httpx.AsyncClient(timeout=config.timeout_seconds) as client:
        response = await client.get(graph_url(sender_id, config), params=params)

    if response.status_code != 200:
        logfire.error(
            "Failed to fetch user profile",
            user_id=sender_id,
            status_code=response.status_code,
            response_body=response.text[:MAX_LOGGED_RESPONSE_CHARS],
        )
        raise_for_platform_error(response)

    data = response.json()
    logfire.info(
        "User profile fetched successfully",
        user_id=sender_id,
        has_name=bool(data.get("first_name")),
        locale=data.get("locale"),
    )
    return UserProfile(
        id=sender_id,
        first_name=data.get("first_name"),
        last_name=data.get("last_name"),
        profile_pic=data.get("profile_pic"),
        locale=data.get("locale"),
        timezone=data.get("timezone"),
        gender=data.get("gender"),
        is_payment_enabled=data.get("is_payment_enabled"),
        last_ad_referral=data.get("last_ad_referral"),
        info=data,
    )


async def send_request(
    endpoint: str,
    parameters: dict[str, Any],
    config: FacebookConfig,
) -> httpx.Response:
    """
    Low-level POST to any Graph API endpoint.

    The page token is injected unless ``parameters`` already carries an
    ``access_token``. The response is returned as-is.
    """
    logfire.info("Sending Graph API request", endpoint=endpoint)
    return await _post(endpoint, with_access_token(parameters, config), config)
