"""Request-scoped Facebook Messenger driver.

A ``FacebookDriver`` is built once per webhook delivery from the raw body,
its headers and the page credentials. It exposes the classifier and the
payload builder as one object and owns the per-request state: the captured
driver event and the postback flag.

Example:
    >>> driver = FacebookDriver.from_request(body, headers, config)
    >>> if driver.matches_request():
    ...     for message in driver.get_messages():
    ...         payload = driver.build_service_payload("Hi!", message)
    ...         await driver.send_payload(payload)
"""

from typing import Any, Mapping

import httpx

from messenger_driver.models.config_models import FacebookConfig
from messenger_driver.models.events import DriverEvent
from messenger_driver.models.messenger import Answer, IncomingMessage, WebhookEnvelope
from messenger_driver.models.user_models import UserProfile
from messenger_driver.services import event_classifier
from messenger_driver.services.messaging_protocol import (
    MessagingService,
    get_messaging_service,
)
from messenger_driver.services.payload_builder import OutgoingReply, build_payload
from messenger_driver.services.signature import get_signature_header, validate_signature


class FacebookDriver:
    """Facebook Messenger driver for a single webhook request."""

    DRIVER_NAME = "Facebook"

    def __init__(
        self,
        envelope: WebhookEnvelope,
        raw_body: bytes,
        signature: str,
        config: FacebookConfig,
        messaging_service: MessagingService | None = None,
    ):
        self.envelope = envelope
        self.content = raw_body
        self.signature = signature
        self.config = config
        self._messaging_service = messaging_service
        self._driver_event: DriverEvent | None = None
        self._is_postback = False

    @classmethod
    def from_request(
        cls,
        raw_body: bytes,
        headers: Mapping[str, str],
        config: FacebookConfig,
        messaging_service: MessagingService | None = None,
    ) -> "FacebookDriver":
        """Parse a webhook delivery.

        Raises:
            MalformedPayloadError: the body is not a webhook envelope
        """
        return cls(
            envelope=event_classifier.parse_envelope(raw_body),
            raw_body=raw_body,
            signature=get_signature_header(headers),
            config=config,
            messaging_service=messaging_service,
        )

    @property
    def messaging_service(self) -> MessagingService:
        if self._messaging_service is None:
            self._messaging_service = get_messaging_service(self.config)
        return self._messaging_service

    @property
    def driver_event(self) -> DriverEvent | None:
        return self._driver_event

    # ------------------------------------------------------------------
    # Inbound
    # ------------------------------------------------------------------

    def has_valid_signature(self) -> bool:
        if not self.config.app_secret:
            return True
        return validate_signature(self.content, self.signature, self.config.app_secret)

    def matches_request(self) -> bool:
        return event_classifier.is_matching_request(
            self.envelope, self.content, self.signature, self.config
        )

    def has_matching_event(self) -> DriverEvent | None:
        """Capture the request's event, if any, for reply addressing."""
        event = event_classifier.extract_event(self.envelope)
        if event is not None:
            self._driver_event = event
        return event

    def get_messages(self) -> list[IncomingMessage]:
        extracted = event_classifier.extract_messages(self.envelope)
        self._is_postback = extracted.was_postback
        return extracted.messages

    def is_postback(self) -> bool:
        """True once get_messages() has seen a postback in this request."""
        return self._is_postback

    def is_bot(self) -> bool:
        # Messenger never echoes the page's own replies to this webhook
        return False

    def is_configured(self) -> bool:
        return bool(self.config.token)

    def get_conversation_answer(self, message: IncomingMessage) -> Answer:
        return event_classifier.get_conversation_answer(message)

    # ------------------------------------------------------------------
    # Outbound
    # ------------------------------------------------------------------

    def build_service_payload(
        self,
        message: OutgoingReply,
        matching_message: IncomingMessage,
        additional_parameters: Mapping[str, Any] | None = None,
    ) -> dict[str, Any]:
        return build_payload(
            message,
            matching_message,
            self._driver_event,
            additional_parameters,
            self.config,
        )

    async def send_payload(self, payload: dict[str, Any]) -> httpx.Response:
        return await self.messaging_service.send_payload(payload)

    async def reply(
        self,
        message: OutgoingReply,
        matching_message: IncomingMessage,
        additional_parameters: Mapping[str, Any] | None = None,
    ) -> httpx.Response:
        """Build and send a reply in one step."""
        payload = self.build_service_payload(
            message, matching_message, additional_parameters
        )
        return await self.send_payload(payload)

    async def types(self, matching_message: IncomingMessage) -> httpx.Response | None:
        """Show the typing indicator to the sender of ``matching_message``."""
        return await self.messaging_service.send_typing(matching_message.sender)

    async def get_user(self, matching_message: IncomingMessage) -> UserProfile:
        return await self.messaging_service.get_user_profile(matching_message.sender)

    async def send_request(
        self,
        endpoint: str,
        parameters: dict[str, Any],
    ) -> httpx.Response:
        """Low-level POST to ``<graph api>/<endpoint>`` with the page token."""
        return await self.messaging_service.send_request(endpoint, parameters)
