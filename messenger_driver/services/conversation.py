"""Conversation handler seam.

The webhook hands every incoming message and event to a
``ConversationHandler``. Choosing replies is the host application's job;
install a handler on ``app.state.conversation_handler``.
"""

from typing import TYPE_CHECKING, Protocol

import logfire

from messenger_driver.models.events import DriverEvent
from messenger_driver.models.messenger import IncomingMessage
from messenger_driver.services.payload_builder import OutgoingReply

if TYPE_CHECKING:
    from messenger_driver.services.facebook_driver import FacebookDriver


class ConversationHandler(Protocol):
    """Protocol for the component that answers Messenger users."""

    async def respond(
        self, message: IncomingMessage, driver: "FacebookDriver"
    ) -> OutgoingReply | None:
        """Return a reply for ``message``, or None to stay silent."""
        ...

    async def on_event(self, event: DriverEvent, driver: "FacebookDriver") -> None:
        """React to a non-message event (read, delivery, optin, ...)."""
        ...


class NullConversationHandler:
    """Handler used until the host installs its own: logs and never replies."""

    async def respond(
        self, message: IncomingMessage, driver: "FacebookDriver"
    ) -> OutgoingReply | None:
        logfire.info(
            "No conversation handler configured, message dropped",
            sender_id=message.sender,
        )
        return None

    async def on_event(self, event: DriverEvent, driver: "FacebookDriver") -> None:
        logfire.info(
            "No conversation handler configured, event dropped",
            event_name=event.name,
        )
