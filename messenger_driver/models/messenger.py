"""Incoming Facebook Messenger models."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class WebhookEnvelope(BaseModel):
    """Decoded webhook body.

    Only the first entry is read; its ``messaging`` list holds the items
    the classifier works on.
    """

    object: Any = None
    entry: list[Any]

    @property
    def messaging(self) -> list[Any]:
        """Messaging items of the first entry (empty when absent)."""
        if not self.entry or not isinstance(self.entry[0], dict):
            return []
        items = self.entry[0].get("messaging")
        return items if isinstance(items, list) else []


class IncomingMessage(BaseModel):
    """Normalized chat message handed to the conversation handler."""

    model_config = ConfigDict(frozen=True)

    text: str = ""
    sender: str = ""
    recipient: str = ""
    payload: dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def placeholder(cls) -> "IncomingMessage":
        """Empty message used when an item carries no text or postback."""
        return cls(text="", sender="", recipient="")

    @property
    def is_placeholder(self) -> bool:
        return not (self.text or self.sender or self.recipient)


class ExtractedMessages(BaseModel):
    """Messages extracted from one webhook request."""

    messages: list[IncomingMessage]
    was_postback: bool = False


class Answer(BaseModel):
    """Conversation-level view of an incoming message.

    ``value`` holds the quick reply or postback payload when the user
    tapped a button, otherwise it is None.
    """

    text: str = ""
    value: Any = None
    is_interactive_reply: bool = False
    message: IncomingMessage | None = None
