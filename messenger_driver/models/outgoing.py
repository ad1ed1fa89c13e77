"""Outgoing message models: questions, attachments and plain messages."""

from typing import Any, Optional

from pydantic import BaseModel, Field


class Button(BaseModel):
    """A question button, rendered as a Messenger quick reply."""

    text: str
    value: Optional[str] = None
    image_url: Optional[str] = None
    additional: dict[str, Any] = Field(
        default_factory=dict,
        description="Extra quick reply keys merged over the defaults",
    )


class Question(BaseModel):
    """Text with a list of buttons the user can tap."""

    text: str
    buttons: list[Button] = Field(default_factory=list)

    def add_button(self, button: Button) -> "Question":
        self.buttons.append(button)
        return self

    def add_buttons(self, buttons: list[Button]) -> "Question":
        self.buttons.extend(buttons)
        return self


class Attachment(BaseModel):
    """Base class for anything attached to an outgoing message."""

    url: Optional[str] = None


class Image(Attachment):
    pass


class Video(Attachment):
    pass


class Audio(Attachment):
    pass


class File(Attachment):
    pass


class Location(Attachment):
    """Shared location. Messenger cannot send it as a media attachment."""

    latitude: float
    longitude: float


# Media attachments the Send API accepts as ``{type, payload: {url}}``
SUPPORTED_ATTACHMENTS: tuple[type[Attachment], ...] = (Video, Audio, Image, File)


class OutgoingMessage(BaseModel):
    """Plain text reply, optionally carrying an attachment."""

    text: str = ""
    attachment: Optional[Attachment] = None

    def with_attachment(self, attachment: Attachment) -> "OutgoingMessage":
        self.attachment = attachment
        return self
