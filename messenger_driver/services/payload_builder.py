"""Outbound Send API payload construction.

Converts an abstract reply (plain text, Question, template or
OutgoingMessage) into the JSON body posted to ``/me/messages``. The
``message`` object ends up holding exactly one of ``text``,
``quick_replies``, ``attachment`` or a verbatim template body.
"""

import copy
from typing import Any, Mapping, Union

from messenger_driver.constants import TYPING_ON_ACTION
from messenger_driver.models.config_models import FacebookConfig
from messenger_driver.models.events import DriverEvent
from messenger_driver.models.messenger import IncomingMessage
from messenger_driver.models.outgoing import (
    SUPPORTED_ATTACHMENTS,
    OutgoingMessage,
    Question,
)
from messenger_driver.models.templates import TEMPLATES, Template

OutgoingReply = Union[str, Question, Template, OutgoingMessage]


def merge_recursive(
    base: Mapping[str, Any], additional: Mapping[str, Any]
) -> dict[str, Any]:
    """Deep-merge ``additional`` into a copy of ``base``.

    Precedence for keys present on both sides:
    - two mappings are merged recursively
    - two lists are concatenated, base items first
    - anything else takes the value from ``additional``
    """
    merged = copy.deepcopy(dict(base))
    for key, value in additional.items():
        current = merged.get(key)
        if isinstance(current, Mapping) and isinstance(value, Mapping):
            merged[key] = merge_recursive(current, value)
        elif isinstance(current, list) and isinstance(value, list):
            merged[key] = current + copy.deepcopy(value)
        else:
            merged[key] = copy.deepcopy(value)
    return merged


def convert_question(question: Question) -> dict[str, Any]:
    """Render a Question as a Messenger text message with quick replies."""
    replies = [
        {
            "content_type": "text",
            "title": button.text,
            "payload": button.value,
            "image_url": button.image_url,
            **button.additional,
        }
        for button in question.buttons
    ]
    return {"text": question.text, "quick_replies": replies}


def resolve_recipient(
    matching_message: IncomingMessage, driver_event: DriverEvent | None
) -> str:
    """Events are answered to their sender; messages to the message sender."""
    if driver_event is not None and driver_event.sender_id is not None:
        return driver_event.sender_id
    return matching_message.sender


def build_payload(
    message: OutgoingReply,
    matching_message: IncomingMessage,
    driver_event: DriverEvent | None,
    additional_parameters: Mapping[str, Any] | None,
    config: FacebookConfig,
) -> dict[str, Any]:
    """Build the Send API request body for a reply.

    Args:
        message: reply to send
        matching_message: message being answered
        driver_event: event captured for this request, if any
        additional_parameters: extra keys deep-merged into the payload
        config: credentials providing the page access token

    Returns:
        ``{"recipient": {"id"}, "message": {...}, "access_token"}``

    Raises:
        ValueError: ``additional_parameters`` replaces ``message`` with a
            non-mapping value
    """
    recipient = resolve_recipient(matching_message, driver_event)
    base_text = message if isinstance(message, str) else getattr(message, "text", None)

    parameters = merge_recursive(
        {
            "recipient": {"id": recipient},
            "message": {"text": base_text},
        },
        additional_parameters or {},
    )
    if not isinstance(parameters["message"], dict):
        raise ValueError("additional_parameters[\"message\"] must be a mapping")

    if isinstance(message, Question):
        parameters["message"] = convert_question(message)
    elif isinstance(message, TEMPLATES):
        parameters["message"] = message.to_dict()
    elif isinstance(message, OutgoingMessage):
        attachment = message.attachment
        if isinstance(attachment, SUPPORTED_ATTACHMENTS):
            parameters["message"].pop("text", None)
            parameters["message"]["attachment"] = {
                "type": type(attachment).__name__.lower(),
                "payload": {"url": attachment.url},
            }
        else:
            parameters["message"]["text"] = message.text

    parameters["access_token"] = config.token
    return parameters


def build_typing_payload(recipient_id: str, config: FacebookConfig) -> dict[str, Any]:
    return {
        "recipient": {"id": recipient_id},
        "access_token": config.token,
        "sender_action": TYPING_ON_ACTION,
    }


def with_access_token(
    parameters: Mapping[str, Any], config: FacebookConfig
) -> dict[str, Any]:
    """Inject the page token; keys already in ``parameters`` win."""
    return {"access_token": config.token, **parameters}
