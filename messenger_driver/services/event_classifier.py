"""Inbound webhook classification.

Turns a decoded Messenger webhook into either chat messages (text or
postback) or a single driver event. Every function here is total over
well-formed but unexpected shapes: unknown keys become ``GenericEvent``
and unusable items become placeholder messages.
"""

import json
from typing import Any, Mapping

import logfire
from pydantic import ValidationError

from messenger_driver.constants import CORE_MESSAGING_KEYS
from messenger_driver.exceptions import MalformedPayloadError
from messenger_driver.models.config_models import FacebookConfig
from messenger_driver.models.events import EVENT_TYPES, DriverEvent, GenericEvent
from messenger_driver.models.messenger import (
    Answer,
    ExtractedMessages,
    IncomingMessage,
    WebhookEnvelope,
)
from messenger_driver.services.signature import validate_signature


def parse_envelope(raw_body: bytes | str) -> WebhookEnvelope:
    """Decode a webhook body.

    Raises:
        MalformedPayloadError: body is not JSON, not an object, or has
            no ``entry`` list
    """
    try:
        data = json.loads(raw_body)
    except (TypeError, ValueError) as e:
        raise MalformedPayloadError(f"Webhook body is not valid JSON: {e}") from e

    if not isinstance(data, dict):
        raise MalformedPayloadError("Webhook body must be a JSON object")

    try:
        return WebhookEnvelope.model_validate(data)
    except ValidationError as e:
        raise MalformedPayloadError("Webhook body has no entry list") from e


def _nested(item: Any, outer: str, inner: str) -> Any:
    if not isinstance(item, dict):
        return None
    section = item.get(outer)
    if not isinstance(section, dict):
        return None
    return section.get(inner)


def _participant_id(item: dict[str, Any], key: str) -> str:
    value = _nested(item, key, "id")
    return "" if value is None else str(value)


def has_chat_message(item: Any) -> bool:
    """True when the item carries a non-empty text or postback payload."""
    return bool(_nested(item, "message", "text")) or bool(
        _nested(item, "postback", "payload")
    )


def is_matching_request(
    envelope: WebhookEnvelope,
    raw_body: bytes,
    signature: str,
    config: FacebookConfig,
) -> bool:
    """Decide whether this request holds chat messages for the driver.

    A configured ``app_secret`` makes the signature mandatory; a mismatch
    makes the request non-matching rather than raising.
    """
    has_messages = any(has_chat_message(item) for item in envelope.messaging)
    if not has_messages:
        return False

    if not config.app_secret:
        return True

    valid = validate_signature(raw_body, signature, config.app_secret)
    if not valid:
        logfire.warn("Webhook signature mismatch", has_signature=bool(signature))
    return valid


def event_key(item: Any) -> str | None:
    """Return the first key that is not part of every messaging item."""
    if not isinstance(item, dict):
        return None
    for key in item:
        if key not in CORE_MESSAGING_KEYS:
            return key
    return None


def classify_event(item: dict[str, Any]) -> DriverEvent | None:
    """Map a messaging item to its driver event, or None for chat items."""
    key = event_key(item)
    if key is None:
        return None
    event_type = EVENT_TYPES.get(key)
    if event_type is None:
        return GenericEvent(payload=item, event_key=key)
    return event_type(payload=item)


def extract_event(envelope: WebhookEnvelope) -> DriverEvent | None:
    """Return the event of the first non-chat item (first match wins)."""
    for item in envelope.messaging:
        event = classify_event(item) if isinstance(item, dict) else None
        if event is not None:
            logfire.info("Messenger event received", event_name=event.name)
            return event
    return None


def extract_messages(envelope: WebhookEnvelope) -> ExtractedMessages:
    """Build one IncomingMessage per messaging item.

    Items without text or postback yield a placeholder so positions are
    preserved. The result always holds at least one message.
    """
    messages: list[IncomingMessage] = []
    was_postback = False

    for item in envelope.messaging:
        text = _nested(item, "message", "text")
        postback = _nested(item, "postback", "payload")

        if text is not None:
            messages.append(
                IncomingMessage(
                    text=str(text),
                    sender=_participant_id(item, "sender"),
                    recipient=_participant_id(item, "recipient"),
                    payload=item,
                )
            )
        elif postback is not None:
            was_postback = True
            messages.append(
                IncomingMessage(
                    text=str(postback),
                    sender=_participant_id(item, "sender"),
                    recipient=_participant_id(item, "recipient"),
                    payload=item,
                )
            )
        else:
            messages.append(IncomingMessage.placeholder())

    if not messages:
        messages.append(IncomingMessage.placeholder())

    return ExtractedMessages(messages=messages, was_postback=was_postback)


def _query_value(query: Mapping[str, str], name: str) -> str | None:
    # Facebook sends ``hub.mode``; some frameworks normalize it to ``hub_mode``
    value = query.get(f"hub.{name}")
    if value is None:
        value = query.get(f"hub_{name}")
    return value


def verify_webhook_subscription(
    query: Mapping[str, str],
    config: FacebookConfig,
) -> str | None:
    """Return the challenge to echo back, or None when verification fails."""
    mode = _query_value(query, "mode")
    token = _query_value(query, "verify_token")

    if mode == "subscribe" and config.verification and token == config.verification:
        return _query_value(query, "challenge")
    return None


def get_conversation_answer(message: IncomingMessage) -> Answer:
    """Turn an incoming message into an Answer for a waiting conversation.

    Quick replies and postbacks are interactive replies whose value is the
    button payload; a postback answer reads the button title as its text.
    """
    quick_reply = _nested(message.payload, "message", "quick_reply")
    if isinstance(quick_reply, dict):
        return Answer(
            text=message.text,
            value=quick_reply.get("payload"),
            is_interactive_reply=True,
            message=message,
        )

    if _nested(message.payload, "postback", "payload") is not None:
        return Answer(
            text=str(_nested(message.payload, "postback", "title") or ""),
            value=_nested(message.payload, "postback", "payload"),
            is_interactive_reply=True,
            message=message,
        )

    return Answer(text=message.text, message=message)
