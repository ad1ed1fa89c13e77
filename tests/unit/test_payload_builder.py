"""Tests for Send API payload construction."""

import pytest

from messenger_driver.models.config_models import FacebookConfig
from messenger_driver.models.events import MessagingOptins, MessagingReads
from messenger_driver.models.messenger import IncomingMessage
from messenger_driver.models.outgoing import (
    Audio,
    Button,
    File,
    Image,
    Location,
    OutgoingMessage,
    Question,
    Video,
)
from messenger_driver.models.templates import ButtonTemplate, ElementButton
from messenger_driver.services.payload_builder import (
    build_payload,
    build_typing_payload,
    convert_question,
    merge_recursive,
    resolve_recipient,
    with_access_token,
)
from tests.factories import make_item


@pytest.fixture
def config():
    return FacebookConfig(token="page-token")


@pytest.fixture
def matching_message():
    return IncomingMessage(text="hi", sender="user-1", recipient="page-1")


class TestMergeRecursive:
    """Test merge_recursive() precedence rules."""

    def test_scalar_override(self):
        assert merge_recursive({"a": 1, "b": 2}, {"b": 3}) == {"a": 1, "b": 3}

    def test_nested_mappings_merge(self):
        merged = merge_recursive(
            {"message": {"text": "hi"}}, {"message": {"metadata": "m"}}
        )
        assert merged == {"message": {"text": "hi", "metadata": "m"}}

    def test_lists_concatenate(self):
        merged = merge_recursive({"tags": ["a"]}, {"tags": ["b", "c"]})
        assert merged == {"tags": ["a", "b", "c"]}

    def test_mapping_replaced_by_scalar(self):
        assert merge_recursive({"a": {"x": 1}}, {"a": "flat"}) == {"a": "flat"}

    def test_inputs_are_not_mutated(self):
        base = {"message": {"text": "hi"}, "tags": ["a"]}
        additional = {"message": {"extra": 1}, "tags": ["b"]}

        merge_recursive(base, additional)

        assert base == {"message": {"text": "hi"}, "tags": ["a"]}
        assert additional == {"message": {"extra": 1}, "tags": ["b"]}


class TestResolveRecipient:
    def test_uses_message_sender_without_event(self, matching_message):
        assert resolve_recipient(matching_message, None) == "user-1"

    def test_event_sender_wins(self, matching_message):
        event = MessagingOptins(payload=make_item(sender="event-user", optin={}))
        assert resolve_recipient(matching_message, event) == "event-user"


class TestBuildPayloadText:
    """Plain text replies."""

    def test_plain_text(self, matching_message, config):
        payload = build_payload("Hello!", matching_message, None, None, config)

        assert payload == {
            "recipient": {"id": "user-1"},
            "message": {"text": "Hello!"},
            "access_token": "page-token",
        }

    def test_additional_parameters_are_merged(self, matching_message, config):
        payload = build_payload(
            "Hello!",
            matching_message,
            None,
            {"messaging_type": "RESPONSE", "message": {"metadata": "abc"}},
            config,
        )

        assert payload["messaging_type"] == "RESPONSE"
        assert payload["message"] == {"text": "Hello!", "metadata": "abc"}

    def test_event_sender_is_recipient(self, matching_message, config):
        event = MessagingReads(payload=make_item(sender="reader", read={"watermark": 1}))

        payload = build_payload("Thanks", matching_message, event, None, config)

        assert payload["recipient"] == {"id": "reader"}


class TestBuildPayloadQuestion:
    """Questions become quick replies."""

    def test_question_with_one_button(self, matching_message, config):
        question = Question(text="Continue?", buttons=[Button(text="Yes", value="y")])

        payload = build_payload(question, matching_message, None, None, config)

        assert payload["message"] == {
            "text": "Continue?",
            "quick_replies": [
                {
                    "content_type": "text",
                    "title": "Yes",
                    "payload": "y",
                    "image_url": None,
                }
            ],
        }
        assert payload["access_token"] == "page-token"

    def test_button_additional_overrides_defaults(self):
        question = Question(text="Where?").add_button(
            Button(
                text="Send location",
                value="loc",
                image_url="https://example.com/pin.png",
                additional={"content_type": "location"},
            )
        )

        converted = convert_question(question)

        assert converted["quick_replies"][0] == {
            "content_type": "location",
            "title": "Send location",
            "payload": "loc",
            "image_url": "https://example.com/pin.png",
        }

    def test_question_replaces_additional_message_keys(self, matching_message, config):
        question = Question(text="Pick", buttons=[Button(text="A", value="a")])

        payload = build_payload(
            question, matching_message, None, {"message": {"metadata": "x"}}, config
        )

        assert set(payload["message"]) == {"text", "quick_replies"}


class TestBuildPayloadTemplate:
    def test_template_is_sent_verbatim(self, matching_message, config):
        template = ButtonTemplate(
            text="What next?",
            buttons=[ElementButton(title="Docs", url="https://example.com")],
        )

        payload = build_payload(template, matching_message, None, None, config)

        assert payload["message"] == template.to_dict()
        assert "text" not in payload["message"]


class TestBuildPayloadAttachment:
    """OutgoingMessage with and without attachments."""

    @pytest.mark.parametrize(
        "attachment_type,kind",
        [(Image, "image"), (Video, "video"), (Audio, "audio"), (File, "file")],
    )
    def test_supported_attachment(self, matching_message, config, attachment_type, kind):
        message = OutgoingMessage(text="ignored").with_attachment(
            attachment_type(url="https://example.com/media")
        )

        payload = build_payload(message, matching_message, None, None, config)

        assert payload["message"] == {
            "attachment": {
                "type": kind,
                "payload": {"url": "https://example.com/media"},
            }
        }

    def test_unsupported_attachment_falls_back_to_text(self, matching_message, config):
        message = OutgoingMessage(
            text="Here I am", attachment=Location(latitude=1.0, longitude=2.0)
        )

        payload = build_payload(message, matching_message, None, None, config)

        assert payload["message"] == {"text": "Here I am"}

    def test_message_without_attachment_sends_text(self, matching_message, config):
        payload = build_payload(
            OutgoingMessage(text="Only text"), matching_message, None, None, config
        )

        assert payload["message"] == {"text": "Only text"}

    def test_scalar_message_override_is_rejected(self, matching_message, config):
        message = OutgoingMessage(text="pic").with_attachment(
            Image(url="https://example.com/pic.png")
        )

        with pytest.raises(ValueError, match="must be a mapping"):
            build_payload(
                message, matching_message, None, {"message": "flat"}, config
            )

    def test_scalar_message_override_rejected_for_text(self, matching_message, config):
        with pytest.raises(ValueError):
            build_payload("hi", matching_message, None, {"message": 1}, config)


class TestHelpers:
    def test_typing_payload(self, config):
        assert build_typing_payload("user-9", config) == {
            "recipient": {"id": "user-9"},
            "access_token": "page-token",
            "sender_action": "typing_on",
        }

    def test_with_access_token_injects_token(self, config):
        assert with_access_token({"fields": "x"}, config) == {
            "access_token": "page-token",
            "fields": "x",
        }

    def test_with_access_token_keeps_caller_token(self, config):
        params = with_access_token({"access_token": "other"}, config)
        assert params == {"access_token": "other"}
