"""Messenger structured message templates.

Each template renders the exact ``message`` object the Send API expects
through ``to_dict()``; the payload builder sends it verbatim.
"""

import abc
from typing import Any, Literal, Optional

from pydantic import BaseModel, Field


def _template_message(payload: dict[str, Any]) -> dict[str, Any]:
    return {"attachment": {"type": "template", "payload": payload}}


def _drop_none(data: dict[str, Any]) -> dict[str, Any]:
    return {key: value for key, value in data.items() if value is not None}


class ElementButton(BaseModel):
    """Button attached to a template or element."""

    title: str
    type: Literal[
        "web_url", "postback", "phone_number", "account_link", "element_share"
    ] = "web_url"
    url: Optional[str] = None
    payload: Optional[str] = None
    webview_height_ratio: Optional[Literal["compact", "tall", "full"]] = None
    messenger_extensions: Optional[bool] = None
    fallback_url: Optional[str] = None
    webview_share_button: Optional[Literal["hide"]] = None

    def to_dict(self) -> dict[str, Any]:
        button: dict[str, Any] = {"type": self.type, "title": self.title}
        if self.type == "web_url":
            button["url"] = self.url
        elif self.type in ("postback", "phone_number"):
            button["payload"] = self.payload
        button.update(
            _drop_none(
                {
                    "webview_height_ratio": self.webview_height_ratio,
                    "messenger_extensions": self.messenger_extensions,
                    "fallback_url": self.fallback_url,
                    "webview_share_button": self.webview_share_button,
                }
            )
        )
        return button


class Element(BaseModel):
    """Card in a generic or list template."""

    title: str
    subtitle: Optional[str] = None
    image_url: Optional[str] = None
    item_url: Optional[str] = None
    buttons: list[ElementButton] = Field(default_factory=list)
    default_action: Optional[dict[str, Any]] = None

    def to_dict(self) -> dict[str, Any]:
        element = {
            "title": self.title,
            "image_url": self.image_url,
            "item_url": self.item_url,
            "subtitle": self.subtitle,
            "buttons": [button.to_dict() for button in self.buttons],
        }
        if self.default_action is not None:
            element["default_action"] = self.default_action
        return element


class Template(BaseModel, abc.ABC):
    """Base class for the four recognized templates."""

    @abc.abstractmethod
    def to_dict(self) -> dict[str, Any]:
        """Render the ``{"attachment": {"type": "template", ...}}`` message."""


class ButtonTemplate(Template):
    text: str
    buttons: list[ElementButton] = Field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return _template_message(
            {
                "template_type": "button",
                "text": self.text,
                "buttons": [button.to_dict() for button in self.buttons],
            }
        )


class GenericTemplate(Template):
    elements: list[Element] = Field(default_factory=list)
    image_aspect_ratio: Literal["horizontal", "square"] = "horizontal"

    def to_dict(self) -> dict[str, Any]:
        return _template_message(
            {
                "template_type": "generic",
                "image_aspect_ratio": self.image_aspect_ratio,
                "elements": [element.to_dict() for element in self.elements],
            }
        )


class ListTemplate(Template):
    elements: list[Element] = Field(default_factory=list)
    top_element_style: Literal["large", "compact"] = "large"
    global_button: Optional[ElementButton] = None

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "template_type": "list",
            "top_element_style": self.top_element_style,
            "elements": [element.to_dict() for element in self.elements],
        }
        if self.global_button is not None:
            payload["buttons"] = [self.global_button.to_dict()]
        return _template_message(payload)


class ReceiptElement(BaseModel):
    title: str
    price: float
    subtitle: Optional[str] = None
    quantity: Optional[int] = None
    currency: Optional[str] = None
    image_url: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        return _drop_none(self.model_dump())


class ReceiptAddress(BaseModel):
    street_1: str
    city: str
    postal_code: str
    state: str
    country: str
    street_2: str = ""

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump()


class ReceiptSummary(BaseModel):
    total_cost: float
    subtotal: Optional[float] = None
    shipping_cost: Optional[float] = None
    total_tax: Optional[float] = None

    def to_dict(self) -> dict[str, Any]:
        return _drop_none(self.model_dump())


class ReceiptAdjustment(BaseModel):
    name: str
    amount: float

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump()


class ReceiptTemplate(Template):
    recipient_name: str
    order_number: str
    currency: str
    payment_method: str
    summary: ReceiptSummary
    merchant_name: Optional[str] = None
    order_url: Optional[str] = None
    timestamp: Optional[str] = None
    elements: list[ReceiptElement] = Field(default_factory=list)
    address: Optional[ReceiptAddress] = None
    adjustments: list[ReceiptAdjustment] = Field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        payload = _drop_none(
            {
                "template_type": "receipt",
                "recipient_name": self.recipient_name,
                "merchant_name": self.merchant_name,
                "order_number": self.order_number,
                "currency": self.currency,
                "payment_method": self.payment_method,
                "order_url": self.order_url,
                "timestamp": self.timestamp,
                "address": self.address.to_dict() if self.address else None,
                "summary": self.summary.to_dict(),
            }
        )
        payload["elements"] = [element.to_dict() for element in self.elements]
        payload["adjustments"] = [a.to_dict() for a in self.adjustments]
        return _template_message(payload)


TEMPLATES: tuple[type[Template], ...] = (
    ButtonTemplate,
    GenericTemplate,
    ListTemplate,
    ReceiptTemplate,
)
