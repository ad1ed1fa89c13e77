"""Driver events: non-message platform notifications.

Each event wraps the original messaging item. The set of recognized
discriminator keys is fixed in ``EVENT_TYPES``; anything else becomes a
``GenericEvent`` named after the key.
"""

from typing import Any, ClassVar

from pydantic import BaseModel, ConfigDict


class DriverEvent(BaseModel):
    """Base class for every Messenger event."""

    model_config = ConfigDict(frozen=True)

    event_name: ClassVar[str] = ""

    payload: dict[str, Any]

    @property
    def name(self) -> str:
        return self.event_name

    @property
    def sender_id(self) -> str | None:
        sender = self.payload.get("sender")
        if isinstance(sender, dict) and sender.get("id") is not None:
            return str(sender["id"])
        return None


class MessagingReferrals(DriverEvent):
    """User arrived through an m.me link, ad or parametric code."""

    event_name: ClassVar[str] = "messaging_referrals"


class MessagingOptins(DriverEvent):
    """User opted in through the Send to Messenger plugin."""

    event_name: ClassVar[str] = "messaging_optins"


class MessagingDeliveries(DriverEvent):
    """Delivery receipt for messages sent by the page."""

    event_name: ClassVar[str] = "messaging_deliveries"


class MessagingReads(DriverEvent):
    """Read receipt for messages sent by the page."""

    event_name: ClassVar[str] = "messaging_reads"


class MessagingCheckoutUpdates(DriverEvent):
    """Shipping address update during a checkout."""

    event_name: ClassVar[str] = "messaging_checkout_updates"


class GenericEvent(DriverEvent):
    """Any event key the driver does not recognize."""

    event_key: str

    @property
    def name(self) -> str:
        return self.event_key


EVENT_TYPES: dict[str, type[DriverEvent]] = {
    "referral": MessagingReferrals,
    "optin": MessagingOptins,
    "delivery": MessagingDeliveries,
    "read": MessagingReads,
    "checkout_update": MessagingCheckoutUpdates,
}
