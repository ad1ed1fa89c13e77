"""Facebook Messenger driver: webhook classification and Send API payloads."""

from messenger_driver.exceptions import (
    MalformedPayloadError,
    MessengerDriverError,
    PlatformError,
)
from messenger_driver.services.facebook_driver import FacebookDriver

__all__ = [
    "FacebookDriver",
    "MalformedPayloadError",
    "MessengerDriverError",
    "PlatformError",
]
