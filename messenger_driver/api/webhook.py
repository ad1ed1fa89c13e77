"""Facebook webhook endpoints.

GET answers the subscription handshake. POST classifies a delivery with a
request-scoped ``FacebookDriver`` and hands messages and events to the
configured conversation handler in background tasks, so Facebook gets
its acknowledgement without waiting for replies.
"""

import logging

from fastapi import APIRouter, BackgroundTasks, Request, Response
from fastapi.responses import JSONResponse, PlainTextResponse

from messenger_driver.config import get_settings
from messenger_driver.exceptions import MalformedPayloadError, PlatformError
from messenger_driver.models.events import DriverEvent
from messenger_driver.models.messenger import IncomingMessage
from messenger_driver.services.conversation import (
    ConversationHandler,
    NullConversationHandler,
)
from messenger_driver.services.event_classifier import verify_webhook_subscription
from messenger_driver.services.facebook_driver import FacebookDriver

logger = logging.getLogger(__name__)
router = APIRouter()


def get_conversation_handler(request: Request) -> ConversationHandler:
    handler = getattr(request.app.state, "conversation_handler", None)
    return handler or NullConversationHandler()


@router.get("")
async def verify_webhook(request: Request):
    """Facebook webhook verification endpoint."""
    settings = get_settings()
    challenge = verify_webhook_subscription(
        request.query_params, settings.facebook_config()
    )

    if challenge is not None:
        logger.info("Webhook verified successfully")
        return PlainTextResponse(challenge)

    logger.warning("Webhook verification failed")
    return Response(status_code=200)


@router.post("")
async def handle_webhook(request: Request, background_tasks: BackgroundTasks):
    """Handle incoming Facebook Messenger webhook deliveries."""
    settings = get_settings()
    body = await request.body()

    try:
        driver = FacebookDriver.from_request(
            body, request.headers, settings.facebook_config()
        )
    except MalformedPayloadError as e:
        logger.warning("Rejected malformed webhook payload: %s", e)
        return JSONResponse(status_code=400, content={"status": "rejected"})

    handler = get_conversation_handler(request)
    status = "ignored"

    event = driver.has_matching_event()
    if event is not None and driver.has_valid_signature():
        background_tasks.add_task(process_event, driver, event, handler)
        status = "ok"

    if driver.matches_request():
        for message in driver.get_messages():
            if message.is_placeholder:
                continue
            background_tasks.add_task(process_message, driver, message, handler)
        status = "ok"

    return {"status": status}


async def process_message(
    driver: FacebookDriver,
    message: IncomingMessage,
    handler: ConversationHandler,
) -> None:
    """Ask the handler for a reply and send it through the driver.

    Failures are logged, never raised: the webhook has already been
    acknowledged.
    """
    try:
        reply = await handler.respond(message, driver)
        if reply is None:
            return
        await driver.reply(reply, message)
    except PlatformError as e:
        logger.error(
            "Facebook rejected reply to %s (status %s): %s",
            message.sender,
            e.status_code,
            e,
        )
    except Exception as e:
        logger.error("Error processing message: %s", e, exc_info=True)


async def process_event(
    driver: FacebookDriver,
    event: DriverEvent,
    handler: ConversationHandler,
) -> None:
    """Forward a driver event to the handler."""
    try:
        await handler.on_event(event, driver)
    except Exception as e:
        logger.error("Error processing event %s: %s", event.name, e, exc_info=True)
