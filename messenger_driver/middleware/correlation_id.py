"""Correlation ID middleware for request tracing across services."""

import uuid
from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

import logfire


class CorrelationIDMiddleware(BaseHTTPMiddleware):
    """
    Middleware to add correlation IDs to requests.

    Webhook deliveries are wrapped in a Logfire span tagged with the ID so
    the classification, handler and Send API logs of one delivery can be
    correlated.
    """

    def __init__(self, app: ASGIApp, header_name: str = "X-Correlation-ID"):
        super().__init__(app)
        self.header_name = header_name

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        correlation_id = request.headers.get(
            self.header_name.lower(),
            str(uuid.uuid4()),
        )
        request.state.correlation_id = correlation_id

        with logfire.span("request", correlation_id=correlation_id):
            response = await call_next(request)
        response.headers[self.header_name] = correlation_id
        return response
