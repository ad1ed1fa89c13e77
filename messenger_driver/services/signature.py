"""Webhook signature verification (X-Hub-Signature, HMAC-SHA1)."""

import hashlib
import hmac
from typing import Mapping

from messenger_driver.constants import SIGNATURE_HEADER, SIGNATURE_PREFIX


def compute_signature(raw_body: bytes, app_secret: str) -> str:
    """Return the ``sha1=<hex>`` signature Facebook sends for ``raw_body``."""
    digest = hmac.new(app_secret.encode("utf-8"), raw_body, hashlib.sha1)
    return f"{SIGNATURE_PREFIX}{digest.hexdigest()}"


def validate_signature(raw_body: bytes, signature: str, app_secret: str) -> bool:
    """Constant-time check of the provided signature against the body."""
    expected = compute_signature(raw_body, app_secret)
    return hmac.compare_digest(signature.encode("utf-8"), expected.encode("utf-8"))


def get_signature_header(headers: Mapping[str, str]) -> str:
    """Case-insensitive lookup of the signature header (empty if missing)."""
    wanted = {SIGNATURE_HEADER.lower(), SIGNATURE_HEADER.lower().replace("-", "_")}
    for key, value in headers.items():
        if key.lower() in wanted:
            return value or ""
    return ""
