"""Application-wide constants.

This module centralizes the Graph API endpoints and other magic values
so the services and the web layer share a single source of truth.
"""

# =============================================================================
# Facebook Graph API
# =============================================================================

# Graph API version the Send API payloads are written against
FACEBOOK_GRAPH_API_VERSION = "v2.6"

# Base URL for every Graph API call (profile lookups, generic endpoints)
FACEBOOK_GRAPH_API_URL = f"https://graph.facebook.com/{FACEBOOK_GRAPH_API_VERSION}"

# Send API endpoint, relative to the Graph API base URL
FACEBOOK_SEND_ENDPOINT = "me/messages"

# Profile fields requested for each sender
FACEBOOK_PROFILE_FIELDS = (
    "first_name",
    "last_name",
    "profile_pic",
    "locale",
    "timezone",
    "gender",
    "is_payment_enabled",
    "last_ad_referral",
)

# =============================================================================
# HTTP Timeout Configuration
# =============================================================================

# Timeout for Facebook Graph API calls (seconds)
FACEBOOK_API_TIMEOUT_SECONDS = 10.0

# Maximum response body characters kept in error logs
MAX_LOGGED_RESPONSE_CHARS = 500

# =============================================================================
# Webhook
# =============================================================================

# Header carrying the HMAC-SHA1 signature of the raw request body
SIGNATURE_HEADER = "X-Hub-Signature"

# Prefix Facebook puts in front of the hex digest
SIGNATURE_PREFIX = "sha1="

# Keys every messaging item carries that never identify an event
CORE_MESSAGING_KEYS = frozenset(
    {"sender", "recipient", "timestamp", "message", "postback"}
)

# Sender action that shows the typing indicator
TYPING_ON_ACTION = "typing_on"
