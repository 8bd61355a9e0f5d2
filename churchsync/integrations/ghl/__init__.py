"""
GoHighLevel CRM integration.

- client: async HTTP client (contacts, tags, SMS, connection test)
- sms: reply parsing and outgoing SMS templates
- tokens: per-organization OAuth token storage and refresh
"""

from .client import ContactSyncResult, GHLClient, GHLResponse, SendSmsResult
from .sms import (
    extract_message_from_payload,
    parse_response,
    parse_response_fuzzy,
)
from .tokens import client_for_organization, get_access_token, has_ghl_connected, store_tokens

PROVIDER = "ghl"

__all__ = [
    "PROVIDER",
    "ContactSyncResult",
    "GHLClient",
    "GHLResponse",
    "SendSmsResult",
    "client_for_organization",
    "extract_message_from_payload",
    "get_access_token",
    "has_ghl_connected",
    "parse_response",
    "parse_response_fuzzy",
    "store_tokens",
]
