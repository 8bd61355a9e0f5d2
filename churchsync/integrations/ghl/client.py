"""GoHighLevel (GHL) API client

Overview
--------
Thin async HTTP client for the parts of the GHL v2 API the application uses:
contact upsert, tagging, conversation messages (SMS) and a location lookup
used as a connection test.

Dry run
-------
Unless ``GHL_CALL_ENABLED`` is true the client never touches the network and
answers every request with a successful dry-run response carrying mock ids,
so the rest of the workflow can be exercised locally.

Errors
------
Requests never raise for HTTP failures. Each call returns a DTO whose
``status`` is ``SENT`` on success, ``RATE_LIMITED`` for HTTP 429 and
``FAILED`` for any other failure (timeouts are reported with status code 408).
"""

from __future__ import annotations

import uuid
from typing import Any, Dict, List, Optional

import httpx
from pydantic import BaseModel

from churchsync.core.logging_config import get_logger
from churchsync.core.models.domain.enums import DeliveryStatus
from churchsync.server.core.config import GHLConfig, settings

logger = get_logger(__name__)

API_VERSION = "2021-07-28"


class GHLResponse(BaseModel):
    """Normalized result of one API request."""

    success: bool
    status_code: int
    data: Dict[str, Any] = {}
    error: Optional[str] = None
    dry_run: bool = False


class ContactSyncResult(BaseModel):
    success: bool
    status: DeliveryStatus
    contact_id: Optional[str] = None
    is_new: bool = False
    error: Optional[str] = None
    dry_run: bool = False


class SendSmsResult(BaseModel):
    success: bool
    status: DeliveryStatus
    message_id: Optional[str] = None
    conversation_id: Optional[str] = None
    error: Optional[str] = None
    dry_run: bool = False


def _failure_status(status_code: int) -> DeliveryStatus:
    return DeliveryStatus.RATE_LIMITED if status_code == 429 else DeliveryStatus.FAILED


def split_contact_name(name: Optional[str]) -> tuple[Optional[str], Optional[str]]:
    parts = (name or "").split()
    if not parts:
        return None, None
    return parts[0], " ".join(parts[1:]) or None


class GHLClient:
    """Async client bound to one GHL location and access token."""

    def __init__(
        self,
        access_token: str,
        location_id: str,
        *,
        config: Optional[GHLConfig] = None,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        """Create a GHL client.

        Args:
            access_token: Private integration token or OAuth access token.
            location_id: GHL sub-account (location) the calls act on.
            config: GHL settings; defaults to the application settings.
            client: Optional preconfigured ``httpx.AsyncClient`` (tests inject one
                with a mock transport).
        """
        self.config = config or settings.ghl
        self.access_token = access_token
        self.location_id = location_id
        self._client = client
        self._owns_client = client is None

    @property
    def call_enabled(self) -> bool:
        return self.config.call_enabled

    def _headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self.access_token}",
            "Version": API_VERSION,
            "Accept": "application/json",
            "Content-Type": "application/json",
        }

    def _http(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(base_url=self.config.base_url, timeout=self.config.timeout)
        return self._client

    async def aclose(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "GHLClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def request(
        self,
        method: str,
        path: str,
        *,
        json: Optional[Dict[str, Any]] = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> GHLResponse:
        """Send one request and normalize the outcome."""
        if not self.call_enabled:
            logger.debug(f"[DRY RUN] GHL {method} {path} location={self.location_id}")
            mock_id = f"mock-{uuid.uuid4().hex}"
            return GHLResponse(
                success=True,
                status_code=200,
                data={"id": mock_id, "message": "Dry run - no API call made"},
                dry_run=True,
            )

        try:
            response = await self._http().request(method, path, json=json, params=params, headers=self._headers())
        except httpx.TimeoutException:
            logger.warning(f"GHL {method} {path} timed out")
            return GHLResponse(success=False, status_code=408, error="Request timeout")
        except httpx.HTTPError as e:
            logger.warning(f"GHL {method} {path} failed: {e}")
            return GHLResponse(success=False, status_code=500, error=str(e))

        try:
            body = response.json()
        except ValueError:
            body = {}
        if not isinstance(body, dict):
            body = {"data": body}

        if response.status_code == 429:
            retry_after = response.headers.get("Retry-After", "10")
            return GHLResponse(
                success=False,
                status_code=429,
                error=f"Rate limited. Retry after {retry_after} seconds.",
            )
        if response.is_error:
            message = body.get("message") or body.get("msg") or "API request failed"
            if isinstance(message, list):
                message = "; ".join(str(m) for m in message)
            return GHLResponse(success=False, status_code=response.status_code, data=body, error=str(message))
        return GHLResponse(success=True, status_code=response.status_code, data=body)

    async def upsert_contact(
        self,
        name: Optional[str] = None,
        email: Optional[str] = None,
        phone: Optional[str] = None,
        address: Optional[str] = None,
        tags: Optional[List[str]] = None,
        source: str = "ChurchSync",
    ) -> ContactSyncResult:
        """Create the contact or update the one GHL matches by email/phone."""
        first_name, last_name = split_contact_name(name)
        body: Dict[str, Any] = {"locationId": self.location_id, "source": source}
        for key, value in (
            ("firstName", first_name),
            ("lastName", last_name),
            ("email", email),
            ("phone", phone),
            ("address1", address),
        ):
            if value:
                body[key] = value
        if tags:
            body["tags"] = tags

        result = await self.request("POST", "/contacts/upsert", json=body)
        if result.dry_run:
            return ContactSyncResult(
                success=True,
                status=DeliveryStatus.SENT,
                contact_id=f"mock-contact-{uuid.uuid4().hex}",
                is_new=True,
                dry_run=True,
            )
        contact = result.data.get("contact") if result.success else None
        if contact and contact.get("id"):
            return ContactSyncResult(
                success=True,
                status=DeliveryStatus.SENT,
                contact_id=contact["id"],
                is_new=result.data.get("new") is True,
            )
        return ContactSyncResult(
            success=False,
            status=_failure_status(result.status_code),
            error=result.error or "Failed to upsert contact",
        )

    async def add_tags(self, contact_id: str, tags: List[str]) -> bool:
        result = await self.request("POST", f"/contacts/{contact_id}/tags", json={"tags": tags})
        return result.success

    async def send_sms(self, contact_id: str, message: str, from_number: Optional[str] = None) -> SendSmsResult:
        body: Dict[str, Any] = {"type": "SMS", "contactId": contact_id, "message": message}
        if from_number:
            body["fromNumber"] = from_number
        result = await self.request("POST", "/conversations/messages", json=body)
        if result.dry_run:
            stamp = uuid.uuid4().hex
            return SendSmsResult(
                success=True,
                status=DeliveryStatus.SENT,
                message_id=f"mock-msg-{stamp}",
                conversation_id=f"mock-conv-{stamp}",
                dry_run=True,
            )
        if result.success:
            return SendSmsResult(
                success=True,
                status=DeliveryStatus.SENT,
                message_id=result.data.get("messageId"),
                conversation_id=result.data.get("conversationId"),
            )
        return SendSmsResult(
            success=False,
            status=_failure_status(result.status_code),
            error=result.error or "Failed to send message",
        )

    async def test_connection(self) -> GHLResponse:
        """Fetch the configured location to verify the credentials."""
        return await self.request("GET", f"/locations/{self.location_id}")
