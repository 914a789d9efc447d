"""Shared fixtures: an in-memory DNS provider and credential helpers."""

from __future__ import annotations

import base64

import pytest
import respx

from ddns_relay.models import (
    Credentials,
    RecordType,
    RecordUpdate,
    RemoteRecord,
    RemoteZone,
)
from ddns_relay.providers.base import BaseDNSProvider


def basic_auth(email: str, token: str, scheme: str = "Basic") -> str:
    """Build an Authorization header value for `email:token`."""
    payload = base64.b64encode(f"{email}:{token}".encode()).decode()
    return f"{scheme} {payload}"


def remote_record(
    name: str = "home.example.com",
    record_type: str = "A",
    content: str = "192.0.2.1",
    record_id: str | None = "rec-1",
    proxied: bool | None = False,
    comment: str | None = None,
) -> RemoteRecord:
    """Build a RemoteRecord with sensible defaults."""
    return RemoteRecord(
        id=record_id,
        name=name,
        type=record_type,
        content=content,
        proxied=proxied,
        comment=comment,
    )


class FakeProvider(BaseDNSProvider):
    """
    In-memory provider recording every call.

    Records are keyed by (zone_id, name, type).
    """

    def __init__(
        self,
        *,
        token_status: str = "active",
        zones: list[RemoteZone] | None = None,
        records: dict[tuple[str, str, str], list[RemoteRecord]] | None = None,
        error: Exception | None = None,
    ) -> None:
        self.token_status = token_status
        self.zones = (
            zones if zones is not None else [RemoteZone(id="zone-1", name="example.com")]
        )
        self.records = records or {}
        self.error = error
        self.calls: list[tuple[str, ...]] = []
        self.updates: list[tuple[str, str, RecordUpdate]] = []

    @property
    def name(self) -> str:
        return "fake"

    async def verify_token(self, credentials: Credentials) -> str:
        self.calls.append(("verify_token", credentials.email))
        return self.token_status

    async def list_zones(self, credentials: Credentials) -> list[RemoteZone]:
        self.calls.append(("list_zones",))
        return list(self.zones)

    async def list_records(
        self,
        credentials: Credentials,
        zone_id: str,
        name: str,
        record_type: RecordType,
    ) -> list[RemoteRecord]:
        self.calls.append(("list_records", zone_id, name, str(record_type)))
        if self.error is not None:
            raise self.error
        return list(self.records.get((zone_id, name, str(record_type)), []))

    async def update_record(
        self,
        credentials: Credentials,
        zone_id: str,
        record_id: str,
        update: RecordUpdate,
    ) -> RemoteRecord:
        self.calls.append(("update_record", zone_id, record_id))
        self.updates.append((zone_id, record_id, update))
        return RemoteRecord(id=record_id, zone_id=zone_id, **update.model_dump(mode="json"))


@pytest.fixture
def credentials() -> Credentials:
    """Credentials used by most tests."""
    return Credentials(email="user@example.com", token="cf-token-123")


@pytest.fixture
def mock_http():
    """Intercept all httpx calls; no real network traffic is made."""
    with respx.mock(assert_all_called=False) as router:
        yield router
