"""
CloudFlare DNS provider implementation.

This module implements the subset of the CloudFlare DNS API v4 the relay
needs: token verification, zone and record listing, and record updates.
Requests carry both the account e-mail (`X-Auth-Email`) and the API token
(`Authorization: Bearer`).
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

import httpx
from starlette import status as st_status

from ddns_relay.models import RemoteRecord, RemoteZone
from ddns_relay.providers.base import BaseDNSProvider, ProviderError

if TYPE_CHECKING:
    from typing import Final

    from ddns_relay.models import Credentials, RecordType, RecordUpdate


# CloudFlare API base URL
CF_API_BASE: Final[str] = "https://api.cloudflare.com/client/v4"

# HTTP timeout in seconds
HTTP_TIMEOUT: Final[float] = 30.0

# Page size for list calls
PER_PAGE: Final[int] = 50

# Status reported for tokens CloudFlare refuses to verify
INVALID_TOKEN_STATUS: Final[str] = "invalid"


logger = logging.getLogger(__name__)


class CloudFlareProvider(BaseDNSProvider):
    """
    CloudFlare DNS provider.

    Each call opens its own HTTP client. Non-2xx answers, answers with
    `success: false` and network failures raise `ProviderError`.
    """

    def __init__(
        self,
        api_base: str = CF_API_BASE,
        timeout: float = HTTP_TIMEOUT,
    ) -> None:
        """
        Initialize the provider.

        Parameters
        ----------
        api_base : str, optional
            Base URL of the CloudFlare API.
        timeout : float, optional
            HTTP timeout in seconds.
        """
        self.api_base = api_base.rstrip("/")
        self.timeout = timeout

    @property
    def name(self) -> str:
        """Get the provider name."""
        return "cloudflare"

    async def verify_token(self, credentials: Credentials) -> str:
        """
        Verify the API token.

        CloudFlare answers 401/403 for unknown tokens; those are reported as
        the status "invalid" rather than raised.

        Parameters
        ----------
        credentials : Credentials
            The request's credentials.

        Returns
        -------
        str
            The token status (e.g. "active", "disabled", "expired").
        """
        try:
            data = await self._request("GET", "/user/tokens/verify", credentials)
        except ProviderError as e:
            if e.status_code in {
                st_status.HTTP_401_UNAUTHORIZED,
                st_status.HTTP_403_FORBIDDEN,
            }:
                logger.debug("[cloudflare] Token verification refused: '%s'", e)
                return INVALID_TOKEN_STATUS
            raise

        result = data.get("result") or {}
        return str(result.get("status", INVALID_TOKEN_STATUS))

    async def list_zones(self, credentials: Credentials) -> list[RemoteZone]:
        """
        List every zone visible to the credentials.

        Parameters
        ----------
        credentials : Credentials
            The request's credentials.

        Returns
        -------
        list[RemoteZone]
            The zones, across all result pages.
        """
        results = await self._get_paginated("/zones", credentials)
        return [RemoteZone.model_validate(zone) for zone in results]

    async def list_records(
        self,
        credentials: Credentials,
        zone_id: str,
        name: str,
        record_type: RecordType,
    ) -> list[RemoteRecord]:
        """
        List the records of a zone matching a name and type exactly.

        Parameters
        ----------
        credentials : Credentials
            The request's credentials.
        zone_id : str
            The zone ID.
        name : str
            The fully qualified record name.
        record_type : RecordType
            The record type.

        Returns
        -------
        list[RemoteRecord]
            The matching records, across all result pages.
        """
        results = await self._get_paginated(
            f"/zones/{zone_id}/dns_records",
            credentials,
            params={"name": name, "type": record_type.value},
        )
        return [RemoteRecord.model_validate(record) for record in results]

    async def update_record(
        self,
        credentials: Credentials,
        zone_id: str,
        record_id: str,
        update: RecordUpdate,
    ) -> RemoteRecord:
        """
        Overwrite an existing record.

        Parameters
        ----------
        credentials : Credentials
            The request's credentials.
        zone_id : str
            The zone ID.
        record_id : str
            The ID of the record to update.
        update : RecordUpdate
            The new record state. A missing comment is left out of the body.

        Returns
        -------
        RemoteRecord
            The record as stored by CloudFlare.
        """
        payload: dict[str, Any] = update.model_dump(mode="json", exclude_none=True)
        data = await self._request(
            "PUT",
            f"/zones/{zone_id}/dns_records/{record_id}",
            credentials,
            json=payload,
        )
        return RemoteRecord.model_validate(data.get("result") or {})

    def _headers(self, credentials: Credentials) -> dict[str, str]:
        """
        Build the authentication headers.

        Parameters
        ----------
        credentials : Credentials
            The request's credentials.

        Returns
        -------
        dict[str, str]
            Request headers.
        """
        return {
            "X-Auth-Email": credentials.email,
            "Authorization": f"Bearer {credentials.token}",
            "Content-Type": "application/json",
        }

    async def _get_paginated(
        self,
        path: str,
        credentials: Credentials,
        params: dict[str, str] | None = None,
    ) -> list[dict[str, Any]]:
        """
        Collect the results of a list call over all pages.

        Parameters
        ----------
        path : str
            API path below the base URL.
        credentials : Credentials
            The request's credentials.
        params : dict[str, str] | None, optional
            Query parameters.

        Returns
        -------
        list[dict[str, Any]]
            The raw result objects.
        """
        results: list[dict[str, Any]] = []
        page = 1

        while True:
            page_params: dict[str, str | int] = {
                **(params or {}),
                "page": page,
                "per_page": PER_PAGE,
            }
            data = await self._request("GET", path, credentials, params=page_params)
            results.extend(data.get("result") or [])

            total_pages = (data.get("result_info") or {}).get("total_pages") or 1
            if page >= total_pages:
                return results
            page += 1

    async def _request(
        self,
        method: str,
        path: str,
        credentials: Credentials,
        *,
        params: dict[str, str | int] | None = None,
        json: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """
        Send an authenticated request to the CloudFlare API.

        Parameters
        ----------
        method : str
            HTTP method.
        path : str
            API path below the base URL.
        credentials : Credentials
            The request's credentials.
        params : dict[str, str | int] | None, optional
            Query parameters.
        json : dict[str, Any] | None, optional
            JSON request body.

        Returns
        -------
        dict[str, Any]
            The decoded response body.

        Raises
        ------
        ProviderError
            If the request fails, CloudFlare answers with a non-2xx status,
            or the body reports `success: false`.
        """
        url = f"{self.api_base}{path}"

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.request(
                    method,
                    url,
                    headers=self._headers(credentials),
                    params=params,
                    json=json,
                )
        except httpx.RequestError as e:
            msg = f"Network request to CloudFlare failed ({method} {path}): {e}"
            raise ProviderError(msg) from e

        logger.debug("[cloudflare] %s %s -> %d", method, url, response.status_code)
        logger.debug("[cloudflare] Response: %s", response.text)

        try:
            data: dict[str, Any] = response.json()
        except ValueError:
            data = {}

        if response.is_success and data.get("success"):
            return data

        errors = data.get("errors") or []
        error_msg = (
            errors[0].get("message", "Unknown error") if errors else "Unknown error"
        )
        msg = f"CloudFlare API error {response.status_code} for {method} {path}: {error_msg}"
        raise ProviderError(msg, status_code=response.status_code)
