"""
Base class for DNS providers.

This module defines the abstract base class that DNS provider
implementations must inherit from, and the exception they raise when
the provider cannot be reached or rejects a call.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ddns_relay.models import (
        Credentials,
        RecordType,
        RecordUpdate,
        RemoteRecord,
        RemoteZone,
    )


class ProviderError(Exception):
    """
    Exception raised when a provider API call fails.

    Attributes
    ----------
    status_code : int | None
        HTTP status code of the provider's answer, if one was received.
    """

    def __init__(self, message: str, status_code: int | None = None) -> None:
        """
        Initialize ProviderError.

        Parameters
        ----------
        message : str
            Human-readable error message.
        status_code : int | None, optional
            HTTP status code of the provider's answer.
        """
        self.status_code = status_code
        super().__init__(message)


class BaseDNSProvider(ABC):
    """
    Abstract base class for DNS providers.

    Every operation takes the request's credentials, so a single provider
    instance can serve any number of clients. Implementations raise
    `ProviderError` for failed calls.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """
        Get the provider name.

        Returns
        -------
        str
            Provider name identifier.
        """
        ...

    @abstractmethod
    async def verify_token(self, credentials: Credentials) -> str:
        """
        Verify the API token.

        Parameters
        ----------
        credentials : Credentials
            The request's credentials.

        Returns
        -------
        str
            The token status as reported by the provider (e.g. "active").
        """
        ...

    @abstractmethod
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
            The zones, possibly empty.
        """
        ...

    @abstractmethod
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
            The matching records, possibly empty.
        """
        ...

    @abstractmethod
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
            The new record state.

        Returns
        -------
        RemoteRecord
            The record as stored by the provider after the update.
        """
        ...
