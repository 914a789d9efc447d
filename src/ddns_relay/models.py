"""
Data models for DDNS Relay.

This module defines the request-scoped data structures used throughout the
application: decoded credentials, desired and remote DNS records, and the
`Failure` result type that carries an error kind up to the HTTP boundary.
"""

from __future__ import annotations

from enum import StrEnum
from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, Field
from starlette import status as st_status

if TYPE_CHECKING:
    from typing import Final


class RecordType(StrEnum):
    """
    Supported DNS record types.

    Attributes
    ----------
    A : str
        IPv4 address record.
    AAAA : str
        IPv6 address record.
    """

    A = "A"
    AAAA = "AAAA"


class ErrorKind(StrEnum):
    """
    Kinds of failures surfaced to the client.

    Attributes
    ----------
    UNAUTHENTICATED : str
        Credentials missing, malformed or rejected by the provider.
    INVALID_INPUT : str
        Required request parameters missing, or no zones visible.
    CONFLICT : str
        More than one remote record matches a desired record.
    SERVER_ERROR : str
        The request cannot be served in this execution context.
    """

    UNAUTHENTICATED = "unauthenticated"
    INVALID_INPUT = "invalid_input"
    CONFLICT = "conflict"
    SERVER_ERROR = "server_error"


DEFAULT_STATUS_CODES: Final[dict[ErrorKind, int]] = {
    ErrorKind.UNAUTHENTICATED: st_status.HTTP_401_UNAUTHORIZED,
    ErrorKind.INVALID_INPUT: st_status.HTTP_422_UNPROCESSABLE_CONTENT,
    ErrorKind.CONFLICT: st_status.HTTP_400_BAD_REQUEST,
    ErrorKind.SERVER_ERROR: st_status.HTTP_500_INTERNAL_SERVER_ERROR,
}


class Credentials(BaseModel):
    """
    Provider credentials decoded from the Authorization header.

    Attributes
    ----------
    email : str
        Account e-mail address.
    token : str
        API token.
    """

    model_config = ConfigDict(frozen=True)

    email: str
    token: str = Field(repr=False)


class DesiredRecord(BaseModel):
    """
    An address record as requested by the client.

    Attributes
    ----------
    name : str
        The fully qualified hostname.
    type : RecordType
        A for IPv4 content, AAAA otherwise.
    content : str
        The IP address to set.
    ttl : int
        Time to live, 1 meaning automatic.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    type: RecordType
    content: str
    ttl: int = 1

    @property
    def label(self) -> str:
        """Get a short label such as `home.example.com(A)` for log messages."""
        return f"{self.name}({self.type})"


class RemoteZone(BaseModel):
    """A zone visible to the credentials."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: str
    name: str


class RemoteRecord(BaseModel):
    """
    A DNS record as reported by the provider.

    Only the fields the relay needs are kept; anything else in the
    provider's answer is dropped.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: str | None = None
    zone_id: str | None = None
    name: str
    type: str
    content: str
    proxied: bool | None = None
    comment: str | None = None
    ttl: int | None = None


class RecordUpdate(BaseModel):
    """
    Payload of an update call for an existing record.

    Attributes
    ----------
    content : str
        New record content.
    name : str
        Record name.
    type : RecordType
        Record type.
    proxied : bool
        Proxy flag carried over from the existing record.
    comment : str | None
        Comment carried over from the existing record.
    """

    model_config = ConfigDict(frozen=True)

    content: str
    name: str
    type: RecordType
    proxied: bool = False
    comment: str | None = None


class ReconcileReport(BaseModel):
    """
    Summary of a completed reconciliation.

    Attributes
    ----------
    updated : list[str]
        Labels of the records that were updated, one per zone match.
    skipped : list[str]
        Labels of the records with no match, one per zone checked.
    """

    updated: list[str] = Field(default_factory=list)
    skipped: list[str] = Field(default_factory=list)


class Failure(BaseModel):
    """
    A structured failure returned instead of a result.

    Attributes
    ----------
    kind : ErrorKind
        The failure kind.
    message : str
        Human-readable message, sent to the client as the response body.
    status_code : int
        HTTP status code the failure maps to.
    """

    model_config = ConfigDict(frozen=True)

    kind: ErrorKind
    message: str
    status_code: int

    @classmethod
    def of(cls, kind: ErrorKind, message: str, status_code: int | None = None) -> Failure:
        """
        Create a failure, using the default status code of its kind if omitted.

        Parameters
        ----------
        kind : ErrorKind
            The failure kind.
        message : str
            Human-readable message.
        status_code : int | None, optional
            Explicit HTTP status code.

        Returns
        -------
        Failure
            A failure instance.
        """
        if status_code is None:
            status_code = DEFAULT_STATUS_CODES[kind]
        return cls(kind=kind, message=message, status_code=status_code)

    @classmethod
    def unauthenticated(cls, message: str) -> Failure:
        """Create a 401 failure."""
        return cls.of(ErrorKind.UNAUTHENTICATED, message)

    @classmethod
    def invalid_input(cls, message: str, status_code: int | None = None) -> Failure:
        """Create an invalid input failure (422 unless overridden)."""
        return cls.of(ErrorKind.INVALID_INPUT, message, status_code)

    @classmethod
    def conflict(cls, message: str) -> Failure:
        """Create a 400 conflict failure."""
        return cls.of(ErrorKind.CONFLICT, message)

    @classmethod
    def server_error(cls, message: str) -> Failure:
        """Create a 500 failure."""
        return cls.of(ErrorKind.SERVER_ERROR, message)
