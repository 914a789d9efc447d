"""
Record reconciliation for DDNS Relay.

The reconciler compares the desired records of a request with the state held
by the DNS provider and updates the existing records that differ. Records are
never created, and the provider-side `proxied` flag and comment are kept.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from starlette import status as st_status

from ddns_relay.models import Failure, ReconcileReport, RecordType, RecordUpdate

if TYPE_CHECKING:
    from collections.abc import Sequence
    from typing import Final

    from ddns_relay.models import Credentials, DesiredRecord, RemoteZone
    from ddns_relay.providers.base import BaseDNSProvider


ACTIVE_TOKEN_STATUS: Final[str] = "active"


logger = logging.getLogger(__name__)


class Reconciler:
    """
    Apply desired address records to a DNS provider.

    Every desired record is checked against every zone visible to the
    credentials, one provider call at a time. A conflict aborts the whole
    run; updates already applied to earlier records are kept.
    """

    def __init__(self, provider: BaseDNSProvider) -> None:
        """
        Initialize the reconciler.

        Parameters
        ----------
        provider : BaseDNSProvider
            The DNS provider to reconcile against.
        """
        self.provider = provider

    async def reconcile(
        self,
        credentials: Credentials,
        records: Sequence[DesiredRecord],
    ) -> ReconcileReport | Failure:
        """
        Update the provider's records to match the desired records.

        Parameters
        ----------
        credentials : Credentials
            The request's credentials.
        records : Sequence[DesiredRecord]
            The desired records, in request order.

        Returns
        -------
        ReconcileReport | Failure
            What was updated and skipped, or the first failure encountered.
        """
        token_status = await self.provider.verify_token(credentials)
        if token_status != ACTIVE_TOKEN_STATUS:
            return Failure.unauthenticated(f"This API Token is {token_status}")

        zones = await self.provider.list_zones(credentials)
        if not zones:
            return Failure.invalid_input(
                "No zones found! You must supply an API Token scoped to a single zone.",
                status_code=st_status.HTTP_400_BAD_REQUEST,
            )

        logger.debug(
            "[%s] %d zone(s) visible: %s",
            self.provider.name,
            len(zones),
            ", ".join(zone.name for zone in zones),
        )

        report = ReconcileReport()
        for record in records:
            for zone in zones:
                failure = await self._reconcile_in_zone(credentials, zone, record, report)
                if failure is not None:
                    return failure

        return report

    async def _reconcile_in_zone(
        self,
        credentials: Credentials,
        zone: RemoteZone,
        record: DesiredRecord,
        report: ReconcileReport,
    ) -> Failure | None:
        """
        Reconcile one desired record within one zone.

        Parameters
        ----------
        credentials : Credentials
            The request's credentials.
        zone : RemoteZone
            The zone to look in.
        record : DesiredRecord
            The desired record.
        report : ReconcileReport
            Report to add the outcome to.

        Returns
        -------
        Failure | None
            A conflict failure, or None if the record was updated or skipped.
        """
        matches = await self.provider.list_records(
            credentials,
            zone.id,
            record.name,
            record.type,
        )

        if len(matches) > 1:
            logger.warning(
                "%d records match %s in zone %s.",
                len(matches),
                record.label,
                zone.name,
            )
            return Failure.conflict("More than one matching record found!")

        if not matches or matches[0].id is None:
            logger.info(
                "No record found for %s in zone %s! "
                "You must first manually create the record.",
                record.label,
                zone.name,
            )
            report.skipped.append(record.label)
            return None

        existing = matches[0]
        update = RecordUpdate(
            content=record.content,
            name=existing.name,
            type=RecordType(existing.type),
            proxied=existing.proxied if existing.proxied is not None else False,
            comment=existing.comment,
        )
        await self.provider.update_record(credentials, zone.id, existing.id, update)

        logger.info(
            "DNS record for %s updated successfully to %s (was %s).",
            record.label,
            record.content,
            existing.content,
        )
        report.updated.append(record.label)
        return None
