"""GCE persistent disk access.

The reconciler only needs three provider calls: read a disk, write its
labels and read a zone operation. They are expressed as the DiskClient
protocol so tests can substitute an in-memory client; ComputeDiskClient is
the production implementation on top of google-cloud-compute.

Provider errors (google.api_core.exceptions.GoogleAPIError) are not
translated here; callers decide how each failure is reported.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Protocol

from google.cloud import compute_v1

logger = logging.getLogger(__name__)

OPERATION_STATUS_DONE = "DONE"


@dataclass
class Disk:
    """Label state of a persistent disk.

    Attributes:
        name: Disk name
        labels: Current labels, None when the disk has none
        label_fingerprint: Optimistic concurrency token, echoed back on write
    """

    name: str
    labels: dict[str, str] | None = None
    label_fingerprint: str = ""


@dataclass
class Operation:
    """A zone operation returned by a label write.

    Attributes:
        name: Operation name used to poll its status
        status: Provider status (PENDING, RUNNING, DONE)
    """

    name: str
    status: str = ""

    @property
    def done(self) -> bool:
        """Check if the provider reports the operation as finished."""
        return self.status == OPERATION_STATUS_DONE


class DiskClient(Protocol):
    """Provider calls used by the label reconciler."""

    def get_disk(self, project: str, zone: str, name: str) -> Disk: ...

    def set_disk_labels(
        self,
        project: str,
        zone: str,
        name: str,
        labels: dict[str, str],
        label_fingerprint: str,
    ) -> Operation: ...

    def get_zone_operation(self, project: str, zone: str, operation_name: str) -> Operation: ...


def _status_name(status: Any) -> str:
    # Depending on the library version status is an enum or a plain string
    return str(getattr(status, "name", status) or "")


class ComputeDiskClient:
    """DiskClient backed by the Compute Engine API.

    Authentication uses Application Default Credentials, resolved by the
    underlying google-cloud-compute clients.
    """

    def __init__(
        self,
        disks_client: compute_v1.DisksClient | None = None,
        operations_client: compute_v1.ZoneOperationsClient | None = None,
    ) -> None:
        """Initialize the Compute Engine clients.

        Args:
            disks_client: Pre-built disks client (created when omitted).
            operations_client: Pre-built zone operations client (created when omitted).
        """
        self._disks = disks_client or compute_v1.DisksClient()
        self._operations = operations_client or compute_v1.ZoneOperationsClient()

    def get_disk(self, project: str, zone: str, name: str) -> Disk:
        disk = self._disks.get(project=project, zone=zone, disk=name)
        return Disk(
            name=disk.name,
            labels=dict(disk.labels) if disk.labels else None,
            label_fingerprint=disk.label_fingerprint,
        )

    def set_disk_labels(
        self,
        project: str,
        zone: str,
        name: str,
        labels: dict[str, str],
        label_fingerprint: str,
    ) -> Operation:
        request = compute_v1.ZoneSetLabelsRequest(
            labels=labels,
            label_fingerprint=label_fingerprint,
        )
        operation = self._disks.set_labels_unary(
            project=project,
            zone=zone,
            resource=name,
            zone_set_labels_request_resource=request,
        )
        logger.debug(
            "Submitted disk label update",
            extra={"project": project, "zone": zone, "disk": name, "operation": operation.name},
        )
        return Operation(name=operation.name, status=_status_name(operation.status))

    def get_zone_operation(self, project: str, zone: str, operation_name: str) -> Operation:
        operation = self._operations.get(project=project, zone=zone, operation=operation_name)
        return Operation(name=operation.name, status=_status_name(operation.status))
