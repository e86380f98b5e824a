"""Reconciliation of PVC labels onto GCE persistent disks.

Each call follows the same steps:
1. Sanitize the requested labels or keys for GCE
2. Resolve the volume handle and read the disk's current labels
3. Compute the new label set (merge for add, removal for delete)
4. Skip the write when nothing changes
5. Write the labels with the fingerprint read in step 2
6. Poll the returned operation until DONE or timeout

Calls are fire-and-forget: failures are logged and the call returns.
Callers observe outcomes through the metrics recorder, which counts every
label write that reached the provider. A write whose operation later fails
to complete is logged but not counted as an error.

CONCURRENCY: Calls for the same disk are not serialized here. Two writers
racing on one disk both read the same fingerprint and the provider rejects
the second write, which is reported as a submit error.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Iterable, Mapping

from google.api_core.exceptions import GoogleAPIError

from .config import DEFAULT_POLL_INTERVAL_SECONDS, DEFAULT_POLL_TIMEOUT_SECONDS, Config
from .gcp import Disk, DiskClient, Operation
from .metrics import ActionStatus, MetricsRecorder
from .models import LabelRequest
from .operations import OperationPollError, OperationTimeoutError, wait_for_operation
from .sanitize import sanitize_keys, sanitize_labels
from .volume import MalformedVolumeHandleError, VolumeHandle, parse_volume_id

logger = logging.getLogger(__name__)


class DiskFetchError(Exception):
    """Raised when the disk cannot be read."""

    pass


class LabelSubmitError(Exception):
    """Raised when the provider rejects a label write.

    Includes optimistic concurrency conflicts on a stale fingerprint.
    """

    pass


class DiskLabelReconciler:
    """Applies PVC label changes to the disks backing them."""

    def __init__(
        self,
        client: DiskClient,
        metrics: MetricsRecorder,
        *,
        poll_interval_seconds: float = DEFAULT_POLL_INTERVAL_SECONDS,
        poll_timeout_seconds: float = DEFAULT_POLL_TIMEOUT_SECONDS,
        dry_run: bool = False,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialize the reconciler.

        Args:
            client: Provider client for disk and operation calls.
            metrics: Recorder for write outcomes.
            poll_interval_seconds: Seconds between operation status checks.
            poll_timeout_seconds: Seconds to wait for an operation.
            dry_run: Log computed label changes instead of writing them.
            sleep: Sleep function used while polling.
            clock: Monotonic clock used while polling.
        """
        self._client = client
        self._metrics = metrics
        self._poll_interval = poll_interval_seconds
        self._poll_timeout = poll_timeout_seconds
        self._dry_run = dry_run
        self._sleep = sleep
        self._clock = clock

    @classmethod
    def from_config(
        cls, config: Config, client: DiskClient, metrics: MetricsRecorder
    ) -> DiskLabelReconciler:
        """Create a reconciler using polling and dry-run settings from config."""
        return cls(
            client,
            metrics,
            poll_interval_seconds=config.poll_interval_seconds,
            poll_timeout_seconds=config.poll_timeout_seconds,
            dry_run=config.dry_run,
        )

    def add_labels(self, volume_id: str, labels: Mapping[str, str], storage_class: str) -> None:
        """Merge labels into the disk's labels.

        Existing labels with other keys are kept; labels with the same key
        are overwritten. Nothing is written if the disk already carries
        every label.

        Args:
            volume_id: Volume handle of the disk.
            labels: Raw Kubernetes labels to add.
            storage_class: Storage class of the claim, used for metrics.
        """
        sanitized = sanitize_labels(labels)
        logger.debug(
            "Labels to add to disk",
            extra={"volume_id": volume_id, "labels": sanitized},
        )

        located = self._read_disk(volume_id)
        if located is None:
            return
        handle, disk = located

        current = disk.labels or {}
        updated = {**current, **sanitized}
        if updated == current:
            logger.debug("Labels already set on disk", extra={"volume_id": volume_id})
            return

        self._write_labels(handle, disk, updated, storage_class)

    def delete_labels(self, volume_id: str, keys: Iterable[str], storage_class: str) -> None:
        """Remove label keys from the disk's labels.

        Keys not present on the disk are ignored. Nothing is written if
        none of the keys are present.

        Args:
            volume_id: Volume handle of the disk.
            keys: Raw Kubernetes label keys to remove.
            storage_class: Storage class of the claim, used for metrics.
        """
        keys = list(keys)
        if not keys:
            return

        sanitized = sanitize_keys(keys)
        logger.debug(
            "Labels to delete from disk",
            extra={"volume_id": volume_id, "keys": sanitized},
        )

        located = self._read_disk(volume_id)
        if located is None:
            return
        handle, disk = located

        if disk.labels is None:
            return

        updated = dict(disk.labels)
        for key in sanitized:
            updated.pop(key, None)
        if updated == disk.labels:
            logger.debug("No labels to delete from disk", extra={"volume_id": volume_id})
            return

        self._write_labels(handle, disk, updated, storage_class)

    def apply_request(self, request: LabelRequest) -> None:
        """Apply a label request: additions first, then removals."""
        if request.labels:
            self.add_labels(request.volume_handle, request.labels, request.storage_class)
        self.delete_labels(request.volume_handle, request.remove_keys, request.storage_class)

    def _read_disk(self, volume_id: str) -> tuple[VolumeHandle, Disk] | None:
        try:
            handle = parse_volume_id(volume_id)
            disk = self._get_disk(handle)
        except MalformedVolumeHandleError as e:
            logger.error("Invalid volume handle", extra={"volume_id": volume_id, "error": str(e)})
            return None
        except DiskFetchError as e:
            logger.error("Failed to read disk", extra={"volume_id": volume_id, "error": str(e)})
            return None
        return handle, disk

    def _get_disk(self, handle: VolumeHandle) -> Disk:
        try:
            return self._client.get_disk(handle.project, handle.location, handle.name)
        except GoogleAPIError as e:
            raise DiskFetchError(f"failed to get disk {handle}: {e}") from e

    def _submit(self, handle: VolumeHandle, disk: Disk, labels: dict[str, str]) -> Operation:
        try:
            return self._client.set_disk_labels(
                handle.project,
                handle.location,
                handle.name,
                labels,
                disk.label_fingerprint,
            )
        except GoogleAPIError as e:
            raise LabelSubmitError(f"failed to set labels on disk {handle}: {e}") from e

    def _write_labels(
        self,
        handle: VolumeHandle,
        disk: Disk,
        labels: dict[str, str],
        storage_class: str,
    ) -> None:
        log_extra = {
            "project": handle.project,
            "zone": handle.location,
            "disk": handle.name,
            "storage_class": storage_class,
        }

        if self._dry_run:
            logger.info("Dry-run mode, skipping label update", extra={**log_extra, "labels": labels})
            return

        try:
            operation = self._submit(handle, disk, labels)
        except LabelSubmitError as e:
            logger.error("Failed to set disk labels", extra={**log_extra, "error": str(e)})
            self._metrics.record_action(ActionStatus.ERROR, storage_class)
            return

        try:
            wait_for_operation(
                self._client,
                handle,
                operation.name,
                interval=self._poll_interval,
                timeout=self._poll_timeout,
                sleep=self._sleep,
                clock=self._clock,
            )
        except (OperationTimeoutError, OperationPollError) as e:
            # Not counted in metrics; only rejected writes are
            logger.error(
                "Label update operation failed",
                extra={**log_extra, "operation": operation.name, "error": str(e)},
            )
            return

        logger.info("Disk labels updated", extra={**log_extra, "operation": operation.name})
        self._metrics.record_action(ActionStatus.SUCCESS, storage_class)
