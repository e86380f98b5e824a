"""Compute Engine doubles for testing the disk labeler.

Key Features:
- In-memory disks with label fingerprint checks
- Scripted zone operation statuses (PENDING, RUNNING, DONE, ...)
- Error injection for disk reads, label writes and operation polls
- Recording metrics recorder and a fake clock for the poll loop

Usage:
    from gcp_mock import FakeClock, FakeDiskClient, RecordingMetrics

    client = FakeDiskClient.with_disk({"team": "storage"})
    clock = FakeClock()
    reconciler = DiskLabelReconciler(
        client, RecordingMetrics(), sleep=clock.sleep, clock=clock.monotonic
    )
"""

from .disks import FakeDiskClient, SetLabelsCall
from .recorders import FakeClock, RecordingMetrics

__all__ = [
    "FakeClock",
    "FakeDiskClient",
    "RecordingMetrics",
    "SetLabelsCall",
]
