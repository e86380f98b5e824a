"""Outcome metrics for disk label updates.

The reconciler reports each label write that reached the provider through
a MetricsRecorder. PrometheusMetricsRecorder exposes them as a counter
labelled by outcome and the storage class of the claim.
"""

from __future__ import annotations

from enum import Enum
from typing import Protocol

from prometheus_client import REGISTRY, CollectorRegistry, Counter

ACTIONS_METRIC_NAME = "pvc_labeler_disk_label_actions"


class ActionStatus(str, Enum):
    """Outcome of a disk label write."""

    SUCCESS = "success"
    ERROR = "error"


class MetricsRecorder(Protocol):
    """Receives the outcome of each submitted label write."""

    def record_action(self, status: ActionStatus, storage_class: str) -> None: ...


class PrometheusMetricsRecorder:
    """MetricsRecorder publishing to a Prometheus registry."""

    def __init__(self, registry: CollectorRegistry = REGISTRY) -> None:
        self._actions = Counter(
            ACTIONS_METRIC_NAME,
            "Disk label updates submitted to the provider, by outcome",
            ["status", "storageclass"],
            registry=registry,
        )

    def record_action(self, status: ActionStatus, storage_class: str) -> None:
        self._actions.labels(status=status.value, storageclass=storage_class).inc()
