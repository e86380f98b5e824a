"""Polling of asynchronous zone operations.

A label write returns an operation that finishes later. The poller checks
its status on a fixed interval until the provider reports DONE or the
deadline passes. Only DONE is terminal: an operation that ends in any other
state is waited on until the timeout.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable

from google.api_core.exceptions import GoogleAPIError

from .config import DEFAULT_POLL_INTERVAL_SECONDS, DEFAULT_POLL_TIMEOUT_SECONDS
from .gcp import DiskClient, Operation
from .volume import VolumeHandle

logger = logging.getLogger(__name__)


class OperationTimeoutError(Exception):
    """Raised when an operation does not reach DONE before the deadline."""

    pass


class OperationPollError(Exception):
    """Raised when the operation status cannot be read."""

    pass


def wait_for_operation(
    client: DiskClient,
    handle: VolumeHandle,
    operation_name: str,
    *,
    interval: float = DEFAULT_POLL_INTERVAL_SECONDS,
    timeout: float = DEFAULT_POLL_TIMEOUT_SECONDS,
    sleep: Callable[[float], None] = time.sleep,
    clock: Callable[[], float] = time.monotonic,
) -> Operation:
    """Block until a zone operation is DONE.

    The first status check happens one interval after the call, not
    immediately.

    Args:
        client: Provider client used to read the operation.
        handle: Disk coordinates; project and zone locate the operation.
        operation_name: Name of the operation returned by the write.
        interval: Seconds between status checks.
        timeout: Seconds before giving up.
        sleep: Sleep function (injectable for tests).
        clock: Monotonic clock (injectable for tests).

    Returns:
        The finished operation.

    Raises:
        OperationTimeoutError: If the operation is not DONE within timeout.
        OperationPollError: If reading the status fails; polling stops at once.
    """
    deadline = clock() + timeout

    while True:
        sleep(interval)
        try:
            operation = client.get_zone_operation(handle.project, handle.location, operation_name)
        except GoogleAPIError as e:
            raise OperationPollError(
                f"failed to read operation {operation_name} for disk {handle.name}: {e}"
            ) from e

        if operation.done:
            return operation

        logger.debug(
            "Operation not done yet",
            extra={"operation": operation_name, "status": operation.status},
        )

        if clock() >= deadline:
            raise OperationTimeoutError(
                f"operation {operation_name} for disk {handle.name} not done after {timeout:g}s "
                f"(last status: {operation.status or 'unknown'})"
            )
