"""Volume handle parsing.

A GCE PD CSI volume handle looks like
``projects/{project}/zones/{zone}/disks/{name}``. Only the positions of the
segments matter here; the literal segments are not checked and the provider
rejects coordinates that do not exist.
"""

from __future__ import annotations

from dataclasses import dataclass

# Segment positions within a volume handle
PROJECT_INDEX = 1
LOCATION_INDEX = 3
NAME_INDEX = 5
MIN_SEGMENTS = NAME_INDEX + 1


class MalformedVolumeHandleError(Exception):
    """Raised when a volume handle has too few segments."""

    pass


@dataclass(frozen=True)
class VolumeHandle:
    """Provider coordinates of a persistent disk."""

    project: str
    location: str
    name: str

    def __str__(self) -> str:
        return f"projects/{self.project}/zones/{self.location}/disks/{self.name}"


def parse_volume_id(volume_id: str) -> VolumeHandle:
    """Split a volume handle into project, location and disk name.

    Extra trailing segments are ignored and empty segments are passed
    through as empty strings.

    Raises:
        MalformedVolumeHandleError: If the handle has fewer than six segments.
    """
    parts = volume_id.split("/")
    if len(parts) < MIN_SEGMENTS:
        raise MalformedVolumeHandleError(f"invalid volume handle format: {volume_id!r}")
    return VolumeHandle(
        project=parts[PROJECT_INDEX],
        location=parts[LOCATION_INDEX],
        name=parts[NAME_INDEX],
    )
