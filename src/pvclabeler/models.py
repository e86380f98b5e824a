"""Pydantic models for label request documents.

A request document lists label changes to apply to disks, one entry per
volume handle. The models validate the YAML at the boundary; label content
itself is left raw and sanitized later by the reconciler.
"""

from __future__ import annotations

from typing import Annotated, Any

from pydantic import BaseModel, Field, field_validator


def _as_label_text(value: Any) -> str:
    # YAML turns unquoted values like `true` or `3` into non-strings
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


class LabelRequest(BaseModel):
    """Label changes for a single disk.

    Example:
        volumeHandle: projects/my-project/zones/us-central1-a/disks/pvc-1234
        storageClass: standard-rwo
        labels:
          app.kubernetes.io/name: web
        removeKeys:
          - team
    """

    model_config = {"extra": "ignore", "populate_by_name": True}

    volume_handle: Annotated[str, Field(min_length=1, alias="volumeHandle")]
    storage_class: str = Field("", alias="storageClass")
    labels: dict[str, str] = Field(default_factory=dict)
    remove_keys: list[str] = Field(default_factory=list, alias="removeKeys")

    @field_validator("labels", mode="before")
    @classmethod
    def coerce_label_values(cls, v: Any) -> Any:
        if v is None:
            return {}
        if isinstance(v, dict):
            return {_as_label_text(key): _as_label_text(value) for key, value in v.items()}
        return v

    @field_validator("remove_keys", mode="before")
    @classmethod
    def coerce_remove_keys(cls, v: Any) -> Any:
        if v is None:
            return []
        if isinstance(v, list):
            return [_as_label_text(key) for key in v]
        return v


class LabelRequestFile(BaseModel):
    """A document holding any number of label requests."""

    model_config = {"extra": "ignore"}

    requests: list[LabelRequest] = Field(default_factory=list)
