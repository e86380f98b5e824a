"""Label request file loading with validation.

File size is checked before reading and the content is validated with the
request models before any disk is touched.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from .config import MAX_REQUEST_FILE_SIZE_BYTES
from .models import LabelRequest, LabelRequestFile

logger = logging.getLogger(__name__)


class RequestLoadError(Exception):
    """Raised when request loading or validation fails."""

    pass


def _extract_requests_document(raw_data: Any, path: Path) -> dict[str, Any]:
    """Normalize the accepted document shapes to ``{"requests": [...]}``.

    Accepted shapes:
    - ``{"requests": [...]}``
    - Kubernetes-style ``{"apiVersion", "kind", "spec": {"requests": [...]}}``
    - a bare list of requests
    - a single request mapping
    """
    if isinstance(raw_data, list):
        return {"requests": raw_data}

    if not isinstance(raw_data, dict):
        raise RequestLoadError(f"Request file must contain a YAML mapping or list: {path}")

    if "apiVersion" in raw_data and "spec" in raw_data:
        raw_data = raw_data.get("spec")
        if not isinstance(raw_data, dict):
            raise RequestLoadError(f"Spec section must be a mapping: {path}")

    if "requests" in raw_data:
        return raw_data

    return {"requests": [raw_data]}


def load_requests(path: Path) -> list[LabelRequest]:
    """Load and validate label requests from YAML.

    Args:
        path: Request file to read.

    Returns:
        Validated label requests in file order.

    Raises:
        RequestLoadError: If the file cannot be loaded or fails validation.
    """
    if not path.exists():
        raise RequestLoadError(f"Request file not found: {path}")

    try:
        file_size = path.stat().st_size
    except OSError as e:
        raise RequestLoadError(f"Failed to stat request file {path}: {e}") from e

    if file_size > MAX_REQUEST_FILE_SIZE_BYTES:
        raise RequestLoadError(
            f"Request file exceeds maximum size of {MAX_REQUEST_FILE_SIZE_BYTES} bytes: {path}"
        )

    try:
        content = path.read_text(encoding="utf-8")
    except OSError as e:
        raise RequestLoadError(f"Failed to read request file {path}: {e}") from e

    try:
        raw_data = yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise RequestLoadError(f"Invalid YAML in {path}: {e}") from e

    if raw_data is None:
        raise RequestLoadError(f"Request file is empty: {path}")

    document = _extract_requests_document(raw_data, path)

    try:
        request_file = LabelRequestFile.model_validate(document)
    except ValidationError as e:
        # Format Pydantic validation errors for readability
        errors = []
        for error in e.errors():
            loc = ".".join(str(x) for x in error["loc"])
            msg = error["msg"]
            errors.append(f"  - {loc}: {msg}")

        error_list = "\n".join(errors)
        raise RequestLoadError(f"Validation failed for {path}:\n{error_list}") from e

    logger.info("Loaded %d label request(s) from %s", len(request_file.requests), path)
    return request_file.requests
