"""Content-kind detection, endpoint layout, and result merging.

Pure functions with no network access. The processor composes them around
the HTTP client.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any
from urllib.parse import urlparse

from pmml_relay.config.defaults import (
    ALLOWED_URL_SCHEMES,
    CONTENT_TYPES,
    CSV_SUFFIX,
    MODEL_PATH,
    RESULT_KEY,
)
from pmml_relay.relay.errors import ConfigurationError, ScoringError

logger = logging.getLogger(__name__)


class ContentKind(str, Enum):
    JSON = "json"
    CSV = "csv"

    @property
    def content_type(self) -> str:
        """Request Content-Type used when submitting a payload of this kind."""
        return CONTENT_TYPES[self.value]


# ---------------------------------------------------------------------------
# Configuration checks
# ---------------------------------------------------------------------------

def normalize_service_url(url: str | None) -> str:
    """Validate a scoring service base URL and strip trailing slashes.

    Raises
    ------
    ConfigurationError
        If the URL is empty, lacks a host, or is not http(s).
    """
    if url is None or not url.strip():
        raise ConfigurationError("Scoring service URL must not be empty")

    url = url.strip()
    parsed = urlparse(url)
    if parsed.scheme.lower() not in ALLOWED_URL_SCHEMES or not parsed.netloc:
        raise ConfigurationError(
            f"Scoring service URL is not a valid http(s) URL: {url}",
            service_url=url,
        )
    return url.rstrip("/")


def validate_pmml(pmml: str | None) -> str:
    """Reject an empty PMML definition."""
    if pmml is None or not pmml.strip():
        raise ConfigurationError("PMML definition must not be empty")
    return pmml


# ---------------------------------------------------------------------------
# Content kind and endpoints
# ---------------------------------------------------------------------------

def detect_content_kind(mime_type: str | None, csv_mime_type: str = "text/csv") -> ContentKind:
    """Map a record's declared MIME type to a scoring mode.

    Only the media type is compared (case-insensitive), so
    ``text/csv; charset=utf-8`` selects CSV mode. Anything else, including
    a missing attribute, selects JSON mode.
    """
    if not mime_type:
        return ContentKind.JSON
    media_type = mime_type.split(";", 1)[0].strip().lower()
    if media_type == csv_mime_type.strip().lower():
        return ContentKind.CSV
    return ContentKind.JSON


def model_url(service_url: str, model_id: str) -> str:
    """Endpoint for registering, scoring (JSON), or removing a model."""
    return service_url + MODEL_PATH.format(model_id=model_id)


def scoring_url(service_url: str, model_id: str, kind: ContentKind) -> str:
    url = model_url(service_url, model_id)
    if kind is ContentKind.CSV:
        url += CSV_SUFFIX
    return url


# ---------------------------------------------------------------------------
# Result merging
# ---------------------------------------------------------------------------

def stringify_scalar(value: Any) -> str:
    """Render a JSON scalar the way it appears on the wire.

    Booleans become ``true``/``false``; numbers and strings use ``str``.
    """
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def extract_result_attributes(document: Any) -> dict[str, str]:
    """Flatten the ``result`` object of a JSON scoring response.

    Parameters
    ----------
    document : Any
        Parsed response body.

    Returns
    -------
    dict[str, str]
        One entry per non-null scalar field, stringified. Null fields are
        dropped.

    Raises
    ------
    ScoringError
        If the body is not an object, has no ``result`` object, or a result
        field is a nested object or array.
    """
    if not isinstance(document, dict):
        raise ScoringError("Scoring response is not a JSON object")

    result = document.get(RESULT_KEY)
    if not isinstance(result, dict):
        raise ScoringError(f"Scoring response has no '{RESULT_KEY}' object")

    attributes: dict[str, str] = {}
    for key, value in result.items():
        if value is None:
            continue
        if isinstance(value, (dict, list)):
            raise ScoringError(
                f"Scoring result field '{key}' is not a scalar",
                field=key,
            )
        attributes[key] = stringify_scalar(value)

    logger.debug("Extracted %d result attribute(s)", len(attributes))
    return attributes
