"""
Relay Error Taxonomy
====================

Usage:
    from pmml_relay.relay.errors import ModelRegistrationError

    raise ModelRegistrationError(
        "Scoring service rejected model",
        url=url,
        status_code=resp.status_code,
    )

``ConfigurationError`` rejects a relay before any record is processed.
``ModelRegistrationError`` and ``ScoringError`` are recovered per record
and map to the ``model-failure`` and ``failure`` outcomes.
"""

from __future__ import annotations

from typing import Any


class RelayError(Exception):
    """Base relay error class."""

    def __init__(
        self,
        message: str,
        error_code: str = "RELAY_ERROR",
        details: dict[str, Any] | None = None,
    ):
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": self.__class__.__name__,
            "error_code": self.error_code,
            "message": self.message,
            "details": self.details,
        }


class ConfigurationError(RelayError):
    """Invalid service URL or PMML definition."""

    def __init__(self, message: str = "Invalid relay configuration", **details):
        super().__init__(
            message=message,
            error_code="CONFIGURATION_ERROR",
            details=details,
        )


class ModelRegistrationError(RelayError):
    """Transport failure or non-success status while registering a model."""

    def __init__(self, message: str = "Failed to register model", **details):
        super().__init__(
            message=message,
            error_code="MODEL_REGISTRATION_ERROR",
            details=details,
        )


class ScoringError(RelayError):
    """Transport failure, non-success status, or malformed scoring response."""

    def __init__(self, message: str = "Failed to score record", **details):
        super().__init__(
            message=message,
            error_code="SCORING_ERROR",
            details=details,
        )
