"""Pydantic models for pmml-relay.yaml validation."""

from __future__ import annotations

from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, field_validator, model_validator

from pmml_relay.config.defaults import ROUTING_DEFAULTS, SERVICE_DEFAULTS


# ---------------------------------------------------------------------------
# Scoring Service Config
# ---------------------------------------------------------------------------

class ServiceConfig(BaseModel):
    url: str = ""
    timeout: float = Field(default=SERVICE_DEFAULTS["timeout"], gt=0)
    remove_stale_models: bool = SERVICE_DEFAULTS["remove_stale_models"]

    @field_validator("url")
    @classmethod
    def strip_url(cls, v: str) -> str:
        return v.strip()


# ---------------------------------------------------------------------------
# Model Config
# ---------------------------------------------------------------------------

class ModelConfig(BaseModel):
    pmml: str = ""
    """Inline PMML document."""

    pmml_path: str = ""
    """Path to a PMML file, used when ``pmml`` is empty. The loader resolves a
    relative path against the config file's directory."""

    def load_pmml(self) -> str:
        """Return the PMML text, reading ``pmml_path`` if no inline text is set.

        Returns an empty string when neither is configured, so that the
        relay rejects the configuration with a proper error.
        """
        if self.pmml.strip():
            return self.pmml
        if self.pmml_path:
            path = Path(self.pmml_path).expanduser()
            return path.read_text(encoding="utf-8")
        return ""


# ---------------------------------------------------------------------------
# Routing Config
# ---------------------------------------------------------------------------

class RoutingConfig(BaseModel):
    mime_attribute: str = ROUTING_DEFAULTS["mime_attribute"]
    csv_mime_type: str = ROUTING_DEFAULTS["csv_mime_type"]

    @field_validator("mime_attribute", "csv_mime_type")
    @classmethod
    def not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("must not be blank")
        return v.strip()


# ---------------------------------------------------------------------------
# Top-Level Config
# ---------------------------------------------------------------------------

class RelayConfig(BaseModel):
    """Root configuration model for the scoring relay."""

    version: int = 1
    service: ServiceConfig = Field(default_factory=ServiceConfig)
    model: ModelConfig = Field(default_factory=ModelConfig)
    routing: RoutingConfig = Field(default_factory=RoutingConfig)

    @model_validator(mode="before")
    @classmethod
    def coerce_none_to_defaults(cls, data: Any) -> Any:
        """YAML parses empty keys as None. Coerce to proper defaults."""
        if isinstance(data, dict):
            for key in ("service", "model", "routing"):
                if key in data and data[key] is None:
                    data[key] = {}
        return data
