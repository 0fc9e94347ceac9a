"""Configuration loading, validation, and defaults."""

from pmml_relay.config.loader import load_config
from pmml_relay.config.schema import RelayConfig

__all__ = ["load_config", "RelayConfig"]
