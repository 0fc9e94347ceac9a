"""Scoring relay: model registration, record scoring, and routing.

Public API:
  ScoringRelay         -- Configure once, then ``process(record) -> Outcome``
  Record / Outcome     -- Host-side record and routing relationship
  ScoringServiceClient -- HTTP client for the scoring service
  ModelRegistration    -- Cached model identifier with its state machine
"""

from pmml_relay.relay.client import ScoringServiceClient
from pmml_relay.relay.errors import (
    ConfigurationError,
    ModelRegistrationError,
    RelayError,
    ScoringError,
)
from pmml_relay.relay.processor import RelayStats, ScoringRelay
from pmml_relay.relay.record import Outcome, Record
from pmml_relay.relay.registration import ModelRegistration, RegistrationState

__all__ = [
    "ConfigurationError",
    "ModelRegistration",
    "ModelRegistrationError",
    "Outcome",
    "Record",
    "RegistrationState",
    "RelayError",
    "RelayStats",
    "ScoringError",
    "ScoringRelay",
    "ScoringServiceClient",
]
