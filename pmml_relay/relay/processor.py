"""ScoringRelay -- routes flow records through a PMML scoring service.

Per record:
  1. Ensure the configured PMML model is registered (once per configuration)
  2. Detect JSON or CSV mode from the record's MIME type attribute
  3. POST the payload to the model's evaluation endpoint
  4. Merge the result (attributes in JSON mode, payload in CSV mode)
  5. Route to ``success``, ``failure`` or ``model-failure``

The host drives the relay through ``configure`` / ``on_configuration_changed``
and ``process``.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from pmml_relay.config.defaults import ROUTING_DEFAULTS, SERVICE_DEFAULTS
from pmml_relay.config.schema import RelayConfig
from pmml_relay.relay.client import ScoringServiceClient
from pmml_relay.relay.codec import (
    ContentKind,
    detect_content_kind,
    extract_result_attributes,
    normalize_service_url,
    validate_pmml,
)
from pmml_relay.relay.errors import (
    ConfigurationError,
    ModelRegistrationError,
    ScoringError,
)
from pmml_relay.relay.record import Outcome, Record
from pmml_relay.relay.registration import ModelRegistration, RegisteredModel

logger = logging.getLogger(__name__)

SERVICE_URL_PROPERTY = "service_url"
PMML_PROPERTY = "pmml"


# ---------------------------------------------------------------------------
# Relay stats
# ---------------------------------------------------------------------------

@dataclass
class RelayStats:
    """Counts of processed records by outcome."""

    started_at: str = field(default_factory=lambda: datetime.now().isoformat())
    outcomes: dict[str, int] = field(
        default_factory=lambda: {outcome.value: 0 for outcome in Outcome}
    )
    registrations: int = 0
    last_error: str | None = None
    _lock: threading.Lock = field(
        default_factory=threading.Lock, repr=False, compare=False
    )

    def record(self, outcome: Outcome, error: str | None = None) -> None:
        with self._lock:
            self.outcomes[outcome.value] += 1
            if error:
                self.last_error = error

    def registered(self) -> None:
        with self._lock:
            self.registrations += 1

    @property
    def processed(self) -> int:
        return sum(self.outcomes.values())

    def to_dict(self) -> dict[str, Any]:
        return {
            "started_at": self.started_at,
            "processed": self.processed,
            "outcomes": dict(self.outcomes),
            "registrations": self.registrations,
            "last_error": self.last_error,
        }


# ---------------------------------------------------------------------------
# Relay
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class _Settings:
    service_url: str
    pmml: str


def _validate(service_url: str | None, pmml: str | None) -> _Settings:
    return _Settings(normalize_service_url(service_url), validate_pmml(pmml))


class ScoringRelay:
    """Relay records to a scoring service and route them by outcome.

    Usage::

        relay = ScoringRelay()
        relay.configure("http://localhost:8080/openscoring", pmml_text)

        for record in records:
            outcome = relay.process(record)
            host.transfer(record, outcome)
    """

    def __init__(
        self,
        client: ScoringServiceClient | None = None,
        registration: ModelRegistration | None = None,
        mime_attribute: str = ROUTING_DEFAULTS["mime_attribute"],
        csv_mime_type: str = ROUTING_DEFAULTS["csv_mime_type"],
        remove_stale_models: bool = SERVICE_DEFAULTS["remove_stale_models"],
    ):
        self.client = client or ScoringServiceClient()
        self.registration = registration or ModelRegistration()
        self.mime_attribute = mime_attribute
        self.csv_mime_type = csv_mime_type
        self.remove_stale_models = remove_stale_models
        self.stats = RelayStats()
        self._properties: dict[str, str] = {SERVICE_URL_PROPERTY: "", PMML_PROPERTY: ""}
        self._settings: _Settings | None = None
        self._config_lock = threading.Lock()

    @classmethod
    def from_config(
        cls,
        config: RelayConfig,
        client: ScoringServiceClient | None = None,
    ) -> "ScoringRelay":
        """Build and configure a relay from a loaded ``RelayConfig``.

        Raises:
            ConfigurationError: if the service URL or PMML is invalid
        """
        relay = cls(
            client=client or ScoringServiceClient(timeout=config.service.timeout),
            mime_attribute=config.routing.mime_attribute,
            csv_mime_type=config.routing.csv_mime_type,
            remove_stale_models=config.service.remove_stale_models,
        )
        try:
            pmml = config.model.load_pmml()
        except OSError as e:
            raise ConfigurationError(
                f"Could not read PMML file: {e}", pmml_path=config.model.pmml_path
            ) from e
        relay.configure(config.service.url, pmml)
        return relay

    # ------------------------------------------------------------------
    # Configuration
    # ------------------------------------------------------------------

    @property
    def configured(self) -> bool:
        return self._settings is not None

    @property
    def service_url(self) -> str | None:
        settings = self._settings
        return settings.service_url if settings else None

    def configure(self, service_url: str, pmml: str) -> None:
        """Validate and apply a (service URL, PMML) configuration.

        Invalidates the cached model identifier when either value changed.

        Raises:
            ConfigurationError: on an empty or malformed URL, or empty PMML
        """
        settings = _validate(service_url, pmml)
        with self._config_lock:
            changed = self._settings != settings
            self._properties = {SERVICE_URL_PROPERTY: service_url, PMML_PROPERTY: pmml}
            self._settings = settings
            superseded = self.registration.reset() if changed else None
        self._discard(superseded)

    def on_configuration_changed(
        self, name: str, old_value: str | None, new_value: str | None
    ) -> None:
        """Host notification that a single property was modified.

        A change to ``service_url`` or ``pmml`` resets the registration.
        Validation is deferred to the next record so the host may update
        properties one at a time; other property names are ignored.
        """
        if name not in (SERVICE_URL_PROPERTY, PMML_PROPERTY):
            return
        if old_value == new_value:
            return

        with self._config_lock:
            self._properties[name] = new_value or ""
            try:
                self._settings = _validate(
                    self._properties[SERVICE_URL_PROPERTY],
                    self._properties[PMML_PROPERTY],
                )
            except ConfigurationError as e:
                logger.debug("Configuration incomplete after %s change: %s", name, e)
                self._settings = None
            superseded = self.registration.reset()

        logger.info("Property %s changed; model registration reset", name)
        self._discard(superseded)

    def _discard(self, model: RegisteredModel | None) -> None:
        if model is not None and self.remove_stale_models:
            self.client.remove_model(model.service_url, model.model_id)

    def _snapshot(self) -> tuple[_Settings, int]:
        """Settings and the registration epoch they belong to, read together.

        Raises:
            ConfigurationError: if the current properties do not validate
        """
        with self._config_lock:
            settings = self._settings
            properties = dict(self._properties)
            epoch = self.registration.epoch
        if settings is None:
            settings = _validate(
                properties[SERVICE_URL_PROPERTY], properties[PMML_PROPERTY]
            )
        return settings, epoch

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def ensure_model_registered(self) -> RegisteredModel:
        """Register the configured PMML model unless already registered.

        Raises:
            ConfigurationError: if the relay has not been configured
            ModelRegistrationError: if the scoring service rejects the model
        """
        settings, epoch = self._snapshot()

        def register(service_url: str, model_id: str) -> None:
            self.client.register_model(service_url, model_id, settings.pmml)
            self.stats.registered()

        return self.registration.ensure(settings.service_url, register, epoch)

    def score(self, record: Record, model: RegisteredModel | None = None) -> Record:
        """Submit a record for scoring and merge the result into it.

        Raises:
            ScoringError: on transport failure, non-2xx status or a
                malformed response
        """
        if model is None:
            model = self.registration.current
        if model is None:
            raise ScoringError("No model registered for scoring")

        kind = detect_content_kind(
            record.get_attribute(self.mime_attribute), self.csv_mime_type
        )
        logger.debug("Scoring %d byte(s) as %s with model %s",
                     len(record.payload), kind.value, model.model_id)

        if kind is ContentKind.CSV:
            record.payload = self.client.evaluate_csv(
                model.service_url, model.model_id, record.payload
            )
        else:
            document = self.client.evaluate_json(
                model.service_url, model.model_id, record.payload
            )
            attributes = extract_result_attributes(document)
            if attributes:
                record.put_all_attributes(attributes)
        return record

    def process(self, record: Record) -> Outcome:
        """Score one record and return the outcome it should be routed to.

        Registration and scoring failures are recovered here: the record is
        penalized and routed to ``model-failure`` or ``failure``.

        Raises:
            ConfigurationError: if the relay has not been configured
        """
        try:
            model = self.ensure_model_registered()
        except ModelRegistrationError as e:
            logger.error("Failure to register model: %s", e)
            record.penalize()
            self.stats.record(Outcome.MODEL_FAILURE, str(e))
            return Outcome.MODEL_FAILURE

        try:
            self.score(record, model)
        except ScoringError as e:
            logger.error("Failure to score record: %s", e)
            record.penalize()
            self.stats.record(Outcome.FAILURE, str(e))
            return Outcome.FAILURE
        finally:
            if not model.cached and self.remove_stale_models:
                self.client.remove_model(model.service_url, model.model_id)

        self.stats.record(Outcome.SUCCESS)
        return Outcome.SUCCESS

    def close(self) -> None:
        """Release the HTTP session, removing the current model if configured to."""
        current = self.registration.current
        if current is not None and self.remove_stale_models:
            self.client.remove_model(current.service_url, current.model_id)
        self.client.close()

    def __enter__(self) -> "ScoringRelay":
        return self

    def __exit__(self, *args) -> None:
        self.close()
