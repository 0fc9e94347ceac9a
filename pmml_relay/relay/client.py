"""
Scoring Service Client
======================

Thin HTTP client for an Openscoring-compatible PMML scoring service.

Usage:
    client = ScoringServiceClient(timeout=30)

    client.register_model("http://localhost:8080/openscoring", model_id, pmml)
    fields = client.evaluate_json(url, model_id, b'{"sepal_length": 5.1}')
    body = client.evaluate_csv(url, model_id, b"sepal_length,...\\n5.1,...")

Transport failures and non-2xx responses surface as
``ModelRegistrationError`` for registration and ``ScoringError`` for
evaluation, with the target URL and status code in ``details``.
"""

from __future__ import annotations

import logging
from typing import Any

import requests

from pmml_relay.config.defaults import CONTENT_TYPES, SERVICE_DEFAULTS
from pmml_relay.relay.codec import ContentKind, model_url, scoring_url
from pmml_relay.relay.errors import ModelRegistrationError, ScoringError

logger = logging.getLogger(__name__)


def _is_success(resp: requests.Response) -> bool:
    return 200 <= resp.status_code < 300


class ScoringServiceClient:
    """
    Client for the model registration and evaluation endpoints.

    One instance owns one ``requests.Session`` (and its connection pool),
    which is safe to share between threads for these simple calls.
    """

    def __init__(
        self,
        timeout: float = SERVICE_DEFAULTS["timeout"],
        session: requests.Session | None = None,
    ):
        self.timeout = timeout
        self._session = session or requests.Session()

    # ------------------------------------------------------------------
    # Model lifecycle
    # ------------------------------------------------------------------

    def register_model(self, service_url: str, model_id: str, pmml: str) -> None:
        """PUT a PMML document under ``model_id``.

        Raises:
            ModelRegistrationError: on transport failure or non-2xx status
        """
        url = model_url(service_url, model_id)
        logger.info("Registering model %s at %s", model_id, url)

        try:
            resp = self._session.put(
                url,
                data=pmml.encode("utf-8"),
                headers={"Content-Type": f"{CONTENT_TYPES['pmml']}; charset=utf-8"},
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise ModelRegistrationError(
                f"Could not reach scoring service: {e}", url=url
            ) from e

        if not _is_success(resp):
            raise ModelRegistrationError(
                f"Scoring service returned {resp.status_code} for model registration",
                url=url,
                status_code=resp.status_code,
            )

    def remove_model(self, service_url: str, model_id: str) -> bool:
        """DELETE a registered model. Never raises.

        Returns:
            True if the service acknowledged the removal
        """
        url = model_url(service_url, model_id)
        try:
            resp = self._session.delete(url, timeout=self.timeout)
        except requests.RequestException as e:
            logger.warning("Failed to remove model %s: %s", model_id, e)
            return False

        if not _is_success(resp):
            logger.warning(
                "Scoring service returned %d removing model %s",
                resp.status_code,
                model_id,
            )
            return False

        logger.info("Removed model %s", model_id)
        return True

    # ------------------------------------------------------------------
    # Evaluation
    # ------------------------------------------------------------------

    def evaluate(
        self,
        service_url: str,
        model_id: str,
        payload: bytes,
        kind: ContentKind,
    ) -> requests.Response:
        """POST a record payload to the evaluation endpoint for ``kind``.

        Raises:
            ScoringError: on transport failure or non-2xx status
        """
        url = scoring_url(service_url, model_id, kind)
        try:
            resp = self._session.post(
                url,
                data=payload,
                headers={"Content-Type": kind.content_type},
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise ScoringError(f"Could not reach scoring service: {e}", url=url) from e

        if not _is_success(resp):
            raise ScoringError(
                f"Scoring service returned {resp.status_code}",
                url=url,
                status_code=resp.status_code,
            )
        return resp

    def evaluate_json(self, service_url: str, model_id: str, payload: bytes) -> Any:
        """Score a JSON payload and return the parsed response document."""
        resp = self.evaluate(service_url, model_id, payload, ContentKind.JSON)
        try:
            return resp.json()
        except ValueError as e:
            raise ScoringError(
                f"Scoring response is not valid JSON: {e}",
                url=resp.url,
            ) from e

    def evaluate_csv(self, service_url: str, model_id: str, payload: bytes) -> bytes:
        """Score a CSV payload and return the raw response body."""
        resp = self.evaluate(service_url, model_id, payload, ContentKind.CSV)
        return resp.content

    def close(self) -> None:
        self._session.close()

    def __enter__(self) -> "ScoringServiceClient":
        return self

    def __exit__(self, *args) -> None:
        self.close()
