"""Tests for the scoring service client -- wire protocol and error mapping."""

from __future__ import annotations

from unittest.mock import MagicMock, patch

import pytest
import requests

from conftest import IRIS_CSV, IRIS_CSV_SCORED, IRIS_JSON, IRIS_PMML, SERVICE_URL, make_response

from pmml_relay.relay.client import ScoringServiceClient
from pmml_relay.relay.errors import ModelRegistrationError, ScoringError

# ---------------------------------------------------------------------------
# Tests: register_model
# ---------------------------------------------------------------------------

class TestRegisterModel:
    def test_puts_pmml_under_model_id(self, client, session):
        client.register_model(SERVICE_URL, "abc", IRIS_PMML)

        session.put.assert_called_once()
        args, kwargs = session.put.call_args
        assert args[0] == f"{SERVICE_URL}/model/abc"
        assert kwargs["data"] == IRIS_PMML.encode("utf-8")
        assert kwargs["headers"]["Content-Type"].startswith("text/xml")
        assert kwargs["timeout"] == 5

    def test_non_success_status_raises(self, client, session):
        session.put.return_value = make_response(500)

        with pytest.raises(ModelRegistrationError) as exc:
            client.register_model(SERVICE_URL, "abc", IRIS_PMML)

        assert exc.value.details["status_code"] == 500
        assert exc.value.details["url"] == f"{SERVICE_URL}/model/abc"

    def test_transport_error_raises(self, client, session):
        session.put.side_effect = requests.ConnectionError("refused")

        with pytest.raises(ModelRegistrationError) as exc:
            client.register_model(SERVICE_URL, "abc", IRIS_PMML)

        assert isinstance(exc.value.__cause__, requests.ConnectionError)

    def test_any_2xx_is_success(self, client, session):
        session.put.return_value = make_response(204)
        client.register_model(SERVICE_URL, "abc", IRIS_PMML)


# ---------------------------------------------------------------------------
# Tests: evaluation
# ---------------------------------------------------------------------------

class TestEvaluate:
    def test_json_posts_to_model_endpoint(self, client, session):
        document = client.evaluate_json(SERVICE_URL, "abc", IRIS_JSON)

        args, kwargs = session.post.call_args
        assert args[0] == f"{SERVICE_URL}/model/abc"
        assert kwargs["data"] == IRIS_JSON
        assert kwargs["headers"] == {"Content-Type": "application/json"}
        assert document["result"]["class"] == "Iris-setosa"

    def test_csv_posts_to_csv_endpoint(self, client, session):
        session.post.return_value = make_response(200, content=IRIS_CSV_SCORED)

        body = client.evaluate_csv(SERVICE_URL, "abc", IRIS_CSV)

        args, kwargs = session.post.call_args
        assert args[0] == f"{SERVICE_URL}/model/abc/csv"
        assert kwargs["headers"] == {"Content-Type": "text/plain"}
        assert body == IRIS_CSV_SCORED

    def test_invalid_json_raises_scoring_error(self, client, session):
        session.post.return_value = make_response(200, content=b"<html>")

        with pytest.raises(ScoringError):
            client.evaluate_json(SERVICE_URL, "abc", IRIS_JSON)

    def test_not_found_raises_scoring_error(self, client, session):
        session.post.return_value = make_response(404)

        with pytest.raises(ScoringError) as exc:
            client.evaluate_csv(SERVICE_URL, "abc", IRIS_CSV)

        assert exc.value.details["status_code"] == 404

    def test_timeout_raises_scoring_error(self, client, session):
        session.post.side_effect = requests.Timeout("read timed out")

        with pytest.raises(ScoringError):
            client.evaluate_json(SERVICE_URL, "abc", IRIS_JSON)


# ---------------------------------------------------------------------------
# Tests: remove_model / lifecycle
# ---------------------------------------------------------------------------

class TestRemoveModel:
    def test_deletes_model(self, client, session):
        assert client.remove_model(SERVICE_URL, "abc") is True
        assert session.delete.call_args[0][0] == f"{SERVICE_URL}/model/abc"

    def test_returns_false_on_error_status(self, client, session):
        session.delete.return_value = make_response(404)
        assert client.remove_model(SERVICE_URL, "abc") is False

    def test_never_raises_on_transport_error(self, client, session):
        session.delete.side_effect = requests.ConnectionError("refused")
        assert client.remove_model(SERVICE_URL, "abc") is False


class TestClientLifecycle:
    def test_creates_own_session(self):
        with patch("pmml_relay.relay.client.requests.Session") as session_cls:
            client = ScoringServiceClient()
            client.close()

        session_cls.assert_called_once()
        session_cls.return_value.close.assert_called_once()

    def test_context_manager_closes(self):
        session = MagicMock()
        with ScoringServiceClient(session=session):
            pass
        session.close.assert_called_once()
