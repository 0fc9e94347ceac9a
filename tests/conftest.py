"""Shared test fixtures for pmml-relay.

Provides a small Iris PMML model, JSON and CSV payloads, canned scoring
service responses, and a relay wired to a mocked ``requests.Session``.
"""

from __future__ import annotations

import itertools
import json
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from pmml_relay.relay.client import ScoringServiceClient
from pmml_relay.relay.processor import ScoringRelay
from pmml_relay.relay.registration import ModelRegistration

SERVICE_URL = "http://localhost:8080/openscoring"

IRIS_PMML = """<?xml version="1.0" encoding="UTF-8"?>
<PMML xmlns="http://www.dmg.org/PMML-4_3" version="4.3">
  <Header description="Iris decision tree"/>
  <DataDictionary numberOfFields="5">
    <DataField name="sepal_length" optype="continuous" dataType="double"/>
    <DataField name="sepal_width" optype="continuous" dataType="double"/>
    <DataField name="petal_length" optype="continuous" dataType="double"/>
    <DataField name="petal_width" optype="continuous" dataType="double"/>
    <DataField name="class" optype="categorical" dataType="string">
      <Value value="Iris-setosa"/>
      <Value value="Iris-versicolor"/>
      <Value value="Iris-virginica"/>
    </DataField>
  </DataDictionary>
  <TreeModel functionName="classification" splitCharacteristic="binarySplit">
    <MiningSchema>
      <MiningField name="sepal_length"/>
      <MiningField name="sepal_width"/>
      <MiningField name="petal_length"/>
      <MiningField name="petal_width"/>
      <MiningField name="class" usageType="target"/>
    </MiningSchema>
    <Node score="Iris-setosa">
      <True/>
      <Node score="Iris-setosa">
        <SimplePredicate field="petal_length" operator="lessThan" value="2.45"/>
      </Node>
      <Node score="Iris-versicolor">
        <SimplePredicate field="petal_width" operator="lessThan" value="1.75"/>
      </Node>
      <Node score="Iris-virginica">
        <True/>
      </Node>
    </Node>
  </TreeModel>
</PMML>
"""

IRIS_CSV = (
    b"sepal_length,sepal_width,petal_length,petal_width\n"
    b"5.1,3.5,1.4,0.2\n"
)

IRIS_CSV_SCORED = (
    b"sepal_length,sepal_width,petal_length,petal_width,class\n"
    b"5.1,3.5,1.4,0.2,Iris-setosa\n"
)

IRIS_JSON = json.dumps({
    "arguments": {
        "sepal_length": 5.1,
        "sepal_width": 3.5,
        "petal_length": 1.4,
        "petal_width": 0.2,
    }
}).encode("utf-8")


# ---------------------------------------------------------------------------
# Response helpers
# ---------------------------------------------------------------------------

def make_response(
    status_code: int = 200,
    json_body=None,
    content: bytes = b"",
    url: str = "",
) -> MagicMock:
    """Build a mock ``requests.Response``."""
    resp = MagicMock()
    resp.status_code = status_code
    resp.url = url
    if json_body is None:
        resp.json.side_effect = ValueError("Expecting value: line 1 column 1 (char 0)")
        resp.content = content
    else:
        resp.json.return_value = json_body
        resp.content = json.dumps(json_body).encode("utf-8")
    return resp


def iris_result(**extra) -> dict:
    """JSON scoring response for the Iris model."""
    result = {
        "class": "Iris-setosa",
        "probability(Iris-setosa)": 1.0,
        "probability(Iris-versicolor)": 0.0,
    }
    result.update(extra)
    return {"id": "ignored", "result": result}


def sequential_ids(prefix: str = "model"):
    """Deterministic model id factory: model-1, model-2, ..."""
    counter = itertools.count(1)
    return lambda: f"{prefix}-{next(counter)}"


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def session() -> MagicMock:
    """Mock requests.Session: PUT/DELETE succeed, POST returns an Iris result."""
    s = MagicMock()
    s.put.return_value = make_response(201)
    s.delete.return_value = make_response(200)
    s.post.return_value = make_response(200, json_body=iris_result())
    return s


@pytest.fixture
def client(session) -> ScoringServiceClient:
    return ScoringServiceClient(timeout=5, session=session)


@pytest.fixture
def relay(client) -> ScoringRelay:
    """Relay configured against SERVICE_URL with the Iris model."""
    r = ScoringRelay(
        client=client,
        registration=ModelRegistration(id_factory=sequential_ids()),
    )
    r.configure(SERVICE_URL, IRIS_PMML)
    return r


@pytest.fixture
def pmml_file(tmp_path: Path) -> Path:
    path = tmp_path / "iris.pmml"
    path.write_text(IRIS_PMML)
    return path
