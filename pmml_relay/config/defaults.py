"""Default values and wire constants for the scoring relay.

The endpoint layout and content types follow the Openscoring REST API.
"""

# ---------------------------------------------------------------------------
# Scoring service
# ---------------------------------------------------------------------------
SERVICE_DEFAULTS = {
    "timeout": 30.0,             # seconds, per HTTP call
    "remove_stale_models": False,
}

MODEL_PATH = "/model/{model_id}"
CSV_SUFFIX = "/csv"

CONTENT_TYPES = {
    "pmml": "text/xml",
    "json": "application/json",
    "csv": "text/plain",
}

# ---------------------------------------------------------------------------
# Record routing
# ---------------------------------------------------------------------------
ROUTING_DEFAULTS = {
    "mime_attribute": "mime.type",
    "csv_mime_type": "text/csv",
}

# Key under which the scoring service nests its outputs in JSON mode
RESULT_KEY = "result"

ALLOWED_URL_SCHEMES = ("http", "https")
