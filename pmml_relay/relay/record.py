"""Record and routing outcome types shared between the relay and its host."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class Outcome(str, Enum):
    """Named relationship a processed record is routed to."""

    SUCCESS = "success"
    FAILURE = "failure"
    MODEL_FAILURE = "model-failure"


@dataclass
class Record:
    """A unit of flow data: opaque payload plus string metadata.

    Owned by the host. The relay mutates ``attributes``, may replace
    ``payload``, and sets ``penalized`` when the host should back off
    before retrying the record.
    """

    payload: bytes = b""
    attributes: dict[str, str] = field(default_factory=dict)
    penalized: bool = False

    def get_attribute(self, name: str) -> str | None:
        return self.attributes.get(name)

    def put_all_attributes(self, values: dict[str, str]) -> None:
        self.attributes.update(values)

    def penalize(self) -> None:
        self.penalized = True
