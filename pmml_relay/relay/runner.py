"""File runner -- drives a ScoringRelay over files on disk.

Each input file becomes one Record (payload = file content, attributes =
``filename`` and ``mime.type``). Processed records are optionally written
to ``<output_dir>/<outcome>/`` with a ``.attributes.json`` sidecar, which
stands in for a flow host's relationship queues. Inputs sharing a basename
within one run are written as ``name-1.ext``, ``name-2.ext``, ...
"""

from __future__ import annotations

import json
import logging
import mimetypes
from dataclasses import dataclass, field
from pathlib import Path

from pmml_relay.config.defaults import ROUTING_DEFAULTS
from pmml_relay.relay.processor import ScoringRelay
from pmml_relay.relay.record import Outcome, Record

logger = logging.getLogger(__name__)

FILENAME_ATTRIBUTE = "filename"
ATTRIBUTES_SUFFIX = ".attributes.json"


@dataclass
class RunResult:
    """Result of relaying a batch of files."""
    routed: dict[str, list[str]] = field(
        default_factory=lambda: {outcome.value: [] for outcome in Outcome}
    )
    records: dict[str, Record] = field(default_factory=dict)
    """input path (as given) → processed Record."""
    errors: list[str] = field(default_factory=list)

    @property
    def n_processed(self) -> int:
        return sum(len(files) for files in self.routed.values())

    @property
    def n_failed(self) -> int:
        return self.n_processed - len(self.routed[Outcome.SUCCESS.value])


def load_record(
    path: str | Path,
    mime_type: str | None = None,
    mime_attribute: str = ROUTING_DEFAULTS["mime_attribute"],
) -> Record:
    """Read a file into a Record.

    Parameters
    ----------
    path : str | Path
        File to read.
    mime_type : str | None
        Explicit MIME type. If None, guessed from the file extension and
        left unset when unknown.
    mime_attribute : str
        Attribute name the MIME type is stored under.
    """
    p = Path(path)
    attributes = {FILENAME_ATTRIBUTE: p.name}
    if mime_type is None:
        mime_type, _ = mimetypes.guess_type(p.name)
    if mime_type:
        attributes[mime_attribute] = mime_type
    return Record(payload=p.read_bytes(), attributes=attributes)


def _unique_name(name: str, taken: set[str]) -> str:
    """Return ``name``, or ``stem-N.suffix`` if ``name`` is already taken."""
    candidate = name
    n = 0
    while candidate in taken:
        n += 1
        p = Path(name)
        candidate = f"{p.stem}-{n}{p.suffix}"
    taken.add(candidate)
    return candidate


def write_record(
    record: Record,
    outcome: Outcome,
    output_dir: str | Path,
    name: str | None = None,
) -> Path:
    """Write a processed record under ``output_dir/<outcome>/``.

    ``name`` defaults to the record's ``filename`` attribute.

    Returns
    -------
    Path
        Path of the written payload file.
    """
    target_dir = Path(output_dir) / outcome.value
    target_dir.mkdir(parents=True, exist_ok=True)

    name = name or record.get_attribute(FILENAME_ATTRIBUTE) or "record"
    payload_path = target_dir / name
    payload_path.write_bytes(record.payload)

    sidecar = target_dir / f"{name}{ATTRIBUTES_SUFFIX}"
    sidecar.write_text(json.dumps(
        {"attributes": record.attributes, "penalized": record.penalized},
        indent=2,
        sort_keys=True,
    ))
    return payload_path


def run_files(
    relay: ScoringRelay,
    paths: list[str | Path],
    output_dir: str | Path | None = None,
    mime_type: str | None = None,
) -> RunResult:
    """Relay each file in order and route it by outcome.

    Parameters
    ----------
    relay : ScoringRelay
        A configured relay.
    paths : list[str | Path]
        Input files.
    output_dir : str | Path | None
        Where routed records are written. Nothing is written when None.
    mime_type : str | None
        MIME type applied to every file; guessed per file when None.

    Returns
    -------
    RunResult
        Input paths (as given) routed per outcome. Unreadable files are reported in
        ``errors`` and skipped.
    """
    result = RunResult()
    written: set[str] = set()

    for path in paths:
        p = Path(path)
        try:
            record = load_record(p, mime_type, relay.mime_attribute)
        except OSError as e:
            logger.error("Could not read %s: %s", p, e)
            result.errors.append(f"{p}: {e}")
            continue

        outcome = relay.process(record)
        key = str(path)
        result.routed[outcome.value].append(key)
        result.records[key] = record
        logger.debug("%s -> %s", key, outcome.value)

        if output_dir is not None:
            write_record(record, outcome, output_dir, _unique_name(p.name, written))

    logger.info(
        "Relayed %d file(s): %d succeeded, %d failed",
        result.n_processed,
        len(result.routed[Outcome.SUCCESS.value]),
        result.n_failed,
    )
    return result
