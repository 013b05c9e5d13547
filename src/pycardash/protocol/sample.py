"""Sensor line parsing.

Two record formats are accepted, tried in order:

1. a JSON object with keys ``temp``, ``hum``, ``pres``, ``volt``,
   ``c1``, ``c2`` (all optional);
2. positional comma-separated values
   ``temperature,humidity,pressure,voltage[,custom1[,custom2]]`` with at
   least four fields.
"""

from __future__ import annotations

import json
import logging

from pycardash._logfmt import preview_for_log
from pycardash.models.sample import SensorSample
from pycardash.normalize import float_or_default

_logger = logging.getLogger(__name__)

MIN_POSITIONAL_FIELDS = 4
_POSITIONAL_FIELDS: tuple[str, ...] = ("temperature", "humidity", "pressure", "voltage", "custom1", "custom2")


def _parse_structured(line: str) -> SensorSample | None:
    try:
        data = json.loads(line)
    except json.JSONDecodeError:
        return None
    if not isinstance(data, dict):
        return None
    return SensorSample.model_validate(data)


def _parse_positional(line: str) -> SensorSample | None:
    parts = line.split(",")
    if len(parts) < MIN_POSITIONAL_FIELDS:
        return None
    values = {name: float_or_default(part) for name, part in zip(_POSITIONAL_FIELDS, parts, strict=False)}
    return SensorSample.model_validate(values)


def parse_sample(line: str) -> SensorSample | None:
    """Parse one sensor record.

    Returns ``None`` for empty lines and for lines that match neither
    format; this is not an error, the line is simply skipped.
    """
    stripped = line.strip()
    if not stripped:
        return None

    sample = _parse_structured(stripped)
    if sample is not None:
        return sample

    sample = _parse_positional(stripped)
    if sample is None:
        _logger.debug("Ignoring unrecognised sensor line %s", preview_for_log(stripped))
    return sample
