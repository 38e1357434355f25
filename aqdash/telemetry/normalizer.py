"""Normalization of ThingSpeak feed records into Samples.

A feed record maps `field1`..`field8` to string values plus a
`created_at` timestamp. Which field carries which metric is a channel
setting, so the caller passes the metric -> field index mapping in.
"""

import logging
import math
from typing import Any, Iterable, List, Mapping, Optional

from aqdash.shared.errors import DataShapeError
from aqdash.shared.models import METRIC_KEYS, Sample, parse_instant

logger = logging.getLogger(__name__)

TIMESTAMP_FIELD = "created_at"


def _parse_metric(raw: Any) -> Optional[float]:
    """Parse a field value, returning None when absent or not a finite number."""
    if raw is None:
        return None
    try:
        value = float(str(raw).strip())
    except (ValueError, TypeError):
        return None
    if not math.isfinite(value):
        return None
    return value


def normalize_record(record: Mapping[str, Any], field_mapping: Mapping[str, int]) -> Sample:
    """Convert one provider record into a Sample.

    Raises:
        DataShapeError: If the record is not a mapping or its timestamp is
            missing or unreadable.
    """
    if not isinstance(record, Mapping):
        raise DataShapeError(f"Feed record is not an object: {type(record).__name__}")

    timestamp = record.get(TIMESTAMP_FIELD)
    if not isinstance(timestamp, str) or not timestamp:
        raise DataShapeError(f"Feed record has no '{TIMESTAMP_FIELD}' value")
    try:
        parse_instant(timestamp)
    except ValueError:
        raise DataShapeError(f"Feed record has an unreadable timestamp: {timestamp!r}") from None

    values = {
        metric: _parse_metric(record.get(f"field{field_mapping[metric]}"))
        for metric in METRIC_KEYS
    }
    return Sample(timestamp=timestamp, **values)


def normalize_latest(record: Mapping[str, Any], field_mapping: Mapping[str, int]) -> Sample:
    """Normalize the single latest record.

    Unlike the batch path this never drops an empty Sample: the latest
    reading is always surfaced, even with no metric values.
    """
    return normalize_record(record, field_mapping)


def normalize_feed(records: Iterable[Any], field_mapping: Mapping[str, int]) -> List[Sample]:
    """Normalize a batch of feed records, dropping fully empty ones.

    Records with a bad shape are logged and skipped. Provider order is kept.
    """
    samples = []
    skipped = 0
    for record in records:
        try:
            sample = normalize_record(record, field_mapping)
        except DataShapeError as e:
            logger.warning(f"Skipping malformed feed record: {e}")
            continue
        if sample.is_empty():
            skipped += 1
            continue
        samples.append(sample)

    if skipped:
        logger.debug(f"Dropped {skipped} feed records with no metric values")
    return samples


def extract_feeds(payload: Any) -> List[Any]:
    """Pull the feed list out of a channel range response.

    Raises:
        DataShapeError: If the payload has no list under 'feeds'.
    """
    if not isinstance(payload, Mapping):
        raise DataShapeError(f"Range response is not an object: {type(payload).__name__}")
    feeds = payload.get("feeds")
    if feeds is None:
        raise DataShapeError("Range response has no 'feeds' key")
    if not isinstance(feeds, list):
        raise DataShapeError(f"'feeds' is not a list: {type(feeds).__name__}")
    return feeds
