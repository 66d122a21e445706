import json
import logging
from typing import Any, Optional
from uuid import UUID

logger = logging.getLogger("gangrate.tracker")


def _label_value(val: Any) -> Any:
    """Return a JSON-safe version of a label value, or raise TypeError."""
    if isinstance(val, UUID):
        return str(val)
    if isinstance(val, (set, frozenset, tuple)):
        return [_label_value(v) for v in sorted(val, key=str)]
    json.dumps(val)
    return val


def track(event: str, n: int = 1, value: Optional[float] = None, **labels: Any) -> None:
    """
    Emit a structured log event.

    In production the StructuredLogHandler formats the record as JSON for Cloud
    Logging; in development it is printed as a JSON string.

    Args:
        event: Event name (e.g. 'cost_cache_purge_failed')
        n: Count increment (default=1)
        value: Optional numeric value (e.g. a computed rating)
        **labels: Arbitrary key=value metadata. UUIDs and sets are converted,
            model instances are reduced to their id, anything else that cannot
            be serialized is dropped.

    Example:
        track("gang_rating_out_of_sync", gang_id=gang.id, stored=1200, computed=1150)
    """
    payload = {
        "event": event,
        "n": n,
    }
    if value is not None:
        payload["value"] = value

    if labels:
        filtered_labels = {}
        for key, val in labels.items():
            try:
                filtered_labels[key] = _label_value(val)
            except (TypeError, ValueError):
                if hasattr(val, "id"):
                    filtered_labels[key] = str(val.id)
                else:
                    logger.debug(
                        f"Dropping non-serializable label '{key}' with type {type(val).__name__} for event '{event}'"
                    )
        payload["labels"] = filtered_labels

    logger.info(json.dumps(payload))
