"""JSON encoding of the active investigation and the history list.

Encoding is lossless for every valid Investigation. Decoding raises
PersistenceDecodeFailure for anything that is not a valid document; the
store turns that into "absent" / "empty". History is decoded per entry, so
one bad entry does not cost the rest of the list.
"""

import json
import logging
from typing import List

from pydantic import TypeAdapter, ValidationError

from fm_investigation_lib.models import Investigation, PersistenceDecodeFailure

logger = logging.getLogger(__name__)

_history_adapter = TypeAdapter(List[Investigation])


def encode_investigation(investigation: Investigation) -> str:
    return investigation.model_dump_json(by_alias=True)


def decode_investigation(raw: str, key: str = "active") -> Investigation:
    try:
        return Investigation.model_validate_json(raw)
    except (ValidationError, ValueError, TypeError) as e:
        raise PersistenceDecodeFailure(key, str(e)) from e


def encode_history(history: List[Investigation]) -> str:
    return _history_adapter.dump_json(history, by_alias=True).decode("utf-8")


def decode_history(raw: str, key: str = "history") -> List[Investigation]:
    """Decode a stored history list, skipping entries that fail validation.

    Raises:
        PersistenceDecodeFailure: If ``raw`` is not a JSON list
    """
    try:
        entries = json.loads(raw)
    except (ValueError, TypeError) as e:
        raise PersistenceDecodeFailure(key, str(e)) from e

    if not isinstance(entries, list):
        raise PersistenceDecodeFailure(key, f"expected a list, got {type(entries).__name__}")

    history: List[Investigation] = []
    for index, entry in enumerate(entries):
        try:
            history.append(Investigation.model_validate(entry))
        except ValidationError as e:
            logger.warning(
                f"Skipping invalid history entry {index} in '{key}': "
                f"{e.error_count()} validation error(s)"
            )
    return history
