import dataclasses
import hashlib
import json
from datetime import date
from typing import Any


def hash_payload(value: Any) -> str:
    """
    Return a stable SHA-256 hash for a profile, spending snapshot or any other payload.

    Dataclass instances are flattened with `dataclasses.asdict`, dates use ISO
    format, and everything else is serialized as sorted-key JSON before hashing so
    logs can correlate identical inputs without exposing them.
    """

    if value is None:
        normalized = b"null"
    elif isinstance(value, bytes):
        normalized = value
    elif isinstance(value, str):
        normalized = value.encode("utf-8")
    else:
        if dataclasses.is_dataclass(value) and not isinstance(value, type):
            value = dataclasses.asdict(value)
        normalized = json.dumps(value, sort_keys=True, default=_json_default).encode("utf-8")

    return hashlib.sha256(normalized).hexdigest()


def _json_default(value: Any) -> Any:
    if isinstance(value, date):
        return value.isoformat()
    return repr(value)
