"""
GeoCache Record Encoding

Records are written to the store as canonical JSON so that identical
records always produce identical bytes, whichever replica wrote them.

- Object keys sorted lexicographically
- Compact separators, no whitespace
- UTF-8 without escaping non-ASCII text
- Arrays keep their order (visitor and report logs are append-ordered)
"""

import json
from typing import Any, Dict, Union


def canonicalize(obj: Any) -> bytes:
    """Encode a JSON-compatible value as canonical UTF-8 JSON bytes."""
    canonical = _canonicalize_value(obj)
    return json.dumps(canonical, separators=(',', ':'), ensure_ascii=False).encode('utf-8')


def decode(data: Union[bytes, str]) -> Any:
    """
    Parse stored bytes back into plain JSON values.

    Raises:
        ValueError: bytes are not UTF-8 or not JSON
    """
    if isinstance(data, (bytes, bytearray)):
        data = bytes(data).decode('utf-8')
    return json.loads(data)


def _canonicalize_value(value: Any) -> Any:
    if value is None or isinstance(value, (bool, int, float, str)):
        return value
    elif isinstance(value, dict):
        return _canonicalize_object(value)
    elif isinstance(value, (list, tuple)):
        return [_canonicalize_value(item) for item in value]
    else:
        raise ValueError(f"Cannot canonicalize type: {type(value)}")


def _canonicalize_object(obj: Dict[str, Any]) -> Dict[str, Any]:
    for k in obj:
        if not isinstance(k, str):
            raise ValueError(f"Object keys must be strings, got {type(k)}")
    return {k: _canonicalize_value(obj[k]) for k in sorted(obj.keys())}
