"""Value codec for text-only transports.

This module converts arbitrary values into JSON text and back. Byte payloads
survive the round trip by being tagged as ``":base64:<data>"`` strings; any
user string that itself starts with the ``":"`` sentinel is escaped with an
extra sentinel so it can never be mistaken for tagged binary.

Example:
    >>> text = encode({"avatar": b"\\x89PNG", "name": ":root"})
    >>> decode(text)
    {'avatar': b'\\x89PNG', 'name': ':root'}
"""

import base64
import binascii
import json
from typing import Any, Callable, Protocol, Union

from endb.errors import EndbSerializationError

SENTINEL = ":"
BINARY_TAG = ":base64:"


class _Absent:
    """Marker for "no value", distinct from a stored ``None``."""

    _instance = None

    def __new__(cls) -> "_Absent":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "ABSENT"

    def __reduce__(self) -> str:
        return "ABSENT"


ABSENT = _Absent()

EncodedValue = Union[str, _Absent]


class Codec(Protocol):
    """Encode values to transport text and decode them back.

    Implementations must be symmetric: ``decode(encode(v)) == v``.
    """

    def encode(self, value: Any) -> EncodedValue: ...

    def decode(self, text: Any) -> Any: ...


def _to_wire(value: Any) -> Any:
    if isinstance(value, (bytes, bytearray, memoryview)):
        return BINARY_TAG + base64.b64encode(bytes(value)).decode("ascii")
    if isinstance(value, str):
        return SENTINEL + value if value.startswith(SENTINEL) else value
    if isinstance(value, dict):
        return {key: _to_wire(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_to_wire(item) for item in value]
    if hasattr(value, "model_dump"):
        return _to_wire(value.model_dump(mode="json"))
    return value


def _from_wire(value: Any) -> Any:
    if isinstance(value, str):
        if value.startswith(BINARY_TAG):
            try:
                return base64.b64decode(value[len(BINARY_TAG) :], validate=True)
            except (binascii.Error, ValueError) as exc:
                raise EndbSerializationError(f"Corrupt binary payload: {exc}") from exc
        if value.startswith(SENTINEL):
            return value[len(SENTINEL) :]
        return value
    if isinstance(value, dict):
        return {key: _from_wire(item) for key, item in value.items()}
    if isinstance(value, list):
        return [_from_wire(item) for item in value]
    return value


def encode(value: Any) -> EncodedValue:
    """Encode a value into JSON text.

    Args:
        value: Any JSON-compatible value, byte buffer, or pydantic model

    Returns:
        Encoded text, or ``ABSENT`` when ``value`` is ``ABSENT``

    Raises:
        EndbSerializationError: If the value cannot be represented as JSON
    """
    if value is ABSENT:
        return ABSENT
    try:
        return json.dumps(_to_wire(value), separators=(",", ":"))
    except (TypeError, ValueError) as exc:
        raise EndbSerializationError(
            f"Value of type {type(value).__name__} cannot be encoded: {exc}"
        ) from exc


def decode(text: Any) -> Any:
    """Decode text produced by :func:`encode`.

    Args:
        text: Encoded text (``str`` or UTF-8 ``bytes``), ``None`` or ``ABSENT``

    Returns:
        The original value, or ``ABSENT`` for a missing record

    Raises:
        EndbSerializationError: If the text is not valid encoded data
    """
    if text is ABSENT or text is None:
        return ABSENT
    try:
        raw = json.loads(text)
    except (TypeError, ValueError) as exc:
        raise EndbSerializationError(f"Stored value is not valid JSON: {exc}") from exc
    return _from_wire(raw)


class JsonCodec:
    """Default codec: JSON with tagged base64 binaries."""

    def encode(self, value: Any) -> EncodedValue:
        return encode(value)

    def decode(self, text: Any) -> Any:
        return decode(text)


class CallableCodec:
    """Codec built from caller supplied ``serialize``/``deserialize`` callables.

    ``ABSENT`` is handled here and never passed to the callables. Exceptions
    raised by the callables are reported as serialization errors.
    """

    def __init__(
        self,
        serialize: Callable[[Any], str],
        deserialize: Callable[[Any], Any],
    ) -> None:
        self._serialize = serialize
        self._deserialize = deserialize

    def encode(self, value: Any) -> EncodedValue:
        if value is ABSENT:
            return ABSENT
        try:
            return self._serialize(value)
        except EndbSerializationError:
            raise
        except Exception as exc:
            raise EndbSerializationError(f"Custom serializer failed: {exc}") from exc

    def decode(self, text: Any) -> Any:
        if text is ABSENT or text is None:
            return ABSENT
        try:
            return self._deserialize(text)
        except EndbSerializationError:
            raise
        except Exception as exc:
            raise EndbSerializationError(f"Custom deserializer failed: {exc}") from exc
