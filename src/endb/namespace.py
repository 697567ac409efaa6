"""Namespacing of logical keys onto a shared physical store.

A physical key is always ``namespace + ":" + str(key)``. Keys are not
escaped: namespaces and keys must not contain the separator in a way that
makes two different pairs produce the same physical key.

On Redis the members of each namespace are tracked in a side set named
``namespace:<ns>``. That name is itself the physical key of ``<ns>``
inside a namespace literally called ``namespace``, so a caller using that
namespace must not store keys that equal another namespace name.
"""

from typing import Union

from endb.errors import EndbTypeError

SEPARATOR = ":"

Key = Union[str, int]


def validate_key(key: object) -> Key:
    """Check that a logical key is text or an integer.

    Args:
        key: Caller supplied key

    Returns:
        The key unchanged

    Raises:
        EndbTypeError: If the key is not a ``str`` or ``int`` (``bool`` included)
    """
    if isinstance(key, bool) or not isinstance(key, (str, int)):
        raise EndbTypeError(f"Key must be a string or number, got {type(key).__name__}")
    return key


def namespace_prefix(namespace: str) -> str:
    return f"{namespace}{SEPARATOR}"


def wrap(namespace: str, key: Key) -> str:
    """Build the physical key for ``key`` inside ``namespace``."""
    return f"{namespace_prefix(namespace)}{key}"


def matches_namespace(physical_key: str, namespace: str) -> bool:
    return physical_key.startswith(namespace_prefix(namespace))


def strip_namespace(physical_key: str, namespace: str) -> str:
    """Recover the logical key from a physical key.

    Raises:
        ValueError: If ``physical_key`` does not belong to ``namespace``
    """
    prefix = namespace_prefix(namespace)
    if not physical_key.startswith(prefix):
        raise ValueError(f"Key '{physical_key}' is not in namespace '{namespace}'")
    return physical_key[len(prefix) :]


def redis_namespace_set(namespace: str) -> str:
    """Name of the side set tracking the members of ``namespace``."""
    return f"namespace{SEPARATOR}{namespace}"
