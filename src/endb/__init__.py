"""endb: a uniform async key-value façade over many storage backends.

Supported backends: in-memory mappings, SQLite, PostgreSQL, MySQL,
MongoDB and Redis. Each backend lives in ``endb.adapters`` and its driver
is only needed when that backend is used.
"""

from endb.adapters import ADAPTERS, AdapterState, BaseAdapter, register_adapter, resolve_adapter
from endb.codec import ABSENT, CallableCodec, Codec, JsonCodec, decode, encode
from endb.config import EndbOptions, build_options, load_options_from_env
from endb.database import Endb
from endb.errors import (
    EndbConnectionError,
    EndbDependencyError,
    EndbDestroyedError,
    EndbError,
    EndbNotReadyError,
    EndbOperationError,
    EndbSerializationError,
    EndbTypeError,
)

__version__ = "0.1.0"

__all__ = [
    "ABSENT",
    "ADAPTERS",
    "AdapterState",
    "BaseAdapter",
    "CallableCodec",
    "Codec",
    "Endb",
    "EndbConnectionError",
    "EndbDependencyError",
    "EndbDestroyedError",
    "EndbError",
    "EndbNotReadyError",
    "EndbOperationError",
    "EndbOptions",
    "EndbSerializationError",
    "EndbTypeError",
    "JsonCodec",
    "build_options",
    "decode",
    "encode",
    "load_options_from_env",
    "register_adapter",
    "resolve_adapter",
]
