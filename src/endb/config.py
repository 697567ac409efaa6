"""Connection descriptor and option handling.

This module provides the immutable options model that selects and
configures a backend adapter, plus helpers to build it from keyword
arguments or from environment variables.
"""

import os
import re
from typing import Any, Callable, Optional

from dotenv import find_dotenv, load_dotenv
from pydantic import (
    AliasChoices,
    BaseModel,
    Field,
    StrictBool,
    StrictInt,
    StrictStr,
    ValidationError,
    field_validator,
    model_validator,
)

from endb.errors import EndbTypeError

_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


class EndbOptions(BaseModel):
    """Connection descriptor for an Endb instance.

    Attributes:
        uri: Connection string, ``<scheme>://<credentials>@<host>/<path-or-db>``
        namespace: Logical partition label prefixed to every key
        adapter: Explicit adapter name, bypassing scheme detection
            (also accepted as ``dialect``)
        table: Relational table name
        collection: Document-store collection name
        key_size: Maximum key length used for the SQL ``VARCHAR`` column
            (also accepted as ``keySize``)
        timeout: Lock wait timeout in milliseconds for file-based stores
        wal: Whether SQLite file databases use write-ahead logging
        max_entries: Bound for the default in-memory store, evicting the
            least recently used key when full (None means unbounded)
        serialize: Custom value encoder, paired with ``deserialize``
        deserialize: Custom value decoder, paired with ``serialize``
        store: A ``MutableMapping`` or adapter instance to use directly

    Example:
        >>> options = EndbOptions(uri="sqlite://data/cache.db", namespace="users")
        >>> options.scheme
        'sqlite'
    """

    uri: Optional[StrictStr] = Field(default=None, description="Connection string")
    namespace: StrictStr = Field(default="endb", min_length=1, description="Key namespace")
    adapter: Optional[StrictStr] = Field(
        default=None,
        validation_alias=AliasChoices("adapter", "dialect"),
        description="Explicit adapter family",
    )
    table: StrictStr = Field(default="endb", description="Relational table name")
    collection: StrictStr = Field(default="endb", min_length=1, description="Collection name")
    key_size: StrictInt = Field(
        default=255,
        ge=1,
        le=65535,
        validation_alias=AliasChoices("key_size", "keySize"),
        description="Maximum key length for SQL backends",
    )
    timeout: StrictInt = Field(default=5000, ge=0, description="Lock wait timeout (ms)")
    wal: StrictBool = Field(default=True, description="Use WAL journaling for SQLite files")
    max_entries: Optional[StrictInt] = Field(
        default=None, ge=1, description="LRU bound for the default memory store"
    )
    serialize: Optional[Callable[[Any], Any]] = Field(default=None, repr=False)
    deserialize: Optional[Callable[[Any], Any]] = Field(default=None, repr=False)
    store: Any = Field(default=None, repr=False, description="Mapping or adapter instance")

    @field_validator("table")
    @classmethod
    def validate_table(cls, value: str) -> str:
        """Validate the table name is a plain SQL identifier.

        Raises:
            ValueError: If the name contains anything but letters, digits and ``_``
        """
        if not _IDENTIFIER.match(value):
            raise ValueError(f"table must be a plain identifier, got '{value}'")
        return value

    @model_validator(mode="after")
    def validate_serializers(self) -> "EndbOptions":
        """Validate serialize and deserialize are supplied together."""
        if (self.serialize is None) != (self.deserialize is None):
            raise ValueError("serialize and deserialize must be provided together")
        return self

    @property
    def scheme(self) -> Optional[str]:
        """Adapter family named by the URI, or None without a URI."""
        if not self.uri:
            return None
        return self.uri.split(":", 1)[0].lower()

    @property
    def adapter_name(self) -> Optional[str]:
        name = self.adapter or self.scheme
        return name.lower() if name else None

    class Config:
        """Pydantic config."""

        frozen = True
        extra = "forbid"
        populate_by_name = True


def build_options(uri: Optional[str] = None, **options: Any) -> EndbOptions:
    """Build validated options from a URI and keyword arguments.

    Args:
        uri: Optional connection string
        **options: Any ``EndbOptions`` field (``dialect``/``keySize`` aliases accepted)

    Returns:
        Frozen EndbOptions

    Raises:
        EndbTypeError: If any option has the wrong type or value
    """
    if uri is not None:
        options["uri"] = uri
    try:
        return EndbOptions(**options)
    except ValidationError as exc:
        first = exc.errors()[0]
        field = ".".join(str(part) for part in first["loc"]) or None
        raise EndbTypeError(first["msg"], field=field) from exc


def load_options_from_env(env_file: Optional[str] = None, **overrides: Any) -> EndbOptions:
    """Load options from environment variables.

    Automatically loads variables from a .env file if present.

    Reads:
    - ENDB_URI: Connection string
    - ENDB_NAMESPACE: Key namespace
    - ENDB_ADAPTER: Explicit adapter family
    - ENDB_TABLE: Relational table name
    - ENDB_COLLECTION: Document-store collection name
    - ENDB_KEY_SIZE: Maximum SQL key length
    - ENDB_TIMEOUT_MS: Lock wait timeout in milliseconds
    - ENDB_WAL: Use WAL journaling for SQLite (true/false)
    - ENDB_MAX_ENTRIES: LRU bound for the default memory store

    Args:
        env_file: Path of the .env file; defaults to the nearest one above the cwd
        **overrides: Options taking precedence over the environment

    Returns:
        EndbOptions built from the environment

    Example:
        >>> import os
        >>> os.environ["ENDB_URI"] = "redis://localhost:6379"
        >>> load_options_from_env().scheme
        'redis'
    """
    load_dotenv(env_file or find_dotenv(usecwd=True))

    options: dict[str, Any] = {}
    for env_name, field in (
        ("ENDB_URI", "uri"),
        ("ENDB_NAMESPACE", "namespace"),
        ("ENDB_ADAPTER", "adapter"),
        ("ENDB_TABLE", "table"),
        ("ENDB_COLLECTION", "collection"),
    ):
        value = os.getenv(env_name)
        if value:
            options[field] = value

    try:
        if os.getenv("ENDB_KEY_SIZE"):
            options["key_size"] = int(os.environ["ENDB_KEY_SIZE"])
        if os.getenv("ENDB_TIMEOUT_MS"):
            options["timeout"] = int(os.environ["ENDB_TIMEOUT_MS"])
        if os.getenv("ENDB_MAX_ENTRIES"):
            options["max_entries"] = int(os.environ["ENDB_MAX_ENTRIES"])
    except ValueError as exc:
        raise EndbTypeError(f"expected an integer: {exc}") from exc

    wal = os.getenv("ENDB_WAL")
    if wal:
        options["wal"] = wal.lower() in ("true", "1", "yes")

    options.update(overrides)
    return build_options(**options)
