"""Tests for key namespacing."""

import pytest

from endb.errors import EndbTypeError
from endb.namespace import (
    SEPARATOR,
    matches_namespace,
    namespace_prefix,
    redis_namespace_set,
    strip_namespace,
    validate_key,
    wrap,
)


class TestWrap:
    """Tests for physical key construction."""

    def test_wrap_joins_with_separator(self) -> None:
        """Physical key is namespace + ':' + key."""
        assert SEPARATOR == ":"
        assert wrap("users", "foo") == "users:foo"

    def test_wrap_integer_key(self) -> None:
        """Integer keys are rendered as text."""
        assert wrap("endb", 42) == "endb:42"

    def test_wrap_does_not_escape(self) -> None:
        """Keys are concatenated as-is."""
        assert wrap("a", "b:c") == "a:b:c"

    def test_namespace_prefix(self) -> None:
        assert namespace_prefix("endb") == "endb:"


class TestMatchesAndStrip:
    """Tests for namespace filtering."""

    def test_matches_own_namespace(self) -> None:
        assert matches_namespace("a:k", "a") is True

    def test_does_not_match_other_namespace(self) -> None:
        """A namespace that is a prefix of another must not match it."""
        assert matches_namespace("b:k", "a") is False
        assert matches_namespace("ab:k", "a") is False

    def test_strip_namespace(self) -> None:
        assert strip_namespace("users:foo", "users") == "foo"
        assert strip_namespace("users:a:b", "users") == "a:b"

    def test_strip_foreign_key_raises(self) -> None:
        with pytest.raises(ValueError):
            strip_namespace("other:foo", "users")

    def test_redis_namespace_set(self) -> None:
        """Side set name follows the namespace:<ns> convention."""
        assert redis_namespace_set("endb") == "namespace:endb"

    def test_redis_namespace_set_shares_key_space(self) -> None:
        """The side set of "users" is key "users" of the "namespace" namespace."""
        assert redis_namespace_set("users") == wrap("namespace", "users")
        assert matches_namespace(redis_namespace_set("users"), "namespace")


class TestValidateKey:
    """Keys are text or integers only."""

    @pytest.mark.parametrize("key", ["foo", "", 0, 123, -5])
    def test_accepts_text_and_integers(self, key: object) -> None:
        assert validate_key(key) == key

    @pytest.mark.parametrize("key", [None, True, 1.5, b"foo", ["k"], {"k": 1}])
    def test_rejects_other_types(self, key: object) -> None:
        with pytest.raises(EndbTypeError) as exc_info:
            validate_key(key)
        assert exc_info.value.code == "type_error"
        assert isinstance(exc_info.value, TypeError)
