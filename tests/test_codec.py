"""Tests for the value codec."""

import json

import pytest
from pydantic import BaseModel

from endb.codec import ABSENT, BINARY_TAG, CallableCodec, JsonCodec, decode, encode
from endb.errors import EndbSerializationError


class Profile(BaseModel):
    """Sample pydantic model."""

    id: int
    verified: bool


class TestRoundTrip:
    """decode(encode(v)) must equal v."""

    @pytest.mark.parametrize(
        "value",
        [
            {},
            [],
            "",
            0,
            -17,
            3.5,
            True,
            False,
            None,
            "bar",
            {"id": 1, "verified": True},
            {"nested": {"list": [1, "two", None, {"deep": [False]}]}},
            ["one", "two", 3, "four"],
        ],
    )
    def test_json_values_round_trip(self, value: object) -> None:
        """JSON-representable values should survive the round trip."""
        assert decode(encode(value)) == value

    def test_bytes_round_trip(self) -> None:
        """Byte buffers should come back as equal bytes."""
        payload = bytes(range(256))

        result = decode(encode(payload))

        assert isinstance(result, bytes)
        assert result == payload

    def test_empty_bytes_round_trip(self) -> None:
        """An empty byte buffer is still binary, not an empty string."""
        assert decode(encode(b"")) == b""

    def test_bytearray_and_memoryview_decode_as_bytes(self) -> None:
        """Other buffer types decode as bytes with the same content."""
        assert decode(encode(bytearray(b"abc"))) == b"abc"
        assert decode(encode(memoryview(b"xyz"))) == b"xyz"

    def test_nested_bytes_round_trip(self) -> None:
        """Binary payloads nested inside containers are tagged too."""
        value = {"avatar": b"\x89PNG\r\n", "chunks": [b"\x00", b"\xff"]}

        assert decode(encode(value)) == value

    def test_tuple_decodes_as_list(self) -> None:
        """Tuples are JSON arrays."""
        assert decode(encode((1, 2))) == [1, 2]

    def test_pydantic_model_encodes_as_dict(self) -> None:
        """Models are encoded through model_dump."""
        assert decode(encode(Profile(id=1, verified=True))) == {"id": 1, "verified": True}


class TestSentinelEscaping:
    """User strings must never be mistaken for tagged binary."""

    def test_binary_is_tagged(self) -> None:
        """Bytes encode as a base64-tagged JSON string."""
        assert json.loads(encode(b"hi")) == f"{BINARY_TAG}aGk="

    def test_string_with_sentinel_is_escaped(self) -> None:
        """A leading ':' gets an extra ':' in the encoded form."""
        assert json.loads(encode(":root")) == "::root"

    def test_string_that_looks_like_binary_stays_text(self) -> None:
        """A user string starting with the binary tag decodes as that string."""
        value = ":base64:aGk="

        result = decode(encode(value))

        assert result == value
        assert isinstance(result, str)

    def test_plain_colon_strings_round_trip(self) -> None:
        """Sentinel-only strings round-trip."""
        for value in (":", "::", "a:b", ":::x"):
            assert decode(encode(value)) == value


class TestAbsent:
    """ABSENT is distinct from None."""

    def test_encode_absent_is_absent(self) -> None:
        """Encoding no value yields the ABSENT marker, not text."""
        assert encode(ABSENT) is ABSENT

    def test_decode_absent_and_none(self) -> None:
        """Missing records decode to ABSENT."""
        assert decode(ABSENT) is ABSENT
        assert decode(None) is ABSENT

    def test_none_is_not_absent(self) -> None:
        """A stored null decodes to None."""
        assert encode(None) == "null"
        assert decode("null") is None

    def test_absent_is_falsy_singleton(self) -> None:
        """ABSENT is falsy and unique."""
        assert not ABSENT
        assert type(ABSENT)() is ABSENT
        assert repr(ABSENT) == "ABSENT"


class TestErrors:
    """Failures are serialization errors."""

    def test_decode_malformed_text_raises(self) -> None:
        """Malformed JSON is a corrupt record."""
        with pytest.raises(EndbSerializationError) as exc_info:
            decode("{not json")
        assert exc_info.value.code == "serialization_error"

    def test_decode_corrupt_base64_raises(self) -> None:
        """A tagged string with invalid base64 is corrupt."""
        with pytest.raises(EndbSerializationError):
            decode('":base64:***"')

    def test_encode_unsupported_value_raises(self) -> None:
        """Values JSON cannot represent are rejected."""
        with pytest.raises(EndbSerializationError):
            encode({1, 2, 3})


class TestCodecClasses:
    """Tests for JsonCodec and CallableCodec."""

    def test_json_codec_matches_functions(self) -> None:
        """JsonCodec delegates to encode/decode."""
        codec = JsonCodec()
        assert codec.encode({"a": b"b"}) == encode({"a": b"b"})
        assert codec.decode(codec.encode([1])) == [1]

    def test_callable_codec_uses_callables(self) -> None:
        """Custom callables replace the default format."""
        codec = CallableCodec(json.dumps, json.loads)

        assert codec.encode("bar") == '"bar"'
        assert codec.decode('"bar"') == "bar"

    def test_callable_codec_never_sees_absent(self) -> None:
        """ABSENT short-circuits before the callables."""

        def explode(value: object) -> str:
            raise AssertionError("called")

        codec = CallableCodec(explode, explode)

        assert codec.encode(ABSENT) is ABSENT
        assert codec.decode(ABSENT) is ABSENT

    def test_callable_codec_wraps_failures(self) -> None:
        """Exceptions from custom callables are serialization errors."""
        codec = CallableCodec(json.dumps, json.loads)

        with pytest.raises(EndbSerializationError):
            codec.decode("{oops")
