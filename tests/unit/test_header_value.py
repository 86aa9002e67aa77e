"""
Unit tests for structured header value decoding.
"""

import dataclasses

import pytest

from headerscan.errors import NotAStructuredField, TooManyPositionalParameters
from headerscan.header.value import HeaderFieldValue, positional_key


class TestAsStructured:
    """Tests for HeaderFieldValue.as_structured()."""

    def test_content_type_with_parameters(self):
        """Test the media type plus quoted parameters."""
        value = HeaderFieldValue(b'text/plain; size="1024909"; name="wololo.txt"')

        assert value.as_structured() == {
            b"\x00": b"text/plain",
            b"size": b'"1024909"',
            b"name": b'"wololo.txt"',
        }

    def test_not_structured(self):
        """Test that a value without '=' is rejected."""
        value = HeaderFieldValue(b"Wed, 2 Apr 2025 14:15:19 +0900")

        with pytest.raises(NotAStructuredField):
            value.as_structured()

        assert value.is_structured is False

    def test_empty_value_not_structured(self):
        """Test that an empty value is not structured."""
        with pytest.raises(NotAStructuredField):
            HeaderFieldValue(b"").as_structured()

    def test_single_parameter(self):
        """Test a value that is one key=value pair."""
        assert HeaderFieldValue(b"charset=utf-8").as_structured() == {
            b"charset": b"utf-8",
        }

    def test_split_on_first_equals(self):
        """Test that '=' inside a parameter value is kept."""
        value = HeaderFieldValue(b"multipart/mixed; boundary=a=b=c")

        assert value.as_structured()[b"boundary"] == b"a=b=c"

    def test_keyless_segments_numbered(self):
        """Test positional keys counting only keyless segments."""
        value = HeaderFieldValue(b"first; a=1; second;\tthird")

        assert value.as_structured() == {
            b"\x00": b"first",
            b"a": b"1",
            b"\x01": b"second",
            b"\x02": b"third",
        }

    def test_whitespace_only_skipped_after_separator(self):
        """Test that only whitespace following ';' is trimmed."""
        value = HeaderFieldValue(b" lead ; k = v ")

        assert value.as_structured() == {
            b"\x00": b" lead ",
            b"k ": b" v ",
        }

    def test_trailing_separator(self):
        """Test that a trailing ';' adds no empty parameter."""
        value = HeaderFieldValue(b"attachment; filename=a.txt;  ")

        assert value.as_structured() == {
            b"\x00": b"attachment",
            b"filename": b"a.txt",
        }

    def test_empty_middle_segment(self):
        """Test that an empty segment between separators is kept."""
        value = HeaderFieldValue(b"a=1;;b=2")

        assert value.as_structured() == {b"a": b"1", b"\x00": b"", b"b": b"2"}

    def test_duplicate_key_last_wins(self):
        """Test that a repeated key keeps the later value."""
        value = HeaderFieldValue(b"k=1; k=2")

        assert value.as_structured() == {b"k": b"2"}

    def test_positional_key_collides_with_textual_key(self):
        """Test the known collision between a textual and a positional key."""
        value = HeaderFieldValue(b"\x00=textual; positional")

        assert value.as_structured() == {b"\x00": b"positional"}

    def test_memoized(self):
        """Test that the mapping is computed once and reused."""
        value = HeaderFieldValue(b"a; b=c")

        first = value.as_structured()
        second = value.as_structured()

        assert first is second

    def test_unstructured_normalized_to_bytes(self):
        """Test that a bytearray value is stored as bytes."""
        value = HeaderFieldValue(bytearray(b"x=y"))

        assert isinstance(value.unstructured, bytes)
        assert bytes(value) == b"x=y"

    def test_equality_ignores_cache(self):
        """Test that decoding does not change equality."""
        decoded = HeaderFieldValue(b"a=b")
        decoded.as_structured()

        assert decoded == HeaderFieldValue(b"a=b")

    def test_256_keyless_segments(self):
        """Test that every positional key up to b"\\xff" can be used."""
        value = HeaderFieldValue(b";".join([b"x"] * 256) + b"; k=v")

        parameters = value.as_structured()

        assert parameters[b"\xff"] == b"x"
        assert len(parameters) == 257

    def test_too_many_keyless_segments(self):
        """Test that a 257th keyless segment raises a parse error."""
        value = HeaderFieldValue(b";".join([b"x"] * 257) + b"; k=v")

        with pytest.raises(TooManyPositionalParameters) as exc_info:
            value.as_structured()

        assert exc_info.value.limit == 256


class TestImmutability:
    """Tests for HeaderFieldValue immutability."""

    def test_unstructured_cannot_be_reassigned(self):
        """Test that the raw value is frozen."""
        value = HeaderFieldValue(b"a=1")
        value.as_structured()

        with pytest.raises(dataclasses.FrozenInstanceError):
            value.unstructured = b"b=2"

        assert value.as_structured() == {b"a": b"1"}

    def test_cache_not_injectable(self):
        """Test that the decoded mapping is not a constructor argument."""
        with pytest.raises(TypeError):
            HeaderFieldValue(b"a=1", {b"a": b"forged"})


def test_positional_key():
    """Test the synthetic key encoding."""
    assert positional_key(0) == b"\x00"
    assert positional_key(2) == b"\x02"
