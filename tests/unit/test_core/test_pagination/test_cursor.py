"""Unit tests for continuation token encoding and payload parsing."""
from __future__ import annotations

import pytest

from cursor_pagination.core.exceptions import (
    FingerprintMismatchError,
    MalformedTokenError,
    TokenError,
)
from cursor_pagination.core.pagination.cursor import CursorState, TokenCodec

FP = "0123456789abcdef0123456789abcdef"


# ──────────────────────────────────────────────────────────────
# Test TokenCodec
# ──────────────────────────────────────────────────────────────


@pytest.mark.unit
class TestTokenCodec:
    """Tests for TokenCodec encode/decode."""

    def test_decode_reverses_encode(self):
        """Decoding an encoded payload should return the original payload."""
        codec = TokenCodec("s3cret")

        token = codec.encode(f"{FP}_42")

        assert codec.decode(token) == f"{FP}_42"

    def test_encode_is_deterministic(self):
        """Same secret and payload should always produce the same token."""
        payload = f"{FP}_42_age_20"

        assert TokenCodec("s3cret").encode(payload) == TokenCodec("s3cret").encode(payload)

    def test_different_payloads_give_different_tokens(self):
        """Distinct payloads should not collide."""
        codec = TokenCodec("s3cret")

        assert codec.encode(f"{FP}_1") != codec.encode(f"{FP}_2")

    def test_token_is_url_safe(self):
        """Tokens should only contain URL-safe base64 characters without padding."""
        codec = TokenCodec("s3cret")

        for i in range(50):
            token = codec.encode(f"{FP}_{i}_name_{'x' * i}")
            assert "=" not in token
            assert "+" not in token
            assert "/" not in token

    def test_token_does_not_leak_payload(self):
        """The plain payload should not be readable from the token."""
        token = TokenCodec("s3cret").encode(f"{FP}_42")

        assert FP not in token

    def test_accepts_bytes_secret(self):
        """A bytes secret should be equivalent to its UTF-8 string form."""
        payload = f"{FP}_7"

        assert TokenCodec(b"s3cret").encode(payload) == TokenCodec("s3cret").encode(payload)

    def test_empty_secret_rejected(self):
        """An empty secret should be refused at construction."""
        with pytest.raises(ValueError, match="must not be empty"):
            TokenCodec("")

    def test_encode_empty_payload_fails(self):
        """Encoding an empty payload should raise TokenError."""
        with pytest.raises(TokenError, match="Error encrypting token"):
            TokenCodec("s3cret").encode("")

    def test_decode_empty_token_fails(self):
        """Decoding an empty token should raise TokenError."""
        with pytest.raises(TokenError, match="Error decrypting token"):
            TokenCodec("s3cret").decode("")

    def test_decode_with_other_secret_fails(self):
        """A token from another secret should not decode."""
        token = TokenCodec("one").encode(f"{FP}_42")

        with pytest.raises(TokenError, match="Error decrypting token") as exc_info:
            TokenCodec("two").decode(token)

        assert exc_info.value.__cause__ is not None

    def test_decode_tampered_token_fails(self):
        """Changing any character inside the token should fail authentication."""
        codec = TokenCodec("s3cret")
        token = codec.encode(f"{FP}_42")
        replacement = "B" if token[5] == "A" else "A"
        tampered = token[:5] + replacement + token[6:]

        with pytest.raises(TokenError):
            codec.decode(tampered)

    def test_decode_truncated_token_fails(self):
        """A truncated token should not decode."""
        codec = TokenCodec("s3cret")
        token = codec.encode(f"{FP}_42")

        with pytest.raises(TokenError):
            codec.decode(token[:-4])

    def test_decode_invalid_characters_fails(self):
        """Characters outside the URL-safe alphabet should be rejected."""
        with pytest.raises(TokenError):
            TokenCodec("s3cret").decode("not a token!")


# ──────────────────────────────────────────────────────────────
# Test CursorState
# ──────────────────────────────────────────────────────────────


@pytest.mark.unit
class TestCursorState:
    """Tests for CursorState payload rendering and parsing."""

    def test_payload_without_sort(self):
        """Id-only cursors should render as two parts."""
        state = CursorState(fingerprint=FP, last_id="42")

        assert state.to_payload() == f"{FP}_42"
        assert state.is_sorted is False

    def test_payload_with_sort(self):
        """Sorted cursors should render as four parts."""
        state = CursorState(fingerprint=FP, last_id="42", sort_field="age", sort_value="20")

        assert state.to_payload() == f"{FP}_42_age_20"
        assert state.is_sorted is True

    def test_parse_two_parts(self):
        """A two part payload should parse into an id-only cursor."""
        state = CursorState.from_payload(f"{FP}_42", expected_fingerprint=FP)

        assert state == CursorState(fingerprint=FP, last_id="42")

    def test_parse_four_parts(self):
        """A four part payload should parse into a sorted cursor."""
        state = CursorState.from_payload(f"{FP}_42_age_20", expected_fingerprint=FP)

        assert state.sort_field == "age"
        assert state.sort_value == "20"
        assert state.last_id == "42"

    def test_separator_inside_values_is_escaped(self):
        """Values containing the separator should still parse back unchanged."""
        state = CursorState(
            fingerprint=FP,
            last_id="user_1",
            sort_field="last_name",
            sort_value="van_der_berg 100%",
        )

        payload = state.to_payload()

        assert len(payload.split("_")) == 4
        assert CursorState.from_payload(payload, expected_fingerprint=FP) == state

    def test_fingerprint_checked_before_shape(self):
        """A foreign fingerprint should be reported even if the shape is also wrong."""
        with pytest.raises(FingerprintMismatchError) as exc_info:
            CursorState.from_payload("other_1_2", expected_fingerprint=FP)

        assert exc_info.value.expected == FP
        assert exc_info.value.actual == "other"

    def test_fingerprint_mismatch_message(self):
        """Fingerprint mismatches should explain the filter cannot change."""
        with pytest.raises(FingerprintMismatchError, match="Can't modify search filter"):
            CursorState.from_payload("other_1", expected_fingerprint=FP)

    @pytest.mark.parametrize("payload_parts", [1, 3, 5])
    def test_unexpected_part_count(self, payload_parts):
        """Payloads with neither 2 nor 4 parts should be malformed."""
        payload = "_".join([FP] + ["x"] * (payload_parts - 1))

        with pytest.raises(MalformedTokenError, match=f"but got {payload_parts}") as exc_info:
            CursorState.from_payload(payload, expected_fingerprint=FP)

        assert exc_info.value.parts == payload_parts
