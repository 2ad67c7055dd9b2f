"""Tests for idempotency key validation."""

import pytest
from hypothesis import given
from hypothesis import strategies as st

from backend.newsletter.errors import ErrorKind, InvalidIdempotencyKeyError
from backend.newsletter.idempotency import IdempotencyKey
from backend.newsletter.idempotency.key import MAX_KEY_LENGTH, MIN_KEY_LENGTH


class TestIdempotencyKeyParse:
    @pytest.mark.parametrize("length", [MIN_KEY_LENGTH, 25, MAX_KEY_LENGTH])
    def test_accepts_lengths_within_bounds(self, length):
        key = IdempotencyKey.parse("k" * length)
        assert key.value == "k" * length

    @pytest.mark.parametrize("length", [1, MIN_KEY_LENGTH - 1])
    def test_rejects_short_keys(self, length):
        with pytest.raises(InvalidIdempotencyKeyError, match="at least 10"):
            IdempotencyKey.parse("k" * length)

    def test_rejects_long_keys(self):
        with pytest.raises(InvalidIdempotencyKeyError, match="at most 50"):
            IdempotencyKey.parse("k" * (MAX_KEY_LENGTH + 1))

    @pytest.mark.parametrize("value", ["", "   ", " " * 20, "\t\n" * 8])
    def test_rejects_blank_keys(self, value):
        with pytest.raises(InvalidIdempotencyKeyError, match="blank"):
            IdempotencyKey.parse(value)

    def test_value_is_kept_verbatim(self):
        key = IdempotencyKey.parse("  padded-key-1  ")
        assert key.value == "  padded-key-1  "
        assert str(key) == "  padded-key-1  "

    def test_rejection_is_a_validation_error(self):
        with pytest.raises(InvalidIdempotencyKeyError) as exc_info:
            IdempotencyKey.parse("short")
        assert exc_info.value.kind is ErrorKind.VALIDATION
        assert exc_info.value.status_code == 400

    @given(
        st.text(min_size=MIN_KEY_LENGTH, max_size=MAX_KEY_LENGTH).filter(
            lambda s: s.strip()
        )
    )
    def test_any_non_blank_key_in_range_is_accepted(self, value):
        assert IdempotencyKey.parse(value).value == value

    @given(st.text(min_size=MAX_KEY_LENGTH + 1, max_size=200))
    def test_any_overlong_key_is_rejected(self, value):
        with pytest.raises(InvalidIdempotencyKeyError):
            IdempotencyKey.parse(value)
