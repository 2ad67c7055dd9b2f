"""Tests for subscriber name and email validation."""

import pytest
from hypothesis import given
from hypothesis import strategies as st

from backend.newsletter.domain import NewSubscriber, SubscriberEmail, SubscriberName
from backend.newsletter.domain.subscriber_name import (
    FORBIDDEN_CHARACTERS,
    MAX_NAME_LENGTH,
)
from backend.newsletter.errors import ErrorKind, SubscriberValidationError


class TestSubscriberEmail:
    @pytest.mark.parametrize(
        "value", ["ursula@example.com", "a@x.com", "first.last+tag@sub.example.org"]
    )
    def test_valid_addresses(self, value):
        assert SubscriberEmail.parse(value).value == value

    @pytest.mark.parametrize(
        "value,reason",
        [
            ("", "empty"),
            ("   ", "empty"),
            ("ursuladomain.com", "missing @"),
            ("ursula@", "missing domain"),
            ("@domain.com", "missing subject"),
        ],
    )
    def test_structural_rejections(self, value, reason):
        with pytest.raises(SubscriberValidationError, match=reason):
            SubscriberEmail.parse(value)

    @pytest.mark.parametrize("value", ["ursula@@domain.com", "ur sula@domain.com", "ursula@dom ain.com"])
    def test_malformed_addresses(self, value):
        with pytest.raises(SubscriberValidationError, match="format is incorrect"):
            SubscriberEmail.parse(value)

    def test_str_is_the_address(self):
        assert str(SubscriberEmail.parse("a@x.com")) == "a@x.com"


class TestSubscriberName:
    def test_a_name_at_the_limit_is_valid(self):
        name = "ё" * MAX_NAME_LENGTH
        assert SubscriberName.parse(name).value == name

    def test_a_name_longer_than_the_limit_is_rejected(self):
        with pytest.raises(SubscriberValidationError, match="too long"):
            SubscriberName.parse("a" * (MAX_NAME_LENGTH + 1))

    @pytest.mark.parametrize("value", ["", " ", "\t  \n"])
    def test_blank_names_are_rejected(self, value):
        with pytest.raises(SubscriberValidationError, match="empty"):
            SubscriberName.parse(value)

    @pytest.mark.parametrize("char", sorted(FORBIDDEN_CHARACTERS))
    def test_names_with_forbidden_characters_are_rejected(self, char):
        with pytest.raises(SubscriberValidationError, match="illegal character"):
            SubscriberName.parse(f"Ursula{char}Le Guin")

    @given(
        st.text(
            alphabet=st.characters(
                exclude_characters="".join(FORBIDDEN_CHARACTERS),
                exclude_categories=("Cs",),
            ),
            min_size=1,
            max_size=MAX_NAME_LENGTH,
        ).filter(lambda s: s.strip())
    )
    def test_reasonable_names_are_accepted(self, value):
        assert SubscriberName.parse(value).value == value


class TestNewSubscriber:
    def test_parse_wraps_both_fields(self):
        subscriber = NewSubscriber.parse("ursula@example.com", "Ursula Le Guin")
        assert subscriber.email.value == "ursula@example.com"
        assert subscriber.name.value == "Ursula Le Guin"

    def test_invalid_field_is_a_validation_error(self):
        with pytest.raises(SubscriberValidationError) as exc_info:
            NewSubscriber.parse("not-an-email", "Ursula")
        assert exc_info.value.kind is ErrorKind.VALIDATION
