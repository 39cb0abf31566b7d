import pytest

from yoda_events.models.users import User
from yoda_events.utils.hashing import (
    Argon2PasswordEncoder,
    EncoderFactory,
    EncoderNotFoundError,
)


@pytest.fixture
def encoder():
    return Argon2PasswordEncoder(time_cost=1, memory_cost=1024)


def test_encoded_password_verifies(encoder):
    encoded = encoder.encode_password("P3ssword", None)

    assert encoded != "P3ssword"
    assert encoded.startswith("$argon2")
    assert encoder.is_password_valid(encoded, "P3ssword", None)
    assert not encoder.is_password_valid(encoded, "wrong", None)


def test_random_salt_per_hash(encoder):
    assert encoder.encode_password("darthpass") != encoder.encode_password("darthpass")


def test_explicit_salt_is_deterministic(encoder):
    first = encoder.encode_password("darthpass", "deathstar-salt")
    second = encoder.encode_password("darthpass", "deathstar-salt")
    other = encoder.encode_password("darthpass", "endor-salt-123")

    assert first == second
    assert first != other


def test_garbage_hash_is_not_valid(encoder):
    assert not encoder.is_password_valid("not-a-hash", "darthpass", None)
    assert not encoder.is_password_valid("", "darthpass", None)


def test_needs_rehash_when_cost_changes(encoder):
    encoded = encoder.encode_password("darthpass")
    stronger = Argon2PasswordEncoder(time_cost=2, memory_cost=1024)

    assert not encoder.needs_rehash(encoded)
    assert stronger.needs_rehash(encoded)


def test_factory_returns_cached_encoder():
    factory = EncoderFactory({"User": "argon2"}, time_cost=1, memory_cost=1024)
    user = User(username="darth")

    encoder = factory.get_encoder(user)

    assert isinstance(encoder, Argon2PasswordEncoder)
    assert factory.get_encoder(user) is encoder


def test_factory_fails_for_unconfigured_account():
    factory = EncoderFactory({})

    with pytest.raises(EncoderNotFoundError, match='account "User"'):
        factory.get_encoder(User(username="darth"))


def test_factory_fails_for_unknown_algorithm():
    factory = EncoderFactory({"User": "md5"})

    with pytest.raises(EncoderNotFoundError, match="md5"):
        factory.get_encoder(User(username="darth"))


def test_short_explicit_salt_is_rejected(encoder):
    with pytest.raises(ValueError, match="at least 8 bytes"):
        encoder.encode_password("darthpass", "abc")
