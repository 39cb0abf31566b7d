import pytest

from yoda_events.models.users import User
from yoda_events.utils.hashing import EncoderFactory, EncoderNotFoundError, get_encoder_factory
from yoda_events.utils.user_listener import UserPasswordListener, get_password_listener


def _verifies(user, raw):
    encoder = get_encoder_factory().get_encoder(user)
    return encoder.is_password_valid(user.password, raw, user.get_salt())


def test_insert_hashes_plain_password(db):
    user = User(username="Leia", email="leia@rebellion.org", plain_password="P3ssword")
    db.add(user)
    db.commit()

    assert user.password != "P3ssword"
    assert _verifies(user, "P3ssword")
    assert user.plain_password is None


def test_update_without_plain_password_keeps_hash(db, darth):
    original = darth.password

    darth.email = "vader@deathstar.com"
    db.commit()

    assert darth.password == original
    assert _verifies(darth, "darthpass")


def test_empty_plain_password_is_ignored(db, darth):
    original = darth.password

    darth.plain_password = ""
    db.commit()

    assert darth.password == original


def test_update_with_plain_password_rehashes(db, wayne):
    wayne.plain_password = "newpass"
    db.commit()
    db.expire_all()

    reloaded = db.query(User).filter(User.username == "wayne").one()
    assert _verifies(reloaded, "newpass")
    assert not _verifies(reloaded, "waynepass")


def test_hash_computed_once_per_change(db, mocker):
    factory = get_encoder_factory()
    spy = mocker.spy(factory.get_encoder(User()), "encode_password")

    user = User(username="han", email="han@falcon.org", plain_password="kessel12")
    db.add(user)
    db.commit()
    user.email = "solo@falcon.org"
    db.commit()

    assert spy.call_count == 1


def test_missing_encoder_aborts_flush(db, monkeypatch):
    monkeypatch.setattr(get_password_listener(), "encoder_factory", EncoderFactory({}))

    db.add(User(username="jarjar", email="jarjar@naboo.org", plain_password="mesa"))
    with pytest.raises(EncoderNotFoundError):
        db.commit()
    db.rollback()

    assert db.query(User).filter(User.username == "jarjar").first() is None


def test_handle_user_leaves_password_untouched_on_failure():
    listener = UserPasswordListener(EncoderFactory({}))
    user = User(username="jarjar", email="jarjar@naboo.org")
    user.password = "existing-hash"
    user._plain_password = "mesa"

    with pytest.raises(EncoderNotFoundError):
        listener.handle_user(user)
    assert user.password == "existing-hash"


def test_register_is_idempotent(db):
    listener = get_password_listener()
    listener.register()
    listener.register()

    user = User(username="luke", email="luke@tatooine.org", plain_password="t0sche")
    db.add(user)
    db.commit()

    assert _verifies(user, "t0sche")


def test_pending_password_change_keeps_hash_until_flush(db, darth):
    original = darth.password

    darth.plain_password = "n3wdarthpass"

    assert darth.password == original
    assert darth in db.dirty
    assert _verifies(darth, "darthpass")

    db.commit()

    assert darth.password != original
    assert _verifies(darth, "n3wdarthpass")
