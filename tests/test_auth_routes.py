from yoda_events.main import app
from yoda_events.models.log import Log
from yoda_events.models.users import User
from yoda_events.utils.hashing import EncoderFactory, get_encoder_factory
from yoda_events.utils.user_listener import get_password_listener


def _register_payload(**overrides):
    payload = {
        "username": "Leia",
        "email": "leia@rebellion.org",
        "plain_password": {"first": "P3ssword", "second": "P3ssword"},
    }
    payload.update(overrides)
    return payload


def test_register_hashes_password_and_allows_login(client, db):
    response = client.post("/register", json=_register_payload())

    assert response.status_code == 201
    data = response.json()
    assert data["user"]["username"] == "Leia"
    assert data["user"]["roles"] == ["ROLE_USER"]
    assert data["message"] == "Welcome to the Death Star! Have a magical day!"
    assert data["access_token"]

    user = db.query(User).filter(User.username == "Leia").one()
    assert user.password != "P3ssword"
    assert get_encoder_factory().get_encoder(user).is_password_valid(user.password, "P3ssword", None)

    login = client.post("/login", json={"username": "Leia", "password": "P3ssword"})
    assert login.status_code == 200
    assert login.json()["token_type"] == "bearer"


def test_register_token_identifies_user(client):
    token = client.post("/register", json=_register_payload()).json()["access_token"]

    me = client.get("/me", headers={"Authorization": f"Bearer {token}"})

    assert me.status_code == 200
    assert me.json()["email"] == "leia@rebellion.org"


def test_register_rejects_mismatched_passwords(client):
    response = client.post(
        "/register",
        json=_register_payload(plain_password={"first": "P3ssword", "second": "Password"}),
    )

    assert response.status_code == 422
    assert "must match" in response.text


def test_register_rejects_invalid_email(client):
    response = client.post("/register", json=_register_payload(email="not-an-email"))

    assert response.status_code == 422
    locs = [err["loc"] for err in response.json()["detail"]]
    assert ["body", "email"] in locs


def test_register_reports_taken_fields(client, darth):
    response = client.post(
        "/register",
        json=_register_payload(username="darth", email="DARTH@deathstar.com"),
    )

    assert response.status_code == 400
    detail = response.json()["detail"]
    assert set(detail) == {"username", "email"}


def test_login_with_email(client, darth):
    response = client.post("/login", json={"username": "darth@deathstar.com", "password": "darthpass"})

    assert response.status_code == 200


def test_login_wrong_password(client, db, darth):
    response = client.post("/login", json={"username": "darth", "password": "nope"})

    assert response.status_code == 401
    failed = db.query(Log).filter(Log.action == "LOGIN", Log.status == "FAIL").count()
    assert failed == 1


def test_login_unknown_user(client):
    response = client.post("/login", json={"username": "jarjar", "password": "mesa"})

    assert response.status_code == 401


def test_me_requires_token(client):
    assert client.get("/me").status_code == 401
    assert client.get("/me", headers={"Authorization": "Bearer garbage"}).status_code == 401


def test_login_rehashes_outdated_hash(client, db, darth, monkeypatch):
    old_hash = darth.password
    stronger = EncoderFactory({"User": "argon2"}, time_cost=2, memory_cost=1024)
    assert stronger.get_encoder(darth).needs_rehash(old_hash)

    app.dependency_overrides[get_encoder_factory] = lambda: stronger
    monkeypatch.setattr(get_password_listener(), "encoder_factory", stronger)

    response = client.post("/login", json={"username": "darth", "password": "darthpass"})

    assert response.status_code == 200
    db.expire_all()
    user = db.query(User).filter(User.username == "darth").one()
    encoder = stronger.get_encoder(user)
    assert user.password != old_hash
    assert not encoder.needs_rehash(user.password)
    assert encoder.is_password_valid(user.password, "darthpass", None)
