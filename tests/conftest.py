import pytest

from giftraffle import create_app
from giftraffle.extensions import db
from giftraffle.models import User
from giftraffle.services.raffles import RaffleService


@pytest.fixture
def app():
    app = create_app({
        "TESTING": True,
        "SQLALCHEMY_DATABASE_URI": "sqlite:///:memory:",
        "WTF_CSRF_ENABLED": False,
        "SECRET_KEY": "test-secret",
    })
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def make_user(app):
    def _make(name: str) -> User:
        user = User(name=name, passkey_hash="not-a-real-hash")
        db.session.add(user)
        db.session.commit()
        return user
    return _make


@pytest.fixture
def alice(make_user):
    return make_user("alice")


@pytest.fixture
def bob(make_user):
    return make_user("bob")


@pytest.fixture
def carol(make_user):
    return make_user("carol")


@pytest.fixture
def service(app):
    return RaffleService()
