import pytest

from renttracker import create_app
from renttracker.accounts import register
from renttracker.config import TestingConfig
from renttracker.extensions import db


@pytest.fixture
def app():
    app = create_app(TestingConfig)
    with app.app_context():
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def alice(app):
    return register("alice", "alice-pw")


@pytest.fixture
def bob(app):
    return register("bob", "bob-pw")


def signup(client, username, password):
    return client.post("/signup", data={"username": username, "password": password})


def login(client, username, password, address="127.0.0.1"):
    return client.post(
        "/login",
        data={"username": username, "password": password},
        environ_base={"REMOTE_ADDR": address},
    )


SAMPLE_SMS = "received Ksh1,500.00 from John Doe 0712345678 on 05/06/24"
