import pytest
from swarmhub import create_app
from swarmhub.config import Config


@pytest.fixture()
def app():
    return create_app(Config({}), testing=True)


@pytest.fixture()
def client(app):
    return app.test_client()
